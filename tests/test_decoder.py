"""Test page body decoding."""

import orjson
import pytest
from pydantic import ValidationError

from apps.harvester.decoder import decode_page
from utils.errors import PageDecodeError, TransportError
from utils.schemas import PageResponse


def _decode(body):
    return decode_page(orjson.dumps(body))


class TestRecords:
    """Test extraction of the record batch."""

    def test_records_from_data_field(self):
        page = _decode({"data": [{"id": 1}, {"id": 2}]})
        assert page.records == [{"id": 1}, {"id": 2}]

    def test_missing_data_is_empty_batch(self):
        page = _decode({"meta": {}})
        assert page.records == []

    def test_null_data_is_empty_batch(self):
        page = _decode({"data": None})
        assert page.records == []

    def test_non_list_data_is_empty_batch(self):
        page = _decode({"data": {"id": 1}})
        assert page.records == []

    def test_accepts_text_body(self):
        page = decode_page('{"data": [{"id": 7}]}')
        assert page.records == [{"id": 7}]


class TestCursorPrecedence:
    """Test where the continuation token is read from."""

    def test_root_cursor(self):
        assert _decode({"data": [], "cursor": "abc"}).next_cursor == "abc"

    def test_meta_cursor(self):
        assert _decode({"data": [], "meta": {"cursor": "xyz"}}).next_cursor == "xyz"

    def test_root_cursor_wins_over_meta(self):
        page = _decode({"data": [], "cursor": "root", "meta": {"cursor": "nested"}})
        assert page.next_cursor == "root"

    def test_empty_root_cursor_falls_back_to_meta(self):
        page = _decode({"data": [], "cursor": "", "meta": {"cursor": "nested"}})
        assert page.next_cursor == "nested"

    def test_null_root_cursor_falls_back_to_meta(self):
        page = _decode({"data": [], "cursor": None, "meta": {"cursor": "nested"}})
        assert page.next_cursor == "nested"

    def test_no_cursor_anywhere(self):
        assert _decode({"data": [], "meta": {"total": 5}}).next_cursor is None

    def test_non_dict_meta_is_ignored(self):
        assert _decode({"data": [], "meta": "nope"}).next_cursor is None


class TestMoreAvailable:
    """Test the advisory has_more flag."""

    def test_true(self):
        assert _decode({"data": [], "has_more": True}).more_available is True

    def test_false(self):
        assert _decode({"data": [], "has_more": False}).more_available is False

    def test_absent_is_unset(self):
        assert _decode({"data": []}).more_available is None

    def test_non_boolean_is_unset(self):
        assert _decode({"data": [], "has_more": "yes"}).more_available is None


class TestMalformedBodies:
    """Test bodies that cannot be decoded."""

    def test_invalid_json_raises(self):
        with pytest.raises(PageDecodeError, match="not valid JSON"):
            decode_page(b"<html>Bad Gateway</html>")

    def test_non_object_root_raises(self):
        with pytest.raises(PageDecodeError, match="JSON object"):
            decode_page(b"[1, 2, 3]")

    def test_decode_error_is_a_transport_error(self):
        with pytest.raises(TransportError):
            decode_page(b"")


class TestPageResponseModel:
    """Test PageResponse validation."""

    def test_empty_cursor_rejected(self):
        with pytest.raises(ValidationError):
            PageResponse(records=[], next_cursor="")

    def test_defaults(self):
        page = PageResponse()
        assert page.records == []
        assert page.next_cursor is None
        assert page.more_available is None
