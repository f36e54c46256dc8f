"""Test the append-only record store."""

from apps.harvester.accumulator import Accumulator


class TestAccumulator:
    """Test ordering and snapshot behaviour."""

    def test_starts_empty(self):
        acc = Accumulator()
        assert len(acc) == 0
        assert acc.snapshot() == ()

    def test_append_preserves_order_across_batches(self):
        acc = Accumulator()
        acc.append([{"id": 1}, {"id": 2}])
        acc.append([{"id": 3}])
        assert [r["id"] for r in acc.snapshot()] == [1, 2, 3]

    def test_duplicates_are_kept(self):
        acc = Accumulator()
        acc.append([{"id": 1}])
        acc.append([{"id": 1}])
        assert len(acc) == 2

    def test_empty_batch(self):
        acc = Accumulator()
        acc.append([])
        assert len(acc) == 0

    def test_snapshot_is_unaffected_by_later_appends(self):
        acc = Accumulator()
        acc.append([{"id": 1}])
        snapshot = acc.snapshot()
        acc.append([{"id": 2}])
        assert len(snapshot) == 1
        assert len(acc.snapshot()) == 2

    def test_snapshot_is_read_only(self):
        acc = Accumulator()
        acc.append([{"id": 1}])
        assert isinstance(acc.snapshot(), tuple)
