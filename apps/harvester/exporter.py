"""
Workbook Exporter

Writes harvested records to a single-sheet .xlsx file.

The column set is the union of every key seen across all records, in
first-seen order, since the schema is not guaranteed to be uniform across
pages. Missing cells are left blank, nested values are written as JSON text
and control characters Excel cannot store are stripped from text.

Output:
- {output_dir}/{filename_prefix}_{stamp}.xlsx
"""

import logging
import re
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence

import orjson
from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.utils.exceptions import IllegalCharacterError

from utils.errors import ExportError
from utils.schemas import ExportResult

logger = logging.getLogger(__name__)

SHEET_TITLE_MAX_LENGTH = 31
_INVALID_SHEET_CHARS = re.compile(r"[\[\]:*?/\\]")


def export_records(
    records: Sequence[Mapping[str, Any]],
    dataset_label: str,
    filename_prefix: str,
    *,
    output_dir: str = ".",
    stamp: str,
) -> Optional[ExportResult]:
    """
    Write records to a one-sheet workbook.

    Args:
        records: Records in harvest order
        dataset_label: Sheet title
        filename_prefix: Leading part of the file name
        output_dir: Directory to write into (created if needed)
        stamp: Timestamp or epoch appended to the file name

    Returns:
        ExportResult, or None when there was nothing to write

    Raises:
        ExportError: If the records cannot be serialized or the file cannot be written
    """
    if not records:
        logger.info("No data to export", extra={"dataset_label": dataset_label})
        return None

    path = Path(output_dir) / f"{filename_prefix}_{stamp}.xlsx"
    columns = collect_columns(records)

    logger.info(
        "Generating Excel file...",
        extra={"path": str(path), "records": len(records), "columns": len(columns)},
    )

    try:
        path.parent.mkdir(parents=True, exist_ok=True)

        workbook = Workbook(write_only=True)
        sheet = workbook.create_sheet(title=sheet_title(dataset_label))
        sheet.append([_clean_text(column) for column in columns])
        for record in records:
            sheet.append([_cell_value(record.get(column)) for column in columns])

        workbook.save(path)

    except (OSError, ValueError, TypeError, IllegalCharacterError, orjson.JSONEncodeError) as e:
        logger.error(
            "Export failed",
            extra={"path": str(path), "error": str(e)},
            exc_info=True,
        )
        raise ExportError(f"Failed to write {path}: {e}") from e

    logger.info(
        "File saved as: %s",
        path,
        extra={"path": str(path), "records": len(records)},
    )

    return ExportResult(filename=str(path), record_count=len(records))


def collect_columns(records: Sequence[Mapping[str, Any]]) -> list[str]:
    """Union of record keys in first-seen order."""
    columns: dict[str, None] = {}
    for index, record in enumerate(records):
        if not isinstance(record, Mapping):
            raise ExportError(
                f"Record {index} is a {type(record).__name__}, expected an object"
            )
        for key in record:
            columns.setdefault(str(key), None)
    return list(columns)


def sheet_title(label: str) -> str:
    """Make ``label`` a legal Excel sheet title."""
    title = _INVALID_SHEET_CHARS.sub("_", _clean_text(label)).strip("'")[:SHEET_TITLE_MAX_LENGTH]
    return title or "Sheet"


def _cell_value(value: Any) -> Any:
    if value is None or isinstance(value, (bool, int, float)):
        return value
    if isinstance(value, str):
        return _clean_text(value)
    if isinstance(value, (dict, list)):
        return _clean_text(orjson.dumps(value).decode("utf-8"))
    return _clean_text(str(value))


def _clean_text(text: str) -> str:
    # Control characters other than tab/newline/CR are illegal in worksheets
    return ILLEGAL_CHARACTERS_RE.sub("", text)
