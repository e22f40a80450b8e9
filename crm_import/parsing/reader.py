from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from crm_import.models.field_schema import CUSTOMER_SCHEMA, FieldSchema
from crm_import.models.row_data import RawRow
from crm_import.models.validation_error import ErrorType, ValidationError

"""CSV record parser.

- First non-blank line is the header; its order drives positional binding.
- Values are split on commas, trimmed, and one layer of surrounding double
  quotes is stripped. Quoted commas are not supported.
- Blank lines are skipped but line numbers stay physical, so a reported row
  number is the row a user sees in a spreadsheet.
- A data line with fewer values than header columns is rejected outright.
"""

__all__ = [
    "CSV_SUFFIX",
    "INVALID_FILE_TYPE_MESSAGE",
    "FileReadError",
    "ParsedLines",
    "read_text",
    "split_line",
    "parse_header",
    "iter_rows",
]

EMPTY_FILE_MESSAGE = "File is empty (missing header row)"
INVALID_FILE_TYPE_MESSAGE = "Please select a valid CSV file"
CSV_SUFFIX = ".csv"


class FileReadError(Exception):
    """Raised when the uploaded file cannot be read as text."""


@dataclass
class ParsedLines:
    columns: list[str]
    ignored_columns: list[str]
    rows: Iterator[RawRow | ValidationError]


def read_text(path: Path, encoding: str = "utf-8-sig") -> str:
    """Read an uploaded file fully into memory.

    Only .csv files are accepted (case-insensitive). utf-8-sig drops the BOM
    spreadsheet tools prepend to exported CSV files.
    """
    if path.suffix.lower() != CSV_SUFFIX:
        raise FileReadError(f"{INVALID_FILE_TYPE_MESSAGE}: {path.name}")
    try:
        return path.read_text(encoding=encoding)
    except (OSError, UnicodeDecodeError) as e:
        raise FileReadError(f"cannot read {path.name}: {e}") from e


def split_line(line: str) -> list[str]:
    values = []
    for token in line.split(","):
        value = token.strip()
        if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
            value = value[1:-1]
        values.append(value)
    return values


def parse_header(line: str, schema: FieldSchema = CUSTOMER_SCHEMA) -> tuple[list[str], list[str]]:
    """Return (columns, ignored): declared header names and those outside the schema."""
    columns = [c.strip() for c in line.split(",")]
    ignored = [c for c in columns if c not in schema]
    return columns, ignored


def _numbered_lines(content: str) -> Iterator[tuple[int, str]]:
    for idx, line in enumerate(content.splitlines(), start=1):
        if line.strip():
            yield idx, line


def _bind(line_no: int, line: str, columns: list[str]) -> RawRow | ValidationError:
    values = split_line(line)
    if len(values) < len(columns):
        return ValidationError(
            row=line_no,
            message=f"Insufficient columns (expected {len(columns)}, got {len(values)})",
            error_type=ErrorType.STRUCTURAL_ROW_ERROR,
        )
    return RawRow(row_number=line_no, values=dict(zip(columns, values)))


def iter_rows(content: str, schema: FieldSchema = CUSTOMER_SCHEMA) -> ParsedLines:
    """Split content into header + lazily bound data rows.

    The returned iterator yields exactly one RawRow or one ValidationError per
    non-blank data line. An input without any non-blank line yields a single
    EMPTY_FILE error on row 1.
    """
    lines = _numbered_lines(content)
    first = next(lines, None)
    if first is None:
        empty = ValidationError(row=1, message=EMPTY_FILE_MESSAGE, error_type=ErrorType.EMPTY_FILE)
        return ParsedLines(columns=[], ignored_columns=[], rows=iter([empty]))

    columns, ignored = parse_header(first[1], schema)
    rows = (_bind(line_no, line, columns) for line_no, line in lines)
    return ParsedLines(columns=columns, ignored_columns=ignored, rows=rows)
