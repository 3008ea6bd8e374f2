"""Byte-stream readers that turn uploaded statements into raw rows.

Two formats are supported: delimited text (``.csv``/``.txt``) and Excel
workbooks (``.xlsx``/``.xlsm``). Both yield ordered ``header -> value`` mappings
with the first row as the header; interpretation of the values is left to the
column detector.
"""

from __future__ import annotations

import csv
from datetime import date, datetime, time
from io import BytesIO, StringIO
from pathlib import PurePath
from typing import Any
from zipfile import BadZipFile

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from ..errors import StructuralError
from ..logging_setup import get_logger
from ..models import RawRow

logger = get_logger(__name__)

CSV_SUFFIXES = frozenset({".csv", ".txt"})
XLSX_SUFFIXES = frozenset({".xlsx", ".xlsm"})
_DELIMITERS = ",;\t|"


def _decode(data: bytes, filename: str) -> str:
    try:
        # utf-8-sig drops the BOM Excel writes in front of exported CSVs
        return data.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise StructuralError(f"{filename}: file is not valid UTF-8 text") from exc


def _sniff_dialect(sample: str) -> type[csv.Dialect] | csv.Dialect:
    try:
        return csv.Sniffer().sniff(sample, delimiters=_DELIMITERS)
    except csv.Error:
        # Single-column files and other ambiguous samples
        return csv.excel


def read_csv_rows(text: str, *, filename: str = "<csv>") -> list[RawRow]:
    """Parse delimited text into rows keyed by the header line.

    Blank lines are skipped; surplus cells beyond the header are dropped and
    missing trailing cells read as ``""``.
    """

    if not text.strip():
        raise StructuralError(f"{filename}: file is empty")

    dialect = _sniff_dialect(text[:8192])
    with StringIO(text) as f:
        reader = csv.DictReader(f, dialect=dialect)
        headers = [h for h in (reader.fieldnames or []) if h and h.strip()]
        if not headers:
            raise StructuralError(f"{filename}: no header row")
        rows: list[RawRow] = []
        try:
            for row in reader:
                # DictReader aggregates extra cells under a None key.
                normalized = {k: (v if v is not None else "") for k, v in row.items() if k is not None}
                if all(str(v).strip() == "" for v in normalized.values()):
                    continue
                rows.append(normalized)
        except csv.Error as exc:
            raise StructuralError(f"{filename}: malformed CSV ({exc})") from exc
    return rows


def _cell_value(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M:%S")
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, time):
        return value.isoformat()
    if isinstance(value, str):
        return value.strip()
    return value


def read_xlsx_rows(data: bytes, *, filename: str = "<xlsx>") -> list[RawRow]:
    """Read the first worksheet of an ``.xlsx`` workbook.

    Cells keep their native types (numbers stay numbers so date serials and
    amounts survive); ``datetime`` cells become ``YYYY-MM-DD HH:MM:SS`` strings.
    """

    try:
        wb = load_workbook(BytesIO(data), read_only=True, data_only=True)
    except (BadZipFile, InvalidFileException, KeyError, OSError) as exc:
        raise StructuralError(f"{filename}: not a readable .xlsx workbook") from exc

    try:
        if len(wb.sheetnames) > 1:
            logger.info("%s: %d sheets; reading only %r", filename, len(wb.sheetnames), wb.sheetnames[0])
        ws = wb[wb.sheetnames[0]]
        it = ws.iter_rows(values_only=True)
        header_cells = next(it, None)
        if header_cells is None:
            raise StructuralError(f"{filename}: workbook is empty")
        headers = [str(h).strip() if h is not None else "" for h in header_cells]
        if not any(headers):
            raise StructuralError(f"{filename}: no header row")

        rows: list[RawRow] = []
        for values in it:
            row: dict[str, Any] = {}
            for header, value in zip(headers, values):
                if not header:
                    continue
                row[header] = _cell_value(value)
            if all(v is None or (isinstance(v, str) and v == "") for v in row.values()):
                continue
            rows.append(row)
        return rows
    finally:
        wb.close()


def read_rows(data: bytes, filename: str) -> list[RawRow]:
    """Dispatch on the file extension and return the raw rows of ``data``."""

    if not data:
        raise StructuralError(f"{filename}: file is empty")
    suffix = PurePath(filename).suffix.lower()
    if suffix in CSV_SUFFIXES:
        rows = read_csv_rows(_decode(data, filename), filename=filename)
    elif suffix in XLSX_SUFFIXES:
        rows = read_xlsx_rows(data, filename=filename)
    else:
        raise StructuralError(f"{filename}: unsupported file type {suffix or '(none)'!r}; use CSV or XLSX")
    logger.debug("%s: read %d rows", filename, len(rows))
    return rows


__all__ = ["read_rows", "read_csv_rows", "read_xlsx_rows", "CSV_SUFFIXES", "XLSX_SUFFIXES"]
