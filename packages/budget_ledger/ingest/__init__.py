"""Statement ingestion: readers, column detection, normalization, row parsing."""

from .amounts import normalize_amount, parse_amount
from .columns import DEFAULT_HEADER_TABLES, DetectedColumns, HeaderTables, detect_columns, load_header_tables
from .dates import normalize_date, parse_date
from .readers import read_rows
from .rows import ParseOptions, ParseOutcome, parse_file, parse_row, parse_rows

__all__ = [
    "DEFAULT_HEADER_TABLES",
    "DetectedColumns",
    "HeaderTables",
    "ParseOptions",
    "ParseOutcome",
    "detect_columns",
    "load_header_tables",
    "normalize_amount",
    "normalize_date",
    "parse_amount",
    "parse_date",
    "parse_file",
    "parse_row",
    "parse_rows",
    "read_rows",
]
