"""
Order sheet parser for bulk order uploads.

Turns an uploaded CSV/Excel file into a grid of cells, then the grid into
candidate rows. The header row must carry a "sku" column and a "quantity"
(or "qty") column; everything else in the file is ignored.
"""

from io import BytesIO, StringIO
from typing import Any, Optional
import csv
import math
import structlog

import pandas as pd

from exceptions import (
    EmptyFileError,
    FileReadError,
    MissingColumnsError,
    NoValidRowsError,
)
from models.bulk_order import CandidateRow

logger = structlog.get_logger(__name__)

SKU_HEADERS = ("sku",)
QUANTITY_HEADERS = ("quantity", "qty")
CSV_EXTENSIONS = (".csv", ".txt")
CSV_ENCODINGS = ("utf-8-sig", "cp1252", "latin-1")


# ===================
# DECODING
# ===================

def decode_order_file(content: bytes, filename: Optional[str] = None) -> list[list[Any]]:
    """
    Decode file bytes into a grid (list of rows of cells).

    CSV files are read as text. Anything else is tried as Excel
    (openpyxl, then xlrd) and finally as CSV. Only the first sheet is read.
    Blank cells become "".

    Raises:
        FileReadError: If no reader accepts the bytes
    """
    name = (filename or "").lower()

    if name.endswith(CSV_EXTENSIONS):
        try:
            return _read_csv_grid(content)
        except Exception as e:
            logger.error("order_file_read_failed", filename=filename, error=str(e))
            raise FileReadError(filename=filename, reason=str(e)) from e

    for engine in ("openpyxl", "xlrd"):
        try:
            df = pd.read_excel(BytesIO(content), header=None, dtype=object, engine=engine)
            logger.debug("order_file_read", filename=filename, engine=engine)
            return _frame_to_grid(df)
        except Exception:
            continue

    try:
        return _read_csv_grid(content)
    except Exception as e:
        logger.error("order_file_read_failed", filename=filename, error=str(e))
        raise FileReadError(filename=filename, reason=str(e)) from e


def _read_csv_grid(content: bytes) -> list[list[Any]]:
    """
    Tokenise CSV bytes into a grid as wide as its widest line.

    Rows with extra trailing cells are kept; short rows are padded with "".
    """
    if not content.strip():
        return []
    if b"\x00" in content:
        raise ValueError("binary content is not CSV text")

    text = _decode_text(content)
    rows = [row for row in csv.reader(StringIO(text)) if any(cell.strip() for cell in row)]
    if not rows:
        return []

    df = pd.DataFrame(rows, dtype=object)
    return _frame_to_grid(df)


def _decode_text(content: bytes) -> str:
    # Excel "Save as CSV" on Windows writes cp1252; latin-1 accepts any byte
    last_error = None
    for encoding in CSV_ENCODINGS:
        try:
            text = content.decode(encoding)
        except UnicodeDecodeError as e:
            last_error = e
            continue
        if encoding != CSV_ENCODINGS[0]:
            logger.debug("order_file_decoded", encoding=encoding)
        return text
    raise last_error


def _frame_to_grid(df: pd.DataFrame) -> list[list[Any]]:
    df = df.dropna(how="all")
    return [
        ["" if _is_blank(v) else v for v in row]
        for row in df.itertuples(index=False, name=None)
    ]


# ===================
# PARSING
# ===================

def parse_candidate_rows(grid: list[list[Any]]) -> list[CandidateRow]:
    """
    Parse a decoded grid into candidate rows.

    Rows with a blank SKU or a quantity that is not a positive finite
    number are skipped. Input order is kept.

    Raises:
        EmptyFileError: Grid has no rows
        MissingColumnsError: Header lacks sku or quantity/qty
        NoValidRowsError: No data row survived
    """
    if not grid:
        raise EmptyFileError()

    header = [_normalize_header(h) for h in grid[0]]
    sku_index = _find_column(header, SKU_HEADERS)
    qty_index = _find_column(header, QUANTITY_HEADERS)

    missing = []
    if sku_index is None:
        missing.append("sku")
    if qty_index is None:
        missing.append("quantity")
    if missing:
        logger.warning("order_sheet_missing_columns", missing=missing, header=header)
        raise MissingColumnsError(missing=missing, header=header)

    data_rows = grid[1:]
    rows: list[CandidateRow] = []

    for row in data_rows:
        sku = _cell_text(_cell(row, sku_index))
        if not sku:
            continue

        quantity = _parse_quantity(_cell(row, qty_index))
        if quantity is None:
            continue

        rows.append(CandidateRow(sku=sku, quantity_requested=quantity))

    logger.info(
        "order_sheet_parsed",
        data_rows=len(data_rows),
        valid_rows=len(rows),
        skipped=len(data_rows) - len(rows),
    )

    if not rows:
        raise NoValidRowsError(rows_read=len(data_rows))

    return rows


def parse_order_file(content: bytes, filename: Optional[str] = None) -> list[CandidateRow]:
    """Decode and parse an uploaded order file."""
    return parse_candidate_rows(decode_order_file(content, filename))


def _normalize_header(value: Any) -> str:
    if _is_blank(value):
        return ""
    return str(value).strip().lower()


def _find_column(header: list[str], names: tuple[str, ...]) -> Optional[int]:
    for i, h in enumerate(header):
        if h in names:
            return i
    return None


def _cell(row: list[Any], index: int) -> Any:
    return row[index] if index < len(row) else ""


def _cell_text(value: Any) -> str:
    if _is_blank(value):
        return ""
    # Excel stores numeric SKUs as floats
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def _parse_quantity(value: Any) -> Optional[float]:
    """Positive finite quantity, or None."""
    if _is_blank(value) or isinstance(value, bool):
        return None
    try:
        quantity = float(str(value).strip())
    except (ValueError, TypeError):
        return None
    if not math.isfinite(quantity) or quantity <= 0:
        return None
    return quantity


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False
