"""
Order sheet parsers.

Turn uploaded CSV/Excel bytes into candidate (sku, quantity) rows.
"""

from parsers.order_sheet_parser import (
    decode_order_file,
    parse_candidate_rows,
    parse_order_file,
)

__all__ = [
    "decode_order_file",
    "parse_candidate_rows",
    "parse_order_file",
]
