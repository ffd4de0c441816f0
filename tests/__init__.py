"""
Test suite for Bulk Order Import.

Run all tests: pytest
Run with coverage: pytest --cov=. --cov-report=html
Run unit tests only: pytest tests/unit/
Run specific file: pytest tests/unit/test_order_sheet_parser.py -v
"""
