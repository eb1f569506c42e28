"""Error types raised by the funnel core.

Hierarchy:
    FunnelError
    └── ParseError
"""

from __future__ import annotations

from typing import Optional


class FunnelError(Exception):
    """Base exception for all funnel errors."""

    def __init__(self, message: str, code: str = "UNKNOWN", details: Optional[dict] = None):
        self.code = code
        self.details = details or {}
        super().__init__(message)


class ParseError(FunnelError, ValueError):
    """The dataset could not be loaded: bad header or a non-numeric cell.

    ``row`` is the 0-based data row index and ``field`` the CSV column name;
    both are None for header problems.
    """

    def __init__(self, message: str, *, row: Optional[int] = None, field: Optional[str] = None):
        self.row = row
        self.field = field
        super().__init__(message, code="PARSE_ERROR", details={"row": row, "field": field})
