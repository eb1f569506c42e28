"""Display strings for KPI tiles and tables.

Degenerate metrics (None) render as an em dash rather than "0%" or "NaN".
Halves round away from zero, matching the browser's Intl.NumberFormat.
"""

from __future__ import annotations

from typing import Iterable, Optional

import pandas as pd

from funnel.metrics import round_half_up

DEGENERATE_DISPLAY = "—"


def _missing(value: object) -> bool:
    return value is None or pd.isna(value)


def format_currency_0(value: object) -> str:
    if _missing(value):
        return DEGENERATE_DISPLAY
    return f"${round_half_up(float(value)):,.0f}"


def format_percent_int(value: Optional[float]) -> str:
    if _missing(value):
        return DEGENERATE_DISPLAY
    return f"{round_half_up(float(value)):.0f}%"


def format_count(value: object) -> str:
    if _missing(value):
        return DEGENERATE_DISPLAY
    return f"{round_half_up(float(value)):,.0f}"


def format_currency_columns(df: pd.DataFrame, cols: Iterable[str], decimals: int = 0) -> pd.DataFrame:
    formatted = df.copy()
    for c in cols:
        if c in formatted.columns:
            formatted[c] = formatted[c].apply(
                lambda v: f"${round_half_up(float(v), decimals):,.{decimals}f}" if pd.notna(v) else ""
            )
    return formatted
