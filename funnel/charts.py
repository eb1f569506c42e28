from __future__ import annotations

from typing import Any, Dict, List, Sequence

import altair as alt
import pandas as pd

alt.data_transformers.disable_max_rows()

REVENUE_COLOR = "#2563eb"
DEALS_COLOR = "#0f766e"
INSTALLS_COLOR = "#d97706"


def to_vega_spec(chart: alt.TopLevelMixin) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def _frame(rows: Sequence[Dict[str, Any]], columns: List[str]) -> pd.DataFrame:
    return pd.DataFrame(list(rows), columns=columns)


def _paired_bars(df: pd.DataFrame, x: str, x_title: str, left: tuple, right: tuple) -> alt.LayerChart:
    """Two measures per category as side-by-side bars, each on its own y axis."""
    left_col, left_title, left_color, left_format = left
    right_col, right_title, right_color, right_format = right
    base = alt.Chart(df).encode(x=alt.X(f"{x}:N", title=x_title, sort=None, axis=alt.Axis(grid=False, labelAngle=-30)))
    left_bar = base.mark_bar(size=14, xOffset=-8, color=left_color).encode(
        y=alt.Y(f"{left_col}:Q", title=left_title, axis=alt.Axis(format=left_format, gridDash=[3, 3], orient="left")),
        tooltip=[alt.Tooltip(f"{x}:N", title=x_title), alt.Tooltip(f"{left_col}:Q", title=left_title, format=left_format)],
    )
    right_bar = base.mark_bar(size=14, xOffset=8, color=right_color).encode(
        y=alt.Y(f"{right_col}:Q", title=right_title, axis=alt.Axis(format=right_format, grid=False, orient="right")),
        tooltip=[alt.Tooltip(f"{x}:N", title=x_title), alt.Tooltip(f"{right_col}:Q", title=right_title, format=right_format)],
    )
    return alt.layer(left_bar, right_bar).resolve_scale(y="independent").properties(height=400)


def monthly_sales_chart(month_rows: Sequence[Dict[str, Any]]) -> alt.LayerChart:
    df = _frame(month_rows, ["month", "revenue", "deals"])
    base = alt.Chart(df).encode(x=alt.X("month:O", title="Month", sort=None, axis=alt.Axis(grid=False)))
    revenue = base.mark_line(point={"filled": True, "size": 60}, color=REVENUE_COLOR).encode(
        y=alt.Y("revenue:Q", title="Revenue", axis=alt.Axis(format="$~s", gridDash=[3, 3], orient="left")),
        tooltip=["month", alt.Tooltip("revenue:Q", title="Revenue", format="$,.0f")],
    )
    deals = base.mark_line(point={"filled": True, "size": 60}, color=DEALS_COLOR).encode(
        y=alt.Y("deals:Q", title="Deals", axis=alt.Axis(format="~s", grid=False, orient="right")),
        tooltip=["month", alt.Tooltip("deals:Q", title="Deals", format=",")],
    )
    return alt.layer(revenue, deals).resolve_scale(y="independent").properties(height=400)


def rep_sales_chart(rep_rows: Sequence[Dict[str, Any]]) -> alt.LayerChart:
    df = _frame(rep_rows, ["rep", "revenue", "deals", "installs"])
    return _paired_bars(
        df,
        "rep",
        "Representative",
        ("revenue", "Revenue", REVENUE_COLOR, "$~s"),
        ("deals", "Deals", DEALS_COLOR, "~s"),
    )


def team_performance_chart(team_rows: Sequence[Dict[str, Any]]) -> alt.LayerChart:
    df = _frame(team_rows, ["team", "revenue", "deals", "installs"])
    return _paired_bars(
        df,
        "team",
        "Team",
        ("revenue", "Revenue", REVENUE_COLOR, "$~s"),
        ("installs", "Installs", INSTALLS_COLOR, "~s"),
    )
