"""Core (UI-agnostic) sales funnel logic.

This package contains:
- data loading (CSV -> SalesRecord)
- filter normalization and facet derivation
- grouped aggregations and summary metrics (JSON-serializable payloads)
- chart helpers (Altair -> Vega-Lite spec dict)
"""

from funnel.aggregations import (
    LossSummary,
    MonthSummary,
    RepSummary,
    TeamSummary,
    aggregate_by_month,
    aggregate_by_rep,
    aggregate_by_team,
    aggregate_lost_opportunities,
)
from funnel.errors import FunnelError, ParseError
from funnel.filters import ALL, FilterSelection, apply_filter, distinct_values, normalize_filters
from funnel.metrics import SummaryMetrics, summary_metrics
from funnel.records import SalesRecord, load_dataset, parse_rows

__all__ = [
    "ALL",
    "FilterSelection",
    "FunnelError",
    "LossSummary",
    "MonthSummary",
    "ParseError",
    "RepSummary",
    "SalesRecord",
    "SummaryMetrics",
    "TeamSummary",
    "aggregate_by_month",
    "aggregate_by_rep",
    "aggregate_by_team",
    "aggregate_lost_opportunities",
    "apply_filter",
    "distinct_values",
    "load_dataset",
    "normalize_filters",
    "parse_rows",
    "summary_metrics",
]
