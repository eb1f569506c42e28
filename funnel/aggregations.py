from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Sequence, Tuple

import numpy as np

from funnel.records import SalesRecord, records_to_frame

LOST_TOP_N = 10


@dataclass(frozen=True)
class GroupSpec:
    """One grouped fold: group by ``key_field``, sum each (source, target) pair."""

    key_field: str
    key_name: str
    sums: Tuple[Tuple[str, str], ...]


@dataclass(frozen=True)
class MonthSummary:
    month: str
    revenue: float
    deals: float


@dataclass(frozen=True)
class RepSummary:
    rep: str
    revenue: float
    deals: float
    installs: float


@dataclass(frozen=True)
class TeamSummary:
    team: str
    revenue: float
    deals: float
    installs: float


@dataclass(frozen=True)
class LossSummary:
    rep: str
    lost_deals: float
    lost_revenue: float


BY_MONTH = GroupSpec("report_month", "month", (("closed_revenue", "revenue"), ("closes", "deals")))
BY_REP = GroupSpec("rep", "rep", (("closed_revenue", "revenue"), ("closes", "deals"), ("installs", "installs")))
BY_TEAM = GroupSpec("team", "team", (("closed_revenue", "revenue"), ("closes", "deals"), ("installs", "installs")))
LOST_BY_REP = GroupSpec("rep", "rep", (("lost", "lost_deals"), ("lost_revenue", "lost_revenue")))


def group_sum(records: Iterable[SalesRecord], spec: GroupSpec) -> List[Dict[str, Any]]:
    """Sum ``spec.sums`` per key; rows come out in first-seen key order."""
    df = records_to_frame(records)
    if df.empty:
        return []
    grouped = (
        df.groupby(spec.key_field, sort=False, dropna=False)
        .agg(**{target: (source, "sum") for source, target in spec.sums})
        .reset_index()
        .rename(columns={spec.key_field: spec.key_name})
    )
    return grouped[[spec.key_name] + [target for _, target in spec.sums]].to_dict(orient="records")


def column_totals(records: Iterable[SalesRecord], columns: Sequence[str]) -> Dict[str, float]:
    """Whole-dataset sums through the same grouped path as group_sum, so totals match grouped sums."""
    df = records_to_frame(records)
    if df.empty:
        return {c: 0.0 for c in columns}
    totals = df.groupby(np.zeros(len(df), dtype=int), sort=False).agg(**{c: (c, "sum") for c in columns})
    return {c: float(totals[c].iat[0]) for c in columns}


def aggregate_by_month(records: Iterable[SalesRecord]) -> List[MonthSummary]:
    return [MonthSummary(**row) for row in group_sum(records, BY_MONTH)]


def aggregate_by_rep(records: Iterable[SalesRecord]) -> List[RepSummary]:
    return [RepSummary(**row) for row in group_sum(records, BY_REP)]


def aggregate_by_team(records: Iterable[SalesRecord]) -> List[TeamSummary]:
    return [TeamSummary(**row) for row in group_sum(records, BY_TEAM)]


def aggregate_lost_opportunities(records: Iterable[SalesRecord], limit: int = LOST_TOP_N) -> List[LossSummary]:
    """Reps ranked by lost revenue, highest first, top ``limit`` only.

    sorted() is stable, so reps with equal lost revenue keep first-seen order.
    """
    rows = sorted(group_sum(records, LOST_BY_REP), key=lambda r: r["lost_revenue"], reverse=True)
    return [LossSummary(**row) for row in rows[: max(0, limit)]]

