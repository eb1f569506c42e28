from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, Optional

from funnel.aggregations import column_totals
from funnel.records import SalesRecord

TOTAL_COLUMNS = ("closed_revenue", "closes", "installs", "lost_revenue")


@dataclass(frozen=True)
class SummaryMetrics:
    total_revenue: float
    total_deals: float
    install_rate: Optional[int]
    avg_deal_size: Optional[float]
    total_installs: float
    total_lost_revenue: float


def round_half_up(value: Optional[float], ndigits: int = 0) -> Optional[float]:
    if value is None:
        return None
    q = Decimal(10) ** -ndigits
    return float(Decimal(str(value)).quantize(q, rounding=ROUND_HALF_UP))


def _totals(records: Iterable[SalesRecord]) -> Dict[str, float]:
    return column_totals(records, TOTAL_COLUMNS)


def _install_rate(totals: Dict[str, float]) -> Optional[int]:
    if totals["closes"] == 0:
        return None
    return int(round_half_up(totals["installs"] / totals["closes"] * 100))


def _avg_deal_size(totals: Dict[str, float]) -> Optional[float]:
    return totals["closed_revenue"] / totals["closes"] if totals["closes"] != 0 else None


def total_revenue(records: Iterable[SalesRecord]) -> float:
    return _totals(records)["closed_revenue"]


def total_deals(records: Iterable[SalesRecord]) -> float:
    return _totals(records)["closes"]


def install_rate(records: Iterable[SalesRecord]) -> Optional[int]:
    """Installs per close as a whole percentage; None when there are no closes."""
    return _install_rate(_totals(records))


def avg_deal_size(records: Iterable[SalesRecord]) -> Optional[float]:
    return _avg_deal_size(_totals(records))


def summary_metrics(records: Iterable[SalesRecord]) -> SummaryMetrics:
    totals = _totals(records)
    return SummaryMetrics(
        total_revenue=totals["closed_revenue"],
        total_deals=totals["closes"],
        install_rate=_install_rate(totals),
        avg_deal_size=_avg_deal_size(totals),
        total_installs=totals["installs"],
        total_lost_revenue=totals["lost_revenue"],
    )
