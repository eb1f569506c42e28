from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List

from funnel.aggregations import (
    LOST_TOP_N,
    aggregate_by_month,
    aggregate_by_rep,
    aggregate_by_team,
    aggregate_lost_opportunities,
)
from funnel.charts import monthly_sales_chart, rep_sales_chart, team_performance_chart, to_vega_spec
from funnel.filters import FilterSelection
from funnel.formatting import format_count, format_currency_0, format_percent_int
from funnel.metrics import summary_metrics


def _filtered(ctx: Dict[str, Any]) -> list:
    return list(ctx.get("filtered_records", []) or [])


def compute_summary(ctx: Dict[str, Any]) -> Dict[str, Any]:
    m = summary_metrics(_filtered(ctx))
    return {
        **asdict(m),
        "display": {
            "total_revenue": format_currency_0(m.total_revenue),
            "total_deals": format_count(m.total_deals),
            "install_rate": format_percent_int(m.install_rate),
            "avg_deal_size": format_currency_0(m.avg_deal_size),
        },
    }


def compute_monthly(ctx: Dict[str, Any]) -> List[Dict[str, Any]]:
    return [asdict(s) for s in aggregate_by_month(_filtered(ctx))]


def compute_reps(ctx: Dict[str, Any]) -> List[Dict[str, Any]]:
    return [asdict(s) for s in aggregate_by_rep(_filtered(ctx))]


def compute_teams(ctx: Dict[str, Any]) -> List[Dict[str, Any]]:
    return [asdict(s) for s in aggregate_by_team(_filtered(ctx))]


def compute_losses(ctx: Dict[str, Any], *, limit: int = LOST_TOP_N) -> List[Dict[str, Any]]:
    return [asdict(s) for s in aggregate_lost_opportunities(_filtered(ctx), limit=limit)]


def compute_dashboard(selection: FilterSelection, ctx: Dict[str, Any]) -> Dict[str, Any]:
    monthly = compute_monthly(ctx)
    reps = compute_reps(ctx)
    teams = compute_teams(ctx)
    return {
        "filters": asdict(selection),
        "facets": {
            "teams": list(ctx.get("teams", []) or []),
            "attribution_groups": list(ctx.get("attribution_groups", []) or []),
        },
        "row_counts": {
            "records": len(ctx.get("records", []) or []),
            "filtered_records": len(_filtered(ctx)),
        },
        "kpis": compute_summary(ctx),
        "monthly": monthly,
        "reps": reps,
        "teams": teams,
        "losses": compute_losses(ctx),
        "charts": {
            "monthly_sales": to_vega_spec(monthly_sales_chart(monthly)),
            "rep_sales": to_vega_spec(rep_sales_chart(reps)),
            "team_performance": to_vega_spec(team_performance_chart(teams)),
        },
    }
