"""Tests for the grouped aggregations."""

from __future__ import annotations

import pytest

from funnel.aggregations import (
    BY_MONTH,
    LOST_TOP_N,
    GroupSpec,
    LossSummary,
    MonthSummary,
    RepSummary,
    TeamSummary,
    aggregate_by_month,
    aggregate_by_rep,
    aggregate_by_team,
    aggregate_lost_opportunities,
    group_sum,
)
from funnel.metrics import summary_metrics, total_revenue


class TestGroupSum:
    def test_first_seen_key_order(self, make_record):
        records = [make_record(report_month=m) for m in ["2024-03", "2024-01", "2024-03", "2024-02"]]
        assert [row["month"] for row in group_sum(records, BY_MONTH)] == ["2024-03", "2024-01", "2024-02"]

    def test_custom_spec(self, make_record):
        spec = GroupSpec("attribution_group", "source", (("sets", "sets"), ("holds", "holds")))
        records = [
            make_record(attribution_group="Inbound", sets=3, holds=1),
            make_record(attribution_group="Inbound", sets=2, holds=2),
            make_record(attribution_group="Referral", sets=1, holds=0),
        ]
        assert group_sum(records, spec) == [
            {"source": "Inbound", "sets": 5.0, "holds": 3.0},
            {"source": "Referral", "sets": 1.0, "holds": 0.0},
        ]

    def test_empty(self):
        assert group_sum([], BY_MONTH) == []


class TestAggregations:
    def test_by_rep_example(self, make_record):
        records = [
            make_record(rep="A", closes=2, closed_revenue=100),
            make_record(rep="A", closes=1, closed_revenue=50),
            make_record(rep="B", closes=1, closed_revenue=200),
        ]
        assert aggregate_by_rep(records) == [
            RepSummary(rep="A", revenue=150, deals=3, installs=0),
            RepSummary(rep="B", revenue=200, deals=1, installs=0),
        ]

    def test_by_month(self, sample_records):
        assert aggregate_by_month(sample_records) == [
            MonthSummary(month="2024-01", revenue=150.0, deals=3.0),
            MonthSummary(month="2024-02", revenue=200.0, deals=1.0),
        ]

    def test_by_month_conserves_revenue(self, sample_records):
        monthly_total = sum(s.revenue for s in aggregate_by_month(sample_records))
        assert monthly_total == summary_metrics(sample_records).total_revenue

    def test_by_month_matches_kpi_total_exactly(self, make_record):
        records = [make_record(closed_revenue=v, closes=1) for v in (0.1, 0.2, 0.3)]
        monthly_total = sum(s.revenue for s in aggregate_by_month(records))
        assert monthly_total == summary_metrics(records).total_revenue
        assert monthly_total == total_revenue(records)

    def test_by_team(self, sample_records):
        assert aggregate_by_team(sample_records) == [
            TeamSummary(team="North", revenue=150.0, deals=3.0, installs=2.0),
            TeamSummary(team="South", revenue=200.0, deals=1.0, installs=0.0),
        ]

    def test_negative_values_summed_as_is(self, make_record):
        records = [make_record(closed_revenue=100), make_record(closed_revenue=-40)]
        assert aggregate_by_month(records)[0].revenue == 60.0

    @pytest.mark.parametrize(
        "aggregate", [aggregate_by_month, aggregate_by_rep, aggregate_by_team, aggregate_lost_opportunities]
    )
    def test_empty_input(self, aggregate):
        assert aggregate([]) == []


class TestLostOpportunities:
    def test_sorted_by_lost_revenue(self, sample_records):
        assert aggregate_lost_opportunities(sample_records) == [
            LossSummary(rep="A", lost_deals=3.0, lost_revenue=110.0),
            LossSummary(rep="C", lost_deals=3.0, lost_revenue=80.0),
            LossSummary(rep="B", lost_deals=0.0, lost_revenue=0.0),
        ]

    def test_ties_keep_first_seen_order(self, make_record):
        records = [
            make_record(rep="X", lost_revenue=50),
            make_record(rep="Y", lost_revenue=90),
            make_record(rep="Z", lost_revenue=50),
            make_record(rep="W", lost_revenue=50),
        ]
        assert [s.rep for s in aggregate_lost_opportunities(records)] == ["Y", "X", "Z", "W"]

    def test_truncated_to_top_ten(self, make_record):
        records = [make_record(rep=f"rep-{i}", lost=1, lost_revenue=i * 10) for i in range(12)]
        out = aggregate_lost_opportunities(records)
        assert len(out) == LOST_TOP_N == 10
        assert out[0].rep == "rep-11"
        assert out[-1].rep == "rep-2"
        revenues = [s.lost_revenue for s in out]
        assert revenues == sorted(revenues, reverse=True)

    def test_custom_limit(self, sample_records):
        assert [s.rep for s in aggregate_lost_opportunities(sample_records, limit=1)] == ["A"]
