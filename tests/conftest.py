"""Shared fixtures for the funnel test suite."""

from __future__ import annotations

import pytest

from funnel.data import clear_cache
from funnel.records import SalesRecord, load_dataset

SAMPLE_CSV = """report_month,team,rep,attribution_group,Sets,Holds,QOs,Closes,Closed_RENR,Installs,Installed_RENR,Lost,Lost_RENR,set_hold_days,hold_qo_days,qo_close_days,close_install_days
2024-01,North,A,Inbound,10,8,4,2,100,1,60,1,30,2.5,4,7,12
2024-01,North,A,Outbound,6,5,3,1,50,1,50,2,80,3,5,9,14
2024-02,South,B,Inbound,8,6,2,1,200,0,0,0,0,1.5,3,6,0
2024-02,North,C,Referral,4,3,3,0,0,0,0,3,80,2,6,0,0
"""


@pytest.fixture(autouse=True)
def _clear_dataset_cache():
    clear_cache()
    yield
    clear_cache()


@pytest.fixture
def sample_csv() -> str:
    return SAMPLE_CSV


@pytest.fixture
def sample_records(sample_csv):
    return load_dataset(sample_csv)


@pytest.fixture
def dataset_file(tmp_path, monkeypatch, sample_csv):
    path = tmp_path / "peek-funnel.csv"
    path.write_text(sample_csv, encoding="utf-8")
    monkeypatch.setenv("FUNNEL_DATASET_PATH", str(path))
    return path


@pytest.fixture
def make_record():
    """Factory for SalesRecords with zeroed counters."""

    def _make(**overrides) -> SalesRecord:
        values = {
            "report_month": "2024-01",
            "team": "North",
            "rep": "A",
            "attribution_group": "Inbound",
            "sets": 0.0,
            "holds": 0.0,
            "qos": 0.0,
            "closes": 0.0,
            "closed_revenue": 0.0,
            "installs": 0.0,
            "installed_revenue": 0.0,
            "lost": 0.0,
            "lost_revenue": 0.0,
            "set_to_hold_days": 0.0,
            "hold_to_qo_days": 0.0,
            "qo_to_close_days": 0.0,
            "close_to_install_days": 0.0,
        }
        values.update(overrides)
        return SalesRecord(**values)

    return _make
