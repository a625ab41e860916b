import pandas as pd
import pytest

from costing_tool.estimate.estimator import estimate_cost
from costing_tool.tables import ANNUAL_COLUMNS, annual_frame, annual_records, item_frame, summarise


@pytest.fixture
def estimate(base_library, base_request):
    return estimate_cost(base_library, base_request)


def test_annual_frame(estimate):
    df = annual_frame(estimate.assets[0])
    assert list(df.columns) == ANNUAL_COLUMNS
    assert df["year"].tolist() == [2025, 2026, 2027]
    assert df["total"].tolist() == pytest.approx([450.0, 36.0, 45.0])
    assert df["dcf_total"].tolist() == pytest.approx([450.0, 36.0 / 1.1, 45.0 / 1.21])
    assert df["lang_factored_capital_cost"].iloc[0] == pytest.approx(450.0)


def test_item_frame_keeps_absent_as_missing(estimate):
    df = item_frame(estimate.assets[0])
    assert len(df) == 3
    assert df["direct_equipment_cost"].iloc[0] == pytest.approx(120.0)
    assert pd.isna(df["direct_equipment_cost"].iloc[1])
    assert df["total_installed_cost"].isna().all()


def test_summary_npv_matches_lifetime_dcf(estimate, base_request):
    s = summarise(estimate, base_request, library_id="test", currency="GBP")
    a1 = s["assets"]["a1"]
    assert a1["lifetime_total"] == pytest.approx(531.0)
    assert a1["npv"] == pytest.approx(a1["lifetime_dcf_total"])
    assert a1["years"] == 3
    assert s["currency"] == "GBP"


def test_annual_records_are_json_ready(estimate):
    import json

    rows = annual_records(estimate)
    assert len(rows) == 3
    json.dumps(rows)


def test_annual_records_keep_full_precision(estimate):
    rows = annual_records(estimate)
    asset = estimate.assets[0]
    for row, y in zip(rows, asset.costs_by_year):
        assert type(row["year"]) is int and row["year"] == y.year
        assert type(row["dcf_total"]) is float
        assert row["dcf_total"] == y.dcf_costs_in_year.total()
