import copy

import pytest

from costing_tool.estimate.request import AssetParameters, CostEstimateRequest
from costing_tool.library.model import CostLibrary

# Timeline 2025 build / 2026 operate / 2027 decommission, default factors.
BASE_ASSET = {
    "id": "a1",
    "timeline": {
        "construction_start": 2025,
        "construction_finish": 2025,
        "operation_start": 2026,
        "operation_finish": 2026,
        "decommissioning_start": 2027,
        "decommissioning_finish": 2027,
    },
    "discount_rate": 0.1,
    "cost_items": [
        {"id": "c1", "ref": "Item 001", "quantity": 1, "parameters": {"length": 100.0, "depth": 30.0}},
    ],
}


def item_dict(
    id="Item 001",
    *,
    cost=None,
    scaling=(("length", 50.0), ("depth", 50.0)),
    year=2024,
    currency="GBP",
    cost_type=None,
    opex=(),
):
    return {
        "id": id,
        "info": {"cost_type": cost_type},
        "scaling_factors": [{"name": n, "units": "m", "source_value": v} for n, v in scaling],
        "capex_contribution": {
            "year": year,
            "currency": currency,
            "cost": cost or {"type": "Linear", "base_cost": 100.0},
        },
        "variable_opex_contributions": [{"name": n, "scaled_by": s} for n, s in opex],
    }


def library_dict(items, *, rates=None, factors=None, base_currency="GBP"):
    return {
        "modules": [{"id": "M0101", "cost_items": list(items)}],
        "currency_conversion": {
            "base_currency": base_currency,
            "rates": rates if rates is not None else {"GBP": 1.0, "EUR": 3.0},
        },
        "inflation": {"factors": factors if factors is not None else {"2024": 1.0}},
    }


@pytest.fixture
def make_item():
    return item_dict


@pytest.fixture
def make_library_dict():
    return library_dict


@pytest.fixture
def make_library():
    def _make(items=None, **kw):
        return CostLibrary.from_dict(library_dict(items or [item_dict()], **kw), name="test")
    return _make


@pytest.fixture
def base_library(make_library):
    return make_library()


@pytest.fixture
def base_asset_dict():
    return copy.deepcopy(BASE_ASSET)


@pytest.fixture
def base_asset(base_asset_dict):
    return AssetParameters.from_dict(base_asset_dict)


@pytest.fixture
def base_request(base_asset_dict):
    return CostEstimateRequest.from_dict({"assets": [base_asset_dict]})
