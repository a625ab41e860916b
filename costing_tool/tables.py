# costing_tool/tables.py
"""
Tabular views of a CostEstimate (pandas) and the per-asset summary written by
the runner.

annual_frame : one row per asset-year, category totals undiscounted and DCF
item_frame   : one row per cost-item-year
summarise    : JSON-ready per-asset headline figures
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

import pandas as pd

from costing_tool.estimate.request import CostEstimateRequest
from costing_tool.estimate.response import AssetCostEstimate, AssetPeriodCosts, CostEstimate, CostItemPeriodCosts
from costing_tool.finance.dcf import npv

ANNUAL_COLUMNS = [
    "asset_id",
    "year",
    "direct_equipment_cost",
    "lang_factored_capital_cost",
    "total_installed_cost",
    "fixed_opex_cost",
    "variable_opex_cost",
    "decommissioning_cost",
    "total",
    "dcf_total",
]

ITEM_COLUMNS = [
    "asset_id",
    "cost_item_id",
    "year",
    "direct_equipment_cost",
    "total_installed_cost",
    "variable_opex_cost",
    "dcf_direct_equipment_cost",
    "dcf_total_installed_cost",
    "dcf_variable_opex_cost",
]


def _period_row(c: AssetPeriodCosts) -> Dict[str, float]:
    return {
        "direct_equipment_cost": c.direct_equipment_cost,
        "lang_factored_capital_cost": c.lang_factored_capital_cost.total(),
        "total_installed_cost": c.total_installed_cost,
        "fixed_opex_cost": c.fixed_opex_cost.total(),
        "variable_opex_cost": c.variable_opex_cost.total(),
        "decommissioning_cost": c.decommissioning_cost,
        "total": c.total(),
    }


def annual_frame(asset: AssetCostEstimate) -> pd.DataFrame:
    rows = []
    for y in asset.costs_by_year:
        row = {"asset_id": asset.id, "year": y.year, **_period_row(y.costs_in_year)}
        row["dcf_total"] = y.dcf_costs_in_year.total()
        rows.append(row)
    return pd.DataFrame(rows, columns=ANNUAL_COLUMNS)


def _item_values(c: CostItemPeriodCosts, prefix: str = "") -> Dict[str, Optional[float]]:
    # None means the item has no cost of that kind in the year
    return {
        f"{prefix}direct_equipment_cost": c.direct_equipment_cost,
        f"{prefix}total_installed_cost": c.total_installed_cost,
        f"{prefix}variable_opex_cost": c.variable_opex_cost.total(),
    }


def item_frame(asset: AssetCostEstimate) -> pd.DataFrame:
    rows = []
    for item in asset.cost_items:
        for y in item.costs_by_year:
            rows.append({
                "asset_id": asset.id,
                "cost_item_id": item.id,
                "year": y.year,
                **_item_values(y.costs_in_year),
                **_item_values(y.dcf_costs_in_year, "dcf_"),
            })
    return pd.DataFrame(rows, columns=ITEM_COLUMNS)


def estimate_frame(estimate: CostEstimate) -> pd.DataFrame:
    frames = [annual_frame(a) for a in estimate.assets]
    if not frames:
        return pd.DataFrame(columns=ANNUAL_COLUMNS)
    return pd.concat(frames, ignore_index=True)


def summarise_asset(asset: AssetCostEstimate, discount_rate: float) -> Dict[str, Any]:
    df = annual_frame(asset)
    return {
        "direct_equipment_cost": float(asset.costs.direct_equipment_cost),
        "total_installed_cost": float(asset.costs.total_installed_cost),
        "fixed_opex_cost_per_year": float(asset.costs.fixed_opex_cost_per_year.total()),
        "variable_opex_cost_per_year": float(asset.costs.variable_opex_cost_per_year.total()),
        "decommissioning_cost": float(asset.costs.decommissioning_cost),
        "lifetime_total": float(asset.lifetime_costs.total()),
        "lifetime_dcf_total": float(asset.lifetime_dcf_costs.total()),
        # Cross-check of lifetime_dcf_total computed from the yearly series
        "npv": npv(discount_rate, df["total"].tolist()),
        "years": int(len(df)),
    }


def summarise(
    estimate: CostEstimate,
    request: CostEstimateRequest,
    *,
    library_id: str = "",
    currency: str = "",
) -> Dict[str, Any]:
    rates = {a.id: a.discount_rate for a in request.assets}
    return {
        "library": library_id,
        "currency": currency,
        "assets": {a.id: summarise_asset(a, rates.get(a.id, 0.0)) for a in estimate.assets},
    }


def annual_records(estimate: CostEstimate) -> List[Dict[str, Any]]:
    # plain Python scalars so json and csv see the same values as the summary
    rows = []
    for rec in estimate_frame(estimate).to_dict(orient="records"):
        rows.append({
            k: str(v) if k == "asset_id" else int(v) if k == "year" else float(v)
            for k, v in rec.items()
        })
    return rows


__all__ = [
    "ANNUAL_COLUMNS",
    "ITEM_COLUMNS",
    "annual_frame",
    "item_frame",
    "estimate_frame",
    "summarise_asset",
    "summarise",
    "annual_records",
]
