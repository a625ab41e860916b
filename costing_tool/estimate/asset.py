# costing_tool/estimate/asset.py
"""
Asset estimator.

Steps for one asset:
  1) Link every requested cost item against the library; if any fail, combine
     all linking errors and stop (no partial results).
  2) Cost each linked item, spread it over the timeline, discount per year and
     fold lifetime / lifetime-DCF totals.
  3) Aggregate direct equipment cost, apply Lang factors, derive total
     installed cost, fixed opex and decommissioning cost.
  4) Spread every asset category over construction / operation /
     decommissioning years, discount, and fold lifetime totals.

Timeline sub-ranges are used as given; inverted or overlapping ranges are not
rejected here (see validate.py for the strict-mode check).
"""
from __future__ import annotations

import logging
from dataclasses import fields
from functools import reduce
from typing import List, Optional

from costing_tool.estimate.calculator import CalculationContext
from costing_tool.estimate.linker import CostReferenceItems, LinkedCostItem, link
from costing_tool.estimate.request import AssetParameters, Timeline
from costing_tool.estimate.response import (
    AssetCostEstimate,
    AssetCosts,
    AssetPeriodCosts,
    CostEstimateError,
    CostItemCostEstimate,
    CostItemCosts,
    CostItemPeriodCosts,
    FixedOpexCostEstimate,
    LangFactoredCostEstimate,
    VariableOpexCostEstimate,
    YearAssetCosts,
    YearCostItemCosts,
    combine_all,
)
from costing_tool.finance.dcf import discount_divisors
from costing_tool.library.model import CostLibrary

logger = logging.getLogger(__name__)

DECOMMISSIONING_FRACTION = 0.1


# ------------------------------
# Cost items
# ------------------------------
def _per_year(value: Optional[float], years_in_range: int) -> Optional[float]:
    if value is None or not years_in_range:
        return None
    return value / years_in_range


def spread_item_costs(costs: CostItemCosts, timeline: Timeline) -> List[tuple]:
    """
    (year, CostItemPeriodCosts) for every year of the asset timeline.
    Capital costs are divided over construction years; variable opex is
    charged in full in each operation year.
    """
    construction = timeline.construction_range()
    operation = timeline.operation_range()
    dec_per_year = _per_year(costs.direct_equipment_cost, len(construction))
    tic_per_year = _per_year(costs.total_installed_cost, len(construction))

    out = []
    for year in timeline.range().years():
        building = year in construction
        out.append((
            year,
            CostItemPeriodCosts(
                direct_equipment_cost=dec_per_year if building else None,
                total_installed_cost=tic_per_year if building else None,
                variable_opex_cost=(
                    costs.variable_opex_cost_per_year if year in operation else VariableOpexCostEstimate()
                ),
            ),
        ))
    return out


def estimate_cost_item(
    item: LinkedCostItem, asset: AssetParameters, ctx: CalculationContext
) -> CostItemCostEstimate:
    costs = item.get_costs(ctx)
    spread = spread_item_costs(costs, asset.timeline)
    divisors = discount_divisors(asset.discount_rate, [y for y, _ in spread], asset.timeline.start)

    costs_by_year = [
        YearCostItemCosts(
            year=year,
            costs_in_year=costs_in_year,
            dcf_costs_in_year=costs_in_year / float(divisor),
        )
        for (year, costs_in_year), divisor in zip(spread, divisors)
    ]
    lifetime_costs = reduce(lambda acc, y: acc + y.costs_in_year, costs_by_year, CostItemPeriodCosts())
    lifetime_dcf_costs = reduce(lambda acc, y: acc + y.dcf_costs_in_year, costs_by_year, CostItemPeriodCosts())

    return CostItemCostEstimate(
        id=item.id,
        quantity=item.quantity,
        costs=costs,
        costs_by_year=costs_by_year,
        lifetime_costs=lifetime_costs,
        lifetime_dcf_costs=lifetime_dcf_costs,
    )


# ------------------------------
# Asset aggregates
# ------------------------------
def lang_factored_cost(direct_equipment_cost: float, asset: AssetParameters) -> LangFactoredCostEstimate:
    factors = asset.capex_lang_factors
    return LangFactoredCostEstimate(
        **{f.name: direct_equipment_cost * getattr(factors, f.name) for f in fields(LangFactoredCostEstimate)}
    )


def fixed_opex_cost(total_installed_cost: float, asset: AssetParameters) -> FixedOpexCostEstimate:
    factors = asset.opex_factors
    return FixedOpexCostEstimate(
        **{f.name: total_installed_cost * getattr(factors, f.name) for f in fields(FixedOpexCostEstimate)}
    )


def aggregate_asset_costs(cost_items: List[CostItemCostEstimate], asset: AssetParameters) -> AssetCosts:
    direct_equipment_cost = sum(
        (i.costs.direct_equipment_cost for i in cost_items if i.costs.direct_equipment_cost is not None),
        0.0,
    )
    lang = lang_factored_cost(direct_equipment_cost, asset)
    items_installed_cost = sum(
        (i.costs.total_installed_cost for i in cost_items if i.costs.total_installed_cost is not None),
        0.0,
    )
    # Contingency is a Lang category but is not installed plant.
    installed_plant = direct_equipment_cost + lang.total() - lang.contingency
    total_installed_cost = installed_plant + items_installed_cost
    variable_opex = reduce(
        lambda acc, i: acc + i.costs.variable_opex_cost_per_year, cost_items, VariableOpexCostEstimate()
    )
    return AssetCosts(
        direct_equipment_cost=direct_equipment_cost,
        lang_factored_capital_cost=lang,
        total_installed_cost=total_installed_cost,
        fixed_opex_cost_per_year=fixed_opex_cost(total_installed_cost, asset),
        variable_opex_cost_per_year=variable_opex,
        decommissioning_cost=installed_plant * DECOMMISSIONING_FRACTION,
    )


def spread_asset_costs(costs: AssetCosts, timeline: Timeline) -> List[tuple]:
    """(year, AssetPeriodCosts) across the whole timeline, zero outside each category's range."""
    construction = timeline.construction_range()
    operation = timeline.operation_range()
    decommissioning = timeline.decommissioning_range()
    n_build = len(construction)
    n_decom = len(decommissioning)

    out = []
    for year in timeline.range().years():
        building = year in construction
        operating = year in operation
        out.append((
            year,
            AssetPeriodCosts(
                direct_equipment_cost=costs.direct_equipment_cost / n_build if building else 0.0,
                lang_factored_capital_cost=(
                    costs.lang_factored_capital_cost / n_build if building else LangFactoredCostEstimate()
                ),
                total_installed_cost=costs.total_installed_cost / n_build if building else 0.0,
                fixed_opex_cost=costs.fixed_opex_cost_per_year if operating else FixedOpexCostEstimate(),
                variable_opex_cost=costs.variable_opex_cost_per_year if operating else VariableOpexCostEstimate(),
                decommissioning_cost=(
                    costs.decommissioning_cost / n_decom if year in decommissioning else 0.0
                ),
            ),
        ))
    return out


def estimate_asset_cost(
    cost_library: CostLibrary,
    asset: AssetParameters,
    ctx: CalculationContext,
    cost_reference_items: Optional[CostReferenceItems] = None,
) -> AssetCostEstimate:
    """Estimate one asset; raises a single (possibly combined) CostEstimateError."""
    if cost_reference_items is None:
        cost_reference_items = cost_library.items_by_id()

    linked: List[LinkedCostItem] = []
    errors: List[CostEstimateError] = []
    for cost_item in asset.cost_items:
        try:
            linked.append(link(cost_item, cost_reference_items, cost_library))
        except CostEstimateError as e:
            errors.append(e)
    if errors:
        logger.debug("asset %s: %d cost item(s) failed to link", asset.id, len(errors))
        raise combine_all(errors)

    cost_items = [estimate_cost_item(item, asset, ctx) for item in linked]
    costs = aggregate_asset_costs(cost_items, asset)

    spread = spread_asset_costs(costs, asset.timeline)
    divisors = discount_divisors(asset.discount_rate, [y for y, _ in spread], asset.timeline.start)
    costs_by_year = [
        YearAssetCosts(year=year, costs_in_year=c, dcf_costs_in_year=c / float(divisor))
        for (year, c), divisor in zip(spread, divisors)
    ]
    lifetime_costs = reduce(lambda acc, y: acc + y.costs_in_year, costs_by_year, AssetPeriodCosts())
    lifetime_dcf_costs = reduce(lambda acc, y: acc + y.dcf_costs_in_year, costs_by_year, AssetPeriodCosts())

    logger.debug(
        "asset %s: %d item(s), %d year(s), total installed cost %.2f",
        asset.id, len(cost_items), len(costs_by_year), costs.total_installed_cost,
    )
    return AssetCostEstimate(
        id=asset.id,
        costs=costs,
        costs_by_year=costs_by_year,
        lifetime_costs=lifetime_costs,
        lifetime_dcf_costs=lifetime_dcf_costs,
        cost_items=cost_items,
    )


__all__ = [
    "DECOMMISSIONING_FRACTION",
    "spread_item_costs",
    "estimate_cost_item",
    "lang_factored_cost",
    "fixed_opex_cost",
    "aggregate_asset_costs",
    "spread_asset_costs",
    "estimate_asset_cost",
]
