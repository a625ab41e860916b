# costing_tool/estimate/calculator.py
"""
Pure cost formulas for one reference item:
 - capital cost (linear or polynomial), converted and inflated
 - direct equipment / total installed cost, gated by the item's cost type
 - variable opex per utility category

All functions read the library and never mutate it.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional, Tuple

from costing_tool.estimate.response import (
    UnknownCurrencyConversion,
    UnknownInflationFactor,
    VariableOpexCostEstimate,
)
from costing_tool.library.model import (
    ConstantTerm,
    CostLibrary,
    CostReferenceItem,
    CostType,
    LinearCost,
    PolynomialCost,
    VariableTerm,
)

# Variable opex is amortised over a fixed number of years until global
# project parameters exist.
YEAR_COUNT = 20.0

# 95% operational uptime
OPERATIONAL_HOURS_PER_YEAR = 24.0 * 365.0 * 0.95

UTILITY_UNIT_COST = 0.4 * OPERATIONAL_HOURS_PER_YEAR
STORAGE_TARIFF_UNIT_COST = 20.0 * OPERATIONAL_HOURS_PER_YEAR

# (result field, library contribution name, cost per unit)
VARIABLE_OPEX_CATEGORIES: Tuple[Tuple[str, str, float], ...] = (
    ("electrical_power", "Electrical power", UTILITY_UNIT_COST),
    ("cooling_water", "Cooling water (10degC temp rise)", UTILITY_UNIT_COST),
    ("natural_gas", "Natural gas", UTILITY_UNIT_COST),
    ("steam_hp_superheated", "Steam HP superheat, 600degC and 50bara", UTILITY_UNIT_COST),
    ("steam_lp_saturated", "Steam LP saturated, 160degC and 6.2bara", UTILITY_UNIT_COST),
    ("catalysts_and_chemicals", "Catalysts and chemicals", UTILITY_UNIT_COST),
    ("equipment_item_rental", "Equipment item rental", UTILITY_UNIT_COST),
    ("cost_per_tonne_of_co2", "Cost per tonne of CO2", UTILITY_UNIT_COST),
    ("tariff", "Tariff paid to storage reservoir owner", STORAGE_TARIFF_UNIT_COST),
)


@dataclass(frozen=True)
class CalculationContext:
    """Request-wide settings resolved against one library."""
    # Factor converting from the library's base currency to the target currency
    target_currency_rate: float = 1.0


# ------------------------------
# Rate lookups
# ------------------------------
def currency_factor(library: CostLibrary, currency: str, ctx: CalculationContext) -> float:
    rate = library.currency_conversion.rate(currency)
    if rate is None:
        raise UnknownCurrencyConversion(currency)
    return rate * ctx.target_currency_rate


def inflation_factor(library: CostLibrary, year: str) -> float:
    factor = library.inflation.factor(year)
    if factor is None:
        raise UnknownInflationFactor(year)
    return factor


def _adjustment(
    library: CostLibrary, item: CostReferenceItem, ctx: CalculationContext
) -> Tuple[float, float]:
    """(currency factor, inflation factor) for the item's capex contribution."""
    contribution = item.capex_contribution
    return (
        currency_factor(library, contribution.currency, ctx),
        inflation_factor(library, str(contribution.year)),
    )


# ------------------------------
# Capital cost
# ------------------------------
def _missing(item: CostReferenceItem, name: str) -> KeyError:
    # The linker rejects incomplete parameter sets before this point.
    return KeyError(f"{item.id}: parameter {name!r} was not provided")


def base_capex_cost(item: CostReferenceItem, parameters: Mapping[str, float]) -> float:
    """Formula value before currency conversion and inflation."""
    cost = item.capex_contribution.cost
    if isinstance(cost, LinearCost):
        scale = 1.0
        for factor in item.scaling_factors:
            if factor.name not in parameters:
                raise _missing(item, factor.name)
            scale *= parameters[factor.name] / factor.source_value
        return cost.base_cost * scale
    if isinstance(cost, PolynomialCost):
        total = 0.0
        for term in cost.terms:
            if isinstance(term, VariableTerm):
                if term.dimension_name not in parameters:
                    raise _missing(item, term.dimension_name)
                # coefficient * value * exponent, not value ** exponent
                total += term.coefficient * parameters[term.dimension_name] * term.exponent
            elif isinstance(term, ConstantTerm):
                total += term.value
            else:
                raise TypeError(f"unknown polynomial term: {term!r}")
        return total
    raise TypeError(f"unknown cost formula: {cost!r}")


def capex_cost(
    library: CostLibrary,
    item: CostReferenceItem,
    parameters: Mapping[str, float],
    ctx: CalculationContext,
) -> float:
    cost = base_capex_cost(item, parameters)
    conversion, inflation = _adjustment(library, item, ctx)
    return cost * conversion * inflation


def direct_equipment_cost(
    library: CostLibrary,
    item: CostReferenceItem,
    parameters: Mapping[str, float],
    ctx: CalculationContext,
) -> Optional[float]:
    if item.cost_type is not CostType.DIRECT_EQUIPMENT_COST:
        return None
    return capex_cost(library, item, parameters, ctx)


def total_installed_cost(
    library: CostLibrary,
    item: CostReferenceItem,
    parameters: Mapping[str, float],
    ctx: CalculationContext,
) -> Optional[float]:
    if item.cost_type is not CostType.TOTAL_INSTALLED_COST:
        return None
    return capex_cost(library, item, parameters, ctx)


# ------------------------------
# Variable opex
# ------------------------------
def variable_opex_cost_item(
    library: CostLibrary,
    item: CostReferenceItem,
    parameters: Mapping[str, float],
    name: str,
    cost_per_unit: float,
    ctx: CalculationContext,
) -> Optional[float]:
    """Yearly cost of one category, or None when the item or request lacks it."""
    contribution = item.variable_opex_contribution(name)
    if contribution is None:
        return None
    value = parameters.get(name)
    if value is None:
        return None
    conversion, inflation = _adjustment(library, item, ctx)
    return value * contribution.scaled_by * cost_per_unit * conversion * inflation * YEAR_COUNT


def variable_opex_cost(
    library: CostLibrary,
    item: CostReferenceItem,
    parameters: Mapping[str, float],
    ctx: CalculationContext,
) -> VariableOpexCostEstimate:
    values = {}
    for field_name, name, cost_per_unit in VARIABLE_OPEX_CATEGORIES:
        cost = variable_opex_cost_item(library, item, parameters, name, cost_per_unit, ctx)
        values[field_name] = cost if cost is not None else 0.0
    return VariableOpexCostEstimate(**values)


__all__ = [
    "YEAR_COUNT",
    "OPERATIONAL_HOURS_PER_YEAR",
    "VARIABLE_OPEX_CATEGORIES",
    "CalculationContext",
    "currency_factor",
    "inflation_factor",
    "base_capex_cost",
    "capex_cost",
    "direct_equipment_cost",
    "total_installed_cost",
    "variable_opex_cost_item",
    "variable_opex_cost",
]
