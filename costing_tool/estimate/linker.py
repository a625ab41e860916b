# costing_tool/estimate/linker.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from costing_tool.estimate import calculator
from costing_tool.estimate.calculator import CalculationContext
from costing_tool.estimate.request import CostItemParameters, Parameters
from costing_tool.estimate.response import (
    CostItemCosts,
    MissingProperties,
    MissingProperty,
    UnknownCostItem,
)
from costing_tool.library.model import CostLibrary, CostReferenceItem

CostReferenceItems = Mapping[str, CostReferenceItem]


@dataclass(frozen=True)
class LinkedCostItem:
    """A requested cost item bound to its reference item for one estimate."""
    request: CostItemParameters
    cost_reference_item: CostReferenceItem
    cost_library: CostLibrary

    @property
    def id(self) -> str:
        return self.request.id

    @property
    def quantity(self) -> int:
        return self.request.quantity

    @property
    def parameters(self) -> Parameters:
        return self.request.parameters

    def get_costs(self, ctx: CalculationContext) -> CostItemCosts:
        """Per-unit costs from the calculator, scaled by the requested quantity."""
        library, item, params = self.cost_library, self.cost_reference_item, self.parameters
        costs = CostItemCosts(
            direct_equipment_cost=calculator.direct_equipment_cost(library, item, params, ctx),
            total_installed_cost=calculator.total_installed_cost(library, item, params, ctx),
            variable_opex_cost_per_year=calculator.variable_opex_cost(library, item, params, ctx),
        )
        return costs * float(self.quantity)


def link(
    cost_item: CostItemParameters,
    cost_reference_items: CostReferenceItems,
    cost_library: CostLibrary,
) -> LinkedCostItem:
    """
    Resolve `cost_item.ref` and check that every parameter the reference item
    needs was supplied.

    Raises UnknownCostItem (carrying the request-side id) when the reference is
    not in the library, or MissingProperties with one entry per absent name.
    The order of missing properties is not significant.
    """
    reference = cost_reference_items.get(cost_item.ref)
    if reference is None:
        raise UnknownCostItem(cost_item.id)

    required = reference.required_parameters()
    provided = set(cost_item.parameters.keys())
    missing = required - provided
    if missing:
        raise MissingProperties(MissingProperty(id=cost_item.id, property=name) for name in missing)

    return LinkedCostItem(
        request=cost_item,
        cost_reference_item=reference,
        cost_library=cost_library,
    )


__all__ = ["CostReferenceItems", "LinkedCostItem", "link"]
