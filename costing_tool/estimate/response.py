# costing_tool/estimate/response.py
"""
Estimate result model and the engine's error kinds.

Results are plain dataclasses; `to_dict()` gives a JSON-ready mapping.
Cost breakdowns support field-wise `+`, `* k` and `/ k` so that yearly series
can be spread, discounted and folded without naming every category.

Optional item categories (direct / total installed cost) keep "no value"
apart from 0.0: None + x == x, None + None == None.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from functools import reduce
from typing import Any, Dict, Iterable, List, Optional


# ------------------------------
# Field-wise arithmetic
# ------------------------------
class _Breakdown:
    """Mixin for dataclasses whose fields are floats or nested breakdowns."""

    def _map(self, fn):
        return type(self)(**{f.name: fn(getattr(self, f.name)) for f in fields(self)})

    def _zip(self, other, fn):
        if type(other) is not type(self):
            return NotImplemented
        return type(self)(
            **{f.name: fn(getattr(self, f.name), getattr(other, f.name)) for f in fields(self)}
        )

    def __add__(self, other):
        return self._zip(other, lambda a, b: a + b)

    def __mul__(self, k: float):
        return self._map(lambda v: v * k)

    def __truediv__(self, k: float):
        return self._map(lambda v: v / k)

    def total(self) -> float:
        return sum(getattr(self, f.name) for f in fields(self))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def add_optional(a: Optional[float], b: Optional[float]) -> Optional[float]:
    if a is None:
        return b
    if b is None:
        return a
    return a + b


@dataclass(frozen=True)
class LangFactoredCostEstimate(_Breakdown):
    equipment_erection: float = 0.0
    piping: float = 0.0
    instrumentation: float = 0.0
    electrical: float = 0.0
    buildings_and_process: float = 0.0
    utilities: float = 0.0
    storages: float = 0.0
    site_development: float = 0.0
    ancillary_buildings: float = 0.0
    design_and_engineering: float = 0.0
    contractors_fee: float = 0.0
    contingency: float = 0.0


@dataclass(frozen=True)
class FixedOpexCostEstimate(_Breakdown):
    maintenance: float = 0.0
    control_room_facilities: float = 0.0
    insurance_liability: float = 0.0
    insurance_equipment_loss: float = 0.0
    cost_of_capital: float = 0.0
    major_turnarounds: float = 0.0


@dataclass(frozen=True)
class VariableOpexCostEstimate(_Breakdown):
    electrical_power: float = 0.0
    cooling_water: float = 0.0
    natural_gas: float = 0.0
    steam_hp_superheated: float = 0.0
    steam_lp_saturated: float = 0.0
    catalysts_and_chemicals: float = 0.0
    equipment_item_rental: float = 0.0
    cost_per_tonne_of_co2: float = 0.0
    tariff: float = 0.0


# ------------------------------
# Cost item results
# ------------------------------
@dataclass(frozen=True)
class CostItemCosts:
    direct_equipment_cost: Optional[float] = None
    total_installed_cost: Optional[float] = None
    variable_opex_cost_per_year: VariableOpexCostEstimate = field(default_factory=VariableOpexCostEstimate)

    def __mul__(self, k: float) -> "CostItemCosts":
        return CostItemCosts(
            direct_equipment_cost=None if self.direct_equipment_cost is None else self.direct_equipment_cost * k,
            total_installed_cost=None if self.total_installed_cost is None else self.total_installed_cost * k,
            variable_opex_cost_per_year=self.variable_opex_cost_per_year * k,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class CostItemPeriodCosts:
    direct_equipment_cost: Optional[float] = None
    total_installed_cost: Optional[float] = None
    variable_opex_cost: VariableOpexCostEstimate = field(default_factory=VariableOpexCostEstimate)

    def __add__(self, other: "CostItemPeriodCosts") -> "CostItemPeriodCosts":
        return CostItemPeriodCosts(
            direct_equipment_cost=add_optional(self.direct_equipment_cost, other.direct_equipment_cost),
            total_installed_cost=add_optional(self.total_installed_cost, other.total_installed_cost),
            variable_opex_cost=self.variable_opex_cost + other.variable_opex_cost,
        )

    def __truediv__(self, k: float) -> "CostItemPeriodCosts":
        return CostItemPeriodCosts(
            direct_equipment_cost=None if self.direct_equipment_cost is None else self.direct_equipment_cost / k,
            total_installed_cost=None if self.total_installed_cost is None else self.total_installed_cost / k,
            variable_opex_cost=self.variable_opex_cost / k,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class YearCostItemCosts:
    year: int
    costs_in_year: CostItemPeriodCosts
    dcf_costs_in_year: CostItemPeriodCosts


@dataclass(frozen=True)
class CostItemCostEstimate:
    id: str
    quantity: int
    costs: CostItemCosts
    costs_by_year: List[YearCostItemCosts]
    lifetime_costs: CostItemPeriodCosts
    lifetime_dcf_costs: CostItemPeriodCosts

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# ------------------------------
# Asset results
# ------------------------------
@dataclass(frozen=True)
class AssetCosts:
    direct_equipment_cost: float
    lang_factored_capital_cost: LangFactoredCostEstimate
    total_installed_cost: float
    fixed_opex_cost_per_year: FixedOpexCostEstimate
    variable_opex_cost_per_year: VariableOpexCostEstimate
    decommissioning_cost: float


@dataclass(frozen=True)
class AssetPeriodCosts(_Breakdown):
    direct_equipment_cost: float = 0.0
    lang_factored_capital_cost: LangFactoredCostEstimate = field(default_factory=LangFactoredCostEstimate)
    total_installed_cost: float = 0.0
    fixed_opex_cost: FixedOpexCostEstimate = field(default_factory=FixedOpexCostEstimate)
    variable_opex_cost: VariableOpexCostEstimate = field(default_factory=VariableOpexCostEstimate)
    decommissioning_cost: float = 0.0

    def total(self) -> float:
        """
        Spend in the period: installed capital + fixed and variable opex +
        decommissioning. Direct equipment and Lang-factored costs are already
        part of total installed cost.
        """
        return (
            self.total_installed_cost
            + self.fixed_opex_cost.total()
            + self.variable_opex_cost.total()
            + self.decommissioning_cost
        )


@dataclass(frozen=True)
class YearAssetCosts:
    year: int
    costs_in_year: AssetPeriodCosts
    dcf_costs_in_year: AssetPeriodCosts


@dataclass(frozen=True)
class AssetCostEstimate:
    id: str
    costs: AssetCosts
    costs_by_year: List[YearAssetCosts]
    lifetime_costs: AssetPeriodCosts
    lifetime_dcf_costs: AssetPeriodCosts
    cost_items: List[CostItemCostEstimate]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class CostEstimate:
    assets: List[AssetCostEstimate]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# ------------------------------
# Errors
# ------------------------------
class CostEstimateError(Exception):
    """Base of every data error the engine reports back to a caller."""
    kind = "CostEstimateError"

    def payload(self) -> Dict[str, Any]:
        return {}

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.kind, **self.payload()}

    def __eq__(self, other: object) -> bool:
        return type(other) is type(self) and other.to_dict() == self.to_dict()

    __hash__ = Exception.__hash__


@dataclass(frozen=True)
class MissingProperty:
    id: str
    property: str


class MissingProperties(CostEstimateError):
    kind = "MissingProperties"

    def __init__(self, properties: Iterable[MissingProperty]):
        self.properties: List[MissingProperty] = list(properties)
        names = ", ".join(f"{p.id}.{p.property}" for p in self.properties)
        super().__init__(f"missing properties: {names}")

    def payload(self) -> Dict[str, Any]:
        return {"properties": [asdict(p) for p in self.properties]}


class UnknownCostItem(CostEstimateError):
    kind = "UnknownCostItem"

    def __init__(self, id: str):
        self.id = id
        super().__init__(f"cost item {id!r} references an unknown library item")

    def payload(self) -> Dict[str, Any]:
        return {"id": self.id}


class UnknownCurrencyConversion(CostEstimateError):
    kind = "UnknownCurrencyConversion"

    def __init__(self, currency: str):
        self.currency = currency
        super().__init__(f"no conversion rate for currency {currency!r}")

    def payload(self) -> Dict[str, Any]:
        return {"currency": self.currency}


class UnknownInflationFactor(CostEstimateError):
    kind = "UnknownInflationFactor"

    def __init__(self, year: str):
        self.year = year
        super().__init__(f"no inflation factor for year {year!r}")

    def payload(self) -> Dict[str, Any]:
        return {"year": self.year}


# Non-accumulating kinds, highest precedence first.
_OVERRIDING_KINDS = (UnknownCostItem, UnknownCurrencyConversion, UnknownInflationFactor)


def combine_errors(a: CostEstimateError, b: CostEstimateError) -> CostEstimateError:
    """
    Merge two errors into one.

    MissingProperties + MissingProperties concatenates the property lists.
    Any other pairing keeps a single error: the first kind, in the order
    UnknownCostItem, UnknownCurrencyConversion, UnknownInflationFactor, that
    appears on either side, taking `b` when both sides have that kind.
    Neither commutative nor associative across kinds.
    """
    if isinstance(a, MissingProperties) and isinstance(b, MissingProperties):
        return MissingProperties(a.properties + b.properties)
    for kind in _OVERRIDING_KINDS:
        if isinstance(b, kind):
            return b
        if isinstance(a, kind):
            return a
    raise TypeError(f"cannot combine {type(a).__name__} with {type(b).__name__}")


def combine_all(errors: Iterable[CostEstimateError]) -> CostEstimateError:
    """Left fold of combine_errors over a non-empty sequence."""
    return reduce(combine_errors, errors)


__all__ = [
    "add_optional",
    "LangFactoredCostEstimate",
    "FixedOpexCostEstimate",
    "VariableOpexCostEstimate",
    "CostItemCosts",
    "CostItemPeriodCosts",
    "YearCostItemCosts",
    "CostItemCostEstimate",
    "AssetCosts",
    "AssetPeriodCosts",
    "YearAssetCosts",
    "AssetCostEstimate",
    "CostEstimate",
    "CostEstimateError",
    "MissingProperty",
    "MissingProperties",
    "UnknownCostItem",
    "UnknownCurrencyConversion",
    "UnknownInflationFactor",
    "combine_errors",
    "combine_all",
]
