# costing_tool/library/model.py
"""
Reference library model: one immutable cost library version.

A library is loaded once from its serialized form (cost-library.json) and is
never mutated afterwards, so a single instance can back any number of
estimates at the same time.

Capital cost formulas are a tagged variant:
  - LinearCost(base_cost)
  - PolynomialCost(terms), each term a VariableTerm or a ConstantTerm
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union


class CostType(Enum):
    """Which capital category a reference item's formula contributes to."""
    DIRECT_EQUIPMENT_COST = "Direct Equipment Cost"
    TOTAL_INSTALLED_COST = "Total Installed Cost"

    @classmethod
    def parse(cls, raw: Optional[str]) -> "CostType":
        # An unset classifier means direct equipment cost.
        if raw is None or raw == "":
            return cls.DIRECT_EQUIPMENT_COST
        for member in cls:
            if raw == member.value or raw.upper().replace(" ", "_") == member.name:
                return member
        raise ValueError(f"unknown cost_type: {raw!r}")


# ------------------------------
# Capital cost formulas
# ------------------------------
@dataclass(frozen=True)
class LinearCost:
    base_cost: float

    def to_dict(self) -> Dict[str, Any]:
        return {"type": "Linear", "base_cost": self.base_cost}


@dataclass(frozen=True)
class VariableTerm:
    dimension_name: str
    coefficient: float
    exponent: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": "Variable",
            "dimension_name": self.dimension_name,
            "coefficient": self.coefficient,
            "exponent": self.exponent,
        }


@dataclass(frozen=True)
class ConstantTerm:
    value: float

    def to_dict(self) -> Dict[str, Any]:
        return {"type": "Constant", "value": self.value}


PolynomialTerm = Union[VariableTerm, ConstantTerm]


@dataclass(frozen=True)
class PolynomialCost:
    terms: Tuple[PolynomialTerm, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {"type": "Polynomial", "parameters": [t.to_dict() for t in self.terms]}


Cost = Union[LinearCost, PolynomialCost]


def _parse_term(d: Mapping[str, Any]) -> PolynomialTerm:
    kind = d.get("type")
    if kind == "Variable":
        return VariableTerm(
            dimension_name=str(d["dimension_name"]),
            coefficient=float(d["coefficient"]),
            exponent=float(d["exponent"]),
        )
    if kind == "Constant":
        return ConstantTerm(value=float(d["value"]))
    raise ValueError(f"unknown polynomial term type: {kind!r}")


def parse_cost(d: Mapping[str, Any]) -> Cost:
    kind = d.get("type")
    if kind == "Linear":
        return LinearCost(base_cost=float(d["base_cost"]))
    if kind == "Polynomial":
        return PolynomialCost(terms=tuple(_parse_term(t) for t in d.get("parameters") or []))
    raise ValueError(f"unknown cost type tag: {kind!r}")


# ------------------------------
# Reference items
# ------------------------------
@dataclass(frozen=True)
class ScalingFactor:
    name: str
    units: str
    source_value: float


@dataclass(frozen=True)
class CapexContribution:
    year: int
    currency: str
    cost: Cost


@dataclass(frozen=True)
class VariableOpexContribution:
    name: str
    scaled_by: float
    units: str = ""


@dataclass(frozen=True)
class CostItemInfo:
    cost_type: CostType = CostType.DIRECT_EQUIPMENT_COST
    short_name: str = ""
    description: str = ""
    item_type: str = ""


@dataclass(frozen=True)
class CostReferenceItem:
    id: str
    capex_contribution: CapexContribution
    scaling_factors: Tuple[ScalingFactor, ...] = ()
    variable_opex_contributions: Tuple[VariableOpexContribution, ...] = ()
    info: CostItemInfo = field(default_factory=CostItemInfo)

    @property
    def cost_type(self) -> CostType:
        return self.info.cost_type

    def required_parameters(self) -> frozenset:
        """Every parameter name a request must supply for this item."""
        names = [f.name for f in self.scaling_factors]
        names += [c.name for c in self.variable_opex_contributions]
        return frozenset(names)

    def variable_opex_contribution(self, name: str) -> Optional[VariableOpexContribution]:
        for contribution in self.variable_opex_contributions:
            if contribution.name == name:
                return contribution
        return None

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "CostReferenceItem":
        info = d.get("info") or {}
        capex = d["capex_contribution"]
        return cls(
            id=str(d["id"]),
            info=CostItemInfo(
                cost_type=CostType.parse(info.get("cost_type")),
                short_name=str(info.get("short_name") or ""),
                description=str(info.get("description") or ""),
                item_type=str(info.get("item_type") or ""),
            ),
            scaling_factors=tuple(
                ScalingFactor(
                    name=str(f["name"]),
                    units=str(f.get("units") or ""),
                    source_value=float(f["source_value"]),
                )
                for f in d.get("scaling_factors") or []
            ),
            capex_contribution=CapexContribution(
                year=int(capex["year"]),
                currency=str(capex["currency"]),
                cost=parse_cost(capex["cost"]),
            ),
            variable_opex_contributions=tuple(
                VariableOpexContribution(
                    name=str(c["name"]),
                    units=str(c.get("units") or ""),
                    scaled_by=float(c.get("scaled_by", 1.0)),
                )
                for c in d.get("variable_opex_contributions") or []
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Inverse of from_dict, in the cost-library.json form."""
        return {
            "id": self.id,
            "info": {
                "cost_type": self.info.cost_type.value,
                "short_name": self.info.short_name,
                "description": self.info.description,
                "item_type": self.info.item_type,
            },
            "scaling_factors": [
                {"name": f.name, "units": f.units, "source_value": f.source_value}
                for f in self.scaling_factors
            ],
            "capex_contribution": {
                "year": self.capex_contribution.year,
                "currency": self.capex_contribution.currency,
                "cost": self.capex_contribution.cost.to_dict(),
            },
            "variable_opex_contributions": [
                {"name": c.name, "units": c.units, "scaled_by": c.scaled_by}
                for c in self.variable_opex_contributions
            ],
        }


@dataclass(frozen=True)
class CostModule:
    id: str
    cost_items: Tuple[CostReferenceItem, ...] = ()
    subtype: Optional[str] = None
    definition: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "CostModule":
        return cls(
            id=str(d["id"]),
            subtype=d.get("subtype"),
            definition=dict(d.get("definition") or {}),
            cost_items=tuple(CostReferenceItem.from_dict(i) for i in d.get("cost_items") or []),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "subtype": self.subtype,
            "definition": dict(self.definition),
            "cost_items": [item.to_dict() for item in self.cost_items],
        }


# ------------------------------
# Rate tables
# ------------------------------
@dataclass(frozen=True)
class CurrencyConversion:
    base_currency: str
    rates: Mapping[str, float]

    def rate(self, currency: str) -> Optional[float]:
        return self.rates.get(currency)


@dataclass(frozen=True)
class Inflation:
    factors: Mapping[str, float]
    current_year: Optional[str] = None

    def factor(self, year: str) -> Optional[float]:
        return self.factors.get(year)


@dataclass(frozen=True)
class CostLibrary:
    modules: Tuple[CostModule, ...]
    currency_conversion: CurrencyConversion
    inflation: Inflation
    name: str = ""

    def items_by_id(self) -> Dict[str, CostReferenceItem]:
        """id -> reference item over every module of the library."""
        return {item.id: item for module in self.modules for item in module.cost_items}

    def currencies(self) -> List[str]:
        return list(self.currency_conversion.rates.keys())

    @classmethod
    def from_dict(cls, d: Mapping[str, Any], *, name: str = "") -> "CostLibrary":
        cc = d.get("currency_conversion") or {}
        infl = d.get("inflation") or {}
        current_year = infl.get("current_year")
        return cls(
            name=name,
            modules=tuple(CostModule.from_dict(m) for m in d.get("modules") or []),
            currency_conversion=CurrencyConversion(
                base_currency=str(cc.get("base_currency", "")),
                rates={str(k): float(v) for k, v in (cc.get("rates") or {}).items()},
            ),
            inflation=Inflation(
                current_year=str(current_year) if current_year is not None else None,
                factors={str(k): float(v) for k, v in (infl.get("factors") or {}).items()},
            ),
        )


__all__ = [
    "CostType",
    "LinearCost",
    "PolynomialCost",
    "VariableTerm",
    "ConstantTerm",
    "Cost",
    "parse_cost",
    "ScalingFactor",
    "CapexContribution",
    "VariableOpexContribution",
    "CostItemInfo",
    "CostReferenceItem",
    "CostModule",
    "CurrencyConversion",
    "Inflation",
    "CostLibrary",
]
