# costing_tool/estimate/request.py
from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from typing import Any, Dict, List, Mapping, Optional

from costing_tool.finance.dcf import in_range, range_length

Parameters = Dict[str, float]


@dataclass(frozen=True)
class YearRange:
    """Inclusive range of years. Inverted ranges are kept as given and are empty."""
    first: int
    last: int

    def __len__(self) -> int:
        return range_length(self.first, self.last)

    def __contains__(self, year: object) -> bool:
        return isinstance(year, int) and in_range(year, self.first, self.last)

    def years(self) -> List[int]:
        return list(range(self.first, self.last + 1))


@dataclass(frozen=True)
class Timeline:
    construction_start: int
    construction_finish: int
    operation_start: int
    operation_finish: int
    decommissioning_start: int
    decommissioning_finish: int

    @property
    def start(self) -> int:
        return self.construction_start

    @property
    def end(self) -> int:
        return self.decommissioning_finish

    def range(self) -> YearRange:
        return YearRange(self.start, self.end)

    def construction_range(self) -> YearRange:
        return YearRange(self.construction_start, self.construction_finish)

    def operation_range(self) -> YearRange:
        return YearRange(self.operation_start, self.operation_finish)

    def decommissioning_range(self) -> YearRange:
        return YearRange(self.decommissioning_start, self.decommissioning_finish)

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "Timeline":
        return cls(**{f.name: int(d[f.name]) for f in fields(cls)})


@dataclass(frozen=True)
class CapexLangFactors:
    """Multipliers of aggregate direct equipment cost, portion of CAPEX."""
    equipment_erection: float = 0.4
    piping: float = 0.7
    instrumentation: float = 0.2
    electrical: float = 0.1
    buildings_and_process: float = 0.15
    utilities: float = 0.5
    storages: float = 0.15
    site_development: float = 0.05
    ancillary_buildings: float = 0.15
    design_and_engineering: float = 0.3
    contractors_fee: float = 0.05
    contingency: float = 1.0

    @classmethod
    def from_dict(cls, d: Optional[Mapping[str, Any]]) -> "CapexLangFactors":
        d = d or {}
        return cls(**{f.name: float(d[f.name]) for f in fields(cls) if f.name in d})


@dataclass(frozen=True)
class FixedOpexFactors:
    """Multipliers of asset total installed cost, per operating year."""
    maintenance: float = 0.08
    control_room_facilities: float = 0.0
    insurance_liability: float = 0.0
    insurance_equipment_loss: float = 0.0
    cost_of_capital: float = 0.0
    major_turnarounds: float = 0.0

    @classmethod
    def from_dict(cls, d: Optional[Mapping[str, Any]]) -> "FixedOpexFactors":
        d = d or {}
        return cls(**{f.name: float(d[f.name]) for f in fields(cls) if f.name in d})


@dataclass(frozen=True)
class CostParameter:
    currency_code: str
    amount: float


@dataclass(frozen=True)
class CostItemParameters:
    id: str
    ref: str
    quantity: int
    parameters: Parameters = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "CostItemParameters":
        return cls(
            id=str(d["id"]),
            ref=str(d["ref"]),
            quantity=int(d.get("quantity", 1)),
            parameters={str(k): float(v) for k, v in (d.get("parameters") or {}).items()},
        )


@dataclass(frozen=True)
class AssetParameters:
    id: str
    timeline: Timeline
    discount_rate: float
    cost_items: List[CostItemParameters] = field(default_factory=list)
    capex_lang_factors: CapexLangFactors = field(default_factory=CapexLangFactors)
    opex_factors: FixedOpexFactors = field(default_factory=FixedOpexFactors)
    # Accepted for compatibility; not used by the calculation.
    labour_average_salary: Optional[CostParameter] = None
    fte_personnel: Optional[float] = None
    asset_uptime: Optional[float] = None

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "AssetParameters":
        salary = d.get("labour_average_salary")
        return cls(
            id=str(d["id"]),
            timeline=Timeline.from_dict(d["timeline"]),
            discount_rate=float(d["discount_rate"]),
            cost_items=[CostItemParameters.from_dict(c) for c in d.get("cost_items") or []],
            capex_lang_factors=CapexLangFactors.from_dict(d.get("capex_lang_factors")),
            opex_factors=FixedOpexFactors.from_dict(d.get("opex_factors")),
            labour_average_salary=(
                CostParameter(str(salary["currency_code"]), float(salary["amount"]))
                if salary else None
            ),
            fte_personnel=float(d["fte_personnel"]) if d.get("fte_personnel") is not None else None,
            asset_uptime=float(d["asset_uptime"]) if d.get("asset_uptime") is not None else None,
        )


@dataclass(frozen=True)
class CostEstimateRequest:
    assets: List[AssetParameters] = field(default_factory=list)

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "CostEstimateRequest":
        return cls(assets=[AssetParameters.from_dict(a) for a in d.get("assets") or []])

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


__all__ = [
    "Parameters",
    "YearRange",
    "Timeline",
    "CapexLangFactors",
    "FixedOpexFactors",
    "CostParameter",
    "CostItemParameters",
    "AssetParameters",
    "CostEstimateRequest",
]
