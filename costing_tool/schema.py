from __future__ import annotations
from dataclasses import fields
from typing import Dict, Any

from costing_tool.estimate.request import CapexLangFactors, FixedOpexFactors, Timeline

# Asset scalar schema: units, type, min/max ranges, and description.
ASSET_SCHEMA: Dict[str, Dict[str, Any]] = {
    "discount_rate":  {"unit": "fraction", "type": "float", "min": 0.0, "max": 1.0,   "desc": "DCF discount rate per year"},
    "fte_personnel":  {"unit": "FTE",      "type": "float", "min": 0.0, "max": 1e4,   "desc": "Operations and maintenance personnel"},
    "asset_uptime":   {"unit": "fraction", "type": "float", "min": 0.0, "max": 1.0,   "desc": "Asset uptime"},
}

COST_ITEM_SCHEMA: Dict[str, Dict[str, Any]] = {
    "quantity":       {"unit": "count",    "type": "int",   "min": 0,   "max": 1e6,   "desc": "Multiplier on every cost of the item"},
}

# Lang factors: portion of aggregate direct equipment cost.
LANG_FACTOR_SCHEMA: Dict[str, Dict[str, Any]] = {
    f.name: {"unit": "fraction", "type": "float", "min": 0.0, "max": 10.0, "default": f.default,
             "desc": f"{f.name.replace('_', ' ').capitalize()}, portion of CAPEX"}
    for f in fields(CapexLangFactors)
}

# Fixed opex factors: portion of total installed cost, per operating year.
OPEX_FACTOR_SCHEMA: Dict[str, Dict[str, Any]] = {
    f.name: {"unit": "fraction", "type": "float", "min": 0.0, "max": 10.0, "default": f.default,
             "desc": f"{f.name.replace('_', ' ').capitalize()}, portion of total installed cost"}
    for f in fields(FixedOpexFactors)
}

TIMELINE_KEYS = tuple(f.name for f in fields(Timeline))

# Composite timeline constraints evaluated after scalar checks (strict mode only).
TIMELINE_CONSTRAINTS = [
    {
        "name": "construction_not_inverted",
        "check": lambda t: t["construction_start"] <= t["construction_finish"],
        "message": "construction_start must not be after construction_finish",
    },
    {
        "name": "operation_not_inverted",
        "check": lambda t: t["operation_start"] <= t["operation_finish"],
        "message": "operation_start must not be after operation_finish",
    },
    {
        "name": "decommissioning_not_inverted",
        "check": lambda t: t["decommissioning_start"] <= t["decommissioning_finish"],
        "message": "decommissioning_start must not be after decommissioning_finish",
    },
    {
        "name": "construction_before_operation",
        "check": lambda t: t["construction_finish"] < t["operation_start"],
        "message": "construction must finish before operation starts",
    },
    {
        "name": "operation_before_decommissioning",
        "check": lambda t: t["operation_finish"] < t["decommissioning_start"],
        "message": "operation must finish before decommissioning starts",
    },
]
