# costing_tool/validate.py
from __future__ import annotations
import os, sys
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping

from .config import load_document
from .schema import (
    ASSET_SCHEMA,
    COST_ITEM_SCHEMA,
    LANG_FACTOR_SCHEMA,
    OPEX_FACTOR_SCHEMA,
    TIMELINE_CONSTRAINTS,
    TIMELINE_KEYS,
)

ASSET_REQUIRED_STRICT = ("id", "timeline", "discount_rate", "cost_items", "capex_lang_factors", "opex_factors")
ASSET_REQUIRED_RELAXED = ("id", "timeline", "discount_rate")
ASSET_ALLOWED = set(ASSET_REQUIRED_STRICT) | {"labour_average_salary", "fte_personnel", "asset_uptime"}
COST_ITEM_REQUIRED = ("id", "ref", "quantity", "parameters")


def mode_from_env_or_flag(flag: str | None) -> str:
    if flag in ("strict", "relaxed"):
        return flag
    env = (os.environ.get("VALIDATION_MODE") or "").lower()
    return env if env in ("strict", "relaxed") else "relaxed"


def _check_bounds(where: str, data: Mapping[str, Any], schema: Mapping[str, Mapping[str, Any]]) -> None:
    for k, bounds in schema.items():
        if k not in data or data[k] is None:
            continue
        try:
            v = float(data[k])
        except (TypeError, ValueError):
            raise SystemExit(f"{where}.{k} must be a number, got {data[k]!r}")
        lo = float(bounds.get("min", float("-inf")))
        hi = float(bounds.get("max", float("inf")))
        if not (lo <= v <= hi):
            raise SystemExit(f"{where}.{k} outside allowed range [{lo}, {hi}]: {v}")


def _validate_timeline(where: str, t: Any, *, mode: str) -> None:
    if not isinstance(t, dict):
        raise SystemExit(f"{where}.timeline must be a mapping")
    missing = [k for k in TIMELINE_KEYS if k not in t]
    if missing:
        raise SystemExit(f"{where}.timeline missing required keys: {missing}")
    for k in TIMELINE_KEYS:
        if not isinstance(t[k], int) or isinstance(t[k], bool):
            raise SystemExit(f"{where}.timeline.{k} must be an integer year, got {t[k]!r}")
    # The engine uses ranges as given; ordering is only enforced in strict mode.
    if mode == "strict":
        for c in TIMELINE_CONSTRAINTS:
            if not c["check"](t):
                raise SystemExit(f"{where}.timeline: {c['message']}")


def _validate_cost_item(where: str, item: Any) -> None:
    if not isinstance(item, dict):
        raise SystemExit(f"{where} must be a mapping")
    missing = [k for k in COST_ITEM_REQUIRED if k not in item]
    if missing:
        raise SystemExit(f"{where} missing required keys: {missing}")
    q = item["quantity"]
    if not isinstance(q, int) or isinstance(q, bool):
        raise SystemExit(f"{where}.quantity must be a whole number, got {q!r}")
    _check_bounds(where, item, COST_ITEM_SCHEMA)
    params = item["parameters"]
    if not isinstance(params, dict):
        raise SystemExit(f"{where}.parameters must be a mapping of name -> number")
    for name, value in params.items():
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise SystemExit(f"{where}.parameters[{name!r}] must be a number, got {value!r}")


def validate_asset_dict(asset: Any, *, index: int = 0, mode: str = "relaxed") -> None:
    where = f"assets[{index}]"
    if not isinstance(asset, dict):
        raise SystemExit(f"{where} must be a mapping")
    required = ASSET_REQUIRED_STRICT if mode == "strict" else ASSET_REQUIRED_RELAXED
    missing = [k for k in required if k not in asset]
    if missing:
        raise SystemExit(f"{where} missing required keys: {missing}")
    where = f"assets[{asset['id']!r}]"

    if mode == "strict":
        unknown = [k for k in asset.keys() if k not in ASSET_ALLOWED]
        if unknown:
            raise SystemExit(f"{where}: unknown keys (strict mode): {unknown}")

    _validate_timeline(where, asset["timeline"], mode=mode)
    _check_bounds(where, asset, ASSET_SCHEMA)

    for key, schema in (("capex_lang_factors", LANG_FACTOR_SCHEMA), ("opex_factors", OPEX_FACTOR_SCHEMA)):
        factors = asset.get(key)
        if factors is None:
            continue
        if not isinstance(factors, dict):
            raise SystemExit(f"{where}.{key} must be a mapping")
        if mode == "strict":
            unknown = [k for k in factors if k not in schema]
            if unknown:
                raise SystemExit(f"{where}.{key}: unknown keys (strict mode): {unknown}")
        _check_bounds(f"{where}.{key}", factors, schema)

    items = asset.get("cost_items") or []
    if not isinstance(items, list):
        raise SystemExit(f"{where}.cost_items must be a list")
    ids = set()
    for i, item in enumerate(items):
        _validate_cost_item(f"{where}.cost_items[{i}]", item)
        if item["id"] in ids and mode == "strict":
            raise SystemExit(f"{where}: duplicate cost item id {item['id']!r}")
        ids.add(item["id"])


def validate_request_dict(data: Dict[str, Any], *, mode: str = "relaxed") -> None:
    """
    Request shape guardrails (raise SystemExit with a message):
      - relaxed: require {assets}; each asset needs id, discount_rate and a complete integer timeline
      - both   : asset ids are unique
      - strict : every asset field, known keys only, ordered non-inverted timelines
    Library-dependent checks (unknown refs, missing parameters) belong to the engine.
    """
    if "assets" not in data:
        raise SystemExit("missing required keys: ['assets']")
    if mode == "strict":
        unknown = [k for k in data.keys() if k not in ("assets",)]
        if unknown:
            raise SystemExit(f"unknown top-level keys (strict mode): {unknown}")
    assets = data["assets"]
    if not isinstance(assets, list):
        raise SystemExit("assets must be a list")
    seen = set()
    for i, asset in enumerate(assets):
        validate_asset_dict(asset, index=i, mode=mode)
        # the summary is keyed by asset id
        if asset["id"] in seen:
            raise SystemExit(f"assets[{i}]: duplicate asset id {asset['id']!r}")
        seen.add(asset["id"])


def load_request_from_file(path: Path) -> Dict[str, Any]:
    p = Path(path)
    if p.is_dir():
        # scenario_runner handles directories; keep this function file-only
        raise SystemExit(f"{p} is a directory (expected a file)")
    return load_document(p)


def _iter_input_files(p: Path) -> Iterable[Path]:
    if p.is_file():
        yield p
    elif p.is_dir():
        for ext in ("*.yaml", "*.yml", "*.json"):
            yield from sorted(p.rglob(ext))


def _main(argv: List[str] | None = None) -> int:
    import argparse
    parser = argparse.ArgumentParser(prog="costing_tool.validate", add_help=True)
    parser.add_argument("paths", nargs="+", help="YAML/JSON request files or directories to validate")
    parser.add_argument("--mode", choices=["strict", "relaxed"], default=None, help="validation mode")
    args = parser.parse_args(argv)

    mode = mode_from_env_or_flag(args.mode)
    had_error = False

    for raw in args.paths:
        target = Path(raw)
        any_seen = False
        for f in _iter_input_files(target):
            if not f.is_file():
                continue
            any_seen = True
            try:
                data = load_request_from_file(f)
                validate_request_dict(data, mode=mode)
                print(f"OK: {f}")
            except SystemExit as e:
                print(f"{f}: {e}", file=sys.stderr)
                had_error = True
            except ValueError as e:
                print(f"{f}: ERROR: {e}", file=sys.stderr)
                had_error = True
        if not any_seen:
            print(f"{target}: no YAML/JSON files found", file=sys.stderr)
            had_error = True

    return 1 if had_error else 0


if __name__ == "__main__":
    raise SystemExit(_main())
