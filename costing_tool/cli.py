# costing_tool/cli.py
from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path

from .config import PACKAGE_DIR, default_library_id
from .library.registry import CostLibraryNotFound, LibraryRegistry
from .scenario_runner import run_dir

DEFAULT_REQUEST = PACKAGE_DIR / "inputs" / "requests" / "demo_request.yaml"


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="costing_tool",
        description="Capital and operating cost estimation CLI",
    )
    p.add_argument(
        "--request",
        required=False,
        default=None,
        help="Path to a YAML/JSON request, or a directory of requests to validate. Defaults to the packaged demo request.",
    )
    p.add_argument(
        "--library",
        default=None,
        help="Cost library id (default: $COSTING_LIBRARY_ID or 'demo').",
    )
    p.add_argument(
        "--library-dir",
        default=None,
        help="Directory of cost libraries (default: $COSTING_LIBRARY_DIR or the packaged data).",
    )
    p.add_argument(
        "--currency",
        default=None,
        help="Report costs in this currency (default: the library's base currency).",
    )
    p.add_argument(
        "--outputs-dir",
        default="outputs",
        help="Directory to write result files (default: outputs). Will be created if missing.",
    )
    p.add_argument(
        "--format",
        dest="fmt",
        default="csv",
        choices=["csv", "jsonl"],
        help="Output format for annual rows (default: csv).",
    )
    p.add_argument(
        "--save-annual",
        action="store_true",
        help="If set, write per-year rows alongside the summary.",
    )
    v = p.add_mutually_exclusive_group()
    v.add_argument("--strict", action="store_true", help="Enable strict validation (unknown keys raise).")
    v.add_argument("--relaxed", action="store_true", help="Enable relaxed validation.")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging.")
    q = p.add_mutually_exclusive_group()
    q.add_argument("--list-modules", action="store_true", help="Print the library's modules as JSON and exit.")
    q.add_argument("--list-currencies", action="store_true", help="Print the library's currency codes and exit.")
    return p.parse_args(argv)


def _apply_validation_mode(ns: argparse.Namespace) -> None:
    # Default: leave env as-is; flags override explicitly.
    if ns.strict:
        os.environ["VALIDATION_MODE"] = "strict"
    elif ns.relaxed:
        os.environ["VALIDATION_MODE"] = "relaxed"


def _list(registry: LibraryRegistry, library_id: str, ns: argparse.Namespace) -> int:
    try:
        if ns.list_modules:
            payload = [m.to_dict() for m in registry.list_modules(library_id)]
        else:
            payload = registry.list_currencies(library_id)
    except CostLibraryNotFound as e:
        print(json.dumps(e.to_dict()), file=sys.stderr)
        return 1
    print(json.dumps(payload, indent=2))
    return 0


def main(argv: list[str] | None = None) -> int:
    ns = _parse_args(argv)
    _apply_validation_mode(ns)
    logging.basicConfig(
        level=logging.DEBUG if ns.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        registry = LibraryRegistry.from_directory(Path(ns.library_dir) if ns.library_dir else None)
    except (OSError, ValueError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    library_id = ns.library or default_library_id()

    if ns.list_modules or ns.list_currencies:
        return _list(registry, library_id, ns)

    outputs_dir = Path(ns.outputs_dir).resolve()
    req_path = Path(ns.request).resolve() if ns.request else DEFAULT_REQUEST
    outputs_dir.mkdir(parents=True, exist_ok=True)

    try:
        result = run_dir(
            req_path,
            outputs_dir,
            library_id=library_id,
            currency=ns.currency,
            fmt=ns.fmt,
            save_annual=ns.save_annual,
            registry=registry,
        )
    except SystemExit as e:
        # Validation failures carry a message; report it and exit 2
        if isinstance(e.code, int):
            return e.code
        print(f"ERROR: {e.code}", file=sys.stderr)
        return 2
    except Exception as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    if result.exit_code:
        print(json.dumps(result.summary), file=sys.stderr)
        return result.exit_code
    print(str(result.summary_path))
    return 0


__all__ = ["main"]
