# costing_tool/scenario_runner.py
from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Any, List, Optional
from datetime import datetime
import csv
import json
import logging

from .config import default_library_id
from .estimate.estimator import EstimateOptions
from .estimate.request import CostEstimateRequest
from .estimate.response import CostEstimateError
from .library.registry import CostLibraryNotFound, LibraryRegistry
from .tables import annual_records, summarise
from .validate import (
    load_request_from_file,
    mode_from_env_or_flag,
    validate_request_dict,
)

logger = logging.getLogger(__name__)

# Exit code when the engine rejects a request (unknown item, missing parameter, ...)
ESTIMATE_ERROR_EXIT = 3


@dataclass
class RunResult:
    summary: Dict[str, Any]
    summary_path: Path
    results_path: Optional[Path] = None
    exit_code: int = 0


def _write_jsonl(path: Path, rows: List[Dict[str, Any]]) -> None:
    with path.open("w", encoding="utf-8") as f:
        for row in rows:
            f.write(json.dumps(row) + "\n")


def _write_csv(path: Path, rows: List[Dict[str, Any]]) -> None:
    if not rows:
        path.write_text("", encoding="utf-8")
        return
    hdr = list(rows[0].keys())
    with path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=hdr)
        w.writeheader()
        w.writerows(rows)


def _write_error(out: Path, err: Dict[str, Any]) -> Path:
    path = out / "error.json"
    path.write_text(json.dumps(err, indent=2), encoding="utf-8")
    return path


def run_dir(
    config: str | Path,
    out_dir: str | Path,
    *,
    library_id: Optional[str] = None,
    currency: Optional[str] = None,
    fmt: str = "jsonl",
    save_annual: bool = False,
    mode: Optional[str] = None,
    registry: Optional[LibraryRegistry] = None,
    **kwargs,
) -> RunResult:
    """
    Validate and estimate a request file, or validate every request in a directory.

    Single file: writes summary.json (and the annual rows when save_annual),
    or error.json with exit_code 3 when the engine rejects the request.
    Validation failures raise SystemExit with the offending key in the message.
    """
    # accept legacy alias
    if "format" in kwargs and not kwargs.get("fmt"):
        fmt = kwargs.pop("format")
    if fmt not in ("jsonl", "csv"):
        raise SystemExit(f"unknown fmt: {fmt}")

    mode = mode_from_env_or_flag(mode)
    cfg_path = Path(config)
    out = Path(out_dir)
    out.mkdir(parents=True, exist_ok=True)

    # Directory mode: validate each request file; raise on violations.
    if cfg_path.is_dir():
        checked = []
        for f in sorted(list(cfg_path.glob("*.y*ml")) + list(cfg_path.glob("*.json"))):
            if not f.is_file():
                continue
            validate_request_dict(load_request_from_file(f), mode=mode)
            checked.append(f.name)
        if not checked:
            raise ValueError(f"{cfg_path}: no request files found")
        logger.info("validated %d request file(s) in %s", len(checked), cfg_path)
        return RunResult(summary={"validated": True, "files": checked}, summary_path=out / "summary.json")

    data = load_request_from_file(cfg_path)
    validate_request_dict(data, mode=mode)
    request = CostEstimateRequest.from_dict(data)

    registry = registry or LibraryRegistry.from_directory()
    library_id = library_id or default_library_id()
    options = EstimateOptions(target_currency=currency)

    try:
        library = registry.get(library_id)
        estimate = registry.estimate(library_id, request, options)
    except (CostEstimateError, CostLibraryNotFound) as e:
        logger.warning("estimate rejected: %s", e)
        err_path = _write_error(out, e.to_dict())
        return RunResult(summary=e.to_dict(), summary_path=err_path, exit_code=ESTIMATE_ERROR_EXIT)

    summary = summarise(
        estimate,
        request,
        library_id=library_id,
        currency=currency or library.currency_conversion.base_currency,
    )
    summary_path = out / "summary.json"
    summary_path.write_text(json.dumps(summary, indent=2), encoding="utf-8")
    logger.info("wrote %s (%d asset(s))", summary_path, len(estimate.assets))

    results_path: Optional[Path] = None
    if save_annual:
        stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        base = f"{cfg_path.stem}_annual_{stamp}"
        rows = annual_records(estimate)
        if fmt == "jsonl":
            results_path = out / f"{base}.jsonl"
            _write_jsonl(results_path, rows)
        else:
            results_path = out / f"{base}.csv"
            _write_csv(results_path, rows)

    return RunResult(summary=summary, summary_path=summary_path, results_path=results_path)


__all__ = ["ESTIMATE_ERROR_EXIT", "RunResult", "run_dir"]
