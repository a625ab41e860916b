from __future__ import annotations
import json, os, subprocess, sys
from pathlib import Path

ROOT     = Path(__file__).resolve().parents[1]
REQUEST  = ROOT / "costing_tool" / "inputs" / "requests" / "demo_request.yaml"
OUTDIR   = ROOT / "_out_golden_baseline"
BASELINE = ROOT / "tests" / "golden" / "summary.json"
FROZEN_KEYS = (
    "direct_equipment_cost",
    "total_installed_cost",
    "decommissioning_cost",
    "lifetime_total",
    "lifetime_dcf_total",
    "npv",
)


def main(argv: list[str] | None = None) -> int:
    # Assets to freeze; default keeps the baseline to the hand-checked asset
    assets = (argv if argv is not None else sys.argv[1:]) or ["a1"]
    if not REQUEST.exists():
        print(f"[x] Missing request: {REQUEST}", file=sys.stderr)
        return 2

    OUTDIR.mkdir(parents=True, exist_ok=True)
    env = os.environ.copy()
    env["VALIDATION_MODE"] = "relaxed"
    env.pop("COSTING_LIBRARY_DIR", None)

    cmd = [
        sys.executable, "-m", "costing_tool",
        "--request", str(REQUEST),
        "--library", "demo",
        "--outputs-dir", str(OUTDIR),
        "--format", "csv",
    ]
    subprocess.run(cmd, check=True, env=env, cwd=ROOT)

    sj = OUTDIR / "summary.json"
    if not sj.exists():
        print("[x] summary.json not produced; check CLI/run_dir", file=sys.stderr)
        return 3

    data = json.loads(sj.read_text(encoding="utf-8")).get("assets", {})
    # Ensure we only store known keys to keep the baseline slim & stable
    minimal = {}
    for asset_id in assets:
        got = data.get(asset_id, {})
        missing = set(FROZEN_KEYS) - set(got)
        if missing:
            print(f"[x] summary.json asset {asset_id!r} missing keys {missing}", file=sys.stderr)
            return 4
        minimal[asset_id] = {k: float(got[k]) for k in FROZEN_KEYS}

    BASELINE.parent.mkdir(parents=True, exist_ok=True)
    BASELINE.write_text(json.dumps({"assets": minimal}, indent=2, sort_keys=True) + "\n", encoding="utf-8")
    print(f"[ok] Wrote baseline {BASELINE}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
