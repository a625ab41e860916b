import importlib
import inspect
from pathlib import Path


def _param_names(fn):
    return [p.name for p in inspect.signature(fn).parameters.values()]


def test_finance_dcf_public_api_is_stable():
    """Lock down that discounting / NPV live in finance.dcf with stable entrypoints."""
    m = importlib.import_module("costing_tool.finance.dcf")
    for name in ("discount_factor", "discount_divisor", "discount_divisors", "npv", "range_length"):
        assert callable(getattr(m, name, None)), f"Missing or non-callable export: {name}"
    assert _param_names(m.npv)[:2] == ["rate", "cashflows"]

    # Guard against import creep in the thin math module.
    src = Path(m.__file__).read_text(encoding="utf-8")
    for forbidden in ("from costing_tool", "import costing_tool"):
        assert forbidden not in src, f"Unexpected dependency '{forbidden}' inside finance/dcf.py"


def test_estimator_entrypoint_is_stable():
    e = importlib.import_module("costing_tool.estimate.estimator")
    assert _param_names(e.estimate_cost) == ["cost_library", "assets", "options"]
    assert _param_names(e.EstimateOptions) == ["target_currency"]


def test_error_kinds_are_stable():
    r = importlib.import_module("costing_tool.estimate.response")
    kinds = {cls.kind for cls in (r.MissingProperties, r.UnknownCostItem, r.UnknownCurrencyConversion, r.UnknownInflationFactor)}
    assert kinds == {"MissingProperties", "UnknownCostItem", "UnknownCurrencyConversion", "UnknownInflationFactor"}
    assert _param_names(r.combine_errors) == ["a", "b"]


def test_validate_exports_are_stable():
    """validate module must expose these helpers (names kept stable)."""
    v = importlib.import_module("costing_tool.validate")
    for name in ("validate_request_dict", "load_request_from_file", "mode_from_env_or_flag"):
        obj = getattr(v, name, None)
        assert callable(obj), f"Missing or non-callable export: {name}"


def test_registry_exports_are_stable():
    reg = importlib.import_module("costing_tool.library.registry")
    for name in ("from_directory", "get", "list_modules", "list_currencies", "estimate"):
        assert callable(getattr(reg.LibraryRegistry, name, None)), f"LibraryRegistry.{name} missing"


def test_scenario_runner_run_dir_api_minimal(tmp_path, base_asset_dict, monkeypatch):
    """run_dir must accept (cfg_path, out_dir, ...) and return a summary-like object."""
    import yaml

    monkeypatch.delenv("VALIDATION_MODE", raising=False)
    monkeypatch.delenv("COSTING_LIBRARY_DIR", raising=False)
    r = importlib.import_module("costing_tool.scenario_runner")
    assert hasattr(r, "run_dir") and callable(r.run_dir)

    cfg = tmp_path / "cfg.yaml"
    cfg.write_text(yaml.safe_dump({"assets": [base_asset_dict]}), encoding="utf-8")
    out = tmp_path / "o"

    res = r.run_dir(cfg, out, library_id="demo", fmt="csv", save_annual=True)
    assert res.exit_code == 0
    assert res.summary_path == out / "summary.json"
    assert res.results_path is not None and res.results_path.suffix == ".csv"
    assert set(res.summary["assets"]["a1"]) >= {"direct_equipment_cost", "total_installed_cost", "npv"}
