import json

import pytest
import yaml

from costing_tool.estimate.request import CostEstimateRequest
from costing_tool.library.model import CostType
from costing_tool.library.registry import CostLibraryNotFound, LibraryRegistry


@pytest.fixture
def demo_registry(monkeypatch):
    monkeypatch.delenv("COSTING_LIBRARY_DIR", raising=False)
    return LibraryRegistry.from_directory()


def test_packaged_demo_library_loads(demo_registry):
    assert "demo" in demo_registry
    assert demo_registry.ids() == ["demo"]
    assert demo_registry.list_currencies("demo") == ["GBP", "EUR", "USD", "NOK"]
    assert [m.id for m in demo_registry.list_modules("demo")] == ["M0101", "M0102", "M0201", "M0301"]


def test_demo_cost_types(demo_registry):
    items = demo_registry.get("demo").items_by_id()
    assert items["Item 001"].cost_type is CostType.DIRECT_EQUIPMENT_COST
    assert items["Item 020"].cost_type is CostType.TOTAL_INSTALLED_COST


def test_unknown_library(demo_registry):
    with pytest.raises(CostLibraryNotFound) as ei:
        demo_registry.get("V9.9")
    assert ei.value.to_dict() == {"type": "CostLibraryNotFound", "library_id": "V9.9"}
    with pytest.raises(CostLibraryNotFound):
        demo_registry.list_currencies("V9.9")


def test_estimate_by_library_id(demo_registry, base_request):
    est = demo_registry.estimate("demo", base_request)
    assert est.assets[0].costs.total_installed_cost == pytest.approx(450.0)


def test_from_directory_reads_yaml_and_json(tmp_path, make_item, make_library_dict):
    library_dict = make_library_dict
    (tmp_path / "V1.1").mkdir()
    (tmp_path / "V1.1" / "cost-library.yaml").write_text(
        yaml.safe_dump(library_dict([make_item()])), encoding="utf-8"
    )
    (tmp_path / "V2.0").mkdir()
    (tmp_path / "V2.0" / "cost-library.json").write_text(
        json.dumps(library_dict([make_item("Item 002")], rates={"GBP": 1.0, "USD": 0.8})), encoding="utf-8"
    )
    (tmp_path / "empty").mkdir()

    reg = LibraryRegistry.from_directory(tmp_path)
    assert reg.ids() == ["V1.1", "V2.0"]
    assert reg.get("V2.0").name == "V2.0"
    assert list(reg.get("V2.0").items_by_id()) == ["Item 002"]
    assert reg.list_currencies("V2.0") == ["GBP", "USD"]


def test_env_overrides_library_dir(tmp_path, monkeypatch):
    monkeypatch.setenv("COSTING_LIBRARY_DIR", str(tmp_path))
    assert LibraryRegistry.from_directory().ids() == []


def test_missing_directory(tmp_path):
    with pytest.raises(FileNotFoundError):
        LibraryRegistry.from_directory(tmp_path / "nope")


def test_request_round_trip_from_yaml(demo_registry):
    from costing_tool.cli import DEFAULT_REQUEST
    from costing_tool.config import load_document

    req = CostEstimateRequest.from_dict(load_document(DEFAULT_REQUEST))
    assert [a.id for a in req.assets] == ["a1", "a2"]
    assert req.assets[1].labour_average_salary.amount == 55000.0
    est = demo_registry.estimate("demo", req)
    assert len(est.assets) == 2


def test_module_listing_round_trips(demo_registry):
    from costing_tool.library.model import CostModule, PolynomialCost

    modules = demo_registry.list_modules("demo")
    assert any(isinstance(i.capex_contribution.cost, PolynomialCost) for m in modules for i in m.cost_items)
    for m in modules:
        d = json.loads(json.dumps(m.to_dict()))
        assert CostModule.from_dict(d) == m


def test_module_listing_names_required_parameters(demo_registry):
    m = demo_registry.list_modules("demo")[0]
    item = m.to_dict()["cost_items"][0]
    listed = {f["name"] for f in item["scaling_factors"]} | {c["name"] for c in item["variable_opex_contributions"]}
    assert listed == set(m.cost_items[0].required_parameters())
    assert item["info"]["cost_type"] == "Direct Equipment Cost"
