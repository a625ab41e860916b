import pytest

from costing_tool.estimate import calculator
from costing_tool.estimate.calculator import CalculationContext, UTILITY_UNIT_COST, STORAGE_TARIFF_UNIT_COST
from costing_tool.estimate.response import UnknownCurrencyConversion, UnknownInflationFactor

CTX = CalculationContext()
HOURS = 24 * 365 * 0.95


def _item(library, id="Item 001"):
    return library.items_by_id()[id]


def test_linear_cost_scales_with_each_factor_ratio(base_library):
    item = _item(base_library)
    base = calculator.capex_cost(base_library, item, {"length": 100.0, "depth": 30.0}, CTX)
    assert base == pytest.approx(120.0)
    doubled = calculator.capex_cost(base_library, item, {"length": 200.0, "depth": 30.0}, CTX)
    assert doubled == pytest.approx(2 * base)


def test_linear_cost_without_scaling_factors_is_base_cost(make_library, make_item):
    lib = make_library([make_item(scaling=())])
    assert calculator.capex_cost(lib, _item(lib), {}, CTX) == pytest.approx(100.0)


def test_polynomial_is_coefficient_times_value_times_exponent(make_library, make_item):
    cost = {
        "type": "Polynomial",
        "parameters": [
            {"type": "Constant", "value": 10.0},
            {"type": "Variable", "dimension_name": "duty", "coefficient": 2.0, "exponent": 3.0},
        ],
    }
    lib = make_library([make_item(cost=cost, scaling=(("duty", 1.0),))])
    # 10 + 2 * 5 * 3, not 10 + 2 * 5 ** 3
    assert calculator.capex_cost(lib, _item(lib), {"duty": 5.0}, CTX) == pytest.approx(40.0)


def test_source_currency_rate_applies(make_library, make_item):
    lib = make_library([make_item(currency="EUR")])
    assert calculator.capex_cost(lib, _item(lib), {"length": 100.0, "depth": 30.0}, CTX) == pytest.approx(360.0)


def test_target_currency_rate_applies(make_library, make_item):
    lib = make_library([make_item(currency="EUR")])
    ctx = CalculationContext(target_currency_rate=1.0 / 3.0)
    assert calculator.capex_cost(lib, _item(lib), {"length": 100.0, "depth": 30.0}, ctx) == pytest.approx(120.0)


def test_inflation_by_contribution_year(make_library, make_item):
    lib = make_library([make_item(year=2023)], factors={"2023": 1.5, "2024": 1.0})
    assert calculator.capex_cost(lib, _item(lib), {"length": 100.0, "depth": 30.0}, CTX) == pytest.approx(180.0)


def test_unknown_currency_raises(make_library, make_item):
    lib = make_library([make_item(currency="JPY")])
    with pytest.raises(UnknownCurrencyConversion) as ei:
        calculator.capex_cost(lib, _item(lib), {"length": 100.0, "depth": 30.0}, CTX)
    assert ei.value.currency == "JPY"


def test_unknown_inflation_year_raises(make_library, make_item):
    lib = make_library([make_item(year=2019)])
    with pytest.raises(UnknownInflationFactor) as ei:
        calculator.capex_cost(lib, _item(lib), {"length": 100.0, "depth": 30.0}, CTX)
    assert ei.value.year == "2019"


def test_cost_type_gates_direct_and_installed(make_library, make_item):
    lib = make_library([
        make_item("dec"),
        make_item("tic", cost_type="Total Installed Cost"),
    ])
    params = {"length": 50.0, "depth": 50.0}
    dec, tic = _item(lib, "dec"), _item(lib, "tic")
    assert calculator.direct_equipment_cost(lib, dec, params, CTX) == pytest.approx(100.0)
    assert calculator.total_installed_cost(lib, dec, params, CTX) is None
    assert calculator.direct_equipment_cost(lib, tic, params, CTX) is None
    assert calculator.total_installed_cost(lib, tic, params, CTX) == pytest.approx(100.0)


def test_unit_costs():
    assert UTILITY_UNIT_COST == pytest.approx(0.4 * HOURS)
    assert STORAGE_TARIFF_UNIT_COST == pytest.approx(20 * HOURS)


def test_variable_opex_per_category(make_library, make_item):
    lib = make_library([make_item(
        scaling=(),
        currency="EUR",
        opex=(("Electrical power", 0.5), ("Tariff paid to storage reservoir owner", 2.0)),
    )])
    params = {"Electrical power": 4.0, "Tariff paid to storage reservoir owner": 1.5}
    est = calculator.variable_opex_cost(lib, _item(lib), params, CTX)
    assert est.electrical_power == pytest.approx(4.0 * 0.5 * 0.4 * HOURS * 3.0 * 20)
    assert est.tariff == pytest.approx(1.5 * 2.0 * 20 * HOURS * 3.0 * 20)
    assert est.cooling_water == 0.0
    assert est.natural_gas == 0.0


def test_variable_opex_undeclared_or_unsupplied_is_absent(make_library, make_item):
    lib = make_library([make_item(scaling=(), opex=(("Natural gas", 1.0),))])
    item = _item(lib)
    assert calculator.variable_opex_cost_item(lib, item, {}, "Natural gas", UTILITY_UNIT_COST, CTX) is None
    assert calculator.variable_opex_cost_item(
        lib, item, {"Cooling water (10degC temp rise)": 1.0}, "Cooling water (10degC temp rise)", UTILITY_UNIT_COST, CTX
    ) is None
    assert calculator.variable_opex_cost(lib, item, {}, CTX).total() == 0.0
