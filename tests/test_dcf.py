import pytest

from costing_tool.finance.dcf import discount_divisors, discount_factor, npv, range_length


@pytest.mark.parametrize("rate", [0.0, 0.05, 0.1, 0.35])
def test_discount_factor_is_one_at_start(rate):
    assert discount_factor(rate, 0) == 1.0


def test_discount_factor_strictly_decreases_for_positive_rate():
    factors = [discount_factor(0.1, k) for k in range(6)]
    assert all(a > b for a, b in zip(factors, factors[1:]))


def test_discount_divisors_offset_from_start():
    d = discount_divisors(0.1, [2025, 2026, 2027], 2025)
    assert list(d) == pytest.approx([1.0, 1.1, 1.21])


def test_npv_first_value_undiscounted():
    assert npv(0.1, [450.0, 36.0, 45.0]) == pytest.approx(450.0 + 36.0 / 1.1 + 45.0 / 1.21)
    assert npv(0.1, []) == 0.0


def test_range_length_inclusive_and_inverted():
    assert range_length(2025, 2025) == 1
    assert range_length(2026, 2047) == 22
    assert range_length(2030, 2028) == 0
