# costing_tool/finance/dcf.py
from __future__ import annotations

from typing import Iterable, List, Sequence

import numpy as np
import numpy_financial as npf


# ---------- Discounting ----------
def discount_divisor(rate: float, offset: int) -> float:
    """
    Growth of one unit of money after `offset` years:
        (1 + r)^offset
    A year's discounted cost is cost / discount_divisor(rate, year - start).
    """
    return (1.0 + float(rate)) ** int(offset)


def discount_factor(rate: float, offset: int) -> float:
    """1 / (1 + r)^offset. Exactly 1.0 at offset 0 for any rate."""
    return 1.0 / discount_divisor(rate, offset)


def discount_divisors(rate: float, years: Sequence[int], start: int) -> np.ndarray:
    """Vectorised discount_divisor for every year of a timeline."""
    offsets = np.asarray(years, dtype=float) - float(start)
    return np.power(1.0 + float(rate), offsets)


# ---------- NPV ----------
def npv(rate: float, cashflows: Iterable[float]) -> float:
    """
    Classic discounted cash flow, first value undiscounted:
        NPV(r) = sum_{t=0..N} CF[t] / (1+r)^t
    """
    cfs = [float(cf) for cf in cashflows]
    if not cfs:
        return 0.0
    return float(npf.npv(float(rate), cfs))


# ---------- Year ranges ----------
def range_length(first: int, last: int) -> int:
    """Number of years in an inclusive range; 0 when the range is inverted."""
    return max(0, int(last) - int(first) + 1)


def in_range(year: int, first: int, last: int) -> bool:
    return int(first) <= int(year) <= int(last)


__all__ = [
    "discount_divisor",
    "discount_factor",
    "discount_divisors",
    "npv",
    "range_length",
    "in_range",
]
