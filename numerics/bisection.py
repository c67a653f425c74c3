"""Bounded interval-halving root finder."""

from __future__ import annotations

from typing import Callable


def bisect(
    f: Callable[[float], float],
    lo: float,
    hi: float,
    tol: float = 1e-8,
    max_iter: int = 64,
) -> float:
    """Return the midpoint of the bracket after halving it towards a sign change.

    The bracket is not checked: if f does not change sign on [lo, hi] the
    result is still a point inside the interval. ``max_iter`` caps the number
    of halvings so the loop always terminates.
    """
    lo = float(lo)
    hi = float(hi)
    f_lo = f(lo)
    for _ in range(int(max_iter)):
        if abs(hi - lo) <= tol:
            break
        mid = lo + 0.5 * (hi - lo)
        f_mid = f(mid)
        if f_lo * f_mid <= 0.0:
            hi = mid
        else:
            lo, f_lo = mid, f_mid
    return lo + 0.5 * (hi - lo)
