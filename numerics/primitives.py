"""Guarded scalar helpers shared by every dispersion variant."""

from __future__ import annotations

import math


SAFE_EPS = 1.0e-12
SAFE_LARGE = 1.0e6
ALLOWED_SLACK = 1.0e-7


def clamp(x: float, lo: float, hi: float) -> float:
    return min(max(x, lo), hi)


def safe(x: float, eps: float = SAFE_EPS) -> float:
    """Replace values that would break a division or a trig/hyperbolic call.

    NaN becomes ``eps``, infinities become ``+/-SAFE_LARGE`` and anything with
    ``|x| < eps`` becomes ``eps`` carrying the sign of ``x``.
    """
    if math.isnan(x):
        return eps
    if math.isinf(x):
        return SAFE_LARGE if x > 0 else -SAFE_LARGE
    if abs(x) < eps:
        return -eps if x < 0 else eps
    return x


def alpha(E: float, mu: float) -> float:
    """Wavenumber in a V=0 region, sqrt(E / mu) with mu = hbar^2 / 2m."""
    return math.sqrt(max(E, 0.0) / max(mu, SAFE_EPS))


def beta(V0: float, E: float, mu: float) -> float:
    """Decay constant under a barrier (E < V0); zero otherwise."""
    d = V0 - E
    if d > 0:
        return math.sqrt(d / max(mu, SAFE_EPS))
    return 0.0


def gamma(E: float, V0: float, mu: float) -> float:
    """Wavenumber above a barrier (E > V0); zero otherwise."""
    d = E - V0
    if d > 0:
        return math.sqrt(d / max(mu, SAFE_EPS))
    return 0.0


def is_allowed(D: float) -> bool:
    return abs(D) <= 1.0 + ALLOWED_SLACK


def cosh_safe(x: float) -> float:
    """cosh that saturates to the ``safe`` infinity sentinel instead of raising."""
    try:
        return math.cosh(x)
    except OverflowError:
        return safe(math.inf)


def sinh_safe(x: float) -> float:
    try:
        return math.sinh(x)
    except OverflowError:
        return safe(math.copysign(math.inf, x))
