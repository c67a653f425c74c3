"""Bloch-condition functions D(E) for the Kronig-Penney model family.

Every variant returns D such that cos(k L) = D(E). |D| <= 1 marks an allowed
energy; larger values are the forbidden-gap signal and are returned as-is.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

from numerics.primitives import alpha, beta, clamp, cosh_safe, gamma, is_allowed, safe, sinh_safe
from numerics.transfer import compose, half_trace, layer_matrix
from physics.layers import Layer, period_of


@dataclass(frozen=True)
class KPParams:
    """Barrier of width 2a centred at x=0 with a well of width b on each side."""

    a: float
    b: float
    V0: float
    mu: float = 1.0

    @property
    def period(self) -> float:
        return 2.0 * self.a + 2.0 * self.b


@dataclass(frozen=True)
class ExtendedKPParams:
    """U1 barrier (2a) - well (2b) - U2 barrier (2a) - well (2b)."""

    a: float
    b: float
    U1: float
    U2: float
    mu: float = 1.0

    @property
    def period(self) -> float:
        return 4.0 * self.a + 4.0 * self.b

    def layers(self) -> list[Layer]:
        return [
            Layer(2.0 * self.a, self.U1),
            Layer(2.0 * self.b, 0.0),
            Layer(2.0 * self.a, self.U2),
            Layer(2.0 * self.b, 0.0),
        ]


@dataclass(frozen=True)
class DispersionResult:
    D: float
    L: float


def dispersion(E: float, params: KPParams) -> float:
    """Closed-form D(E) for the two-region cell.

    E < V0 uses the cosh/sinh branch and E >= V0 the cos/sin branch. When the
    unguarded well or barrier wavenumber is exactly zero (E = 0 or E = V0)
    the result is pinned to 1.0.
    """
    a = float(params.a)
    b = float(params.b)
    V0 = float(params.V0)
    mu = float(params.mu)
    E = float(E)

    k_well = alpha(E, mu)
    if E < V0:
        k_bar = beta(V0, E, mu)
        if k_well == 0.0 or k_bar == 0.0:
            return 1.0
        k_well = safe(k_well)
        k_bar = safe(k_bar)
        coeff = (k_well * k_well + k_bar * k_bar) / (2.0 * k_well * k_bar)
        return math.cos(k_well * b) * cosh_safe(2.0 * k_bar * a) + coeff * math.sin(k_well * b) * sinh_safe(
            2.0 * k_bar * a
        )

    k_bar = gamma(E, V0, mu)
    if k_well == 0.0 or k_bar == 0.0:
        return 1.0
    k_well = safe(k_well)
    k_bar = safe(k_bar)
    coeff = (k_bar * k_bar - k_well * k_well) / (2.0 * k_well * k_bar)
    return math.cos(k_well * b) * math.cos(2.0 * k_bar * a) - coeff * math.sin(k_well * b) * math.sin(2.0 * k_bar * a)


def allowed(E: float, params: KPParams) -> bool:
    return is_allowed(dispersion(E, params))


def principal_k_from_l(D: float, L: float) -> float:
    """Smallest non-negative k with cos(k L) = clamp(D); lies in [0, pi/L].

    NaN maps to the ``safe`` sentinel, so the result is pi / (2 L).
    """
    return math.acos(clamp(safe(D), -1.0, 1.0)) / float(L)


def principal_k(E: float, params: KPParams) -> float:
    """Principal wavevector, also reported for forbidden E (check ``allowed``)."""
    return principal_k_from_l(dispersion(E, params), params.period)


def dispersion_multilayer(E: float, layers: Sequence[Layer], mu: float = 1.0) -> DispersionResult:
    """D(E) = Tr(M_total) / 2 for an ordered stack of flat layers."""
    M = compose(layer_matrix(E, layer.potential, layer.width, mu) for layer in layers)
    return DispersionResult(D=half_trace(M), L=period_of(layers))


def dispersion_extended(E: float, params: ExtendedKPParams) -> DispersionResult:
    L = params.period
    if params.U1 == params.U2:
        simple = KPParams(a=params.a, b=params.b, V0=params.U1, mu=params.mu)
        return DispersionResult(D=dispersion(E, simple), L=L)
    result = dispersion_multilayer(E, params.layers(), params.mu)
    return DispersionResult(D=result.D, L=L)


def principal_k_extended(E: float, params: ExtendedKPParams) -> float:
    result = dispersion_extended(E, params)
    return principal_k_from_l(result.D, result.L)


def principal_k_multilayer(E: float, layers: Sequence[Layer], mu: float = 1.0) -> float:
    result = dispersion_multilayer(E, layers, mu)
    return principal_k_from_l(result.D, result.L)
