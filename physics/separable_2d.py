"""Separable 2D extension V(x, y) = Vx(x) + Vy(y) of the Kronig-Penney model.

The D(E, kx, ky) used here reuses the 1D closed form for both axes and
returns it unchanged: for identical geometry along x and y, Dx = Dy = D1d and
the product Dx * Dy is not formed. This is an approximation, not a two-axis
solution, and it makes the result independent of (kx, ky).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Sequence

import numpy as np

from numerics.band_edges import energy_grid
from numerics.bisection import bisect
from numerics.primitives import clamp, is_allowed
from physics.kronig_penney import KPParams, dispersion


KPoint = tuple[float, float]

EFFECTIVE_MASS_DK = 1.0e-6


@dataclass(frozen=True)
class Separable2DParams:
    a: float
    b: float
    V0: float
    mu: float = 1.0
    Lx: float | None = None
    Ly: float | None = None

    @property
    def axis_params(self) -> KPParams:
        return KPParams(a=self.a, b=self.b, V0=self.V0, mu=self.mu)

    @property
    def period_x(self) -> float:
        return float(self.Lx) if self.Lx is not None else self.axis_params.period

    @property
    def period_y(self) -> float:
        return float(self.Ly) if self.Ly is not None else self.axis_params.period


@dataclass(frozen=True)
class AxisLattice2DParams:
    """Independent x/y cells: half barrier width (ax, ay) and well width (bx, by)."""

    ax: float
    ay: float
    bx: float
    by: float
    V0: float
    mu: float = 1.0

    def axis(self, name: str) -> KPParams:
        if name == "x":
            return KPParams(a=self.ax, b=self.bx, V0=self.V0, mu=self.mu)
        if name == "y":
            return KPParams(a=self.ay, b=self.by, V0=self.V0, mu=self.mu)
        raise ValueError(f"Unknown axis: {name}")


@dataclass(frozen=True)
class EffectiveMass:
    m_star_x: float
    m_star_y: float
    m_star_xy: float = 0.0


def k_vector_magnitude(kx: float, ky: float) -> float:
    return math.hypot(kx, ky)


def dispersion_2d(E: float, kx: float, ky: float, params: Separable2DParams) -> float:
    return dispersion(E, params.axis_params)


def allowed_2d(E: float, kx: float, ky: float, params: Separable2DParams) -> bool:
    return is_allowed(dispersion_2d(E, kx, ky, params))


def principal_k_2d(E: float, params: Separable2DParams) -> KPoint | None:
    """Solve cos(kx Lx) = Dx and cos(ky Ly) = Dy; None if either axis is forbidden."""
    D_x = dispersion(E, params.axis_params)
    D_y = D_x
    if not (is_allowed(D_x) and is_allowed(D_y)):
        return None
    kx = math.acos(clamp(D_x, -1.0, 1.0)) / params.period_x
    ky = math.acos(clamp(D_y, -1.0, 1.0)) / params.period_y
    return kx, ky


def generate_2d_k_grid(
    Lx: float,
    Ly: float,
    nx: int,
    ny: int,
    kx_min: float = 0.0,
    kx_max: float | None = None,
    ky_min: float = 0.0,
    ky_max: float | None = None,
) -> list[KPoint]:
    """Rectangular k grid, row-major with kx as the outer and ky as the inner index.

    Defaults cover the irreducible quadrant [0, pi/Lx] x [0, pi/Ly] of the
    first Brillouin zone.
    """
    if nx < 2 or ny < 2:
        raise ValueError("nx and ny must be >= 2")
    kx_max = math.pi / Lx if kx_max is None else kx_max
    ky_max = math.pi / Ly if ky_max is None else ky_max

    kx = np.linspace(kx_min, kx_max, nx)
    ky = np.linspace(ky_min, ky_max, ny)
    kxx, kyy = np.meshgrid(kx, ky, indexing="ij")
    return [(float(a), float(b)) for a, b in zip(kxx.reshape(-1), kyy.reshape(-1))]


def band_structure_2d(E: float, k_grid: Sequence[KPoint], params: Separable2DParams) -> list[dict]:
    out = []
    for kx, ky in k_grid:
        D = dispersion_2d(E, kx, ky, params)
        out.append(
            {
                "kx": kx,
                "ky": ky,
                "D": D,
                "allowed": is_allowed(D),
                "k_magnitude": k_vector_magnitude(kx, ky),
            }
        )
    return out


def dispersion_surface_2d(E: float, k_grid: Sequence[KPoint], params: Separable2DParams) -> list[tuple[float, float, float]]:
    return [(kx, ky, dispersion_2d(E, kx, ky, params)) for kx, ky in k_grid]


def scan_2d_allowed(
    e_min: float,
    e_max: float,
    k_grid: Sequence[KPoint],
    params: Separable2DParams,
    samples: int = 101,
) -> list[dict]:
    """Count allowed k points at each of ``samples`` energies spanning [e_min, e_max]."""
    rows = []
    for E in energy_grid(e_min, e_max, samples - 1):
        points = band_structure_2d(E, k_grid, params)
        rows.append({"E": E, "allowed_count": sum(1 for p in points if p["allowed"]), "band_data": points})
    return rows


def effective_mass_2d(
    E: float,
    kx: float,
    ky: float,
    params: Separable2DParams,
    surface: Callable[[float, float], float] | None = None,
    dk: float = EFFECTIVE_MASS_DK,
) -> EffectiveMass:
    """Diagonal effective-mass tensor 1 / (d^2 f / dk_i^2) by central differences.

    ``surface`` defaults to D(E, kx, ky) at fixed E. A vanishing curvature gives
    an infinite mass; the off-diagonal term is zero under separability.
    """
    if surface is None:

        def surface(qx: float, qy: float) -> float:
            return dispersion_2d(E, qx, qy, params)

    center = surface(kx, ky)
    d2x = (surface(kx + dk, ky) - 2.0 * center + surface(kx - dk, ky)) / (dk * dk)
    d2y = (surface(kx, ky + dk) - 2.0 * center + surface(kx, ky - dk)) / (dk * dk)

    m_x = 1.0 / d2x if d2x != 0.0 else math.inf
    m_y = 1.0 / d2y if d2y != 0.0 else math.inf
    return EffectiveMass(m_star_x=m_x, m_star_y=m_y, m_star_xy=0.0)


def solve_axis_energy(
    k: float,
    params: KPParams,
    e_max: float | None = None,
    samples: int = 400,
) -> float | None:
    """Lowest E in [0, e_max] with D(E) = cos(k L), or None if no sign change is found."""
    e_max = 2.0 * params.V0 if e_max is None else e_max
    target = math.cos(k * params.period)

    def f(E: float) -> float:
        return dispersion(E, params) - target

    energies = energy_grid(0.0, e_max, samples)
    for lo, hi in zip(energies[:-1], energies[1:]):
        if f(lo) * f(hi) <= 0.0:
            return bisect(f, lo, hi, 1e-8, 64)
    return None


def energy_separable(
    kx: float,
    ky: float,
    params: AxisLattice2DParams,
    e_max: float | None = None,
) -> float | None:
    """E(kx, ky) = Ex(kx) + Ey(ky) for independent x and y cells."""
    e_x = solve_axis_energy(kx, params.axis("x"), e_max)
    e_y = solve_axis_energy(ky, params.axis("y"), e_max)
    if e_x is None or e_y is None:
        return None
    return e_x + e_y
