"""Energy-grid scan that turns a dispersion function into allowed bands."""

from __future__ import annotations

from dataclasses import dataclass
from functools import partial, reduce
from typing import Callable

from numerics.bisection import bisect


EnergyToDispersion = Callable[[float], float]

INSIDE_THRESHOLD = 1.0e-10
EDGE_TOL = 1.0e-8
EDGE_MAX_ITER = 64


@dataclass(frozen=True)
class BandInterval:
    e_lo: float
    e_hi: float

    @property
    def width(self) -> float:
        return self.e_hi - self.e_lo


@dataclass(frozen=True)
class OutsideBand:
    pass


@dataclass(frozen=True)
class InsideBand:
    start: float


@dataclass(frozen=True)
class ScanState:
    phase: OutsideBand | InsideBand
    prev_energy: float | None
    bands: tuple[BandInterval, ...]


def energy_grid(e_min: float, e_max: float, steps: int) -> list[float]:
    """Return steps + 1 uniformly spaced energies from e_min to e_max."""
    if steps < 1:
        raise ValueError("steps must be >= 1")
    step = (e_max - e_min) / float(steps)
    return [e_min + i * step for i in range(steps + 1)]


def _advance(g: Callable[[float], float], state: ScanState, energy: float) -> ScanState:
    inside = g(energy) <= INSIDE_THRESHOLD
    prev = state.prev_energy

    if prev is not None and isinstance(state.phase, OutsideBand) and inside:
        edge = bisect(g, prev, energy, EDGE_TOL, EDGE_MAX_ITER)
        return ScanState(InsideBand(edge), energy, state.bands)

    if prev is not None and isinstance(state.phase, InsideBand) and not inside:
        edge = bisect(g, prev, energy, EDGE_TOL, EDGE_MAX_ITER)
        band = BandInterval(state.phase.start, edge)
        return ScanState(OutsideBand(), energy, state.bands + (band,))

    return ScanState(state.phase, energy, state.bands)


def scan_band_edges(
    dispersion_fn: EnergyToDispersion,
    e_min: float,
    e_max: float,
    steps: int,
) -> list[BandInterval]:
    """Locate allowed bands |D(E)| <= 1 on [e_min, e_max].

    Each forbidden/allowed transition between neighbouring samples is refined
    by bisecting |D| - 1. The first sample has no left neighbour and never
    opens a band; a band still open after the last sample is clipped to e_max.
    """

    def g(E: float) -> float:
        return abs(dispersion_fn(E)) - 1.0

    initial = ScanState(OutsideBand(), None, ())
    final = reduce(partial(_advance, g), energy_grid(e_min, e_max, steps), initial)

    bands = list(final.bands)
    if isinstance(final.phase, InsideBand):
        bands.append(BandInterval(final.phase.start, float(e_max)))
    return bands
