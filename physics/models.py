"""Build a uniform E -> D capability from a model config section."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Sequence

from numerics.band_edges import BandInterval, EnergyToDispersion, scan_band_edges
from numerics.primitives import is_allowed
from physics.kronig_penney import (
    ExtendedKPParams,
    KPParams,
    dispersion,
    dispersion_extended,
    dispersion_multilayer,
    principal_k_from_l,
)
from physics.layers import Layer, parse_layers, period_of
from physics.separable_2d import Separable2DParams, dispersion_2d


@dataclass(frozen=True)
class DispersionModel:
    name: str
    dispersion_fn: EnergyToDispersion
    period: float
    params: object


@dataclass(frozen=True)
class DispersionSample:
    E: float
    D: float
    allowed: bool
    k: float


def _simple(cfg: Dict[str, object]) -> DispersionModel:
    params = KPParams(a=float(cfg["a"]), b=float(cfg["b"]), V0=float(cfg["V0"]), mu=float(cfg.get("mu", 1.0)))

    def fn(E: float) -> float:
        return dispersion(E, params)

    return DispersionModel(name="simple", dispersion_fn=fn, period=params.period, params=params)


def _extended(cfg: Dict[str, object]) -> DispersionModel:
    params = ExtendedKPParams(
        a=float(cfg["a"]),
        b=float(cfg["b"]),
        U1=float(cfg["U1"]),
        U2=float(cfg["U2"]),
        mu=float(cfg.get("mu", 1.0)),
    )

    def fn(E: float) -> float:
        return dispersion_extended(E, params).D

    return DispersionModel(name="extended", dispersion_fn=fn, period=params.period, params=params)


def _multilayer(cfg: Dict[str, object]) -> DispersionModel:
    raw = cfg["layers"]
    layers: Sequence[Layer] = parse_layers(raw) if isinstance(raw, str) else list(raw)
    mu = float(cfg.get("mu", 1.0))

    def fn(E: float) -> float:
        return dispersion_multilayer(E, layers, mu).D

    return DispersionModel(name="multilayer", dispersion_fn=fn, period=period_of(layers), params=tuple(layers))


def _separable_2d(cfg: Dict[str, object]) -> DispersionModel:
    params = Separable2DParams(
        a=float(cfg["a"]),
        b=float(cfg["b"]),
        V0=float(cfg["V0"]),
        mu=float(cfg.get("mu", 1.0)),
        Lx=None if cfg.get("Lx") is None else float(cfg["Lx"]),
        Ly=None if cfg.get("Ly") is None else float(cfg["Ly"]),
    )

    def fn(E: float) -> float:
        return dispersion_2d(E, 0.0, 0.0, params)

    return DispersionModel(name="separable_2d", dispersion_fn=fn, period=params.period_x, params=params)


BUILDERS: Dict[str, Callable[[Dict[str, object]], DispersionModel]] = {
    "simple": _simple,
    "extended": _extended,
    "multilayer": _multilayer,
    "separable_2d": _separable_2d,
}


def make_model(model_cfg: Dict[str, object]) -> DispersionModel:
    mtype = str(model_cfg.get("type", "simple"))
    if mtype not in BUILDERS:
        supported = ", ".join(sorted(BUILDERS.keys()))
        raise ValueError(f"Unsupported model type: {mtype}. Supported: {supported}")
    return BUILDERS[mtype](model_cfg)


def sample_dispersion(model: DispersionModel, energies: Sequence[float]) -> list[DispersionSample]:
    out = []
    for E in energies:
        D = model.dispersion_fn(E)
        out.append(DispersionSample(E=E, D=D, allowed=is_allowed(D), k=principal_k_from_l(D, model.period)))
    return out


def find_bands(model: DispersionModel, e_min: float, e_max: float, steps: int) -> list[BandInterval]:
    return scan_band_edges(model.dispersion_fn, e_min, e_max, steps)
