"""Configuration loading and validation."""

from __future__ import annotations

import json
from copy import deepcopy
from pathlib import Path

from physics.layers import parse_layers


DEFAULT_CONFIG = {
    "model": {
        "type": "simple",
        "a": 1.0,
        "b": 0.5,
        "V0": 10.0,
        "mu": 1.0,
        "U1": 8.0,
        "U2": 12.0,
        "layers": "b:0.4,U:12:0.2,b:0.4",
        "Lx": None,
        "Ly": None,
    },
    "scan": {
        "Emin": 0.0,
        "Emax": 50.0,
        "steps": 5000,
    },
    "grid_2d": {
        "energy": 15.0,
        "nx": 41,
        "ny": 41,
        "kx_min": 0.0,
        "kx_max": None,
        "ky_min": 0.0,
        "ky_max": None,
    },
    "output": {
        "csv_name": "dispersion.csv",
        "plots": True,
    },
}

SUPPORTED_MODELS = {"simple", "extended", "multilayer", "separable_2d"}


def _deep_update(base: dict, updates: dict) -> dict:
    for k, v in updates.items():
        if isinstance(v, dict) and isinstance(base.get(k), dict):
            _deep_update(base[k], v)
        else:
            base[k] = v
    return base


def load_config(path: str | Path | None) -> dict:
    cfg = deepcopy(DEFAULT_CONFIG)
    if path is None:
        return validate_config(cfg)

    with Path(path).open("r", encoding="utf-8-sig") as f:
        user_cfg = json.load(f)
    _deep_update(cfg, user_cfg)
    return validate_config(cfg)


def validate_config(cfg: dict) -> dict:
    model = cfg.get("model", {})
    mtype = str(model.get("type", "simple"))
    if mtype not in SUPPORTED_MODELS:
        raise ValueError(f"model.type must be one of {sorted(SUPPORTED_MODELS)}")

    if float(model.get("mu", 1.0)) <= 0:
        raise ValueError("model.mu must be positive")

    if mtype in {"simple", "extended", "separable_2d"}:
        for key in ("a", "b"):
            if float(model.get(key, 0.0)) <= 0:
                raise ValueError(f"model.{key} must be positive")

    if mtype == "extended":
        U1 = float(model["U1"])
        U2 = float(model["U2"])
        if U2 < U1:
            raise ValueError(f"model.U2 must be >= model.U1, got U1={U1}, U2={U2}")

    if mtype == "multilayer":
        raw = model.get("layers")
        if not isinstance(raw, str) or not raw.strip():
            raise ValueError("model.layers must be a non-empty layer string for multilayer models")
        layers = parse_layers(raw)
        if not layers:
            raise ValueError("model.layers must contain at least one layer")
        for i, layer in enumerate(layers):
            if layer.width <= 0:
                raise ValueError(f"model.layers[{i}] width must be positive")

    if mtype == "separable_2d":
        for key in ("Lx", "Ly"):
            if model.get(key) is not None and float(model[key]) <= 0:
                raise ValueError(f"model.{key} must be positive when set")
        grid = cfg.get("grid_2d", {})
        for key in ("nx", "ny"):
            if int(grid.get(key, 0)) < 2:
                raise ValueError(f"grid_2d.{key} must be >= 2")

    scan = cfg["scan"]
    if float(scan["Emax"]) <= float(scan["Emin"]):
        raise ValueError("scan.Emax must be greater than scan.Emin")
    if int(scan["steps"]) < 1:
        raise ValueError("scan.steps must be >= 1")

    csv_name = str(cfg.get("output", {}).get("csv_name", "dispersion.csv"))
    if not csv_name.endswith(".csv"):
        raise ValueError("output.csv_name must end with .csv")

    return cfg


def save_config(cfg: dict, out_path: str | Path) -> None:
    with Path(out_path).open("w", encoding="utf-8") as f:
        json.dump(cfg, f, indent=2)
