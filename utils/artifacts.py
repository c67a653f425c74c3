"""Artifact writing helpers."""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Iterable, Sequence

import numpy as np

from numerics.band_edges import BandInterval


def _fmt(x: float) -> str:
    return "%.12g" % x


def _fmt_bool(flag: bool) -> str:
    return "true" if flag else "false"


def save_json(path: str | Path, payload: dict) -> None:
    with Path(path).open("w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2)


def save_arrays(arrays_dir: str | Path, **arrays) -> None:
    out = Path(arrays_dir)
    out.mkdir(parents=True, exist_ok=True)
    for name, arr in arrays.items():
        np.save(out / f"{name}.npy", np.asarray(arr))


def write_csv(path: str | Path, header: Sequence[str], rows: Iterable[Sequence[str]]) -> None:
    with Path(path).open("w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(header)
        writer.writerows(rows)


def bands_path(csv_path: str | Path) -> Path:
    """dispersion.csv -> dispersion-bands.csv, next to the samples file."""
    p = Path(csv_path)
    stem = p.name[: -len(".csv")] if p.name.endswith(".csv") else p.name
    return p.with_name(f"{stem}-bands.csv")


def write_dispersion_csv(path: str | Path, samples) -> None:
    rows = ([_fmt(s.E), _fmt(s.D), _fmt_bool(s.allowed), _fmt(-s.k), _fmt(s.k)] for s in samples)
    write_csv(path, ["E", "D", "allowed", "k_minus", "k_plus"], rows)


def write_bands_csv(path: str | Path, bands: Sequence[BandInterval]) -> None:
    write_csv(path, ["E_lo", "E_hi"], ([_fmt(b.e_lo), _fmt(b.e_hi)] for b in bands))


def write_k_grid_csv(path: str | Path, points: Sequence[dict]) -> None:
    rows = ([_fmt(p["kx"]), _fmt(p["ky"]), _fmt(p["D"]), _fmt_bool(p["allowed"])] for p in points)
    write_csv(path, ["kx", "ky", "D", "allowed"], rows)
