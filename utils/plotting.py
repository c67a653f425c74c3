"""Plotting helpers for dispersion scans and band diagrams."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

import matplotlib
import numpy as np

matplotlib.use("Agg")
import matplotlib.pyplot as plt
from matplotlib.colors import TwoSlopeNorm

from numerics.band_edges import BandInterval


def _ensure_out_dir(out_dir: str | Path) -> Path:
    out = Path(out_dir)
    out.mkdir(parents=True, exist_ok=True)
    return out


def _shade_bands(ax, bands: Sequence[BandInterval], orientation: str = "vertical") -> None:
    for i, band in enumerate(bands):
        label = "allowed band" if i == 0 else None
        if orientation == "vertical":
            ax.axvspan(band.e_lo, band.e_hi, color="tab:green", alpha=0.15, label=label)
        else:
            ax.axhspan(band.e_lo, band.e_hi, color="tab:green", alpha=0.15, label=label)


def plot_dispersion(
    energies: np.ndarray,
    D: np.ndarray,
    bands: Sequence[BandInterval],
    out_dir: str | Path,
    clip: float = 5.0,
) -> dict:
    """D(E) with the |D| = 1 lines and the located bands shaded.

    Values are clipped to +/-clip so deep gaps do not flatten the allowed region.
    """
    out = _ensure_out_dir(out_dir)
    E = np.asarray(energies, dtype=float)
    vals = np.asarray(D, dtype=float)
    clipped = np.clip(vals, -clip, clip)

    fig, ax = plt.subplots(figsize=(8, 4))
    ax.plot(E, clipped, color="black", lw=1.2, label="D(E)")
    ax.axhline(1.0, color="tab:red", lw=0.9, linestyle="--")
    ax.axhline(-1.0, color="tab:red", lw=0.9, linestyle="--")
    _shade_bands(ax, bands)
    ax.set_xlabel("Energy E")
    ax.set_ylabel("D(E) = cos(kL)")
    ax.set_ylim(-clip * 1.05, clip * 1.05)
    ax.set_title("Bloch Condition")
    ax.grid(True, alpha=0.3)
    ax.legend(fontsize=8)
    fig.tight_layout()
    fig.savefig(out / "dispersion.png", dpi=180)
    plt.close(fig)

    return {
        "clip": float(clip),
        "n_clipped": int(np.count_nonzero(np.abs(vals) > clip)),
    }


def plot_band_structure(
    energies: np.ndarray,
    k: np.ndarray,
    allowed: np.ndarray,
    period: float,
    out_dir: str | Path,
) -> None:
    """Reduced-zone E(k) from the allowed samples, mirrored to negative k."""
    out = _ensure_out_dir(out_dir)
    E = np.asarray(energies, dtype=float)
    kv = np.asarray(k, dtype=float)
    mask = np.asarray(allowed, dtype=bool)

    fig, ax = plt.subplots(figsize=(6, 6))
    ax.scatter(kv[mask], E[mask], s=2, color="tab:blue")
    ax.scatter(-kv[mask], E[mask], s=2, color="tab:blue")
    zone = np.pi / period
    ax.axvline(-zone, color="gray", lw=0.8, linestyle=":")
    ax.axvline(zone, color="gray", lw=0.8, linestyle=":")
    ax.set_xlim(-zone * 1.05, zone * 1.05)
    ax.set_xlabel("k")
    ax.set_ylabel("Energy E")
    ax.set_title("Band Structure (reduced zone)")
    ax.grid(True, alpha=0.3)
    fig.tight_layout()
    fig.savefig(out / "band_structure.png", dpi=180)
    plt.close(fig)


def plot_band_edges(bands: Sequence[BandInterval], out_dir: str | Path) -> None:
    out = _ensure_out_dir(out_dir)
    if not bands:
        return

    fig, ax = plt.subplots(figsize=(4, 6))
    _shade_bands(ax, bands, orientation="horizontal")
    for i, band in enumerate(bands):
        ax.hlines([band.e_lo, band.e_hi], 0.1, 0.9, color="tab:blue", lw=1.2)
        ax.text(0.92, 0.5 * (band.e_lo + band.e_hi), f"B{i}", va="center", fontsize=8)
    ax.set_xlim(0.0, 1.1)
    ax.set_xticks([])
    ax.set_ylabel("Energy E")
    ax.set_title("Allowed Bands")
    ax.grid(True, axis="y", alpha=0.3)
    fig.tight_layout()
    fig.savefig(out / "band_edges.png", dpi=180)
    plt.close(fig)


def plot_k_grid_map(
    kx: np.ndarray,
    ky: np.ndarray,
    D_grid: np.ndarray,
    out_dir: str | Path,
    energy: float | None = None,
) -> None:
    """D(kx, ky) map with D_grid indexed [ix, iy]; the |D| = 1 contour marks the band boundary."""
    out = _ensure_out_dir(out_dir)
    grid = np.asarray(D_grid, dtype=float).T
    extent = [float(np.min(kx)), float(np.max(kx)), float(np.min(ky)), float(np.max(ky))]
    absmax = float(np.max(np.abs(grid))) if grid.size else 1.0
    norm = TwoSlopeNorm(vmin=-absmax if absmax > 0 else -1.0, vcenter=0.0, vmax=absmax if absmax > 0 else 1.0)

    fig, ax = plt.subplots(figsize=(6, 5))
    im = ax.imshow(grid, origin="lower", extent=extent, aspect="auto", cmap="coolwarm", norm=norm)
    if np.nanmin(np.abs(grid)) < 1.0 < np.nanmax(np.abs(grid)):
        KX, KY = np.meshgrid(kx, ky, indexing="xy")
        ax.contour(KX, KY, np.abs(grid), levels=[1.0], colors="k", linewidths=1.0)
    ax.set_xlabel("kx")
    ax.set_ylabel("ky")
    title = "D(kx, ky)"
    if energy is not None:
        title += f" at E={energy:.3f}"
    ax.set_title(title)
    fig.colorbar(im, ax=ax, label="D")
    fig.tight_layout()
    fig.savefig(out / "dispersion_2d.png", dpi=180)
    plt.close(fig)
