"""Entry point for single-configuration Kronig-Penney band scans."""

from __future__ import annotations

import argparse
import logging
import math
import traceback

import numpy as np

from numerics.band_edges import BandInterval, energy_grid
from physics.models import DispersionModel, find_bands, make_model, sample_dispersion
from physics.separable_2d import band_structure_2d, generate_2d_k_grid, principal_k_2d
from utils.artifacts import (
    bands_path,
    save_arrays,
    save_json,
    write_bands_csv,
    write_dispersion_csv,
    write_k_grid_csv,
)
from utils.config import load_config, save_config, validate_config
from utils.logging import build_logger
from utils.plotting import plot_band_edges, plot_band_structure, plot_dispersion, plot_k_grid_map
from utils.run_manager import RunContext, create_run, finalize_run


def _optional_float(value) -> float | None:
    return None if value is None else float(value)


def _summarize_bands(bands: list[BandInterval]) -> dict:
    if not bands:
        return {"num_bands": 0, "bands": [], "gaps": [], "widest_band": None, "widest_gap": None}

    gaps = [
        {"E_lo": lo.e_hi, "E_hi": hi.e_lo, "width": hi.e_lo - lo.e_hi}
        for lo, hi in zip(bands[:-1], bands[1:])
    ]
    widest = max(bands, key=lambda b: b.width)
    return {
        "num_bands": len(bands),
        "bands": [{"E_lo": b.e_lo, "E_hi": b.e_hi, "width": b.width} for b in bands],
        "gaps": gaps,
        "widest_band": {"E_lo": widest.e_lo, "E_hi": widest.e_hi, "width": widest.width},
        "widest_gap": max(gaps, key=lambda g: g["width"]) if gaps else None,
    }


def _run_1d(model: DispersionModel, cfg: dict, ctx: RunContext, logger: logging.Logger) -> dict:
    scan = cfg["scan"]
    e_min = float(scan["Emin"])
    e_max = float(scan["Emax"])
    steps = int(scan["steps"])

    energies = energy_grid(e_min, e_max, steps)
    samples = sample_dispersion(model, energies)
    bands = find_bands(model, e_min, e_max, steps)
    logger.info("model=%s L=%.6g found %d bands in [%.6g, %.6g]", model.name, model.period, len(bands), e_min, e_max)
    for i, band in enumerate(bands):
        logger.info("band %d: E_lo=%.10g E_hi=%.10g width=%.4g", i, band.e_lo, band.e_hi, band.width)

    csv_path = ctx.reports_dir / str(cfg["output"]["csv_name"])
    write_dispersion_csv(csv_path, samples)
    write_bands_csv(bands_path(csv_path), bands)
    logger.info("Wrote samples to %s", str(csv_path))
    logger.info("Wrote band edges to %s", str(bands_path(csv_path)))

    E_arr = np.array([s.E for s in samples], dtype=float)
    D_arr = np.array([s.D for s in samples], dtype=float)
    k_arr = np.array([s.k for s in samples], dtype=float)
    allowed_arr = np.array([s.allowed for s in samples], dtype=bool)
    save_arrays(ctx.arrays_dir, energies=E_arr, D=D_arr, k=k_arr, allowed=allowed_arr)

    plot_meta = None
    if bool(cfg["output"].get("plots", True)):
        plot_meta = plot_dispersion(E_arr, D_arr, bands, ctx.plots_dir)
        plot_band_structure(E_arr, k_arr, allowed_arr, model.period, ctx.plots_dir)
        plot_band_edges(bands, ctx.plots_dir)

    return {
        "period": model.period,
        "num_samples": len(samples),
        "allowed_fraction": float(np.mean(allowed_arr)) if allowed_arr.size else 0.0,
        "band_info": _summarize_bands(bands),
        "dispersion_plot": plot_meta,
    }


def _run_2d(model: DispersionModel, cfg: dict, ctx: RunContext, logger: logging.Logger) -> dict:
    summary = _run_1d(model, cfg, ctx, logger)

    params = model.params
    grid_cfg = cfg["grid_2d"]
    energy = float(grid_cfg["energy"])
    nx = int(grid_cfg["nx"])
    ny = int(grid_cfg["ny"])
    k_grid = generate_2d_k_grid(
        params.period_x,
        params.period_y,
        nx,
        ny,
        kx_min=float(grid_cfg.get("kx_min", 0.0)),
        kx_max=_optional_float(grid_cfg.get("kx_max")),
        ky_min=float(grid_cfg.get("ky_min", 0.0)),
        ky_max=_optional_float(grid_cfg.get("ky_max")),
    )
    points = band_structure_2d(energy, k_grid, params)
    write_k_grid_csv(ctx.reports_dir / "k_grid.csv", points)

    D_grid = np.array([p["D"] for p in points], dtype=float).reshape(nx, ny)
    kx = np.array([p["kx"] for p in points[::ny]], dtype=float)
    ky = np.array([p["ky"] for p in points[:ny]], dtype=float)
    save_arrays(ctx.arrays_dir, kx=kx, ky=ky, D_grid=D_grid)
    if bool(cfg["output"].get("plots", True)):
        plot_k_grid_map(kx, ky, D_grid, ctx.plots_dir, energy=energy)

    k_principal = principal_k_2d(energy, params)
    n_allowed = sum(1 for p in points if p["allowed"])
    logger.info("2D grid %dx%d at E=%.6g: %d/%d allowed", nx, ny, energy, n_allowed, len(points))

    summary["grid_2d"] = {
        "energy": energy,
        "nx": nx,
        "ny": ny,
        "allowed_points": n_allowed,
        "principal_k": None if k_principal is None else {"kx": k_principal[0], "ky": k_principal[1]},
    }
    return summary


def run(cfg: dict, results_root: str, experiment_name: str) -> RunContext:
    cfg = validate_config(cfg)
    ctx = create_run(results_root, experiment_name, cfg)
    logger = build_logger(ctx.logs_dir / "scan.log")

    try:
        save_config(cfg, ctx.run_dir / "config.json")
        model = make_model(cfg["model"])
        if model.name == "separable_2d":
            summary = _run_2d(model, cfg, ctx, logger)
        else:
            summary = _run_1d(model, cfg, ctx, logger)

        summary["run_id"] = ctx.run_id
        summary["model_type"] = model.name
        summary["zone_edge"] = math.pi / model.period
        save_json(ctx.reports_dir / "final_summary.json", summary)

        finalize_run(
            ctx,
            status="completed",
            period=model.period,
            num_bands=summary["band_info"]["num_bands"],
        )
        logger.info("Run completed at %s", str(ctx.run_dir))
    except Exception as exc:
        tb = traceback.format_exc()
        (ctx.reports_dir / "error_traceback.txt").write_text(tb, encoding="utf-8")
        finalize_run(ctx, status="failed", error_message=str(exc))
        raise
    return ctx


def main() -> None:
    parser = argparse.ArgumentParser(description="Kronig-Penney band scan for a single configuration.")
    parser.add_argument("--config", type=str, default=None)
    parser.add_argument("--results-root", type=str, default="results")
    parser.add_argument("--experiment-name", type=str, default="kp_scan")
    parser.add_argument(
        "--layers",
        type=str,
        default=None,
        help="Compact multilayer stack, e.g. 'b:0.3,U:8:0.2,b:0.3'. Switches the model to multilayer.",
    )
    args = parser.parse_args()

    cfg = load_config(args.config)
    if args.layers is not None:
        cfg["model"]["type"] = "multilayer"
        cfg["model"]["layers"] = args.layers

    run(cfg, args.results_root, args.experiment_name)


if __name__ == "__main__":
    main()
