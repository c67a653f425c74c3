"""Run directories for band-structure scans.

Each run gets ``<results_root>/<experiment>/<run_id>/`` with a fixed set of
subdirectories and a ``run_meta.json`` that records the model, the energy
window and, once finalized, the outcome of the scan.
"""

from __future__ import annotations

import json
import platform
import socket
import subprocess
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path


SUBDIRS = ("logs", "arrays", "plots", "reports")
META_NAME = "run_meta.json"


@dataclass
class RunContext:
    run_id: str
    run_dir: Path
    logs_dir: Path
    arrays_dir: Path
    plots_dir: Path
    reports_dir: Path

    @property
    def meta_path(self) -> Path:
        return self.run_dir / META_NAME


def _git_sha() -> str:
    try:
        out = subprocess.check_output(
            ["git", "rev-parse", "--short", "HEAD"],
            text=True,
            stderr=subprocess.DEVNULL,
        ).strip()
        return out or "nogit"
    except (OSError, subprocess.CalledProcessError):
        return "nogit"


def _build_run_id(experiment_name: str, model_type: str, steps: int, sha: str) -> str:
    stamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    return f"{stamp}_{experiment_name}_{model_type}_n{steps}_{sha}"


def _next_free_dir(path: Path) -> Path:
    candidate = path
    idx = 0
    while candidate.exists():
        idx += 1
        candidate = path.with_name(f"{path.name}_r{idx:02d}")
    return candidate


def _read_meta(ctx: RunContext) -> dict:
    with ctx.meta_path.open("r", encoding="utf-8") as f:
        return json.load(f)


def _write_meta(ctx: RunContext, meta: dict) -> None:
    with ctx.meta_path.open("w", encoding="utf-8") as f:
        json.dump(meta, f, indent=2)


def _scan_window(cfg: dict) -> dict:
    scan = cfg.get("scan", {})
    return {
        "Emin": scan.get("Emin"),
        "Emax": scan.get("Emax"),
        "steps": scan.get("steps"),
    }


def create_run(results_root: str | Path, experiment_name: str, cfg: dict) -> RunContext:
    model_cfg = dict(cfg["model"])
    model_type = str(model_cfg.get("type", "simple"))
    steps = int(cfg["scan"]["steps"])
    sha = _git_sha()
    run_id = _build_run_id(experiment_name, model_type, steps, sha)

    run_dir = _next_free_dir(Path(results_root) / experiment_name / run_id)
    run_dir.mkdir(parents=True, exist_ok=False)
    for d in SUBDIRS:
        (run_dir / d).mkdir(exist_ok=True)

    ctx = RunContext(
        run_id=run_id,
        run_dir=run_dir,
        logs_dir=run_dir / "logs",
        arrays_dir=run_dir / "arrays",
        plots_dir=run_dir / "plots",
        reports_dir=run_dir / "reports",
    )
    _write_meta(
        ctx,
        {
            "run_id": run_id,
            "status": "started",
            "start_time": datetime.now().isoformat(),
            "hostname": socket.gethostname(),
            "platform": platform.platform(),
            "python": platform.python_version(),
            "git_sha": sha,
            "model_type": model_type,
            "model": model_cfg,
            "scan": _scan_window(cfg),
        },
    )
    return ctx


def finalize_run(
    ctx: RunContext,
    status: str,
    error_message: str | None = None,
    period: float | None = None,
    num_bands: int | None = None,
) -> None:
    """Stamp the end time and outcome; band results are only recorded when given."""
    meta = _read_meta(ctx)
    meta["status"] = status
    meta["end_time"] = datetime.now().isoformat()
    if period is not None:
        meta["period"] = float(period)
    if num_bands is not None:
        meta["num_bands"] = int(num_bands)
    if error_message:
        meta["error"] = error_message
    _write_meta(ctx, meta)
