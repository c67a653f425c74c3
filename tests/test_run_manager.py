import json

from utils.run_manager import create_run, finalize_run


def _meta(ctx):
    return json.loads(ctx.meta_path.read_text(encoding="utf-8"))


def test_create_run_unique(tmp_path):
    cfg = {"model": {"type": "simple"}, "scan": {"steps": 100}}
    ctx1 = create_run(tmp_path, "exp", cfg)
    ctx2 = create_run(tmp_path, "exp", cfg)
    assert ctx1.run_dir != ctx2.run_dir
    assert ctx1.logs_dir.exists()
    assert ctx2.reports_dir.exists()
    assert "_simple_n100_" in ctx1.run_id


def test_create_run_records_model_and_scan_window(tmp_path):
    cfg = {"model": {"type": "simple", "a": 1.0, "b": 0.5, "V0": 10.0}, "scan": {"Emin": 0.0, "Emax": 25.0, "steps": 500}}
    ctx = create_run(tmp_path, "exp", cfg)
    meta = _meta(ctx)
    assert meta["status"] == "started"
    assert meta["model"]["V0"] == 10.0
    assert meta["scan"] == {"Emin": 0.0, "Emax": 25.0, "steps": 500}


def test_finalize_run_records_status(tmp_path):
    cfg = {"model": {"type": "multilayer"}, "scan": {"steps": 10}}
    ctx = create_run(tmp_path, "exp", cfg)
    finalize_run(ctx, status="failed", error_message="boom")
    meta = _meta(ctx)
    assert meta["status"] == "failed"
    assert meta["error"] == "boom"
    assert meta["model_type"] == "multilayer"
    assert "num_bands" not in meta


def test_finalize_run_records_band_outcome(tmp_path):
    cfg = {"model": {"type": "simple"}, "scan": {"steps": 10}}
    ctx = create_run(tmp_path, "exp", cfg)
    finalize_run(ctx, status="completed", period=3.0, num_bands=4)
    meta = _meta(ctx)
    assert meta["period"] == 3.0
    assert meta["num_bands"] == 4
    assert "end_time" in meta
