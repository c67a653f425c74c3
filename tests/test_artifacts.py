import csv

import numpy as np

from numerics.band_edges import BandInterval
from physics.models import DispersionSample
from utils.artifacts import bands_path, save_arrays, write_bands_csv, write_dispersion_csv, write_k_grid_csv


def _read(path):
    with path.open("r", encoding="utf-8", newline="") as f:
        return list(csv.reader(f))


def test_save_arrays(tmp_path):
    save_arrays(tmp_path, a=np.zeros((2, 2)), b=np.ones((3,)))
    assert (tmp_path / "a.npy").exists()
    assert (tmp_path / "b.npy").exists()


def test_bands_path():
    assert bands_path("out/dispersion.csv").name == "dispersion-bands.csv"
    assert bands_path("multi").name == "multi-bands.csv"


def test_write_dispersion_csv(tmp_path):
    out = tmp_path / "dispersion.csv"
    samples = [DispersionSample(E=0.0, D=1.0, allowed=True, k=0.0), DispersionSample(E=2.5, D=3.2, allowed=False, k=0.0)]
    samples.append(DispersionSample(E=5.0, D=-0.5, allowed=True, k=0.6981317007977318))
    write_dispersion_csv(out, samples)
    rows = _read(out)
    assert rows[0] == ["E", "D", "allowed", "k_minus", "k_plus"]
    assert rows[1] == ["0", "1", "true", "-0", "0"]
    assert rows[2][2] == "false"
    assert rows[3] == ["5", "-0.5", "true", "-0.698131700798", "0.698131700798"]


def test_write_bands_csv(tmp_path):
    out = tmp_path / "dispersion-bands.csv"
    write_bands_csv(out, [BandInterval(1.25, 2.5), BandInterval(4.0, 6.0)])
    assert _read(out) == [["E_lo", "E_hi"], ["1.25", "2.5"], ["4", "6"]]


def test_write_k_grid_csv(tmp_path):
    out = tmp_path / "k_grid.csv"
    write_k_grid_csv(out, [{"kx": 0.0, "ky": 0.5, "D": 0.25, "allowed": True}])
    assert _read(out) == [["kx", "ky", "D", "allowed"], ["0", "0.5", "0.25", "true"]]
