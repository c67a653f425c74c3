import math

import pytest

from physics.kronig_penney import KPParams, dispersion
from physics.separable_2d import (
    AxisLattice2DParams,
    Separable2DParams,
    allowed_2d,
    band_structure_2d,
    dispersion_2d,
    dispersion_surface_2d,
    effective_mass_2d,
    energy_separable,
    generate_2d_k_grid,
    k_vector_magnitude,
    principal_k_2d,
    scan_2d_allowed,
    solve_axis_energy,
)


PARAMS = Separable2DParams(a=0.5, b=0.25, V0=10.0, mu=1.0, Lx=1.0, Ly=1.0)


def test_k_vector_magnitude():
    assert k_vector_magnitude(0.0, 0.0) == 0.0
    assert k_vector_magnitude(1.0, 0.0) == 1.0
    assert k_vector_magnitude(3.0, 4.0) == 5.0
    assert k_vector_magnitude(1.0, 1.0) == pytest.approx(math.sqrt(2.0))


def test_periods_default_to_cell_length():
    p = Separable2DParams(a=0.5, b=0.25, V0=10.0)
    assert p.period_x == 1.5
    assert p.period_y == 1.5
    assert PARAMS.period_x == 1.0


def test_dispersion_2d_reuses_1d_value():
    one_d = KPParams(a=0.5, b=0.25, V0=10.0, mu=1.0)
    for E in (0.0, 5.0, 15.0):
        assert dispersion_2d(E, 0.3, 0.7, PARAMS) == dispersion(E, one_d)


@pytest.mark.parametrize("kx,ky", [(0.1, 0.2), (0.0, 1.3), (2.5, 0.4), (3.1, 3.0)])
def test_dispersion_2d_axis_exchange_symmetry(kx, ky):
    for E in (2.0, 5.0, 15.0, 18.0):
        assert abs(dispersion_2d(E, kx, ky, PARAMS) - dispersion_2d(E, ky, kx, PARAMS)) <= 1e-10


def test_allowed_2d():
    assert allowed_2d(15.0, 0.1, 0.1, PARAMS)
    assert not allowed_2d(5.0, 0.1, 0.1, PARAMS)


def test_principal_k_2d_for_allowed_energy():
    k = principal_k_2d(15.0, PARAMS)
    assert k is not None
    kx, ky = k
    assert 0.0 <= kx <= math.pi
    assert 0.0 <= ky <= math.pi
    assert math.cos(kx * PARAMS.period_x) == pytest.approx(dispersion_2d(15.0, 0.0, 0.0, PARAMS), abs=1e-12)


def test_principal_k_2d_forbidden_energy_returns_none():
    assert principal_k_2d(5.0, PARAMS) is None


def test_generate_2d_k_grid_default_bounds_and_order():
    grid = generate_2d_k_grid(Lx=1.0, Ly=1.0, nx=3, ny=3)
    assert len(grid) == 9
    assert all(len(p) == 2 for p in grid)
    assert grid[0] == (0.0, 0.0)
    assert grid[1] == (0.0, pytest.approx(math.pi / 2.0))
    assert grid[3] == (pytest.approx(math.pi / 2.0), 0.0)
    assert grid[-1] == (pytest.approx(math.pi), pytest.approx(math.pi))
    for kx, ky in grid:
        assert 0.0 <= kx <= math.pi + 1e-12
        assert 0.0 <= ky <= math.pi + 1e-12


def test_generate_2d_k_grid_custom_bounds():
    grid = generate_2d_k_grid(Lx=2.0, Ly=1.0, nx=2, ny=4, kx_min=-1.0, kx_max=1.0, ky_min=0.5, ky_max=2.0)
    assert len(grid) == 8
    assert grid[0] == (-1.0, 0.5)
    assert grid[3] == (-1.0, 2.0)
    assert grid[4] == (1.0, 0.5)


def test_generate_2d_k_grid_rejects_small_grid():
    with pytest.raises(ValueError, match="nx and ny"):
        generate_2d_k_grid(Lx=1.0, Ly=1.0, nx=1, ny=3)


def test_band_structure_2d_fields():
    k_grid = [(0.0, 0.0), (0.1, 0.1), (0.5, 0.5)]
    data = band_structure_2d(5.0, k_grid, PARAMS)
    assert len(data) == 3
    for point in data:
        assert set(point) == {"kx", "ky", "D", "allowed", "k_magnitude"}
        assert point["k_magnitude"] == pytest.approx(k_vector_magnitude(point["kx"], point["ky"]))
        assert point["allowed"] is False


def test_dispersion_surface_2d_is_finite():
    surface = dispersion_surface_2d(5.0, [(0.0, 0.0), (0.1, 0.1), (0.5, 0.5)], PARAMS)
    assert len(surface) == 3
    for kx, ky, D in surface:
        assert math.isfinite(D)


def test_scan_2d_allowed_covers_energy_range():
    k_grid = [(0.0, 0.0), (0.1, 0.1), (0.5, 0.5)]
    rows = scan_2d_allowed(0.0, 20.0, k_grid, PARAMS)
    assert len(rows) == 101
    assert rows[0]["E"] == 0.0
    assert rows[-1]["E"] == pytest.approx(20.0)
    assert all(0 <= r["allowed_count"] <= 3 for r in rows)
    assert any(r["allowed_count"] == 3 for r in rows)


def test_effective_mass_of_k_independent_surface_is_infinite():
    mass = effective_mass_2d(5.0, 0.1, 0.1, PARAMS)
    assert mass.m_star_xy == 0.0
    assert math.isinf(mass.m_star_x)
    assert math.isinf(mass.m_star_y)


def test_effective_mass_of_parabolic_surface():
    mass = effective_mass_2d(0.0, 0.1, 0.2, PARAMS, surface=lambda kx, ky: 0.5 * kx * kx + ky * ky)
    assert mass.m_star_x == pytest.approx(1.0, rel=1e-2)
    assert mass.m_star_y == pytest.approx(0.5, rel=1e-2)
    assert mass.m_star_xy == 0.0


def test_solve_axis_energy_quarter_zone():
    params = KPParams(a=0.5, b=0.25, V0=10.0, mu=1.0)
    k = math.pi / (2.0 * params.period)
    E = solve_axis_energy(k, params)
    assert E is not None
    assert 15.0 < E < 15.5
    assert dispersion(E, params) == pytest.approx(0.0, abs=1e-6)


def test_solve_axis_energy_without_bracket():
    params = KPParams(a=0.5, b=0.25, V0=10.0, mu=1.0)
    assert solve_axis_energy(math.pi / (2.0 * params.period), params, e_max=1.0) is None


def test_energy_separable_sums_axes():
    lattice = AxisLattice2DParams(ax=0.5, ay=0.5, bx=0.25, by=0.25, V0=10.0, mu=1.0)
    k = math.pi / 3.0
    E_axis = solve_axis_energy(k, lattice.axis("x"))
    total = energy_separable(k, k, lattice)
    assert total == pytest.approx(2.0 * E_axis)


def test_energy_separable_missing_axis_returns_none():
    lattice = AxisLattice2DParams(ax=0.5, ay=0.5, bx=0.25, by=0.25, V0=10.0, mu=1.0)
    assert energy_separable(math.pi / 3.0, math.pi / 3.0, lattice, e_max=1.0) is None


def test_axis_lattice_rejects_unknown_axis():
    lattice = AxisLattice2DParams(ax=0.5, ay=0.5, bx=0.25, by=0.25, V0=10.0)
    with pytest.raises(ValueError, match="axis"):
        lattice.axis("z")
