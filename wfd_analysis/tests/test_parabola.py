"""Tests for the vertex-form parabolic fitter."""

from __future__ import annotations

import numpy as np
import pytest

from wfd_analysis.analysis import parabola
from wfd_analysis.analysis.parabola import fit_parabola, vertex_parabola
from wfd_analysis.errors import FitFailed, InsufficientPoints, InvalidWindow


def test_exact_parabola_is_recovered() -> None:
    t = np.linspace(-2.0, 3.0, 11)
    y = vertex_parabola(t, 1.5, 0.4, -2.25)

    fit = fit_parabola(t, y, p0=1.0, p1=0.0)

    assert fit.p0 == pytest.approx(1.5, abs=1e-7)
    assert fit.p1 == pytest.approx(0.4, abs=1e-7)
    assert fit.p2 == pytest.approx(-2.25, abs=1e-7)
    assert fit.chi2 == pytest.approx(0.0, abs=1e-12)
    assert fit.ndf == 11 - 3


def test_exact_parabola_without_seeds() -> None:
    t = np.arange(20, dtype=float) * 0.5
    y = vertex_parabola(t, -7.0, 4.3, 0.8)
    fit = fit_parabola(t, y)
    assert fit.params == pytest.approx((-7.0, 4.3, 0.8), abs=1e-7)


def test_t_range_restricts_points() -> None:
    t = np.arange(10, dtype=float)
    y = vertex_parabola(t, 2.0, 5.0, -1.0)
    y[:3] = 1000.0  # outliers outside the range must not matter

    fit = fit_parabola(t, y, t_range=(3.0, 8.0), p1=5.0, p0=2.0)

    assert fit.t.tolist() == [3.0, 4.0, 5.0, 6.0, 7.0, 8.0]
    assert fit.params == pytest.approx((2.0, 5.0, -1.0), abs=1e-7)


def test_three_points_interpolate_and_errors_are_nan() -> None:
    t = np.array([0.0, 1.0, 2.0])
    y = np.array([1.0, 0.0, 1.0])

    fit = fit_parabola(t, y)

    assert fit.params == pytest.approx((0.0, 1.0, 1.0), abs=1e-7)
    assert fit.ndf == 0
    assert np.allclose(fit.evaluate(t), y)
    # covariance is not estimable with zero degrees of freedom
    assert all(np.isnan(e) for e in fit.errors)


def test_errors_are_finite_with_noise() -> None:
    rng = np.random.default_rng(11)
    t = np.linspace(-3, 3, 25)
    y = vertex_parabola(t, 4.0, 0.2, -0.5) + rng.normal(0, 0.01, t.size)

    fit = fit_parabola(t, y, p0=4.0, p1=0.0)

    assert fit.params == pytest.approx((4.0, 0.2, -0.5), abs=0.05)
    assert all(np.isfinite(e) and e > 0 for e in fit.errors)


def test_fewer_than_three_points_in_range() -> None:
    t = np.arange(10, dtype=float)
    y = t ** 2
    with pytest.raises(InsufficientPoints):
        fit_parabola(t, y, t_range=(2.0, 3.0))
    with pytest.raises(InsufficientPoints):
        fit_parabola(t, y, t_range=(20.0, 30.0))


def test_repeated_abscissae_do_not_count_as_distinct() -> None:
    t = np.array([1.0, 1.0, 2.0, 2.0])
    y = np.array([0.0, 0.1, 1.0, 1.1])
    with pytest.raises(InsufficientPoints):
        fit_parabola(t, y)


def test_non_finite_points_are_ignored() -> None:
    t = np.arange(6, dtype=float)
    y = vertex_parabola(t, 0.5, 2.0, 3.0)
    y[5] = np.nan
    fit = fit_parabola(t, y)
    assert fit.t.size == 5
    assert fit.params == pytest.approx((0.5, 2.0, 3.0), abs=1e-7)


def test_inverted_range() -> None:
    t = np.arange(5, dtype=float)
    with pytest.raises(InvalidWindow):
        fit_parabola(t, t, t_range=(3.0, 1.0))


def test_shape_mismatch() -> None:
    with pytest.raises(ValueError):
        fit_parabola(np.arange(5.0), np.arange(4.0))


def test_fit_is_deterministic_and_keeps_no_reference_to_input() -> None:
    t = np.arange(8, dtype=float)
    y = vertex_parabola(t, 1.0, 3.5, -0.3) + np.array([0.01, -0.02, 0.0, 0.03, -0.01, 0.02, 0.0, -0.03])

    a = fit_parabola(t, y, p0=1.0, p1=3.0)
    b = fit_parabola(t, y, p0=1.0, p1=3.0)
    assert a.params == b.params

    y[:] = 0.0
    assert not np.all(a.y == 0.0)


# -----------------------------------------------------------------------
# Vertex far from the window, collinear points, solver failure
# -----------------------------------------------------------------------


def test_vertex_far_outside_window_ignores_poor_seeds() -> None:
    # 5 - t + 0.01 t**2 == 0.01 (t - 50)**2 - 20
    t = np.arange(7, dtype=float)
    y = 5.0 - t + 0.01 * t ** 2

    fit = fit_parabola(t, y, p0=5.0, p1=0.0)

    assert fit.params == pytest.approx((-20.0, 50.0, 0.01), abs=1e-6)
    assert fit.chi2 == pytest.approx(0.0, abs=1e-12)
    assert fit.slope == 0.0


def test_collinear_points_give_a_line_anchored_at_p1() -> None:
    t = np.arange(5, dtype=float)
    y = 3.0 - 2.0 * t

    fit = fit_parabola(t, y, p1=1.0)

    assert fit.p2 == 0.0
    assert fit.p1 == 1.0
    assert fit.p0 == pytest.approx(1.0, abs=1e-9)
    assert fit.slope == pytest.approx(-2.0, abs=1e-9)
    assert fit.ndf == 5 - 2
    assert np.allclose(fit.evaluate(t), y)
    assert np.isnan(fit.errors[1]) and np.isnan(fit.errors[2])


def test_collinear_points_without_seed_anchor_at_mean() -> None:
    t = np.arange(5, dtype=float)
    fit = fit_parabola(t, 3.0 - 2.0 * t)
    assert fit.p1 == pytest.approx(2.0)
    assert fit.p0 == pytest.approx(-1.0, abs=1e-9)


def test_flat_points_are_a_zero_slope_line() -> None:
    fit = fit_parabola(np.arange(4, dtype=float), np.full(4, 2.5))
    assert fit.p2 == 0.0
    assert fit.slope == pytest.approx(0.0, abs=1e-12)
    assert fit.p0 == pytest.approx(2.5)


def test_solver_not_converging_raises_fit_failed(monkeypatch) -> None:
    def no_convergence(*args, **kwargs):
        raise RuntimeError("Optimal parameters not found: Number of calls to function has reached maxfev = 1.")

    monkeypatch.setattr(parabola, "curve_fit", no_convergence)
    t = np.arange(6, dtype=float)

    with pytest.raises(FitFailed) as info:
        fit_parabola(t, vertex_parabola(t, 1.0, 2.0, 0.5))
    assert info.value.kind == "FitFailed"


def test_non_finite_solution_raises_fit_failed(monkeypatch) -> None:
    monkeypatch.setattr(parabola, "curve_fit", lambda *a, **kw: (np.array([np.nan, 1.0, 1.0]), np.eye(3)))
    t = np.arange(6, dtype=float)
    with pytest.raises(FitFailed):
        fit_parabola(t, vertex_parabola(t, 1.0, 2.0, 0.5))
