"""Local parabolic fit in vertex form.

The model is

    y(t) = p2 * (t - p1)**2 + p0

fitted by nonlinear least squares (:func:`scipy.optimize.curve_fit`) to the
points whose abscissa lies in a caller-supplied range.  The solver starts from
the vertex of the closed-form quadratic over the same points, which is already
the least-squares optimum, so the result is deterministic and does not depend
on how far the vertex lies from the window.
"""

from __future__ import annotations

import warnings
from typing import Optional, Tuple

import numpy as np
from scipy.optimize import OptimizeWarning, curve_fit

from wfd_analysis.analysis.preprocess import as_samples
from wfd_analysis.errors import FitFailed, InsufficientPoints, InvalidWindow
from wfd_analysis.models.results import FitResult


MIN_DISTINCT_POINTS = 3

# Curvature below this fraction of the data scale over the window counts as a line.
FLAT_CURVATURE_RTOL = 1e-9


def vertex_parabola(t, p0, p1, p2):
    """Vertex-form parabola, vectorized over ``t``.  Signature suits ``curve_fit``."""
    return p2 * (t - p1) ** 2 + p0


def select_window(
    t: np.ndarray,
    y: np.ndarray,
    t_range: Optional[Tuple[float, float]],
) -> Tuple[np.ndarray, np.ndarray]:
    """Return the finite points with ``t_range[0] <= t <= t_range[1]``."""
    mask = np.isfinite(t) & np.isfinite(y)
    if t_range is not None:
        lo, hi = float(t_range[0]), float(t_range[1])
        if hi < lo:
            raise InvalidWindow(f"Fit range is inverted: [{lo}, {hi}]")
        mask &= (t >= lo) & (t <= hi)
    return t[mask], y[mask]


def _closed_form(t: np.ndarray, y: np.ndarray) -> Optional[Tuple[float, float, float]]:
    """(p0, p1, p2) of the ordinary quadratic least-squares fit.

    Vertex form is a reparametrization of ``a*t**2 + b*t + c`` whenever
    ``a != 0``, so this is already the least-squares optimum.  Returns
    ``None`` when the curvature vanishes to rounding, i.e. the points are
    collinear.
    """
    a, b, c = np.polyfit(t, y, 2)
    span = float(t.max() - t.min())
    y_scale = float(np.max(np.abs(y)))
    if not np.isfinite(a) or abs(a) * span * span <= FLAT_CURVATURE_RTOL * y_scale:
        return None
    return float(c - b * b / (4.0 * a)), float(-b / (2.0 * a)), float(a)


def _fit_line(ts: np.ndarray, ys: np.ndarray, p0: Optional[float], p1: Optional[float], maxfev: int) -> FitResult:
    anchor = float(np.mean(ts)) if p1 is None else float(p1)
    slope, intercept = np.polyfit(ts, ys, 1)
    guess = [float(slope * anchor + intercept) if p0 is None else float(p0), float(slope)]

    def line(t, q0, s):
        return s * (t - anchor) + q0

    popt, pcov = _curve_fit(line, ts, ys, guess, maxfev)
    err = _sigmas(pcov)
    resid = ys - line(ts, *popt)

    return FitResult(
        p0=float(popt[0]),
        p1=anchor,
        p2=0.0,
        errors=(float(err[0]), np.nan, np.nan),
        chi2=float(np.sum(resid * resid)),
        ndf=int(ts.size - 2),
        t=ts.copy(),
        y=ys.copy(),
        slope=float(popt[1]),
    )


def _curve_fit(model, ts, ys, guess, maxfev):
    with warnings.catch_warnings():
        # Without spare degrees of freedom the covariance is not estimable; errors become NaN.
        warnings.simplefilter("ignore", OptimizeWarning)
        try:
            popt, pcov = curve_fit(model, ts, ys, p0=guess, maxfev=int(maxfev))
        except RuntimeError as exc:
            raise FitFailed(f"Parabolic fit did not converge: {exc}") from exc

    if not np.all(np.isfinite(popt)):
        raise FitFailed(f"Parabolic fit returned non-finite parameters: {np.asarray(popt).tolist()}")
    return popt, pcov


def _sigmas(pcov) -> np.ndarray:
    var = np.diag(np.asarray(pcov, dtype=float))
    err = np.full(var.size, np.nan)
    ok = np.isfinite(var) & (var >= 0.0)
    err[ok] = np.sqrt(var[ok])
    return err


def fit_parabola(
    t,
    y,
    *,
    t_range: Optional[Tuple[float, float]] = None,
    p0: Optional[float] = None,
    p1: Optional[float] = None,
    maxfev: int = 2000,
) -> FitResult:
    """Fit ``y(t) = p2 * (t - p1)**2 + p0`` to the points inside ``t_range``.

    Parameters
    ----------
    t, y:
        Abscissae and ordinates, both shape ``(n,)``.  Non-finite points are
        skipped.
    t_range:
        Inclusive ``(lo, hi)`` restriction on ``t``.  ``None`` uses every point.
    p0, p1:
        Caller guesses for the vertex value and location.  The solver starts
        from the closed-form vertex; the guesses only matter when the points
        are collinear, where ``p1`` anchors the fitted line (see
        :class:`FitResult`) and ``p0`` seeds its value there.
    maxfev:
        Maximum number of model evaluations for the solver.

    Returns
    -------
    FitResult
        Parameters, uncertainties and the points that were fitted.

    Raises
    ------
    InvalidWindow
        If ``t_range`` is inverted.
    InsufficientPoints
        If fewer than 3 distinct abscissae fall inside the range.
    FitFailed
        If the solver does not converge to finite parameters.
    """
    t = as_samples(t)
    y = as_samples(y)
    if t.shape != y.shape:
        raise ValueError(f"t and y must have the same shape, got {t.shape} and {y.shape}")

    ts, ys = select_window(t, y, t_range)
    n_distinct = int(np.unique(ts).size)
    if n_distinct < MIN_DISTINCT_POINTS:
        raise InsufficientPoints(
            f"Parabolic fit needs >= {MIN_DISTINCT_POINTS} distinct points, got {n_distinct} in range {t_range}"
        )

    seed = _closed_form(ts, ys)
    if seed is None:
        return _fit_line(ts, ys, p0, p1, maxfev)

    popt, pcov = _curve_fit(vertex_parabola, ts, ys, list(seed), maxfev)
    err = _sigmas(pcov)
    resid = ys - vertex_parabola(ts, *popt)

    return FitResult(
        p0=float(popt[0]),
        p1=float(popt[1]),
        p2=float(popt[2]),
        errors=(float(err[0]), float(err[1]), float(err[2])),
        chi2=float(np.sum(resid * resid)),
        ndf=int(ts.size - 3),
        t=ts.copy(),
        y=ys.copy(),
    )
