from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np


@dataclass(frozen=True)
class FitResult:
    """Vertex-form parabola ``y(t) = p2 * (t - p1)**2 + p0`` fitted to a window.

    Attributes
    ----------
    p0, p1, p2:
        Vertex value, vertex location and curvature. ``p1`` is in the units of
        the abscissa the caller fitted against (sample index or ns).
    errors:
        One-sigma uncertainties of ``(p0, p1, p2)`` from the fit covariance.
        NaN when the covariance cannot be estimated (e.g. exactly 3 points).
    chi2:
        Sum of squared residuals at the solution.
    ndf:
        Number of points minus the 3 free parameters.
    t, y:
        The points that took part in the fit, shape ``(n_points,)``.
    slope:
        Zero unless the points are collinear. Vertex form then has no finite
        optimum, so the fitted line ``slope * (t - p1) + p0`` is kept instead,
        anchored at ``p1`` with ``p2 = 0`` and ``ndf = n_points - 2``.
    """

    p0: float
    p1: float
    p2: float

    errors: Tuple[float, float, float]
    chi2: float
    ndf: int

    t: np.ndarray
    y: np.ndarray

    slope: float = 0.0

    @property
    def params(self) -> Tuple[float, float, float]:
        return (self.p0, self.p1, self.p2)

    def evaluate(self, t) -> np.ndarray:
        t = np.asarray(t, dtype=float)
        u = t - self.p1
        return self.p2 * u ** 2 + self.slope * u + self.p0


@dataclass(frozen=True)
class AmplitudeResult:
    """Outcome of the parabolic peak refinement.

    ``window`` is the inclusive sample-index range ``(lo, hi)`` that was fitted,
    after clipping to the sequence bounds.
    """

    amplitude: float
    i_min: int
    window: Tuple[int, int]
    fit: FitResult


@dataclass(frozen=True)
class CrossingResult:
    """Outcome of the constant-fraction timing extraction.

    Attributes
    ----------
    time:
        Refined zero-crossing time in ns.
    raw_time:
        Coarse crossing time ``i_zerocross * dt`` in ns.
    roots:
        Both algebraic roots of the fitted parabola, ascending.  Equal when
        the fit window is collinear and the fit is a line.
    derived:
        The bipolar CFD signal the crossing was searched on.
    i_max, i_min, i_zerocross:
        Sample indices of the derived maximum, minimum and first
        non-positive sample after the maximum.
    fit:
        Parabola fitted against time in ns.
    """

    time: float
    raw_time: float
    roots: Tuple[float, float]

    derived: np.ndarray
    i_max: int
    i_min: int
    i_zerocross: int

    fit: FitResult


@dataclass(frozen=True)
class PulseFeatures:
    """Per-pulse features produced by the pipeline.

    Failed extractions leave the value at NaN and record the failure kind
    (see :mod:`wfd_analysis.errors`) in the matching ``*_error`` field.
    """

    baseline: float
    amplitude: float
    crossing_time: float

    amplitude_error: Optional[str] = None
    timing_error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.amplitude_error is None and self.timing_error is None
