from __future__ import annotations

"""Pulse amplitude by parabolic peak refinement.

Pulses are negative-going by convention.  The amplitude is the depth of the
vertex of a parabola fitted to the few samples around the observed minimum,
reported as a positive magnitude.  Sample 0 never takes part in the minimum
search: it may carry a digitizer artifact.
"""

import numpy as np

from wfd_analysis.analysis.parabola import fit_parabola
from wfd_analysis.analysis.preprocess import as_finite_samples
from wfd_analysis.errors import EmptyInput
from wfd_analysis.models.results import AmplitudeResult


DEFAULT_HALF_WINDOW = 3


def fit_amplitude(samples, *, half_window: int = DEFAULT_HALF_WINDOW) -> AmplitudeResult:
    """Locate the pulse minimum and refine it with a local parabola.

    Parameters
    ----------
    samples:
        Sample sequence of shape ``(n,)`` with ``n >= 2``; the abscissa of the
        fit is the sample index.
    half_window:
        The fit uses indices ``[i_min - half_window, i_min + half_window]``,
        clipped to the sequence bounds.

    Returns
    -------
    AmplitudeResult
        ``amplitude = -p0`` plus the fit and the window it used.

    Raises
    ------
    EmptyInput
        If fewer than 2 samples are given.
    InsufficientPoints
        If the clipped window holds fewer than 3 samples.
    NonFiniteInput
        If any sample is NaN or infinite.
    """
    x = as_finite_samples(samples)
    if x.size < 2:
        raise EmptyInput(f"Amplitude extraction needs >= 2 samples, got {x.size}")

    i_min = 1 + int(np.argmin(x[1:]))
    hw = int(half_window)
    lo = max(0, i_min - hw)
    hi = min(x.size - 1, i_min + hw)

    idx = np.arange(x.size, dtype=float)
    fit = fit_parabola(idx, x, t_range=(lo, hi), p0=x[i_min], p1=i_min)

    return AmplitudeResult(
        amplitude=-fit.p0,
        i_min=i_min,
        window=(lo, hi),
        fit=fit,
    )


def extract_amplitude(samples, *, half_window: int = DEFAULT_HALF_WINDOW) -> float:
    """Positive pulse amplitude, ``-p0`` of the refined parabola.  See :func:`fit_amplitude`."""
    return fit_amplitude(samples, half_window=half_window).amplitude
