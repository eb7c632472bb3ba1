"""Constant-fraction (CFD) timing with sub-sample parabolic refinement.

The bipolar CFD signal is built from a delayed, unattenuated copy of the
calibrated pulse minus an attenuated, undelayed copy:

    derived[i] = 0                                                  i <= delay
    derived[i] = calibrated[i - delay] - constant * calibrated[i]   otherwise

For a negative-going pulse the derived signal first rises into a positive
lobe, then falls through zero into a negative lobe.  The crossing time is
largely independent of the pulse amplitude.

Extraction stages
-----------------
1) build the derived signal;
2) locate its maximum and minimum (first occurrence);
3) reject shapes without a positive lobe, or with the maximum after the minimum;
4) scan forward from the maximum for the first non-positive sample before
   the minimum;
5) fit a parabola against time over ``[i_max, i_zerocross + 1]``;
6) solve the parabola (a line when the window is collinear) for zero and
   keep the root nearest the coarse crossing.

Every stage that cannot proceed raises its own exception from
:mod:`wfd_analysis.errors`; no sentinel values are returned.
"""

from __future__ import annotations

import math

import numpy as np

from wfd_analysis.analysis.parabola import fit_parabola
from wfd_analysis.analysis.preprocess import as_finite_samples
from wfd_analysis.errors import (
    EmptyInput,
    InvalidWindow,
    NoPositiveLobe,
    NoRealRoot,
    NoZeroCrossing,
    WrongLobeOrder,
)
from wfd_analysis.models.results import CrossingResult


def cfd_signal(calibrated, constant: float, delay_samples: int) -> np.ndarray:
    """Return the bipolar CFD signal of a calibrated pulse.

    Samples with index ``<= delay_samples`` are zero, including index
    ``delay_samples`` itself.
    """
    x = as_finite_samples(calibrated)
    d = int(delay_samples)
    if x.size == 0:
        raise EmptyInput("CFD needs a non-empty sample sequence")
    if d < 0 or d >= x.size:
        raise InvalidWindow(f"CFD delay must be in [0, {x.size - 1}], got {d}")

    derived = np.zeros_like(x)
    derived[d + 1 :] = x[1 : x.size - d] - x[d + 1 :] * float(constant)
    return derived


def first_zero_crossing(derived: np.ndarray, i_max: int, i_min: int) -> int:
    """First index in ``[i_max, i_min)`` where ``derived <= 0``."""
    seg = np.asarray(derived[i_max:i_min])
    hits = np.flatnonzero(seg <= 0.0)
    if hits.size == 0:
        raise NoZeroCrossing(f"No CFD zero crossing between maximum (i={i_max}) and minimum (i={i_min})")
    return int(i_max + hits[0])


def fit_crossing_time(
    calibrated,
    constant: float,
    delay_samples: int,
    sampling_frequency_ghz: float,
) -> CrossingResult:
    """Run the full CFD extraction and return every intermediate by value.

    Parameters
    ----------
    calibrated:
        Calibrated (baseline-subtracted, scaled) sample sequence.
    constant:
        Attenuation of the undelayed copy.
    delay_samples:
        Delay of the unattenuated copy, ``0 <= delay_samples < n``.
    sampling_frequency_ghz:
        Sampling frequency; times are returned in ns.

    Returns
    -------
    CrossingResult
    """
    f = float(sampling_frequency_ghz)
    if not math.isfinite(f) or f <= 0.0:
        raise ValueError(f"sampling_frequency_ghz must be finite and > 0, got {sampling_frequency_ghz}")
    dt = 1.0 / f

    derived = cfd_signal(calibrated, constant, delay_samples)

    i_max = int(np.argmax(derived))
    i_min = int(np.argmin(derived))

    if derived[i_max] <= 0.0:
        raise NoPositiveLobe(f"CFD signal never rises above zero (max={derived[i_max]:.6g} at i={i_max})")
    if i_max > i_min:
        raise WrongLobeOrder(f"CFD maximum (i={i_max}) follows its minimum (i={i_min})")

    i_zc = first_zero_crossing(derived, i_max, i_min)

    t = np.arange(derived.size, dtype=float) * dt
    fit = fit_parabola(
        t,
        derived,
        t_range=(i_max * dt, (i_zc + 1) * dt),
        p0=derived[i_max],
        p1=i_max * dt,
    )

    if fit.p2 == 0.0:
        # collinear fit window: the refined edge is a straight line
        if fit.slope == 0.0:
            raise NoRealRoot(f"Refined CFD edge is flat at {fit.p0:.6g}")
        root = fit.p1 - fit.p0 / fit.slope
        roots = (root, root)
    else:
        D = -fit.p0 / fit.p2
        if not math.isfinite(D) or D < 0.0:
            raise NoRealRoot(f"Refined CFD parabola has no real zero (p0={fit.p0:.6g}, p2={fit.p2:.6g})")
        half = math.sqrt(D)
        roots = (fit.p1 - half, fit.p1 + half)

    raw_time = i_zc * dt
    # min() keeps the earlier root on an exact tie
    time = min(roots, key=lambda r: abs(r - raw_time))

    return CrossingResult(
        time=float(time),
        raw_time=float(raw_time),
        roots=(float(roots[0]), float(roots[1])),
        derived=derived,
        i_max=i_max,
        i_min=i_min,
        i_zerocross=i_zc,
        fit=fit,
    )


def extract_crossing_time(
    calibrated,
    constant: float,
    delay_samples: int,
    sampling_frequency_ghz: float,
) -> float:
    """CFD zero-crossing time in ns.  See :func:`fit_crossing_time`."""
    return fit_crossing_time(calibrated, constant, delay_samples, sampling_frequency_ghz).time
