"""Baseline estimation and linear calibration of digitized pulses.

Both steps act on a single, fully captured sample sequence and are pure
functions of their inputs: the raw samples are never modified and the
calibrated sequence is always a fresh array.

Implemented steps
-----------------
1) Baseline

   The baseline is the arithmetic mean of a contiguous window of samples,
   normally taken before the leading edge of the pulse:

     baseline = mean(raw[begin : begin + length])

2) Calibration

   Each sample is zero-referenced and scaled:

     calibrated[i] = (raw[i] - baseline) * scale

   ``scale`` may be negative to flip the pulse polarity.
"""

from __future__ import annotations

from typing import Tuple

import numpy as np

from wfd_analysis.errors import InvalidWindow, NonFiniteInput


def as_samples(samples) -> np.ndarray:
    """Return ``samples`` as a 1D float array (no copy when already one)."""
    x = np.asarray(samples, dtype=float)
    if x.ndim != 1:
        raise ValueError(f"Expected a 1D sample sequence, got shape {x.shape}")
    return x


def as_finite_samples(samples) -> np.ndarray:
    """Like :func:`as_samples`, but a NaN or infinite sample raises :class:`NonFiniteInput`."""
    x = as_samples(samples)
    bad = np.flatnonzero(~np.isfinite(x))
    if bad.size:
        raise NonFiniteInput(f"{bad.size} non-finite sample(s), first at index {int(bad[0])}")
    return x


def estimate_baseline(samples, window_begin: int, window_length: int) -> float:
    """Mean of ``window_length`` consecutive samples starting at ``window_begin``.

    Raises
    ------
    InvalidWindow
        If the window is empty or does not lie inside the sequence.
    NonFiniteInput
        If any sample is NaN or infinite.
    """
    x = as_finite_samples(samples)
    begin = int(window_begin)
    length = int(window_length)

    if length <= 0:
        raise InvalidWindow(f"Baseline window length must be > 0, got {length}")
    if begin < 0 or begin + length > x.size:
        raise InvalidWindow(
            f"Baseline window [{begin}, {begin + length - 1}] is outside the sequence of {x.size} samples"
        )

    return float(np.mean(x[begin : begin + length]))


def calibrate_with_baseline(
    samples,
    scale: float,
    baseline_begin: int,
    baseline_end: int,
) -> Tuple[np.ndarray, float]:
    """Calibrate ``samples`` and also return the baseline that was subtracted.

    The baseline window ``[baseline_begin, baseline_end]`` is inclusive.
    """
    x = as_finite_samples(samples)
    baseline = estimate_baseline(x, baseline_begin, int(baseline_end) - int(baseline_begin) + 1)
    return (x - baseline) * float(scale), baseline


def calibrate(samples, scale: float, baseline_begin: int, baseline_end: int) -> np.ndarray:
    """Baseline-subtract and scale a sample sequence.

    Parameters
    ----------
    samples:
        Raw sample sequence, shape ``(n,)``.
    scale:
        Multiplicative factor applied after baseline subtraction.
    baseline_begin, baseline_end:
        Inclusive sample-index window used for :func:`estimate_baseline`.

    Returns
    -------
    numpy.ndarray
        New array of shape ``(n,)`` with ``(samples - baseline) * scale``.
    """
    calibrated, _ = calibrate_with_baseline(samples, scale, baseline_begin, baseline_end)
    return calibrated
