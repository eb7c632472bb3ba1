"""Analytic reference pulses.

Gaussian pulses have a closed-form CFD crossing, which makes them the
reference against which the extractors are validated.

For a pulse ``-A * exp(-(t - mu)**2 / (2 sigma**2))`` the CFD signal
``g(t - D) * (-1) + c * g(t)`` vanishes where ``c * g(t) = g(t - D)``, i.e.

    t0 = mu + D / 2 + sigma**2 * ln(c) / D

independent of ``A``.  All quantities here are in sample units unless the
function name says otherwise.
"""

from __future__ import annotations

import math
from typing import Optional

import numpy as np


def gaussian_pulse(
    n_samples: int,
    *,
    amplitude: float,
    center: float,
    sigma: float,
    baseline: float = 0.0,
    noise_rms: float = 0.0,
    seed: Optional[int] = None,
) -> np.ndarray:
    """Negative-going Gaussian pulse on a flat baseline, sampled at ``0..n-1``.

    Parameters
    ----------
    amplitude:
        Pulse depth (positive number; the pulse goes to ``baseline - amplitude``).
    center, sigma:
        Peak position and width in samples.
    noise_rms:
        Optional white Gaussian noise, drawn from ``numpy.random.default_rng(seed)``.
    """
    if sigma <= 0:
        raise ValueError(f"sigma must be > 0, got {sigma}")
    i = np.arange(int(n_samples), dtype=float)
    y = baseline - amplitude * np.exp(-0.5 * ((i - center) / sigma) ** 2)
    if noise_rms > 0:
        rng = np.random.default_rng(seed)
        y = y + rng.normal(0.0, noise_rms, size=y.size)
    return y


def gaussian_pulse_stack(
    n_pulses: int,
    n_samples: int,
    *,
    amplitudes,
    center: float,
    sigma: float,
    baseline: float = 0.0,
    noise_rms: float = 0.0,
    seed: Optional[int] = None,
) -> np.ndarray:
    """``(n_pulses, n_samples)`` stack of :func:`gaussian_pulse` with per-pulse amplitudes."""
    amps = np.broadcast_to(np.asarray(amplitudes, dtype=float), (int(n_pulses),))
    rng = np.random.default_rng(seed)
    out = np.empty((int(n_pulses), int(n_samples)), dtype=float)
    for k in range(int(n_pulses)):
        out[k] = gaussian_pulse(n_samples, amplitude=amps[k], center=center, sigma=sigma, baseline=baseline)
    if noise_rms > 0:
        out += rng.normal(0.0, noise_rms, size=out.shape)
    return out


def gaussian_cfd_crossing(center: float, sigma: float, constant: float, delay_samples: int) -> float:
    """Analytic CFD zero crossing of :func:`gaussian_pulse`, in samples."""
    if constant <= 0:
        raise ValueError(f"constant must be > 0 for a Gaussian crossing, got {constant}")
    if delay_samples <= 0:
        raise ValueError(f"delay_samples must be > 0, got {delay_samples}")
    D = float(delay_samples)
    return center + 0.5 * D + sigma * sigma * math.log(constant) / D


def gaussian_cfd_crossing_ns(
    center: float,
    sigma: float,
    constant: float,
    delay_samples: int,
    sampling_frequency_ghz: float,
) -> float:
    return gaussian_cfd_crossing(center, sigma, constant, delay_samples) / float(sampling_frequency_ghz)


def sampled_parabola(n_samples: int, *, vertex_value: float, vertex: float, curvature: float) -> np.ndarray:
    """``vertex_value + curvature * (i - vertex)**2`` at ``i = 0..n-1``."""
    i = np.arange(int(n_samples), dtype=float)
    return vertex_value + curvature * (i - vertex) ** 2
