"""Per-pulse and batch feature extraction.

These functions chain calibration, amplitude and CFD timing for one pulse or
a stack of pulses, and collect the results in a :class:`pandas.DataFrame`.

Per-pulse failures (no positive lobe, no zero crossing, ...) are recorded by
kind in the ``amplitude_error`` / ``timing_error`` columns and the batch goes
on.  A bad baseline window is a configuration error and is raised: it would
fail identically for every pulse.

Functions
---------
analyze_pulse
    Calibrate one pulse and extract its amplitude and crossing time.
analyze_pulses
    Run :func:`analyze_pulse` over a 2D stack, one DataFrame row per pulse.
build_feature_rows
    Turn a list of :class:`PulseFeatures` into row dicts for ``pd.DataFrame()``.
summarize_features
    Failure counts and mean/std of the successful features.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Sequence

import numpy as np
import pandas as pd

from wfd_analysis.analysis.amplitude import extract_amplitude
from wfd_analysis.analysis.cfd import extract_crossing_time
from wfd_analysis.analysis.preprocess import calibrate_with_baseline
from wfd_analysis.errors import InvalidWindow, NonFiniteInput, WaveformAnalysisError
from wfd_analysis.models.profile import AnalysisProfile
from wfd_analysis.models.results import PulseFeatures

logger = logging.getLogger(__name__)


FEATURE_COLUMNS = (
    "pulse",
    "baseline",
    "amplitude",
    "crossing_time_ns",
    "amplitude_error",
    "timing_error",
    "ok",
)


def analyze_pulse(samples, profile: AnalysisProfile) -> PulseFeatures:
    """Extract the features of a single raw pulse.

    A pulse holding NaN or infinite samples is not analyzed: both features
    are recorded as ``NonFiniteInput``.

    Raises
    ------
    InvalidWindow
        If the profile's baseline window does not fit the pulse.
    """
    try:
        calibrated, baseline = calibrate_with_baseline(
            samples, profile.scale, profile.baseline_begin, profile.baseline_end
        )
    except NonFiniteInput as exc:
        logger.debug("pulse skipped: %s", exc)
        return PulseFeatures(
            baseline=np.nan,
            amplitude=np.nan,
            crossing_time=np.nan,
            amplitude_error=exc.kind,
            timing_error=exc.kind,
        )

    amp = np.nan
    amp_err = None
    try:
        amp = extract_amplitude(calibrated, half_window=profile.amplitude_half_window)
    except WaveformAnalysisError as exc:
        amp_err = exc.kind
        logger.debug("amplitude skipped: %s: %s", exc.kind, exc)

    t_cross = np.nan
    t_err = None
    try:
        t_cross = extract_crossing_time(
            calibrated,
            profile.cfd_constant,
            profile.cfd_delay_samples,
            profile.sampling_frequency_ghz,
        )
    except InvalidWindow:
        # delay longer than the pulse: a configuration error
        raise
    except WaveformAnalysisError as exc:
        t_err = exc.kind
        logger.debug("timing skipped: %s: %s", exc.kind, exc)

    return PulseFeatures(
        baseline=baseline,
        amplitude=float(amp),
        crossing_time=float(t_cross),
        amplitude_error=amp_err,
        timing_error=t_err,
    )


def build_feature_rows(features: Sequence[PulseFeatures]) -> List[Dict[str, object]]:
    """Build a list of dicts (one per pulse), ready for ``pd.DataFrame()``."""
    rows = []
    for i, f in enumerate(features):
        rows.append(
            {
                "pulse": i,
                "baseline": f.baseline,
                "amplitude": f.amplitude,
                "crossing_time_ns": f.crossing_time,
                "amplitude_error": f.amplitude_error,
                "timing_error": f.timing_error,
                "ok": f.ok,
            }
        )
    return rows


def analyze_pulses(waveforms, profile: AnalysisProfile) -> pd.DataFrame:
    """Extract features for every pulse of a ``(n_pulses, n_samples)`` stack.

    Returns
    -------
    DataFrame
        Columns :data:`FEATURE_COLUMNS`, one row per pulse in input order.
    """
    W = np.asarray(waveforms, dtype=float)
    if W.ndim == 1:
        W = W[None, :]
    if W.ndim != 2:
        raise ValueError(f"waveforms must be 2D (n_pulses, n_samples), got shape {W.shape}")

    features = [analyze_pulse(W[i], profile) for i in range(W.shape[0])]
    df = pd.DataFrame(build_feature_rows(features), columns=list(FEATURE_COLUMNS))

    n_ok = int(df["ok"].sum()) if len(df) else 0
    logger.info("analyzed %d pulses: %d ok, %d with failures", len(df), n_ok, len(df) - n_ok)
    return df


def summarize_features(df: pd.DataFrame) -> dict:
    """Failure counts and statistics of the successfully extracted features.

    Returns
    -------
    dict
        Keys: ``N``, ``N_ok``, ``amplitude_mean``, ``amplitude_std``,
        ``crossing_time_mean``, ``crossing_time_std``, ``amplitude_failures``,
        ``timing_failures`` (the last two map failure kind -> count).
    """
    amp_ok = df["amplitude_error"].isna()
    t_ok = df["timing_error"].isna()
    return {
        "N": int(len(df)),
        "N_ok": int(df["ok"].sum()),
        "amplitude_mean": float(df.loc[amp_ok, "amplitude"].mean()),
        "amplitude_std": float(df.loc[amp_ok, "amplitude"].std()),
        "crossing_time_mean": float(df.loc[t_ok, "crossing_time_ns"].mean()),
        "crossing_time_std": float(df.loc[t_ok, "crossing_time_ns"].std()),
        "amplitude_failures": {str(k): int(v) for k, v in df["amplitude_error"].value_counts().items()},
        "timing_failures": {str(k): int(v) for k, v in df["timing_error"].value_counts().items()},
    }
