from __future__ import annotations

import math

import numpy as np

from wfd_analysis.analysis import amplitude, cfd, preprocess
from wfd_analysis.models.results import AmplitudeResult, CrossingResult


class WaveformAnalyzer:
    """Feature extraction bound to one digitizer sampling frequency.

    The sampling frequency (GHz) is the only state.  It is fixed at
    construction and only used to convert sample indices to ns for CFD
    timing.  Every method returns its result by value, so one analyzer can
    serve concurrent callers working on distinct sample buffers.
    """

    __slots__ = ("_sampling_frequency_ghz",)

    def __init__(self, sampling_frequency_ghz: float) -> None:
        f = float(sampling_frequency_ghz)
        if not math.isfinite(f) or f <= 0.0:
            raise ValueError(f"sampling_frequency_ghz must be finite and > 0, got {sampling_frequency_ghz}")
        self._sampling_frequency_ghz = f

    def __repr__(self) -> str:
        return f"WaveformAnalyzer(sampling_frequency_ghz={self._sampling_frequency_ghz!r})"

    @property
    def sampling_frequency_ghz(self) -> float:
        return self._sampling_frequency_ghz

    @property
    def dt_ns(self) -> float:
        return 1.0 / self._sampling_frequency_ghz

    def estimate_baseline(self, samples, begin: int, length: int) -> float:
        return preprocess.estimate_baseline(samples, begin, length)

    def calibrate(self, samples, scale: float, baseline_begin: int, baseline_end: int) -> np.ndarray:
        return preprocess.calibrate(samples, scale, baseline_begin, baseline_end)

    def extract_amplitude(self, samples, *, half_window: int = amplitude.DEFAULT_HALF_WINDOW) -> float:
        return amplitude.extract_amplitude(samples, half_window=half_window)

    def fit_amplitude(self, samples, *, half_window: int = amplitude.DEFAULT_HALF_WINDOW) -> AmplitudeResult:
        return amplitude.fit_amplitude(samples, half_window=half_window)

    def extract_crossing_time(self, calibrated, constant: float, delay_samples: int) -> float:
        """CFD crossing time in ns at this analyzer's sampling frequency."""
        return cfd.extract_crossing_time(calibrated, constant, delay_samples, self._sampling_frequency_ghz)

    def fit_crossing_time(self, calibrated, constant: float, delay_samples: int) -> CrossingResult:
        return cfd.fit_crossing_time(calibrated, constant, delay_samples, self._sampling_frequency_ghz)
