"""Feature extraction package.

Design principle:
  - Every function takes a fully captured sample sequence and returns its
    result by value; nothing is cached between calls.
  - Failures raise the typed exceptions of :mod:`wfd_analysis.errors`.

Data flows one way: raw samples -> calibrated samples -> {amplitude, timing}.
"""

from .amplitude import extract_amplitude, fit_amplitude
from .cfd import cfd_signal, extract_crossing_time, fit_crossing_time
from .engine import WaveformAnalyzer
from .parabola import fit_parabola
from .preprocess import calibrate, estimate_baseline

__all__ = [
    "WaveformAnalyzer",
    "calibrate",
    "cfd_signal",
    "estimate_baseline",
    "extract_amplitude",
    "extract_crossing_time",
    "fit_amplitude",
    "fit_crossing_time",
    "fit_parabola",
]
