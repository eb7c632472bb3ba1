"""WFD Analysis -- feature extraction for digitized detector pulses.

A waveform digitizer (WFD) records each triggered pulse as a fixed-rate
sequence of voltage samples.  This package turns such a sequence into the two
features most analyses need:

- a calibrated waveform (baseline subtracted, scaled),
- the pulse amplitude, refined with a local parabolic fit at the minimum,
- the pulse time, from a constant-fraction discriminator (CFD) zero crossing
  refined to sub-sample precision.

Key principles:
- Pure functions over fully captured sample buffers; no state between calls
- All-or-nothing extractions: a value, or a typed exception
- Fit results are returned by value for any downstream display

Main subpackages:
- analysis: baseline/calibration, parabolic fit, amplitude, CFD, batch pipeline
- models: AnalysisProfile and the result dataclasses
- validation: analytic reference pulses
"""

from wfd_analysis.analysis.engine import WaveformAnalyzer
from wfd_analysis.models.profile import AnalysisProfile

__all__ = ["AnalysisProfile", "WaveformAnalyzer"]
