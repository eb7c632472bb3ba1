"""Analysis profile -- bundles all extraction-relevant configuration.

An AnalysisProfile groups every parameter that affects the extracted features
into one frozen dataclass.  It can be:

- Constructed directly, or from a JSON file via :meth:`AnalysisProfile.load`
- Overridden field-by-field via ``dataclasses.replace()``
- Serialized to/from a dict for JSON provenance
"""

from __future__ import annotations

import json
import math
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Union

if TYPE_CHECKING:
    from wfd_analysis.analysis.engine import WaveformAnalyzer


_INT_FIELDS = ("baseline_begin", "baseline_end", "cfd_delay_samples", "amplitude_half_window")


def _as_int(key: str, value: Any) -> int:
    # JSON may spell 12 as 12.0; anything with a fractional part is rejected
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{key} must be an integer, got {value!r}")
    if not math.isfinite(value) or value != int(value):
        raise ValueError(f"{key} must be an integer, got {value!r}")
    return int(value)


@dataclass(frozen=True)
class AnalysisProfile:
    """Frozen configuration for the pulse feature pipeline.

    Required fields
    ---------------
    sampling_frequency_ghz : float
        Digitizer sampling frequency in GHz; the sample interval is
        ``1 / sampling_frequency_ghz`` ns.

    Optional fields (sensible defaults)
    ------------------------------------
    scale : float
        Calibration factor applied after baseline subtraction. Negative values
        invert the pulse polarity.
    baseline_begin, baseline_end : int
        Inclusive sample-index window used to estimate the baseline.
    cfd_constant : float
        Attenuation applied to the undelayed copy in the CFD signal.
    cfd_delay_samples : int
        Delay of the unattenuated copy, in samples.
    amplitude_half_window : int
        Half-width (samples) of the parabolic fit window around the minimum.
    """

    sampling_frequency_ghz: float

    scale: float = 1.0
    baseline_begin: int = 0
    baseline_end: int = 9
    cfd_constant: float = 0.5
    cfd_delay_samples: int = 4
    amplitude_half_window: int = 3

    def __post_init__(self) -> None:
        f = float(self.sampling_frequency_ghz)
        if not math.isfinite(f) or f <= 0.0:
            raise ValueError(f"sampling_frequency_ghz must be finite and > 0, got {self.sampling_frequency_ghz}")
        if not math.isfinite(float(self.scale)):
            raise ValueError(f"scale must be finite, got {self.scale}")
        if self.baseline_begin < 0 or self.baseline_end < self.baseline_begin:
            raise ValueError(
                f"baseline window must satisfy 0 <= begin <= end, got [{self.baseline_begin}, {self.baseline_end}]"
            )
        if self.cfd_delay_samples < 0:
            raise ValueError(f"cfd_delay_samples must be >= 0, got {self.cfd_delay_samples}")
        if self.amplitude_half_window < 1:
            raise ValueError(f"amplitude_half_window must be >= 1, got {self.amplitude_half_window}")

    @property
    def dt_ns(self) -> float:
        return 1.0 / float(self.sampling_frequency_ghz)

    def analyzer(self) -> WaveformAnalyzer:
        """Build the :class:`WaveformAnalyzer` matching this profile."""
        from wfd_analysis.analysis.engine import WaveformAnalyzer

        return WaveformAnalyzer(self.sampling_frequency_ghz)

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-friendly dict."""
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> AnalysisProfile:
        """Reconstruct from a dict (e.g. loaded from JSON).

        Unknown keys raise ``ValueError`` so that typos in a profile file do
        not silently fall back to defaults.  Integer fields accept integral
        floats (``12.0``) and reject anything else.
        """
        d = dict(d)  # shallow copy
        known = set(cls.__dataclass_fields__)
        unknown = sorted(k for k in d if k not in known)
        if unknown:
            raise ValueError(f"Unknown AnalysisProfile keys: {unknown}")
        for key in _INT_FIELDS:
            if key in d:
                d[key] = _as_int(key, d[key])
        return cls(**d)

    @classmethod
    def load(cls, path: Union[str, Path], **overrides: Any) -> AnalysisProfile:
        """Read a profile from a JSON file, then apply keyword overrides."""
        p = Path(path)
        if not p.is_file():
            raise FileNotFoundError(f"Profile file not found: {p}")
        d = json.loads(p.read_text(encoding="utf-8"))
        if not isinstance(d, dict):
            raise ValueError(f"{p.name}: expected a JSON object, got {type(d).__name__}")
        d.update(overrides)
        return cls.from_dict(d)

    def save(self, path: Union[str, Path]) -> Path:
        p = Path(path)
        p.write_text(json.dumps(self.to_dict(), indent=2) + "\n", encoding="utf-8")
        return p
