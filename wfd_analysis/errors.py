"""Failure taxonomy for pulse feature extraction.

Every extraction is all-or-nothing: it either returns a finite value or raises
one of the exceptions below at the point where the violation is detected.
All of them derive from :class:`ValueError`, so callers that only care about
"bad input" can catch that.

The ``kind`` class attribute is a stable short name used when failures are
recorded rather than raised (see :mod:`wfd_analysis.analysis.pipeline`).
"""

from __future__ import annotations


class WaveformAnalysisError(ValueError):
    """Base class of all extraction failures."""

    kind = "WaveformAnalysisError"


class InvalidWindow(WaveformAnalysisError):
    """A baseline, fit or delay window is empty, inverted or out of bounds."""

    kind = "InvalidWindow"


class EmptyInput(WaveformAnalysisError):
    """The sample sequence is too short for the requested extraction."""

    kind = "EmptyInput"


class NonFiniteInput(WaveformAnalysisError):
    """The sample sequence holds NaN or infinite values."""

    kind = "NonFiniteInput"


class InsufficientPoints(WaveformAnalysisError):
    """Fewer than 3 distinct abscissae are available for a parabolic fit."""

    kind = "InsufficientPoints"


class FitFailed(WaveformAnalysisError):
    """The least-squares solver did not converge to finite parameters."""

    kind = "FitFailed"


class NoPositiveLobe(WaveformAnalysisError):
    """The CFD signal never rises above zero."""

    kind = "NoPositiveLobe"


class WrongLobeOrder(WaveformAnalysisError):
    """The CFD signal reaches its maximum after its minimum."""

    kind = "WrongLobeOrder"


class NoZeroCrossing(WaveformAnalysisError):
    """No non-positive CFD sample between the located maximum and minimum."""

    kind = "NoZeroCrossing"


class NoRealRoot(WaveformAnalysisError):
    """The refined parabola does not reach zero."""

    kind = "NoRealRoot"


__all__ = [
    "WaveformAnalysisError",
    "InvalidWindow",
    "EmptyInput",
    "NonFiniteInput",
    "InsufficientPoints",
    "FitFailed",
    "NoPositiveLobe",
    "WrongLobeOrder",
    "NoZeroCrossing",
    "NoRealRoot",
]
