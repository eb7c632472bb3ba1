from .profile import AnalysisProfile
from .results import AmplitudeResult, CrossingResult, FitResult, PulseFeatures

__all__ = [
    "AnalysisProfile",
    "AmplitudeResult",
    "CrossingResult",
    "FitResult",
    "PulseFeatures",
]
