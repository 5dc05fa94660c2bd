from .hyperstack import Calibration, Hyperstack, HyperstackDescriptor, StackPosition
from .profile import CheckProfile, FrequencyMaskSpec, ProjectionMode, WindowSpec

__all__ = [
    "Calibration",
    "Hyperstack",
    "HyperstackDescriptor",
    "StackPosition",
    "CheckProfile",
    "FrequencyMaskSpec",
    "ProjectionMode",
    "WindowSpec",
]
