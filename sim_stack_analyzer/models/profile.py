"""Check profile -- bundles every parameter that affects the stack checks.

A CheckProfile groups phases/angles, projection mode, windowing, output
scaling and frequency masking into one frozen dataclass.  It can be:

- Constructed with defaults matching the OMX acquisition (5 phases, 3 angles)
- Overridden field-by-field via ``dataclasses.replace()``
- Serialized to/from a dict for JSON provenance
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict


class ProjectionMode(Enum):
    """Per-group reduction used to collapse phases and angles."""

    AVERAGE = "average"
    MAXIMUM = "maximum"


def _check_fraction(name: str, value: float) -> None:
    if not (0.0 <= float(value) <= 1.0):
        raise ValueError(f"{name} must be in [0, 1], got {value}")


@dataclass(frozen=True)
class WindowSpec:
    """Gaussian edge window; ``fraction`` of width/height is tapered at each border."""

    fraction: float = 0.06

    def __post_init__(self) -> None:
        _check_fraction("fraction", self.fraction)


@dataclass(frozen=True)
class FrequencyMaskSpec:
    """Low-frequency suppression mask, both sizes as fractions of plane width.

    Attributes
    ----------
    central_radius:
        Radius of the zero-order disk.
    line_half_width:
        Half-width of the kx~0 / ky~0 strips; 0 disables the strips.
    """

    central_radius: float = 0.0
    line_half_width: float = 0.0

    def __post_init__(self) -> None:
        _check_fraction("central_radius", self.central_radius)
        _check_fraction("line_half_width", self.line_half_width)


@dataclass(frozen=True)
class CheckProfile:
    """Frozen configuration for projection and Fourier checks.

    Fields
    ------
    phases, angles : int
        SI acquisition parameters (observed Z = true Z * phases * angles).
    projection_mode : ProjectionMode
        AVERAGE for pseudo-widefield, MAXIMUM for saturation checks.
    rescale : bool
        Magnify AVERAGE projections x2 in XY to reconstructed-image size.
    window : WindowSpec
        Edge window applied before transforming; fraction 0 disables it.
    gamma : float
        If > 0, Fourier results are amplitude**gamma instead of log power.
    float_result : bool
        Log power as float32 (True) or 8-bit display power spectrum (False).
    mask : FrequencyMaskSpec
        Low-frequency suppression used by amplitude-based checks.
    """

    phases: int = 5
    angles: int = 3
    projection_mode: ProjectionMode = ProjectionMode.AVERAGE
    rescale: bool = True
    window: WindowSpec = field(default_factory=WindowSpec)
    gamma: float = 0.0
    float_result: bool = False
    mask: FrequencyMaskSpec = field(default_factory=FrequencyMaskSpec)

    def __post_init__(self) -> None:
        if int(self.phases) < 1 or int(self.angles) < 1:
            raise ValueError(f"phases and angles must be >= 1, got {self.phases}, {self.angles}")
        if float(self.gamma) < 0.0:
            raise ValueError(f"gamma must be >= 0, got {self.gamma}")
        if not isinstance(self.projection_mode, ProjectionMode):
            # Accept the enum value for callers building profiles from strings
            object.__setattr__(self, "projection_mode", ProjectionMode(self.projection_mode))

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-friendly dict (enum becomes its value)."""
        d = asdict(self)
        d["projection_mode"] = self.projection_mode.value
        return d

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> CheckProfile:
        """Reconstruct from a dict (e.g. loaded from JSON)."""
        d = dict(d)  # shallow copy
        if "projection_mode" in d:
            d["projection_mode"] = ProjectionMode(d["projection_mode"])
        if isinstance(d.get("window"), dict):
            d["window"] = WindowSpec(**d["window"])
        if isinstance(d.get("mask"), dict):
            d["mask"] = FrequencyMaskSpec(**d["mask"])
        return cls(**d)
