from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Tuple

import numpy as np

from sim_stack_analyzer.errors import InvalidDimensions, MalformedPlane


@dataclass(frozen=True)
class Calibration:
    """Physical pixel size of a plane."""

    pixel_width: float = 1.0
    pixel_height: float = 1.0
    unit: str = "pixel"

    def scaled(self, fx: float, fy: float) -> Calibration:
        return replace(self, pixel_width=self.pixel_width * fx, pixel_height=self.pixel_height * fy)


@dataclass(frozen=True)
class StackPosition:
    """1-based display position (observed Z, not true Z)."""

    channel: int = 1
    z: int = 1
    frame: int = 1


@dataclass(frozen=True)
class HyperstackDescriptor:
    """
    Dimensions of a raw SI hyperstack.

    Observed Z interleaves phase, true Z and angle (OMX "CPZAT" order):
    channel varies fastest, then phase, then true Z, then angle, then time.

    Notes
    - ``true_z`` is derived; it is only meaningful when :meth:`is_divisible` holds.
    - A stack that is already angle-split or projected has ``angles == 1``
      (and ``phases == 1`` after projection).
    """
    width: int
    height: int
    channels: int = 1
    phases: int = 1
    angles: int = 1
    observed_z: int = 1
    frames: int = 1

    def __post_init__(self) -> None:
        if int(self.width) <= 0 or int(self.height) <= 0:
            raise MalformedPlane(f"Plane size must be > 0, got {self.width}x{self.height}")
        for name in ("channels", "phases", "angles", "observed_z", "frames"):
            if int(getattr(self, name)) < 1:
                raise InvalidDimensions(f"{name} must be >= 1, got {getattr(self, name)}")

    @property
    def pa(self) -> int:
        return self.phases * self.angles

    @property
    def true_z(self) -> int:
        return self.observed_z // self.pa

    @property
    def n_planes(self) -> int:
        return self.channels * self.observed_z * self.frames

    def is_divisible(self) -> bool:
        return self.observed_z % self.pa == 0

    def check_divisible(self) -> None:
        """Raise :class:`InvalidDimensions` if observed Z is not a multiple of phases*angles."""
        if not self.is_divisible():
            raise InvalidDimensions(
                f"Stack size not consistent with phases/angles: observed_z={self.observed_z} "
                f"is not a multiple of phases*angles={self.phases}*{self.angles}"
            )


@dataclass(frozen=True)
class Hyperstack:
    """
    Flat plane sequence plus the descriptor that addresses it.

    ``planes`` has shape ``(n_planes, height, width)``; StackAddress ``k``
    (1-based) is ``planes[k - 1]``. Planes are treated as immutable: every
    operation returns a new Hyperstack.
    """
    planes: np.ndarray
    descriptor: HyperstackDescriptor
    calibration: Calibration = Calibration()
    position: StackPosition = StackPosition()
    warnings: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        p = np.asarray(self.planes)
        if p.ndim != 3:
            raise MalformedPlane(f"planes must be 3D (n_planes, height, width), got shape {p.shape}")
        d = self.descriptor
        if p.shape[1:] != (d.height, d.width):
            raise MalformedPlane(
                f"Plane shape {p.shape[1:]} does not match descriptor {(d.height, d.width)}"
            )
        if p.shape[0] != d.n_planes:
            raise InvalidDimensions(
                f"Hyperstack length invariant broken: n_planes={p.shape[0]}, "
                f"channels*observed_z*frames={d.n_planes}"
            )

    @property
    def n_planes(self) -> int:
        return int(self.planes.shape[0])

    def plane(self, index: int) -> np.ndarray:
        """Return plane at 1-based StackAddress ``index``."""
        if not (1 <= index <= self.n_planes):
            raise IndexError(f"Stack index must be in [1, {self.n_planes}], got {index}")
        return self.planes[index - 1]
