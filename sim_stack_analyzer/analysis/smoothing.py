"""Spatial smoothing and resampling helpers shared by projection and Fourier checks."""

from __future__ import annotations

import math
from typing import Tuple

import numpy as np
from scipy import ndimage

UINT16_MAX = 65535


def truncate_for_accuracy(accuracy: float) -> float:
    """Kernel half-width in sigmas at which the Gaussian drops below ``accuracy``."""
    if not (0.0 < accuracy < 1.0):
        raise ValueError(f"accuracy must be in (0, 1), got {accuracy}")
    return math.sqrt(-2.0 * math.log(accuracy))


def gaussian_blur(
    plane: np.ndarray,
    sigma_x: float,
    sigma_y: float,
    accuracy: float,
    min_radius: Tuple[int, int] = (0, 0),
) -> np.ndarray:
    """Gaussian-blur a 2D plane (float32 result), replicating edge pixels.

    A sigma of 0 leaves that axis untouched. ``min_radius`` ``(x, y)`` extends
    the kernel on an axis to at least that many pixels past the centre, even
    where the Gaussian is already below ``accuracy``.
    """
    x = np.array(plane, dtype=np.float32)
    if x.ndim != 2:
        raise ValueError(f"Expected 2D plane, got shape {x.shape}")
    base = truncate_for_accuracy(accuracy)
    for axis, sigma, reach in ((0, float(sigma_y), min_radius[1]), (1, float(sigma_x), min_radius[0])):
        if sigma <= 0.0:
            continue
        truncate = max(base, (int(reach) + 1) / sigma)
        x = ndimage.gaussian_filter1d(x, sigma, axis=axis, mode="nearest", truncate=truncate)
    return x


def narrow_to_uint16(plane: np.ndarray) -> np.ndarray:
    """Round half up and clip to ``[0, 65535]``; NaN becomes 0."""
    x = np.nan_to_num(np.asarray(plane, dtype=np.float64), nan=0.0)
    x = np.floor(x + 0.5)
    return np.clip(x, 0, UINT16_MAX).astype(np.uint16)


def magnify2x(plane: np.ndarray) -> np.ndarray:
    """Upscale a plane x2 in XY with cubic interpolation (float64 result)."""
    x = np.asarray(plane, dtype=np.float64)
    if x.ndim != 2:
        raise ValueError(f"Expected 2D plane, got shape {x.shape}")
    return ndimage.zoom(x, 2.0, order=3, mode="nearest", grid_mode=True)
