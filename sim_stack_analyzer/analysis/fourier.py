"""2D Fourier transform of image planes and hyperstacks.

Each plane is optionally windowed (Gaussian edge taper), zero-padded to a
square power-of-two size, then transformed with ``numpy.fft``. Quadrants are
swapped so zero frequency sits at ``(width//2, height//2)``.

Functions
---------
gaussian_window
    Taper plane borders to suppress edge-discontinuity artifacts.
pad_size / pad
    Square power-of-two padding.
forward_transform
    Adapter over ``numpy.fft.fft2`` returning real/imaginary planes.
masked_amplitude
    Amplitude spectrum with the profile's low-frequency mask applied.
fft_stack
    Transform every plane of a hyperstack into a display spectrum.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import List, Optional

import numpy as np

from sim_stack_analyzer.analysis.smoothing import gaussian_blur
from sim_stack_analyzer.analysis.spectra import (
    ComplexSpectrum,
    amplitude,
    filter_low,
    gamma_amplitude,
    log_power,
    scaled_power_spectrum,
)
from sim_stack_analyzer.errors import MalformedPlane
from sim_stack_analyzer.models.hyperstack import Calibration, Hyperstack
from sim_stack_analyzer.models.profile import CheckProfile

logger = logging.getLogger(__name__)

# |fraction| at or below this disables windowing
ZERO_TOL = 1e-6
WINDOW_BLUR_ACCURACY = 0.002


def _as_plane(plane: np.ndarray) -> np.ndarray:
    x = np.asarray(plane)
    if x.ndim != 2:
        raise MalformedPlane(f"Expected 2D plane, got shape {x.shape}")
    if x.shape[0] <= 0 or x.shape[1] <= 0:
        raise MalformedPlane(f"Plane size must be > 0, got {x.shape[1]}x{x.shape[0]}")
    return x


def gaussian_window(plane: np.ndarray, fraction: float) -> np.ndarray:
    """Apply a Gaussian edge window to a plane (float32 result).

    Parameters
    ----------
    plane:
        2D image.
    fraction:
        Border width as a fraction (0-1) of width / height. The binary mask is
        0 within the border and 1 inside; it is blurred with sigma = border/4
        per axis before multiplying into the plane.
    """
    x = _as_plane(plane).astype(np.float32)
    if not (0.0 <= fraction <= 1.0):
        raise ValueError(f"fraction must be in [0, 1], got {fraction}")
    ny, nx = x.shape
    winx = int(fraction * nx)
    winy = int(fraction * ny)

    win = np.zeros((ny, nx), dtype=np.float32)
    win[winy:ny - winy, winx:nx - winx] = 1.0
    # kernel reaches across the whole border so the taper has no flat zero run
    win = gaussian_blur(win, 0.25 * winx, 0.25 * winy, WINDOW_BLUR_ACCURACY, min_radius=(winx, winy))
    return x * win


def pad_size(width: int, height: int) -> int:
    """Smallest power of two >= max(width, height), starting from 2."""
    if width <= 0 or height <= 0:
        raise MalformedPlane(f"Plane size must be > 0, got {width}x{height}")
    size = max(int(width), int(height))
    n = 2
    while n < size:
        n *= 2
    return n


def pad(plane: np.ndarray, size: Optional[int] = None) -> np.ndarray:
    """Place ``plane`` at the top-left of a zero-filled ``size x size`` canvas."""
    x = _as_plane(plane)
    ny, nx = x.shape
    if size is None:
        size = pad_size(nx, ny)
    if size < nx or size < ny:
        raise ValueError(f"pad size {size} smaller than plane {nx}x{ny}")
    out = np.zeros((size, size), dtype=x.dtype)
    out[:ny, :nx] = x
    return out


def padded_calibration(cal: Calibration, width: int, height: int, size: int) -> Calibration:
    """Rescale calibration by actual/padded size along each axis."""
    return cal.scaled(width / float(size), height / float(size))


def forward_transform(plane: np.ndarray) -> ComplexSpectrum:
    """Forward 2D FFT of a square power-of-two plane, quadrant-swapped.

    Returns float32 real and imaginary planes of the same size as the input.
    """
    x = _as_plane(plane)
    n, m = x.shape
    if n != m or n & (n - 1):
        raise MalformedPlane(f"Transform needs a square power-of-two plane, got {m}x{n}")
    f = np.fft.fftshift(np.fft.fft2(x.astype(np.float64)))
    return ComplexSpectrum(real=f.real.astype(np.float32), imag=f.imag.astype(np.float32))


def transform_plane(plane: np.ndarray, window_fraction: float = 0.0, size: Optional[int] = None) -> ComplexSpectrum:
    """Window (if ``|window_fraction| > ZERO_TOL``), pad and transform one plane."""
    x = _as_plane(plane)
    if abs(window_fraction) > ZERO_TOL:
        x = gaussian_window(x, window_fraction)
    return forward_transform(pad(x, size))


def masked_amplitude(plane: np.ndarray, profile: Optional[CheckProfile] = None) -> np.ndarray:
    """Window, pad and transform a plane, then suppress low frequencies with ``profile.mask``."""
    profile = profile or CheckProfile()
    spec = transform_plane(plane, profile.window.fraction)
    return filter_low(amplitude(spec), profile.mask)


def fft_stack(stack: Hyperstack, profile: Optional[CheckProfile] = None) -> Hyperstack:
    """2D Fourier transform every plane of a hyperstack.

    Result type per plane:
      - ``profile.gamma > 0``: gamma-scaled amplitude (float32)
      - ``profile.float_result``: natural-log power spectrum (float32)
      - otherwise: 8-bit display power spectrum

    Channel/Z/frame dimensions and the display position are kept; planes
    become ``pad_size x pad_size`` and calibration is rescaled to match.
    """
    profile = profile or CheckProfile()
    d = stack.descriptor
    size = pad_size(d.width, d.height)
    fraction = profile.window.fraction
    logger.debug("fft_stack: %d planes %dx%d -> %dx%d, window=%s", stack.n_planes, d.width, d.height, size, size, fraction)

    out: List[np.ndarray] = []
    warnings: List[str] = []
    for k, plane in enumerate(stack.planes, start=1):
        spec = transform_plane(plane, fraction, size)
        if profile.gamma > 0.0:
            derived = gamma_amplitude(spec, profile.gamma)
        elif profile.float_result:
            derived = log_power(spec)
        else:
            derived = scaled_power_spectrum(spec)
        out.append(derived.data)
        warnings.extend(f"plane {k}: {w}" for w in derived.warnings)

    result = Hyperstack(
        planes=np.stack(out),
        descriptor=replace(d, width=size, height=size),
        calibration=padded_calibration(stack.calibration, d.width, d.height, size),
        position=stack.position,
        warnings=tuple(warnings),
    )
    logger.info("Fourier transformed %d plane(s) at %dx%d", result.n_planes, size, size)
    return result
