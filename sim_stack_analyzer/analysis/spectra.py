"""Frequency-domain metrics derived from a complex spectrum.

All functions are pointwise over the real and imaginary planes returned by
:func:`sim_stack_analyzer.analysis.fourier.forward_transform` and return new
float32 planes (the 8-bit display spectrum excepted).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple

import numpy as np

from sim_stack_analyzer.analysis.smoothing import gaussian_blur
from sim_stack_analyzer.errors import MalformedPlane
from sim_stack_analyzer.models.profile import FrequencyMaskSpec

MASK_BLUR_SIGMA = 3.0
MASK_BLUR_ACCURACY = 0.01


@dataclass(frozen=True)
class ComplexSpectrum:
    """Real and imaginary planes of a centred 2D Fourier transform (float32)."""

    real: np.ndarray
    imag: np.ndarray


@dataclass(frozen=True)
class DerivedPlane:
    """A derived plane tagged with its display range."""

    data: np.ndarray
    display_min: float
    display_max: float
    warnings: Tuple[str, ...] = ()


def _components(spec: ComplexSpectrum) -> Tuple[np.ndarray, np.ndarray]:
    re = np.asarray(spec.real, dtype=np.float32)
    im = np.asarray(spec.imag, dtype=np.float32)
    if re.shape != im.shape or re.ndim != 2:
        raise MalformedPlane(f"Real/imaginary planes must be 2D and equal shape, got {re.shape}, {im.shape}")
    if re.size == 0:
        raise MalformedPlane("Spectrum planes are empty")
    return re, im


def _finite_range(x: np.ndarray) -> Tuple[float, float]:
    finite = x[np.isfinite(x)]
    if finite.size == 0:
        return 0.0, 0.0
    return float(finite.min()), float(finite.max())


def power(spec: ComplexSpectrum) -> np.ndarray:
    """Squared amplitude ``re**2 + im**2``."""
    re, im = _components(spec)
    return re * re + im * im


def amplitude(spec: ComplexSpectrum) -> np.ndarray:
    """Amplitude ``sqrt(re**2 + im**2)``."""
    return np.sqrt(power(spec).astype(np.float64)).astype(np.float32)


def phase_value(re: float, im: float) -> float:
    """Phase (radians) of one complex value.

    Branches on the sign of ``re`` rather than calling atan2; ``re == im == 0``
    gives 0.
    """
    if re > 0:
        return math.atan(im / re)
    elif re < 0 and im >= 0:
        return math.atan(im / re) + math.pi
    elif re < 0 and im < 0:
        return math.atan(im / re) - math.pi
    elif re == 0 and im > 0:
        return math.pi / 2
    elif re == 0 and im < 0:
        return -math.pi / 2
    return 0.0


def phase(spec: ComplexSpectrum) -> np.ndarray:
    """Phase plane (radians, float32), same branch table as :func:`phase_value`."""
    re32, im32 = _components(spec)
    re = re32.astype(np.float64)
    im = im32.astype(np.float64)
    with np.errstate(divide="ignore", invalid="ignore"):
        base = np.arctan(im / re)
    out = np.select(
        [
            re > 0,
            (re < 0) & (im >= 0),
            (re < 0) & (im < 0),
            (re == 0) & (im > 0),
            (re == 0) & (im < 0),
        ],
        [base, base + np.pi, base - np.pi, np.pi / 2, -np.pi / 2],
        default=0.0,
    )
    return out.astype(np.float32)


def log_power(spec: ComplexSpectrum) -> DerivedPlane:
    """Natural-log power spectrum ``ln(re**2 + im**2)``.

    Zero power maps to ``-inf``; the display range covers finite values only.
    """
    ps = power(spec)
    with np.errstate(divide="ignore"):
        out = np.log(ps.astype(np.float64)).astype(np.float32)
    warnings = []
    n_zero = int(np.count_nonzero(ps == 0))
    if n_zero:
        warnings.append(f"{n_zero} zero-power pixel(s) set to -inf")
    lo, hi = _finite_range(out)
    return DerivedPlane(data=out, display_min=lo, display_max=hi, warnings=tuple(warnings))


def gamma_amplitude(spec: ComplexSpectrum, gamma: float) -> DerivedPlane:
    """Amplitude raised to ``gamma`` (> 0)."""
    if not gamma > 0:
        raise ValueError(f"gamma must be > 0, got {gamma}")
    amp = amplitude(spec)
    out = np.power(amp.astype(np.float64), float(gamma)).astype(np.float32)
    lo, hi = _finite_range(out)
    return DerivedPlane(data=out, display_min=lo, display_max=hi)


def scaled_power_spectrum(spec: ComplexSpectrum) -> DerivedPlane:
    """8-bit log-scaled power spectrum for display (values 1..255)."""
    ps = power(spec).astype(np.float64)
    ps_min = float(ps.min())
    ps_max = float(ps.max())
    lo = 0.0 if ps_min < 1.0 else math.log(ps_min)
    hi = math.log(ps_max) if ps_max > 0 else 0.0
    scale = 253.999 / (hi - lo) if hi > lo else 0.0
    with np.errstate(divide="ignore"):
        r = np.where(ps < 1.0, 0.0, np.log(np.maximum(ps, 1.0)))
    out = ((r - lo) * scale + 0.5 + 1.0).astype(np.uint8)
    return DerivedPlane(data=out, display_min=0.0, display_max=255.0)


def low_frequency_mask(width: int, height: int, mask_spec: FrequencyMaskSpec) -> np.ndarray:
    """Smoothed 0..1 mask suppressing the zero order and the kx~0 / ky~0 axes.

    ``mask_spec.central_radius`` and ``mask_spec.line_half_width`` are fractions of ``width``.
    """
    if width <= 0 or height <= 0:
        raise MalformedPlane(f"Mask size must be > 0, got {width}x{height}")
    mask = np.ones((height, width), dtype=np.float32)
    cx = width // 2
    cy = height // 2
    if mask_spec.line_half_width > 0:
        hw = int(mask_spec.line_half_width * width)
        mask[:, max(0, cx - hw):cx + hw] = 0.0
        mask[max(0, cy - hw):cy + hw, :] = 0.0
    rad = int(mask_spec.central_radius * width)
    if rad > 0:
        yy, xx = np.mgrid[0:height, 0:width]
        inside = (xx + 0.5 - cx) ** 2 + (yy + 0.5 - cy) ** 2 <= rad * rad
        mask[inside] = 0.0
    return gaussian_blur(mask, MASK_BLUR_SIGMA, MASK_BLUR_SIGMA, MASK_BLUR_ACCURACY)


def filter_low(amplitude_plane: np.ndarray, mask_spec: FrequencyMaskSpec) -> np.ndarray:
    """Attenuate low/offset frequencies of a centred amplitude plane.

    Parameters
    ----------
    amplitude_plane:
        2D Fourier amplitudes with zero frequency at ``(width//2, height//2)``.
    mask_spec:
        Disk radius and axis-strip half-width, as fractions of width;
        a strip half-width of 0 disables the strips.

    Returns
    -------
    np.ndarray
        float32 product of the input and the smoothed mask.
    """
    amp = np.asarray(amplitude_plane, dtype=np.float32)
    if amp.ndim != 2 or amp.size == 0:
        raise MalformedPlane(f"Expected non-empty 2D amplitude plane, got shape {amp.shape}")
    height, width = amp.shape
    return amp * low_frequency_mask(width, height, mask_spec)
