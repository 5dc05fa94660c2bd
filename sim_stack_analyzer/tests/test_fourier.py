"""Tests for windowing, padding and stack Fourier transforms."""

from __future__ import annotations

import dataclasses

import numpy as np
import pytest

from sim_stack_analyzer.analysis.fourier import (
    fft_stack,
    forward_transform,
    gaussian_window,
    masked_amplitude,
    pad,
    pad_size,
    padded_calibration,
    transform_plane,
)
from sim_stack_analyzer.analysis.spectra import amplitude, filter_low
from sim_stack_analyzer.errors import MalformedPlane
from sim_stack_analyzer.models.hyperstack import Calibration, Hyperstack, HyperstackDescriptor, StackPosition
from sim_stack_analyzer.models.profile import CheckProfile, FrequencyMaskSpec, WindowSpec


# -----------------------------------------------------------------------
# Padding
# -----------------------------------------------------------------------


def test_pad_size_powers_of_two() -> None:
    assert pad_size(300, 200) == 512
    assert pad_size(1, 1) == 2
    assert pad_size(512, 100) == 512
    assert pad_size(100, 513) == 1024


def test_pad_places_plane_top_left() -> None:
    plane = np.arange(300 * 200, dtype=np.float32).reshape(200, 300)
    out = pad(plane)
    assert out.shape == (512, 512)
    np.testing.assert_array_equal(out[:200, :300], plane)
    assert not np.any(out[200:, :])
    assert not np.any(out[:, 300:])


def test_padded_calibration() -> None:
    cal = padded_calibration(Calibration(0.1, 0.1, "um"), 300, 200, 512)
    assert np.isclose(cal.pixel_width, 0.1 * 300 / 512)
    assert np.isclose(cal.pixel_height, 0.1 * 200 / 512)
    assert cal.unit == "um"


def test_malformed_plane_rejected() -> None:
    with pytest.raises(MalformedPlane):
        pad_size(0, 10)
    with pytest.raises(MalformedPlane):
        pad(np.zeros((0, 4)))
    with pytest.raises(MalformedPlane):
        gaussian_window(np.zeros(5), 0.1)


# -----------------------------------------------------------------------
# Window
# -----------------------------------------------------------------------


def test_window_monotonic_taper() -> None:
    plane = np.ones((100, 100), dtype=np.float32)
    out = gaussian_window(plane, 0.1)
    assert out.dtype == np.float32
    assert np.isclose(out[50, 50], 1.0, atol=1e-5)

    row = out[50, 10::-1]  # window boundary (x=10) out to the edge (x=0)
    assert np.all(np.diff(row) < 0)
    col = out[89:, 50]  # other side: boundary at y=89 down to y=99
    assert np.all(np.diff(col) < 0)


def test_window_taper_reaches_edge_on_wide_border() -> None:
    # 30 and 20 pixel borders are wider than the accuracy cut-off of sigma = border/4
    out = gaussian_window(np.ones((200, 300), dtype=np.float32), 0.1)
    assert np.isclose(out[100, 150], 1.0, atol=1e-5)
    row = out[100, 30::-1]
    assert np.all(np.diff(row) < 0)
    assert row[-1] > 0
    col = out[20::-1, 150]
    assert np.all(np.diff(col) < 0)
    assert col[-1] > 0


def test_window_zero_fraction_is_identity() -> None:
    plane = np.random.default_rng(0).random((16, 24)).astype(np.float32)
    np.testing.assert_allclose(gaussian_window(plane, 0.0), plane)


# -----------------------------------------------------------------------
# Transform
# -----------------------------------------------------------------------


def test_forward_transform_is_centred() -> None:
    spec = forward_transform(np.ones((4, 4), dtype=np.uint16))
    assert spec.real.shape == spec.imag.shape == (4, 4)
    assert spec.real.dtype == np.float32
    assert np.isclose(spec.real[2, 2], 16.0)
    others = np.ones((4, 4), dtype=bool)
    others[2, 2] = False
    assert np.allclose(spec.real[others], 0.0)
    assert np.allclose(spec.imag, 0.0)


def test_forward_transform_requires_square_power_of_two() -> None:
    with pytest.raises(MalformedPlane):
        forward_transform(np.ones((4, 8)))
    with pytest.raises(MalformedPlane):
        forward_transform(np.ones((6, 6)))


def test_transform_plane_pads() -> None:
    spec = transform_plane(np.ones((20, 30)), window_fraction=0.1)
    assert spec.real.shape == (32, 32)


# -----------------------------------------------------------------------
# Whole stack
# -----------------------------------------------------------------------


def _stack(w: int = 30, h: int = 20) -> Hyperstack:
    rng = np.random.default_rng(1)
    d = HyperstackDescriptor(width=w, height=h, channels=2, observed_z=3, frames=1)
    planes = rng.integers(0, 4000, size=(d.n_planes, h, w)).astype(np.uint16)
    return Hyperstack(planes=planes, descriptor=d, calibration=Calibration(0.1, 0.1, "um"),
                      position=StackPosition(channel=2, z=2, frame=1))


def test_fft_stack_default_is_8bit() -> None:
    stack = _stack()
    out = fft_stack(stack)
    assert out.planes.shape == (6, 32, 32)
    assert out.planes.dtype == np.uint8
    assert out.planes.min() >= 1
    d = out.descriptor
    assert (d.width, d.height, d.channels, d.observed_z, d.frames) == (32, 32, 2, 3, 1)
    assert out.position == stack.position
    assert np.isclose(out.calibration.pixel_width, 0.1 * 30 / 32)
    assert np.isclose(out.calibration.pixel_height, 0.1 * 20 / 32)


def test_fft_stack_float_and_gamma_results() -> None:
    stack = _stack()
    base = CheckProfile(window=WindowSpec(0.0))
    log_out = fft_stack(stack, dataclasses.replace(base, float_result=True))
    assert log_out.planes.dtype == np.float32

    gamma_out = fft_stack(stack, dataclasses.replace(base, gamma=0.5))
    assert gamma_out.planes.dtype == np.float32
    assert np.all(gamma_out.planes >= 0)
    # DC amplitude of plane 1 without windowing is the plane sum
    expected = float(stack.planes[0].astype(np.float64).sum()) ** 0.5
    assert np.isclose(gamma_out.planes[0, 16, 16], expected, rtol=1e-4)


def test_masked_amplitude_uses_profile_window_and_mask() -> None:
    plane = np.random.default_rng(2).integers(0, 1000, size=(20, 30)).astype(np.uint16)
    profile = CheckProfile(window=WindowSpec(0.1), mask=FrequencyMaskSpec(central_radius=0.2, line_half_width=0.05))
    out = masked_amplitude(plane, profile)
    expected = filter_low(amplitude(transform_plane(plane, 0.1)), profile.mask)
    assert out.shape == (32, 32)
    np.testing.assert_allclose(out, expected, rtol=1e-6)
    # zero order sits inside the masked disk
    assert out[16, 16] < 0.2 * amplitude(transform_plane(plane, 0.1))[16, 16]
