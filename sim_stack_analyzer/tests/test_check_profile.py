"""Tests for CheckProfile and its window/mask specs."""

from __future__ import annotations

import dataclasses
import json

import pytest

from sim_stack_analyzer.models.profile import CheckProfile, FrequencyMaskSpec, ProjectionMode, WindowSpec


def test_profile_defaults() -> None:
    p = CheckProfile()
    assert p.phases == 5
    assert p.angles == 3
    assert p.projection_mode is ProjectionMode.AVERAGE
    assert p.rescale is True
    assert p.window == WindowSpec(0.06)
    assert p.gamma == 0.0
    assert p.float_result is False
    assert p.mask == FrequencyMaskSpec(0.0, 0.0)


def test_profile_frozen() -> None:
    p = CheckProfile()
    with pytest.raises(dataclasses.FrozenInstanceError):
        p.phases = 3  # type: ignore[misc]


def test_profile_replace() -> None:
    p = CheckProfile()
    p2 = dataclasses.replace(p, projection_mode=ProjectionMode.MAXIMUM, rescale=False)
    assert p2.projection_mode is ProjectionMode.MAXIMUM
    assert p2.rescale is False
    assert p2.phases == 5  # unchanged
    assert p.projection_mode is ProjectionMode.AVERAGE


def test_profile_roundtrip_through_json() -> None:
    p = CheckProfile(
        phases=3,
        angles=2,
        projection_mode=ProjectionMode.MAXIMUM,
        window=WindowSpec(0.125),
        gamma=0.2,
        mask=FrequencyMaskSpec(0.05, 0.01),
    )
    d = json.loads(json.dumps(p.to_dict()))
    assert d["projection_mode"] == "maximum"
    assert CheckProfile.from_dict(d) == p


def test_mode_accepts_value_string() -> None:
    assert CheckProfile(projection_mode="maximum").projection_mode is ProjectionMode.MAXIMUM


@pytest.mark.parametrize(
    "kwargs",
    [
        {"phases": 0},
        {"angles": -1},
        {"gamma": -0.5},
    ],
)
def test_profile_rejects_bad_values(kwargs) -> None:
    with pytest.raises(ValueError):
        CheckProfile(**kwargs)


def test_specs_reject_bad_fractions() -> None:
    with pytest.raises(ValueError):
        WindowSpec(1.5)
    with pytest.raises(ValueError):
        FrequencyMaskSpec(central_radius=-0.1)
    with pytest.raises(ValueError):
        CheckProfile(projection_mode="median")
