"""Hyperstack index mapping for raw SI data.

Raw structured-illumination stacks store every plane in one flat sequence.
Observed Z interleaves illumination phase, true focal depth and pattern angle,
so a plane is addressed by ``(c, p, z, a, t)`` (all 1-based) and its flat
StackAddress is::

    index = ((((t-1)*A + (a-1))*Z + (z-1))*P + (p-1))*C + c

Channel varies fastest, then phase, then true Z, then angle, then time.

Functions
---------
canonical_index / address_of
    Forward and inverse mapping between addresses and flat indices.
extract_angle
    Split out the planes of one angle into a new stack (phase folded into Z).
interleave_angles
    Inverse of splitting: rebuild the full stack from per-angle stacks.
address_table
    One row per plane, for inspection and reporting.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Sequence, Tuple

import numpy as np
import pandas as pd

from sim_stack_analyzer.errors import InvalidDimensions
from sim_stack_analyzer.models.hyperstack import Hyperstack, HyperstackDescriptor, StackPosition

logger = logging.getLogger(__name__)


def stack_divisible_by(descriptor: HyperstackDescriptor, n: int) -> bool:
    """True if observed Z is a whole multiple of ``n`` (e.g. phases*angles)."""
    n = int(n)
    if n < 1:
        return False
    return descriptor.observed_z % n == 0


def _check_range(name: str, value: int, upper: int) -> None:
    if not (1 <= int(value) <= upper):
        raise IndexError(f"{name} must be in [1, {upper}], got {value}")


def canonical_index(d: HyperstackDescriptor, c: int, p: int, z: int, a: int, t: int) -> int:
    """1-based flat index of the plane at channel c, phase p, true Z z, angle a, frame t."""
    d.check_divisible()
    _check_range("c", c, d.channels)
    _check_range("p", p, d.phases)
    _check_range("z", z, d.true_z)
    _check_range("a", a, d.angles)
    _check_range("t", t, d.frames)
    return ((((t - 1) * d.angles + (a - 1)) * d.true_z + (z - 1)) * d.phases + (p - 1)) * d.channels + c


def _decompose(d: HyperstackDescriptor, index0: np.ndarray) -> Tuple[np.ndarray, ...]:
    """Split 0-based flat indices into 1-based (c, p, z, a, t) arrays."""
    rest, c = np.divmod(index0, d.channels)
    rest, p = np.divmod(rest, d.phases)
    rest, z = np.divmod(rest, d.true_z)
    t, a = np.divmod(rest, d.angles)
    return c + 1, p + 1, z + 1, a + 1, t + 1


def address_of(d: HyperstackDescriptor, index: int) -> Tuple[int, int, int, int, int]:
    """Inverse of :func:`canonical_index`: return ``(c, p, z, a, t)``."""
    d.check_divisible()
    _check_range("index", index, d.n_planes)
    c, p, z, a, t = _decompose(d, np.asarray(int(index) - 1))
    return int(c), int(p), int(z), int(a), int(t)


def address_table(d: HyperstackDescriptor) -> pd.DataFrame:
    """Return a DataFrame with columns ``index, c, p, z, a, t``, one row per plane."""
    d.check_divisible()
    idx0 = np.arange(d.n_planes, dtype=np.int64)
    c, p, z, a, t = _decompose(d, idx0)
    return pd.DataFrame({"index": idx0 + 1, "c": c, "p": p, "z": z, "a": a, "t": t})


def angle_indices(d: HyperstackDescriptor, a: int) -> np.ndarray:
    """1-based source indices of angle ``a``, in extract order (c fastest, then p, z, t)."""
    d.check_divisible()
    _check_range("a", a, d.angles)
    C, P, Z, A = d.channels, d.phases, d.true_z, d.angles
    t = np.arange(d.frames)[:, None, None, None]
    z = np.arange(Z)[None, :, None, None]
    p = np.arange(P)[None, None, :, None]
    c = np.arange(C)[None, None, None, :]
    idx = (((t * A + (a - 1)) * Z + z) * P + p) * C + c + 1
    return idx.ravel()


def central_true_z(true_z: int) -> Tuple[int, Tuple[str, ...]]:
    """Middle true-Z plane (1-based) for display, plus a warning when clamped to 1."""
    z_mid = int(true_z) // 2
    if z_mid < 1:
        return 1, (f"display position clamped to z=1 (true_z={true_z})",)
    return z_mid, ()


def _split_position(d: HyperstackDescriptor) -> Tuple[StackPosition, Tuple[str, ...]]:
    # first phase of the middle true-Z plane
    z_mid, warnings = central_true_z(d.true_z)
    return StackPosition(channel=1, z=(z_mid - 1) * d.phases + 1, frame=1), warnings


def extract_angle(stack: Hyperstack, a: int) -> Hyperstack:
    """Split the hyperstack, returning a new stack with only angle ``a``.

    Parameters
    ----------
    stack:
        Raw SI stack; its descriptor carries phases and angles.
    a:
        1-based angle number.

    Returns
    -------
    Hyperstack
        ``C*P*Z*T`` planes, descriptor ``(C, P, 1, Z*P, T)`` (phase folded into
        observed Z), calibration copied, positioned on the first phase of the
        middle true-Z plane.
    """
    d = stack.descriptor
    d.check_divisible()
    idx = angle_indices(d, a)
    out_d = replace(d, angles=1, observed_z=d.true_z * d.phases)
    position, warnings = _split_position(out_d)
    logger.debug("extract_angle a=%d: %d of %d planes", a, idx.size, d.n_planes)
    return Hyperstack(
        planes=stack.planes[idx - 1],
        descriptor=out_d,
        calibration=stack.calibration,
        position=position,
        warnings=warnings,
    )


def split_angles(stack: Hyperstack) -> list[Hyperstack]:
    """Return ``[extract_angle(stack, 1), ..., extract_angle(stack, A)]``."""
    stack.descriptor.check_divisible()
    return [extract_angle(stack, a) for a in range(1, stack.descriptor.angles + 1)]


def interleave_angles(angle_stacks: Sequence[Hyperstack]) -> Hyperstack:
    """Rebuild the canonical CPZAT stack from per-angle stacks (angle order as given)."""
    if not angle_stacks:
        raise InvalidDimensions("No angle stacks provided")

    d0 = angle_stacks[0].descriptor
    for i, s in enumerate(angle_stacks):
        if s.descriptor.angles != 1:
            raise InvalidDimensions(f"Stack {i} is not angle-split (angles={s.descriptor.angles})")
        if s.descriptor != d0:
            raise InvalidDimensions(f"Stack {i} descriptor {s.descriptor} differs from {d0}")

    n_angles = len(angle_stacks)
    out_d = replace(d0, angles=n_angles, observed_z=d0.observed_z * n_angles)
    out = np.empty((out_d.n_planes, out_d.height, out_d.width), dtype=angle_stacks[0].planes.dtype)
    for a, s in enumerate(angle_stacks, start=1):
        out[angle_indices(out_d, a) - 1] = s.planes

    return Hyperstack(planes=out, descriptor=out_d, calibration=angle_stacks[0].calibration)


def group_indices(d: HyperstackDescriptor, c: int, z: int, t: int) -> np.ndarray:
    """1-based indices of the phase*angle group at (c, z, t); angle outer, phase inner."""
    d.check_divisible()
    _check_range("c", c, d.channels)
    _check_range("z", z, d.true_z)
    _check_range("t", t, d.frames)
    a = np.arange(d.angles)[:, None]
    p = np.arange(d.phases)[None, :]
    idx = ((((t - 1) * d.angles + a) * d.true_z + (z - 1)) * d.phases + p) * d.channels + c
    return idx.ravel()


def declare_phases_angles(stack: Hyperstack, phases: int, angles: int) -> Hyperstack:
    """Return the same planes re-described with the given phase/angle counts.

    Raises :class:`InvalidDimensions` if observed Z is not a multiple of phases*angles.
    """
    d = replace(stack.descriptor, phases=int(phases), angles=int(angles))
    d.check_divisible()
    if d == stack.descriptor:
        return stack
    return replace(stack, descriptor=d)
