"""Phase/angle projection of raw SI stacks.

Every ``(t, z, c)`` of a raw stack owns ``phases*angles`` planes. Projecting
collapses each such group to one plane:

- AVERAGE gives a pseudo-widefield image. Output is narrowed to uint16
  (round half up, clipped to ``[0, 65535]``) and optionally magnified x2 in XY
  to match reconstructed-image size; calibration is halved accordingly.
- MAXIMUM shows whether *any* phase/angle saturated the detector. Output stays
  float32, is never magnified, and calibration is copied unchanged.

Groups are reduced by streaming: one plane at a time is added into the
accumulator, so no group is materialized in full.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Dict, Iterable, Optional

import numpy as np

from sim_stack_analyzer.analysis.indexing import central_true_z, declare_phases_angles, group_indices
from sim_stack_analyzer.analysis.smoothing import magnify2x, narrow_to_uint16
from sim_stack_analyzer.models.hyperstack import Hyperstack, StackPosition
from sim_stack_analyzer.models.profile import CheckProfile, ProjectionMode

logger = logging.getLogger(__name__)

Reducer = Callable[[Iterable[np.ndarray]], np.ndarray]


def average_planes(planes: Iterable[np.ndarray]) -> np.ndarray:
    """Per-pixel mean of ``planes`` (float32)."""
    acc: Optional[np.ndarray] = None
    n = 0
    for plane in planes:
        f = np.asarray(plane, dtype=np.float32)
        if acc is None:
            acc = f.copy()
        else:
            acc += f
        n += 1
    if acc is None:
        raise ValueError("Cannot average an empty group of planes")
    acc /= np.float32(n)
    return acc


def maximum_planes(planes: Iterable[np.ndarray]) -> np.ndarray:
    """Per-pixel maximum of ``planes`` (float32)."""
    acc: Optional[np.ndarray] = None
    for plane in planes:
        f = np.asarray(plane, dtype=np.float32)
        if acc is None:
            acc = f.copy()
        else:
            np.maximum(acc, f, out=acc)
    if acc is None:
        raise ValueError("Cannot take the maximum of an empty group of planes")
    return acc


REDUCERS: Dict[ProjectionMode, Reducer] = {
    ProjectionMode.AVERAGE: average_planes,
    ProjectionMode.MAXIMUM: maximum_planes,
}


def project_phase_angle(stack: Hyperstack, mode: ProjectionMode = ProjectionMode.AVERAGE) -> Hyperstack:
    """Reduce every phase*angle group of ``stack`` to one float32 plane.

    Parameters
    ----------
    stack:
        Raw SI stack in canonical CPZAT order; its descriptor declares phases and angles.
    mode:
        Reduction applied to each group.

    Returns
    -------
    Hyperstack
        ``C*Z*T`` planes (c fastest, then z, then t), descriptor ``(C, 1, 1, Z, T)``,
        calibration copied, positioned at the central true-Z plane.
    """
    d = stack.descriptor
    d.check_divisible()
    reduce = REDUCERS[ProjectionMode(mode)]

    C, Z, T = d.channels, d.true_z, d.frames
    logger.debug(
        "project_phase_angle %s: C=%d P=%d A=%d Z=%d T=%d", ProjectionMode(mode).name, C, d.phases, d.angles, Z, T
    )

    out = np.empty((C * Z * T, d.height, d.width), dtype=np.float32)
    for t in range(1, T + 1):
        for z in range(1, Z + 1):
            for c in range(1, C + 1):
                idx = group_indices(d, c, z, t)
                out[((t - 1) * Z + (z - 1)) * C + (c - 1)] = reduce(stack.planes[i - 1] for i in idx)

    out_d = replace(d, phases=1, angles=1, observed_z=Z)
    z_mid, warnings = central_true_z(Z)
    return Hyperstack(
        planes=out,
        descriptor=out_d,
        calibration=stack.calibration,
        position=StackPosition(channel=1, z=z_mid, frame=1),
        warnings=warnings,
    )


def _average_output(proj: Hyperstack, rescale: bool) -> Hyperstack:
    planes = narrow_to_uint16(proj.planes)
    if not rescale:
        return replace(proj, planes=planes)
    planes = np.stack([narrow_to_uint16(magnify2x(p)) for p in planes])
    d = replace(proj.descriptor, width=proj.descriptor.width * 2, height=proj.descriptor.height * 2)
    return replace(proj, planes=planes, descriptor=d, calibration=proj.calibration.scaled(0.5, 0.5))


def _maximum_output(proj: Hyperstack) -> Hyperstack:
    """Keep float32 values, original size and calibration."""
    return proj


def pseudo_widefield(stack: Hyperstack, profile: Optional[CheckProfile] = None) -> Hyperstack:
    """Convert raw SI data to a pseudo-widefield (AVERAGE) or max (MAXIMUM) projection.

    The profile's phases/angles are declared on the stack first; an observed Z
    that is not a multiple of phases*angles raises ``InvalidDimensions`` before
    any output is produced.
    """
    profile = profile or CheckProfile()
    raw = declare_phases_angles(stack, profile.phases, profile.angles)
    proj = project_phase_angle(raw, profile.projection_mode)

    if profile.projection_mode is ProjectionMode.AVERAGE:
        result = _average_output(proj, profile.rescale)
    else:
        result = _maximum_output(proj)

    logger.info(
        "Pseudo-widefield (%s) from %d raw planes -> %d planes of %dx%d",
        profile.projection_mode.name,
        raw.n_planes,
        result.n_planes,
        result.descriptor.width,
        result.descriptor.height,
    )
    return result
