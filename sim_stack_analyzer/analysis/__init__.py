"""Stack and spectrum analysis package.

Design principle:
  - Models describe a raw SI hyperstack (:class:`~sim_stack_analyzer.models.hyperstack.Hyperstack`).
  - Analysis functions are pure: they consume a Hyperstack or a plane and return
    new arrays/stacks. Nothing keeps state between calls.

Planes are addressed through the descriptor's index formula, never through
nested containers, so every split/projection can be checked against
:func:`~sim_stack_analyzer.analysis.indexing.canonical_index`.
"""

from .indexing import (
    address_of,
    address_table,
    canonical_index,
    declare_phases_angles,
    extract_angle,
    interleave_angles,
    split_angles,
    stack_divisible_by,
)
from .projection import project_phase_angle, pseudo_widefield
from .fourier import fft_stack, forward_transform, gaussian_window, masked_amplitude, pad, pad_size
from .spectra import (
    ComplexSpectrum,
    DerivedPlane,
    amplitude,
    filter_low,
    gamma_amplitude,
    log_power,
    phase,
    power,
    scaled_power_spectrum,
)

__all__ = [
    "address_of",
    "address_table",
    "canonical_index",
    "declare_phases_angles",
    "extract_angle",
    "interleave_angles",
    "split_angles",
    "stack_divisible_by",
    "project_phase_angle",
    "pseudo_widefield",
    "fft_stack",
    "forward_transform",
    "gaussian_window",
    "masked_amplitude",
    "pad",
    "pad_size",
    "ComplexSpectrum",
    "DerivedPlane",
    "amplitude",
    "filter_low",
    "gamma_amplitude",
    "log_power",
    "phase",
    "power",
    "scaled_power_spectrum",
]
