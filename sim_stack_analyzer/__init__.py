"""SIM Stack Analyzer -- Python tooling for structured-illumination microscopy quality checks.

This package provides tools for:
- Describing raw SI hyperstacks (channel x phase x true Z x angle x time)
- Splitting raw stacks by illumination angle and re-interleaving them
- Projecting phases and angles (average pseudo-widefield, maximum for saturation)
- Windowed, padded 2D Fourier transforms of planes and stacks
- Amplitude, phase, log-power and gamma-scaled spectra, low-frequency masking

Key principles:
- Planes are addressed by an explicit index formula, not nested containers
- Every operation is pure and returns a new stack; configuration is a frozen profile
- Dimension problems raise typed errors before any output is produced

Main subpackages:
- analysis: Index mapping, projection, Fourier transform and spectra
- models: Data models (HyperstackDescriptor, Hyperstack, CheckProfile)
"""

__version__ = "0.1.0"

__all__ = []
