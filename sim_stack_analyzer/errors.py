"""Typed failures raised by the stack and spectrum operations.

Both derive from :class:`ValueError` so code that already guards calls with
``except ValueError`` keeps working.
"""

from __future__ import annotations


class SimStackError(ValueError):
    """Base class for precondition violations."""


class InvalidDimensions(SimStackError):
    """Declared phase/angle counts are inconsistent with the stack extent."""


class MalformedPlane(SimStackError):
    """A plane has zero or negative width/height, or is not 2D."""
