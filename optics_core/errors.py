"""Error and warning types raised by the mirror geometry."""

from __future__ import annotations


class MalformedInput(ValueError):
    """Serialized control points could not be turned into a mirror."""


class DegenerateTangent(ArithmeticError):
    """Curve derivative vanishes, so no tangent direction exists."""


class NoConvergence(RuntimeError):
    """Root refinement exhausted its iteration budget."""


class GeometryWarning(RuntimeWarning):
    """A candidate intersection was dropped because of a soft failure."""
