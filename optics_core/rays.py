"""Ray container and tangent-axis reflection transforms.

A curve mirror acts like a thin reflective wire: the incoming direction is
reflected about the tangent line, v -> 2 (v . t) t - v, i.e. the linear map
R = 2 t t^T - I.

Example:
    >>> import numpy as np
    >>> from optics_core.rays import apply_transform, reflection_transform
    >>> r = reflection_transform(np.array([1.0, 0.0]))
    >>> np.allclose(apply_transform(r, np.array([1.0, -1.0])), np.array([1.0, 1.0]) / np.sqrt(2))
    True
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from optics_core.errors import DegenerateTangent
from optics_core.geometry import Vector, normalize

Matrix = NDArray[np.float64]


@dataclass(frozen=True)
class Ray:
    """Half-line origin + s * direction, s >= 0. Direction is stored normalized."""

    origin: Vector
    direction: Vector

    def __post_init__(self) -> None:
        o = np.asarray(self.origin, dtype=float)
        d = normalize(np.asarray(self.direction, dtype=float))
        if o.shape != d.shape or o.ndim != 1:
            raise ValueError(f"origin {o.shape} and direction {d.shape} must be matching vectors")
        object.__setattr__(self, "origin", o)
        object.__setattr__(self, "direction", d)

    @property
    def dim(self) -> int:
        return int(self.origin.shape[0])

    def at(self, distance: float) -> Vector:
        return self.origin + distance * self.direction


def reflection_transform(tangent: Vector) -> Matrix:
    """Return R = 2 t t^T - I for the (re-normalized) tangent t."""

    t = np.asarray(tangent, dtype=float)
    n = np.linalg.norm(t)
    if n == 0:
        raise DegenerateTangent("Cannot build a reflection about a zero tangent")
    t = t / n
    return 2.0 * np.outer(t, t) - np.eye(t.shape[0])


def apply_transform(transform: Matrix, direction: Vector) -> Vector:
    """Outgoing unit direction for an incoming direction."""

    d = normalize(np.asarray(direction, dtype=float))
    return normalize(np.asarray(transform, dtype=float) @ d)
