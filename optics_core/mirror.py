"""Reflect capability shared by every mirror kind."""

from __future__ import annotations

import abc
from typing import Any, Dict, List, Tuple

from optics_core.rays import Matrix, Ray

Intersection = Tuple[float, Matrix]


class Mirror(abc.ABC):
    """Abstract mirror, dispatched polymorphically by the ray tracer."""

    @abc.abstractmethod
    def reflect(self, ray: Ray) -> List[Intersection]:
        """Return (distance, reflection transform) for every hit, nearest first.

        An empty list means the ray misses the mirror. Applying the transform
        to the incoming direction is left to the caller.
        """

    @abc.abstractmethod
    def kind_name(self) -> str:
        """Identifier the scene loader uses to pick the constructor."""

    @classmethod
    @abc.abstractmethod
    def from_serialized(cls, data: Any) -> "Mirror":
        """Build a mirror from its JSON-like description."""

    @abc.abstractmethod
    def to_serialized(self) -> Dict[str, Any]:
        """JSON-compatible description accepted by ``from_serialized``."""
