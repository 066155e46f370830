"""Bezier curve mirror.

Example:
    >>> import numpy as np
    >>> from optics_core.bezier_mirror import BezierMirror
    >>> from optics_core.geometry import pad_to_dim
    >>> from optics_core.rays import Ray
    >>> m = BezierMirror.from_serialized({"control_points": [pad_to_dim([0.0, -1.0]).tolist(), pad_to_dim([0.0, 1.0]).tolist()]})
    >>> hits = m.reflect(Ray(pad_to_dim([-2.0, 0.0]), pad_to_dim([1.0, 0.0])))
    >>> len(hits), round(hits[0][0], 9)
    (1, 2.0)
"""

from __future__ import annotations

from dataclasses import dataclass
import math
import numbers
from typing import Any, Dict, List, Mapping, Sequence
import warnings

import numpy as np
from numpy.typing import NDArray

from optics_core import bezier
from optics_core.errors import DegenerateTangent, GeometryWarning, MalformedInput
from optics_core.geometry import DIM, Vector
from optics_core.intersection import IntersectionConfig, intersect
from optics_core.mirror import Intersection, Mirror
from optics_core.rays import Ray, reflection_transform


def _is_sequence(obj: Any) -> bool:
    return isinstance(obj, np.ndarray) or (isinstance(obj, Sequence) and not isinstance(obj, (str, bytes)))


def parse_control_points(raw: Any, dim: int = DIM) -> NDArray[np.float64]:
    """Validate a nested numeric list into an (n+1, dim) array, n >= 1."""

    if not _is_sequence(raw):
        raise MalformedInput(f"control points must be a list of points, got {type(raw).__name__}")
    if len(raw) < 2:
        raise MalformedInput(f"need at least 2 control points, got {len(raw)}")
    rows: List[List[float]] = []
    for i, point in enumerate(raw):
        if not _is_sequence(point):
            raise MalformedInput(f"control point {i} is not a coordinate list: {point!r}")
        if len(point) != dim:
            raise MalformedInput(f"control point {i} has {len(point)} coordinates, expected {dim}")
        row: List[float] = []
        for j, value in enumerate(point):
            if isinstance(value, (bool, np.bool_)) or not isinstance(value, numbers.Real):
                raise MalformedInput(f"control point {i} coordinate {j} is not numeric: {value!r}")
            try:
                number = float(value)
            except OverflowError:
                raise MalformedInput(f"control point {i} coordinate {j} does not fit a float") from None
            if not math.isfinite(number):
                raise MalformedInput(f"control point {i} coordinate {j} is not finite: {value!r}")
            row.append(number)
        rows.append(row)
    return np.array(rows, dtype=float)


@dataclass(frozen=True, eq=False)
class BezierMirror(Mirror):
    """Reflective Bezier curve of degree len(control_points) - 1.

    The control polygon is copied and frozen on construction, so one mirror
    can be shared by concurrent tracers.
    """

    control_points: NDArray[np.float64]
    config: IntersectionConfig = IntersectionConfig()
    surface_id: str = "bezier"

    KIND = "bezier"

    def __post_init__(self) -> None:
        cps = parse_control_points(self.control_points)
        cps.setflags(write=False)
        object.__setattr__(self, "control_points", cps)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BezierMirror):
            return NotImplemented
        return (
            np.array_equal(self.control_points, other.control_points)
            and self.config == other.config
            and self.surface_id == other.surface_id
        )

    @property
    def degree(self) -> int:
        return int(self.control_points.shape[0] - 1)

    @property
    def dim(self) -> int:
        return int(self.control_points.shape[1])

    def kind_name(self) -> str:
        return self.KIND

    def evaluate(self, t: float) -> Vector:
        return bezier.evaluate(self.control_points, t)

    def tangent(self, t: float) -> Vector:
        return bezier.tangent(self.control_points, t)

    def sample(self, num: int = 101) -> NDArray[np.float64]:
        return bezier.sample(self.control_points, num)

    def intersect(self, ray: Ray) -> List[tuple[float, float]]:
        """Curve parameters and distances of every hit, nearest first."""

        return intersect(self.control_points, ray, self.config)

    def reflect(self, ray: Ray) -> List[Intersection]:
        if ray.dim != self.dim:
            raise ValueError(f"ray dimension {ray.dim} does not match mirror dimension {self.dim}")
        out: List[Intersection] = []
        for t, distance in self.intersect(ray):
            try:
                transform = reflection_transform(self.tangent(t))
            except DegenerateTangent as exc:
                warnings.warn(f"Skipping hit on '{self.surface_id}' at t={t:.6g}: {exc}", GeometryWarning, stacklevel=2)
                continue
            out.append((distance, transform))
        return out

    @classmethod
    def from_serialized(cls, data: Any, config: IntersectionConfig | None = None) -> "BezierMirror":
        """Build from ``{"control_points": [[x0, ...], ...]}`` or the bare list."""

        raw = data
        surface_id = cls.KIND
        if isinstance(data, Mapping):
            kind = data.get("kind", cls.KIND)
            if kind != cls.KIND:
                raise MalformedInput(f"expected kind '{cls.KIND}', got {kind!r}")
            if "control_points" not in data:
                raise MalformedInput("missing 'control_points'")
            raw = data["control_points"]
            surface_id = str(data.get("surface_id", surface_id))
        return cls(raw, config=config or IntersectionConfig(), surface_id=surface_id)

    def to_serialized(self) -> Dict[str, Any]:
        return {
            "kind": self.KIND,
            "surface_id": self.surface_id,
            "control_points": self.control_points.tolist(),
        }
