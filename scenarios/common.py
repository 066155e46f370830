"""Common scenario helpers."""

from __future__ import annotations

from typing import Iterable, List, Sequence

import numpy as np

from optics_core.bezier_mirror import BezierMirror
from optics_core.geometry import pad_to_dim
from optics_core.rays import Ray


def planar_mirror(points_2d: Sequence[Sequence[float]], surface_id: str) -> BezierMirror:
    """Bezier mirror drawn in the first two axes, zero elsewhere."""

    return BezierMirror([pad_to_dim(p) for p in points_2d], surface_id=surface_id)


def parallel_rays(origins_2d: Iterable[Sequence[float]], direction_2d: Sequence[float]) -> List[Ray]:
    d = pad_to_dim(direction_2d)
    return [Ray(pad_to_dim(o), d) for o in origins_2d]


def rotate_2d(points_2d: Sequence[Sequence[float]], angle_deg: float) -> np.ndarray:
    a = np.deg2rad(angle_deg)
    rot = np.array([[np.cos(a), -np.sin(a)], [np.sin(a), np.cos(a)]])
    return np.asarray(points_2d, dtype=float) @ rot.T
