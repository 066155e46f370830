"""Single-interaction tracing of ray bundles against a mirror.

Example:
    >>> import numpy as np
    >>> from optics_core.bezier_mirror import BezierMirror
    >>> from optics_core.geometry import pad_to_dim
    >>> from optics_core.rays import Ray
    >>> from optics_core.tracer import trace_rays
    >>> m = BezierMirror([pad_to_dim([0.0, -1.0]), pad_to_dim([0.0, 1.0])])
    >>> hits = trace_rays(m, [Ray(pad_to_dim([-0.5, 0.0]), pad_to_dim([1.0, 1.0]))])
    >>> np.allclose(hits[0].outgoing, pad_to_dim([-1.0, 1.0]) / np.sqrt(2))
    True
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Sequence

import numpy as np

from optics_core.geometry import Vector
from optics_core.mirror import Mirror
from optics_core.rays import Matrix, Ray, apply_transform


@dataclass
class Hit:
    ray_index: int
    distance: float
    point: Vector
    transform: Matrix
    outgoing: Vector


def trace_rays(mirror: Mirror, rays: Sequence[Ray], nearest_only: bool = False) -> List[Hit]:
    """Collect every reflection of every ray, grouped by ray, nearest first."""

    hits: List[Hit] = []
    for i, ray in enumerate(rays):
        found = mirror.reflect(ray)
        if nearest_only:
            found = found[:1]
        for distance, transform in found:
            hits.append(
                Hit(
                    ray_index=i,
                    distance=float(distance),
                    point=ray.at(distance),
                    transform=np.asarray(transform, dtype=float),
                    outgoing=apply_transform(transform, ray.direction),
                )
            )
    return hits


def hits_per_ray(hits: Sequence[Hit], num_rays: int) -> List[int]:
    counts: Dict[int, int] = {i: 0 for i in range(num_rays)}
    for h in hits:
        counts[h.ray_index] += 1
    return [counts[i] for i in range(num_rays)]
