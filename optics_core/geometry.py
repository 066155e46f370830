"""Dimension configuration, vector helpers and combinatorics.

Example:
    >>> import numpy as np
    >>> from optics_core.geometry import binomial, normalize
    >>> binomial(4, 2), binomial(2, 3)
    (6, 0)
    >>> np.allclose(normalize(np.array([3.0, 4.0])), np.array([0.6, 0.8]))
    True
"""

from __future__ import annotations

import os
from typing import Sequence

import numpy as np
from numpy.typing import NDArray

Vector = NDArray[np.float64]

# Shared by every point, vector and matrix in the process.
DIM = int(os.environ.get("OPTICS_DIM", "3"))
if DIM < 2:
    raise ValueError(f"OPTICS_DIM must be >= 2, got {DIM}")


def binomial(n: int, k: int) -> int:
    """Binomial coefficient C(n, k) by running product-and-divide."""

    if k < 0 or k > n:
        return 0
    result = 1
    for i in range(k):
        result = result * (n - i) // (i + 1)
    return result


def normalize(v: Vector) -> Vector:
    vv = np.asarray(v, dtype=float)
    n = np.linalg.norm(vv)
    if n == 0:
        raise ValueError("Cannot normalize zero vector")
    return vv / n


def pad_to_dim(coords: Sequence[float], dim: int = DIM) -> Vector:
    """Embed a low-dimensional point in the process dimension, zero filled."""

    out = np.zeros(dim, dtype=float)
    c = np.asarray(coords, dtype=float)
    if c.size > dim:
        raise ValueError(f"Point has {c.size} coordinates, dimension is {dim}")
    out[: c.size] = c
    return out
