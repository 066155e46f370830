"""Bezier curve evaluation in an arbitrary dimension.

The curve of degree n over control points P_0..P_n is

    C(t) = sum_i binomial(n, i) t^i (1 - t)^(n - i) P_i

Low degrees use the Bernstein sum directly. Above ``CASTELJAU_DEGREE`` the
large binomial weights times tiny powers start to lose digits, so the
de Casteljau interpolation scheme is used instead. Neither strategy clamps
``t``: values outside [0, 1] extrapolate the polynomial.

Example:
    >>> import numpy as np
    >>> from optics_core.bezier import evaluate, tangent
    >>> cps = np.array([[0.0, 0.0], [0.5, 1.0], [1.0, 0.0]])
    >>> evaluate(cps, 0.5)
    array([0.5, 0.5])
    >>> np.allclose(tangent(cps, 0.5), np.array([1.0, 0.0]))
    True
"""

from __future__ import annotations

from typing import Union

import numpy as np
from numpy.typing import ArrayLike, NDArray

from optics_core.errors import DegenerateTangent
from optics_core.geometry import Vector, binomial

CASTELJAU_DEGREE = 10

Param = Union[float, NDArray[np.float64]]


def _as_polygon(control_points: ArrayLike, min_points: int = 1) -> NDArray[np.float64]:
    cps = np.asarray(control_points, dtype=float)
    if cps.ndim != 2:
        raise ValueError(f"control points must be a 2-D array, got shape {cps.shape}")
    if cps.shape[0] < min_points:
        raise ValueError(f"need at least {min_points} control points, got {cps.shape[0]}")
    return cps


def bernstein_basis(n: int, t: Param) -> NDArray[np.float64]:
    """Bernstein weights of degree n, shape ``t.shape + (n + 1,)``."""

    tt = np.asarray(t, dtype=float)[..., None]
    i = np.arange(n + 1)
    coef = np.array([binomial(n, k) for k in range(n + 1)], dtype=float)
    return coef * tt**i * (1.0 - tt) ** (n - i)


def _casteljau(cps: NDArray[np.float64], t: Param) -> NDArray[np.float64]:
    tt = np.asarray(t, dtype=float)[..., None, None]
    pts = np.broadcast_to(cps, tt.shape[:-2] + cps.shape)
    for _ in range(cps.shape[0] - 1):
        pts = (1.0 - tt) * pts[..., :-1, :] + tt * pts[..., 1:, :]
    return pts[..., 0, :]


def _blend(cps: NDArray[np.float64], t: Param) -> NDArray[np.float64]:
    n = cps.shape[0] - 1
    if n > CASTELJAU_DEGREE:
        return _casteljau(cps, t)
    return bernstein_basis(n, t) @ cps


def evaluate(control_points: ArrayLike, t: Param) -> Vector:
    """Point on the curve at parameter t (vectorized over t)."""

    return _blend(_as_polygon(control_points), t)


def derivative(control_points: ArrayLike, t: Param) -> Vector:
    """Raw derivative C'(t): degree n-1 curve over n * (P_{i+1} - P_i)."""

    cps = _as_polygon(control_points, min_points=2)
    n = cps.shape[0] - 1
    return _blend(n * np.diff(cps, axis=0), t)


def tangent(control_points: ArrayLike, t: float) -> Vector:
    """Unit tangent at t; raises DegenerateTangent where C'(t) == 0."""

    d = derivative(control_points, t)
    norm = float(np.linalg.norm(d))
    if norm == 0.0:
        raise DegenerateTangent(f"curve derivative vanishes at t={t}")
    return d / norm


def sample(control_points: ArrayLike, num: int) -> NDArray[np.float64]:
    """Curve points at ``num`` equally spaced parameters in [0, 1], shape (num, D)."""

    if num < 2:
        raise ValueError("num must be >= 2")
    return evaluate(control_points, np.linspace(0.0, 1.0, num))
