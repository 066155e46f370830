"""Ray / Bezier-curve intersection by sampled bracketing and bisection.

The ray parameter is eliminated by projecting the curve onto the ray line.
With w(t) = C(t) - origin and unit direction d,

    p(t) = w(t) - (w(t) . d) d        perpendicular offset from the ray line
    f(t) = |p(t)|                     zero exactly where the ray line meets C

f is non-negative, so its zeros are located as minima: h(t) = p(t) . C'(t)
is half the derivative of f^2 and changes sign from negative to positive at
every minimum. Minima are bracketed on a uniform grid, grid cells that may
still hide a zero of f are halved, and each bracket is narrowed by
bisection on h and kept when f falls below the tolerance there. The
along-ray distance w(t) . d is recovered afterwards.

Example:
    >>> import numpy as np
    >>> from optics_core.intersection import intersect
    >>> from optics_core.rays import Ray
    >>> cps = np.array([[0.0, -1.0], [0.0, 1.0]])
    >>> hits = intersect(cps, Ray(np.array([-2.0, 0.0]), np.array([1.0, 0.0])))
    >>> [(round(t, 6), round(s, 6)) for t, s in hits]
    [(0.5, 2.0)]
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, NamedTuple, Optional, Tuple
import warnings

import numpy as np
from numpy.typing import ArrayLike, NDArray

from optics_core.bezier import derivative, evaluate
from optics_core.errors import GeometryWarning, NoConvergence
from optics_core.rays import Ray


@dataclass(frozen=True)
class IntersectionConfig:
    """Root-finding policy.

    samples_per_degree, min_samples:
        Grid resolution is ``max(min_samples, samples_per_degree * degree + 1)``.
        Two minima of f inside one grid cell merge into one bracket, so a
        coarse grid misses roots on tightly curved mirrors; every extra
        sample costs one curve and one derivative evaluation per ray.
    tolerance:
        Absolute perpendicular distance below which the ray counts as
        touching the curve. Also the slack for roots slightly behind the
        ray origin.
    t_tolerance:
        Bracket width at which bisection stops. A refined root is accepted
        when f < tolerance + |C'| * t_tolerance.
    merge_tolerance:
        Roots closer than this in t are reported once. Also the narrowest
        cell the search splits while looking for hidden root pairs.
    max_iterations:
        Bisection budget per bracket; exhausting it drops that root.
    """

    samples_per_degree: int = 16
    min_samples: int = 33
    tolerance: float = 1e-9
    t_tolerance: float = 1e-13
    merge_tolerance: float = 1e-7
    max_iterations: int = 200

    def __post_init__(self) -> None:
        if self.samples_per_degree < 1:
            raise ValueError("samples_per_degree must be >= 1")
        if self.min_samples < 2:
            raise ValueError("min_samples must be >= 2")
        if self.tolerance <= 0.0 or self.t_tolerance <= 0.0:
            raise ValueError("tolerances must be > 0")
        if self.merge_tolerance < 0.0:
            raise ValueError("merge_tolerance must be >= 0")
        if self.max_iterations < 1:
            raise ValueError("max_iterations must be >= 1")

    def num_samples(self, degree: int) -> int:
        return max(self.min_samples, self.samples_per_degree * degree + 1)


def _offsets(points: NDArray[np.float64], ray: Ray) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
    w = points - ray.origin
    along = w @ ray.direction
    perp = w - np.multiply.outer(along, ray.direction)
    return perp, along


def _transverse(vectors: NDArray[np.float64], ray: Ray) -> NDArray[np.float64]:
    return vectors - np.multiply.outer(vectors @ ray.direction, ray.direction)


class _Sample(NamedTuple):
    t: float
    f: float
    h: float
    speed: float


def _residuals(cps: NDArray[np.float64], ray: Ray, t: ArrayLike):
    """f = |p|, h = p . C' and the transverse speed |P C'| at t."""

    perp, _ = _offsets(evaluate(cps, t), ray)
    d1 = derivative(cps, t)
    f = np.linalg.norm(perp, axis=-1)
    h = np.einsum("...i,...i->...", perp, d1)
    speed = np.linalg.norm(_transverse(d1, ray), axis=-1)
    return f, h, speed


def _bend_bound(cps: NDArray[np.float64], ray: Ray) -> float:
    """Upper bound on |P C''| from the second hodograph's control polygon."""

    n = cps.shape[0] - 1
    if n < 2:
        return 0.0
    d2 = n * (n - 1) * np.diff(cps, n=2, axis=0)
    return float(np.max(np.linalg.norm(_transverse(d2, ray), axis=1)))


def _refine(cps: NDArray[np.float64], ray: Ray, lo: float, hi: float, cfg: IntersectionConfig) -> Optional[float]:
    """Bisect h on [lo, hi] (h(lo) < 0 <= h(hi)); None for a near miss."""

    for _ in range(cfg.max_iterations):
        mid = 0.5 * (lo + hi)
        perp, _ = _offsets(evaluate(cps, mid), ray)
        d1 = derivative(cps, mid)
        if hi - lo < cfg.t_tolerance:
            # a root pinned to within t_tolerance still sits up to |C'| * t_tolerance off the line
            slack = cfg.tolerance + float(np.linalg.norm(d1)) * cfg.t_tolerance
            return mid if float(np.linalg.norm(perp)) < slack else None
        if float(perp @ d1) < 0.0:
            lo = mid
        else:
            hi = mid
    raise NoConvergence(f"bracket [{lo:.6g}, {hi:.6g}] still open after {cfg.max_iterations} iterations")


def _bracketed_roots(cps: NDArray[np.float64], ray: Ray, samples: List[_Sample], cfg: IntersectionConfig) -> List[float]:
    """Refine every minimum of f that can reach zero, splitting unresolved cells.

    A cell is dropped when its end offsets are too large for f to reach zero
    inside it (|f'| <= |P C'|). A cell that can hold a zero but shows no
    negative-to-positive change of h may hide a close pair of roots around a
    local maximum of f, so it is halved until the pair separates or the cell
    is narrower than merge_tolerance.
    """

    bend = _bend_bound(cps, ray)
    min_width = max(cfg.merge_tolerance, cfg.t_tolerance)
    roots: List[float] = []
    cells = list(zip(samples[:-1], samples[1:]))
    while cells:
        a, b = cells.pop()
        width = b.t - a.t
        speed = 0.5 * (a.speed + b.speed + bend * width)
        if a.f + b.f > speed * width + 2.0 * cfg.tolerance:
            continue
        if a.h < 0.0 <= b.h:
            try:
                t = _refine(cps, ray, a.t, b.t, cfg)
            except NoConvergence as exc:
                warnings.warn(f"Dropping intersection candidate: {exc}", GeometryWarning, stacklevel=3)
                continue
            if t is not None:
                roots.append(t)
            continue
        if width < min_width:
            continue
        mid = 0.5 * (a.t + b.t)
        m = _Sample(mid, *(float(v) for v in _residuals(cps, ray, mid)))
        cells.extend([(a, m), (m, b)])
    return roots


def intersect(
    control_points: ArrayLike,
    ray: Ray,
    config: IntersectionConfig | None = None,
) -> List[Tuple[float, float]]:
    """Return (t, distance) pairs where the ray meets the curve, nearest first."""

    cfg = config or IntersectionConfig()
    cps = np.asarray(control_points, dtype=float)
    if cps.ndim != 2 or cps.shape[0] < 2:
        raise ValueError(f"need a (n+1, D) control polygon with n >= 1, got shape {cps.shape}")
    if cps.shape[1] != ray.dim:
        raise ValueError(f"curve dimension {cps.shape[1]} does not match ray dimension {ray.dim}")

    ts = np.linspace(0.0, 1.0, cfg.num_samples(cps.shape[0] - 1))
    f, h, speed = _residuals(cps, ray, ts)

    candidates = [float(ts[k]) for k in (0, -1) if f[k] < cfg.tolerance]
    # A curve lying along the ray line has no isolated minima; report its ends only.
    if not np.all(f < cfg.tolerance):
        samples = [_Sample(*row) for row in zip(ts.tolist(), f.tolist(), h.tolist(), speed.tolist())]
        candidates.extend(_bracketed_roots(cps, ray, samples, cfg))

    hits: List[Tuple[float, float]] = []
    last_t = -np.inf
    for t in sorted(candidates):
        if t < 0.0 or t > 1.0 or t - last_t < cfg.merge_tolerance:
            continue
        last_t = t
        distance = float((evaluate(cps, t) - ray.origin) @ ray.direction)
        if distance < -cfg.tolerance:
            continue
        hits.append((t, max(distance, 0.0)))
    hits.sort(key=lambda hit: hit[1])
    return hits
