"""Scenario M1: tilted straight segment (degree-1 mirror) under a parallel beam."""

from __future__ import annotations

import numpy as np

from scenarios.common import parallel_rays, planar_mirror, rotate_2d


def build_mirror(tilt_deg: float = 0.0):
    return planar_mirror(rotate_2d([[0.0, -1.0], [0.0, 1.0]], tilt_deg), "segment")


def build_rays(params):
    ys = list(np.linspace(-0.8, 0.8, 9)) + [-1.5, 1.5]
    return parallel_rays([[-3.0, y] for y in ys], [1.0, 0.0])


def expected_hits(params):
    return [1] * 9 + [0, 0]


def build_sweep_params():
    return [
        {"case_id": "m1_tilt0", "tilt_deg": 0.0},
        {"case_id": "m1_tilt30", "tilt_deg": 30.0},
    ]


def run_case(params):
    return build_mirror(params["tilt_deg"]), build_rays(params)
