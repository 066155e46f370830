"""Scenario M3: cubic S-curve that a vertical ray crosses three times."""

from __future__ import annotations

import numpy as np

from scenarios.common import parallel_rays, planar_mirror

S_CURVE = [[0.0, 0.0], [3.0, 1.0], [-2.0, 2.0], [1.0, 3.0]]


def build_mirror(scale: float = 1.0):
    return planar_mirror(np.asarray(S_CURVE) * scale, "s_curve")


def build_rays(params):
    s = params["scale"]
    xs = [0.25, 0.5, 0.9, -0.5, 2.0]
    return parallel_rays([[x * s, 5.0 * s] for x in xs], [0.0, -1.0])


def expected_hits(params):
    return [3, 3, 3, 0, 0]


def build_sweep_params():
    return [
        {"case_id": "m3_s1", "scale": 1.0},
        {"case_id": "m3_s4", "scale": 4.0},
    ]


def run_case(params):
    return build_mirror(params["scale"]), build_rays(params)
