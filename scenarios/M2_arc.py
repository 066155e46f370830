"""Scenario M2: quadratic arc lit from above."""

from __future__ import annotations

import numpy as np

from scenarios.common import parallel_rays, planar_mirror


def build_mirror(height: float = 1.0):
    return planar_mirror([[0.0, 0.0], [0.5, height], [1.0, 0.0]], "arc")


def build_rays(params):
    xs = list(np.linspace(0.05, 0.95, 10)) + [-0.5, 1.5]
    return parallel_rays([[x, params["height"] + 1.0] for x in xs], [0.0, -1.0])


def expected_hits(params):
    return [1] * 10 + [0, 0]


def build_sweep_params():
    return [
        {"case_id": "m2_h1.0", "height": 1.0},
        {"case_id": "m2_h2.5", "height": 2.5},
    ]


def run_case(params):
    return build_mirror(params["height"]), build_rays(params)
