"""HDF5 schema for mirror trace results.

The schema stores multiple scenarios and multiple sweep cases per scenario.

Structure:
    /
      meta                       (attrs: created_at, dim)
      scenarios/{scenario_id}/cases/{case_id}/
          params_json            (scalar utf-8 JSON)
          mirror_json            (scalar utf-8 JSON, serialized mirror)
          rays/
              origin             (R,D)
              direction          (R,D)
          hits/
              ray_index          (H,) int64
              distance           (H,)
              point              (H,D)
              transform          (H,D,D)
              outgoing           (H,D)

Example:
    >>> from optics_core.bezier_mirror import BezierMirror
    >>> from optics_core.geometry import pad_to_dim
    >>> from optics_core.rays import Ray
    >>> from optics_core.tracer import trace_rays
    >>> m = BezierMirror([pad_to_dim([0.0, -1.0]), pad_to_dim([0.0, 1.0])])
    >>> rays = [Ray(pad_to_dim([-1.0, 0.0]), pad_to_dim([1.0, 0.0]))]
    >>> payload = {"S0": {"case0": CaseData({"n": 1}, m, rays, trace_rays(m, rays))}}
    >>> save_trace_hdf5("/tmp/trace_example.h5", payload)
    >>> loaded, meta = load_trace_hdf5("/tmp/trace_example.h5")
    >>> len(loaded["S0"]["case0"].hits)
    1
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
import json
from typing import Any, Dict, List, Mapping, Tuple

import h5py
import numpy as np

from optics_core.geometry import DIM
from optics_core.mirror import Mirror
from optics_core.rays import Ray
from optics_core.registry import mirror_from_serialized
from optics_core.tracer import Hit


@dataclass
class CaseData:
    params: Dict[str, Any]
    mirror: Mirror
    rays: List[Ray]
    hits: List[Hit]


@dataclass
class Hdf5Meta:
    created_at: str
    dim: int


def _json_default(obj: Any) -> Any:
    if isinstance(obj, (np.integer, np.floating)):
        return obj.item()
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    raise TypeError(f"Unsupported JSON type: {type(obj)}")


def _read_json(dataset: h5py.Dataset) -> Any:
    raw = dataset[()]
    return json.loads(raw.decode() if isinstance(raw, bytes) else raw)


def save_trace_hdf5(filepath: str, scenarios: Mapping[str, Mapping[str, CaseData]], dim: int = DIM) -> None:
    """Save trace outputs to HDF5 using a fixed schema contract."""

    with h5py.File(filepath, "w") as h5:
        meta = h5.create_group("meta")
        meta.attrs["created_at"] = datetime.now(timezone.utc).isoformat()
        meta.attrs["dim"] = int(dim)

        g_scenarios = h5.create_group("scenarios")
        for scenario_id, cases in scenarios.items():
            g_cases = g_scenarios.create_group(str(scenario_id)).create_group("cases")
            for case_id, case in cases.items():
                g_case = g_cases.create_group(str(case_id))
                g_case.create_dataset("params_json", data=json.dumps(case.params, default=_json_default))
                g_case.create_dataset("mirror_json", data=json.dumps(case.mirror.to_serialized()))

                g_rays = g_case.create_group("rays")
                g_rays.create_dataset("origin", data=np.array([r.origin for r in case.rays], dtype=np.float64).reshape(-1, dim))
                g_rays.create_dataset("direction", data=np.array([r.direction for r in case.rays], dtype=np.float64).reshape(-1, dim))

                hits = case.hits
                g_hits = g_case.create_group("hits")
                g_hits.create_dataset("ray_index", data=np.array([h.ray_index for h in hits], dtype=np.int64))
                g_hits.create_dataset("distance", data=np.array([h.distance for h in hits], dtype=np.float64))
                g_hits.create_dataset("point", data=np.array([h.point for h in hits], dtype=np.float64).reshape(-1, dim))
                g_hits.create_dataset("transform", data=np.array([h.transform for h in hits], dtype=np.float64).reshape(-1, dim, dim))
                g_hits.create_dataset("outgoing", data=np.array([h.outgoing for h in hits], dtype=np.float64).reshape(-1, dim))


def load_trace_hdf5(filepath: str) -> Tuple[Dict[str, Dict[str, CaseData]], Hdf5Meta]:
    """Load trace HDF5 and reconstruct mirrors, rays and hits."""

    scenarios: Dict[str, Dict[str, CaseData]] = {}
    with h5py.File(filepath, "r") as h5:
        meta = Hdf5Meta(
            created_at=str(h5["meta"].attrs.get("created_at", "")),
            dim=int(h5["meta"].attrs.get("dim", DIM)),
        )
        for scenario_id, g_scenario in h5["scenarios"].items():
            scenarios[scenario_id] = {}
            for case_id, g_case in g_scenario["cases"].items():
                params = _read_json(g_case["params_json"])
                mirror = mirror_from_serialized(_read_json(g_case["mirror_json"]))

                origin = np.asarray(g_case["rays"]["origin"][()], dtype=np.float64)
                direction = np.asarray(g_case["rays"]["direction"][()], dtype=np.float64)
                rays = [Ray(o, d) for o, d in zip(origin, direction)]

                g_hits = g_case["hits"]
                ray_index = np.asarray(g_hits["ray_index"][()], dtype=np.int64)
                distance = np.asarray(g_hits["distance"][()], dtype=np.float64)
                point = np.asarray(g_hits["point"][()], dtype=np.float64)
                transform = np.asarray(g_hits["transform"][()], dtype=np.float64)
                outgoing = np.asarray(g_hits["outgoing"][()], dtype=np.float64)
                hits = [
                    Hit(
                        ray_index=int(ray_index[i]),
                        distance=float(distance[i]),
                        point=point[i],
                        transform=transform[i],
                        outgoing=outgoing[i],
                    )
                    for i in range(len(ray_index))
                ]
                scenarios[scenario_id][case_id] = CaseData(params=params, mirror=mirror, rays=rays, hits=hits)

    return scenarios, meta


def self_test_roundtrip(filepath: str, atol: float = 1e-12) -> bool:
    """Write->read equivalence self-test on a small quadratic mirror."""

    from optics_core.bezier_mirror import BezierMirror
    from optics_core.geometry import pad_to_dim
    from optics_core.tracer import trace_rays

    mirror = BezierMirror([pad_to_dim([0.0, 0.0]), pad_to_dim([0.5, 1.0]), pad_to_dim([1.0, 0.0])], surface_id="selftest")
    rays = [Ray(pad_to_dim([x, 2.0]), pad_to_dim([0.0, -1.0])) for x in (0.2, 0.5, 0.8)]
    hits = trace_rays(mirror, rays)
    payload = {"selftest": {"case0": CaseData(params={"seed": 7}, mirror=mirror, rays=rays, hits=hits)}}
    save_trace_hdf5(filepath, payload)
    scenarios, _ = load_trace_hdf5(filepath)
    case = scenarios["selftest"]["case0"]

    if case.mirror != mirror or len(case.hits) != len(hits):
        return False
    d1 = np.array([h.distance for h in hits])
    d2 = np.array([h.distance for h in case.hits])
    r1 = np.array([h.transform for h in hits])
    r2 = np.array([h.transform for h in case.hits])
    return bool(np.allclose(d1, d2, atol=atol) and np.allclose(r1, r2, atol=atol))
