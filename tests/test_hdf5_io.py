import os
import tempfile

import numpy as np

from optics_core.bezier_mirror import BezierMirror
from optics_core.geometry import DIM, pad_to_dim
from optics_core.rays import Ray
from optics_core.tracer import trace_rays
from optics_io.hdf5_io import CaseData, load_trace_hdf5, save_trace_hdf5, self_test_roundtrip


def _case():
    mirror = BezierMirror([pad_to_dim([0.0, 0.0]), pad_to_dim([0.5, 1.0]), pad_to_dim([1.0, 0.0])], surface_id="arc")
    rays = [
        Ray(pad_to_dim([-1.0, 0.25]), pad_to_dim([1.0, 0.0])),
        Ray(pad_to_dim([-1.0, 3.0]), pad_to_dim([1.0, 0.0])),
    ]
    return CaseData(params={"height": 1.0, "n_rays": np.int64(2)}, mirror=mirror, rays=rays, hits=trace_rays(mirror, rays))


def test_hdf5_schema_roundtrip():
    case = _case()
    payload = {"M2": {"case_0": case}}
    with tempfile.TemporaryDirectory() as td:
        fp = os.path.join(td, "trace.h5")
        save_trace_hdf5(fp, payload)
        loaded, meta = load_trace_hdf5(fp)

    assert meta.dim == DIM
    assert meta.created_at
    got = loaded["M2"]["case_0"]
    assert got.params == {"height": 1.0, "n_rays": 2}
    assert got.mirror == case.mirror
    assert len(got.rays) == 2
    assert [h.ray_index for h in got.hits] == [0, 0]
    assert np.allclose([h.distance for h in got.hits], [h.distance for h in case.hits])
    assert got.hits[0].transform.shape == (DIM, DIM)
    assert np.allclose(got.hits[1].outgoing, case.hits[1].outgoing)


def test_case_without_hits_roundtrips():
    case = _case()
    empty = CaseData(params={}, mirror=case.mirror, rays=case.rays[1:], hits=[])
    with tempfile.TemporaryDirectory() as td:
        fp = os.path.join(td, "empty.h5")
        save_trace_hdf5(fp, {"S": {"c": empty}})
        loaded, _ = load_trace_hdf5(fp)
    assert loaded["S"]["c"].hits == []
    assert len(loaded["S"]["c"].rays) == 1


def test_self_test_roundtrip_function():
    with tempfile.TemporaryDirectory() as td:
        fp = os.path.join(td, "selftest.h5")
        assert self_test_roundtrip(fp)
