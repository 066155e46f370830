"""Scenario sweep runner + validation report."""

from __future__ import annotations

from importlib import import_module
from pathlib import Path
from typing import Dict, List

import numpy as np

from optics_core.tracer import Hit, hits_per_ray, trace_rays
from optics_io.hdf5_io import CaseData, save_trace_hdf5

SCENARIO_MODULES = {
    "M1": "scenarios.M1_segment",
    "M2": "scenarios.M2_arc",
    "M3": "scenarios.M3_s_curve",
}


def transform_errors(hits: List[Hit]) -> Dict[str, float]:
    """Worst deviation from orthogonality (R R^T = I) and involution (R R = I)."""

    if not hits:
        return {"orthogonality": 0.0, "involution": 0.0}
    r = np.array([h.transform for h in hits])
    eye = np.eye(r.shape[-1])
    ortho = np.max(np.abs(np.einsum("nij,nkj->nik", r, r) - eye))
    invol = np.max(np.abs(np.einsum("nij,njk->nik", r, r) - eye))
    return {"orthogonality": float(ortho), "involution": float(invol)}


def ordered_by_distance(hits: List[Hit]) -> bool:
    by_ray: Dict[int, List[float]] = {}
    for h in hits:
        by_ray.setdefault(h.ray_index, []).append(h.distance)
    return all(all(a <= b for a, b in zip(d, d[1:])) for d in by_ray.values())


def run_all(out_h5: str = "artifacts/trace_sweep.h5", out_report: str = "artifacts/report.md", atol: float = 1e-9) -> str:
    payload: Dict[str, Dict[str, CaseData]] = {}
    report_lines: List[str] = [
        "# Validation Report",
        "",
        "- transform check: `max|R R^T - I|` and `max|R R - I|` over all hits",
        "- hit check: per-ray hit count against the scenario expectation",
        "",
    ]
    failures: List[str] = []

    for sid, mod_name in SCENARIO_MODULES.items():
        mod = import_module(mod_name)
        payload[sid] = {}
        report_lines.append(f"## {sid}")
        for p in mod.build_sweep_params():
            mirror, rays = mod.run_case(p)
            hits = trace_rays(mirror, rays)
            case_id = p["case_id"]
            payload[sid][case_id] = CaseData(params=p, mirror=mirror, rays=rays, hits=hits)

            counts = hits_per_ray(hits, len(rays))
            errs = transform_errors(hits)
            report_lines.append(
                f"- case `{case_id}`: kind={mirror.kind_name()}, rays={len(rays)}, hits={len(hits)}, per_ray={counts}"
            )
            report_lines.append(
                f"  - transform error: orthogonality={errs['orthogonality']:.3e}, involution={errs['involution']:.3e}"
            )
            if hits:
                nearest = min(hits, key=lambda h: h.distance)
                report_lines.append(f"  - nearest hit: ray={nearest.ray_index}, distance={nearest.distance:.6f}")

            if errs["orthogonality"] > atol or errs["involution"] > atol:
                failures.append(f"{sid}:{case_id} reflection transform not orthogonal/involutive")
            if not ordered_by_distance(hits):
                failures.append(f"{sid}:{case_id} hits not ordered by distance")
            if hasattr(mod, "expected_hits"):
                expected = list(mod.expected_hits(p))
                if counts != expected:
                    failures.append(f"{sid}:{case_id} per-ray hits {counts}, expected {expected}")

        report_lines.append("")

    Path(out_h5).parent.mkdir(parents=True, exist_ok=True)
    save_trace_hdf5(out_h5, payload)

    report_lines.append("## Failure Checks")
    if failures:
        for msg in failures:
            report_lines.append(f"- FAIL: {msg}")
    else:
        report_lines.append("- PASS: No automatic failure checks triggered.")

    report_path = Path(out_report)
    report_path.parent.mkdir(parents=True, exist_ok=True)
    report_path.write_text("\n".join(report_lines), encoding="utf-8")
    return str(report_path)


if __name__ == "__main__":
    print(run_all())
