"""Run the mirror scenario sweep and store a markdown report.

Usage:
    python -m scripts.run_validation --out artifacts/validation_report.md --h5 artifacts/trace_sweep.h5
"""

from __future__ import annotations

import argparse
import sys

from scenarios.runner import run_all


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Run mirror scenario sweep validation report.")
    parser.add_argument("--out", default="artifacts/validation_report.md", help="Output markdown report path")
    parser.add_argument("--h5", default="artifacts/trace_sweep.h5", help="Output HDF5 trace archive")
    args = parser.parse_args(argv)

    out_path = run_all(out_h5=args.h5, out_report=args.out)
    print(out_path)
    with open(out_path, encoding="utf-8") as fh:
        return 1 if "- FAIL:" in fh.read() else 0


if __name__ == "__main__":
    sys.exit(main())
