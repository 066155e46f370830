"""JSON files holding a single serialized mirror.

Example:
    >>> from optics_core.bezier_mirror import BezierMirror
    >>> from optics_core.geometry import pad_to_dim
    >>> m = BezierMirror([pad_to_dim([0.0, 0.0]), pad_to_dim([1.0, 1.0])])
    >>> save_mirror_json("/tmp/mirror_example.json", m)
    >>> load_mirror_json("/tmp/mirror_example.json") == m
    True
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Union

from optics_core.errors import MalformedInput
from optics_core.mirror import Mirror
from optics_core.registry import mirror_from_serialized

PathLike = Union[str, Path]


def load_mirror_json(filepath: PathLike) -> Mirror:
    """Read a mirror description; unreadable files raise OSError as usual."""

    text = Path(filepath).read_text(encoding="utf-8")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedInput(f"{filepath}: invalid JSON ({exc})") from exc
    return mirror_from_serialized(data)


def save_mirror_json(filepath: PathLike, mirror: Mirror) -> None:
    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(mirror.to_serialized(), indent=2), encoding="utf-8")
