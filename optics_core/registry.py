"""Mirror kind registry used when loading serialized mirrors."""

from __future__ import annotations

from typing import Any, Dict, Mapping, Type

from optics_core.bezier_mirror import BezierMirror
from optics_core.errors import MalformedInput
from optics_core.mirror import Mirror

MIRROR_KINDS: Dict[str, Type[Mirror]] = {
    BezierMirror.KIND: BezierMirror,
}

DEFAULT_KIND = BezierMirror.KIND


def mirror_from_serialized(data: Any) -> Mirror:
    """Construct the mirror named by ``data["kind"]`` (default: bezier)."""

    if not isinstance(data, Mapping):
        raise MalformedInput(f"mirror description must be an object, got {type(data).__name__}")
    kind = data.get("kind", DEFAULT_KIND)
    try:
        cls = MIRROR_KINDS[kind]
    except (KeyError, TypeError):
        raise MalformedInput(f"Unsupported mirror kind: {kind!r}") from None
    return cls.from_serialized(data)
