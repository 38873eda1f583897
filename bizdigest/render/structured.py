"""Lossless structured rendering of a digest."""

from __future__ import annotations

from typing import Any

from bizdigest.core.types import Digest


def digest_to_dict(digest: Digest) -> dict[str, Any]:
    """JSON-compatible dict of every digest field."""
    return digest.model_dump(mode="json")


def render_json(digest: Digest, indent: int | None = 2) -> str:
    """Serialize *digest*; ``Digest.model_validate_json`` restores an equal value."""
    return digest.model_dump_json(indent=indent)
