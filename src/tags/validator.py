"""Completeness check applied to cached tag payloads."""

from __future__ import annotations

from typing import Any, Mapping

from tags.base import TagData

REQUIRED_FIELDS = ("name", "album", "artist", "clipped_path")


def is_tag_valid(tag_data: TagData | Mapping[str, Any] | None) -> bool:
    """Return ``True`` when every required field is present and non-blank.

    ``track`` is not required.
    """
    if tag_data is None:
        return False
    if isinstance(tag_data, TagData):
        tag_data = tag_data.to_mapping()
    for field in REQUIRED_FIELDS:
        value = tag_data.get(field)
        if value is None or not str(value).strip():
            return False
    return True


__all__ = ["REQUIRED_FIELDS", "is_tag_valid"]
