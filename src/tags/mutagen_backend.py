"""Tag backend built on mutagen's easy interfaces."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import mutagen
from mutagen import MutagenError
from mutagen.easyid3 import EasyID3
from mutagen.easymp4 import EasyMP4Tags
from mutagen.id3 import ID3
from mutagen.mp4 import MP4Tags

from tags.base import MalformedTagError, RawTags, TagKind

logger = logging.getLogger(__name__)


def _detect_kind(tags: Any) -> TagKind:
    if isinstance(tags, (EasyID3, ID3)):
        return TagKind.ID3
    if isinstance(tags, (EasyMP4Tags, MP4Tags)):
        return TagKind.MP4
    return TagKind.OTHER


def _first(tags: Any, key: str) -> str | None:
    try:
        values = tags[key]
    except (KeyError, ValueError):
        return None
    if isinstance(values, (list, tuple)):
        if not values:
            return None
        values = values[0]
    text = str(values).strip()
    return text or None


class MutagenBackend:
    """Read title/artist/album/track through ``mutagen.File(..., easy=True)``."""

    def read(self, path: Path) -> RawTags:
        try:
            audio = mutagen.File(str(path), easy=True)
        except MutagenError as exc:
            origin = exc.__cause__ or exc.__context__
            if isinstance(origin, OSError):
                raise
            raise MalformedTagError(str(exc) or type(exc).__name__) from exc

        if audio is None:
            raise MalformedTagError("unrecognised file format")
        tags = audio.tags
        if tags is None:
            raise MalformedTagError("file carries no tags")

        kind = _detect_kind(tags)
        logger.debug("Read %s tags from %s", kind.value, path)
        return RawTags(
            kind=kind,
            title=_first(tags, "title"),
            artist=_first(tags, "artist"),
            album=_first(tags, "album"),
            track=_first(tags, "tracknumber"),
        )


__all__ = ["MutagenBackend"]
