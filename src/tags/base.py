"""Tag reading abstractions used across mystream-indexer."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Mapping, Protocol, Union, runtime_checkable


class TagKind(str, Enum):
    """Container families recognised by the tag backend."""

    ID3 = "ID3"
    MP4 = "MP4"
    OTHER = "OTHER"


ELIGIBLE_KINDS = frozenset({TagKind.ID3, TagKind.MP4})


@dataclass(frozen=True)
class RawTags:
    """Tag fields as returned by a backend, before any indexing decisions."""

    kind: TagKind
    title: str | None = None
    artist: str | None = None
    album: str | None = None
    track: str | None = None


@dataclass(frozen=True)
class TagData:
    """Cached tag payload for one file."""

    name: str | None
    album: str | None
    track: str | None
    artist: str | None
    clipped_path: str

    def to_mapping(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "TagData":
        def _opt(key: str) -> str | None:
            value = data.get(key)
            return None if value is None else str(value)

        return cls(
            name=_opt("name"),
            album=_opt("album"),
            track=_opt("track"),
            artist=_opt("artist"),
            clipped_path=str(data.get("clipped_path") or ""),
        )


class MalformedTagError(Exception):
    """Raised by backends when a file's tag structure is rejected."""


@dataclass(frozen=True)
class TagOk:
    tags: RawTags


@dataclass(frozen=True)
class MissingFile:
    path: str


@dataclass(frozen=True)
class TagFailure:
    """The tag structure was malformed, absent or of an unsupported kind."""

    path: str
    detail: str


@dataclass(frozen=True)
class ReadFailure:
    """Any other I/O or library error while reading the file."""

    path: str
    detail: str


ReadOutcome = Union[TagOk, MissingFile, TagFailure, ReadFailure]


@runtime_checkable
class ITagBackend(Protocol):
    """Interface all tag extraction backends must satisfy."""

    def read(self, path: Path) -> RawTags:
        """Return the tags of ``path`` or raise :class:`MalformedTagError`/``OSError``."""


__all__ = [
    "ELIGIBLE_KINDS",
    "ITagBackend",
    "MalformedTagError",
    "MissingFile",
    "RawTags",
    "ReadFailure",
    "ReadOutcome",
    "TagData",
    "TagFailure",
    "TagKind",
    "TagOk",
]
