"""Serialise the index artifact and its status marker."""

from __future__ import annotations

import json
import logging
import re
import time
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from utils.fs import write_text_atomic

logger = logging.getLogger(__name__)

ROOT_ELEMENT = "items"
ITEM_ELEMENT = "item"

# characters XML 1.0 cannot carry, even escaped
_XML_ILLEGAL = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")


@dataclass(frozen=True)
class IndexEntry:
    album: str
    artist: str
    name: str
    path: str


@dataclass(frozen=True)
class IndexDocument:
    entries: Sequence[IndexEntry]
    date: int


def now_millis() -> int:
    return int(time.time() * 1000)


def xml_safe(text: str) -> str:
    """Drop characters that would make the artifact unparseable."""
    return _XML_ILLEGAL.sub("", text)


def render_index(document: IndexDocument) -> str:
    """Return the XML text for ``document``.

    Attribute names and nesting are consumed remotely and must stay stable.
    Tag text is passed through :func:`xml_safe` so one badly tagged file
    cannot break the whole document.
    """
    root = ET.Element(ROOT_ELEMENT, {"date": str(document.date)})
    for entry in document.entries:
        ET.SubElement(
            root,
            ITEM_ELEMENT,
            {
                "album": xml_safe(entry.album),
                "artist": xml_safe(entry.artist),
                "name": xml_safe(entry.name),
                "path": xml_safe(entry.path),
            },
        )
    body = ET.tostring(root, encoding="unicode")
    return f'<?xml version="1.0" encoding="UTF-8"?>\n{body}\n'


def render_status(date: int) -> str:
    return json.dumps({"date": date})


class IndexWriter:
    """Write ``index.xml`` and ``status.json`` into an output directory."""

    def __init__(
        self,
        output_dir: str | Path,
        *,
        index_filename: str = "index.xml",
        status_filename: str = "status.json",
    ) -> None:
        self._output_dir = Path(output_dir)
        self._index_filename = index_filename
        self._status_filename = status_filename

    @property
    def index_path(self) -> Path:
        return self._output_dir / self._index_filename

    @property
    def status_path(self) -> Path:
        return self._output_dir / self._status_filename

    def write(self, document: IndexDocument) -> None:
        """Write the artifact, then the status marker carrying the same date."""

        write_text_atomic(self.index_path, render_index(document))
        write_text_atomic(self.status_path, render_status(document.date))
        logger.info(
            "Wrote index with %d entr%s to %s",
            len(document.entries),
            "y" if len(document.entries) == 1 else "ies",
            self.index_path,
        )

    def wipe(self) -> list[Path]:
        """Delete the artifact and status marker, returning what was removed."""

        removed: list[Path] = []
        for candidate in (self.index_path, self.status_path):
            if candidate.exists():
                candidate.unlink()
                removed.append(candidate)
        return removed


__all__ = [
    "IndexDocument",
    "IndexEntry",
    "IndexWriter",
    "now_millis",
    "render_index",
    "render_status",
    "xml_safe",
]
