from __future__ import annotations

import json
import xml.etree.ElementTree as ET
from pathlib import Path

from index.writer import IndexDocument, IndexEntry, IndexWriter, render_index, xml_safe


def _entry(name: str, path: str) -> IndexEntry:
    return IndexEntry(album="Album & Co", artist='The "Quoted"', name=name, path=path)


def test_render_index_has_declaration_and_stable_attributes() -> None:
    text = render_index(IndexDocument(entries=[_entry("One <1>", "/a/one.mp3")], date=1234))

    assert text.startswith('<?xml version="1.0" encoding="UTF-8"?>')
    root = ET.fromstring(text.split("\n", 1)[1])
    assert root.tag == "items"
    assert root.attrib == {"date": "1234"}
    (item,) = list(root)
    assert item.tag == "item"
    assert item.attrib == {
        "album": "Album & Co",
        "artist": 'The "Quoted"',
        "name": "One <1>",
        "path": "/a/one.mp3",
    }


def test_write_creates_index_and_matching_status(tmp_path: Path) -> None:
    writer = IndexWriter(tmp_path / ".mystream")
    document = IndexDocument(entries=[_entry("One", "/one.mp3"), _entry("Two", "/two.mp3")], date=1700000000123)

    writer.write(document)

    root = ET.parse(writer.index_path).getroot()
    assert [item.attrib["name"] for item in root] == ["One", "Two"]
    status = json.loads(writer.status_path.read_text(encoding="utf-8"))
    assert status == {"date": 1700000000123}
    assert int(root.attrib["date"]) == status["date"]


def test_write_replaces_previous_artifact(tmp_path: Path) -> None:
    writer = IndexWriter(tmp_path)
    writer.write(IndexDocument(entries=[_entry("Old", "/old.mp3")], date=1))

    writer.write(IndexDocument(entries=[], date=2))

    root = ET.parse(writer.index_path).getroot()
    assert list(root) == []
    assert root.attrib["date"] == "2"
    assert sorted(p.name for p in tmp_path.iterdir()) == ["index.xml", "status.json"]


def test_custom_filenames(tmp_path: Path) -> None:
    writer = IndexWriter(tmp_path, index_filename="library.xml", status_filename="state.json")

    assert writer.index_path == tmp_path / "library.xml"
    assert writer.status_path == tmp_path / "state.json"


def test_wipe_removes_only_existing_artifacts(tmp_path: Path) -> None:
    writer = IndexWriter(tmp_path)
    assert writer.wipe() == []

    writer.write(IndexDocument(entries=[], date=5))
    removed = writer.wipe()

    assert removed == [writer.index_path, writer.status_path]
    assert not writer.index_path.exists()
    assert not writer.status_path.exists()


def test_illegal_xml_characters_are_stripped(tmp_path: Path) -> None:
    writer = IndexWriter(tmp_path)
    entry = IndexEntry(album="A\x1fB", artist="C\x08D", name="Plain\x01Name", path="/x\x0c.mp3")

    writer.write(IndexDocument(entries=[entry], date=9))

    (item,) = list(ET.parse(writer.index_path).getroot())
    assert item.attrib == {"album": "AB", "artist": "CD", "name": "PlainName", "path": "/x.mp3"}


def test_xml_safe_keeps_ordinary_text() -> None:
    assert xml_safe("Björk – Jóga \n") == "Björk – Jóga \n"
    assert xml_safe("\ufffebad\uffff") == "bad"
