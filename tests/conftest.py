"""Shared pytest fixtures."""

from __future__ import annotations

import os

os.environ.setdefault("MSI_HEADLESS", "1")

from pathlib import Path  # noqa: E402
from typing import Callable  # noqa: E402

import pytest  # noqa: E402

from core.pipeline import ErrorLog, IndexingPipeline  # noqa: E402
from db.cache import CacheStore  # noqa: E402
from index.writer import IndexWriter  # noqa: E402
from tags.base import MalformedTagError, RawTags, TagKind  # noqa: E402
from tags.reader import TagReader  # noqa: E402


class FakeBackend:
    """Tag backend answering from a dict and recording every read."""

    def __init__(self) -> None:
        self.results: dict[str, RawTags | BaseException] = {}
        self.calls: list[str] = []

    def set(self, path: Path | str, result: RawTags | BaseException) -> None:
        self.results[str(path)] = result

    def read(self, path: Path) -> RawTags:
        key = str(path)
        self.calls.append(key)
        result = self.results.get(key)
        if result is None:
            raise MalformedTagError("no fake tags registered")
        if isinstance(result, BaseException):
            raise result
        return result


class FakeWatcher:
    """In-memory stand-in for :class:`core.watcher.MediaWatcher`."""

    def __init__(self, root: Path) -> None:
        self.watch_path = root
        self.files: dict[str, str] = {}
        self.dirty = False
        self.removed: list[str] = []

    def track(self, path: Path) -> None:
        self.files[str(path)] = "created"
        self.dirty = True

    def remove(self, path: str) -> None:
        self.removed.append(path)
        self.files.pop(path, None)


@pytest.fixture()
def id3() -> Callable[..., RawTags]:
    def factory(title: str | None = "Song", artist: str | None = "Band", album: str | None = "Record") -> RawTags:
        return RawTags(kind=TagKind.ID3, title=title, artist=artist, album=album, track="1")

    return factory


@pytest.fixture()
def media_root(tmp_path: Path) -> Path:
    root = tmp_path / "music"
    root.mkdir()
    return root


@pytest.fixture()
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture()
def watcher(media_root: Path) -> FakeWatcher:
    return FakeWatcher(media_root)


@pytest.fixture()
def store(tmp_path: Path):
    cache = CacheStore(tmp_path / "data" / "cache.db")
    cache.load()
    yield cache
    cache.close()


@pytest.fixture()
def error_log(tmp_path: Path) -> ErrorLog:
    return ErrorLog(tmp_path / "data" / "index-errors.log")


@pytest.fixture()
def writer(media_root: Path) -> IndexWriter:
    return IndexWriter(media_root / ".mystream")


@pytest.fixture()
def make_pipeline(
    watcher: FakeWatcher,
    store: CacheStore,
    writer: IndexWriter,
    error_log: ErrorLog,
    backend: FakeBackend,
) -> Callable[..., IndexingPipeline]:
    def factory(**kwargs) -> IndexingPipeline:
        params = dict(
            watcher=watcher,
            store=store,
            writer=writer,
            error_log=error_log,
            reader=TagReader(backend),
        )
        params.update(kwargs)
        return IndexingPipeline(**params)

    return factory


@pytest.fixture()
def add_media(media_root: Path, watcher: FakeWatcher, backend: FakeBackend) -> Callable[..., Path]:
    def factory(relative: str, tags: RawTags | BaseException | None = None) -> Path:
        path = media_root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"\x00" * 16)
        if tags is not None:
            backend.set(path, tags)
        watcher.track(path)
        return path

    return factory
