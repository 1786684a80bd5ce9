from __future__ import annotations

from pathlib import Path

import pytest

from tags.base import ITagBackend, MalformedTagError, RawTags, ReadFailure, TagFailure, TagKind, TagOk
from tags.reader import TagReader, describe_error


class _StaticBackend:
    def __init__(self, result) -> None:
        self.result = result

    def read(self, path: Path) -> RawTags:
        if isinstance(self.result, BaseException):
            raise self.result
        return self.result


def test_static_backend_satisfies_protocol() -> None:
    assert isinstance(_StaticBackend(None), ITagBackend)


@pytest.mark.parametrize("kind", [TagKind.ID3, TagKind.MP4])
def test_eligible_kinds_are_ok(kind: TagKind) -> None:
    raw = RawTags(kind=kind, title="t", artist="a", album="b")

    outcome = TagReader(_StaticBackend(raw)).read("/m/x.mp3")

    assert outcome == TagOk(tags=raw)


def test_other_kind_is_tag_failure() -> None:
    outcome = TagReader(_StaticBackend(RawTags(kind=TagKind.OTHER))).read("/m/x.ogg")

    assert isinstance(outcome, TagFailure)
    assert outcome.detail == "unsupported tag type OTHER"
    assert outcome.path == str(Path("/m/x.ogg"))


def test_malformed_tags_are_tag_failure() -> None:
    outcome = TagReader(_StaticBackend(MalformedTagError("bad header"))).read("/m/x.mp3")

    assert outcome == TagFailure(path=str(Path("/m/x.mp3")), detail="MalformedTagError: bad header")


@pytest.mark.parametrize("exc", [PermissionError("denied"), OSError("io"), ValueError("weird")])
def test_other_errors_are_read_failure(exc: Exception) -> None:
    outcome = TagReader(_StaticBackend(exc)).read("/m/x.mp3")

    assert isinstance(outcome, ReadFailure)
    assert outcome.detail.startswith(type(exc).__name__)


def test_describe_error_without_message() -> None:
    assert describe_error(KeyError()) == "KeyError"
    assert describe_error(RuntimeError("boom")) == "RuntimeError: boom"
