from __future__ import annotations

from hypothesis import given
from hypothesis import strategies as st

from tags.base import TagData
from tags.validator import REQUIRED_FIELDS, is_tag_valid

_text = st.text(min_size=1).filter(lambda value: value.strip())
_blank = st.sampled_from([None, "", "   ", "\t"])


def _complete(**overrides) -> TagData:
    values = dict(name="Song", album="Record", track=None, artist="Band", clipped_path="/song.mp3")
    values.update(overrides)
    return TagData(**values)


def test_none_is_invalid() -> None:
    assert is_tag_valid(None) is False


def test_track_is_optional() -> None:
    assert is_tag_valid(_complete(track=None)) is True


@given(name=_text, album=_text, artist=_text, path=_text)
def test_any_non_blank_fields_are_valid(name: str, album: str, artist: str, path: str) -> None:
    assert is_tag_valid(_complete(name=name, album=album, artist=artist, clipped_path=path))


@given(field=st.sampled_from(REQUIRED_FIELDS), blank=_blank)
def test_any_blank_required_field_is_invalid(field: str, blank) -> None:
    payload = _complete().to_mapping()
    payload[field] = blank

    assert is_tag_valid(payload) is False
