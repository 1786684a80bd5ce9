"""Normalise backend results into read outcomes."""

from __future__ import annotations

import logging
from pathlib import Path

from tags.base import (
    ELIGIBLE_KINDS,
    ITagBackend,
    MalformedTagError,
    ReadFailure,
    ReadOutcome,
    TagFailure,
    TagOk,
)
from tags.mutagen_backend import MutagenBackend

logger = logging.getLogger(__name__)


def describe_error(exc: BaseException) -> str:
    message = str(exc)
    name = type(exc).__name__
    return f"{name}: {message}" if message else name


class TagReader:
    """Wrap an :class:`ITagBackend` and fold its failures into two variants.

    ``MalformedTagError`` and ineligible tag kinds become :class:`TagFailure`;
    anything else raised by the backend becomes :class:`ReadFailure`.
    """

    def __init__(self, backend: ITagBackend | None = None) -> None:
        self._backend = backend or MutagenBackend()

    def read(self, path: str | Path) -> ReadOutcome:
        candidate = Path(path)
        try:
            raw = self._backend.read(candidate)
        except MalformedTagError as exc:
            logger.debug("Malformed tags in %s: %s", candidate, exc)
            return TagFailure(path=str(candidate), detail=describe_error(exc))
        except Exception as exc:
            logger.debug("Failed to read %s", candidate, exc_info=True)
            return ReadFailure(path=str(candidate), detail=describe_error(exc))

        if raw.kind not in ELIGIBLE_KINDS:
            return TagFailure(path=str(candidate), detail=f"unsupported tag type {raw.kind.value}")
        return TagOk(tags=raw)


__all__ = ["TagReader", "describe_error"]
