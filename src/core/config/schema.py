"""Pydantic schemas for indexer configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator, model_validator

DEFAULT_ALLOW_EXTS = {
    ".mp3",
    ".m4a",
    ".mp4",
    ".m4b",
    ".aac",
}
DEFAULT_TICK_INTERVAL_MS = 1000
MIN_TICK_INTERVAL_MS = 100


def _normalise_path(value: str | Path) -> str:
    return str(Path(value).expanduser())


def _normalise_ext(value: str) -> str:
    ext = value.strip().lower()
    if not ext:
        return ""
    if not ext.startswith("."):
        ext = f".{ext}"
    return ext


def _default_allow_exts() -> set[str]:
    return set(DEFAULT_ALLOW_EXTS)


def _as_sequence(value: Any, field: str) -> list[Any]:
    if isinstance(value, (str, Path)):
        return [value]
    if isinstance(value, (list, tuple, set, frozenset)):
        return list(value)
    raise ValueError(f"{field} must be a list")


class IndexerSettings(BaseModel):
    """Validated configuration used to run the indexing pipeline."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    watch_root: str | None = None
    excluded: list[str] = Field(default_factory=list)
    allow_exts: set[str] = Field(default_factory=_default_allow_exts)
    tick_interval_ms: int = DEFAULT_TICK_INTERVAL_MS
    output_dirname: str = ".mystream"
    index_filename: str = "index.xml"
    status_filename: str = "status.json"

    @model_validator(mode="before")
    @classmethod
    def _prepare_data(cls, data: Any) -> Any:
        if isinstance(data, Mapping):
            prepared = dict(data)
            if "watch_root" not in prepared and "root" in prepared:
                prepared["watch_root"] = prepared["root"]
            return prepared
        return data

    @field_validator("watch_root", mode="before")
    @classmethod
    def _normalise_watch_root(cls, value: Any) -> str | None:
        if value in (None, ""):
            return None
        return _normalise_path(str(value))

    @field_validator("excluded", mode="before")
    @classmethod
    def _normalise_excluded(cls, value: Any) -> list[str]:
        if not value:
            return []
        value = _as_sequence(value, "excluded")
        return [_normalise_path(str(item)) for item in value if item]

    @field_validator("allow_exts", mode="before")
    @classmethod
    def _normalise_allow_exts(cls, value: Any) -> set[str]:
        if not value:
            return _default_allow_exts()
        value = _as_sequence(value, "allow_exts")
        normalised: set[str] = set()
        for item in value:
            ext = _normalise_ext(str(item))
            if ext:
                normalised.add(ext)
        return normalised or _default_allow_exts()

    @field_validator("tick_interval_ms", mode="before")
    @classmethod
    def _coerce_tick_interval(cls, value: Any) -> int:
        try:
            interval = int(value)
        except (TypeError, ValueError):
            return DEFAULT_TICK_INTERVAL_MS
        return max(MIN_TICK_INTERVAL_MS, interval)

    @field_validator("output_dirname", "index_filename", "status_filename", mode="before")
    @classmethod
    def _require_name(cls, value: Any, info: ValidationInfo) -> str:
        text = str(value or "").strip()
        if not text:
            return cls.model_fields[info.field_name].default
        return text

    def output_dir(self) -> Path | None:
        """Return the directory holding the index artifact and status marker."""

        if self.watch_root is None:
            return None
        return Path(self.watch_root) / self.output_dirname

    def to_mapping(self) -> dict[str, Any]:
        """Return a serialisable representation of the configuration."""

        payload = self.model_dump()
        payload["excluded"] = [str(Path(path)) for path in self.excluded]
        payload["allow_exts"] = sorted(self.allow_exts)
        return payload

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> "IndexerSettings":
        if not isinstance(data, Mapping):
            data = {}
        return cls.model_validate(data)


__all__ = [
    "DEFAULT_ALLOW_EXTS",
    "DEFAULT_TICK_INTERVAL_MS",
    "IndexerSettings",
]
