from __future__ import annotations

import os
from pathlib import Path

from core.pipeline import ErrorLog


def test_write_appends_subject_and_description(tmp_path: Path) -> None:
    log = ErrorLog(tmp_path / "logs" / "errors.log")

    log.write("/music/a.mp3", "tag read fail")
    log.write("/music/b.mp3", "has no tag data")

    assert log.read_lines() == ["/music/a.mp3 : tag read fail", "/music/b.mp3 : has no tag data"]


def test_reset_truncates_previous_run(tmp_path: Path) -> None:
    log = ErrorLog(tmp_path / "errors.log")
    log.write("old", "entry")

    log.reset()

    assert log.path.exists()
    assert log.read_lines() == []


def test_read_lines_without_file_is_empty(tmp_path: Path) -> None:
    assert ErrorLog(tmp_path / "never-written.log").read_lines() == []


def test_unwritable_target_is_logged_not_raised(tmp_path: Path, caplog) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("file, not a directory", encoding="utf-8")
    log = ErrorLog(blocker / "errors.log")

    log.reset()
    log.write("subject", "description")

    assert "Could not" in caplog.text


def test_lines_end_with_single_newline(tmp_path: Path) -> None:
    log = ErrorLog(tmp_path / "errors.log")

    log.write("/music/a.mp3", "tag read fail")
    log.write("/music/b.mp3", "has no tag data")

    raw = log.path.read_bytes()
    assert b"\r\r" not in raw
    assert raw.count(b"\n") == 2
    assert raw.endswith(b"has no tag data" + os.linesep.encode())
