from __future__ import annotations

import logging
from pathlib import Path

import pytest

from app import main as app_main
from core.config import AppPaths, IndexerSettings
from utils.paths import set_app_paths


@pytest.fixture()
def app_paths(tmp_path: Path):
    paths = AppPaths(env={"MSI_DATA_DIR": str(tmp_path / "data")})
    set_app_paths(paths)
    yield paths
    set_app_paths(AppPaths())
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()


@pytest.fixture()
def no_config(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(app_main, "load_settings", lambda: IndexerSettings())


def test_setup_logging_writes_app_log(app_paths: AppPaths) -> None:
    app_main.setup_logging()
    logging.getLogger("app.test").warning("hello from test")

    for handler in logging.getLogger().handlers:
        handler.flush()
    log_file = app_paths.log_dir() / "app.log"
    assert "hello from test" in log_file.read_text(encoding="utf-8")


def test_log_level_from_environment(monkeypatch: pytest.MonkeyPatch, app_paths: AppPaths) -> None:
    monkeypatch.setenv("MSI_LOG_LEVEL", "debug")
    app_main.setup_logging()

    assert logging.getLogger().level == logging.DEBUG


def test_unknown_log_level_falls_back_to_info() -> None:
    assert app_main._resolve_log_level("chatty") == logging.INFO
    assert app_main._resolve_log_level(None) == logging.INFO


def test_main_without_root_fails(app_paths: AppPaths, no_config) -> None:
    assert app_main.main([]) == 2


def test_main_once_on_empty_root_succeeds(app_paths: AppPaths, no_config, tmp_path: Path) -> None:
    root = tmp_path / "music"
    root.mkdir()

    assert app_main.main(["--root", str(root), "--once"]) == 0
    assert app_paths.cache_db_path().exists()


def test_main_once_reports_unreadable_files(app_paths: AppPaths, no_config, tmp_path: Path) -> None:
    root = tmp_path / "music"
    root.mkdir()
    (root / "noise.mp3").write_bytes(b"")

    assert app_main.main(["--root", str(root), "--once"]) == 1
    errors = app_paths.error_log_path().read_text(encoding="utf-8")
    assert "noise.mp3" in errors


def test_main_list_and_wipe(app_paths: AppPaths, no_config, tmp_path: Path, capsys) -> None:
    root = tmp_path / "music"
    root.mkdir()
    (root / "noise.mp3").write_bytes(b"")
    app_main.main(["--root", str(root), "--once"])
    capsys.readouterr()

    assert app_main.main(["--root", str(root), "--list"]) == 0
    listed = capsys.readouterr().out
    assert "untagged" in listed
    assert "noise.mp3" in listed

    assert app_main.main(["--root", str(root), "--wipe"]) == 0
    capsys.readouterr()
    app_main.main(["--root", str(root), "--list"])
    assert "noise.mp3" not in capsys.readouterr().out
