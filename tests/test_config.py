"""Tests for icon store locations and icon pack persistence."""
import json
import logging

import pytest

from iconvault.config import (
    ConfigError,
    JsonIconPackStore,
    load_pack,
    resolve_icons_dir,
    resource_path,
    save_pack,
    system_icons_dir,
)
from iconvault.logger import setup_logging


def test_missing_pack_loads_empty_document(tmp_path):
    data = load_pack(tmp_path / "pack.json")
    assert data == {"version": 1, "app_icons": {}, "file_icons": {}}


def test_corrupted_pack_raises_config_error(tmp_path):
    path = tmp_path / "pack.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ConfigError, match="corrupted"):
        load_pack(path)


def test_pack_must_be_an_object(tmp_path):
    path = tmp_path / "pack.json"
    path.write_text("[]", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_pack(path)


def test_save_keeps_backup_of_previous_pack(tmp_path):
    path = tmp_path / "pack.json"
    save_pack(path, {"version": 1, "app_icons": {"a": "1.png"}, "file_icons": {}})
    save_pack(path, {"version": 1, "app_icons": {"b": "2.png"}, "file_icons": {}})

    assert load_pack(path)["app_icons"] == {"b": "2.png"}
    backup = json.loads((tmp_path / "pack.json.bak").read_text(encoding="utf-8"))
    assert backup["app_icons"] == {"a": "1.png"}
    assert not (tmp_path / "pack.json.tmp").exists()


def test_store_lives_in_system_folder(tmp_path):
    store = JsonIconPackStore.in_store(tmp_path)
    assert store.path == tmp_path / "system" / "pack.json"
    store.save({"version": 1, "app_icons": {}, "file_icons": {"txt": "t.png"}})
    assert store.load()["file_icons"] == {"txt": "t.png"}


def test_icons_dir_override(monkeypatch, tmp_path):
    monkeypatch.setenv("ICONVAULT_HOME", str(tmp_path / "store"))
    root = resolve_icons_dir()
    assert root == tmp_path / "store"
    assert root.is_dir()
    assert system_icons_dir(root).is_dir()


def test_icons_dir_under_appdata(monkeypatch, tmp_path):
    monkeypatch.delenv("ICONVAULT_HOME", raising=False)
    monkeypatch.setenv("APPDATA", str(tmp_path))
    assert resolve_icons_dir() == tmp_path / "iconvault" / "icons"


def test_placeholder_is_shipped():
    assert resource_path("icons/url.png").is_file()


def test_setup_logging_returns_package_logger(tmp_path):
    log_file = tmp_path / "logs" / "iconvault.log"
    logger = setup_logging(log_file)
    try:
        assert logger.name == "iconvault"
        assert log_file.exists()
    finally:
        for handler in list(logging.getLogger().handlers):
            if isinstance(handler, logging.FileHandler) and handler.baseFilename == str(log_file):
                logging.getLogger().removeHandler(handler)
                handler.close()
