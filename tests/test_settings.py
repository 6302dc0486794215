from __future__ import annotations

from pathlib import Path

import multitemp.core.settings as settings_module
from multitemp import KeyedTempFileConfig, KeyedTempFiles
from multitemp.core.settings import Settings


def test_settings_read_prefixed_environment(monkeypatch, tmp_path: Path):
    monkeypatch.setenv("MULTITEMP_TMP_DIR", str(tmp_path))
    monkeypatch.setenv("MULTITEMP_TMP_UNLINK", "false")
    monkeypatch.setenv("MULTITEMP_TMP_ENCODING", "latin-1")

    loaded = Settings()

    assert loaded.TMP_DIR == str(tmp_path)
    assert loaded.TMP_UNLINK is False
    assert loaded.TMP_ENCODING == "latin-1"


def test_config_defaults_come_from_settings(monkeypatch, tmp_path: Path):
    monkeypatch.setattr(settings_module.settings, "TMP_DIR", str(tmp_path))
    monkeypatch.setattr(settings_module.settings, "TMP_UNLINK", False)

    config = KeyedTempFileConfig.from_settings(suffix=".log")

    assert config.directory == str(tmp_path)
    assert config.unlink is False
    assert config.suffix == ".log"


def test_explicit_options_win_over_settings(monkeypatch, tmp_path: Path):
    monkeypatch.setattr(settings_module.settings, "TMP_DIR", str(tmp_path / "missing"))
    monkeypatch.setattr(settings_module.settings, "TMP_UNLINK", False)

    with KeyedTempFiles(directory=tmp_path, unlink=True) as files:
        path = files.resolve_file("k")
        assert path.parent == tmp_path

    assert not path.exists()


def test_unlink_setting_keeps_files(monkeypatch, tmp_path: Path):
    monkeypatch.setattr(settings_module.settings, "TMP_DIR", str(tmp_path))
    monkeypatch.setattr(settings_module.settings, "TMP_UNLINK", False)

    with KeyedTempFiles(suffix=".txt") as files:
        files.get_handle("k").write("persisted")
        path = files.allocation("k").path

    assert path.read_text() == "persisted"
