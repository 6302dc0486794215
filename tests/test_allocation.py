from __future__ import annotations

import stat
from pathlib import Path

import pytest

from multitemp import TempFileAllocation
from multitemp.keyed_temp_file._template import split_template, substitute_key


def test_create_fills_template_and_appends_suffix(tmp_path: Path):
    allocation = TempFileAllocation.create(
        template="report-XXXX",
        suffix=".csv",
        directory=tmp_path,
        unlink=True,
    )
    path = allocation.path
    assert path.exists()
    assert path.parent == tmp_path
    assert path.name.startswith("report-")
    assert path.name.endswith(".csv")
    assert len(path.name) > len("report-.csv")
    allocation.release()


def test_text_after_fill_run_is_kept_before_suffix(tmp_path: Path):
    allocation = TempFileAllocation.create(
        template="XXXXXX-daily",
        suffix=".txt",
        directory=tmp_path,
        unlink=False,
    )
    assert allocation.path.name.endswith("-daily.txt")


def test_created_file_is_private(tmp_path: Path):
    allocation = TempFileAllocation.create(directory=tmp_path, unlink=False)
    mode = stat.S_IMODE(allocation.path.stat().st_mode)
    assert mode == 0o600


def test_release_unlinks_only_when_requested(tmp_path: Path):
    removed = TempFileAllocation.create(directory=tmp_path, unlink=True)
    kept = TempFileAllocation.create(directory=tmp_path, unlink=False)

    removed.release()
    kept.release()

    assert removed.released
    assert not removed.path.exists()
    assert not kept.released
    assert kept.path.exists()


def test_release_is_idempotent_and_tolerates_missing_file(tmp_path: Path):
    allocation = TempFileAllocation.create(directory=tmp_path, unlink=True)
    allocation.path.unlink()
    allocation.release()
    allocation.release()
    assert allocation.released


def test_dropping_allocation_unlinks(tmp_path: Path):
    allocation = TempFileAllocation.create(directory=tmp_path, unlink=True)
    path = allocation.path
    del allocation
    assert not path.exists()


def test_create_in_missing_directory_raises(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        TempFileAllocation.create(directory=tmp_path / "missing")


def test_split_template_uses_last_fill_run():
    assert split_template("XXXX-KEY-XXXXXX.part") == ("XXXX-KEY-", ".part")
    with pytest.raises(ValueError):
        split_template("XXX")


def test_substitute_key_uses_string_form():
    assert substitute_key("KEY-XXXX", 42) == "42-XXXX"
    assert substitute_key("key-XXXX", "acme") == "key-XXXX"
