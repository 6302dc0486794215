from collections.abc import Iterator
from pathlib import Path

import pytest

from multitemp import KeyedTempFiles


@pytest.fixture
def temp_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "multitemp"
    directory.mkdir()
    return directory


@pytest.fixture
def files(temp_dir: Path) -> Iterator[KeyedTempFiles]:
    """
    A manager writing into a per-test directory.
    Disposed after the test, so unlinked files never leak between tests.
    """
    manager = KeyedTempFiles(directory=temp_dir)
    try:
        yield manager
    finally:
        manager.dispose()
