from __future__ import annotations

import os
import tempfile
import weakref
from pathlib import Path

from loguru import logger

from ._runtime import tighten_file_permissions
from ._template import split_template


def _unlink_quietly(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        return
    except OSError:
        logger.exception("[MTMP] Failed to remove temp file", name=path.name)
        return
    logger.debug("[MTMP] Removed temp file", path=str(path))


class TempFileAllocation:
    """
    A uniquely named file that already exists on disk.

    When created with ``unlink=True`` the file is removed as soon as the
    allocation is released, collected, or the interpreter exits, whichever
    comes first.
    """

    def __init__(self, path: Path, unlink: bool) -> None:
        self._path = path
        self._unlink = unlink
        self._finalizer: weakref.finalize | None = None
        if unlink:
            self._finalizer = weakref.finalize(self, _unlink_quietly, path)

    @classmethod
    def create(
        cls,
        template: str | None = None,
        suffix: str | None = None,
        directory: str | os.PathLike[str] | None = None,
        unlink: bool = True,
    ) -> TempFileAllocation:
        prefix: str | None = None
        full_suffix = suffix
        if template is not None:
            prefix, infix = split_template(template)
            full_suffix = infix + (suffix or "")

        fd, name = tempfile.mkstemp(
            suffix=full_suffix,
            prefix=prefix,
            dir=os.fspath(directory) if directory is not None else None,
        )
        os.close(fd)
        path = Path(name)
        tighten_file_permissions(path)
        return cls(path, unlink)

    @property
    def path(self) -> Path:
        return self._path

    @property
    def unlink(self) -> bool:
        return self._unlink

    @property
    def released(self) -> bool:
        return self._finalizer is not None and not self._finalizer.alive

    def release(self) -> None:
        if self._finalizer is not None:
            self._finalizer()

    def __fspath__(self) -> str:
        return os.fspath(self._path)

    def __repr__(self) -> str:
        return f"TempFileAllocation({str(self._path)!r}, unlink={self._unlink})"
