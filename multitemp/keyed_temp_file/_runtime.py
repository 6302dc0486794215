from __future__ import annotations

import os
from pathlib import Path
from typing import IO, TypeAlias

import portalocker
from loguru import logger

FileIdentity: TypeAlias = tuple[int, int]


def open_for_append(path: Path, binary: bool = False, encoding: str = "utf-8") -> IO:
    """Open for appending; the open call itself takes no lock."""
    if binary:
        return open(path, "ab")
    return open(path, "a", encoding=encoding, newline="")


def lock_exclusive(handle: IO) -> None:
    # Blocks until no other process holds a conflicting lock.
    portalocker.lock(handle, portalocker.LOCK_EX)


def file_identity(handle: IO) -> FileIdentity:
    st = os.fstat(handle.fileno())
    return st.st_dev, st.st_ino


def is_live(handle: IO | None, identity: FileIdentity | None = None) -> bool:
    """
    Check that ``handle`` still refers to an open descriptor.

    With ``identity``, the descriptor must also still point at that file:
    a number closed behind our back may have been handed to another file.
    """
    if handle is None or handle.closed:
        return False
    try:
        st = os.fstat(handle.fileno())
    except (OSError, ValueError):
        return False
    if identity is not None and (st.st_dev, st.st_ino) != identity:
        return False
    return True


def close_quietly(handle: IO) -> bool:
    try:
        handle.close()
    except (OSError, ValueError):
        logger.warning(
            "[MTMP] Ignoring error while closing handle",
            handle=getattr(handle, "name", None),
        )
        return False
    return True


def discard_stale(handle: IO) -> None:
    """
    Close a handle whose descriptor number may now belong to someone else.

    The descriptor is pointed at the null device while the handle closes, so
    its buffered data and its close never reach the current owner.
    """
    if handle.closed:
        return
    try:
        fd = handle.fileno()
        saved = os.dup(fd)
    except (OSError, ValueError):
        # Nothing else holds the number; a plain close is harmless.
        close_quietly(handle)
        return
    try:
        sink = os.open(os.devnull, os.O_WRONLY)
        try:
            os.dup2(sink, fd, inheritable=False)
        finally:
            os.close(sink)
        close_quietly(handle)
    finally:
        os.dup2(saved, fd, inheritable=False)
        os.close(saved)
    logger.debug("[MTMP] Discarded stale handle", fd=fd)


def tighten_file_permissions(path: Path) -> None:
    if not path.exists():
        return
    try:
        os.chmod(path, 0o600)
    except Exception:
        logger.exception(
            "[MTMP] Failed to set file permissions",
            name=path.name,
        )
