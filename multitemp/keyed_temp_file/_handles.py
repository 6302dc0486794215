from __future__ import annotations

from collections.abc import Callable, Hashable
from pathlib import Path
from typing import IO, TYPE_CHECKING, TypeAlias

from loguru import logger

from . import _runtime

Initializer: TypeAlias = Callable[[Hashable, Path, IO], object]


class KeyedHandleMixin:
    _handles: dict[Hashable, IO]
    _identities: dict[Hashable, _runtime.FileIdentity]
    _pending_init: dict[Hashable, Initializer | None]
    _binary: bool
    _encoding: str

    if TYPE_CHECKING:
        def resolve_file(
            self,
            key: Hashable,
            init: Initializer | None = None,
        ) -> Path:
            ...

        def _run_init(
            self,
            key: Hashable,
            path: Path,
            handle: IO,
            init: Initializer | None,
        ) -> None:
            ...

        def _assert_usable(self) -> None:
            ...

    def _is_live(self, key: Hashable) -> bool:
        return _runtime.is_live(self._handles.get(key), self._identities.get(key))

    def _acquire_handle(
        self,
        key: Hashable,
        file: Path | None = None,
        init: Initializer | None = None,
    ) -> IO:
        self._assert_usable()
        if self._is_live(key):
            return self._handles[key]

        if file is None:
            # A newly created file comes back with its handle already stored.
            file = self.resolve_file(key, init)
            if self._is_live(key):
                return self._handles[key]

        stale = self._handles.pop(key, None)
        self._identities.pop(key, None)
        if stale is not None:
            logger.debug("[MTMP] Reopening stale handle", key=key)
            _runtime.discard_stale(stale)

        handle = _runtime.open_for_append(file, self._binary, self._encoding)
        try:
            _runtime.lock_exclusive(handle)
            identity = _runtime.file_identity(handle)
        except BaseException:
            _runtime.close_quietly(handle)
            raise
        self._handles[key] = handle
        self._identities[key] = identity
        logger.debug("[MTMP] Opened locked handle", key=key, path=str(file))

        if key in self._pending_init:
            # First handle for a new file: the initializer runs exactly once.
            self._run_init(key, file, handle, self._pending_init.pop(key) or init)
        return handle

    def get_handle(self, key: Hashable, init: Initializer | None = None) -> IO:
        """Return the locked write handle for ``key``, reopening it in append mode if needed."""
        return self._acquire_handle(key, None, init)

    def close_all(self) -> None:
        """Close every open handle; known files are kept."""
        if not self._handles:
            return
        closed = 0
        for key in list(self._handles):
            live = self._is_live(key)
            handle = self._handles.pop(key)
            self._identities.pop(key, None)
            if live:
                if _runtime.close_quietly(handle):
                    closed += 1
            else:
                _runtime.discard_stale(handle)
        logger.debug("[MTMP] Closed all handles", closed=closed)

    close = close_all
