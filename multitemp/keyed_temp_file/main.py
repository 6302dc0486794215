from __future__ import annotations

import sys
from collections.abc import Hashable
from dataclasses import dataclass, replace
from pathlib import Path
from types import TracebackType
from typing import IO

from loguru import logger

from multitemp.core.settings import settings

from ._allocation import TempFileAllocation
from ._handles import Initializer, KeyedHandleMixin
from ._runtime import FileIdentity
from ._template import substitute_key, validate_suffix, validate_template


@dataclass(frozen=True)
class KeyedTempFileConfig:
    template: str | None = None
    suffix: str | None = None
    directory: str | Path | None = None
    unlink: bool = True
    init: Initializer | None = None
    binary: bool = False
    encoding: str = "utf-8"

    def __post_init__(self) -> None:
        if self.template is not None:
            validate_template(self.template)
        if self.suffix is not None:
            validate_suffix(self.suffix)
        if self.directory is not None and not Path(self.directory).is_dir():
            raise ValueError(f"directory does not exist: {self.directory}")
        if self.init is not None and not callable(self.init):
            raise ValueError("init must be callable")
        if not self.encoding:
            raise ValueError("encoding must be non-empty")

    @classmethod
    def from_settings(cls, **overrides: object) -> KeyedTempFileConfig:
        values: dict[str, object] = {
            "directory": settings.TMP_DIR,
            "unlink": settings.TMP_UNLINK,
            "encoding": settings.TMP_ENCODING,
        }
        values.update(overrides)
        return cls(**values)


class KeyedTempFiles(KeyedHandleMixin):
    """
    A lazily populated mapping of keys to temporary files.

    - The first use of a key allocates a uniquely named file, opens it
      for appending and takes an exclusive lock on the handle.
    - The initializer runs exactly once per key, right after creation.
    - Closed handles are reopened in append mode on demand.
    - dispose() (or leaving a ``with`` block) closes every handle and
      removes the files unless ``unlink`` is false.

    One logical owner per instance: the maps are not guarded by a lock.
    """

    def __init__(
        self,
        config: KeyedTempFileConfig | None = None,
        **options: object,
    ) -> None:
        if config is None:
            config = KeyedTempFileConfig.from_settings(**options)
        elif options:
            config = replace(config, **options)
        self._config = config
        self._binary = config.binary
        self._encoding = config.encoding
        self._files: dict[Hashable, TempFileAllocation] = {}
        self._handles: dict[Hashable, IO] = {}
        self._identities: dict[Hashable, FileIdentity] = {}
        self._pending_init: dict[Hashable, Initializer | None] = {}
        self._disposed = False

        logger.debug(
            "[MTMP] KeyedTempFiles initialized",
            template=config.template,
            suffix=config.suffix,
            directory=config.directory,
            unlink=config.unlink,
        )

    @property
    def config(self) -> KeyedTempFileConfig:
        return self._config

    @property
    def disposed(self) -> bool:
        return self._disposed

    def resolve_file(self, key: Hashable, init: Initializer | None = None) -> Path:
        """
        Return the path of the file for ``key``, creating it on first use.

        A new file is opened and locked before ``init`` (or the configured
        initializer) is called with ``(key, path, handle)``.
        """
        self._assert_usable()
        allocation = self._files.get(key)
        if allocation is not None:
            return allocation.path

        template = self._config.template
        if template is not None:
            template = substitute_key(template, key)
        try:
            allocation = TempFileAllocation.create(
                template=template,
                suffix=self._config.suffix,
                directory=self._config.directory,
                unlink=self._config.unlink,
            )
        except OSError:
            logger.exception("[MTMP] Failed to allocate temp file", key=key)
            raise
        self._files[key] = allocation
        self._pending_init[key] = init
        logger.debug("[MTMP] Materialized key", key=key, path=str(allocation.path))

        self._acquire_handle(key, allocation.path, init)
        return allocation.path

    def _run_init(
        self,
        key: Hashable,
        path: Path,
        handle: IO,
        init: Initializer | None,
    ) -> None:
        init = init or self._config.init
        if init is not None:
            init(key, path, handle)

    file = resolve_file
    file_handle = KeyedHandleMixin.get_handle

    def list_files(self) -> list[Path]:
        return [allocation.path for allocation in self._files.values()]

    files = list_files

    def allocation(self, key: Hashable) -> TempFileAllocation | None:
        return self._files.get(key)

    def dispose(self) -> None:
        if self._disposed:
            return
        self.close_all()
        for allocation in self._files.values():
            allocation.release()
        self._disposed = True
        logger.debug("[MTMP] KeyedTempFiles disposed", files=len(self._files))

    def _assert_usable(self) -> None:
        if self._disposed:
            raise RuntimeError("KeyedTempFiles is disposed")

    def __contains__(self, key: object) -> bool:
        return key in self._files

    def __enter__(self) -> KeyedTempFiles:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.dispose()

    def __del__(self) -> None:
        # Interpreter shutdown: leave it to the allocations' own finalizers.
        if sys.is_finalizing():
            return
        if getattr(self, "_disposed", True):
            return
        self.dispose()
