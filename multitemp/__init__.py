"""Manage a growing set of keyed, exclusively locked temporary files."""

from multitemp.keyed_temp_file import (
    KeyedTempFileConfig,
    KeyedTempFiles,
    TempFileAllocation,
)

__all__ = ["KeyedTempFileConfig", "KeyedTempFiles", "TempFileAllocation"]
