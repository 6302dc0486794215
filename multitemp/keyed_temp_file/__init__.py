from ._allocation import TempFileAllocation
from .main import KeyedTempFileConfig, KeyedTempFiles

__all__ = ["KeyedTempFileConfig", "KeyedTempFiles", "TempFileAllocation"]
