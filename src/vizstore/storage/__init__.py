from .storage import Storage, StorageSession
from .sqlite import SQLite
from .memory import MemoryStorage

__all__ = ["Storage", "StorageSession", "SQLite", "MemoryStorage"]
