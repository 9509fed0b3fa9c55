from .interface import EventStore
from .sqlite import SQLiteEventStore

__all__ = ["EventStore", "SQLiteEventStore"]
