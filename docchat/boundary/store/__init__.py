"""Record store boundary."""

from .record_store import InMemoryRecordStore, RecordStore

__all__ = ["InMemoryRecordStore", "RecordStore"]
