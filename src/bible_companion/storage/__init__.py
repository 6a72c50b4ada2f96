"""Key-value persistence backends."""

from bible_companion.storage.kv import FileKeyValueStore, KeyValueStore, MemoryKeyValueStore

__all__ = ["KeyValueStore", "FileKeyValueStore", "MemoryKeyValueStore"]
