"""Notes, bookmarks and highlights."""

from .store import STORAGE_KEYS, AnnotationStore, Collection

__all__ = ["AnnotationStore", "Collection", "STORAGE_KEYS"]
