"""In-memory collections for local runs (STORE_BACKEND=memory) and tests."""

from __future__ import annotations

import copy
from threading import Lock
from typing import Any, Dict, Iterable, List, Optional

from repositories.base import (
    Document,
    DuplicateKeyError,
    RecordStore,
    matches,
    new_document,
    sort_documents,
    touch,
)


class MemoryCollection:
    """Thread-safe dict-backed collection with optional unique fields."""

    def __init__(self, unique_fields: Iterable[str] = ()):
        self.unique_fields = tuple(unique_fields)
        self._items: Dict[str, Document] = {}
        self._lock = Lock()

    def get(self, item_id: str) -> Optional[Document]:
        with self._lock:
            item = self._items.get(item_id)
            return copy.deepcopy(item) if item else None

    def find(
        self,
        filters: Optional[Dict[str, Any]] = None,
        sort_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[Document]:
        with self._lock:
            found = [
                copy.deepcopy(item)
                for item in self._items.values()
                if matches(item, filters or {})
            ]
        found = sort_documents(found, sort_by, descending)
        return found[:limit] if limit else found

    def insert(self, document: Document) -> Document:
        item = new_document(document)
        with self._lock:
            self._check_unique(item)
            self._items[item["id"]] = item
            return copy.deepcopy(item)

    def update(self, item_id: str, changes: Document) -> Optional[Document]:
        with self._lock:
            current = self._items.get(item_id)
            if current is None:
                return None
            updated = {**current, **touch(changes)}
            self._check_unique(updated)
            self._items[item_id] = updated
            return copy.deepcopy(updated)

    def delete(self, item_id: str) -> bool:
        with self._lock:
            return self._items.pop(item_id, None) is not None

    def delete_many(self, filters: Dict[str, Any]) -> int:
        with self._lock:
            doomed = [i for i, item in self._items.items() if matches(item, filters)]
            for item_id in doomed:
                del self._items[item_id]
            return len(doomed)

    def _check_unique(self, candidate: Document) -> None:
        for field in self.unique_fields:
            value = candidate.get(field)
            for item_id, item in self._items.items():
                if item_id != candidate["id"] and item.get(field) == value:
                    raise DuplicateKeyError(field, value)


def build_memory_store() -> RecordStore:
    """A fresh, empty store with customer email uniqueness enforced."""
    return RecordStore(
        customers=MemoryCollection(unique_fields=("email",)),
        meetings=MemoryCollection(),
    )
