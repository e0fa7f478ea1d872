"""
Record store contract shared by the DynamoDB and in-memory backends.

A store is one collection per entity. Documents are JSON-compatible dicts keyed
by camelCase field names; `id`, `createdAt` and `updatedAt` are managed by the
collection.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol

from models.common import iso_timestamp, utc_now

Document = Dict[str, Any]


class StoreError(Exception):
    """Raised when the backing store fails an operation."""


class DuplicateKeyError(StoreError):
    """Raised when a write would break a unique constraint."""

    def __init__(self, field: str, value: Any):
        super().__init__(f"Duplicate value for {field}: {value}")
        self.field = field
        self.value = value


class Collection(Protocol):
    """Operations the services need from a document collection."""

    def get(self, item_id: str) -> Optional[Document]: ...

    def find(
        self,
        filters: Optional[Dict[str, Any]] = None,
        sort_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[Document]: ...

    def insert(self, document: Document) -> Document: ...

    def update(self, item_id: str, changes: Document) -> Optional[Document]: ...

    def delete(self, item_id: str) -> bool: ...

    def delete_many(self, filters: Dict[str, Any]) -> int: ...


def find_one(
    collection: Collection,
    filters: Dict[str, Any],
    sort_by: Optional[str] = None,
    descending: bool = False,
) -> Optional[Document]:
    """Return the first match of `find`, or None."""
    items = collection.find(filters, sort_by=sort_by, descending=descending, limit=1)
    return items[0] if items else None


@dataclass
class RecordStore:
    """Handle passed to every service; never a module-level singleton."""

    customers: Collection
    meetings: Collection


def new_document(document: Document) -> Document:
    """Copy a document and stamp id and timestamps for insertion."""
    now = iso_timestamp(utc_now())
    stamped = dict(document)
    stamped["id"] = str(uuid.uuid4())
    stamped["createdAt"] = now
    stamped["updatedAt"] = now
    return stamped


def touch(changes: Document) -> Document:
    """Copy an update and refresh updatedAt. Never lets callers rewrite the id."""
    stamped = {k: v for k, v in changes.items() if k not in ("id", "createdAt")}
    stamped["updatedAt"] = iso_timestamp(utc_now())
    return stamped


def matches(document: Document, filters: Dict[str, Any]) -> bool:
    """Equality match on every filter field."""
    return all(document.get(field) == value for field, value in filters.items())


def sort_documents(
    documents: List[Document], sort_by: Optional[str], descending: bool = False
) -> List[Document]:
    """Sort by one field; documents missing it go last in either direction."""
    if not sort_by:
        return documents
    present = [d for d in documents if d.get(sort_by) is not None]
    missing = [d for d in documents if d.get(sort_by) is None]
    present.sort(key=lambda d: d[sort_by], reverse=descending)
    return present + missing
