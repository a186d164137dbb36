"""In-memory persistence adapter."""

import copy
from typing import Any

from docforge.persistence.adapter import check_collection


class MemoryAdapter:
    """Keeps collections as dicts of deep-copied documents.

    Useful for tests and for running schemas without a database.
    """

    def __init__(self) -> None:
        self.conn: dict[str, dict[str, dict[str, Any]]] | None = None

    def connect(self) -> None:
        if self.conn is None:
            self.conn = {}

    def close(self) -> None:
        self.conn = None

    def _collection(self, collection: str) -> dict[str, dict[str, Any]]:
        if self.conn is None:
            raise RuntimeError("Database not connected")
        return self.conn.setdefault(check_collection(collection), {})

    def initialize_collection(self, collection: str) -> None:
        self._collection(collection)

    def insert(self, collection: str, doc: dict[str, Any]) -> dict[str, Any]:
        store = self._collection(collection)
        if doc["_id"] in store:
            raise ValueError(f"Duplicate id '{doc['_id']}' in collection '{collection}'")
        store[doc["_id"]] = copy.deepcopy(doc)
        return copy.deepcopy(doc)

    def get(self, collection: str, id: str) -> dict[str, Any] | None:
        doc = self._collection(collection).get(id)
        return copy.deepcopy(doc) if doc is not None else None

    def update(
        self, collection: str, id: str, doc: dict[str, Any]
    ) -> dict[str, Any] | None:
        store = self._collection(collection)
        if id not in store:
            return None
        store[id] = copy.deepcopy({**doc, "_id": id})
        return copy.deepcopy(store[id])

    def delete(self, collection: str, id: str) -> bool:
        return self._collection(collection).pop(id, None) is not None

    def find(
        self,
        collection: str,
        filter: dict[str, Any] | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[dict[str, Any]]:
        matches = [
            doc
            for doc in self._collection(collection).values()
            if all(doc.get(key) == value for key, value in (filter or {}).items())
        ]
        end = None if limit is None else offset + limit
        return [copy.deepcopy(doc) for doc in matches[offset:end]]
