"""PersistenceAdapter Protocol — shared interface for all document stores."""

import re
from typing import Any, Protocol, runtime_checkable

_COLLECTION_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def check_collection(name: str) -> str:
    """Return the collection name, or raise ValueError if it is not an identifier.

    Collection names are interpolated into DDL, so only identifiers are allowed.
    """
    if not _COLLECTION_RE.match(name):
        raise ValueError(f"Invalid collection name: {name!r}")
    return name


@runtime_checkable
class PersistenceAdapter(Protocol):
    """Interface all persistence adapters must implement.

    Documents are JSON-compatible dicts carrying their id under ``_id``.
    """

    # Raw connection handle. Type varies by adapter (dict, sqlite3.Connection,
    # psycopg.Connection).
    conn: Any

    def connect(self) -> None: ...

    def close(self) -> None: ...

    def initialize_collection(self, collection: str) -> None: ...

    def insert(self, collection: str, doc: dict[str, Any]) -> dict[str, Any]: ...

    def get(self, collection: str, id: str) -> dict[str, Any] | None: ...

    def update(
        self, collection: str, id: str, doc: dict[str, Any]
    ) -> dict[str, Any] | None: ...

    def delete(self, collection: str, id: str) -> bool: ...

    def find(
        self,
        collection: str,
        filter: dict[str, Any] | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[dict[str, Any]]: ...
