"""SQLite persistence adapter.

Each collection is a table of ``(id TEXT PRIMARY KEY, body TEXT)`` rows
where ``body`` is the JSON-encoded document. Equality filters use
``json_extract``.
"""

import json
import sqlite3
from pathlib import Path
from typing import Any

from docforge.persistence.adapter import check_collection


class SQLiteAdapter:
    """Simple SQLite document adapter."""

    def __init__(self, db_path: Path | str = ":memory:"):
        self.db_path = str(db_path)
        self.conn: sqlite3.Connection | None = None

    def connect(self) -> None:
        """Establish database connection."""
        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self.conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self.conn.row_factory = sqlite3.Row

    def close(self) -> None:
        """Close database connection."""
        if self.conn:
            self.conn.close()
            self.conn = None

    def _require_conn(self) -> sqlite3.Connection:
        if not self.conn:
            raise RuntimeError("Database not connected")
        return self.conn

    def initialize_collection(self, collection: str) -> None:
        """Create table for collection if it doesn't exist."""
        conn = self._require_conn()
        table = check_collection(collection)
        conn.execute(f"CREATE TABLE IF NOT EXISTS {table} (id TEXT PRIMARY KEY, body TEXT NOT NULL)")
        conn.commit()

    def insert(self, collection: str, doc: dict[str, Any]) -> dict[str, Any]:
        conn = self._require_conn()
        table = check_collection(collection)
        conn.execute(
            f"INSERT INTO {table} (id, body) VALUES (?, ?)",
            [doc["_id"], json.dumps(doc)],
        )
        conn.commit()
        return self.get(collection, doc["_id"])

    def get(self, collection: str, id: str) -> dict[str, Any] | None:
        conn = self._require_conn()
        table = check_collection(collection)
        row = conn.execute(f"SELECT body FROM {table} WHERE id = ?", [id]).fetchone()
        if row:
            return json.loads(row["body"])
        return None

    def update(
        self, collection: str, id: str, doc: dict[str, Any]
    ) -> dict[str, Any] | None:
        conn = self._require_conn()
        table = check_collection(collection)
        cursor = conn.execute(
            f"UPDATE {table} SET body = ? WHERE id = ?",
            [json.dumps({**doc, "_id": id}), id],
        )
        conn.commit()
        if cursor.rowcount == 0:
            return None
        return self.get(collection, id)

    def delete(self, collection: str, id: str) -> bool:
        conn = self._require_conn()
        table = check_collection(collection)
        cursor = conn.execute(f"DELETE FROM {table} WHERE id = ?", [id])
        conn.commit()
        return cursor.rowcount > 0

    def find(
        self,
        collection: str,
        filter: dict[str, Any] | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[dict[str, Any]]:
        conn = self._require_conn()
        table = check_collection(collection)

        clauses = []
        params: list[Any] = []
        for key, value in (filter or {}).items():
            clauses.append("json_extract(body, ?) = ?")
            params.extend([f'$."{key}"', value])

        sql = f"SELECT body FROM {table}"
        if clauses:
            sql += " WHERE " + " AND ".join(clauses)
        sql += " ORDER BY rowid"
        if limit is not None or offset:
            sql += " LIMIT ? OFFSET ?"
            params.extend([-1 if limit is None else limit, offset])

        return [json.loads(row["body"]) for row in conn.execute(sql, params)]
