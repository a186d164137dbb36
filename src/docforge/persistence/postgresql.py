"""PostgreSQL persistence adapter.

Uses psycopg v3 (psycopg[binary]>=3.1.0). Each collection is a table of
``(id TEXT PRIMARY KEY, body JSONB)`` rows; equality filters use JSONB
containment (``body @> filter``).
"""

from __future__ import annotations

from typing import Any

from docforge.persistence.adapter import check_collection


def _table(collection: str) -> str:
    """Return a double-quoted table identifier."""
    return f'"{check_collection(collection)}"'


class PostgreSQLAdapter:
    """PostgreSQL document adapter using psycopg v3."""

    def __init__(self, url: str):
        # psycopg.connect() wants a plain libpq DSN or postgres:// URL,
        # so strip the +psycopg driver suffix when present.
        self.url = url.replace("postgresql+psycopg://", "postgresql://")
        self.conn: Any = None

    def connect(self) -> None:
        """Establish database connection."""
        import psycopg
        from psycopg.rows import dict_row

        self.conn = psycopg.connect(self.url, row_factory=dict_row)

    def close(self) -> None:
        """Close database connection."""
        if self.conn:
            self.conn.close()
            self.conn = None

    def _require_conn(self) -> Any:
        if not self.conn:
            raise RuntimeError("Database not connected")
        return self.conn

    def initialize_collection(self, collection: str) -> None:
        conn = self._require_conn()
        conn.execute(
            f"CREATE TABLE IF NOT EXISTS {_table(collection)} "
            "(id TEXT PRIMARY KEY, body JSONB NOT NULL)"
        )
        conn.commit()

    def insert(self, collection: str, doc: dict[str, Any]) -> dict[str, Any]:
        from psycopg.types.json import Jsonb

        conn = self._require_conn()
        conn.execute(
            f"INSERT INTO {_table(collection)} (id, body) VALUES (%s, %s)",
            [doc["_id"], Jsonb(doc)],
        )
        conn.commit()
        return self.get(collection, doc["_id"])

    def get(self, collection: str, id: str) -> dict[str, Any] | None:
        conn = self._require_conn()
        row = conn.execute(
            f"SELECT body FROM {_table(collection)} WHERE id = %s", [id]
        ).fetchone()
        return row["body"] if row else None

    def update(
        self, collection: str, id: str, doc: dict[str, Any]
    ) -> dict[str, Any] | None:
        from psycopg.types.json import Jsonb

        conn = self._require_conn()
        cursor = conn.execute(
            f"UPDATE {_table(collection)} SET body = %s WHERE id = %s",
            [Jsonb({**doc, "_id": id}), id],
        )
        conn.commit()
        if cursor.rowcount == 0:
            return None
        return self.get(collection, id)

    def delete(self, collection: str, id: str) -> bool:
        conn = self._require_conn()
        cursor = conn.execute(f"DELETE FROM {_table(collection)} WHERE id = %s", [id])
        conn.commit()
        return cursor.rowcount > 0

    def find(
        self,
        collection: str,
        filter: dict[str, Any] | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[dict[str, Any]]:
        from psycopg.types.json import Jsonb

        conn = self._require_conn()
        sql = f"SELECT body FROM {_table(collection)}"
        params: list[Any] = []
        if filter:
            sql += " WHERE body @> %s"
            params.append(Jsonb(filter))
        sql += " ORDER BY id"
        if limit is not None:
            sql += " LIMIT %s"
            params.append(limit)
        if offset:
            sql += " OFFSET %s"
            params.append(offset)
        return [row["body"] for row in conn.execute(sql, params).fetchall()]
