"""Database URLs and the adapter factory.

Recognised URLs:
    memory://                     in-process dicts
    sqlite:///relative/path.db    SQLite file (sqlite:////abs/path.db for absolute)
    sqlite:// or sqlite:///       SQLite in memory
    postgresql://user@host/db     PostgreSQL (postgres:// and postgresql+psycopg:// too)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING
from urllib.parse import urlsplit

if TYPE_CHECKING:
    from docforge.persistence.adapter import PersistenceAdapter

DEFAULT_DB_NAME = "docforge.db"

_POSTGRES_SCHEMES = ("postgresql", "postgres")


def sqlite_url(path: Path | str) -> str:
    return f"sqlite:///{path}"


@dataclass
class DatabaseConfig:
    """Where documents are stored, as a single URL."""

    url: str

    @classmethod
    def from_env(cls, base_path: Path | None = None) -> DatabaseConfig:
        """Pick a URL from the environment.

        DATABASE_URL wins, then DOCFORGE_DB_PATH (a SQLite file). Without
        either, the database lives in ``<base_path>/data/docforge.db`` or,
        with no base path, ``docforge.db`` in the working directory.
        """
        if url := os.environ.get("DATABASE_URL"):
            return cls(url=url)
        if db_path := os.environ.get("DOCFORGE_DB_PATH"):
            return cls(url=sqlite_url(db_path))
        if base_path:
            return cls(url=sqlite_url(base_path / "data" / DEFAULT_DB_NAME))
        return cls(url=sqlite_url(DEFAULT_DB_NAME))

    @property
    def scheme(self) -> str:
        """URL scheme without a driver suffix (``postgresql+psycopg`` -> ``postgresql``)."""
        return urlsplit(self.url).scheme.split("+", 1)[0].lower()

    @property
    def is_memory(self) -> bool:
        return self.scheme == "memory"

    @property
    def is_sqlite(self) -> bool:
        return self.scheme == "sqlite"

    @property
    def is_postgresql(self) -> bool:
        return self.scheme in _POSTGRES_SCHEMES

    @property
    def sqlite_path(self) -> str:
        """Database file for a sqlite URL; ``:memory:`` when the URL has no path."""
        # The first slash separates the empty host from the path
        path = urlsplit(self.url).path[1:]
        return path or ":memory:"


def create_adapter(config: DatabaseConfig) -> PersistenceAdapter:
    """Build an unconnected adapter for the configured URL.

    Raises:
        ValueError: For unsupported URL schemes.
    """
    scheme = config.scheme
    if scheme == "memory":
        from docforge.persistence.memory import MemoryAdapter

        return MemoryAdapter()

    if scheme == "sqlite":
        from docforge.persistence.sqlite import SQLiteAdapter

        return SQLiteAdapter(config.sqlite_path)

    if scheme in _POSTGRES_SCHEMES:
        from docforge.persistence.postgresql import PostgreSQLAdapter

        return PostgreSQLAdapter(config.url)

    raise ValueError(f"Unsupported database URL scheme '{scheme}': {config.url}")
