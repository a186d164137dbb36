import pytest

from docforge.document import Database
from docforge.persistence.memory import MemoryAdapter
from docforge.persistence.sqlite import SQLiteAdapter


@pytest.fixture
def db():
    """A connected in-memory Database."""
    database = Database(MemoryAdapter()).connect()
    yield database
    database.close()


@pytest.fixture
def sqlite_db(tmp_path):
    """A connected SQLite-backed Database in a temp directory."""
    database = Database(SQLiteAdapter(tmp_path / "docforge.db")).connect()
    yield database
    database.close()
