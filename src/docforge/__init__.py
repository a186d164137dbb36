"""DocForge: document schemas with pre/post lifecycle hooks.

Usage:
    from docforge import Database, DatabaseConfig, Schema

    schema = Schema({"title": str})

    @schema.pre("save")
    def require_title(doc, next):
        next(None if doc.title else ValueError("title is required"))

    with Database.from_config(DatabaseConfig(url="memory://")) as db:
        Book = db.model("Book", schema)
        book = await Book.create(title="Dune")
"""

from docforge.document import Database, Document, EmbeddedDocument, Model
from docforge.errors import (
    DocForgeError,
    DocumentValidationError,
    FieldError,
    HookError,
    SchemaError,
)
from docforge.hooks import HookEngine, HookRegistry, HookSet, Phase, hook
from docforge.persistence import DatabaseConfig, create_adapter
from docforge.schema import Schema, SchemaLoader

__all__ = [
    "Database",
    "DatabaseConfig",
    "DocForgeError",
    "Document",
    "DocumentValidationError",
    "EmbeddedDocument",
    "FieldError",
    "HookEngine",
    "HookError",
    "HookRegistry",
    "HookSet",
    "Model",
    "Phase",
    "Schema",
    "SchemaError",
    "SchemaLoader",
    "create_adapter",
    "hook",
]
