"""Documents, models and the database registry."""

from docforge.document.database import Database
from docforge.document.document import Document, DocumentArray, EmbeddedDocument
from docforge.document.model import Model, collection_name

__all__ = [
    "Database",
    "Document",
    "DocumentArray",
    "EmbeddedDocument",
    "Model",
    "collection_name",
]
