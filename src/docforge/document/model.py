"""Models bind a schema to a collection in a persistence adapter."""

import logging
import re
from typing import Any

from docforge.document.document import Document
from docforge.hooks.service import HookEngine
from docforge.persistence.adapter import PersistenceAdapter
from docforge.schema.types import Schema

logger = logging.getLogger(__name__)


def collection_name(model_name: str) -> str:
    """Convert a model name to a snake_case collection name.

    Example: collection_name("BlogPost") -> "blog_post"
    """
    return re.sub(r"(?<!^)(?=[A-Z])", "_", model_name).lower()


class Model:
    """Creates, loads and writes documents of one schema.

    Example:
        Book = Model("Book", schema, adapter)
        book = await Book.create(title="Dune")
        again = await Book.find_by_id(book.id)
    """

    def __init__(
        self,
        name: str,
        schema: Schema,
        adapter: PersistenceAdapter,
        *,
        collection: str | None = None,
        engine: HookEngine | None = None,
    ):
        self.name = name
        self.schema = schema
        self.adapter = adapter
        self.collection = collection or collection_name(name)
        self.engine = engine or HookEngine()
        if schema.name is None:
            schema.name = name

    def initialize(self) -> None:
        """Create the backing collection if it does not exist."""
        self.adapter.initialize_collection(self.collection)

    def new(self, data: dict[str, Any] | None = None, **fields: Any) -> Document:
        """Build an unsaved document. No hooks run."""
        return Document(self.schema, {**(data or {}), **fields}, model=self)

    async def create(self, data: dict[str, Any] | None = None, **fields: Any) -> Document:
        """Build a document and save it (validate hooks, then save hooks)."""
        doc = self.new(data, **fields)
        return await doc.save()

    async def hydrate(self, raw: dict[str, Any]) -> Document:
        """Build a document from stored data, running the init hooks once."""
        doc = Document(self.schema, model=self, apply_defaults=False)
        return await doc.init(raw)

    async def find_by_id(self, id: str) -> Document | None:
        raw = self.adapter.get(self.collection, id)
        if raw is None:
            return None
        return await self.hydrate(raw)

    async def find(
        self,
        filter: dict[str, Any] | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Document]:
        """Load documents whose top-level fields equal the filter values."""
        rows = self.adapter.find(self.collection, filter=filter, limit=limit, offset=offset)
        return [await self.hydrate(raw) for raw in rows]

    def write(self, doc: Document) -> None:
        """Insert or update a document. Called from the save action."""
        data = doc.to_dict()
        if doc.is_new:
            logger.debug("Inserting %s %s", self.name, doc.id)
            self.adapter.insert(self.collection, data)
        else:
            logger.debug("Updating %s %s", self.name, doc.id)
            if self.adapter.update(self.collection, doc.id, data) is None:
                # Loaded documents can disappear underneath us; write them back.
                self.adapter.insert(self.collection, data)

    def delete(self, doc: Document) -> bool:
        """Delete a document. Called from the remove action."""
        deleted = self.adapter.delete(self.collection, doc.id)
        if not deleted:
            logger.debug("%s %s was not stored, nothing to delete", self.name, doc.id)
        return deleted

    def __repr__(self) -> str:
        return f"Model({self.name!r}, collection={self.collection!r})"
