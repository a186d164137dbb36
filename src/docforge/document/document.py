"""Document instances and their lifecycle operations.

Every operation runs through the hook engine:
- init: pre hooks, populate fields from stored data, post hooks
- validate: pre hooks, field rules + embedded validate chains, post hooks
- save: validate, then pre hooks, embedded save chains + write, post hooks
- remove: pre hooks, delete, post hooks
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING, Any

from docforge.errors import DocForgeError, DocumentValidationError, FieldError
from docforge.hooks.service import HookEngine
from docforge.schema.types import FieldDefinition, Schema

if TYPE_CHECKING:
    from docforge.document.model import Model

logger = logging.getLogger(__name__)

default_engine = HookEngine()


class Document:
    """A single document governed by a schema.

    Schema fields are exposed as attributes (``doc.title``) and items
    (``doc["title"]``). Unknown keys passed to the constructor are dropped.
    """

    def __init__(
        self,
        schema: Schema,
        data: dict[str, Any] | None = None,
        *,
        model: Model | None = None,
        engine: HookEngine | None = None,
        apply_defaults: bool = True,
    ):
        self._schema = schema
        self._model = model
        self._engine = engine or (model.engine if model else default_engine)
        self._id = uuid.uuid4().hex
        self._is_new = True
        self._data: dict[str, Any] = {}

        data = data or {}
        if "_id" in data:
            self._id = data["_id"]
        for name, definition in schema.fields.items():
            if name in data:
                self._data[name] = self._cast(definition, data[name])
            elif apply_defaults:
                self._data[name] = self._cast(definition, definition.default_value())

    # ------------------------------------------------------------------
    # Field access
    # ------------------------------------------------------------------

    def __getattr__(self, name: str) -> Any:
        schema = self.__dict__.get("_schema")
        if schema is not None and name in schema.fields:
            return self._data.get(name)
        raise AttributeError(f"{type(self).__name__} has no field '{name}'")

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_"):
            object.__setattr__(self, name, value)
            return
        self[name] = value

    def __getitem__(self, name: str) -> Any:
        if name not in self._schema.fields:
            raise KeyError(name)
        return self._data.get(name)

    def __setitem__(self, name: str, value: Any) -> None:
        definition = self._schema.fields.get(name)
        if definition is None:
            raise AttributeError(f"{type(self).__name__} has no field '{name}'")
        self._data[name] = self._cast(definition, value)

    def get(self, name: str, default: Any = None) -> Any:
        value = self._data.get(name)
        return default if value is None else value

    @property
    def id(self) -> str:
        return self._id

    @property
    def is_new(self) -> bool:
        """True until the document has been saved or loaded from storage."""
        return self._is_new

    @property
    def schema(self) -> Schema:
        return self._schema

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict keyed by field name plus ``_id``."""
        result: dict[str, Any] = {"_id": self._id}
        for name in self._schema.fields:
            result[name] = _serialize(self._data.get(name))
        return result

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.to_dict()!r})"

    # ------------------------------------------------------------------
    # Lifecycle operations
    # ------------------------------------------------------------------

    async def init(self, raw: dict[str, Any]) -> Document:
        """Hydrate this document from stored data through the init hooks."""
        return await self._engine.run("init", self._schema.hooks, self, lambda: self._populate(raw))

    async def validate(self) -> Document:
        """Run the validate hooks around the field checks.

        Raises:
            DocumentValidationError: If any field (or embedded field) is invalid
        """
        return await self._engine.run("validate", self._schema.hooks, self, self._check)

    async def save(self) -> Document:
        """Validate, then run the save hooks around the write."""
        await self.validate()
        return await self._engine.run("save", self._schema.hooks, self, self._persist)

    async def remove(self) -> Document:
        """Run the remove hooks around the delete."""
        return await self._engine.run("remove", self._schema.hooks, self, self._delete)

    # ------------------------------------------------------------------
    # Core actions
    # ------------------------------------------------------------------

    async def _populate(self, raw: dict[str, Any]) -> None:
        if "_id" in raw:
            self._id = raw["_id"]
        for name, definition in self._schema.fields.items():
            value = raw[name] if name in raw else definition.default_value()
            if definition.schema is not None and value is not None:
                value = await self._hydrate_embedded(definition, value)
            else:
                value = self._cast(definition, value)
            self._data[name] = value
        self._is_new = False

    async def _hydrate_embedded(self, definition: FieldDefinition, value: Any) -> Any:
        if definition.type != "array":
            child = EmbeddedDocument(definition.schema, parent=self, apply_defaults=False)
            return await child.init(value)

        items = []
        for item in value:
            child = EmbeddedDocument(definition.schema, parent=self, apply_defaults=False)
            items.append(await child.init(item))
        return DocumentArray(self, definition, items)

    async def _check(self) -> None:
        errors: list[FieldError] = []
        for name, definition in self._schema.fields.items():
            errors.extend(definition.check(self._data.get(name), name))

        for path, child in self._embedded_documents():
            try:
                await child.validate()
            except DocumentValidationError as e:
                errors.extend(
                    FieldError(f"{path}.{err.field}", err.message, err.code)
                    for err in e.errors
                )

        if errors:
            raise DocumentValidationError(errors)

    async def _save_embedded(self) -> None:
        for _, child in self._embedded_documents():
            await child.save()

    async def _persist(self) -> None:
        await self._save_embedded()
        self._require_model().write(self)
        self._is_new = False

    def _delete(self) -> None:
        self._require_model().delete(self)

    def _require_model(self) -> Model:
        if self._model is None:
            raise DocForgeError(f"{type(self).__name__} is not bound to a model")
        return self._model

    # ------------------------------------------------------------------
    # Embedded documents
    # ------------------------------------------------------------------

    def _cast(self, definition: FieldDefinition, value: Any) -> Any:
        if definition.schema is None or value is None:
            if isinstance(value, list):
                return list(value)
            return value
        if definition.type == "array":
            return DocumentArray(self, definition, value)
        return self._adopt(definition, value)

    def _adopt(self, definition: FieldDefinition, value: Any) -> EmbeddedDocument:
        if isinstance(value, EmbeddedDocument):
            value._parent = self
            value._engine = self._engine
            return value
        if isinstance(value, Document):
            value = value.to_dict()
        return EmbeddedDocument(definition.schema, value, parent=self)

    def _embedded_documents(self) -> Iterator[tuple[str, EmbeddedDocument]]:
        """Yield (path, child) for every embedded document currently present."""
        for definition in self._schema.embedded_fields():
            value = self._data.get(definition.name)
            if value is None:
                continue
            if definition.type == "array":
                for i, child in enumerate(value):
                    yield f"{definition.name}.{i}", child
            else:
                yield definition.name, value

    def _detach(self, child: EmbeddedDocument) -> None:
        for definition in self._schema.embedded_fields():
            value = self._data.get(definition.name)
            if value is child:
                self._data[definition.name] = None
                return
            if definition.type == "array" and value is not None:
                for i, item in enumerate(value):
                    if item is child:
                        del value[i]
                        return


class EmbeddedDocument(Document):
    """A sub-document stored inside its parent.

    Saving runs only the save hooks; the data is written with the parent.
    Removing detaches it from the parent.
    """

    def __init__(
        self,
        schema: Schema,
        data: dict[str, Any] | None = None,
        *,
        parent: Document,
        apply_defaults: bool = True,
    ):
        self._parent = parent
        super().__init__(schema, data, engine=parent._engine, apply_defaults=apply_defaults)

    @property
    def parent(self) -> Document:
        return self._parent

    async def save(self) -> Document:
        return await self._engine.run("save", self._schema.hooks, self, self._persist)

    async def _persist(self) -> None:
        await self._save_embedded()
        self._is_new = False

    def _delete(self) -> None:
        self._parent._detach(self)


class DocumentArray(list):
    """List of embedded documents that casts dicts on the way in."""

    def __init__(self, parent: Document, definition: FieldDefinition, items: Iterable[Any] = ()):
        self._parent = parent
        self._definition = definition
        super().__init__(self._adopt(item) for item in items)

    def _adopt(self, item: Any) -> EmbeddedDocument:
        return self._parent._adopt(self._definition, item)

    def append(self, item: Any) -> None:
        super().append(self._adopt(item))

    def insert(self, index: int, item: Any) -> None:
        super().insert(index, self._adopt(item))

    def extend(self, items: Iterable[Any]) -> None:
        super().extend(self._adopt(item) for item in items)

    def __iadd__(self, items: Iterable[Any]) -> "DocumentArray":
        self.extend(items)
        return self

    def __setitem__(self, index: Any, value: Any) -> None:
        if isinstance(index, slice):
            super().__setitem__(index, [self._adopt(item) for item in value])
        else:
            super().__setitem__(index, self._adopt(value))


def _serialize(value: Any) -> Any:
    if isinstance(value, Document):
        return value.to_dict()
    if isinstance(value, list):
        return [_serialize(item) for item in value]
    if isinstance(value, dict):
        return {key: _serialize(item) for key, item in value.items()}
    return value
