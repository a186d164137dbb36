"""Database: owns the persistence adapter and the model registry."""

import logging

from docforge.document.model import Model
from docforge.hooks.service import HookEngine
from docforge.persistence.adapter import PersistenceAdapter
from docforge.persistence.config import DatabaseConfig, create_adapter
from docforge.schema.types import Schema

logger = logging.getLogger(__name__)


class Database:
    """Connection-scoped registry of models.

    Usage:
        with Database.from_config(DatabaseConfig(url="memory://")) as db:
            Book = db.model("Book", Schema({"title": str}))
    """

    def __init__(self, adapter: PersistenceAdapter, engine: HookEngine | None = None):
        self.adapter = adapter
        self.engine = engine or HookEngine()
        self._models: dict[str, Model] = {}
        self._connected = False

    @classmethod
    def from_config(cls, config: DatabaseConfig | None = None) -> "Database":
        """Create a Database (not yet connected) from config or the environment."""
        return cls(create_adapter(config or DatabaseConfig.from_env()))

    def connect(self) -> "Database":
        self.adapter.connect()
        self._connected = True
        for model in self._models.values():
            model.initialize()
        return self

    def close(self) -> None:
        self.adapter.close()
        self._connected = False

    def __enter__(self) -> "Database":
        return self.connect()

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def model(
        self,
        name: str,
        schema: Schema | None = None,
        *,
        collection: str | None = None,
    ) -> Model:
        """Register a model, or look one up when no schema is given.

        Raises:
            ValueError: Looking up an unknown model, or re-registering a
                name with a different schema
        """
        existing = self._models.get(name)
        if schema is None:
            if existing is None:
                raise ValueError(f"Model '{name}' is not registered")
            return existing

        if existing is not None:
            if existing.schema is not schema:
                raise ValueError(f"Model '{name}' is already registered with another schema")
            return existing

        model = Model(name, schema, self.adapter, collection=collection, engine=self.engine)
        self._models[name] = model
        if self._connected:
            model.initialize()
        logger.debug("Registered model %s (collection %s)", name, model.collection)
        return model

    def list_models(self) -> list[str]:
        return sorted(self._models)
