"""Load schema definitions from YAML files and build Schema objects."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from docforge.errors import SchemaError
from docforge.hooks.registry import HookRegistry
from docforge.hooks.types import Phase
from docforge.schema.types import SCALAR_TYPES, FieldDefinition, Schema, ValidationRules

logger = logging.getLogger(__name__)


@dataclass
class FieldConfig:
    """Field definition from YAML."""

    name: str
    type: str = "string"
    of: str | None = None
    default: Any = None
    options: list[Any] | None = None
    required: bool = False
    min: float | None = None
    max: float | None = None


@dataclass
class HookConfig:
    """Hook reference from YAML."""

    name: str
    description: str = ""


@dataclass
class SchemaConfig:
    name: str
    fields: list[FieldConfig]
    collection: str | None = None
    source: Path | None = None
    # hooks[phase][operation] -> ordered hook references
    hooks: dict[str, dict[str, list[HookConfig]]] = field(default_factory=dict)

    def hook_names(self) -> list[str]:
        return [
            h.name
            for operations in self.hooks.values()
            for hook_list in operations.values()
            for h in hook_list
        ]


class SchemaLoader:
    """Loads schema definitions from ``*.yaml`` files in a directory."""

    def __init__(self, schema_path: Path):
        self.schema_path = schema_path
        self.configs: dict[str, SchemaConfig] = {}
        self._built: dict[str, Schema] = {}

    def load_all(self) -> None:
        """Parse every YAML file in the directory."""
        if not self.schema_path.exists():
            return

        for yaml_file in sorted(self.schema_path.glob("*.yaml")):
            with open(yaml_file) as f:
                data = yaml.safe_load(f)
            if data and "schema" in data:
                config = self._resolve_schema(data, yaml_file)
                if config.name in self.configs:
                    raise SchemaError(
                        f"Schema '{config.name}' is defined twice "
                        f"({self.configs[config.name].source} and {yaml_file})"
                    )
                self.configs[config.name] = config

    def _resolve_schema(self, data: dict, source: Path) -> SchemaConfig:
        return SchemaConfig(
            name=data["schema"],
            fields=[self._resolve_field(f) for f in data.get("fields") or []],
            collection=data.get("collection"),
            source=source,
            hooks=self._resolve_hooks(data.get("hooks") or {}),
        )

    def _resolve_field(self, data: dict) -> FieldConfig:
        validation = data.get("validation") or {}
        return FieldConfig(
            name=data["name"],
            type=data.get("type", "string"),
            of=data.get("of"),
            default=data.get("default"),
            options=data.get("options"),
            required=validation.get("required", False),
            min=validation.get("min"),
            max=validation.get("max"),
        )

    def _resolve_hooks(self, data: dict) -> dict[str, dict[str, list[HookConfig]]]:
        """Convert the hooks mapping to HookConfig lists by phase and operation."""
        hooks: dict[str, dict[str, list[HookConfig]]] = {}
        for phase in (p.value for p in Phase):
            operations = data.get(phase) or {}
            for operation, hook_list in operations.items():
                if isinstance(hook_list, list):
                    hooks.setdefault(phase, {})[operation] = [
                        self._resolve_hook(h) for h in hook_list
                    ]
        return hooks

    def _resolve_hook(self, data: dict | str) -> HookConfig:
        if isinstance(data, str):
            return HookConfig(name=data)
        return HookConfig(name=data["name"], description=data.get("description", ""))

    # ------------------------------------------------------------------
    # Building
    # ------------------------------------------------------------------

    def build_schema(self, name: str, *, strict: bool = True) -> Schema:
        """Build (and cache) the Schema for a loaded definition.

        Args:
            name: Schema name
            strict: Raise on unregistered hook names instead of skipping them

        Raises:
            SchemaError: Unknown schema, unknown embedded reference or cycle
            ValueError: Unregistered hook name (strict mode)
        """
        return self._build(name, strict, ())

    def build_all(self, *, strict: bool = True) -> dict[str, Schema]:
        return {name: self.build_schema(name, strict=strict) for name in self.configs}

    def _build(self, name: str, strict: bool, chain: tuple[str, ...]) -> Schema:
        if name in self._built:
            return self._built[name]
        if name in chain:
            cycle = " -> ".join(chain + (name,))
            raise SchemaError(f"Schema reference cycle: {cycle}")
        config = self.configs.get(name)
        if config is None:
            raise SchemaError(f"Schema '{name}' is not defined")

        schema = Schema(name=name)
        for fc in config.fields:
            schema.add_field(self._build_field(fc, strict, chain + (name,)))

        for phase, operations in config.hooks.items():
            for operation, hook_list in operations.items():
                for hc in hook_list:
                    try:
                        fn = HookRegistry.get(hc.name)
                    except ValueError:
                        if strict:
                            raise
                        logger.warning(
                            "Hook '%s' on %s %s '%s' is not registered, skipping",
                            hc.name,
                            name,
                            phase,
                            operation,
                        )
                        continue
                    schema.hooks.register(phase, operation, fn, name=hc.name)

        self._built[name] = schema
        return schema

    def _build_field(self, fc: FieldConfig, strict: bool, chain: tuple[str, ...]) -> FieldDefinition:
        validation = ValidationRules(required=fc.required, min=fc.min, max=fc.max)
        definition = FieldDefinition(
            name=fc.name,
            type=fc.type,
            default=fc.default,
            options=fc.options,
            validation=validation,
        )
        if fc.type == "embedded":
            if not fc.of:
                raise SchemaError(f"Embedded field '{fc.name}' needs 'of'")
            definition.schema = self._build(fc.of, strict, chain)
        elif fc.type == "array" and fc.of:
            if fc.of in SCALAR_TYPES:
                definition.item_type = fc.of
            else:
                definition.schema = self._build(fc.of, strict, chain)
        return definition

    def unresolved_hooks(self) -> list[str]:
        """Hook names referenced by loaded schemas but not registered."""
        names = {n for config in self.configs.values() for n in config.hook_names()}
        return sorted(n for n in names if not HookRegistry.is_registered(n))

    def get_config(self, name: str) -> SchemaConfig | None:
        return self.configs.get(name)

    def list_schemas(self) -> list[str]:
        return sorted(self.configs)
