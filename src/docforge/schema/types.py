"""Schema types for DocForge.

A Schema describes the fields of a document and owns the hook lists that
run around its lifecycle operations. Schemas can embed other schemas,
either as a single sub-document or as an array of sub-documents.
"""

from dataclasses import dataclass, field
from typing import Any

from docforge.errors import FieldError, SchemaError
from docforge.hooks.registry import HookFn, HookSet
from docforge.hooks.types import HookStyle, Phase

SCALAR_TYPES = ("string", "number", "integer", "boolean", "mixed")
FIELD_TYPES = SCALAR_TYPES + ("embedded", "array")

# Names taken by Document attributes and methods
RESERVED_NAMES = frozenset(
    {"id", "is_new", "schema", "parent", "get", "to_dict", "init", "validate", "save", "remove"}
)

_PYTHON_TYPES: dict[type, str] = {
    str: "string",
    int: "integer",
    float: "number",
    bool: "boolean",
    dict: "mixed",
}


@dataclass
class ValidationRules:
    required: bool = False
    min: float | None = None
    max: float | None = None


@dataclass
class FieldDefinition:
    """A single document field.

    Attributes:
        name: Field name
        type: One of FIELD_TYPES
        default: Value (or zero-argument callable) used when the field is missing
        options: Allowed values, if the field is an enum
        validation: required/min/max rules
        schema: Embedded schema for "embedded" fields and arrays of sub-documents
        item_type: Scalar item type for arrays of scalars
    """

    name: str
    type: str = "string"
    default: Any = None
    options: list[Any] | None = None
    validation: ValidationRules = field(default_factory=ValidationRules)
    schema: "Schema | None" = None
    item_type: str | None = None

    @property
    def is_embedded(self) -> bool:
        return self.schema is not None

    def default_value(self) -> Any:
        if callable(self.default):
            return self.default()
        if self.type == "array" and self.default is None:
            return []
        return self.default

    def check(self, value: Any, path: str) -> list[FieldError]:
        """Check a scalar value against this field's rules.

        Embedded sub-documents are validated through their own validate
        operation, not here.
        """
        if value is None:
            if self.validation.required:
                return [FieldError(path, f"Field '{path}' is required", "REQUIRED")]
            return []

        if self.type == "array":
            if not isinstance(value, list):
                return [_type_error(path, "array")]
            if self.validation.required and not value:
                return [FieldError(path, f"Field '{path}' is required", "REQUIRED")]
            if self.item_type is None:
                return []
            errors: list[FieldError] = []
            for i, item in enumerate(value):
                if item is not None and not _matches(self.item_type, item):
                    errors.append(_type_error(f"{path}.{i}", self.item_type))
            return errors

        if self.type == "embedded":
            return []
        if not _matches(self.type, value):
            return [_type_error(path, self.type)]

        errors = []
        if self.options is not None and value not in self.options:
            allowed = ", ".join(str(o) for o in self.options)
            errors.append(
                FieldError(path, f"Field '{path}' must be one of: {allowed}", "INVALID_OPTION")
            )
        if self.type in ("number", "integer"):
            if self.validation.min is not None and value < self.validation.min:
                errors.append(
                    FieldError(path, f"Field '{path}' must be at least {self.validation.min}", "MIN")
                )
            if self.validation.max is not None and value > self.validation.max:
                errors.append(
                    FieldError(path, f"Field '{path}' must be at most {self.validation.max}", "MAX")
                )
        return errors


def _matches(type_name: str, value: Any) -> bool:
    if type_name == "string":
        return isinstance(value, str)
    if type_name == "boolean":
        return isinstance(value, bool)
    if type_name == "integer":
        return isinstance(value, int) and not isinstance(value, bool)
    if type_name == "number":
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    return True


def _type_error(path: str, type_name: str) -> FieldError:
    return FieldError(path, f"Field '{path}' must be of type {type_name}", "INVALID_TYPE")


class Schema:
    """Field definitions plus lifecycle hooks for one kind of document.

    Example:
        child = Schema({"name": "string"})
        parent = Schema({"name": str, "children": [child]})

        @parent.pre("save")
        def check(doc, next):
            next()
    """

    def __init__(self, definition: dict[str, Any] | None = None, *, name: str | None = None):
        self.name = name
        self.fields: dict[str, FieldDefinition] = {}
        self.hooks = HookSet()
        for field_name, value in (definition or {}).items():
            self.add_field(parse_field(field_name, value))

    def add_field(self, definition: FieldDefinition) -> None:
        if definition.type not in FIELD_TYPES:
            raise SchemaError(
                f"Field '{definition.name}' has unknown type '{definition.type}'"
            )
        if definition.name.startswith("_") or definition.name in RESERVED_NAMES:
            raise SchemaError(f"Field name '{definition.name}' is reserved")
        self.fields[definition.name] = definition

    def embedded_fields(self) -> list[FieldDefinition]:
        return [f for f in self.fields.values() if f.is_embedded]

    def pre(self, operation: str, fn: HookFn | None = None, *, style: HookStyle | None = None):
        """Register a pre hook. Usable directly or as a decorator."""
        return self._register(Phase.PRE, operation, fn, style)

    def post(self, operation: str, fn: HookFn | None = None, *, style: HookStyle | None = None):
        """Register a post hook. Usable directly or as a decorator."""
        return self._register(Phase.POST, operation, fn, style)

    def _register(
        self,
        phase: Phase,
        operation: str,
        fn: HookFn | None,
        style: HookStyle | None,
    ) -> Any:
        if fn is not None:
            self.hooks.register(phase, operation, fn, style=style)
            return fn

        def decorator(hook_fn: HookFn) -> HookFn:
            self.hooks.register(phase, operation, hook_fn, style=style)
            return hook_fn

        return decorator

    def __repr__(self) -> str:
        return f"Schema(name={self.name!r}, fields={list(self.fields)})"


def parse_field(name: str, value: Any) -> FieldDefinition:
    """Build a FieldDefinition from the shorthand accepted by Schema().

    Accepted forms: a type name, a Python type, a Schema, a one-element
    list (array of that item), or a dict with type/default/options/
    required/min/max/of keys.
    """
    if isinstance(value, Schema):
        return FieldDefinition(name=name, type="embedded", schema=value)
    if isinstance(value, (str, type)):
        field_type = _type_name(name, value)
        if field_type == "embedded":
            raise SchemaError(f"Embedded field '{name}' needs a Schema, not a type name")
        return FieldDefinition(name=name, type=field_type)
    if isinstance(value, list):
        if len(value) > 1:
            raise SchemaError(f"Array field '{name}' must declare a single item type")
        return _array_field(name, value[0] if value else "mixed")
    if isinstance(value, dict):
        return _dict_field(name, value)
    raise SchemaError(f"Cannot interpret definition of field '{name}': {value!r}")


def _type_name(name: str, value: str | type) -> str:
    if isinstance(value, type):
        if value not in _PYTHON_TYPES:
            raise SchemaError(f"Field '{name}' uses unsupported type {value.__name__}")
        return _PYTHON_TYPES[value]
    if value not in FIELD_TYPES:
        raise SchemaError(f"Field '{name}' has unknown type '{value}'")
    return value


def _array_field(name: str, item: Any, **kwargs: Any) -> FieldDefinition:
    if isinstance(item, Schema):
        return FieldDefinition(name=name, type="array", schema=item, **kwargs)
    item_type = _type_name(name, item)
    if item_type not in SCALAR_TYPES:
        raise SchemaError(f"Array field '{name}' cannot hold '{item_type}' items")
    return FieldDefinition(name=name, type="array", item_type=item_type, **kwargs)


def _dict_field(name: str, value: dict[str, Any]) -> FieldDefinition:
    kwargs: dict[str, Any] = {
        "default": value.get("default"),
        "options": value.get("options"),
        "validation": ValidationRules(
            required=value.get("required", False),
            min=value.get("min"),
            max=value.get("max"),
        ),
    }
    field_type = value.get("type", "string")
    if isinstance(field_type, Schema):
        return FieldDefinition(name=name, type="embedded", schema=field_type, **kwargs)
    if isinstance(field_type, list):
        return _array_field(name, field_type[0] if field_type else "mixed", **kwargs)

    field_type = _type_name(name, field_type)
    if field_type == "array":
        return _array_field(name, value.get("of", "mixed"), **kwargs)
    if field_type == "embedded":
        of = value.get("of")
        if not isinstance(of, Schema):
            raise SchemaError(f"Embedded field '{name}' needs a Schema in 'of'")
        return FieldDefinition(name=name, type="embedded", schema=of, **kwargs)
    return FieldDefinition(name=name, type=field_type, **kwargs)

