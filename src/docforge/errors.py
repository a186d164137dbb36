"""Exception types raised by DocForge."""

from dataclasses import dataclass
from typing import Any


class DocForgeError(Exception):
    """Base class for DocForge errors."""


class HookError(DocForgeError):
    """A hook signalled failure without an exception of its own."""


class SchemaError(DocForgeError):
    """A schema definition could not be resolved."""


@dataclass(frozen=True)
class FieldError:
    """A single field-level validation failure.

    Attributes:
        field: Dotted path of the offending field (e.g. "children.0.name")
        message: Human-readable message
        code: Machine-readable error code (e.g. "REQUIRED")
    """

    field: str
    message: str
    code: str

    def to_dict(self) -> dict[str, Any]:
        return {"field": self.field, "message": self.message, "code": self.code}


class DocumentValidationError(DocForgeError):
    """Raised by the validate operation when one or more fields are invalid."""

    def __init__(self, errors: list[FieldError]):
        self.errors = errors
        details = "; ".join(f"{e.field}: {e.message}" for e in errors)
        super().__init__(f"Validation failed: {details}")
