"""Schemas: field definitions plus lifecycle hooks, built in code or from YAML."""

from docforge.schema.loader import SchemaLoader
from docforge.schema.types import FIELD_TYPES, FieldDefinition, Schema, ValidationRules

__all__ = ["FIELD_TYPES", "FieldDefinition", "Schema", "SchemaLoader", "ValidationRules"]
