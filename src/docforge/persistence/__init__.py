"""Persistence layer - document storage adapters."""

from docforge.persistence.adapter import PersistenceAdapter
from docforge.persistence.config import DatabaseConfig, create_adapter

__all__ = ["PersistenceAdapter", "DatabaseConfig", "create_adapter"]
