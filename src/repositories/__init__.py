"""Database repository helpers."""

from repositories.store import SqlAlchemyDocumentStore, translate_errors
from repositories.unit_of_work import SCORING_TABLES, ensure_scoring_schema, store_scope_factory

__all__ = [
    "SCORING_TABLES",
    "SqlAlchemyDocumentStore",
    "ensure_scoring_schema",
    "store_scope_factory",
    "translate_errors",
]
