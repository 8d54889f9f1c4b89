"""Template store implementations."""

from squadron.templates.stores.inmemory import InMemoryTemplateStore
from squadron.templates.stores.postgres import PostgresTemplateStore

__all__ = ["InMemoryTemplateStore", "PostgresTemplateStore"]
