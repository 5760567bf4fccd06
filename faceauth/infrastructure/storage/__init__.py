"""Template store implementations."""
from .memory import InMemoryTemplateStore

__all__ = ["InMemoryTemplateStore"]
