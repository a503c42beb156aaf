# -*- coding: utf-8 -*-
"""
Probationer Wizard Repository Layer
"""

# Lazy imports to avoid circular dependencies
__all__ = [
    "Database",
    "DraftRepository",
    "SQLiteDraftRepository",
    "InMemoryDraftRepository",
]


def __getattr__(name):
    """Lazy import to avoid circular dependencies."""
    if name == "Database":
        from .database import Database
        return Database
    elif name in ("DraftRepository", "SQLiteDraftRepository", "InMemoryDraftRepository"):
        from . import draft_repository
        return getattr(draft_repository, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
