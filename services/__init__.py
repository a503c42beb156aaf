# -*- coding: utf-8 -*-
"""
Probationer Service Layer
"""

# Lazy imports to avoid circular dependencies
__all__ = [
    "ProbationerApiClient",
    "get_api_client",
    "Notifier",
    "LoggingNotifier",
]


def __getattr__(name):
    """Lazy import to avoid circular dependencies."""
    if name == "ProbationerApiClient":
        from .api_client import ProbationerApiClient
        return ProbationerApiClient
    elif name == "get_api_client":
        from .api_client import get_api_client
        return get_api_client
    elif name == "Notifier":
        from .notifier import Notifier
        return Notifier
    elif name == "LoggingNotifier":
        from .notifier import LoggingNotifier
        return LoggingNotifier
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
