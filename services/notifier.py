# -*- coding: utf-8 -*-
"""
Notifier port.

Controllers report user-facing outcomes through an injected notifier rather
than a global broadcast. The default implementation logs; the UI installs
one that shows toasts.
"""

from typing import List, Tuple

from utils.logger import get_logger

logger = get_logger(__name__)


class Notifier:
    """Sink for user-facing success, error and info messages."""

    def success(self, message: str):
        raise NotImplementedError

    def error(self, message: str):
        raise NotImplementedError

    def info(self, message: str):
        raise NotImplementedError


class LoggingNotifier(Notifier):
    """Writes notifications to the application log."""

    def success(self, message: str):
        logger.info(f"[NOTIFY] {message}")

    def error(self, message: str):
        logger.warning(f"[NOTIFY] {message}")

    def info(self, message: str):
        logger.info(f"[NOTIFY] {message}")


class RecordingNotifier(Notifier):
    """Keeps every notification as a (level, message) pair."""

    def __init__(self):
        self.messages: List[Tuple[str, str]] = []

    def success(self, message: str):
        self.messages.append(("success", message))

    def error(self, message: str):
        self.messages.append(("error", message))

    def info(self, message: str):
        self.messages.append(("info", message))

    def of_level(self, level: str) -> List[str]:
        return [message for lvl, message in self.messages if lvl == level]
