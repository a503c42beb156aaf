# -*- coding: utf-8 -*-
"""Centralized error handler for UI layer."""

from PyQt5.QtWidgets import QWidget, QMessageBox

from services.notifier import Notifier
from utils.logger import get_logger

logger = get_logger(__name__)


class ErrorHandler:
    """Shows user-facing messages as dialogs."""

    @staticmethod
    def show_error(parent: QWidget, message: str, title: str = "Error"):
        QMessageBox.critical(parent, title, message)

    @staticmethod
    def show_success(parent: QWidget, message: str, title: str = "Success"):
        QMessageBox.information(parent, title, message)


class DialogNotifier(Notifier):
    """
    Notifier for the desktop UI.

    Success and info messages go to a status callback (a banner label);
    errors open a dialog.
    """

    def __init__(self, parent: QWidget, status_callback=None):
        self.parent = parent
        self.status_callback = status_callback

    def success(self, message: str):
        logger.info(f"[NOTIFY] {message}")
        if self.status_callback:
            self.status_callback(message)

    def info(self, message: str):
        logger.info(f"[NOTIFY] {message}")
        if self.status_callback:
            self.status_callback(message)
        else:
            ErrorHandler.show_success(self.parent, message, "Notice")

    def error(self, message: str):
        logger.warning(f"[NOTIFY] {message}")
        ErrorHandler.show_error(self.parent, message)
