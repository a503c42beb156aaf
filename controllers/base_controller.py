# -*- coding: utf-8 -*-
"""
Base Controller
===============
Base class for the application's controllers.

Provides the result type returned by controller operations and the
busy/error state shared by every controller.
"""

from dataclasses import dataclass
from typing import Callable, Generic, List, Optional, TypeVar

from PyQt5.QtCore import QObject, pyqtSignal

from services.error_mapper import map_exception
from utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar('T')


@dataclass
class OperationResult(Generic[T]):
    """Result of a controller operation."""
    success: bool
    data: Optional[T] = None
    message: str = ""
    errors: List[str] = None

    def __post_init__(self):
        if self.errors is None:
            self.errors = []

    @classmethod
    def ok(cls, data: T = None, message: str = "") -> 'OperationResult[T]':
        """Create a successful result."""
        return cls(success=True, data=data, message=message)

    @classmethod
    def fail(cls, message: str, errors: List[str] = None) -> 'OperationResult[T]':
        """Create a failed result."""
        return cls(success=False, message=message, errors=errors or [])


class BaseController(QObject):
    """
    Base controller class.

    Provides:
    - Busy and error state with change signals
    - Operation lifecycle signals
    - Exception to OperationResult translation
    """

    operation_started = pyqtSignal(str)  # operation name
    operation_completed = pyqtSignal(str, bool)  # operation name, success
    busy_changed = pyqtSignal(bool)
    error_changed = pyqtSignal(str)  # "" when cleared
    data_changed = pyqtSignal()

    def __init__(self, parent=None):
        super().__init__(parent)
        self._is_busy = False
        self._last_error = ""

    @property
    def is_busy(self) -> bool:
        """Check if controller is performing an operation."""
        return self._is_busy

    @property
    def last_error(self) -> str:
        """Get last error message ("" when none)."""
        return self._last_error

    def _set_busy(self, busy: bool):
        if self._is_busy == busy:
            return
        self._is_busy = busy
        self.busy_changed.emit(busy)

    def _set_error(self, error: str):
        if error:
            logger.error(f"{self.__class__.__name__}: {error}")
        if self._last_error == error:
            return
        self._last_error = error
        self.error_changed.emit(error)

    def _log_operation(self, operation: str, **kwargs):
        """Log an operation."""
        logger.info(f"{self.__class__.__name__}.{operation}: {kwargs}")

    def execute_with_error_handling(
        self,
        operation: str,
        func: Callable,
        *args,
        **kwargs
    ) -> OperationResult:
        """Run func and translate its outcome into an OperationResult."""
        self.operation_started.emit(operation)
        try:
            result = func(*args, **kwargs)
        except Exception as e:
            message = map_exception(e, context=operation)
            logger.warning(f"{operation} failed: {e}")
            self.operation_completed.emit(operation, False)
            return OperationResult.fail(message=message)
        self.operation_completed.emit(operation, True)
        return OperationResult.ok(data=result)
