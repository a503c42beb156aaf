# -*- coding: utf-8 -*-
"""
Application entity model.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Dict, Any


class ApplicationStatus(Enum):
    """Server-side lifecycle of a probationer application."""
    NONE = "none"
    PENDING = "pending"
    ACKNOWLEDGED = "acknowledged"
    APPROVED = "approved"
    REJECTED = "rejected"

    @classmethod
    def parse(cls, value: Any) -> "ApplicationStatus":
        text = str(value or "").strip().lower()
        for status in cls:
            if status.value == text:
                return status
        return cls.NONE


@dataclass
class Application:
    """
    Canonical application record as returned by the backend.

    ``record`` keeps the raw payload so stage data can be merged into a draft.
    """

    application_id: Optional[str] = None
    status: ApplicationStatus = ApplicationStatus.NONE
    completion_step: int = 0
    record: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_api(cls, data: Dict[str, Any], application_id: Optional[str] = None) -> "Application":
        """Create Application from an API record."""
        raw_step = data.get("completion_step")
        try:
            completion_step = int(raw_step) if raw_step is not None else 0
        except (TypeError, ValueError):
            completion_step = 0
        completion_step = max(0, min(8, completion_step))

        raw_id = data.get("id", application_id)
        return cls(
            application_id=str(raw_id) if raw_id is not None else None,
            status=ApplicationStatus.parse(data.get("status")),
            completion_step=completion_step,
            record=data,
        )
