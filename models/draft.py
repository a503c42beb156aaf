# -*- coding: utf-8 -*-
"""
Draft model - locally persisted wizard state.

A draft is stored under a typed key: the reserved "new" key until stage 1
mints an application id, then the id-bound key.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Union, Dict, Any

from models.stages import StagePayloads

DRAFT_KEY_PREFIX = "probationer_wizard_"
NEW_DRAFT_STORAGE_KEY = "probationer_wizard_draft"
LAST_ACTIVE_STORAGE_KEY = "probationer_wizard_last"


@dataclass(frozen=True)
class NewDraftKey:
    """Key of the anonymous draft (no application id yet)."""

    @property
    def storage_key(self) -> str:
        return NEW_DRAFT_STORAGE_KEY


@dataclass(frozen=True)
class ExistingDraftKey:
    """Key of a draft bound to a server application."""
    application_id: str

    @property
    def storage_key(self) -> str:
        return f"{DRAFT_KEY_PREFIX}{self.application_id}"


DraftKey = Union[NewDraftKey, ExistingDraftKey]


def draft_key_for(application_id: Optional[str]) -> DraftKey:
    return ExistingDraftKey(str(application_id)) if application_id else NewDraftKey()


def parse_storage_key(storage_key: Optional[str]) -> Optional[DraftKey]:
    """Turn a persisted key string back into a typed key."""
    if not storage_key:
        return None
    if storage_key == NEW_DRAFT_STORAGE_KEY:
        return NewDraftKey()
    if storage_key.startswith(DRAFT_KEY_PREFIX):
        application_id = storage_key[len(DRAFT_KEY_PREFIX):]
        if application_id:
            return ExistingDraftKey(application_id)
    return None


@dataclass
class Draft:
    """In-progress wizard state."""

    step: int = 1
    application_id: Optional[str] = None
    completion_step: int = 0
    payloads: StagePayloads = field(default_factory=StagePayloads)
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def key(self) -> DraftKey:
        return draft_key_for(self.application_id)

    def touch(self):
        self.timestamp = datetime.now()

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a JSON-safe dictionary (live file handles excluded)."""
        data = {
            "step": self.step,
            "application_id": self.application_id,
            "completion_step": self.completion_step,
            "timestamp": self.timestamp.isoformat(),
        }
        data.update(self.payloads.to_dict())
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Draft":
        """Restore a draft; unreadable fields fall back to defaults."""
        try:
            step = int(data.get("step") or 1)
        except (TypeError, ValueError):
            step = 1
        try:
            completion_step = int(data.get("completion_step") or 0)
        except (TypeError, ValueError):
            completion_step = 0

        draft = cls(
            step=max(1, min(8, step)),
            application_id=str(data["application_id"]) if data.get("application_id") else None,
            completion_step=max(0, min(8, completion_step)),
            payloads=StagePayloads.from_dict(data),
        )
        if isinstance(data.get("timestamp"), str):
            try:
                draft.timestamp = datetime.fromisoformat(data["timestamp"])
            except ValueError:
                pass
        return draft
