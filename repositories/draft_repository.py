# -*- coding: utf-8 -*-
"""
Draft repository - durable local persistence of wizard state.

Keys are typed (NewDraftKey | ExistingDraftKey); the storage strings are
derived from them in one place so callers never build keys by hand.
"""

import json
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional, Dict, Any

from models.draft import (
    Draft, DraftKey, NewDraftKey, ExistingDraftKey,
    LAST_ACTIVE_STORAGE_KEY, parse_storage_key
)
from repositories.database import Database
from utils.logger import get_logger

logger = get_logger(__name__)


class DraftRepository(ABC):
    """
    Repository for wizard drafts.

    Subclasses provide raw record storage; key handling, serialization,
    the last-active pointer and new->id migration live here.
    """

    # =========================================================================
    # Storage primitives
    # =========================================================================

    @abstractmethod
    def _read(self, storage_key: str) -> Optional[Dict[str, Any]]:
        pass

    @abstractmethod
    def _write(self, storage_key: str, data: Dict[str, Any]):
        pass

    @abstractmethod
    def _remove(self, storage_key: str):
        pass

    @abstractmethod
    def _get_pointer(self) -> Optional[str]:
        pass

    @abstractmethod
    def _set_pointer(self, storage_key: Optional[str]):
        pass

    # =========================================================================
    # Public API
    # =========================================================================

    def save(self, key: DraftKey, draft: Draft):
        """Overwrite the draft stored under key and mark it last active."""
        draft.touch()
        self._write(key.storage_key, draft.to_dict())
        self._set_pointer(key.storage_key)
        logger.debug(f"Draft saved: {key.storage_key} (step {draft.step})")

    def load(self, key: DraftKey) -> Optional[Draft]:
        """Load the draft stored under key, or None."""
        data = self._read(key.storage_key)
        if not data:
            return None
        draft = Draft.from_dict(data)
        if isinstance(key, ExistingDraftKey) and not draft.application_id:
            draft.application_id = key.application_id
        return draft

    def exists(self, key: DraftKey) -> bool:
        return self._read(key.storage_key) is not None

    def delete(self, key: DraftKey):
        """Remove a draft; clears the pointer when it referenced this key."""
        self._remove(key.storage_key)
        if self._get_pointer() == key.storage_key:
            self._set_pointer(None)
        logger.debug(f"Draft deleted: {key.storage_key}")

    def last_active_key(self) -> Optional[DraftKey]:
        """Key of the most recently saved draft, if it still exists."""
        key = parse_storage_key(self._get_pointer())
        if key is not None and self.exists(key):
            return key
        return None

    def migrate(self, application_id: str) -> bool:
        """
        Move the anonymous draft to the id-bound key (copy, then clear).

        Returns:
            True if an anonymous draft was migrated
        """
        new_key = NewDraftKey()
        target = ExistingDraftKey(str(application_id))
        data = self._read(new_key.storage_key)
        if data is None:
            return False

        data["application_id"] = target.application_id
        self._write(target.storage_key, data)
        self._remove(new_key.storage_key)
        self._set_pointer(target.storage_key)
        logger.info(f"Draft migrated: {new_key.storage_key} -> {target.storage_key}")
        return True


class SQLiteDraftRepository(DraftRepository):
    """Drafts stored in the local SQLite database."""

    def __init__(self, db: Optional[Database] = None):
        self.db = db or Database()
        self.db.initialize()

    def _read(self, storage_key: str) -> Optional[Dict[str, Any]]:
        row = self.db.fetch_one("SELECT payload FROM drafts WHERE draft_key = ?", (storage_key,))
        if not row:
            return None
        try:
            return json.loads(row["payload"])
        except (TypeError, ValueError) as e:
            logger.warning(f"Unreadable draft {storage_key}: {e}")
            return None

    def _write(self, storage_key: str, data: Dict[str, Any]):
        self.db.execute(
            """
            INSERT INTO drafts (draft_key, application_id, step, payload, updated_at)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT(draft_key) DO UPDATE SET
                application_id = excluded.application_id,
                step = excluded.step,
                payload = excluded.payload,
                updated_at = excluded.updated_at
            """,
            (
                storage_key,
                data.get("application_id"),
                data.get("step", 1),
                json.dumps(data, ensure_ascii=False, default=str),
                datetime.now().isoformat(),
            )
        )

    def _remove(self, storage_key: str):
        self.db.execute("DELETE FROM drafts WHERE draft_key = ?", (storage_key,))

    def _get_pointer(self) -> Optional[str]:
        row = self.db.fetch_one(
            "SELECT meta_value FROM draft_meta WHERE meta_key = ?", (LAST_ACTIVE_STORAGE_KEY,)
        )
        return row["meta_value"] if row else None

    def _set_pointer(self, storage_key: Optional[str]):
        if storage_key is None:
            self.db.execute("DELETE FROM draft_meta WHERE meta_key = ?", (LAST_ACTIVE_STORAGE_KEY,))
            return
        self.db.execute(
            """
            INSERT INTO draft_meta (meta_key, meta_value) VALUES (?, ?)
            ON CONFLICT(meta_key) DO UPDATE SET meta_value = excluded.meta_value
            """,
            (LAST_ACTIVE_STORAGE_KEY, storage_key)
        )


class InMemoryDraftRepository(DraftRepository):
    """Process-local drafts; used by tests and throwaway sessions."""

    def __init__(self):
        self.records: Dict[str, str] = {}
        self.pointer: Optional[str] = None

    def _read(self, storage_key: str) -> Optional[Dict[str, Any]]:
        raw = self.records.get(storage_key)
        return json.loads(raw) if raw is not None else None

    def _write(self, storage_key: str, data: Dict[str, Any]):
        # Serialized like the durable store so both behave the same
        self.records[storage_key] = json.dumps(data, ensure_ascii=False, default=str)

    def _remove(self, storage_key: str):
        self.records.pop(storage_key, None)

    def _get_pointer(self) -> Optional[str]:
        return self.pointer

    def _set_pointer(self, storage_key: Optional[str]):
        self.pointer = storage_key
