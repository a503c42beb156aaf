# -*- coding: utf-8 -*-
"""
Tests for the draft repositories (in-memory and SQLite).
"""

import pytest

from models.attachment import PendingAttachment
from models.draft import Draft, NewDraftKey, ExistingDraftKey
from models.stages import QualificationRow
from repositories.database import Database
from repositories.draft_repository import InMemoryDraftRepository, SQLiteDraftRepository


@pytest.fixture(params=["memory", "sqlite"])
def repo(request, tmp_path):
    if request.param == "memory":
        return InMemoryDraftRepository()
    return SQLiteDraftRepository(Database(tmp_path / "drafts.db"))


def _draft_with_data(application_id=None):
    draft = Draft(step=2, application_id=application_id)
    draft.payloads.personal.surname = "Doe"
    draft.payloads.personal.photo = PendingAttachment(
        handle="/tmp/me.png", display_name="me.png", mime_type="image/png", size=10
    )
    draft.payloads.qualifications = [QualificationRow(institution="UNILAG", qualification="BSc", year="2015")]
    return draft


class TestDraftRepository:
    """Behaviour shared by every repository."""

    def test_save_then_load(self, repo):
        draft = _draft_with_data()
        repo.save(NewDraftKey(), draft)

        loaded = repo.load(NewDraftKey())

        assert loaded.step == 2
        assert loaded.payloads.personal.surname == "Doe"
        assert loaded.payloads.qualifications[0].institution == "UNILAG"
        # Live file handles are not persisted
        assert loaded.payloads.personal.photo.display_name == "me.png"
        assert not loaded.payloads.personal.photo.is_live

    def test_missing_draft(self, repo):
        assert repo.load(ExistingDraftKey("nope")) is None
        assert not repo.exists(NewDraftKey())

    def test_save_overwrites(self, repo):
        draft = _draft_with_data("A1")
        repo.save(ExistingDraftKey("A1"), draft)
        draft.payloads.personal.surname = "Smith"
        repo.save(ExistingDraftKey("A1"), draft)

        assert repo.load(ExistingDraftKey("A1")).payloads.personal.surname == "Smith"

    def test_existing_key_fills_application_id(self, repo):
        repo.save(ExistingDraftKey("A9"), Draft(step=4))
        assert repo.load(ExistingDraftKey("A9")).application_id == "A9"

    def test_last_active_pointer(self, repo):
        repo.save(NewDraftKey(), Draft())
        repo.save(ExistingDraftKey("A1"), Draft(application_id="A1"))
        assert repo.last_active_key() == ExistingDraftKey("A1")

        repo.delete(ExistingDraftKey("A1"))
        assert repo.last_active_key() is None
        assert repo.exists(NewDraftKey())

    def test_migrate_copies_then_clears(self, repo):
        repo.save(NewDraftKey(), _draft_with_data())

        assert repo.migrate("A1") is True

        assert not repo.exists(NewDraftKey())
        migrated = repo.load(ExistingDraftKey("A1"))
        assert migrated.application_id == "A1"
        assert migrated.payloads.personal.surname == "Doe"
        assert repo.last_active_key() == ExistingDraftKey("A1")

    def test_migrate_without_anonymous_draft(self, repo):
        assert repo.migrate("A1") is False
        assert not repo.exists(ExistingDraftKey("A1"))


class TestSQLiteDraftRepository:
    """Durability of the SQLite store."""

    def test_drafts_survive_reopen(self, tmp_path):
        path = tmp_path / "drafts.db"
        first = SQLiteDraftRepository(Database(path))
        first.save(ExistingDraftKey("A1"), _draft_with_data("A1"))
        first.db.close()

        second = SQLiteDraftRepository(Database(path))
        assert second.last_active_key() == ExistingDraftKey("A1")
        assert second.load(ExistingDraftKey("A1")).payloads.personal.surname == "Doe"

    def test_unreadable_payload_is_ignored(self, tmp_path):
        repo = SQLiteDraftRepository(Database(tmp_path / "drafts.db"))
        repo.db.execute(
            "INSERT INTO drafts (draft_key, application_id, step, payload, updated_at) VALUES (?, ?, ?, ?, ?)",
            ("probationer_wizard_draft", None, 1, "{broken", "2026-01-01T00:00:00"),
        )
        assert repo.load(NewDraftKey()) is None
