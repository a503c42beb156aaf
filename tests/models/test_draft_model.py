# -*- coding: utf-8 -*-
"""
Tests for draft keys, stage payloads and attachment serialization.
"""

from models.attachment import (
    PendingAttachment, CommittedAttachment, attachment_from_dict, attachment_to_dict
)
from models.draft import (
    Draft, NewDraftKey, ExistingDraftKey, draft_key_for, parse_storage_key,
    NEW_DRAFT_STORAGE_KEY
)
from models.stages import StagePayloads, QualificationRow, ExamResultRow, is_pristine


class TestDraftKeys:
    """Typed keys and their storage strings."""

    def test_storage_keys(self):
        assert NewDraftKey().storage_key == "probationer_wizard_draft"
        assert ExistingDraftKey("A1").storage_key == "probationer_wizard_A1"

    def test_key_for_id(self):
        assert draft_key_for(None) == NewDraftKey()
        assert draft_key_for("A1") == ExistingDraftKey("A1")

    def test_parse_storage_key(self):
        assert parse_storage_key(NEW_DRAFT_STORAGE_KEY) == NewDraftKey()
        assert parse_storage_key("probationer_wizard_A1") == ExistingDraftKey("A1")
        assert parse_storage_key("probationer_wizard_") is None
        assert parse_storage_key("something_else") is None
        assert parse_storage_key(None) is None


class TestAttachments:
    """Pending vs committed attachments."""

    def test_pending_from_path(self, make_file):
        path = make_file("photo.png", size=2048)
        attachment = PendingAttachment.from_path(path)
        assert attachment.is_live
        assert attachment.is_image
        assert attachment.mime_type == "image/png"
        assert attachment.size == 2048
        assert attachment.display_name == "photo.png"

    def test_pending_loses_handle_when_persisted(self):
        attachment = PendingAttachment(handle="/tmp/a.pdf", display_name="a.pdf", mime_type="application/pdf")
        restored = attachment_from_dict(attachment_to_dict(attachment))
        assert isinstance(restored, PendingAttachment)
        assert restored.display_name == "a.pdf"
        assert not restored.is_live

    def test_committed_survives(self):
        attachment = CommittedAttachment(remote_ref="https://h/storage/c.pdf", display_name="c.pdf")
        assert attachment_from_dict(attachment_to_dict(attachment)) == attachment

    def test_empty_values(self):
        assert attachment_to_dict(None) is None
        assert attachment_from_dict(None) is None
        assert attachment_from_dict({"kind": "pending"}) is None


class TestStagePayloads:
    """Row lists and pristine detection."""

    def test_lists_start_pristine(self):
        payloads = StagePayloads()
        for stage in range(2, 8):
            assert is_pristine(payloads.rows(stage))

    def test_set_rows_never_empty(self):
        payloads = StagePayloads()
        payloads.set_rows(3, [])
        assert len(payloads.exam_results) == 1
        assert payloads.exam_results[0].is_blank()

    def test_certificate_makes_row_non_blank(self):
        row = QualificationRow(certificate=CommittedAttachment(remote_ref="u", display_name="c.pdf"))
        assert not row.is_blank()
        assert not is_pristine([row])

    def test_subjects_split(self):
        row = ExamResultRow(subjects_csv="Maths, English ,, Physics")
        assert row.subjects == ["Maths", "English", "Physics"]


class TestDraftSerialization:
    """Draft dict form."""

    def test_round_trip(self):
        draft = Draft(step=3, application_id="A1", completion_step=2)
        draft.payloads.personal.surname = "Doe"
        draft.payloads.qualifications = [QualificationRow(institution="UNILAG", qualification="BSc", year="2015")]

        restored = Draft.from_dict(draft.to_dict())

        assert restored.step == 3
        assert restored.application_id == "A1"
        assert restored.completion_step == 2
        assert restored.payloads.to_dict() == draft.payloads.to_dict()

    def test_out_of_range_values_are_clamped(self):
        restored = Draft.from_dict({"step": 42, "completion_step": -3})
        assert restored.step == 8
        assert restored.completion_step == 0

    def test_unreadable_values_fall_back(self):
        restored = Draft.from_dict({"step": "abc", "timestamp": "not a date"})
        assert restored.step == 1
        assert restored.application_id is None


class TestApplication:
    """Server record parsing."""

    def test_from_api(self):
        from models.application import Application, ApplicationStatus

        application = Application.from_api({"id": 12, "status": "Pending", "completion_step": "3"})

        assert application.application_id == "12"
        assert application.status == ApplicationStatus.PENDING
        assert application.completion_step == 3

    def test_bad_completion_step(self):
        from models.application import Application, ApplicationStatus

        application = Application.from_api({"completion_step": "x", "status": "weird"}, application_id="A1")

        assert application.application_id == "A1"
        assert application.completion_step == 0
        assert application.status == ApplicationStatus.NONE
