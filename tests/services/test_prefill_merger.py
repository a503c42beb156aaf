# -*- coding: utf-8 -*-
"""
Tests for the prefill merge policy.
"""

from unittest.mock import MagicMock

import pytest

from models.attachment import CommittedAttachment, PendingAttachment
from models.stages import StagePayloads, QualificationRow, SeminarRow
from services.exceptions import NetworkException, NotFoundException
from services.wizard.prefill_merger import PrefillMerger

BASE_URL = "https://api.test"


@pytest.fixture
def merger():
    return PrefillMerger(base_url=BASE_URL)


def _server_record():
    return {
        "id": 5,
        "completion_step": 4,
        "surname": "Doe",
        "other_names": "Jane",
        "email": "jane@x.com",
        "phone": 8012345678,
        "passport_photo": "/storage/photos/p1.jpg",
        "qualifications": [
            {"institution": "UNILAG", "qualification": "BSc", "year": 2015,
             "certificate_path": "storage/certs/c1.pdf"},
        ],
        "o_level_results": [
            {"exam_type": "WASSCE", "exam_year": "2010", "exam_number": "42",
             "subjects": [{"name": "Maths"}, "English", {"subject": "Physics"}]},
        ],
        "memberships": [{"name": "NIA", "stage": "Part II"}],
        "experiences": [{"company": "ACME", "role": "Intern", "start_date": "2020-01-01"}],
    }


class TestScalarMerge:
    """Fill-only-empty for stage 1 fields."""

    def test_empty_local_takes_all_server_values(self, merger):
        payloads = StagePayloads()
        report = merger.merge(payloads, _server_record())

        personal = payloads.personal
        assert (personal.surname, personal.other_names, personal.email) == ("Doe", "Jane", "jane@x.com")
        assert personal.phone == "8012345678"
        assert set(report.filled_fields) == {"surname", "other_names", "email", "phone"}

    def test_local_edits_are_kept(self, merger):
        payloads = StagePayloads()
        payloads.personal.surname = "Smith"

        merger.merge(payloads, _server_record())

        assert payloads.personal.surname == "Smith"
        assert payloads.personal.other_names == "Jane"

    def test_empty_server_values_do_not_count(self):
        target = MagicMock(surname="", email="")
        filled = PrefillMerger.fill_empty_fields(target, {"surname": "", "email": None}, ("surname", "email"))
        assert filled == []


class TestAttachmentMerge:
    """Server files become committed attachments."""

    def test_photo_is_committed_with_absolute_url(self, merger):
        payloads = StagePayloads()
        merger.merge(payloads, _server_record())

        assert payloads.personal.photo == CommittedAttachment(
            remote_ref=f"{BASE_URL}/storage/photos/p1.jpg", display_name="p1.jpg"
        )
        assert payloads.personal.signature is None

    def test_live_local_file_wins(self, merger):
        payloads = StagePayloads()
        local = PendingAttachment(handle="/tmp/new.png", display_name="new.png", mime_type="image/png")
        payloads.personal.photo = local

        report = merger.merge(payloads, _server_record())

        assert payloads.personal.photo is local
        assert "photo" not in report.filled_attachments

    def test_name_only_placeholder_is_replaced(self, merger):
        payloads = StagePayloads()
        payloads.personal.photo = PendingAttachment(handle=None, display_name="old.png")

        merger.merge(payloads, _server_record())

        assert isinstance(payloads.personal.photo, CommittedAttachment)


class TestRowMerge:
    """Pristine lists are replaced wholesale."""

    def test_pristine_lists_are_replaced(self, merger):
        payloads = StagePayloads()
        report = merger.merge(payloads, _server_record())

        assert report.replaced_stages == [2, 3, 4, 5]
        qualification = payloads.qualifications[0]
        assert (qualification.institution, qualification.year) == ("UNILAG", "2015")
        assert qualification.certificate.remote_ref == f"{BASE_URL}/storage/certs/c1.pdf"

        result = payloads.exam_results[0]
        assert result.exam_type == "waec"
        assert result.subjects == ["Maths", "English", "Physics"]

        assert (payloads.memberships[0].body_name, payloads.memberships[0].stage_passed) == ("NIA", "Part II")
        assert (payloads.experiences[0].organization, payloads.experiences[0].position) == ("ACME", "Intern")

    def test_edited_list_is_kept(self, merger):
        payloads = StagePayloads()
        payloads.qualifications = [QualificationRow(institution="Local Poly")]

        merger.merge(payloads, _server_record())

        assert [q.institution for q in payloads.qualifications] == ["Local Poly"]

    def test_empty_server_list_keeps_local(self, merger):
        payloads = StagePayloads()
        record = _server_record()
        record["seminars"] = []

        report = merger.merge(payloads, record)

        assert len(payloads.seminars) == 1 and payloads.seminars[0] == SeminarRow()
        assert 6 not in report.replaced_stages

    def test_merge_twice_changes_nothing(self, merger):
        payloads = StagePayloads()
        merger.merge(payloads, _server_record())
        report = merger.merge(payloads, _server_record())
        assert not report.changed


class TestFetch:
    """Record fetch and enrichment."""

    def test_enriches_missing_stage_lists(self, merger):
        api = MagicMock()
        api.get_application.return_value = {"id": "A1", "completion_step": 3}
        api.get_qualifications.return_value = [{"institution": "UNILAG"}]
        api.get_olevel_results.side_effect = NetworkException("offline")

        application = merger.fetch(api, "A1")

        assert application.application_id == "A1"
        assert application.completion_step == 3
        assert application.record["qualifications"] == [{"institution": "UNILAG"}]
        assert "o_level_results" not in application.record

    def test_not_found_propagates(self, merger):
        api = MagicMock()
        api.get_application.side_effect = NotFoundException("missing", status_code=404)
        with pytest.raises(NotFoundException):
            merger.fetch(api, "ZZ")
