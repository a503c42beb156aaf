# -*- coding: utf-8 -*-
"""
Tests for RemoteStageSubmitter against the fake backend.
"""

from unittest.mock import MagicMock

import pytest

from models.attachment import PendingAttachment, CommittedAttachment
from models.stages import (
    StagePayloads, PersonalDetails, QualificationRow, ExamResultRow, ExperienceRow, RefereeRow
)
from services.exceptions import ServerValidationException, ValidationException
from services.wizard.stage_submitter import RemoteStageSubmitter


@pytest.fixture
def submitter(backend):
    return RemoteStageSubmitter(backend)


def _payloads():
    return StagePayloads(personal=PersonalDetails(surname="Doe", other_names="Jane", email="jane@x.com"))


class TestPersonalStage:
    """Stage 1 creates the application."""

    def test_mints_application_id(self, submitter, backend):
        result = submitter.submit(1, None, _payloads())

        assert result.application_id == "A1"
        assert result.message == "Step 1 saved"
        assert backend.records["A1"]["surname"] == "Doe"

    def test_resubmission_updates_existing_application(self, submitter, backend):
        submitter.submit(1, None, _payloads())
        payloads = _payloads()
        payloads.personal.surname = "Smith"

        result = submitter.submit(1, "A1", payloads)

        assert result.application_id == "A1"
        assert list(backend.records) == ["A1"]
        assert backend.records["A1"]["surname"] == "Smith"

    def test_only_live_files_are_uploaded(self, submitter, backend):
        payloads = _payloads()
        payloads.personal.photo = PendingAttachment(
            handle="/tmp/me.png", display_name="me.png", mime_type="image/png", size=10
        )
        payloads.personal.signature = CommittedAttachment(remote_ref="https://h/s.png", display_name="s.png")

        submitter.submit(1, None, payloads)

        _, _, uploads = backend.calls[0]
        assert uploads == [("pro_pic", "/tmp/me.png", "me.png", "image/png")]

    def test_response_without_id_is_an_error(self):
        api = MagicMock()
        api.create_step1.return_value = {"message": "Duplicate email"}
        with pytest.raises(ServerValidationException) as exc:
            RemoteStageSubmitter(api).submit(1, None, _payloads())
        assert exc.value.message == "Duplicate email"

    def test_bare_id_response(self):
        api = MagicMock()
        api.create_step1.return_value = {"id": 77}
        result = RemoteStageSubmitter(api).submit(1, None, _payloads())
        assert result.application_id == "77"
        assert result.message == "Step 1 submitted"


class TestLaterStages:
    """Stages 2-8 need an application id."""

    def test_missing_id_is_rejected_locally(self, submitter, backend):
        with pytest.raises(ValidationException) as exc:
            submitter.submit(3, None, _payloads())
        assert exc.value.message == "Please complete Step 1 first"
        assert backend.calls == []

    def test_repeat_submission_keeps_one_record(self, submitter, backend):
        submitter.submit(1, None, _payloads())
        payloads = _payloads()
        payloads.exam_results = [
            ExamResultRow(exam_type="WASSCE", exam_year="2010", exam_number="9", subjects_csv="Maths, English")
        ]

        submitter.submit(3, "A1", payloads)
        submitter.submit(3, "A1", payloads)

        assert list(backend.stages["A1"]) == [1, 3]
        assert backend.stages["A1"][3] == {"results": [{
            "exam_type": "waec",
            "exam_year": "2010",
            "exam_number": "9",
            "subjects": ["Maths", "English"],
        }]}

    def test_qualifications_are_multipart(self, submitter, backend):
        payloads = _payloads()
        payloads.qualifications = [
            QualificationRow(institution="UNILAG", qualification="BSc", year="2015",
                             certificate=PendingAttachment(handle="/tmp/c.pdf", display_name="c.pdf",
                                                           mime_type="application/pdf", size=5)),
            QualificationRow(institution="LASU", qualification="MSc", year="2018"),
        ]

        fields, uploads = submitter.build_qualifications_form(payloads)

        assert ("qualifications[1][institution]", "LASU") in fields
        assert uploads == [("cert_files[0]", "/tmp/c.pdf", "c.pdf", "application/pdf")]

    def test_open_ended_experience(self):
        payloads = _payloads()
        payloads.experiences = [ExperienceRow(organization="ACME", position="Intern", start_date="2020-01-01")]
        body = RemoteStageSubmitter.build_json_body(5, payloads)
        assert body["experiences"][0]["end_date"] is None

    def test_referees_body(self):
        payloads = _payloads()
        payloads.referees = [RefereeRow(user_id="12", relationship="Mentor")]
        body = RemoteStageSubmitter.build_json_body(7, payloads)
        assert body == {"referees": [{"user_id": "12", "relationship": "Mentor"}]}

    def test_review_acknowledges(self, submitter, backend):
        submitter.submit(1, None, _payloads())
        result = submitter.submit(8, "A1", _payloads())
        assert result.message == "Application acknowledged"
        assert backend.records["A1"]["status"] == "acknowledged"
