# -*- coding: utf-8 -*-
"""
Remote stage submitter.

Turns stage payloads into backend calls. Stage 1 creates the application
and mints its id; stages 2-7 overwrite their stage record on the server;
stage 8 acknowledges the application.
"""

from dataclasses import dataclass
from typing import Optional, List, Tuple

from app.config import WizardSteps
from models.attachment import Attachment, PendingAttachment
from models.stages import StagePayloads, PersonalDetails
from services.api_client import Upload, unwrap_data
from services.exceptions import ServerValidationException, ValidationException
from services.wizard.normalizers import normalize_exam_type
from utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class SubmitResult:
    """Outcome of a successful stage submission."""
    application_id: str
    message: str = ""


def _upload(field: str, attachment: Optional[Attachment]) -> Optional[Upload]:
    # Only live local files are sent; server-held files are never re-uploaded
    if isinstance(attachment, PendingAttachment) and attachment.is_live:
        return (field, attachment.handle, attachment.display_name, attachment.mime_type)
    return None


class RemoteStageSubmitter:
    """Per-stage backend commits."""

    DEFAULT_MESSAGES = {
        WizardSteps.REVIEW: "Application acknowledged",
    }

    def __init__(self, api_client):
        """
        Args:
            api_client: ProbationerApiClient (or a compatible fake)
        """
        self.api = api_client

    def submit(self, step: int, application_id: Optional[str], payloads: StagePayloads) -> SubmitResult:
        """
        Commit one stage.

        Returns:
            SubmitResult with the (possibly newly minted) application id

        Raises:
            ValidationException: stage 2+ without an application id
            NetworkException, ServerValidationException, NotFoundException
        """
        if step == WizardSteps.PERSONAL:
            return self._submit_personal(payloads.personal, application_id)

        if not application_id:
            raise ValidationException("Please complete Step 1 first", step=step)

        logger.info(f"Submitting stage {step} for application {application_id}")
        if step == WizardSteps.REVIEW:
            response = self.api.finalize_step8(application_id)
        elif step == WizardSteps.QUALIFICATIONS:
            form_data, uploads = self.build_qualifications_form(payloads)
            response = self.api.submit_step(step, application_id, form_data=form_data, uploads=uploads)
        elif step in range(WizardSteps.EXAM_RESULTS, WizardSteps.REVIEW):
            response = self.api.submit_step(step, application_id, json_data=self.build_json_body(step, payloads))
        else:
            raise ValueError(f"Unknown stage: {step}")

        return SubmitResult(
            application_id=application_id,
            message=self._message(response, step),
        )

    # =========================================================================
    # Stage bodies
    # =========================================================================

    def _submit_personal(self, personal: PersonalDetails, current_id: Optional[str] = None) -> SubmitResult:
        fields, uploads = self.build_personal_form(personal)
        if current_id:
            # Re-editing stage 1 updates the existing application
            fields.append(("application_id", current_id))
            logger.info(f"Resubmitting stage 1 for application {current_id}")
        else:
            logger.info("Submitting stage 1 (creating application)")
        response = self.api.create_step1(fields, uploads)

        body = unwrap_data(response)
        raw_id = body.get("id") if isinstance(body, dict) else None
        if raw_id is None and isinstance(response, dict):
            raw_id = response.get("id")
        application_id = str(raw_id) if raw_id not in (None, "") else (current_id or "")
        if not application_id:
            message = response.get("message") if isinstance(response, dict) else None
            raise ServerValidationException(message or "Could not create application (no id)")

        logger.info(f"Application created: {application_id}")
        return SubmitResult(application_id=application_id, message=self._message(response, 1))

    @staticmethod
    def build_personal_form(personal: PersonalDetails) -> Tuple[List[Tuple[str, str]], List[Upload]]:
        fields = [(name, getattr(personal, name)) for name in PersonalDetails.SCALAR_FIELDS]
        uploads = [
            upload for upload in (
                _upload("pro_pic", personal.photo),
                _upload("signature", personal.signature),
            ) if upload
        ]
        return fields, uploads

    @staticmethod
    def build_qualifications_form(payloads: StagePayloads) -> Tuple[List[Tuple[str, str]], List[Upload]]:
        fields = []
        uploads = []
        for i, row in enumerate(payloads.qualifications):
            fields.append((f"qualifications[{i}][institution]", row.institution))
            fields.append((f"qualifications[{i}][qualification]", row.qualification))
            fields.append((f"qualifications[{i}][year]", row.year))
            upload = _upload(f"cert_files[{i}]", row.certificate)
            if upload:
                uploads.append(upload)
        return fields, uploads

    @staticmethod
    def build_json_body(step: int, payloads: StagePayloads) -> dict:
        if step == WizardSteps.EXAM_RESULTS:
            return {"results": [
                {
                    "exam_type": normalize_exam_type(r.exam_type),
                    "exam_year": r.exam_year,
                    "exam_number": r.exam_number,
                    "subjects": r.subjects,
                }
                for r in payloads.exam_results
            ]}
        if step == WizardSteps.MEMBERSHIPS:
            return {"memberships": [r.to_dict() for r in payloads.memberships]}
        if step == WizardSteps.EXPERIENCE:
            return {"experiences": [
                dict(r.to_dict(), end_date=r.end_date or None) for r in payloads.experiences
            ]}
        if step == WizardSteps.SEMINARS:
            return {"seminars": [r.to_dict() for r in payloads.seminars]}
        if step == WizardSteps.REFEREES:
            return {"referees": [r.to_dict() for r in payloads.referees]}
        raise ValueError(f"Stage {step} has no JSON body")

    def _message(self, response, step: int) -> str:
        if isinstance(response, dict) and response.get("message"):
            return str(response["message"])
        return self.DEFAULT_MESSAGES.get(step, f"Step {step} submitted")
