# -*- coding: utf-8 -*-
"""
Step validation service for the probationer application wizard.

Validates stage payloads without UI coupling. Every function returns an
ordered list of violation messages; an empty list means the stage may be
submitted. Validation never mutates the payload.
"""

import re
from datetime import date, datetime
from typing import List, Optional

from app.config import Config, WizardSteps
from models.attachment import Attachment, PendingAttachment
from models.stages import (
    StagePayloads, PersonalDetails, QualificationRow, ExamResultRow,
    ExperienceRow, SeminarRow, RefereeRow
)

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
YEAR_PATTERN = re.compile(r"^[0-9]{4}$")
NUMERIC_PATTERN = re.compile(r"^[0-9]+$")


def _blank(value: Optional[str]) -> bool:
    return not str(value or "").strip()


def _any_set(*values) -> bool:
    return any(not _blank(v) for v in values)


def _parse_date(value: Optional[str]) -> Optional[date]:
    """Parse a form date (any time part is ignored); None when blank or malformed."""
    text = str(value or "").strip().split("T")[0].split(" ")[0]
    try:
        return datetime.strptime(text, Config.DATE_FORMAT).date()
    except ValueError:
        return None


def _bad_date(value: Optional[str]) -> bool:
    return not _blank(value) and _parse_date(value) is None


def _live_upload(attachment: Optional[Attachment]) -> Optional[PendingAttachment]:
    """Only freshly picked files are checked; server copies were checked on upload."""
    if isinstance(attachment, PendingAttachment) and attachment.is_live:
        return attachment
    return None


def validate_personal(personal: PersonalDetails) -> List[str]:
    errors = []
    if _blank(personal.surname):
        errors.append("Surname is required")
    if _blank(personal.other_names):
        errors.append("Other names are required")
    if _blank(personal.email) or not EMAIL_PATTERN.match(personal.email.strip()):
        errors.append("Valid email is required")
    if _bad_date(personal.date_of_birth):
        errors.append("Date of birth must be a valid date (YYYY-MM-DD)")

    for label, attachment in (("Passport photo", personal.photo), ("Signature", personal.signature)):
        upload = _live_upload(attachment)
        if upload is None:
            continue
        if upload.mime_type not in Config.IMAGE_TYPES:
            errors.append(f"{label} must be JPG, PNG, or WebP")
        if upload.size > Config.MAX_IMAGE_BYTES:
            errors.append(f"{label} must be 5MB or less")
    return errors


def validate_qualifications(rows: List[QualificationRow]) -> List[str]:
    errors = []
    if not rows:
        errors.append("At least one qualification is required")
    for i, row in enumerate(rows, start=1):
        if _blank(row.institution) or _blank(row.qualification) or _blank(row.year):
            errors.append(f"Qualification #{i} is incomplete")
        upload = _live_upload(row.certificate)
        if upload is not None:
            if upload.mime_type not in Config.CERT_TYPES:
                errors.append(f"Qualification #{i} certificate must be PDF or image")
            if upload.size > Config.MAX_CERT_BYTES:
                errors.append(f"Qualification #{i} certificate must be 10MB or less")
    return errors


def validate_exam_results(rows: List[ExamResultRow]) -> List[str]:
    errors = []
    if not rows:
        errors.append("At least one exam result is required")
    for i, row in enumerate(rows, start=1):
        if _blank(row.exam_type) or _blank(row.exam_year) or _blank(row.exam_number):
            errors.append(f"Result #{i} is incomplete")
        if row.exam_year and not YEAR_PATTERN.match(row.exam_year):
            errors.append(f"Result #{i} year must be 4 digits")
        if not row.subjects:
            errors.append(f"Result #{i} subjects are required")
    return errors


def validate_experiences(rows: List[ExperienceRow]) -> List[str]:
    errors = []
    for i, row in enumerate(rows, start=1):
        if not _any_set(*(getattr(row, name) for name in row.FIELDS)):
            continue
        if _blank(row.organization) or _blank(row.position) or _blank(row.start_date):
            errors.append(f"Experience #{i} requires organization, position and start date")
        for label, value in (("start", row.start_date), ("end", row.end_date)):
            if _bad_date(value):
                errors.append(f"Experience #{i} {label} date must be a valid date (YYYY-MM-DD)")
        start, end = _parse_date(row.start_date), _parse_date(row.end_date)
        if start and end and end < start:
            errors.append(f"Experience #{i} end date cannot be before start date")
    return errors


def validate_seminars(rows: List[SeminarRow]) -> List[str]:
    errors = []
    for i, row in enumerate(rows, start=1):
        if _any_set(row.title, row.date, row.location) and (
            _blank(row.title) or _blank(row.date) or _blank(row.location)
        ):
            errors.append(f"Seminar #{i} requires title, date and location")
        if _bad_date(row.date):
            errors.append(f"Seminar #{i} date must be a valid date (YYYY-MM-DD)")
    return errors


def validate_referees(rows: List[RefereeRow]) -> List[str]:
    errors = []
    for i, row in enumerate(rows, start=1):
        if not _any_set(row.user_id, row.relationship):
            continue
        if _blank(row.user_id) or _blank(row.relationship):
            errors.append(f"Referee #{i} is incomplete")
        if row.user_id and not NUMERIC_PATTERN.match(row.user_id.strip()):
            errors.append(f"Referee #{i} user id must be numeric")
    return errors


class StepValidator:
    """Validates wizard stage data."""

    @staticmethod
    def validate_step(step: int, payloads: StagePayloads) -> List[str]:
        """
        Validate one stage.

        Args:
            step: Stage number (1-8)
            payloads: Current stage payloads

        Returns:
            Ordered list of violation messages (empty when valid)
        """
        if step == WizardSteps.PERSONAL:
            return validate_personal(payloads.personal)
        elif step == WizardSteps.QUALIFICATIONS:
            return validate_qualifications(payloads.qualifications)
        elif step == WizardSteps.EXAM_RESULTS:
            return validate_exam_results(payloads.exam_results)
        elif step == WizardSteps.EXPERIENCE:
            return validate_experiences(payloads.experiences)
        elif step == WizardSteps.SEMINARS:
            return validate_seminars(payloads.seminars)
        elif step == WizardSteps.REFEREES:
            return validate_referees(payloads.referees)

        # Memberships are validated by the server; review has no payload
        return []
