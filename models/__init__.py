# -*- coding: utf-8 -*-
"""
Probationer Wizard Data Models
"""

from .attachment import PendingAttachment, CommittedAttachment
from .application import Application, ApplicationStatus
from .stages import (
    PersonalDetails,
    QualificationRow,
    ExamResultRow,
    MembershipRow,
    ExperienceRow,
    SeminarRow,
    RefereeRow,
    StagePayloads,
)
from .draft import Draft, NewDraftKey, ExistingDraftKey

__all__ = [
    "PendingAttachment",
    "CommittedAttachment",
    "Application",
    "ApplicationStatus",
    "PersonalDetails",
    "QualificationRow",
    "ExamResultRow",
    "MembershipRow",
    "ExperienceRow",
    "SeminarRow",
    "RefereeRow",
    "StagePayloads",
    "Draft",
    "NewDraftKey",
    "ExistingDraftKey",
]
