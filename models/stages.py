# -*- coding: utf-8 -*-
"""
Stage payload models for the probationer application wizard.

Stage 1 is a flat record with two optional attachments; stages 2-7 are row
lists; stage 8 (review) carries no payload.
"""

from dataclasses import dataclass, field
from typing import ClassVar, Dict, List, Optional, Tuple, Type, Any

from models.attachment import Attachment, attachment_from_dict, attachment_to_dict


def _text(value: Any) -> str:
    return "" if value is None else str(value)


@dataclass
class PersonalDetails:
    """Stage 1: personal information."""

    SCALAR_FIELDS: ClassVar[Tuple[str, ...]] = (
        "surname", "other_names", "title", "postal_address", "residential_address",
        "email", "phone", "date_of_birth", "nationality",
    )
    ATTACHMENT_SLOTS: ClassVar[Tuple[str, ...]] = ("photo", "signature")

    surname: str = ""
    other_names: str = ""
    title: str = ""
    postal_address: str = ""
    residential_address: str = ""
    email: str = ""
    phone: str = ""
    date_of_birth: str = ""
    nationality: str = ""
    photo: Optional[Attachment] = None
    signature: Optional[Attachment] = None

    @property
    def full_name(self) -> str:
        parts = [self.title, self.surname, self.other_names]
        return " ".join(p.strip() for p in parts if p and p.strip())

    def to_dict(self) -> Dict[str, Any]:
        data = {name: getattr(self, name) for name in self.SCALAR_FIELDS}
        data["photo"] = attachment_to_dict(self.photo)
        data["signature"] = attachment_to_dict(self.signature)
        return data

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "PersonalDetails":
        data = data or {}
        details = cls(**{name: _text(data.get(name)) for name in cls.SCALAR_FIELDS})
        details.photo = attachment_from_dict(data.get("photo"))
        details.signature = attachment_from_dict(data.get("signature"))
        return details


class StageRow:
    """Common behaviour for row-list stage entries."""

    FIELDS: ClassVar[Tuple[str, ...]] = ()

    def is_blank(self) -> bool:
        """True when every text field is empty."""
        return not any(_text(getattr(self, name)).strip() for name in self.FIELDS)

    def to_dict(self) -> Dict[str, Any]:
        return {name: getattr(self, name) for name in self.FIELDS}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]):
        data = data or {}
        return cls(**{name: _text(data.get(name)) for name in cls.FIELDS})


@dataclass
class QualificationRow(StageRow):
    """Stage 2 entry."""

    FIELDS: ClassVar[Tuple[str, ...]] = ("institution", "qualification", "year")

    institution: str = ""
    qualification: str = ""
    year: str = ""
    certificate: Optional[Attachment] = None

    def is_blank(self) -> bool:
        return super().is_blank() and self.certificate is None

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["certificate"] = attachment_to_dict(self.certificate)
        return data

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "QualificationRow":
        row = super().from_dict(data)
        row.certificate = attachment_from_dict((data or {}).get("certificate"))
        return row


@dataclass
class ExamResultRow(StageRow):
    """Stage 3 entry. Subjects are edited as a comma-separated list."""

    FIELDS: ClassVar[Tuple[str, ...]] = ("exam_type", "exam_year", "exam_number", "subjects_csv")

    exam_type: str = ""
    exam_year: str = ""
    exam_number: str = ""
    subjects_csv: str = ""

    @property
    def subjects(self) -> List[str]:
        return [s.strip() for s in self.subjects_csv.split(",") if s.strip()]


@dataclass
class MembershipRow(StageRow):
    """Stage 4 entry."""

    FIELDS: ClassVar[Tuple[str, ...]] = ("body_name", "stage_passed", "certificate_path")

    body_name: str = ""
    stage_passed: str = ""
    certificate_path: str = ""


@dataclass
class ExperienceRow(StageRow):
    """Stage 5 entry. Dates are ISO ``YYYY-MM-DD`` strings."""

    FIELDS: ClassVar[Tuple[str, ...]] = (
        "organization", "position", "start_date", "end_date", "responsibilities"
    )

    organization: str = ""
    position: str = ""
    start_date: str = ""
    end_date: str = ""
    responsibilities: str = ""


@dataclass
class SeminarRow(StageRow):
    """Stage 6 entry."""

    FIELDS: ClassVar[Tuple[str, ...]] = ("title", "date", "location")

    title: str = ""
    date: str = ""
    location: str = ""


@dataclass
class RefereeRow(StageRow):
    """Stage 7 entry. ``user_id`` is the referee's numeric member id."""

    FIELDS: ClassVar[Tuple[str, ...]] = ("user_id", "relationship")

    user_id: str = ""
    relationship: str = ""


# stage number -> (StagePayloads attribute, row type)
ROW_STAGES: Dict[int, Tuple[str, Type[StageRow]]] = {
    2: ("qualifications", QualificationRow),
    3: ("exam_results", ExamResultRow),
    4: ("memberships", MembershipRow),
    5: ("experiences", ExperienceRow),
    6: ("seminars", SeminarRow),
    7: ("referees", RefereeRow),
}


def is_pristine(rows: List[StageRow]) -> bool:
    """A list is pristine while it holds exactly one blank row."""
    return len(rows) == 1 and rows[0].is_blank()


@dataclass
class StagePayloads:
    """Editable payloads of stages 1-7."""

    personal: PersonalDetails = field(default_factory=PersonalDetails)
    qualifications: List[QualificationRow] = field(default_factory=lambda: [QualificationRow()])
    exam_results: List[ExamResultRow] = field(default_factory=lambda: [ExamResultRow()])
    memberships: List[MembershipRow] = field(default_factory=lambda: [MembershipRow()])
    experiences: List[ExperienceRow] = field(default_factory=lambda: [ExperienceRow()])
    seminars: List[SeminarRow] = field(default_factory=lambda: [SeminarRow()])
    referees: List[RefereeRow] = field(default_factory=lambda: [RefereeRow()])

    def rows(self, stage: int) -> List[StageRow]:
        attr, _ = ROW_STAGES[stage]
        return getattr(self, attr)

    def set_rows(self, stage: int, rows: List[StageRow]):
        attr, row_cls = ROW_STAGES[stage]
        setattr(self, attr, list(rows) if rows else [row_cls()])

    def to_dict(self) -> Dict[str, Any]:
        data = {"personal": self.personal.to_dict()}
        for attr, _ in ROW_STAGES.values():
            data[attr] = [row.to_dict() for row in getattr(self, attr)]
        return data

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "StagePayloads":
        data = data or {}
        payloads = cls(personal=PersonalDetails.from_dict(data.get("personal")))
        for stage, (attr, row_cls) in ROW_STAGES.items():
            raw_rows = data.get(attr)
            if isinstance(raw_rows, list):
                payloads.set_rows(stage, [row_cls.from_dict(r) for r in raw_rows])
        return payloads
