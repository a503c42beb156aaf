# -*- coding: utf-8 -*-
"""
Prefill merger - reconciles a server application record into a local draft.

Policy:
- scalar fields are filled only where the local value is empty;
- row lists are replaced wholesale only while the local list is pristine;
- server files become read-only committed attachments.

Every stage is described by data (field lists and server aliases) and merged
by the same functions.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from app.config import WizardSteps
from models.application import Application
from models.attachment import CommittedAttachment, PendingAttachment
from models.stages import PersonalDetails, StagePayloads, ROW_STAGES, is_pristine
from services.exceptions import ApiException, NetworkException
from services.wizard.normalizers import normalize_exam_type, to_absolute_url, file_name_from_path
from utils.logger import get_logger

logger = get_logger(__name__)


def _first(row: Dict[str, Any], keys: Tuple[str, ...]) -> Any:
    for key in keys:
        value = row.get(key)
        if value not in (None, ""):
            return value
    return None


def _subjects_csv(row: Dict[str, Any]) -> str:
    subjects = row.get("subjects")
    if not isinstance(subjects, list):
        return ""
    names = []
    for s in subjects:
        if isinstance(s, dict):
            s = s.get("name") or s.get("subject")
        if isinstance(s, str) and s.strip():
            names.append(s.strip())
    return ", ".join(names)


@dataclass(frozen=True)
class RowMergeRule:
    """How one row-list stage maps from the server record."""
    stage: int
    server_key: str
    # local field -> server keys tried in order
    aliases: Dict[str, Tuple[str, ...]] = field(default_factory=dict)
    # local field -> custom extractor taking the server row
    extractors: Dict[str, Callable[[Dict[str, Any]], Any]] = field(default_factory=dict)


# Stage 1 attachment slots -> server keys
ATTACHMENT_SOURCES: Dict[str, Tuple[str, str]] = {
    "photo": ("passport_photo", "photo"),
    "signature": ("signature", "signature"),
}

ROW_MERGE_RULES: Tuple[RowMergeRule, ...] = (
    RowMergeRule(
        stage=WizardSteps.QUALIFICATIONS,
        server_key="qualifications",
    ),
    RowMergeRule(
        stage=WizardSteps.EXAM_RESULTS,
        server_key="o_level_results",
        extractors={
            "exam_type": lambda r: normalize_exam_type(r.get("exam_type")),
            "subjects_csv": _subjects_csv,
        },
    ),
    RowMergeRule(
        stage=WizardSteps.MEMBERSHIPS,
        server_key="memberships",
        aliases={"body_name": ("body_name", "name"), "stage_passed": ("stage_passed", "stage")},
    ),
    RowMergeRule(
        stage=WizardSteps.EXPERIENCE,
        server_key="experiences",
        aliases={"organization": ("organization", "company"), "position": ("position", "role")},
    ),
    RowMergeRule(
        stage=WizardSteps.SEMINARS,
        server_key="seminars",
    ),
    RowMergeRule(
        stage=WizardSteps.REFEREES,
        server_key="referees",
    ),
)


@dataclass
class MergeReport:
    """What a merge changed."""
    filled_fields: List[str] = field(default_factory=list)
    filled_attachments: List[str] = field(default_factory=list)
    replaced_stages: List[int] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.filled_fields or self.filled_attachments or self.replaced_stages)


class PrefillMerger:
    """Fetches a server record and merges it into local payloads."""

    def __init__(self, base_url: Optional[str] = None):
        """
        Args:
            base_url: Base for resolving relative file paths (defaults to Config.API_BASE_URL)
        """
        self.base_url = base_url

    # =========================================================================
    # Fetch
    # =========================================================================

    def fetch(self, api_client, application_id: str) -> Application:
        """
        Fetch the canonical record, completing stage 2/3 rows from their
        dedicated endpoints when the main record lacks them.

        Raises:
            NotFoundException: unknown application id
        """
        record = dict(api_client.get_application(application_id))

        enrichments = (
            ("qualifications", api_client.get_qualifications),
            ("o_level_results", api_client.get_olevel_results),
        )
        for key, loader in enrichments:
            if isinstance(record.get(key), list) and record[key]:
                continue
            try:
                rows = loader(application_id)
            except (ApiException, NetworkException) as e:
                logger.warning(f"Failed to fetch {key} for {application_id}: {e}")
                continue
            if rows:
                record[key] = rows

        return Application.from_api(record, application_id=application_id)

    # =========================================================================
    # Merge
    # =========================================================================

    def merge(self, payloads: StagePayloads, record: Dict[str, Any]) -> MergeReport:
        """Merge a server record into payloads in place."""
        report = MergeReport()
        report.filled_fields = self.fill_empty_fields(
            payloads.personal, record, PersonalDetails.SCALAR_FIELDS
        )
        report.filled_attachments = self._fill_attachments(payloads.personal, record)

        for rule in ROW_MERGE_RULES:
            if self._replace_rows(payloads, record, rule):
                report.replaced_stages.append(rule.stage)

        logger.info(
            f"Prefill merged: fields={report.filled_fields}, "
            f"attachments={report.filled_attachments}, stages={report.replaced_stages}"
        )
        return report

    @staticmethod
    def fill_empty_fields(target: Any, source: Dict[str, Any], field_names: Tuple[str, ...]) -> List[str]:
        """Copy source values into empty target fields; populated fields are kept."""
        filled = []
        for name in field_names:
            current = str(getattr(target, name, "") or "").strip()
            value = source.get(name)
            if current or value in (None, ""):
                continue
            setattr(target, name, str(value))
            filled.append(name)
        return filled

    def _fill_attachments(self, personal: PersonalDetails, record: Dict[str, Any]) -> List[str]:
        filled = []
        for slot, (server_key, default_name) in ATTACHMENT_SOURCES.items():
            remote = record.get(server_key)
            current = getattr(personal, slot)
            # A name-only placeholder restored from a draft holds no file
            occupied = current is not None and not (
                isinstance(current, PendingAttachment) and not current.is_live
            )
            if occupied or not remote:
                continue
            setattr(personal, slot, self._committed(remote, default_name))
            filled.append(slot)
        return filled

    def _replace_rows(self, payloads: StagePayloads, record: Dict[str, Any], rule: RowMergeRule) -> bool:
        server_rows = record.get(rule.server_key)
        if not isinstance(server_rows, list) or not server_rows:
            return False
        if not is_pristine(payloads.rows(rule.stage)):
            return False

        _, row_cls = ROW_STAGES[rule.stage]
        rows = [self._convert_row(row_cls, rule, r if isinstance(r, dict) else {}) for r in server_rows]
        payloads.set_rows(rule.stage, rows)
        return True

    def _convert_row(self, row_cls, rule: RowMergeRule, server_row: Dict[str, Any]):
        values = {}
        for name in row_cls.FIELDS:
            if name in rule.extractors:
                value = rule.extractors[name](server_row)
            else:
                value = _first(server_row, rule.aliases.get(name, (name,)))
            values[name] = "" if value is None else str(value)
        row = row_cls(**values)

        # Qualification certificates stay on the server
        if hasattr(row, "certificate") and server_row.get("certificate_path"):
            row.certificate = self._committed(server_row["certificate_path"], "certificate")
        return row

    def _committed(self, remote_path: Any, default_name: str) -> CommittedAttachment:
        return CommittedAttachment(
            remote_ref=to_absolute_url(remote_path, self.base_url),
            display_name=file_name_from_path(remote_path, default_name),
        )
