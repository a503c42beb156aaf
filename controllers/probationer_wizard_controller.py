# -*- coding: utf-8 -*-
"""
Probationer Wizard Controller
=============================
State machine behind the 8-stage probationer admission wizard.

Owns the current draft, gates transitions with the step validator, commits
each stage through the remote submitter and persists every edit to the
draft repository as it happens. Network calls run on QThread workers; the
busy flag is checked and set synchronously so only one submission can be in
flight.

Usage:
    controller = ProbationerWizardController(repository=SQLiteDraftRepository())
    controller.step_changed.connect(page.show_step)
    controller.open(application_id="A1", target_step=5)
    controller.update_personal(surname="Doe")
    result = controller.next()
"""

import copy
from typing import Any, Dict, List, Optional

from PyQt5.QtCore import pyqtSignal

from app.config import WizardSteps
from controllers.base_controller import BaseController, OperationResult
from controllers.workers import StageSubmitWorker, PrefillWorker
from models.application import Application
from models.attachment import PendingAttachment
from models.draft import Draft, NewDraftKey, ExistingDraftKey
from models.stages import PersonalDetails, QualificationRow, StagePayloads, ROW_STAGES
from repositories.draft_repository import DraftRepository, SQLiteDraftRepository
from services.error_mapper import map_exception
from services.exceptions import NotFoundException, ValidationException
from services.notifier import Notifier, LoggingNotifier
from services.wizard.prefill_merger import PrefillMerger
from services.wizard.preview_registry import PreviewRegistry
from services.wizard.stage_submitter import RemoteStageSubmitter, SubmitResult
from services.wizard.step_validator import StepValidator
from utils.logger import get_logger

logger = get_logger(__name__)

CLOSED_MESSAGE = "The wizard has been closed"
BUSY_MESSAGE = "Please wait for the current submission to finish"
MEMBER_PREFIX = "M-"
MIN_SEARCH_CHARS = 3
MAX_SEARCH_RESULTS = 10
WORKER_SHUTDOWN_MS = 3000


class ProbationerWizardController(BaseController):
    """
    Controller for the probationer application wizard.

    Signals:
        step_changed(int): current stage changed
        draft_saved(str): draft written under the given storage key
        wizard_completed(str): stage 8 committed for the application id
    """

    step_changed = pyqtSignal(int)
    draft_saved = pyqtSignal(str)
    wizard_completed = pyqtSignal(str)

    def __init__(
        self,
        repository: Optional[DraftRepository] = None,
        api_client=None,
        submitter: Optional[RemoteStageSubmitter] = None,
        merger: Optional[PrefillMerger] = None,
        notifier: Optional[Notifier] = None,
        previews: Optional[PreviewRegistry] = None,
        run_async: bool = True,
        parent=None
    ):
        """
        Args:
            repository: Draft store (defaults to the SQLite store)
            api_client: Backend client (defaults to the shared client)
            submitter: Stage submitter (defaults to one over api_client)
            merger: Prefill merger
            notifier: Sink for user-facing messages
            previews: Preview registry
            run_async: Run network calls on worker threads; False runs them inline
        """
        super().__init__(parent)
        if api_client is None:
            from services.api_client import get_api_client
            api_client = get_api_client()

        self.repository = repository if repository is not None else SQLiteDraftRepository()
        self.api_client = api_client
        self.submitter = submitter or RemoteStageSubmitter(api_client)
        self.merger = merger or PrefillMerger()
        self.notifier = notifier or LoggingNotifier()
        self.previews = previews or PreviewRegistry()
        self._run_async = run_async

        self._draft = Draft()
        self._alive = True
        self._workers = set()
        self._submitting_step: Optional[int] = None
        self._prefill_target: Optional[int] = None
        self._prefill_id: Optional[str] = None

    # ==================== State ====================

    @property
    def draft(self) -> Draft:
        return self._draft

    @property
    def payloads(self) -> StagePayloads:
        return self._draft.payloads

    @property
    def step(self) -> int:
        return self._draft.step

    @property
    def application_id(self) -> Optional[str]:
        return self._draft.application_id

    @property
    def completion_step(self) -> int:
        return self._draft.completion_step

    @property
    def is_alive(self) -> bool:
        return self._alive

    @property
    def max_reachable_step(self) -> int:
        """Highest stage the user may jump to."""
        return min(WizardSteps.LAST, max(self.step, self.completion_step + 1))

    # ==================== Opening ====================

    def open(self, application_id: Optional[str] = None, target_step: Optional[int] = None) -> OperationResult:
        """
        Resolve the initial draft and prefill it from the server when it is
        bound to an application.

        Args:
            application_id: Application to resume (deep link)
            target_step: Requested stage; clamped to the reachable range
        """
        if not self._alive:
            return OperationResult.fail(CLOSED_MESSAGE)
        if self.is_busy:
            return OperationResult.fail(BUSY_MESSAGE)

        self._log_operation("open", application_id=application_id, target_step=target_step)
        self._set_error("")

        if application_id:
            application_id = str(application_id)
            draft = self.repository.load(ExistingDraftKey(application_id))
            if draft is None:
                logger.info(f"No local draft for {application_id}, starting blank")
                draft = Draft(application_id=application_id)
        else:
            draft = self._load_latest_draft()

        self._replace_draft(draft)
        self._set_step(self._resolve_open_step(target_step))

        if not draft.application_id:
            return OperationResult.ok(data=draft)

        self._set_busy(True)
        self._prefill_target = target_step
        self._prefill_id = draft.application_id
        worker = PrefillWorker(self.merger, self.api_client, draft.application_id)
        outcome = self._dispatch(worker, self._on_prefill_succeeded, self._on_prefill_failed)
        return outcome or OperationResult.ok(data=draft, message="Loading application")

    def _replace_draft(self, draft: Draft):
        released = self.previews.release_all()
        if released:
            logger.debug(f"Released {released} previews of the previous draft")
        self._draft = draft

    def _load_latest_draft(self) -> Draft:
        key = self.repository.last_active_key()
        draft = self.repository.load(key) if key is not None else None
        if draft is None:
            draft = self.repository.load(NewDraftKey())
        return draft or Draft()

    def _resolve_open_step(self, target_step: Optional[int]) -> int:
        completion = self._draft.completion_step
        if target_step is not None:
            limit = min(WizardSteps.LAST, completion + 1)
            try:
                target = int(target_step)
            except (TypeError, ValueError):
                target = WizardSteps.FIRST
            return max(WizardSteps.FIRST, min(target, limit))
        if WizardSteps.FIRST <= completion < WizardSteps.LAST:
            return completion + 1
        return self._draft.step

    def _on_prefill_succeeded(self, application: Application) -> OperationResult:
        if not self._alive:
            logger.debug("Prefill result ignored: wizard closed")
            return OperationResult.fail(CLOSED_MESSAGE)
        self._set_busy(False)
        if application.application_id not in (None, self._prefill_id):
            logger.warning(
                f"Server returned application {application.application_id} for {self._prefill_id}"
            )

        report = self.merger.merge(self._draft.payloads, application.record)
        self._draft.completion_step = max(self._draft.completion_step, application.completion_step)
        self._set_step(self._resolve_open_step(self._prefill_target))
        self._save()
        if report.changed:
            self.data_changed.emit()
        return OperationResult.ok(data=application)

    def _on_prefill_failed(self, error: Exception) -> OperationResult:
        if not self._alive:
            logger.debug("Prefill failure ignored: wizard closed")
            return OperationResult.fail(CLOSED_MESSAGE)
        self._set_busy(False)

        if isinstance(error, NotFoundException):
            missing_id = self._prefill_id
            logger.warning(f"Application {missing_id} not found, falling back to a new draft")
            self._replace_draft(self.repository.load(NewDraftKey()) or Draft())
            self._set_step(self._resolve_open_step(None))
            self.data_changed.emit()
            message = f"Application {missing_id} was not found. Starting a new application."
            self.notifier.info(message)
            return OperationResult.fail(message)

        message = map_exception(error, context="prefill")
        self._set_error(message)
        self.notifier.error(message)
        return OperationResult.fail(message)

    # ==================== Navigation ====================

    def next(self) -> OperationResult:
        """
        Validate and commit the current stage, then advance.

        In inline mode the returned result is the submission outcome; with
        workers it only reports that the submission started.
        """
        if not self._alive:
            return OperationResult.fail(CLOSED_MESSAGE)
        if self.is_busy:
            logger.info(f"next() rejected at step {self.step}: busy")
            return OperationResult.fail(BUSY_MESSAGE)

        step = self.step
        errors = StepValidator.validate_step(step, self._draft.payloads)
        if errors:
            message = map_exception(ValidationException(errors[0], errors=errors, step=step))
            logger.info(f"Step {step} validation failed: {errors}")
            self._set_error(message)
            return OperationResult.fail(message, errors=errors)

        self._set_busy(True)
        self._submitting_step = step
        worker = StageSubmitWorker(
            self.submitter, step, self._draft.application_id, copy.deepcopy(self._draft.payloads)
        )
        outcome = self._dispatch(worker, self._on_submit_succeeded, self._on_submit_failed)
        return outcome or OperationResult.ok(message=f"Submitting step {step}")

    def _on_submit_succeeded(self, result: SubmitResult) -> OperationResult:
        if not self._alive:
            logger.debug("Submission result ignored: wizard closed")
            return OperationResult.fail(CLOSED_MESSAGE)
        step = self._submitting_step
        self._submitting_step = None
        self._set_busy(False)

        draft = self._draft
        if step == WizardSteps.PERSONAL and result.application_id != draft.application_id:
            previous_id = draft.application_id
            draft.application_id = result.application_id
            if previous_id is None:
                self.repository.migrate(result.application_id)
            else:
                logger.warning(f"Server re-keyed application {previous_id} as {result.application_id}")
                self.repository.delete(ExistingDraftKey(previous_id))

        draft.completion_step = max(draft.completion_step, step)
        self._set_error("")

        if step == WizardSteps.LAST:
            self.notifier.success(result.message)
            self._finish()
            return OperationResult.ok(data=result, message=result.message)

        self._set_step(step + 1)
        self._save()
        self.notifier.success(result.message)
        return OperationResult.ok(data=result, message=result.message)

    def _on_submit_failed(self, error: Exception) -> OperationResult:
        if not self._alive:
            logger.debug("Submission failure ignored: wizard closed")
            return OperationResult.fail(CLOSED_MESSAGE)
        step = self._submitting_step
        self._submitting_step = None
        self._set_busy(False)

        message = map_exception(error, context=f"step {step}")
        self._set_error(message)
        self.notifier.error(message)
        errors = getattr(error, "errors", None) or [message]
        return OperationResult.fail(message, errors=errors)

    def _finish(self):
        application_id = self._draft.application_id
        self.repository.delete(ExistingDraftKey(application_id))
        self.repository.delete(NewDraftKey())
        logger.info(f"Application {application_id} completed, drafts removed")
        self.wizard_completed.emit(application_id)
        self.close()

    def back(self) -> OperationResult:
        """Return to the previous stage (local only)."""
        if not self._alive:
            return OperationResult.fail(CLOSED_MESSAGE)
        if self.is_busy:
            return OperationResult.fail(BUSY_MESSAGE)
        if self.step <= WizardSteps.FIRST:
            return OperationResult.fail("Already at the first step")
        self._set_error("")
        self._set_step(self.step - 1)
        self._save()
        return OperationResult.ok(data=self.step)

    def goto_step(self, step: int) -> OperationResult:
        """Jump to a visited or next-available stage."""
        if not self._alive:
            return OperationResult.fail(CLOSED_MESSAGE)
        if self.is_busy:
            return OperationResult.fail(BUSY_MESSAGE)
        if not WizardSteps.FIRST <= step <= self.max_reachable_step:
            return OperationResult.fail(f"Step {step} is not available yet")
        self._set_error("")
        self._set_step(step)
        self._save()
        return OperationResult.ok(data=step)

    # ==================== Editing ====================

    def update_personal(self, **fields) -> OperationResult:
        """Set stage 1 text fields."""
        if not self._alive:
            return OperationResult.fail(CLOSED_MESSAGE)
        unknown = [name for name in fields if name not in PersonalDetails.SCALAR_FIELDS]
        if unknown:
            return OperationResult.fail(f"Unknown field: {', '.join(unknown)}")
        personal = self._draft.payloads.personal
        for name, value in fields.items():
            setattr(personal, name, "" if value is None else str(value))
        self._save()
        return OperationResult.ok()

    def attach_personal(self, slot: str, path: str) -> OperationResult:
        """Attach a local file to the photo or signature slot."""
        if not self._alive:
            return OperationResult.fail(CLOSED_MESSAGE)
        if slot not in PersonalDetails.ATTACHMENT_SLOTS:
            return OperationResult.fail(f"Unknown attachment slot: {slot}")
        attachment = self._pending(path)
        if attachment is None:
            return OperationResult.fail(f"Cannot read file: {path}")

        personal = self._draft.payloads.personal
        self.previews.release_attachment(getattr(personal, slot))
        self.previews.create(attachment)
        setattr(personal, slot, attachment)
        self._save()
        return OperationResult.ok(data=attachment)

    def clear_personal_attachment(self, slot: str) -> OperationResult:
        if not self._alive:
            return OperationResult.fail(CLOSED_MESSAGE)
        if slot not in PersonalDetails.ATTACHMENT_SLOTS:
            return OperationResult.fail(f"Unknown attachment slot: {slot}")
        personal = self._draft.payloads.personal
        self.previews.release_attachment(getattr(personal, slot))
        setattr(personal, slot, None)
        self._save()
        return OperationResult.ok()

    def add_row(self, stage: int) -> OperationResult:
        """Append a blank row; returns its index."""
        if not self._alive:
            return OperationResult.fail(CLOSED_MESSAGE)
        if stage not in ROW_STAGES:
            return OperationResult.fail(f"Step {stage} has no rows")
        _, row_cls = ROW_STAGES[stage]
        rows = self._draft.payloads.rows(stage)
        rows.append(row_cls())
        self._save()
        return OperationResult.ok(data=len(rows) - 1)

    def remove_row(self, stage: int, index: int) -> OperationResult:
        """Remove a row; the list always keeps at least one row."""
        if not self._alive:
            return OperationResult.fail(CLOSED_MESSAGE)
        rows = self._rows_or_none(stage, index)
        if rows is None:
            return OperationResult.fail(f"No row {index} in step {stage}")
        removed = rows.pop(index)
        if isinstance(removed, QualificationRow):
            self.previews.release_attachment(removed.certificate)
        self._draft.payloads.set_rows(stage, rows)
        self._save()
        return OperationResult.ok()

    def update_row(self, stage: int, index: int, **fields) -> OperationResult:
        """Set text fields of one row."""
        if not self._alive:
            return OperationResult.fail(CLOSED_MESSAGE)
        rows = self._rows_or_none(stage, index)
        if rows is None:
            return OperationResult.fail(f"No row {index} in step {stage}")
        row = rows[index]
        unknown = [name for name in fields if name not in row.FIELDS]
        if unknown:
            return OperationResult.fail(f"Unknown field: {', '.join(unknown)}")
        for name, value in fields.items():
            setattr(row, name, "" if value is None else str(value))
        self._save()
        return OperationResult.ok(data=row)

    def attach_certificate(self, index: int, path: str) -> OperationResult:
        """Attach a certificate file to qualification row ``index``."""
        if not self._alive:
            return OperationResult.fail(CLOSED_MESSAGE)
        rows = self._rows_or_none(WizardSteps.QUALIFICATIONS, index)
        if rows is None:
            return OperationResult.fail(f"No qualification {index}")
        attachment = self._pending(path)
        if attachment is None:
            return OperationResult.fail(f"Cannot read file: {path}")

        row = rows[index]
        self.previews.release_attachment(row.certificate)
        self.previews.create(attachment)
        row.certificate = attachment
        self._save()
        return OperationResult.ok(data=attachment)

    def _rows_or_none(self, stage: int, index: int) -> Optional[List]:
        if stage not in ROW_STAGES:
            return None
        rows = self._draft.payloads.rows(stage)
        if not 0 <= index < len(rows):
            return None
        return rows

    @staticmethod
    def _pending(path: str) -> Optional[PendingAttachment]:
        try:
            return PendingAttachment.from_path(path)
        except OSError as e:
            logger.warning(f"Cannot attach {path}: {e}")
            return None

    # ==================== Referees ====================

    def search_referees(self, term: str) -> OperationResult:
        """
        Look up members by membership number (``M-1234`` or ``1234``).

        Returns:
            OperationResult with at most MAX_SEARCH_RESULTS member records;
            an empty list when the term is too short to search
        """
        text = str(term or "").strip().upper()
        if text.startswith(MEMBER_PREFIX):
            suffix = text[len(MEMBER_PREFIX):].strip()
        elif text.isdigit():
            suffix = text
        else:
            if not text:
                return OperationResult.ok(data=[])
            return OperationResult.fail("Enter a membership number such as M-1234")

        if len(suffix) < MIN_SEARCH_CHARS:
            return OperationResult.ok(data=[])

        result = self.execute_with_error_handling(
            "search_referees", self.api_client.search_members, suffix
        )
        if result.success:
            members = [m for m in (result.data or []) if isinstance(m, dict)]
            result.data = members[:MAX_SEARCH_RESULTS]
        return result

    def select_referee(self, index: int, member: Dict[str, Any]) -> OperationResult:
        """Copy a member search result into referee row ``index``."""
        member_id = member.get("user_id") or member.get("id")
        if member_id in (None, ""):
            return OperationResult.fail("Selected member has no id")
        return self.update_row(WizardSteps.REFEREES, index, user_id=str(member_id))

    # ==================== Review ====================

    def summary(self) -> Dict[str, Any]:
        """Read-only data shown on the review stage."""
        payloads = self._draft.payloads
        personal = payloads.personal
        personal_data = {name: getattr(personal, name) for name in PersonalDetails.SCALAR_FIELDS}
        personal_data["full_name"] = personal.full_name
        for slot in PersonalDetails.ATTACHMENT_SLOTS:
            attachment = getattr(personal, slot)
            personal_data[slot] = attachment.display_name if attachment is not None else ""

        stages = {}
        for stage in ROW_STAGES:
            entries = []
            for row in payloads.rows(stage):
                if row.is_blank():
                    continue
                entry = {name: getattr(row, name) for name in row.FIELDS}
                if isinstance(row, QualificationRow):
                    entry["certificate"] = row.certificate.display_name if row.certificate else ""
                entries.append(entry)
            stages[stage] = {"title": WizardSteps.get_title(stage), "entries": entries}

        return {
            "application_id": self._draft.application_id,
            "completion_step": self._draft.completion_step,
            "personal": personal_data,
            "stages": stages,
        }

    # ==================== Teardown ====================

    def close(self):
        """Stop reacting to callbacks and release every preview."""
        if not self._alive:
            return
        self._alive = False
        for worker in list(self._workers):
            if worker.isRunning():
                worker.wait(WORKER_SHUTDOWN_MS)
            if worker.isRunning():
                logger.warning(f"{worker.__class__.__name__} still running after close")
        released = self.previews.release_all()
        logger.info(f"Wizard closed (released {released} previews)")

    # ==================== Internals ====================

    def _set_step(self, step: int):
        previous = self._draft.step
        self._draft.step = step
        if previous != step:
            logger.info(f"Wizard step {previous} -> {step}")
        self.step_changed.emit(step)

    def _save(self):
        if not self._alive:
            return
        key = self._draft.key
        self.repository.save(key, self._draft)
        self.draft_saved.emit(key.storage_key)

    def _dispatch(self, worker, on_success, on_failure) -> Optional[OperationResult]:
        """Run a worker inline (returning the handler's result) or on its thread."""
        if not self._run_async:
            try:
                result = worker.work()
            except Exception as e:
                return on_failure(e)
            return on_success(result)

        worker.succeeded.connect(on_success)
        worker.failed.connect(on_failure)
        worker.finished.connect(self._release_worker)
        self._workers.add(worker)
        worker.start()
        return None

    def _release_worker(self):
        worker = self.sender()
        if worker in self._workers:
            worker.wait()
            self._workers.discard(worker)
