# -*- coding: utf-8 -*-
"""
Shared fixtures: headless Qt, an in-memory draft store and a fake backend
that keeps one record per (application, stage).
"""

import os
import sys
from pathlib import Path

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from PyQt5.QtWidgets import QApplication

from repositories.draft_repository import InMemoryDraftRepository
from services.exceptions import NotFoundException
from services.notifier import RecordingNotifier


class FakeBackend:
    """
    Stand-in for ProbationerApiClient.

    Stage submissions overwrite the stored record for that stage, so
    repeating a submission never creates a second record.
    """

    def __init__(self):
        self.records = {}   # application id -> record returned by get_application
        self.stages = {}    # application id -> {stage: body}
        self.members = []
        self.calls = []
        self.fail_with = None
        self._next_id = 1

    def _call(self, name, *args):
        self.calls.append((name,) + args)
        if self.fail_with is not None:
            error, self.fail_with = self.fail_with, None
            raise error

    def call_names(self):
        return [call[0] for call in self.calls]

    def create_step1(self, fields, uploads=None):
        self._call("create_step1", list(fields), list(uploads or []))
        values = dict(fields)
        application_id = values.pop("application_id", None)
        if application_id is None:
            application_id = f"A{self._next_id}"
            self._next_id += 1
        record = self.records.setdefault(application_id, {"id": application_id, "completion_step": 0})
        record.update(values)
        record["completion_step"] = max(record["completion_step"], 1)
        self.stages.setdefault(application_id, {})[1] = values
        return {"data": {"id": application_id}, "message": "Step 1 saved"}

    def submit_step(self, step, application_id, json_data=None, form_data=None, uploads=None):
        self._call("submit_step", step, application_id)
        if application_id not in self.records:
            raise NotFoundException(message="Application not found", status_code=404)
        self.stages.setdefault(application_id, {})[step] = json_data if json_data is not None else form_data
        record = self.records[application_id]
        record["completion_step"] = max(record.get("completion_step", 0), step)
        return {"message": f"Step {step} saved"}

    def finalize_step8(self, application_id):
        self._call("finalize_step8", application_id)
        if application_id not in self.records:
            raise NotFoundException(message="Application not found", status_code=404)
        self.records[application_id]["status"] = "acknowledged"
        self.records[application_id]["completion_step"] = 8
        return {"message": "Application acknowledged"}

    def get_application(self, application_id):
        self._call("get_application", application_id)
        if application_id not in self.records:
            raise NotFoundException(message=f"Application {application_id} not found", status_code=404)
        return dict(self.records[application_id])

    def get_qualifications(self, application_id):
        self._call("get_qualifications", application_id)
        return []

    def get_olevel_results(self, application_id):
        self._call("get_olevel_results", application_id)
        return []

    def search_members(self, suffix):
        self._call("search_members", suffix)
        return [m for m in self.members if suffix in str(m.get("membership_number", ""))]


@pytest.fixture(scope="session")
def qapp():
    """Create QApplication for tests."""
    app = QApplication.instance()
    if app is None:
        app = QApplication(sys.argv)
    yield app


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def repository():
    return InMemoryDraftRepository()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def make_file(tmp_path):
    """Write a file of the given size and return its path."""
    def _make(name, size=1024):
        path = tmp_path / name
        path.write_bytes(b"\0" * size)
        return str(path)
    return _make
