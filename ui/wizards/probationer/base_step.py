# -*- coding: utf-8 -*-
"""
Base Step - Abstract base class for probationer wizard steps.

Steps edit the controller's draft directly; every edit goes through a
controller operation so it is saved as it happens. Subclasses implement:
- setup_ui(): Create the step's widgets (called once)
- populate_data(): Refresh widgets from the current draft
"""

from abc import ABCMeta, abstractmethod
from typing import Optional

from PyQt5.QtWidgets import QWidget, QVBoxLayout, QLabel
from PyQt5.QtGui import QFont

from app.config import WizardSteps


# Combine PyQt5 metaclass with ABC metaclass
class ABCQWidgetMeta(type(QWidget), ABCMeta):
    """Metaclass that combines PyQt5's metaclass with ABC."""
    pass


FIELD_LABELS = {
    "surname": "Surname",
    "other_names": "Other names",
    "title": "Title",
    "postal_address": "Postal address",
    "residential_address": "Residential address",
    "email": "Email",
    "phone": "Phone",
    "date_of_birth": "Date of birth (YYYY-MM-DD)",
    "nationality": "Nationality",
    "institution": "Institution",
    "qualification": "Qualification",
    "year": "Year",
    "exam_type": "Exam type",
    "exam_year": "Exam year",
    "exam_number": "Exam number",
    "subjects_csv": "Subjects (comma separated)",
    "body_name": "Professional body",
    "stage_passed": "Stage passed",
    "certificate_path": "Certificate reference",
    "organization": "Organization",
    "position": "Position",
    "start_date": "Start date (YYYY-MM-DD)",
    "end_date": "End date (YYYY-MM-DD)",
    "responsibilities": "Responsibilities",
    "date": "Date (YYYY-MM-DD)",
    "location": "Location",
    "user_id": "Member user id",
    "relationship": "Relationship",
}


def field_label(name: str) -> str:
    return FIELD_LABELS.get(name, name.replace("_", " ").capitalize())


class BaseStep(QWidget, metaclass=ABCQWidgetMeta):
    """Abstract base class for wizard steps."""

    def __init__(self, controller, step: int, parent: Optional[QWidget] = None):
        """
        Args:
            controller: ProbationerWizardController
            step: Stage number shown by this widget
            parent: Parent widget
        """
        super().__init__(parent)
        self.controller = controller
        self.step = step
        self._is_initialized = False

        self.main_layout = QVBoxLayout(self)
        self.main_layout.setContentsMargins(20, 20, 20, 20)
        self.main_layout.setSpacing(16)

        title = QLabel(self.get_step_title())
        title_font = QFont()
        title_font.setPointSize(12)
        title_font.setBold(True)
        title.setFont(title_font)
        self.main_layout.addWidget(title)

    def initialize(self):
        """Create the UI the first time the step is shown."""
        if not self._is_initialized:
            self.setup_ui()
            self._is_initialized = True

    def on_show(self):
        """Called when the step becomes current."""
        self.initialize()
        self.populate_data()

    @abstractmethod
    def setup_ui(self):
        pass

    @abstractmethod
    def populate_data(self):
        pass

    def get_step_title(self) -> str:
        return WizardSteps.get_title(self.step)

    @property
    def payloads(self):
        return self.controller.payloads
