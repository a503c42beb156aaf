# -*- coding: utf-8 -*-
"""
Probationer Wizard - the 8-stage admission application page.

Provides:
- Header with title, progress and step shortcuts
- Step container
- Navigation buttons (Cancel, Back, Next/Submit)
- Inline error banner bound to the controller's error state
"""

from typing import List, Optional

from PyQt5.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel, QPushButton,
    QFrame, QStackedWidget, QProgressBar
)
from PyQt5.QtCore import pyqtSignal
from PyQt5.QtGui import QFont

from app.config import Config, WizardSteps
from controllers.probationer_wizard_controller import ProbationerWizardController
from ui.error_handler import DialogNotifier
from ui.wizards.probationer.base_step import BaseStep
from ui.wizards.probationer.personal_step import PersonalStep
from ui.wizards.probationer.review_step import ReviewStep
from ui.wizards.probationer.row_list_step import create_row_step
from utils.logger import get_logger

logger = get_logger(__name__)


class ProbationerWizard(QWidget):
    """Page hosting the probationer application wizard."""

    wizard_completed = pyqtSignal(str)  # application id
    wizard_cancelled = pyqtSignal()

    def __init__(self, controller: Optional[ProbationerWizardController] = None,
                 parent: Optional[QWidget] = None):
        super().__init__(parent)
        if controller is None:
            controller = ProbationerWizardController(
                notifier=DialogNotifier(self, status_callback=self._show_status)
            )
        self.controller = controller
        self.steps: List[BaseStep] = self._create_steps()

        self._setup_ui()

        controller.step_changed.connect(self._on_step_changed)
        controller.busy_changed.connect(self._on_busy_changed)
        controller.error_changed.connect(self._on_error_changed)
        controller.data_changed.connect(self._refresh_current_step)
        controller.wizard_completed.connect(self._on_completed)

    def _create_steps(self) -> List[BaseStep]:
        steps = [PersonalStep(self.controller, WizardSteps.PERSONAL)]
        for step in range(WizardSteps.QUALIFICATIONS, WizardSteps.REVIEW):
            steps.append(create_row_step(self.controller, step))
        steps.append(ReviewStep(self.controller, WizardSteps.REVIEW))
        return steps

    def open(self, application_id: Optional[str] = None, target_step: Optional[int] = None):
        """Load the draft (and server record) and show the resolved step."""
        self.controller.open(application_id=application_id, target_step=target_step)

    # =========================================================================
    # UI Setup
    # =========================================================================

    def _setup_ui(self):
        self.setMinimumSize(Config.WINDOW_MIN_WIDTH, Config.WINDOW_MIN_HEIGHT)
        main_layout = QVBoxLayout(self)
        main_layout.setContentsMargins(0, 0, 0, 0)
        main_layout.setSpacing(0)

        main_layout.addWidget(self._create_header())

        separator = QFrame()
        separator.setFrameShape(QFrame.HLine)
        separator.setStyleSheet("background-color: #ddd;")
        separator.setFixedHeight(1)
        main_layout.addWidget(separator)

        self.error_label = QLabel("")
        self.error_label.setWordWrap(True)
        self.error_label.setStyleSheet(
            "background-color: #f8d7da; color: #842029; padding: 10px 20px;"
        )
        self.error_label.hide()
        main_layout.addWidget(self.error_label)

        self.status_label = QLabel("")
        self.status_label.setStyleSheet("color: #0f5132; padding: 6px 20px;")
        main_layout.addWidget(self.status_label)

        self.step_container = QStackedWidget()
        for step in self.steps:
            self.step_container.addWidget(step)
        main_layout.addWidget(self.step_container, 1)

        main_layout.addWidget(self._create_footer())

    def _create_header(self) -> QWidget:
        header = QWidget()
        header.setStyleSheet("""
            QWidget {
                background-color: #f8f9fa;
            }
        """)

        layout = QVBoxLayout(header)
        layout.setContentsMargins(20, 16, 20, 16)
        layout.setSpacing(12)

        self.title_label = QLabel(Config.APP_TITLE)
        title_font = QFont()
        title_font.setPointSize(14)
        title_font.setBold(True)
        self.title_label.setFont(title_font)
        layout.addWidget(self.title_label)

        progress_layout = QHBoxLayout()
        progress_layout.setSpacing(8)

        self.progress_label = QLabel(f"Step 1 of {WizardSteps.COUNT}")
        progress_layout.addWidget(self.progress_label)

        self.progress_bar = QProgressBar()
        self.progress_bar.setMaximum(WizardSteps.COUNT)
        self.progress_bar.setValue(1)
        self.progress_bar.setTextVisible(False)
        self.progress_bar.setFixedHeight(6)
        self.progress_bar.setStyleSheet("""
            QProgressBar {
                border: none;
                background-color: #e9ecef;
                border-radius: 3px;
            }
            QProgressBar::chunk {
                background-color: #0d6efd;
                border-radius: 3px;
            }
        """)
        progress_layout.addWidget(self.progress_bar, 1)
        layout.addLayout(progress_layout)

        shortcuts = QHBoxLayout()
        shortcuts.setSpacing(6)
        self.step_buttons: List[QPushButton] = []
        for step in range(WizardSteps.FIRST, WizardSteps.LAST + 1):
            button = QPushButton(str(step))
            button.setToolTip(WizardSteps.get_title(step))
            button.setFixedSize(32, 32)
            button.clicked.connect(lambda _=False, s=step: self.controller.goto_step(s))
            shortcuts.addWidget(button)
            self.step_buttons.append(button)
        shortcuts.addStretch()
        layout.addLayout(shortcuts)

        return header

    def _create_footer(self) -> QWidget:
        footer = QWidget()
        footer.setStyleSheet("""
            QWidget {
                background-color: #f8f9fa;
            }
        """)

        layout = QHBoxLayout(footer)
        layout.setContentsMargins(20, 16, 20, 16)
        layout.setSpacing(12)

        self.btn_cancel = QPushButton("Cancel")
        self.btn_cancel.setFixedHeight(40)
        self.btn_cancel.clicked.connect(self._handle_cancel)
        layout.addWidget(self.btn_cancel)

        layout.addStretch()

        self.btn_previous = QPushButton("Back")
        self.btn_previous.setFixedHeight(40)
        self.btn_previous.clicked.connect(self.controller.back)
        layout.addWidget(self.btn_previous)

        self.btn_next = QPushButton("Next")
        self.btn_next.setFixedHeight(40)
        self.btn_next.setStyleSheet(
            "QPushButton { background-color: #0d6efd; color: white; padding: 0 24px; }"
            "QPushButton:disabled { background-color: #9ec5fe; }"
        )
        self.btn_next.clicked.connect(self.controller.next)
        layout.addWidget(self.btn_next)

        return footer

    # =========================================================================
    # Controller bindings
    # =========================================================================

    def _on_step_changed(self, step: int):
        self.step_container.setCurrentIndex(step - 1)
        self.steps[step - 1].on_show()
        self.status_label.setText("")
        self._update_header()
        self._update_navigation_buttons()

    def _refresh_current_step(self):
        index = self.step_container.currentIndex()
        self.steps[index].on_show()
        self._update_header()

    def _on_busy_changed(self, busy: bool):
        self._update_navigation_buttons()
        if busy:
            self.btn_next.setText("Please wait...")

    def _on_error_changed(self, message: str):
        self.error_label.setText(message)
        self.error_label.setVisible(bool(message))

    def _on_completed(self, application_id: str):
        logger.info(f"Wizard completed for application {application_id}")
        self._update_navigation_buttons()
        self.wizard_completed.emit(application_id)

    def _show_status(self, message: str):
        self.status_label.setText(message)

    def _update_header(self):
        step = self.controller.step
        self.progress_label.setText(
            f"Step {step} of {WizardSteps.COUNT}: {WizardSteps.get_title(step)}"
        )
        self.progress_bar.setValue(step)

    def _update_navigation_buttons(self):
        controller = self.controller
        idle = controller.is_alive and not controller.is_busy
        step = controller.step

        self.btn_previous.setEnabled(idle and step > WizardSteps.FIRST)
        self.btn_next.setEnabled(idle)
        self.btn_next.setText("Submit" if step == WizardSteps.LAST else "Next")
        for number, button in enumerate(self.step_buttons, start=1):
            button.setEnabled(idle and number <= controller.max_reachable_step)
            button.setStyleSheet("font-weight: bold;" if number == step else "")

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def _handle_cancel(self):
        self.wizard_cancelled.emit()
        self.close()

    def closeEvent(self, event):
        self.controller.close()
        super().closeEvent(event)
