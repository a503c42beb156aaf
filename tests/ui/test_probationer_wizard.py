# -*- coding: utf-8 -*-
"""
Tests for the probationer wizard page.
"""

import pytest
from PyQt5.QtCore import Qt

from controllers.probationer_wizard_controller import ProbationerWizardController
from ui.error_handler import DialogNotifier
from ui.wizards.probationer import ProbationerWizard
from ui.wizards.probationer.review_step import ReviewStep


@pytest.fixture
def controller(qapp, repository, backend, notifier):
    return ProbationerWizardController(
        repository=repository, api_client=backend, notifier=notifier, run_async=False
    )


@pytest.fixture
def wizard(controller, qtbot):
    page = ProbationerWizard(controller=controller)
    qtbot.addWidget(page)
    page.show()
    page.open()
    return page


class TestProbationerWizardPage:
    """Page bindings to the controller."""

    def test_has_eight_steps(self, wizard):
        assert wizard.step_container.count() == 8
        assert wizard.step_container.currentIndex() == 0
        assert not wizard.btn_previous.isEnabled()
        assert wizard.btn_next.text() == "Next"

    def test_typing_saves_draft(self, wizard, repository, qtbot):
        personal_step = wizard.steps[0]
        qtbot.keyClicks(personal_step.inputs["surname"], "Doe")
        assert wizard.controller.payloads.personal.surname == "Doe"
        assert repository.exists(wizard.controller.draft.key)

    def test_validation_errors_are_shown(self, wizard, qtbot):
        qtbot.mouseClick(wizard.btn_next, Qt.LeftButton)
        assert wizard.error_label.isVisibleTo(wizard)
        assert "Surname is required" in wizard.error_label.text()
        assert wizard.step_container.currentIndex() == 0

    def test_next_moves_to_step_two(self, wizard, qtbot):
        wizard.controller.update_personal(surname="Doe", other_names="Jane", email="jane@x.com")
        qtbot.mouseClick(wizard.btn_next, Qt.LeftButton)

        assert wizard.step_container.currentIndex() == 1
        assert wizard.btn_previous.isEnabled()
        assert not wizard.error_label.isVisibleTo(wizard)
        assert wizard.step_buttons[1].isEnabled()
        assert not wizard.step_buttons[2].isEnabled()
        assert wizard.progress_label.text() == "Step 2 of 8: Educational Qualifications"

    def test_submit_notice_stays_visible(self, wizard, qtbot):
        wizard.controller.notifier = DialogNotifier(wizard, status_callback=wizard._show_status)
        wizard.controller.update_personal(surname="Doe", other_names="Jane", email="jane@x.com")

        qtbot.mouseClick(wizard.btn_next, Qt.LeftButton)

        assert wizard.step_container.currentIndex() == 1
        assert wizard.status_label.text() == "Step 1 saved"

    def test_row_step_add_button(self, wizard, qtbot):
        wizard.controller.update_personal(surname="Doe", other_names="Jane", email="jane@x.com")
        wizard.controller.next()
        step = wizard.steps[1]

        qtbot.mouseClick(step.btn_add, Qt.LeftButton)

        assert len(wizard.controller.payloads.qualifications) == 2

    def test_review_text(self, controller):
        controller.open()
        controller.update_personal(surname="Doe", other_names="Jane")
        text = ReviewStep.render_summary(controller.summary())
        assert "Surname: Doe" in text
        assert "Passport photo: not provided" in text

    def test_close_releases_controller(self, wizard):
        wizard.close()
        assert not wizard.controller.is_alive
