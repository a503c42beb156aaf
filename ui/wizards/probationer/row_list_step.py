# -*- coding: utf-8 -*-
"""
Row list steps (2-7).

One generic widget edits any row-list stage; the field set comes from the
row type. Qualifications add a certificate picker and referees add a member
search.
"""

from typing import Dict, List, Optional

from PyQt5.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QGridLayout, QFrame, QLabel, QLineEdit,
    QComboBox, QPushButton, QScrollArea, QListWidget, QListWidgetItem, QFileDialog
)
from PyQt5.QtCore import Qt

from app.config import Vocabularies, WizardSteps
from models.attachment import CommittedAttachment
from models.stages import ROW_STAGES
from ui.wizards.probationer.base_step import BaseStep, field_label

CERT_FILTER = "Certificates (*.pdf *.jpg *.jpeg *.png *.webp)"

# field -> (value, label) choices shown in a combo box
FIELD_CHOICES = {
    "exam_type": [("", "")] + list(Vocabularies.EXAM_TYPES),
    "relationship": [("", "")] + [(r, r) for r in Vocabularies.RELATIONSHIPS],
}


class RowListStep(BaseStep):
    """Editable list of stage rows."""

    ROW_NOUN = {
        WizardSteps.QUALIFICATIONS: "Qualification",
        WizardSteps.EXAM_RESULTS: "Result",
        WizardSteps.MEMBERSHIPS: "Membership",
        WizardSteps.EXPERIENCE: "Experience",
        WizardSteps.SEMINARS: "Seminar",
        WizardSteps.REFEREES: "Referee",
    }

    def setup_ui(self):
        self.setup_extra_ui()

        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        scroll.setFrameShape(QFrame.NoFrame)
        container = QWidget()
        self.rows_layout = QVBoxLayout(container)
        self.rows_layout.setSpacing(12)
        self.rows_layout.addStretch()
        scroll.setWidget(container)
        self.main_layout.addWidget(scroll, 1)

        self.btn_add = QPushButton(f"+ Add {self.row_noun.lower()}")
        self.btn_add.clicked.connect(self._add_row)
        self.main_layout.addWidget(self.btn_add, alignment=Qt.AlignLeft)

    def setup_extra_ui(self):
        """Hook for widgets shown above the rows."""
        pass

    @property
    def row_noun(self) -> str:
        return self.ROW_NOUN.get(self.step, "Entry")

    @property
    def rows(self) -> List:
        return self.payloads.rows(self.step)

    # ==================== Rendering ====================

    def populate_data(self):
        while self.rows_layout.count() > 1:
            item = self.rows_layout.takeAt(0)
            if item.widget():
                item.widget().deleteLater()

        for index, row in enumerate(self.rows):
            self.rows_layout.insertWidget(index, self._build_card(index, row))

    def _build_card(self, index: int, row) -> QWidget:
        card = QFrame()
        card.setObjectName("rowCard")
        card.setStyleSheet("""
            QFrame#rowCard {
                background-color: #ffffff;
                border: 1px solid #dee2e6;
                border-radius: 6px;
            }
        """)
        layout = QVBoxLayout(card)
        layout.setContentsMargins(12, 12, 12, 12)

        header = QHBoxLayout()
        header.addWidget(QLabel(f"{self.row_noun} #{index + 1}"))
        header.addStretch()
        btn_remove = QPushButton("Remove")
        btn_remove.clicked.connect(lambda _=False, i=index: self._remove_row(i))
        header.addWidget(btn_remove)
        layout.addLayout(header)

        grid = QGridLayout()
        for position, name in enumerate(row.FIELDS):
            grid.addWidget(QLabel(field_label(name)), position, 0)
            grid.addWidget(self._build_editor(index, name, getattr(row, name)), position, 1)
        layout.addLayout(grid)

        self.add_row_widgets(index, row, layout)
        return card

    def _build_editor(self, index: int, name: str, value: str) -> QWidget:
        choices = FIELD_CHOICES.get(name)
        if choices is None:
            editor = QLineEdit(value)
            editor.textEdited.connect(lambda text, i=index, n=name: self._update(i, n, text))
            return editor

        editor = QComboBox()
        for code, label in choices:
            editor.addItem(label, code)
        position = editor.findData(value)
        editor.setCurrentIndex(position if position >= 0 else 0)
        editor.activated.connect(
            lambda pos, i=index, n=name, e=editor: self._update(i, n, e.itemData(pos))
        )
        return editor

    def add_row_widgets(self, index: int, row, layout: QVBoxLayout):
        """Hook for per-row extras."""
        pass

    # ==================== Edits ====================

    def _update(self, index: int, name: str, value: str):
        self.controller.update_row(self.step, index, **{name: value})

    def _add_row(self):
        self.controller.add_row(self.step)
        self.populate_data()

    def _remove_row(self, index: int):
        self.controller.remove_row(self.step, index)
        self.populate_data()


class QualificationsStep(RowListStep):
    """Step 2: qualifications with certificate uploads."""

    def add_row_widgets(self, index: int, row, layout: QVBoxLayout):
        line = QHBoxLayout()
        certificate = row.certificate
        if certificate is None:
            text = "No certificate attached"
        elif isinstance(certificate, CommittedAttachment):
            text = f"{certificate.display_name} (on server)"
        else:
            text = certificate.display_name
        line.addWidget(QLabel(text), 1)

        btn_attach = QPushButton("Attach certificate...")
        btn_attach.clicked.connect(lambda _=False, i=index: self._choose_certificate(i))
        line.addWidget(btn_attach)
        layout.addLayout(line)

    def _choose_certificate(self, index: int):
        path, _ = QFileDialog.getOpenFileName(self, "Select certificate", "", CERT_FILTER)
        if path:
            self.controller.attach_certificate(index, path)
            self.populate_data()


class RefereesStep(RowListStep):
    """Step 7: referees, with member search by membership number."""

    def setup_extra_ui(self):
        search_row = QHBoxLayout()
        self.search_input = QLineEdit()
        self.search_input.setPlaceholderText("Membership number, e.g. M-1234")
        self.search_input.returnPressed.connect(self._search)
        search_row.addWidget(self.search_input, 1)

        btn_search = QPushButton("Search")
        btn_search.clicked.connect(self._search)
        search_row.addWidget(btn_search)
        self.main_layout.addLayout(search_row)

        self.search_status = QLabel("")
        self.main_layout.addWidget(self.search_status)

        self.results_list = QListWidget()
        self.results_list.setMaximumHeight(140)
        self.results_list.itemDoubleClicked.connect(self._use_result)
        self.main_layout.addWidget(self.results_list)

    def _search(self):
        self.results_list.clear()
        result = self.controller.search_referees(self.search_input.text())
        if not result.success:
            self.search_status.setText(result.message)
            return
        members = result.data or []
        self.search_status.setText(
            "Double-click a member to add them as a referee" if members else "No members found"
        )
        for member in members:
            item = QListWidgetItem(self._describe(member))
            item.setData(Qt.UserRole, member)
            self.results_list.addItem(item)

    @staticmethod
    def _describe(member: Dict) -> str:
        name = member.get("name") or " ".join(
            str(member.get(k) or "") for k in ("surname", "other_names")
        ).strip()
        number = member.get("membership_number") or member.get("member_no") or ""
        return " | ".join(part for part in (str(number), name) if part) or str(member.get("id", ""))

    def _use_result(self, item: QListWidgetItem):
        member = item.data(Qt.UserRole)
        index = self._first_open_row()
        if index is None:
            index = self.controller.add_row(self.step).data
        self.controller.select_referee(index, member)
        self.populate_data()

    def _first_open_row(self) -> Optional[int]:
        for index, row in enumerate(self.rows):
            if not row.user_id.strip():
                return index
        return None


def create_row_step(controller, step: int) -> RowListStep:
    """Widget for a row-list stage."""
    if step not in ROW_STAGES:
        raise ValueError(f"Step {step} is not a row-list stage")
    if step == WizardSteps.QUALIFICATIONS:
        return QualificationsStep(controller, step)
    if step == WizardSteps.REFEREES:
        return RefereesStep(controller, step)
    return RowListStep(controller, step)
