# -*- coding: utf-8 -*-
"""Step 1: personal information with passport photo and signature."""

from typing import Dict

from PyQt5.QtWidgets import (
    QWidget, QFormLayout, QHBoxLayout, QLineEdit, QComboBox, QLabel,
    QPushButton, QFileDialog
)

from app.config import Vocabularies
from models.attachment import CommittedAttachment
from models.stages import PersonalDetails
from ui.wizards.probationer.base_step import BaseStep, field_label

IMAGE_FILTER = "Images (*.jpg *.jpeg *.png *.webp)"


class PersonalStep(BaseStep):
    """Personal details form."""

    def setup_ui(self):
        form = QFormLayout()
        form.setSpacing(10)
        self.inputs: Dict[str, QWidget] = {}

        for name in PersonalDetails.SCALAR_FIELDS:
            if name == "title":
                widget = QComboBox()
                widget.setEditable(True)
                widget.addItems([""] + Vocabularies.TITLES)
                widget.editTextChanged.connect(lambda text, n=name: self._on_field_edited(n, text))
            else:
                widget = QLineEdit()
                widget.textEdited.connect(lambda text, n=name: self._on_field_edited(n, text))
            self.inputs[name] = widget
            form.addRow(field_label(name), widget)

        self.attachment_labels: Dict[str, QLabel] = {}
        for slot, label in (("photo", "Passport photo"), ("signature", "Signature")):
            form.addRow(label, self._attachment_row(slot))

        self.main_layout.addLayout(form)
        self.main_layout.addStretch()

    def _attachment_row(self, slot: str) -> QWidget:
        row = QWidget()
        layout = QHBoxLayout(row)
        layout.setContentsMargins(0, 0, 0, 0)

        name_label = QLabel("No file selected")
        self.attachment_labels[slot] = name_label
        layout.addWidget(name_label, 1)

        choose = QPushButton("Choose...")
        choose.clicked.connect(lambda _=False, s=slot: self._choose_file(s))
        layout.addWidget(choose)

        clear = QPushButton("Clear")
        clear.clicked.connect(lambda _=False, s=slot: self._clear_file(s))
        layout.addWidget(clear)
        return row

    def populate_data(self):
        personal = self.payloads.personal
        for name, widget in self.inputs.items():
            value = getattr(personal, name)
            widget.blockSignals(True)
            if isinstance(widget, QComboBox):
                widget.setEditText(value)
            else:
                widget.setText(value)
            widget.blockSignals(False)

        for slot, label in self.attachment_labels.items():
            attachment = getattr(personal, slot)
            if attachment is None:
                label.setText("No file selected")
            elif isinstance(attachment, CommittedAttachment):
                label.setText(f"{attachment.display_name} (on server)")
            elif attachment.is_live:
                label.setText(attachment.display_name)
            else:
                label.setText(f"{attachment.display_name} (choose again to upload)")

    def _on_field_edited(self, name: str, text: str):
        self.controller.update_personal(**{name: text})

    def _choose_file(self, slot: str):
        path, _ = QFileDialog.getOpenFileName(self, "Select file", "", IMAGE_FILTER)
        if path:
            self.controller.attach_personal(slot, path)
            self.populate_data()

    def _clear_file(self, slot: str):
        self.controller.clear_personal_attachment(slot)
        self.populate_data()
