# -*- coding: utf-8 -*-
"""Step 8: read-only review before acknowledgement."""

from PyQt5.QtWidgets import QTextEdit, QLabel

from models.stages import PersonalDetails
from ui.wizards.probationer.base_step import BaseStep, field_label


class ReviewStep(BaseStep):
    """Summary of everything entered."""

    def setup_ui(self):
        note = QLabel("Review your application. Submitting acknowledges it for processing.")
        note.setWordWrap(True)
        self.main_layout.addWidget(note)

        self.summary_view = QTextEdit()
        self.summary_view.setReadOnly(True)
        self.main_layout.addWidget(self.summary_view, 1)

    def populate_data(self):
        self.summary_view.setPlainText(self.render_summary(self.controller.summary()))

    @staticmethod
    def render_summary(summary: dict) -> str:
        lines = []
        if summary.get("application_id"):
            lines.append(f"Application: {summary['application_id']}")
            lines.append("")

        personal = summary["personal"]
        lines.append("Personal Information")
        for name in PersonalDetails.SCALAR_FIELDS:
            if personal.get(name):
                lines.append(f"  {field_label(name)}: {personal[name]}")
        for slot, label in (("photo", "Passport photo"), ("signature", "Signature")):
            lines.append(f"  {label}: {personal.get(slot) or 'not provided'}")

        for stage in sorted(summary["stages"]):
            section = summary["stages"][stage]
            lines.append("")
            lines.append(section["title"])
            if not section["entries"]:
                lines.append("  (none)")
            for number, entry in enumerate(section["entries"], start=1):
                values = ", ".join(f"{field_label(k)}: {v}" for k, v in entry.items() if v)
                lines.append(f"  {number}. {values}")
        return "\n".join(lines)
