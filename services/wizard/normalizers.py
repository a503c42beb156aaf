# -*- coding: utf-8 -*-
"""Value normalization shared by the submitter and the prefill merger."""

from typing import Any, Optional

from app.config import Config, Vocabularies


def normalize_exam_type(value: Any) -> str:
    """Map free-text exam names (``WASSCE``, ``g.c.e`` ...) to a vocabulary code."""
    text = str(value or "").strip().lower()
    return Vocabularies.EXAM_TYPE_ALIASES.get(text, "")


def to_absolute_url(path: Any, base_url: Optional[str] = None) -> str:
    """Resolve a server-relative file path against the API base URL."""
    value = str(path or "").strip()
    if not value:
        return ""
    if value.startswith("http://") or value.startswith("https://"):
        return value
    base = (base_url if base_url is not None else Config.API_BASE_URL or "").rstrip("/")
    if not base:
        return value
    if value.startswith("/"):
        return f"{base}{value}"
    return f"{base}/{value}"


def file_name_from_path(path: Any, default: str = "") -> str:
    """Last path segment of a server file reference."""
    value = str(path or "").strip()
    return value.split("/")[-1] or default
