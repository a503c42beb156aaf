# -*- coding: utf-8 -*-


from pathlib import Path
from dataclasses import dataclass
from typing import Dict
import os

from dotenv import load_dotenv

# ============================================================================
# Load .env file for local environment configuration
# ============================================================================
load_dotenv()  # Load from .env file in project root

# ============================================================================
# Read settings from environment variables (from .env or system)
# ============================================================================
# API Settings
_API_BASE_URL = os.getenv("API_BASE_URL", "https://api.andjemztech.com")
_API_TIMEOUT = int(os.getenv("API_TIMEOUT", "30"))
_API_TOKEN = os.getenv("API_TOKEN", None)
_API_VERIFY_SSL = os.getenv("API_VERIFY_SSL", "true").lower() in ("true", "1", "yes")

# Local storage
_DATA_DIR = os.getenv("PROBATIONER_DATA_DIR", None)


@dataclass
class Config:
    """Application configuration."""

    # Application Info
    APP_NAME: str = "Probationer Admission"
    APP_TITLE: str = "New Probationer Application"
    VERSION: str = "1.0.0"
    ORGANIZATION: str = "Membership Administration"

    # HTTP API Backend Settings
    # Reads from .env file (API_BASE_URL, API_TIMEOUT, API_TOKEN, API_VERIFY_SSL)
    API_BASE_URL: str = _API_BASE_URL
    API_TIMEOUT: int = _API_TIMEOUT
    API_TOKEN: str = _API_TOKEN
    API_VERIFY_SSL: bool = _API_VERIFY_SSL

    # Paths
    PROJECT_ROOT: Path = Path(__file__).parent.parent
    DATA_DIR: Path = Path(_DATA_DIR) if _DATA_DIR else PROJECT_ROOT / "data"
    LOGS_DIR: Path = PROJECT_ROOT / "logs"

    # Draft storage (SQLite)
    DRAFTS_DB_NAME: str = "drafts.db"
    DRAFTS_DB_PATH: Path = DATA_DIR / DRAFTS_DB_NAME

    # Logging
    LOG_FILE: str = "app.log"
    LOG_PATH: Path = LOGS_DIR / LOG_FILE
    LOG_MAX_BYTES: int = 5 * 1024 * 1024  # 5MB
    LOG_BACKUP_COUNT: int = 3

    # Attachments
    MAX_IMAGE_BYTES: int = 5 * 1024 * 1024
    MAX_CERT_BYTES: int = 10 * 1024 * 1024
    IMAGE_TYPES: tuple = ("image/jpeg", "image/png", "image/webp")
    CERT_TYPES: tuple = ("application/pdf", "image/jpeg", "image/png", "image/webp")

    # UI Settings
    WINDOW_MIN_WIDTH: int = 1000
    WINDOW_MIN_HEIGHT: int = 700

    # Date Formats
    DATE_FORMAT: str = "%Y-%m-%d"


# Wizard layout
class WizardSteps:
    PERSONAL = 1
    QUALIFICATIONS = 2
    EXAM_RESULTS = 3
    MEMBERSHIPS = 4
    EXPERIENCE = 5
    SEMINARS = 6
    REFEREES = 7
    REVIEW = 8

    FIRST = PERSONAL
    LAST = REVIEW
    COUNT = 8

    TITLES: Dict[int, str] = {
        1: "Personal Information",
        2: "Educational Qualifications",
        3: "O-Level Results",
        4: "Professional Memberships",
        5: "Employment / Work Experience",
        6: "Seminars / Workshops",
        7: "Referees",
        8: "Review & Submit",
    }

    @classmethod
    def get_title(cls, step: int) -> str:
        return cls.TITLES.get(step, "")


# Controlled vocabularies
class Vocabularies:
    TITLES = ["Mr", "Mrs", "Miss", "Ms", "Dr", "Prof", "Engr", "Arch", "Rev", "Sir", "Lady"]

    EXAM_TYPES = [
        ("waec", "WAEC"),
        ("neco", "NECO"),
        ("nabteb", "NABTEB"),
        ("gce", "GCE"),
    ]

    # Free-text exam names accepted from users and older server records
    EXAM_TYPE_ALIASES: Dict[str, str] = {
        "waec": "waec",
        "wassce": "waec",
        "ssce": "waec",
        "neco": "neco",
        "nabteb": "nabteb",
        "gce": "gce",
        "waec gce": "gce",
        "g.c.e": "gce",
    }

    RELATIONSHIPS = ["Employer", "Supervisor", "Lecturer", "Mentor", "Colleague", "Other"]
