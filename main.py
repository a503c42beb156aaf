#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Probationer Admission - desktop entry point.

Opens the probationer application wizard. A deep link may name the
application to resume and the step to show:

    python main.py --id A1 --goto 5
"""

import argparse
import sys

from PyQt5.QtWidgets import QApplication
from PyQt5.QtCore import Qt

from app.config import Config
from utils.logger import setup_logger


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=Config.APP_TITLE)
    parser.add_argument("--id", dest="application_id", default=None,
                        help="application id to resume")
    parser.add_argument("--goto", dest="target_step", type=int, default=None,
                        help="step to open (clamped to the reachable range)")
    return parser.parse_args(argv)


def main():
    """Main application entry point."""

    # Set Qt attributes BEFORE creating QApplication
    QApplication.setAttribute(Qt.AA_EnableHighDpiScaling, True)
    QApplication.setAttribute(Qt.AA_UseHighDpiPixmaps, True)

    logger = setup_logger()

    try:
        args = parse_args(sys.argv[1:])

        app = QApplication(sys.argv[:1])
        app.setApplicationName(Config.APP_NAME)
        app.setOrganizationName(Config.ORGANIZATION)

        logger.info("=" * 80)
        logger.info(f"Starting {Config.APP_NAME} {Config.VERSION}")
        logger.info(f"API: {Config.API_BASE_URL} | Drafts: {Config.DRAFTS_DB_PATH}")
        logger.info("=" * 80)

        from ui.wizards.probationer import ProbationerWizard

        window = ProbationerWizard()
        window.setWindowTitle(Config.APP_TITLE)
        window.wizard_completed.connect(lambda _id: window.close())
        window.show()
        window.open(application_id=args.application_id, target_step=args.target_step)
        logger.info(">> Wizard opened")

        exit_code = app.exec_()
        logger.info(f"Application closed with exit code: {exit_code}")
        sys.exit(exit_code)

    except ImportError as e:
        error_msg = f"Import Error: {e}"
        print(f"\n[ERROR] {error_msg}")
        print("\nMissing dependencies? Run: pip install -e .")
        logger.exception(error_msg)
        sys.exit(1)

    except Exception as e:
        error_msg = f"Fatal error during application startup: {e}"
        print(f"\n[ERROR] {error_msg}")
        print(f"\nPlease check {Config.LOG_PATH} for details")
        logger.exception(error_msg)
        sys.exit(1)


if __name__ == "__main__":
    main()
