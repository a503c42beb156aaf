# -*- coding: utf-8 -*-
"""
Probationer Controllers
=======================
Controller layer between the wizard UI and the data layer
(draft repository and backend services).

Controllers provide:
- Standardized results via OperationResult
- Qt signals for UI updates
- Busy and error state

Usage:
    from controllers import ProbationerWizardController

    controller = ProbationerWizardController()
    controller.open(application_id="A1")
    result = controller.next()
    if not result.success:
        print(f"Error: {result.message}")
"""

from controllers.base_controller import (
    BaseController,
    OperationResult,
)

from controllers.probationer_wizard_controller import (
    ProbationerWizardController,
)

__all__ = [
    "BaseController",
    "OperationResult",
    "ProbationerWizardController",
]
