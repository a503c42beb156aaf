# -*- coding: utf-8 -*-
"""
Probationer Application Wizard

8-stage admission wizard: personal information, qualifications, O-level
results, memberships, experience, seminars, referees and review.
"""

from .probationer_wizard import ProbationerWizard
from .base_step import BaseStep

__all__ = [
    'ProbationerWizard',
    'BaseStep',
]
