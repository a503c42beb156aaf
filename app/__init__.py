# -*- coding: utf-8 -*-
"""
Probationer Application Core Module
"""

from .config import Config, WizardSteps, Vocabularies

__all__ = ["Config", "WizardSteps", "Vocabularies"]
