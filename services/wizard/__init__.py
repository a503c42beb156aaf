# -*- coding: utf-8 -*-
"""Probationer wizard services: validation, submission, prefill and previews."""

from services.wizard.step_validator import StepValidator
from services.wizard.stage_submitter import RemoteStageSubmitter, SubmitResult
from services.wizard.prefill_merger import PrefillMerger, MergeReport
from services.wizard.preview_registry import PreviewRegistry

__all__ = [
    'StepValidator',
    'RemoteStageSubmitter',
    'SubmitResult',
    'PrefillMerger',
    'MergeReport',
    'PreviewRegistry',
]
