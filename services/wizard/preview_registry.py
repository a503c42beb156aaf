# -*- coding: utf-8 -*-
"""
Preview registry - tracks image previews created for picked files.

Each preview is an opaque reference (``preview:<uuid>``) mapped to the local
file it shows. The owner releases a reference when its slot is reassigned or
its row removed, and releases everything on teardown.
"""

import uuid
from typing import Dict, Optional

from models.attachment import PendingAttachment
from utils.logger import get_logger

logger = get_logger(__name__)

PREVIEW_PREFIX = "preview:"


class PreviewRegistry:
    """Scoped preview references."""

    def __init__(self):
        self._previews: Dict[str, str] = {}

    def create(self, attachment: PendingAttachment) -> Optional[str]:
        """Register a preview for a live image attachment and store its ref on it."""
        if not attachment.is_live or not attachment.is_image:
            return None
        ref = f"{PREVIEW_PREFIX}{uuid.uuid4().hex}"
        self._previews[ref] = attachment.handle
        attachment.preview_ref = ref
        return ref

    def resolve(self, ref: Optional[str]) -> Optional[str]:
        """Local path behind a preview reference, or None once released."""
        return self._previews.get(ref) if ref else None

    def release(self, ref: Optional[str]) -> bool:
        if ref and self._previews.pop(ref, None) is not None:
            logger.debug(f"Preview released: {ref}")
            return True
        return False

    def release_attachment(self, attachment) -> bool:
        """Release the preview held by an attachment, if any."""
        if isinstance(attachment, PendingAttachment) and attachment.preview_ref:
            released = self.release(attachment.preview_ref)
            attachment.preview_ref = None
            return released
        return False

    def release_all(self) -> int:
        count = len(self._previews)
        self._previews.clear()
        if count:
            logger.debug(f"Released {count} previews")
        return count

    @property
    def outstanding(self) -> int:
        return len(self._previews)
