# -*- coding: utf-8 -*-
"""
Attachment models.

An attachment is either pending (a local file picked by the user, not yet
uploaded) or committed (already stored on the server and referenced by URL).
"""

import mimetypes
import os
from dataclasses import dataclass
from typing import Optional, Union, Dict, Any


@dataclass
class PendingAttachment:
    """A locally picked file waiting to be uploaded with its stage."""

    handle: Optional[str]  # local file path; None once restored from a draft
    display_name: str
    mime_type: str = ""
    size: int = 0
    preview_ref: Optional[str] = None

    @classmethod
    def from_path(cls, path: str) -> "PendingAttachment":
        """Build a pending attachment from a file on disk."""
        mime_type, _ = mimetypes.guess_type(path)
        return cls(
            handle=str(path),
            display_name=os.path.basename(str(path)),
            mime_type=mime_type or "application/octet-stream",
            size=os.path.getsize(path),
        )

    @property
    def is_live(self) -> bool:
        """True while the attachment still points at a real local file."""
        return bool(self.handle)

    @property
    def is_image(self) -> bool:
        return self.mime_type.startswith("image/")

    def to_dict(self) -> Dict[str, Any]:
        # Live file handles never survive a reload.
        return {"kind": "pending", "display_name": self.display_name}


@dataclass
class CommittedAttachment:
    """A file already held by the server, shown read-only."""

    remote_ref: str  # absolute URL
    display_name: str

    @property
    def is_live(self) -> bool:
        return False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": "committed",
            "remote_ref": self.remote_ref,
            "display_name": self.display_name,
        }


Attachment = Union[PendingAttachment, CommittedAttachment]


def attachment_from_dict(data: Optional[Dict[str, Any]]) -> Optional[Attachment]:
    """Restore an attachment from its persisted form."""
    if not data or not isinstance(data, dict):
        return None
    if data.get("kind") == "committed" and data.get("remote_ref"):
        return CommittedAttachment(
            remote_ref=data["remote_ref"],
            display_name=data.get("display_name") or "",
        )
    if data.get("display_name"):
        return PendingAttachment(handle=None, display_name=data["display_name"])
    return None


def attachment_to_dict(attachment: Optional[Attachment]) -> Optional[Dict[str, Any]]:
    return attachment.to_dict() if attachment is not None else None
