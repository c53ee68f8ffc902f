"""Message objects returned by search execution."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Tuple

SEEN = "\\Seen"


@dataclass(frozen=True)
class Attachment:
    """Decoded attachment payload extracted from a fetched message."""

    filename: Optional[str]
    content_type: str
    data: bytes
    content_id: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.data)

    def __repr__(self) -> str:
        return (
            f"Attachment(filename={self.filename!r}, "
            f"content_type={self.content_type!r}, size={self.size} bytes)"
        )


@dataclass(frozen=True)
class Message:
    """A fetched message.

    ``text`` and ``html`` are ``None`` when the search ran with body retrieval
    disabled; ``attachments`` is empty when attachment retrieval was disabled.
    The mutable ``headers`` and ``attachments`` take part in equality but not
    in the hash.
    """

    uid: int
    subject: str = ""
    from_: str = ""
    to: Tuple[str, ...] = ()
    cc: Tuple[str, ...] = ()
    bcc: Tuple[str, ...] = ()
    date: Optional[datetime] = None
    message_id: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict, hash=False)
    flags: Tuple[str, ...] = ()
    size: Optional[int] = None
    internal_date: Optional[datetime] = None
    text: Optional[str] = None
    html: Optional[str] = None
    attachments: List[Attachment] = field(default_factory=list, hash=False)

    @property
    def is_seen(self) -> bool:
        return SEEN in self.flags

    @property
    def has_attachments(self) -> bool:
        return bool(self.attachments)

    def summary(self) -> Dict[str, object]:
        """Return a JSON-friendly digest without body content."""

        return {
            "uid": self.uid,
            "date": self.date.isoformat() if self.date else None,
            "from": self.from_,
            "subject": self.subject,
            "flags": list(self.flags),
            "attachments": len(self.attachments),
        }
