"""MIME parsing helpers turning fetched IMAP payloads into :class:`Message` objects.

What:
  Parse raw RFC822 bytes (a full message or only its header block) into the
  :class:`~mailsift.core.message.Message` dataclass, extracting plain-text and
  HTML bodies and, on request, attachment payloads.

Why:
  Search results arrive as opaque byte strings keyed by fetch item. The
  executor needs one predictable conversion regardless of how the mail was
  authored (single part, multipart/alternative, nested attachments, odd
  charsets).

How:
  Use the ``email`` package's :class:`~email.parser.BytesParser` with the
  default policy, walk the MIME tree once, and truncate decoded text on the
  encoded UTF-8 byte length.

Interfaces:
  :func:`parse_message`, :data:`MAX_BODY_BYTES`.

Invariants & Safety:
  - Text is decoded with ``errors="replace"`` so undecodable bytes never raise.
  - Truncation never splits a multi-byte code point.
"""
from __future__ import annotations

from datetime import datetime
from email import policy
from email.message import EmailMessage
from email.parser import BytesParser
from email.utils import getaddresses, parsedate_to_datetime
from typing import List, Optional, Sequence, Tuple

from ..core.message import Attachment, Message


MAX_BODY_BYTES = 1_000_000
"""Default upper bound for a decoded body, in UTF-8 bytes."""


def parse_message(
    raw: bytes,
    *,
    uid: int,
    flags: Sequence[str] = (),
    size: Optional[int] = None,
    internal_date: Optional[datetime] = None,
    include_body: bool = True,
    include_attachments: bool = True,
    max_body_bytes: int = MAX_BODY_BYTES,
) -> Message:
    """Parse a fetched payload into a :class:`Message`.

    What:
      Builds the header fields, lower-cased header mapping, bodies, and
      attachments of one message.

    Why:
      The executor fetches either ``BODY[]`` or only ``BODY[HEADER]``; both go
      through the same function so header handling cannot drift between the
      two modes.

    Args:
      raw: Bytes from the ``BODY[]`` or ``BODY[HEADER]`` fetch item.
      uid: Message UID.
      flags: Flags from the ``FLAGS`` fetch item.
      size: ``RFC822.SIZE`` value, when fetched.
      internal_date: ``INTERNALDATE`` value, when fetched.
      include_body: When ``False`` the ``text``/``html`` fields stay ``None``.
      include_attachments: When ``False`` no attachment payload is decoded.
      max_body_bytes: Truncation limit for each text body.

    Returns:
      The parsed message.
    """

    message = BytesParser(policy=policy.default).parsebytes(raw)
    headers = {name.lower(): str(value) for name, value in message.items()}
    text: Optional[str] = None
    html: Optional[str] = None
    attachments: List[Attachment] = []
    if include_body:
        text, html, attachments = _walk(message, include_attachments, max_body_bytes)
    return Message(
        uid=uid,
        subject=headers.get("subject", ""),
        from_=headers.get("from", ""),
        to=_addresses(message, "to"),
        cc=_addresses(message, "cc"),
        bcc=_addresses(message, "bcc"),
        date=_header_date(headers.get("date")),
        message_id=headers.get("message-id"),
        headers=headers,
        flags=tuple(flags),
        size=size,
        internal_date=internal_date,
        text=text,
        html=html,
        attachments=attachments,
    )


def _walk(
    message: EmailMessage,
    include_attachments: bool,
    max_body_bytes: int,
) -> Tuple[Optional[str], Optional[str], List[Attachment]]:
    """Collect the first ``text/plain`` and ``text/html`` bodies and attachments."""

    text: Optional[str] = None
    html: Optional[str] = None
    attachments: List[Attachment] = []
    for part in message.walk():
        if part.is_multipart():
            continue
        disposition = part.get_content_disposition()
        content_type = part.get_content_type()
        if disposition == "attachment" or (
            disposition == "inline" and part.get_filename()
        ) or not content_type.startswith("text/"):
            if include_attachments:
                attachments.append(_attachment(part))
            continue
        if content_type == "text/plain" and text is None:
            text = _truncate(_decode(part), max_body_bytes)
        elif content_type == "text/html" and html is None:
            html = _truncate(_decode(part), max_body_bytes)
    return text, html, attachments


def _attachment(part: EmailMessage) -> Attachment:
    payload = part.get_payload(decode=True) or b""
    content_id = part.get("Content-ID")
    return Attachment(
        filename=part.get_filename(),
        content_type=part.get_content_type(),
        data=payload,
        content_id=str(content_id).strip("<>") if content_id else None,
    )


def _decode(part: EmailMessage) -> str:
    payload = part.get_payload(decode=True) or b""
    charset = part.get_content_charset("utf-8")
    try:
        return payload.decode(charset, errors="replace")
    except LookupError:
        return payload.decode("utf-8", errors="replace")


def _addresses(message: EmailMessage, name: str) -> Tuple[str, ...]:
    values = [str(value) for value in message.get_all(name, [])]
    return tuple(address for _, address in getaddresses(values) if address)


def _header_date(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None


def _truncate(text: str, limit: int) -> str:
    """Clamp ``text`` to ``limit`` bytes when encoded in UTF-8."""

    encoded = text.encode("utf-8")
    if len(encoded) <= limit:
        return text
    return encoded[:limit].decode("utf-8", errors="ignore")
