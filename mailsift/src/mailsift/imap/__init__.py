"""Facade for the IMAP execution layer.

What:
  Surface the session, its configuration dataclass, the folder search
  executor, and the error hierarchy raised by search execution.

Why:
  Call sites import from ``mailsift.imap`` and stay unaffected by how the
  layer is split into modules.

Interfaces:
  ``ImapConfig``, ``ImapSession``, ``Folder``, ``build_criteria`` and the
  ``MailSiftError`` family.

Invariants & Safety:
  - All IMAP traffic goes through :class:`ImapSession` so connection errors
    are mapped consistently.
"""

from .client import ImapConfig, ImapSession
from .errors import (
    ConnectionFailedError,
    FolderSelectionError,
    GetMessagesFailedError,
    MailSiftError,
    MessageSearchValidationError,
)
from .folder import Folder
from .search import build_criteria

__all__ = [
    "ConnectionFailedError",
    "Folder",
    "FolderSelectionError",
    "GetMessagesFailedError",
    "ImapConfig",
    "ImapSession",
    "MailSiftError",
    "MessageSearchValidationError",
    "build_criteria",
]
