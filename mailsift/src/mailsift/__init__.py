"""
Module: mailsift.__init__

What:
  Fluent IMAP search queries. Build criteria with :class:`SearchQuery`, run
  them through a :class:`Folder` on an :class:`ImapSession`, and receive
  parsed :class:`Message` objects.

Usage:
  with ImapSession(ImapConfig()) as session:
      messages = (
          session.folder("INBOX")
          .query()
          .unseen()
          .from_("john@example.com")
          .since(date(2018, 4, 8))
          .leave_unread()
          .get()
      )

Interfaces:
  - core: Query builder, statements, options, message objects.
  - imap: Session, folder executor, error hierarchy.
  - config: ``config.yaml`` loading.
  - utils: Logging and MIME helpers.
"""

from .core import (
    Attachment,
    ExecutionOptions,
    FetchMode,
    Message,
    SearchExecutor,
    SearchQuery,
    Statement,
)
from .imap import (
    ConnectionFailedError,
    Folder,
    GetMessagesFailedError,
    ImapConfig,
    ImapSession,
    MailSiftError,
    MessageSearchValidationError,
)

__version__ = "0.1.0"

__all__ = [
    "Attachment",
    "ConnectionFailedError",
    "ExecutionOptions",
    "FetchMode",
    "Folder",
    "GetMessagesFailedError",
    "ImapConfig",
    "ImapSession",
    "MailSiftError",
    "Message",
    "MessageSearchValidationError",
    "SearchExecutor",
    "SearchQuery",
    "Statement",
]
