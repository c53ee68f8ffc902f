"""Exceptions raised by the IMAP search executor."""
from __future__ import annotations


class MailSiftError(Exception):
    """Base class for IMAP-side failures surfaced to ``SearchQuery.get`` callers."""


class ConnectionFailedError(MailSiftError):
    """The session could not connect, authenticate, or lost its connection."""


class MessageSearchValidationError(MailSiftError):
    """The server rejected the search criteria."""


class GetMessagesFailedError(MailSiftError):
    """Fetching the matched messages failed."""


class FolderSelectionError(MailSiftError):
    """The server refused to select the requested folder."""
