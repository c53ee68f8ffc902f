"""Search executor bound to one IMAP folder.

What:
  Implement :class:`~mailsift.core.query.SearchExecutor` on top of an
  :class:`~mailsift.imap.client.ImapSession`: translate statements into
  criteria, run ``UID SEARCH``, fetch the matches with peek or mark-read
  semantics, and parse them into :class:`~mailsift.core.message.Message`
  objects.

Why:
  :class:`~mailsift.core.query.SearchQuery` is pure data. Everything that
  touches the wire (criteria syntax, charset, ``BODY.PEEK`` vs ``BODY``,
  folder selection mode, error mapping) lives here.

How:
  ``FetchMode.DEFAULT`` is resolved from the ``options.fetch`` configuration
  key. Peeking selects the folder read-only; marking read selects it
  read-write and fetches ``BODY[]`` (or ``BODY[HEADER]``) so the server sets
  ``\\Seen``. ``imapclient`` failures are mapped onto the
  :mod:`mailsift.imap.errors` hierarchy.

Interfaces:
  :class:`Folder`.

Invariants & Safety:
  - Criteria order equals statement order.
  - Returned messages are ordered by ascending UID.
  - Log entries carry statement keys only, never search values.
"""
from __future__ import annotations

import sys
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence

from imapclient import exceptions as imap_exceptions

from ..config.loader import get_runtime_config
from ..core.message import Message
from ..core.query import SearchQuery
from ..core.statement import FetchMode, Statement
from ..utils.logging import JsonLogger, get_logger
from ..utils.mime import parse_message
from .errors import ConnectionFailedError, GetMessagesFailedError, MessageSearchValidationError
from .search import build_criteria

if TYPE_CHECKING:  # pragma: no cover
    from .client import ImapSession

_FLAGS = b"FLAGS"
_INTERNALDATE = b"INTERNALDATE"
_SIZE = b"RFC822.SIZE"


class Folder:
    """A named mailbox on a connected session, usable as a search executor.

    What:
      Runs searches against ``name`` and returns fetched messages.

    Why:
      Binding the folder name here lets ``folder.query()`` hand out builders
      that only need to call :meth:`search_messages`.

    How:
      Each call selects the folder through the session (which caches the
      selection), searches, then fetches in a single ``UID FETCH``.
    """

    def __init__(self, session: "ImapSession", name: str, *, logger: Optional[JsonLogger] = None):
        self._session = session
        self.name = name
        self._logger = logger or get_logger("mailsift.imap.folder", sys.stderr)

    def __repr__(self) -> str:
        return f"Folder({self.name!r})"

    def query(self) -> SearchQuery:
        """Start a new search query against this folder."""

        return SearchQuery(self)

    def resolve_fetch_mode(self, fetch_mode: FetchMode) -> FetchMode:
        """Map ``FetchMode.DEFAULT`` onto the configured ``options.fetch`` value."""

        if fetch_mode is not FetchMode.DEFAULT:
            return fetch_mode
        configured = get_runtime_config().options.fetch
        return FetchMode.MARK_AS_READ if configured == "read" else FetchMode.LEAVE_PEEK

    def search_messages(
        self,
        statements: Sequence[Statement],
        fetch_mode: FetchMode,
        fetch_body: bool,
        charset: Optional[str],
        fetch_attachments: bool,
    ) -> List[Message]:
        """Execute a search and return the matching messages.

        What:
          Runs ``UID SEARCH`` with the translated statements and fetches every
          match.

        Args:
          statements: Ordered search statements.
          fetch_mode: Peek/mark-read semantics; ``DEFAULT`` uses configuration.
          fetch_body: Fetch full messages when ``True``, headers only otherwise.
          charset: ``CHARSET`` argument of the search, ``None`` to omit it.
          fetch_attachments: Decode attachment payloads when ``True``.

        Returns:
          Messages ordered by ascending UID (possibly empty).

        Raises:
          ConnectionFailedError: The connection is missing or dropped.
          FolderSelectionError: The folder cannot be selected.
          MessageSearchValidationError: The server rejected the criteria.
          GetMessagesFailedError: The fetch round-trip failed.
        """

        criteria = build_criteria(statements)
        mode = self.resolve_fetch_mode(fetch_mode)
        self._session.select(self.name, readonly=mode is FetchMode.LEAVE_PEEK)
        self._logger.info(
            "search",
            folder=self.name,
            keys=[statement[0] for statement in statements],
            charset=charset,
            fetch_mode=mode.value,
        )
        uids = self._search(criteria, charset)
        if not uids:
            self._logger.info("search complete", folder=self.name, matched=0)
            return []
        messages = self._fetch(uids, mode, fetch_body, fetch_attachments)
        self._logger.info(
            "search complete", folder=self.name, matched=len(uids), fetched=len(messages)
        )
        return messages

    def _search(self, criteria: List[object], charset: Optional[str]) -> List[int]:
        client = self._session.client
        try:
            return sorted(client.search(criteria, charset=charset))
        except (imap_exceptions.IMAPClientAbortError, OSError) as exc:
            raise ConnectionFailedError(f"Connection lost during search in {self.name!r}: {exc}") from exc
        except UnicodeEncodeError as exc:
            raise MessageSearchValidationError(
                f"Search values in {self.name!r} are not ASCII; set a charset such as UTF-8: {exc}"
            ) from exc
        except imap_exceptions.IMAPClientError as exc:
            raise MessageSearchValidationError(f"Search rejected in {self.name!r}: {exc}") from exc

    def _fetch(
        self,
        uids: List[int],
        mode: FetchMode,
        fetch_body: bool,
        fetch_attachments: bool,
    ) -> List[Message]:
        peek = ".PEEK" if mode is FetchMode.LEAVE_PEEK else ""
        section = "[]" if fetch_body else "[HEADER]"
        request = f"BODY{peek}{section}"
        response_key = f"BODY{section}".encode("ascii")
        client = self._session.client
        try:
            response: Dict[int, Dict[bytes, Any]] = client.fetch(
                uids, ["FLAGS", "INTERNALDATE", "RFC822.SIZE", request]
            )
        except (imap_exceptions.IMAPClientAbortError, OSError) as exc:
            raise ConnectionFailedError(f"Connection lost during fetch in {self.name!r}: {exc}") from exc
        except imap_exceptions.IMAPClientError as exc:
            raise GetMessagesFailedError(f"Fetch failed in {self.name!r}: {exc}") from exc

        max_body_bytes = get_runtime_config().options.max_body_bytes
        messages: List[Message] = []
        for uid in uids:
            data = response.get(uid)
            if data is None or response_key not in data:
                self._logger.warning("message vanished before fetch", folder=self.name, uid=uid)
                continue
            raw = data[response_key] or b""
            try:
                message = parse_message(
                    raw,
                    uid=uid,
                    flags=_decode_flags(data.get(_FLAGS, ())),
                    size=data.get(_SIZE),
                    internal_date=data.get(_INTERNALDATE),
                    include_body=fetch_body,
                    include_attachments=fetch_attachments,
                    max_body_bytes=max_body_bytes,
                )
            except (ValueError, LookupError) as exc:
                raise GetMessagesFailedError(f"Unable to parse message {uid} in {self.name!r}: {exc}") from exc
            messages.append(message)
        return messages


def _decode_flags(flags: Sequence[Any]) -> List[str]:
    return [flag.decode("utf-8", "replace") if isinstance(flag, bytes) else str(flag) for flag in flags]
