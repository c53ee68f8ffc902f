"""Fluent IMAP search query builder.

What:
  Provide :class:`SearchQuery`, which accumulates search statements and
  execution options through chainable methods and hands them to a
  :class:`SearchExecutor` when :meth:`SearchQuery.get` is called.

Why:
  Callers describe a search as a readable chain
  (``folder.query().unseen().from_("a@b").since(date(2018, 4, 8)).get()``)
  while the executor receives a plain, already normalised term sequence it can
  forward to the server without further interpretation.

How:
  Every predicate method delegates to :meth:`SearchQuery.add_statement` with a
  fixed keyword. Dates are formatted as they are added. :meth:`SearchQuery.get`
  copies the state and calls ``search_messages`` positionally.

Interfaces:
  :class:`SearchExecutor`, :class:`SearchQuery`.

Invariants & Safety:
  - Statement order equals call order.
  - The builder never validates keywords or values; the executor and the server
    decide what is acceptable.
  - A builder is single-writer: using one instance from several threads at once
    is undefined behaviour.
"""
from __future__ import annotations

from typing import Any, List, Optional, Protocol, Sequence

from .statement import NO_VALUE, ExecutionOptions, FetchMode, Statement, normalise_value


class SearchExecutor(Protocol):
    """Boundary that runs a search and returns the fetched messages."""

    def search_messages(
        self,
        statements: Sequence[Statement],
        fetch_mode: FetchMode,
        fetch_body: bool,
        charset: Optional[str],
        fetch_attachments: bool,
    ) -> Any:
        ...


class SearchQuery:
    """Chainable builder for message-search criteria.

    What:
      Records an ordered list of :class:`Statement` objects plus an
      :class:`ExecutionOptions` record, bound to the executor given at
      construction.

    Why:
      Separating accumulation from execution keeps the builder free of network
      state: constructing and chaining never touches the server, only
      :meth:`get` does.

    How:
      Predicate and option methods mutate the instance and return ``self``.
      :meth:`get` may be called again; it re-executes with the current state,
      which is idempotent for the builder but not for server-side effects such
      as marking messages read.

    Concurrency:
      Not thread-safe. Distinct builders never share state, so several builders
      may target the same folder.
    """

    def __init__(self, folder: SearchExecutor):
        self._folder = folder
        self._statements: List[Statement] = []
        self.options = ExecutionOptions()

    def __repr__(self) -> str:
        return f"SearchQuery(statements={self._statements!r}, options={self.options!r})"

    # Accessors -------------------------------------------------------------
    @property
    def folder(self) -> SearchExecutor:
        return self._folder

    def get_statements(self) -> List[Statement]:
        """Return a copy of the recorded statements in insertion order."""

        return list(self._statements)

    def get_fetch_mode(self) -> FetchMode:
        return self.options.fetch_mode

    def get_charset(self) -> Optional[str]:
        return self.options.charset

    # Generic statement -----------------------------------------------------
    def add_statement(self, key: str, value: Any = NO_VALUE) -> "SearchQuery":
        """Append ``(key,)`` or ``(key, value)`` to the statement list.

        What:
          Records one statement. Date and datetime values are converted to the
          canonical ``"%d %b %y"`` string immediately.

        Why:
          Named predicates cover the standard vocabulary; this method is the
          escape hatch for keywords they do not cover, so ``key`` is accepted
          verbatim.

        Args:
          key: Search keyword, sent to the server as given.
          value: Optional value. Omit it for flag-only keywords; passing
            ``None`` records an explicit ``None`` value.

        Returns:
          The same builder, for chaining.
        """

        if value is NO_VALUE:
            statement = Statement(key)
        else:
            statement = Statement(key, normalise_value(value))
        self._statements.append(statement)
        return self

    # Flag-only predicates --------------------------------------------------
    def all(self) -> "SearchQuery":
        """Match every message (combined with the other statements)."""

        return self.add_statement("ALL")

    def answered(self) -> "SearchQuery":
        """Match messages with the ``\\Answered`` flag set."""

        return self.add_statement("ANSWERED")

    def unanswered(self) -> "SearchQuery":
        return self.add_statement("UNANSWERED")

    def deleted(self) -> "SearchQuery":
        """Match messages with the ``\\Deleted`` flag set."""

        return self.add_statement("DELETED")

    def undeleted(self) -> "SearchQuery":
        return self.add_statement("UNDELETED")

    def flagged(self) -> "SearchQuery":
        """Match messages with the ``\\Flagged`` (important) flag set."""

        return self.add_statement("FLAGGED")

    def unflagged(self) -> "SearchQuery":
        return self.add_statement("UNFLAGGED")

    def new(self) -> "SearchQuery":
        """Match messages that are recent and not yet seen."""

        return self.add_statement("NEW")

    def old(self) -> "SearchQuery":
        return self.add_statement("OLD")

    def recent(self) -> "SearchQuery":
        """Match messages with the ``\\Recent`` flag set."""

        return self.add_statement("RECENT")

    def seen(self) -> "SearchQuery":
        """Match messages that have been read."""

        return self.add_statement("SEEN")

    def read(self) -> "SearchQuery":
        """Alias for :meth:`seen`."""

        return self.seen()

    def unseen(self) -> "SearchQuery":
        """Match messages that have not been read."""

        return self.add_statement("UNSEEN")

    def unread(self) -> "SearchQuery":
        """Alias for :meth:`unseen`."""

        return self.unseen()

    # String predicates -----------------------------------------------------
    def bcc(self, expression: str) -> "SearchQuery":
        """Match ``expression`` in the ``Bcc:`` header."""

        return self.add_statement("BCC", expression)

    def body(self, expression: str) -> "SearchQuery":
        """Match ``expression`` in the message body."""

        return self.add_statement("BODY", expression)

    def cc(self, expression: str) -> "SearchQuery":
        return self.add_statement("CC", expression)

    def from_(self, expression: str) -> "SearchQuery":
        """Match ``expression`` in the ``From:`` header.

        Also reachable as ``getattr(query, "from")``.
        """

        return self.add_statement("FROM", expression)

    def to(self, expression: str) -> "SearchQuery":
        return self.add_statement("TO", expression)

    def subject(self, expression: str) -> "SearchQuery":
        return self.add_statement("SUBJECT", expression)

    def text(self, expression: str) -> "SearchQuery":
        """Match ``expression`` anywhere in the headers or body."""

        return self.add_statement("TEXT", expression)

    def contains_keyword(self, keyword: str) -> "SearchQuery":
        """Match messages carrying the user flag ``keyword``."""

        return self.add_statement("KEYWORD", keyword)

    def does_not_contain_keyword(self, keyword: str) -> "SearchQuery":
        return self.add_statement("UNKEYWORD", keyword)

    # Date predicates (``date``/``datetime`` or pre-formatted string) --------
    def before(self, value: Any) -> "SearchQuery":
        """Match messages whose internal date is earlier than ``value``."""

        return self.add_statement("BEFORE", value)

    def on(self, value: Any) -> "SearchQuery":
        return self.add_statement("ON", value)

    def since(self, value: Any) -> "SearchQuery":
        """Match messages whose internal date is ``value`` or later."""

        return self.add_statement("SINCE", value)

    # Options ---------------------------------------------------------------
    def mark_as_read(self) -> "SearchQuery":
        """Fetch matched messages so the server sets ``\\Seen`` on them."""

        self.options.fetch_mode = FetchMode.MARK_AS_READ
        return self

    def leave_unread(self) -> "SearchQuery":
        """Fetch matched messages with ``BODY.PEEK`` so ``\\Seen`` is untouched."""

        self.options.fetch_mode = FetchMode.LEAVE_PEEK
        return self

    def charset(self, charset: Optional[str]) -> "SearchQuery":
        """Set the character set the server uses for string matching."""

        self.options.charset = charset
        return self

    def fetch_body(self, enabled: bool = True) -> "SearchQuery":
        self.options.fetch_body = enabled
        return self

    def fetch_attachments(self, enabled: bool = True) -> "SearchQuery":
        self.options.fetch_attachments = enabled
        return self

    # Execution -------------------------------------------------------------
    def get(self) -> Any:
        """Run the search and return whatever the executor returns.

        Raises:
          Whatever the executor raises (for :class:`~mailsift.imap.folder.Folder`:
          ``ConnectionFailedError``, ``MessageSearchValidationError``,
          ``GetMessagesFailedError``), unchanged.
        """

        return self._folder.search_messages(
            list(self._statements),
            self.options.fetch_mode,
            self.options.fetch_body,
            self.options.charset,
            self.options.fetch_attachments,
        )


setattr(SearchQuery, "from", SearchQuery.from_)
