"""Search statements and execution options recorded by :class:`SearchQuery`.

What:
  Define the immutable :class:`Statement` tuple, the :class:`FetchMode` enum,
  the :class:`ExecutionOptions` record, and the canonical date formatter used
  when statements carry date values.

Why:
  The query builder must hand the executor a server-ready term sequence. Keeping
  the value types in one module makes the normalisation rules (dates become
  ``"08 Apr 18"`` strings when added, absent values stay absent) explicit and
  testable without touching IMAP.

How:
  :class:`Statement` subclasses :class:`tuple` so statements compare equal to
  plain ``("KEY",)`` / ``("KEY", value)`` tuples. A module sentinel marks the
  "no value" case so ``None`` remains a legitimate value.

Interfaces:
  :data:`DATE_FORMAT`, :func:`format_search_date`, :class:`SearchDate`, :class:`Statement`,
  :class:`FetchMode`, :class:`ExecutionOptions`.

Invariants & Safety:
  - A statement holds exactly zero or one value.
  - Month abbreviations never depend on the process locale.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Optional


DATE_FORMAT = "%d %b %y"
"""Canonical textual form of date values, e.g. ``08 Apr 18``."""

_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


class _NoValue:
    """Marker for statements added without a value."""

    def __repr__(self) -> str:
        return "NO_VALUE"


NO_VALUE: Any = _NoValue()


def format_search_date(value: date) -> str:
    """Render ``value`` in :data:`DATE_FORMAT`.

    ``strftime("%b")`` follows ``LC_TIME``; the month table keeps the output
    stable on hosts running a non-English locale.
    """

    return f"{value.day:02d} {_MONTHS[value.month - 1]} {value.year % 100:02d}"


class SearchDate(str):
    """Canonical date string that remembers the full date it was built from.

    Compares, hashes and serialises as the ``"08 Apr 18"`` text. The two-digit
    year drops the century, so :attr:`date` keeps it for the executor.
    """

    date: date

    def __new__(cls, value: date) -> "SearchDate":
        text = super().__new__(cls, format_search_date(value))
        text.date = value.date() if isinstance(value, datetime) else value
        return text

    def __getnewargs__(self):
        return (self.date,)


def normalise_value(value: Any) -> Any:
    """Convert date instances to :class:`SearchDate`, leave others as given."""

    if isinstance(value, date):
        return SearchDate(value)
    return value


class Statement(tuple):
    """Ordered ``(key,)`` or ``(key, value)`` search term.

    What:
      A tuple subclass holding a predicate keyword and an optional value.

    Why:
      Tuples give structural equality and immutability for free, which is what
      the executor and the tests need. The subclass only adds named accessors.

    How:
      :meth:`__new__` builds a one-item tuple when ``value`` is the
      :data:`NO_VALUE` sentinel and a two-item tuple otherwise.
    """

    __slots__ = ()

    def __new__(cls, key: str, value: Any = NO_VALUE) -> "Statement":
        if value is NO_VALUE:
            return super().__new__(cls, (key,))
        return super().__new__(cls, (key, value))

    @property
    def key(self) -> str:
        return self[0]

    @property
    def has_value(self) -> bool:
        return len(self) == 2

    @property
    def value(self) -> Any:
        """Return the value, or ``None`` when the statement has none."""

        return self[1] if len(self) == 2 else None

    def __getnewargs__(self):
        # copy/pickle rebuild through __new__(key[, value]).
        return tuple(self)

    def __repr__(self) -> str:
        if self.has_value:
            return f"Statement({self.key!r}, {self.value!r})"
        return f"Statement({self.key!r})"


class FetchMode(enum.Enum):
    """How matched messages are fetched with respect to their ``\\Seen`` flag."""

    DEFAULT = "default"
    MARK_AS_READ = "read"
    LEAVE_PEEK = "peek"


@dataclass
class ExecutionOptions:
    """Execution parameters that travel alongside the statement list.

    Attributes:
      fetch_mode: ``DEFAULT`` defers to the ``options.fetch`` configuration key.
      charset: Character set for server-side string matching; ``None`` uses the
        server default.
      fetch_body: Whether message bodies are downloaded.
      fetch_attachments: Whether attachment payloads are extracted.
    """

    fetch_mode: FetchMode = FetchMode.DEFAULT
    charset: Optional[str] = None
    fetch_body: bool = True
    fetch_attachments: bool = True
