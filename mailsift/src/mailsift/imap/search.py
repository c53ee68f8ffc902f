"""Translate recorded search statements into ``imapclient`` search criteria.

What:
  Provide a deterministic mapping from the :class:`Statement` sequence built by
  :class:`~mailsift.core.query.SearchQuery` to the flat list consumed by
  :meth:`imapclient.IMAPClient.search`.

Why:
  Statements store dates in the canonical ``"08 Apr 18"`` text form, which is
  not the RFC 3501 ``date`` syntax servers accept. Converting here keeps the
  builder's recorded state stable while the wire form stays valid.

How:
  Iterates through the statements in order, emitting the keyword and then the
  value. Values of date keywords become :class:`datetime.date` objects so
  ``imapclient`` renders them as ``8-Apr-2018``: builder dates keep their full
  year, plain two-digit strings are placed in a century window around today.

Interfaces:
  :func:`build_criteria`, :func:`parse_search_date`, :data:`DATE_KEYS`.

Invariants & Safety:
  - Term order equals statement order.
  - Unknown keywords and unparseable date strings are forwarded verbatim; the
    server is the authority on their validity.
  - An empty statement list becomes ``["ALL"]``.
"""
from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional, Sequence

from ..core.statement import DATE_FORMAT, SearchDate, Statement

DATE_KEYS = frozenset({"BEFORE", "ON", "SINCE", "SENTBEFORE", "SENTON", "SENTSINCE"})
_ACCEPTED_DATE_FORMATS = (DATE_FORMAT, "%Y-%m-%d", "%d-%b-%Y")


def parse_search_date(value: str, *, today: Optional[date] = None) -> Optional[date]:
    """Parse a date string in one of the accepted formats.

    ``%b`` parsing follows the C locale under CPython's default startup, which
    matches the English abbreviations produced by
    :func:`~mailsift.core.statement.format_search_date`. Two-digit years are
    placed in the century window ``[today - 50, today + 49]``.

    Returns:
      The parsed date, or ``None`` when no format matches.
    """

    text = value.strip()
    for fmt in _ACCEPTED_DATE_FORMATS:
        try:
            parsed = datetime.strptime(text, fmt).date()
        except ValueError:
            continue
        if fmt == DATE_FORMAT:
            parsed = _resolve_century(parsed, today or date.today())
        return parsed
    return None


def _resolve_century(parsed: date, today: date) -> date:
    start = today.year - 50
    year = start + (parsed.year % 100 - start) % 100
    try:
        return parsed.replace(year=year)
    except ValueError:  # 29 Feb in a non-leap century
        return parsed


def build_criteria(statements: Sequence[Statement]) -> List[object]:
    """Flatten ``statements`` into an ``imapclient`` criteria list.

    What:
      Produces ``[key, value, key, ...]`` in statement order.

    Why:
      ``imapclient`` quotes string values and formats :class:`datetime.date`
      objects itself; handing it typed items avoids hand-rolled quoting.

    Args:
      statements: Ordered statements; plain ``(key,)``/``(key, value)`` tuples
        are accepted too.

    Returns:
      Criteria list suitable for ``IMAPClient.search``.
    """

    criteria: List[object] = []
    for statement in statements:
        key = statement[0]
        criteria.append(key)
        if len(statement) < 2:
            continue
        value = statement[1]
        if value is None:
            continue
        if key.upper() in DATE_KEYS and isinstance(value, SearchDate):
            value = value.date
        elif key.upper() in DATE_KEYS and isinstance(value, str):
            parsed = parse_search_date(value)
            if parsed is not None:
                value = parsed
        criteria.append(value)
    return criteria or ["ALL"]
