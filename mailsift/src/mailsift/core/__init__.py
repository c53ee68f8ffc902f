"""Query-building core of mailsift.

What:
  Re-export the search builder, its statement and option types, and the message
  objects produced by search execution.

Why:
  Callers (the IMAP folder executor, the CLI, library users) import from one
  place and never depend on the module split inside ``core``.

Interfaces:
  ``SearchQuery``, ``SearchExecutor``, ``Statement``, ``FetchMode``,
  ``ExecutionOptions``, ``DATE_FORMAT``, ``format_search_date``, ``Message``,
  ``Attachment``.

Invariants & Safety:
  - Nothing in ``core`` performs network or disk IO.
"""

from .message import Attachment, Message
from .query import SearchExecutor, SearchQuery
from .statement import DATE_FORMAT, ExecutionOptions, FetchMode, Statement, format_search_date

__all__ = [
    "Attachment",
    "DATE_FORMAT",
    "ExecutionOptions",
    "FetchMode",
    "Message",
    "SearchExecutor",
    "SearchQuery",
    "Statement",
    "format_search_date",
]
