"""Structured JSON logging with redaction of message content and secrets.

What:
  Offer a small facade over text streams so mailsift components emit one JSON
  object per line with consistent fields, and never leak search expressions,
  message content, or credentials.

Why:
  Search terms (``BODY``/``TEXT``/``SUBJECT`` values) and fetched content are
  user data. A fixed layout keeps logs greppable while the redaction pass keeps
  that data out of them.

How:
  :class:`JsonLogger` builds a payload (``ts``, ``lvl``, ``msg``,
  ``component``), merges a recursively redacted copy of the keyword extras, and
  writes it with :func:`json.dump`, flushing after each line.

Interfaces:
  :class:`JsonLogger`, :func:`get_logger`.

Invariants & Safety:
  - Keys listed in :data:`SENSITIVE_KEYS` are replaced with ``[redacted]`` at
    any nesting depth.
  - Values that are not JSON-serialisable are rendered with ``str``.
"""
from __future__ import annotations

import json
import sys
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional


REDACTED = "[redacted]"
SENSITIVE_KEYS = frozenset({"subject", "body", "text", "snippet", "password"})


@dataclass
class JsonLogger:
    """Structured JSON logger with automatic redaction.

    What:
      Emits single-line JSON entries tagged with the component name.

    Why:
      A uniform schema lets tests and operators parse entries without ad-hoc
      string matching.

    How:
      :meth:`log` assembles the payload; :meth:`info`, :meth:`warning`,
      :meth:`error` fix the severity.
    """

    stream: Any = field(default_factory=lambda: sys.stdout)
    component: str = "mailsift"

    def log(self, level: str, message: str, *, extra: Optional[Dict[str, Any]] = None) -> None:
        """Emit a structured JSON log entry.

        Args:
          level: Severity label (upper-cased in the output).
          message: Core log message.
          extra: Optional context, redacted recursively before serialisation.
        """

        payload = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "lvl": level.upper(),
            "msg": message,
            "component": self.component,
        }
        if extra:
            payload.update(self._redact(extra))
        json.dump(payload, self.stream, separators=(",", ":"), default=str)
        self.stream.write("\n")
        self.stream.flush()

    def debug(self, message: str, **kwargs: Any) -> None:
        self.log("DEBUG", message, extra=kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self.log("INFO", message, extra=kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self.log("WARN", message, extra=kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self.log("ERROR", message, extra=kwargs)

    @staticmethod
    def _redact(data: Dict[str, Any]) -> Dict[str, Any]:
        """Return a copy of ``data`` with sensitive keys masked at any depth."""

        result: Dict[str, Any] = {}
        for key, value in data.items():
            if key.lower() in SENSITIVE_KEYS:
                result[key] = REDACTED
            elif isinstance(value, dict):
                result[key] = JsonLogger._redact(value)
            else:
                result[key] = value
        return result


def get_logger(component: str, stream: Any = None) -> JsonLogger:
    """Construct a :class:`JsonLogger` for ``component``.

    Args:
      component: Logical subsystem name included in every entry.
      stream: Optional destination; defaults to ``sys.stdout`` at call time.

    Returns:
      Configured :class:`JsonLogger` instance.
    """

    if stream is None:
        return JsonLogger(component=component)
    return JsonLogger(stream=stream, component=component)
