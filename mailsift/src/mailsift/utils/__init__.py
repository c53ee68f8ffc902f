"""Shared helpers: structured logging and MIME parsing.

Interfaces:
  ``get_logger``, ``JsonLogger``, ``parse_message``.
"""

from .logging import JsonLogger, get_logger
from .mime import parse_message

__all__ = ["JsonLogger", "get_logger", "parse_message"]
