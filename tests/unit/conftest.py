"""Pytest fixtures for unit tests requiring IMAP fakes.

What:
  Make ``tests/unit`` importable and expose an ``imap_client`` fixture backed by
  :class:`FakeImapBackend`.

Why:
  Folder and session tests exercise the full search and fetch round-trip.
  A shared fake keeps them off the network and deterministic.

How:
  Monkeypatch ``mailsift.imap.client.IMAPClient`` so the session constructs the
  fake, then yield the connected :class:`ImapSession` with the backend.

Interfaces:
  :func:`backend`, :func:`imap_client` (pytest fixtures).

Invariants & Safety:
  - Each test receives a fresh backend instance.
"""

import sys
from pathlib import Path

import pytest

from mailsift.imap.client import ImapConfig, ImapSession

UNIT_DIR = Path(__file__).resolve().parent
if str(UNIT_DIR) not in sys.path:
    sys.path.insert(0, str(UNIT_DIR))

from fakes import FakeImapBackend


@pytest.fixture
def backend(monkeypatch: pytest.MonkeyPatch) -> FakeImapBackend:
    """Install a fresh fake as the ``IMAPClient`` constructor and return it."""

    fake = FakeImapBackend()
    monkeypatch.setattr(
        "mailsift.imap.client.IMAPClient",
        lambda host, port=None, ssl=True, timeout=None: fake,
    )
    return fake


@pytest.fixture
def imap_client(backend: FakeImapBackend):
    """Yield ``(ImapSession, FakeImapBackend)`` inside the session context.

    The session is configured explicitly so tests do not depend on the IMAP
    section of the test configuration file.
    """

    config = ImapConfig(host="localhost", username="user", password="pass")
    with ImapSession(config) as session:
        yield session, backend
