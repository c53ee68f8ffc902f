"""Stateful IMAP session wrapping ``imapclient``.

What:
  Wrap the third-party ``imapclient`` library with configuration defaults,
  connection error mapping, and folder selection caching, and hand out
  :class:`~mailsift.imap.folder.Folder` executors bound to the session.

Why:
  Search execution needs a logged-in connection with the right folder selected
  in the right mode (read-only for peeking, read-write for marking read).
  Centralising that state keeps :class:`Folder` focused on the search and
  fetch round-trip.

How:
  :class:`ImapConfig` fills unset fields from the runtime configuration.
  :class:`ImapSession` connects in :meth:`~ImapSession.__enter__`, logs out in
  :meth:`~ImapSession.__exit__`, and remembers the selected folder so repeated
  searches on one folder do not re-issue ``SELECT``.

Interfaces:
  :class:`ImapConfig`, :class:`ImapSession`.

Invariants & Safety:
  - All fetches and searches run in UID mode (``imapclient`` default).
  - Connection and login failures surface as :class:`ConnectionFailedError`.
  - A session wraps a single connection and is not thread-safe.
"""
from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import Optional

from imapclient import IMAPClient
from imapclient import exceptions as imap_exceptions

from ..config.loader import get_runtime_config
from ..utils.logging import get_logger
from .errors import ConnectionFailedError, FolderSelectionError
from .folder import Folder


@dataclass
class ImapConfig:
    """Connection parameters for an IMAP server.

    What:
      Captures host, credentials, transport settings, and the default folder.

    Why:
      Library callers can pass only what differs from ``config.yaml``; the CLI
      passes nothing and relies on the file entirely.

    How:
      :meth:`__post_init__` fills every ``None`` field from
      :func:`~mailsift.config.loader.get_runtime_config`.

    Attributes:
      host: IMAP hostname.
      username: Login name.
      password: Password or app-specific token.
      port: IMAP port.
      ssl: Whether to use implicit TLS.
      folder: Folder used when :meth:`ImapSession.folder` gets no name.
      timeout: Socket timeout in seconds, ``None`` for the library default.
    """

    host: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    port: Optional[int] = None
    ssl: Optional[bool] = None
    folder: Optional[str] = None
    timeout: Optional[float] = None

    def __post_init__(self) -> None:
        settings = get_runtime_config().imap
        if self.host is None:
            self.host = settings.host
        if self.username is None:
            self.username = settings.username
        if self.password is None:
            self.password = settings.password
        if self.port is None:
            self.port = settings.port
        if self.ssl is None:
            self.ssl = settings.ssl
        if self.folder is None:
            self.folder = settings.default_mailbox
        if self.timeout is None:
            self.timeout = settings.timeout

    def __repr__(self) -> str:
        return (
            f"ImapConfig(host={self.host!r}, username={self.username!r}, "
            f"port={self.port!r}, ssl={self.ssl!r}, folder={self.folder!r})"
        )


class ImapSession:
    """Context manager owning one ``imapclient.IMAPClient`` connection.

    What:
      Connects and authenticates on entry, logs out on exit, selects folders
      on demand, and creates :class:`Folder` executors.

    Why:
      Folder executors share one connection; the session is the single place
      that knows whether it is connected and which folder is selected.

    How:
      Connection errors from ``imapclient`` and the socket layer are wrapped in
      :class:`ConnectionFailedError` with the original exception chained.
    """

    def __init__(self, config: ImapConfig):
        self._config = config
        self._client: Optional[IMAPClient] = None
        self._selected: Optional[str] = None
        self._selected_readonly: Optional[bool] = None
        self._logger = get_logger("mailsift.imap.session", sys.stderr)

    def __enter__(self) -> "ImapSession":
        """Open the connection and log in.

        Raises:
          ConnectionFailedError: When the host is not configured, the socket
            cannot be opened, or the server refuses the credentials.
        """

        self.connect()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def connect(self) -> None:
        if self._client is not None:
            return
        config = self._config
        if not config.host:
            raise ConnectionFailedError("IMAP host not configured")
        try:
            client = IMAPClient(config.host, port=config.port, ssl=config.ssl, timeout=config.timeout)
        except (imap_exceptions.IMAPClientError, OSError) as exc:
            raise ConnectionFailedError(f"Unable to connect to {config.host}:{config.port}: {exc}") from exc
        try:
            client.login(config.username, config.password)
        except (imap_exceptions.IMAPClientError, OSError) as exc:
            raise ConnectionFailedError(f"Login failed for {config.username!r}: {exc}") from exc
        self._client = client
        self._logger.info("connected", host=config.host, port=config.port, ssl=config.ssl)

    def close(self) -> None:
        """Log out and forget the connection, even when logout fails."""

        if self._client is None:
            return
        try:
            self._client.logout()
        except (imap_exceptions.IMAPClientError, OSError) as exc:
            self._logger.warning("logout failed", error=str(exc))
        finally:
            self._client = None
            self._selected = None
            self._selected_readonly = None

    @property
    def config(self) -> ImapConfig:
        return self._config

    @property
    def connected(self) -> bool:
        return self._client is not None

    @property
    def client(self) -> IMAPClient:
        """Return the underlying ``IMAPClient``.

        Raises:
          ConnectionFailedError: If the session is not connected.
        """

        if self._client is None:
            raise ConnectionFailedError("IMAP session not connected")
        return self._client

    @property
    def selected(self) -> Optional[str]:
        return self._selected

    def select(self, name: str, *, readonly: bool = False) -> None:
        """Select ``name`` unless it is already selected in a compatible mode.

        A read-write selection satisfies read-only requests; a read-only one
        does not satisfy read-write requests.

        Raises:
          ConnectionFailedError: If the connection dropped.
          FolderSelectionError: If the server refuses the ``SELECT``.
        """

        if self._selected == name and (self._selected_readonly is False or readonly):
            return
        try:
            self.client.select_folder(name, readonly=readonly)
        except (imap_exceptions.IMAPClientAbortError, OSError) as exc:
            self._client = None
            raise ConnectionFailedError(f"Connection lost while selecting {name!r}: {exc}") from exc
        except imap_exceptions.IMAPClientError as exc:
            raise FolderSelectionError(f"Unable to select folder {name!r}: {exc}") from exc
        self._selected = name
        self._selected_readonly = readonly

    def folder(self, name: Optional[str] = None) -> Folder:
        """Return a :class:`Folder` executor for ``name`` (default folder if omitted)."""

        return Folder(self, name or self._config.folder or "INBOX")
