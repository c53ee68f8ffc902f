"""mailsift command-line interface.

What:
  Provide a Typer application exposing the ``search`` command, which builds a
  :class:`~mailsift.core.query.SearchQuery` from command-line options, runs it
  against a folder, and prints one JSON summary line per matched message.

Why:
  Operators check what a query matches (and what it would send to the server
  with ``--dry-run``) without writing Python.

How:
  A Typer callback loads ``config.yaml`` (optionally from ``--config``). The
  ``search`` command opens an :class:`~mailsift.imap.client.ImapSession`,
  chains one predicate per option, and calls ``get()``.

Interfaces:
  ``app`` (Typer application), ``search``, ``main``.

Invariants & Safety:
  - Exit code ``0`` on success, ``1`` on configuration or IMAP failure.
  - Output never contains message bodies.
"""
from __future__ import annotations

import json
import logging
from datetime import date
from pathlib import Path
from typing import Optional

import typer

from .config.loader import ConfigLoadError, get_runtime_config, load_runtime_config
from .core.query import SearchQuery
from .imap.client import ImapConfig, ImapSession
from .imap.errors import MailSiftError
from .imap.search import build_criteria


app = typer.Typer(help="Fluent IMAP search from the command line")

LOGGER = logging.getLogger("mailsift.cli")


def _parse_date(value: Optional[str], option: str) -> Optional[date]:
    if value is None:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise typer.BadParameter(f"expected YYYY-MM-DD, got {value!r}", param_hint=option) from exc


@app.callback()
def main_callback(
    config: Optional[Path] = typer.Option(None, "--config", help="Path to config.yaml"),
) -> None:
    """Load the runtime configuration before any command runs."""

    try:
        load_runtime_config(config, reload=config is not None)
    except ConfigLoadError as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(code=1) from exc


def apply_filters(
    query: SearchQuery,
    *,
    sender: Optional[str] = None,
    recipient: Optional[str] = None,
    subject: Optional[str] = None,
    text: Optional[str] = None,
    since: Optional[date] = None,
    before: Optional[date] = None,
    on: Optional[date] = None,
    unseen: bool = False,
    seen: bool = False,
    flagged: bool = False,
) -> SearchQuery:
    """Chain one predicate per provided option, in a fixed order."""

    if unseen:
        query.unseen()
    if seen:
        query.seen()
    if flagged:
        query.flagged()
    if sender is not None:
        query.from_(sender)
    if recipient is not None:
        query.to(recipient)
    if subject is not None:
        query.subject(subject)
    if text is not None:
        query.text(text)
    if since is not None:
        query.since(since)
    if before is not None:
        query.before(before)
    if on is not None:
        query.on(on)
    return query


@app.command("search")
def search(
    folder: Optional[str] = typer.Option(None, "--folder", help="Folder to search (default from config)"),
    sender: Optional[str] = typer.Option(None, "--from", help="Match the From: header"),
    recipient: Optional[str] = typer.Option(None, "--to", help="Match the To: header"),
    subject: Optional[str] = typer.Option(None, "--subject", help="Match the subject"),
    text: Optional[str] = typer.Option(None, "--text", help="Match headers or body"),
    since: Optional[str] = typer.Option(None, "--since", help="Internal date on or after YYYY-MM-DD"),
    before: Optional[str] = typer.Option(None, "--before", help="Internal date before YYYY-MM-DD"),
    on: Optional[str] = typer.Option(None, "--on", help="Internal date equal to YYYY-MM-DD"),
    unseen: bool = typer.Option(False, "--unseen", help="Only unread messages"),
    seen: bool = typer.Option(False, "--seen", help="Only read messages"),
    flagged: bool = typer.Option(False, "--flagged", help="Only flagged messages"),
    charset: Optional[str] = typer.Option(None, "--charset", help="Search charset, e.g. UTF-8"),
    mark_read: bool = typer.Option(False, "--mark-read", help="Let the server mark matches as read"),
    no_body: bool = typer.Option(False, "--no-body", help="Fetch headers only"),
    no_attachments: bool = typer.Option(False, "--no-attachments", help="Skip attachment payloads"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print the statements and criteria only"),
) -> None:
    """Search a folder and print a JSON summary line per matched message."""

    since_date = _parse_date(since, "--since")
    before_date = _parse_date(before, "--before")
    on_date = _parse_date(on, "--on")

    session = ImapSession(ImapConfig())
    query = apply_filters(
        session.folder(folder).query(),
        sender=sender,
        recipient=recipient,
        subject=subject,
        text=text,
        since=since_date,
        before=before_date,
        on=on_date,
        unseen=unseen,
        seen=seen,
        flagged=flagged,
    )
    defaults = get_runtime_config().options
    query.charset(charset)
    query.fetch_body(defaults.fetch_body and not no_body)
    query.fetch_attachments(defaults.fetch_attachments and not no_attachments)
    if mark_read:
        query.mark_as_read()

    if dry_run:
        typer.echo(json.dumps({"statements": [list(s) for s in query.get_statements()]}))
        typer.echo(json.dumps({"criteria": [str(item) for item in build_criteria(query.get_statements())]}))
        return

    try:
        with session:
            messages = query.get()
    except MailSiftError as exc:
        LOGGER.error("search_failed folder=%s error=%s", query.folder, exc)
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    for message in messages:
        typer.echo(json.dumps(message.summary()))
    LOGGER.info("search_completed folder=%s matched=%s", query.folder, len(messages))


def main() -> None:
    """Execute the Typer application entry point."""

    app()


if __name__ == "__main__":  # pragma: no cover
    main()
