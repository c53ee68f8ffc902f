"""Pydantic models describing the mailsift ``config.yaml`` document."""
from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ImapSettings(BaseModel):
    """Server connection defaults."""

    model_config = ConfigDict(extra="forbid")

    host: Optional[str] = None
    port: int = Field(default=993, gt=0, le=65535)
    ssl: bool = True
    username: Optional[str] = None
    password: Optional[str] = None
    default_mailbox: str = "INBOX"
    timeout: Optional[float] = Field(default=None, gt=0)


class FetchOptions(BaseModel):
    """Defaults applied when a search is executed.

    ``fetch`` resolves :attr:`~mailsift.core.statement.FetchMode.DEFAULT`:
    ``peek`` leaves ``\\Seen`` untouched, ``read`` lets the server set it.
    """

    model_config = ConfigDict(extra="forbid")

    fetch: Literal["peek", "read"] = "peek"
    fetch_body: bool = True
    fetch_attachments: bool = True
    max_body_bytes: int = Field(default=1_000_000, gt=0)


class RuntimeConfig(BaseModel):
    """Root configuration loaded from ``config.yaml``."""

    model_config = ConfigDict(extra="forbid")

    version: int = 1
    imap: ImapSettings = Field(default_factory=ImapSettings)
    options: FetchOptions = Field(default_factory=FetchOptions)

    @model_validator(mode="after")
    def _validate_version(self) -> "RuntimeConfig":
        if self.version != 1:
            raise ValueError("config.yaml version must be 1")
        return self
