"""Locate, parse, validate, and cache the mailsift runtime configuration.

What:
  Provide helpers to find ``config.yaml``, parse it with PyYAML, validate it
  against :class:`~mailsift.config.schema.RuntimeConfig`, and memoise the
  result for the rest of the process.

Why:
  The search executor resolves ``FetchMode.DEFAULT`` and body/size limits from
  configuration, and the session needs server credentials. Centralising the
  loading logic keeps precedence rules and error messages identical for the
  CLI and library callers.

How:
  Resolve candidate paths (explicit argument, ``MAILSIFT_CONFIG_PATH``, then
  well-known defaults), parse the first existing file via ``yaml.safe_load``,
  validate with Pydantic, and store ``(path, model)`` in a module cache.

Interfaces:
  :func:`load_runtime_config`, :func:`get_runtime_config`,
  :func:`reset_runtime_config`, :func:`parse_runtime_config`,
  :class:`ConfigLoadError`, :class:`RuntimeConfigError`.

Invariants:
  - Only validated models are returned or cached.
  - An explicit path always wins over the cache entry of a different path.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Iterable, Optional, Tuple

import yaml
from pydantic import ValidationError as _PydanticValidationError

from .schema import RuntimeConfig


class ConfigLoadError(Exception):
    """Base error for configuration parsing or validation failures."""


class RuntimeConfigError(ConfigLoadError):
    """Error raised when ``config.yaml`` cannot be located, read, or validated.

    What:
      Signal issues specific to runtime configuration discovery or schema
      validation.

    Why:
      The CLI reports these with remediation hints distinct from IMAP failures.
    """


_CONFIG_ENV = "MAILSIFT_CONFIG_PATH"
_DEFAULT_LOCATIONS: Tuple[Path, ...] = (
    Path("config.yaml"),
    Path("~/.config/mailsift/config.yaml"),
    Path("/etc/mailsift/config.yaml"),
)
_RUNTIME_CACHE: Optional[Tuple[Path, RuntimeConfig]] = None


def _candidate_paths(path: Optional[Path]) -> Iterable[Path]:
    """Yield configuration file locations in priority order.

    What:
      Produce the deduplicated list of paths inspected for ``config.yaml``.

    How:
      Check the explicit argument, the ``MAILSIFT_CONFIG_PATH`` environment
      variable, and the default locations, expanding ``~`` on each.

    Args:
      path: Explicit path requested by the caller, or ``None``.

    Yields:
      Candidate paths ordered from most specific to least specific.
    """

    seen: set[Path] = set()
    if path is not None:
        candidate = path.expanduser()
        seen.add(candidate)
        yield candidate
    env_path = os.environ.get(_CONFIG_ENV)
    if env_path:
        candidate = Path(env_path).expanduser()
        if candidate not in seen:
            seen.add(candidate)
            yield candidate
    for default in _DEFAULT_LOCATIONS:
        candidate = default.expanduser()
        if candidate not in seen:
            seen.add(candidate)
            yield candidate


def _parse_config_payload(text: str, source: Any) -> dict[str, Any]:
    """Parse ``config.yaml`` text into a mapping.

    Raises:
      RuntimeConfigError: If the text is not valid YAML or its top level is not
        a mapping.
    """

    try:
        payload = yaml.safe_load(text) or {}
    except yaml.YAMLError as exc:
        raise RuntimeConfigError(f"Invalid YAML in {source}: {exc}") from exc
    if not isinstance(payload, dict):
        raise RuntimeConfigError("config.yaml must contain a mapping at the top-level")
    return payload


def parse_runtime_config(text: str, source: Any = "<string>") -> RuntimeConfig:
    """Validate configuration ``text`` without touching the cache.

    Args:
      text: YAML (or JSON, which is a YAML subset) document.
      source: Label used in error messages.

    Returns:
      The validated :class:`RuntimeConfig`.

    Raises:
      RuntimeConfigError: On parse or schema errors.
    """

    payload = _parse_config_payload(text, source)
    try:
        return RuntimeConfig.model_validate(payload)
    except _PydanticValidationError as exc:
        raise RuntimeConfigError(f"Invalid config.yaml ({source}): {exc}") from exc


def _load_runtime_from_path(path: Path) -> RuntimeConfig:
    """Read and validate the configuration stored at ``path``."""

    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise RuntimeConfigError(f"Configuration file missing: {path}") from exc
    except OSError as exc:  # pragma: no cover - filesystem surface
        raise RuntimeConfigError(f"Unable to read configuration file {path}: {exc}") from exc
    return parse_runtime_config(text, path)


def load_runtime_config(
    path: Optional[Path | str] = None,
    *,
    reload: bool = False,
) -> RuntimeConfig:
    """Resolve, parse, and cache the runtime configuration.

    What:
      Locate ``config.yaml`` through the precedence chain and return the
      validated :class:`RuntimeConfig`.

    Why:
      Executors consult configuration on every search; caching avoids repeated
      disk IO while ``reload`` lets tests and long-lived processes refresh it.

    Args:
      path: Optional explicit location of ``config.yaml``.
      reload: When ``True`` bypass the cache.

    Returns:
      The validated runtime configuration.

    Raises:
      RuntimeConfigError: If no candidate exists or the first existing one is
        invalid.
    """

    global _RUNTIME_CACHE

    requested_path = Path(path).expanduser() if isinstance(path, (str, Path)) else None
    if not reload and _RUNTIME_CACHE is not None:
        cached_path, cached_config = _RUNTIME_CACHE
        if requested_path is None or cached_path == requested_path:
            return cached_config

    searched: list[str] = []
    for candidate in _candidate_paths(requested_path):
        if not candidate.exists():
            searched.append(str(candidate))
            continue
        config = _load_runtime_from_path(candidate)
        _RUNTIME_CACHE = (candidate, config)
        return config

    raise RuntimeConfigError(
        f"Unable to locate config.yaml (searched: {', '.join(searched) or '<none>'})"
    )


def get_runtime_config() -> RuntimeConfig:
    """Return the cached runtime configuration, loading it on demand."""

    return load_runtime_config()


def reset_runtime_config() -> None:
    """Clear the runtime configuration cache."""

    global _RUNTIME_CACHE
    _RUNTIME_CACHE = None
