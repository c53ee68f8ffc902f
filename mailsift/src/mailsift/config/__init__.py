"""Configuration package for mailsift.

What:
  Expose the ``config.yaml`` loader helpers and the Pydantic schema classes.

Why:
  Callers go through the validated models and never read YAML themselves.

Interfaces:
  - get_runtime_config / load_runtime_config / reset_runtime_config /
    parse_runtime_config: Resolve and cache ``config.yaml``.
  - RuntimeConfig / ImapSettings / FetchOptions: Pydantic models.
  - ConfigLoadError / RuntimeConfigError: Failure types.
"""

from .loader import (
    ConfigLoadError,
    RuntimeConfigError,
    get_runtime_config,
    load_runtime_config,
    parse_runtime_config,
    reset_runtime_config,
)
from .schema import FetchOptions, ImapSettings, RuntimeConfig

__all__ = [
    "ConfigLoadError",
    "FetchOptions",
    "ImapSettings",
    "RuntimeConfig",
    "RuntimeConfigError",
    "get_runtime_config",
    "load_runtime_config",
    "parse_runtime_config",
    "reset_runtime_config",
]
