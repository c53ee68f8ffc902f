"""Pytest configuration shared by the unit and end-to-end suites.

What:
  Put the in-repo source tree on ``sys.path`` and apply the canned
  ``tests/data/config.yaml`` to every test.

Why:
  Tests must import ``mailsift`` from ``mailsift/src`` rather than an installed
  wheel, and the runtime configuration is cached process-wide, so every test
  starts from a cleared cache.

Interfaces:
  :func:`runtime_config` (autouse fixture).
"""

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = PROJECT_ROOT / "mailsift" / "src"
if SRC_DIR.exists():
    sys.path.insert(0, str(SRC_DIR))

import pytest

from mailsift.config.loader import reset_runtime_config

CONFIG_PATH = Path(__file__).resolve().parent / "data" / "config.yaml"


@pytest.fixture(autouse=True)
def runtime_config(monkeypatch: pytest.MonkeyPatch):
    """Point ``MAILSIFT_CONFIG_PATH`` at the fixture file and reset the cache."""

    monkeypatch.setenv("MAILSIFT_CONFIG_PATH", str(CONFIG_PATH))
    reset_runtime_config()
    try:
        yield CONFIG_PATH
    finally:
        reset_runtime_config()
