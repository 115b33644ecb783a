"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages and
provides settings that never read the developer's .env files.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Any

import pytest

_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

import core.config  # noqa: E402
from core.config import AppSettings  # noqa: E402


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep ACCTFEED_* variables and the user config dir out of tests."""
    for key in list(os.environ):
        if key.startswith("ACCTFEED_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setattr(core.config, "get_user_config_dir", lambda: tmp_path / "config")


@pytest.fixture
def make_settings():
    """Factory for AppSettings with fast retries, no env files and no bundle."""

    def _make(**overrides: Any) -> AppSettings:
        values: dict[str, Any] = {
            "http_timeout_seconds": 1.0,
            "retry_max": 1,
            "retry_backoff_seconds": 0.0,
            "sources_bundle": None,
        }
        values.update(overrides)
        return AppSettings(_env_file=None, **values)

    return _make
