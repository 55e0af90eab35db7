"""Tests for settings loading."""

from __future__ import annotations

import pytest

from runtime_check.config import RuntimeCheckSettings
from runtime_check.flags import EnvFlagStore


class TestSettings:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for var in ("ENABLED", "LOG", "LOG_LEVEL", "FLAG_ENV_PREFIX"):
            monkeypatch.delenv(f"RUNTIME_CHECK_{var}", raising=False)
        s = RuntimeCheckSettings(_env_file=None)
        assert s.enabled is True
        assert s.log is True
        assert s.log_level == "INFO"
        assert s.flag_env_prefix == "FEATURE_"

    def test_env_prefix(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RUNTIME_CHECK_ENABLED", "false")
        monkeypatch.setenv("RUNTIME_CHECK_FLAG_ENV_PREFIX", "FF_")
        s = RuntimeCheckSettings(_env_file=None)
        assert s.enabled is False
        assert s.flag_env_prefix == "FF_"

    def test_flag_store_uses_settings_prefix(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("runtime_check.flags.settings", RuntimeCheckSettings(_env_file=None, flag_env_prefix="X_"))
        assert EnvFlagStore(environ={"X_BETA": "1"}).is_enabled("beta")
