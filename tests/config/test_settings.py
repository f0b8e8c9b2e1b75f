"""Tests for trouble/config/settings.py."""

import logging

import pytest
from pydantic import ValidationError

from trouble.config.settings import Settings, configure_logging


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in ("TURN_TIMEOUT", "TIMEOUT_WARNING_THRESHOLD", "SIX_GRANTS_EXTRA_TURN"):
            monkeypatch.delenv(name, raising=False)
        settings = Settings(_env_file=None)
        assert settings.turn_timeout == 30
        assert settings.timeout_warning_threshold == 10
        assert settings.die_roll_delay == 1.5
        assert settings.six_grants_extra_turn is True

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("TURN_TIMEOUT", "45")
        monkeypatch.setenv("SIX_GRANTS_EXTRA_TURN", "false")
        settings = Settings(_env_file=None)
        assert settings.turn_timeout == 45
        assert settings.six_grants_extra_turn is False

    def test_threshold_below_timeout(self):
        with pytest.raises(ValidationError, match="smaller than turn_timeout"):
            Settings(_env_file=None, turn_timeout=10, timeout_warning_threshold=10)

    def test_timeout_positive(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, turn_timeout=0)

    def test_use_supabase(self):
        assert Settings(_env_file=None, supabase_url=None, supabase_anon_key=None).use_supabase is False
        settings = Settings(_env_file=None, supabase_url="https://x.supabase.co", supabase_anon_key="k")
        assert settings.use_supabase is True


def test_configure_logging_debug(monkeypatch):
    calls = {}
    monkeypatch.setattr(logging, "basicConfig", lambda **kw: calls.update(kw))
    configure_logging(Settings(_env_file=None, debug=True))
    assert calls["level"] == logging.DEBUG
