"""
Tests for environment configuration.
"""

from pathlib import Path

import pytest

from ..config import EnvironmentSettings


@pytest.fixture
def clean_env(monkeypatch):
    for name in [
        "MONIKERS_STATE_PATH",
        "MONIKERS_SEED_DIR",
        "MONIKERS_TURN_DURATION",
        "MONIKERS_CUSTOM_CARDS",
        "MONIKERS_LOG_LEVEL",
        "ALLOWED_ORIGINS",
    ]:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestEnvironmentSettings:

    def test_defaults(self, clean_env):
        settings = EnvironmentSettings.from_env()

        assert settings.state_path == Path.home() / ".monikers" / "state.json"
        assert settings.seed_dir is None
        assert settings.turn_duration == 10
        assert not settings.custom_cards_enabled
        assert settings.log_level == "INFO"
        assert settings.allowed_origins == ["*"]

    def test_overrides(self, clean_env, tmp_path):
        clean_env.setenv("MONIKERS_STATE_PATH", str(tmp_path / "s.json"))
        clean_env.setenv("MONIKERS_SEED_DIR", str(tmp_path))
        clean_env.setenv("MONIKERS_TURN_DURATION", "30")
        clean_env.setenv("MONIKERS_CUSTOM_CARDS", "yes")
        clean_env.setenv("MONIKERS_LOG_LEVEL", "debug")
        clean_env.setenv("ALLOWED_ORIGINS", "http://a,http://b")

        settings = EnvironmentSettings.from_env()

        assert settings.state_path == tmp_path / "s.json"
        assert settings.seed_dir == tmp_path
        assert settings.turn_duration == 30
        assert settings.custom_cards_enabled
        assert settings.log_level == "DEBUG"
        assert settings.allowed_origins == ["http://a", "http://b"]

    @pytest.mark.parametrize("value", ["soon", "0", "-5"])
    def test_bad_turn_duration(self, clean_env, value):
        clean_env.setenv("MONIKERS_TURN_DURATION", value)

        with pytest.raises(ValueError, match="MONIKERS_TURN_DURATION"):
            EnvironmentSettings.from_env()
