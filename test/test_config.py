"""
Environment configuration: typed FLOOR_ overrides and rejection of bad values.
"""

import pydantic
import pytest

from floor import config
from floor.config import Settings, get_settings
from floor.engine import DEFAULT_DUEL_SECONDS


def test_defaults():
    settings = Settings(_env_file=None)
    assert settings.DUEL_SECONDS == DEFAULT_DUEL_SECONDS
    assert settings.TICK_SECONDS == 1.0
    assert settings.LOG_LEVEL == "INFO"
    assert "http://localhost:5173" in settings.CORS_ORIGINS


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("FLOOR_DUEL_SECONDS", "45")
    monkeypatch.setenv("FLOOR_TICK_SECONDS", "0.25")
    monkeypatch.setenv("FLOOR_LOG_LEVEL", "debug")
    monkeypatch.setenv("FLOOR_CORS_ORIGINS", '["http://floor.test"]')
    settings = Settings(_env_file=None)
    assert settings.DUEL_SECONDS == 45
    assert settings.TICK_SECONDS == 0.25
    assert settings.LOG_LEVEL == "DEBUG"
    assert settings.CORS_ORIGINS == ["http://floor.test"]


@pytest.mark.parametrize("name,value", [
    ("FLOOR_DUEL_SECONDS", "sixty"),
    ("FLOOR_DUEL_SECONDS", "0"),
    ("FLOOR_TICK_SECONDS", "-1"),
])
def test_bad_values_are_rejected(monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(pydantic.ValidationError):
        Settings(_env_file=None)


def test_settings_are_read_once(monkeypatch):
    monkeypatch.setattr(config, "_settings", None)
    monkeypatch.setenv("FLOOR_DUEL_SECONDS", "30")
    first = get_settings()
    monkeypatch.setenv("FLOOR_DUEL_SECONDS", "90")
    assert get_settings() is first
    assert first.DUEL_SECONDS == 30
