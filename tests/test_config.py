"""
Tests for configuration management.
"""

import pytest

from backend.config import ConfigManager, Settings
from backend.database import ConfigDAO
from backend.schemas import ConfigUpdate
from backend.spaced_repetition import SpacedRepetitionConfig


def test_settings_defaults(monkeypatch):
    for name in ("DATABASE_URL", "LOG_LEVEL", "ALGORITHM_ENABLED"):
        monkeypatch.delenv(name, raising=False)
    settings = Settings(_env_file=None)

    assert settings.database_url == "sqlite:///./study_cards.db"
    assert settings.algorithm_enabled is False
    assert settings.log_level == "INFO"


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("ALGORITHM_ENABLED", "true")
    monkeypatch.setenv("HARD_MULTIPLIER", "1.5")

    settings = Settings(_env_file=None)

    assert settings.algorithm_enabled is True
    assert settings.hard_multiplier == 1.5


class TestConfigManager:
    def test_defaults_without_dao(self):
        manager = ConfigManager(settings=Settings(_env_file=None, algorithm_enabled=False))

        response = manager.get_config_response()

        assert response.algorithm_enabled is False
        assert response.hard_multiplier == 1.2
        assert manager.get_spaced_repetition_config() == SpacedRepetitionConfig()

    def test_update_without_dao_raises(self):
        manager = ConfigManager(settings=Settings(_env_file=None))

        with pytest.raises(ValueError):
            manager.update_config(ConfigUpdate(algorithm_enabled=True))

    def test_stored_values_override_settings(self, config_manager):
        assert config_manager.get_algorithm_enabled() is True

        response = config_manager.update_config(
            ConfigUpdate(algorithm_enabled=False, easy_bonus=1.6)
        )

        assert response.algorithm_enabled is False
        assert response.easy_bonus == 1.6
        assert response.ease_factor_step == 0.15
        assert config_manager.get_algorithm_enabled() is False

    def test_spaced_repetition_config_uses_stored_values(self, test_db):
        ConfigDAO(test_db).set("hard_multiplier", "1.4")
        manager = ConfigManager(config_dao=ConfigDAO(test_db), settings=Settings(_env_file=None))

        config = manager.get_spaced_repetition_config()

        assert config.hard_multiplier == 1.4
        assert config.easy_bonus == 1.3
        assert config.ease_factor_minimum == 1.3
