"""
Configuration management for the flashcard app.
Handles the database location, the spaced repetition toggle and algorithm constants.

The scheduler constants default to the standard values: Hard multiplies the
interval by 1.2, Easy adds a 1.3 bonus and the ease factor moves in steps of
0.15. Overriding them through the environment or `PUT /api/config` changes
those formulas for every later review. The ease factor bounds [1.3, 2.5] are
fixed and cannot be overridden.
"""

import logging

from pydantic_settings import BaseSettings, SettingsConfigDict

from backend.schemas import ConfigResponse, ConfigUpdate
from backend.spaced_repetition import SpacedRepetitionConfig

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str = "sqlite:///./study_cards.db"

    # Logging
    log_level: str = "INFO"

    # Spaced Repetition defaults
    algorithm_enabled: bool = False
    hard_multiplier: float = 1.2
    easy_bonus: float = 1.3
    ease_factor_step: float = 0.15

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False
    )


def configure_logging(level: str = "INFO") -> None:
    """Set up root logging for the application."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)


def _parse_bool(value: str | bool) -> bool:
    if isinstance(value, bool):
        return value
    return value.strip().lower() in ("1", "true", "yes", "on")


class ConfigManager:
    """Manager for application configuration."""

    def __init__(self, config_dao=None, settings: Settings | None = None):
        """
        Initialize configuration manager.

        Args:
            config_dao: Optional ConfigDAO for persistent storage
            settings: Optional settings, read from the environment when omitted
        """
        self.settings = settings or Settings()
        self.config_dao = config_dao

    def _get(self, key: str):
        default = getattr(self.settings, key)
        if self.config_dao:
            return self.config_dao.get(key, default)
        return default

    def get_algorithm_enabled(self) -> bool:
        """Whether reviews apply spaced repetition unless a caller overrides it."""
        return _parse_bool(self._get("algorithm_enabled"))

    def get_config_response(self) -> ConfigResponse:
        """
        Get configuration response.

        Returns:
            ConfigResponse with the effective values
        """
        return ConfigResponse(
            algorithm_enabled=self.get_algorithm_enabled(),
            hard_multiplier=float(self._get("hard_multiplier")),
            easy_bonus=float(self._get("easy_bonus")),
            ease_factor_step=float(self._get("ease_factor_step")),
        )

    def update_config(self, config_update: ConfigUpdate) -> ConfigResponse:
        """
        Update configuration values.

        Args:
            config_update: Configuration updates

        Returns:
            Updated ConfigResponse
        """
        if not self.config_dao:
            raise ValueError("ConfigDAO not available for updates")

        for key, value in config_update.model_dump(exclude_none=True).items():
            self.config_dao.set(key, str(value))

        return self.get_config_response()

    def get_spaced_repetition_config(self) -> SpacedRepetitionConfig:
        """
        Get spaced repetition configuration.

        Returns:
            SpacedRepetitionConfig with current settings
        """
        return SpacedRepetitionConfig(
            hard_multiplier=float(self._get("hard_multiplier")),
            easy_bonus=float(self._get("easy_bonus")),
            ease_factor_step=float(self._get("ease_factor_step")),
        )
