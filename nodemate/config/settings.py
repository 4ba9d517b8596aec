# nodemate/config/settings.py
import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from nodemate.exceptions.config import ConfigError

logger = logging.getLogger("Settings")


def _default_config_dir() -> Path:
    return Path.home() / ".config" / "nodemate"


class Settings(BaseSettings):
    # === Environment Variables (NODEMATE_ prefix) ===
    config_dir: Path = Field(default_factory=_default_config_dir)
    log_level: str = "WARNING"
    log_file: Optional[Path] = None
    debug: bool = False

    # Outbound call limits
    request_timeout: float = 60.0
    max_retries: int = 2
    registry_timeout: float = 10.0
    probe_timeout: float = 5.0

    search_limit: int = 5

    # === Pydantic V2 Configuration ===
    model_config = SettingsConfigDict(
        env_prefix="NODEMATE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_and_compute(self) -> "Settings":
        """Validate and compute derived fields."""

        # 1. Validate log level
        if self.log_level.upper() not in logging._nameToLevel:
            raise ConfigError(f"Invalid log level: {self.log_level}")
        self.log_level = self.log_level.upper()
        if self.debug:
            self.log_level = "DEBUG"

        # 2. Timeouts must be positive
        for name in ("request_timeout", "registry_timeout", "probe_timeout"):
            if getattr(self, name) <= 0:
                raise ConfigError(f"{name} must be positive, got {getattr(self, name)}")

        if self.search_limit < 1:
            raise ConfigError(f"search_limit must be at least 1, got {self.search_limit}")

        # 3. Default log file lives beside the config
        if self.debug and self.log_file is None:
            self.log_file = self.config_dir / "debug.log"

        return self

    # === Convenience Properties ===

    @property
    def config_file(self) -> Path:
        return self.config_dir / "config.json"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings once per process."""
    return Settings()
