"""Settings module with nested configuration groups."""

import os
from enum import Enum
from typing import Any, Literal

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from chat_relay.settings.models import (
    AISettings,
    LoggingSettings,
    WebSocketSettings,
)


class Environment(str, Enum):
    """Application environment types."""

    DEV = "dev"
    STAGING = "staging"
    PRODUCTION = "production"


class Settings(BaseSettings):  # type: ignore[misc]
    """
    Main settings class.

    Provides both flat access and nested access. Flat env vars like
    GEMINI_MODEL are grouped into nested models through properties.
    """

    model_config = SettingsConfigDict(
        case_sensitive=True, env_file=".env", extra="ignore"
    )

    # Environment configuration
    ENV: Environment = Environment.DEV

    # Server bind address
    HOST: str = "0.0.0.0"
    PORT: int = 3000

    # AI provider settings (flat - will be grouped into nested model)
    GOOGLE_API_KEY: SecretStr | None = None
    GEMINI_MODEL: str = "gemini-1.5-flash"
    GEMINI_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta"
    AI_REQUEST_TIMEOUT: float = 30.0

    # WebSocket settings (flat - will be grouped into nested model)
    CLIENT_ID_PREFIX: str = "client-"
    WS_TYPING_INDICATOR: bool = True
    WS_ALLOWED_ORIGINS: list[str] = ["*"]
    BOT_REPLY_SCOPE: Literal["all", "sender"] = "all"

    # Logging settings (flat - will be grouped into nested model)
    LOG_FILE_PATH: str = "logs/logging_errors.log"
    LOG_EXCLUDED_PATHS: list[str] = ["/metrics", "/health"]
    LOG_LEVEL: str = "INFO"
    LOG_CONSOLE_FORMAT: str = "human"
    LOKI_ENABLED: bool = False
    LOKI_URL: str = "http://loki:3100"
    LOKI_VERSION: str = "1"

    def __init__(self, **kwargs: Any) -> None:
        """Initialize settings with environment-specific defaults."""
        super().__init__(**kwargs)
        self._apply_environment_defaults(kwargs)

    def _apply_environment_defaults(self, overrides: dict[str, Any]) -> None:
        """
        Apply environment-specific configuration defaults.

        Values set explicitly (keyword argument or environment variable)
        are never replaced.
        """

        def unset(name: str) -> bool:
            return name not in overrides and os.getenv(name) is None

        if self.ENV == Environment.PRODUCTION:
            if unset("LOG_CONSOLE_FORMAT"):
                self.LOG_CONSOLE_FORMAT = "json"
            if unset("LOG_LEVEL"):
                self.LOG_LEVEL = "WARNING"

        elif self.ENV == Environment.STAGING:
            if unset("LOG_CONSOLE_FORMAT"):
                self.LOG_CONSOLE_FORMAT = "json"
            if unset("LOG_LEVEL"):
                self.LOG_LEVEL = "INFO"

        else:  # Environment.DEV
            if unset("LOG_CONSOLE_FORMAT"):
                self.LOG_CONSOLE_FORMAT = "human"
            if unset("LOG_LEVEL"):
                self.LOG_LEVEL = "DEBUG"

    # Nested model properties
    @property
    def ai(self) -> AISettings:
        """Get AI provider settings as nested model."""
        return AISettings(
            API_KEY=self.GOOGLE_API_KEY,
            MODEL=self.GEMINI_MODEL,
            BASE_URL=self.GEMINI_BASE_URL,
            REQUEST_TIMEOUT=self.AI_REQUEST_TIMEOUT,
        )

    @property
    def websocket(self) -> WebSocketSettings:
        """Get WebSocket settings as nested model."""
        return WebSocketSettings(
            CLIENT_ID_PREFIX=self.CLIENT_ID_PREFIX,
            TYPING_INDICATOR=self.WS_TYPING_INDICATOR,
            ALLOWED_ORIGINS=self.WS_ALLOWED_ORIGINS,
            BOT_REPLY_SCOPE=self.BOT_REPLY_SCOPE,
        )

    @property
    def logging(self) -> LoggingSettings:
        """Get logging settings as nested model."""
        return LoggingSettings(
            FILE_PATH=self.LOG_FILE_PATH,
            EXCLUDED_PATHS=self.LOG_EXCLUDED_PATHS,
            LEVEL=self.LOG_LEVEL,
            CONSOLE_FORMAT=self.LOG_CONSOLE_FORMAT,
            LOKI_ENABLED=self.LOKI_ENABLED,
            LOKI_URL=self.LOKI_URL,
            LOKI_VERSION=self.LOKI_VERSION,
        )

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.ENV == Environment.PRODUCTION

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.ENV == Environment.DEV


app_settings = Settings()
