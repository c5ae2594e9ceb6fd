"""Nested settings models (BaseModel, not BaseSettings)."""

from typing import Literal

from pydantic import BaseModel, SecretStr


class AISettings(BaseModel):  # type: ignore[misc]
    """Gemini provider configuration."""

    API_KEY: SecretStr | None = None
    MODEL: str = "gemini-1.5-flash"
    BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta"
    REQUEST_TIMEOUT: float = 30.0

    @property
    def is_configured(self) -> bool:
        """Check if a non-empty credential is present."""
        return bool(self.API_KEY and self.API_KEY.get_secret_value())

    @property
    def generate_url(self) -> str:
        """Construct the generateContent endpoint URL."""
        return f"{self.BASE_URL.rstrip('/')}/models/{self.MODEL}:generateContent"


class WebSocketSettings(BaseModel):  # type: ignore[misc]
    """WebSocket configuration."""

    CLIENT_ID_PREFIX: str = "client-"
    TYPING_INDICATOR: bool = True
    ALLOWED_ORIGINS: list[str] = ["*"]
    BOT_REPLY_SCOPE: Literal["all", "sender"] = "all"


class LoggingSettings(BaseModel):  # type: ignore[misc]
    """Logging configuration."""

    FILE_PATH: str = "logs/logging_errors.log"
    EXCLUDED_PATHS: list[str] = ["/metrics", "/health"]
    LEVEL: str = "INFO"
    CONSOLE_FORMAT: str = "human"
    LOKI_ENABLED: bool = False
    LOKI_URL: str = "http://loki:3100"
    LOKI_VERSION: str = "1"
