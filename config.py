"""
Centralized configuration for the CRO audit service
All environment variables and settings are defined here
"""

from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Provides centralized configuration with validation and defaults.
    """

    # ======================
    # Model API Configuration
    # ======================
    ANTHROPIC_API_KEY: str = Field(default="", description="Anthropic API key")
    ANTHROPIC_MODEL: str = Field(
        default="claude-sonnet-4-20250514",
        description="Preferred Claude model, tried first"
    )
    ANTHROPIC_FALLBACK_MODELS: str = Field(
        default="claude-3-7-sonnet-20250219,claude-3-5-haiku-20241022",
        description="Comma-separated models tried in order when the preferred one is unavailable"
    )
    MAX_TOKENS: int = Field(default=4000, description="Max tokens for Claude response")
    MODEL_TEMPERATURE: float = Field(default=0.2, description="Sampling temperature for analysis")

    # ======================
    # Page Fetch Configuration
    # ======================
    FETCH_TIMEOUT: int = Field(
        default=20,
        description="Timeout for the outbound page fetch in seconds"
    )
    FETCH_USER_AGENT: str = Field(
        default="Mozilla/5.0 (compatible; CROAudit/1.0; +https://example.com)",
        description="User-Agent sent with page fetches"
    )
    MAX_TEXT_CHARS: int = Field(
        default=16000,
        description="Character budget for extracted page text sent to the model"
    )

    # ======================
    # Streaming Relay Configuration
    # ======================
    PROGRESS_TICK_SECONDS: float = Field(
        default=1.0,
        description="Interval between cosmetic progress events"
    )
    PROGRESS_TICK_STEP: int = Field(
        default=3,
        description="Progress increment per tick"
    )
    PROGRESS_CAP: int = Field(
        default=95,
        lt=100,
        description="Upper bound for progress before the terminal event"
    )
    HEARTBEAT_SECONDS: float = Field(
        default=15.0,
        description="Interval between keepalive ping events"
    )

    # ======================
    # Screenshot Configuration
    # ======================
    SCREENSHOT_URL_TMPL: Optional[str] = Field(
        default=None,
        description="Screenshot service URL template with a {URL} placeholder"
    )
    SCREENSHOT_WS_ENDPOINT: Optional[str] = Field(
        default=None,
        description="Remote headless browser CDP endpoint (launches locally if unset)"
    )
    SCREENSHOT_TIMEOUT: int = Field(
        default=30000,
        description="Navigation timeout for screenshot capture in milliseconds"
    )
    VIEWPORT_WIDTH: int = Field(
        default=1200,
        description="Browser viewport width"
    )
    VIEWPORT_HEIGHT: int = Field(
        default=800,
        description="Browser viewport height"
    )

    # ======================
    # Email Configuration
    # ======================
    RESEND_API_KEY: Optional[str] = Field(
        default=None,
        description="Resend API key for emailing PDF reports"
    )
    FROM_EMAIL: str = Field(
        default="reports@example.com",
        description="Sender address for report emails"
    )

    # ======================
    # Logging Configuration
    # ======================
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level"
    )

    @property
    def model_candidates(self) -> List[str]:
        """Preferred model followed by fallbacks, duplicates removed, order kept"""
        candidates = [self.ANTHROPIC_MODEL] + [
            m.strip() for m in self.ANTHROPIC_FALLBACK_MODELS.split(",")
        ]
        return list(dict.fromkeys(m for m in candidates if m))

    @property
    def email_enabled(self) -> bool:
        return bool(self.RESEND_API_KEY)

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"  # Allow extra env vars in .env file


# Global settings instance
settings = Settings()


# ======================
# Convenience Functions
# ======================

def get_settings() -> Settings:
    """Get the process-wide settings instance"""
    return settings


def get_anthropic_api_key() -> str:
    """Get Anthropic API key"""
    return settings.ANTHROPIC_API_KEY


def get_anthropic_model() -> str:
    """Get preferred Anthropic model name"""
    return settings.ANTHROPIC_MODEL
