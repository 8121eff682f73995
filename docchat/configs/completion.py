"""
Completion backend configuration settings.

Settings for the Gemini generative-text backend and prompt budgets.

Dependencies: pydantic_settings
System role: Completion client configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class CompletionSettings(BaseSettings):
    """Gemini completion configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GEMINI_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    api_key: str | None = Field(
        default=None,
        description="Gemini API key (required before the first completion)",
    )
    model: str = Field(
        default="gemini-1.5-flash-latest",
        description="Gemini model identifier",
    )
    temperature: float = Field(
        default=0.2,
        ge=0.0,
        le=2.0,
        description="Sampling temperature",
    )
    timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Transport timeout for a single completion",
    )
    document_char_budget: int = Field(
        default=8000,
        gt=0,
        description="Maximum characters of document text sent per request",
    )
    history_window: int = Field(
        default=10,
        ge=0,
        description="Number of most recent transcript messages sent per turn",
    )
    questions_char_budget: int = Field(
        default=6000,
        gt=0,
        description="Maximum characters of document text used for suggested questions",
    )
