"""
Upload configuration settings.

Dependencies: pydantic_settings
System role: Upload validation limits
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class UploadSettings(BaseSettings):
    """Limits applied to uploaded documents."""

    model_config = SettingsConfigDict(
        env_prefix="UPLOAD_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    max_file_size_bytes: int = Field(
        default=10 * 1024 * 1024,
        gt=0,
        description="Maximum accepted upload size in bytes",
    )
    allowed_content_types: set[str] = Field(
        default={"application/pdf"},
        description="Accepted MIME types",
    )
