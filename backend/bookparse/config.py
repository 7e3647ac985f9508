"""Application configuration."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables and ``.env``.

    The parsing core never reads these implicitly; hosts turn them into a
    ``ParseConfig`` with ``ParseConfig.from_settings(settings)``.
    """

    # Application
    app_name: str = "bookparse"
    debug: bool = False
    log_level: str = "INFO"

    # Upload limits
    max_upload_size_mb: int = Field(default=100, gt=0)  # Maximum EPUB size in MB

    # Parse features
    extract_cover: bool = True
    extract_toc: bool = True
    extract_metadata: bool = True

    # Cover processing
    max_cover_size: int = Field(default=300, gt=0)  # Longest side in pixels
    image_quality: int = Field(default=80, ge=0, le=100)  # JPEG quality

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )


settings = Settings()
