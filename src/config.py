"""Application configuration."""
import logging
from pydantic_settings import BaseSettings
from pydantic import Field
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # API Settings
    app_name: str = "Edit Distance API"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"

    # Site Settings (share page, preview image)
    site_host: str = "edit-distance.igel.mov"
    site_title: str = "Edit Distance Calculator"
    site_author: str = "Luke Igel"

    # Preview image fonts (TrueType paths); Pillow's bundled font if unset
    preview_font_path: str = ""
    preview_bold_font_path: str = ""

    # Input limit applied before the engine runs (matrix is m*n cells)
    max_input_length: int = 2000

    # Entry Store Settings
    # Options: 'local' (JSON files on disk), 'blob' (Vercel Blob REST API)
    entry_store: str = "local"
    entries_dir: str = "data"
    entries_page_size: int = 100

    # Vercel Blob Configuration
    blob_api_url: str = "https://blob.vercel-storage.com"
    blob_token: str = Field(default="", alias="BLOB_READ_WRITE_TOKEN")
    blob_timeout: float = 30.0

    # CORS Settings
    cors_origins: str = "*"  # Comma-separated origins, or '*' for all

    model_config = {
        "env_prefix": "EDIT_DISTANCE_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "populate_by_name": True,  # Allow both alias and field name
        "extra": "ignore",
    }

    @property
    def default_social_title(self) -> str:
        return f"{self.site_title} | {self.site_author}"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def configure_logging(settings: Settings) -> None:
    """Apply the configured log level to the root logger."""
    level = logging.DEBUG if settings.debug else getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
