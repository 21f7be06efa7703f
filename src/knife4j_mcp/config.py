"""Settings loaded from environment variables (and an optional .env file)."""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from knife4j_mcp.errors import ConfigError

SUPPORTED_LANGS = ("zhCN", "en")


class Settings(BaseSettings):
    """Server settings."""

    docs_url: str = Field(default="", description="Comma-separated OpenAPI JSON URLs.")
    docs_lang: str = "zhCN"
    fetch_timeout: float = 30.0
    port: int = 3000
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("docs_lang")
    @classmethod
    def _check_lang(cls, value: str) -> str:
        if value not in SUPPORTED_LANGS:
            raise ValueError(f"docs_lang must be one of {', '.join(SUPPORTED_LANGS)}")
        return value

    @property
    def source_urls(self) -> list[str]:
        return parse_source_urls(self.docs_url)


def parse_source_urls(value: str) -> list[str]:
    """Split a comma-separated URL list; fails if no URL is left."""
    urls = [url.strip() for url in value.split(",") if url.strip()]
    if not urls:
        raise ConfigError("DOCS_URL environment variable is not set")
    return urls
