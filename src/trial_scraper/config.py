"""Configuration module for loading and validating scraper settings."""
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .clients.firecrawl import DEFAULT_API_BASE
from .errors import ConfigurationError
from .model import ContentFormat

DEFAULT_START_URL = "https://clinicaltrials.gov/search?recrs=ab"


class CrawlConfig(BaseModel):
    """Everything the orchestrator needs to drive one crawl run."""

    start_url: str
    limit: int
    max_depth: int
    include_paths: List[str]
    exclude_paths: List[str]
    content_format: ContentFormat = Field(default_factory=ContentFormat)
    poll_interval: float = 2.0
    # None keeps waiting until the job completes or fails
    max_poll_attempts: Optional[int] = None
    poll_timeout: Optional[float] = None


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Firecrawl credential, required for crawling
    firecrawl_api_key: Optional[str] = None
    firecrawl_api_base: str = DEFAULT_API_BASE

    # Crawl entry point and bounds
    start_url: str = DEFAULT_START_URL
    limit: int = Field(default=50, gt=0)
    max_depth: int = Field(default=2, ge=0)
    include_paths: List[str] = Field(default_factory=lambda: ["/study/", "/ct2/show/"])
    exclude_paths: List[str] = Field(
        default_factory=lambda: ["/api/", "/search/advanced", "/about/", "/study-records/"]
    )

    # Job status polling
    poll_interval: float = Field(default=2.0, gt=0)
    max_poll_attempts: Optional[int] = Field(default=None, gt=0)
    poll_timeout: Optional[float] = Field(default=None, gt=0)

    request_timeout: float = Field(default=30.0, gt=0)
    cache_scrapes: bool = True

    log_level: str = "INFO"
    log_file: Optional[str] = None

    def require_api_key(self) -> str:
        if not self.firecrawl_api_key:
            raise ConfigurationError("Missing FIRECRAWL_API_KEY env var.")
        return self.firecrawl_api_key

    def crawl_config(self) -> CrawlConfig:
        return CrawlConfig(
            start_url=self.start_url,
            limit=self.limit,
            max_depth=self.max_depth,
            include_paths=list(self.include_paths),
            exclude_paths=list(self.exclude_paths),
            poll_interval=self.poll_interval,
            max_poll_attempts=self.max_poll_attempts,
            poll_timeout=self.poll_timeout,
        )


def load_yaml(path: str | Path) -> dict:
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Cannot read config file {path}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping")
    return raw


def load_settings(config_path: Optional[str | Path] = None, **overrides) -> Settings:
    """Build settings once at the process boundary.

    Args:
        config_path: Optional YAML file with setting keys
        **overrides: Explicit values (e.g. CLI options); None values are ignored

    Returns:
        Validated settings

    Raises:
        ConfigurationError: If the file is unreadable or a value is invalid
    """
    values = {}
    if config_path:
        values.update(load_yaml(config_path))
    values.update({key: value for key, value in overrides.items() if value is not None})
    try:
        return Settings(**values)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid settings: {e}") from e
