"""Configuration models and YAML loader for the bookscout service."""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator


def _env_port() -> int:
    return int(os.environ.get("PORT", "3000"))


def _env_webhook_url() -> str:
    return os.environ.get("MAKE_WEBHOOK_URL", "")


class ServerConfig(BaseModel):
    """HTTP listener for the submission API."""

    host: str = "127.0.0.1"
    port: int = Field(default_factory=_env_port, ge=1, le=65535)


class ScraperConfig(BaseModel):
    """Catalog site and browser settings for discovery."""

    base_url: str = "https://bookdp.com.au"
    pages_to_scrape: int = Field(default=2, ge=1, le=10)
    headless: bool = True
    timeout_ms: int = Field(default=30000, ge=1000)
    search_wait_ms: int = Field(default=10000, ge=0)
    detail_wait_ms: int = Field(default=5000, ge=0)
    detail_delay: float = Field(default=0.5, ge=0.0)

    @field_validator("base_url")
    @classmethod
    def base_url_is_http(cls, v: str) -> str:
        v = v.strip().rstrip("/")
        if not v.startswith(("http://", "https://")):
            msg = f"base_url must be an http(s) URL, got '{v}'"
            raise ValueError(msg)
        return v


class EnrichmentConfig(BaseModel):
    """LLM provider and batch pacing for relevance scoring."""

    provider: str = "openai"
    model: str | None = None
    temperature: float = Field(default=0.3, ge=0.0, le=2.0)
    max_tokens: int = Field(default=150, ge=1)
    batch_size: int = Field(default=3, ge=1)
    batch_delay: float = Field(default=1.0, ge=0.0)


class DeliveryConfig(BaseModel):
    """Downstream webhook that receives finished results."""

    webhook_url: str = Field(default_factory=_env_webhook_url)
    timeout_s: float = Field(default=30.0, gt=0.0)


class JobsConfig(BaseModel):
    """Ceiling on background pipeline executions."""

    max_concurrent_jobs: int = Field(default=2, ge=1)
    max_queued_jobs: int = Field(default=16, ge=0)


class Settings(BaseModel):
    """Top-level settings loaded from YAML."""

    server: ServerConfig = Field(default_factory=ServerConfig)
    scraper: ScraperConfig = Field(default_factory=ScraperConfig)
    enrichment: EnrichmentConfig = Field(default_factory=EnrichmentConfig)
    delivery: DeliveryConfig = Field(default_factory=DeliveryConfig)
    jobs: JobsConfig = Field(default_factory=JobsConfig)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Settings":
        """Load settings from a YAML file."""
        path = Path(path)
        if not path.exists():
            msg = f"Config file not found: {path}"
            raise FileNotFoundError(msg)
        raw: dict[str, Any] = yaml.safe_load(path.read_text()) or {}
        return cls.model_validate(raw)

    @classmethod
    def load(cls, path: str | Path | None = None) -> "Settings":
        """Load from YAML when a path is given, otherwise use defaults and env."""
        if path is None:
            return cls()
        return cls.from_yaml(path)
