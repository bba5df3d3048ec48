"""Centralized configuration — all env vars in one place."""

import os
from dataclasses import dataclass

from errors import ConfigurationError


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class UpstreamConfig:
    """Validated endpoint and credentials for the carstat API."""

    base_url: str
    api_key: str
    timeout_seconds: float = 10.0

    def __post_init__(self):
        if not self.base_url or not self.api_key:
            raise ConfigurationError()
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))


class Settings:
    """Application settings loaded from environment variables."""

    def __init__(self):
        self.cors_origins: list[str] = os.getenv("CORS_ORIGINS", "*").split(",")
        self.git_sha: str = os.getenv("GIT_SHA", "unknown")
        self.environment: str = os.getenv("ENVIRONMENT", "local")

        # carstat upstream
        self.carstat_api_url: str | None = os.getenv("CARSTAT_API_URL")
        self.carstat_api_key: str | None = os.getenv("CARSTAT_API_KEY")
        self.carstat_timeout_seconds: float = float(os.getenv("CARSTAT_TIMEOUT_SECONDS", "10"))

        # Session cache
        self.cache_enabled: bool = _env_bool("CACHE_ENABLED", True)
        self.cache_ttl_seconds: int = int(os.getenv("CACHE_TTL_SECONDS", "600"))

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def validate(self) -> list[str]:
        """Return list of missing required env vars for upstream access."""
        required = ["CARSTAT_API_URL", "CARSTAT_API_KEY"]
        return [var for var in required if not getattr(self, var.lower())]

    def upstream(self) -> UpstreamConfig:
        """Build the upstream config, raising ConfigurationError if incomplete."""
        return UpstreamConfig(
            base_url=self.carstat_api_url or "",
            api_key=self.carstat_api_key or "",
            timeout_seconds=self.carstat_timeout_seconds,
        )


settings = Settings()
