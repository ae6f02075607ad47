# Settings for the listing service.
# Created: 2026-10-17
#
# Settings are loaded from the environment (B2BROWSE_* variables or a .env
# file). The listing core never reads them directly: resolve_browse_config()
# freezes the request-scoped values into a BrowseConfig.

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from b2browse.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_AUTH_URL = "https://api.backblazeb2.com"


class Settings(BaseSettings):
    """Process-level configuration."""

    model_config = SettingsConfigDict(
        env_prefix="B2BROWSE_",
        env_file=".env",
        extra="ignore",
    )

    # B2 credentials
    b2_key_id: str | None = None
    b2_application_key: str | None = None
    b2_bucket_id: str | None = None
    b2_auth_url: str = DEFAULT_AUTH_URL

    # Routing
    content_base_url: str | None = Field(
        default=None,
        description="Absolute URL of the host that serves object bytes",
    )
    directory_host: str | None = Field(
        default=None,
        description="If set, listings are only served for this Host header",
    )

    # Listing behaviour
    cache_seconds: int = 3600
    max_entries: int = 10000
    request_timeout: float = 15.0
    site_title: str = "Index"

    @field_validator("cache_seconds")
    @classmethod
    def _positive_cache(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("cache_seconds must be positive")
        return v

    @field_validator("max_entries")
    @classmethod
    def _entries_in_range(cls, v: int) -> int:
        # b2_list_file_names caps a single call at 10000 entries
        if not 1 <= v <= 10000:
            raise ValueError("max_entries must be between 1 and 10000")
        return v

    @field_validator("content_base_url")
    @classmethod
    def _strip_trailing_slash(cls, v: str | None) -> str | None:
        return v.rstrip("/") if v else v

    def require_credentials(self) -> tuple[str, str]:
        """Return ``(key_id, application_key)`` or raise ``ConfigurationError``."""
        if not self.b2_key_id or not self.b2_application_key:
            raise ConfigurationError(
                "B2 credentials not configured. "
                "Set B2BROWSE_B2_KEY_ID and B2BROWSE_B2_APPLICATION_KEY."
            )
        return self.b2_key_id, self.b2_application_key


@lru_cache
def get_settings() -> Settings:
    return Settings()


@dataclass(frozen=True)
class BrowseConfig:
    """Immutable per-request view of the settings the listing core needs.

    Created via ``resolve_browse_config()``.
    """

    content_base_url: str | None  # None → link files on the listing host
    directory_host: str | None
    cache_seconds: int
    max_entries: int
    request_timeout: float
    site_title: str = "Index"


def resolve_browse_config(settings: Settings) -> BrowseConfig:
    """Freeze *settings* into a ``BrowseConfig``."""
    return BrowseConfig(
        content_base_url=settings.content_base_url,
        directory_host=settings.directory_host.lower() if settings.directory_host else None,
        cache_seconds=settings.cache_seconds,
        max_entries=settings.max_entries,
        request_timeout=settings.request_timeout,
        site_title=settings.site_title,
    )
