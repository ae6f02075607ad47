# Exceptions raised by the listing pipeline.
# Created: 2026-10-17

from __future__ import annotations


class BrowseError(Exception):
    """Base class for listing failures."""


class ConfigurationError(BrowseError):
    """Required settings are missing or invalid."""


class UpstreamFailure(BrowseError):
    """A call to the storage provider did not succeed.

    ``status_code`` is the provider's HTTP status (502 for transport errors or
    unreadable responses). ``code`` and ``message`` come from the provider's
    JSON error body when it sent one.
    """

    def __init__(self, status_code: int, code: str = "", message: str = ""):
        self.status_code = status_code
        self.code = code
        self.message = message
        super().__init__(f"{status_code} {code}: {message}".strip())

    @property
    def auth_expired(self) -> bool:
        return self.code in ("expired_auth_token", "bad_auth_token")


class ListingNotFound(BrowseError):
    """The requested prefix has nothing to show."""
