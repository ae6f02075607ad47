# B2 account authorization — produces the session used for listing calls.
# Created: 2026-10-17

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from b2browse.config import Settings
from b2browse.errors import ConfigurationError, UpstreamFailure

logger = logging.getLogger(__name__)

B2_AUTHORIZE_ACCOUNT_ENDPOINT = "/b2api/v2/b2_authorize_account"


@dataclass(frozen=True)
class B2Session:
    """Result of ``b2_authorize_account`` narrowed to what listings need."""

    api_url: str
    authorization_token: str
    download_url: str
    bucket_id: str


def upstream_failure(resp: httpx.Response) -> UpstreamFailure:
    """Build an ``UpstreamFailure`` from a non-2xx B2 response.

    B2 error bodies look like ``{"status": 401, "code": "...", "message": "..."}``.
    """
    code, message = "", ""
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        code = str(body.get("code", ""))
        message = str(body.get("message", ""))
    return UpstreamFailure(resp.status_code, code, message)


def session_from_response(data: dict[str, Any], bucket_id: str | None) -> B2Session:
    """Build a ``B2Session`` from the authorize-account JSON.

    A configured *bucket_id* wins; otherwise the key must be restricted to a
    single bucket.
    """
    allowed = data.get("allowed") or {}
    resolved_bucket = bucket_id or allowed.get("bucketId")
    if not resolved_bucket:
        raise ConfigurationError(
            "No bucket id configured and the application key is not bucket-restricted. "
            "Set B2BROWSE_B2_BUCKET_ID."
        )
    try:
        return B2Session(
            api_url=data["apiUrl"],
            authorization_token=data["authorizationToken"],
            download_url=data.get("downloadUrl", ""),
            bucket_id=resolved_bucket,
        )
    except KeyError as e:
        raise UpstreamFailure(502, "malformed_response", f"missing {e.args[0]}") from e


async def authorize_account(settings: Settings) -> B2Session:
    """Call ``b2_authorize_account`` with the configured application key."""
    key_id, application_key = settings.require_credentials()
    url = settings.b2_auth_url.rstrip("/") + B2_AUTHORIZE_ACCOUNT_ENDPOINT

    try:
        async with httpx.AsyncClient(timeout=settings.request_timeout) as client:
            resp = await client.get(url, auth=(key_id, application_key))
    except httpx.RequestError as e:
        logger.warning("B2 authorization request failed: %s", e)
        raise UpstreamFailure(502, "request_failed", str(e)) from e

    if not resp.is_success:
        failure = upstream_failure(resp)
        logger.warning("B2 authorization rejected: %s", failure)
        raise failure

    try:
        data = resp.json()
    except ValueError as e:
        raise UpstreamFailure(502, "malformed_response", "authorization body is not JSON") from e

    session = session_from_response(data, settings.b2_bucket_id)
    logger.info("Authorized B2 account, api %s, bucket %s", session.api_url, session.bucket_id)
    return session
