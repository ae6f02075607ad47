# Listing fetcher — one b2_list_file_names call per browse request.
# Created: 2026-10-17

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any
from urllib.parse import unquote

import httpx

from b2browse.b2_auth import B2Session, upstream_failure
from b2browse.config import BrowseConfig
from b2browse.entries import RawEntry, parse_listing
from b2browse.errors import UpstreamFailure
from b2browse.formatting import SEPARATOR

logger = logging.getLogger(__name__)

B2_LIST_FILE_NAMES_ENDPOINT = "/b2api/v2/b2_list_file_names"
MAX_FILE_COUNT = 10000


@dataclass(frozen=True)
class ListingRequest:
    bucket_id: str
    prefix: str
    delimiter: str = SEPARATOR
    max_entries: int = MAX_FILE_COUNT

    def to_body(self) -> dict[str, Any]:
        return {
            "bucketId": self.bucket_id,
            "maxFileCount": self.max_entries,
            "prefix": self.prefix,
            "delimiter": self.delimiter,
        }


def listing_prefix(requested_path: str) -> str:
    """``"/a%20b/"`` → ``"a b/"``: drop the leading separator, percent-decode."""
    if requested_path.startswith(SEPARATOR):
        requested_path = requested_path[1:]
    return unquote(requested_path)


async def fetch_listing(
    requested_path: str, session: B2Session, config: BrowseConfig
) -> list[RawEntry]:
    """List the entries directly under *requested_path*.

    Raises ``UpstreamFailure`` on any non-2xx response, transport error, or
    unreadable body. No retries.
    """
    request = ListingRequest(
        bucket_id=session.bucket_id,
        prefix=listing_prefix(requested_path),
        max_entries=config.max_entries,
    )
    url = session.api_url.rstrip("/") + B2_LIST_FILE_NAMES_ENDPOINT
    logger.debug("Listing prefix %r", request.prefix)

    try:
        async with httpx.AsyncClient(timeout=config.request_timeout) as client:
            resp = await client.post(
                url,
                json=request.to_body(),
                headers={"Authorization": session.authorization_token},
            )
    except httpx.RequestError as e:
        logger.warning("Listing request for %r failed: %s", request.prefix, e)
        raise UpstreamFailure(502, "request_failed", str(e)) from e

    if not resp.is_success:
        failure = upstream_failure(resp)
        logger.warning("Listing %r rejected: %s", request.prefix, failure)
        raise failure

    try:
        payload = resp.json()
    except ValueError as e:
        raise UpstreamFailure(502, "malformed_response", "listing body is not JSON") from e

    return parse_listing(payload)
