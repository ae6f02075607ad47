# Response helpers — error rewriting and cache headers.
# Created: 2026-10-17

from __future__ import annotations

import logging
import time
from email.utils import formatdate

from fastapi import Request
from fastapi.responses import HTMLResponse

from b2browse.formatting import escape_html

logger = logging.getLogger(__name__)

_STATUS_TITLES = {
    400: "Bad Request",
    403: "Forbidden",
    404: "Not Found",
    405: "Method Not Allowed",
    429: "Too Many Requests",
    500: "Internal Server Error",
    502: "Bad Gateway",
}

_ERROR_PAGE = """<!doctype html>
<html lang="en">
  <head><meta charset="utf-8"><title>{status} {title}</title></head>
  <body>
    <h1>{status} {title}</h1>
    <p>{path}</p>
  </body>
</html>
"""


def caller_status(upstream_status: int) -> int:
    """Map a provider status to the status shown to the browser.

    Auth problems are ours, not the visitor's, so 401 becomes 403.
    Provider-side errors become 502.
    """
    if upstream_status in (401, 403):
        return 403
    if 400 <= upstream_status < 500:
        return upstream_status
    return 502


def error_page(request: Request, status: int) -> HTMLResponse:
    """Minimal HTML page for *status*. Never cached."""
    title = _STATUS_TITLES.get(status, "Error")
    body = _ERROR_PAGE.format(
        status=status,
        title=escape_html(title),
        path=escape_html(request.url.path),
    )
    return HTMLResponse(body, status_code=status, headers={"Cache-Control": "no-store"})


def cache_headers(max_age: int, now: float | None = None) -> dict[str, str]:
    """``Cache-Control`` and ``Expires`` for a listing cached *max_age* seconds."""
    if now is None:
        now = time.time()
    return {
        "Cache-Control": f"public, immutable, max-age={max_age}",
        "Expires": formatdate(now + max_age, usegmt=True),
    }


def rewrite_error_response(request: Request, upstream_status: int) -> HTMLResponse:
    """Generic HTML error page for a failed or empty listing."""
    status = caller_status(upstream_status)
    logger.debug("Rewriting %d → %d for %s", upstream_status, status, request.url.path)
    return error_page(request, status)
