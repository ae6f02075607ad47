"""FastAPI application serving bucket directory listings.

Any ``GET`` for a path ending in ``/`` lists that prefix of the bucket.
The B2 session is authorized lazily and kept on ``app.state`` until the
provider reports the token as expired.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import HTMLResponse

from b2browse import __version__
from b2browse.b2_auth import B2Session, authorize_account
from b2browse.config import BrowseConfig, Settings, get_settings, resolve_browse_config
from b2browse.errors import ConfigurationError, ListingNotFound, UpstreamFailure
from b2browse.fetcher import fetch_listing, listing_prefix
from b2browse.formatting import SEPARATOR
from b2browse.renderer import render_listing
from b2browse.responses import cache_headers, error_page, rewrite_error_response

logger = logging.getLogger(__name__)

router = APIRouter()


async def get_session(request: Request) -> B2Session:
    """Cached B2 session, authorizing on first use."""
    session: B2Session | None = getattr(request.app.state, "b2_session", None)
    if session is None:
        session = await authorize_account(request.app.state.settings)
        request.app.state.b2_session = session
    return session


def request_path(request: Request) -> str:
    """The still percent-encoded request path.

    Clients that send unencoded UTF-8 get their bytes decoded as UTF-8;
    anything undecodable falls back to the server-decoded path.
    """
    raw = request.scope.get("raw_path")
    if raw:
        try:
            return raw.split(b"?", 1)[0].decode("utf-8")
        except UnicodeDecodeError:
            logger.debug("Undecodable raw path %r", raw)
    return request.url.path


def host_allowed(request: Request, config: BrowseConfig) -> bool:
    if not config.directory_host:
        return True
    host = (request.url.hostname or "").lower()
    return host == config.directory_host


@router.get("/healthz")
async def healthz():
    return {"status": "ok"}


@router.api_route("/{path:path}", methods=["GET", "HEAD"], response_class=HTMLResponse)
async def browse(request: Request):
    """Render the directory listing for the requested prefix."""
    config: BrowseConfig = request.app.state.browse_config
    raw_path = request_path(request)

    if not raw_path.endswith(SEPARATOR) or not host_allowed(request, config):
        raise ListingNotFound(raw_path)

    session = await get_session(request)
    try:
        entries = await fetch_listing(raw_path, session, config)
    except UpstreamFailure as e:
        if e.auth_expired:
            logger.info("B2 token expired, dropping cached session")
            request.app.state.b2_session = None
        raise

    html = render_listing(listing_prefix(raw_path), entries, config)
    return HTMLResponse(html, headers=cache_headers(config.cache_seconds))


async def _upstream_failure_handler(request: Request, exc: UpstreamFailure):
    return rewrite_error_response(request, exc.status_code)


async def _not_found_handler(request: Request, exc: ListingNotFound):
    return rewrite_error_response(request, 404)


async def _configuration_handler(request: Request, exc: ConfigurationError):
    logger.error("Configuration error: %s", exc)
    return error_page(request, 500)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the listing application."""
    settings = settings or get_settings()

    app = FastAPI(
        title="b2browse",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.settings = settings
    app.state.browse_config = resolve_browse_config(settings)
    app.state.b2_session = None

    app.add_exception_handler(UpstreamFailure, _upstream_failure_handler)
    app.add_exception_handler(ListingNotFound, _not_found_handler)
    app.add_exception_handler(ConfigurationError, _configuration_handler)

    app.include_router(router)
    return app


def run_server(host: str = "127.0.0.1", port: int = 8080, dev: bool = False) -> None:
    """Start the listing server with uvicorn."""
    import uvicorn

    if dev:
        uvicorn.run(
            "b2browse.app:create_app",
            factory=True,
            host=host,
            port=port,
            reload=True,
            log_level="debug",
        )
    else:
        uvicorn.run(create_app(), host=host, port=port)
