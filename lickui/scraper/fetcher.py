"""Async HTTP fetcher that poses as a desktop browser."""

from __future__ import annotations

import asyncio
import logging
from urllib.parse import urlparse

import httpx

from lickui.config import settings
from lickui.errors import FetchError, InvalidUrlError
from lickui.scraper.models import FetchResult

logger = logging.getLogger(__name__)


def _browser_headers() -> dict[str, str]:
    return {
        "User-Agent": settings.user_agent,
        "Accept": (
            "text/html,application/xhtml+xml,application/xml;q=0.9,"
            "image/avif,image/webp,image/apng,*/*;q=0.8"
        ),
        "Accept-Language": "en-US,en;q=0.9",
        # Responses must arrive as plain text, never compressed.
        "Accept-Encoding": "identity",
        "Cache-Control": "no-cache",
        "Sec-Fetch-Dest": "document",
        "Sec-Fetch-Mode": "navigate",
        "Sec-Fetch-Site": "none",
        "Upgrade-Insecure-Requests": "1",
    }


def validate_url(url: str) -> str:
    """Return *url* stripped, or raise :class:`InvalidUrlError`.

    Only absolute ``http``/``https`` URLs with a well-formed host and port
    are accepted, so anything returned here is safe to hand to httpx.
    """
    candidate = (url or "").strip()
    try:
        parsed = httpx.URL(candidate)
        authority = urlparse(candidate).netloc
    except (httpx.InvalidURL, ValueError) as exc:
        raise InvalidUrlError(candidate) from exc
    if parsed.scheme not in ("http", "https") or not parsed.host:
        raise InvalidUrlError(candidate)
    if any(ch.isspace() for ch in authority):
        raise InvalidUrlError(candidate)
    return candidate


def origin_of(url: str | httpx.URL) -> str:
    """Return ``scheme://host[:port]`` for *url* (default ports omitted)."""
    parsed = httpx.URL(str(url))
    origin = f"{parsed.scheme}://{parsed.host}"
    if parsed.port is not None:
        origin += f":{parsed.port}"
    return origin


async def fetch_url(url: str, client: httpx.AsyncClient | None = None) -> FetchResult:
    """Fetch *url* and return a :class:`FetchResult`.

    Redirects are followed; the origin of the final URL becomes the base for
    later URL rewriting.

    Raises:
        InvalidUrlError: *url* is not an absolute http(s) URL (no request made).
        FetchError: non-2xx status (``kind="http_status"``) or a network,
            DNS or timeout failure (``kind="transport"``).
    """
    target = validate_url(url)

    owns_client = client is None
    if client is None:
        client = httpx.AsyncClient(
            headers=_browser_headers(),
            timeout=settings.request_timeout,
            follow_redirects=True,
        )
    try:
        response = await client.get(target)
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        raise FetchError("transport", f"Failed to fetch website: {exc}") from exc
    finally:
        if owns_client:
            await client.aclose()

    if not response.is_success:
        raise FetchError(
            "http_status",
            f"Failed to fetch: {response.status_code}",
            status_code=response.status_code,
        )

    return FetchResult(
        final_url=str(response.url),
        status_code=response.status_code,
        raw_html=response.text,
        origin=origin_of(response.url),
    )


async def _fetch_stylesheet(client: httpx.AsyncClient, url: str) -> str | None:
    """Return the body of one stylesheet, or ``None`` on any failure."""
    try:
        response = await asyncio.wait_for(
            client.get(url), timeout=settings.stylesheet_timeout
        )
    except (httpx.HTTPError, httpx.InvalidURL, ValueError, asyncio.TimeoutError) as exc:
        logger.warning("Skipping stylesheet %s: %s", url, exc)
        return None
    if not response.is_success:
        logger.warning("Skipping stylesheet %s: HTTP %s", url, response.status_code)
        return None
    return response.text


def _fetchable(url: str) -> bool:
    try:
        validate_url(url)
    except InvalidUrlError:
        logger.warning("Skipping stylesheet %s: invalid URL", url)
        return False
    return True


async def fetch_stylesheets(urls: list[str]) -> list[tuple[str, str]]:
    """Fetch up to ``settings.max_stylesheets`` stylesheets concurrently.

    Each fetch is bounded by ``settings.stylesheet_timeout``.  Failed fetches
    are dropped; the survivors are returned as ``(url, css_text)`` pairs in
    the order of *urls*.  Malformed URLs count towards the limit but are
    never requested.
    """
    selected = [u for u in urls[: settings.max_stylesheets] if _fetchable(u)]
    if not selected:
        return []

    async with httpx.AsyncClient(
        headers={"User-Agent": settings.user_agent, "Accept-Encoding": "identity"},
        timeout=settings.stylesheet_timeout,
        follow_redirects=True,
    ) as client:
        bodies = await asyncio.gather(*(_fetch_stylesheet(client, u) for u in selected))

    return [(u, body) for u, body in zip(selected, bodies) if body is not None]
