"""Proxy service: fetch + normalise behind one request/response contract.

``handle`` never raises.  Every failure is folded into a
:class:`ProxyResponse` carrying the status code and headers the HTTP layer
should send:

    400  missing / malformed URL
    4xx/5xx  upstream status when the page fetch returned non-2xx
    500  transport failure, normalisation anomaly or anything unexpected
    200  success (with short public caching and open CORS)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from urllib.parse import urlparse

from lickui.config import settings
from lickui.errors import FetchError, InvalidInputError, NormalizationError
from lickui.scraper.fetcher import fetch_url, validate_url
from lickui.scraper.models import NormalizedPage
from lickui.scraper.normalizer import normalize

logger = logging.getLogger(__name__)

URL_REQUIRED = "URL parameter is required"
GENERIC_FAILURE = "Failed to fetch website"


@dataclass(frozen=True)
class ProxyResponse:
    page: NormalizedPage
    status_code: int = 200
    headers: dict[str, str] = field(default_factory=dict)


def success_headers() -> dict[str, str]:
    return {
        "Cache-Control": f"public, max-age={settings.cache_max_age}",
        "Access-Control-Allow-Origin": "*",
    }


def preflight_headers() -> dict[str, str]:
    """Headers for the no-body OPTIONS handshake."""
    return {
        "Access-Control-Allow-Origin": "*",
        "Access-Control-Allow-Methods": "GET, OPTIONS",
        "Access-Control-Allow-Headers": "*",
    }


async def handle(target_url: str | None) -> ProxyResponse:
    """Fetch *target_url* and return its normalised page."""
    if not target_url or not target_url.strip():
        return ProxyResponse(NormalizedPage.failure(URL_REQUIRED), status_code=400)

    try:
        url = validate_url(target_url)
        fetched = await fetch_url(url)
        markup = await normalize(
            fetched.raw_html,
            fetched.origin,
            urlparse(url).scheme + ":",
        )
    except InvalidInputError as exc:
        return ProxyResponse(NormalizedPage.failure(str(exc)), status_code=400)
    except FetchError as exc:
        status = exc.status_code if exc.status_code is not None else 500
        logger.warning("Upstream fetch of %s failed: %s", target_url, exc)
        return ProxyResponse(NormalizedPage.failure(str(exc)), status_code=status)
    except NormalizationError:
        logger.exception("Normalisation failed for %s", target_url)
        return ProxyResponse(NormalizedPage.failure(GENERIC_FAILURE), status_code=500)
    except Exception:  # noqa: BLE001
        logger.exception("Proxy error for %s", target_url)
        return ProxyResponse(NormalizedPage.failure(GENERIC_FAILURE), status_code=500)

    page = NormalizedPage(
        body_html=markup.body_html,
        css=markup.css,
        base_url=fetched.origin,
        title=markup.title,
        success=True,
    )
    return ProxyResponse(page, status_code=200, headers=success_headers())
