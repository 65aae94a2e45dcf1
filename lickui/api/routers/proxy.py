"""Website proxy endpoint.

Routes
------
GET     /api/proxy?url=https://...   Fetch + normalise → {html, css, baseUrl, title, success, error?}
OPTIONS /api/proxy                   CORS pre-flight (no body)

Note: this router is mounted with prefix ``/api/proxy`` in ``app.py``.
"""

from __future__ import annotations

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse, Response

from lickui import proxy

router = APIRouter()


@router.get("")
async def proxy_endpoint(url: str | None = Query(default=None)) -> JSONResponse:
    """Return the normalised page for *url*.

    The status mirrors the outcome: 400 for bad input, the upstream status
    when the remote site refused, 500 for anything else that went wrong.
    """
    result = await proxy.handle(url)
    return JSONResponse(
        content=result.page.to_wire(),
        status_code=result.status_code,
        headers=result.headers,
    )


@router.options("")
def proxy_preflight() -> Response:
    """Advertise the allowed method and headers to cross-origin callers."""
    return Response(status_code=200, headers=proxy.preflight_headers())
