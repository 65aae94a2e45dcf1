"""FastAPI application factory.

Lifespan
--------
On startup the app creates an in-process :class:`SessionStore` (shared
across requests via ``request.app.state.sessions``).  The proxy endpoint
itself keeps no state between requests.

Routers
-------
All endpoint groups are mounted under their respective path prefix:

    /api/proxy   fetch + normalise a remote page
    /sessions    preview sessions: render, select, apply instructions, chat
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from lickui import __version__
from lickui.config import configure_logging
from lickui.session import SessionStore

from lickui.api.routers import proxy as proxy_router
from lickui.api.routers import sessions as sessions_router


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create the session registry on startup and drop it on shutdown."""
    app.state.sessions = SessionStore()
    try:
        yield
    finally:
        app.state.sessions = SessionStore()


def create_app() -> FastAPI:
    """Return a fully-configured FastAPI application instance."""
    configure_logging()
    app = FastAPI(
        title="LickUI API",
        description=(
            "Proxy any website into a self-contained HTML + CSS pair, render it "
            "in a preview session, and restyle it with structured or "
            "natural-language instructions."
        ),
        version=__version__,
        lifespan=lifespan,
    )

    # Any front-end origin may consume the proxy.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(proxy_router.router, prefix="/api/proxy", tags=["proxy"])
    app.include_router(sessions_router.router, prefix="/sessions", tags=["sessions"])

    return app


# Module-level instance used by uvicorn:
#   uvicorn lickui.api.app:app --reload
app = create_app()
