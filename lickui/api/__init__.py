"""FastAPI HTTP layer package.

Public re-export so callers can write::

    from lickui.api import app

    uvicorn lickui.api:app --reload
"""

from lickui.api.app import app

__all__ = ["app"]
