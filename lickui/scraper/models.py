"""Data models for the proxy pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class FetchResult:
    """The raw HTTP response for the primary page fetch."""

    final_url: str
    status_code: int
    raw_html: str
    origin: str


@dataclass
class NormalizedMarkup:
    """Output of the Markup Normalizer before it is wrapped for the wire."""

    body_html: str
    css: str
    title: str


@dataclass(frozen=True)
class NormalizedPage:
    """The wire contract returned by the proxy service."""

    body_html: str = ""
    css: str = ""
    base_url: str = ""
    title: str = ""
    success: bool = False
    error: str | None = None

    def to_wire(self) -> dict[str, Any]:
        """Serialise to the JSON body shape (``error`` omitted when absent)."""
        payload: dict[str, Any] = {
            "html": self.body_html,
            "css": self.css,
            "baseUrl": self.base_url,
            "title": self.title,
            "success": self.success,
        }
        if self.error is not None:
            payload["error"] = self.error
        return payload

    @classmethod
    def failure(cls, error: str) -> NormalizedPage:
        return cls(success=False, error=error)
