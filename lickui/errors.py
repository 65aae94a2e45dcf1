"""Exception hierarchy shared by the proxy pipeline, renderer and engine."""

from __future__ import annotations


class LickUIError(Exception):
    """Base class for every error raised by this package."""


class InvalidInputError(LickUIError):
    """The caller supplied a missing or malformed URL or prompt name."""


class FetchError(LickUIError):
    """The primary page fetch failed.

    ``kind`` is one of ``"invalid_url"``, ``"http_status"`` or ``"transport"``.
    ``status_code`` is only set for ``"http_status"``.
    """

    def __init__(self, kind: str, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.kind = kind
        self.status_code = status_code


class InvalidUrlError(FetchError, InvalidInputError):
    """Raised before any network call when the target URL is not absolute http(s)."""

    def __init__(self, url: str) -> None:
        super().__init__("invalid_url", f"Invalid URL: {url}")
        self.url = url


class NormalizationError(LickUIError):
    """The fetched markup could not be decoded or parsed at all."""


class InstructionError(LickUIError):
    """One mutation instruction could not be applied.

    Only ever raised inside the engine; it is turned into a failed outcome
    and never escapes a batch.
    """


class SessionNotFoundError(LickUIError):
    """No preview session exists with the requested id."""


class NoPageLoadedError(LickUIError):
    """The session has no rendered page to operate on yet."""
