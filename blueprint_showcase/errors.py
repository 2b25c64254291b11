"""Exception hierarchy shared by the fetchers, caches and render pipeline."""

from __future__ import annotations

from .config import RateLimitInfo


class ShowcaseError(RuntimeError):
    """Base class for errors raised by this package."""


class TransportError(ShowcaseError):
    """Raised when a remote call fails or answers with a non-2xx status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RateLimitError(TransportError):
    """GitHub refused the request because the rate limit budget is spent."""

    def __init__(self, message: str, rate_limit: RateLimitInfo | None = None) -> None:
        super().__init__(message, status_code=403)
        self.rate_limit = rate_limit


class StorageError(ShowcaseError):
    """Local storage could not be read or written. Never surfaced to the page."""


class ShapeError(ShowcaseError):
    """A cached or fetched payload does not have the expected structure."""


__all__ = ["ShowcaseError", "TransportError", "RateLimitError", "StorageError", "ShapeError"]
