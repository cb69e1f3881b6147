"""Error taxonomy for the scrape pipeline.

Every failure surfaced to a client is one of these kinds. The API layer turns
them into JSON responses using ``status_code`` and ``kind``.
"""

from __future__ import annotations


class ScrapeError(Exception):
    """Base class for all pipeline errors."""

    kind = "InternalError"
    status_code = 500

    def __init__(self, message: str, *, detail: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail

    def to_payload(self) -> dict[str, str]:
        payload = {"error": self.kind, "message": self.message}
        if self.detail:
            payload["detail"] = self.detail
        return payload


class ValidationError(ScrapeError):
    """Missing or malformed request input. Raised before any browser work."""

    kind = "ValidationError"
    status_code = 400

    def to_payload(self) -> dict[str, str]:
        return {"error": self.message}


class SessionError(ScrapeError):
    """The browser process or context could not be started."""

    kind = "SessionError"


class NavigationError(ScrapeError):
    """The page could not be loaded (DNS, connection, bad URL, timeout)."""

    kind = "NavigationError"


class NavigationTimeoutError(NavigationError):
    """Navigation did not reach the readiness signal within its timeout."""


class ExtractionError(ScrapeError):
    """A DOM query, evaluation or screenshot failed on a loaded page."""

    kind = "ExtractionError"


class InternalError(ScrapeError):
    """Anything not covered by a more specific kind."""

    kind = "InternalError"
