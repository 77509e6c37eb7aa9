"""Exception hierarchy for the Yahoo handshake."""

from __future__ import annotations


class HandshakeError(Exception):
    """Base class for everything the handshake can report."""


class TransportError(HandshakeError):
    """Non-ok HTTP status or network failure on a request.

    ``status_code`` is ``None`` when no response was received at all.
    """

    def __init__(self, message: str, *, request: object = None, status_code: int | None = None) -> None:
        super().__init__(message)
        self.request = request
        self.status_code = status_code


class ScrapeError(HandshakeError):
    """An expected marker was not found in a response body."""

    def __init__(self, marker: str, message: str | None = None) -> None:
        super().__init__(message or f"marker not found: {marker!r}")
        self.marker = marker


class MissingTokenError(HandshakeError):
    """A session parameter is still empty after the step meant to set it."""

    def __init__(self, name: str) -> None:
        super().__init__(f"session parameter {name!r} missing after scrape")
        self.name = name
