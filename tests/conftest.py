from __future__ import annotations

import asyncio
from typing import Callable

import pytest

from yhist.config import Settings
from yhist.yahoo.transport import Request, Response

CONSENT_PAGE = (
    "<html><body><form method=\"post\" action=\"/consent\">"
    '<input type="hidden" name="csrfToken" value="tok-123">'
    '<input type="hidden" name="brandBid" value="bid-456">'
    "</form></body></html>"
)
CSV_BODY = "Date,Open,High,Low,Close,Adj Close,Volume\n2024-01-02,187.15,188.44,183.89,185.64,185.40,82488700\n"

Handler = Callable[[Request], Response]


def make_response(request: Request, text: str, *, status: int = 200, final: Request | None = None) -> Response:
    return Response(request=request, final_request=final or request, status_code=status, text=text)


class FakeTransport:
    """Records every request and answers from a handler function."""

    def __init__(self, handler: Handler) -> None:
        self._handler = handler
        self.sent: list[Request] = []
        self.closed = False

    async def send(self, request: Request) -> Response:
        self.sent.append(request)
        # Yield like a real socket so concurrent fetches interleave.
        await asyncio.sleep(0)
        return self._handler(request)

    async def aclose(self) -> None:
        self.closed = True

    @property
    def paths(self) -> list[str]:
        return [r.path for r in self.sent]


def yahoo_handler(
    *,
    consent_wall: bool = True,
    consent_page: str = CONSENT_PAGE,
    challenge_status: int = 200,
    crumb: str = "crumb-abc",
    data_status: int = 200,
) -> Handler:
    """Simulated upstream: quote page, consent, crumb and download endpoints."""

    def handler(request: Request) -> Response:
        if request.path.startswith("/quote/"):
            if consent_wall:
                final = Request(
                    host="guce.oath.com",
                    path="/collectConsent",
                    query=(("sessionId", "sid-789"), ("lang", "sv-SE")),
                )
                return make_response(request, consent_page, status=challenge_status, final=final)
            return make_response(request, "<html>quote</html>", status=challenge_status)
        if request.path == "/consent":
            return make_response(request, "<html>thanks</html>")
        if request.path == "/v1/test/getcrumb":
            return make_response(request, crumb)
        if request.path.startswith("/v7/finance/download/"):
            return make_response(request, CSV_BODY, status=data_status)
        return make_response(request, "not found", status=404)

    return handler


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)
