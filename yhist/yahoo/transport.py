"""Minimal request/response contract over ``httpx.AsyncClient``.

The handshake only needs four things from HTTP: build a request, send it
following redirects, read the whole body, and learn which request was
actually serviced after the redirects.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass, replace
from enum import Enum
from urllib.parse import urlencode

import httpx

from yhist.config import Settings, get_settings
from yhist.errors import TransportError

logger = logging.getLogger(__name__)


class Method(str, Enum):
    GET = "GET"
    POST = "POST"


@dataclass(frozen=True)
class Request:
    """Immutable description of one HTTPS request."""

    host: str
    path: str = "/"
    method: Method = Method.GET
    query: tuple[tuple[str, str], ...] = ()
    form: tuple[tuple[str, str], ...] = ()

    def with_query(self, name: str, value: str | None) -> Request:
        return replace(self, query=self.query + ((name, value or ""),))

    def with_form(self, name: str, value: str | None) -> Request:
        if self.method is not Method.POST:
            raise ValueError("form parameters require a POST request")
        return replace(self, form=self.form + ((name, value or ""),))

    def query_value(self, name: str) -> str | None:
        for key, value in self.query:
            if key == name:
                return value
        return None

    @property
    def base_url(self) -> str:
        return f"https://{self.host}{self.path}"

    @property
    def url(self) -> str:
        """Canonical string form: scheme, host, path and encoded query."""
        if not self.query:
            return self.base_url
        return f"{self.base_url}?{urlencode(self.query)}"

    def __str__(self) -> str:
        return self.url

    @classmethod
    def from_httpx(cls, request: httpx.Request) -> Request:
        url = request.url
        return cls(
            host=url.host,
            path=url.path or "/",
            method=Method(request.method.upper()),
            query=tuple(url.params.multi_items()),
        )


@dataclass(frozen=True)
class Response:
    """Fully read response plus the request that was actually serviced."""

    request: Request
    final_request: Request
    status_code: int
    text: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def redirected(self) -> bool:
        return self.final_request != self.request

    def stream(self) -> io.StringIO:
        return io.StringIO(self.text)


class Transport:
    """Sends :class:`Request` objects through one shared ``httpx.AsyncClient``.

    The client keeps the cookie jar, so every request sent through the same
    transport belongs to the same browsing session.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        settings: Settings | None = None,
    ) -> None:
        settings = settings or get_settings()
        self._client = client or httpx.AsyncClient(
            headers={"User-Agent": settings.user_agent},
            timeout=settings.request_timeout,
            follow_redirects=True,
        )

    async def send(self, request: Request) -> Response:
        """Perform ``request``, following redirects, and read the whole body.

        Raises :class:`TransportError` when no response could be obtained.
        A non-ok status is *not* raised here; callers inspect ``Response.ok``.
        """
        logger.debug("%s %s", request.method.value, request)
        try:
            resp = await self._client.request(
                request.method.value,
                request.base_url,
                params=list(request.query) or None,
                data=dict(request.form) or None,
                follow_redirects=True,
            )
        except httpx.HTTPError as exc:
            raise TransportError(
                f"{request.method.value} {request} failed: {exc}",
                request=request,
            ) from exc

        final_request = request
        if resp.history:
            final_request = Request.from_httpx(resp.request)

        return Response(
            request=request,
            final_request=final_request,
            status_code=resp.status_code,
            text=resp.text,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> Transport:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.aclose()
