"""Caller-facing Yahoo session and its per-symbol fetchers."""

from __future__ import annotations

import io
import logging

from yhist.base import DataFetcher, Resolution
from yhist.config import Settings, get_settings
from yhist.yahoo.factory import RequestFactory
from yhist.yahoo.handshake import HandshakeOrchestrator, HandshakeReport
from yhist.yahoo.state import SessionState
from yhist.yahoo.transport import Transport

logger = logging.getLogger(__name__)


class Fetcher(DataFetcher):
    """Historical CSV download for one symbol at one resolution."""

    def __init__(self, orchestrator: HandshakeOrchestrator, symbol: str, resolution: Resolution) -> None:
        self._orchestrator = orchestrator
        self._symbol = symbol
        self._resolution = resolution

    @property
    def symbol(self) -> str:
        return self._symbol

    @property
    def resolution(self) -> Resolution:
        return self._resolution

    async def get_stream_of_csv(self) -> io.StringIO:
        return await self._orchestrator.fetch(self._symbol, self._resolution)

    def __repr__(self) -> str:
        return f"Fetcher({self._symbol!r}, {self._resolution.name})"


class YahooSession:
    """One logical browsing session: a token store plus a cookie-keeping transport.

    Usage::

        async with YahooSession() as yahoo:
            csv_stream = await yahoo.new_fetcher("AAPL", Resolution.DAY).get_stream_of_csv()

    Every fetcher created here reuses the tokens the first one acquired.
    """

    def __init__(
        self,
        transport: Transport | None = None,
        *,
        settings: Settings | None = None,
        state: SessionState | None = None,
    ) -> None:
        settings = settings or get_settings()
        self._state = state if state is not None else SessionState()
        self._transport = transport or Transport(settings=settings)
        self._orchestrator = HandshakeOrchestrator(
            self._state,
            self._transport,
            RequestFactory(settings),
            settings=settings,
        )

    @property
    def state(self) -> SessionState:
        return self._state

    def new_fetcher(self, symbol: str, resolution: Resolution = Resolution.DAY) -> Fetcher:
        return Fetcher(self._orchestrator, symbol, resolution)

    async def warm_up(self, symbol: str) -> HandshakeReport:
        """Run the handshake once so fetchers started together find it done."""
        return await self._orchestrator.run_handshake(symbol)

    async def aclose(self) -> None:
        await self._transport.aclose()

    async def __aenter__(self) -> YahooSession:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.aclose()
