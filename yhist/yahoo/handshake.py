"""Handshake state machine and orchestrator.

The orchestrator walks a session from whatever it already knows to a state
where a data request can be issued:

    NO_SESSION ─ challenge ─▶ SESSION_NO_CONSENT_CHECKED ─ scrape ─┬▶ CONSENT_PENDING ─ consent ─┐
                                                                   └───────────────────────────┴▶ SESSION_READY
    SESSION_READY ─┬─ crumb known ──────────────────▶ READY
                   └─▶ CRUMB_PENDING ─ crumb request ─▶ READY

Every step is best effort. Failures along the way are collected as anomalies
and logged; only the final data request can fail a fetch. Fetchers sharing a
session may each acquire a crumb if they find it missing at the same moment;
the last scrape wins and nothing is locked.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field
from enum import Enum

from yhist.config import Settings, get_settings
from yhist.errors import ScrapeError, TransportError
from yhist.yahoo.factory import RequestFactory
from yhist.yahoo.scraper import scrape_challenge_response, scrape_crumb_response
from yhist.yahoo.state import CRUMB, SESSION_ID, SessionState
from yhist.yahoo.transport import Request, Response, Transport

logger = logging.getLogger(__name__)


class HandshakeState(Enum):
    NO_SESSION = "no_session"
    SESSION_NO_CONSENT_CHECKED = "session_no_consent_checked"
    CONSENT_PENDING = "consent_pending"
    SESSION_READY = "session_ready"
    CRUMB_PENDING = "crumb_pending"
    READY = "ready"


@dataclass
class StepOutcome:
    """Result of one handshake step: anomalies plus what the next step needs."""

    anomalies: list[Exception] = field(default_factory=list)
    response: Response | None = None
    consent_required: bool = False
    crumb_present: bool = False


@dataclass
class HandshakeReport:
    symbol: str
    states: list[HandshakeState] = field(default_factory=list)
    requests: list[Request] = field(default_factory=list)
    anomalies: list[Exception] = field(default_factory=list)

    @property
    def clean(self) -> bool:
        return not self.anomalies


def initial_state(session: SessionState) -> HandshakeState:
    if not session.has(SESSION_ID):
        return HandshakeState.NO_SESSION
    return HandshakeState.SESSION_READY


def next_state(state: HandshakeState, outcome: StepOutcome) -> HandshakeState:
    """Pure transition function of the handshake."""
    if state is HandshakeState.NO_SESSION:
        return HandshakeState.SESSION_NO_CONSENT_CHECKED
    if state is HandshakeState.SESSION_NO_CONSENT_CHECKED:
        if outcome.consent_required:
            return HandshakeState.CONSENT_PENDING
        return HandshakeState.SESSION_READY
    if state is HandshakeState.CONSENT_PENDING:
        return HandshakeState.SESSION_READY
    if state is HandshakeState.SESSION_READY:
        if outcome.crumb_present:
            return HandshakeState.READY
        return HandshakeState.CRUMB_PENDING
    if state is HandshakeState.CRUMB_PENDING:
        return HandshakeState.READY
    raise ValueError(f"no transition out of {state.name}")


class HandshakeOrchestrator:
    """Drives challenge → consent → crumb → data against one shared session."""

    def __init__(
        self,
        session: SessionState,
        transport: Transport,
        factory: RequestFactory | None = None,
        *,
        settings: Settings | None = None,
    ) -> None:
        settings = settings or get_settings()
        self._session = session
        self._transport = transport
        self._factory = factory or RequestFactory(settings)
        self._strict_scrape = settings.strict_scrape

    @property
    def session(self) -> SessionState:
        return self._session

    async def fetch(self, symbol: str, resolution: object) -> io.StringIO:
        """Complete the handshake if needed and return the CSV body unread.

        Raises :class:`TransportError` if the data request itself fails.
        """
        await self.run_handshake(symbol)

        request = self._factory.data(self._session, symbol, resolution)
        response = await self._transport.send(request)
        if not response.ok:
            raise TransportError(
                f"data request for {symbol} returned HTTP {response.status_code}",
                request=request,
                status_code=response.status_code,
            )
        return response.stream()

    async def run_handshake(self, symbol: str) -> HandshakeReport:
        """Bring the session to READY, issuing only the steps still missing."""
        report = HandshakeReport(symbol=symbol)
        challenge = self._factory.challenge(symbol)

        state = initial_state(self._session)
        outcome = StepOutcome()
        while state is not HandshakeState.READY:
            report.states.append(state)
            outcome = await self._step(state, challenge, outcome, report)
            for anomaly in outcome.anomalies:
                logger.warning(
                    "[handshake] %s %s: %s (%s)",
                    symbol, state.value, anomaly, type(anomaly).__name__,
                )
            report.anomalies.extend(outcome.anomalies)
            state = next_state(state, outcome)
        report.states.append(state)

        if report.requests:
            logger.info(
                "[handshake] %s ready after %d requests, %d anomalies",
                symbol, len(report.requests), len(report.anomalies),
            )
        return report

    # ── steps ──────────────────────────────────────────────────────────

    async def _step(
        self,
        state: HandshakeState,
        challenge: Request,
        previous: StepOutcome,
        report: HandshakeReport,
    ) -> StepOutcome:
        if state is HandshakeState.NO_SESSION:
            return await self._issue("challenge", challenge, report)

        if state is HandshakeState.SESSION_NO_CONSENT_CHECKED:
            return self._scrape_challenge(challenge, previous)

        if state is HandshakeState.CONSENT_PENDING:
            consent = self._factory.consent(self._session, challenge)
            return await self._issue("consent", consent, report)

        if state is HandshakeState.SESSION_READY:
            return StepOutcome(crumb_present=self._session.has(CRUMB))

        if state is HandshakeState.CRUMB_PENDING:
            outcome = await self._issue("crumb", self._factory.crumb(), report)
            if outcome.response is not None:
                outcome.anomalies.extend(scrape_crumb_response(self._session, outcome.response))
            return outcome

        raise ValueError(f"nothing to do in {state.name}")

    def _scrape_challenge(self, challenge: Request, previous: StepOutcome) -> StepOutcome:
        response = previous.response
        if response is None:
            # No response at all: nothing to scrape, carry on without consent.
            return StepOutcome()

        try:
            consent_required, anomalies = scrape_challenge_response(self._session, challenge, response)
        except ScrapeError as exc:
            if self._strict_scrape:
                raise
            return StepOutcome(anomalies=[exc], consent_required=response.redirected)
        return StepOutcome(anomalies=anomalies, consent_required=consent_required)

    async def _issue(self, step: str, request: Request, report: HandshakeReport) -> StepOutcome:
        report.requests.append(request)
        try:
            response = await self._transport.send(request)
        except TransportError as exc:
            return StepOutcome(anomalies=[exc])

        if not response.ok:
            problem = TransportError(
                f"{step} request returned HTTP {response.status_code}; "
                f"sent {request}, serviced {response.final_request}",
                request=request,
                status_code=response.status_code,
            )
            return StepOutcome(anomalies=[problem], response=response)
        return StepOutcome(response=response)
