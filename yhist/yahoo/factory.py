"""Builders for the four request shapes of the Yahoo handshake.

Every builder is a pure function of the session tokens and caller inputs;
nothing here performs I/O or mutates the session.
"""

from __future__ import annotations

from yhist.base import Resolution
from yhist.config import Settings, get_settings
from yhist.utils import epoch_seconds
from yhist.yahoo.state import BRAND_BID, CRUMB, CSRF_TOKEN, SESSION_ID, SessionState
from yhist.yahoo.transport import Method, Request

# Mean Gregorian year (365.2425 days).
SECONDS_PER_YEAR = 31_556_952

_INTERVALS: dict[Resolution, str] = {
    Resolution.DAY: "1d",
    Resolution.WEEK: "1wk",
    Resolution.MONTH: "1mo",
}
_DEFAULT_INTERVAL = "1d"


def interval_for(resolution: object) -> str:
    """Map a resolution to Yahoo's ``interval`` value, defaulting to daily."""
    try:
        return _INTERVALS.get(resolution, _DEFAULT_INTERVAL)  # type: ignore[call-overload]
    except TypeError:
        return _DEFAULT_INTERVAL


def lookback_window(years: int, now: int | None = None) -> tuple[int, int]:
    """Return ``(period1, period2)`` epoch seconds spanning ``years`` up to now."""
    if now is None:
        now = epoch_seconds()
    return now - years * SECONDS_PER_YEAR, now


class RequestFactory:
    """Builds challenge, consent, crumb and data requests."""

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or get_settings()

    def challenge(self, symbol: str) -> Request:
        """Quote page request; reveals the session id and any consent wall."""
        return Request(host=self._settings.finance_host, path=f"/quote/{symbol}")

    def consent(self, session: SessionState, challenge: Request) -> Request:
        """Consent form POST accepting the regional terms.

        The literal field values are what the consent service expects from its
        own form and must go out unchanged.
        """
        s = self._settings
        session_id = session.get(SESSION_ID) or ""
        done_url = (
            f"https://guce.yahoo.com/copyConsent?sessionId={session_id}"
            f"&inline=false&lang={s.consent_locale}"
        )

        fields = (
            ("country", s.consent_country),
            ("ybarNamespace", "YAHOO"),
            ("previousStep", ""),
            ("tosId", "eu"),
            ("jurisdiction", ""),
            ("originalDoneUrl", str(challenge)),
            (BRAND_BID, session.get(BRAND_BID) or ""),
            (SESSION_ID, session_id),
            ("agree", "agree"),
            ("locale", s.consent_locale),
            ("isSDK", "false"),
            (CSRF_TOKEN, session.get(CSRF_TOKEN) or ""),
            ("inline", "false"),
            ("namespace", "yahoo"),
            ("consentCollectionStep", "EU_SINGLEPAGE"),
            ("doneUrl", done_url),
            ("startStep", "EU_SINGLEPAGE"),
            ("userType", "NON_REG"),
        )
        request = Request(host=s.consent_host, path="/consent", method=Method.POST)
        for name, value in fields:
            request = request.with_form(name, value)
        return request

    def crumb(self) -> Request:
        return Request(host=self._settings.query_host, path="/v1/test/getcrumb")

    def data(
        self,
        session: SessionState,
        symbol: str,
        resolution: object,
        now: int | None = None,
    ) -> Request:
        """CSV download request for the full lookback window.

        The current crumb is sent as-is, even when empty.
        """
        period1, period2 = lookback_window(self._settings.lookback_years, now)
        return (
            Request(host=self._settings.query_host, path=f"/v7/finance/download/{symbol}")
            .with_query("interval", interval_for(resolution))
            .with_query("events", "history")
            .with_query("period1", str(period1))
            .with_query("period2", str(period2))
            .with_query(CRUMB, session.get(CRUMB) or "")
        )
