"""Token extraction from handshake responses.

The consent page is scraped with literal markers around the hidden form
inputs; no HTML parser is involved because the markup contract is the
exact byte sequence the consent service emits.
"""

from __future__ import annotations

import logging

from yhist.errors import MissingTokenError, ScrapeError
from yhist.yahoo.state import BRAND_BID, CRUMB, CSRF_TOKEN, SESSION_ID, SessionState
from yhist.yahoo.transport import Request, Response

logger = logging.getLogger(__name__)

END_MARKER = '">'
CSRF_TOKEN_MARKER = '<input type="hidden" name="csrfToken" value="'
BRAND_BID_MARKER = '<input type="hidden" name="brandBid" value="'


def extract_between(body: str, begin_marker: str, end_marker: str = END_MARKER) -> str:
    """Return the text between ``begin_marker`` and the next ``end_marker``.

    Raises :class:`ScrapeError` if either marker is missing.
    """
    begin = body.find(begin_marker)
    if begin < 0:
        raise ScrapeError(begin_marker)
    begin += len(begin_marker)
    end = body.find(end_marker, begin)
    if end < 0:
        raise ScrapeError(end_marker, f"closing marker {end_marker!r} not found after {begin_marker!r}")
    return body[begin:end]


def scrape_challenge_response(
    session: SessionState,
    challenge: Request,
    response: Response,
) -> tuple[bool, list[Exception]]:
    """Update ``session`` from the challenge response.

    ``sessionId`` always comes from the query of the request actually
    serviced. When that request differs from ``challenge`` the caller was
    redirected to a consent wall, and ``csrfToken``/``brandBid`` are scraped
    from the body.

    Returns ``(consent_required, anomalies)``. Missing markers are raised as
    :class:`ScrapeError`, not collected.
    """
    anomalies: list[Exception] = []

    session_id = response.final_request.query_value(SESSION_ID) or ""
    session.set(SESSION_ID, session_id)
    if not session_id:
        anomalies.append(MissingTokenError(SESSION_ID))

    if response.final_request == challenge:
        return False, anomalies

    logger.info("[handshake] consent wall detected at %s", response.final_request.base_url)
    body = response.text
    session.set(CSRF_TOKEN, extract_between(body, CSRF_TOKEN_MARKER))
    session.set(BRAND_BID, extract_between(body, BRAND_BID_MARKER))
    return True, anomalies


def scrape_crumb_response(session: SessionState, response: Response) -> list[Exception]:
    """Store the whole crumb response body, untouched, as the crumb."""
    session.set(CRUMB, response.text)
    if not response.text:
        return [MissingTokenError(CRUMB)]
    return []
