from __future__ import annotations

import time

import pytest

from yhist.base import Resolution
from yhist.yahoo.factory import SECONDS_PER_YEAR, RequestFactory, interval_for, lookback_window
from yhist.yahoo.state import SessionState
from yhist.yahoo.transport import Method


@pytest.mark.parametrize(
    ("resolution", "expected"),
    [
        (Resolution.DAY, "1d"),
        (Resolution.WEEK, "1wk"),
        (Resolution.MONTH, "1mo"),
        (None, "1d"),
        ("quarter", "1d"),
    ],
)
def test_interval_mapping(resolution, expected) -> None:  # noqa: ANN001
    assert interval_for(resolution) == expected


def test_lookback_window_is_exactly_thirty_years() -> None:
    period1, period2 = lookback_window(30, now=1_700_000_000)
    assert period2 == 1_700_000_000
    assert period2 - period1 == 30 * SECONDS_PER_YEAR == 946_708_560


def test_challenge_request_targets_quote_page(settings) -> None:  # noqa: ANN001
    request = RequestFactory(settings).challenge("AAPL")
    assert request.method is Method.GET
    assert str(request) == "https://finance.yahoo.com/quote/AAPL"


def test_crumb_request_has_no_parameters(settings) -> None:  # noqa: ANN001
    request = RequestFactory(settings).crumb()
    assert request.url == "https://query1.finance.yahoo.com/v1/test/getcrumb"
    assert request.query == ()
    assert request.form == ()


def test_data_request_query(settings) -> None:  # noqa: ANN001
    session = SessionState({"crumb": "c/rumb"})
    before = int(time.time())
    request = RequestFactory(settings).data(session, "MSFT", Resolution.WEEK)
    after = int(time.time())

    assert request.host == "query1.finance.yahoo.com"
    assert request.path == "/v7/finance/download/MSFT"
    assert [k for k, _ in request.query] == ["interval", "events", "period1", "period2", "crumb"]
    assert request.query_value("interval") == "1wk"
    assert request.query_value("events") == "history"
    assert request.query_value("crumb") == "c/rumb"

    period1 = int(request.query_value("period1"))
    period2 = int(request.query_value("period2"))
    assert before <= period2 <= after
    assert period2 - period1 == 30 * SECONDS_PER_YEAR


def test_data_request_sends_empty_crumb_when_unknown(settings) -> None:  # noqa: ANN001
    request = RequestFactory(settings).data(SessionState(), "AAPL", Resolution.DAY)
    assert request.query_value("crumb") == ""


def test_consent_request_reproduces_form_contract(settings) -> None:  # noqa: ANN001
    factory = RequestFactory(settings)
    session = SessionState({"sessionId": "sid-1", "csrfToken": "tok-1", "brandBid": "bid-1"})
    challenge = factory.challenge("AAPL")

    request = factory.consent(session, challenge)

    assert request.method is Method.POST
    assert request.url == "https://guce.oath.com/consent"
    assert list(request.form) == [
        ("country", "SE"),
        ("ybarNamespace", "YAHOO"),
        ("previousStep", ""),
        ("tosId", "eu"),
        ("jurisdiction", ""),
        ("originalDoneUrl", "https://finance.yahoo.com/quote/AAPL"),
        ("brandBid", "bid-1"),
        ("sessionId", "sid-1"),
        ("agree", "agree"),
        ("locale", "sv-SE"),
        ("isSDK", "false"),
        ("csrfToken", "tok-1"),
        ("inline", "false"),
        ("namespace", "yahoo"),
        ("consentCollectionStep", "EU_SINGLEPAGE"),
        ("doneUrl", "https://guce.yahoo.com/copyConsent?sessionId=sid-1&inline=false&lang=sv-SE"),
        ("startStep", "EU_SINGLEPAGE"),
        ("userType", "NON_REG"),
    ]


def test_consent_request_uses_configured_locale(settings) -> None:  # noqa: ANN001
    settings = settings.model_copy(update={"consent_country": "DE", "consent_locale": "de-DE"})
    factory = RequestFactory(settings)
    request = factory.consent(SessionState({"sessionId": "s"}), factory.challenge("SAP"))
    form = dict(request.form)
    assert form["country"] == "DE"
    assert form["locale"] == "de-DE"
    assert form["doneUrl"].endswith("&lang=de-DE")
    assert form["csrfToken"] == ""


def test_interval_for_unhashable_value_falls_back_to_daily() -> None:
    assert interval_for(["x"]) == "1d"
