"""Session-scoped token store shared by every fetch of one browsing session."""

from __future__ import annotations

SESSION_ID = "sessionId"
CSRF_TOKEN = "csrfToken"
BRAND_BID = "brandBid"
CRUMB = "crumb"


class SessionState:
    """Mutable name -> value mapping of recovered handshake tokens.

    Values are never removed during the session's lifetime. Access is not
    serialized: concurrent fetchers writing the same name get last-writer-wins.
    """

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._params: dict[str, str] = dict(initial or {})

    def get(self, name: str) -> str | None:
        return self._params.get(name)

    def set(self, name: str, value: str) -> None:
        self._params[name] = value

    def has(self, name: str) -> bool:
        """True when ``name`` is present and non-empty."""
        return bool(self._params.get(name))

    def snapshot(self) -> dict[str, str]:
        return dict(self._params)

    def __contains__(self, name: object) -> bool:
        return name in self._params

    def __repr__(self) -> str:
        return f"SessionState({sorted(self._params)})"
