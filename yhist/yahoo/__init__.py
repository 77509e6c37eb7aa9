"""Yahoo Finance historical downloads behind the consent/crumb handshake."""

from .handshake import HandshakeOrchestrator, HandshakeReport, HandshakeState
from .session import Fetcher, YahooSession
from .state import SessionState

__all__ = [
    "Fetcher",
    "HandshakeOrchestrator",
    "HandshakeReport",
    "HandshakeState",
    "SessionState",
    "YahooSession",
]
