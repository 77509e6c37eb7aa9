"""yhist — historical price downloads behind Yahoo's consent and crumb handshake."""

__version__ = "0.1.0"
