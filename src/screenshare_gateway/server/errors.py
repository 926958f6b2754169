"""
Gateway Errors
==============

Only listener bind failures are surfaced to the caller. Per-connection
failures are contained inside the connection handler.
"""


class GatewayError(Exception):
    """Base class for gateway errors."""
    pass


class GatewayBindError(GatewayError):
    """Raised when the listening socket cannot be bound."""

    def __init__(self, host: str, port: int, reason: str) -> None:
        self.host = host
        self.port = port
        self.reason = reason
        super().__init__(f"Cannot bind {host}:{port}: {reason}")
