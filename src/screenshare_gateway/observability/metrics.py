"""
Gateway Metrics
===============

Counters describing connection traffic. Updated only from the event loop
that runs the gateway, so no locking is needed.
"""


class GatewayMetrics:
    """Metrics for FrameGateway observability."""

    __slots__ = (
        "connections_accepted",
        "connections_closed",
        "peer_disconnects",
        "read_timeouts",
        "malformed_requests",
        "html_responses",
        "image_responses",
        "not_found_responses",
        "write_failures",
        "bytes_sent",
    )

    def __init__(self) -> None:
        self.connections_accepted: int = 0
        self.connections_closed: int = 0
        self.peer_disconnects: int = 0
        self.read_timeouts: int = 0
        self.malformed_requests: int = 0
        self.html_responses: int = 0
        self.image_responses: int = 0
        self.not_found_responses: int = 0
        self.write_failures: int = 0
        self.bytes_sent: int = 0

    @property
    def connections_open(self) -> int:
        return self.connections_accepted - self.connections_closed

    def to_dict(self) -> dict:
        """Export metrics as dict."""
        return {name: getattr(self, name) for name in self.__slots__}
