"""
HTTP Value Models
=================

Minimal request and response shapes used by the gateway.

Only the request line is ever parsed. Responses are always framed with an
exact Content-Length and ``Connection: close``.
"""

from dataclasses import dataclass, field
from typing import Tuple


@dataclass(frozen=True, slots=True)
class RequestLine:
    """
    Parsed first line of an HTTP request.

    Attributes:
        method: Request method token (not validated)
        path: Request target as sent, query string included
    """

    method: str
    path: str

    @property
    def route(self) -> str:
        """Path without its query string."""
        return self.path.split("?", 1)[0]


_REASONS = {
    200: "OK",
    404: "Not Found",
}


@dataclass(frozen=True, slots=True)
class HttpResponse:
    """
    Fully materialized response.

    Attributes:
        status: HTTP status code
        content_type: Value of the Content-Type header
        body: Response body bytes
        headers: Extra headers emitted after Content-Type
    """

    status: int
    content_type: str
    body: bytes
    headers: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)

    @property
    def reason(self) -> str:
        return _REASONS.get(self.status, "Unknown")

    def encode(self) -> bytes:
        """Serialize status line, headers and body."""
        lines = [
            f"HTTP/1.1 {self.status} {self.reason}",
            f"Content-Type: {self.content_type}",
            f"Content-Length: {len(self.body)}",
        ]
        lines.extend(f"{name}: {value}" for name, value in self.headers)
        lines.append("Connection: close")
        head = ("\r\n".join(lines) + "\r\n\r\n").encode("ascii")
        return head + self.body
