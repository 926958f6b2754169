"""
Request Parser
==============

Extracts method and path from raw request bytes.

Deliberately minimal: the gateway routes on the path alone, so headers and
bodies are never parsed. Malformed input yields None and never raises.
"""

from typing import Optional

from screenshare_gateway.models.http import RequestLine


REQUEST_LINE_TERMINATOR = b"\r\n"
HEADER_TERMINATOR = b"\r\n\r\n"


def has_request_line(raw: bytes) -> bool:
    """Whether a complete request line has been received."""
    return REQUEST_LINE_TERMINATOR in raw


def parse_request(raw: bytes) -> Optional[RequestLine]:
    """
    Parse the request line of a raw HTTP request.

    Args:
        raw: Bytes received on one connection (already size-bounded)

    Returns:
        RequestLine, or None if the input is empty or has no path token.
    """
    if not raw:
        return None

    text = raw.decode("utf-8", errors="replace")
    first_line = text.split("\r\n", 1)[0]
    parts = [part for part in first_line.split(" ") if part]

    if len(parts) < 2:
        return None

    return RequestLine(method=parts[0], path=parts[1])
