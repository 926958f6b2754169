"""
Data Models
===========

Value types for the screenshare gateway.

Models:
    State:
        - ListenerState: STOPPED / STARTING / RUNNING / FAILED
        - ConnectionState: ACCEPTED / READING / PARSED / RESPONDING / CLOSED

    HTTP:
        - RequestLine: Parsed method + path
        - HttpResponse: Status, content type, body, extra headers
"""

from screenshare_gateway.models.state import ConnectionState, ListenerState
from screenshare_gateway.models.http import HttpResponse, RequestLine

__all__ = [
    # State
    "ListenerState",
    "ConnectionState",
    # HTTP
    "RequestLine",
    "HttpResponse",
]
