"""
Server Module
=============

Minimal HTTP/1.1 gateway serving the latest frame.

This module provides:
    - parse_request: Request-line parser (never raises)
    - ResponseRouter: image / viewer page / 404 routing
    - render_viewer_page: Polling HTML viewer
    - ConnectionHandler: One request per accepted socket
    - FrameGateway: Listener lifecycle (asyncio)
    - ThreadedGateway: Blocking wrapper running the gateway on a thread

Example:
    from screenshare_gateway.frames import FrameCache
    from screenshare_gateway.server import FrameGateway

    cache = FrameCache()
    async with FrameGateway(cache, port=8000, browser_fps=5):
        ...
"""

from screenshare_gateway.server.errors import GatewayBindError, GatewayError
from screenshare_gateway.server.request import parse_request
from screenshare_gateway.server.viewer_page import (
    DEFAULT_IMAGE_ROUTE,
    compute_interval_ms,
    render_viewer_page,
)
from screenshare_gateway.server.router import ResponseRouter
from screenshare_gateway.server.connection import ConnectionHandler
from screenshare_gateway.server.listener import FrameGateway
from screenshare_gateway.server.runner import ThreadedGateway


__all__ = [
    "GatewayError",
    "GatewayBindError",
    "parse_request",
    "DEFAULT_IMAGE_ROUTE",
    "compute_interval_ms",
    "render_viewer_page",
    "ResponseRouter",
    "ConnectionHandler",
    "FrameGateway",
    "ThreadedGateway",
]
