"""
Test Configuration
==================

Pytest fixtures and test configuration for the screenshare gateway.
"""

import asyncio
from typing import Dict, Optional, Tuple

import pytest


TINY_JPEG = bytes([0xFF, 0xD8, 0xD9])


@pytest.fixture
def tiny_jpeg():
    """Provide a 3-byte stand-in for an encoded JPEG."""
    return TINY_JPEG


@pytest.fixture
def cache():
    """Provide an empty FrameCache."""
    from screenshare_gateway.frames import FrameCache

    return FrameCache()


@pytest.fixture
def make_gateway(cache):
    """Provide a factory for loopback gateways on an OS-assigned port."""
    from screenshare_gateway.server import FrameGateway

    def factory(**overrides):
        options = {
            "host": "127.0.0.1",
            "port": 0,
            "browser_fps": 5.0,
            "read_timeout": 2.0,
            "write_timeout": 2.0,
        }
        options.update(overrides)
        return FrameGateway(cache, **options)

    return factory


def split_response(data: bytes) -> Tuple[int, Dict[str, str], bytes]:
    """Split a raw HTTP response into status, headers and body."""
    head, _, body = data.partition(b"\r\n\r\n")
    lines = head.decode("ascii").split("\r\n")
    status = int(lines[0].split(" ")[1])
    headers = {}
    for line in lines[1:]:
        name, _, value = line.partition(":")
        headers[name.strip().lower()] = value.strip()
    return status, headers, body


@pytest.fixture
def http_request():
    """
    Provide an async raw HTTP client.

    Sends one request and reads until the server closes the connection.
    """

    async def send(
        port: int,
        path: str = "/",
        raw: Optional[bytes] = None,
        timeout: float = 5.0,
    ) -> Tuple[int, Dict[str, str], bytes]:
        reader, writer = await asyncio.open_connection("127.0.0.1", port)
        if raw is None:
            raw = f"GET {path} HTTP/1.1\r\nHost: 127.0.0.1\r\n\r\n".encode("ascii")
        writer.write(raw)
        await writer.drain()
        data = await asyncio.wait_for(reader.read(), timeout=timeout)
        writer.close()
        return split_response(data)

    return send
