"""
Frame Gateway
=============

Listener lifecycle for the screenshare gateway.

This module provides the FrameGateway class which:
    - Binds the listening socket (reporting bind failures to the caller)
    - Spawns one ConnectionHandler task per accepted socket
    - Tracks every live connection
    - On stop, closes the listening socket first, then cancels every
      live connection

State machine:
    STOPPED --start--> STARTING --bind ok--> RUNNING
    STARTING --bind fails--> FAILED   (GatewayBindError, no retry)
    RUNNING --stop--> STOPPED
    FAILED --stop--> STOPPED

Calling start() while RUNNING and stop() while STOPPED are no-ops.
No ceiling is placed on concurrent connections.
"""

import asyncio
import logging
from typing import Dict, Optional

from screenshare_gateway.config import ServerConfig
from screenshare_gateway.frames import FrameCache
from screenshare_gateway.models.state import ListenerState
from screenshare_gateway.observability.metrics import GatewayMetrics
from screenshare_gateway.server.connection import (
    DEFAULT_MAX_REQUEST_BYTES,
    DEFAULT_READ_TIMEOUT_SECONDS,
    DEFAULT_WRITE_TIMEOUT_SECONDS,
    ConnectionHandler,
)
from screenshare_gateway.server.errors import GatewayBindError
from screenshare_gateway.server.router import ResponseRouter
from screenshare_gateway.server.viewer_page import DEFAULT_IMAGE_ROUTE


logger = logging.getLogger(__name__)


class FrameGateway:
    """
    HTTP/1.1 gateway serving the latest frame to many viewers.

    Holds only a read-only handle to the FrameCache; frame producers
    store into the cache independently of any connection.

    Attributes:
        cache: Shared frame cache
        router: Response router built from the configuration
        metrics: Traffic counters

    Example:
        cache = FrameCache()
        gateway = FrameGateway(cache, host="0.0.0.0", port=8000, browser_fps=5)

        await gateway.start()
        ...
        await gateway.stop()
    """

    def __init__(
        self,
        cache: FrameCache,
        host: str = "0.0.0.0",
        port: int = 8000,
        browser_fps: float = 5.0,
        image_route: str = DEFAULT_IMAGE_ROUTE,
        read_timeout: float = DEFAULT_READ_TIMEOUT_SECONDS,
        write_timeout: float = DEFAULT_WRITE_TIMEOUT_SECONDS,
        max_request_bytes: int = DEFAULT_MAX_REQUEST_BYTES,
        metrics: Optional[GatewayMetrics] = None,
    ) -> None:
        """
        Initialize the gateway. Nothing is bound until start().

        Args:
            cache: FrameCache to serve from
            host: Bind address
            port: Bind port (0 = OS-assigned)
            browser_fps: Viewer page refresh rate
            image_route: Route serving the current frame
            read_timeout: Per-connection request deadline in seconds
            write_timeout: Per-connection response drain deadline in seconds
            max_request_bytes: Per-connection request byte cap
            metrics: Traffic counters (created if omitted)
        """
        self.cache = cache
        self.host = host
        self.port = port
        self.router = ResponseRouter(cache, browser_fps=browser_fps, image_route=image_route)
        self.metrics = metrics if metrics is not None else GatewayMetrics()

        self._read_timeout = read_timeout
        self._write_timeout = write_timeout
        self._max_request_bytes = max_request_bytes

        self._state = ListenerState.STOPPED
        self._server: Optional[asyncio.AbstractServer] = None
        self._connections: Dict[ConnectionHandler, asyncio.Task] = {}
        self._bound_port: Optional[int] = None
        self._accepting: bool = False

    @classmethod
    def from_config(
        cls,
        cache: FrameCache,
        config: ServerConfig,
        metrics: Optional[GatewayMetrics] = None,
    ) -> "FrameGateway":
        """
        Build a gateway from a ServerConfig.

        Args:
            cache: FrameCache to serve from
            config: Validated server configuration
            metrics: Optional shared traffic counters
        """
        return cls(
            cache,
            host=config.host,
            port=config.port,
            browser_fps=config.browser_fps,
            image_route=config.image_route,
            read_timeout=config.read_timeout_seconds,
            write_timeout=config.write_timeout_seconds,
            max_request_bytes=config.max_request_bytes,
            metrics=metrics,
        )

    @property
    def state(self) -> ListenerState:
        return self._state

    @property
    def is_running(self) -> bool:
        """Whether the listener is accepting connections."""
        return self._state is ListenerState.RUNNING

    @property
    def bound_port(self) -> Optional[int]:
        """Actual listening port while RUNNING (resolves port 0)."""
        return self._bound_port

    @property
    def active_connections(self) -> int:
        """Number of connections currently tracked."""
        return len(self._connections)

    @property
    def url(self) -> Optional[str]:
        if self._bound_port is None:
            return None
        host = "localhost" if self.host in ("0.0.0.0", "", "::") else self.host
        return f"http://{host}:{self._bound_port}/"

    async def start(self) -> None:
        """
        Bind the listening socket and start accepting.

        Raises:
            GatewayBindError: If the socket cannot be bound. The gateway is
                left in FAILED and no retry is attempted.
        """
        if self._state in (ListenerState.RUNNING, ListenerState.STARTING):
            return

        self._state = ListenerState.STARTING
        self._accepting = True
        try:
            self._server = await asyncio.start_server(
                self._on_accept,
                host=self.host,
                port=self.port,
            )
        except OSError as e:
            self._accepting = False
            self._state = ListenerState.FAILED
            self._server = None
            logger.error(f"HTTP server failed to bind {self.host}:{self.port}: {e}")
            raise GatewayBindError(self.host, self.port, str(e)) from e

        sockets = self._server.sockets or ()
        self._bound_port = sockets[0].getsockname()[1] if sockets else self.port
        self._state = ListenerState.RUNNING
        logger.info(f"HTTP server listening on {self.host}:{self._bound_port}")

    async def stop(self) -> None:
        """
        Stop accepting and cancel every live connection.

        The listening socket is closed first, so no new connection is
        accepted while the live set is being torn down.
        """
        if self._state is not ListenerState.RUNNING:
            if self._state is ListenerState.FAILED:
                self._state = ListenerState.STOPPED
            return

        logger.info("Stopping HTTP server...")
        self._accepting = False
        server = self._server
        self._server = None
        server.close()

        live = list(self._connections.items())
        for _, task in live:
            task.cancel()
        if live:
            await asyncio.gather(*(task for _, task in live), return_exceptions=True)
        for handler, _ in live:
            # Tasks cancelled before their first step never ran their cleanup
            handler.close(abort=True)
        self._connections.clear()

        await server.wait_closed()
        self._bound_port = None
        self._state = ListenerState.STOPPED
        logger.info(f"HTTP server stopped ({len(live)} connections cancelled)")

    async def __aenter__(self) -> "FrameGateway":
        await self.start()
        return self

    async def __aexit__(self, *args) -> None:
        await self.stop()

    def _on_accept(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
    ) -> None:
        """Spawn one independent handler task for an accepted socket."""
        if not self._accepting:
            # Raced with stop()
            writer.transport.abort()
            return

        self.metrics.connections_accepted += 1

        handler = ConnectionHandler(
            reader,
            writer,
            self.router,
            metrics=self.metrics,
            read_timeout=self._read_timeout,
            write_timeout=self._write_timeout,
            max_request_bytes=self._max_request_bytes,
            on_close=self._forget,
        )
        logger.debug(f"New connection from {handler.peer}")

        task = asyncio.get_running_loop().create_task(
            handler.run(),
            name=f"connection-{self.metrics.connections_accepted}",
        )
        self._connections[handler] = task

    def _forget(self, handler: ConnectionHandler) -> None:
        self._connections.pop(handler, None)
