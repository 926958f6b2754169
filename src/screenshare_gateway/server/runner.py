"""
Threaded Gateway
================

Blocking start/stop wrapper for embedding the gateway in code that does not
run an asyncio event loop (desktop UIs, capture callbacks, scripts).

The gateway runs on its own event loop in a daemon thread. Frame producers
keep calling FrameCache.store()/publish() from their own threads.
"""

import asyncio
import logging
import threading
from typing import Optional

from screenshare_gateway.frames import FrameCache
from screenshare_gateway.models.state import ListenerState
from screenshare_gateway.server.listener import FrameGateway


logger = logging.getLogger(__name__)


class ThreadedGateway:
    """
    Runs a FrameGateway on a background event loop.

    Example:
        cache = FrameCache()
        runner = ThreadedGateway(FrameGateway(cache, port=8000))
        runner.start()          # raises GatewayBindError on bind failure
        cache.publish(jpeg_bytes)
        runner.stop()
    """

    def __init__(self, gateway: FrameGateway, call_timeout: float = 10.0) -> None:
        """
        Args:
            gateway: Gateway to drive
            call_timeout: Seconds to wait for start/stop to complete
        """
        self.gateway = gateway
        self._call_timeout = call_timeout
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._thread: Optional[threading.Thread] = None

    @classmethod
    def for_cache(cls, cache: FrameCache, **kwargs) -> "ThreadedGateway":
        """Build a runner around a new FrameGateway for the given cache."""
        return cls(FrameGateway(cache, **kwargs))

    @property
    def state(self) -> ListenerState:
        return self.gateway.state

    @property
    def is_running(self) -> bool:
        return self.gateway.is_running

    @property
    def bound_port(self) -> Optional[int]:
        return self.gateway.bound_port

    @property
    def url(self) -> Optional[str]:
        return self.gateway.url

    def start(self) -> None:
        """
        Start the gateway and block until it is listening.

        Raises:
            GatewayBindError: If the port cannot be bound.
        """
        if self.gateway.is_running:
            return

        if self._loop is None:
            self._loop = asyncio.new_event_loop()
            self._thread = threading.Thread(
                target=self._loop.run_forever,
                name="screenshare-gateway",
                daemon=True,
            )
            self._thread.start()

        future = asyncio.run_coroutine_threadsafe(self.gateway.start(), self._loop)
        try:
            future.result(timeout=self._call_timeout)
        except Exception:
            self._shutdown_loop()
            raise

    def stop(self) -> None:
        """Stop the gateway, cancel live connections and end the loop thread."""
        if self._loop is None:
            return

        future = asyncio.run_coroutine_threadsafe(self.gateway.stop(), self._loop)
        try:
            future.result(timeout=self._call_timeout)
        finally:
            self._shutdown_loop()

    def __enter__(self) -> "ThreadedGateway":
        self.start()
        return self

    def __exit__(self, *args) -> None:
        self.stop()

    def _shutdown_loop(self) -> None:
        loop, thread = self._loop, self._thread
        self._loop = None
        self._thread = None
        if loop is None:
            return

        loop.call_soon_threadsafe(loop.stop)
        if thread is not None:
            thread.join(timeout=self._call_timeout)
        loop.close()
        logger.debug("Gateway event loop closed")
