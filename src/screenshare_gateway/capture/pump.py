"""
Capture Pump
============

Drives a FrameSource at a fixed rate and publishes into the FrameCache.

This module provides the CapturePump class which:
    - Calls FrameSource.capture() in a worker thread at the capture fps
    - Publishes each captured frame into the cache (latest wins)
    - Logs and counts capture errors, never stopping on them
    - Stops gracefully via an event

Design Rules:
    - Does NOT decode or inspect image data
    - Never blocks the gateway's connection handling
    - The capture rate is independent of the viewer refresh rate
"""

import asyncio
import logging
import time

from screenshare_gateway.capture.source import FrameSource
from screenshare_gateway.frames import FrameCache
from screenshare_gateway.limits import clamp_capture_fps


logger = logging.getLogger(__name__)


class CapturePumpMetrics:
    """Metrics for CapturePump observability."""

    __slots__ = (
        "frames_captured",
        "empty_captures",
        "capture_errors",
        "last_sequence",
    )

    def __init__(self) -> None:
        self.frames_captured: int = 0
        self.empty_captures: int = 0
        self.capture_errors: int = 0
        self.last_sequence: int = 0

    def to_dict(self) -> dict:
        """Export metrics as dict."""
        return {
            "frames_captured": self.frames_captured,
            "empty_captures": self.empty_captures,
            "capture_errors": self.capture_errors,
            "last_sequence": self.last_sequence,
        }


class CapturePump:
    """
    Periodic capture loop feeding a FrameCache.

    Example:
        pump = CapturePump(TestPatternSource(), cache, fps=10)
        task = asyncio.create_task(pump.run())

        # Later, stop gracefully
        await pump.stop()
        await task
    """

    def __init__(self, source: FrameSource, cache: FrameCache, fps: int = 5) -> None:
        """
        Initialize capture pump.

        Args:
            source: FrameSource to poll
            cache: FrameCache to publish into
            fps: Capture rate (clamped to [1, 60])
        """
        self.source = source
        self.cache = cache
        self.fps = clamp_capture_fps(fps)
        self.metrics = CapturePumpMetrics()

        self._running: bool = False
        self._stop_event: asyncio.Event = asyncio.Event()

    @property
    def running(self) -> bool:
        return self._running

    @property
    def interval(self) -> float:
        """Seconds between captures."""
        return 1.0 / self.fps

    async def run(self) -> None:
        """
        Capture until stop() is called.

        A stop() issued before the loop gets to run is honoured. The source
        is closed when the loop exits.
        """
        self._running = True
        logger.info(f"CapturePump starting at {self.fps} fps")

        try:
            while not self._stop_event.is_set():
                started = time.monotonic()
                await self.capture_once()

                remaining = self.interval - (time.monotonic() - started)
                try:
                    await asyncio.wait_for(
                        self._stop_event.wait(),
                        timeout=max(remaining, 0.0),
                    )
                    break
                except asyncio.TimeoutError:
                    pass
        finally:
            self._running = False
            self._stop_event.clear()
            self.source.close()
            logger.info(
                f"CapturePump stopped "
                f"(captured={self.metrics.frames_captured}, "
                f"errors={self.metrics.capture_errors})"
            )

    async def capture_once(self) -> bool:
        """
        Capture one frame and publish it.

        Returns:
            True if a frame was published.
        """
        try:
            data = await asyncio.to_thread(self.source.capture)
        except Exception as e:
            self.metrics.capture_errors += 1
            logger.warning(f"Capture error: {e}")
            return False

        if not data:
            self.metrics.empty_captures += 1
            return False

        frame = self.cache.publish(data)
        self.metrics.frames_captured += 1
        self.metrics.last_sequence = frame.sequence
        return True

    async def stop(self) -> None:
        """Signal the run loop to exit."""
        logger.info("CapturePump stopping...")
        self._running = False
        self._stop_event.set()
