"""
Capture Module
==============

Boundary to the platform frame source, plus a pump that feeds the cache.

    - FrameSource: Protocol for anything returning encoded snapshots
    - CapturePump: Polls a FrameSource at the capture fps, publishes frames
    - TestPatternSource: Synthetic JPEG test card (numpy + OpenCV)

Example:
    from screenshare_gateway.capture import CapturePump, TestPatternSource

    pump = CapturePump(TestPatternSource(), cache, fps=10)
    task = asyncio.create_task(pump.run())
"""

from screenshare_gateway.capture.source import FrameSource
from screenshare_gateway.capture.pump import CapturePump, CapturePumpMetrics
from screenshare_gateway.capture.test_pattern import (
    ImageEncodeError,
    TestPatternSource,
    encode_jpeg,
)


__all__ = [
    "FrameSource",
    "CapturePump",
    "CapturePumpMetrics",
    "ImageEncodeError",
    "TestPatternSource",
    "encode_jpeg",
]
