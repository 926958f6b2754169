"""
Frames Module
=============

Frame value type and the single-slot cache shared by producer and viewers.

    - Frame: Immutable encoded snapshot with sequence number and timestamp
    - FrameCache: Thread-safe latest-wins slot (store / load / subscribe)

Example:
    from screenshare_gateway.frames import FrameCache

    cache = FrameCache()
    cache.publish(jpeg_bytes)
    frame = cache.load()
"""

from screenshare_gateway.frames.frame import Frame, JPEG_CONTENT_TYPE
from screenshare_gateway.frames.cache import FrameCache, FrameObserver


__all__ = [
    "Frame",
    "FrameCache",
    "FrameObserver",
    "JPEG_CONTENT_TYPE",
]
