"""
Screenshare Gateway
===================

Serves the most recent screen snapshot to many browsers over plain HTTP.

A single producer stores encoded frames into a latest-wins cache; a minimal
HTTP/1.1 gateway serves that frame, plus a viewer page that polls it, to any
number of concurrent connections without ever blocking the producer.

Components:
    - frames: Frame value type and the single-slot FrameCache
    - server: Request parsing, routing, connection handling, listener lifecycle
    - capture: Frame source boundary, capture pump, synthetic test pattern
    - observability: Traffic counters

Example:
    from screenshare_gateway.frames import FrameCache
    from screenshare_gateway.server import ThreadedGateway

    cache = FrameCache()
    runner = ThreadedGateway.for_cache(cache, port=8000, browser_fps=5)
    runner.start()
    cache.publish(jpeg_bytes)
"""

__version__ = "0.1.0"

__all__ = [
    "__version__",
]
