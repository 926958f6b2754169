"""
Rate Limits
===========

Clamping rules shared by the configuration layer, the viewer page and the
capture pump.

    browser fps  -> [0.5, 60]  (viewer poll rate)
    capture fps  -> [1, 60]    (frame source rate, informational for the gateway)

Out-of-range values are clamped, never rejected.
"""

MIN_BROWSER_FPS: float = 0.5
MAX_BROWSER_FPS: float = 60.0

MIN_CAPTURE_FPS: int = 1
MAX_CAPTURE_FPS: int = 60


def clamp_browser_fps(fps: float) -> float:
    """Clamp a browser poll rate to [0.5, 60] frames/sec."""
    return max(MIN_BROWSER_FPS, min(float(fps), MAX_BROWSER_FPS))


def clamp_capture_fps(fps: float) -> int:
    """Clamp a capture rate to [1, 60] whole frames/sec."""
    return max(MIN_CAPTURE_FPS, min(int(fps), MAX_CAPTURE_FPS))
