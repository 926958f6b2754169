"""
Frame Source Interface
======================

Boundary to the platform capture pipeline.

Window/display enumeration and the capture itself are supplied by the host
platform. The gateway only needs something that hands back encoded bytes.
"""

from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class FrameSource(Protocol):
    """
    Producer of encoded snapshots.

    capture() may block (it runs in a worker thread) and returns the
    encoded image, or None when nothing new is available.
    """

    def capture(self) -> Optional[bytes]:
        ...

    def close(self) -> None:
        ...
