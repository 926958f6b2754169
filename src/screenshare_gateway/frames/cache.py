"""
Frame Cache
===========

Single-slot, thread-safe holder of the most recent frame.

This module provides the FrameCache class, which is the ONLY state shared
between the frame producer and the connection handlers.

Design Rules:
    - At most one frame resident ("latest wins")
    - store() replaces the held reference; frame bytes are never copied in place
    - The lock is held only for the reference swap, never during network I/O
    - store() and load() are total: no error conditions
    - Observers are notified after the swap, outside the lock
"""

import logging
import threading
import time
from typing import Callable, List, Optional

from screenshare_gateway.frames.frame import Frame, JPEG_CONTENT_TYPE


logger = logging.getLogger(__name__)


FrameObserver = Callable[[Frame], None]


class FrameCache:
    """
    Latest-wins cache for encoded frames.

    Readers receive a reference to an immutable Frame. A reader that is
    midway through writing a frame to a socket keeps seeing exactly that
    frame, even if the producer stores a newer one in the meantime.

    Example:
        cache = FrameCache()

        # Producer (any thread)
        cache.publish(jpeg_bytes)

        # Reader (any thread or task)
        frame = cache.load()
        if frame is not None:
            send(frame.data)
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._frame: Optional[Frame] = None
        self._sequence: int = 0
        self._stores: int = 0
        self._observers: List[FrameObserver] = []

    @property
    def is_empty(self) -> bool:
        """Whether no frame has been stored (or the cache was cleared)."""
        return self.load() is None

    def store(self, frame: Frame) -> None:
        """
        Publish a frame, replacing any previously held one.

        No ordering check is made against sequence numbers: the most
        recent call wins.

        Args:
            frame: Frame to publish
        """
        with self._lock:
            self._frame = frame
            self._stores += 1
            if frame.sequence > self._sequence:
                self._sequence = frame.sequence
            observers = list(self._observers)

        for observer in observers:
            try:
                observer(frame)
            except Exception as e:
                logger.warning(f"Frame observer failed (sequence={frame.sequence}): {e}")

    def publish(
        self,
        data: bytes,
        timestamp: Optional[float] = None,
        content_type: str = JPEG_CONTENT_TYPE,
    ) -> Frame:
        """
        Wrap encoded bytes in a Frame with the next sequence number and store it.

        Args:
            data: Encoded image bytes
            timestamp: Capture time. Defaults to now.
            content_type: MIME type of the encoded bytes

        Returns:
            The published Frame.
        """
        with self._lock:
            sequence = self._sequence + 1
            self._sequence = sequence

        frame = Frame(
            data=data,
            sequence=sequence,
            timestamp=time.time() if timestamp is None else timestamp,
            content_type=content_type,
        )
        self.store(frame)
        return frame

    def load(self) -> Optional[Frame]:
        """
        Get the currently held frame.

        Returns:
            Most recently stored Frame, or None if the cache is empty.
        """
        with self._lock:
            return self._frame

    def clear(self) -> None:
        """Drop the held frame. Sequence numbering continues."""
        with self._lock:
            self._frame = None

    def subscribe(self, observer: FrameObserver) -> Callable[[], None]:
        """
        Register a callback invoked with every stored frame.

        Callbacks run on the producer's thread after the swap. A failing
        callback is logged and does not affect the store or other observers.

        Args:
            observer: Callable taking the new Frame

        Returns:
            Function that removes the observer when called.
        """
        with self._lock:
            self._observers.append(observer)

        def unsubscribe() -> None:
            with self._lock:
                if observer in self._observers:
                    self._observers.remove(observer)

        return unsubscribe

    def stats(self) -> dict:
        """
        Get cache statistics for observability.

        Returns:
            Dict with stores, sequence, has_frame
        """
        with self._lock:
            return {
                "stores": self._stores,
                "sequence": self._sequence,
                "has_frame": self._frame is not None,
            }
