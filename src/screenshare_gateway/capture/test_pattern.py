"""
Test Pattern Source
===================

Synthetic frame source that renders a moving test card and encodes it as
JPEG. Used for demos and for exercising the gateway without a real screen
capture backend.

Design Rules:
    - This is the ONLY place in the codebase that encodes images
    - Fails fast on encode errors
"""

import logging
import time
from typing import Optional

import cv2
import numpy as np


logger = logging.getLogger(__name__)


# Matches a 0.8 JPEG compression factor
DEFAULT_JPEG_QUALITY = 80


class ImageEncodeError(Exception):
    """Raised when image encoding fails."""
    pass


def encode_jpeg(bgr: np.ndarray, quality: int = DEFAULT_JPEG_QUALITY) -> bytes:
    """
    Encode a BGR image as JPEG.

    Args:
        bgr: Image as np.ndarray (H, W, 3), dtype=uint8
        quality: JPEG quality 1-100

    Returns:
        Encoded JPEG bytes

    Raises:
        ImageEncodeError: If the array is invalid or encoding fails
    """
    if bgr.ndim != 3 or bgr.shape[2] != 3 or bgr.dtype != np.uint8:
        raise ImageEncodeError(
            f"Expected uint8 (H, W, 3) image, got {bgr.dtype} {bgr.shape}"
        )

    ok, encoded = cv2.imencode(".jpg", bgr, [cv2.IMWRITE_JPEG_QUALITY, int(quality)])
    if not ok:
        raise ImageEncodeError("cv2.imencode returned failure")

    return encoded.tobytes()


class TestPatternSource:
    """
    Renders colour bars with a sweeping marker, frame counter and clock.

    Attributes:
        width: Output width in pixels
        height: Output height in pixels
        jpeg_quality: JPEG quality 1-100
    """

    __test__ = False  # not a pytest test class

    def __init__(
        self,
        width: int = 640,
        height: int = 360,
        jpeg_quality: int = DEFAULT_JPEG_QUALITY,
    ) -> None:
        if width < 16 or height < 16:
            raise ValueError("width and height must be >= 16")

        self.width = width
        self.height = height
        self.jpeg_quality = jpeg_quality
        self._count = 0
        self._bars = self._render_bars()

    def capture(self) -> Optional[bytes]:
        """Render and encode the next test card."""
        self._count += 1
        card = self._bars.copy()

        # Sweeping marker, one full pass every 120 frames
        x = int((self._count % 120) / 120 * (self.width - 1))
        cv2.line(card, (x, 0), (x, self.height - 1), (255, 255, 255), 2)

        label = f"#{self._count}  {time.strftime('%H:%M:%S')}"
        cv2.putText(
            card,
            label,
            (10, self.height - 12),
            cv2.FONT_HERSHEY_SIMPLEX,
            0.6,
            (255, 255, 255),
            1,
            cv2.LINE_AA,
        )

        return encode_jpeg(card, self.jpeg_quality)

    def close(self) -> None:
        logger.debug(f"TestPatternSource closed after {self._count} frames")

    def _render_bars(self) -> np.ndarray:
        colours = np.array(
            [
                (255, 255, 255),
                (0, 255, 255),
                (255, 255, 0),
                (0, 255, 0),
                (255, 0, 255),
                (0, 0, 255),
                (255, 0, 0),
                (0, 0, 0),
            ],
            dtype=np.uint8,
        )
        columns = np.arange(self.width) * len(colours) // self.width
        row = colours[columns]
        return np.repeat(row[np.newaxis, :, :], self.height, axis=0)
