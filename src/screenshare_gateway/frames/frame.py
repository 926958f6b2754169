"""
Frame Data Model
=================

Immutable representation of one encoded screen snapshot.

Design Rules:
    - This is the ONLY frame format held by the cache and served to viewers
    - Does NOT decode or manipulate image data
    - Bytes are copied into an immutable ``bytes`` object on construction,
      so a producer reusing its own buffer cannot alter a published frame
"""

from dataclasses import dataclass


JPEG_CONTENT_TYPE = "image/jpeg"


@dataclass(frozen=True, slots=True)
class Frame:
    """
    Encoded snapshot published by a frame source.

    Attributes:
        data: Encoded image bytes (JPEG by default), never decoded here
        sequence: Monotonically increasing counter assigned by the producer
        timestamp: UNIX timestamp of the capture
        content_type: MIME type served with the bytes
    """

    data: bytes
    sequence: int
    timestamp: float
    content_type: str = JPEG_CONTENT_TYPE

    def __post_init__(self) -> None:
        if not isinstance(self.data, bytes):
            object.__setattr__(self, "data", bytes(self.data))

    @property
    def size(self) -> int:
        """Number of encoded bytes."""
        return len(self.data)

    def __repr__(self) -> str:
        """Compact repr that doesn't dump the image bytes."""
        return (
            f"Frame(sequence={self.sequence}, "
            f"timestamp={self.timestamp:.3f}, "
            f"size={self.size}, "
            f"content_type={self.content_type!r})"
        )
