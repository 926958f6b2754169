"""
Response Router
===============

Maps a parsed request to one of three responses:

    image route prefix + frame held  -> 200 image bytes, caching disabled
    image route prefix + empty cache -> 404 "404 Not Found"
    anything else (malformed too)    -> 200 viewer page

The request method is not inspected.
"""

import logging
from typing import Optional

from screenshare_gateway.frames import FrameCache
from screenshare_gateway.limits import clamp_browser_fps
from screenshare_gateway.models.http import HttpResponse, RequestLine
from screenshare_gateway.server.viewer_page import (
    DEFAULT_IMAGE_ROUTE,
    render_viewer_page,
)


logger = logging.getLogger(__name__)


HTML_CONTENT_TYPE = "text/html; charset=utf-8"
TEXT_CONTENT_TYPE = "text/plain; charset=utf-8"
NO_CACHE = "no-cache, no-store, must-revalidate"
NOT_FOUND_BODY = b"404 Not Found"


class ResponseRouter:
    """
    Routes requests against a read-only view of the frame cache.

    The viewer page is rendered once at construction since the browser
    fps and image route are fixed for the lifetime of the gateway.

    Attributes:
        image_route: Path prefix serving the current frame
        browser_fps: Clamped viewer refresh rate
    """

    def __init__(
        self,
        cache: FrameCache,
        browser_fps: float = 5.0,
        image_route: str = DEFAULT_IMAGE_ROUTE,
    ) -> None:
        self._cache = cache
        self.image_route = image_route
        self.browser_fps = clamp_browser_fps(browser_fps)
        self._page = render_viewer_page(self.browser_fps, image_route).encode("utf-8")

    def is_image_request(self, request: Optional[RequestLine]) -> bool:
        return request is not None and request.path.startswith(self.image_route)

    def route(self, request: Optional[RequestLine]) -> HttpResponse:
        """
        Build the response for a request.

        Args:
            request: Parsed request line, or None if malformed

        Returns:
            Fully materialized HttpResponse.
        """
        if self.is_image_request(request):
            return self.image_response()
        return self.html_response()

    def image_response(self) -> HttpResponse:
        frame = self._cache.load()
        if frame is None:
            logger.debug("No frame available, answering 404")
            return self.not_found_response()

        return HttpResponse(
            status=200,
            content_type=frame.content_type,
            body=frame.data,
            headers=(("Cache-Control", NO_CACHE),),
        )

    def html_response(self) -> HttpResponse:
        return HttpResponse(status=200, content_type=HTML_CONTENT_TYPE, body=self._page)

    @staticmethod
    def not_found_response() -> HttpResponse:
        return HttpResponse(status=404, content_type=TEXT_CONTENT_TYPE, body=NOT_FOUND_BODY)
