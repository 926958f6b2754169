"""
Viewer Page
===========

HTML document served on every non-image route.

The page polls the image route with a cache-busting query parameter and
swaps the visible image only after the next one has fully loaded, so the
viewer never sees a blank or partially drawn frame.
"""

import math
from string import Template

from screenshare_gateway.limits import clamp_browser_fps


DEFAULT_IMAGE_ROUTE = "/shot.jpg"


_VIEWER_HTML = Template("""\
<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>Screen Stream</title>
<style>
  html, body {
    height: 100%;
    margin: 0;
    background: #000000;
    display: flex;
    align-items: center;
    justify-content: center;
  }
  #screen {
    max-width: 100vw;
    max-height: 100vh;
    object-fit: contain;
    background: #000000;
  }
</style>
<script>
  function updateImage() {
    var screen = document.getElementById('screen');
    if (!screen) return;

    var url = '$image_route?ts=' + Date.now();

    // Preload, then swap once fully decoded
    var next = new Image();
    next.onload = function() {
      screen.src = url;
    };
    next.src = url;
  }

  window.onload = function() {
    updateImage();
    setInterval(updateImage, $interval_ms); // $fps FPS
  };
</script>
</head>
<body>
<img id="screen" src="$image_route" alt="">
</body>
</html>
""")


def compute_interval_ms(fps: float) -> int:
    """
    Poll interval for a browser refresh rate.

    Args:
        fps: Requested refresh rate (clamped to [0.5, 60])

    Returns:
        floor(1000 / clamped fps) in milliseconds.
    """
    return int(math.floor(1000.0 / clamp_browser_fps(fps)))


def render_viewer_page(fps: float, image_route: str = DEFAULT_IMAGE_ROUTE) -> str:
    """
    Render the viewer page.

    Args:
        fps: Browser refresh rate
        image_route: Route serving the current frame

    Returns:
        HTML document with exactly one image element.
    """
    return _VIEWER_HTML.substitute(
        image_route=image_route,
        interval_ms=compute_interval_ms(fps),
        fps=f"{clamp_browser_fps(fps):g}",
    )
