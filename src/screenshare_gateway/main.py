"""
Screenshare Gateway Main Application
====================================

Command-line entry point.

Starts the frame gateway and, optionally, a built-in frame source feeding it.
Runs until SIGINT/SIGTERM, then stops the listener (cancelling live
connections) and the capture pump.

Routes:
    GET /shot.jpg   - Current frame (404 until the first frame arrives)
    GET /*          - Viewer page polling /shot.jpg

Usage:
    python -m screenshare_gateway --port 8000 --browser-fps 5
    python -m screenshare_gateway --source test_pattern --capture-fps 10
"""

import argparse
import asyncio
import logging
import signal
import sys
from typing import List, Optional

from screenshare_gateway.capture import CapturePump, TestPatternSource
from screenshare_gateway.config import (
    CaptureConfig,
    ServerConfig,
    Settings,
    load_config,
    setup_logging,
)
from screenshare_gateway.frames import FrameCache
from screenshare_gateway.server import FrameGateway, GatewayBindError


logger = logging.getLogger(__name__)


# =============================================================================
# Argument Handling
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="screenshare-gateway",
        description="Serve the latest screen snapshot to browsers over HTTP",
    )
    parser.add_argument("--config", help="Path to config.yaml")
    parser.add_argument("--host", help="Bind host")
    parser.add_argument("--port", type=int, help="Bind port (0 = OS-assigned)")
    parser.add_argument("--browser-fps", type=float, help="Viewer refresh rate [0.5, 60]")
    parser.add_argument("--capture-fps", type=float, help="Capture rate [1, 60]")
    parser.add_argument(
        "--source",
        choices=["none", "test_pattern"],
        help="Built-in frame source",
    )
    return parser


def apply_arguments(settings: Settings, args: argparse.Namespace) -> Settings:
    """
    Overlay command-line arguments on loaded settings.

    Overrides go back through validation so clamping still applies.
    """
    server_updates = {
        "host": args.host,
        "port": args.port,
        "browser_fps": args.browser_fps,
    }
    capture_updates = {
        "fps": args.capture_fps,
        "source": args.source,
    }
    server_updates = {k: v for k, v in server_updates.items() if v is not None}
    capture_updates = {k: v for k, v in capture_updates.items() if v is not None}

    server = ServerConfig.model_validate({**settings.server.model_dump(), **server_updates})
    capture = CaptureConfig.model_validate({**settings.capture.model_dump(), **capture_updates})
    return settings.model_copy(update={"server": server, "capture": capture})


# =============================================================================
# Run Loop
# =============================================================================

async def serve(settings: Settings) -> int:
    """
    Run the gateway until a termination signal arrives.

    Returns:
        Process exit code (1 on bind failure).
    """
    cache = FrameCache()
    gateway = FrameGateway.from_config(cache, settings.server)

    try:
        await gateway.start()
    except GatewayBindError as e:
        logger.error(f"Cannot start {settings.gateway.name}: {e}")
        return 1

    logger.info(
        f"{settings.gateway.name} {settings.gateway.version} serving at {gateway.url} "
        f"(browser_fps={settings.server.browser_fps:g}, capture_fps={settings.capture.fps})"
    )

    pump: Optional[CapturePump] = None
    pump_task: Optional[asyncio.Task] = None
    if settings.capture.source == "test_pattern":
        source = TestPatternSource(
            width=settings.capture.width,
            height=settings.capture.height,
            jpeg_quality=settings.capture.jpeg_quality,
        )
        pump = CapturePump(source, cache, fps=settings.capture.fps)
        pump_task = asyncio.create_task(pump.run(), name="capture_pump")
    else:
        logger.info("No built-in frame source; waiting for an external producer")

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except NotImplementedError:
            # Windows event loops
            signal.signal(sig, lambda *_: loop.call_soon_threadsafe(stop_event.set))

    await stop_event.wait()
    logger.info("Shutting down gracefully...")

    if pump is not None and pump_task is not None:
        await pump.stop()
        await pump_task

    await gateway.stop()
    logger.info(f"Final metrics: {gateway.metrics.to_dict()}")
    logger.info("Shutdown complete")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = apply_arguments(load_config(args.config), args)
    setup_logging(settings)
    return asyncio.run(serve(settings))


if __name__ == "__main__":
    sys.exit(main())
