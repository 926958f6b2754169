"""
Observability Module
====================

Traffic counters for the screenshare gateway.

DESIGN RULES:
    - Does NOT influence routing or connection handling
    - Plain counters, exported with to_dict()
"""

from screenshare_gateway.observability.metrics import GatewayMetrics


__all__ = [
    "GatewayMetrics",
]
