"""
Lifecycle State Models
======================

Discrete states for the listener and for each accepted connection.

Listener:
    STOPPED --start--> STARTING --bind ok--> RUNNING
    STARTING --bind fails--> FAILED
    RUNNING --stop--> STOPPED

Connection:
    ACCEPTED -> READING -> PARSED -> RESPONDING -> CLOSED
    Any state may jump straight to CLOSED (disconnect, timeout, cancellation).
"""

from enum import Enum


class ListenerState(str, Enum):
    """
    States of the gateway's listening socket.

    Attributes:
        STOPPED: No socket bound (initial and post-stop state)
        STARTING: Bind in progress
        RUNNING: Accepting connections
        FAILED: Bind failed; reported to the caller, never retried
    """

    STOPPED = "STOPPED"
    STARTING = "STARTING"
    RUNNING = "RUNNING"
    FAILED = "FAILED"


class ConnectionState(str, Enum):
    """States of one accepted connection."""

    ACCEPTED = "ACCEPTED"
    READING = "READING"
    PARSED = "PARSED"
    RESPONDING = "RESPONDING"
    CLOSED = "CLOSED"
