"""
Broadcast Module
================

Outbound OSC delivery of decoded samples.

This module provides:
    - build_message: Sample -> OSC message (tx, ty, tz, rx, ry, rz, zoom, focus)
    - BroadcastDispatcher: Bounded worker pool draining the SampleBuffer
    - create_osc_client: python-osc UDP client factory
"""

from freed_bridge.broadcast.dispatcher import (
    BroadcastDispatcher,
    OscClient,
    build_message,
    create_osc_client,
)


__all__ = [
    "BroadcastDispatcher",
    "OscClient",
    "build_message",
    "create_osc_client",
]
