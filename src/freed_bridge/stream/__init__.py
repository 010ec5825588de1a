"""
Stream Module
=============

Device ingestion components.

This module provides the ingestion layer for the bridge:
    - open_serial_device: pyserial port with FreeD line settings
    - SampleBuffer: Bounded newest-wins hand-off to dispatch workers
    - ConnectionSupervisor: Read loop with fixed-delay reconnection

Example:
    from freed_bridge.stream import (
        ConnectionSupervisor,
        SampleBuffer,
        open_serial_device,
    )
    
    buffer = SampleBuffer(maxsize=64)
    supervisor = ConnectionSupervisor(
        opener=lambda: open_serial_device("/dev/ttyUSB_Serial"),
        buffer=buffer,
    )
    
    task = asyncio.create_task(supervisor.run())
"""

from freed_bridge.stream.buffer import SampleBuffer
from freed_bridge.stream.device import ByteSource, open_serial_device
from freed_bridge.stream.supervisor import (
    ConnectionState,
    ConnectionSupervisor,
    SupervisorMetrics,
)


__all__ = [
    "ByteSource",
    "ConnectionState",
    "ConnectionSupervisor",
    "SampleBuffer",
    "SupervisorMetrics",
    "open_serial_device",
]
