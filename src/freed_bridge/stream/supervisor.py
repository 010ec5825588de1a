"""
Connection Supervisor
=====================

Owns the device connection lifecycle and the read loop.

This module provides the ConnectionSupervisor class which:
    - Opens the device through an injected opener
    - Reads the byte stream and feeds it to a FrameSynchronizer
    - Decodes accepted frames and pushes samples into a SampleBuffer
    - Waits a fixed delay and reopens on any open or read failure

State machine:
    CLOSED -> OPENING -> STREAMING -> CLOSED -> ...

Design Rules:
    - Retries forever at a fixed interval; no backoff, no fatal state
    - The device handle is only touched by the read loop
    - Blocking reads run in a worker thread; bytes are fed in order
    - While reconnecting nothing is read or dispatched
"""

import asyncio
import logging
from enum import Enum
from typing import Callable, Optional

from freed_bridge.observability.rate import RateMeter
from freed_bridge.protocol.frame import FrameSynchronizer
from freed_bridge.protocol.sample import decode_sample
from freed_bridge.stream.buffer import SampleBuffer
from freed_bridge.stream.device import ByteSource


logger = logging.getLogger(__name__)


class ConnectionState(str, Enum):
    """Device connection states."""
    
    CLOSED = "CLOSED"
    OPENING = "OPENING"
    STREAMING = "STREAMING"


class SupervisorMetrics:
    """Metrics for ConnectionSupervisor observability."""
    
    __slots__ = (
        "open_attempts",
        "reconnect_count",
        "bytes_read",
        "frames_accepted",
        "frames_rejected",
        "state",
    )
    
    def __init__(self) -> None:
        self.open_attempts: int = 0
        self.reconnect_count: int = 0
        self.bytes_read: int = 0
        self.frames_accepted: int = 0
        self.frames_rejected: int = 0
        self.state: ConnectionState = ConnectionState.CLOSED
    
    def to_dict(self) -> dict:
        """Export metrics as dict."""
        return {
            "open_attempts": self.open_attempts,
            "reconnect_count": self.reconnect_count,
            "bytes_read": self.bytes_read,
            "frames_accepted": self.frames_accepted,
            "frames_rejected": self.frames_rejected,
            "state": self.state.value,
        }


class ConnectionSupervisor:
    """
    Device supervisor and read loop.
    
    Attributes:
        buffer: SampleBuffer decoded samples are pushed into
        reconnect_delay_seconds: Fixed wait between attempts
        metrics: Operational metrics
        
    Example:
        buffer = SampleBuffer(maxsize=64)
        supervisor = ConnectionSupervisor(
            opener=lambda: open_serial_device("/dev/ttyUSB_Serial"),
            buffer=buffer,
        )
        
        task = asyncio.create_task(supervisor.run())
        
        # Later, stop gracefully
        await supervisor.stop()
        await task
    """
    
    def __init__(
        self,
        opener: Callable[[], ByteSource],
        buffer: SampleBuffer,
        rate_meter: Optional[RateMeter] = None,
        reconnect_delay_seconds: float = 1.0,
        max_read_size: int = 256,
    ) -> None:
        """
        Initialize supervisor.
        
        Args:
            opener: Returns an open ByteSource or raises
            buffer: SampleBuffer to push decoded samples into
            rate_meter: Optional accepted-frame rate counter
            reconnect_delay_seconds: Wait after a failure before reopening
            max_read_size: Upper bound on bytes pulled per read call
        """
        self.opener = opener
        self.buffer = buffer
        self.rate_meter = rate_meter
        self.reconnect_delay_seconds = reconnect_delay_seconds
        self.max_read_size = max_read_size
        
        # Armed here so a stop() issued before run() is scheduled still holds
        self._source: Optional[ByteSource] = None
        self._running: bool = True
        self._stop_event: asyncio.Event = asyncio.Event()
        
        self.metrics = SupervisorMetrics()
    
    @property
    def state(self) -> ConnectionState:
        """Current connection state."""
        return self.metrics.state
    
    async def run(self) -> None:
        """
        Open, stream, and reopen until stop() is called.
        """
        logger.info("ConnectionSupervisor starting")
        
        while self._running:
            self.metrics.state = ConnectionState.OPENING
            self.metrics.open_attempts += 1
            
            try:
                self._source = await asyncio.to_thread(self.opener)
                self.metrics.state = ConnectionState.STREAMING
                logger.info(
                    f"Device open (attempt {self.metrics.open_attempts})"
                )
                await self._stream(self._source)
            except asyncio.CancelledError:
                raise
            except EOFError:
                logger.warning("Device stream ended")
            except Exception as e:
                logger.error(f"Device error: {e}")
            finally:
                self._close_source()
                self.metrics.state = ConnectionState.CLOSED
            
            if not self._running:
                break
            
            self.metrics.reconnect_count += 1
            logger.info(
                f"Reconnecting in {self.reconnect_delay_seconds:.1f}s "
                f"(attempt {self.metrics.reconnect_count})"
            )
            
            try:
                await asyncio.wait_for(
                    self._stop_event.wait(),
                    timeout=self.reconnect_delay_seconds,
                )
                break
            except asyncio.TimeoutError:
                pass
        
        logger.info("ConnectionSupervisor stopped")
    
    async def stop(self) -> None:
        """
        Stop the loop.
        
        The read in progress finishes (bounded by the port read timeout)
        before the device is closed.
        """
        logger.info("ConnectionSupervisor stopping...")
        self._running = False
        self._stop_event.set()
    
    async def _stream(self, source: ByteSource) -> None:
        """
        Read until the source ends, raises, or the supervisor is stopped.

        Raises:
            EOFError: On an empty read from a source without a read timeout
        """
        synchronizer = FrameSynchronizer()
        timed_reads = getattr(source, "timeout", None) is not None

        while self._running:
            size = min(max(1, getattr(source, "in_waiting", 0)), self.max_read_size)
            chunk = await asyncio.to_thread(source.read, size)
            if not chunk:
                if timed_reads:
                    continue
                raise EOFError("empty read from untimed source")
            
            self.metrics.bytes_read += len(chunk)
            rejected_before = synchronizer.rejected
            
            for frame in synchronizer.feed_bytes(chunk):
                self._handle_frame(frame)
            
            self.metrics.frames_rejected += synchronizer.rejected - rejected_before
    
    def _handle_frame(self, frame: bytes) -> None:
        sample = decode_sample(frame)
        self.buffer.put_nowait(sample)
        self.metrics.frames_accepted += 1
        if self.rate_meter is not None:
            self.rate_meter.tick()
    
    def _close_source(self) -> None:
        if self._source is None:
            return
        try:
            self._source.close()
        except Exception as e:
            logger.warning(f"Error closing device: {e}")
        self._source = None
