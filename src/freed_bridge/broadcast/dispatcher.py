"""
Broadcast Dispatcher
====================

Sends decoded samples as OSC messages.

This module provides the BroadcastDispatcher class which:
    - Pulls samples from the SampleBuffer with a fixed pool of workers
    - Builds one OSC message per sample
    - Performs the blocking UDP send in a worker thread

Design Rules:
    - In-flight sends are bounded by the worker count
    - No acknowledgment, no retry
    - Send failures are logged and counted, never raised
"""

import asyncio
import logging
from typing import Any, List, Optional, Protocol

from pythonosc.osc_message import OscMessage
from pythonosc.osc_message_builder import OscMessageBuilder
from pythonosc.udp_client import UDPClient

from freed_bridge.protocol.sample import Sample
from freed_bridge.stream.buffer import SampleBuffer


logger = logging.getLogger(__name__)


class OscClient(Protocol):
    """Anything that can send a built OSC message."""
    
    def send(self, content: Any) -> None: ...


def create_osc_client(host: str, port: int) -> UDPClient:
    """UDP client for the outbound destination."""
    logger.info(f"OSC destination: {host}:{port}")
    return UDPClient(host, port)


def build_message(address: str, sample: Sample) -> OscMessage:
    """
    Build the outbound message for one sample.
    
    Arguments are tx, ty, tz, rx, ry, rz as float32 then zoom, focus
    as int32.
    """
    builder = OscMessageBuilder(address=address)
    for value in (sample.tx, sample.ty, sample.tz, sample.rx, sample.ry, sample.rz):
        builder.add_arg(float(value), OscMessageBuilder.ARG_TYPE_FLOAT)
    builder.add_arg(int(sample.zoom), OscMessageBuilder.ARG_TYPE_INT)
    builder.add_arg(int(sample.focus), OscMessageBuilder.ARG_TYPE_INT)
    return builder.build()


class BroadcastDispatcher:
    """
    Worker pool that drains a SampleBuffer into an OSC client.
    
    Attributes:
        address: OSC address pattern, e.g. /camera
        workers: Number of concurrent send workers
        debug: Mirror each sent sample to the log
        
    Example:
        dispatcher = BroadcastDispatcher(
            client=create_osc_client("224.0.0.0", 7000),
            buffer=buffer,
            address="/camera",
        )
        task = asyncio.create_task(dispatcher.run())
        ...
        await dispatcher.stop()
        await task
    """
    
    def __init__(
        self,
        client: OscClient,
        buffer: SampleBuffer,
        address: str = "/camera",
        workers: int = 4,
        debug: bool = False,
        poll_timeout: float = 0.5,
    ) -> None:
        if workers < 1:
            raise ValueError("workers must be >= 1")
        
        self.client = client
        self.buffer = buffer
        self.address = address
        self.workers = workers
        self.debug = debug
        self.poll_timeout = poll_timeout
        
        self._running: bool = True
        self._tasks: List[asyncio.Task] = []
        self.sent_count: int = 0
        self.failed_count: int = 0
    
    async def run(self) -> None:
        """Run the worker pool until stop() is called."""
        self._tasks = [
            asyncio.create_task(self._worker(), name=f"dispatch_worker_{i}")
            for i in range(self.workers)
        ]
        logger.info(f"BroadcastDispatcher started ({self.workers} workers)")
        
        try:
            await asyncio.gather(*self._tasks)
        finally:
            for task in self._tasks:
                task.cancel()
            self._tasks = []
            logger.info("BroadcastDispatcher stopped")
    
    async def stop(self) -> None:
        """Let workers finish their current send and exit."""
        self._running = False
    
    async def dispatch(self, sample: Sample) -> bool:
        """
        Send one sample now.
        
        Returns:
            True if the send succeeded.
        """
        message = build_message(self.address, sample)
        try:
            await asyncio.to_thread(self.client.send, message)
        except Exception as e:
            self.failed_count += 1
            logger.error(f"OSC send failed: {e}")
            return False
        
        self.sent_count += 1
        if self.debug:
            logger.info(
                "%s %f %f %f %f %f %f %d %d",
                self.address, *sample.as_osc_args(),
            )
        return True
    
    async def _worker(self) -> None:
        while self._running:
            sample: Optional[Sample] = await self.buffer.get(timeout=self.poll_timeout)
            if sample is None:
                continue
            await self.dispatch(sample)
    
    def metrics(self) -> dict:
        """Send counters plus buffer metrics."""
        return {
            "sent": self.sent_count,
            "failed": self.failed_count,
            "buffer": self.buffer.metrics(),
        }
