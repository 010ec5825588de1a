"""
Sample Buffer
=============

Hand-off point between the read loop and the dispatch workers.

The read loop must never wait on the network, so the producer side is
synchronous: a full buffer evicts its oldest sample instead of blocking.
Workers wait on the consumer side with a poll timeout.
"""

import asyncio
import logging
from collections import deque
from typing import Deque, Optional

from freed_bridge.protocol.sample import Sample


logger = logging.getLogger(__name__)


class SampleBuffer:
    """
    Bounded newest-wins queue of decoded samples.

    Attributes:
        maxsize: Capacity; the oldest sample is evicted beyond it
        dropped_count: Samples evicted because workers fell behind
        total_put: Samples ever offered by the read loop
    """

    def __init__(self, maxsize: int = 64) -> None:
        if maxsize < 1:
            raise ValueError("maxsize must be >= 1")

        self.maxsize = maxsize
        self._samples: Deque[Sample] = deque(maxlen=maxsize)
        self._ready = asyncio.Event()
        self.dropped_count: int = 0
        self.total_put: int = 0

    def __len__(self) -> int:
        return len(self._samples)

    @property
    def size(self) -> int:
        """Samples currently waiting for a worker."""
        return len(self._samples)

    def put_nowait(self, sample: Sample) -> bool:
        """
        Offer a sample from the read loop.

        Returns:
            False if the oldest waiting sample was evicted to make room.
        """
        self.total_put += 1
        evicting = len(self._samples) == self.maxsize
        if evicting:
            self.dropped_count += 1
            logger.warning(
                f"Dispatch falling behind, evicted oldest sample "
                f"({self.dropped_count} so far)"
            )

        # deque(maxlen) discards from the left on append
        self._samples.append(sample)
        self._ready.set()
        return not evicting

    def get_nowait(self) -> Optional[Sample]:
        """Oldest waiting sample, or None."""
        if not self._samples:
            return None
        sample = self._samples.popleft()
        if not self._samples:
            self._ready.clear()
        return sample

    async def get(self, timeout: Optional[float] = None) -> Optional[Sample]:
        """
        Wait for the oldest sample.

        Args:
            timeout: Maximum seconds to wait. None = wait forever.

        Returns:
            Next sample, or None if timeout occurred.
        """
        loop = asyncio.get_running_loop()
        deadline = None if timeout is None else loop.time() + timeout

        while True:
            sample = self.get_nowait()
            if sample is not None:
                return sample

            # Another worker may take the sample first; wait again until the deadline
            remaining = None if deadline is None else deadline - loop.time()
            if remaining is not None and remaining <= 0:
                return None
            try:
                await asyncio.wait_for(self._ready.wait(), timeout=remaining)
            except asyncio.TimeoutError:
                return None

    def metrics(self) -> dict:
        """Counters reported alongside dispatcher metrics."""
        return {
            "size": self.size,
            "maxsize": self.maxsize,
            "dropped_count": self.dropped_count,
            "total_put": self.total_put,
        }
