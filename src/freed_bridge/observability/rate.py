"""
Frame Rate Meter
================

Counts accepted frames per wall-clock second.

Observability ONLY: the meter never influences framing or dispatch.
"""

import logging
import time
from typing import Callable, Optional


logger = logging.getLogger(__name__)


class RateMeter:
    """
    Per-second accepted frame counter.
    
    On each tick, if the wall-clock second has changed since the last
    tick, the count for the previous second is logged and returned and
    the counter restarts with the current frame.
    
    Example:
        meter = RateMeter()
        for frame in frames:
            meter.tick()   # logs "FPS: 60" once a second
    """
    
    def __init__(
        self,
        clock: Callable[[], float] = time.time,
        log_rate: bool = True,
    ) -> None:
        """
        Initialize rate meter.
        
        Args:
            clock: Wall-clock source in seconds
            log_rate: Log each completed second at INFO
        """
        self._clock = clock
        self._log_rate = log_rate
        self._last_second: Optional[int] = None
        self._count: int = 0
        self.last_rate: Optional[int] = None
    
    @property
    def count(self) -> int:
        """Frames counted so far in the current second."""
        return self._count
    
    def tick(self) -> Optional[int]:
        """
        Record one accepted frame.
        
        Returns:
            The completed second's count when a boundary was crossed,
            otherwise None.
        """
        second = int(self._clock())
        reported: Optional[int] = None
        
        if self._last_second is None:
            self._last_second = second
        elif second != self._last_second:
            reported = self._count
            self.last_rate = reported
            if self._log_rate:
                logger.info(f"FPS: {reported}")
            self._last_second = second
            self._count = 0
        
        self._count += 1
        return reported
