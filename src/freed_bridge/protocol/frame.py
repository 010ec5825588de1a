"""
FreeD Frame Framing
===================

Frame boundary detection and validation for the FreeD D1 byte stream.

The device streams fixed-size 29-byte frames with no length field:

    [0]      start marker (0xD1)
    [1]      frame type (always 1)
    [2..28)  packed 24-bit payload fields
    [28]     checksum = (0x40 - sum(bytes[0..27])) mod 256

Design Rules:
    - Synchronizer is fed exactly one byte at a time, in stream order
    - The validator only ever sees complete 29-byte buffers
    - A marker byte seen mid-frame is data, not a resync point;
      resync happens only after a checksum rejection
"""

import logging
from typing import Callable, Iterator, Optional


logger = logging.getLogger(__name__)


FRAME_MARKER = 0xD1
FRAME_TYPE = 0x01
FRAME_SIZE = 29
CHECKSUM_SEED = 0x40

INT24_MIN = -(1 << 23)
INT24_MAX = (1 << 23) - 1


def compute_checksum(prefix: bytes) -> int:
    """Checksum byte for the 28-byte frame prefix."""
    return (CHECKSUM_SEED - sum(prefix)) & 0xFF


def is_valid_frame(frame: bytes) -> bool:
    """
    Accept or reject a complete frame.
    
    Args:
        frame: Exactly FRAME_SIZE bytes
        
    Returns:
        True if the type byte and checksum both match.
    """
    if len(frame) != FRAME_SIZE:
        return False
    if frame[1] != FRAME_TYPE:
        return False
    return frame[FRAME_SIZE - 1] == compute_checksum(frame[:FRAME_SIZE - 1])


def seal_frame(body: bytes) -> bytes:
    """
    Append the checksum byte to a 28-byte frame prefix.
    
    Raises:
        ValueError: If body is not FRAME_SIZE - 1 bytes long
    """
    if len(body) != FRAME_SIZE - 1:
        raise ValueError(
            f"frame body must be {FRAME_SIZE - 1} bytes, got {len(body)}"
        )
    return bytes(body) + bytes([compute_checksum(body)])


def pack_int24(value: int) -> bytes:
    """Encode a signed integer as a 3-byte big-endian two's complement field."""
    if not INT24_MIN <= value <= INT24_MAX:
        raise ValueError(f"value {value} out of 24-bit signed range")
    return (value & 0xFFFFFF).to_bytes(3, "big")


class FrameSynchronizer:
    """
    Byte-at-a-time frame accumulator.
    
    Owns the in-progress buffer. A completed buffer is handed to the
    validator; accepted frames are returned to the caller, rejected
    ones are logged and framing waits for a fresh marker byte.
    
    Attributes:
        accepted: Number of frames that passed validation
        rejected: Number of frames that failed validation
        
    Example:
        sync = FrameSynchronizer()
        for b in port.read(64):
            frame = sync.feed(b)
            if frame is not None:
                handle(frame)
    """
    
    # Cursor value after a rejection; behaves like 0 but marks lost sync
    DESYNCHRONIZED = -1
    
    def __init__(
        self,
        validator: Callable[[bytes], bool] = is_valid_frame,
    ) -> None:
        self._validator = validator
        self._buffer = bytearray(FRAME_SIZE)
        self._cursor = 0
        self.accepted: int = 0
        self.rejected: int = 0
    
    @property
    def cursor(self) -> int:
        """Fill position of the in-progress buffer (<= 0 means no partial frame)."""
        return self._cursor
    
    @property
    def in_sync(self) -> bool:
        """False after a rejection, until the next marker byte."""
        return self._cursor != self.DESYNCHRONIZED
    
    def reset(self) -> None:
        """Drop any partial frame."""
        self._buffer = bytearray(FRAME_SIZE)
        self._cursor = 0
    
    def feed(self, byte: int) -> Optional[bytes]:
        """
        Consume one byte.
        
        Args:
            byte: Next byte from the device stream (0..255)
            
        Returns:
            The completed frame if this byte finished a valid one,
            otherwise None.
        """
        byte &= 0xFF
        
        if self._cursor <= 0:
            if byte == FRAME_MARKER:
                self.reset()
                self._buffer[0] = byte
                self._cursor = 1
            return None
        
        self._buffer[self._cursor] = byte
        self._cursor += 1
        
        if self._cursor < FRAME_SIZE:
            return None
        
        frame = bytes(self._buffer)
        if self._validator(frame):
            self.accepted += 1
            self.reset()
            return frame
        
        self.rejected += 1
        logger.warning(f"Rejected frame: {frame.hex(' ')}")
        self._cursor = self.DESYNCHRONIZED
        return None
    
    def feed_bytes(self, data: bytes) -> Iterator[bytes]:
        """Feed a chunk byte by byte, yielding each accepted frame."""
        for byte in data:
            frame = self.feed(byte)
            if frame is not None:
                yield frame
