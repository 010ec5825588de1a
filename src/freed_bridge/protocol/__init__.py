"""
Protocol Module
===============

FreeD D1 framing, validation and decoding.

This module provides:
    - FrameSynchronizer: Locates 29-byte frames in a raw byte stream
    - is_valid_frame: Type byte + checksum gate
    - decode_sample: Frame -> Sample in physical units

Example:
    from freed_bridge.protocol import FrameSynchronizer, decode_sample
    
    sync = FrameSynchronizer()
    for frame in sync.feed_bytes(chunk):
        sample = decode_sample(frame)
"""

from freed_bridge.protocol.frame import (
    FRAME_MARKER,
    FRAME_SIZE,
    FRAME_TYPE,
    FrameSynchronizer,
    compute_checksum,
    is_valid_frame,
    pack_int24,
    seal_frame,
)
from freed_bridge.protocol.sample import Sample, decode_sample, sign_extend_24


__all__ = [
    "FRAME_MARKER",
    "FRAME_SIZE",
    "FRAME_TYPE",
    "FrameSynchronizer",
    "compute_checksum",
    "is_valid_frame",
    "pack_int24",
    "seal_frame",
    "Sample",
    "decode_sample",
    "sign_extend_24",
]
