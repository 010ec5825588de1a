"""
Sample Decoding
===============

Converts a validated FreeD frame into physical units.

Field layout (byte offsets, end exclusive):

    ry     [2, 5)     rotation, / 32768.0
    rx     [5, 8)     rotation, / 32768.0
    rz     [8, 11)    rotation, / 32768.0
    tx     [12, 15)   translation, / 64.0
    ty     [15, 18)   translation, / 64.0
    tz     [18, 21)   translation, / 64.0
    zoom   [20, 23)   raw signed 24-bit
    focus  [23, 26)   raw signed 24-bit

Note:
    The zoom range overlaps the last byte of tz. The layout is kept
    exactly as observed from the device; do not shift it without
    checking against the device's protocol documentation.
"""

from dataclasses import dataclass

from freed_bridge.protocol.frame import FRAME_SIZE


ROTATION_SCALE = 32768.0
TRANSLATION_SCALE = 64.0

RY_OFFSET = 2
RX_OFFSET = 5
RZ_OFFSET = 8
TX_OFFSET = 12
TY_OFFSET = 15
TZ_OFFSET = 18
ZOOM_OFFSET = 20
FOCUS_OFFSET = 23


@dataclass(frozen=True, slots=True)
class Sample:
    """
    One decoded tracking sample.
    
    Immutable so a dispatch worker can own it without copying.
    
    Attributes:
        rx, ry, rz: Rotation axes (scaled by 1/32768)
        tx, ty, tz: Translation axes (scaled by 1/64)
        zoom: Raw lens zoom value
        focus: Raw lens focus value
    """
    
    rx: float
    ry: float
    rz: float
    tx: float
    ty: float
    tz: float
    zoom: int
    focus: int
    
    def as_osc_args(self) -> tuple:
        """Outbound argument order: tx, ty, tz, rx, ry, rz, zoom, focus."""
        return (
            self.tx, self.ty, self.tz,
            self.rx, self.ry, self.rz,
            self.zoom, self.focus,
        )


def sign_extend_24(b0: int, b1: int, b2: int) -> int:
    """
    Sign-extend a big-endian 24-bit field.
    
    The three bytes fill the top of a 32-bit word, the word is read as
    signed, and an arithmetic shift right by 8 drops the empty low byte.
    """
    word = (b0 << 24) | (b1 << 16) | (b2 << 8)
    if word & 0x80000000:
        word -= 1 << 32
    return word >> 8


def _field(frame: bytes, offset: int) -> int:
    return sign_extend_24(frame[offset], frame[offset + 1], frame[offset + 2])


def decode_sample(frame: bytes) -> Sample:
    """
    Decode a validated frame.
    
    Args:
        frame: A FRAME_SIZE buffer that passed is_valid_frame
        
    Returns:
        Decoded Sample
        
    Raises:
        ValueError: If frame has the wrong length
    """
    if len(frame) != FRAME_SIZE:
        raise ValueError(f"frame must be {FRAME_SIZE} bytes, got {len(frame)}")
    
    return Sample(
        rx=_field(frame, RX_OFFSET) / ROTATION_SCALE,
        ry=_field(frame, RY_OFFSET) / ROTATION_SCALE,
        rz=_field(frame, RZ_OFFSET) / ROTATION_SCALE,
        tx=_field(frame, TX_OFFSET) / TRANSLATION_SCALE,
        ty=_field(frame, TY_OFFSET) / TRANSLATION_SCALE,
        tz=_field(frame, TZ_OFFSET) / TRANSLATION_SCALE,
        zoom=_field(frame, ZOOM_OFFSET),
        focus=_field(frame, FOCUS_OFFSET),
    )
