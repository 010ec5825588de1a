"""
Serial Device
=============

Opens the tracking device's serial port with the FreeD line parameters.
"""

import logging
from typing import Optional, Protocol

import serial


logger = logging.getLogger(__name__)


DEFAULT_BAUDRATE = 38400


class ByteSource(Protocol):
    """
    What the read loop needs from a device handle.

    A source with a non-None ``timeout`` attribute (pyserial ports) may
    return b"" when a read times out; the loop keeps reading. For any
    other source, b"" means end of stream and triggers a reconnect.
    Errors are raised, as pyserial does with SerialException.
    """

    timeout: Optional[float]

    def read(self, size: int = 1) -> bytes: ...
    
    def close(self) -> None: ...


_PARITIES = {
    "N": serial.PARITY_NONE,
    "E": serial.PARITY_EVEN,
    "O": serial.PARITY_ODD,
    "M": serial.PARITY_MARK,
    "S": serial.PARITY_SPACE,
}

_STOPBITS = {
    1: serial.STOPBITS_ONE,
    1.5: serial.STOPBITS_ONE_POINT_FIVE,
    2: serial.STOPBITS_TWO,
}


def open_serial_device(
    device: str,
    baudrate: int = DEFAULT_BAUDRATE,
    parity: str = "O",
    stopbits: float = 1,
    bytesize: int = 8,
    read_timeout: float = 0.5,
) -> serial.Serial:
    """
    Open the device port.
    
    Args:
        device: Port path, e.g. /dev/ttyUSB_Serial
        baudrate: Line speed
        parity: One of N, E, O, M, S
        stopbits: 1, 1.5 or 2
        bytesize: Data bits per character
        read_timeout: Seconds a read may block; an empty read is a timeout
        
    Returns:
        Open pyserial port
        
    Raises:
        serial.SerialException: If the port cannot be opened
        ValueError: On unknown parity or stop bits
    """
    try:
        parity_value = _PARITIES[parity.upper()]
        stopbits_value = _STOPBITS[stopbits]
    except KeyError as e:
        raise ValueError(f"Unsupported serial setting: {e}") from e
    
    port = serial.Serial(
        port=device,
        baudrate=baudrate,
        bytesize=bytesize,
        parity=parity_value,
        stopbits=stopbits_value,
        timeout=read_timeout,
    )
    logger.info(f"Opened {device} at {baudrate} baud ({bytesize}{parity.upper()}{stopbits})")
    return port
