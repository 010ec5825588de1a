"""
freed-bridge
============

Serial FreeD camera-tracking to OSC bridge.

Opens a tracking device on a serial line, locates and validates 29-byte
FreeD D1 frames, decodes rotation, translation, zoom and focus, and
re-emits each sample as an OSC message over UDP.

Components:
    - protocol: Frame synchronization, validation and decoding
    - stream: Serial device, sample buffer and connection supervisor
    - broadcast: OSC dispatch worker pool
    - observability: Frame rate instrumentation

Example:
    from freed_bridge.protocol import FrameSynchronizer, decode_sample
    
    sync = FrameSynchronizer()
    for frame in sync.feed_bytes(raw):
        print(decode_sample(frame))
"""

__version__ = "0.1.0"

__all__ = [
    "__version__",
]
