"""
Test Configuration
==================

Pytest fixtures for freed-bridge.

Helpers that tests need to call with arguments are exposed as factory
fixtures (make_frame, fake_source, fake_osc_client, wait_until).
"""

import asyncio
import os
import threading
import time
from typing import List, Optional, Union

import pytest

from freed_bridge.protocol.frame import FRAME_MARKER, FRAME_SIZE, FRAME_TYPE, pack_int24, seal_frame


def _build_frame(
    ry: int = 0,
    rx: int = 0,
    rz: int = 0,
    tx: int = 0,
    ty: int = 0,
    tz: int = 0,
    zoom: Optional[int] = None,
    focus: int = 0,
    frame_type: int = FRAME_TYPE,
) -> bytes:
    """
    Build a sealed frame from raw 24-bit field values.
    
    zoom is written after tz, so when given it overwrites tz's last byte.
    """
    body = bytearray(FRAME_SIZE - 1)
    body[0] = FRAME_MARKER
    body[1] = frame_type
    for offset, value in ((2, ry), (5, rx), (8, rz), (12, tx), (15, ty), (18, tz)):
        body[offset:offset + 3] = pack_int24(value)
    if zoom is not None:
        body[20:23] = pack_int24(zoom)
    body[23:26] = pack_int24(focus)
    return seal_frame(bytes(body))


class _FakeSource:
    """
    Scripted byte source; items are chunks or exceptions to raise.
    
    With a timeout set, an exhausted source behaves like an idle serial
    port (empty reads). With timeout=None, an empty read is end of stream.
    """
    
    def __init__(
        self,
        items: List[Union[bytes, Exception]],
        timeout: Optional[float] = 0.01,
    ) -> None:
        self.items = list(items)
        self.timeout = timeout
        self.closed = False
        self.reads = 0
    
    def read(self, size: int = 1) -> bytes:
        self.reads += 1
        if self.items:
            item = self.items.pop(0)
            if isinstance(item, Exception):
                raise item
            return item
        time.sleep(self.timeout or 0.01)
        return b""
    
    def close(self) -> None:
        self.closed = True


class _FakeOscClient:
    """Records sent messages; tracks peak concurrent sends."""
    
    def __init__(self, delay: float = 0.0, fail_first: int = 0) -> None:
        self.delay = delay
        self.fail_first = fail_first
        self.messages = []
        self.calls = 0
        self.in_flight = 0
        self.max_in_flight = 0
        self._lock = threading.Lock()
    
    def send(self, content) -> None:
        with self._lock:
            self.calls += 1
            call = self.calls
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                time.sleep(self.delay)
            if call <= self.fail_first:
                raise OSError("network unreachable")
            with self._lock:
                self.messages.append(content)
        finally:
            with self._lock:
                self.in_flight -= 1


async def _wait_until(predicate, timeout: float = 3.0) -> None:
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            pytest.fail("condition not reached in time")
        await asyncio.sleep(0.01)


@pytest.fixture
def make_frame():
    """Factory: make_frame(ry=..., tx=..., zoom=..., frame_type=...) -> bytes."""
    return _build_frame


@pytest.fixture
def fake_source():
    """Factory: fake_source([chunk, exc, ...], timeout=0.01)."""
    return _FakeSource


@pytest.fixture
def fake_osc_client():
    """Factory: fake_osc_client(delay=0.0, fail_first=0)."""
    return _FakeOscClient


@pytest.fixture
def wait_until():
    """Coroutine factory: await wait_until(predicate, timeout=3.0)."""
    return _wait_until


@pytest.fixture
def valid_frame(make_frame) -> bytes:
    """A frame with every field set to a distinct value."""
    return make_frame(
        ry=16384, rx=-16384, rz=8192,
        tx=640, ty=-128, tz=64,
        focus=1234,
    )


@pytest.fixture
def clean_env(monkeypatch):
    """Remove FREED_* variables from the environment."""
    for key in list(os.environ):
        if key.startswith("FREED_"):
            monkeypatch.delenv(key, raising=False)
    return monkeypatch
