"""
freed-bridge Main Application
=============================

Process entry point: serial FreeD tracking data in, OSC messages out.

Pipeline:
    ConnectionSupervisor (read loop) -> SampleBuffer -> BroadcastDispatcher

Usage:
    freed-bridge --device /dev/ttyUSB_Serial --osc_host 224.0.0.0 --osc_port 7000
    freed-bridge --config config.yaml --debug
"""

import argparse
import asyncio
import logging
import signal
import sys
from typing import List, Optional, Set

from freed_bridge import __version__
from freed_bridge.broadcast import BroadcastDispatcher, create_osc_client
from freed_bridge.config import Settings, load_config, setup_logging
from freed_bridge.observability import RateMeter
from freed_bridge.stream import ConnectionSupervisor, SampleBuffer, open_serial_device


logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="freed-bridge",
        description="Bridge FreeD serial tracking data to OSC",
    )
    parser.add_argument("--config", default=None, help="Path to config.yaml")
    parser.add_argument("--osc_host", default=None, help="OSC network address")
    parser.add_argument("--osc_port", type=int, default=None, help="OSC network port")
    parser.add_argument("--osc_addr", default=None, help="OSC address pattern")
    parser.add_argument("--device", default=None, help="Serial device name")
    parser.add_argument("--debug", action="store_true", help="Log every sent sample")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser.parse_args(argv)


def apply_cli_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    """Return settings with any flags given on the command line applied."""
    data = settings.model_dump()
    if args.osc_host is not None:
        data["osc"]["host"] = args.osc_host
    if args.osc_port is not None:
        data["osc"]["port"] = args.osc_port
    if args.osc_addr is not None:
        data["osc"]["address"] = args.osc_addr
    if args.device is not None:
        data["serial"]["device"] = args.device
    if args.debug:
        data["debug"] = True
    return Settings.model_validate(data)


class Bridge:
    """
    Wires the supervisor and dispatcher from one Settings value.
    """
    
    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.buffer = SampleBuffer(maxsize=settings.dispatch.max_queue_size)
        self.rate_meter = RateMeter()
        self.supervisor = ConnectionSupervisor(
            opener=self._open_device,
            buffer=self.buffer,
            rate_meter=self.rate_meter,
            reconnect_delay_seconds=settings.connection.reconnect_delay_seconds,
        )
        self.dispatcher = BroadcastDispatcher(
            client=create_osc_client(settings.osc.host, settings.osc.port),
            buffer=self.buffer,
            address=settings.osc.address,
            workers=settings.dispatch.workers,
            debug=settings.debug,
        )
    
    def _open_device(self):
        serial_cfg = self.settings.serial
        return open_serial_device(
            serial_cfg.device,
            baudrate=serial_cfg.baudrate,
            parity=serial_cfg.parity,
            stopbits=serial_cfg.stopbits,
            bytesize=serial_cfg.bytesize,
            read_timeout=serial_cfg.read_timeout,
        )
    
    async def run(self) -> None:
        """Run until stop() is called."""
        dispatcher_task = asyncio.create_task(self.dispatcher.run(), name="dispatcher")
        supervisor_task = asyncio.create_task(self.supervisor.run(), name="supervisor")
        try:
            await supervisor_task
        finally:
            await self.dispatcher.stop()
            await dispatcher_task
            logger.info(f"Final metrics: {self.supervisor.metrics.to_dict()} {self.dispatcher.metrics()}")
    
    async def stop(self) -> None:
        await self.supervisor.stop()


async def run_bridge(settings: Settings) -> None:
    bridge = Bridge(settings)
    pending: Set[asyncio.Task] = set()
    
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _on_signal, bridge, sig, pending)
        except NotImplementedError:
            # Windows event loops
            pass
    
    await bridge.run()


def _on_signal(bridge: Bridge, sig: signal.Signals, pending: Set[asyncio.Task]) -> asyncio.Task:
    """Schedule shutdown; the task is held in pending until it finishes."""
    task = asyncio.get_running_loop().create_task(_shutdown(bridge, sig))
    pending.add(task)
    task.add_done_callback(pending.discard)
    return task


async def _shutdown(bridge: Bridge, sig: signal.Signals) -> None:
    logger.info(f"Received {sig.name}, initiating graceful shutdown...")
    await bridge.stop()


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    settings = apply_cli_overrides(load_config(args.config), args)
    setup_logging(settings)
    
    logger.info(f"Starting freed-bridge {__version__}")
    logger.info(
        f"Device {settings.serial.device} -> "
        f"osc://{settings.osc.host}:{settings.osc.port}{settings.osc.address}"
    )
    
    try:
        asyncio.run(run_bridge(settings))
    except KeyboardInterrupt:
        pass
    return 0


if __name__ == "__main__":
    sys.exit(main())
