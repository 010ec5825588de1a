#!/usr/bin/env python3
"""
Capture Replay Script
=====================

Feed a raw byte capture from a tracking device through the framing and
decoding pipeline, without a serial port or network.

This script:
    1. Reads the capture file in chunks
    2. Synchronizes, validates and decodes every frame
    3. Optionally prints each decoded sample
    4. Reports accepted / rejected counts

Capture a file with e.g.:
    cat /dev/ttyUSB_Serial > capture.bin

Usage:
    python scripts/replay_capture.py capture.bin
    python scripts/replay_capture.py capture.bin --print
"""

import argparse
import logging
import os
import sys

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from freed_bridge.protocol import FrameSynchronizer, decode_sample


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%S",
)
logger = logging.getLogger(__name__)


def replay(path: str, print_samples: bool, chunk_size: int) -> dict:
    """
    Replay a capture file.
    
    Returns:
        Dict with bytes, accepted and rejected counts
    """
    synchronizer = FrameSynchronizer()
    total_bytes = 0
    
    with open(path, "rb") as f:
        while chunk := f.read(chunk_size):
            total_bytes += len(chunk)
            for frame in synchronizer.feed_bytes(chunk):
                sample = decode_sample(frame)
                if print_samples:
                    print(
                        "{:.4f} {:.4f} {:.4f} {:.5f} {:.5f} {:.5f} {} {}".format(
                            *sample.as_osc_args()
                        )
                    )
    
    logger.info("=" * 60)
    logger.info("REPLAY SUMMARY")
    logger.info("=" * 60)
    logger.info(f"Bytes read: {total_bytes}")
    logger.info(f"Frames accepted: {synchronizer.accepted}")
    logger.info(f"Frames rejected: {synchronizer.rejected}")
    logger.info("=" * 60)
    
    return {
        "bytes": total_bytes,
        "accepted": synchronizer.accepted,
        "rejected": synchronizer.rejected,
    }


def main():
    parser = argparse.ArgumentParser(
        description="Replay a FreeD byte capture through the decoder"
    )
    parser.add_argument("path", help="Raw capture file")
    parser.add_argument(
        "--print",
        dest="print_samples",
        action="store_true",
        help="Print each sample as tx ty tz rx ry rz zoom focus",
    )
    parser.add_argument(
        "--chunk-size",
        type=int,
        default=4096,
        help="Bytes per read (default: 4096)",
    )
    
    args = parser.parse_args()
    
    result = replay(args.path, args.print_samples, args.chunk_size)
    
    sys.exit(0 if result["accepted"] > 0 else 1)


if __name__ == "__main__":
    main()
