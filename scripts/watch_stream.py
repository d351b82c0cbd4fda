#!/usr/bin/env python3
"""
Stream Watch Script
===================

Standalone script to exercise the stream client against a live camera.

This script:
    1. Connects to an MJPEG stream URL
    2. Runs for a configurable duration
    3. Logs ingestion stats every report interval
    4. Reports final summary

Prerequisites:
    - A reachable MJPEG stream (octet-stream or multipart/mixed)
    - Install the package: pip install -e .

Usage:
    python scripts/watch_stream.py --duration 60
    python scripts/watch_stream.py --url http://camera.local/video.mjpg
"""

import argparse
import asyncio
import logging
import os
import sys
import time

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from mjpeg_stream import MjpegStreamClient, StreamSource
from mjpeg_stream.config import load_config, setup_logging


logger = logging.getLogger(__name__)


async def run_watch(
    source: StreamSource,
    duration: int,
    report_interval: int,
) -> dict:
    """
    Watch a stream for a fixed duration.

    Args:
        source: Stream configuration
        duration: Watch duration in seconds
        report_interval: Seconds between progress reports

    Returns:
        Final metrics dict
    """
    logger.info("=" * 60)
    logger.info("MJPEG Stream Watch")
    logger.info("=" * 60)
    logger.info(f"Stream URL: {source.url}")
    logger.info(f"Duration: {duration} seconds")
    logger.info(f"Read chunk size: {source.read_chunk_size}")
    logger.info(f"Buffer capacity: {source.buffer_capacity}")
    logger.info("=" * 60)

    client = MjpegStreamClient(source)

    largest_frame = 0
    error_count = 0

    def on_frame(data: bytes, index: int) -> None:
        nonlocal largest_frame
        largest_frame = max(largest_frame, len(data))

    def on_error(description: str) -> None:
        nonlocal error_count
        error_count += 1

    client.on_frame.subscribe(on_frame)
    client.on_error.subscribe(on_error)
    client.start()

    start_time = time.time()
    last_report_time = start_time

    try:
        while True:
            elapsed = time.time() - start_time

            if elapsed >= duration:
                logger.info(f"Watch duration ({duration}s) reached")
                break

            time_since_report = time.time() - last_report_time
            if time_since_report >= report_interval:
                metrics = client.metrics()

                # frames_received resets on read
                frames = client.frames_received
                received = client.bytes_received
                fps = frames / time_since_report if time_since_report > 0 else 0
                kbps = received / 1024 / time_since_report if time_since_report > 0 else 0

                logger.info("-" * 40)
                logger.info(f"Progress Report (elapsed: {elapsed:.0f}s)")
                logger.info(f"  State: {metrics['state']}")
                logger.info(f"  Frames received: {metrics['total_frames']}")
                logger.info(f"  Current FPS: {fps:.1f}")
                logger.info(f"  Throughput: {kbps:.1f} KiB/s")
                logger.info(f"  Reconnects: {metrics['reconnect_count']}")
                logger.info(f"  Errors: {error_count}")
                logger.info(f"  Buffer resets: {metrics['overflow_resets']}")

                last_report_time = time.time()

            await asyncio.sleep(0.5)

    except KeyboardInterrupt:
        logger.info("Watch interrupted by user")
    finally:
        await client.stop(timeout=5.0)

    total_time = time.time() - start_time
    metrics = client.metrics()
    avg_fps = metrics["total_frames"] / total_time if total_time > 0 else 0

    logger.info("=" * 60)
    logger.info("FINAL SUMMARY")
    logger.info("=" * 60)
    logger.info(f"Total runtime: {total_time:.1f} seconds")
    logger.info(f"Frames received: {metrics['total_frames']}")
    logger.info(f"Average FPS: {avg_fps:.1f}")
    logger.info(f"Largest frame: {largest_frame} bytes")
    logger.info(f"Bytes received: {metrics['total_bytes']}")
    logger.info(f"Reconnections: {metrics['reconnect_count']}")
    logger.info(f"Errors: {error_count}")
    logger.info(f"Boundary: {metrics['boundary'] or 'JPEG marker'}")
    logger.info("=" * 60)

    if metrics["total_frames"] > 0:
        logger.info("Frames received successfully")
    else:
        logger.error("No frames received")

    return {
        "duration": total_time,
        "frames_received": metrics["total_frames"],
        "avg_fps": avg_fps,
        "reconnections": metrics["reconnect_count"],
        "errors": error_count,
    }


def main():
    parser = argparse.ArgumentParser(
        description="Watch an MJPEG stream and report ingestion stats"
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to config.yaml (default: search common locations)",
    )
    parser.add_argument(
        "--url",
        type=str,
        default=None,
        help="HTTP URL of the MJPEG stream (overrides config)",
    )
    parser.add_argument(
        "--duration",
        type=int,
        default=60,
        help="Watch duration in seconds (default: 60)",
    )
    parser.add_argument(
        "--report-interval",
        type=int,
        default=10,
        help="Seconds between progress reports (default: 10)",
    )

    args = parser.parse_args()

    settings = load_config(args.config)
    setup_logging(settings)

    source = settings.stream
    if args.url:
        source = source.model_copy(update={"url": args.url})
    if not source.url:
        parser.error("--url, stream.url in config.yaml or MJPEG_STREAM_URL is required")

    result = asyncio.run(run_watch(
        source=source,
        duration=args.duration,
        report_interval=args.report_interval,
    ))

    sys.exit(0 if result["frames_received"] > 0 else 1)


if __name__ == "__main__":
    main()
