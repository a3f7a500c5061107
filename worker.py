"""
Recipe Share Maintenance Worker
Periodically purges expired guest chats and reconciles derived counters

Usage:
    python -m worker          # loop every EXPIRY_SWEEP_INTERVAL_SECONDS
    python -m worker --once   # single pass
"""

import argparse
import signal
import sys
import time

import structlog

from core.config import settings
from core.database import close_db, get_db_session, init_db
from core.logging import configure_logging
from services.maintenance_service import run_maintenance

logger = structlog.get_logger()

_running = True


def _stop(signum, frame):
    global _running
    _running = False
    logger.info("Worker stopping", signal=signum)


def run_once() -> bool:
    """One maintenance pass; returns False when the pass failed"""
    try:
        with get_db_session() as db:
            run_maintenance(db)
        return True
    except Exception as e:
        # Rows left behind are picked up by the next pass
        logger.exception("Maintenance pass failed", error=str(e), error_type=type(e).__name__)
        return False


def run_forever(interval: int) -> None:
    logger.info("Worker started", interval_seconds=interval)
    while _running:
        started = time.monotonic()
        run_once()

        # Sleep in short steps so a stop signal is honoured promptly
        deadline = started + interval
        while _running and time.monotonic() < deadline:
            time.sleep(min(1.0, max(0.0, deadline - time.monotonic())))
    logger.info("Worker stopped")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Recipe Share maintenance worker")
    parser.add_argument("--once", action="store_true", help="run a single pass and exit")
    parser.add_argument(
        "--interval",
        type=int,
        default=settings.EXPIRY_SWEEP_INTERVAL_SECONDS,
        help="seconds between passes",
    )
    args = parser.parse_args(argv)

    configure_logging()
    init_db()

    signal.signal(signal.SIGTERM, _stop)
    signal.signal(signal.SIGINT, _stop)

    try:
        if args.once:
            return 0 if run_once() else 1
        run_forever(args.interval)
        return 0
    finally:
        close_db()


if __name__ == "__main__":
    sys.exit(main())
