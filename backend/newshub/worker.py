"""
Command line entry point for running ingestion outside the web app.

    python -m newshub.worker run            # scheduler in the foreground
    python -m newshub.worker ingest         # one ingestion pass, then exit
    python -m newshub.worker cleanup --days 30
    python -m newshub.worker seed
"""

import argparse
import asyncio
import logging
import signal
import sys
from typing import List, Optional

from newshub.core.config import settings
from newshub.core.database import Base, SessionLocal, engine
from newshub.core.logging_config import setup_logging
from newshub.seeds import seed_publications
from newshub.services.article_cleanup import ArticleCleanupService
from newshub.services.feed_ingestion import FeedIngestionService
from newshub.services.scheduler import FeedScheduler
import newshub.models  # noqa: F401  (register tables on Base.metadata)

logger = logging.getLogger(__name__)


async def run_scheduler() -> None:
    """Start the scheduler and block until SIGINT or SIGTERM."""
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop.set)
        except NotImplementedError:
            # Windows event loops have no signal handler support
            signal.signal(sig, lambda *_: loop.call_soon_threadsafe(stop.set))

    feed_scheduler = FeedScheduler()
    feed_scheduler.start()
    logger.info("Worker running, waiting for shutdown signal")
    try:
        await stop.wait()
    finally:
        feed_scheduler.shutdown()
        logger.info("Worker stopped")


async def ingest_once() -> int:
    db = SessionLocal()
    try:
        stats = await FeedIngestionService(db).ingest_all()
    finally:
        db.close()

    for result in stats.results:
        if not result.success:
            logger.warning(f"{result.publication}: {result.error}")
    return 0


def cleanup(days: Optional[int]) -> int:
    db = SessionLocal()
    try:
        result = ArticleCleanupService(db).cleanup_old_articles(days)
    finally:
        db.close()
    logger.info(f"Deleted {result.deleted_articles} articles older than {result.cutoff_date}")
    return 0


def seed() -> int:
    db = SessionLocal()
    try:
        created = seed_publications(db)
    finally:
        db.close()
    logger.info(f"Seeding completed: {created} publications created")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="newshub.worker", description="NewsHub feed ingestion worker"
    )
    parser.add_argument(
        "--log-level", default=None, help=f"Override LOG_LEVEL (default: {settings.LOG_LEVEL})"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("run", help="Run the ingestion scheduler until interrupted")
    subparsers.add_parser("ingest", help="Ingest all active publications once")

    cleanup_parser = subparsers.add_parser("cleanup", help="Delete old unsaved articles")
    cleanup_parser.add_argument(
        "--days",
        type=int,
        default=None,
        help=f"Retention window in days (default: {settings.RETENTION_DAYS})",
    )

    subparsers.add_parser("seed", help="Insert the default publication list")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(level=args.log_level)

    if args.command == "cleanup" and args.days is not None and args.days < 1:
        logger.error("--days must be positive")
        return 2

    Base.metadata.create_all(bind=engine)

    try:
        if args.command == "run":
            asyncio.run(run_scheduler())
            return 0
        if args.command == "ingest":
            return asyncio.run(ingest_once())
        if args.command == "cleanup":
            return cleanup(args.days)
        if args.command == "seed":
            return seed()
    except Exception:
        logger.exception(f"Worker command '{args.command}' failed")
        return 1
    return 2


if __name__ == "__main__":
    sys.exit(main())
