"""
Entry point: load config once, then run the monitor until terminated.
"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging
import signal
import sys
from pathlib import Path
from typing import Optional, Sequence

from .config import ConfigError, Settings, load_settings
from .monitor import MonitorService
from .notifier import TelegramNotifier
from .status import StatusFetcher
from .utils import setup_logging


logger = logging.getLogger(__name__)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="player-watch",
        description="Notify a Telegram chat when a game server's player count changes.",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=None,
        help="Path to the TOML config file (default: $PLAYER_WATCH_CONFIG or ./config.toml)",
    )
    return parser.parse_args(argv)


async def _run(settings: Settings) -> None:
    fetcher = StatusFetcher(
        settings.monitor.status_api_base,
        timeout=settings.monitor.request_timeout,
    )
    notifier = TelegramNotifier(settings.telegram, timeout=settings.monitor.request_timeout)
    monitor = MonitorService(
        fetcher=fetcher,
        notifier=notifier,
        address=settings.server.address,
        poll_interval=settings.monitor.poll_interval,
    )
    # SIGTERM останавливает цикл так же, как Ctrl+C
    task = asyncio.current_task()
    if task is not None:
        with contextlib.suppress(NotImplementedError):
            asyncio.get_running_loop().add_signal_handler(signal.SIGTERM, task.cancel)

    try:
        await monitor.run()
    finally:
        await fetcher.close()
        await notifier.close()


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point for running the monitor."""
    args = parse_args(argv)
    try:
        settings = load_settings(args.config)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    setup_logging(settings.logging)
    try:
        asyncio.run(_run(settings))
    except (KeyboardInterrupt, asyncio.CancelledError):
        logger.info("Interrupted, shutting down")
    return 0


if __name__ == "__main__":
    sys.exit(main())
