"""Watch command -- regenerate whenever the API description changes.

Implements ``tasc watch``: builds a
:class:`~tasc.watch.scheduler.ChangeDetectionScheduler` from the project
config and runs it on an asyncio loop until SIGINT/SIGTERM. The first
signal stops the loop after the current phase and asks a running
regeneration to stop; a second one forces it.
"""

from __future__ import annotations

import asyncio
import signal
from typing import TYPE_CHECKING, Optional

import typer

from tasc.output import configure_logging, error, info, success

if TYPE_CHECKING:
    from tasc.watch.scheduler import ChangeDetectionScheduler


def watch_command(
    once: bool = typer.Option(
        False, "--once", help="Run a single check-and-regenerate cycle, then exit."
    ),
    interval: Optional[int] = typer.Option(
        None,
        "--interval",
        "-i",
        min=1,
        help="Poll interval in milliseconds (overrides poll_interval_ms).",
    ),
) -> None:
    """Poll the API description and regenerate on changes.

    Example::

        tasc watch
        tasc watch --interval 2000
        tasc watch --once
    """
    from tasc.config import load_config
    from tasc.exceptions import TascError
    from tasc.watch import build_scheduler

    configure_logging()
    try:
        config = load_config()
    except TascError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code)

    interval_ms = interval if interval is not None else config.poll_interval_ms
    scheduler = build_scheduler(
        config,
        interval=interval_ms / 1000,
        max_cycles=1 if once else None,
    )

    info("Starting API watch mode...")
    info(f"  API URL:       {config.api_doc_url}")
    info(f"  Poll interval: {interval_ms}ms")
    info(f"  Environment:   {config.environment.value}")

    completed = asyncio.run(_run(scheduler))
    success(f"Stopped watching after {completed} cycle(s)")


async def _run(scheduler: ChangeDetectionScheduler) -> int:
    loop = asyncio.get_running_loop()
    installed: list[signal.Signals] = []
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, scheduler.request_shutdown)
            installed.append(sig)
        except (NotImplementedError, RuntimeError):
            # Windows event loops do not support signal handlers
            pass
    try:
        return await scheduler.run()
    finally:
        for sig in installed:
            loop.remove_signal_handler(sig)
