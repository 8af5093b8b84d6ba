"""Poll the API description and regenerate when it changes.

:class:`ChangeDetectionScheduler` drives one sequential loop::

    FETCHING -> COMPARING -> [REGENERATING] -> WAITING -> FETCHING -> ...

* **Fetching** -- ask the :class:`~tasc.watch.source.SpecSource` for the
  current description. A failed fetch is logged and treated as a change
  with no fresh bytes, so the regenerator runs against the copy already on
  disk.
* **Comparing** -- load the :class:`~tasc.models.CacheRecord`. If there is
  none, or its hash differs, the new record is persisted *before*
  regenerating; a crash mid-regeneration therefore does not cause a second
  regeneration of the same description on restart. A shutdown requested
  while fetching skips this step, so a record is only ever persisted when
  a regeneration follows.
* **Regenerating** -- save the fresh bytes to ``doc_file`` and await the
  :class:`~tasc.watch.regenerator.Regenerator`. Failures are logged and the
  loop carries on.
* **Waiting** -- sleep for the poll interval. The sleep starts only after
  regeneration completes, so runs never overlap, and it ends early when
  shutdown is requested.

All mutable loop state lives in one :class:`SchedulerContext`.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from tasc.cache.record import CacheStore, FileCacheStore
from tasc.exceptions import GenerationError, RegeneratorError, SpecFetchError
from tasc.generator.writer import write_spec
from tasc.models import CacheRecord, FetchedSpec, TascConfig, now_ms
from tasc.paths import get_resolved_paths
from tasc.watch.regenerator import (
    PipelineRegenerator,
    RegenerationOutcome,
    Regenerator,
    SubprocessRegenerator,
)
from tasc.watch.source import HttpSpecSource, SpecSource

logger = logging.getLogger(__name__)

DEFAULT_SHUTDOWN_GRACE = 5.0
"""Seconds a regeneration gets to stop after a graceful cancel."""

HISTORY_LIMIT = 100


class SchedulerState(str, enum.Enum):
    """Phase the scheduler loop is in."""

    IDLE = "idle"
    FETCHING = "fetching"
    COMPARING = "comparing"
    REGENERATING = "regenerating"
    WAITING = "waiting"
    SHUTTING_DOWN = "shutting_down"


@dataclass
class CycleReport:
    """What happened during one cycle."""

    cycle: int
    started_at: int
    changed: bool = False
    regenerated: bool = False
    outcome: Optional[RegenerationOutcome] = None
    fetch_error: Optional[str] = None
    finished_at: Optional[int] = None

    @property
    def duration_ms(self) -> Optional[int]:
        if self.finished_at is None:
            return None
        return self.finished_at - self.started_at


@dataclass
class SchedulerContext:
    """Mutable state owned by the scheduler loop."""

    state: SchedulerState = SchedulerState.IDLE
    cycle: int = 0
    active_regenerator: Optional[Regenerator] = None
    shutdown: asyncio.Event = field(default_factory=asyncio.Event)
    last_record: Optional[CacheRecord] = None
    history: list[CycleReport] = field(default_factory=list)


class ChangeDetectionScheduler:
    """Sequential poll-compare-regenerate loop.

    Args:
        source: Provides the current API description.
        cache: Persists the last acted-on digest.
        regenerator: Run when the description changed.
        interval: Seconds to wait between the end of one cycle and the
            start of the next.
        doc_file: Where fresh description bytes are saved before
            regenerating. ``None`` skips saving.
        shutdown_grace: Seconds between the graceful and the forced cancel
            of a running regeneration during shutdown.
        max_cycles: Stop after this many cycles (``None`` runs until
            shutdown).

    Example::

        scheduler = build_scheduler(load_config())
        loop.add_signal_handler(signal.SIGINT, scheduler.request_shutdown)
        await scheduler.run()
    """

    def __init__(
        self,
        source: SpecSource,
        cache: CacheStore,
        regenerator: Regenerator,
        *,
        interval: float,
        doc_file: Optional[Path] = None,
        shutdown_grace: float = DEFAULT_SHUTDOWN_GRACE,
        max_cycles: Optional[int] = None,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.source = source
        self.cache = cache
        self.regenerator = regenerator
        self.interval = interval
        self.doc_file = doc_file
        self.shutdown_grace = shutdown_grace
        self.max_cycles = max_cycles
        self.context = SchedulerContext()
        self._force_cancel_handle: Optional[asyncio.TimerHandle] = None

    @property
    def shutdown_requested(self) -> bool:
        return self.context.shutdown.is_set()

    # ------------------------------------------------------------------ #
    # Loop
    # ------------------------------------------------------------------ #

    async def run(self) -> int:
        """Run cycles until shutdown or ``max_cycles``.

        Returns:
            The number of completed cycles.
        """
        completed = 0
        logger.info(
            "Watching %s every %gs", getattr(self.source, "url", self.source), self.interval
        )
        while not self.shutdown_requested:
            await self.run_cycle()
            completed += 1
            if self.max_cycles is not None and completed >= self.max_cycles:
                break
            if self.shutdown_requested:
                break
            await self._wait()

        if self.shutdown_requested:
            self.context.state = SchedulerState.SHUTTING_DOWN
            logger.info("Watcher stopped after %d cycle(s)", completed)
        else:
            self.context.state = SchedulerState.IDLE
        return completed

    async def run_cycle(self) -> CycleReport:
        """Run exactly one fetch-compare-regenerate cycle."""
        ctx = self.context
        ctx.cycle += 1
        cycle = ctx.cycle
        report = CycleReport(cycle=cycle, started_at=now_ms())
        logger.info("[cycle %d] Checking for API changes...", cycle)

        ctx.state = SchedulerState.FETCHING
        fetched: Optional[FetchedSpec] = None
        try:
            fetched = await self.source.fetch()
        except SpecFetchError as exc:
            report.fetch_error = str(exc)
            logger.error("[cycle %d] %s; will regenerate from the saved copy", cycle, exc)

        if self.shutdown_requested:
            # nothing persisted yet, so the next start compares this description again
            logger.info("[cycle %d] Shutdown requested; discarding fetch result", cycle)
        elif fetched is None:
            report.changed = True
        else:
            ctx.state = SchedulerState.COMPARING
            report.changed = self._compare_and_persist(cycle, fetched)

        if report.changed:
            ctx.state = SchedulerState.REGENERATING
            report.outcome = await self._regenerate(cycle, fetched)
            report.regenerated = True

        report.finished_at = now_ms()
        logger.info(
            "[cycle %d] Done in %dms (%s)",
            cycle,
            report.duration_ms,
            report.outcome.value if report.outcome else "skipped",
        )
        ctx.history.append(report)
        del ctx.history[:-HISTORY_LIMIT]
        if not self.shutdown_requested:
            ctx.state = SchedulerState.IDLE
        return report

    def _compare_and_persist(self, cycle: int, fetched: FetchedSpec) -> bool:
        record = self.cache.load()
        self.context.last_record = record

        if record is None:
            logger.info("[cycle %d] No cache found, will generate", cycle)
        elif record.hash != fetched.hash:
            logger.info("[cycle %d] API changes detected, will regenerate", cycle)
        else:
            logger.info("[cycle %d] No API changes detected, skipping generation", cycle)
            return False

        new_record = fetched.to_record()
        try:
            self.cache.save(new_record)
        except OSError as exc:
            logger.warning("[cycle %d] Failed to save cache: %s", cycle, exc)
        self.context.last_record = new_record
        return True

    async def _regenerate(
        self, cycle: int, fetched: Optional[FetchedSpec]
    ) -> RegenerationOutcome:
        if fetched is not None and self.doc_file is not None:
            try:
                write_spec(self.doc_file, fetched.content)
                logger.info("[cycle %d] Wrote %s (%d bytes)", cycle, self.doc_file, len(fetched.content))
            except GenerationError as exc:
                logger.error("[cycle %d] %s", cycle, exc)
        elif fetched is None:
            logger.warning("[cycle %d] Proceeding without a fresh API description", cycle)

        ctx = self.context
        ctx.active_regenerator = self.regenerator
        try:
            outcome = await self.regenerator.run()
        except RegeneratorError as exc:
            logger.error("[cycle %d] %s", cycle, exc)
            outcome = RegenerationOutcome.FAILED
        finally:
            ctx.active_regenerator = None
            if self._force_cancel_handle is not None:
                self._force_cancel_handle.cancel()
                self._force_cancel_handle = None

        if outcome is RegenerationOutcome.FAILED:
            logger.error("[cycle %d] Regeneration failed; will retry on the next change", cycle)
        elif outcome is RegenerationOutcome.CANCELLED:
            logger.warning("[cycle %d] Regeneration cancelled", cycle)
        return outcome

    async def _wait(self) -> None:
        self.context.state = SchedulerState.WAITING
        logger.debug("Waiting %gs until next check", self.interval)
        try:
            await asyncio.wait_for(self.context.shutdown.wait(), timeout=self.interval)
        except asyncio.TimeoutError:
            pass

    # ------------------------------------------------------------------ #
    # Shutdown
    # ------------------------------------------------------------------ #

    def request_shutdown(self) -> None:
        """Stop the loop; cancel a running regeneration.

        The first call cancels gracefully and schedules a forced cancel after
        :attr:`shutdown_grace` seconds. A second call forces it immediately.
        Must be called from the event loop thread (e.g. a signal handler
        installed with :meth:`asyncio.loop.add_signal_handler`).
        """
        ctx = self.context
        active = ctx.active_regenerator

        if ctx.shutdown.is_set():
            if active is not None:
                active.cancel(graceful=False)
            return

        logger.info("Shutting down...")
        ctx.shutdown.set()
        ctx.state = SchedulerState.SHUTTING_DOWN
        if active is not None:
            active.cancel(graceful=True)
            loop = asyncio.get_running_loop()
            self._force_cancel_handle = loop.call_later(self.shutdown_grace, self._force_cancel)

    def _force_cancel(self) -> None:
        self._force_cancel_handle = None
        active = self.context.active_regenerator
        if active is not None:
            logger.warning("Regeneration did not stop within %gs; forcing", self.shutdown_grace)
            active.cancel(graceful=False)


def build_scheduler(
    config: TascConfig,
    *,
    cwd: Optional[Path] = None,
    interval: Optional[float] = None,
    max_cycles: Optional[int] = None,
) -> ChangeDetectionScheduler:
    """Wire a scheduler from the project configuration.

    Args:
        config: The project configuration.
        cwd: Directory relative paths are resolved from.
        interval: Override for ``poll_interval_ms``, in seconds.
        max_cycles: Stop after this many cycles.
    """
    paths = get_resolved_paths(config, cwd)
    regenerator: Regenerator
    if config.regenerate_command:
        regenerator = SubprocessRegenerator(config.regenerate_command, cwd=cwd)
    else:
        regenerator = PipelineRegenerator(config, cwd=cwd)

    return ChangeDetectionScheduler(
        HttpSpecSource(config.api_doc_url, timeout=config.fetch_timeout_seconds),
        FileCacheStore(paths.cache_file),
        regenerator,
        interval=interval if interval is not None else config.poll_interval_ms / 1000,
        doc_file=paths.doc_file,
        max_cycles=max_cycles,
    )
