"""Regeneration strategies the watcher can run after a change.

Two implementations of :class:`Regenerator` are provided:

* :class:`PipelineRegenerator` -- runs
  :func:`~tasc.generator.pipeline.run_generation` in a worker thread, reading
  the description the watcher just saved. This is the default.
* :class:`SubprocessRegenerator` -- runs a configured command
  (``regenerate_command`` in ``tasc.json``) as a child process and streams
  its output into the log: stdout lines at INFO, stderr lines at ERROR.

Both report a :class:`RegenerationOutcome` and accept a graceful or forced
:meth:`~Regenerator.cancel` from the scheduler during shutdown.
"""

from __future__ import annotations

import asyncio
import enum
import logging
import os
from pathlib import Path
from typing import Mapping, Optional, Protocol, Sequence

from tasc.exceptions import RegeneratorError, TascError
from tasc.generator.pipeline import run_generation
from tasc.models import TascConfig

logger = logging.getLogger(__name__)

READ_CHUNK = 64 * 1024
MAX_LOGGED_LINE = 1024 * 1024
"""Longest child output line logged as one record, in bytes."""


class RegenerationOutcome(str, enum.Enum):
    """How a regeneration ended."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"


class Regenerator(Protocol):
    """A regeneration step the scheduler awaits."""

    async def run(self) -> RegenerationOutcome:
        """Run to completion.

        Raises:
            RegeneratorError: If the step cannot be started or fails.
        """
        ...

    def cancel(self, graceful: bool = True) -> None:
        """Ask a running step to stop; ``graceful=False`` stops it forcibly."""
        ...


class SubprocessRegenerator:
    """Run *command* as a child process.

    A non-zero exit code is reported as :attr:`RegenerationOutcome.FAILED`;
    a process that exits after :meth:`cancel` is
    :attr:`RegenerationOutcome.CANCELLED`.

    Args:
        command: Program and arguments, e.g. ``["make", "client"]``.
        cwd: Working directory of the child (default: inherit).
        env: Extra environment variables layered over ``os.environ``.
    """

    def __init__(
        self,
        command: Sequence[str],
        cwd: Optional[Path] = None,
        env: Optional[Mapping[str, str]] = None,
    ) -> None:
        if not command:
            raise RegeneratorError("regenerate_command must name a program")
        self.command = list(command)
        self.cwd = cwd
        self.env = dict(env or {})
        self._process: Optional[asyncio.subprocess.Process] = None
        self._cancelled = False

    @property
    def running(self) -> bool:
        """Whether a child process is currently active."""
        return self._process is not None

    async def run(self) -> RegenerationOutcome:
        self._cancelled = False
        logger.info("Running %s", " ".join(self.command))
        try:
            process = await asyncio.create_subprocess_exec(
                *self.command,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=self.cwd,
                env={**os.environ, **self.env},
            )
        except OSError as exc:
            raise RegeneratorError(f"Cannot start {self.command[0]}: {exc}") from exc

        self._process = process
        try:
            await asyncio.gather(
                _stream_lines(process.stdout, logging.INFO),
                _stream_lines(process.stderr, logging.ERROR),
            )
            returncode = await process.wait()
        except (OSError, ValueError) as exc:
            raise RegeneratorError(
                f"Lost output of {self.command[0]} (pid {process.pid}): {exc}"
            ) from exc
        finally:
            self._process = None
            if process.returncode is None:
                _kill_quietly(process)
                await process.wait()

        if self._cancelled:
            logger.warning("%s stopped (exit code %s)", self.command[0], returncode)
            return RegenerationOutcome.CANCELLED
        if returncode != 0:
            logger.error("%s exited with code %d", self.command[0], returncode)
            return RegenerationOutcome.FAILED
        return RegenerationOutcome.SUCCEEDED

    def cancel(self, graceful: bool = True) -> None:
        process = self._process
        if process is None:
            return
        self._cancelled = True
        try:
            if graceful:
                logger.info("Sending SIGTERM to %s (pid %d)", self.command[0], process.pid)
                process.terminate()
            else:
                logger.warning("Sending SIGKILL to %s (pid %d)", self.command[0], process.pid)
                process.kill()
        except ProcessLookupError:
            # already exited; run() will collect the status
            pass


def _kill_quietly(process: asyncio.subprocess.Process) -> None:
    try:
        process.kill()
    except ProcessLookupError:
        pass


async def _stream_lines(stream: Optional[asyncio.StreamReader], level: int) -> None:
    """Log *stream* line by line until EOF.

    Reads fixed-size chunks rather than iterating the reader, which fails
    on lines longer than its buffer limit. A line that grows past
    :data:`MAX_LOGGED_LINE` is logged in pieces.
    """
    if stream is None:
        return
    pending = b""
    while True:
        chunk = await stream.read(READ_CHUNK)
        if not chunk:
            break
        pending += chunk
        *lines, pending = pending.split(b"\n")
        for raw in lines:
            _log_line(raw, level)
        while len(pending) > MAX_LOGGED_LINE:
            _log_line(pending[:MAX_LOGGED_LINE], level)
            pending = pending[MAX_LOGGED_LINE:]
    _log_line(pending, level)


def _log_line(raw: bytes, level: int) -> None:
    line = raw.decode("utf-8", errors="replace").rstrip()
    if line.strip():
        logger.log(level, line)


class PipelineRegenerator:
    """Regenerate in-process from the saved API description.

    The work runs in a worker thread so the event loop stays responsive to
    shutdown signals. A thread cannot be interrupted, so :meth:`cancel` only
    marks the run; it finishes its (atomic) file writes and is then reported
    as cancelled.

    Args:
        config: Project configuration passed to ``run_generation``.
        cwd: Directory output paths are resolved from.
    """

    def __init__(self, config: TascConfig, cwd: Optional[Path] = None) -> None:
        self.config = config
        self.cwd = cwd
        self._cancelled = False

    async def run(self) -> RegenerationOutcome:
        self._cancelled = False
        try:
            result = await asyncio.to_thread(
                run_generation, self.config, from_file=True, cwd=self.cwd
            )
        except TascError as exc:
            raise RegeneratorError(f"Generation failed: {exc}") from exc

        if self._cancelled:
            return RegenerationOutcome.CANCELLED
        logger.info(
            "Regenerated %d operations (%d files updated)",
            result.operation_count,
            len(result.written),
        )
        return RegenerationOutcome.SUCCEEDED

    def cancel(self, graceful: bool = True) -> None:
        self._cancelled = True
