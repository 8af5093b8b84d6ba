"""Change detection for ``tasc watch``.

Sub-modules:

* :mod:`~tasc.watch.scheduler` -- the poll-compare-regenerate loop.
* :mod:`~tasc.watch.source` -- fetching the API description.
* :mod:`~tasc.watch.regenerator` -- in-process and child-process regeneration.
"""

from tasc.watch.regenerator import (
    PipelineRegenerator,
    RegenerationOutcome,
    Regenerator,
    SubprocessRegenerator,
)
from tasc.watch.scheduler import (
    ChangeDetectionScheduler,
    CycleReport,
    SchedulerContext,
    SchedulerState,
    build_scheduler,
)
from tasc.watch.source import HttpSpecSource, SpecSource

__all__ = [
    "ChangeDetectionScheduler",
    "CycleReport",
    "HttpSpecSource",
    "PipelineRegenerator",
    "RegenerationOutcome",
    "Regenerator",
    "SchedulerContext",
    "SchedulerState",
    "SpecSource",
    "SubprocessRegenerator",
    "build_scheduler",
]
