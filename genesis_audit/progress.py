"""
Progress observers for long audits.

The auditor never touches global console state; callers inject an observer
that is invoked once per processed record. Observers passed to a parallel
audit are called from worker threads and must be thread safe.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Callable, Iterator

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
    TimeRemainingColumn,
)

from .models import RecoveryRecord

ProgressObserver = Callable[[RecoveryRecord], None]


class CountingObserver:
    """Thread-safe counter of processed records."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.count = 0
        self.indices: list[int] = []

    def __call__(self, record: RecoveryRecord) -> None:
        with self._lock:
            self.count += 1
            self.indices.append(record.index)


@contextmanager
def console_progress(
    total: int,
    description: str = "auditing migration",
    console: Console | None = None,
) -> Iterator[ProgressObserver]:
    """Show a progress bar on stderr for the duration of the block."""
    progress = Progress(
        TextColumn("{task.description}"),
        SpinnerColumn(),
        BarColumn(bar_width=25),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        TimeRemainingColumn(),
        console=console or Console(stderr=True),
        transient=True,
    )
    lock = threading.Lock()
    with progress:
        task = progress.add_task(description, total=total)

        def advance(_record: RecoveryRecord) -> None:
            with lock:
                progress.advance(task)

        yield advance


@contextmanager
def console_status(message: str, console: Console | None = None) -> Iterator[None]:
    """Spinner for steps with no natural unit of progress (supply scan)."""
    console = console or Console(stderr=True)
    with console.status(message, spinner="dots"):
        yield
