# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

import sys
import threading
from typing import IO, Optional, Protocol

from ..models.results import GenerateSummary


class ProgressReporter(Protocol):
    """Progress sink handed to the orchestrator; calls may come from worker threads."""

    def start(self, total: int) -> None: ...

    def repo_started(self, name: str, started: int, total: int) -> None: ...

    def repo_finished(self, name: str, completed: int, total: int) -> None: ...

    def warn(self, message: str) -> None: ...

    def finish(self, summary: GenerateSummary) -> None: ...


class NullProgress:
    """Discards every event."""

    def start(self, total: int) -> None:
        pass

    def repo_started(self, name: str, started: int, total: int) -> None:
        pass

    def repo_finished(self, name: str, completed: int, total: int) -> None:
        pass

    def warn(self, message: str) -> None:
        pass

    def finish(self, summary: GenerateSummary) -> None:
        pass


class ConsoleProgress:
    """
    Line-oriented progress on a terminal stream (stderr by default).
    """

    __slots__ = ("stream", "_lock")

    def __init__(self, stream: Optional[IO[str]] = None):
        self.stream = stream or sys.stderr
        self._lock = threading.Lock()

    def _emit(self, line: str) -> None:
        with self._lock:
            print(line, file=self.stream, flush=True)

    def start(self, total: int) -> None:
        self._emit(f"Processing 0/{total}...")

    def repo_started(self, name: str, started: int, total: int) -> None:
        self._emit(f"Processing {started}/{total}: {name}")

    def repo_finished(self, name: str, completed: int, total: int) -> None:
        self._emit(f"Completed {completed}/{total}")

    def warn(self, message: str) -> None:
        self._emit(f"Warning: {message}")

    def finish(self, summary: GenerateSummary) -> None:
        self._emit(
            f"Processed {summary.total} repos ({summary.succeeded} succeeded, {summary.failed} failed)."
        )
        for failure in summary.failures:
            self._emit(f"  - {failure.name}: {failure.error}")
