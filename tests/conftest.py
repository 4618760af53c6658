"""Shared fixtures: a headless Qt application and task runners tests can settle by hand."""

import os
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PySide6.QtWidgets import QApplication  # noqa: E402

from linernotes.core.models import TrackSnapshot  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def qapp():
    """One QApplication for the whole session; Qt allows only one per process."""
    app = QApplication.instance() or QApplication([])
    yield app


@dataclass
class PendingTask:
    fn: Callable[[], Any]
    on_success: Callable[[Any], None]
    on_failure: Callable[[BaseException], None]
    settled: bool = False

    def run(self):
        """Runs the real callable and reports its outcome."""
        try:
            value = self.fn()
        except Exception as e:
            self.fail(e)
            return
        self.resolve(value)

    def resolve(self, value: Any):
        assert not self.settled, "task settled twice"
        self.settled = True
        self.on_success(value)

    def fail(self, error: BaseException):
        assert not self.settled, "task settled twice"
        self.settled = True
        self.on_failure(error)


class ManualRunner:
    """Records submitted tasks; a test decides when and in which order they settle."""

    def __init__(self):
        self.tasks: list[PendingTask] = []

    def submit(self, fn, on_success, on_failure):
        self.tasks.append(PendingTask(fn, on_success, on_failure))

    @property
    def pending(self) -> list[PendingTask]:
        return [t for t in self.tasks if not t.settled]

    def run_all(self):
        for task in self.pending:
            task.run()


class ImmediateRunner:
    """Runs every task synchronously at submit time."""

    def submit(self, fn, on_success, on_failure):
        PendingTask(fn, on_success, on_failure).run()


@pytest.fixture
def runner() -> ManualRunner:
    return ManualRunner()


@pytest.fixture
def nightcall() -> TrackSnapshot:
    return TrackSnapshot(title="Nightcall", artist="Kavinsky", album="OutRun", is_playing=True)


@pytest.fixture
def genesis() -> TrackSnapshot:
    return TrackSnapshot(title="Genesis", artist="Grimes", album="Art Angels", is_playing=True)
