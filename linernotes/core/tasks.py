# pyright: reportUnknownMemberType=false, reportAny=false

import logging
from collections.abc import Callable
from typing import Any, Protocol, final, override

from PySide6.QtCore import QObject, QRunnable, QThreadPool, Signal, Slot


log = logging.getLogger(__name__)

SuccessCallback = Callable[[Any], None]
FailureCallback = Callable[[BaseException], None]


class TaskRunner(Protocol):
    """
    Runs a blocking callable off the control thread and reports back on it.
    Exactly one of the two callbacks is invoked, on the thread that owns the runner.
    """

    def submit(self, fn: Callable[[], Any], on_success: SuccessCallback, on_failure: FailureCallback) -> None: ...


@final
class _Task(QRunnable):
    def __init__(self, runner: "ThreadPoolRunner", fn: Callable[[], Any], on_success: SuccessCallback, on_failure: FailureCallback):
        super().__init__()
        self._runner = runner
        self._fn = fn
        self._on_success = on_success
        self._on_failure = on_failure

    @override
    def run(self):
        try:
            value = self._fn()
        except Exception as e:
            self._runner.task_settled.emit(self._on_failure, e)
            return
        self._runner.task_settled.emit(self._on_success, value)


@final
class ThreadPoolRunner(QObject):
    """
    Executes tasks on a QThreadPool. Results are marshalled back through a queued
    signal, so callbacks always run on the thread this runner lives in.
    """

    task_settled = Signal(object, object)

    def __init__(self, pool: QThreadPool | None = None):
        super().__init__()
        self._pool = pool or QThreadPool.globalInstance()
        _ = self.task_settled.connect(self._deliver)

    def submit(self, fn: Callable[[], Any], on_success: SuccessCallback, on_failure: FailureCallback) -> None:
        self._pool.start(_Task(self, fn, on_success, on_failure))

    @Slot(object, object)  # pyright: ignore[reportArgumentType]
    def _deliver(self, callback: Callable[[Any], None], value: Any):
        try:
            callback(value)
        except Exception:
            log.exception("Task callback raised.")

    def wait_for_done(self, timeout_ms: int = -1) -> bool:
        """Blocks until every queued task has finished running."""

        return self._pool.waitForDone(timeout_ms)
