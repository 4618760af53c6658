# pyright: reportUnknownMemberType=false

import logging
from collections.abc import Callable
from functools import partial
from typing import final

from PySide6.QtCore import QObject, QTimer, Signal

from linernotes.core.models import TrackSnapshot
from linernotes.core.tasks import TaskRunner


DEFAULT_POLL_INTERVAL_MS = 3000

log = logging.getLogger(__name__)


@final
class TrackPoller(QObject):
    """
    Periodically asks the track source what is playing and republishes the answer.

    At most one query is outstanding at any time: a tick that fires while the
    previous query has not settled is skipped, not queued.
    """

    snapshot_polled = Signal(object)

    def __init__(self, query: Callable[[], TrackSnapshot | None], runner: TaskRunner, interval_ms: int = DEFAULT_POLL_INTERVAL_MS):
        super().__init__()
        self._query = query
        self._runner = runner
        self._polling = False
        self._active = False
        self._activation = 0
        self._timer = QTimer(self)
        self._timer.setInterval(interval_ms)
        _ = self._timer.timeout.connect(self.poll)

    @property
    def is_polling(self) -> bool:
        """True while a query to the track source is outstanding."""

        return self._polling

    @property
    def is_active(self) -> bool:
        return self._active

    def interval_ms(self) -> int:
        return self._timer.interval()

    def set_interval(self, interval_ms: int):
        log.info(f"Poll interval set to {interval_ms}ms.")
        self._timer.setInterval(interval_ms)

    def start(self):
        """Starts the timer and polls once right away."""

        if self._active:
            return

        self._active = True
        self._activation += 1
        self._timer.start()
        log.info(f"Polling started every {self._timer.interval()}ms.")
        self.poll()

    def stop(self):
        if not self._active:
            return

        self._active = False
        self._timer.stop()
        log.info("Polling stopped.")

    def poll(self):
        """Runs one poll cycle, or does nothing if a query is still in flight."""

        if not self._active or self._polling:
            return

        self._polling = True
        self._runner.submit(self._query, partial(self._on_query_succeeded, self._activation), self._on_query_failed)

    def _on_query_succeeded(self, activation: int, snapshot: TrackSnapshot | None):
        self._polling = False
        # A query submitted before a stop()/start() cycle belongs to the old activation.
        if not self._active or activation != self._activation:
            log.debug("Dropping poll result from a previous activation.")
            return

        self.snapshot_polled.emit(snapshot)

    def _on_query_failed(self, error: BaseException):
        self._polling = False
        log.warning(f"Track source query failed, keeping previous state: {error}")
