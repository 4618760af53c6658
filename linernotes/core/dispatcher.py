# pyright: reportAny=false

import logging
from collections.abc import Callable
from typing import Any, final

from PySide6.QtCore import QObject, Signal, Slot

from linernotes.core.models import EnrichmentKind, EnrichmentResult, EnrichmentState, TrackIdentity, TrackSnapshot
from linernotes.core.tasks import TaskRunner


log = logging.getLogger(__name__)

EnrichmentFetch = Callable[[TrackSnapshot], Any]


@final
class EnrichmentDispatcher(QObject):
    """
    Issues one enrichment lookup per track identity and decides which answers
    are allowed to reach the display.

    Every identity change allocates a new generation. A lookup carries the
    generation it was issued under and is committed only if that generation is
    still the current one; anything older is dropped on arrival. In-flight
    lookups are never aborted.
    """

    result_changed = Signal(object)

    def __init__(self, kind: EnrichmentKind, fetch: EnrichmentFetch, runner: TaskRunner):
        super().__init__()
        self.kind = kind
        self._fetch = fetch
        self._runner = runner
        self._generation = 0
        self._identity: TrackIdentity | None = None
        self._result = EnrichmentResult(generation=0, payload=None, state=EnrichmentState.IDLE)

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def result(self) -> EnrichmentResult:
        return self._result

    @Slot(object, object)  # pyright: ignore[reportArgumentType]
    def on_identity(self, identity: TrackIdentity | None, snapshot: TrackSnapshot | None):
        if identity == self._identity:
            return

        self._identity = identity
        self._generation += 1
        generation = self._generation

        if identity is None or snapshot is None:
            log.debug(f"[{self.kind.value}] nothing playing, generation {generation} is idle.")
            self._set_result(EnrichmentResult(generation, None, EnrichmentState.IDLE))
            return

        log.info(f"[{self.kind.value}] generation {generation} for «{identity.title}» by {identity.artist}")
        self._set_result(EnrichmentResult(generation, None, EnrichmentState.LOADING))
        self._runner.submit(
            lambda: self._fetch(snapshot),
            lambda payload: self._on_fetch_succeeded(generation, payload),
            lambda error: self._on_fetch_failed(generation, error),
        )

    def _on_fetch_succeeded(self, generation: int, payload: Any):
        if generation != self._generation:
            log.debug(f"[{self.kind.value}] dropping stale result of generation {generation}.")
            return

        state = EnrichmentState.UNAVAILABLE if payload is None else EnrichmentState.READY
        self._set_result(EnrichmentResult(generation, payload, state))

    def _on_fetch_failed(self, generation: int, error: BaseException):
        if generation != self._generation:
            log.debug(f"[{self.kind.value}] dropping stale failure of generation {generation}: {error}")
            return

        log.warning(f"[{self.kind.value}] lookup failed for generation {generation}: {error}")
        self._set_result(EnrichmentResult(generation, None, EnrichmentState.UNAVAILABLE))

    def _set_result(self, result: EnrichmentResult):
        self._result = result
        self.result_changed.emit(result)
