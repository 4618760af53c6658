# pyright: reportUnknownMemberType=false

import logging
from collections.abc import Callable, Mapping
from functools import partial
from typing import final

from PySide6.QtCore import QObject, Signal, Slot

from linernotes.core.dispatcher import EnrichmentDispatcher, EnrichmentFetch
from linernotes.core.identity import IdentityResolver
from linernotes.core.models import AppConfig, EnrichmentKind, EnrichmentResult, TrackSnapshot
from linernotes.core.poller import DEFAULT_POLL_INTERVAL_MS, TrackPoller
from linernotes.core.tasks import TaskRunner


log = logging.getLogger(__name__)


@final
class NowPlayingController(QObject):
    """
    Owns the now-playing state shown by the popup: the latest track snapshot and
    one enrichment result per kind. Presentation only reads it and listens to
    its signals.
    """

    track_changed = Signal(object)
    enrichment_changed = Signal(object, object)  # EnrichmentKind, EnrichmentResult

    def __init__(
        self,
        query: Callable[[], TrackSnapshot | None],
        fetchers: Mapping[EnrichmentKind, EnrichmentFetch],
        runner: TaskRunner,
        interval_ms: int = DEFAULT_POLL_INTERVAL_MS,
    ):
        super().__init__()
        self._track: TrackSnapshot | None = None

        self.poller = TrackPoller(query, runner, interval_ms)
        self.resolver = IdentityResolver()
        self.dispatchers: dict[EnrichmentKind, EnrichmentDispatcher] = {}

        missing = [kind.value for kind in EnrichmentKind if kind not in fetchers]
        if missing:
            raise ValueError(f"No fetcher given for: {', '.join(missing)}")

        for kind in EnrichmentKind:
            dispatcher = EnrichmentDispatcher(kind, fetchers[kind], runner)
            _ = self.resolver.identity_resolved.connect(dispatcher.on_identity)
            _ = dispatcher.result_changed.connect(partial(self._on_result_changed, kind))
            self.dispatchers[kind] = dispatcher

        _ = self.poller.snapshot_polled.connect(self._on_snapshot)

    @property
    def track(self) -> TrackSnapshot | None:
        return self._track

    def result(self, kind: EnrichmentKind) -> EnrichmentResult:
        return self.dispatchers[kind].result

    def generation(self, kind: EnrichmentKind) -> int:
        return self.dispatchers[kind].generation

    def start(self):
        log.info("Starting now-playing controller.")
        self.poller.start()

    def stop(self):
        log.info("Stopping now-playing controller.")
        self.poller.stop()

    def on_config_changed(self, new_config: AppConfig):
        if new_config.player.poll_interval_ms != self.poller.interval_ms():
            self.poller.set_interval(new_config.player.poll_interval_ms)

    def _on_result_changed(self, kind: EnrichmentKind, result: EnrichmentResult):
        self.enrichment_changed.emit(kind, result)

    @Slot(object)  # pyright: ignore[reportArgumentType]
    def _on_snapshot(self, snapshot: TrackSnapshot | None):
        if snapshot != self._track:
            self._track = snapshot
            self.track_changed.emit(snapshot)

        self.resolver.publish(snapshot)
