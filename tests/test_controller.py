"""End-to-end tests for the now-playing controller with fake collaborators."""

from dataclasses import replace

import pytest

from linernotes.core.config import get_default_config
from linernotes.core.controller import NowPlayingController
from linernotes.core.models import EnrichmentKind, EnrichmentState


class FakePlayer:
    """A track source whose answer each test sets directly."""

    def __init__(self):
        self.current = None
        self.calls = 0

    def query_current_track(self):
        self.calls += 1
        return self.current


def _fetchers(calls):
    def make(kind):
        def fetch(track):
            calls.append((kind, track.title))
            return f"{kind.value}:{track.title}"

        return fetch

    return {kind: make(kind) for kind in EnrichmentKind}


@pytest.fixture
def player():
    return FakePlayer()


@pytest.fixture
def fetch_calls():
    return []


@pytest.fixture
def controller(player, runner, fetch_calls):
    c = NowPlayingController(player.query_current_track, _fetchers(fetch_calls), runner)
    yield c
    c.stop()


def _poll(controller, runner):
    """Runs one poll cycle and settles only the player query."""
    controller.poller.poll()
    runner.tasks[-1].run()


def _generations(controller):
    return {kind: controller.generation(kind) for kind in EnrichmentKind}


class TestScenario:
    def test_nightcall_pause_then_genesis(self, controller, player, runner, nightcall, genesis):
        tracks = []
        _ = controller.track_changed.connect(tracks.append)

        player.current = nightcall
        controller.start()
        runner.pending[0].run()

        assert _generations(controller) == {kind: 1 for kind in EnrichmentKind}
        first_fetches = list(runner.pending)
        assert len(first_fetches) == 3

        player.current = replace(nightcall, is_playing=False)
        _poll(controller, runner)

        assert _generations(controller) == {kind: 1 for kind in EnrichmentKind}
        assert controller.track is not None and not controller.track.is_playing
        assert tracks[-1] == player.current

        player.current = genesis
        _poll(controller, runner)

        assert _generations(controller) == {kind: 2 for kind in EnrichmentKind}

        second_fetches = [t for t in runner.pending if all(t is not f for f in first_fetches)]
        assert len(second_fetches) == 3
        for task in second_fetches:
            task.run()
        for task in first_fetches:
            task.run()

        for kind in EnrichmentKind:
            result = controller.result(kind)
            assert result.state == EnrichmentState.READY
            assert result.generation == 2
            assert result.payload == f"{kind.value}:Genesis"


class TestNowPlayingState:
    def test_track_changed_only_on_difference(self, controller, player, runner, nightcall):
        tracks = []
        _ = controller.track_changed.connect(tracks.append)

        player.current = nightcall
        controller.start()
        runner.run_all()
        _poll(controller, runner)
        _poll(controller, runner)

        assert tracks == [nightcall]

    def test_enrichment_changed_carries_kind(self, controller, player, runner, nightcall):
        changes = []
        _ = controller.enrichment_changed.connect(lambda kind, result: changes.append((kind, result.state)))

        player.current = nightcall
        controller.start()
        runner.run_all()
        runner.run_all()

        for kind in EnrichmentKind:
            assert (kind, EnrichmentState.LOADING) in changes
            assert (kind, EnrichmentState.READY) in changes

    def test_nothing_playing_clears_everything(self, controller, player, runner, nightcall):
        player.current = nightcall
        controller.start()
        runner.pending[0].run()
        in_flight = list(runner.pending)

        player.current = None
        _poll(controller, runner)
        for task in in_flight:
            task.run()

        assert controller.track is None
        for kind in EnrichmentKind:
            assert controller.result(kind).state == EnrichmentState.IDLE
            assert controller.result(kind).payload is None

    def test_player_failure_keeps_previous_track(self, controller, player, runner, nightcall):
        player.current = nightcall
        controller.start()
        runner.run_all()

        controller.poller.poll()
        runner.tasks[-1].fail(RuntimeError("osascript crashed"))

        assert controller.track == nightcall
        for kind in EnrichmentKind:
            assert controller.generation(kind) == 1

    def test_each_kind_fails_independently(self, player, runner, nightcall):
        def broken(_track):
            raise ConnectionError("genius is down")

        fetchers = _fetchers([])
        fetchers[EnrichmentKind.LYRICS_ANALYSIS] = broken
        controller = NowPlayingController(player.query_current_track, fetchers, runner)

        player.current = nightcall
        controller.start()
        runner.run_all()
        runner.run_all()
        controller.stop()

        assert controller.result(EnrichmentKind.ARTWORK).state == EnrichmentState.READY
        assert controller.result(EnrichmentKind.ALBUM_INFO).state == EnrichmentState.READY
        assert controller.result(EnrichmentKind.LYRICS_ANALYSIS).state == EnrichmentState.UNAVAILABLE


class TestWiring:
    def test_missing_fetcher_is_rejected(self, player, runner):
        fetchers = _fetchers([])
        del fetchers[EnrichmentKind.ARTWORK]

        with pytest.raises(ValueError, match="artwork"):
            _ = NowPlayingController(player.query_current_track, fetchers, runner)

    def test_config_change_updates_poll_interval(self, controller):
        config = get_default_config()
        config.player.poll_interval_ms = 5000

        controller.on_config_changed(config)

        assert controller.poller.interval_ms() == 5000

    def test_stop_halts_polling(self, controller, player, runner):
        controller.start()
        runner.run_all()
        controller.stop()
        controller.poller.poll()

        assert player.calls == 1
