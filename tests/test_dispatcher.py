"""Tests for the generation-counted enrichment dispatcher."""

from dataclasses import replace

import pytest

from linernotes.core.dispatcher import EnrichmentDispatcher
from linernotes.core.identity import resolve_identity
from linernotes.core.models import EnrichmentKind, EnrichmentResult, EnrichmentState


def _feed(dispatcher, snapshot):
    dispatcher.on_identity(resolve_identity(snapshot), snapshot)


@pytest.fixture
def dispatcher(runner):
    return EnrichmentDispatcher(EnrichmentKind.ARTWORK, lambda track: f"art for {track.title}", runner)


@pytest.fixture
def emitted(dispatcher):
    results: list[EnrichmentResult] = []
    _ = dispatcher.result_changed.connect(results.append)
    return results


class TestDispatch:
    def test_starts_idle_at_generation_zero(self, dispatcher):
        assert dispatcher.generation == 0
        assert dispatcher.result == EnrichmentResult(0, None, EnrichmentState.IDLE)

    def test_first_track_allocates_generation_one_and_one_fetch(self, dispatcher, runner, nightcall):
        _feed(dispatcher, nightcall)

        assert dispatcher.generation == 1
        assert dispatcher.result == EnrichmentResult(1, None, EnrichmentState.LOADING)
        assert len(runner.tasks) == 1

    def test_success_commits_ready(self, dispatcher, runner, nightcall):
        _feed(dispatcher, nightcall)
        runner.run_all()

        assert dispatcher.result == EnrichmentResult(1, "art for Nightcall", EnrichmentState.READY)

    def test_play_pause_never_redispatches(self, dispatcher, runner, nightcall):
        _feed(dispatcher, nightcall)
        for i in range(10):
            _feed(dispatcher, replace(nightcall, is_playing=i % 2 == 0))

        assert dispatcher.generation == 1
        assert len(runner.tasks) == 1

    def test_identity_change_increments_generation_by_one(self, dispatcher, runner, nightcall, genesis):
        _feed(dispatcher, nightcall)
        _feed(dispatcher, genesis)

        assert dispatcher.generation == 2
        assert len(runner.tasks) == 2
        assert dispatcher.result.state == EnrichmentState.LOADING

    def test_returning_to_previous_track_is_a_new_generation(self, dispatcher, runner, nightcall, genesis):
        _feed(dispatcher, nightcall)
        runner.run_all()
        _feed(dispatcher, genesis)
        _feed(dispatcher, nightcall)

        assert dispatcher.generation == 3
        assert len(runner.tasks) == 3
        assert dispatcher.result == EnrichmentResult(3, None, EnrichmentState.LOADING)

    def test_fetch_receives_the_snapshot_that_changed_identity(self, runner, nightcall):
        seen = []
        dispatcher = EnrichmentDispatcher(EnrichmentKind.ALBUM_INFO, lambda track: seen.append(track.album), runner)

        _feed(dispatcher, nightcall)
        runner.run_all()

        assert seen == ["OutRun"]


class TestStaleResponses:
    def test_late_response_for_previous_track_is_discarded(self, dispatcher, runner, nightcall, genesis, emitted):
        _feed(dispatcher, nightcall)
        _feed(dispatcher, genesis)
        first, second = runner.tasks

        second.resolve("genesis art")
        emitted_before = list(emitted)
        first.resolve("nightcall art")

        assert dispatcher.result == EnrichmentResult(2, "genesis art", EnrichmentState.READY)
        assert emitted == emitted_before

    def test_late_failure_for_previous_track_is_discarded(self, dispatcher, runner, nightcall, genesis):
        _feed(dispatcher, nightcall)
        _feed(dispatcher, genesis)
        first, second = runner.tasks

        second.resolve("genesis art")
        first.fail(RuntimeError("timeout"))

        assert dispatcher.result.state == EnrichmentState.READY

    def test_stale_response_before_current_one_leaves_loading(self, dispatcher, runner, nightcall, genesis):
        _feed(dispatcher, nightcall)
        _feed(dispatcher, genesis)
        first, second = runner.tasks

        first.resolve("nightcall art")
        assert dispatcher.result == EnrichmentResult(2, None, EnrichmentState.LOADING)

        second.fail(RuntimeError("boom"))
        assert dispatcher.result == EnrichmentResult(2, None, EnrichmentState.UNAVAILABLE)


class TestFailures:
    def test_failure_commits_unavailable(self, dispatcher, runner, nightcall):
        _feed(dispatcher, nightcall)
        runner.tasks[0].fail(ConnectionError("offline"))

        assert dispatcher.result == EnrichmentResult(1, None, EnrichmentState.UNAVAILABLE)

    def test_exception_in_fetch_becomes_unavailable(self, runner, nightcall):
        def broken(_track):
            raise ValueError("bad payload")

        dispatcher = EnrichmentDispatcher(EnrichmentKind.LYRICS_ANALYSIS, broken, runner)
        _feed(dispatcher, nightcall)
        runner.run_all()

        assert dispatcher.result.state == EnrichmentState.UNAVAILABLE

    def test_nothing_found_is_unavailable(self, runner, nightcall):
        dispatcher = EnrichmentDispatcher(EnrichmentKind.ARTWORK, lambda _track: None, runner)
        _feed(dispatcher, nightcall)
        runner.run_all()

        assert dispatcher.result == EnrichmentResult(1, None, EnrichmentState.UNAVAILABLE)

    def test_failed_generation_is_not_retried(self, dispatcher, runner, nightcall):
        _feed(dispatcher, nightcall)
        runner.tasks[0].fail(RuntimeError("boom"))
        _feed(dispatcher, replace(nightcall, is_playing=False))

        assert len(runner.tasks) == 1
        assert dispatcher.result.state == EnrichmentState.UNAVAILABLE


class TestNothingPlaying:
    def test_none_clears_to_idle_without_fetching(self, dispatcher, runner, nightcall):
        _feed(dispatcher, nightcall)
        runner.run_all()
        _feed(dispatcher, None)

        assert dispatcher.result.state == EnrichmentState.IDLE
        assert dispatcher.result.payload is None
        assert len(runner.tasks) == 1

    def test_pending_fetch_cannot_commit_after_none(self, dispatcher, runner, nightcall):
        _feed(dispatcher, nightcall)
        _feed(dispatcher, None)
        runner.tasks[0].resolve("nightcall art")

        assert dispatcher.result.state == EnrichmentState.IDLE

    def test_none_while_idle_is_not_a_change(self, dispatcher, runner, emitted):
        _feed(dispatcher, None)

        assert dispatcher.generation == 0
        assert emitted == []
        assert runner.tasks == []
