"""Tests for music_finder.controller: selection, navigation, continuation, queued dispatch."""

import random

import pytest

from music_finder.controller import (
    STATUS_ENDED,
    STATUS_LOADING,
    STATUS_PLAYING,
    PlaybackController,
    TimerTick,
)
from music_finder.engine import STATE_PAUSED, STATE_PLAYING
from music_finder.history import DEDUP_TAIL, Track
from music_finder.session import UNLOAD_WHEN_HISTORY
from music_finder.utils import REPEAT_ALL, REPEAT_OFF, REPEAT_ONE

A = Track("aaa", "Alpha")
B = Track("bbb", "Bravo")
C = Track("ccc", "Charlie")


@pytest.fixture
def controller(engine):
    ctrl = PlaybackController(engine, rng=random.Random(11))
    yield ctrl
    ctrl.shutdown()


def fill(controller, engine, tracks, select=None):
    for t in tracks:
        controller.play_selected(t)
    if select is not None:
        controller.select_history(select)
    engine.calls.clear()


def set_repeat(controller, repeat):
    while controller.mode.repeat != repeat:
        controller.cycle_repeat()


def record(signal):
    seen = []
    signal.connect(lambda *args: seen.append(args))
    return seen


class TestPlaySelected:
    def test_search_result_lands_in_history_and_plays(self, controller, engine):
        track = Track.from_result({"videoId": "abc123", "title": "Lofi Beats"})
        now_playing = record(controller.nowPlayingChanged)
        controller.play_selected(track)
        assert controller.history.tracks() == [track]
        assert controller.history.index == 0
        assert engine.calls == [("load", "abc123"), ("play",)]
        assert now_playing == [("Lofi Beats", "https://img.youtube.com/vi/abc123/mqdefault.jpg")]
        assert controller.loaded_track == track
        assert controller.status == STATUS_LOADING

    def test_same_track_twice_adds_one_entry(self, controller, engine):
        controller.play_selected(A)
        controller.play_selected(Track("aaa", "Alpha (dup)"))
        assert len(controller.history) == 1
        assert engine.loads() == ["aaa", "aaa"]

    def test_without_history(self, controller, engine):
        controller.play_selected(A, add_to_history=False)
        assert controller.history.is_empty()
        assert engine.loads() == ["aaa"]

    def test_history_signal_reports_list_and_index(self, controller):
        seen = record(controller.historyChanged)
        controller.play_selected(A)
        controller.play_selected(B)
        assert seen[-1] == ([A, B], 1)

    def test_dedup_policy_is_forwarded(self, engine):
        ctrl = PlaybackController(engine, dedup_policy=DEDUP_TAIL)
        fill(ctrl, engine, [A, B], select=0)
        ctrl.play_selected(B)
        assert len(ctrl.history) == 2
        ctrl.shutdown()


class TestSelectHistory:
    def test_selects_and_plays_without_growing(self, controller, engine):
        fill(controller, engine, [A, B, C])
        controller.select_history(1)
        assert controller.history.index == 1
        assert len(controller.history) == 3
        assert engine.calls == [("load", "bbb"), ("play",)]

    def test_out_of_bounds_is_ignored(self, controller, engine):
        fill(controller, engine, [A, B])
        controller.select_history(7)
        assert controller.history.index == 1
        assert engine.calls == []


class TestNavigation:
    def test_empty_history_next_and_previous_do_nothing(self, controller, engine):
        controller.next_track()
        controller.prev_track()
        assert engine.calls == []
        assert controller.history.index is None

    def test_next_at_end_without_repeat_is_noop(self, controller, engine):
        fill(controller, engine, [A, B, C])
        controller.next_track()
        assert controller.history.index == 2
        assert engine.calls == []

    def test_next_at_end_with_repeat_all_wraps(self, controller, engine):
        fill(controller, engine, [A, B, C])
        set_repeat(controller, REPEAT_ALL)
        controller.next_track()
        assert controller.history.index == 0
        assert engine.calls == [("load", "aaa"), ("play",)]

    def test_previous_at_start_with_repeat_all_goes_to_last(self, controller, engine):
        fill(controller, engine, [A, B, C], select=0)
        set_repeat(controller, REPEAT_ALL)
        controller.prev_track()
        assert controller.history.index == 2
        assert engine.loads() == ["ccc"]

    def test_previous_at_start_without_repeat_is_noop(self, controller, engine):
        fill(controller, engine, [A, B, C], select=0)
        controller.prev_track()
        assert controller.history.index == 0
        assert engine.calls == []

    def test_shuffle_next_never_picks_current(self, controller, engine):
        fill(controller, engine, [A, B, C])
        controller.toggle_shuffle()
        for _ in range(25):
            before = controller.history.index
            controller.next_track()
            assert controller.history.index != before


class TestContinuation:
    def test_ended_before_interaction_does_nothing(self, controller, engine):
        fill(controller, engine, [A, B], select=0)
        engine.finish()
        assert controller.history.index == 0
        assert engine.calls == []

    def test_ended_with_repeat_one_replays(self, controller, engine):
        fill(controller, engine, [A, B], select=0)
        controller.play()
        set_repeat(controller, REPEAT_ONE)
        engine.calls.clear()
        engine.finish()
        assert controller.history.index == 0
        assert engine.calls == [("play",)]

    def test_ended_moves_to_next(self, controller, engine):
        fill(controller, engine, [A, B], select=0)
        controller.play()
        engine.calls.clear()
        engine.finish()
        assert controller.history.index == 1
        assert engine.calls == [("load", "bbb"), ("play",)]

    def test_ended_at_last_without_repeat_stops(self, controller, engine):
        fill(controller, engine, [A, B])
        controller.play()
        engine.calls.clear()
        states = record(controller.playStateChanged)
        engine.finish()
        assert engine.calls == []
        assert controller.status == STATUS_ENDED
        assert states[-1] == (False,)

    def test_ended_at_last_with_repeat_all_wraps(self, controller, engine):
        fill(controller, engine, [A, B])
        controller.play()
        set_repeat(controller, REPEAT_ALL)
        engine.calls.clear()
        engine.finish()
        assert controller.history.index == 0
        assert engine.loads() == ["aaa"]

    def test_single_track_repeat_all_keeps_looping(self, controller, engine):
        fill(controller, engine, [A])
        controller.play()
        set_repeat(controller, REPEAT_ALL)
        engine.calls.clear()
        for _ in range(3):
            engine.start_playing()
            engine.finish()
        assert engine.loads() == ["aaa", "aaa", "aaa"]


class TestErrors:
    def test_error_skips_forward_even_under_repeat_one(self, controller, engine):
        fill(controller, engine, [A, B], select=0)
        controller.play()
        set_repeat(controller, REPEAT_ONE)
        engine.calls.clear()
        engine.fail(150)
        assert controller.history.index == 1
        assert engine.calls == [("load", "bbb"), ("play",)]

    def test_error_before_interaction_loads_without_playing(self, controller, engine):
        fill(controller, engine, [A, B], select=0)
        engine.fail(101)
        assert controller.history.index == 1
        assert engine.calls == [("load", "bbb")]

    def test_error_at_last_without_repeat_stops(self, controller, engine):
        fill(controller, engine, [A, B])
        controller.play()
        engine.calls.clear()
        engine.fail(100)
        assert engine.calls == []
        assert controller.status == STATUS_ENDED

    def test_all_tracks_failing_stops_the_chain(self, controller, engine):
        fill(controller, engine, [A, B, C], select=0)
        controller.play()
        set_repeat(controller, REPEAT_ALL)
        engine.calls.clear()
        for _ in range(5):
            engine.fail(150)
        assert engine.loads() == ["bbb", "ccc"]
        assert controller.status == STATUS_ENDED

    def test_playing_resets_failure_count(self, controller, engine):
        fill(controller, engine, [A, B, C], select=0)
        controller.play()
        set_repeat(controller, REPEAT_ALL)
        engine.calls.clear()
        engine.fail(150)
        engine.fail(150)
        engine.start_playing()
        engine.fail(150)
        assert engine.loads() == ["bbb", "ccc", "aaa"]

    def test_new_selection_after_exhausted_chain_still_skips(self, controller, engine):
        fill(controller, engine, [A, B], select=0)
        controller.play()
        set_repeat(controller, REPEAT_ALL)
        engine.fail(150)
        engine.fail(150)
        assert controller.status == STATUS_ENDED
        controller.play_selected(C)
        engine.calls.clear()
        engine.fail(150)
        assert engine.loads() == ["aaa"]
        assert controller.history.index == 0

    def test_user_next_after_exhausted_chain_still_skips(self, controller, engine):
        fill(controller, engine, [A, B], select=0)
        controller.play()
        set_repeat(controller, REPEAT_ALL)
        engine.fail(150)
        engine.fail(150)
        controller.next_track()
        engine.calls.clear()
        engine.fail(150)
        assert engine.loads() == ["bbb"]

    def test_error_state_reports_not_playing(self, controller, engine):
        fill(controller, engine, [A, B], select=0)
        controller.play()
        engine.start_playing()
        states = record(controller.playStateChanged)
        engine.fail(150)
        assert states[0] == (False,)
        assert not controller.transport.is_active()


class TestQueuedDispatch:
    def test_synchronous_ended_is_handled_after_current_command(self, controller, engine):
        fill(controller, engine, [A, B])
        controller.play()
        titles = record(controller.nowPlayingChanged)
        engine.calls.clear()
        engine.end_on_next_play = True
        controller.select_history(0)
        # Nested handling would announce Bravo before Alpha.
        assert [t[0] for t in titles] == ["Alpha", "Bravo"]
        assert engine.calls == [("load", "aaa"), ("play",), ("load", "bbb"), ("play",)]
        assert controller.history.index == 1

    def test_timer_tick_publishes_progress(self, controller, engine):
        engine.position = 30
        engine.duration = 120
        progress = record(controller.progressChanged)
        controller.dispatch(TimerTick())
        assert progress == [("0:30", "2:00", 0.25)]


class TestTransportCommands:
    def test_toggle_play_with_nothing_loaded_opens_gate(self, controller, engine):
        controller.toggle_play()
        assert controller.gate.user_has_interacted
        assert engine.calls == []

    def test_toggle_play_pauses_when_playing(self, controller, engine):
        fill(controller, engine, [A])
        engine.start_playing()
        controller.toggle_play()
        assert engine.calls[-1] == ("pause",)

    def test_toggle_play_resumes_when_paused(self, controller, engine):
        fill(controller, engine, [A])
        engine.pause_playback()
        engine.calls.clear()
        controller.toggle_play()
        assert engine.calls == [("play",)]

    def test_pause_does_not_open_gate(self, controller, engine):
        controller.pause()
        assert not controller.gate.user_has_interacted
        assert engine.calls == [("pause",)]

    def test_seek_ignored_when_duration_unknown(self, controller, engine):
        engine.duration = 0
        controller.seek(0.5)
        assert engine.calls == []

    @pytest.mark.parametrize("fraction, expected", [(0.25, 50.0), (2.0, 200.0), (-1.0, 0.0)])
    def test_seek_scales_and_clamps(self, controller, engine, fraction, expected):
        engine.duration = 200
        controller.seek(fraction)
        assert engine.calls == [("seek_to", expected)]

    @pytest.mark.parametrize("level, expected", [(40, 40), (150, 100), (-3, 0)])
    def test_set_volume_clamps(self, controller, engine, level, expected):
        controller.set_volume(level)
        assert engine.calls == [("set_volume", expected)]

    def test_mode_toggles_are_published(self, controller):
        modes = record(controller.modesChanged)
        controller.toggle_shuffle()
        controller.cycle_repeat()
        controller.cycle_repeat()
        assert modes == [(True, REPEAT_OFF), (True, REPEAT_ALL), (True, REPEAT_ONE)]


class TestStateTracking:
    def test_transport_runs_only_while_playing(self, controller, engine):
        fill(controller, engine, [A])
        engine.duration = 60
        progress = record(controller.progressChanged)
        engine.start_playing()
        assert controller.transport.is_active()
        assert controller.status == STATUS_PLAYING
        assert progress == [("0:00", "1:00", 0.0)]
        engine.pause_playback()
        assert not controller.transport.is_active()

    def test_play_state_signal(self, controller, engine):
        states = record(controller.playStateChanged)
        engine.start_playing()
        engine.pause_playback()
        assert states == [(True,), (False,)]

    def test_publish_state_pushes_everything(self, controller, engine):
        fill(controller, engine, [A, B])
        history = record(controller.historyChanged)
        modes = record(controller.modesChanged)
        states = record(controller.playStateChanged)
        controller.publish_state()
        assert history == [([A, B], 1)]
        assert modes == [(False, REPEAT_OFF)]
        assert states == [(False,)]

    def test_shutdown_stops_engine(self, controller, engine):
        engine.start_playing()
        controller.shutdown()
        assert engine.shut_down
        assert not controller.transport.is_active()


class TestCloseConfirmation:
    def test_playing_needs_confirmation(self, controller, engine):
        engine.state = STATE_PLAYING
        assert controller.should_confirm_close()

    def test_paused_does_not(self, controller, engine):
        engine.state = STATE_PAUSED
        assert not controller.should_confirm_close()

    def test_history_policy(self, engine):
        ctrl = PlaybackController(engine, unload_policy=UNLOAD_WHEN_HISTORY)
        assert not ctrl.should_confirm_close()
        ctrl.play_selected(A)
        assert ctrl.should_confirm_close()
        ctrl.shutdown()
