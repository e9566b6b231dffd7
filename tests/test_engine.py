"""Comprehensive tests for the FocusLoop timer engine.

Covers: start/pause/reset semantics, timestamp-based countdown (no drift),
completion with and without auto-advance, long-break cadence, settings
updates, and restoring from persisted state.
"""

import pytest

from focusloop.timer.engine import (
    TimerEngine, TimerSettings, TimerState, Mode,
    DEFAULT_DURATIONS, LONG_BREAK_INTERVAL,
)

from helpers import FakeClock, finish_session


# ═══════════════════════════════════════════════════════════════════════════
#  INITIAL STATE
# ═══════════════════════════════════════════════════════════════════════════


class TestInitialState:

    def test_idle_focus_with_full_duration(self, engine):
        assert engine.mode == Mode.FOCUS
        assert engine.remaining == 5
        assert engine.is_running is False
        assert engine.completed_focus_sessions == 0

    def test_default_settings(self):
        engine = TimerEngine()
        assert engine.settings.durations == DEFAULT_DURATIONS
        assert engine.settings.auto_advance is False
        assert engine.settings.long_break_interval == LONG_BREAK_INTERVAL
        assert engine.remaining == 25 * 60

    def test_state_snapshot(self, engine):
        assert engine.state == TimerState(
            mode=Mode.FOCUS, remaining=5, is_running=False,
            completed_focus_sessions=0,
        )

    def test_state_snapshot_is_frozen(self, engine):
        snap = engine.state
        engine.start()
        assert snap.is_running is False
        assert engine.state.is_running is True

    def test_get_settings_matches_property(self, engine):
        assert engine.get_settings() is engine.settings

    def test_mode_values(self):
        assert [m.value for m in Mode] == ["focus", "short_break", "long_break"]


# ═══════════════════════════════════════════════════════════════════════════
#  START / PAUSE
# ═══════════════════════════════════════════════════════════════════════════


class TestStartPause:

    def test_start_runs(self, engine):
        engine.start()
        assert engine.is_running is True

    def test_start_is_noop_when_running(self, engine, clock):
        engine.start()
        clock.advance(2)
        engine.start()  # must not re-snapshot
        engine.tick()
        assert engine.remaining == 3

    def test_pause_is_noop_when_idle(self, engine):
        engine.pause()
        assert engine.is_running is False
        assert engine.remaining == 5

    def test_pause_captures_elapsed_time(self, engine, clock):
        engine.start()
        clock.advance(2)
        engine.pause()
        assert engine.is_running is False
        assert engine.remaining == 3

    def test_pause_without_any_tick(self, engine, clock):
        engine.start()
        clock.advance(4.9)  # partial seconds don't count
        engine.pause()
        assert engine.remaining == 1

    def test_pause_never_goes_negative(self, engine, clock):
        engine.start()
        clock.advance(60)
        engine.pause()
        assert engine.remaining == 0

    def test_idle_gap_is_excluded(self, engine, clock):
        engine.start()
        clock.advance(2)
        engine.tick()
        engine.pause()
        clock.advance(1000)
        engine.start()
        clock.advance(1)
        engine.tick()
        assert engine.remaining == 2

    def test_pause_then_resume_finishes_on_time(self, engine, clock):
        start = clock.now
        engine.start()
        engine.tick(start + 2)
        after_two = engine.remaining
        assert after_two == 3

        clock.now = start + 2
        engine.pause()
        engine.tick(start + 4)
        assert engine.remaining == after_two

        clock.now = start + 4
        engine.start()
        assert engine.tick(start + 4 + after_two) is True
        assert engine.remaining == 0

    def test_paused_equals_continuous_run(self, clock):
        """k seconds running plus any idle gap == k seconds running."""
        paused = TimerEngine(TimerSettings(durations={Mode.FOCUS: 100,
                                                      Mode.SHORT_BREAK: 5,
                                                      Mode.LONG_BREAK: 10}),
                             clock=clock)
        other_clock = FakeClock(clock.now)
        straight = TimerEngine(paused.settings, clock=other_clock)

        paused.start()
        straight.start()
        clock.advance(7)
        paused.pause()
        clock.advance(3600)
        paused.start()
        clock.advance(11)
        paused.tick()

        other_clock.advance(18)
        straight.tick()
        assert paused.remaining == straight.remaining == 82


# ═══════════════════════════════════════════════════════════════════════════
#  TICK / COUNTDOWN
# ═══════════════════════════════════════════════════════════════════════════


class TestTick:

    def test_tick_when_idle_returns_false(self, engine, clock):
        clock.advance(10)
        assert engine.tick() is False
        assert engine.remaining == 5

    def test_tick_uses_clock_by_default(self, engine, clock):
        engine.start()
        clock.advance(3)
        assert engine.tick() is False
        assert engine.remaining == 2

    def test_explicit_now_overrides_clock(self, engine, clock):
        engine.start()
        engine.tick(clock.now + 1)
        assert engine.remaining == 4

    def test_missed_ticks_do_not_lose_time(self, engine, clock):
        """One late tick lands exactly where five on-time ticks would."""
        engine.start()
        clock.advance(4)
        engine.tick()
        assert engine.remaining == 1

    def test_burst_ticks_do_not_gain_time(self, engine, clock):
        engine.start()
        clock.advance(1)
        for _ in range(10):
            engine.tick()
        assert engine.remaining == 4

    def test_sub_second_ticks_floor(self, engine, clock):
        engine.start()
        start = clock.now
        engine.tick(start + 0.999)
        assert engine.remaining == 5
        engine.tick(start + 1.0)
        assert engine.remaining == 4

    def test_clock_going_backwards_is_harmless(self, engine, clock):
        engine.start()
        engine.tick(clock.now - 30)
        assert engine.remaining == 5

    @pytest.mark.parametrize("duration", [1, 5, 60, 25 * 60])
    def test_full_duration_completes(self, clock, duration):
        settings = TimerSettings(durations={
            Mode.FOCUS: duration, Mode.SHORT_BREAK: 2, Mode.LONG_BREAK: 3,
        })
        engine = TimerEngine(settings, clock=clock)
        engine.start()
        assert engine.tick(clock.now + duration) is True
        assert engine.remaining == 0
        assert engine.is_running is False

    def test_tick_after_completion_is_noop(self, engine, clock):
        assert finish_session(engine, clock) is True
        clock.advance(100)
        assert engine.tick() is False
        assert engine.remaining == 0
        assert engine.completed_focus_sessions == 1

    def test_one_second_before_end_is_not_complete(self, engine, clock):
        engine.start()
        assert engine.tick(clock.now + 4) is False
        assert engine.remaining == 1
        assert engine.is_running is True


# ═══════════════════════════════════════════════════════════════════════════
#  COMPLETION
# ═══════════════════════════════════════════════════════════════════════════


class TestCompletionWithoutAutoAdvance:

    def test_mode_unchanged_and_stopped(self, engine, clock):
        finish_session(engine, clock)
        assert engine.mode == Mode.FOCUS
        assert engine.remaining == 0
        assert engine.is_running is False

    def test_focus_completion_counts(self, engine, clock):
        finish_session(engine, clock)
        assert engine.completed_focus_sessions == 1

    def test_break_completion_does_not_count(self, engine, clock):
        engine.switch_mode(Mode.SHORT_BREAK)
        finish_session(engine, clock)
        assert engine.mode == Mode.SHORT_BREAK
        assert engine.completed_focus_sessions == 0

    def test_restart_at_zero_completes_again(self, engine, clock):
        finish_session(engine, clock)
        engine.start()
        assert engine.tick() is True
        assert engine.completed_focus_sessions == 2


class TestAutoAdvance:

    def test_focus_goes_to_short_break(self, engine_auto, clock):
        assert finish_session(engine_auto, clock) is True
        assert engine_auto.mode == Mode.SHORT_BREAK
        assert engine_auto.remaining == 2
        assert engine_auto.is_running is False
        assert engine_auto.completed_focus_sessions == 1

    def test_break_goes_to_focus(self, engine_auto, clock):
        engine_auto.switch_mode(Mode.LONG_BREAK)
        finish_session(engine_auto, clock)
        assert engine_auto.mode == Mode.FOCUS
        assert engine_auto.remaining == 5

    def test_second_focus_gets_long_break(self, engine_auto, clock):
        finish_session(engine_auto, clock)
        assert engine_auto.mode == Mode.SHORT_BREAK
        assert engine_auto.completed_focus_sessions == 1

        engine_auto.switch_mode(Mode.FOCUS)
        finish_session(engine_auto, clock)
        assert engine_auto.completed_focus_sessions == 2
        assert engine_auto.mode == Mode.LONG_BREAK
        assert engine_auto.remaining == 3

    @pytest.mark.parametrize("interval", [1, 2, 3, 4])
    def test_every_nth_focus_gets_long_break(self, clock, interval):
        settings = TimerSettings(
            durations={Mode.FOCUS: 5, Mode.SHORT_BREAK: 2, Mode.LONG_BREAK: 3},
            auto_advance=True,
            long_break_interval=interval,
        )
        engine = TimerEngine(settings, clock=clock)
        for n in range(1, 3 * interval + 1):
            assert engine.mode == Mode.FOCUS
            finish_session(engine, clock)
            expected = Mode.LONG_BREAK if n % interval == 0 else Mode.SHORT_BREAK
            assert engine.mode == expected
            finish_session(engine, clock)  # the break itself

    def test_interval_zero_never_long_break(self, clock):
        settings = TimerSettings(
            durations={Mode.FOCUS: 5, Mode.SHORT_BREAK: 2, Mode.LONG_BREAK: 3},
            auto_advance=True,
            long_break_interval=0,
        )
        engine = TimerEngine(settings, clock=clock)
        for _ in range(6):
            finish_session(engine, clock)
            assert engine.mode == Mode.SHORT_BREAK
            finish_session(engine, clock)

    def test_next_mode_preview(self, engine_auto, clock):
        assert engine_auto.next_mode() == Mode.SHORT_BREAK
        finish_session(engine_auto, clock)
        assert engine_auto.next_mode() == Mode.FOCUS
        engine_auto.switch_mode(Mode.FOCUS)
        assert engine_auto.next_mode() == Mode.LONG_BREAK


# ═══════════════════════════════════════════════════════════════════════════
#  RESET / SWITCH MODE
# ═══════════════════════════════════════════════════════════════════════════


class TestResetAndSwitch:

    def test_reset_restores_full_duration_and_stops(self, engine, clock):
        engine.start()
        clock.advance(2)
        engine.tick()
        engine.reset()
        assert engine.remaining == 5
        assert engine.is_running is False
        assert engine.mode == Mode.FOCUS

    def test_reset_into_other_mode(self, engine):
        engine.start()
        engine.reset(Mode.LONG_BREAK)
        assert engine.mode == Mode.LONG_BREAK
        assert engine.remaining == 3
        assert engine.is_running is False

    def test_reset_keeps_completed_count(self, engine, clock):
        finish_session(engine, clock)
        engine.reset()
        assert engine.completed_focus_sessions == 1

    def test_switch_mode_matches_reset(self, clock):
        a = TimerEngine(clock=clock)
        b = TimerEngine(clock=clock)
        for e in (a, b):
            e.start()
        clock.advance(30)
        a.switch_mode(Mode.SHORT_BREAK)
        b.reset(Mode.SHORT_BREAK)
        assert a.state == b.state

    def test_switch_mode_keeps_completed_count(self, engine, clock):
        finish_session(engine, clock)
        engine.switch_mode(Mode.SHORT_BREAK)
        engine.switch_mode(Mode.FOCUS)
        assert engine.completed_focus_sessions == 1

    def test_reset_then_start_counts_from_full(self, engine, clock):
        engine.start()
        clock.advance(3)
        engine.reset()
        engine.start()
        clock.advance(1)
        engine.tick()
        assert engine.remaining == 4


# ═══════════════════════════════════════════════════════════════════════════
#  SETTINGS
# ═══════════════════════════════════════════════════════════════════════════


class TestUpdateSettings:

    def test_idle_duration_change_refills(self, engine):
        engine.update_settings(durations={Mode.FOCUS: 50})
        assert engine.remaining == 50

    def test_durations_merge_keywise(self, engine):
        engine.update_settings(durations={Mode.SHORT_BREAK: 9})
        assert engine.settings.durations == {
            Mode.FOCUS: 5, Mode.SHORT_BREAK: 9, Mode.LONG_BREAK: 3,
        }

    def test_other_fields_untouched(self, engine):
        engine.update_settings(auto_advance=True)
        assert engine.settings.auto_advance is True
        assert engine.settings.long_break_interval == 2
        engine.update_settings(sound_enabled=True, notifications_enabled=True)
        assert engine.settings.sound_enabled is True
        assert engine.settings.notifications_enabled is True
        assert engine.settings.auto_advance is True

    def test_running_countdown_undisturbed(self, engine, clock):
        engine.start()
        clock.advance(2)
        engine.tick()
        engine.update_settings(durations={Mode.FOCUS: 50})
        assert engine.remaining == 3
        clock.advance(1)
        engine.tick()
        assert engine.remaining == 2

    def test_new_duration_applies_on_next_reset(self, engine):
        engine.start()
        engine.update_settings(durations={Mode.FOCUS: 50})
        engine.reset()
        assert engine.remaining == 50

    def test_paused_session_is_refilled(self, engine, clock):
        engine.start()
        clock.advance(2)
        engine.pause()
        engine.update_settings(long_break_interval=3)
        assert engine.remaining == 5

    def test_settings_object_replaced_not_mutated(self, engine):
        before = engine.settings
        engine.update_settings(durations={Mode.FOCUS: 50})
        assert before.durations[Mode.FOCUS] == 5


# ═══════════════════════════════════════════════════════════════════════════
#  RESTORE
# ═══════════════════════════════════════════════════════════════════════════


class TestResumeFromState:

    def test_restore_paused(self, engine):
        engine.resume_from_state(3, Mode.SHORT_BREAK, False, 7)
        assert engine.state == TimerState(
            mode=Mode.SHORT_BREAK, remaining=3, is_running=False,
            completed_focus_sessions=7,
        )

    def test_restore_running_counts_from_now(self, engine, clock):
        clock.advance(500)  # time before restore never counts
        engine.resume_from_state(4, Mode.FOCUS, True, 0)
        assert engine.is_running is True
        clock.advance(1)
        engine.tick()
        assert engine.remaining == 3

    def test_restore_can_lower_counter(self, engine, clock):
        finish_session(engine, clock)
        finish_session(engine, clock)
        engine.resume_from_state(5, Mode.FOCUS, False, 0)
        assert engine.completed_focus_sessions == 0

    def test_restore_running_then_pause(self, engine, clock):
        engine.resume_from_state(4, Mode.FOCUS, True, 1)
        clock.advance(2)
        engine.pause()
        assert engine.remaining == 2

    def test_restore_running_completes(self, engine_auto, clock):
        engine_auto.resume_from_state(1, Mode.FOCUS, True, 1)
        clock.advance(1)
        assert engine_auto.tick() is True
        assert engine_auto.completed_focus_sessions == 2
        assert engine_auto.mode == Mode.LONG_BREAK

    def test_negative_remaining_clamps(self, engine):
        engine.resume_from_state(-4, Mode.FOCUS, False, 0)
        assert engine.remaining == 0


# ═══════════════════════════════════════════════════════════════════════════
#  INVARIANTS
# ═══════════════════════════════════════════════════════════════════════════


class TestInvariants:

    def test_counter_never_decreases_through_controls(self, engine_auto, clock):
        seen = []
        for step in range(12):
            finish_session(engine_auto, clock)
            seen.append(engine_auto.completed_focus_sessions)
            if step % 3 == 0:
                engine_auto.reset()
            if step % 4 == 0:
                engine_auto.switch_mode(Mode.FOCUS)
            engine_auto.update_settings(auto_advance=True)
            seen.append(engine_auto.completed_focus_sessions)
        assert seen == sorted(seen)

    def test_remaining_within_bounds(self, engine_auto, clock):
        for _ in range(20):
            engine_auto.start()
            clock.advance(1.7)
            engine_auto.tick()
            duration = engine_auto.settings.durations[engine_auto.mode]
            assert 0 <= engine_auto.remaining <= duration
            if engine_auto.remaining % 2:
                engine_auto.pause()
