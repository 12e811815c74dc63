"""Tests for the debounced interaction gate."""

from __future__ import annotations

from fakes import FakeScheduler
from sunglobe.services.interaction import InteractionGate
from sunglobe.services.scheduling import Lifecycle


def _gate(scheduler: FakeScheduler, lifecycle: Lifecycle | None = None, releases=None):
    return InteractionGate(
        scheduler,
        lifecycle or Lifecycle(),
        debounce_ms=2000.0,
        on_release=releases.append if releases is not None else None,
    )


def test_start_activates_immediately():
    scheduler = FakeScheduler()
    gate = _gate(scheduler)
    assert not gate.is_active()
    gate.start()
    assert gate.is_active()


def test_release_after_debounce_reports_time():
    scheduler = FakeScheduler()
    releases: list[float] = []
    gate = _gate(scheduler, releases=releases)
    gate.start()
    gate.end()
    scheduler.advance(1999)
    assert gate.is_active()
    assert releases == []
    scheduler.advance(2)
    assert not gate.is_active()
    assert releases == [2001]


def test_restart_within_debounce_cancels_release():
    scheduler = FakeScheduler()
    releases: list[float] = []
    gate = _gate(scheduler, releases=releases)
    gate.start()
    gate.end()
    scheduler.advance(1500)
    gate.start()
    assert not gate.release_pending
    scheduler.advance(5000)
    assert gate.is_active()
    assert releases == []


def test_repeated_end_rearms_single_timer():
    scheduler = FakeScheduler()
    releases: list[float] = []
    gate = _gate(scheduler, releases=releases)
    gate.start()
    gate.end()
    scheduler.advance(1000)
    gate.end()
    assert len(scheduler.pending_timers) == 1
    scheduler.advance(1500)
    assert gate.is_active()
    scheduler.advance(600)
    assert releases == [3100]


def test_calls_after_shutdown_are_ignored():
    scheduler = FakeScheduler()
    lifecycle = Lifecycle()
    releases: list[float] = []
    gate = _gate(scheduler, lifecycle, releases)
    gate.start()
    gate.end()
    lifecycle.shutdown()
    scheduler.advance(3000)
    assert releases == []
    gate.end()
    assert scheduler.pending_timers == []


def test_cancel_drops_pending_release():
    scheduler = FakeScheduler()
    gate = _gate(scheduler)
    gate.start()
    gate.end()
    gate.cancel()
    scheduler.advance(3000)
    assert gate.is_active()
