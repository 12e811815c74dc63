"""Tests for animated recenter transitions."""

from __future__ import annotations

import pytest

from sunglobe.models import ViewState
from sunglobe.ui.opengl.transition import PointOfViewTransition, ease_in_out_cubic


def test_easing_endpoints_and_midpoint():
    assert ease_in_out_cubic(0.0) == 0.0
    assert ease_in_out_cubic(1.0) == 1.0
    assert ease_in_out_cubic(0.5) == pytest.approx(0.5)
    assert ease_in_out_cubic(2.0) == 1.0


def test_transition_reaches_target():
    transition = PointOfViewTransition(
        start=ViewState(0.0, 0.0, 2.5),
        end=ViewState(40.0, 100.0, 2.0),
        start_time=1000.0,
        duration_ms=1000.0,
    )
    assert not transition.finished(1500.0)
    halfway = transition.view_at(1500.0)
    assert halfway.latitude_deg == pytest.approx(20.0)
    assert halfway.altitude_factor == pytest.approx(2.25)
    assert transition.finished(2000.0)
    assert transition.view_at(2500.0) == ViewState(40.0, 100.0, 2.0)


def test_longitude_takes_short_way_across_antimeridian():
    transition = PointOfViewTransition(
        start=ViewState(0.0, 170.0),
        end=ViewState(0.0, -170.0),
        start_time=0.0,
        duration_ms=100.0,
    )
    assert abs(transition.view_at(50.0).longitude_deg) == pytest.approx(180.0)


def test_zero_duration_jumps():
    transition = PointOfViewTransition(ViewState(), ViewState(10.0, 20.0), 0.0, 0.0)
    assert transition.view_at(0.0).latitude_deg == 10.0
