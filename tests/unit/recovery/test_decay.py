"""Tests for the exponential-decay primitives."""

import datetime
import math

import pytest

from app.recovery.decay import (
    decay,
    decay_constant,
    hours_between,
    hours_until_below,
    projected_recovery,
    recovery_fraction,
    superpose,
)
from app.schemas.recovery import FatigueEvent

NOW = datetime.datetime(2026, 3, 1, 12, 0)


def _make_event(hours_ago: float, initial: float) -> FatigueEvent:
    return FatigueEvent(
        timestamp=NOW - datetime.timedelta(hours=hours_ago),
        exercise_name="Barbell Bench Press",
        initial_fatigue=initial,
    )


class TestDecay:
    def test_one_half_life_halves(self):
        assert decay(100.0, 24.0, 24.0) == pytest.approx(50.0)

    def test_two_half_lives_quarter(self):
        assert decay(100.0, 36.0, 72.0) == pytest.approx(25.0)

    def test_zero_elapsed_is_initial(self):
        assert decay(80.0, 48.0, 0.0) == pytest.approx(80.0)

    def test_negative_elapsed_leaves_value(self):
        assert decay(80.0, 48.0, -10.0) == 80.0

    @pytest.mark.parametrize("half_life", [0.0, -5.0])
    def test_non_positive_half_life_rejected(self, half_life):
        with pytest.raises(ValueError):
            decay(50.0, half_life, 1.0)

    def test_decay_constant(self):
        assert decay_constant(24.0) == pytest.approx(math.log(2) / 24.0)


class TestRecoveryFraction:
    def test_half_recovered_after_one_half_life(self):
        assert recovery_fraction(48.0, 48.0) == pytest.approx(0.5)

    @pytest.mark.parametrize("elapsed", [0.0, -3.0])
    def test_nothing_recovered_before_stimulus(self, elapsed):
        assert recovery_fraction(48.0, elapsed) == 0.0

    def test_hours_between_is_signed(self):
        later = NOW + datetime.timedelta(hours=6)
        assert hours_between(NOW, later) == pytest.approx(6.0)
        assert hours_between(later, NOW) == pytest.approx(-6.0)


class TestSuperpose:
    def test_empty_is_zero(self):
        assert superpose([], 48.0, NOW) == 0.0

    def test_sums_independently_decayed_events(self):
        events = [_make_event(48.0, 40.0), _make_event(0.0, 30.0)]
        assert superpose(events, 48.0, NOW) == pytest.approx(20.0 + 30.0)

    def test_capped_at_100(self):
        events = [_make_event(0.0, 80.0), _make_event(1.0, 80.0)]
        assert superpose(events, 48.0, NOW) == 100.0

    def test_adding_an_event_never_decreases_fatigue(self):
        base = [_make_event(30.0, 35.0)]
        more = base + [_make_event(10.0, 5.0)]
        assert superpose(more, 48.0, NOW) >= superpose(base, 48.0, NOW)

    def test_fatigue_never_increases_with_time(self):
        events = [_make_event(5.0, 60.0), _make_event(2.0, 20.0)]
        later = NOW + datetime.timedelta(hours=12)
        assert superpose(events, 48.0, later) <= superpose(events, 48.0, NOW)


class TestRecoveryProjection:
    def test_hours_until_below(self):
        # 40 → 5 is three halvings.
        assert hours_until_below(40.0, 24.0, 5.0) == pytest.approx(72.0)

    def test_already_below_floor(self):
        assert hours_until_below(4.0, 24.0, 5.0) == 0.0

    def test_projected_recovery_timestamp(self):
        eta = projected_recovery(40.0, 24.0, NOW)
        assert abs((eta - NOW).total_seconds() / 3600.0 - 72.0) < 1e-6

    def test_projected_recovery_none_when_recovered(self):
        assert projected_recovery(5.0, 24.0, NOW) is None
