"""
Decay primitives — the shared exponential-decay model.

Every fatigue or stress quantity in the engine decays exponentially with
its own half-life:

    value(t) = initial × exp(-k × t),     k = ln(2) / half_life

so after exactly one half-life the value has halved.  Multiple stimuli
on the same entity are combined by **superposition**: each event decays
independently from its own timestamp and the decayed values are summed
(capped at 100).

A negative elapsed time (an event in the future relative to ``now``)
leaves the value untouched.  Builders filter out future observations
before they get here, so this only matters to direct callers.
"""

from __future__ import annotations

import datetime
import math
from typing import Iterable

from app.schemas.recovery import FatigueEvent

LN2 = math.log(2.0)

# Fatigue/stress below this is treated as "recovered" when projecting ETAs.
RECOVERED_FLOOR = 5.0

MAX_FATIGUE = 100.0


def decay_constant(half_life_hours: float) -> float:
    """Rate constant ``k`` for a half-life in hours."""
    if half_life_hours <= 0:
        raise ValueError(f"half-life must be positive, got {half_life_hours}")
    return LN2 / half_life_hours


def decay(initial: float, half_life_hours: float, elapsed_hours: float) -> float:
    """Value remaining from *initial* after *elapsed_hours*.

    Args:
        initial: Starting value.
        half_life_hours: Hours for the value to halve.
        elapsed_hours: Time since the stimulus.  Negative → *initial*.

    Returns:
        Decayed value, never below zero.
    """
    if elapsed_hours < 0:
        return initial
    return max(0.0, initial * math.exp(-decay_constant(half_life_hours) * elapsed_hours))


def recovery_fraction(half_life_hours: float, elapsed_hours: float) -> float:
    """Fraction (0-1) of a stimulus already recovered after *elapsed_hours*."""
    if elapsed_hours <= 0:
        return 0.0
    return 1.0 - math.exp(-decay_constant(half_life_hours) * elapsed_hours)


def hours_between(start: datetime.datetime, end: datetime.datetime) -> float:
    """Signed hours from *start* to *end*."""
    return (end - start).total_seconds() / 3600.0


def superpose(
    events: Iterable[FatigueEvent],
    half_life_hours: float,
    now: datetime.datetime,
    cap: float = MAX_FATIGUE,
) -> float:
    """Sum of every event decayed from its own timestamp to *now*, capped."""
    total = 0.0
    for event in events:
        total += decay(event.initial_fatigue, half_life_hours, hours_between(event.timestamp, now))
    return min(cap, total)


def hours_until_below(
    value: float,
    half_life_hours: float,
    floor: float = RECOVERED_FLOOR,
) -> float:
    """Hours until *value* decays under *floor* (0 if already there)."""
    if value <= floor:
        return 0.0
    return -math.log(floor / value) / decay_constant(half_life_hours)


def projected_recovery(
    value: float,
    half_life_hours: float,
    now: datetime.datetime,
    floor: float = RECOVERED_FLOOR,
) -> datetime.datetime | None:
    """Timestamp at which *value* drops under *floor*, or ``None`` if it already has."""
    if value <= floor:
        return None
    return now + datetime.timedelta(hours=hours_until_below(value, half_life_hours, floor))
