"""
Muscle recovery reference table.

Each muscle is characterised by its recovery half-life and three
categorical tags that explain *why* it recovers at that speed:

* **FiberType** (fast / mixed / slow) — fast-twitch dominant muscles take
  more damage per set but recover quicker; slow-twitch postural muscles
  are fatigue resistant and recover slowly.
* **BloodFlow** (high / medium / low) — perfusion drives nutrient delivery
  and metabolite clearance.
* **MuscleMass** (large / medium / small) — large muscles carry more
  absolute fatigue and weigh more in the global fatigue average.

Half-lives are hours for residual fatigue to fall to 50 %.  Ranges are
taken from muscle-damage marker studies (CK, soreness, strength loss):
small arm muscles recover in roughly 24-36h, large lower-body and
postural muscles in 72-96h.

The table is built once at import time and exposed read-only.  Iteration
always follows :class:`MuscleId` declaration order so floating-point sums
over muscles are reproducible.
"""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Mapping

from pydantic import BaseModel, ConfigDict, Field


# ======================================================================
# Enums
# ======================================================================

class MuscleId(str, Enum):
    """Stable identifier for each tracked muscle group."""
    BICEPS = "Biceps"
    TRICEPS = "Triceps"
    FOREARMS = "Forearms"
    FRONT_DELTS = "Front Delts"
    SIDE_DELTS = "Side Delts"
    REAR_DELTS = "Rear Delts"
    TRAPS = "Traps"
    CHEST = "Chest"
    LATS = "Lats"
    UPPER_BACK = "Upper Back"
    ERECTOR_SPINAE = "Erector Spinae"
    QUADS = "Quads"
    GLUTES = "Glutes"
    HAMSTRINGS = "Hamstrings"
    CALVES = "Calves"
    ABS = "Abs"
    OBLIQUES = "Obliques"
    LOWER_BACK = "Lower Back"


class FiberType(str, Enum):
    """Dominant muscle fibre composition."""
    FAST = "fast"
    MIXED = "mixed"
    SLOW = "slow"


class BloodFlow(str, Enum):
    """Relative perfusion of the muscle."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class MuscleMass(str, Enum):
    """Relative size of the muscle group."""
    LARGE = "large"
    MEDIUM = "medium"
    SMALL = "small"


# ======================================================================
# Profile model
# ======================================================================

class MuscleProfile(BaseModel):
    """Reference recovery data for one muscle group."""

    model_config = ConfigDict(frozen=True)

    muscle: MuscleId
    half_life_hours: float = Field(..., gt=0.0)
    fiber_type: FiberType
    blood_flow: BloodFlow
    mass: MuscleMass
    recovery_multiplier: float = Field(
        1.0, gt=0.0,
        description="Relative recovery speed versus a 1.0 baseline muscle",
    )


class TrainingWindow(BaseModel):
    """Supercompensation window after a session, in hours."""

    min_wait_hours: float
    optimal_hours: float
    max_wait_hours: float


# Used when a muscle is not present in the table.
DEFAULT_MUSCLE_HALF_LIFE = 48.0

_DEFAULT_WINDOW = TrainingWindow(min_wait_hours=36.0, optimal_hours=72.0, max_wait_hours=96.0)

# Weight of each mass class in the global fatigue average.
MASS_WEIGHTS: Mapping[MuscleMass, float] = MappingProxyType({
    MuscleMass.LARGE: 3.0,
    MuscleMass.MEDIUM: 2.0,
    MuscleMass.SMALL: 1.0,
})


# ======================================================================
# Built-in muscles
# ======================================================================

F, X, S = FiberType.FAST, FiberType.MIXED, FiberType.SLOW
BH, BM, BL = BloodFlow.HIGH, BloodFlow.MEDIUM, BloodFlow.LOW
ML, MM, MS = MuscleMass.LARGE, MuscleMass.MEDIUM, MuscleMass.SMALL

_MUSCLES: list[MuscleProfile] = [
    # ── Arms ──────────────────────────────────────────────────────
    MuscleProfile(muscle=MuscleId.BICEPS, half_life_hours=24, fiber_type=F, blood_flow=BH, mass=MS,
                  recovery_multiplier=1.3),
    MuscleProfile(muscle=MuscleId.TRICEPS, half_life_hours=28, fiber_type=F, blood_flow=BH, mass=MS,
                  recovery_multiplier=1.25),
    MuscleProfile(muscle=MuscleId.FOREARMS, half_life_hours=20, fiber_type=F, blood_flow=BH, mass=MS,
                  recovery_multiplier=1.4),
    # ── Shoulders ─────────────────────────────────────────────────
    MuscleProfile(muscle=MuscleId.FRONT_DELTS, half_life_hours=36, fiber_type=X, blood_flow=BM, mass=MM,
                  recovery_multiplier=1.15),
    MuscleProfile(muscle=MuscleId.SIDE_DELTS, half_life_hours=30, fiber_type=F, blood_flow=BM, mass=MS,
                  recovery_multiplier=1.2),
    MuscleProfile(muscle=MuscleId.REAR_DELTS, half_life_hours=30, fiber_type=F, blood_flow=BM, mass=MS,
                  recovery_multiplier=1.2),
    MuscleProfile(muscle=MuscleId.TRAPS, half_life_hours=84, fiber_type=S, blood_flow=BL, mass=ML,
                  recovery_multiplier=0.75),
    # ── Torso ─────────────────────────────────────────────────────
    MuscleProfile(muscle=MuscleId.CHEST, half_life_hours=48, fiber_type=X, blood_flow=BM, mass=ML,
                  recovery_multiplier=1.0),
    MuscleProfile(muscle=MuscleId.LATS, half_life_hours=54, fiber_type=X, blood_flow=BM, mass=ML,
                  recovery_multiplier=0.95),
    MuscleProfile(muscle=MuscleId.UPPER_BACK, half_life_hours=60, fiber_type=S, blood_flow=BM, mass=ML,
                  recovery_multiplier=0.9),
    MuscleProfile(muscle=MuscleId.ERECTOR_SPINAE, half_life_hours=96, fiber_type=S, blood_flow=BL, mass=ML,
                  recovery_multiplier=0.7),
    # ── Legs ──────────────────────────────────────────────────────
    MuscleProfile(muscle=MuscleId.QUADS, half_life_hours=72, fiber_type=X, blood_flow=BM, mass=ML,
                  recovery_multiplier=0.85),
    MuscleProfile(muscle=MuscleId.GLUTES, half_life_hours=66, fiber_type=X, blood_flow=BM, mass=ML,
                  recovery_multiplier=0.9),
    MuscleProfile(muscle=MuscleId.HAMSTRINGS, half_life_hours=78, fiber_type=S, blood_flow=BM, mass=ML,
                  recovery_multiplier=0.8),
    MuscleProfile(muscle=MuscleId.CALVES, half_life_hours=24, fiber_type=S, blood_flow=BH, mass=MS,
                  recovery_multiplier=1.3),
    # ── Core ──────────────────────────────────────────────────────
    MuscleProfile(muscle=MuscleId.ABS, half_life_hours=24, fiber_type=F, blood_flow=BH, mass=MS,
                  recovery_multiplier=1.35),
    MuscleProfile(muscle=MuscleId.OBLIQUES, half_life_hours=28, fiber_type=X, blood_flow=BH, mass=MS,
                  recovery_multiplier=1.25),
    MuscleProfile(muscle=MuscleId.LOWER_BACK, half_life_hours=72, fiber_type=S, blood_flow=BL, mass=MM,
                  recovery_multiplier=0.85),
]

MUSCLE_CATALOG: Mapping[MuscleId, MuscleProfile] = MappingProxyType({m.muscle: m for m in _MUSCLES})

_BY_LOWER_NAME: dict[str, MuscleId] = {m.value.lower(): m for m in MuscleId}


# ======================================================================
# Lookup
# ======================================================================

def resolve_muscle(name: str | MuscleId) -> MuscleId | None:
    """Resolve a muscle name (exact, then case-insensitive).

    Returns ``None`` for unknown names.
    """
    if isinstance(name, MuscleId):
        return name
    try:
        return MuscleId(name)
    except ValueError:
        return _BY_LOWER_NAME.get(name.strip().lower())


def get_muscle(name: str | MuscleId) -> MuscleProfile | None:
    """Look up a muscle profile.  Returns ``None`` if not found."""
    muscle = resolve_muscle(name)
    if muscle is None:
        return None
    return MUSCLE_CATALOG.get(muscle)


def muscle_half_life(name: str | MuscleId) -> float:
    """Recovery half-life for *name*, or the 48h default when unknown."""
    profile = get_muscle(name)
    return profile.half_life_hours if profile else DEFAULT_MUSCLE_HALF_LIFE


def optimal_training_window(name: str | MuscleId) -> TrainingWindow:
    """Supercompensation window derived from the muscle half-life.

    The base is two half-lives (75 % recovered); training earlier stacks
    fatigue, training much later loses the adaptation peak.
    """
    profile = get_muscle(name)
    if profile is None:
        return _DEFAULT_WINDOW
    base = profile.half_life_hours * 2
    return TrainingWindow(
        min_wait_hours=base * 0.8,
        optimal_hours=base * 1.3,
        max_wait_hours=base * 2,
    )
