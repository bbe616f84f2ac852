"""
Exercise movement-pattern reference table.

Each exercise carries the information needed to model its recovery on
three timescales at once:

* **movement pattern half-life** — how long the motor pattern itself
  takes to feel fresh again;
* **CNS load** (1-10) — neural demand; inflates the pattern half-life for
  the slower neural recovery component;
* **muscle involvement** — the share of work done by each muscle, with
  primary movers flagged.

Exercises are grouped into three complexity tiers:

    Tier 3 (axial):     heavy spinal loading, high CNS demand
                        (squat, deadlift, overhead press)
    Tier 2 (compound):  multi-joint, moderate neural demand
                        (bench, rows, pull-ups, lunges)
    Tier 1 (isolation): single-joint, muscle-limited
                        (curls, raises, extensions)

Lookup is exact name first, then case-insensitive.  Unknown exercises
return ``None``; callers fall back to documented defaults.
"""

from __future__ import annotations

from enum import Enum, IntEnum
from types import MappingProxyType
from typing import Mapping

from pydantic import BaseModel, ConfigDict, Field

from app.catalog.muscles import MuscleId


# ======================================================================
# Enums
# ======================================================================

class MovementPattern(str, Enum):
    """Fundamental movement pattern."""
    SQUAT = "squat"
    HINGE = "hinge"
    HORIZONTAL_PUSH = "horizontal_push"
    HORIZONTAL_PULL = "horizontal_pull"
    VERTICAL_PUSH = "vertical_push"
    VERTICAL_PULL = "vertical_pull"
    LUNGE = "lunge"
    ISOLATION_UPPER = "isolation_upper"
    ISOLATION_LOWER = "isolation_lower"
    CORE = "core"
    CARRY = "carry"


class ExerciseTier(IntEnum):
    """Complexity tier (drives recovery blend weights)."""
    ISOLATION = 1
    COMPOUND = 2
    AXIAL = 3


# ======================================================================
# Profile model
# ======================================================================

class MuscleInvolvement(BaseModel):
    """Share of an exercise's work done by one muscle."""

    model_config = ConfigDict(frozen=True)

    muscle: MuscleId
    percentage: float = Field(..., gt=0.0, le=100.0)
    primary: bool = False


class ExerciseProfile(BaseModel):
    """Catalog entry describing one exercise."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Canonical exercise name")
    movement_pattern: MovementPattern
    tier: ExerciseTier
    half_life_hours: float = Field(..., gt=0.0, description="Movement-pattern recovery half-life")
    cns_load: float = Field(..., ge=0.0, le=10.0)
    technical_demand: float = Field(..., ge=0.0, le=10.0)
    spinal_loading: bool = False
    stabilization_demand: float = Field(..., ge=0.0, le=10.0)
    involvement: tuple[MuscleInvolvement, ...] = ()

    def involvement_for(self, muscle: MuscleId) -> MuscleInvolvement | None:
        for inv in self.involvement:
            if inv.muscle == muscle:
                return inv
        return None

    @property
    def primary_muscles(self) -> list[MuscleId]:
        return [inv.muscle for inv in self.involvement if inv.primary]


# ======================================================================
# Helpers
# ======================================================================

SQ = MovementPattern.SQUAT
HI = MovementPattern.HINGE
HPUSH = MovementPattern.HORIZONTAL_PUSH
HPULL = MovementPattern.HORIZONTAL_PULL
VPUSH = MovementPattern.VERTICAL_PUSH
VPULL = MovementPattern.VERTICAL_PULL
LU = MovementPattern.LUNGE
ISO_U = MovementPattern.ISOLATION_UPPER
ISO_L = MovementPattern.ISOLATION_LOWER
CO = MovementPattern.CORE
T1, T2, T3 = ExerciseTier.ISOLATION, ExerciseTier.COMPOUND, ExerciseTier.AXIAL

M = MuscleId


def _p(muscle: MuscleId, pct: float) -> MuscleInvolvement:
    """Primary mover."""
    return MuscleInvolvement(muscle=muscle, percentage=pct, primary=True)


def _s(muscle: MuscleId, pct: float) -> MuscleInvolvement:
    """Secondary / stabiliser."""
    return MuscleInvolvement(muscle=muscle, percentage=pct, primary=False)


def _ex(name: str, pattern: MovementPattern, tier: ExerciseTier, half_life: float,
        cns: float, tech: float, spinal: bool, stab: float,
        *involvement: MuscleInvolvement) -> ExerciseProfile:
    return ExerciseProfile(
        name=name, movement_pattern=pattern, tier=tier, half_life_hours=half_life,
        cns_load=cns, technical_demand=tech, spinal_loading=spinal,
        stabilization_demand=stab, involvement=tuple(involvement),
    )


# ======================================================================
# Built-in exercises
# ======================================================================

_EXERCISES: list[ExerciseProfile] = [
    # ── Tier 3: axial ─────────────────────────────────────────────
    _ex("Barbell Back Squat", SQ, T3, 84, 9, 8, True, 9,
        _p(M.QUADS, 100), _p(M.GLUTES, 80), _s(M.HAMSTRINGS, 50),
        _s(M.ERECTOR_SPINAE, 70), _s(M.ABS, 60), _s(M.UPPER_BACK, 40)),
    _ex("Barbell Front Squat", SQ, T3, 78, 9, 9, True, 10,
        _p(M.QUADS, 100), _p(M.GLUTES, 60), _s(M.ERECTOR_SPINAE, 80),
        _s(M.ABS, 90), _s(M.UPPER_BACK, 60)),
    _ex("Conventional Deadlift", HI, T3, 96, 10, 8, True, 10,
        _p(M.HAMSTRINGS, 100), _p(M.GLUTES, 100), _p(M.ERECTOR_SPINAE, 100),
        _s(M.LATS, 70), _s(M.TRAPS, 80), _s(M.FOREARMS, 90), _s(M.QUADS, 40)),
    _ex("Sumo Deadlift", HI, T3, 90, 10, 9, True, 9,
        _p(M.GLUTES, 100), _p(M.HAMSTRINGS, 80), _p(M.QUADS, 70),
        _s(M.ERECTOR_SPINAE, 80), _s(M.TRAPS, 70), _s(M.FOREARMS, 90)),
    _ex("Romanian Deadlift", HI, T3, 78, 7, 7, True, 7,
        _p(M.HAMSTRINGS, 100), _p(M.GLUTES, 90), _s(M.ERECTOR_SPINAE, 70),
        _s(M.FOREARMS, 60)),
    _ex("Barbell Overhead Press", VPUSH, T3, 72, 8, 8, True, 9,
        _p(M.FRONT_DELTS, 100), _p(M.SIDE_DELTS, 70), _s(M.TRICEPS, 80),
        _s(M.UPPER_BACK, 50), _s(M.ABS, 60), _s(M.ERECTOR_SPINAE, 50)),
    _ex("Clean and Press", VPUSH, T3, 96, 10, 10, True, 10,
        _p(M.QUADS, 80), _p(M.HAMSTRINGS, 70), _p(M.GLUTES, 70), _p(M.FRONT_DELTS, 100),
        _s(M.TRAPS, 90), _s(M.TRICEPS, 80), _s(M.ERECTOR_SPINAE, 80)),

    # ── Tier 2: compound ──────────────────────────────────────────
    _ex("Barbell Bench Press", HPUSH, T2, 60, 6, 6, False, 6,
        _p(M.CHEST, 100), _p(M.FRONT_DELTS, 70), _p(M.TRICEPS, 80), _s(M.LATS, 30)),
    _ex("Incline Bench Press", HPUSH, T2, 54, 5, 5, False, 5,
        _p(M.CHEST, 90), _p(M.FRONT_DELTS, 90), _p(M.TRICEPS, 70)),
    _ex("Dumbbell Bench Press", HPUSH, T2, 54, 5, 6, False, 7,
        _p(M.CHEST, 100), _p(M.FRONT_DELTS, 60), _p(M.TRICEPS, 70)),
    _ex("Barbell Row", HPULL, T2, 66, 7, 7, True, 8,
        _p(M.LATS, 100), _p(M.UPPER_BACK, 90), _p(M.REAR_DELTS, 70),
        _s(M.BICEPS, 60), _s(M.ERECTOR_SPINAE, 60), _s(M.FOREARMS, 70)),
    _ex("Pendlay Row", HPULL, T2, 72, 8, 8, True, 9,
        _p(M.LATS, 100), _p(M.UPPER_BACK, 100), _p(M.REAR_DELTS, 80),
        _s(M.BICEPS, 50), _s(M.ERECTOR_SPINAE, 70), _s(M.HAMSTRINGS, 40)),
    _ex("Pull-Up", VPULL, T2, 60, 6, 7, False, 7,
        _p(M.LATS, 100), _p(M.UPPER_BACK, 70), _p(M.BICEPS, 80),
        _s(M.REAR_DELTS, 50), _s(M.FOREARMS, 80), _s(M.ABS, 40)),
    _ex("Weighted Dip", VPUSH, T2, 54, 6, 6, False, 7,
        _p(M.CHEST, 90), _p(M.TRICEPS, 100), _p(M.FRONT_DELTS, 70)),
    _ex("Bulgarian Split Squat", LU, T2, 60, 6, 7, False, 8,
        _p(M.QUADS, 100), _p(M.GLUTES, 90), _s(M.HAMSTRINGS, 50), _s(M.ABS, 50)),
    _ex("Walking Lunge", LU, T2, 54, 5, 6, False, 7,
        _p(M.QUADS, 100), _p(M.GLUTES, 80), _s(M.HAMSTRINGS, 40)),
    _ex("Leg Press", SQ, T2, 48, 4, 3, False, 3,
        _p(M.QUADS, 100), _p(M.GLUTES, 70), _s(M.HAMSTRINGS, 30)),
    _ex("Hack Squat", SQ, T2, 54, 5, 4, False, 4,
        _p(M.QUADS, 100), _p(M.GLUTES, 60), _s(M.HAMSTRINGS, 30)),

    # ── Tier 1: isolation ─────────────────────────────────────────
    _ex("Barbell Curl", ISO_U, T1, 30, 2, 3, False, 3,
        _p(M.BICEPS, 100), _s(M.FOREARMS, 40)),
    _ex("Dumbbell Curl", ISO_U, T1, 28, 2, 2, False, 3,
        _p(M.BICEPS, 100), _s(M.FOREARMS, 30)),
    _ex("Tricep Pushdown", ISO_U, T1, 30, 2, 2, False, 2,
        _p(M.TRICEPS, 100)),
    _ex("Overhead Tricep Extension", ISO_U, T1, 32, 2, 3, False, 4,
        _p(M.TRICEPS, 100), _s(M.ABS, 20)),
    _ex("Lateral Raise", ISO_U, T1, 32, 2, 4, False, 3,
        _p(M.SIDE_DELTS, 100), _s(M.TRAPS, 30)),
    _ex("Face Pull", ISO_U, T1, 30, 2, 4, False, 3,
        _p(M.REAR_DELTS, 100), _s(M.UPPER_BACK, 50), _s(M.BICEPS, 20)),
    _ex("Pec Fly", ISO_U, T1, 36, 2, 3, False, 3,
        _p(M.CHEST, 100), _s(M.FRONT_DELTS, 30)),
    _ex("Cable Fly", ISO_U, T1, 34, 2, 3, False, 4,
        _p(M.CHEST, 100), _s(M.FRONT_DELTS, 30)),
    _ex("Leg Extension", ISO_L, T1, 36, 2, 2, False, 2,
        _p(M.QUADS, 100)),
    _ex("Leg Curl", ISO_L, T1, 36, 2, 2, False, 2,
        _p(M.HAMSTRINGS, 100)),
    _ex("Calf Raise", ISO_L, T1, 28, 1, 2, False, 2,
        _p(M.CALVES, 100)),
    _ex("Hip Thrust", HI, T1, 42, 3, 4, False, 4,
        _p(M.GLUTES, 100), _s(M.HAMSTRINGS, 60), _s(M.ABS, 40)),

    # ── Core ──────────────────────────────────────────────────────
    _ex("Ab Wheel Rollout", CO, T2, 36, 5, 7, True, 8,
        _p(M.ABS, 100), _s(M.ERECTOR_SPINAE, 60), _s(M.LATS, 40)),
    _ex("Plank", CO, T1, 24, 2, 3, False, 6,
        _p(M.ABS, 100), _s(M.OBLIQUES, 70), _s(M.ERECTOR_SPINAE, 40)),
    _ex("Hanging Leg Raise", CO, T2, 30, 4, 6, False, 7,
        _p(M.ABS, 100), _s(M.FOREARMS, 60), _s(M.LATS, 30)),
]

EXERCISE_CATALOG: Mapping[str, ExerciseProfile] = MappingProxyType({e.name: e for e in _EXERCISES})

_BY_LOWER_NAME: dict[str, str] = {name.lower(): name for name in EXERCISE_CATALOG}


# ======================================================================
# Lookup
# ======================================================================

def get_exercise(
    name: str,
    catalog: Mapping[str, ExerciseProfile] | None = None,
) -> ExerciseProfile | None:
    """Look up an exercise by name (exact, then case-insensitive).

    Args:
        name: Exercise name as logged.
        catalog: Optional alternative catalog (defaults to the built-in one).

    Returns:
        The matching profile, or ``None`` if not found.
    """
    table = EXERCISE_CATALOG if catalog is None else catalog
    profile = table.get(name)
    if profile is not None:
        return profile
    if catalog is None:
        canonical = _BY_LOWER_NAME.get(name.strip().lower())
        return EXERCISE_CATALOG.get(canonical) if canonical else None
    lowered = name.strip().lower()
    for key, candidate in table.items():
        if key.lower() == lowered:
            return candidate
    return None

