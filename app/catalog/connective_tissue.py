"""
Connective-tissue structures and exercise stress profiles.

Tendons, ligaments, cartilage and bursae adapt and recover far more
slowly than muscle: collagen turnover runs on a scale of days to weeks,
so half-lives here are 7-30 days versus 1-4 days for muscle.

Two accumulation behaviours are modelled through the ``cumulative`` flag:

* **cumulative** (tendons, discs, bursae) — overuse tissue.  Stress from
  repeated sessions keeps adding even when each session alone is
  harmless.
* **non-cumulative** (ACL, ankle ligaments) — acute-injury tissue.  Only
  the single highest decayed insult matters.

``injury_threshold`` is the stress level (0-100) at which the structure
is considered at risk.

Exercise stress profiles list, per exercise, the structures it loads with
a base stress plus multipliers applied when the set emphasises the
eccentric phase or is performed ballistically.
"""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Mapping

from pydantic import BaseModel, ConfigDict, Field


# ======================================================================
# Enums
# ======================================================================

class StructureId(str, Enum):
    """Stable identifier for each tracked structure."""
    ROTATOR_CUFF_TENDONS = "Rotator Cuff Tendons"
    SHOULDER_LABRUM = "Shoulder Labrum"
    SUBACROMIAL_BURSA = "Subacromial Bursa"
    BICEPS_TENDON = "Biceps Tendon (Long Head)"
    TRICEPS_TENDON = "Triceps Tendon"
    ULNAR_COLLATERAL_LIGAMENT = "Ulnar Collateral Ligament"
    WRIST_EXTENSOR_TENDONS = "Wrist Extensor Tendons"
    WRIST_FLEXOR_TENDONS = "Wrist Flexor Tendons"
    SPINAL_ERECTOR_TENDONS = "Spinal Erector Tendons"
    SPINAL_LIGAMENTS = "Spinal Ligaments"
    INTERVERTEBRAL_DISCS = "Intervertebral Discs"
    HIP_FLEXOR_TENDONS = "Hip Flexor Tendons"
    GLUTE_TENDONS = "Glute Tendons"
    HIP_LABRUM = "Hip Labrum"
    PATELLAR_TENDON = "Patellar Tendon"
    QUADRICEPS_TENDON = "Quadriceps Tendon"
    ACL = "ACL"
    MENISCUS = "Meniscus"
    ACHILLES_TENDON = "Achilles Tendon"
    ANKLE_LIGAMENTS = "Ankle Ligaments"


class StructureType(str, Enum):
    TENDON = "tendon"
    LIGAMENT = "ligament"
    CARTILAGE = "cartilage"
    BURSA = "bursa"


class Joint(str, Enum):
    SHOULDER = "shoulder"
    ELBOW = "elbow"
    WRIST = "wrist"
    SPINE = "spine"
    HIP = "hip"
    KNEE = "knee"
    ANKLE = "ankle"


# ======================================================================
# Models
# ======================================================================

class ConnectiveStructure(BaseModel):
    """Reference data for one connective-tissue structure."""

    model_config = ConfigDict(frozen=True)

    structure: StructureId
    structure_type: StructureType
    joint: Joint
    half_life_hours: float = Field(..., gt=0.0)
    eccentric_vulnerable: bool
    ballistic_vulnerable: bool
    cumulative: bool = Field(
        ...,
        description="Sum repeated insults (overuse) instead of keeping the peak (acute)",
    )
    injury_threshold: float = Field(..., gt=0.0, le=100.0)


class StructureStress(BaseModel):
    """How strongly one exercise loads one structure."""

    model_config = ConfigDict(frozen=True)

    structure: StructureId
    base_stress: float = Field(..., ge=0.0, le=100.0)
    eccentric_multiplier: float = Field(1.0, ge=1.0)
    ballistic_multiplier: float = Field(1.0, ge=1.0)


# ======================================================================
# Built-in structures
# ======================================================================

S = StructureId
TEN, LIG, CART, BUR = StructureType.TENDON, StructureType.LIGAMENT, StructureType.CARTILAGE, StructureType.BURSA
J = Joint


def _st(structure: StructureId, kind: StructureType, joint: Joint, half_life: float,
        ecc: bool, ball: bool, cumulative: bool, threshold: float) -> ConnectiveStructure:
    return ConnectiveStructure(
        structure=structure, structure_type=kind, joint=joint, half_life_hours=half_life,
        eccentric_vulnerable=ecc, ballistic_vulnerable=ball, cumulative=cumulative,
        injury_threshold=threshold,
    )


_STRUCTURES: list[ConnectiveStructure] = [
    # ── Shoulder ──────────────────────────────────────────────────
    _st(S.ROTATOR_CUFF_TENDONS, TEN, J.SHOULDER, 288, True, True, True, 70),
    _st(S.SHOULDER_LABRUM, CART, J.SHOULDER, 480, False, True, True, 60),
    _st(S.SUBACROMIAL_BURSA, BUR, J.SHOULDER, 168, False, False, True, 75),
    # ── Elbow ─────────────────────────────────────────────────────
    _st(S.BICEPS_TENDON, TEN, J.ELBOW, 240, True, False, True, 70),
    _st(S.TRICEPS_TENDON, TEN, J.ELBOW, 216, True, True, True, 75),
    _st(S.ULNAR_COLLATERAL_LIGAMENT, LIG, J.ELBOW, 336, False, True, True, 65),
    # ── Wrist ─────────────────────────────────────────────────────
    _st(S.WRIST_EXTENSOR_TENDONS, TEN, J.WRIST, 192, True, False, True, 75),
    _st(S.WRIST_FLEXOR_TENDONS, TEN, J.WRIST, 192, True, False, True, 75),
    # ── Spine ─────────────────────────────────────────────────────
    _st(S.SPINAL_ERECTOR_TENDONS, TEN, J.SPINE, 360, True, False, True, 60),
    _st(S.SPINAL_LIGAMENTS, LIG, J.SPINE, 480, False, True, True, 55),
    _st(S.INTERVERTEBRAL_DISCS, CART, J.SPINE, 720, False, True, True, 50),
    # ── Hip ───────────────────────────────────────────────────────
    _st(S.HIP_FLEXOR_TENDONS, TEN, J.HIP, 240, True, True, True, 70),
    _st(S.GLUTE_TENDONS, TEN, J.HIP, 264, True, False, True, 75),
    _st(S.HIP_LABRUM, CART, J.HIP, 480, False, True, True, 60),
    # ── Knee ──────────────────────────────────────────────────────
    _st(S.PATELLAR_TENDON, TEN, J.KNEE, 312, True, True, True, 65),
    _st(S.QUADRICEPS_TENDON, TEN, J.KNEE, 288, True, True, True, 70),
    _st(S.ACL, LIG, J.KNEE, 480, False, True, False, 50),
    _st(S.MENISCUS, CART, J.KNEE, 600, False, True, True, 55),
    # ── Ankle ─────────────────────────────────────────────────────
    _st(S.ACHILLES_TENDON, TEN, J.ANKLE, 336, True, True, True, 65),
    _st(S.ANKLE_LIGAMENTS, LIG, J.ANKLE, 288, False, True, False, 60),
]

STRUCTURE_CATALOG: Mapping[StructureId, ConnectiveStructure] = MappingProxyType(
    {s.structure: s for s in _STRUCTURES}
)


# ======================================================================
# Exercise stress profiles
# ======================================================================

def _ss(structure: StructureId, base: float, ecc: float, ball: float) -> StructureStress:
    return StructureStress(structure=structure, base_stress=base,
                           eccentric_multiplier=ecc, ballistic_multiplier=ball)


EXERCISE_STRESS: Mapping[str, tuple[StructureStress, ...]] = MappingProxyType({
    "Barbell Back Squat": (
        _ss(S.PATELLAR_TENDON, 50, 1.4, 1.3),
        _ss(S.QUADRICEPS_TENDON, 45, 1.4, 1.3),
        _ss(S.SPINAL_ERECTOR_TENDONS, 55, 1.2, 1.2),
        _ss(S.SPINAL_LIGAMENTS, 60, 1.1, 1.4),
        _ss(S.HIP_FLEXOR_TENDONS, 35, 1.3, 1.2),
        _ss(S.ACHILLES_TENDON, 25, 1.2, 1.3),
    ),
    "Barbell Front Squat": (
        _ss(S.PATELLAR_TENDON, 55, 1.4, 1.3),
        _ss(S.QUADRICEPS_TENDON, 50, 1.4, 1.3),
        _ss(S.SPINAL_ERECTOR_TENDONS, 45, 1.2, 1.2),
        _ss(S.WRIST_EXTENSOR_TENDONS, 30, 1.1, 1.2),
    ),
    "Conventional Deadlift": (
        _ss(S.SPINAL_ERECTOR_TENDONS, 70, 1.3, 1.2),
        _ss(S.SPINAL_LIGAMENTS, 75, 1.2, 1.5),
        _ss(S.INTERVERTEBRAL_DISCS, 65, 1.1, 1.4),
        _ss(S.GLUTE_TENDONS, 45, 1.3, 1.2),
        _ss(S.WRIST_EXTENSOR_TENDONS, 40, 1.1, 1.1),
    ),
    "Romanian Deadlift": (
        _ss(S.SPINAL_ERECTOR_TENDONS, 55, 1.3, 1.2),
        _ss(S.SPINAL_LIGAMENTS, 50, 1.2, 1.3),
        _ss(S.GLUTE_TENDONS, 40, 1.3, 1.1),
    ),
    "Barbell Bench Press": (
        _ss(S.ROTATOR_CUFF_TENDONS, 45, 1.4, 1.3),
        _ss(S.SUBACROMIAL_BURSA, 50, 1.2, 1.2),
        _ss(S.TRICEPS_TENDON, 40, 1.3, 1.3),
        _ss(S.BICEPS_TENDON, 30, 1.4, 1.2),
        _ss(S.WRIST_EXTENSOR_TENDONS, 25, 1.2, 1.1),
    ),
    "Barbell Overhead Press": (
        _ss(S.ROTATOR_CUFF_TENDONS, 60, 1.3, 1.4),
        _ss(S.SUBACROMIAL_BURSA, 65, 1.2, 1.3),
        _ss(S.SHOULDER_LABRUM, 50, 1.2, 1.5),
        _ss(S.TRICEPS_TENDON, 45, 1.3, 1.3),
        _ss(S.SPINAL_ERECTOR_TENDONS, 40, 1.2, 1.2),
    ),
    "Pull-Up": (
        _ss(S.BICEPS_TENDON, 45, 1.5, 1.3),
        _ss(S.ROTATOR_CUFF_TENDONS, 40, 1.3, 1.3),
        _ss(S.ULNAR_COLLATERAL_LIGAMENT, 35, 1.2, 1.4),
        _ss(S.WRIST_FLEXOR_TENDONS, 30, 1.2, 1.1),
    ),
    "Barbell Row": (
        _ss(S.SPINAL_ERECTOR_TENDONS, 55, 1.3, 1.2),
        _ss(S.SPINAL_LIGAMENTS, 50, 1.2, 1.3),
        _ss(S.BICEPS_TENDON, 35, 1.4, 1.2),
        _ss(S.WRIST_FLEXOR_TENDONS, 40, 1.2, 1.1),
    ),
    "Weighted Dip": (
        _ss(S.SUBACROMIAL_BURSA, 45, 1.3, 1.3),
        _ss(S.ROTATOR_CUFF_TENDONS, 40, 1.3, 1.3),
        _ss(S.TRICEPS_TENDON, 50, 1.3, 1.3),
    ),
    "Bulgarian Split Squat": (
        _ss(S.PATELLAR_TENDON, 40, 1.4, 1.3),
        _ss(S.HIP_FLEXOR_TENDONS, 35, 1.3, 1.2),
        _ss(S.ACL, 25, 1.1, 1.6),
        _ss(S.ANKLE_LIGAMENTS, 20, 1.1, 1.5),
    ),
    "Leg Press": (
        _ss(S.PATELLAR_TENDON, 40, 1.3, 1.2),
        _ss(S.QUADRICEPS_TENDON, 35, 1.3, 1.2),
        _ss(S.MENISCUS, 25, 1.1, 1.3),
    ),
})


def get_structure(name: str | StructureId) -> ConnectiveStructure | None:
    """Look up a structure by id or name.  Returns ``None`` if not found."""
    if isinstance(name, StructureId):
        return STRUCTURE_CATALOG.get(name)
    try:
        return STRUCTURE_CATALOG.get(StructureId(name))
    except ValueError:
        return None
