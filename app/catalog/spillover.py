"""
Cross-muscle fatigue spillover graph.

Training one muscle fatigues its neighbours: synergists share the work,
stabilisers hold position under load, antagonists brake the movement and
kinetic-chain partners transfer force.  Each edge states what share of
the source muscle's fatigue reaches the target.

Edges are **directed**.  Where the relationship runs both ways the
reverse edge is listed explicitly (often with a different percentage),
so the ``bidirectional`` flag is descriptive only.

The module also carries the anatomical ratio checks used to detect
fatigue imbalances between opposing muscle groups.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from app.catalog.muscles import MuscleId


class SpilloverMechanism(str, Enum):
    """Why fatigue transfers between two muscles."""
    SYNERGIST = "synergist"
    ANTAGONIST = "antagonist"
    STABILIZER = "stabilizer"
    KINETIC_CHAIN = "kinetic_chain"
    POSTURAL = "postural"
    NEURAL = "neural"


class SpilloverEdge(BaseModel):
    """Directed fatigue transfer from *source* to *target*."""

    model_config = ConfigDict(frozen=True)

    source: MuscleId
    target: MuscleId
    percentage: float = Field(..., ge=0.0, le=100.0)
    mechanism: SpilloverMechanism
    bidirectional: bool = False


class ImbalanceCheck(BaseModel):
    """Ratio check between two opposing muscle groups."""

    model_config = ConfigDict(frozen=True)

    numerator: MuscleId
    denominator: MuscleId
    threshold: float = Field(..., gt=0.0)
    risk: str = Field(..., description="Machine-readable injury risk id")


# ======================================================================
# Edge table
# ======================================================================

M = MuscleId
SYN = SpilloverMechanism.SYNERGIST
ANT = SpilloverMechanism.ANTAGONIST
STAB = SpilloverMechanism.STABILIZER
KC = SpilloverMechanism.KINETIC_CHAIN
POST = SpilloverMechanism.POSTURAL


def _edge(source: MuscleId, target: MuscleId, pct: float, mechanism: SpilloverMechanism,
          bidirectional: bool) -> SpilloverEdge:
    return SpilloverEdge(source=source, target=target, percentage=pct, mechanism=mechanism,
                         bidirectional=bidirectional)


SPILLOVER_EDGES: tuple[SpilloverEdge, ...] = (
    # ── Pushing ───────────────────────────────────────────────────
    _edge(M.CHEST, M.FRONT_DELTS, 40, SYN, True),
    _edge(M.CHEST, M.TRICEPS, 50, SYN, False),
    _edge(M.CHEST, M.LATS, 15, STAB, True),
    _edge(M.CHEST, M.ABS, 20, STAB, False),
    # ── Pulling ───────────────────────────────────────────────────
    _edge(M.LATS, M.BICEPS, 45, SYN, False),
    _edge(M.LATS, M.UPPER_BACK, 60, SYN, True),
    _edge(M.LATS, M.REAR_DELTS, 35, SYN, True),
    _edge(M.LATS, M.FOREARMS, 30, SYN, False),
    _edge(M.LATS, M.ERECTOR_SPINAE, 25, STAB, True),
    _edge(M.LATS, M.ABS, 20, STAB, False),
    _edge(M.UPPER_BACK, M.LATS, 50, SYN, True),
    _edge(M.UPPER_BACK, M.REAR_DELTS, 60, SYN, True),
    _edge(M.UPPER_BACK, M.TRAPS, 70, SYN, True),
    _edge(M.UPPER_BACK, M.BICEPS, 30, SYN, False),
    _edge(M.UPPER_BACK, M.ERECTOR_SPINAE, 40, KC, True),
    # ── Spine ─────────────────────────────────────────────────────
    _edge(M.ERECTOR_SPINAE, M.LOWER_BACK, 90, SYN, True),
    _edge(M.ERECTOR_SPINAE, M.GLUTES, 50, KC, True),
    _edge(M.ERECTOR_SPINAE, M.HAMSTRINGS, 45, KC, True),
    _edge(M.ERECTOR_SPINAE, M.ABS, 60, ANT, True),
    _edge(M.ERECTOR_SPINAE, M.UPPER_BACK, 35, POST, False),
    _edge(M.LOWER_BACK, M.ERECTOR_SPINAE, 100, SYN, True),
    _edge(M.LOWER_BACK, M.GLUTES, 40, KC, True),
    _edge(M.LOWER_BACK, M.HAMSTRINGS, 35, KC, True),
    # ── Shoulders ─────────────────────────────────────────────────
    _edge(M.FRONT_DELTS, M.CHEST, 35, SYN, True),
    _edge(M.FRONT_DELTS, M.SIDE_DELTS, 40, SYN, True),
    _edge(M.FRONT_DELTS, M.TRICEPS, 45, SYN, False),
    _edge(M.FRONT_DELTS, M.UPPER_BACK, 25, STAB, False),
    _edge(M.SIDE_DELTS, M.FRONT_DELTS, 30, SYN, True),
    _edge(M.SIDE_DELTS, M.REAR_DELTS, 30, SYN, True),
    _edge(M.SIDE_DELTS, M.TRAPS, 50, SYN, True),
    _edge(M.SIDE_DELTS, M.UPPER_BACK, 20, STAB, False),
    _edge(M.REAR_DELTS, M.SIDE_DELTS, 25, SYN, True),
    _edge(M.REAR_DELTS, M.UPPER_BACK, 70, SYN, True),
    _edge(M.REAR_DELTS, M.LATS, 30, STAB, False),
    _edge(M.REAR_DELTS, M.TRAPS, 40, SYN, True),
    _edge(M.TRAPS, M.UPPER_BACK, 80, SYN, True),
    _edge(M.TRAPS, M.REAR_DELTS, 35, SYN, True),
    _edge(M.TRAPS, M.ERECTOR_SPINAE, 60, KC, True),
    _edge(M.TRAPS, M.FOREARMS, 40, SYN, False),
    # ── Arms ──────────────────────────────────────────────────────
    _edge(M.BICEPS, M.FOREARMS, 60, SYN, False),
    _edge(M.BICEPS, M.LATS, 20, SYN, False),
    _edge(M.BICEPS, M.UPPER_BACK, 15, STAB, False),
    _edge(M.BICEPS, M.TRICEPS, 10, ANT, True),
    _edge(M.TRICEPS, M.CHEST, 30, SYN, False),
    _edge(M.TRICEPS, M.FRONT_DELTS, 35, SYN, False),
    _edge(M.TRICEPS, M.BICEPS, 10, ANT, True),
    _edge(M.TRICEPS, M.FOREARMS, 25, STAB, False),
    _edge(M.FOREARMS, M.BICEPS, 15, KC, False),
    _edge(M.FOREARMS, M.TRICEPS, 10, STAB, False),
    _edge(M.FOREARMS, M.LATS, 20, KC, False),
    # ── Legs ──────────────────────────────────────────────────────
    _edge(M.QUADS, M.GLUTES, 55, SYN, True),
    _edge(M.QUADS, M.HAMSTRINGS, 40, ANT, True),
    _edge(M.QUADS, M.ABS, 30, STAB, False),
    _edge(M.QUADS, M.ERECTOR_SPINAE, 35, STAB, False),
    _edge(M.QUADS, M.CALVES, 25, KC, False),
    _edge(M.GLUTES, M.HAMSTRINGS, 70, SYN, True),
    _edge(M.GLUTES, M.QUADS, 45, SYN, True),
    _edge(M.GLUTES, M.ERECTOR_SPINAE, 60, KC, True),
    _edge(M.GLUTES, M.LOWER_BACK, 50, KC, True),
    _edge(M.GLUTES, M.ABS, 35, STAB, False),
    _edge(M.HAMSTRINGS, M.GLUTES, 75, SYN, True),
    _edge(M.HAMSTRINGS, M.QUADS, 35, ANT, True),
    _edge(M.HAMSTRINGS, M.ERECTOR_SPINAE, 50, KC, True),
    _edge(M.HAMSTRINGS, M.LOWER_BACK, 45, KC, True),
    _edge(M.HAMSTRINGS, M.CALVES, 30, KC, False),
    _edge(M.CALVES, M.HAMSTRINGS, 20, KC, False),
    _edge(M.CALVES, M.QUADS, 15, KC, False),
    # ── Core ──────────────────────────────────────────────────────
    _edge(M.ABS, M.OBLIQUES, 80, SYN, True),
    _edge(M.ABS, M.ERECTOR_SPINAE, 50, ANT, True),
    _edge(M.ABS, M.LOWER_BACK, 40, POST, False),
    _edge(M.ABS, M.QUADS, 15, STAB, False),
    _edge(M.OBLIQUES, M.ABS, 70, SYN, True),
    _edge(M.OBLIQUES, M.ERECTOR_SPINAE, 40, ANT, True),
    _edge(M.OBLIQUES, M.LOWER_BACK, 35, POST, False),
)


# ======================================================================
# Imbalance checks
# ======================================================================

IMBALANCE_CHECKS: tuple[ImbalanceCheck, ...] = (
    ImbalanceCheck(numerator=M.QUADS, denominator=M.HAMSTRINGS, threshold=1.5,
                   risk="acl_knee_injury"),
    ImbalanceCheck(numerator=M.CHEST, denominator=M.UPPER_BACK, threshold=1.4,
                   risk="shoulder_impingement"),
    ImbalanceCheck(numerator=M.ERECTOR_SPINAE, denominator=M.ABS, threshold=1.3,
                   risk="lower_back_strain"),
    ImbalanceCheck(numerator=M.FRONT_DELTS, denominator=M.REAR_DELTS, threshold=1.5,
                   risk="rotator_cuff_injury"),
)


def edges_from(source: MuscleId) -> list[SpilloverEdge]:
    """Outgoing edges of *source* in table order."""
    return [e for e in SPILLOVER_EDGES if e.source == source]
