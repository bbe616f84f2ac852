"""
Spillover propagation — fatigue transferred between related muscles.

Training one muscle also tires its synergists, stabilisers and, to a
lesser extent, its antagonists.  Each directed edge of the spillover
graph moves a percentage of the *source's direct fatigue* onto the
target:

    spillover[target] = min(100, Σ direct[source] × pct / 100)

and the target's total fatigue combines both components with
diminishing returns (a muscle that is already exhausted cannot receive
much more):

    total = min(100, direct + spillover × sqrt(1 - direct / 100))

Propagation is a **single pass** over direct fatigue only.  Second-order
effects (A → B → C) are not modelled, which also makes the operation
idempotent: applying it twice to the same direct input yields the same
result.
"""

from __future__ import annotations

import datetime
import math
from typing import Iterable, Mapping

from app.catalog.muscles import MuscleId, muscle_half_life, optimal_training_window
from app.catalog.spillover import (
    IMBALANCE_CHECKS,
    SPILLOVER_EDGES,
    ImbalanceCheck,
    SpilloverEdge,
    SpilloverMechanism,
)
from app.recovery.decay import MAX_FATIGUE, RECOVERED_FLOOR, projected_recovery
from app.schemas.recovery import MuscleImbalance, MuscleImbalanceSeverity, MuscleState

# Synergist edges at or above this percentage count as "major" synergists.
_MAJOR_SYNERGIST_PCT = 40.0

_SEVERITY_ORDER: dict[MuscleImbalanceSeverity, int] = {
    MuscleImbalanceSeverity.HIGH: 0,
    MuscleImbalanceSeverity.MODERATE: 1,
    MuscleImbalanceSeverity.LOW: 2,
}


# ======================================================================
# Propagation
# ======================================================================


def compute_spillover_received(
    direct: Mapping[MuscleId, float],
    edges: Iterable[SpilloverEdge] = SPILLOVER_EDGES,
) -> dict[MuscleId, float]:
    """Spillover fatigue each muscle receives from the direct fatigue of others.

    Self-edges are ignored; each total is capped at 100.
    """
    received: dict[MuscleId, float] = {}
    for edge in edges:
        if edge.source == edge.target:
            continue
        source_fatigue = direct.get(edge.source, 0.0)
        if source_fatigue <= 0:
            continue
        received[edge.target] = received.get(edge.target, 0.0) + source_fatigue * edge.percentage / 100.0
    return {m: min(MAX_FATIGUE, v) for m, v in received.items()}


def combine_fatigue(direct: float, spillover: float) -> float:
    """Total fatigue from direct and spillover components."""
    headroom = math.sqrt(max(0.0, 1.0 - direct / 100.0))
    return min(MAX_FATIGUE, direct + spillover * headroom)


def apply_spillover(
    states: Mapping[MuscleId, MuscleState],
    now: datetime.datetime,
    edges: Iterable[SpilloverEdge] = SPILLOVER_EDGES,
    half_lives: Mapping[str, float] | None = None,
    floor: float = RECOVERED_FLOOR,
) -> dict[MuscleId, MuscleState]:
    """Return new muscle states with spillover folded into total fatigue.

    Muscles that were not trained directly but receive spillover get a
    fresh state with zero direct fatigue.  The input mapping is not
    modified.

    Args:
        states: Direct-fatigue states keyed by muscle.
        now: Reference time for recovery projections.
        edges: Spillover graph.
        half_lives: Optional per-entity half-life overrides (calibrated values).
        floor: Fatigue considered recovered when projecting ETAs.

    Returns:
        States for every muscle with direct or spillover fatigue, in
        :class:`MuscleId` declaration order.
    """
    direct = {m: s.direct_fatigue for m, s in states.items()}
    received = compute_spillover_received(direct, edges)
    overrides = half_lives or {}

    result: dict[MuscleId, MuscleState] = {}
    for muscle in MuscleId:
        state = states.get(muscle)
        spill = received.get(muscle, 0.0)
        if state is None and spill <= 0:
            continue

        if state is None:
            half_life = overrides.get(muscle.value, muscle_half_life(muscle))
            state = MuscleState(
                muscle=muscle,
                half_life_hours=half_life,
                direct_fatigue=0.0,
                fatigue=0.0,
                training_window=optimal_training_window(muscle),
            )

        total = combine_fatigue(state.direct_fatigue, spill)
        result[muscle] = state.model_copy(update={
            "spillover_fatigue": spill,
            "fatigue": total,
            "recovered_at": projected_recovery(total, state.half_life_hours, now, floor),
        })
    return result


# ======================================================================
# Graph queries
# ======================================================================


def synergists_of(
    muscle: MuscleId,
    edges: Iterable[SpilloverEdge] = SPILLOVER_EDGES,
) -> list[MuscleId]:
    """Major synergists (>= 40 % transfer) that *muscle* tires."""
    return [
        e.target for e in edges
        if e.source == muscle
        and e.mechanism == SpilloverMechanism.SYNERGIST
        and e.percentage >= _MAJOR_SYNERGIST_PCT
    ]


def antagonists_of(
    muscle: MuscleId,
    edges: Iterable[SpilloverEdge] = SPILLOVER_EDGES,
) -> list[MuscleId]:
    return [
        e.target for e in edges
        if e.source == muscle and e.mechanism == SpilloverMechanism.ANTAGONIST
    ]


# ======================================================================
# Imbalance detection
# ======================================================================


def _classify_imbalance(ratio: float, threshold: float) -> MuscleImbalanceSeverity | None:
    if ratio >= threshold * 1.5:
        return MuscleImbalanceSeverity.HIGH
    if ratio >= threshold:
        return MuscleImbalanceSeverity.MODERATE
    if ratio >= threshold * 0.8:
        return MuscleImbalanceSeverity.LOW
    return None


def detect_imbalances(
    fatigue: Mapping[MuscleId, float],
    checks: Iterable[ImbalanceCheck] = IMBALANCE_CHECKS,
) -> list[MuscleImbalance]:
    """Fatigue-ratio imbalances between opposing muscle groups.

    A check is skipped when the denominator muscle carries no fatigue.

    Returns:
        Imbalances sorted by severity (high first), ties in check order.
    """
    found: list[MuscleImbalance] = []
    for check in checks:
        denominator = fatigue.get(check.denominator, 0.0)
        if denominator <= 0:
            continue
        ratio = fatigue.get(check.numerator, 0.0) / denominator
        severity = _classify_imbalance(ratio, check.threshold)
        if severity is None:
            continue
        found.append(MuscleImbalance(
            numerator=check.numerator,
            denominator=check.denominator,
            ratio=round(ratio, 4),
            threshold=check.threshold,
            severity=severity,
            risk=check.risk,
        ))
    found.sort(key=lambda i: _SEVERITY_ORDER[i.severity])
    return found
