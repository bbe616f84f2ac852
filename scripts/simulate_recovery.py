"""What does the recovery engine say after a week of training?

Runs the engine directly (no database) on a hand-written push/pull/legs
week and prints muscle recovery, at-risk structures and the injury-risk
verdict.

Usage:
    python scripts/simulate_recovery.py
"""

import datetime
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from app.recovery import compute_recovery_assessment
from app.schemas.context import ContextBundle, Demographics, NutritionRecord, SleepRecord
from app.schemas.observation import TrainingObservation

NOW = datetime.datetime(2026, 10, 17, 18, 0)

# (days ago, exercise, sets, reps, kg, rpe)
RAW_DATA = [
    (6, "Barbell Bench Press", 4, 8, 80, 8),
    (6, "Barbell Overhead Press", 3, 6, 50, 8),
    (6, "Tricep Pushdown", 3, 12, 30, 9),
    (5, "Conventional Deadlift", 5, 3, 160, 9),
    (5, "Barbell Row", 4, 8, 70, 8),
    (5, "Barbell Curl", 3, 10, 35, 9),
    (3, "Barbell Back Squat", 5, 5, 120, 9),
    (3, "Leg Curl", 3, 12, 40, 8),
    (3, "Calf Raise", 4, 15, 60, 8),
    (1, "Barbell Bench Press", 5, 5, 90, 9),
    (1, "Weighted Dip", 3, 8, 20, 9),
    (1, "Lateral Raise", 4, 15, 10, 9),
]


def build_observations():
    return [
        TrainingObservation(
            timestamp=NOW - datetime.timedelta(days=days_ago, hours=1),
            exercise_name=name,
            sets=sets,
            reps=reps,
            weight=weight,
            rpe=rpe,
        )
        for days_ago, name, sets, reps, weight, rpe in RAW_DATA
    ]


def build_context():
    today = NOW.date()
    return ContextBundle(
        sleep=[
            SleepRecord(date=today - datetime.timedelta(days=i), hours=hours, quality="good")
            for i, hours in enumerate([7.5, 6.0, 8.0, 7.0, 6.5])
        ],
        nutrition=NutritionRecord(date=today, protein_g_per_kg=1.8, carbs_g_per_kg=4.0),
        demographics=Demographics(age=34, training_age_years=4, experience="intermediate"),
    )


def main():
    assessment = compute_recovery_assessment(build_observations(), NOW, build_context(), user_id=1)

    print()
    print("=" * 65)
    print(f"  Recovery assessment: {NOW:%A %d %B %Y %H:%M}")
    print("=" * 65)
    print(f"  Overall recovery:  {assessment.overall_recovery:5.1f}%")
    print(f"  ACWR:              {assessment.acwr:5.2f}")
    print(f"  Context modifier:  {assessment.context.overall:5.2f}")
    print(f"  Data quality:      {assessment.data_quality.value} ({assessment.confidence:.1f})")
    print()

    print(f"  {'Muscle':<16} {'Recovery':>9} {'Recovered at':>18}")
    print("  " + "-" * 45)
    for muscle, state in assessment.muscles.items():
        eta = f"{state.recovered_at:%a %H:%M}" if state.recovered_at else "now"
        print(f"  {muscle.value:<16} {state.recovery:>8.1f}% {eta:>18}")
    print()

    at_risk = [s for s in assessment.connective_tissue.values() if s.is_at_risk]
    print(f"  Structures at risk: {', '.join(s.structure.value for s in at_risk) or 'none'}")
    print()

    risk = assessment.injury_risk
    print(f"  Injury risk: {risk.score:.0f}/100 ({risk.level.value})")
    for factor in risk.factors:
        print(f"    - {factor.factor:<20} {factor.score:5.1f}  {factor.recommendation}")
    if risk.should_rest:
        print(f"  >>> REST until {risk.safe_to_resume_at:%d %B}")
    elif risk.should_deload:
        print("  >>> DELOAD this week")
    else:
        print(f"  >>> TRAIN: {', '.join(m.value for m in assessment.recommendations.trainable_muscles)}")
    print()


if __name__ == "__main__":
    main()
