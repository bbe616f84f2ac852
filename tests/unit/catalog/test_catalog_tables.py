"""Tests for the built-in reference tables (muscles, exercises, tissue, spillover)."""

import pytest

from app.catalog.connective_tissue import EXERCISE_STRESS, STRUCTURE_CATALOG, StructureId, get_structure
from app.catalog.exercises import EXERCISE_CATALOG, ExerciseProfile, ExerciseTier, get_exercise
from app.catalog.muscles import (
    DEFAULT_MUSCLE_HALF_LIFE,
    MUSCLE_CATALOG,
    MuscleId,
    get_muscle,
    muscle_half_life,
    optimal_training_window,
    resolve_muscle,
)
from app.catalog.spillover import IMBALANCE_CHECKS, SPILLOVER_EDGES, edges_from


class TestMuscleCatalog:
    def test_every_muscle_has_a_profile(self):
        assert set(MUSCLE_CATALOG) == set(MuscleId)

    def test_half_lives_positive(self):
        for muscle, profile in MUSCLE_CATALOG.items():
            assert profile.half_life_hours > 0, f"{muscle}: non-positive half-life"

    @pytest.mark.parametrize("name", ["Chest", "chest", "  CHEST ", MuscleId.CHEST])
    def test_resolve_is_case_insensitive(self, name):
        assert resolve_muscle(name) == MuscleId.CHEST

    def test_unknown_muscle(self):
        assert get_muscle("Pinky Toe") is None
        assert muscle_half_life("Pinky Toe") == DEFAULT_MUSCLE_HALF_LIFE

    def test_training_window_from_half_life(self):
        window = optimal_training_window(MuscleId.CHEST)
        # base = 2 × 48h
        assert window.min_wait_hours == pytest.approx(76.8)
        assert window.optimal_hours == pytest.approx(124.8)
        assert window.max_wait_hours == pytest.approx(192.0)

    def test_catalog_is_read_only(self):
        with pytest.raises(TypeError):
            MUSCLE_CATALOG[MuscleId.CHEST] = None  # type: ignore[index]


class TestExerciseCatalog:
    def test_catalog_not_empty(self):
        assert len(EXERCISE_CATALOG) >= 30

    def test_name_matches_key(self):
        for key, profile in EXERCISE_CATALOG.items():
            assert isinstance(profile, ExerciseProfile)
            assert profile.name == key

    def test_every_exercise_has_a_primary_mover(self):
        for name, profile in EXERCISE_CATALOG.items():
            assert profile.primary_muscles, f"{name} has no primary mover"

    def test_axial_lifts_load_the_spine(self):
        for name, profile in EXERCISE_CATALOG.items():
            if profile.tier == ExerciseTier.AXIAL:
                assert profile.spinal_loading, f"{name} is axial but not spinal-loading"

    def test_lookup_exact_then_case_insensitive(self):
        assert get_exercise("Barbell Bench Press").name == "Barbell Bench Press"
        assert get_exercise("barbell bench press").name == "Barbell Bench Press"
        assert get_exercise("Underwater Basket Weaving") is None

    def test_lookup_in_custom_catalog(self):
        custom = {"Chest Machine": EXERCISE_CATALOG["Pec Fly"].model_copy(update={"name": "Chest Machine"})}
        assert get_exercise("chest machine", custom).name == "Chest Machine"
        assert get_exercise("Barbell Bench Press", custom) is None

    def test_involvement_for(self):
        bench = get_exercise("Barbell Bench Press")
        assert bench.involvement_for(MuscleId.CHEST).primary is True
        assert bench.involvement_for(MuscleId.CALVES) is None


class TestConnectiveTissueCatalog:
    def test_every_structure_has_reference_data(self):
        assert set(STRUCTURE_CATALOG) == set(StructureId)

    def test_stress_profiles_reference_known_exercises(self):
        for name in EXERCISE_STRESS:
            assert get_exercise(name) is not None, f"stress profile for unknown exercise {name}"

    def test_get_structure(self):
        assert get_structure("ACL").structure == StructureId.ACL
        assert get_structure(StructureId.MENISCUS).cumulative is True
        assert get_structure("Funny Bone") is None

    def test_acl_is_acute(self):
        assert STRUCTURE_CATALOG[StructureId.ACL].cumulative is False


class TestSpilloverTable:
    def test_no_self_edges(self):
        for edge in SPILLOVER_EDGES:
            assert edge.source != edge.target

    def test_edges_from_preserves_table_order(self):
        targets = [e.target for e in edges_from(MuscleId.CHEST)]
        assert targets == [MuscleId.FRONT_DELTS, MuscleId.TRICEPS, MuscleId.LATS, MuscleId.ABS]

    def test_imbalance_thresholds_above_one(self):
        for check in IMBALANCE_CHECKS:
            assert check.threshold > 1.0
