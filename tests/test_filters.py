"""
Tests for filter normalization and the filter engine.
"""
import pandas as pd
import pytest

from gymstats.aggregate import AggregatedRow, aggregate_workouts
from gymstats.data import WorkoutRecord, load_dataset, records_frame
from gymstats.filters import (
    ALL_GENDERS,
    FilterPolicy,
    FilterState,
    apply_filters,
    normalize_filters,
    normalize_policy,
)


def _rec(workout, gender, age=None):
    return WorkoutRecord(workout_type=workout, gender=gender, calories_burned=100.0, max_bpm=150.0, age=age)


@pytest.fixture
def mixed_records():
    return [
        _rec("Cardio", "Male", 30),
        _rec("Cardio", "Female", 45),
        _rec("Yoga", "Female", 22),
        _rec("Yoga", "Male", None),
        _rec("HIIT", "Male", 60),
    ]


class TestNormalizeFilters:
    def test_defaults(self):
        f = normalize_filters({}, available_workouts=["Cardio", "Yoga"], age_bounds=(18.0, 59.0))
        assert f.selected_workouts == ["Cardio", "Yoga"]
        assert f.gender == ALL_GENDERS
        assert (f.min_age, f.max_age) == (None, None)
        assert not f.age_filter_active
        assert f.policy == FilterPolicy()

    def test_full_range_leaves_age_filter_off(self):
        f = normalize_filters({"min_age": 18, "max_age": 60}, age_bounds=(18.0, 59.5))
        assert not f.age_filter_active

    def test_narrowed_range_is_kept(self):
        f = normalize_filters({"min_age": 20, "max_age": 59.5}, age_bounds=(18.0, 59.5))
        assert (f.min_age, f.max_age) == (20.0, 59.5)

    def test_explicit_empty_selection_is_kept(self):
        f = normalize_filters({"selected_workouts": []}, available_workouts=["Cardio"])
        assert f.selected_workouts == []

    def test_single_string_selection(self):
        assert normalize_filters({"selected_workouts": " Cardio "}).selected_workouts == ["Cardio"]

    def test_blank_gender_means_all(self):
        assert normalize_filters({"gender": "  "}).gender == ALL_GENDERS

    def test_bad_ages_fall_back_to_bounds(self):
        f = normalize_filters({"min_age": "x", "max_age": 40}, age_bounds=(20.0, 50.0))
        assert (f.min_age, f.max_age) == (20.0, 40.0)

    @pytest.mark.parametrize("bad", [float("nan"), "NaN", float("inf"), "-inf"])
    def test_non_finite_ages_fall_back_to_bounds(self, bad):
        f = normalize_filters({"min_age": bad, "max_age": 40}, age_bounds=(20.0, 50.0))
        assert (f.min_age, f.max_age) == (20.0, 40.0)

    def test_non_finite_bounds_alone_leave_filter_off(self, mixed_records):
        f = normalize_filters({"min_age": "NaN", "max_age": "inf"}, available_workouts=["Cardio", "Yoga", "HIIT"], age_bounds=(22.0, 60.0))
        assert not f.age_filter_active
        assert len(apply_filters(mixed_records, f)) == 5

    def test_inverted_range_raises_max_by_default(self):
        f = normalize_filters({"min_age": 40, "max_age": 30})
        assert (f.min_age, f.max_age) == (40.0, 40.0)

    def test_inverted_range_lowers_min_when_max_moved(self):
        f = normalize_filters({"min_age": 40, "max_age": 30, "age_anchor": "max"})
        assert (f.min_age, f.max_age) == (30.0, 30.0)

    def test_no_age_info_leaves_range_open(self):
        f = normalize_filters({})
        assert f.min_age is None and f.max_age is None
        assert not f.age_filter_active

    def test_unknown_policy_values_fall_back(self):
        assert normalize_policy({"empty_workouts": "maybe", "missing_age": "???"}) == FilterPolicy()
        assert normalize_policy({"empty_workouts": "ALL", "missing_age": "Pass"}) == FilterPolicy("all", "pass")


class TestApplyFilters:
    def test_cardio_male_example(self, cardio_records):
        f = FilterState(selected_workouts=["Cardio"], gender="Male", min_age=0, max_age=120)
        subset = apply_filters(cardio_records, f)
        assert len(subset) == 1
        (row,) = aggregate_workouts(subset)
        assert row == AggregatedRow(workout="Cardio", male_calories=300.0)

    def test_gender_all_is_noop(self, mixed_records):
        base = dict(selected_workouts=["Cardio", "Yoga", "HIIT"], min_age=20, max_age=50)
        everyone = apply_filters(mixed_records, FilterState(gender=ALL_GENDERS, **base))
        males = apply_filters(mixed_records, FilterState(gender="Male", **base))
        females = apply_filters(mixed_records, FilterState(gender="Female", **base))
        assert len(everyone) == len(males) + len(females) == 3

    def test_gender_match_is_case_sensitive(self, mixed_records):
        f = FilterState(selected_workouts=["Cardio", "Yoga", "HIIT"], gender="male")
        assert apply_filters(mixed_records, f).empty

    def test_empty_selection_policy_none(self, mixed_records):
        f = FilterState(selected_workouts=[], policy=FilterPolicy(empty_workouts="none"))
        assert apply_filters(mixed_records, f).empty

    def test_empty_selection_policy_all(self, mixed_records):
        f = FilterState(selected_workouts=[], policy=FilterPolicy(empty_workouts="all"))
        assert len(apply_filters(mixed_records, f)) == 5

    def test_workout_membership(self, mixed_records):
        subset = apply_filters(mixed_records, FilterState(selected_workouts=["Yoga"]))
        assert set(subset["workout_type"]) == {"Yoga"}
        assert len(subset) == 2

    def test_age_range_inclusive(self, mixed_records):
        f = FilterState(selected_workouts=["Cardio", "Yoga", "HIIT"], min_age=22, max_age=45)
        assert sorted(apply_filters(mixed_records, f)["age"].tolist()) == [22.0, 30.0, 45.0]

    def test_missing_age_excluded(self, mixed_records):
        f = FilterState(selected_workouts=["Yoga"], min_age=0, max_age=120, policy=FilterPolicy(missing_age="exclude"))
        assert apply_filters(mixed_records, f)["age"].tolist() == [22.0]

    def test_missing_age_passes(self, mixed_records):
        f = FilterState(selected_workouts=["Yoga"], min_age=0, max_age=120, policy=FilterPolicy(missing_age="pass"))
        assert len(apply_filters(mixed_records, f)) == 2

    def test_open_range_keeps_missing_age(self, mixed_records):
        f = FilterState(selected_workouts=["Yoga"], min_age=None, max_age=120)
        assert len(apply_filters(mixed_records, f)) == 2

    def test_dataset_without_age_column(self, write_csv):
        dataset = load_dataset(write_csv("Workout_Type,Gender,Calories_Burned,Max_BPM\nCardio,Male,300,180\n"))
        f = FilterState(selected_workouts=["Cardio"], min_age=20, max_age=30)
        assert len(apply_filters(dataset, f)) == 1

    def test_source_not_mutated(self, sample_csv):
        dataset = load_dataset(sample_csv)
        before = dataset.records.copy()
        subset = apply_filters(dataset, FilterState(selected_workouts=["Cardio"], gender="Male"))
        subset["gender"] = "changed"
        pd.testing.assert_frame_equal(dataset.records, before)

    def test_empty_subset_aggregates_to_nothing(self, cardio_records):
        f = FilterState(selected_workouts=["Cardio"], gender="Male", min_age=50, max_age=60)
        subset = apply_filters(cardio_records, f)
        assert subset.empty
        assert aggregate_workouts(subset) == []

    def test_empty_records(self):
        assert apply_filters(records_frame([]), FilterState(selected_workouts=["Cardio"])).empty
