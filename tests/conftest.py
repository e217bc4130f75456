"""
Pytest configuration and fixtures

Datasets are written to per-test temp directories; the dataset cache is
cleared around every test so nothing leaks between them.
"""
import os
import sys

import pytest

# Add the repo root to the path so `gymstats` and `api` import without install
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from gymstats.data import WorkoutRecord, _load_dataset_cached  # noqa: E402


SAMPLE_CSV = """Age,Gender,Max_BPM,Calories_Burned,Workout_Type
30,Male,180,300,Cardio
40,Female,170,200,Cardio
25,Male,190,500,Strength
35,Female,160,,Strength
50,Male,abc,400,Strength
,Female,175,250,Yoga
22,Other,150,100,Yoga
"""


@pytest.fixture(autouse=True)
def _clear_dataset_cache():
    _load_dataset_cached.cache_clear()
    yield
    _load_dataset_cached.cache_clear()


@pytest.fixture
def cardio_records():
    """The two-record Cardio example."""
    return [
        WorkoutRecord(workout_type="Cardio", gender="Male", calories_burned=300.0, age=30.0),
        WorkoutRecord(workout_type="Cardio", gender="Female", calories_burned=200.0, age=40.0),
    ]


@pytest.fixture
def write_csv(tmp_path):
    """Write CSV text to a temp file and return its path."""

    def _write(text, name="workouts.csv"):
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def sample_csv(write_csv):
    return write_csv(SAMPLE_CSV)
