from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Mapping, Tuple

import pandas as pd

from gymstats.data import METRIC_COLUMNS, RecordsLike, records_frame


GENDER_MALE = "Male"
GENDER_FEMALE = "Female"
GENDERS = [GENDER_MALE, GENDER_FEMALE]

SUMMARY_COLUMNS = ["workout", "male_calories", "female_calories", "male_bpm", "female_bpm"]


@dataclass(frozen=True)
class AggregatedRow:
    workout: str
    male_calories: float = 0.0
    female_calories: float = 0.0
    male_bpm: float = 0.0
    female_bpm: float = 0.0


def _mean_or_zero(means: Mapping[Tuple[str, str], Dict[str, Any]], key: Tuple[str, str], col: str) -> float:
    value = means.get(key, {}).get(col)
    if value is None or pd.isna(value) or math.isinf(value):
        return 0.0
    return float(value)


def aggregate_workouts(records: RecordsLike) -> List[AggregatedRow]:
    """Mean calories / max BPM per workout type, split Male vs Female.

    Every workout type present gets a row, even when it has no Male or Female
    records; empty buckets and buckets whose values are all absent report 0.
    Rows are sorted by workout name (ordinal string order).
    """
    df = records_frame(records)
    if df.empty:
        return []

    means = (
        df[df["gender"].isin(GENDERS)]
        .groupby(["workout_type", "gender"])[METRIC_COLUMNS]
        .mean()
        .to_dict(orient="index")
    )

    rows: List[AggregatedRow] = []
    for workout in sorted(str(w) for w in df["workout_type"].unique()):
        male, female = (workout, GENDER_MALE), (workout, GENDER_FEMALE)
        rows.append(
            AggregatedRow(
                workout=workout,
                male_calories=_mean_or_zero(means, male, "calories_burned"),
                female_calories=_mean_or_zero(means, female, "calories_burned"),
                male_bpm=_mean_or_zero(means, male, "max_bpm"),
                female_bpm=_mean_or_zero(means, female, "max_bpm"),
            )
        )
    return rows


def rows_to_frame(rows: List[AggregatedRow]) -> pd.DataFrame:
    if not rows:
        return pd.DataFrame(columns=SUMMARY_COLUMNS)
    return pd.DataFrame([asdict(r) for r in rows], columns=SUMMARY_COLUMNS)
