from __future__ import annotations

from typing import Any, Dict

import pandas as pd

from gymstats.aggregate import GENDERS
from gymstats.data import DatasetContext


def compute_debug(dataset: DatasetContext) -> Dict[str, Any]:
    records: pd.DataFrame = dataset.records
    min_age, max_age = dataset.age_bounds
    payload = {
        "source": dataset.source,
        "row_counts": {"records": int(len(records))},
        "missing_values": {},
        "age": {"has_age": dataset.has_age, "min_age": min_age, "max_age": max_age},
        "gender_counts": [],
        "other_gender_rows": 0,
        "workout_counts": [],
    }
    if records.empty:
        return payload

    payload["missing_values"] = {
        "blank_workout_type": int((records["workout_type"] == "").sum()),
        "blank_gender": int((records["gender"] == "").sum()),
        "calories_burned": int(records["calories_burned"].isna().sum()),
        "max_bpm": int(records["max_bpm"].isna().sum()),
    }
    if dataset.has_age:
        payload["missing_values"]["age"] = int(records["age"].isna().sum())

    payload["gender_counts"] = (
        records["gender"].value_counts().rename_axis("gender").reset_index(name="count").to_dict(orient="records")
    )
    payload["other_gender_rows"] = int((~records["gender"].isin(GENDERS)).sum())
    payload["workout_counts"] = (
        records.groupby("workout_type")
        .size()
        .reset_index(name="count")
        .sort_values("workout_type")
        .to_dict(orient="records")
    )
    return payload
