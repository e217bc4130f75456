from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple

import pandas as pd

from gymstats.data import RecordsLike, records_frame


ALL_GENDERS = "All"

EMPTY_WORKOUTS_NONE = "none"
EMPTY_WORKOUTS_ALL = "all"
MISSING_AGE_PASS = "pass"
MISSING_AGE_EXCLUDE = "exclude"
AGE_ANCHOR_MIN = "min"
AGE_ANCHOR_MAX = "max"


@dataclass(frozen=True)
class FilterPolicy:
    # What an empty workout selection means: show nothing, or skip the predicate.
    empty_workouts: str = EMPTY_WORKOUTS_NONE
    # Whether records without an age survive an active age range.
    missing_age: str = MISSING_AGE_EXCLUDE


@dataclass(frozen=True)
class FilterState:
    selected_workouts: List[str] = field(default_factory=list)
    gender: str = ALL_GENDERS
    min_age: Optional[float] = None
    max_age: Optional[float] = None
    policy: FilterPolicy = field(default_factory=FilterPolicy)

    @property
    def age_filter_active(self) -> bool:
        return self.min_age is not None and self.max_age is not None


def _as_float(value: object) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        out = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    if math.isnan(out) or math.isinf(out):
        return None
    return out


def _as_str_list(values: Optional[Iterable[object]]) -> List[str]:
    if values is None:
        return []
    if isinstance(values, str):
        values = [values]
    return [str(v).strip() for v in values if v is not None]


def normalize_policy(raw: Optional[dict]) -> FilterPolicy:
    raw = raw or {}
    empty_workouts = str(raw.get("empty_workouts", EMPTY_WORKOUTS_NONE)).strip().lower()
    if empty_workouts not in {EMPTY_WORKOUTS_NONE, EMPTY_WORKOUTS_ALL}:
        empty_workouts = EMPTY_WORKOUTS_NONE
    missing_age = str(raw.get("missing_age", MISSING_AGE_EXCLUDE)).strip().lower()
    if missing_age not in {MISSING_AGE_PASS, MISSING_AGE_EXCLUDE}:
        missing_age = MISSING_AGE_EXCLUDE
    return FilterPolicy(empty_workouts=empty_workouts, missing_age=missing_age)


def normalize_filters(
    raw: dict,
    *,
    available_workouts: Optional[Sequence[str]] = None,
    age_bounds: Tuple[Optional[float], Optional[float]] = (None, None),
) -> FilterState:
    raw = raw or {}

    # A missing selection means "everything"; an explicit [] is left to the policy.
    if raw.get("selected_workouts") is None:
        selected_workouts = list(available_workouts or [])
    else:
        selected_workouts = _as_str_list(raw.get("selected_workouts"))

    gender = raw.get("gender")
    gender = str(gender).strip() if gender is not None else ""
    if not gender:
        gender = ALL_GENDERS

    lo, hi = age_bounds
    min_age = _as_float(raw.get("min_age"))
    max_age = _as_float(raw.get("max_age"))
    # With neither bound given the age predicate stays off.
    if min_age is not None or max_age is not None:
        if min_age is None:
            min_age = lo
        if max_age is None:
            max_age = hi
    if min_age is not None and max_age is not None:
        if min_age > max_age:
            # The handle that was not dragged follows the one that was.
            if str(raw.get("age_anchor") or AGE_ANCHOR_MIN).strip().lower() == AGE_ANCHOR_MAX:
                min_age = max_age
            else:
                max_age = min_age
        # A range covering every known age is no range at all.
        if lo is not None and hi is not None and min_age <= lo and max_age >= hi:
            min_age = max_age = None

    return FilterState(
        selected_workouts=selected_workouts,
        gender=gender,
        min_age=min_age,
        max_age=max_age,
        policy=normalize_policy(raw.get("policy")),
    )


def apply_filters(records: RecordsLike, filters: FilterState) -> pd.DataFrame:
    """Return the subset of `records` passing every active predicate (AND)."""
    df = records_frame(records)
    if df.empty:
        return df.copy()

    mask = pd.Series(True, index=df.index)

    if filters.selected_workouts or filters.policy.empty_workouts == EMPTY_WORKOUTS_NONE:
        mask &= df["workout_type"].isin(set(filters.selected_workouts))

    if filters.gender != ALL_GENDERS:
        mask &= df["gender"] == filters.gender

    # No age column at all (optional in the source) disables the age predicate.
    if filters.age_filter_active and "age" in df.columns:
        age = df["age"]
        in_range = age.between(filters.min_age, filters.max_age, inclusive="both")
        if filters.policy.missing_age == MISSING_AGE_PASS:
            in_range |= age.isna()
        mask &= in_range

    return df[mask].copy()
