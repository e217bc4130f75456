from __future__ import annotations

import logging
import math
import os
from dataclasses import asdict, dataclass
from functools import lru_cache
from pathlib import Path
from typing import Iterable, List, Mapping, Optional, Tuple, Union

import pandas as pd


logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).resolve().parents[1]
DATA_FILE = Path("Data") / "gym_members_exercise_tracking.csv"
DATA_PATH_ENV = "GYMSTATS_DATA_PATH"

LOAD_ERROR_MESSAGE = "Error loading data."

SOURCE_COLUMNS = {
    "Workout_Type": "workout_type",
    "Gender": "gender",
    "Calories_Burned": "calories_burned",
    "Max_BPM": "max_bpm",
    "Age": "age",
}
REQUIRED_COLUMNS = ["Workout_Type", "Gender", "Calories_Burned", "Max_BPM"]
TEXT_COLUMNS = ["workout_type", "gender"]
METRIC_COLUMNS = ["calories_burned", "max_bpm"]
RECORD_COLUMNS = TEXT_COLUMNS + METRIC_COLUMNS + ["age"]


class DatasetLoadError(RuntimeError):
    """The workout CSV could not be read, parsed, or lacks required columns."""


@dataclass(frozen=True)
class WorkoutRecord:
    workout_type: str = ""
    gender: str = ""
    calories_burned: Optional[float] = None
    max_bpm: Optional[float] = None
    age: Optional[float] = None


@dataclass(frozen=True, eq=False)
class DatasetContext:
    """Canonical (unfiltered) dataset for one session.

    `records` is shared read-only; filters always work on copies.
    """

    records: pd.DataFrame
    source: str = ""

    @property
    def has_age(self) -> bool:
        return "age" in self.records.columns

    @property
    def workout_types(self) -> List[str]:
        if self.records.empty:
            return []
        return sorted(str(x) for x in self.records["workout_type"].unique())

    @property
    def genders(self) -> List[str]:
        if self.records.empty:
            return []
        return sorted(str(x) for x in self.records["gender"].unique() if x)

    @property
    def age_bounds(self) -> Tuple[Optional[float], Optional[float]]:
        if not self.has_age:
            return None, None
        ages = self.records["age"].dropna()
        if ages.empty:
            return None, None
        return float(ages.min()), float(ages.max())


def to_number_safe(value: object) -> Optional[float]:
    """Parse a numeric field; anything unparseable (or NaN/inf) is absent."""
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
    try:
        out = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    if math.isnan(out) or math.isinf(out):
        return None
    return out


def clean_text(value: object) -> str:
    if value is None or value is pd.NA:
        return ""
    if isinstance(value, float) and math.isnan(value):
        return ""
    return str(value).strip()


def _field(raw: Mapping[str, object], source_col: str) -> object:
    if source_col in raw:
        return raw[source_col]
    return raw.get(SOURCE_COLUMNS[source_col])


def normalize_record(raw: Mapping[str, object]) -> WorkoutRecord:
    """Build a WorkoutRecord from one raw row (source or snake_case keys)."""
    return WorkoutRecord(
        workout_type=clean_text(_field(raw, "Workout_Type")),
        gender=clean_text(_field(raw, "Gender")),
        calories_burned=to_number_safe(_field(raw, "Calories_Burned")),
        max_bpm=to_number_safe(_field(raw, "Max_BPM")),
        age=to_number_safe(_field(raw, "Age")),
    )


def numericize(series: pd.Series) -> pd.Series:
    return series.map(to_number_safe).astype(float)


def normalize_frame(raw: pd.DataFrame) -> pd.DataFrame:
    """Vectorized normalize_record over a raw CSV frame.

    The `age` column is kept only when the source has one.
    """
    df = raw.rename(columns=SOURCE_COLUMNS)
    df = df[[c for c in RECORD_COLUMNS if c in df.columns]].copy()
    for col in TEXT_COLUMNS:
        df[col] = df[col].map(clean_text) if col in df.columns else ""
    for col in METRIC_COLUMNS:
        df[col] = numericize(df[col]) if col in df.columns else float("nan")
    if "age" in df.columns:
        df["age"] = numericize(df["age"])
    ordered = [c for c in RECORD_COLUMNS if c in df.columns]
    return df[ordered].reset_index(drop=True)


def empty_records_frame() -> pd.DataFrame:
    return pd.DataFrame(
        {c: pd.Series(dtype=object if c in TEXT_COLUMNS else float) for c in RECORD_COLUMNS}
    )


RecordsLike = Union[pd.DataFrame, DatasetContext, Iterable[WorkoutRecord]]


def records_frame(records: RecordsLike) -> pd.DataFrame:
    if isinstance(records, DatasetContext):
        return records.records
    if isinstance(records, pd.DataFrame):
        return records
    rows = [asdict(r) for r in records]
    if not rows:
        return empty_records_frame()
    df = pd.DataFrame(rows, columns=RECORD_COLUMNS)
    for col in METRIC_COLUMNS + ["age"]:
        df[col] = df[col].astype(float)
    return df


def format_unit_columns(df: pd.DataFrame, cols: Iterable[str], unit: str, decimals: int = 1) -> pd.DataFrame:
    formatted = df.copy()
    for c in cols:
        if c in formatted.columns:
            formatted[c] = formatted[c].apply(lambda v: f"{float(v):.{decimals}f} {unit}" if pd.notna(v) else "")
    return formatted


# ---------------- Loading ----------------
def get_data_path() -> Path:
    override = os.environ.get(DATA_PATH_ENV)
    if override:
        return Path(override).expanduser()
    return DATA_DIR / DATA_FILE


def file_signature(path: Path) -> Tuple[str, float]:
    try:
        return str(path), path.stat().st_mtime
    except OSError as exc:
        raise DatasetLoadError(f"Data file not found: {path}") from exc


@lru_cache(maxsize=4)
def _load_dataset_cached(files_sig: Tuple[str, float]) -> DatasetContext:
    path = Path(files_sig[0])
    try:
        raw = pd.read_csv(path, dtype=str, keep_default_na=False)
    except (OSError, ValueError) as exc:
        raise DatasetLoadError(f"Failed to read {path}: {exc}") from exc

    raw.columns = [str(c).strip() for c in raw.columns]
    missing = [c for c in REQUIRED_COLUMNS if c not in raw.columns]
    if missing:
        raise DatasetLoadError(f"{path.name} is missing required columns: {', '.join(missing)}")
    if "Age" not in raw.columns:
        logger.warning("%s has no Age column; age filtering is disabled", path.name)

    records = normalize_frame(raw)
    logger.info("Loaded %d workout records from %s", len(records), path)
    return DatasetContext(records=records, source=str(path))


def load_dataset(path: Optional[Union[str, Path]] = None) -> DatasetContext:
    """Load (or reuse) the canonical dataset for `path`, keyed by file mtime."""
    target = Path(path) if path is not None else get_data_path()
    return _load_dataset_cached(file_signature(target))
