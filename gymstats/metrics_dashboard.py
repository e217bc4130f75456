from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List

from gymstats.aggregate import AggregatedRow, aggregate_workouts, rows_to_frame
from gymstats.charts import NO_DATA_MESSAGE, build_dashboard_charts
from gymstats.data import DatasetContext, format_unit_columns
from gymstats.filters import FilterState, apply_filters


NO_ROWS_MESSAGE = "No data for selected filters."


def run_pipeline(dataset: DatasetContext, filters: FilterState) -> List[AggregatedRow]:
    """filter -> aggregate; the whole reactive step as one pure call."""
    return aggregate_workouts(apply_filters(dataset, filters))


def build_table(rows: List[AggregatedRow]) -> List[Dict[str, Any]]:
    table = rows_to_frame(rows)
    table = format_unit_columns(table, ["male_calories", "female_calories"], "cal")
    table = format_unit_columns(table, ["male_bpm", "female_bpm"], "bpm")
    return table.to_dict(orient="records")


def compute_dashboard(dataset: DatasetContext, filters: FilterState) -> Dict[str, Any]:
    filtered = apply_filters(dataset, filters)
    rows = aggregate_workouts(filtered)
    empty = not rows
    return {
        "filters": asdict(filters),
        "row_count": int(len(filtered)),
        "rows": [asdict(r) for r in rows],
        "charts": build_dashboard_charts(rows),
        "table": build_table(rows),
        "empty": empty,
        "chart_message": NO_DATA_MESSAGE if empty else None,
        "message": NO_ROWS_MESSAGE if empty else None,
    }
