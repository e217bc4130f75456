from __future__ import annotations

from typing import Any, Dict, List

import altair as alt
import pandas as pd

from gymstats.aggregate import GENDER_FEMALE, GENDER_MALE, GENDERS, AggregatedRow

alt.data_transformers.disable_max_rows()

GENDER_COLORS = {GENDER_MALE: "#4caf50", GENDER_FEMALE: "#ec407a"}
AXIS_LABEL_COLOR = "#388e3c"
AXIS_TITLE_COLOR = "#2e7d32"
HEADROOM = 1.1

NO_DATA_MESSAGE = "No data to display."

# metric -> (male field, female field, y-axis title, unit, fallback y max)
CHART_METRICS = {
    "calories": ("male_calories", "female_calories", "Average Calories Burned", "cal", 10.0),
    "bpm": ("male_bpm", "female_bpm", "Average Max BPM", "bpm", 100.0),
}


def to_vega_spec(chart: alt.Chart) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def y_axis_max(rows: List[AggregatedRow], metric: str) -> float:
    male_col, female_col, _, _, fallback = CHART_METRICS[metric]
    peak = max((max(getattr(r, male_col), getattr(r, female_col)) for r in rows), default=0.0)
    return peak * HEADROOM if peak > 0 else fallback


def grouped_bar_source(rows: List[AggregatedRow], metric: str) -> pd.DataFrame:
    """Long-form frame: one bar per (workout, gender)."""
    male_col, female_col, _, unit, _ = CHART_METRICS[metric]
    records = []
    for r in rows:
        for gender, col in ((GENDER_MALE, male_col), (GENDER_FEMALE, female_col)):
            value = float(getattr(r, col))
            records.append(
                {
                    "workout": r.workout,
                    "gender": gender,
                    "value": value,
                    "title": f"{r.workout} - {gender}",
                    "label": f"{value:.1f} {unit}",
                }
            )
    return pd.DataFrame(records, columns=["workout", "gender", "value", "title", "label"])


def grouped_bar_chart(rows: List[AggregatedRow], metric: str) -> alt.Chart:
    _, _, y_title, _, _ = CHART_METRICS[metric]
    source = grouped_bar_source(rows, metric)
    workouts = [r.workout for r in rows]
    hover = alt.selection_point(fields=["workout", "gender"], on="mouseover", empty="all")
    return (
        alt.Chart(source)
        .mark_bar(cornerRadiusTopLeft=5, cornerRadiusTopRight=5)
        .encode(
            x=alt.X(
                "workout:N",
                title=None,
                sort=workouts,
                axis=alt.Axis(labelAngle=-45, labelColor=AXIS_LABEL_COLOR, labelFontSize=12),
            ),
            xOffset=alt.XOffset("gender:N", sort=GENDERS),
            y=alt.Y(
                "value:Q",
                title=y_title,
                scale=alt.Scale(domain=[0, y_axis_max(rows, metric)], nice=True),
                axis=alt.Axis(tickCount=8, labelColor=AXIS_LABEL_COLOR, titleColor=AXIS_TITLE_COLOR),
            ),
            color=alt.Color(
                "gender:N",
                title="Gender",
                scale=alt.Scale(domain=GENDERS, range=[GENDER_COLORS[g] for g in GENDERS]),
            ),
            opacity=alt.condition(hover, alt.value(1), alt.value(0.8)),
            tooltip=[
                alt.Tooltip("title:N", title="Workout"),
                alt.Tooltip("label:N", title=y_title),
            ],
        )
        .add_params(hover)
        .properties(height=340)
    )


def build_dashboard_charts(rows: List[AggregatedRow]) -> Dict[str, Any]:
    if not rows:
        return {}
    return {metric: to_vega_spec(grouped_bar_chart(rows, metric)) for metric in CHART_METRICS}
