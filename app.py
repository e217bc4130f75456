import math

import pandas as pd
import streamlit as st
from contextlib import contextmanager
from typing import List, Optional

from gymstats.aggregate import SUMMARY_COLUMNS
from gymstats.charts import NO_DATA_MESSAGE
from gymstats.data import LOAD_ERROR_MESSAGE, DatasetLoadError, load_dataset
from gymstats.filters import (
    ALL_GENDERS,
    EMPTY_WORKOUTS_ALL,
    EMPTY_WORKOUTS_NONE,
    MISSING_AGE_EXCLUDE,
    MISSING_AGE_PASS,
    normalize_filters,
)
from gymstats.metrics_dashboard import NO_ROWS_MESSAGE, compute_dashboard

# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .app-top-bar {padding: 6px 0 4px;border-bottom: 1px solid #c8e6c9;margin-bottom: 10px;}
        .app-top-bar .page-title {font-size: 1.4rem;font-weight: 700;color: #2e7d32;}
        .card {border: 1px solid #c8e6c9;border-radius: 12px;padding: 16px;background: #ffffff;
               box-shadow: 0 1px 2px rgba(0,0,0,0.04); margin-bottom: 12px;}
        .card-header {display: flex;justify-content: space-between;align-items: center;margin-bottom: 8px;}
        .card-title {font-weight: 600;font-size: 1.0rem;color: #2e7d32;}
        .chip-row {display: flex;flex-wrap: wrap;gap: 6px;margin-top: 6px;}
        .chip {background: #f1f8e9;border: 1px solid #c8e6c9;border-radius: 14px;padding: 4px 10px;font-size: 0.85rem;color: #388e3c;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


@contextmanager
def card(title: str):
    container = st.container()
    container.markdown(
        f"""
        <div class="card">
          <div class="card-header">
            <div class="card-title">{title}</div>
          </div>
        """,
        unsafe_allow_html=True,
    )
    body = container.container()
    with body:
        yield body
    container.markdown("</div>", unsafe_allow_html=True)


def format_filter_summary(selected_workouts: List[str], all_workouts: List[str], gender: str, min_age: Optional[float], max_age: Optional[float]) -> str:
    if selected_workouts and set(selected_workouts) >= set(all_workouts):
        workout_chip = "Workouts: All"
    elif selected_workouts:
        workout_chip = f"Workouts: {', '.join(selected_workouts)}"
    else:
        workout_chip = "Workouts: none"
    gender_chip = f"Gender: {gender}"
    age_chip = f"Age: {min_age:.0f} - {max_age:.0f}" if min_age is not None and max_age is not None else "Age: All"
    return "".join([f"<span class='chip'>{txt}</span>" for txt in [workout_chip, gender_chip, age_chip]])


def render_page_header(title: str, filter_summary_html: str, export_df: Optional[pd.DataFrame] = None, export_name: str = "export.csv"):
    inject_base_styles()
    c1, c2 = st.columns([8, 2])
    with c1:
        st.markdown(f"<div class='app-top-bar'><div class='page-title'>{title}</div></div>", unsafe_allow_html=True)
    with c2:
        if export_df is not None and not export_df.empty:
            st.download_button(
                "Export CSV",
                data=export_df.to_csv(index=False).encode("utf-8"),
                file_name=export_name,
                mime="text/csv",
            )
    st.markdown(f"<div class='chip-row'>{filter_summary_html}</div>", unsafe_allow_html=True)


# ---------- UI setup ----------
st.set_page_config(page_title="Gym Workout Dashboard", layout="wide")
inject_base_styles()
st.title("Gym Workout Dashboard")
st.caption("Average calories burned and max heart rate by workout type and gender.")

try:
    dataset = load_dataset()
except DatasetLoadError:
    # Each chart region reports the failure on its own.
    err_cols = st.columns(2)
    for col in err_cols:
        with col:
            st.error(LOAD_ERROR_MESSAGE)
    st.stop()

workouts = dataset.workout_types
min_bound, max_bound = dataset.age_bounds

# ----- Sidebar: filters -----
with st.sidebar:
    st.markdown("### Filters")
    selected_workouts = st.multiselect("Workout Type", options=workouts, default=workouts)
    gender = st.radio("Gender", [ALL_GENDERS] + dataset.genders, index=0)

    min_age = max_age = None
    if min_bound is not None and max_bound is not None and min_bound < max_bound:
        min_age, max_age = st.slider(
            "Age",
            min_value=math.floor(min_bound),
            max_value=math.ceil(max_bound),
            value=(math.floor(min_bound), math.ceil(max_bound)),
            step=1,
        )
    elif min_bound is not None:
        min_age, max_age = min_bound, max_bound
        st.caption(f"Age: {min_bound:.0f}")
    else:
        st.caption("Age filter unavailable: the dataset has no Age column.")

    st.markdown("---")
    with st.expander("Advanced settings", expanded=False):
        empty_workouts = st.radio(
            "Empty workout selection shows",
            [EMPTY_WORKOUTS_NONE, EMPTY_WORKOUTS_ALL],
            format_func=lambda v: "Nothing" if v == EMPTY_WORKOUTS_NONE else "Every workout",
            index=0,
        )
        missing_age = st.radio(
            "Records without an age",
            [MISSING_AGE_EXCLUDE, MISSING_AGE_PASS],
            format_func=lambda v: "Exclude" if v == MISSING_AGE_EXCLUDE else "Keep",
            index=0,
        )

filters = normalize_filters(
    {
        "selected_workouts": selected_workouts,
        "gender": gender,
        "min_age": min_age,
        "max_age": max_age,
        "policy": {"empty_workouts": empty_workouts, "missing_age": missing_age},
    },
    available_workouts=workouts,
    age_bounds=dataset.age_bounds,
)

# Streamlit reruns this script on every widget change: filter -> aggregate -> redraw.
payload = compute_dashboard(dataset, filters)
summary_df = pd.DataFrame(payload["rows"], columns=SUMMARY_COLUMNS)

filter_summary_html = format_filter_summary(filters.selected_workouts, workouts, filters.gender, filters.min_age, filters.max_age)
render_page_header("Workout Averages", filter_summary_html, export_df=summary_df, export_name="workout_summary.csv")

chart_cols = st.columns(2)
with chart_cols[0]:
    with card("Average Calories Burned"):
        if payload["empty"]:
            st.info(NO_DATA_MESSAGE)
        else:
            st.vega_lite_chart(payload["charts"]["calories"], use_container_width=True)
with chart_cols[1]:
    with card("Average Max BPM"):
        if payload["empty"]:
            st.info(NO_DATA_MESSAGE)
        else:
            st.vega_lite_chart(payload["charts"]["bpm"], use_container_width=True)

with card("Statistics"):
    if payload["empty"]:
        st.info(NO_ROWS_MESSAGE)
    else:
        table = pd.DataFrame(payload["table"]).rename(
            columns={
                "workout": "Workout",
                "male_calories": "Male Calories",
                "female_calories": "Female Calories",
                "male_bpm": "Male Max BPM",
                "female_bpm": "Female Max BPM",
            }
        )
        st.dataframe(table, use_container_width=True, hide_index=True)
    st.caption(f"{payload['row_count']:,} of {len(dataset.records):,} records match the current filters.")
