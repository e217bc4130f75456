from __future__ import annotations

import logging
import math

import numpy as np
import pandas as pd
from fastapi import FastAPI
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from api.schemas import DashboardFiltersModel, MetaAgesResponse, MetaGendersResponse, MetaWorkoutsResponse
from gymstats.aggregate import aggregate_workouts, rows_to_frame
from gymstats.data import LOAD_ERROR_MESSAGE, DatasetContext, DatasetLoadError, load_dataset
from gymstats.filters import ALL_GENDERS, FilterState, apply_filters, normalize_filters
from gymstats.metrics_dashboard import compute_dashboard
from gymstats.metrics_debug import compute_debug


app = FastAPI(title="Gym Stats Dashboard API", version="0.1.0")
logger = logging.getLogger(__name__)

CORS_ORIGINS = ["http://localhost:3000", "http://127.0.0.1:3000"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _filters_from_model(model: DashboardFiltersModel, *, dataset: DatasetContext) -> FilterState:
    raw = model.model_dump()
    return normalize_filters(raw, available_workouts=dataset.workout_types, age_bounds=dataset.age_bounds)


def _json(data: object) -> JSONResponse:
    """Return JSON with safe encoding for pandas/numpy objects."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except Exception:
            return None
        if math.isnan(out) or math.isinf(out):
            return None
        return out

    return JSONResponse(
        content=jsonable_encoder(
            data,
            custom_encoder={
                type(pd.NA): lambda _: None,
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                np.ndarray: lambda arr: arr.tolist(),
            },
        )
    )


def _error(exc: Exception) -> JSONResponse:
    message = LOAD_ERROR_MESSAGE if isinstance(exc, DatasetLoadError) else str(exc)
    return JSONResponse(
        status_code=500,
        content={"error": message, "type": type(exc).__name__},
    )


@app.get("/meta/workouts", response_model=MetaWorkoutsResponse)
def meta_workouts():
    try:
        dataset = load_dataset()
        return _json({"workouts": dataset.workout_types})
    except Exception as exc:
        logger.exception("meta_workouts failed")
        return _error(exc)


@app.get("/meta/genders", response_model=MetaGendersResponse)
def meta_genders():
    try:
        dataset = load_dataset()
        return _json({"genders": [ALL_GENDERS] + dataset.genders})
    except Exception as exc:
        logger.exception("meta_genders failed")
        return _error(exc)


@app.get("/meta/ages", response_model=MetaAgesResponse)
def meta_ages():
    try:
        dataset = load_dataset()
        min_age, max_age = dataset.age_bounds
        return _json({"min_age": min_age, "max_age": max_age, "has_age": dataset.has_age})
    except Exception as exc:
        logger.exception("meta_ages failed")
        return _error(exc)


@app.post("/dashboard")
def dashboard(filters: DashboardFiltersModel):
    try:
        dataset = load_dataset()
        f = _filters_from_model(filters, dataset=dataset)
        return _json(compute_dashboard(dataset, f))
    except Exception as exc:
        logger.exception("dashboard failed")
        return _error(exc)


@app.post("/debug")
def debug():
    try:
        return _json(compute_debug(load_dataset()))
    except Exception as exc:
        logger.exception("debug failed")
        return _error(exc)


@app.post("/export/{view}")
def export_view(view: str, filters: DashboardFiltersModel):
    try:
        dataset = load_dataset()
    except DatasetLoadError as exc:
        logger.exception("export failed")
        return _error(exc)
    f = _filters_from_model(filters, dataset=dataset)
    filtered = apply_filters(dataset, f)

    filename = f"{view}.csv"
    if view == "filtered":
        export_df = filtered
    elif view == "summary":
        export_df = rows_to_frame(aggregate_workouts(filtered))
    else:
        export_df = pd.DataFrame()

    csv_bytes = export_df.to_csv(index=False).encode("utf-8")
    return Response(content=csv_bytes, media_type="text/csv", headers={"Content-Disposition": f"attachment; filename={filename}"})
