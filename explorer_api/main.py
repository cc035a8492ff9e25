from __future__ import annotations

import logging
import math
from datetime import date

import numpy as np
import pandas as pd
from fastapi import FastAPI
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from explorer_api.schemas import (
    CellEditRequest,
    ChartsRequest,
    ComputedColumnRequest,
    DatasetResponse,
    FilterStateModel,
    ImputeRequest,
    InsightsRequest,
    ViewRequest,
)
from explorer_core.dataset import column_keys, edit_cell, from_records, to_records
from explorer_core.filters import FilterState, apply_filters, normalize_filter_state
from explorer_core.transforms import add_computed_column, impute_missing
from explorer_core.views import compute_charts, compute_insights, compute_working_view


app = FastAPI(title="Tabular Explorer API", version="0.1.0")
logger = logging.getLogger(__name__)

CORS_ORIGINS = ["http://localhost:3000", "http://127.0.0.1:3000", "http://localhost:5173"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _filters_from_model(model: FilterStateModel) -> FilterState:
    return normalize_filter_state(model.model_dump())


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
                pd.Timestamp: lambda ts: ts.isoformat(),
            },
        )
    )


def _error(exc: Exception, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": str(exc), "type": type(exc).__name__})


def _dataset_payload(df: pd.DataFrame) -> JSONResponse:
    return _json({"columns": column_keys(df), "rows": to_records(df)})


@app.post("/view")
def view(request: ViewRequest):
    try:
        dataset = from_records(request.rows)
        return _json(compute_working_view(dataset, _filters_from_model(request.filters)))
    except Exception as exc:
        logger.exception("view failed")
        return _error(exc, 500)


@app.post("/insights")
def insights(request: InsightsRequest):
    try:
        dataset = from_records(request.rows)
        return _json(compute_insights(dataset, request.y_key, include_specs=request.include_specs))
    except Exception as exc:
        logger.exception("insights failed")
        return _error(exc, 500)


@app.post("/charts")
def charts(request: ChartsRequest):
    try:
        dataset = from_records(request.rows)
        f = _filters_from_model(request.filters)
        return _json(compute_charts(dataset, f, request.x_key, request.y_key, include_specs=request.include_specs))
    except Exception as exc:
        logger.exception("charts failed")
        return _error(exc, 500)


@app.post("/columns/computed", response_model=DatasetResponse)
def computed_column(request: ComputedColumnRequest):
    try:
        dataset = from_records(request.rows)
        return _dataset_payload(add_computed_column(dataset, request.name, request.col_a, request.col_b, request.op))
    except ValueError as exc:
        return _error(exc, 400)
    except Exception as exc:
        logger.exception("computed_column failed")
        return _error(exc, 500)


@app.post("/columns/impute", response_model=DatasetResponse)
def impute(request: ImputeRequest):
    try:
        dataset = from_records(request.rows)
        return _dataset_payload(impute_missing(dataset, request.column, request.method, request.custom_value))
    except ValueError as exc:
        return _error(exc, 400)
    except Exception as exc:
        logger.exception("impute failed")
        return _error(exc, 500)


@app.post("/cells/edit", response_model=DatasetResponse)
def edit(request: CellEditRequest):
    try:
        dataset = from_records(request.rows)
        return _dataset_payload(edit_cell(dataset, request.row_index, request.column, request.value))
    except (KeyError, IndexError) as exc:
        return _error(exc, 400)
    except Exception as exc:
        logger.exception("edit failed")
        return _error(exc, 500)


@app.post("/export")
def export_view(request: ViewRequest):
    try:
        dataset = from_records(request.rows)
        export_df = apply_filters(dataset, _filters_from_model(request.filters))
        filename = f"exported_data_{date.today().isoformat()}.csv"
        csv_bytes = export_df.to_csv(index=False).encode("utf-8")
        return Response(content=csv_bytes, media_type="text/csv", headers={"Content-Disposition": f"attachment; filename={filename}"})
    except Exception as exc:
        logger.exception("export failed")
        return _error(exc, 500)
