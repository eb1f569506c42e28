from __future__ import annotations

import logging
import math
from dataclasses import asdict
from typing import Any, Callable, Dict, Optional

import numpy as np
import pandas as pd
from fastapi import FastAPI, Query
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from funnel.aggregations import LOST_TOP_N
from funnel.dashboard import (
    compute_dashboard,
    compute_losses,
    compute_monthly,
    compute_reps,
    compute_summary,
    compute_teams,
)
from funnel.data import load_dashboard_data, prepare_context
from funnel.errors import ParseError
from funnel.records import CSV_HEADERS, records_to_frame
from funnel_api.schemas import FilterSelectionModel, MetaListResponse

CORS_ORIGINS = ["http://localhost:3000", "http://127.0.0.1:3000"]

app = FastAPI(title="Sales Funnel Dashboard API", version="0.1.0")
logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _json(data: object) -> JSONResponse:
    """Return JSON with safe encoding for pandas/numpy objects."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
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


def _error(exc: Exception, name: str) -> JSONResponse:
    if isinstance(exc, ParseError):
        logger.warning("%s: dataset failed to parse: %s", name, exc)
        return JSONResponse(
            status_code=422,
            content={"error": str(exc), "type": type(exc).__name__, "row": exc.row, "field": exc.field},
        )
    logger.exception("%s failed", name)
    return JSONResponse(status_code=500, content={"error": str(exc), "type": type(exc).__name__})


def _context(filters: Optional[FilterSelectionModel]) -> Dict[str, Any]:
    data_ctx = load_dashboard_data()
    raw = filters.model_dump() if filters is not None else {}
    return prepare_context(raw, data_ctx)


def _section(name: str, filters: FilterSelectionModel, compute: Callable[[Dict[str, Any]], object]) -> JSONResponse:
    try:
        ctx = _context(filters)
        return _json({"filters": asdict(ctx["selection"]), name: compute(ctx)})
    except Exception as exc:
        return _error(exc, name)


@app.get("/meta/teams", response_model=MetaListResponse)
def meta_teams():
    try:
        data_ctx = load_dashboard_data()
        return _json({"values": list(data_ctx.get("teams", []) or [])})
    except Exception as exc:
        return _error(exc, "meta_teams")


@app.get("/meta/attribution-groups", response_model=MetaListResponse)
def meta_attribution_groups():
    try:
        data_ctx = load_dashboard_data()
        return _json({"values": list(data_ctx.get("attribution_groups", []) or [])})
    except Exception as exc:
        return _error(exc, "meta_attribution_groups")


@app.post("/dashboard")
def dashboard(filters: FilterSelectionModel):
    try:
        ctx = _context(filters)
        return _json(compute_dashboard(ctx["selection"], ctx))
    except Exception as exc:
        return _error(exc, "dashboard")


@app.post("/summary")
def summary(filters: FilterSelectionModel):
    return _section("summary", filters, compute_summary)


@app.post("/monthly")
def monthly(filters: FilterSelectionModel):
    return _section("monthly", filters, compute_monthly)


@app.post("/reps")
def reps(filters: FilterSelectionModel):
    return _section("reps", filters, compute_reps)


@app.post("/teams")
def teams(filters: FilterSelectionModel):
    return _section("teams", filters, compute_teams)


@app.post("/losses")
def losses(filters: FilterSelectionModel, limit: int = Query(default=LOST_TOP_N, ge=1, le=100)):
    return _section("losses", filters, lambda ctx: compute_losses(ctx, limit=limit))


EXPORTS: Dict[str, Callable[[Dict[str, Any]], object]] = {
    "monthly": compute_monthly,
    "reps": compute_reps,
    "teams": compute_teams,
    "losses": compute_losses,
}


@app.post("/export/{page}")
def export_page(page: str, filters: FilterSelectionModel):
    if page != "records" and page not in EXPORTS:
        return JSONResponse(status_code=404, content={"error": f"Unknown export page: {page}", "type": "NotFound"})
    try:
        ctx = _context(filters)
    except Exception as exc:
        return _error(exc, "export")

    if page == "records":
        export_df = records_to_frame(ctx["filtered_records"]).rename(columns=CSV_HEADERS)
    else:
        export_df = pd.DataFrame(EXPORTS[page](ctx))
    csv_bytes = export_df.to_csv(index=False).encode("utf-8")
    filename = f"{page}.csv"
    return Response(content=csv_bytes, media_type="text/csv", headers={"Content-Disposition": f"attachment; filename={filename}"})
