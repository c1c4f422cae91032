"""
FastAPI backend contract for the wrapped dashboard frontend.

Route handlers are defined here; shared utilities live in routes/helpers.py.
Uploads are analyzed in memory and nothing is persisted.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from config import FRONTEND_ORIGINS, MAX_UPLOAD_MB
from export_reader import ExportError, open_export_archive
from pipeline.wrapped_pipeline import run_wrapped_pipeline
from routes.helpers import serialize_results

log = logging.getLogger("api")


# ─── App setup ─────────────────────────────────────────────

app = FastAPI(title="Health Wrapped API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=FRONTEND_ORIGINS,
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)


class WrappedResponse(BaseModel):
    years: List[str]
    stats: Dict[str, Dict[str, Any]]


def build_wrapped_response(payload: bytes, year: Optional[str] = None) -> Dict[str, Any]:
    """Analyze one uploaded export ZIP and return the serialized mapping."""
    if not payload:
        raise HTTPException(status_code=400, detail="Request body is empty; send the export ZIP")
    if len(payload) > MAX_UPLOAD_MB * 1024 * 1024:
        raise HTTPException(status_code=413, detail=f"Export exceeds {MAX_UPLOAD_MB} MB limit")

    try:
        with open_export_archive(payload) as entries:
            results = run_wrapped_pipeline(entries)
    except ExportError as e:
        log.warning("Export rejected: %s", e)
        raise HTTPException(status_code=422, detail=str(e))

    if year is not None and year not in results:
        raise HTTPException(status_code=404, detail=f"No data for year {year}")
    return serialize_results(results, year=year)


# ─── Routes ────────────────────────────────────────────────

@app.get("/")
def root() -> Dict[str, Any]:
    return {"service": "health-wrapped-api", "status": "ok"}


@app.get("/health-check")
def health_check() -> JSONResponse:
    return JSONResponse({"status": "Online", "message": "Online"})


@app.post("/api/v1/wrapped", response_model=WrappedResponse)
async def wrapped(request: Request,
                  year: Optional[str] = Query(default=None, pattern=r"^(\d{4}|All Time)$")
                  ) -> Dict[str, Any]:
    payload = await request.body()
    log.info("Received export upload (%d bytes)", len(payload))
    return await run_in_threadpool(build_wrapped_response, payload, year)
