"""
Ingest API Router
=================

Lets anything that can send an HTTP request kick off an ingest run
(a cron job, a timer trigger, you with curl).

ALL ENDPOINTS:
-------------
POST /api/ingest               - Ingest the station in the body (or the default one)
POST /api/ingest/{station_id}  - Ingest a specific station

Both answer with the run's status code and body as-is:
    200 -> the stored telemetry record
    400 -> {"errors": [...]} straight from the backend
    404 -> {"errors": [{"message": "Device 99280 not found or has no owner"}]}
    500 -> {"errors": [{"status": 500, "error": "..."}]}
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from smhi_ingest.models import IngestRequest
from smhi_ingest.utils.validation import validate_station_id


router = APIRouter(prefix="/api/ingest", tags=["ingest"])


# =============================================================================
# DEPENDENCY INJECTION
# =============================================================================

_pipeline = None  # Set when the app starts


def set_pipeline(pipeline):
    """Called at startup to hand the router its pipeline."""
    global _pipeline
    _pipeline = pipeline


def get_pipeline():
    """Dependency for endpoints that need the pipeline."""
    if _pipeline is None:
        raise HTTPException(status_code=500, detail="Server not fully started yet")
    return _pipeline


# =============================================================================
# ENDPOINTS
# =============================================================================

async def _run(station_id: Optional[str], pipeline) -> JSONResponse:
    if station_id is not None and not validate_station_id(station_id):
        raise HTTPException(status_code=422, detail=f"Invalid station id: {station_id!r}")

    result = await pipeline.run(station_id)
    return JSONResponse(status_code=result.status_code, content=result.body)


@router.post("", summary="Ingest default or given station")
async def ingest(
    request: Optional[IngestRequest] = None,
    pipeline=Depends(get_pipeline)
):
    """
    Run one ingest.

    Send {"station_id": "99280"} or nothing at all for the default station.
    """
    station_id = request.station_id if request and request.station_id else None
    return await _run(station_id, pipeline)


@router.post("/{station_id}", summary="Ingest a specific station")
async def ingest_station(station_id: str, pipeline=Depends(get_pipeline)):
    """Run one ingest for station_id."""
    return await _run(station_id, pipeline)
