"""
SMHI Telemetry Ingest - Backend API
===================================
FastAPI application that runs the SMHI -> telemetry ingest on demand.

ARCHITECTURE:
    [Timer / cron / resolver] --POST /api/ingest--> [This Backend]
                                                          |
                                    +---------------------+--------------------+
                                    v                                          v
                           [SMHI open data API]                   [GraphQL device backend]
                           (5 parameters, parallel)               (getDevices, createTelemetry)

HOW TO RUN:
    pip install -e .

    # Copy environment config and fill in API_ENDPOINT / API_KEY
    cp .env.example .env

    # Run the server (from backend/)
    uvicorn smhi_ingest.main:app --reload --port 8000

API DOCUMENTATION:
    After starting the server, visit:
    - Swagger UI: http://localhost:8000/docs
    - ReDoc: http://localhost:8000/redoc
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from smhi_ingest.config import IngestConfig
from smhi_ingest.routers import ingest_router, set_pipeline
from smhi_ingest.services import IngestPipeline
from smhi_ingest.utils.log_setup import setup_logging


config = IngestConfig.from_env()
setup_logging(config.log_level)
logger = logging.getLogger(__name__)


# =============================================================================
# APPLICATION LIFESPAN
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    STARTUP:
        1. Build the pipeline (SMHI + GraphQL clients)
        2. Inject it into the router

    SHUTDOWN:
        1. Close the HTTP clients
    """
    # ========== STARTUP ==========
    pipeline = IngestPipeline.from_config(config)
    set_pipeline(pipeline)

    logger.info("SMHI TELEMETRY INGEST - backend started")
    logger.info(f"   Default station: {config.default_station_id} ({config.station_name})")
    logger.info(f"   SMHI API: {config.smhi_base_url}")
    logger.info(f"   GraphQL endpoint: {config.api_endpoint}")

    yield  # Application runs here

    # ========== SHUTDOWN ==========
    logger.info("Shutting down...")
    set_pipeline(None)
    await pipeline.close()
    logger.info("Shutdown complete")


# =============================================================================
# CREATE FASTAPI APPLICATION
# =============================================================================

app = FastAPI(
    title="SMHI Telemetry Ingest API",
    description="""
## Overview

Fetches the latest SMHI observations for a weather station and stores them
as a telemetry record for the station's owner.

## Parameters Collected

| Parameter | SMHI id |
|-----------|---------|
| Temperature | 1 |
| Wind direction | 3 |
| Wind speed | 4 |
| Max wind gust | 21 |
| Visibility | 6 |

## Results

| Status | Meaning |
|--------|---------|
| 200 | Record stored, body is the record |
| 400 | Backend rejected the lookup or the write |
| 404 | Device unknown or has no owner |
| 500 | Something unexpected broke |
    """,
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)


# =============================================================================
# INCLUDE ROUTERS
# =============================================================================

app.include_router(ingest_router)


# =============================================================================
# ROOT ENDPOINTS
# =============================================================================

@app.get(
    "/",
    summary="API Information",
    description="Get basic API information and available endpoints."
)
async def root():
    """Root endpoint with API overview."""
    return {
        "name": "SMHI Telemetry Ingest API",
        "version": "1.0.0",
        "documentation": {
            "swagger": "/docs",
            "redoc": "/redoc",
            "openapi": "/openapi.json"
        },
        "endpoints": {
            "ingest_default": "POST /api/ingest",
            "ingest_station": "POST /api/ingest/{station_id}",
            "health": "GET /health"
        }
    }


@app.get(
    "/health",
    summary="Health Check",
    description="Check if the backend is running."
)
async def health():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "default_station": config.default_station_id,
        "graphql_endpoint": config.api_endpoint
    }
