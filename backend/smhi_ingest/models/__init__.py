"""
Models Package
==============

All data models for an ingest run live here.
Import from here instead of the individual files.

Example:
    from smhi_ingest.models import Reading, SMHI_PARAMETERS
"""

from .telemetry import (
    # The fixed parameter set
    ParameterKey,
    ParameterSpec,
    SMHI_PARAMETERS,

    # What comes back from SMHI and what we build from it
    ParameterObservation,
    Reading,

    # What goes to and comes from the backend
    DeviceOwnership,
    TelemetryRecord,

    # What the caller gets
    PipelineOutcome,
    IngestRequest,
)

__all__ = [
    "ParameterKey",
    "ParameterSpec",
    "SMHI_PARAMETERS",
    "ParameterObservation",
    "Reading",
    "DeviceOwnership",
    "TelemetryRecord",
    "PipelineOutcome",
    "IngestRequest",
]
