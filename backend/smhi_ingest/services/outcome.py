"""
Outcome Classifier
==================

Turns the end of a run into a status code and a body.

    | State                  | Status | Body                                   |
    |------------------------|--------|----------------------------------------|
    | Success                | 200    | the committed record                   |
    | BackendValidationError | 400    | {"errors": <backend's list, verbatim>} |
    | DeviceNotFound         | 404    | {"errors": [{"message": ...}]}         |
    | UnexpectedFailure      | 500    | {"errors": [{"status": 500, ...}]}     |

Exactly one of these comes out of every run.
"""

import json
import logging

from smhi_ingest.exceptions import BackendValidationError, DeviceNotFoundError
from smhi_ingest.models import PipelineOutcome, TelemetryRecord

logger = logging.getLogger(__name__)


def success(record: TelemetryRecord) -> PipelineOutcome:
    """200 with the committed record as the body."""
    return PipelineOutcome(status_code=200, body=record.model_dump())


def validation_error(error: BackendValidationError) -> PipelineOutcome:
    """400 with the backend's own error list."""
    return PipelineOutcome(status_code=400, body={"errors": error.errors})


def not_found(device_id: str) -> PipelineOutcome:
    """404 naming the device."""
    return PipelineOutcome(
        status_code=404,
        body={"errors": [{"message": f"Device {device_id} not found or has no owner"}]}
    )


def unexpected_failure(error: BaseException) -> PipelineOutcome:
    """500 with a serialized copy of the fault."""
    return PipelineOutcome(
        status_code=500,
        body={"errors": [{"status": 500, "error": serialize_fault(error)}]}
    )


def serialize_fault(error: BaseException) -> str:
    """JSON string with the exception's type and message."""
    return json.dumps({"type": type(error).__name__, "message": str(error)})


def classify(error: BaseException) -> PipelineOutcome:
    """
    Map whatever ended the run to an outcome.

    Backend errors and missing devices are expected endings.
    Everything else is a 500.
    """
    if isinstance(error, BackendValidationError):
        return validation_error(error)
    if isinstance(error, DeviceNotFoundError):
        return not_found(error.device_id)
    return unexpected_failure(error)
