"""
Ingest Errors
=============

The ways a run can end badly. The pipeline catches these in one place
and turns them into a PipelineOutcome.

    RequestConstructionError -> 500 (couldn't even build the SMHI request)
    BackendValidationError   -> 400 (backend returned a GraphQL errors list)
    DeviceNotFoundError      -> 404 (no such device, or nobody owns it)

Anything else that escapes is a 500 as well.

Failures of a single SMHI parameter are NOT errors - the fetcher logs
them and moves on.
"""

from typing import Any


class IngestError(Exception):
    """Base class for everything the pipeline raises on purpose."""


class RequestConstructionError(IngestError):
    """The request to SMHI could not be built at all."""


class BackendValidationError(IngestError):
    """
    The GraphQL backend answered with structured errors.

    Attributes:
        errors: The backend's error list, passed through untouched.
        operation: Which call failed ("getDevices" or "createTelemetry").
    """

    def __init__(self, errors: Any, operation: str = ""):
        # A single error (string or object) is wrapped, a list is kept as-is
        self.errors = list(errors) if isinstance(errors, list) else [errors]
        self.operation = operation
        super().__init__(f"{operation or 'GraphQL'} returned {len(self.errors)} error(s)")


class DeviceNotFoundError(IngestError):
    """The device doesn't exist in the directory, or has no owner."""

    def __init__(self, device_id: str):
        self.device_id = device_id
        super().__init__(f"Device {device_id} not found or has no owner")
