"""
Services Package
================

These are the "workers" that do the actual work.

- SmhiService: Talks to the SMHI open data API
- GraphQLClient: Talks to the device/telemetry backend
- DeviceDirectory: Finds out who owns a device
- TelemetryStore: Writes telemetry records
- IngestPipeline: The boss that runs them all in order
"""

from .smhi_service import SmhiService
from .graphql_client import GraphQLClient
from .device_directory import DeviceDirectory
from .telemetry_store import TelemetryStore
from .aggregator import aggregate_reading
from .ingest_pipeline import IngestPipeline

__all__ = [
    "SmhiService",
    "GraphQLClient",
    "DeviceDirectory",
    "TelemetryStore",
    "aggregate_reading",
    "IngestPipeline",
]
