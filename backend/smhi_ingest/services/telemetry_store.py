"""
Telemetry Store
===============

Writes one telemetry record per run to the backend.

The create is sent at most once per run and never retried.
"""

import logging

from smhi_ingest.models import Reading, TelemetryRecord
from smhi_ingest.services.graphql_client import GraphQLClient

logger = logging.getLogger(__name__)


CREATE_TELEMETRY_MUTATION = """
mutation CreateTelemetry($input: CreateTelemetryInput!) {
    createTelemetry(input: $input) {
        device_id
        owner
        timestamp
        temperature
        wind_direction
        wind_speed
        wind_gust_max
        visibility
    }
}
"""


class TelemetryStore:
    """Creates telemetry records in the backend."""

    def __init__(self, client: GraphQLClient):
        self.client = client

    async def commit(self, reading: Reading, owner: str) -> TelemetryRecord:
        """
        Attribute the reading to owner and store it.

        Args:
            reading: The aggregated reading
            owner: Owner returned by the device directory (must be set)

        Returns:
            The record as echoed back by the store

        Raises:
            ValueError: If owner is empty
            BackendValidationError: The store rejected the record
            httpx.HTTPError: The request itself failed
        """
        if not owner:
            raise ValueError("Refusing to commit telemetry without an owner")

        record = TelemetryRecord.from_reading(reading, owner)
        payload = record.model_dump()
        logger.info(f"[Device {record.device_id}] Committing telemetry: {payload}")

        data = await self.client.execute(
            CREATE_TELEMETRY_MUTATION,
            variables={"input": payload},
            operation="createTelemetry"
        )

        created = data.get("createTelemetry")
        if not created:
            # Accepted without an echo - report what we sent
            logger.warning(f"[Device {record.device_id}] createTelemetry returned no record")
            return record

        stored = TelemetryRecord.model_validate(created)
        logger.info(f"[Device {record.device_id}] Telemetry stored")
        return stored
