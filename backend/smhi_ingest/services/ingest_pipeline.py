"""
Ingest Pipeline
===============

THE MAIN THING - one call fetches, merges, checks and stores.

THE DATA FLOW:
-------------
    SMHI (5 parameters, fetched at the same time)
            |
            |  wait for all of them, failures become empty fields
            v
    [Reading for the station]
            |
            |  getDevices(device_id)
            v
    [Owner?] --no--> 404
            |
            | yes
            v
    createTelemetry(...)
            |
            v
    200 / 400 / 500

KNOWN LIMITATION:
----------------
Checking the owner and writing the record are two separate calls. If the
owner changes between them, the record is still written with the owner
we read. Nothing here protects against that.
"""

import logging
from typing import Optional

from smhi_ingest.config import IngestConfig
from smhi_ingest.exceptions import DeviceNotFoundError
from smhi_ingest.models import PipelineOutcome
from smhi_ingest.services import outcome
from smhi_ingest.services.aggregator import aggregate_reading
from smhi_ingest.services.device_directory import DeviceDirectory
from smhi_ingest.services.graphql_client import GraphQLClient
from smhi_ingest.services.smhi_service import SmhiService
from smhi_ingest.services.telemetry_store import TelemetryStore

logger = logging.getLogger(__name__)


class IngestPipeline:
    """
    Runs one ingest for one station.

    HOW TO USE:
    ----------
    pipeline = IngestPipeline.from_config(IngestConfig.from_env())

    result = await pipeline.run("99280")
    print(result.status_code, result.body)

    await pipeline.close()

    Runs don't share any state, so several can be in flight at once.
    """

    def __init__(
        self,
        config: IngestConfig,
        smhi_service: SmhiService,
        device_directory: DeviceDirectory,
        telemetry_store: TelemetryStore
    ):
        self.config = config
        self.smhi_service = smhi_service
        self.device_directory = device_directory
        self.telemetry_store = telemetry_store

    @classmethod
    def from_config(cls, config: IngestConfig) -> "IngestPipeline":
        """Wire up the real services from a config."""
        graphql_client = GraphQLClient(
            endpoint=config.api_endpoint,
            api_key=config.api_key,
            request_timeout=config.request_timeout
        )
        return cls(
            config=config,
            smhi_service=SmhiService(
                base_url=config.smhi_base_url,
                request_timeout=config.request_timeout
            ),
            device_directory=DeviceDirectory(
                graphql_client,
                retry_attempts=config.directory_retry_attempts,
                retry_max_wait=config.directory_retry_max_wait
            ),
            telemetry_store=TelemetryStore(graphql_client)
        )

    async def run(self, station_id: Optional[str] = None) -> PipelineOutcome:
        """
        Ingest the latest SMHI data for a station.

        Args:
            station_id: SMHI station id. Empty or None means the configured default.

        Returns:
            The outcome. This never raises - every failure is classified.
        """
        station_id = station_id or self.config.default_station_id
        logger.info(f"[Station {station_id}] Starting ingest run")

        try:
            result = await self._ingest(station_id)
        except Exception as e:
            result = outcome.classify(e)
            if result.status_code == 500:
                logger.error(f"[Station {station_id}] Ingest failed: {e}", exc_info=True)
            else:
                logger.warning(f"[Station {station_id}] Ingest stopped: {e}")

        logger.info(f"[Station {station_id}] Ingest finished with status {result.status_code}")
        return result

    async def _ingest(self, station_id: str) -> PipelineOutcome:
        # Step 1: Fetch everything from SMHI
        observations = await self.smhi_service.fetch_all(station_id)

        # Step 2: Merge into one reading
        reading = aggregate_reading(
            observations,
            device_id=station_id,
            device_type=self.config.device_type,
            name=self.config.station_name
        )

        # Step 3: Is there someone to give it to?
        ownership = await self.device_directory.resolve_owner(reading.device_id)
        if not ownership.has_owner:
            raise DeviceNotFoundError(reading.device_id)

        # Step 4: Store it
        record = await self.telemetry_store.commit(reading, ownership.owner)
        return outcome.success(record)

    async def close(self):
        """Close every HTTP client. Called on shutdown."""
        await self.smhi_service.close()
        await self.device_directory.client.close()
