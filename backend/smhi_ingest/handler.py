"""
Serverless Handler
==================

Entrypoint for running one ingest from a function runtime (a timer or a
GraphQL resolver calling in).

EVENT:
    {"arguments": {"stationId": "99280"}}   # resolver style
    {"stationId": "99280"}                  # plain invoke
    {}                                      # default station

RESPONSE:
    {"statusCode": 200, "body": "<JSON string>"}
"""

import asyncio
import json
import logging
from typing import Any, Optional

from smhi_ingest.config import IngestConfig
from smhi_ingest.models import PipelineOutcome
from smhi_ingest.services.ingest_pipeline import IngestPipeline
from smhi_ingest.utils.log_setup import setup_logging
from smhi_ingest.utils.validation import validate_station_id

logger = logging.getLogger(__name__)


def station_from_event(event: Optional[dict]) -> Optional[str]:
    """Dig the station id out of an invocation event, if there is one."""
    if not isinstance(event, dict):
        return None
    arguments = event.get("arguments")
    if isinstance(arguments, dict) and arguments.get("stationId"):
        return str(arguments["stationId"])
    if event.get("stationId"):
        return str(event["stationId"])
    return None


async def run_ingest(event: Optional[dict], config: IngestConfig) -> PipelineOutcome:
    """
    Run the pipeline for one event, closing its clients afterwards.

    A station id that fails validate_station_id is answered with 422
    without calling SMHI, same as the HTTP router.
    """
    station_id = station_from_event(event)
    if station_id is not None and not validate_station_id(station_id):
        logger.warning(f"Rejecting invalid station id {station_id!r}")
        return PipelineOutcome(
            status_code=422,
            body={"errors": [{"message": f"Invalid station id: {station_id!r}"}]}
        )

    pipeline = IngestPipeline.from_config(config)
    try:
        return await pipeline.run(station_id)
    finally:
        await pipeline.close()


def to_response(result: PipelineOutcome) -> dict[str, Any]:
    return {
        "statusCode": result.status_code,
        "body": json.dumps(result.body)
    }


def handler(event: Optional[dict] = None, context: Any = None) -> dict[str, Any]:
    """
    Function runtime entrypoint.

    Args:
        event: Invocation event (see module docstring)
        context: Runtime context, unused

    Returns:
        {"statusCode": int, "body": str}
    """
    config = IngestConfig.from_env()
    setup_logging(config.log_level)

    logger.info(f"EVENT: {json.dumps(event, default=str)}")
    logger.info(f"API endpoint: {config.api_endpoint}")

    result = asyncio.run(run_ingest(event, config))
    return to_response(result)
