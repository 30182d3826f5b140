"""
Reading Aggregator
==================

Merges the per-parameter observations into one Reading.

The observations are walked in SMHI_PARAMETERS order, so the reading's
timestamp always comes from the first parameter (temperature first,
visibility last) that actually had data - no matter which request
happened to finish first.
"""

import logging
from typing import Iterable

from smhi_ingest.models import ParameterKey, ParameterObservation, Reading, SMHI_PARAMETERS

logger = logging.getLogger(__name__)

_FIXED_ORDER = {spec.key: index for index, spec in enumerate(SMHI_PARAMETERS)}


def aggregate_reading(
    observations: Iterable[ParameterObservation],
    device_id: str,
    device_type: str,
    name: str
) -> Reading:
    """
    Build a Reading for device_id out of the fetched observations.

    Args:
        observations: Output of SmhiService.fetch_all()
        device_id: The station id
        device_type: Static tag from config (e.g. "SMHI_Station")
        name: Static display name from config

    Returns:
        The Reading. Missing parameters are simply left as None.

    Raises:
        ValueError: If an observation is for a parameter we don't know about
    """
    fields: dict = {"device_id": device_id, "device_type": device_type, "name": name}

    for observation in sorted(observations, key=_order_of):
        if observation.timestamp is not None and "timestamp" not in fields:
            fields["timestamp"] = observation.timestamp
        if observation.value is not None:
            # ParameterKey values are the Reading field names
            fields[observation.key.value] = observation.value

    reading = Reading(**fields)
    logger.info(f"[Station {device_id}] Combined reading: {reading.model_dump(mode='json')}")
    return reading


def _order_of(observation: ParameterObservation) -> int:
    # Unknown keys fail in the ParameterKey constructor with ValueError
    return _FIXED_ORDER[ParameterKey(observation.key)]
