"""
SMHI Observation Service
========================

Pulls the latest sample of each weather parameter for a station from the
SMHI open data API (metobs).

HOW SMHI WORKS:
--------------
Every (parameter, station) pair has its own URL. The "latest-hour" period
gives us at most one sample:

    GET {base}/parameter/1/station/99280/period/latest-hour/data.json

    {
        "value": [{"date": 1718280000000, "value": "14.2", "quality": "G"}],
        "station": {...},
        "parameter": {...}
    }

"date" is epoch milliseconds (UTC). "value" is a string. An empty or
missing "value" list just means SMHI has nothing for the last hour.

THE RULE:
--------
One parameter failing never spoils the others. A bad status, a timeout,
garbage JSON or an empty series all become an empty observation plus a
warning in the log. Only a request that can't even be built is fatal.
"""

import asyncio
import logging
from typing import Iterable, Optional

import httpx

from smhi_ingest.exceptions import RequestConstructionError
from smhi_ingest.models import ParameterObservation, ParameterSpec, SMHI_PARAMETERS
from smhi_ingest.utils.timestamps import epoch_ms_to_datetime
from smhi_ingest.utils.validation import parse_sample_value

logger = logging.getLogger(__name__)


class SmhiService:
    """
    Fetches observations from SMHI.

    HOW TO USE:
    ----------
    service = SmhiService(base_url=config.smhi_base_url, request_timeout=10.0)

    observations = await service.fetch_all("99280")
    # -> 5 ParameterObservations, always in SMHI_PARAMETERS order

    await service.close()
    """

    def __init__(
        self,
        base_url: str,
        request_timeout: float = 10.0,
        http_client: Optional[httpx.AsyncClient] = None
    ):
        """
        Set up the service.

        Args:
            base_url: Root of the metobs API (no trailing slash needed)
            request_timeout: Per-request timeout in seconds. A request that
                             times out counts as a failed parameter.
            http_client: Bring your own client (tests pass one with a mock transport)
        """
        self.base_url = base_url.rstrip("/")
        self.http_client = http_client or httpx.AsyncClient(timeout=request_timeout)

    def build_url(self, spec: ParameterSpec, station_id: str) -> str:
        return (
            f"{self.base_url}/parameter/{spec.external_parameter_id}"
            f"/station/{station_id}/period/latest-hour/data.json"
        )

    def build_request(self, spec: ParameterSpec, station_id: str) -> httpx.Request:
        """
        Build the GET request for one parameter.

        Raises:
            RequestConstructionError: If the URL is unusable
        """
        url = self.build_url(spec, station_id)
        try:
            return self.http_client.build_request("GET", url)
        except (httpx.InvalidURL, ValueError, TypeError) as e:
            raise RequestConstructionError(
                f"Cannot build SMHI request for {spec.key.value} at {url}: {e}"
            ) from e

    def parse_observation(self, spec: ParameterSpec, payload) -> ParameterObservation:
        """
        Pick the latest sample out of an SMHI response body.

        Returns an empty observation when there's no usable sample.
        Raises ValueError if the payload has the wrong shape.
        """
        if not isinstance(payload, dict):
            raise ValueError(f"Expected a JSON object, got {type(payload).__name__}")

        samples = payload.get("value")
        if not samples:
            return ParameterObservation.empty(spec.key)
        if not isinstance(samples, list) or not isinstance(samples[0], dict):
            raise ValueError("'value' is not a list of samples")

        latest = samples[0]
        date = latest.get("date")
        if isinstance(date, bool) or not isinstance(date, (int, float)):
            raise ValueError(f"Sample has no usable 'date': {date!r}")
        try:
            timestamp = epoch_ms_to_datetime(date)
        except (OverflowError, OSError, ValueError) as e:
            raise ValueError(f"Sample 'date' out of range: {date!r}") from e

        quality = latest.get("quality")
        return ParameterObservation(
            key=spec.key,
            timestamp=timestamp,
            value=parse_sample_value(latest.get("value")),
            quality=str(quality) if quality is not None else None,
        )

    async def fetch_parameter(self, spec: ParameterSpec, station_id: str) -> ParameterObservation:
        """
        Fetch the latest sample of one parameter.

        Never raises for network or data problems - you get an empty
        observation instead. Only RequestConstructionError escapes.
        """
        request = self.build_request(spec, station_id)
        tag = f"[Station {station_id}] {spec.key.value} (parameter {spec.external_parameter_id})"

        try:
            response = await self.http_client.send(request)
            response.raise_for_status()
            observation = self.parse_observation(spec, response.json())
        except httpx.HTTPStatusError as e:
            logger.warning(f"{tag}: SMHI returned HTTP {e.response.status_code}")
            return ParameterObservation.empty(spec.key)
        except httpx.TimeoutException:
            logger.warning(f"{tag}: request timed out")
            return ParameterObservation.empty(spec.key)
        except httpx.RequestError as e:
            # Transport errors, broken content encodings, redirect loops
            logger.warning(f"{tag}: request failed: {e}")
            return ParameterObservation.empty(spec.key)
        except ValueError as e:
            # Covers both undecodable JSON and samples we can't read
            logger.warning(f"{tag}: malformed payload: {e}")
            return ParameterObservation.empty(spec.key)

        if observation.has_value:
            logger.info(f"{tag}: {observation.value} (quality {observation.quality})")
        else:
            logger.warning(f"{tag}: no data in the latest hour")
        return observation

    async def fetch_all(
        self,
        station_id: str,
        specs: Iterable[ParameterSpec] = SMHI_PARAMETERS
    ) -> list[ParameterObservation]:
        """
        Fetch every parameter for a station at the same time.

        Waits for all of them, whatever happens to each one. The result
        list is in the same order as specs, not in the order the
        requests finished.

        Raises:
            ValueError: If station_id is empty
            RequestConstructionError: If any request couldn't be built
        """
        if not station_id or not isinstance(station_id, str):
            raise ValueError("station_id must be a non-empty string")

        specs = list(specs)
        logger.info(f"[Station {station_id}] Fetching {len(specs)} parameters from SMHI...")

        results = await asyncio.gather(
            *(self.fetch_parameter(spec, station_id) for spec in specs),
            return_exceptions=True
        )

        # Everything recoverable was absorbed above, so whatever is left is fatal
        for result in results:
            if isinstance(result, BaseException):
                raise result

        found = sum(1 for obs in results if obs.has_value)
        logger.info(f"[Station {station_id}] Got {found}/{len(specs)} parameters")
        return list(results)

    async def close(self):
        """Close the HTTP client. Called on shutdown."""
        await self.http_client.aclose()
