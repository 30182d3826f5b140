"""
Device Directory
================

Answers one question: does this device exist, and who owns it?

The answer is fetched fresh on every run and never cached.

WHAT CAN HAPPEN:
---------------
- Backend returns errors     -> BackendValidationError (run ends with 400)
- No device / empty owner    -> DeviceOwnership(owner=None) (run ends with 404)
- Network keeps failing      -> retried a few times, then the httpx error
                                 bubbles up (run ends with 500)
"""

import logging

import httpx
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from smhi_ingest.models import DeviceOwnership
from smhi_ingest.services.graphql_client import GraphQLClient

logger = logging.getLogger(__name__)


GET_DEVICE_QUERY = """
query GetDevice($device_id: String!) {
    getDevices(device_id: $device_id) {
        device_id
        owner
    }
}
"""


class DeviceDirectory:
    """Looks devices up in the backend."""

    def __init__(
        self,
        client: GraphQLClient,
        retry_attempts: int = 3,
        retry_max_wait: float = 5.0
    ):
        """
        Args:
            client: Shared GraphQL client
            retry_attempts: Total attempts for transport failures (1 = no retry)
            retry_max_wait: Upper bound for the exponential backoff (seconds)
        """
        self.client = client
        self.retry_attempts = retry_attempts
        self.retry_max_wait = retry_max_wait

    async def resolve_owner(self, device_id: str) -> DeviceOwnership:
        """
        Look up a device and return its owner.

        Only transport errors are retried. A backend errors list is an
        answer, not a hiccup, so it is raised straight away.

        Raises:
            BackendValidationError: The lookup query itself failed
            httpx.TransportError: The backend stayed unreachable
        """
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.retry_attempts),
            wait=wait_exponential(multiplier=0.5, max=self.retry_max_wait),
            retry=retry_if_exception_type(httpx.TransportError),
            before_sleep=self._log_retry,
            reraise=True
        )
        async for attempt in retrying:
            with attempt:
                data = await self.client.execute(
                    GET_DEVICE_QUERY,
                    variables={"device_id": device_id},
                    operation="getDevices"
                )

        device = data.get("getDevices")
        if not device:
            logger.info(f"[Device {device_id}] Not registered in the directory")
            return DeviceOwnership(device_id=device_id, owner=None)

        ownership = DeviceOwnership(
            device_id=device.get("device_id") or device_id,
            owner=device.get("owner") or None
        )
        if ownership.has_owner:
            logger.info(f"[Device {device_id}] Owned by {ownership.owner}")
        else:
            logger.info(f"[Device {device_id}] Registered but has no owner")
        return ownership

    @staticmethod
    def _log_retry(retry_state):
        logger.warning(
            f"[GraphQL] getDevices attempt {retry_state.attempt_number} failed "
            f"({retry_state.outcome.exception()}), retrying..."
        )
