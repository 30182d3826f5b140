import json
from datetime import datetime, timezone

import httpx
import pytest

from smhi_ingest.config import IngestConfig
from smhi_ingest.services.device_directory import DeviceDirectory
from smhi_ingest.services.graphql_client import GraphQLClient
from smhi_ingest.services.ingest_pipeline import IngestPipeline
from smhi_ingest.services.smhi_service import SmhiService
from smhi_ingest.services.telemetry_store import TelemetryStore

SMHI_BASE = "https://smhi.test/api/version/latest"
GRAPHQL_URL = "https://backend.test/graphql"

T0_MS = 1718280000000
T0 = datetime(2024, 6, 13, 12, 0, tzinfo=timezone.utc)

# Parameter id -> key, matching SMHI_PARAMETERS
PARAM_IDS = {"1": "temperature", "3": "wind_direction", "4": "wind_speed", "21": "wind_gust_max", "6": "visibility"}


def smhi_body(value, date=T0_MS, quality="G"):
    """Minimal SMHI latest-hour payload with one sample."""
    return {
        "value": [{"date": date, "value": str(value), "quality": quality}],
        "station": {"key": "99280", "name": "Svenska Högarna"},
        "parameter": {"key": "1"},
    }


def parameter_id_of(request: httpx.Request) -> str:
    # .../parameter/{id}/station/{station}/period/latest-hour/data.json
    parts = request.url.path.split("/")
    return parts[parts.index("parameter") + 1]


def station_of(request: httpx.Request) -> str:
    parts = request.url.path.split("/")
    return parts[parts.index("station") + 1]


class SmhiFake:
    """
    Fake SMHI. responses maps parameter key -> body dict, int status,
    a ready-made httpx.Response, or an exception instance to raise.
    """

    def __init__(self, responses):
        self.responses = responses
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = PARAM_IDS[parameter_id_of(request)]
        answer = self.responses.get(key, 404)
        if isinstance(answer, httpx.Response):
            return answer
        if isinstance(answer, Exception):
            raise answer
        if isinstance(answer, int):
            return httpx.Response(answer, json={"error": "nope"})
        return httpx.Response(200, json=answer)


class GraphQLFake:
    """
    Fake GraphQL backend.

    devices maps device_id -> owner (None = registered without owner).
    Set lookup_errors / create_errors to make those calls fail.
    """

    def __init__(self, devices=None, lookup_errors=None, create_errors=None):
        self.devices = devices or {}
        self.lookup_errors = lookup_errors
        self.create_errors = create_errors
        self.requests = []

    @property
    def lookups(self):
        return [r for r in self.requests if "getDevices" in r["query"]]

    @property
    def creates(self):
        return [r for r in self.requests if "createTelemetry" in r["query"]]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        payload["headers"] = dict(request.headers)
        self.requests.append(payload)
        variables = payload.get("variables") or {}

        if "getDevices" in payload["query"]:
            if self.lookup_errors:
                return httpx.Response(200, json={"data": None, "errors": self.lookup_errors})
            device_id = variables["device_id"]
            if device_id not in self.devices:
                return httpx.Response(200, json={"data": {"getDevices": None}})
            return httpx.Response(
                200,
                json={"data": {"getDevices": {"device_id": device_id, "owner": self.devices[device_id]}}}
            )

        if self.create_errors:
            return httpx.Response(200, json={"data": {"createTelemetry": None}, "errors": self.create_errors})
        return httpx.Response(200, json={"data": {"createTelemetry": variables["input"]}})


@pytest.fixture
def config():
    return IngestConfig(
        api_endpoint=GRAPHQL_URL,
        api_key="secret-key",
        smhi_base_url=SMHI_BASE,
        default_station_id="99280",
        station_name="Svenska Högarna",
        device_type="SMHI_Station",
        request_timeout=2.0,
        directory_retry_attempts=3,
        directory_retry_max_wait=0,
    )


@pytest.fixture
def full_smhi():
    return SmhiFake({
        "temperature": smhi_body("14.2"),
        "wind_direction": smhi_body("180"),
        "wind_speed": smhi_body("5.1"),
        "wind_gust_max": smhi_body("7.3"),
        "visibility": smhi_body("20"),
    })


def make_smhi_service(handler) -> SmhiService:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return SmhiService(base_url=SMHI_BASE, http_client=client)


def make_graphql_client(handler) -> GraphQLClient:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return GraphQLClient(endpoint=GRAPHQL_URL, api_key="secret-key", http_client=client)


def make_pipeline(config, smhi_handler, graphql_handler) -> IngestPipeline:
    graphql = make_graphql_client(graphql_handler)
    return IngestPipeline(
        config=config,
        smhi_service=make_smhi_service(smhi_handler),
        device_directory=DeviceDirectory(graphql, retry_attempts=config.directory_retry_attempts, retry_max_wait=0),
        telemetry_store=TelemetryStore(graphql),
    )
