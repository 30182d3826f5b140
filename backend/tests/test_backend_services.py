import httpx
import pytest

from conftest import T0, T0_MS, GraphQLFake, make_graphql_client
from smhi_ingest.exceptions import BackendValidationError
from smhi_ingest.models import Reading
from smhi_ingest.services.device_directory import DeviceDirectory
from smhi_ingest.services.telemetry_store import TelemetryStore


def reading(**values):
    return Reading(device_id="99280", device_type="SMHI_Station", name="Svenska Högarna", **values)


# =============================================================================
# GRAPHQL CLIENT
# =============================================================================

@pytest.mark.asyncio
async def test_client_sends_api_key_and_variables():
    fake = GraphQLFake(devices={"99280": "user-42"})
    client = make_graphql_client(fake)

    await DeviceDirectory(client).resolve_owner("99280")

    sent = fake.requests[0]
    assert sent["headers"]["x-api-key"] == "secret-key"
    assert sent["headers"]["content-type"] == "application/json"
    assert sent["variables"] == {"device_id": "99280"}


@pytest.mark.asyncio
async def test_client_http_error_without_graphql_body_raises():
    client = make_graphql_client(lambda request: httpx.Response(502, content=b"Bad Gateway"))

    with pytest.raises(httpx.HTTPStatusError):
        await client.execute("query { x }", operation="x")


@pytest.mark.asyncio
async def test_client_http_error_with_graphql_errors_is_validation_error():
    errors = [{"errorType": "UnauthorizedException", "message": "Valid authorization header not provided."}]
    client = make_graphql_client(lambda request: httpx.Response(401, json={"errors": errors}))

    with pytest.raises(BackendValidationError) as exc_info:
        await client.execute("query { x }", operation="x")
    assert exc_info.value.errors == errors


# =============================================================================
# DEVICE DIRECTORY
# =============================================================================

@pytest.mark.asyncio
async def test_resolve_owner_found():
    directory = DeviceDirectory(make_graphql_client(GraphQLFake(devices={"99280": "user-42"})))

    ownership = await directory.resolve_owner("99280")

    assert ownership.device_id == "99280"
    assert ownership.owner == "user-42"
    assert ownership.has_owner


@pytest.mark.asyncio
async def test_resolve_owner_unknown_device():
    directory = DeviceDirectory(make_graphql_client(GraphQLFake(devices={})))

    ownership = await directory.resolve_owner("99280")

    assert ownership.owner is None
    assert not ownership.has_owner


@pytest.mark.asyncio
@pytest.mark.parametrize("owner", [None, ""])
async def test_resolve_owner_device_without_owner(owner):
    directory = DeviceDirectory(make_graphql_client(GraphQLFake(devices={"99280": owner})))

    ownership = await directory.resolve_owner("99280")

    assert ownership.owner is None


@pytest.mark.asyncio
async def test_resolve_owner_query_error_is_not_retried():
    errors = [{"message": "Validation error of type FieldUndefined"}]
    fake = GraphQLFake(lookup_errors=errors)
    directory = DeviceDirectory(make_graphql_client(fake), retry_attempts=3, retry_max_wait=0)

    with pytest.raises(BackendValidationError) as exc_info:
        await directory.resolve_owner("99280")

    assert exc_info.value.errors == errors
    assert len(fake.lookups) == 1


@pytest.mark.asyncio
async def test_resolve_owner_single_error_string_is_kept_whole():
    fake = GraphQLFake(lookup_errors="Unauthorized")
    directory = DeviceDirectory(make_graphql_client(fake), retry_attempts=3, retry_max_wait=0)

    with pytest.raises(BackendValidationError) as exc_info:
        await directory.resolve_owner("99280")

    assert exc_info.value.errors == ["Unauthorized"]


@pytest.mark.asyncio
async def test_resolve_owner_retries_transport_errors():
    fake = GraphQLFake(devices={"99280": "user-42"})
    calls = 0

    def flaky(request):
        nonlocal calls
        calls += 1
        if calls < 3:
            raise httpx.ConnectError("connection reset")
        return fake(request)

    directory = DeviceDirectory(make_graphql_client(flaky), retry_attempts=3, retry_max_wait=0)

    ownership = await directory.resolve_owner("99280")

    assert ownership.owner == "user-42"
    assert calls == 3


@pytest.mark.asyncio
async def test_resolve_owner_gives_up_after_budget():
    calls = 0

    def down(request):
        nonlocal calls
        calls += 1
        raise httpx.ConnectError("connection refused")

    directory = DeviceDirectory(make_graphql_client(down), retry_attempts=2, retry_max_wait=0)

    with pytest.raises(httpx.ConnectError):
        await directory.resolve_owner("99280")
    assert calls == 2


# =============================================================================
# TELEMETRY STORE
# =============================================================================

@pytest.mark.asyncio
async def test_commit_sends_record_with_epoch_ms_timestamp():
    fake = GraphQLFake()
    store = TelemetryStore(make_graphql_client(fake))

    record = await store.commit(reading(timestamp=T0, temperature=14.2, visibility=20.0), "user-42")

    assert len(fake.creates) == 1
    sent = fake.creates[0]["variables"]["input"]
    assert sent == {
        "device_id": "99280",
        "owner": "user-42",
        "timestamp": T0_MS,
        "temperature": 14.2,
        "wind_direction": None,
        "wind_speed": None,
        "wind_gust_max": None,
        "visibility": 20.0,
    }
    assert record.timestamp == T0
    assert record.owner == "user-42"


@pytest.mark.asyncio
async def test_commit_rejected_by_store():
    errors = [{"message": "Variable 'timestamp' has an invalid value"}]
    fake = GraphQLFake(create_errors=errors)
    store = TelemetryStore(make_graphql_client(fake))

    with pytest.raises(BackendValidationError) as exc_info:
        await store.commit(reading(temperature=1.0), "user-42")

    assert exc_info.value.errors == errors
    assert len(fake.creates) == 1


@pytest.mark.asyncio
async def test_commit_requires_owner():
    fake = GraphQLFake()
    store = TelemetryStore(make_graphql_client(fake))

    with pytest.raises(ValueError):
        await store.commit(reading(), "")
    assert fake.creates == []


@pytest.mark.asyncio
async def test_commit_transport_error_is_not_retried():
    calls = 0

    def down(request):
        nonlocal calls
        calls += 1
        raise httpx.ConnectError("connection refused")

    store = TelemetryStore(make_graphql_client(down))

    with pytest.raises(httpx.ConnectError):
        await store.commit(reading(), "user-42")
    assert calls == 1
