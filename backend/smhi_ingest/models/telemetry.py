"""
Telemetry Models
================
Pydantic models for one ingest run.

Everything in here is created and thrown away inside a single pipeline
invocation. Nothing is cached between runs.

THE FLOW:
    ParameterSpec (x5, fixed)
        |  SmhiService.fetch_all()
        v
    ParameterObservation (x5, same order)
        |  aggregate_reading()
        v
    Reading
        |  + DeviceOwnership.owner
        v
    TelemetryRecord  --createTelemetry-->  telemetry store
        |
        v
    PipelineOutcome (status_code + body)
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from smhi_ingest.utils.timestamps import epoch_ms_to_datetime, datetime_to_epoch_ms


# =============================================================================
# PARAMETERS
# =============================================================================

class ParameterKey(str, Enum):
    """
    The physical parameters we pull for every station.

    The value doubles as the name of the matching field on Reading
    and TelemetryRecord.
    """
    TEMPERATURE = "temperature"
    WIND_DIRECTION = "wind_direction"
    WIND_SPEED = "wind_speed"
    WIND_GUST_MAX = "wind_gust_max"
    VISIBILITY = "visibility"


class ParameterSpec(BaseModel):
    """Maps one of our parameter keys to the SMHI parameter id."""
    model_config = ConfigDict(frozen=True)

    key: ParameterKey
    external_parameter_id: str = Field(..., min_length=1, description="SMHI metobs parameter id")


# Order matters: the aggregator takes the reading timestamp from the first
# parameter in this tuple that returned data.
SMHI_PARAMETERS: tuple[ParameterSpec, ...] = (
    ParameterSpec(key=ParameterKey.TEMPERATURE, external_parameter_id="1"),
    ParameterSpec(key=ParameterKey.WIND_DIRECTION, external_parameter_id="3"),
    ParameterSpec(key=ParameterKey.WIND_SPEED, external_parameter_id="4"),
    ParameterSpec(key=ParameterKey.WIND_GUST_MAX, external_parameter_id="21"),
    ParameterSpec(key=ParameterKey.VISIBILITY, external_parameter_id="6"),
)


class ParameterObservation(BaseModel):
    """
    Latest sample of one parameter at one station.

    value and timestamp are both None when the fetch failed or SMHI had
    nothing for the last hour.
    """
    key: ParameterKey
    timestamp: Optional[datetime] = None
    value: Optional[float] = None
    quality: Optional[str] = None

    @classmethod
    def empty(cls, key: ParameterKey) -> "ParameterObservation":
        return cls(key=key)

    @property
    def has_value(self) -> bool:
        return self.value is not None


# =============================================================================
# READING
# =============================================================================

class Reading(BaseModel):
    """
    One merged snapshot for a device.

    device_id is always set. Every measurement (and the timestamp) stays
    None until a successful observation fills it in.
    """
    model_config = ConfigDict(frozen=True)

    device_id: str = Field(..., min_length=1, description="Equals the SMHI station id")
    device_type: str = Field(..., description="Data source kind, e.g. SMHI_Station")
    name: str = Field(..., description="Display label of the station")
    timestamp: Optional[datetime] = None
    temperature: Optional[float] = Field(None, description="Air temperature (°C)")
    wind_direction: Optional[float] = Field(None, description="Wind direction (°)")
    wind_speed: Optional[float] = Field(None, description="Mean wind speed (m/s)")
    wind_gust_max: Optional[float] = Field(None, description="Max gust (m/s)")
    visibility: Optional[float] = Field(None, description="Visibility (m)")


# =============================================================================
# COLLABORATOR RECORDS
# =============================================================================

class DeviceOwnership(BaseModel):
    """What the device directory told us about a device. Fetched fresh every run."""
    device_id: str
    owner: Optional[str] = None

    @property
    def has_owner(self) -> bool:
        return bool(self.owner)


class TelemetryRecord(BaseModel):
    """
    The record we send to the telemetry store.

    On the wire the timestamp is epoch milliseconds, the same format SMHI
    uses and the dashboard sorts on.
    """
    model_config = ConfigDict(frozen=True, extra="ignore")

    device_id: str
    owner: str
    timestamp: Optional[datetime] = None
    temperature: Optional[float] = None
    wind_direction: Optional[float] = None
    wind_speed: Optional[float] = None
    wind_gust_max: Optional[float] = None
    visibility: Optional[float] = None

    @field_validator("timestamp", mode="before")
    @classmethod
    def _parse_epoch_ms(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return epoch_ms_to_datetime(value)
        return value

    @field_serializer("timestamp")
    def _serialize_timestamp(self, value: Optional[datetime]) -> Optional[int]:
        return datetime_to_epoch_ms(value) if value is not None else None

    @classmethod
    def from_reading(cls, reading: Reading, owner: str) -> "TelemetryRecord":
        """Attribute a reading to its owner."""
        return cls(
            device_id=reading.device_id,
            owner=owner,
            timestamp=reading.timestamp,
            temperature=reading.temperature,
            wind_direction=reading.wind_direction,
            wind_speed=reading.wind_speed,
            wind_gust_max=reading.wind_gust_max,
            visibility=reading.visibility,
        )


# =============================================================================
# RESULT
# =============================================================================

class PipelineOutcome(BaseModel):
    """
    The only thing a caller ever sees from a run.

    body is the committed record on success, otherwise {"errors": [...]}.
    """
    status_code: int = Field(..., description="HTTP-style status code")
    body: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status_code == 200


# =============================================================================
# REQUEST MODELS - What callers send to the HTTP surface
# =============================================================================

class IngestRequest(BaseModel):
    """
    Optional body for POST /api/ingest.

    Leave station_id out to ingest the configured default station.
    """
    station_id: Optional[str] = Field(
        None,
        description="SMHI station id, doubles as the device id",
        examples=["99280"]
    )
