"""
Configuration
=============

Everything the pipeline needs from the outside world, in one struct.

The struct is built once (usually from environment variables) and
handed to the services - nothing reads os.environ behind your back.

Environment Variables:
    API_ENDPOINT: GraphQL endpoint of the device/telemetry backend
    API_KEY: API key sent as the x-api-key header
    SMHI_BASE_URL: Root of the SMHI metobs API
    DEFAULT_STATION_ID: Station to ingest when none is given (default: 99280)
    STATION_NAME: Display name stored on readings (default: Svenska Högarna)
    DEVICE_TYPE: Device type tag stored on readings (default: SMHI_Station)
    REQUEST_TIMEOUT: Per-request timeout in seconds (default: 10)
    DIRECTORY_RETRY_ATTEMPTS: Attempts for the device lookup (default: 3)
    DIRECTORY_RETRY_MAX_WAIT: Max backoff between lookup attempts (default: 5)
    LOG_LEVEL: Logging level for the entrypoints (default: INFO)
"""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field


DEFAULT_SMHI_BASE_URL = "https://opendata-download-metobs.smhi.se/api/version/latest"


class IngestConfig(BaseModel):
    """Settings for one pipeline instance."""

    api_endpoint: str = Field(
        "http://localhost:20002/graphql",
        description="GraphQL endpoint for devices and telemetry"
    )
    api_key: str = Field("", repr=False, description="Sent as x-api-key, never logged")
    smhi_base_url: str = Field(DEFAULT_SMHI_BASE_URL)
    default_station_id: str = Field("99280", min_length=1)
    station_name: str = Field("Svenska Högarna")
    device_type: str = Field("SMHI_Station")
    request_timeout: float = Field(10.0, gt=0)
    directory_retry_attempts: int = Field(3, ge=1)
    directory_retry_max_wait: float = Field(5.0, ge=0)
    log_level: str = Field("INFO")

    @classmethod
    def from_env(cls) -> "IngestConfig":
        """Build the config from environment variables (and a .env file if present)."""
        load_dotenv()
        return cls(
            api_endpoint=os.getenv("API_ENDPOINT", "http://localhost:20002/graphql"),
            api_key=os.getenv("API_KEY", ""),
            smhi_base_url=os.getenv("SMHI_BASE_URL", DEFAULT_SMHI_BASE_URL),
            default_station_id=os.getenv("DEFAULT_STATION_ID", "99280"),
            station_name=os.getenv("STATION_NAME", "Svenska Högarna"),
            device_type=os.getenv("DEVICE_TYPE", "SMHI_Station"),
            request_timeout=float(os.getenv("REQUEST_TIMEOUT", "10")),
            directory_retry_attempts=int(os.getenv("DIRECTORY_RETRY_ATTEMPTS", "3")),
            directory_retry_max_wait=float(os.getenv("DIRECTORY_RETRY_MAX_WAIT", "5")),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )
