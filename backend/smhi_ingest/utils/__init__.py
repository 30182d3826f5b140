"""
Utility modules for the SMHI ingest backend.
"""

from smhi_ingest.utils.timestamps import (
    epoch_ms_to_datetime,
    datetime_to_epoch_ms,
)
from smhi_ingest.utils.validation import (
    validate_station_id,
    parse_sample_value,
)

__all__ = [
    "epoch_ms_to_datetime",
    "datetime_to_epoch_ms",
    "validate_station_id",
    "parse_sample_value",
]
