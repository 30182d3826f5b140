"""
Input Validation Utilities
===========================

Validation for station ids and the safe float conversion used when
reading SMHI samples.
"""

import math
import re
from typing import Optional


def validate_station_id(station_id: Optional[str]) -> bool:
    """
    Validate an SMHI station id (also used as our device id).

    Args:
        station_id: Station id string (e.g., "99280")

    Returns:
        True if valid, False otherwise
    """
    if not station_id:
        return False
    # Station ids are numeric today, but the directory accepts any slug
    return bool(re.match(r'^[a-zA-Z0-9_-]{1,100}$', station_id))


def parse_sample_value(value) -> float:
    """
    Read an SMHI sample value as a float.

    SMHI sends values as strings ("14.2"). Anything that isn't a finite
    number raises ValueError.
    """
    if value is None or isinstance(value, bool):
        raise ValueError(f"Not a numeric sample value: {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"Not a numeric sample value: {value!r}")
    if not math.isfinite(number):
        raise ValueError(f"Not a finite sample value: {value!r}")
    return number
