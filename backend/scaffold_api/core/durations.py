"""Duration strings used for token lifetimes ("30d", "12h", "45m", "30s")"""

import re
from datetime import timedelta

from scaffold_api.core.exceptions import InvalidConfigurationError

_DURATION_RE = re.compile(r"^(-?\d+)([dhms])$")

_UNIT_SECONDS = {
    "d": 24 * 60 * 60,
    "h": 60 * 60,
    "m": 60,
    "s": 1,
}


def parse_duration(value: str) -> timedelta:
    """
    Parse a duration string into a timedelta

    Args:
        value: Integer amount followed by a unit suffix (d, h, m or s)

    Returns:
        timedelta: Parsed duration

    Raises:
        InvalidConfigurationError: If the string does not match the grammar
    """
    match = _DURATION_RE.match((value or "").strip())
    if not match:
        raise InvalidConfigurationError(f"Invalid expiration format: {value!r}")

    amount, unit = match.groups()
    return timedelta(seconds=int(amount) * _UNIT_SECONDS[unit])
