"""Duration strings such as "15m", "24h" or "7d"."""

import re

DURATION_UNITS: dict[str, int] = {
    "s": 1,
    "m": 60,
    "h": 3600,
    "d": 86400,
}

_DURATION_PATTERN = re.compile(r"^(\d+)([smhd])$")


def parse_duration(duration: str) -> int:
    """Convert a duration string into a number of seconds.

    Parameters
    ----------
    duration
        A positive integer followed by one unit out of ``s``, ``m``, ``h``
        or ``d`` (e.g. ``"24h"``).

    Returns
    -------
    The duration in seconds

    Raises
    ------
    ValueError
        If the string does not match the expected format or is zero
    """
    match = _DURATION_PATTERN.match(duration.strip()) if duration else None
    if match is None:
        msg = f"Invalid duration format: {duration!r} (expected e.g. '30m', '24h', '7d')"
        raise ValueError(msg)

    value, unit = match.groups()
    seconds = int(value) * DURATION_UNITS[unit]
    if seconds <= 0:
        msg = f"Duration must be positive: {duration!r}"
        raise ValueError(msg)
    return seconds
