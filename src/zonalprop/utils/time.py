__all__ = [
    "J2000_EPOCH",
    "as_date",
    "seconds_between",
    "shift_date",
]

from datetime import UTC, datetime

import numpy as np

# 2000-01-01T12:00:00, used as a plain calendar label (time scales are not modelled).
J2000_EPOCH = np.datetime64("2000-01-01T12:00:00", "ns")

_NANOSECONDS_PER_SECOND = 1_000_000_000


def as_date(value: np.datetime64 | datetime | str) -> np.datetime64:
    """Convert a date-like value into a nanosecond-resolution `np.datetime64`."""
    if isinstance(value, datetime) and value.tzinfo is not None:
        value = value.astimezone(tz=UTC).replace(tzinfo=None)
    return np.datetime64(value, "ns")


def seconds_between(date: np.datetime64, reference: np.datetime64) -> float:
    """Return `date - reference` in seconds."""
    return float((date - reference) / np.timedelta64(1, "s"))


def shift_date(date: np.datetime64, seconds: float) -> np.datetime64:
    return np.datetime64(date, "ns") + np.timedelta64(round(seconds * _NANOSECONDS_PER_SECOND), "ns")
