from __future__ import annotations

__all__ = ["TimeSpanMap"]

import bisect
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import numpy as np


class TimeSpanMap[T]:
    """Piecewise-constant mapping from dates to values.

    The map starts with a single value valid over the whole timeline. Later values are added on either side of a
    transition date. Adding a value valid after a date erases every later transition, and adding a value valid
    before a date erases every earlier one, so that the newest entry always wins in its direction.
    """

    def __init__(self, initial: T) -> None:
        self._dates: list[np.datetime64] = []
        # _values[k] is valid on [_dates[k - 1], _dates[k]).
        self._values: list[T] = [initial]

    def __len__(self) -> int:
        return len(self._values)

    def add_valid_after(self, value: T, date: np.datetime64) -> None:
        index = bisect.bisect_left(self._dates, date)
        del self._dates[index:]
        del self._values[index + 1 :]
        self._dates.append(date)
        self._values.append(value)

    def add_valid_before(self, value: T, date: np.datetime64) -> None:
        index = bisect.bisect_right(self._dates, date)
        del self._dates[:index]
        del self._values[:index]
        self._dates.insert(0, date)
        self._values.insert(0, value)

    def get(self, date: np.datetime64) -> T:
        return self._values[bisect.bisect_right(self._dates, date)]
