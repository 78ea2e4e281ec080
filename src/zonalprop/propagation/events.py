"""Switching functions consulted by propagators while they advance.

A detector exposes a continuous function `g(state)` whose sign changes mark events. The propagator checks
every detector at least every `max_check` seconds, locates sign changes to within `threshold` seconds and
asks the detector what to do with the `Action` it returns.
"""

from __future__ import annotations

__all__ = [
    "Action",
    "ApsideDetector",
    "DateDetector",
    "EventDetector",
    "EventHandler",
    "NodeDetector",
    "stop_on_decreasing",
    "stop_on_event",
    "stop_on_increasing",
]

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from enum import Enum, auto
from typing import TYPE_CHECKING, override

import numpy as np

from zonalprop.utils.time import as_date, seconds_between

if TYPE_CHECKING:
    from .state import SpacecraftState

logger = logging.getLogger(__name__)

DEFAULT_MAX_CHECK = 60.0  # [s]
DEFAULT_THRESHOLD = 1.0e-6  # [s]


class Action(Enum):
    STOP = auto()
    CONTINUE = auto()
    RESET_STATE = auto()


type EventHandler = Callable[[SpacecraftState, EventDetector, bool], Action]


def stop_on_event(state: SpacecraftState, detector: EventDetector, increasing: bool) -> Action:  # noqa: ARG001, FBT001
    return Action.STOP


def stop_on_increasing(state: SpacecraftState, detector: EventDetector, increasing: bool) -> Action:  # noqa: ARG001, FBT001
    return Action.STOP if increasing else Action.CONTINUE


def stop_on_decreasing(state: SpacecraftState, detector: EventDetector, increasing: bool) -> Action:  # noqa: ARG001, FBT001
    return Action.CONTINUE if increasing else Action.STOP


class EventDetector(ABC):
    def __init__(
        self,
        *,
        max_check: float = DEFAULT_MAX_CHECK,
        threshold: float = DEFAULT_THRESHOLD,
        handler: EventHandler = stop_on_event,
    ) -> None:
        if max_check <= 0.0 or threshold <= 0.0:
            msg = f"max_check and threshold must be positive, got {max_check} and {threshold}"
            raise ValueError(msg)
        self.max_check = max_check
        self.threshold = threshold
        self.handler = handler

    def init(self, state: SpacecraftState, target: np.datetime64) -> None:
        """Prepare the detector at the start of a propagation."""

    @abstractmethod
    def g(self, state: SpacecraftState) -> float: ...

    def event_occurred(self, state: SpacecraftState, increasing: bool) -> Action:  # noqa: FBT001
        return self.handler(state, self, increasing)

    def reset_state(self, state: SpacecraftState) -> SpacecraftState:
        return state


class DateDetector(EventDetector):
    """Event at a fixed date."""

    def __init__(self, date: np.datetime64, **kwargs) -> None:  # noqa: ANN003
        super().__init__(**kwargs)
        self.date = as_date(date)

    @override
    def g(self, state: SpacecraftState) -> float:
        return seconds_between(state.date, self.date)


class NodeDetector(EventDetector):
    """Crossing of the equatorial plane of the orbit frame; `increasing` is True at the ascending node."""

    @override
    def g(self, state: SpacecraftState) -> float:
        return float(state.pv.position[2])


class ApsideDetector(EventDetector):
    """Apside crossing; `increasing` is True at perigee, where the radial velocity turns positive."""

    @override
    def g(self, state: SpacecraftState) -> float:
        pv = state.pv
        return float(np.dot(pv.position, pv.velocity))
