from __future__ import annotations

__all__ = [
    "AdditionalStateProvider",
    "BoundedPropagator",
    "PropagationType",
    "Propagator",
    "StepHandler",
]

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from enum import Enum
from typing import TYPE_CHECKING, Protocol

import numpy as np
from scipy.optimize import brentq

from zonalprop.orbits import PVCoordinates
from zonalprop.utils.time import as_date, seconds_between, shift_date

from .events import Action, EventDetector
from .state import AttitudeProvider, FrameAlignedProvider, SpacecraftState

if TYPE_CHECKING:
    from datetime import datetime

    import numpy.typing as npt

    from .ephemeris import EphemerisGenerator

logger = logging.getLogger(__name__)


class PropagationType(Enum):
    """Whether an orbit holds mean (secular) or osculating (instantaneous) elements."""

    MEAN = "mean"
    OSCULATING = "osculating"


class AdditionalStateProvider(Protocol):
    """Computes a named additional state from the rest of a spacecraft state."""

    @property
    def name(self) -> str: ...

    def get_additional_state(self, state: SpacecraftState) -> npt.ArrayLike: ...


type StepHandler = Callable[[SpacecraftState], None]


class _FixedStepRunner:
    """Calls a handler on a regular grid anchored at the propagation start, then once on the final state."""

    def __init__(self, step: float, handler: StepHandler, start: np.datetime64, sign: float) -> None:
        self._step = step
        self._handler = handler
        self._start = start
        self._sign = sign
        self._next_offset = 0.0
        self._last_date: np.datetime64 | None = None

    def advance(self, propagator: Propagator, reached: SpacecraftState) -> None:
        reached_offset = abs(seconds_between(reached.date, self._start))
        while self._next_offset <= reached_offset:
            date = shift_date(self._start, self._sign * self._next_offset)
            state = reached if date == reached.date else propagator.state_at(date)
            self._handler(state)
            self._last_date = date
            self._next_offset += self._step

    def finish(self, final: SpacecraftState) -> None:
        if self._last_date != final.date:
            self._handler(final)


class Propagator(ABC):
    """Base of all propagators.

    Subclasses only compute a state at a date (`_compute_state`). This class adds the managed additional states,
    consults event detectors and drives step handlers and ephemeris generators during `propagate`.
    """

    def __init__(self, attitude_provider: AttitudeProvider | None = None) -> None:
        self._attitude_provider: AttitudeProvider = attitude_provider or FrameAlignedProvider()
        self._additional_state_providers: list[AdditionalStateProvider] = []
        self._event_detectors: list[EventDetector] = []
        self._step_handlers: list[tuple[float, StepHandler]] = []
        self._ephemeris_generators: list[EphemerisGenerator] = []
        self._start_date: np.datetime64 | None = None

    @property
    def attitude_provider(self) -> AttitudeProvider:
        return self._attitude_provider

    @attitude_provider.setter
    def attitude_provider(self, provider: AttitudeProvider) -> None:
        self._attitude_provider = provider

    @property
    @abstractmethod
    def initial_state(self) -> SpacecraftState: ...

    @abstractmethod
    def reset_initial_state(self, state: SpacecraftState) -> None: ...

    @abstractmethod
    def reset_intermediate_state(self, state: SpacecraftState, forward: bool) -> None:  # noqa: FBT001
        """Replace the trajectory on one side of `state.date` (after it if `forward`, before it otherwise)."""

    @abstractmethod
    def _compute_state(self, date: np.datetime64) -> SpacecraftState:
        """Return the state at `date`, without the additional states managed by this propagator."""

    # additional states

    def add_additional_state_provider(self, provider: AdditionalStateProvider) -> None:
        if self.is_additional_state_managed(provider.name):
            logger.error("Additional state %s is already managed", provider.name)
            msg = f"additional state {provider.name!r} is already managed"
            raise ValueError(msg)
        self._additional_state_providers.append(provider)

    @property
    def additional_state_providers(self) -> tuple[AdditionalStateProvider, ...]:
        return tuple(self._additional_state_providers)

    @property
    def managed_additional_states(self) -> tuple[str, ...]:
        return tuple(provider.name for provider in self._additional_state_providers)

    def is_additional_state_managed(self, name: str) -> bool:
        return name in self.managed_additional_states

    def _update_additional_states(self, state: SpacecraftState) -> SpacecraftState:
        for provider in self._additional_state_providers:
            state = state.add_additional_state(provider.name, provider.get_additional_state(state))
        return state

    # events and step handlers

    def add_event_detector(self, detector: EventDetector) -> None:
        self._event_detectors.append(detector)

    @property
    def event_detectors(self) -> tuple[EventDetector, ...]:
        return tuple(self._event_detectors)

    def clear_event_detectors(self) -> None:
        self._event_detectors.clear()

    def add_step_handler(self, step: float, handler: StepHandler) -> None:
        if step <= 0.0:
            logger.warning("Ignoring step handler with non-positive step %s", step)
            return
        self._step_handlers.append((step, handler))

    def clear_step_handlers(self) -> None:
        self._step_handlers.clear()

    def get_ephemeris_generator(self, step: float = 60.0) -> EphemerisGenerator:
        """Return a generator recording the states visited by the next calls to `propagate`."""
        from .ephemeris import EphemerisGenerator  # noqa: PLC0415

        generator = EphemerisGenerator(step)
        self._ephemeris_generators.append(generator)
        return generator

    # propagation

    def state_at(self, date: np.datetime64 | datetime | str) -> SpacecraftState:
        """Return the state at `date`, ignoring events and step handlers."""
        return self._update_additional_states(self._compute_state(as_date(date)))

    def propagate_pv(self, dates: npt.NDArray[np.datetime64] | Sequence[np.datetime64]) -> PVCoordinates:
        """Return positions and velocities of shape (n, 3) at each date, ignoring events."""
        pvs = [self._compute_state(as_date(date)).pv for date in dates]
        return PVCoordinates(
            position=np.array([pv.position for pv in pvs]).reshape(-1, 3),
            velocity=np.array([pv.velocity for pv in pvs]).reshape(-1, 3),
        )

    def propagate(
        self,
        target: np.datetime64 | datetime | str,
        start: np.datetime64 | datetime | str | None = None,
    ) -> SpacecraftState:
        """Propagate from `start` (by default where the previous call ended) to `target`.

        Event detectors are checked along the way; the propagation ends early when one of them returns
        `Action.STOP`, and the returned state is then the state at the event.
        """
        target = as_date(target)
        if start is not None:
            start_date = as_date(start)
        elif self._start_date is not None:
            start_date = self._start_date
        else:
            start_date = self.initial_state.date
        forward = bool(target >= start_date)
        sign = 1.0 if forward else -1.0

        current = self.state_at(start_date)
        for generator in self._ephemeris_generators:
            generator.begin(current, forward=forward)
        runners = [
            _FixedStepRunner(step, handler, start_date, sign)
            for step, handler in (
                *self._step_handlers,
                *((generator.step, generator.record) for generator in self._ephemeris_generators),
            )
        ]
        detectors = list(self._event_detectors)
        for detector in detectors:
            detector.init(current, target)
        g_before = [detector.g(current) for detector in detectors]
        lower_bounds = [0.0] * len(detectors)
        for runner in runners:
            runner.advance(self, current)

        while current.date != target:
            remaining = abs(seconds_between(target, current.date))
            step = min([remaining, *(detector.max_check for detector in detectors)])
            next_date = target if step == remaining else shift_date(current.date, sign * step)
            next_state = self.state_at(next_date)
            g_after = [detector.g(next_state) for detector in detectors]

            event = self._locate_first_event(detectors, current, step, sign, lower_bounds, g_before, g_after)
            if event is None:
                for runner in runners:
                    runner.advance(self, next_state)
                current, g_before = next_state, g_after
                lower_bounds = [0.0] * len(detectors)
                continue

            index, offset = event
            detector = detectors[index]
            event_date = shift_date(current.date, sign * offset)
            event_state = self.state_at(event_date)
            for runner in runners:
                runner.advance(self, event_state)
            increasing = bool(g_after[index] > g_before[index]) == forward
            action = detector.event_occurred(event_state, increasing)
            logger.debug("%s event at %s (increasing=%s): %s", type(detector).__name__, event_date, increasing, action)

            current = event_state
            if action is Action.STOP:
                break
            if action is Action.RESET_STATE:
                self.reset_intermediate_state(detector.reset_state(event_state), forward)
                current = self.state_at(event_date)
            g_before = [d.g(current) for d in detectors]
            # The root just handled is skipped by restarting the search for this detector slightly after it.
            lower_bounds = [0.0] * len(detectors)
            lower_bounds[index] = 2.0 * detector.threshold
            g_before[index] = detector.g(self.state_at(shift_date(event_date, sign * lower_bounds[index])))

        for runner in runners:
            runner.finish(current)
        for generator in self._ephemeris_generators:
            generator.end(current)
        self._start_date = current.date
        return current

    def _locate_first_event(
        self,
        detectors: Sequence[EventDetector],
        current: SpacecraftState,
        step: float,
        sign: float,
        lower_bounds: Sequence[float],
        g_before: Sequence[float],
        g_after: Sequence[float],
    ) -> tuple[int, float] | None:
        first: tuple[int, float] | None = None
        for index, detector in enumerate(detectors):
            lower, before, after = lower_bounds[index], g_before[index], g_after[index]
            if lower >= step or before == 0.0 or before * after > 0.0:
                continue
            if after == 0.0:
                offset = step
            else:

                def g_at(offset: float, detector: EventDetector = detector) -> float:
                    return detector.g(self.state_at(shift_date(current.date, sign * offset)))

                offset = float(brentq(g_at, lower, step, xtol=detector.threshold))
            if first is None or offset < first[1]:
                first = (index, offset)
        return first


class BoundedPropagator(Propagator):
    """Propagator only valid over a finite date range."""

    @property
    @abstractmethod
    def min_date(self) -> np.datetime64: ...

    @property
    @abstractmethod
    def max_date(self) -> np.datetime64: ...
