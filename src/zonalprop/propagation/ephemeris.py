from __future__ import annotations

__all__ = [
    "Ephemeris",
    "EphemerisGenerator",
]

import logging
from dataclasses import replace
from typing import TYPE_CHECKING, override

import numpy as np
from scipy.interpolate import KroghInterpolator

from zonalprop.errors import NonResettableStateError, OutOfRangeDateError, PropagationOrderError
from zonalprop.orbits import CartesianOrbit, convert_orbit, orbit_type_of, to_cartesian
from zonalprop.utils.time import seconds_between, shift_date

from .propagator import BoundedPropagator
from .state import SpacecraftState

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .state import AttitudeProvider

logger = logging.getLogger(__name__)


class Ephemeris(BoundedPropagator):
    """Bounded propagator interpolating a time-ordered list of states.

    Position and velocity are Hermite-interpolated on `interpolation_points` neighbouring samples, so the result
    is consistent with the derivative information of the samples. Mass and the additional states carried by the
    samples are interpolated with plain polynomials on the same samples; the latter are managed by the
    ephemeris. Without an attitude provider, the attitude of the closest sample is reused.
    """

    def __init__(
        self,
        states: Sequence[SpacecraftState],
        interpolation_points: int = 4,
        extrapolation_threshold: float = 0.0,
        attitude_provider: AttitudeProvider | None = None,
    ) -> None:
        super().__init__(attitude_provider)
        if interpolation_points < 2 or len(states) < interpolation_points:
            logger.error("Not enough states (%d) for %d interpolation points", len(states), interpolation_points)
            msg = f"at least {max(interpolation_points, 2)} states are required, got {len(states)}"
            raise ValueError(msg)
        states = sorted(states, key=lambda s: s.date)
        first = states[0]
        if any(later.date == earlier.date for earlier, later in zip(states, states[1:], strict=False)):
            msg = "ephemeris states must have distinct dates"
            raise ValueError(msg)
        if any(s.frame != first.frame or s.mu != first.mu for s in states):
            msg = "ephemeris states must share the same frame and gravitational parameter"
            raise ValueError(msg)
        names = set(first.additional_states)
        if any(set(s.additional_states) != names for s in states):
            msg = "ephemeris states must carry the same additional states"
            raise ValueError(msg)

        self._states = tuple(states)
        self._interpolation_points = interpolation_points
        self._extrapolation_threshold = extrapolation_threshold
        self._use_sample_attitudes = attitude_provider is None
        self._orbit_type = orbit_type_of(first.orbit)
        self._additional_names = tuple(sorted(names))

        self._times = np.array([seconds_between(s.date, first.date) for s in states])
        cartesian = [to_cartesian(s.orbit) for s in states]
        self._positions = np.array([c.position for c in cartesian])
        self._velocities = np.array([c.velocity for c in cartesian])
        self._masses = np.array([s.mass for s in states])
        self._additional = {name: np.array([s.additional_states[name] for s in states]) for name in names}

    @property
    def states(self) -> tuple[SpacecraftState, ...]:
        return self._states

    @property
    @override
    def min_date(self) -> np.datetime64:
        return self._states[0].date

    @property
    @override
    def max_date(self) -> np.datetime64:
        return self._states[-1].date

    @property
    @override
    def initial_state(self) -> SpacecraftState:
        return self.state_at(self.min_date)

    @override
    def reset_initial_state(self, state: SpacecraftState) -> None:
        msg = "an ephemeris cannot be reset"
        raise NonResettableStateError(msg)

    @override
    def reset_intermediate_state(self, state: SpacecraftState, forward: bool) -> None:  # noqa: FBT001
        msg = "an ephemeris cannot be reset"
        raise NonResettableStateError(msg)

    @property
    @override
    def managed_additional_states(self) -> tuple[str, ...]:
        return (*self._additional_names, *super().managed_additional_states)

    @override
    def _compute_state(self, date: np.datetime64) -> SpacecraftState:
        lower = shift_date(self.min_date, -self._extrapolation_threshold)
        upper = shift_date(self.max_date, self._extrapolation_threshold)
        if date < lower or date > upper:
            logger.error("Date %s outside of ephemeris range [%s, %s]", date, self.min_date, self.max_date)
            raise OutOfRangeDateError(date, self.min_date, self.max_date)

        t = seconds_between(date, self.min_date)
        n = self._interpolation_points
        center = int(np.searchsorted(self._times, t))
        start = min(max(center - n // 2, 0), len(self._times) - n)
        window = slice(start, start + n)

        # Work in units of the window span to keep the divided differences well scaled.
        span = float(self._times[window][-1] - self._times[window][0])
        x = (self._times[window] - t) / span
        values = np.empty((2 * n, 3))
        values[0::2] = self._positions[window]
        values[1::2] = self._velocities[window] * span
        hermite = KroghInterpolator(np.repeat(x, 2), values)
        position = hermite(0.0)
        velocity = hermite.derivative(0.0) / span

        mass = float(KroghInterpolator(x, self._masses[window])(0.0))
        additional = {name: KroghInterpolator(x, samples[window])(0.0) for name, samples in self._additional.items()}

        first = self._states[0]
        orbit = convert_orbit(
            CartesianOrbit(position=position, velocity=velocity, date=date, mu=first.mu, frame=first.frame),
            self._orbit_type,
        )
        if self._use_sample_attitudes:
            closest = self._states[start + int(np.argmin(np.abs(x)))]
            assert closest.attitude is not None
            attitude = replace(closest.attitude, date=date)
        else:
            attitude = self.attitude_provider.get_attitude(orbit)
        return SpacecraftState(orbit=orbit, attitude=attitude, mass=mass, additional_states=additional)


class EphemerisGenerator:
    """Records the states visited by a propagator at a fixed step and builds an `Ephemeris` from them.

    Successive propagations must keep the same direction and must not start before (after, when propagating
    backward) the last recorded date; otherwise `PropagationOrderError` is raised before anything is recorded.
    """

    def __init__(self, step: float) -> None:
        if step <= 0.0:
            msg = f"ephemeris generation step must be positive, got {step}"
            raise ValueError(msg)
        self.step = step
        self._states: list[SpacecraftState] = []
        self._forward: bool | None = None

    def begin(self, state: SpacecraftState, *, forward: bool) -> None:
        if self._states:
            last = self._states[-1].date
            if self._forward is not None and forward != self._forward:
                logger.error("Propagation direction changed during ephemeris generation")
                msg = "ephemeris generation requires all propagations to go in the same direction"
                raise PropagationOrderError(msg)
            if (forward and state.date < last) or (not forward and state.date > last):
                logger.error("Propagation starts at %s, before the last generated state at %s", state.date, last)
                msg = f"propagation starts at {state.date}, past the last generated state at {last}"
                raise PropagationOrderError(msg)
        self._forward = forward

    def record(self, state: SpacecraftState) -> None:
        if self._states and state.date == self._states[-1].date:
            return
        self._states.append(state)

    def end(self, state: SpacecraftState) -> None:
        logger.debug("Ephemeris generation reached %s with %d states", state.date, len(self._states))

    @property
    def generated_states(self) -> tuple[SpacecraftState, ...]:
        return tuple(self._states)

    def get_generated_ephemeris(self, interpolation_points: int = 4) -> Ephemeris:
        return Ephemeris(self._states, interpolation_points=interpolation_points)
