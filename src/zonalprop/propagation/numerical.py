from __future__ import annotations

__all__ = ["NumericalPropagator"]

import bisect
import logging
from typing import TYPE_CHECKING, override

import numpy as np
from scipy.integrate import solve_ivp

from zonalprop.errors import PropagationError
from zonalprop.orbits import CartesianOrbit, convert_orbit, orbit_type_of, to_cartesian
from zonalprop.utils.time import seconds_between
from zonalprop.utils.time_span import TimeSpanMap

from .propagator import Propagator
from .state import SpacecraftState

if TYPE_CHECKING:
    from collections.abc import Sequence

    import numpy.typing as npt
    from scipy.integrate import OdeSolution

    from zonalprop.gravity import ForceModel

    from .state import AttitudeProvider

logger = logging.getLogger(__name__)


class _Branch:
    """Dense solution segments on one side (future or past) of an arc start, chained end to end."""

    def __init__(self, sign: float, y0: npt.NDArray[np.floating]) -> None:
        self.sign = sign
        self.reach = 0.0  # [s], absolute time span covered so far
        self.end_state = y0
        self.ends: list[float] = []
        self.solutions: list[OdeSolution] = []

    def evaluate(self, span: float) -> npt.NDArray[np.floating]:
        index = min(bisect.bisect_left(self.ends, span), len(self.solutions) - 1)
        return self.solutions[index](self.sign * span)


class _Arc:
    """Trajectory integrated from one start state, in both time directions."""

    def __init__(self, state: SpacecraftState) -> None:
        self.state = state
        self.orbit_type = orbit_type_of(state.orbit)
        cartesian = to_cartesian(state.orbit)
        self.y0 = np.concatenate([cartesian.position, cartesian.velocity])
        self.branches = {1.0: _Branch(1.0, self.y0), -1.0: _Branch(-1.0, self.y0)}


class NumericalPropagator(Propagator):
    """Cartesian propagator integrating central attraction plus force models with scipy's DOP853.

    Dense output is kept so that states can be requested at any date; the integration is extended lazily, in
    both time directions, by segments of at least `min_segment` seconds. An intermediate reset starts a new arc
    on its side of the reset date and keeps what was already integrated on the other side.
    """

    def __init__(
        self,
        initial_state: SpacecraftState,
        force_models: Sequence[ForceModel] = (),
        *,
        rtol: float = 1.0e-12,
        atol: float = 1.0e-6,
        min_segment: float = 3600.0,
        attitude_provider: AttitudeProvider | None = None,
    ) -> None:
        super().__init__(attitude_provider)
        self._force_models = tuple(force_models)
        self._rtol = rtol
        self._atol = atol
        self._min_segment = min_segment
        self.reset_initial_state(initial_state)

    @property
    def force_models(self) -> tuple[ForceModel, ...]:
        return self._force_models

    @property
    @override
    def initial_state(self) -> SpacecraftState:
        return self._initial_state

    @override
    def reset_initial_state(self, state: SpacecraftState) -> None:
        self._initial_state = state
        self._arcs = TimeSpanMap(_Arc(state))
        self._start_date = None

    @override
    def reset_intermediate_state(self, state: SpacecraftState, forward: bool) -> None:  # noqa: FBT001
        if forward:
            self._arcs.add_valid_after(_Arc(state), state.date)
        else:
            self._arcs.add_valid_before(_Arc(state), state.date)
        logger.debug("Started a new integration arc at %s", state.date)

    def _derivatives(self, t: float, y: npt.NDArray[np.floating], mu: float) -> npt.NDArray[np.floating]:
        position, velocity = y[:3], y[3:]
        r = np.linalg.norm(position)
        acceleration = -mu / r**3 * position
        for force in self._force_models:
            acceleration = acceleration + force.acceleration(t, position, velocity)
        return np.concatenate([velocity, acceleration])

    def _extend(self, arc: _Arc, sign: float, span: float) -> None:
        branch = arc.branches[sign]
        while branch.reach < span:
            t_end = max(span, branch.reach + self._min_segment)
            result = solve_ivp(
                self._derivatives,
                (sign * branch.reach, sign * t_end),
                branch.end_state,
                method="DOP853",
                rtol=self._rtol,
                atol=self._atol,
                dense_output=True,
                args=(arc.state.mu,),
            )
            if not result.success:
                logger.error("Numerical integration failed: %s", result.message)
                msg = f"numerical integration failed: {result.message}"
                raise PropagationError(msg)
            logger.debug("Integrated from %s s to %s s in %d steps", sign * branch.reach, sign * t_end, result.t.size)
            branch.solutions.append(result.sol)
            branch.ends.append(t_end)
            branch.reach = t_end
            branch.end_state = result.y[:, -1]

    @override
    def _compute_state(self, date: np.datetime64) -> SpacecraftState:
        arc = self._arcs.get(date)
        dt = seconds_between(date, arc.state.date)
        if dt == 0.0:
            y = arc.y0
        else:
            sign = 1.0 if dt > 0.0 else -1.0
            self._extend(arc, sign, abs(dt))
            y = arc.branches[sign].evaluate(abs(dt))
        orbit = convert_orbit(
            CartesianOrbit(
                position=y[:3],
                velocity=y[3:],
                date=date,
                mu=arc.state.mu,
                frame=arc.state.frame,
            ),
            arc.orbit_type,
        )
        return SpacecraftState(
            orbit=orbit,
            attitude=self.attitude_provider.get_attitude(orbit),
            mass=arc.state.mass,
        )
