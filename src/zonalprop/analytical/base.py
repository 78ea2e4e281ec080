from __future__ import annotations

__all__ = [
    "AbstractAnalyticalPropagator",
    "AnalyticalModel",
]

import logging
from abc import abstractmethod
from dataclasses import replace
from typing import TYPE_CHECKING, Protocol, override

import numpy as np

from zonalprop.orbits import PVCoordinates
from zonalprop.propagation import PropagationType, Propagator, SpacecraftState
from zonalprop.utils.time import as_date
from zonalprop.utils.time_span import TimeSpanMap

if TYPE_CHECKING:
    from collections.abc import Sequence

    import numpy.typing as npt

    from zonalprop.orbits import Orbit
    from zonalprop.propagation import AttitudeProvider

logger = logging.getLogger(__name__)


class AnalyticalModel(Protocol):
    """Closed-form trajectory valid around the date it was built at."""

    @property
    def mass(self) -> float: ...

    def orbit_at(self, date: np.datetime64) -> Orbit: ...

    def pv_at(self, dates: npt.NDArray[np.datetime64]) -> PVCoordinates: ...


class AbstractAnalyticalPropagator[M: AnalyticalModel](Propagator):
    """Propagator evaluating closed-form models.

    The models are kept in a time-span map: resetting the state in the middle of a propagation (for example from
    an event handler) installs a new model valid after (or before, when propagating backward) the reset date,
    and leaves the rest of the trajectory untouched.
    """

    def __init__(self, attitude_provider: AttitudeProvider | None = None) -> None:
        super().__init__(attitude_provider)
        self._models: TimeSpanMap[M]
        self._initial_state: SpacecraftState

    @abstractmethod
    def _build_model(self, state: SpacecraftState, state_type: PropagationType) -> M:
        """Build the model matching `state`, whose orbit holds elements of kind `state_type`."""

    @property
    @override
    def initial_state(self) -> SpacecraftState:
        return self._initial_state

    @override
    def reset_initial_state(
        self,
        state: SpacecraftState,
        state_type: PropagationType = PropagationType.OSCULATING,
    ) -> None:
        model = self._build_model(state, state_type)
        self._models = TimeSpanMap(model)
        if state_type is PropagationType.MEAN:
            orbit = model.orbit_at(state.date)
            state = replace(state, orbit=orbit, attitude=self.attitude_provider.get_attitude(orbit))
        self._initial_state = state
        self._start_date = None

    @override
    def reset_intermediate_state(
        self,
        state: SpacecraftState,
        forward: bool,  # noqa: FBT001
        state_type: PropagationType = PropagationType.OSCULATING,
    ) -> None:
        model = self._build_model(state, state_type)
        if forward:
            self._models.add_valid_after(model, state.date)
        else:
            self._models.add_valid_before(model, state.date)
        logger.debug("Installed a new %s model at %s", type(self).__name__, state.date)

    def propagate_orbit(self, date: np.datetime64) -> Orbit:
        return self._models.get(date).orbit_at(date)

    def get_mass(self, date: np.datetime64) -> float:
        return self._models.get(date).mass

    @override
    def _compute_state(self, date: np.datetime64) -> SpacecraftState:
        orbit = self.propagate_orbit(date)
        return SpacecraftState(
            orbit=orbit,
            attitude=self.attitude_provider.get_attitude(orbit),
            mass=self.get_mass(date),
        )

    @override
    def propagate_pv(self, dates: npt.NDArray[np.datetime64] | Sequence[np.datetime64]) -> PVCoordinates:
        """Evaluate the models on whole date grids at once, one call per model in use."""
        dates = np.array([as_date(date) for date in dates], dtype="datetime64[ns]")
        position = np.empty((dates.size, 3))
        velocity = np.empty((dates.size, 3))
        models = [self._models.get(date) for date in dates]
        for model in {id(model): model for model in models}.values():
            mask = np.array([m is model for m in models], dtype=bool)
            pv = model.pv_at(dates[mask])
            position[mask] = pv.position
            velocity[mask] = pv.velocity
        return PVCoordinates(position=position, velocity=velocity)
