from __future__ import annotations

__all__ = ["KeplerianPropagator"]

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, override

import numpy as np

from zonalprop.orbits import (
    PVCoordinates,
    keplerian_mean_motion,
    shift_orbit,
    to_keplerian,
)
from zonalprop.orbits.anomaly import mean_to_true
from zonalprop.orbits.elements import keplerian_to_cartesian
from zonalprop.propagation import DEFAULT_MASS, PropagationType, SpacecraftState
from zonalprop.utils.time import seconds_between

from .base import AbstractAnalyticalPropagator

if TYPE_CHECKING:
    import numpy.typing as npt

    from zonalprop.orbits import Orbit
    from zonalprop.propagation import AttitudeProvider

logger = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True, slots=True)
class _KeplerianModel:
    orbit: Orbit
    mass: float

    def orbit_at(self, date: np.datetime64) -> Orbit:
        return shift_orbit(self.orbit, seconds_between(date, self.orbit.date))

    def pv_at(self, dates: npt.NDArray[np.datetime64]) -> PVCoordinates:
        kep = to_keplerian(self.orbit)
        dt = (dates - kep.date) / np.timedelta64(1, "s")
        mean_anomaly = kep.mean_anomaly + keplerian_mean_motion(kep) * dt
        position, velocity = keplerian_to_cartesian(
            kep.a,
            kep.e,
            kep.i,
            kep.pa,
            kep.raan,
            mean_to_true(mean_anomaly, kep.e),
            kep.mu,
        )
        return PVCoordinates(position=position.reshape(-1, 3), velocity=velocity.reshape(-1, 3))


class KeplerianPropagator(AbstractAnalyticalPropagator[_KeplerianModel]):
    """Unperturbed two-body motion.

    The returned orbits have the element type and anomaly kind of the initial orbit.
    """

    def __init__(
        self,
        orbit: Orbit,
        attitude_provider: AttitudeProvider | None = None,
        mass: float = DEFAULT_MASS,
    ) -> None:
        super().__init__(attitude_provider)
        self.reset_initial_state(
            SpacecraftState(orbit=orbit, attitude=self.attitude_provider.get_attitude(orbit), mass=mass),
        )

    @override
    def _build_model(self, state: SpacecraftState, state_type: PropagationType) -> _KeplerianModel:  # noqa: ARG002
        # Mean and osculating elements coincide for two-body motion.
        return _KeplerianModel(orbit=state.orbit, mass=state.mass)
