from __future__ import annotations

__all__ = ["SmallManeuverAnalyticalModel"]

import logging
import math
from typing import TYPE_CHECKING

import numpy as np

from zonalprop.orbits import (
    CartesianOrbit,
    CircularOrbit,
    EquinoctialOrbit,
    KeplerianOrbit,
    OrbitType,
    PositionAngleType,
    convert_orbit,
    keplerian_mean_motion,
    normalize_angle,
    orbit_type_of,
    to_cartesian,
    to_circular,
    to_equinoctial,
    to_keplerian,
)
from zonalprop.utils.constants import G0_STANDARD_GRAVITY
from zonalprop.utils.time import seconds_between

if TYPE_CHECKING:
    import numpy.typing as npt

    from zonalprop.orbits import LOFType, Orbit
    from zonalprop.propagation import SpacecraftState

logger = logging.getLogger(__name__)

# Velocity step of the finite differences giving the element Jacobian.
_VELOCITY_STEP = 0.1  # [m/s]

_ANGLE_ROWS = {
    OrbitType.KEPLERIAN: (False, False, True, True, True, True),
    OrbitType.CIRCULAR: (False, False, False, True, True, True),
    OrbitType.EQUINOCTIAL: (False, False, False, False, False, True),
}


class SmallManeuverAnalyticalModel:
    """First-order effect of a small impulsive maneuver on a reference trajectory.

    The maneuver happens at the date of `state0`. For any later state of the reference, the maneuvered elements
    are approximated by elements + J0 dV, where J0 is the Jacobian of the elements with respect to velocity at
    the maneuver date. The mean anomaly (or argument of latitude, or longitude argument) also gets the drift due
    to the change in semi-major axis. States at or before the maneuver date are returned unchanged.

    `dv` is given in `frame` when it is a local orbital frame, in the inertial frame of the orbit otherwise.
    """

    def __init__(
        self,
        state0: SpacecraftState,
        dv: npt.ArrayLike,
        isp: float,
        frame: LOFType | None = None,
        orbit_type: OrbitType = OrbitType.EQUINOCTIAL,
    ) -> None:
        if orbit_type not in _ANGLE_ROWS:
            msg = f"small maneuvers are modelled on Keplerian, circular or equinoctial elements, not {orbit_type}"
            raise ValueError(msg)
        if isp <= 0.0:
            msg = f"specific impulse must be positive, got {isp}"
            raise ValueError(msg)
        dv = np.array(dv, dtype=np.float64)
        if dv.shape != (3,):
            logger.error("Velocity increment of shape %s, expected (3,)", dv.shape)
            msg = f"velocity increment must hold three components, got shape {dv.shape}"
            raise ValueError(msg)
        if frame is not None:
            dv = frame.rotation_from_inertial(state0.pv).T @ dv

        self._state0 = state0
        self._orbit_type = orbit_type
        self.inertial_dv = dv
        self.isp = isp
        self.mass_ratio = math.exp(-float(np.linalg.norm(dv)) / (isp * G0_STANDARD_GRAVITY))

        self._delta0 = self.jacobian(state0.orbit) @ dv
        # Change in mean motion caused by the change in semi-major axis.
        self._anomaly_drift = -1.5 * keplerian_mean_motion(state0.orbit) / state0.orbit.a * self._delta0[0]
        logger.debug("Small maneuver at %s: inertial dV %s m/s", state0.date, dv)

    @property
    def date(self) -> np.datetime64:
        return self._state0.date

    @property
    def orbit_type(self) -> OrbitType:
        return self._orbit_type

    def jacobian(self, orbit: Orbit) -> npt.NDArray[np.floating]:
        """Return the (6, 3) derivatives of the elements of `orbit` (mean angle) with respect to velocity."""
        cartesian = to_cartesian(orbit)
        angles = np.array(_ANGLE_ROWS[self._orbit_type])
        jacobian = np.empty((6, 3))
        for axis in range(3):
            step = np.zeros(3)
            step[axis] = _VELOCITY_STEP
            plus = self._elements(
                CartesianOrbit(
                    position=cartesian.position,
                    velocity=cartesian.velocity + step,
                    date=cartesian.date,
                    mu=cartesian.mu,
                    frame=cartesian.frame,
                ),
            )
            minus = self._elements(
                CartesianOrbit(
                    position=cartesian.position,
                    velocity=cartesian.velocity - step,
                    date=cartesian.date,
                    mu=cartesian.mu,
                    frame=cartesian.frame,
                ),
            )
            delta = plus - minus
            delta[angles] = normalize_angle(delta[angles], 0.0)
            jacobian[:, axis] = delta / (2.0 * _VELOCITY_STEP)
        return jacobian

    def apply(self, state: SpacecraftState) -> SpacecraftState:
        dt = seconds_between(state.date, self.date)
        if dt <= 0.0:
            return state
        delta = self._delta0.copy()
        delta[5] += self._anomaly_drift * dt
        elements = self._elements(state.orbit) + delta
        orbit = convert_orbit(self._orbit(elements, state.orbit), orbit_type_of(state.orbit))
        return state.with_orbit(orbit).with_mass(state.mass * self.mass_ratio)

    def _elements(self, orbit: Orbit) -> npt.NDArray[np.floating]:
        match self._orbit_type:
            case OrbitType.KEPLERIAN:
                kep = to_keplerian(orbit)
                return np.array([kep.a, kep.e, kep.i, kep.pa, kep.raan, kep.mean_anomaly])
            case OrbitType.CIRCULAR:
                circ = to_circular(orbit)
                return np.array([circ.a, circ.ex, circ.ey, circ.i, circ.raan, circ.alpha_m])
            case _:
                equi = to_equinoctial(orbit)
                return np.array([equi.a, equi.ex, equi.ey, equi.hx, equi.hy, equi.lm])

    def _orbit(self, elements: npt.NDArray[np.floating], reference: Orbit) -> Orbit:
        common = {
            "angle_type": PositionAngleType.MEAN,
            "date": reference.date,
            "mu": reference.mu,
            "frame": reference.frame,
        }
        match self._orbit_type:
            case OrbitType.KEPLERIAN:
                a, e, i, pa, raan, anomaly = elements
                return KeplerianOrbit(a=a, e=e, i=i, pa=pa, raan=raan, anomaly=anomaly, **common)
            case OrbitType.CIRCULAR:
                a, ex, ey, i, raan, alpha = elements
                return CircularOrbit(a=a, ex=ex, ey=ey, i=i, raan=raan, alpha=alpha, **common)
            case _:
                a, ex, ey, hx, hy, lon = elements
                return EquinoctialOrbit(a=a, ex=ex, ey=ey, hx=hx, hy=hy, lon=lon, **common)
