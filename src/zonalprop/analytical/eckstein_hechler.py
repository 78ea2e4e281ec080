"""Eckstein-Hechler analytical propagator.

The model handles near-circular orbits perturbed by the zonal harmonics C20 to C60, working on circular elements
(a, ex, ey, i, raan, alpha) with a mean argument of latitude. Secular drifts are applied to mean elements and
short-period terms are added on top to get the osculating orbit. Orbits with e above 0.1, near-equatorial orbits
and orbits close to the critical inclination are rejected; accuracy already degrades above e = 0.005.
"""

from __future__ import annotations

__all__ = [
    "EcksteinHechlerModel",
    "EcksteinHechlerPropagator",
]

import logging
import math
from typing import TYPE_CHECKING, Self, override

import numpy as np

from zonalprop.orbits import CircularOrbit, PositionAngleType, PVCoordinates, normalize_angle, to_circular
from zonalprop.orbits.anomaly import mean_to_true
from zonalprop.orbits.elements import circular_to_keplerian, keplerian_to_cartesian
from zonalprop.propagation import DEFAULT_MASS, PropagationType, SpacecraftState
from zonalprop.utils.time import seconds_between

from .base import AbstractAnalyticalPropagator
from .mean_elements import (
    check_brillouin_sphere,
    check_eccentricity,
    check_inclination,
    compute_mean_elements,
    element_thresholds,
)

if TYPE_CHECKING:
    import numpy.typing as npt

    from zonalprop.gravity import ZonalGravityField, ZonalHarmonicsProvider
    from zonalprop.orbits import Orbit
    from zonalprop.propagation import AttitudeProvider

    type FloatLike = float | npt.NDArray[np.floating]

logger = logging.getLogger(__name__)

MODEL_NAME = "Eckstein-Hechler"
MAX_ECCENTRICITY = 0.1
ACCURATE_ECCENTRICITY = 0.005
DEFAULT_EPSILON = 1.0e-11
DEFAULT_MAX_ITERATIONS = 100

_THRESHOLD_KINDS = ("a", "e", "e", "angle", "angle", "angle")
_ANGLES = (False, False, False, True, True, True)


class EcksteinHechlerModel:
    """Eckstein-Hechler model built on one set of mean circular elements.

    `mean` holds (a, ex, ey, i, raan, alpha_m) at `date`. Everything that does not depend on the time offset is
    computed once here.
    """

    def __init__(
        self,
        mean: npt.ArrayLike,
        date: np.datetime64,
        field: ZonalGravityField,
        mass: float,
        frame: str,
    ) -> None:
        self.mean = np.array(mean, dtype=np.float64)
        self.date = date
        self.field = field
        self.mass = mass
        self.frame = frame

        a, _, _, i, _, _ = self.mean
        self._mean_motion = math.sqrt(field.mu / a) / a

        q = field.reference_radius / a
        g2 = field.cn0(2) * q**2
        g3 = field.cn0(3) * q**3
        g4 = field.cn0(4) * q**4
        g5 = field.cn0(5) * q**5
        g6 = field.cn0(6) * q**6
        self._g2, self._g3, self._g5 = g2, g3, g5

        cos_i1 = math.cos(i)
        sin_i1 = math.sin(i)
        sin_i2 = sin_i1 * sin_i1
        sin_i4 = sin_i2 * sin_i2
        sin_i6 = sin_i2 * sin_i4
        self._cos_i1, self._sin_i1 = cos_i1, sin_i1
        self._sin_i2, self._sin_i4, self._sin_i6 = sin_i2, sin_i4, sin_i6

        # secular drift of the eccentricity vector
        rdpom = -0.75 * g2 * (4.0 - 5.0 * sin_i2)
        rdpomp = 7.5 * g4 * (1.0 - 31.0 / 8.0 * sin_i2 + 49.0 / 16.0 * sin_i4) - 13.125 * g6 * (
            1.0 - 8.0 * sin_i2 + 129.0 / 8.0 * sin_i4 - 297.0 / 32.0 * sin_i6
        )
        self._rdpom = rdpom
        self._perigee_rate = rdpom + rdpomp
        q = 3.0 / (32.0 * rdpom)
        self._eps1 = q * g4 * sin_i2 * (30.0 - 35.0 * sin_i2) - 175.0 * q * g6 * sin_i2 * (
            1.0 - 3.0 * sin_i2 + 2.0625 * sin_i4
        )
        q = 3.0 * sin_i1 / (8.0 * rdpom)
        self._eps2 = q * g3 * (4.0 - 5.0 * sin_i2) - q * g5 * (10.0 - 35.0 * sin_i2 + 26.25 * sin_i4)

        # secular drift of the node
        self._node_rate = cos_i1 * (
            1.50 * g2
            - 2.25 * g2 * g2 * (2.5 - 19.0 / 6.0 * sin_i2)
            + 0.9375 * g4 * (7.0 * sin_i2 - 4.0)
            + 3.28125 * g6 * (2.0 - 9.0 * sin_i2 + 8.25 * sin_i4)
        )

        # secular drift of the argument of latitude
        self._rdl = 1.0 - 1.50 * g2 * (3.0 - 4.0 * sin_i2)
        self._latitude_rate = (
            self._rdl
            + 2.25 * g2 * g2 * (9.0 - 263.0 / 12.0 * sin_i2 + 341.0 / 24.0 * sin_i4)
            + 15.0 / 16.0 * g4 * (8.0 - 31.0 * sin_i2 + 24.5 * sin_i4)
            + 105.0 / 32.0 * g6 * (-10.0 / 3.0 + 25.0 * sin_i2 - 48.75 * sin_i4 + 27.5 * sin_i6)
        )
        self._g4, self._g6 = g4, g6

    @property
    def mean_orbit(self) -> CircularOrbit:
        a, ex, ey, i, raan, alpha = self.mean
        return CircularOrbit(
            a=a,
            ex=ex,
            ey=ey,
            i=i,
            raan=raan,
            alpha=alpha,
            angle_type=PositionAngleType.MEAN,
            date=self.date,
            mu=self.field.mu,
            frame=self.frame,
        )

    def propagate_parameters(self, dt: FloatLike) -> tuple[FloatLike, ...]:
        """Return osculating (a, ex, ey, i, raan, alpha_m) `dt` seconds after the model date."""
        a0, ex0, ey0, i0, raan0, alpha0 = self.mean
        g2, g3, g4, g5, g6 = self._g2, self._g3, self._g4, self._g5, self._g6
        cos_i1, sin_i1 = self._cos_i1, self._sin_i1
        sin_i2, sin_i4, sin_i6 = self._sin_i2, self._sin_i4, self._sin_i6
        rdpom, rdl, eps1, eps2 = self._rdpom, self._rdl, self._eps1, self._eps2

        xnot = np.asarray(dt, dtype=np.float64) * self._mean_motion

        # secular effects
        x = self._perigee_rate * xnot
        cx = np.cos(x)
        sx = np.sin(x)
        exm = ex0 * cx - (1.0 - eps1) * ey0 * sx + eps2 * sx
        eym = (1.0 + eps1) * ex0 * sx + (ey0 - eps2) * cx + eps2
        xim = i0
        omm = normalize_angle(raan0 + self._node_rate * xnot, np.pi)
        xlm = normalize_angle(alpha0 + self._latitude_rate * xnot, np.pi)

        # periodic terms
        cl1 = np.cos(xlm)
        sl1 = np.sin(xlm)
        cl2 = cl1 * cl1 - sl1 * sl1
        sl2 = cl1 * sl1 + sl1 * cl1
        cl3 = cl2 * cl1 - sl2 * sl1
        sl3 = cl2 * sl1 + sl2 * cl1
        cl4 = cl3 * cl1 - sl3 * sl1
        sl4 = cl3 * sl1 + sl3 * cl1
        cl5 = cl4 * cl1 - sl4 * sl1
        sl5 = cl4 * sl1 + sl4 * cl1
        cl6 = cl5 * cl1 - sl5 * sl1

        qq = -1.5 * g2 / rdl
        qh = 0.375 * (eym - eps2) / rdpom
        ql = 0.375 * exm / (sin_i1 * rdpom)

        # semi-major axis
        rda = qq * (
            (2.0 - 3.5 * sin_i2) * exm * cl1
            + (2.0 - 2.5 * sin_i2) * eym * sl1
            + sin_i2 * cl2
            + 3.5 * sin_i2 * (exm * cl3 + eym * sl3)
        )
        rda += 0.75 * g2 * g2 * sin_i2 * (7.0 * (2.0 - 3.0 * sin_i2) * cl2 + sin_i2 * cl4)
        rda += -0.75 * g3 * sin_i1 * ((4.0 - 5.0 * sin_i2) * sl1 + 5.0 / 3.0 * sin_i2 * sl3)
        rda += 0.25 * g4 * sin_i2 * ((15.0 - 17.5 * sin_i2) * cl2 + 4.375 * sin_i2 * cl4)
        rda += (
            3.75
            * g5
            * sin_i1
            * (
                (2.625 * sin_i4 - 3.5 * sin_i2 + 1.0) * sl1
                + 7.0 / 6.0 * sin_i2 * (1.0 - 1.125 * sin_i2) * sl3
                + 21.0 / 80.0 * sin_i4 * sl5
            )
        )
        rda += (
            105.0
            / 16.0
            * g6
            * sin_i2
            * (
                (3.0 * sin_i2 - 1.0 - 33.0 / 16.0 * sin_i4) * cl2
                + 0.75 * (1.1 * sin_i4 - sin_i2) * cl4
                - 11.0 / 80.0 * sin_i4 * cl6
            )
        )

        # eccentricity vector
        rdex = qq * (
            (1.0 - 1.25 * sin_i2) * cl1
            + 0.5 * (3.0 - 5.0 * sin_i2) * exm * cl2
            + (2.0 - 1.5 * sin_i2) * eym * sl2
            + 7.0 / 12.0 * sin_i2 * cl3
            + 17.0 / 8.0 * sin_i2 * (exm * cl4 + eym * sl4)
        )
        rdey = qq * (
            (1.0 - 1.75 * sin_i2) * sl1
            + (1.0 - 3.0 * sin_i2) * exm * sl2
            + (2.0 * sin_i2 - 1.5) * eym * cl2
            + 7.0 / 12.0 * sin_i2 * sl3
            + 17.0 / 8.0 * sin_i2 * (exm * sl4 - eym * cl4)
        )

        # ascending node
        rdom = -qq * cos_i1 * (3.5 * exm * sl1 - 2.5 * eym * cl1 - 0.5 * sl2 + 7.0 / 6.0 * (eym * cl3 - exm * sl3))
        rdom += ql * g3 * cos_i1 * (4.0 - 15.0 * sin_i2)
        rdom -= ql * 2.5 * g5 * cos_i1 * (4.0 - 42.0 * sin_i2 + 52.5 * sin_i4)

        # inclination
        rdxi = 0.5 * qq * sin_i1 * cos_i1 * (eym * sl1 - exm * cl1 + cl2 + 7.0 / 3.0 * (exm * cl3 + eym * sl3))
        rdxi -= qh * g3 * cos_i1 * (4.0 - 5.0 * sin_i2)
        rdxi += qh * 2.5 * g5 * cos_i1 * (4.0 - 14.0 * sin_i2 + 10.5 * sin_i4)

        # argument of latitude
        rdxl = qq * (
            (7.0 - 77.0 / 8.0 * sin_i2) * exm * sl1
            + (55.0 / 8.0 * sin_i2 - 7.50) * eym * cl1
            + (1.25 * sin_i2 - 0.5) * sl2
            + (77.0 / 24.0 * sin_i2 - 7.0 / 6.0) * (exm * sl3 - eym * cl3)
        )
        rdxl += ql * g3 * (53.0 * sin_i2 - 4.0 - 57.5 * sin_i4)
        rdxl += ql * 2.5 * g5 * (4.0 - 96.0 * sin_i2 + 269.5 * sin_i4 - 183.75 * sin_i6)

        return (
            a0 * (1.0 + rda),
            exm + rdex,
            eym + rdey,
            xim + rdxi,
            normalize_angle(omm + rdom, np.pi),
            normalize_angle(xlm + rdxl, np.pi),
        )

    def orbit_at(self, date: np.datetime64) -> CircularOrbit:
        a, ex, ey, i, raan, alpha = self.propagate_parameters(seconds_between(date, self.date))
        return CircularOrbit(
            a=a,
            ex=ex,
            ey=ey,
            i=i,
            raan=raan,
            alpha=alpha,
            angle_type=PositionAngleType.MEAN,
            date=date,
            mu=self.field.mu,
            frame=self.frame,
        )

    def pv_at(self, dates: npt.NDArray[np.datetime64]) -> PVCoordinates:
        dt = (dates - self.date) / np.timedelta64(1, "s")
        a, e, i, pa, raan, mean_anomaly = circular_to_keplerian(*self.propagate_parameters(dt))
        position, velocity = keplerian_to_cartesian(a, e, i, pa, raan, mean_to_true(mean_anomaly, e), self.field.mu)
        return PVCoordinates(position=position.reshape(-1, 3), velocity=velocity.reshape(-1, 3))

    @classmethod
    def from_mean_orbit(cls, orbit: Orbit, field: ZonalGravityField, mass: float = DEFAULT_MASS) -> Self:
        circular = to_circular(orbit)
        return cls(
            [circular.a, circular.ex, circular.ey, circular.i, circular.raan, circular.alpha_m],
            circular.date,
            field,
            mass,
            circular.frame,
        )

    @classmethod
    def from_osculating_orbit(
        cls,
        orbit: Orbit,
        field: ZonalGravityField,
        mass: float = DEFAULT_MASS,
        *,
        epsilon: float = DEFAULT_EPSILON,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
    ) -> Self:
        """Fit the mean elements whose osculating counterpart at the orbit date is `orbit`."""
        osculating = to_circular(orbit)
        check_eccentricity(osculating.e, MAX_ECCENTRICITY)
        check_inclination(osculating.i)
        check_brillouin_sphere(osculating.a, osculating.e, field.reference_radius)
        target = np.array(
            [osculating.a, osculating.ex, osculating.ey, osculating.i, osculating.raan, osculating.alpha_m],
        )

        def forward(mean: npt.NDArray[np.floating]) -> npt.NDArray[np.floating]:
            model = cls(mean, osculating.date, field, mass, osculating.frame)
            return np.array(model.propagate_parameters(0.0), dtype=np.float64)

        mean, _ = compute_mean_elements(
            target,
            forward,
            thresholds=element_thresholds(epsilon, osculating.a, osculating.e, _THRESHOLD_KINDS),
            angles=_ANGLES,
            max_iterations=max_iterations,
            model=MODEL_NAME,
        )
        model = cls(mean, osculating.date, field, mass, osculating.frame)
        model.check_domain()
        return model

    def check_domain(self) -> None:
        _, ex, ey, i, _, _ = self.mean
        e = math.hypot(ex, ey)
        check_eccentricity(e, MAX_ECCENTRICITY)
        check_inclination(i)
        if e > ACCURATE_ECCENTRICITY:
            logger.warning("Eckstein-Hechler accuracy degrades for e = %s > %s", e, ACCURATE_ECCENTRICITY)


class EcksteinHechlerPropagator(AbstractAnalyticalPropagator[EcksteinHechlerModel]):
    """Analytical propagator for near-circular orbits under the zonal harmonics C20 to C60.

    Propagated orbits are `CircularOrbit`s with a mean argument of latitude. The initial orbit is read as
    osculating elements unless `initial_type` is `PropagationType.MEAN`. Zonal coefficients of degree above 6
    are ignored.
    """

    def __init__(
        self,
        orbit: Orbit,
        field: ZonalHarmonicsProvider,
        *,
        attitude_provider: AttitudeProvider | None = None,
        mass: float = DEFAULT_MASS,
        initial_type: PropagationType = PropagationType.OSCULATING,
        epsilon: float = DEFAULT_EPSILON,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
    ) -> None:
        super().__init__(attitude_provider)
        self._field = field
        self.epsilon = epsilon
        self.max_iterations = max_iterations
        self.reset_initial_state(
            SpacecraftState(orbit=orbit, attitude=self.attitude_provider.get_attitude(orbit), mass=mass),
            initial_type,
        )

    @property
    def field(self) -> ZonalHarmonicsProvider:
        return self._field

    @property
    def mean_orbit(self) -> CircularOrbit:
        """Mean elements of the initial state."""
        return self._models.get(self.initial_state.date).mean_orbit

    @classmethod
    def compute_mean_orbit(
        cls,
        osculating: Orbit,
        field: ZonalHarmonicsProvider,
        *,
        epsilon: float = DEFAULT_EPSILON,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
    ) -> CircularOrbit:
        """Return the Eckstein-Hechler mean elements of an osculating orbit."""
        return EcksteinHechlerModel.from_osculating_orbit(
            osculating,
            _zonal_field(field, osculating.date),
            epsilon=epsilon,
            max_iterations=max_iterations,
        ).mean_orbit

    @override
    def _build_model(self, state: SpacecraftState, state_type: PropagationType) -> EcksteinHechlerModel:
        field = _zonal_field(self._field, state.date)
        if state_type is PropagationType.MEAN:
            model = EcksteinHechlerModel.from_mean_orbit(state.orbit, field, state.mass)
            model.check_domain()
            return model
        return EcksteinHechlerModel.from_osculating_orbit(
            state.orbit,
            field,
            state.mass,
            epsilon=self.epsilon,
            max_iterations=self.max_iterations,
        )


def _zonal_field(provider: ZonalHarmonicsProvider, date: np.datetime64) -> ZonalGravityField:
    field = provider.on_date(date)
    if field.cn0(2) == 0.0:
        msg = "the zonal field must provide a non-zero C20 coefficient"
        raise ValueError(msg)
    if field.max_degree > 6:
        logger.debug("Zonal coefficients above degree 6 are ignored by the Eckstein-Hechler model")
    return field
