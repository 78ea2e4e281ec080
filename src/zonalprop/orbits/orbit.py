from __future__ import annotations

__all__ = [
    "DEFAULT_FRAME",
    "CartesianOrbit",
    "CircularOrbit",
    "EquinoctialOrbit",
    "KeplerianOrbit",
    "Orbit",
    "OrbitType",
    "PVCoordinates",
    "convert_orbit",
    "get_pv",
    "keplerian_mean_motion",
    "keplerian_period",
    "orbit_type_of",
    "shift_orbit",
    "to_cartesian",
    "to_circular",
    "to_equinoctial",
    "to_keplerian",
]

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

import numpy as np

from zonalprop.errors import HyperbolicOrbitNotHandledError, InvalidOrbitError
from zonalprop.utils.time import as_date, shift_date

from .anomaly import PositionAngleType, convert_anomaly
from .elements import (
    cartesian_to_keplerian,
    circular_to_keplerian,
    equinoctial_to_keplerian,
    keplerian_to_cartesian,
    keplerian_to_circular,
    keplerian_to_equinoctial,
)

if TYPE_CHECKING:
    import numpy.typing as npt


logger = logging.getLogger(__name__)

# Frames are plain labels; transforming between them is left to the caller.
DEFAULT_FRAME = "eme2000"


@dataclass(frozen=True, kw_only=True, slots=True)
class PVCoordinates:
    position: npt.NDArray[np.floating]
    velocity: npt.NDArray[np.floating]

    def __post_init__(self) -> None:
        assert self.position.shape[-1] == 3, self.position.shape
        assert self.velocity.shape[-1] == 3, self.velocity.shape
        assert self.position.shape[:-1] == self.velocity.shape[:-1], (
            self.position.shape,
            self.velocity.shape,
        )

    def __getitem__(self, item: int | slice) -> PVCoordinates:
        return PVCoordinates(
            position=self.position[item],
            velocity=self.velocity[item],
        )

    @property
    def momentum(self) -> npt.NDArray[np.floating]:
        return np.cross(self.position, self.velocity, axis=-1)


@dataclass(frozen=True, kw_only=True, slots=True)
class CartesianOrbit:
    position: npt.NDArray[np.floating]
    velocity: npt.NDArray[np.floating]
    date: np.datetime64
    mu: float
    frame: str = DEFAULT_FRAME

    def __post_init__(self) -> None:
        object.__setattr__(self, "position", np.array(self.position, dtype=np.float64))
        object.__setattr__(self, "velocity", np.array(self.velocity, dtype=np.float64))
        object.__setattr__(self, "date", as_date(self.date))
        assert self.position.shape == (3,), self.position.shape
        assert self.velocity.shape == (3,), self.velocity.shape

    @property
    def pv(self) -> PVCoordinates:
        return PVCoordinates(position=self.position, velocity=self.velocity)

    @property
    def a(self) -> float:
        r = float(np.linalg.norm(self.position))
        v2 = float(self.velocity @ self.velocity)
        return r / (2.0 - r * v2 / self.mu)

    @property
    def e(self) -> float:
        return to_keplerian(self).e

    @property
    def i(self) -> float:
        return to_keplerian(self).i


@dataclass(frozen=True, kw_only=True, slots=True)
class KeplerianOrbit:
    """Classical Keplerian elements.

    `pa` is the argument of perigee and `raan` the right ascension of the ascending node. The anomaly is stored
    as given, together with its kind.
    """

    a: float
    e: float
    i: float
    pa: float
    raan: float
    anomaly: float
    angle_type: PositionAngleType = PositionAngleType.TRUE
    date: np.datetime64
    mu: float
    frame: str = DEFAULT_FRAME

    def __post_init__(self) -> None:
        for name in ("a", "e", "i", "pa", "raan", "anomaly"):
            object.__setattr__(self, name, float(getattr(self, name)))
        object.__setattr__(self, "date", as_date(self.date))
        if self.e < 0.0 or self.a * (1.0 - self.e) <= 0.0:
            logger.error("Invalid Keplerian elements: a = %s, e = %s", self.a, self.e)
            msg = (
                "orbit should be either elliptic with a > 0 and e < 1 or hyperbolic with a < 0 and e > 1, "
                f"got a = {self.a} and e = {self.e}"
            )
            raise InvalidOrbitError(msg)
        if (
            not self.is_elliptical
            and self.angle_type is PositionAngleType.TRUE
            and 1.0 + self.e * math.cos(self.anomaly) <= 0.0
        ):
            msg = f"true anomaly {self.anomaly} out of hyperbolic range (e = {self.e})"
            raise InvalidOrbitError(msg)

    @property
    def is_elliptical(self) -> bool:
        return self.a > 0.0

    @property
    def p(self) -> float:
        return self.a * (1.0 - self.e * self.e)

    @property
    def true_anomaly(self) -> float:
        return float(convert_anomaly(self.anomaly, self.e, self.angle_type, PositionAngleType.TRUE))

    @property
    def eccentric_anomaly(self) -> float:
        return float(convert_anomaly(self.anomaly, self.e, self.angle_type, PositionAngleType.ECCENTRIC))

    @property
    def mean_anomaly(self) -> float:
        return float(convert_anomaly(self.anomaly, self.e, self.angle_type, PositionAngleType.MEAN))

    def get_anomaly(self, angle_type: PositionAngleType) -> float:
        return float(convert_anomaly(self.anomaly, self.e, self.angle_type, angle_type))


def _check_elliptic(a: float, ex: float, ey: float, orbit_kind: str) -> None:
    if a <= 0.0 or math.hypot(ex, ey) >= 1.0:
        logger.error("Hyperbolic orbit passed to %s elements: a = %s", orbit_kind, a)
        msg = f"hyperbolic orbits cannot be handled as {orbit_kind} orbits (a = {a}, e = {math.hypot(ex, ey)})"
        raise HyperbolicOrbitNotHandledError(msg)


@dataclass(frozen=True, kw_only=True, slots=True)
class CircularOrbit:
    """Circular elements, suited to near-circular orbits.

    ex = e cos(pa), ey = e sin(pa) and `alpha` is the argument of latitude pa + anomaly, of kind `angle_type`.
    """

    a: float
    ex: float
    ey: float
    i: float
    raan: float
    alpha: float
    angle_type: PositionAngleType = PositionAngleType.TRUE
    date: np.datetime64
    mu: float
    frame: str = DEFAULT_FRAME

    def __post_init__(self) -> None:
        for name in ("a", "ex", "ey", "i", "raan", "alpha"):
            object.__setattr__(self, name, float(getattr(self, name)))
        object.__setattr__(self, "date", as_date(self.date))
        _check_elliptic(self.a, self.ex, self.ey, "circular")

    @property
    def e(self) -> float:
        return math.hypot(self.ex, self.ey)

    def get_alpha(self, angle_type: PositionAngleType) -> float:
        pa = math.atan2(self.ey, self.ex)
        return pa + float(convert_anomaly(self.alpha - pa, self.e, self.angle_type, angle_type))

    @property
    def alpha_v(self) -> float:
        return self.get_alpha(PositionAngleType.TRUE)

    @property
    def alpha_e(self) -> float:
        return self.get_alpha(PositionAngleType.ECCENTRIC)

    @property
    def alpha_m(self) -> float:
        return self.get_alpha(PositionAngleType.MEAN)


@dataclass(frozen=True, kw_only=True, slots=True)
class EquinoctialOrbit:
    """Equinoctial elements, non-singular for circular and equatorial prograde orbits.

    ex, ey give the eccentricity vector from the node line origin, hx, hy the inclination vector tan(i/2) and
    `lon` the longitude argument pa + raan + anomaly, of kind `angle_type`.
    """

    a: float
    ex: float
    ey: float
    hx: float
    hy: float
    lon: float
    angle_type: PositionAngleType = PositionAngleType.TRUE
    date: np.datetime64
    mu: float
    frame: str = DEFAULT_FRAME

    def __post_init__(self) -> None:
        for name in ("a", "ex", "ey", "hx", "hy", "lon"):
            object.__setattr__(self, name, float(getattr(self, name)))
        object.__setattr__(self, "date", as_date(self.date))
        _check_elliptic(self.a, self.ex, self.ey, "equinoctial")

    @property
    def e(self) -> float:
        return math.hypot(self.ex, self.ey)

    @property
    def i(self) -> float:
        return 2.0 * math.atan(math.hypot(self.hx, self.hy))

    def get_lon(self, angle_type: PositionAngleType) -> float:
        perigee_longitude = math.atan2(self.ey, self.ex)
        return perigee_longitude + float(
            convert_anomaly(self.lon - perigee_longitude, self.e, self.angle_type, angle_type),
        )

    @property
    def lv(self) -> float:
        return self.get_lon(PositionAngleType.TRUE)

    @property
    def le(self) -> float:
        return self.get_lon(PositionAngleType.ECCENTRIC)

    @property
    def lm(self) -> float:
        return self.get_lon(PositionAngleType.MEAN)


type Orbit = CartesianOrbit | KeplerianOrbit | CircularOrbit | EquinoctialOrbit


class OrbitType(Enum):
    CARTESIAN = "cartesian"
    KEPLERIAN = "keplerian"
    CIRCULAR = "circular"
    EQUINOCTIAL = "equinoctial"

    def convert(self, orbit: Orbit) -> Orbit:
        return convert_orbit(orbit, self)


def orbit_type_of(orbit: Orbit) -> OrbitType:
    match orbit:
        case CartesianOrbit():
            return OrbitType.CARTESIAN
        case KeplerianOrbit():
            return OrbitType.KEPLERIAN
        case CircularOrbit():
            return OrbitType.CIRCULAR
        case EquinoctialOrbit():
            return OrbitType.EQUINOCTIAL


def to_keplerian(orbit: Orbit) -> KeplerianOrbit:
    match orbit:
        case KeplerianOrbit():
            return orbit
        case CartesianOrbit():
            elements = cartesian_to_keplerian(orbit.position, orbit.velocity, orbit.mu)
            angle_type = PositionAngleType.TRUE
        case CircularOrbit():
            elements = circular_to_keplerian(orbit.a, orbit.ex, orbit.ey, orbit.i, orbit.raan, orbit.alpha)
            angle_type = orbit.angle_type
        case EquinoctialOrbit():
            elements = equinoctial_to_keplerian(orbit.a, orbit.ex, orbit.ey, orbit.hx, orbit.hy, orbit.lon)
            angle_type = orbit.angle_type
    a, e, i, pa, raan, anomaly = elements
    return KeplerianOrbit(
        a=a,
        e=e,
        i=i,
        pa=pa,
        raan=raan,
        anomaly=anomaly,
        angle_type=angle_type,
        date=orbit.date,
        mu=orbit.mu,
        frame=orbit.frame,
    )


def to_cartesian(orbit: Orbit) -> CartesianOrbit:
    if isinstance(orbit, CartesianOrbit):
        return orbit
    kep = to_keplerian(orbit)
    position, velocity = keplerian_to_cartesian(kep.a, kep.e, kep.i, kep.pa, kep.raan, kep.true_anomaly, kep.mu)
    return CartesianOrbit(position=position, velocity=velocity, date=orbit.date, mu=orbit.mu, frame=orbit.frame)


def to_circular(orbit: Orbit) -> CircularOrbit:
    if isinstance(orbit, CircularOrbit):
        return orbit
    kep = to_keplerian(orbit)
    a, ex, ey, i, raan, alpha = keplerian_to_circular(kep.a, kep.e, kep.i, kep.pa, kep.raan, kep.anomaly)
    return CircularOrbit(
        a=a,
        ex=ex,
        ey=ey,
        i=i,
        raan=raan,
        alpha=alpha,
        angle_type=kep.angle_type,
        date=orbit.date,
        mu=orbit.mu,
        frame=orbit.frame,
    )


def to_equinoctial(orbit: Orbit) -> EquinoctialOrbit:
    if isinstance(orbit, EquinoctialOrbit):
        return orbit
    kep = to_keplerian(orbit)
    a, ex, ey, hx, hy, lon = keplerian_to_equinoctial(kep.a, kep.e, kep.i, kep.pa, kep.raan, kep.anomaly)
    return EquinoctialOrbit(
        a=a,
        ex=ex,
        ey=ey,
        hx=hx,
        hy=hy,
        lon=lon,
        angle_type=kep.angle_type,
        date=orbit.date,
        mu=orbit.mu,
        frame=orbit.frame,
    )


def convert_orbit(orbit: Orbit, orbit_type: OrbitType) -> Orbit:
    match orbit_type:
        case OrbitType.CARTESIAN:
            return to_cartesian(orbit)
        case OrbitType.KEPLERIAN:
            return to_keplerian(orbit)
        case OrbitType.CIRCULAR:
            return to_circular(orbit)
        case OrbitType.EQUINOCTIAL:
            return to_equinoctial(orbit)


def get_pv(orbit: Orbit) -> PVCoordinates:
    return to_cartesian(orbit).pv


def keplerian_mean_motion(orbit: Orbit) -> float:
    a = orbit.a
    return math.sqrt(orbit.mu / abs(a * a * a))


def keplerian_period(orbit: Orbit) -> float:
    return 2.0 * math.pi / keplerian_mean_motion(orbit)


def shift_orbit(orbit: Orbit, dt: float) -> Orbit:
    """Shift an orbit by `dt` seconds along the unperturbed Keplerian motion.

    The result has the same element type (and anomaly kind) as the input.
    """
    kep = to_keplerian(orbit)
    mean_anomaly = kep.mean_anomaly + keplerian_mean_motion(kep) * dt
    shifted = KeplerianOrbit(
        a=kep.a,
        e=kep.e,
        i=kep.i,
        pa=kep.pa,
        raan=kep.raan,
        anomaly=convert_anomaly(mean_anomaly, kep.e, PositionAngleType.MEAN, kep.angle_type),
        angle_type=kep.angle_type,
        date=shift_date(kep.date, dt),
        mu=kep.mu,
        frame=kep.frame,
    )
    return convert_orbit(shifted, orbit_type_of(orbit))
