__all__ = [
    "DEFAULT_FRAME",
    "CartesianOrbit",
    "CircularOrbit",
    "EquinoctialOrbit",
    "KeplerianOrbit",
    "LOFType",
    "Orbit",
    "OrbitType",
    "PVCoordinates",
    "PositionAngleType",
    "convert_anomaly",
    "convert_orbit",
    "get_pv",
    "keplerian_mean_motion",
    "keplerian_period",
    "normalize_angle",
    "orbit_type_of",
    "shift_orbit",
    "to_cartesian",
    "to_circular",
    "to_equinoctial",
    "to_keplerian",
]

from .anomaly import PositionAngleType, convert_anomaly, normalize_angle
from .lof import LOFType
from .orbit import (
    DEFAULT_FRAME,
    CartesianOrbit,
    CircularOrbit,
    EquinoctialOrbit,
    KeplerianOrbit,
    Orbit,
    OrbitType,
    PVCoordinates,
    convert_orbit,
    get_pv,
    keplerian_mean_motion,
    keplerian_period,
    orbit_type_of,
    shift_orbit,
    to_cartesian,
    to_circular,
    to_equinoctial,
    to_keplerian,
)
