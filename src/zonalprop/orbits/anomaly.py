"""Conversions between true, eccentric and mean anomalies.

All functions accept scalars or numpy arrays and broadcast over their arguments. Scalar inputs give numpy float
scalars back.
"""

from __future__ import annotations

__all__ = [
    "PositionAngleType",
    "convert_anomaly",
    "elliptic_eccentric_to_mean",
    "elliptic_eccentric_to_true",
    "elliptic_mean_to_eccentric",
    "elliptic_true_to_eccentric",
    "hyperbolic_eccentric_to_mean",
    "hyperbolic_eccentric_to_true",
    "hyperbolic_mean_to_eccentric",
    "hyperbolic_true_to_eccentric",
    "mean_to_true",
    "normalize_angle",
    "true_to_mean",
]

import logging
from enum import Enum
from typing import TYPE_CHECKING, Annotated

import numpy as np
from typing_extensions import Doc

if TYPE_CHECKING:
    import numpy.typing as npt

    type FloatLike = float | npt.NDArray[np.floating]

logger = logging.getLogger(__name__)

MAX_KEPLER_ITERATIONS = 50
KEPLER_TOLERANCE = 1.0e-15


def normalize_angle(
    angle: Annotated[FloatLike, Doc("Angle(s) to normalize [rad].")],
    center: Annotated[FloatLike, Doc("Center of the 2 pi wide output interval [rad].")],
) -> Annotated[FloatLike, Doc("Angle(s) in [center - pi, center + pi).")]:
    return angle - 2.0 * np.pi * np.floor((angle + np.pi - center) / (2.0 * np.pi))


def elliptic_eccentric_to_true(eccentric_anomaly: FloatLike, e: FloatLike) -> FloatLike:
    beta = e / (1.0 + np.sqrt((1.0 - e) * (1.0 + e)))
    return eccentric_anomaly + 2.0 * np.arctan(
        beta * np.sin(eccentric_anomaly) / (1.0 - beta * np.cos(eccentric_anomaly)),
    )


def elliptic_true_to_eccentric(true_anomaly: FloatLike, e: FloatLike) -> FloatLike:
    beta = e / (1.0 + np.sqrt((1.0 - e) * (1.0 + e)))
    return true_anomaly - 2.0 * np.arctan(beta * np.sin(true_anomaly) / (1.0 + beta * np.cos(true_anomaly)))


def elliptic_eccentric_to_mean(eccentric_anomaly: FloatLike, e: FloatLike) -> FloatLike:
    return eccentric_anomaly - e * np.sin(eccentric_anomaly)


def elliptic_mean_to_eccentric(mean_anomaly: FloatLike, e: FloatLike) -> FloatLike:
    """Solve Kepler's equation M = E - e sin(E) for the eccentric anomaly.

    The anomaly is first reduced to [-pi, pi), started with Danby's guess E0 = M + 0.85 e sign(sin M) and then
    refined with Halley iterations, which converge in a handful of steps for any e < 1. The 2 pi multiple removed
    by the reduction is added back at the end so that E and M stay on the same revolution.
    """
    mean_anomaly = np.asarray(mean_anomaly, dtype=np.float64)
    e = np.asarray(e, dtype=np.float64)
    reduced = normalize_angle(mean_anomaly, 0.0)

    eccentric = reduced + 0.85 * e * np.sign(np.sin(reduced))
    for _ in range(MAX_KEPLER_ITERATIONS):
        e_sin = e * np.sin(eccentric)
        f = eccentric - e_sin - reduced
        f_prime = 1.0 - e * np.cos(eccentric)
        newton = -f / f_prime
        delta = -f / (f_prime + 0.5 * newton * e_sin)
        eccentric = eccentric + delta
        if np.all(np.abs(delta) <= KEPLER_TOLERANCE * (1.0 + np.abs(eccentric))):
            break
    else:
        logger.warning("Kepler equation solver stopped after %d iterations", MAX_KEPLER_ITERATIONS)

    return (eccentric + (mean_anomaly - reduced))[()]


def hyperbolic_eccentric_to_true(hyperbolic_anomaly: FloatLike, e: FloatLike) -> FloatLike:
    return 2.0 * np.arctan(np.sqrt((e + 1.0) / (e - 1.0)) * np.tanh(0.5 * hyperbolic_anomaly))


def hyperbolic_true_to_eccentric(true_anomaly: FloatLike, e: FloatLike) -> FloatLike:
    return 2.0 * np.arctanh(np.sqrt((e - 1.0) / (e + 1.0)) * np.tan(0.5 * true_anomaly))


def hyperbolic_eccentric_to_mean(hyperbolic_anomaly: FloatLike, e: FloatLike) -> FloatLike:
    return e * np.sinh(hyperbolic_anomaly) - hyperbolic_anomaly


def hyperbolic_mean_to_eccentric(mean_anomaly: FloatLike, e: FloatLike) -> FloatLike:
    """Solve M = e sinh(H) - H for the hyperbolic eccentric anomaly with Newton iterations."""
    mean_anomaly = np.asarray(mean_anomaly, dtype=np.float64)
    e = np.asarray(e, dtype=np.float64)

    hyperbolic = np.sign(mean_anomaly) * np.log(2.0 * np.abs(mean_anomaly) / e + 1.8)
    for _ in range(MAX_KEPLER_ITERATIONS):
        f = e * np.sinh(hyperbolic) - hyperbolic - mean_anomaly
        delta = -f / (e * np.cosh(hyperbolic) - 1.0)
        hyperbolic = hyperbolic + delta
        if np.all(np.abs(delta) <= KEPLER_TOLERANCE * (1.0 + np.abs(hyperbolic))):
            break
    else:
        logger.warning("Hyperbolic Kepler equation solver stopped after %d iterations", MAX_KEPLER_ITERATIONS)

    return hyperbolic[()]


def mean_to_true(mean_anomaly: FloatLike, e: FloatLike) -> FloatLike:
    if np.all(np.asarray(e) < 1.0):
        return elliptic_eccentric_to_true(elliptic_mean_to_eccentric(mean_anomaly, e), e)
    return hyperbolic_eccentric_to_true(hyperbolic_mean_to_eccentric(mean_anomaly, e), e)


def true_to_mean(true_anomaly: FloatLike, e: FloatLike) -> FloatLike:
    if np.all(np.asarray(e) < 1.0):
        return elliptic_eccentric_to_mean(elliptic_true_to_eccentric(true_anomaly, e), e)
    return hyperbolic_eccentric_to_mean(hyperbolic_true_to_eccentric(true_anomaly, e), e)


class PositionAngleType(Enum):
    """Kind of anomaly (or argument of latitude / longitude argument) stored in an orbit."""

    MEAN = "mean"
    ECCENTRIC = "eccentric"
    TRUE = "true"


_ELLIPTIC_TO_ECCENTRIC = {
    PositionAngleType.MEAN: elliptic_mean_to_eccentric,
    PositionAngleType.TRUE: elliptic_true_to_eccentric,
}
_ELLIPTIC_FROM_ECCENTRIC = {
    PositionAngleType.MEAN: elliptic_eccentric_to_mean,
    PositionAngleType.TRUE: elliptic_eccentric_to_true,
}
_HYPERBOLIC_TO_ECCENTRIC = {
    PositionAngleType.MEAN: hyperbolic_mean_to_eccentric,
    PositionAngleType.TRUE: hyperbolic_true_to_eccentric,
}
_HYPERBOLIC_FROM_ECCENTRIC = {
    PositionAngleType.MEAN: hyperbolic_eccentric_to_mean,
    PositionAngleType.TRUE: hyperbolic_eccentric_to_true,
}


def convert_anomaly(
    anomaly: FloatLike,
    e: FloatLike,
    source: PositionAngleType,
    target: PositionAngleType,
) -> FloatLike:
    """Convert an anomaly from one kind to another, going through the (elliptic or hyperbolic) eccentric anomaly."""
    if source is target:
        return anomaly
    if np.all(np.asarray(e) < 1.0):
        to_eccentric, from_eccentric = _ELLIPTIC_TO_ECCENTRIC, _ELLIPTIC_FROM_ECCENTRIC
    else:
        to_eccentric, from_eccentric = _HYPERBOLIC_TO_ECCENTRIC, _HYPERBOLIC_FROM_ECCENTRIC
    eccentric = anomaly if source is PositionAngleType.ECCENTRIC else to_eccentric[source](anomaly, e)
    if target is PositionAngleType.ECCENTRIC:
        return eccentric
    return from_eccentric[target](eccentric, e)
