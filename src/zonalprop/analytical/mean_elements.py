"""Fixed-point recovery of mean elements from osculating ones.

Analytical theories give osculating elements as a closed-form function of mean elements. The inverse has no
closed form, so it is computed by iterating

    mean <- mean - (forward(mean) - osculating)

starting from mean = osculating. Convergence is declared when every component of the residual is below its
own threshold; angle residuals are reduced to [-pi, pi) first.
"""

from __future__ import annotations

__all__ = [
    "check_brillouin_sphere",
    "check_eccentricity",
    "check_inclination",
    "compute_mean_elements",
    "element_thresholds",
]

import logging
import math
from typing import TYPE_CHECKING

import numpy as np

from zonalprop.errors import (
    AlmostCriticallyInclinedError,
    AlmostEquatorialOrbitError,
    InsideBrillouinSphereError,
    MeanElementsConvergenceError,
    TooLargeEccentricityError,
)
from zonalprop.orbits import normalize_angle

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    import numpy.typing as npt

logger = logging.getLogger(__name__)

# Inclinations where 1 - 5 cos^2(i) vanishes, prograde and retrograde.
CRITICAL_INCLINATIONS = (1.1071487, 2.0344439)
CRITICAL_INCLINATION_TOLERANCE = 1.0e-3
EQUATORIAL_SINE_TOLERANCE = 1.0e-10


def element_thresholds(
    epsilon: float,
    a: float,
    e: float,
    kinds: Sequence[str],
) -> npt.NDArray[np.floating]:
    """Scale `epsilon` per element: "a" by 1 + |a|, "e" by 1 + e, "angle" by pi."""
    scale = {"a": 1.0 + abs(a), "e": 1.0 + e, "angle": np.pi}
    return epsilon * np.array([scale[kind] for kind in kinds])


def compute_mean_elements(
    osculating: npt.NDArray[np.floating],
    forward: Callable[[npt.NDArray[np.floating]], npt.NDArray[np.floating]],
    *,
    thresholds: npt.NDArray[np.floating],
    angles: Sequence[bool],
    max_iterations: int,
    model: str,
) -> tuple[npt.NDArray[np.floating], int]:
    """Return the mean elements whose forward transform matches `osculating`, and the iterations used.

    `forward` maps mean elements to osculating elements at the same date. Elements whose angles are undefined
    for some orbits (perigee argument of a circular orbit) must not be used here: their residual does not shrink.
    """
    target = np.asarray(osculating, dtype=np.float64)
    angle_mask = np.asarray(angles, dtype=bool)
    mean = target.copy()
    residual = np.zeros_like(target)
    for iteration in range(1, max_iterations + 1):
        residual = forward(mean) - target
        residual[angle_mask] = normalize_angle(residual[angle_mask], 0.0)
        mean = mean - residual
        if np.all(np.abs(residual) < thresholds):
            logger.debug("%s mean elements converged after %d iterations", model, iteration)
            return mean, iteration

    logger.error("%s mean elements did not converge after %d iterations", model, max_iterations)
    raise MeanElementsConvergenceError(model, max_iterations, residual)


def check_eccentricity(e: float, ceiling: float) -> None:
    if e > ceiling or e >= 1.0:
        logger.error("Eccentricity %s above the %s limit", e, ceiling)
        raise TooLargeEccentricityError(e, ceiling)


def check_inclination(i: float) -> None:
    if i < 0.0 or i > math.pi or abs(math.sin(i)) < EQUATORIAL_SINE_TOLERANCE:
        logger.error("Almost equatorial orbit: i = %s rad", i)
        raise AlmostEquatorialOrbitError(i)
    if any(abs(i - critical) < CRITICAL_INCLINATION_TOLERANCE for critical in CRITICAL_INCLINATIONS):
        logger.error("Almost critically inclined orbit: i = %s rad", i)
        raise AlmostCriticallyInclinedError(i)


def check_brillouin_sphere(a: float, e: float, reference_radius: float) -> None:
    perigee_radius = a * (1.0 - e)
    if perigee_radius < reference_radius:
        logger.error("Perigee radius %s m below the reference radius %s m", perigee_radius, reference_radius)
        raise InsideBrillouinSphereError(perigee_radius, reference_radius)
