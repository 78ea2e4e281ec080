"""Typed failure conditions raised by the propagators.

Three families are kept apart so that callers can tell them apart:

* `OrbitDomainError`: the input orbit lies outside the validity domain of a model and is rejected before any
  computation starts.
* `MeanElementsConvergenceError`: the mean/osculating fixed point did not converge within the iteration budget.
* `PropagationOrderError`, `OutOfRangeDateError`, `NonResettableStateError`: a propagator was used in a way its
  contract forbids.
"""

from __future__ import annotations

__all__ = [
    "AlmostCriticallyInclinedError",
    "AlmostEquatorialOrbitError",
    "HyperbolicOrbitNotHandledError",
    "InsideBrillouinSphereError",
    "InvalidOrbitError",
    "MeanElementsConvergenceError",
    "NonResettableStateError",
    "OrbitDomainError",
    "OutOfRangeDateError",
    "PropagationError",
    "PropagationOrderError",
    "TooLargeEccentricityError",
    "UnknownAdditionalStateError",
]

import math
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import numpy as np
    import numpy.typing as npt


class PropagationError(Exception):
    """Base class of every error raised by zonalprop."""


class OrbitDomainError(PropagationError, ValueError):
    """The orbit is outside the domain where the requested model is valid."""


class InvalidOrbitError(OrbitDomainError):
    pass


class HyperbolicOrbitNotHandledError(OrbitDomainError):
    pass


class TooLargeEccentricityError(OrbitDomainError):
    def __init__(self, eccentricity: float, ceiling: float) -> None:
        self.eccentricity = eccentricity
        self.ceiling = ceiling
        super().__init__(
            f"too large eccentricity for propagation model: e = {eccentricity} (maximum allowed {ceiling})",
        )


class InsideBrillouinSphereError(OrbitDomainError):
    def __init__(self, perigee_radius: float, reference_radius: float) -> None:
        self.perigee_radius = perigee_radius
        self.reference_radius = reference_radius
        super().__init__(
            f"trajectory inside the Brillouin sphere (r = {perigee_radius} m < {reference_radius} m)",
        )


class AlmostCriticallyInclinedError(OrbitDomainError):
    def __init__(self, inclination: float) -> None:
        self.inclination = inclination
        super().__init__(f"almost critically inclined orbit (i = {math.degrees(inclination)} degrees)")


class AlmostEquatorialOrbitError(OrbitDomainError):
    def __init__(self, inclination: float) -> None:
        self.inclination = inclination
        super().__init__(f"almost equatorial orbit (i = {math.degrees(inclination)} degrees)")


class MeanElementsConvergenceError(PropagationError, ArithmeticError):
    """The fixed-point iteration from osculating to mean elements did not converge.

    The last residual (osculating elements rebuilt from the current mean guess minus the target) is kept so the
    caller can judge how far from convergence the solver stopped.
    """

    def __init__(self, model: str, iterations: int, residual: npt.NDArray[np.floating]) -> None:
        self.model = model
        self.iterations = iterations
        self.residual = residual
        super().__init__(
            f"mean elements computation did not converge for the {model} model "
            f"after {iterations} iterations (last residual: {residual.tolist()})",
        )


class PropagationOrderError(PropagationError):
    """A propagation request goes against the time ordering a propagator requires."""


class OutOfRangeDateError(PropagationError):
    def __init__(self, date: np.datetime64, min_date: np.datetime64, max_date: np.datetime64) -> None:
        self.date = date
        self.min_date = min_date
        self.max_date = max_date
        super().__init__(f"out of range date for ephemerides: {date}, [{min_date}, {max_date}]")


class NonResettableStateError(PropagationError):
    pass


class UnknownAdditionalStateError(PropagationError, KeyError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"unknown additional state {name!r}")
