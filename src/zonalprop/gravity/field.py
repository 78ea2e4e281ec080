from __future__ import annotations

__all__ = [
    "ZonalGravityField",
    "ZonalHarmonicsProvider",
    "eigen5c_field",
]

import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Protocol

from zonalprop.utils.constants import (
    EIGEN5C_C20,
    EIGEN5C_C30,
    EIGEN5C_C40,
    EIGEN5C_C50,
    EIGEN5C_C60,
    EIGEN5C_EARTH_MU,
    EIGEN5C_EARTH_RADIUS,
)

if TYPE_CHECKING:
    import numpy as np

logger = logging.getLogger(__name__)


class ZonalHarmonicsProvider(Protocol):
    """Source of zonal coefficients, possibly time-dependent."""

    @property
    def mu(self) -> float: ...

    @property
    def reference_radius(self) -> float: ...

    @property
    def max_degree(self) -> int: ...

    def on_date(self, date: np.datetime64) -> ZonalGravityField: ...


@dataclass(frozen=True, kw_only=True, slots=True)
class ZonalGravityField:
    """Immutable zonal part of a central body gravity field.

    `coefficients` maps a degree n >= 2 to the unnormalized coefficient C_n0 = -J_n. Missing degrees are zero.
    Instances are read-only and meant to be shared by every propagator using the same body.
    """

    mu: float
    reference_radius: float
    coefficients: Mapping[int, float]

    def __post_init__(self) -> None:
        if any(degree < 2 for degree in self.coefficients):
            msg = f"zonal degrees must be >= 2, got {sorted(self.coefficients)}"
            raise ValueError(msg)
        if self.mu <= 0.0 or self.reference_radius <= 0.0:
            msg = f"mu and reference radius must be positive, got {self.mu} and {self.reference_radius}"
            raise ValueError(msg)
        object.__setattr__(
            self,
            "coefficients",
            MappingProxyType({int(n): float(c) for n, c in sorted(self.coefficients.items())}),
        )

    @classmethod
    def from_j(cls, mu: float, reference_radius: float, *j: float) -> ZonalGravityField:
        """Build a field from J2, J3, ... given in order."""
        return cls(
            mu=mu,
            reference_radius=reference_radius,
            coefficients={degree: -jn for degree, jn in enumerate(j, start=2)},
        )

    @classmethod
    def from_normalized(
        cls,
        mu: float,
        reference_radius: float,
        normalized: Mapping[int, float],
    ) -> ZonalGravityField:
        """Build a field from fully normalized coefficients C̄_n0, with C_n0 = sqrt(2n + 1) C̄_n0."""
        return cls(
            mu=mu,
            reference_radius=reference_radius,
            coefficients={n: math.sqrt(2 * n + 1) * c for n, c in normalized.items()},
        )

    @property
    def max_degree(self) -> int:
        return max(self.coefficients, default=0)

    def cn0(self, degree: int) -> float:
        return self.coefficients.get(degree, 0.0)

    def jn(self, degree: int) -> float:
        return -self.cn0(degree)

    def truncated(self, max_degree: int) -> ZonalGravityField:
        return ZonalGravityField(
            mu=self.mu,
            reference_radius=self.reference_radius,
            coefficients={n: c for n, c in self.coefficients.items() if n <= max_degree},
        )

    def on_date(self, date: np.datetime64) -> ZonalGravityField:  # noqa: ARG002
        return self


def eigen5c_field() -> ZonalGravityField:
    """Return the zonal part (degrees 2 to 6) of the EIGEN-5C Earth gravity field."""
    return ZonalGravityField(
        mu=EIGEN5C_EARTH_MU,
        reference_radius=EIGEN5C_EARTH_RADIUS,
        coefficients={2: EIGEN5C_C20, 3: EIGEN5C_C30, 4: EIGEN5C_C40, 5: EIGEN5C_C50, 6: EIGEN5C_C60},
    )
