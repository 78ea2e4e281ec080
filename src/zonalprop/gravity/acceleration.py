from __future__ import annotations

__all__ = [
    "ForceModel",
    "ZonalHarmonicsAcceleration",
]

import logging
from typing import TYPE_CHECKING, Protocol

import numpy as np

from zonalprop.utils.vector import rowwise_innerdot

if TYPE_CHECKING:
    import numpy.typing as npt

    from .field import ZonalGravityField

logger = logging.getLogger(__name__)


class ForceModel(Protocol):
    """Perturbing acceleration added on top of the central attraction."""

    def acceleration(
        self,
        t: float,
        position: npt.NDArray[np.floating],
        velocity: npt.NDArray[np.floating],
    ) -> npt.NDArray[np.floating]: ...


class ZonalHarmonicsAcceleration:
    """Acceleration due to the zonal terms (degree >= 2) of a gravity field.

    With u = z / r, the perturbing potential is V = mu / r * sum_n C_n0 (R / r)^n P_n(u). Its gradient is

        dV/dr = -mu / r^2 * sum_n (n + 1) C_n0 (R / r)^n P_n(u)
        dV/du = mu / r * sum_n C_n0 (R / r)^n P'_n(u)
        acc = dV/dr * r_hat + dV/du * (z_hat - u r_hat) / r

    The Legendre polynomials and their derivatives come from the Bonnet recursions
    (n + 1) P_{n+1} = (2n + 1) u P_n - n P_{n-1} and P'_{n+1} = P'_{n-1} + (2n + 1) P_n.
    """

    def __init__(self, field: ZonalGravityField) -> None:
        self._field = field
        self._degrees = [n for n, c in field.coefficients.items() if c != 0.0]

    @property
    def field(self) -> ZonalGravityField:
        return self._field

    def acceleration(
        self,
        t: float,  # noqa: ARG002
        position: npt.NDArray[np.floating],
        velocity: npt.NDArray[np.floating],  # noqa: ARG002
    ) -> npt.NDArray[np.floating]:
        r = np.asarray(np.sqrt(rowwise_innerdot(position, position)))
        u = np.asarray(position[..., 2] / r)
        rho = self._field.reference_radius / r
        max_degree = max(self._degrees, default=0)

        p_prev, p_curr = np.ones_like(u), u
        dp_prev, dp_curr = np.zeros_like(u), np.ones_like(u)
        radial_sum = np.zeros_like(u)
        latitude_sum = np.zeros_like(u)
        rho_n = rho
        for n in range(1, max_degree):
            # p_curr = P_n, advance to P_{n+1}
            p_next = ((2 * n + 1) * u * p_curr - n * p_prev) / (n + 1)
            dp_next = dp_prev + (2 * n + 1) * p_curr
            rho_n = rho_n * rho
            cn0 = self._field.cn0(n + 1)
            if cn0 != 0.0:
                radial_sum = radial_sum + (n + 2) * cn0 * rho_n * p_next
                latitude_sum = latitude_sum + cn0 * rho_n * dp_next
            p_prev, p_curr = p_curr, p_next
            dp_prev, dp_curr = dp_curr, dp_next

        mu_over_r2 = self._field.mu / (r * r)
        d_v_dr = -mu_over_r2 * radial_sum
        d_v_du_over_r = mu_over_r2 * latitude_sum

        r_hat = position / r[..., np.newaxis]
        z_hat = np.zeros_like(position)
        z_hat[..., 2] = 1.0
        return d_v_dr[..., np.newaxis] * r_hat + d_v_du_over_r[..., np.newaxis] * (
            z_hat - u[..., np.newaxis] * r_hat
        )
