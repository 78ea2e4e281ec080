"""Vectorised conversions between orbital element sets.

The functions here work on plain floats or numpy arrays (vectors stacked along the last axis) and know nothing
about dates or frames. They are shared by the orbit dataclasses and by the analytical models, which evaluate
whole time grids at once.

Angle conventions: `pa` is the argument of perigee, `raan` the right ascension of the ascending node, `nu` the
true anomaly. Circular elements use ex = e cos(pa), ey = e sin(pa) and the argument of latitude alpha = pa + nu.
Equinoctial elements use ex = e cos(pa + raan), ey = e sin(pa + raan), hx = tan(i/2) cos(raan),
hy = tan(i/2) sin(raan) and the longitude argument lon = pa + raan + nu.
"""

from __future__ import annotations

__all__ = [
    "cartesian_to_keplerian",
    "circular_to_keplerian",
    "equinoctial_to_keplerian",
    "keplerian_to_cartesian",
    "keplerian_to_circular",
    "keplerian_to_equinoctial",
]

from typing import TYPE_CHECKING

import numpy as np

from zonalprop.utils.vector import rowwise_cross, rowwise_innerdot

from .anomaly import elliptic_eccentric_to_true, hyperbolic_eccentric_to_true

if TYPE_CHECKING:
    import numpy.typing as npt

    type FloatLike = float | npt.NDArray[np.floating]
    type KeplerianElements = tuple[FloatLike, FloatLike, FloatLike, FloatLike, FloatLike, FloatLike]


def keplerian_to_cartesian(
    a: FloatLike,
    e: FloatLike,
    i: FloatLike,
    pa: FloatLike,
    raan: FloatLike,
    nu: FloatLike,
    mu: float,
) -> tuple[npt.NDArray[np.floating], npt.NDArray[np.floating]]:
    """Return position and velocity of shape (..., 3) for the given elements (true anomaly)."""
    cos_raan, sin_raan = np.cos(raan), np.sin(raan)
    cos_pa, sin_pa = np.cos(pa), np.sin(pa)
    cos_i, sin_i = np.cos(i), np.sin(i)

    p_vec = np.stack(
        [
            cos_raan * cos_pa - sin_raan * sin_pa * cos_i,
            sin_raan * cos_pa + cos_raan * sin_pa * cos_i,
            sin_pa * sin_i,
        ],
        axis=-1,
    )
    q_vec = np.stack(
        [
            -cos_raan * sin_pa - sin_raan * cos_pa * cos_i,
            -sin_raan * sin_pa + cos_raan * cos_pa * cos_i,
            cos_pa * sin_i,
        ],
        axis=-1,
    )

    p = a * (1.0 - e * e)
    cos_nu, sin_nu = np.cos(nu), np.sin(nu)
    r = p / (1.0 + e * cos_nu)
    v = np.sqrt(mu / p)

    position = _column(r * cos_nu) * p_vec + _column(r * sin_nu) * q_vec
    velocity = _column(-v * sin_nu) * p_vec + _column(v * (e + cos_nu)) * q_vec
    return position, velocity


def _column(x: FloatLike) -> npt.NDArray[np.floating]:
    return np.asarray(x)[..., np.newaxis]


def cartesian_to_keplerian(
    position: npt.NDArray[np.floating],
    velocity: npt.NDArray[np.floating],
    mu: float,
) -> KeplerianElements:
    """Return (a, e, i, pa, raan, nu) for position/velocity of shape (..., 3).

    Circular and equatorial orbits do not raise: the undefined angles collapse to zero while the angle sums that
    remain defined (pa + nu, raan + pa + nu) stay correct.
    """
    momentum = rowwise_cross(position, velocity)
    m2 = rowwise_innerdot(momentum, momentum)
    i = np.arctan2(np.hypot(momentum[..., 0], momentum[..., 1]), momentum[..., 2])
    raan = np.arctan2(momentum[..., 0], -momentum[..., 1])

    r = np.sqrt(rowwise_innerdot(position, position))
    v2 = rowwise_innerdot(velocity, velocity)
    r_v2_on_mu = r * v2 / mu
    a = r / (2.0 - r_v2_on_mu)
    mu_a = mu * a
    radial = rowwise_innerdot(position, velocity)

    elliptic = a > 0.0
    if np.all(elliptic):
        e, nu = _elliptic_shape(radial, r_v2_on_mu, mu_a)
    elif not np.any(elliptic):
        e, nu = _hyperbolic_shape(radial, r_v2_on_mu, mu_a, m2)
    else:
        # mixed batch: evaluate both branches and pick per row
        with np.errstate(invalid="ignore", divide="ignore"):
            e_elliptic, nu_elliptic = _elliptic_shape(radial, r_v2_on_mu, np.abs(mu_a))
            e_hyperbolic, nu_hyperbolic = _hyperbolic_shape(radial, r_v2_on_mu, -np.abs(mu_a), m2)
        e = np.where(elliptic, e_elliptic, e_hyperbolic)
        nu = np.where(elliptic, nu_elliptic, nu_hyperbolic)

    node = np.stack([np.cos(raan), np.sin(raan), np.zeros_like(raan)], axis=-1)
    px = rowwise_innerdot(position, node)
    py = rowwise_innerdot(position, rowwise_cross(momentum, node)) / np.sqrt(m2)
    pa = np.arctan2(py, px) - nu
    return a, e, i, pa, raan, nu


def _elliptic_shape(
    radial: npt.NDArray[np.floating],
    r_v2_on_mu: npt.NDArray[np.floating],
    mu_a: npt.NDArray[np.floating],
) -> tuple[npt.NDArray[np.floating], npt.NDArray[np.floating]]:
    e_se = radial / np.sqrt(mu_a)
    e_ce = r_v2_on_mu - 1.0
    e = np.sqrt(e_se * e_se + e_ce * e_ce)
    return e, elliptic_eccentric_to_true(np.arctan2(e_se, e_ce), e)


def _hyperbolic_shape(
    radial: npt.NDArray[np.floating],
    r_v2_on_mu: npt.NDArray[np.floating],
    mu_a: npt.NDArray[np.floating],
    m2: npt.NDArray[np.floating],
) -> tuple[npt.NDArray[np.floating], npt.NDArray[np.floating]]:
    e_sh = radial / np.sqrt(-mu_a)
    e_ch = r_v2_on_mu - 1.0
    e = np.sqrt(1.0 - m2 / mu_a)
    return e, hyperbolic_eccentric_to_true(0.5 * np.log((e_ch + e_sh) / (e_ch - e_sh)), e)


def keplerian_to_circular(
    a: FloatLike,
    e: FloatLike,
    i: FloatLike,
    pa: FloatLike,
    raan: FloatLike,
    anomaly: FloatLike,
) -> KeplerianElements:
    """Return (a, ex, ey, i, raan, alpha). The anomaly kind (mean, eccentric or true) carries over to alpha."""
    return a, e * np.cos(pa), e * np.sin(pa), i, raan, pa + anomaly


def circular_to_keplerian(
    a: FloatLike,
    ex: FloatLike,
    ey: FloatLike,
    i: FloatLike,
    raan: FloatLike,
    alpha: FloatLike,
) -> KeplerianElements:
    """Return (a, e, i, pa, raan, anomaly). The anomaly kind carries over from alpha."""
    pa = np.arctan2(ey, ex)
    return a, np.hypot(ex, ey), i, pa, raan, alpha - pa


def keplerian_to_equinoctial(
    a: FloatLike,
    e: FloatLike,
    i: FloatLike,
    pa: FloatLike,
    raan: FloatLike,
    anomaly: FloatLike,
) -> KeplerianElements:
    """Return (a, ex, ey, hx, hy, lon). The anomaly kind carries over to the longitude argument."""
    perigee_longitude = pa + raan
    tan_half_i = np.tan(0.5 * i)
    return (
        a,
        e * np.cos(perigee_longitude),
        e * np.sin(perigee_longitude),
        tan_half_i * np.cos(raan),
        tan_half_i * np.sin(raan),
        perigee_longitude + anomaly,
    )


def equinoctial_to_keplerian(
    a: FloatLike,
    ex: FloatLike,
    ey: FloatLike,
    hx: FloatLike,
    hy: FloatLike,
    lon: FloatLike,
) -> KeplerianElements:
    """Return (a, e, i, pa, raan, anomaly). The anomaly kind carries over from the longitude argument."""
    raan = np.arctan2(hy, hx)
    perigee_longitude = np.arctan2(ey, ex)
    return (
        a,
        np.hypot(ex, ey),
        2.0 * np.arctan(np.hypot(hx, hy)),
        perigee_longitude - raan,
        raan,
        lon - perigee_longitude,
    )
