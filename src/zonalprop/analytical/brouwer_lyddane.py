"""Brouwer-Lyddane analytical propagator.

Brouwer's theory of zonal perturbations (C20 to C50) in Lyddane's form, which stays regular for small
eccentricities and inclinations. Long-period terms carry a 1 / (1 - 5 cos^2 i) factor that is singular at the
critical inclination; it is replaced here by the smooth approximation of Phipps (1992), and an empirical
along-track drag coefficient M2 adds secular decay of a and e and a quadratic term in the mean anomaly.
"""

from __future__ import annotations

__all__ = [
    "BrouwerLyddaneModel",
    "BrouwerLyddanePropagator",
]

import logging
import math
from typing import TYPE_CHECKING, Self, override

import numpy as np

from zonalprop.errors import TooLargeEccentricityError
from zonalprop.orbits import KeplerianOrbit, PositionAngleType, PVCoordinates, normalize_angle, to_keplerian
from zonalprop.orbits.anomaly import elliptic_mean_to_eccentric, mean_to_true
from zonalprop.orbits.elements import circular_to_keplerian, keplerian_to_cartesian, keplerian_to_circular
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

MODEL_NAME = "Brouwer-Lyddane"
MAX_ECCENTRICITY = 0.95
DEFAULT_EPSILON = 1.0e-13
DEFAULT_MAX_ITERATIONS = 200

# Scale of the regularisation of 1 / (1 - 5 cos^2 i).
BETA = 100.0 / 2048.0

_THRESHOLD_KINDS = ("a", "e", "e", "angle", "angle", "angle")
_ANGLES = (False, False, False, True, True, True)


def t2(cos_i: float) -> float:
    """Bounded approximation of 1 / (1 - 5 cos^2(i)) (Phipps 1992, eq. 2.47 and 2.48).

    The series and product telescope to (1 - exp(-2048 beta x^2)) / x with x = 1 - 5 cos^2(i), which matches 1 / x
    away from the critical inclination and goes smoothly through 0 at it.
    """
    x = 1.0 - 5.0 * cos_i * cos_i
    x2 = x * x
    series = sum((-1) ** k * (BETA * x2) ** k / math.factorial(k + 1) for k in range(13))
    product = math.prod(1.0 + math.exp(-(2.0**k) * BETA * x2) for k in range(11))
    return BETA * x * series * product


class BrouwerLyddaneModel:
    """Brouwer-Lyddane model built on one set of mean Keplerian elements.

    `mean` holds (a, e, i, pa, raan, mean anomaly) at `date`. The constructor precomputes every coefficient of
    the secular, long-period and short-period expansions.
    """

    def __init__(  # noqa: PLR0915
        self,
        mean: npt.ArrayLike,
        date: np.datetime64,
        field: ZonalGravityField,
        mass: float,
        frame: str,
        m2: float = 0.0,
    ) -> None:
        self.mean = np.array(mean, dtype=np.float64)
        self.date = date
        self.field = field
        self.mass = mass
        self.frame = frame
        self.m2 = m2

        app, epp, inc = self.mean[0], self.mean[1], self.mean[2]
        if epp >= 1.0:
            logger.error("Brouwer-Lyddane model requires an elliptic orbit, got e = %s", epp)
            raise TooLargeEccentricityError(epp, 1.0)
        self._xnot_dot = math.sqrt(field.mu / app) / app

        q = field.reference_radius / app
        y2 = -0.5 * field.cn0(2) * q**2

        n = math.sqrt(1.0 - epp * epp)
        n2 = n * n
        n3 = n2 * n
        n4 = n2 * n2
        n6 = n4 * n2
        n8 = n4 * n4
        n10 = n8 * n2
        self._n = n

        yp2 = y2 / n4
        yp3 = field.cn0(3) * q**3 / n6
        yp4 = 0.375 * field.cn0(4) * q**4 / n8
        yp5 = field.cn0(5) * q**5 / n10

        sin_i1 = math.sin(inc)
        sin_i2 = sin_i1 * sin_i1
        cos_i1 = math.cos(inc)
        cos_i2 = cos_i1 * cos_i1
        cos_i3 = cos_i2 * cos_i1
        cos_i4 = cos_i2 * cos_i2
        cos_i6 = cos_i4 * cos_i2
        c5c2 = 1.0 / t2(cos_i1)
        c3c2 = 3.0 * cos_i2 - 1.0

        epp2 = epp * epp
        epp3 = epp2 * epp
        epp4 = epp2 * epp2

        # secular rates of l'', g'' and h'' relative to the Keplerian mean motion
        lt_j2_squared = (
            -15.0
            + 16.0 * n
            + 25.0 * n2
            + (30.0 - 96.0 * n - 90.0 * n2) * cos_i2
            + (105.0 + 144.0 * n + 25.0 * n2) * cos_i4
        )
        self._lt = (
            1.0
            + 1.5 * yp2 * n * c3c2
            + 0.09375 * yp2 * yp2 * n * lt_j2_squared
            + 0.9375 * yp4 * n * epp2 * (3.0 - 30.0 * cos_i2 + 35.0 * cos_i4)
        )
        gt_j2_squared = (
            -35.0
            + 24.0 * n
            + 25.0 * n2
            + (90.0 - 192.0 * n - 126.0 * n2) * cos_i2
            + (385.0 + 360.0 * n + 45.0 * n2) * cos_i4
        )
        self._gt = (
            -1.5 * yp2 * c5c2
            + 0.09375 * yp2 * yp2 * gt_j2_squared
            + 0.3125 * yp4 * (21.0 - 9.0 * n2 + (-270.0 + 126.0 * n2) * cos_i2 + (385.0 - 189.0 * n2) * cos_i4)
        )
        self._ht = (
            -3.0 * yp2 * cos_i1
            + 0.375 * yp2 * yp2 * ((-5.0 + 12.0 * n + 9.0 * n2) * cos_i1 + (-35.0 - 36.0 * n - 5.0 * n2) * cos_i3)
            + 1.25 * yp4 * (5.0 - 3.0 * n2) * cos_i1 * (3.0 - 7.0 * cos_i2)
        )

        c_a = 1.0 - 11.0 * cos_i2 - 40.0 * cos_i4 / c5c2
        c_b = 1.0 - 3.0 * cos_i2 - 8.0 * cos_i4 / c5c2
        c_c = 1.0 - 9.0 * cos_i2 - 24.0 * cos_i4 / c5c2
        c_d = 1.0 - 5.0 * cos_i2 - 16.0 * cos_i4 / c5c2

        qyp2_4 = 3.0 * yp2 * yp2 * c_a - 10.0 * yp4 * c_b
        qyp52 = epp3 * cos_i1 * (
            0.5 * c_d / sin_i1 + sin_i1 * (5.0 + 32.0 * cos_i2 / c5c2 + 80.0 * cos_i4 / c5c2 / c5c2)
        )
        qyp22 = (
            2.0
            + epp2
            - 11.0 * (2.0 + 3.0 * epp2) * cos_i2
            - 40.0 * (2.0 + 5.0 * epp2) * cos_i4 / c5c2
            - 400.0 * epp2 * cos_i6 / c5c2 / c5c2
        )
        qyp42 = (qyp22 + 4.0 * (2.0 + epp2 - (2.0 + 3.0 * epp2) * cos_i2)) / 5.0
        qyp52bis = (
            epp * cos_i1 * sin_i1 * (4.0 + 3.0 * epp2) * (3.0 + 16.0 * cos_i2 / c5c2 + 40.0 * cos_i4 / c5c2 / c5c2)
        )

        # long-period terms
        self._dei3sg = 35.0 / 96.0 * yp5 / yp2 * epp2 * n2 * c_d * sin_i1
        self._de2sg = -1.0 / 12.0 * epp * n2 / yp2 * qyp2_4
        self._deisg = (
            -35.0 / 128.0 * yp5 / yp2 * epp2 * n2 * c_d
            + 1.0 / 4.0 * n2 / yp2 * (yp3 + 5.0 / 16.0 * yp5 * (4.0 + 3.0 * epp2) * c_c)
        ) * sin_i1
        self._de = epp2 * n2 / 24.0 / yp2 * qyp2_4

        qyp52quotient = epp * (-32.0 + 81.0 * epp4) / (4.0 + 3.0 * epp2 + n * (4.0 + 9.0 * epp2))
        self._dlgs2g = 1.0 / 48.0 / yp2 * (-3.0 * yp2 * yp2 * qyp22 + 10.0 * yp4 * qyp42) + n3 / yp2 * qyp2_4 / 24.0
        self._dlgc3g = 35.0 / 384.0 * yp5 / yp2 * n3 * epp * c_d * sin_i1 + 35.0 / 1152.0 * yp5 / yp2 * (
            2.0 * qyp52 * cos_i1 - epp * c_d * sin_i1 * (3.0 + 2.0 * epp2)
        )
        self._dlgcg = (
            -yp3 * epp * cos_i2 / (4.0 * yp2 * sin_i1)
            + 0.078125
            * yp5
            / yp2
            * (-epp * cos_i2 / sin_i1 * (4.0 + 3.0 * epp2) + epp2 * sin_i1 * (26.0 + 9.0 * epp2))
            * c_c
            - 0.46875 * yp5 / yp2 * qyp52bis * cos_i1
            + 0.25 * yp3 / yp2 * sin_i1 * epp / (1.0 + n3) * (3.0 - epp2 * (3.0 - epp2))
            + 0.078125 * yp5 / yp2 * n2 * c_c * qyp52quotient * sin_i1
        )

        qyp24 = 3.0 * yp2 * yp2 * (11.0 + 80.0 * cos_i2 / sin_i1 + 200.0 * cos_i4 / sin_i2) - 10.0 * yp4 * (
            3.0 + 16.0 * cos_i2 / sin_i1 + 40.0 * cos_i4 / sin_i2
        )
        self._dh2sgcg = 35.0 / 144.0 * yp5 / yp2 * qyp52
        self._dhsgcg = -epp2 * cos_i1 / (12.0 * yp2) * qyp24
        self._dhcg = (
            -35.0 / 576.0 * yp5 / yp2 * qyp52
            + epp * cos_i1 / (4.0 * yp2 * sin_i1) * (yp3 + 0.3125 * yp5 * (4.0 + 3.0 * epp2) * c_c)
            + 1.875 / (4.0 * yp2) * yp5 * qyp52bis
        )

        # short-period terms
        self._a_c = -yp2 * c3c2 * app / n3
        self._a_cbis = y2 * app * c3c2
        self._ac2g2f = y2 * app * 3.0 * sin_i2

        qe = 0.5 * n2 * y2 * c3c2 / n6
        self._e_c = qe * epp / (1.0 + n3) * (3.0 - epp2 * (3.0 - epp2))
        self._ecf = 3.0 * qe
        self._e2cf = 3.0 * epp * qe
        self._e3cf = epp2 * qe
        qe = 0.5 * n2 * y2 * 3.0 * (1.0 - cos_i2) / n6
        self._ec2f2g = qe * epp
        self._ecfc2f2g = 3.0 * qe
        self._e2cfc2f2g = 3.0 * epp * qe
        self._e3cfc2f2g = epp2 * qe
        qe = -0.5 * yp2 * n2 * (1.0 - cos_i2)
        self._ec2gf = 3.0 * qe
        self._ec2g3f = qe

        qi = epp * yp2 * cos_i1 * sin_i1
        self._ide = -epp * cos_i1 / (n2 * sin_i1)
        self._isfs2f2g = qi
        self._icfc2f2g = 2.0 * qi
        self._ic2f2g = 1.5 * yp2 * cos_i1 * sin_i1

        qgl1 = 0.25 * yp2
        qgl2 = 0.25 * yp2 * epp * n2 / (1.0 + n)
        self._glf = qgl1 * -6.0 * c5c2
        self._gll = qgl1 * 6.0 * c5c2
        self._glsf = qgl1 * -6.0 * c5c2 * epp + qgl2 * 2.0 * c3c2
        self._glosf = qgl2 * 2.0 * c3c2
        qgl1 = qgl1 * (3.0 - 5.0 * cos_i2)
        qgl2 = qgl2 * 3.0 * (1.0 - cos_i2)
        self._gls2f2g = 3.0 * qgl1
        self._gls2gf = 3.0 * epp * qgl1 + qgl2
        self._glos2gf = -1.0 * qgl2
        self._gls2g3f = qgl1 * epp + 1.0 / 3.0 * qgl2
        self._glos2g3f = qgl2

        qh = 3.0 * yp2 * cos_i1
        self._hf = -qh
        self._hl = qh
        self._hsf = -epp * qh
        self._hcfs2g2f = 2.0 * epp * yp2 * cos_i1
        self._hs2g2f = 1.5 * yp2 * cos_i1
        self._hsfc2g2f = -epp * yp2 * cos_i1

        qedl = -0.25 * yp2 * n3
        self._edls2g = 1.0 / 24.0 * epp * n3 / yp2 * qyp2_4
        self._edlcg = -0.25 * yp3 / yp2 * n3 * sin_i1 - 0.078125 * yp5 / yp2 * n3 * sin_i1 * (4.0 + 9.0 * epp2) * c_c
        self._edlc3g = 35.0 / 384.0 * yp5 / yp2 * n3 * epp2 * c_d * sin_i1
        self._edlsf = 2.0 * qedl * c3c2
        self._edls2gf = 3.0 * qedl * (1.0 - cos_i2)
        self._edls2g3f = 1.0 / 3.0 * qedl

        # secular decay of a and e driven by M2 (Phipps 1992, eq. 2.41 and 2.45)
        self._a_rate = -4.0 * app / (3.0 * self._xnot_dot)
        self._e_rate = -4.0 * epp * n * n / (3.0 * self._xnot_dot)

    @property
    def mean_orbit(self) -> KeplerianOrbit:
        a, e, i, pa, raan, mean_anomaly = self.mean
        return KeplerianOrbit(
            a=a,
            e=e,
            i=i,
            pa=pa,
            raan=raan,
            anomaly=mean_anomaly,
            angle_type=PositionAngleType.MEAN,
            date=self.date,
            mu=self.field.mu,
            frame=self.frame,
        )

    def propagate_parameters(self, dt: FloatLike) -> tuple[FloatLike, ...]:  # noqa: PLR0915
        """Return osculating (a, e, i, pa, raan, mean anomaly) `dt` seconds after the model date."""
        a0, e0, i0, pa0, raan0, anomaly0 = self.mean
        n = self._n
        dt = np.asarray(dt, dtype=np.float64)
        xnot = dt * self._xnot_dot

        # secular effects, with the quadratic drag term on the mean anomaly
        lpp = normalize_angle(anomaly0 + self._lt * xnot + self.m2 * dt * dt, 0.0)
        gpp = normalize_angle(pa0 + self._gt * xnot, 0.0)
        hpp = normalize_angle(raan0 + self._ht * xnot, 0.0)
        a_drag = dt * self._a_rate * self.m2
        e_drag = dt * self._e_rate * self.m2

        # long-period terms
        cg1 = np.cos(gpp)
        sg1 = np.sin(gpp)
        c2g = cg1 * cg1 - sg1 * sg1
        s2g = cg1 * sg1 + sg1 * cg1
        c3g = c2g * cg1 - s2g * sg1
        sg2 = sg1 * sg1
        sg3 = sg1 * sg2

        d1e = sg3 * self._dei3sg + sg1 * self._deisg + sg2 * self._de2sg + self._de
        lp_p_gp = s2g * self._dlgs2g + c3g * self._dlgc3g + cg1 * self._dlgcg + lpp + gpp
        hp = sg2 * cg1 * self._dh2sgcg + sg1 * cg1 * self._dhsgcg + cg1 * self._dhcg + hpp

        # short-period terms
        eccentric = elliptic_mean_to_eccentric(lpp, e0)
        cos_e = np.cos(eccentric)
        ee = 1.0 / (1.0 - e0 * cos_e)
        cf1 = (cos_e - e0) * ee
        sf1 = np.sin(eccentric) * n * ee
        f = np.arctan2(sf1, cf1)

        c2f = cf1 * cf1 - sf1 * sf1
        s2f = cf1 * sf1 + sf1 * cf1
        c3f = c2f * cf1 - s2f * sf1
        s3f = c2f * sf1 + s2f * cf1
        cf2 = cf1 * cf1
        cf3 = cf1 * cf2

        c2g1f = cf1 * c2g - sf1 * s2g
        c2g2f = c2f * c2g - s2f * s2g
        c2g3f = c3f * c2g - s3f * s2g
        s2g1f = cf1 * s2g + c2g * sf1
        s2g2f = c2f * s2g + c2g * s2f
        s2g3f = c3f * s2g + c2g * s3f

        ee3 = ee * ee * ee
        sigma = ee * n * n * ee + ee

        a = ee3 * self._a_cbis + (a_drag + a0) + self._a_c + ee3 * c2g2f * self._ac2g2f

        e = (
            d1e
            + (e_drag + e0)
            + self._e_c
            + cf1 * self._ecf
            + cf2 * self._e2cf
            + cf3 * self._e3cf
            + c2g2f * self._ec2f2g
            + c2g2f * cf1 * self._ecfc2f2g
            + c2g2f * cf2 * self._e2cfc2f2g
            + c2g2f * cf3 * self._e3cfc2f2g
            + c2g1f * self._ec2gf
            + c2g3f * self._ec2g3f
        )

        i = d1e * self._ide + i0 + sf1 * s2g2f * self._isfs2f2g + cf1 * c2g2f * self._icfc2f2g + c2g2f * self._ic2f2g

        g_p_l = (
            lp_p_gp
            + f * self._glf
            + lpp * self._gll
            + sf1 * self._glsf
            + sigma * sf1 * self._glosf
            + s2g2f * self._gls2f2g
            + s2g1f * self._gls2gf
            + sigma * s2g1f * self._glos2gf
            + s2g3f * self._gls2g3f
            + sigma * s2g3f * self._glos2g3f
        )

        h = (
            hp
            + f * self._hf
            + lpp * self._hl
            + sf1 * self._hsf
            + cf1 * s2g2f * self._hcfs2g2f
            + s2g2f * self._hs2g2f
            + c2g2f * sf1 * self._hsfc2g2f
        )

        edl = (
            s2g * self._edls2g
            + cg1 * self._edlcg
            + c3g * self._edlc3g
            + sf1 * self._edlsf
            + s2g1f * self._edls2gf
            + s2g3f * self._edls2g3f
            + sf1 * sigma * self._edlsf
            - s2g1f * sigma * self._edls2gf
            + s2g3f * sigma * 3.0 * self._edls2g3f
        )

        # mean anomaly and argument of perigee from the e / e dl pair
        cos_l = np.cos(lpp)
        sin_l = np.sin(lpp)
        l = np.arctan2(e * sin_l + edl * cos_l, e * cos_l - edl * sin_l)  # noqa: E741
        g = g_p_l - l

        # e can come out negative on near-circular orbits; (-e, g + pi, l + pi) is the same state
        negative = e < 0.0
        e = np.abs(e)
        g = np.where(negative, g + np.pi, g)
        l = np.where(negative, l + np.pi, l)  # noqa: E741
        return a, e, i, g, h, l

    def orbit_at(self, date: np.datetime64) -> KeplerianOrbit:
        a, e, i, pa, raan, mean_anomaly = self.propagate_parameters(seconds_between(date, self.date))
        return KeplerianOrbit(
            a=a,
            e=e,
            i=i,
            pa=pa,
            raan=raan,
            anomaly=mean_anomaly,
            angle_type=PositionAngleType.MEAN,
            date=date,
            mu=self.field.mu,
            frame=self.frame,
        )

    def pv_at(self, dates: npt.NDArray[np.datetime64]) -> PVCoordinates:
        dt = (dates - self.date) / np.timedelta64(1, "s")
        a, e, i, pa, raan, mean_anomaly = self.propagate_parameters(dt)
        position, velocity = keplerian_to_cartesian(a, e, i, pa, raan, mean_to_true(mean_anomaly, e), self.field.mu)
        return PVCoordinates(position=position.reshape(-1, 3), velocity=velocity.reshape(-1, 3))

    @classmethod
    def from_mean_orbit(
        cls,
        orbit: Orbit,
        field: ZonalGravityField,
        mass: float = DEFAULT_MASS,
        m2: float = 0.0,
    ) -> Self:
        kep = to_keplerian(orbit)
        return cls(
            [kep.a, kep.e, kep.i, kep.pa, kep.raan, kep.mean_anomaly],
            kep.date,
            field,
            mass,
            kep.frame,
            m2,
        )

    @classmethod
    def from_osculating_orbit(
        cls,
        orbit: Orbit,
        field: ZonalGravityField,
        mass: float = DEFAULT_MASS,
        m2: float = 0.0,
        *,
        epsilon: float = DEFAULT_EPSILON,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
    ) -> Self:
        """Fit the mean elements whose osculating counterpart at the orbit date is `orbit`.

        The fit runs on circular elements (a, ex, ey, i, raan, alpha): perigee argument and mean anomaly are
        undefined on circular orbits, their sum is not.
        """
        osculating = to_keplerian(orbit)
        check_eccentricity(osculating.e, MAX_ECCENTRICITY)
        check_brillouin_sphere(osculating.a, osculating.e, field.reference_radius)
        check_inclination(osculating.i)
        target = np.array(
            keplerian_to_circular(
                osculating.a,
                osculating.e,
                osculating.i,
                osculating.pa,
                osculating.raan,
                osculating.mean_anomaly,
            ),
        )

        def forward(mean: npt.NDArray[np.floating]) -> npt.NDArray[np.floating]:
            model = cls(circular_to_keplerian(*mean), osculating.date, field, mass, osculating.frame, m2)
            return np.array(keplerian_to_circular(*model.propagate_parameters(0.0)), dtype=np.float64)

        mean, _ = compute_mean_elements(
            target,
            forward,
            thresholds=element_thresholds(epsilon, osculating.a, osculating.e, _THRESHOLD_KINDS),
            angles=_ANGLES,
            max_iterations=max_iterations,
            model=MODEL_NAME,
        )
        return cls(circular_to_keplerian(*mean), osculating.date, field, mass, osculating.frame, m2)


class BrouwerLyddanePropagator(AbstractAnalyticalPropagator[BrouwerLyddaneModel]):
    """Analytical propagator for elliptic orbits under the zonal harmonics C20 to C50.

    Propagated orbits are `KeplerianOrbit`s with a mean anomaly. `m2` [rad/s^2] is the empirical drag
    coefficient; 0 disables drag. Orbits with e above 0.95, near-equatorial orbits, orbits close to the
    critical inclination and orbits dipping inside the reference radius are rejected.
    """

    def __init__(
        self,
        orbit: Orbit,
        field: ZonalHarmonicsProvider,
        *,
        m2: float = 0.0,
        attitude_provider: AttitudeProvider | None = None,
        mass: float = DEFAULT_MASS,
        initial_type: PropagationType = PropagationType.OSCULATING,
        epsilon: float = DEFAULT_EPSILON,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
    ) -> None:
        super().__init__(attitude_provider)
        self._field = field
        self.m2 = m2
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
    def mean_orbit(self) -> KeplerianOrbit:
        """Mean elements of the initial state."""
        return self._models.get(self.initial_state.date).mean_orbit

    @classmethod
    def compute_mean_orbit(
        cls,
        osculating: Orbit,
        field: ZonalHarmonicsProvider,
        *,
        m2: float = 0.0,
        epsilon: float = DEFAULT_EPSILON,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
    ) -> KeplerianOrbit:
        """Return the Brouwer-Lyddane mean elements of an osculating orbit."""
        return BrouwerLyddaneModel.from_osculating_orbit(
            osculating,
            _zonal_field(field, osculating.date),
            m2=m2,
            epsilon=epsilon,
            max_iterations=max_iterations,
        ).mean_orbit

    @override
    def _build_model(self, state: SpacecraftState, state_type: PropagationType) -> BrouwerLyddaneModel:
        field = _zonal_field(self._field, state.date)
        if state_type is PropagationType.MEAN:
            kep = to_keplerian(state.orbit)
            check_eccentricity(kep.e, MAX_ECCENTRICITY)
            check_inclination(kep.i)
            return BrouwerLyddaneModel.from_mean_orbit(kep, field, state.mass, self.m2)
        return BrouwerLyddaneModel.from_osculating_orbit(
            state.orbit,
            field,
            state.mass,
            self.m2,
            epsilon=self.epsilon,
            max_iterations=self.max_iterations,
        )


def _zonal_field(provider: ZonalHarmonicsProvider, date: np.datetime64) -> ZonalGravityField:
    field = provider.on_date(date)
    if field.cn0(2) == 0.0:
        msg = "the zonal field must provide a non-zero C20 coefficient"
        raise ValueError(msg)
    if field.max_degree > 5:
        logger.debug("Zonal coefficients above degree 5 are ignored by the Brouwer-Lyddane model")
    return field
