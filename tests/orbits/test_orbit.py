import numpy as np
import pytest

from zonalprop.errors import HyperbolicOrbitNotHandledError, InvalidOrbitError
from zonalprop.orbits import (
    CartesianOrbit,
    CircularOrbit,
    EquinoctialOrbit,
    KeplerianOrbit,
    LOFType,
    OrbitType,
    PositionAngleType,
    convert_orbit,
    get_pv,
    keplerian_period,
    orbit_type_of,
    shift_orbit,
    to_cartesian,
    to_circular,
    to_equinoctial,
    to_keplerian,
)
from zonalprop.utils.constants import EARTH_MU

EPOCH = np.datetime64("2024-03-01T00:00:00")


@pytest.fixture
def elliptic_orbit():
    return KeplerianOrbit(
        a=7.5e6,
        e=0.05,
        i=np.radians(51.6),
        pa=np.radians(30.0),
        raan=np.radians(120.0),
        anomaly=np.radians(45.0),
        date=EPOCH,
        mu=EARTH_MU,
    )


class TestKeplerianOrbit:
    """Test validation and derived quantities of Keplerian orbits."""

    def test_anomalies_agree(self, elliptic_orbit):
        assert elliptic_orbit.true_anomaly == pytest.approx(np.radians(45.0))
        assert elliptic_orbit.mean_anomaly < elliptic_orbit.eccentric_anomaly < elliptic_orbit.true_anomaly

    def test_negative_eccentricity_raises(self):
        with pytest.raises(InvalidOrbitError):
            KeplerianOrbit(a=7.0e6, e=-0.1, i=0.5, pa=0.0, raan=0.0, anomaly=0.0, date=EPOCH, mu=EARTH_MU)

    def test_inconsistent_hyperbola_raises(self):
        with pytest.raises(InvalidOrbitError):
            KeplerianOrbit(a=7.0e6, e=1.5, i=0.5, pa=0.0, raan=0.0, anomaly=0.0, date=EPOCH, mu=EARTH_MU)

    def test_true_anomaly_beyond_asymptote_raises(self):
        with pytest.raises(InvalidOrbitError):
            KeplerianOrbit(a=-7.0e6, e=2.0, i=0.5, pa=0.0, raan=0.0, anomaly=np.pi, date=EPOCH, mu=EARTH_MU)

    def test_hyperbolic_orbit_accepted(self):
        orbit = KeplerianOrbit(a=-7.0e6, e=2.0, i=0.5, pa=0.0, raan=0.0, anomaly=0.5, date=EPOCH, mu=EARTH_MU)
        assert not orbit.is_elliptical
        assert orbit.mean_anomaly > 0.0

    def test_date_is_converted(self):
        orbit = KeplerianOrbit(a=7.0e6, e=0.0, i=0.5, pa=0.0, raan=0.0, anomaly=0.0, date="2024-03-01", mu=EARTH_MU)
        assert orbit.date == EPOCH


class TestConversions:
    """Test the conversions between element sets."""

    def test_cartesian_matches_vis_viva(self, elliptic_orbit):
        cartesian = to_cartesian(elliptic_orbit)
        r = np.linalg.norm(cartesian.position)
        v = np.linalg.norm(cartesian.velocity)
        assert v**2 == pytest.approx(EARTH_MU * (2.0 / r - 1.0 / elliptic_orbit.a))
        assert cartesian.a == pytest.approx(elliptic_orbit.a)

    def test_cartesian_back_to_keplerian(self, elliptic_orbit):
        kep = to_keplerian(to_cartesian(elliptic_orbit))
        assert kep.angle_type is PositionAngleType.TRUE
        assert kep.a == pytest.approx(elliptic_orbit.a, rel=1.0e-12)
        assert kep.e == pytest.approx(elliptic_orbit.e, abs=1.0e-12)
        assert kep.i == pytest.approx(elliptic_orbit.i, abs=1.0e-12)
        assert kep.raan == pytest.approx(elliptic_orbit.raan, abs=1.0e-12)
        assert np.cos(kep.pa - elliptic_orbit.pa) == pytest.approx(1.0)
        assert np.cos(kep.anomaly - elliptic_orbit.anomaly) == pytest.approx(1.0)

    def test_circular_elements(self, elliptic_orbit):
        circular = to_circular(elliptic_orbit)
        assert circular.ex == pytest.approx(0.05 * np.cos(np.radians(30.0)))
        assert circular.ey == pytest.approx(0.05 * np.sin(np.radians(30.0)))
        assert circular.alpha_v == pytest.approx(np.radians(75.0))
        assert circular.e == pytest.approx(0.05)

    def test_equinoctial_elements(self, elliptic_orbit):
        equinoctial = to_equinoctial(elliptic_orbit)
        assert equinoctial.i == pytest.approx(elliptic_orbit.i)
        assert equinoctial.lv == pytest.approx(np.radians(195.0))
        assert equinoctial.hx == pytest.approx(np.tan(0.5 * elliptic_orbit.i) * np.cos(elliptic_orbit.raan))

    @pytest.mark.parametrize("orbit_type", list(OrbitType))
    def test_every_type_has_same_position(self, elliptic_orbit, orbit_type):
        converted = convert_orbit(elliptic_orbit, orbit_type)
        assert orbit_type_of(converted) is orbit_type
        assert np.allclose(get_pv(converted).position, get_pv(elliptic_orbit).position, rtol=0.0, atol=1.0e-6)
        assert np.allclose(get_pv(converted).velocity, get_pv(elliptic_orbit).velocity, rtol=0.0, atol=1.0e-9)

    def test_anomaly_type_is_kept(self, elliptic_orbit):
        mean_orbit = KeplerianOrbit(
            a=elliptic_orbit.a,
            e=elliptic_orbit.e,
            i=elliptic_orbit.i,
            pa=elliptic_orbit.pa,
            raan=elliptic_orbit.raan,
            anomaly=elliptic_orbit.mean_anomaly,
            angle_type=PositionAngleType.MEAN,
            date=EPOCH,
            mu=EARTH_MU,
        )
        circular = to_circular(mean_orbit)
        assert circular.angle_type is PositionAngleType.MEAN
        assert circular.alpha_v == pytest.approx(np.radians(75.0))

    def test_hyperbolic_circular_orbit_raises(self):
        with pytest.raises(HyperbolicOrbitNotHandledError):
            CircularOrbit(a=7.0e6, ex=1.2, ey=0.0, i=0.5, raan=0.0, alpha=0.0, date=EPOCH, mu=EARTH_MU)
        with pytest.raises(HyperbolicOrbitNotHandledError):
            EquinoctialOrbit(a=-7.0e6, ex=0.0, ey=0.0, hx=0.1, hy=0.0, lon=0.0, date=EPOCH, mu=EARTH_MU)


class TestShiftOrbit:
    """Test Keplerian shifting of orbits."""

    def test_full_period_returns_to_start(self, elliptic_orbit):
        shifted = shift_orbit(elliptic_orbit, keplerian_period(elliptic_orbit))
        assert np.allclose(get_pv(shifted).position, get_pv(elliptic_orbit).position, rtol=0.0, atol=1.0e-4)

    def test_type_and_date(self, elliptic_orbit):
        circular = to_circular(elliptic_orbit)
        shifted = shift_orbit(circular, 90.0)
        assert isinstance(shifted, CircularOrbit)
        assert shifted.date == EPOCH + np.timedelta64(90, "s")

    def test_cartesian_shift_conserves_energy(self, elliptic_orbit):
        cartesian = to_cartesian(elliptic_orbit)
        shifted = shift_orbit(cartesian, 1234.5)
        assert isinstance(shifted, CartesianOrbit)
        assert shifted.a == pytest.approx(cartesian.a, rel=1.0e-12)


class TestLOF:
    """Test local orbital frames."""

    @pytest.mark.parametrize("lof", list(LOFType))
    def test_rotation_is_orthonormal(self, elliptic_orbit, lof):
        rotation = lof.rotation_from_inertial(get_pv(elliptic_orbit))
        assert np.allclose(rotation @ rotation.T, np.eye(3))
        assert np.linalg.det(rotation) == pytest.approx(1.0)

    def test_tnw_axes(self, elliptic_orbit):
        pv = get_pv(elliptic_orbit)
        rotation = LOFType.TNW.rotation_from_inertial(pv)
        assert np.allclose(rotation[0], pv.velocity / np.linalg.norm(pv.velocity))
        assert np.allclose(rotation[2], pv.momentum / np.linalg.norm(pv.momentum))

    def test_qsw_axes(self, elliptic_orbit):
        pv = get_pv(elliptic_orbit)
        local = LOFType.QSW.rotation_from_inertial(pv) @ pv.position
        assert np.allclose(local, [np.linalg.norm(pv.position), 0.0, 0.0], atol=1.0e-6)
