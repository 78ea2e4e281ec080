import math

import numpy as np
import pytest

from zonalprop.analytical import BrouwerLyddaneModel, BrouwerLyddanePropagator
from zonalprop.analytical.brouwer_lyddane import t2
from zonalprop.errors import (
    AlmostCriticallyInclinedError,
    InsideBrillouinSphereError,
    MeanElementsConvergenceError,
    TooLargeEccentricityError,
)
from zonalprop.gravity import ZonalHarmonicsAcceleration, eigen5c_field
from zonalprop.orbits import (
    CartesianOrbit,
    KeplerianOrbit,
    PositionAngleType,
    get_pv,
    normalize_angle,
    to_keplerian,
)
from zonalprop.propagation import NumericalPropagator, PropagationType, SpacecraftState

TEST_EPOCH = np.datetime64("2004-01-01T00:00:00", "ns")
TEST_MU = 3.9860047e14


def after(seconds):
    return TEST_EPOCH + np.timedelta64(int(seconds * 1e9), "ns")


def keplerian(a, e, i, pa=2.1, raan=2.9, anomaly=6.2, mu=TEST_MU):
    return KeplerianOrbit(
        a=a,
        e=e,
        i=i,
        pa=pa,
        raan=raan,
        anomaly=anomaly,
        angle_type=PositionAngleType.TRUE,
        date=TEST_EPOCH,
        mu=mu,
    )


def assert_same_pv(orbit, expected, position_tolerance, velocity_tolerance):
    assert np.allclose(get_pv(orbit).position, get_pv(expected).position, rtol=0.0, atol=position_tolerance)
    assert np.allclose(get_pv(orbit).velocity, get_pv(expected).velocity, rtol=0.0, atol=velocity_tolerance)


@pytest.fixture
def lyddane_field():
    return eigen5c_field().truncated(5)


@pytest.fixture
def polar_leo(lyddane_field):
    """Near-circular low Earth orbit from a 2023 conjunction case."""
    return CartesianOrbit(
        position=[6313554.48504233, 2775620.8433687, -2111774.8221765],
        velocity=[1575.31305905025, 1786.43351611741, 7042.05214468662],
        date=TEST_EPOCH,
        mu=lyddane_field.mu,
    )


@pytest.fixture
def inclined_leo(lyddane_field):
    """Near-circular orbit inclined at about 52 degrees, e close to 6e-4."""
    return CartesianOrbit(
        position=[-1772619.869591273, -3908652.1138424428, 5266680.93513367],
        velocity=[6359.69327821623, -4165.238186695803, -945.8311825913897],
        date=TEST_EPOCH,
        mu=lyddane_field.mu,
    )


class TestMeanElements:
    """Test the conversion between osculating and mean Keplerian elements."""

    def test_round_trip(self, meo_orbit, zonal_field):
        mean = BrouwerLyddanePropagator.compute_mean_orbit(meo_orbit, zonal_field)
        assert mean.angle_type is PositionAngleType.MEAN
        osculating = BrouwerLyddaneModel.from_mean_orbit(mean, zonal_field).orbit_at(TEST_EPOCH)
        assert_same_pv(osculating, meo_orbit, 1.0e-3, 1.0e-6)

    @pytest.mark.parametrize("eccentricity", [0.0, 5.0e-5, 5.0e-4, 1.0e-2])
    def test_round_trip_near_circular(self, eccentricity, zonal_field):
        orbit = keplerian(7209668.0, eccentricity, 1.7)
        mean = BrouwerLyddanePropagator.compute_mean_orbit(orbit, zonal_field)
        assert mean.e >= 0.0
        osculating = BrouwerLyddaneModel.from_mean_orbit(mean, zonal_field).orbit_at(TEST_EPOCH)
        assert osculating.e >= 0.0
        assert_same_pv(osculating, orbit, 1.0e-3, 1.0e-6)

    def test_round_trip_polar_leo(self, polar_leo, lyddane_field):
        mean = BrouwerLyddanePropagator.compute_mean_orbit(polar_leo, lyddane_field, epsilon=1.0e-12)
        osculating = BrouwerLyddaneModel.from_mean_orbit(mean, lyddane_field).orbit_at(TEST_EPOCH)
        assert_same_pv(osculating, polar_leo, 1.0e-3, 1.0e-6)

    def test_initial_state_is_the_input_orbit(self, meo_orbit, zonal_field):
        state = BrouwerLyddanePropagator(meo_orbit, zonal_field).propagate(TEST_EPOCH)
        assert isinstance(state.orbit, KeplerianOrbit)
        assert np.allclose(state.pv.position, get_pv(meo_orbit).position, rtol=0.0, atol=1.0e-3)
        assert state.orbit.a == pytest.approx(meo_orbit.a, abs=1.0e-3)

    def test_initial_state_of_circular_leo(self, leo_orbit, zonal_field):
        state = BrouwerLyddanePropagator(leo_orbit, zonal_field).propagate(TEST_EPOCH)
        assert_same_pv(state.orbit, leo_orbit, 1.0e-3, 1.0e-6)

    def test_mean_initial_type(self, meo_orbit, zonal_field):
        propagator = BrouwerLyddanePropagator(meo_orbit, zonal_field, initial_type=PropagationType.MEAN)
        assert propagator.mean_orbit.a == pytest.approx(meo_orbit.a)
        assert propagator.mean_orbit.e == pytest.approx(meo_orbit.e)
        assert propagator.mean_orbit.mean_anomaly == pytest.approx(meo_orbit.mean_anomaly)

    def test_non_convergence(self, meo_orbit, zonal_field):
        with pytest.raises(MeanElementsConvergenceError) as excinfo:
            BrouwerLyddanePropagator.compute_mean_orbit(meo_orbit, zonal_field, max_iterations=1)
        assert excinfo.value.model == "Brouwer-Lyddane"


class TestPropagation:
    """Test Brouwer-Lyddane propagation results."""

    def test_against_numerical_propagation(self, lyddane_field):
        orbit = KeplerianOrbit(
            a=24396159.0,
            e=0.01,
            i=np.radians(7.0),
            pa=np.radians(180.0),
            raan=np.radians(261.0),
            anomaly=0.0,
            angle_type=PositionAngleType.TRUE,
            date=TEST_EPOCH,
            mu=lyddane_field.mu,
        )
        date = after(60000.0)
        analytical = to_keplerian(BrouwerLyddanePropagator(orbit, lyddane_field).state_at(date).orbit)
        numerical = to_keplerian(
            NumericalPropagator(
                SpacecraftState(orbit=orbit),
                [ZonalHarmonicsAcceleration(lyddane_field)],
            ).state_at(date).orbit,
        )

        assert analytical.a == pytest.approx(numerical.a, abs=0.5)
        assert analytical.e == pytest.approx(numerical.e, abs=1.0e-6)
        assert analytical.i == pytest.approx(numerical.i, abs=1.0e-7)
        assert normalize_angle(analytical.raan, numerical.raan) == pytest.approx(numerical.raan, abs=1.0e-5)
        assert normalize_angle(analytical.pa, numerical.pa) == pytest.approx(numerical.pa, abs=5.0e-3)
        assert normalize_angle(analytical.true_anomaly, numerical.true_anomaly) == pytest.approx(
            numerical.true_anomaly,
            abs=5.0e-3,
        )

    def test_circular_orbit_stays_defined(self, zonal_field):
        orbit = keplerian(7209668.0, 0.0, 1.7)
        for initial_type in PropagationType:
            state = BrouwerLyddanePropagator(orbit, zonal_field, initial_type=initial_type).state_at(after(86400.0))
            elements = to_keplerian(state.orbit)
            assert np.all(np.isfinite([elements.a, elements.e, elements.i, elements.pa, elements.raan]))
            assert elements.e >= 0.0

    def test_near_circular_propagation(self, inclined_leo, lyddane_field):
        propagator = BrouwerLyddanePropagator(inclined_leo, lyddane_field)
        dates = np.array([after(t) for t in np.arange(0.0, 3601.0, 10.0)])
        pv = propagator.propagate_pv(dates)
        assert np.all(np.isfinite(pv.position))
        assert np.allclose(pv.position[0], get_pv(inclined_leo).position, rtol=0.0, atol=1.0e-3)
        radius = np.linalg.norm(pv.position, axis=1)
        assert np.all(np.abs(radius - np.linalg.norm(get_pv(inclined_leo).position)) < 5.0e4)
        assert propagator.propagate(after(3600.0)).orbit.e >= 0.0

    def test_drag_decreases_semi_major_axis(self, meo_orbit, zonal_field):
        date = after(86400.0)
        without_drag = BrouwerLyddanePropagator(meo_orbit, zonal_field, initial_type=PropagationType.MEAN)
        with_drag = BrouwerLyddanePropagator(meo_orbit, zonal_field, m2=1.0e-13, initial_type=PropagationType.MEAN)
        assert with_drag.state_at(date).orbit.a < without_drag.state_at(date).orbit.a - 100.0
        assert with_drag.state_at(TEST_EPOCH).orbit.a == pytest.approx(without_drag.state_at(TEST_EPOCH).orbit.a)

    def test_propagate_pv_matches_state_at(self, meo_orbit, zonal_field):
        propagator = BrouwerLyddanePropagator(meo_orbit, zonal_field)
        dates = np.array([after(t) for t in (-7200.0, 0.0, 3600.0, 43200.0)])
        pv = propagator.propagate_pv(dates)
        for k, date in enumerate(dates):
            state = propagator.state_at(date)
            assert np.allclose(pv.position[k], state.pv.position, rtol=0.0, atol=1.0e-3)
            assert np.allclose(pv.velocity[k], state.pv.velocity, rtol=0.0, atol=1.0e-6)

    def test_ignores_degree_six(self, meo_orbit, zonal_field):
        truncated = zonal_field.truncated(5)
        full = BrouwerLyddanePropagator(meo_orbit, zonal_field).state_at(after(3600.0))
        partial = BrouwerLyddanePropagator(meo_orbit, truncated).state_at(after(3600.0))
        assert np.allclose(full.pv.position, partial.pv.position, rtol=0.0, atol=1.0e-6)


class TestDomain:
    """Test rejection of orbits outside the model validity domain."""

    def test_too_eccentric(self, zonal_field):
        with pytest.raises(TooLargeEccentricityError) as excinfo:
            BrouwerLyddanePropagator(keplerian(67679244.0, 0.96, 1.85850, anomaly=0.0), zonal_field)
        assert excinfo.value.eccentricity == pytest.approx(0.96)
        assert excinfo.value.ceiling == 0.95
        assert "too large eccentricity for propagation model: e =" in str(excinfo.value)

    @pytest.mark.parametrize("inclination", [math.acos(1.0 / math.sqrt(5.0)), 2.0344])
    def test_critical_inclination(self, inclination, zonal_field):
        orbit = keplerian(24396159.0, 0.01, inclination, pa=np.radians(180.0), raan=np.radians(261.0), anomaly=0.0)
        with pytest.raises(AlmostCriticallyInclinedError):
            BrouwerLyddanePropagator(orbit, zonal_field)

    def test_inside_brillouin_sphere(self, zonal_field):
        with pytest.raises(InsideBrillouinSphereError, match="Brillouin sphere"):
            BrouwerLyddanePropagator(keplerian(7.0e6, 0.1, 1.0), zonal_field)


class TestCriticalInclinationFactor:
    """Test the bounded approximation of 1 / (1 - 5 cos^2 i)."""

    @pytest.mark.parametrize("inclination", [0.1, 0.5, 1.5, 2.5, 3.0])
    def test_matches_exact_factor_far_from_critical(self, inclination):
        x = 1.0 - 5.0 * math.cos(inclination) ** 2
        assert t2(math.cos(inclination)) == pytest.approx(1.0 / x, rel=1.0e-9)

    def test_bounded_at_critical_inclination(self):
        values = [t2(math.cos(math.acos(1.0 / math.sqrt(5.0)) + delta)) for delta in np.linspace(-0.01, 0.01, 21)]
        assert max(abs(v) for v in values) < 10.0
        assert t2(1.0 / math.sqrt(5.0)) == pytest.approx(0.0, abs=1.0e-12)
