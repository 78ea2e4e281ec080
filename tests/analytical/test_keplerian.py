import numpy as np
import pytest

from zonalprop.analytical import KeplerianPropagator
from zonalprop.orbits import (
    EquinoctialOrbit,
    KeplerianOrbit,
    PositionAngleType,
    get_pv,
    keplerian_period,
    shift_orbit,
    to_equinoctial,
)
from zonalprop.propagation import FrameAlignedProvider, PropagationType
from zonalprop.utils.constants import EARTH_MU

EPOCH = np.datetime64("2024-03-01T00:00:00", "ns")


def after(seconds):
    return EPOCH + np.timedelta64(int(seconds * 1e9), "ns")


@pytest.fixture
def orbit():
    return KeplerianOrbit(
        a=2.6e7,
        e=0.7,
        i=np.radians(63.0),
        pa=np.radians(270.0),
        raan=np.radians(40.0),
        anomaly=np.radians(10.0),
        angle_type=PositionAngleType.MEAN,
        date=EPOCH,
        mu=EARTH_MU,
    )


class TestKeplerianPropagator:
    """Test two-body analytical propagation."""

    def test_initial_state(self, orbit):
        propagator = KeplerianPropagator(orbit, mass=321.0)
        assert propagator.initial_state.orbit == orbit
        assert propagator.initial_state.mass == 321.0

    def test_matches_shift_orbit(self, orbit):
        propagator = KeplerianPropagator(orbit)
        state = propagator.state_at(after(5000.0))
        assert np.allclose(state.pv.position, get_pv(shift_orbit(orbit, 5000.0)).position, rtol=0.0, atol=1.0e-6)

    def test_one_period_returns_to_start(self, orbit):
        state = KeplerianPropagator(orbit).propagate(after(keplerian_period(orbit)))
        assert np.allclose(state.pv.position, get_pv(orbit).position, rtol=0.0, atol=1.0e-3)

    def test_orbit_type_is_kept(self, orbit):
        equinoctial = to_equinoctial(orbit)
        state = KeplerianPropagator(equinoctial).state_at(after(600.0))
        assert isinstance(state.orbit, EquinoctialOrbit)
        assert state.orbit.angle_type is PositionAngleType.MEAN

    def test_elements_other_than_anomaly_are_constant(self, orbit):
        state = KeplerianPropagator(orbit).state_at(after(12345.0))
        assert state.orbit.a == orbit.a
        assert state.orbit.e == orbit.e
        assert state.orbit.pa == orbit.pa

    def test_propagate_pv_matches_state_at(self, orbit):
        propagator = KeplerianPropagator(orbit)
        dates = np.array([after(t) for t in (-600.0, 0.0, 3000.0, 40000.0)])
        pv = propagator.propagate_pv(dates)
        assert pv.position.shape == (4, 3)
        for k, date in enumerate(dates):
            state = propagator.state_at(date)
            assert np.allclose(pv.position[k], state.pv.position, rtol=0.0, atol=1.0e-4)
            assert np.allclose(pv.velocity[k], state.pv.velocity, rtol=0.0, atol=1.0e-7)

    def test_reset_intermediate_state(self, orbit):
        propagator = KeplerianPropagator(orbit)
        maneuvered = propagator.state_at(after(1000.0)).with_mass(900.0)
        propagator.reset_intermediate_state(maneuvered, True)
        assert propagator.state_at(after(500.0)).mass == 1000.0
        assert propagator.state_at(after(1500.0)).mass == 900.0
        assert propagator.get_mass(after(1000.0)) == 900.0

    def test_reset_initial_state(self, orbit):
        propagator = KeplerianPropagator(orbit)
        propagator.propagate(after(600.0))
        new_state = propagator.state_at(after(600.0))
        propagator.reset_initial_state(new_state, PropagationType.MEAN)
        assert propagator.initial_state.date == after(600.0)
        assert propagator.propagate(after(1200.0)).date == after(1200.0)

    def test_attitude_provider(self, orbit):
        propagator = KeplerianPropagator(orbit, attitude_provider=FrameAlignedProvider("gcrs"))
        assert propagator.state_at(after(60.0)).attitude.frame == "gcrs"
