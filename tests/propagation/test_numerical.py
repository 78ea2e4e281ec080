import numpy as np
import pytest

from zonalprop.analytical import KeplerianPropagator
from zonalprop.gravity import ZonalGravityField, ZonalHarmonicsAcceleration
from zonalprop.orbits import (
    CartesianOrbit,
    CircularOrbit,
    KeplerianOrbit,
    keplerian_mean_motion,
    keplerian_period,
    to_keplerian,
)
from zonalprop.propagation import NumericalPropagator, SpacecraftState
from zonalprop.utils.constants import EARTH_J2, EARTH_MU, EARTH_RADIUS

EPOCH = np.datetime64("2024-03-01T00:00:00", "ns")


def after(seconds):
    return EPOCH + np.timedelta64(int(seconds * 1e9), "ns")


@pytest.fixture
def orbit():
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


class TestNumericalPropagator:
    """Test the numerical reference propagator."""

    def test_two_body_matches_keplerian(self, orbit):
        numerical = NumericalPropagator(SpacecraftState(orbit=orbit))
        keplerian = KeplerianPropagator(orbit)
        for t in (keplerian_period(orbit), -3000.0, 7200.0):
            expected = keplerian.state_at(after(t)).pv
            actual = numerical.state_at(after(t)).pv
            assert np.allclose(actual.position, expected.position, rtol=0.0, atol=1.0e-1)
            assert np.allclose(actual.velocity, expected.velocity, rtol=0.0, atol=1.0e-4)

    def test_initial_date_is_exact(self, orbit):
        numerical = NumericalPropagator(SpacecraftState(orbit=orbit))
        state = numerical.state_at(EPOCH)
        assert np.allclose(state.pv.position, SpacecraftState(orbit=orbit).pv.position)

    def test_orbit_type_and_mass_are_kept(self, orbit):
        circular = CircularOrbit(a=7.0e6, ex=1.0e-3, ey=0.0, i=1.0, raan=0.0, alpha=0.0, date=EPOCH, mu=EARTH_MU)
        numerical = NumericalPropagator(SpacecraftState(orbit=circular, mass=250.0))
        state = numerical.state_at(after(100.0))
        assert isinstance(state.orbit, CircularOrbit)
        assert state.mass == 250.0

    def test_j2_node_regression(self, orbit):
        field = ZonalGravityField.from_j(EARTH_MU, EARTH_RADIUS, EARTH_J2)
        numerical = NumericalPropagator(SpacecraftState(orbit=orbit), [ZonalHarmonicsAcceleration(field)])
        day = 86400.0
        final = to_keplerian(numerical.state_at(after(day)).orbit)

        p = orbit.a * (1.0 - orbit.e**2)
        raan_rate = -1.5 * keplerian_mean_motion(orbit) * EARTH_J2 * (EARTH_RADIUS / p) ** 2 * np.cos(orbit.i)
        drift = np.angle(np.exp(1j * (final.raan - orbit.raan)))
        assert drift == pytest.approx(raan_rate * day, rel=5.0e-2)

    def test_reset_restarts_trajectory(self, orbit):
        numerical = NumericalPropagator(SpacecraftState(orbit=orbit))
        numerical.state_at(after(600.0))
        moved = KeplerianPropagator(orbit).state_at(after(600.0))
        numerical.reset_initial_state(moved)
        assert numerical.initial_state.date == after(600.0)
        assert np.allclose(numerical.state_at(after(600.0)).pv.position, moved.pv.position)

    def test_intermediate_reset_keeps_other_side(self, orbit):
        numerical = NumericalPropagator(SpacecraftState(orbit=orbit))
        past = numerical.state_at(after(-3000.0))
        before_reset = numerical.state_at(after(300.0))
        original_future = numerical.state_at(after(1200.0))

        reset_state = numerical.state_at(after(600.0))
        pv = reset_state.pv
        boosted = CartesianOrbit(
            position=pv.position,
            velocity=pv.velocity * 1.001,
            date=after(600.0),
            mu=EARTH_MU,
        )
        numerical.reset_intermediate_state(SpacecraftState(orbit=boosted), True)

        assert numerical.initial_state.date == EPOCH
        assert np.array_equal(numerical.state_at(after(-3000.0)).pv.position, past.pv.position)
        assert np.array_equal(numerical.state_at(after(300.0)).pv.position, before_reset.pv.position)
        assert np.allclose(numerical.state_at(after(600.0)).pv.velocity, boosted.velocity)
        expected = KeplerianPropagator(boosted).state_at(after(1200.0))
        assert np.allclose(numerical.state_at(after(1200.0)).pv.position, expected.pv.position, rtol=0.0, atol=1.0e-1)
        assert np.linalg.norm(numerical.state_at(after(1200.0)).pv.position - original_future.pv.position) > 100.0

    def test_backward_intermediate_reset(self, orbit):
        numerical = NumericalPropagator(SpacecraftState(orbit=orbit))
        future = numerical.state_at(after(2400.0))
        moved = KeplerianPropagator(orbit).state_at(after(-600.0))
        numerical.reset_intermediate_state(moved, False)
        assert np.array_equal(numerical.state_at(after(2400.0)).pv.position, future.pv.position)
        assert np.allclose(numerical.state_at(after(-600.0)).pv.position, moved.pv.position)
