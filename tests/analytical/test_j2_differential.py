import numpy as np
import pytest

from zonalprop.analytical import J2DifferentialEffect, SmallManeuverAnalyticalModel
from zonalprop.gravity import ZonalGravityField
from zonalprop.orbits import KeplerianOrbit, LOFType, keplerian_mean_motion, normalize_angle, to_keplerian
from zonalprop.propagation import SpacecraftState
from zonalprop.utils.constants import EARTH_J2, EARTH_MU, EARTH_RADIUS

EPOCH = np.datetime64("2024-03-01T00:00:00", "ns")


@pytest.fixture
def field():
    return ZonalGravityField.from_j(EARTH_MU, EARTH_RADIUS, EARTH_J2)


def orbit_with(a, i=np.radians(51.6)):
    return KeplerianOrbit(a=a, e=1.0e-3, i=i, pa=0.3, raan=0.7, anomaly=0.2, date=EPOCH, mu=EARTH_MU)


def node_rate(orbit):
    p = orbit.a * (1.0 - orbit.e**2)
    return -1.5 * keplerian_mean_motion(orbit) * EARTH_J2 * (EARTH_RADIUS / p) ** 2 * np.cos(orbit.i)


class TestJ2DifferentialEffect:
    """Test the differential J2 drift of perigee and node."""

    def test_rate_differences(self, field):
        orbit0, orbit1 = orbit_with(7.0e6), orbit_with(7.001e6)
        effect = J2DifferentialEffect(orbit0, orbit1, False, field)
        assert effect.d_raan_dot == pytest.approx(node_rate(orbit1) - node_rate(orbit0), rel=1.0e-9)
        # A higher prograde orbit regresses more slowly.
        assert effect.d_raan_dot > 0.0
        assert effect.d_pa_dot < 0.0
        assert effect.reference_date == EPOCH

    def test_node_drift_accumulates(self, field):
        orbit0, orbit1 = orbit_with(7.0e6), orbit_with(7.001e6)
        effect = J2DifferentialEffect(orbit0, orbit1, False, field)
        state = SpacecraftState(orbit=orbit0).shifted_by(7200.0)
        drifted = to_keplerian(effect.apply(state).orbit)
        original = to_keplerian(state.orbit)
        assert normalize_angle(drifted.raan - original.raan, 0.0) == pytest.approx(effect.d_raan_dot * 7200.0)
        assert drifted.a == pytest.approx(original.a)

    def test_inactive_before_reference_date(self, field):
        effect = J2DifferentialEffect(orbit_with(7.0e6), orbit_with(7.001e6), False, field)
        state = SpacecraftState(orbit=orbit_with(7.0e6)).shifted_by(-600.0)
        assert effect.apply(state) is state

    def test_apply_before(self, field):
        effect = J2DifferentialEffect(orbit_with(7.0e6), orbit_with(7.001e6), True, field)
        state = SpacecraftState(orbit=orbit_with(7.0e6)).shifted_by(-600.0)
        drifted = to_keplerian(effect.apply(state).orbit)
        assert normalize_angle(drifted.raan - to_keplerian(state.orbit).raan, 0.0) == pytest.approx(
            -600.0 * effect.d_raan_dot,
        )

    def test_orbit_type_is_kept(self, field):
        effect = J2DifferentialEffect(orbit_with(7.0e6), orbit_with(7.001e6), False, field)
        state = SpacecraftState(orbit=orbit_with(7.0e6)).shifted_by(60.0)
        assert isinstance(effect.apply(state).orbit, KeplerianOrbit)

    def test_from_maneuver(self, field):
        state = SpacecraftState(orbit=orbit_with(7.0e6))
        maneuver = SmallManeuverAnalyticalModel(state, [1.0, 0.0, 0.0], 300.0, frame=LOFType.TNW)
        effect = J2DifferentialEffect.from_effect(state, maneuver, False, field)
        # A prograde burn raises the orbit.
        assert effect.d_raan_dot > 0.0
        raised = orbit_with(7.0e6 + 2.0 * 7.0e6 * 1.0 / np.linalg.norm(state.pv.velocity))
        expected = J2DifferentialEffect(state.orbit, raised, False, field)
        assert effect.d_raan_dot == pytest.approx(expected.d_raan_dot, rel=0.05)
