import numpy as np
import pytest

from zonalprop.errors import UnknownAdditionalStateError
from zonalprop.orbits import PositionAngleType, get_pv, shift_orbit
from zonalprop.propagation import DEFAULT_MASS, Attitude, FrameAlignedProvider, SpacecraftState


class TestAttitude:
    """Test the Attitude dataclass."""

    def test_default_is_identity(self, epoch):
        attitude = Attitude(date=epoch, frame="eme2000")
        assert np.array_equal(attitude.rotation, [1.0, 0.0, 0.0, 0.0])
        assert np.array_equal(attitude.spin, np.zeros(3))

    def test_invalid_quaternion_shape_raises(self, epoch):
        with pytest.raises(AssertionError):
            Attitude(date=epoch, frame="eme2000", rotation=np.array([1.0, 0.0, 0.0]))

    def test_shifted_by(self, epoch):
        attitude = Attitude(date=epoch, frame="eme2000").shifted_by(60.0)
        assert attitude.date == epoch + np.timedelta64(60, "s")


class TestFrameAlignedProvider:
    def test_uses_orbit_frame_by_default(self, leo_orbit):
        assert FrameAlignedProvider().get_attitude(leo_orbit).frame == leo_orbit.frame

    def test_explicit_frame(self, leo_orbit):
        assert FrameAlignedProvider("gcrs").get_attitude(leo_orbit).frame == "gcrs"


class TestSpacecraftState:
    """Test the SpacecraftState dataclass."""

    def test_defaults(self, leo_orbit):
        state = SpacecraftState(orbit=leo_orbit)
        assert state.mass == DEFAULT_MASS
        assert state.attitude is not None
        assert state.attitude.date == leo_orbit.date
        assert state.date == leo_orbit.date
        assert state.mu == leo_orbit.mu
        assert np.allclose(state.pv.position, get_pv(leo_orbit).position)

    def test_non_positive_mass_raises(self, leo_orbit):
        with pytest.raises(ValueError, match="mass must be positive"):
            SpacecraftState(orbit=leo_orbit, mass=0.0)

    def test_mismatched_attitude_date_raises(self, leo_orbit, epoch):
        attitude = Attitude(date=epoch + np.timedelta64(1, "s"), frame="eme2000")
        with pytest.raises(ValueError, match="do not match"):
            SpacecraftState(orbit=leo_orbit, attitude=attitude)

    def test_additional_states(self, leo_orbit):
        state = SpacecraftState(orbit=leo_orbit, additional_states={"charge": 2.0})
        updated = state.add_additional_state("temperature", [290.0, 291.0])
        assert not state.has_additional_state("temperature")
        assert updated.has_additional_state("charge")
        assert np.array_equal(updated.get_additional_state("charge"), [2.0])
        assert np.array_equal(updated.get_additional_state("temperature"), [290.0, 291.0])

    def test_additional_states_are_read_only(self, leo_orbit):
        state = SpacecraftState(orbit=leo_orbit, additional_states={"charge": 2.0})
        with pytest.raises(TypeError):
            state.additional_states["charge"] = np.array([3.0])  # type: ignore[index]

    def test_unknown_additional_state_raises(self, leo_orbit):
        state = SpacecraftState(orbit=leo_orbit)
        with pytest.raises(UnknownAdditionalStateError):
            state.get_additional_state("missing")
        with pytest.raises(KeyError):
            state.get_additional_state("missing")

    def test_shifted_by(self, leo_orbit):
        state = SpacecraftState(orbit=leo_orbit, mass=500.0, additional_states={"charge": 2.0})
        shifted = state.shifted_by(120.0)
        expected = shift_orbit(leo_orbit, 120.0)
        assert shifted.date == expected.date
        assert shifted.attitude.date == expected.date
        assert shifted.mass == 500.0
        assert shifted.has_additional_state("charge")
        assert np.allclose(shifted.pv.position, get_pv(expected).position)

    def test_with_orbit_moves_attitude(self, leo_orbit):
        state = SpacecraftState(orbit=leo_orbit)
        moved = state.with_orbit(shift_orbit(leo_orbit, 10.0))
        assert moved.attitude.date == moved.date
        assert moved.orbit.angle_type is PositionAngleType.TRUE

    def test_with_mass(self, leo_orbit):
        assert SpacecraftState(orbit=leo_orbit).with_mass(42.0).mass == 42.0
