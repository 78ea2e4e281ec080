from __future__ import annotations

__all__ = [
    "DEFAULT_MASS",
    "Attitude",
    "AttitudeProvider",
    "FrameAlignedProvider",
    "SpacecraftState",
]

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import TYPE_CHECKING, Protocol

import numpy as np

from zonalprop.errors import UnknownAdditionalStateError
from zonalprop.orbits import get_pv, shift_orbit
from zonalprop.utils.time import as_date, shift_date

if TYPE_CHECKING:
    import numpy.typing as npt

    from zonalprop.orbits import Orbit, PVCoordinates

logger = logging.getLogger(__name__)

DEFAULT_MASS = 1000.0  # [kg]


@dataclass(frozen=True, kw_only=True, slots=True)
class Attitude:
    """Orientation of the spacecraft body axes with respect to `frame`.

    `rotation` is a unit quaternion [q0, q1, q2, q3] with scalar part first, `spin` the angular velocity in
    rad/s expressed in the body frame.
    """

    date: np.datetime64
    frame: str
    rotation: npt.NDArray[np.floating] = field(default_factory=lambda: np.array([1.0, 0.0, 0.0, 0.0]))
    spin: npt.NDArray[np.floating] = field(default_factory=lambda: np.zeros(3))

    def __post_init__(self) -> None:
        object.__setattr__(self, "date", as_date(self.date))
        object.__setattr__(self, "rotation", np.array(self.rotation, dtype=np.float64))
        object.__setattr__(self, "spin", np.array(self.spin, dtype=np.float64))
        assert self.rotation.shape == (4,), self.rotation.shape
        assert self.spin.shape == (3,), self.spin.shape

    def shifted_by(self, dt: float) -> Attitude:
        # Rotation is kept unchanged, only the date moves.
        return replace(self, date=shift_date(self.date, dt))


class AttitudeProvider(Protocol):
    def get_attitude(self, orbit: Orbit) -> Attitude: ...


class FrameAlignedProvider:
    """Attitude provider keeping the body axes aligned with a reference frame (the orbit frame by default)."""

    def __init__(self, frame: str | None = None) -> None:
        self._frame = frame

    def get_attitude(self, orbit: Orbit) -> Attitude:
        return Attitude(date=orbit.date, frame=self._frame or orbit.frame)


@dataclass(frozen=True, kw_only=True, slots=True)
class SpacecraftState:
    """Orbit, attitude, mass and named additional states of a spacecraft at one date.

    Instances are immutable; the `with_*` and `add_additional_state` methods return new states.
    """

    orbit: Orbit
    attitude: Attitude | None = None
    mass: float = DEFAULT_MASS
    additional_states: Mapping[str, npt.NDArray[np.floating]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.attitude is None:
            object.__setattr__(self, "attitude", FrameAlignedProvider().get_attitude(self.orbit))
        elif self.attitude.date != self.orbit.date:
            msg = f"orbit date {self.orbit.date} and attitude date {self.attitude.date} do not match"
            raise ValueError(msg)
        if self.mass <= 0.0:
            msg = f"mass must be positive, got {self.mass}"
            raise ValueError(msg)
        object.__setattr__(self, "mass", float(self.mass))
        additional = {
            name: np.atleast_1d(np.array(value, dtype=np.float64)) for name, value in self.additional_states.items()
        }
        object.__setattr__(self, "additional_states", MappingProxyType(additional))

    @property
    def date(self) -> np.datetime64:
        return self.orbit.date

    @property
    def mu(self) -> float:
        return self.orbit.mu

    @property
    def frame(self) -> str:
        return self.orbit.frame

    @property
    def pv(self) -> PVCoordinates:
        return get_pv(self.orbit)

    def has_additional_state(self, name: str) -> bool:
        return name in self.additional_states

    def get_additional_state(self, name: str) -> npt.NDArray[np.floating]:
        try:
            return self.additional_states[name]
        except KeyError:
            raise UnknownAdditionalStateError(name) from None

    def add_additional_state(self, name: str, value: float | npt.ArrayLike) -> SpacecraftState:
        return replace(self, additional_states={**self.additional_states, name: value})

    def with_orbit(self, orbit: Orbit) -> SpacecraftState:
        attitude = self.attitude
        if attitude is not None and attitude.date != orbit.date:
            attitude = replace(attitude, date=orbit.date)
        return replace(self, orbit=orbit, attitude=attitude)

    def with_mass(self, mass: float) -> SpacecraftState:
        return replace(self, mass=mass)

    def shifted_by(self, dt: float) -> SpacecraftState:
        """Shift the state by `dt` seconds with Keplerian motion; mass and additional states are kept."""
        assert self.attitude is not None
        return replace(self, orbit=shift_orbit(self.orbit, dt), attitude=self.attitude.shifted_by(dt))
