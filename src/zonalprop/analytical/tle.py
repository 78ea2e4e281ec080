from __future__ import annotations

__all__ = ["TLEPropagator"]

import logging
from typing import TYPE_CHECKING, Self, override

import numpy as np
from sgp4.api import SGP4_ERRORS, Satrec

from zonalprop.errors import NonResettableStateError, PropagationError
from zonalprop.models import GravityModel
from zonalprop.orbits import CartesianOrbit, PVCoordinates
from zonalprop.propagation import DEFAULT_MASS, Propagator, SpacecraftState
from zonalprop.utils.time import as_date, shift_date

if TYPE_CHECKING:
    from collections.abc import Sequence

    import numpy.typing as npt

    from zonalprop.models import SGP4ElementsModel
    from zonalprop.propagation import AttitudeProvider

logger = logging.getLogger(__name__)

# Origin of the SGP4 epoch count and its Julian date.
SGP4_REFERENCE_EPOCH = np.datetime64("1949-12-31T00:00:00", "ns")
SGP4_REFERENCE_JD = 2433281.5
SECONDS_PER_DAY = 86400.0
TEME_FRAME = "teme"


class TLEPropagator(Propagator):
    """SGP4/SDP4 propagation of two-line elements, delegated to the sgp4 library.

    States are expressed in the TEME frame, in meters and meters per second.
    """

    def __init__(
        self,
        satrec: Satrec,
        gravity_model: GravityModel = GravityModel.WGS72,
        *,
        attitude_provider: AttitudeProvider | None = None,
        mass: float = DEFAULT_MASS,
    ) -> None:
        super().__init__(attitude_provider)
        self._satrec = satrec
        self.gravity_model = gravity_model
        self.mass = mass

    @classmethod
    def from_lines(
        cls,
        line1: str,
        line2: str,
        gravity_model: GravityModel = GravityModel.WGS72,
        **kwargs,  # noqa: ANN003
    ) -> Self:
        return cls(Satrec.twoline2rv(line1, line2, gravity_model.value), gravity_model, **kwargs)

    @classmethod
    def from_model(cls, model: SGP4ElementsModel, **kwargs) -> Self:  # noqa: ANN003
        satrec = Satrec()
        epoch = (model.epoch - SGP4_REFERENCE_EPOCH) / np.timedelta64(1, "D")
        rad_per_min = 60
        satrec.sgp4init(
            model.gravity_model.value,
            "i",
            model.satnum,
            epoch,
            model.drag_coeff,
            model.ndot,
            model.nddot,
            model.eccentricity,
            model.argpo,
            model.inclination,
            model.mean_anomaly,
            model.mean_motion * rad_per_min,
            model.raan,
        )
        return cls(satrec, model.gravity_model, **kwargs)

    @property
    def satrec(self) -> Satrec:
        return self._satrec

    @property
    def epoch(self) -> np.datetime64:
        days = (self._satrec.jdsatepoch - SGP4_REFERENCE_JD) + self._satrec.jdsatepochF
        return shift_date(SGP4_REFERENCE_EPOCH, days * SECONDS_PER_DAY)

    @property
    @override
    def initial_state(self) -> SpacecraftState:
        return self.state_at(self.epoch)

    @override
    def reset_initial_state(self, state: SpacecraftState) -> None:
        msg = "two-line elements propagation cannot be reset to an arbitrary state"
        raise NonResettableStateError(msg)

    @override
    def reset_intermediate_state(self, state: SpacecraftState, forward: bool) -> None:  # noqa: FBT001
        msg = "two-line elements propagation cannot be reset to an arbitrary state"
        raise NonResettableStateError(msg)

    def _julian_dates(
        self,
        dates: npt.NDArray[np.datetime64],
    ) -> tuple[npt.NDArray[np.floating], npt.NDArray[np.floating]]:
        days = (dates - SGP4_REFERENCE_EPOCH) / np.timedelta64(1, "D")
        whole = np.floor(days)
        return SGP4_REFERENCE_JD + whole, days - whole

    def _check_errors(self, errors: npt.NDArray[np.integer], dates: npt.NDArray[np.datetime64]) -> None:
        failed = np.flatnonzero(errors)
        if failed.size > 0:
            first = failed[0]
            message = SGP4_ERRORS[int(errors[first])]
            logger.error("SGP4 failed at %s: %s", dates[first], message)
            msg = f"SGP4 propagation failed at {dates[first]}: {message}"
            raise PropagationError(msg)

    @override
    def _compute_state(self, date: np.datetime64) -> SpacecraftState:
        jd, fr = self._julian_dates(np.array([date]))
        error, position_km, velocity_km_s = self._satrec.sgp4(float(jd[0]), float(fr[0]))
        self._check_errors(np.array([error]), np.array([date]))
        orbit = CartesianOrbit(
            position=np.array(position_km) * 1e3,
            velocity=np.array(velocity_km_s) * 1e3,
            date=date,
            mu=self.gravity_model.mu,
            frame=TEME_FRAME,
        )
        return SpacecraftState(orbit=orbit, attitude=self.attitude_provider.get_attitude(orbit), mass=self.mass)

    @override
    def propagate_pv(self, dates: npt.NDArray[np.datetime64] | Sequence[np.datetime64]) -> PVCoordinates:
        dates = np.array([as_date(date) for date in dates], dtype="datetime64[ns]")
        jd, fr = self._julian_dates(dates)
        errors, position_km, velocity_km_s = self._satrec.sgp4_array(jd, fr)
        self._check_errors(errors, dates)
        return PVCoordinates(position=position_km.reshape(-1, 3) * 1e3, velocity=velocity_km_s.reshape(-1, 3) * 1e3)

