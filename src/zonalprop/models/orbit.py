__all__ = [
    "GravityModel",
    "KeplerianOrbitModel",
    "SGP4ElementsModel",
]
from enum import Enum
from typing import Any

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, field_validator
from sgp4.model import WGS72, WGS72OLD, WGS84

from zonalprop.orbits import DEFAULT_FRAME, KeplerianOrbit, PositionAngleType
from zonalprop.utils.constants import SGP4_WGS72_MU, SGP4_WGS72OLD_MU, SGP4_WGS84_MU
from zonalprop.utils.time import as_date


class GravityModel(Enum):
    WGS72 = WGS72
    WGS72OLD = WGS72OLD
    WGS84 = WGS84

    @property
    def mu(self) -> float:
        return _SGP4_MU[self]


_SGP4_MU = {
    GravityModel.WGS72: SGP4_WGS72_MU,
    GravityModel.WGS72OLD: SGP4_WGS72OLD_MU,
    GravityModel.WGS84: SGP4_WGS84_MU,
}


class KeplerianOrbitModel(BaseModel):
    """Keplerian elements with angles in degrees."""

    # arbitrary_types_allowed is required to allow numpy.datetime64
    model_config = ConfigDict(arbitrary_types_allowed=True)

    semi_major_axis: float  # [m]
    eccentricity: float = Field(ge=0.0)
    inclination_deg: float
    raan_deg: float
    argument_of_perigee_deg: float
    anomaly_deg: float
    anomaly_type: PositionAngleType = PositionAngleType.TRUE
    epoch: np.datetime64
    frame: str = DEFAULT_FRAME

    @field_validator("epoch", mode="before")
    @classmethod
    def parse_epoch(cls, value: Any) -> np.datetime64:  # noqa: ANN401
        # TOML gives datetime objects, possibly timezone-aware.
        return as_date(value)

    def to_orbit(self, mu: float) -> KeplerianOrbit:
        return KeplerianOrbit(
            a=self.semi_major_axis,
            e=self.eccentricity,
            i=np.radians(self.inclination_deg),
            pa=np.radians(self.argument_of_perigee_deg),
            raan=np.radians(self.raan_deg),
            anomaly=np.radians(self.anomaly_deg),
            angle_type=self.anomaly_type,
            date=self.epoch,
            mu=mu,
            frame=self.frame,
        )


class SGP4ElementsModel(BaseModel):
    """Mean elements used to initialise SGP4, angles in radians."""

    # arbitrary_types_allowed is required to allow numpy.datetime64
    model_config = ConfigDict(arbitrary_types_allowed=True)

    satnum: int  # Satellite number
    epoch: np.datetime64
    gravity_model: GravityModel = GravityModel.WGS84
    semi_major_axis: float  # [m]
    eccentricity: float
    inclination: float
    raan: float
    argpo: float  # Argument of Perigee
    mean_anomaly: float
    drag_coeff: float = 0.0  # B star drag coefficient given in [1/earth radii]
    ndot: float = 0.0
    nddot: float = 0.0

    @field_validator("epoch", mode="before")
    @classmethod
    def parse_epoch(cls, value: Any) -> np.datetime64:  # noqa: ANN401
        # TOML gives datetime objects, possibly timezone-aware.
        return as_date(value)

    @property
    def mean_motion(self) -> float:
        """Mean motion [rad/s] derived from the semi-major axis with the mu of the gravity model."""
        return float(np.sqrt(self.gravity_model.mu / self.semi_major_axis**3))
