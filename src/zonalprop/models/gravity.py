__all__ = [
    "GravityFieldModel",
]

from typing import Literal, Self

from pydantic import BaseModel, Field, model_validator

from zonalprop.gravity import ZonalGravityField, eigen5c_field
from zonalprop.utils.constants import (
    EARTH_MU,
    EARTH_RADIUS,
    GRIM5C1_C20,
    GRIM5C1_C30,
    GRIM5C1_C40,
    GRIM5C1_C50,
    GRIM5C1_C60,
    GRIM5C1_EARTH_MU,
    GRIM5C1_EARTH_RADIUS,
)


class GravityFieldModel(BaseModel):
    """Zonal gravity field, given either as a preset or as J_n / normalized C_n0 coefficients keyed by degree."""

    preset: Literal["eigen5c", "grim5c1"] | None = None
    mu: float = Field(default=EARTH_MU, gt=0.0)  # [m3/s2]
    reference_radius: float = Field(default=EARTH_RADIUS, gt=0.0)  # [m]
    j: dict[int, float] | None = None
    normalized: dict[int, float] | None = None

    @model_validator(mode="after")
    def check_single_source(self) -> Self:
        sources = [source for source in (self.preset, self.j, self.normalized) if source is not None]
        if len(sources) != 1:
            msg = "exactly one of 'preset', 'j' and 'normalized' must be given"
            raise ValueError(msg)
        return self

    def to_field(self) -> ZonalGravityField:
        match self.preset:
            case "eigen5c":
                return eigen5c_field()
            case "grim5c1":
                return ZonalGravityField(
                    mu=GRIM5C1_EARTH_MU,
                    reference_radius=GRIM5C1_EARTH_RADIUS,
                    coefficients={2: GRIM5C1_C20, 3: GRIM5C1_C30, 4: GRIM5C1_C40, 5: GRIM5C1_C50, 6: GRIM5C1_C60},
                )
        if self.j is not None:
            return ZonalGravityField(
                mu=self.mu,
                reference_radius=self.reference_radius,
                coefficients={degree: -jn for degree, jn in self.j.items()},
            )
        assert self.normalized is not None
        return ZonalGravityField.from_normalized(self.mu, self.reference_radius, self.normalized)
