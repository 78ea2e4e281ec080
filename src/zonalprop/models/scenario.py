__all__ = [
    "MeanElementsSettingsModel",
    "PropagationScenarioModel",
    "load_scenario_from_toml_file",
]

import logging
import tomllib
from pathlib import Path
from typing import TYPE_CHECKING, Literal, Self

from pydantic import BaseModel, Field, model_validator

from zonalprop.propagation import DEFAULT_MASS, PropagationType
from zonalprop.utils.constants import EARTH_MU

from .gravity import GravityFieldModel
from .orbit import KeplerianOrbitModel

if TYPE_CHECKING:
    from zonalprop.analytical import AbstractAnalyticalPropagator

logger = logging.getLogger(__name__)

type PropagatorKind = Literal["keplerian", "eckstein-hechler", "brouwer-lyddane"]


class MeanElementsSettingsModel(BaseModel):
    """Convergence settings of the osculating to mean elements conversion; unset values keep the model defaults."""

    epsilon: float | None = Field(default=None, gt=0.0)
    max_iterations: int | None = Field(default=None, gt=0)


class PropagationScenarioModel(BaseModel):
    """Analytical propagator setup: which model, which gravity field and which initial orbit."""

    propagator: PropagatorKind
    orbit: KeplerianOrbitModel
    gravity: GravityFieldModel | None = None
    initial_type: PropagationType = PropagationType.OSCULATING
    mean_elements: MeanElementsSettingsModel = Field(default_factory=MeanElementsSettingsModel)
    m2: float = 0.0  # [rad/s2], Brouwer-Lyddane only
    mass: float = Field(default=DEFAULT_MASS, gt=0.0)  # [kg]

    @model_validator(mode="after")
    def check_gravity(self) -> Self:
        if self.propagator != "keplerian" and self.gravity is None:
            msg = f"a gravity field is required by the {self.propagator} propagator"
            raise ValueError(msg)
        if self.propagator != "brouwer-lyddane" and self.m2 != 0.0:
            logger.warning("m2 is only used by the brouwer-lyddane propagator, ignoring it")
        return self

    def build_propagator(self) -> "AbstractAnalyticalPropagator":
        # Imported here to keep configuration models importable from the propagators.
        from zonalprop.analytical import (  # noqa: PLC0415
            BrouwerLyddanePropagator,
            EcksteinHechlerPropagator,
            KeplerianPropagator,
        )

        if self.gravity is None:
            return KeplerianPropagator(self.orbit.to_orbit(EARTH_MU), mass=self.mass)

        field = self.gravity.to_field()
        orbit = self.orbit.to_orbit(field.mu)
        settings = self.mean_elements.model_dump(exclude_none=True)
        match self.propagator:
            case "keplerian":
                return KeplerianPropagator(orbit, mass=self.mass)
            case "eckstein-hechler":
                return EcksteinHechlerPropagator(
                    orbit,
                    field,
                    mass=self.mass,
                    initial_type=self.initial_type,
                    **settings,
                )
            case "brouwer-lyddane":
                return BrouwerLyddanePropagator(
                    orbit,
                    field,
                    m2=self.m2,
                    mass=self.mass,
                    initial_type=self.initial_type,
                    **settings,
                )


def load_scenario_from_toml_file(toml_file_path: Path | str) -> PropagationScenarioModel:
    toml_file_path = Path(toml_file_path)
    with toml_file_path.open("rb") as f:
        toml_data = tomllib.load(f)
    return PropagationScenarioModel.model_validate(toml_data)
