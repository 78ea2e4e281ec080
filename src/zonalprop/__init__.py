"""Package initialization module for zonalprop."""

__all__ = [
    "AdapterPropagator",
    "BrouwerLyddanePropagator",
    "CartesianOrbit",
    "CircularOrbit",
    "EcksteinHechlerPropagator",
    "EquinoctialOrbit",
    "J2DifferentialEffect",
    "KeplerianOrbit",
    "KeplerianPropagator",
    "Orbit",
    "OrbitType",
    "PositionAngleType",
    "PropagationType",
    "SmallManeuverAnalyticalModel",
    "SpacecraftState",
    "TLEPropagator",
    "ZonalGravityField",
    "__version__",
]

from .analytical import (
    AdapterPropagator,
    BrouwerLyddanePropagator,
    EcksteinHechlerPropagator,
    J2DifferentialEffect,
    KeplerianPropagator,
    SmallManeuverAnalyticalModel,
    TLEPropagator,
)
from .gravity import ZonalGravityField
from .orbits import (
    CartesianOrbit,
    CircularOrbit,
    EquinoctialOrbit,
    KeplerianOrbit,
    Orbit,
    OrbitType,
    PositionAngleType,
)
from .propagation import PropagationType, SpacecraftState

__version__ = "0.1.0"
