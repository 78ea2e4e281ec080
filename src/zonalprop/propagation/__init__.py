__all__ = [
    "DEFAULT_MASS",
    "Action",
    "AdditionalStateProvider",
    "ApsideDetector",
    "Attitude",
    "AttitudeProvider",
    "BoundedPropagator",
    "DateDetector",
    "Ephemeris",
    "EphemerisGenerator",
    "EventDetector",
    "EventHandler",
    "FrameAlignedProvider",
    "NodeDetector",
    "NumericalPropagator",
    "PropagationType",
    "Propagator",
    "SpacecraftState",
    "StepHandler",
    "stop_on_decreasing",
    "stop_on_event",
    "stop_on_increasing",
]

from .ephemeris import Ephemeris, EphemerisGenerator
from .events import (
    Action,
    ApsideDetector,
    DateDetector,
    EventDetector,
    EventHandler,
    NodeDetector,
    stop_on_decreasing,
    stop_on_event,
    stop_on_increasing,
)
from .numerical import NumericalPropagator
from .propagator import AdditionalStateProvider, BoundedPropagator, PropagationType, Propagator, StepHandler
from .state import DEFAULT_MASS, Attitude, AttitudeProvider, FrameAlignedProvider, SpacecraftState
