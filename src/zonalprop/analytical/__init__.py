__all__ = [
    "AbstractAnalyticalPropagator",
    "AdapterPropagator",
    "AnalyticalModel",
    "BrouwerLyddaneModel",
    "BrouwerLyddanePropagator",
    "DifferentialEffect",
    "EcksteinHechlerModel",
    "EcksteinHechlerPropagator",
    "J2DifferentialEffect",
    "KeplerianPropagator",
    "SmallManeuverAnalyticalModel",
    "TLEPropagator",
    "compute_mean_elements",
]

from .adapter import AdapterPropagator, DifferentialEffect
from .base import AbstractAnalyticalPropagator, AnalyticalModel
from .brouwer_lyddane import BrouwerLyddaneModel, BrouwerLyddanePropagator
from .eckstein_hechler import EcksteinHechlerModel, EcksteinHechlerPropagator
from .j2_differential import J2DifferentialEffect
from .keplerian import KeplerianPropagator
from .mean_elements import compute_mean_elements
from .small_maneuver import SmallManeuverAnalyticalModel
from .tle import TLEPropagator
