__all__ = [
    "ForceModel",
    "ZonalGravityField",
    "ZonalHarmonicsAcceleration",
    "ZonalHarmonicsProvider",
    "eigen5c_field",
]

from .acceleration import ForceModel, ZonalHarmonicsAcceleration
from .field import ZonalGravityField, ZonalHarmonicsProvider, eigen5c_field
