__all__ = [
    "EARTH_J2",
    "EARTH_MU",
    "EARTH_RADIUS",
    "EIGEN5C_C20",
    "EIGEN5C_C30",
    "EIGEN5C_C40",
    "EIGEN5C_C50",
    "EIGEN5C_C60",
    "EIGEN5C_EARTH_MU",
    "EIGEN5C_EARTH_RADIUS",
    "G0_STANDARD_GRAVITY",
    "GRIM5C1_C20",
    "GRIM5C1_C30",
    "GRIM5C1_C40",
    "GRIM5C1_C50",
    "GRIM5C1_C60",
    "GRIM5C1_EARTH_MU",
    "GRIM5C1_EARTH_RADIUS",
    "SGP4_WGS72OLD_MU",
    "SGP4_WGS72_MU",
    "SGP4_WGS84_MU",
]
from typing import Final

# Earth gravitational constant from the WGS84 model: 3.986004418e14 m3/s2.
EARTH_MU: Final[float] = 3.986004418e14  # [m3/s2]

# Earth equatorial radius as defined by IAU 2015 resolution B3: 6.3781e6 (m).
EARTH_RADIUS: Final[float] = 6.378137e6  # [m]

# Earth second zonal harmonic (WGS84 / EGM96 value).
EARTH_J2: Final[float] = 1.08262668355e-3

# Standard gravity used to convert specific impulse to exhaust velocity.
G0_STANDARD_GRAVITY: Final[float] = 9.80665  # [m/s2]

# EIGEN-5C gravity field, unnormalized zonal coefficients.
EIGEN5C_EARTH_MU: Final[float] = 3.986004415e14  # [m3/s2]
EIGEN5C_EARTH_RADIUS: Final[float] = 6378136.46  # [m]
EIGEN5C_C20: Final[float] = -1.082626457231767e-3
EIGEN5C_C30: Final[float] = 2.532547231862799e-6
EIGEN5C_C40: Final[float] = 1.619964434136e-6
EIGEN5C_C50: Final[float] = 2.277928487005437e-7
EIGEN5C_C60: Final[float] = -5.406653715879098e-7

# GRIM5-C1 gravity field, unnormalized zonal coefficients.
GRIM5C1_EARTH_MU: Final[float] = 3.986004415e14  # [m3/s2]
GRIM5C1_EARTH_RADIUS: Final[float] = 6378136.46  # [m]
GRIM5C1_C20: Final[float] = -1.082626110612609e-3
GRIM5C1_C30: Final[float] = 2.536150841690056e-6
GRIM5C1_C40: Final[float] = 1.61936352497151e-6
GRIM5C1_C50: Final[float] = 2.231013736607540e-7
GRIM5C1_C60: Final[float] = -5.402895357302363e-7

# Gravitational parameters of the SGP4 gravity models.
SGP4_WGS72OLD_MU: Final[float] = 3.9860079964e14  # [m3/s2]
SGP4_WGS72_MU: Final[float] = 3.986008e14  # [m3/s2]
SGP4_WGS84_MU: Final[float] = 3.986005e14  # [m3/s2]
