from pathlib import Path

import numpy as np
import pytest

from zonalprop.gravity import ZonalGravityField
from zonalprop.orbits import KeplerianOrbit, PositionAngleType

SCENARIO_FILE = Path(__file__).parent / "data" / "scenario-test.toml"

assert SCENARIO_FILE.exists()

# Zonal field used by the Eckstein-Hechler reference cases.
TEST_MU = 3.9860047e14  # [m3/s2]
TEST_RADIUS = 6.378137e6  # [m]
TEST_C20 = -1.08263e-3
TEST_C30 = 2.54e-6
TEST_C40 = 1.62e-6
TEST_C50 = 2.3e-7
TEST_C60 = -5.5e-7

TEST_EPOCH = np.datetime64("2004-01-01T00:00:00", "ns")


@pytest.fixture
def scenario_file():
    return SCENARIO_FILE


@pytest.fixture
def zonal_field():
    return ZonalGravityField(
        mu=TEST_MU,
        reference_radius=TEST_RADIUS,
        coefficients={2: TEST_C20, 3: TEST_C30, 4: TEST_C40, 5: TEST_C50, 6: TEST_C60},
    )


@pytest.fixture
def j2_field():
    return ZonalGravityField(mu=TEST_MU, reference_radius=TEST_RADIUS, coefficients={2: TEST_C20})


@pytest.fixture
def epoch():
    return TEST_EPOCH


@pytest.fixture
def leo_orbit():
    """Near-circular, retrograde low Earth orbit."""
    return KeplerianOrbit(
        a=7209668.0,
        e=5.0e-4,
        i=1.7,
        pa=2.1,
        raan=2.9,
        anomaly=6.2,
        angle_type=PositionAngleType.TRUE,
        date=TEST_EPOCH,
        mu=TEST_MU,
    )


@pytest.fixture
def meo_orbit():
    """Slightly eccentric, low inclination medium Earth orbit."""
    return KeplerianOrbit(
        a=24396159.0,
        e=0.01,
        i=np.radians(7.0),
        pa=np.radians(180.0),
        raan=np.radians(261.0),
        anomaly=0.0,
        angle_type=PositionAngleType.TRUE,
        date=TEST_EPOCH,
        mu=TEST_MU,
    )
