__all__ = [
    "GravityFieldModel",
    "GravityModel",
    "KeplerianOrbitModel",
    "MeanElementsSettingsModel",
    "PropagationScenarioModel",
    "SGP4ElementsModel",
    "load_scenario_from_toml_file",
]

from .gravity import GravityFieldModel
from .orbit import GravityModel, KeplerianOrbitModel, SGP4ElementsModel
from .scenario import MeanElementsSettingsModel, PropagationScenarioModel, load_scenario_from_toml_file
