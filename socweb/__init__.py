"""Spatially explicit SOC Monte Carlo simulation of a multi-species food web."""

from .config import Config
from .errors import ConfigError, NetworkFileError, SocwebError
from .model import EcoState, Site, Species
from .simulation import Simulation, run_realizations, run_simulation
from .stream import RandomStream

__version__ = "0.1.0"

__all__ = [
    "Config", "ConfigError", "EcoState", "NetworkFileError", "RandomStream",
    "Simulation", "Site", "SocwebError", "Species", "run_realizations", "run_simulation",
]
