"""
Equine Genetics and Trait Simulation

Main API:
    BreedingService - Animal creation flow and care operations
    AnimalStore - SQLite record store
    load_config - Configuration loading helper
    configure_logging - structlog setup
"""

from .breeding import BreedingService
from .config import load_config, load_breed_profiles, EngineConfig, DEFAULT_CONFIG
from .database import AnimalStore, create_database
from .logging_config import configure_logging
from .rng import create_rng

__all__ = [
    'BreedingService', 'AnimalStore', 'create_database',
    'load_config', 'load_breed_profiles', 'EngineConfig', 'DEFAULT_CONFIG',
    'configure_logging', 'create_rng',
]
__version__ = '0.1.0'
