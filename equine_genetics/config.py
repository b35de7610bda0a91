"""Configuration loading and validation for equine_genetics."""

import json
import yaml
from pathlib import Path
from typing import Dict, Any, Optional, Type
from dataclasses import dataclass, field, fields

from .exceptions import ConfigurationError


@dataclass(frozen=True)
class RatingsConfig:
    """Tunables for conformation and gait rating generation."""
    default_score: int = 50
    min_score: int = 1
    max_score: int = 100
    foal_default_std_dev: float = 3.0
    foal_random_tweak: int = 5  # Foal tweak drawn from [-tweak, +tweak]


@dataclass(frozen=True)
class TemperamentConfig:
    """Tunables for temperament selection."""
    default_temperament: str = "Calm"
    parental_bonus: float = 15.0


@dataclass(frozen=True)
class GeneticsConfig:
    """Tunables for genotype generation and inheritance."""
    max_allele_attempts: int = 10


@dataclass(frozen=True)
class EpigeneticConfig:
    """Tunables for at-birth epigenetic trait assignment."""
    default_mare_stress: float = 50.0
    default_feed_quality: float = 50.0
    inbreeding_generations: int = 3
    specialization_min_ancestors: int = 3
    specialization_min_strength: float = 0.6
    legacy_talent_min_ancestors: int = 4
    # Care thresholds (mare stress and feed quality are 0-100)
    low_stress_max: float = 20.0
    premium_feed_min: float = 80.0
    well_bred_stress_max: float = 30.0
    well_bred_feed_min: float = 70.0
    premium_care_stress_max: float = 10.0
    premium_care_feed_min: float = 90.0
    high_stress_min: float = 60.0
    weak_constitution_stress_min: float = 70.0
    weak_constitution_feed_max: float = 40.0
    poor_nutrition_feed_max: float = 30.0
    trait_chances: Dict[str, float] = field(default_factory=lambda: {
        'hardy': 0.25,
        'well_bred': 0.20,
        'premium_care': 0.15,
        'hidden_potential': 0.30,
        'inbred': 0.60,
        'low_immunity': 0.35,
        'weak_constitution': 0.35,
        'stressed_lineage': 0.25,
        'poor_nutrition': 0.40,
        'specialized_lineage': 0.30,
        'discipline_affinity': 0.70,
        'legacy_talent': 0.40,
    })


@dataclass(frozen=True)
class DiscoveryConfig:
    """Tunables for post-birth trait discovery."""
    high_bonding_min: float = 80.0
    low_stress_max: float = 20.0
    perfect_care_bond_min: float = 90.0
    perfect_care_stress_max: float = 15.0
    enrichment_activity_count: int = 3
    development_complete_day: int = 6
    max_age_days: int = 365


@dataclass(frozen=True)
class InfluenceConfig:
    """Tunables for the caregiving trait-influence accumulator."""
    permanence_threshold: int = 3
    increment: int = 1
    epigenetic_cutoff_days: int = 1095


@dataclass(frozen=True)
class EngineConfig:
    """Complete engine configuration."""
    ratings: RatingsConfig = field(default_factory=RatingsConfig)
    temperament: TemperamentConfig = field(default_factory=TemperamentConfig)
    genetics: GeneticsConfig = field(default_factory=GeneticsConfig)
    epigenetics: EpigeneticConfig = field(default_factory=EpigeneticConfig)
    discovery: DiscoveryConfig = field(default_factory=DiscoveryConfig)
    influence: InfluenceConfig = field(default_factory=InfluenceConfig)
    raw_config: Dict[str, Any] = field(default_factory=dict)


SECTIONS: Dict[str, Type] = {
    'ratings': RatingsConfig,
    'temperament': TemperamentConfig,
    'genetics': GeneticsConfig,
    'epigenetics': EpigeneticConfig,
    'discovery': DiscoveryConfig,
    'influence': InfluenceConfig,
}


def _read_file(config_path: str) -> Dict[str, Any]:
    """Read a YAML or JSON file into a dictionary."""
    path = Path(config_path)

    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    try:
        with open(path, 'r') as f:
            if path.suffix.lower() == '.json':
                raw = json.load(f)
            else:
                raw = yaml.safe_load(f)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Failed to parse configuration file: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Failed to read configuration file: {e}") from e

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigurationError("Configuration root must be a mapping")
    return raw


def load_config(config_path: str) -> EngineConfig:
    """
    Load and validate engine configuration from YAML or JSON file.

    Sections that are absent fall back to their defaults.

    Args:
        config_path: Path to configuration file

    Returns:
        Validated EngineConfig object

    Raises:
        ConfigurationError: If file doesn't exist or configuration is invalid
    """
    raw_config = _read_file(config_path)
    validate_config(raw_config)
    return build_config(raw_config)


def validate_config(config: Dict[str, Any]) -> None:
    """
    Validate configuration structure and values.

    Args:
        config: Raw configuration dictionary

    Raises:
        ConfigurationError: If validation fails
    """
    for section_name, section in config.items():
        if section_name not in SECTIONS:
            raise ConfigurationError(f"Unknown configuration section: {section_name}")
        if not isinstance(section, dict):
            raise ConfigurationError(f"{section_name} must be a dictionary")

        known = {f.name: f for f in fields(SECTIONS[section_name])}
        for key, value in section.items():
            if key not in known:
                raise ConfigurationError(f"{section_name} has unknown field: {key}")

            if key == 'default_temperament':
                if not isinstance(value, str) or not value:
                    raise ConfigurationError("default_temperament must be a non-empty string")
            elif key == 'trait_chances':
                if not isinstance(value, dict):
                    raise ConfigurationError("trait_chances must be a dictionary")
                for trait, chance in value.items():
                    if not isinstance(chance, (int, float)) or not (0.0 <= chance <= 1.0):
                        raise ConfigurationError(
                            f"trait_chances.{trait} must be a number between 0.0 and 1.0"
                        )
            elif isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ConfigurationError(f"{section_name}.{key} must be a number")
            elif value < 0:
                raise ConfigurationError(f"{section_name}.{key} must be non-negative")

    ratings = config.get('ratings', {})
    min_score = ratings.get('min_score', RatingsConfig.min_score)
    max_score = ratings.get('max_score', RatingsConfig.max_score)
    if min_score > max_score:
        raise ConfigurationError("ratings.min_score must be <= ratings.max_score")

    influence = config.get('influence', {})
    if influence.get('permanence_threshold', 1) < 1:
        raise ConfigurationError("influence.permanence_threshold must be a positive integer")
    if influence.get('increment', 1) < 1:
        raise ConfigurationError("influence.increment must be a positive integer")


def build_config(raw_config: Optional[Dict[str, Any]] = None) -> EngineConfig:
    """
    Build EngineConfig object from validated raw config.

    Args:
        raw_config: Validated configuration dictionary (None for all defaults)

    Returns:
        EngineConfig object
    """
    raw_config = raw_config or {}
    sections = {}
    for section_name, section_cls in SECTIONS.items():
        values = dict(raw_config.get(section_name, {}))
        if section_name == 'epigenetics' and 'trait_chances' in values:
            # Partial overrides keep the remaining default chances
            chances = dict(EpigeneticConfig().trait_chances)
            chances.update(values['trait_chances'])
            values['trait_chances'] = chances
        sections[section_name] = section_cls(**values)

    return EngineConfig(raw_config=raw_config, **sections)


DEFAULT_CONFIG = build_config()


def load_breed_profiles(profiles_path: str) -> Dict[str, 'BreedProfile']:
    """
    Load breed profiles from a YAML or JSON mapping of breed name to profile.

    Args:
        profiles_path: Path to breed profile file

    Returns:
        Dictionary mapping breed name to BreedProfile

    Raises:
        ConfigurationError: If the file is missing or a profile is malformed
    """
    from .models.breed import BreedProfile

    raw = _read_file(profiles_path)
    profiles = {}
    for name, profile in raw.items():
        if not isinstance(profile, dict):
            raise ConfigurationError(f"Breed profile {name} must be a dictionary")
        try:
            profiles[name] = BreedProfile.from_config(name, profile)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid breed profile {name}: {e}") from e
    return profiles
