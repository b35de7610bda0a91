"""Breed profile models for equine_genetics."""

from typing import Dict, List, Any, Optional
from dataclasses import dataclass, field


@dataclass
class GeneticProfile:
    """Genetic-locus configuration for a breed."""
    allele_weights: Dict[str, Dict[str, float]] = field(default_factory=dict)  # locus -> {"E/e": weight}
    allowed_alleles: Dict[str, List[str]] = field(default_factory=dict)  # locus -> permitted pairs
    disallowed_combinations: Dict[str, List[str]] = field(default_factory=dict)  # locus -> lethal/forbidden pairs
    boolean_modifiers_prevalence: Dict[str, float] = field(default_factory=dict)  # e.g. {"sooty": 0.3}
    shade_bias: Dict[str, Dict[str, float]] = field(default_factory=dict)  # phenotype key -> {shade: weight}
    advanced_markings_bias: Dict[str, float] = field(default_factory=dict)

    @property
    def loci(self) -> List[str]:
        """Loci this breed defines, in declaration order."""
        loci = list(self.allowed_alleles)
        for locus in self.allele_weights:
            if locus not in loci:
                loci.append(locus)
        return loci

    @classmethod
    def from_config(cls, config: Optional[Dict[str, Any]]) -> 'GeneticProfile':
        """
        Create GeneticProfile from configuration dictionary.

        Args:
            config: Genetic profile dictionary (None for an empty profile)

        Returns:
            GeneticProfile instance
        """
        config = config or {}
        if not isinstance(config, dict):
            raise ValueError("genetics must be a dictionary")
        for key in ('allele_weights', 'allowed_alleles', 'disallowed_combinations',
                    'boolean_modifiers_prevalence', 'shade_bias', 'advanced_markings_bias'):
            if key in config and not isinstance(config[key], dict):
                raise ValueError(f"{key} must be a dictionary")

        return cls(
            allele_weights=dict(config.get('allele_weights', {})),
            allowed_alleles={k: list(v) for k, v in config.get('allowed_alleles', {}).items()},
            disallowed_combinations={
                k: list(v) for k, v in config.get('disallowed_combinations', {}).items()
            },
            boolean_modifiers_prevalence=dict(config.get('boolean_modifiers_prevalence', {})),
            shade_bias=dict(config.get('shade_bias', {})),
            advanced_markings_bias=dict(config.get('advanced_markings_bias', {})),
        )


@dataclass
class BreedProfile:
    """
    Per-breed statistical configuration.

    Attribute profiles are kept as raw ``{mean, std_dev}`` mappings; malformed
    entries are tolerated here and resolved to defaults by the rating generator.
    """
    name: str
    conformation: Optional[Dict[str, Any]] = None
    gaits: Optional[Dict[str, Any]] = None
    is_gaited_breed: bool = False
    temperament_weights: Dict[str, float] = field(default_factory=dict)
    genetics: GeneticProfile = field(default_factory=GeneticProfile)

    @classmethod
    def from_config(cls, name: str, config: Dict[str, Any]) -> 'BreedProfile':
        """
        Create BreedProfile from configuration dictionary.

        Rating profiles may be given flat or nested under ``rating_profiles``.

        Args:
            name: Breed name
            config: Breed configuration dictionary

        Returns:
            BreedProfile instance
        """
        if not isinstance(config, dict):
            raise ValueError(f"Breed {name!r} configuration must be a dictionary")
        ratings = config.get('rating_profiles', config)
        if not isinstance(ratings, dict):
            raise ValueError("rating_profiles must be a dictionary")
        conformation = ratings.get('conformation')
        gaits = ratings.get('gaits')
        if conformation is not None and not isinstance(conformation, dict):
            raise ValueError("conformation must be a dictionary")
        if gaits is not None and not isinstance(gaits, dict):
            raise ValueError("gaits must be a dictionary")

        temperament_weights = config.get('temperament_weights') or {}
        if not isinstance(temperament_weights, dict):
            raise ValueError("temperament_weights must be a dictionary")

        return cls(
            name=name,
            conformation=dict(conformation) if conformation is not None else None,
            gaits=dict(gaits) if gaits is not None else None,
            is_gaited_breed=bool(ratings.get('is_gaited_breed', False)),
            temperament_weights=dict(temperament_weights),
            genetics=GeneticProfile.from_config(config.get('genetics')),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a plain dictionary accepted by from_config."""
        return {
            'rating_profiles': {
                'conformation': self.conformation,
                'gaits': self.gaits,
                'is_gaited_breed': self.is_gaited_breed,
            },
            'temperament_weights': self.temperament_weights,
            'genetics': {
                'allele_weights': self.genetics.allele_weights,
                'allowed_alleles': self.genetics.allowed_alleles,
                'disallowed_combinations': self.genetics.disallowed_combinations,
                'boolean_modifiers_prevalence': self.genetics.boolean_modifiers_prevalence,
                'shade_bias': self.genetics.shade_bias,
                'advanced_markings_bias': self.genetics.advanced_markings_bias,
            },
        }
