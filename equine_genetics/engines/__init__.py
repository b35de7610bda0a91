"""Genetics and trait engines for equine_genetics."""

from .ratings import generate_attribute_score, generate_store_horse_ratings, calculate_foal_ratings
from .temperament import (
    select_weighted_random, determine_store_horse_temperament,
    adjust_weights_for_parents, determine_foal_temperament,
)
from .genetics import generate_store_genotype, calculate_foal_genotype
from .phenotype import determine_phenotype
from .trait_catalog import TRAIT_CATALOG, get_trait_category, get_trait_definition
from .trait_effects import (
    TraitEffectBundle, get_trait_effects, get_all_trait_effects,
    has_trait_effect, get_combined_trait_effects,
)
from .epigenetics import AncestorRecord, EpigeneticResult, apply_epigenetic_traits_at_birth
from .discovery import (
    DISCOVERY_CONDITIONS, DiscoveryResult, DiscoveryEvent,
    reveal_traits, get_discovery_progress, batch_reveal_traits,
)
from .influence import TASK_TRAIT_INFLUENCE, InfluenceResult, apply_caregiving_influence

__all__ = [
    'generate_attribute_score', 'generate_store_horse_ratings', 'calculate_foal_ratings',
    'select_weighted_random', 'determine_store_horse_temperament',
    'adjust_weights_for_parents', 'determine_foal_temperament',
    'generate_store_genotype', 'calculate_foal_genotype',
    'determine_phenotype',
    'TRAIT_CATALOG', 'get_trait_category', 'get_trait_definition',
    'TraitEffectBundle', 'get_trait_effects', 'get_all_trait_effects',
    'has_trait_effect', 'get_combined_trait_effects',
    'AncestorRecord', 'EpigeneticResult', 'apply_epigenetic_traits_at_birth',
    'DISCOVERY_CONDITIONS', 'DiscoveryResult', 'DiscoveryEvent',
    'reveal_traits', 'get_discovery_progress', 'batch_reveal_traits',
    'TASK_TRAIT_INFLUENCE', 'InfluenceResult', 'apply_caregiving_influence',
]
