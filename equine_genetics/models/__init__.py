"""Domain models for equine_genetics."""

from .breed import BreedProfile, GeneticProfile
from .ratings import AttributeRatings, CONFORMATION_ATTRIBUTES, GAIT_ATTRIBUTES, GAITING
from .genotype import Genotype, Phenotype, Marking, BOOLEAN_MODIFIERS
from .traits import TraitSet, TraitCategory, InfluenceCounters
from .animal import AnimalRecord

__all__ = [
    'BreedProfile', 'GeneticProfile',
    'AttributeRatings', 'CONFORMATION_ATTRIBUTES', 'GAIT_ATTRIBUTES', 'GAITING',
    'Genotype', 'Phenotype', 'Marking', 'BOOLEAN_MODIFIERS',
    'TraitSet', 'TraitCategory', 'InfluenceCounters',
    'AnimalRecord',
]
