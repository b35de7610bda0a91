"""Static catalog of trait identifiers, their categories and conflicts."""

from typing import Dict, FrozenSet, List, Optional
from dataclasses import dataclass

from ..models.traits import TraitCategory

DISCIPLINE_AFFINITY_PREFIX = 'discipline_affinity_'


@dataclass(frozen=True)
class TraitDefinition:
    """Catalog entry for one trait identifier."""
    name: str
    display_name: str
    category: TraitCategory
    rarity: str
    description: str

    def __post_init__(self):
        if self.category == TraitCategory.HIDDEN:
            raise ValueError(f"Trait {self.name} must be cataloged as positive or negative")
        if self.rarity not in ('common', 'rare', 'legendary'):
            raise ValueError(f"Invalid rarity for {self.name}: {self.rarity}")


def _define(name, category, rarity, description):
    display_name = ' '.join(word.capitalize() for word in name.split('_'))
    return TraitDefinition(name, display_name, category, rarity, description)


_P = TraitCategory.POSITIVE
_N = TraitCategory.NEGATIVE

_DEFINITIONS = [
    # Temperament-linked traits revealed by discovery
    _define('resilient', _P, 'common', 'Faster stress recovery and improved training consistency'),
    _define('calm', _P, 'common', 'Reduced stress accumulation and improved focus'),
    _define('intelligent', _P, 'common', 'Accelerated learning and improved skill retention'),
    _define('bold', _P, 'common', 'Enhanced competition performance and better adaptability'),
    _define('athletic', _P, 'rare', 'Improved physical stats and better movement quality'),
    _define('trainability_boost', _P, 'rare', 'Major training efficiency bonus'),
    _define('nervous', _N, 'common', 'Increased stress sensitivity, requires gentle approach'),
    _define('stubborn', _N, 'common', 'Slower initial learning, increased training time'),
    _define('fragile', _N, 'common', 'Higher injury risk, requires careful management'),
    _define('aggressive', _N, 'common', 'Handling challenges and social difficulties'),
    _define('lazy', _N, 'common', 'Reduced training efficiency, requires motivation'),
    _define('burnout', _N, 'rare', 'Overtraining has blocked stat gains until extended rest'),
    # Rare traits always surface as positive
    _define('legendary_bloodline', _P, 'legendary', 'Exceptional heritage with superior potential'),
    _define('weather_immunity', _P, 'rare', 'Environmental resistance to weather conditions'),
    _define('night_vision', _P, 'rare', 'Enhanced performance in low-light conditions'),
    # Traits assigned at birth
    _define('hardy', _P, 'common', 'Born to a low-stress, well-fed mare'),
    _define('well_bred', _P, 'common', 'Good prenatal care without inbreeding'),
    _define('premium_care', _P, 'rare', 'Exceptional prenatal care'),
    _define('specialized_lineage', _P, 'rare', 'Ancestry concentrated in one discipline'),
    _define('legacy_talent', _P, 'rare', 'Strong multi-generation discipline legacy'),
    _define('inbred', _N, 'common', 'Common ancestors on both sides of the pedigree'),
    _define('low_immunity', _N, 'common', 'Weakened immune response from a narrow pedigree'),
    _define('weak_constitution', _N, 'common', 'High prenatal stress combined with poor feed'),
    _define('stressed_lineage', _N, 'common', 'Dam carried the foal under high stress'),
    _define('poor_nutrition', _N, 'common', 'Dam was poorly fed during pregnancy'),
]

TRAIT_CATALOG: Dict[str, TraitDefinition] = {d.name: d for d in _DEFINITIONS}

# Reverse index, built once
CATEGORY_INDEX: Dict[str, TraitCategory] = {d.name: d.category for d in _DEFINITIONS}

RARE_TRAITS: FrozenSet[str] = frozenset(['legendary_bloodline', 'weather_immunity', 'night_vision'])

TRAIT_CONFLICTS: Dict[str, FrozenSet[str]] = {
    'calm': frozenset(['nervous', 'aggressive']),
    'resilient': frozenset(['fragile']),
    'bold': frozenset(['nervous']),
    'intelligent': frozenset(['lazy']),
    'athletic': frozenset(['fragile']),
    'trainability_boost': frozenset(['stubborn']),
    'nervous': frozenset(['calm', 'bold']),
    'aggressive': frozenset(['calm']),
    'fragile': frozenset(['resilient', 'athletic']),
    'lazy': frozenset(['intelligent']),
    'stubborn': frozenset(['trainability_boost']),
}


def discipline_affinity_trait(discipline: str) -> str:
    """Trait identifier for an affinity to discipline, e.g. 'discipline_affinity_show_jumping'."""
    return DISCIPLINE_AFFINITY_PREFIX + discipline.strip().lower().replace(' ', '_')


def get_trait_category(trait: str) -> Optional[TraitCategory]:
    """
    Look up the fixed category of a trait identifier.

    Args:
        trait: Trait identifier

    Returns:
        POSITIVE or NEGATIVE, or None for traits not in the catalog
    """
    category = CATEGORY_INDEX.get(trait)
    if category is None and trait.startswith(DISCIPLINE_AFFINITY_PREFIX):
        return TraitCategory.POSITIVE
    return category


def get_trait_definition(trait: str) -> Optional[TraitDefinition]:
    return TRAIT_CATALOG.get(trait)


def conflicts_with(trait: str, others) -> List[str]:
    """Traits among others that cannot coexist with trait, sorted."""
    blocked = TRAIT_CONFLICTS.get(trait, frozenset())
    return sorted(blocked.intersection(others))
