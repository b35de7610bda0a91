"""Caregiving trait-influence accumulator."""

from typing import Dict, List, Optional, Tuple
from dataclasses import dataclass, field

import structlog

from ..config import InfluenceConfig, DEFAULT_CONFIG
from ..models.traits import TraitSet, TraitCategory, InfluenceCounters

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class TaskInfluence:
    """Traits a caregiving task pushes toward and away from."""
    encourages: Tuple[str, ...] = ()
    discourages: Tuple[str, ...] = ()


TASK_TRAIT_INFLUENCE: Dict[str, TaskInfluence] = {
    'daily_care': TaskInfluence(encourages=('calm',), discourages=('nervous',)),
    'grooming': TaskInfluence(encourages=('calm', 'resilient'), discourages=('aggressive',)),
    'feeding': TaskInfluence(encourages=('resilient',), discourages=('fragile',)),
    'gentle_handling': TaskInfluence(encourages=('calm',), discourages=('nervous', 'aggressive')),
    'human_interaction': TaskInfluence(encourages=('intelligent',), discourages=('stubborn',)),
    'social_play': TaskInfluence(encourages=('bold',), discourages=('nervous',)),
    'exercise': TaskInfluence(encourages=('athletic',), discourages=('lazy',)),
    'obstacle_course': TaskInfluence(encourages=('bold', 'athletic'), discourages=('nervous',)),
    'free_play': TaskInfluence(encourages=('athletic',), discourages=('lazy',)),
    'puzzle_feeding': TaskInfluence(encourages=('intelligent',), discourages=('lazy',)),
    'sensory_exposure': TaskInfluence(encourages=('resilient', 'bold'), discourages=('nervous',)),
    'learning_games': TaskInfluence(encourages=('intelligent', 'trainability_boost'),
                                    discourages=('stubborn',)),
}


@dataclass
class FixedTrait:
    trait: str
    category: str
    epigenetic: bool

    def to_dict(self):
        return {'trait': self.trait, 'category': self.category, 'epigenetic': self.epigenetic}


@dataclass
class InfluenceResult:
    """Outcome of one accepted caregiving task."""
    counters: InfluenceCounters
    traits: TraitSet
    newly_fixed: List[FixedTrait] = field(default_factory=list)


def _clamp_counter(value: int, ceiling: int) -> int:
    return max(-ceiling, min(ceiling, value))


def _fix_trait(traits: TraitSet, trait: str, category: TraitCategory,
               epigenetic: bool) -> Optional[FixedTrait]:
    if traits.contains(trait, category):
        return None
    traits.place(trait, category)
    if epigenetic:
        traits.epigenetic.add(trait)
    else:
        traits.epigenetic.discard(trait)
    return FixedTrait(trait=trait, category=category.value, epigenetic=epigenetic)


def apply_caregiving_influence(
    age_days: int,
    task_type: str,
    counters: Optional[InfluenceCounters],
    traits: Optional[TraitSet],
    config: InfluenceConfig = DEFAULT_CONFIG.influence,
) -> InfluenceResult:
    """
    Apply one accepted caregiving task to an animal's influence counters.

    Encouraged traits move up by the configured increment and discouraged
    traits move down. A counter whose magnitude reaches the permanence
    threshold fixes its trait into the positive (up) or negative (down) set
    and is cleared. Traits fixed before the developmental cutoff are flagged
    epigenetic. Neither input is modified.

    Args:
        age_days: Animal age in days at the time of the task
        task_type: Caregiving task identifier
        counters: Current influence counters
        traits: Current trait set
        config: Influence tunables

    Returns:
        InfluenceResult with new counters, new trait set and the traits fixed by this task
    """
    new_counters: InfluenceCounters = dict(counters or {})
    new_traits = traits.copy() if traits is not None else TraitSet()

    influence = TASK_TRAIT_INFLUENCE.get(task_type)
    if influence is None:
        logger.warning("caregiving_task_unknown", task_type=task_type)
        return InfluenceResult(counters=new_counters, traits=new_traits)

    threshold = config.permanence_threshold
    epigenetic = age_days < config.epigenetic_cutoff_days
    deltas = [(t, config.increment) for t in influence.encourages]
    deltas += [(t, -config.increment) for t in influence.discourages]

    newly_fixed = []
    for trait, delta in deltas:
        value = _clamp_counter(new_counters.get(trait, 0) + delta, threshold)
        if abs(value) < threshold:
            new_counters[trait] = value
            continue

        new_counters.pop(trait, None)
        category = TraitCategory.POSITIVE if value > 0 else TraitCategory.NEGATIVE
        fixed = _fix_trait(new_traits, trait, category, epigenetic)
        if fixed is None:
            logger.debug("influence_trait_already_fixed", trait=trait, category=category.value)
            continue
        newly_fixed.append(fixed)
        logger.info(
            "influence_trait_fixed",
            trait=trait,
            category=category.value,
            epigenetic=epigenetic,
            task_type=task_type,
        )

    return InfluenceResult(counters=new_counters, traits=new_traits, newly_fixed=newly_fixed)
