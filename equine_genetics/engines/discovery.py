"""Post-birth trait discovery: reveal hidden traits when care conditions are met."""

from collections import Counter
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Any
from dataclasses import dataclass, field

import structlog

from ..config import DiscoveryConfig, DEFAULT_CONFIG
from ..exceptions import IneligibleAnimalError
from ..models.animal import AnimalRecord
from ..models.traits import TraitSet
from .trait_catalog import get_trait_category, get_trait_definition

logger = structlog.get_logger(__name__)

REVEAL_ALL = 'all_hidden'

SOCIAL_ACTIVITIES = ('gentle_handling', 'human_interaction', 'social_play')
PHYSICAL_ACTIVITIES = ('exercise', 'obstacle_course', 'free_play')
MENTAL_ACTIVITIES = ('puzzle_feeding', 'sensory_exposure', 'learning_games')


@dataclass(frozen=True)
class DiscoveryInputs:
    """Snapshot of the values discovery predicates look at."""
    bond_score: float
    stress_level: float
    development_day: int
    activity_counts: Mapping[str, int]

    @classmethod
    def from_animal(cls, animal: AnimalRecord, activities: Sequence[str]) -> 'DiscoveryInputs':
        return cls(
            bond_score=animal.bond_score,
            stress_level=animal.stress_level,
            development_day=animal.development_day,
            activity_counts=Counter(activities),
        )

    def count(self, names: Sequence[str]) -> int:
        return sum(self.activity_counts.get(name, 0) for name in names)


@dataclass(frozen=True)
class DiscoveryCondition:
    """A named predicate plus the hidden traits it may reveal."""
    key: str
    name: str
    description: str
    predicate: Callable[[DiscoveryInputs, DiscoveryConfig], bool]
    progress: Callable[[DiscoveryInputs, DiscoveryConfig], float]
    revealable_traits: Tuple[str, ...]


def _pct(value: float) -> int:
    return int(max(0, min(100, round(value))))


def _stress_progress(stress: float, max_stress: float) -> float:
    if stress <= max_stress:
        return 100.0
    return (100 - stress) / (100 - max_stress) * 100


def _activity_condition(key, name, activities, traits) -> DiscoveryCondition:
    return DiscoveryCondition(
        key=key,
        name=name,
        description=f"Completed enough {', '.join(activities)} activities",
        predicate=lambda s, c: s.count(activities) >= c.enrichment_activity_count,
        progress=lambda s, c: s.count(activities) / c.enrichment_activity_count * 100,
        revealable_traits=traits,
    )


DISCOVERY_CONDITIONS: Dict[str, DiscoveryCondition] = {c.key: c for c in (
    DiscoveryCondition(
        key='high_bonding',
        name='High Bonding Achievement',
        description='Bond score reached the high-bonding threshold',
        predicate=lambda s, c: s.bond_score >= c.high_bonding_min,
        progress=lambda s, c: s.bond_score / c.high_bonding_min * 100,
        revealable_traits=('intelligent', 'calm', 'trainability_boost', 'legendary_bloodline'),
    ),
    DiscoveryCondition(
        key='low_stress',
        name='Low Stress Achievement',
        description='Stress level dropped to the low-stress threshold',
        predicate=lambda s, c: s.stress_level <= c.low_stress_max,
        progress=lambda s, c: _stress_progress(s.stress_level, c.low_stress_max),
        revealable_traits=('resilient', 'athletic', 'bold', 'weather_immunity'),
    ),
    _activity_condition('social_activities', 'Social Development', SOCIAL_ACTIVITIES,
                        ('calm', 'intelligent', 'trainability_boost')),
    _activity_condition('physical_activities', 'Physical Development', PHYSICAL_ACTIVITIES,
                        ('athletic', 'bold', 'resilient')),
    _activity_condition('mental_activities', 'Mental Development', MENTAL_ACTIVITIES,
                        ('intelligent', 'trainability_boost', 'night_vision')),
    DiscoveryCondition(
        key='perfect_care',
        name='Perfect Care Achievement',
        description='Optimal bonding with very low stress',
        predicate=lambda s, c: (s.bond_score >= c.perfect_care_bond_min
                                and s.stress_level <= c.perfect_care_stress_max),
        progress=lambda s, c: (
            min(100.0, s.bond_score / c.perfect_care_bond_min * 100)
            + _stress_progress(s.stress_level, c.perfect_care_stress_max)
        ) / 2,
        revealable_traits=('legendary_bloodline', 'weather_immunity', 'night_vision'),
    ),
    DiscoveryCondition(
        key='development_complete',
        name='Development Completion',
        description='Development period finished; all remaining traits surface',
        predicate=lambda s, c: s.development_day >= c.development_complete_day,
        progress=lambda s, c: s.development_day / c.development_complete_day * 100,
        revealable_traits=(REVEAL_ALL,),
    ),
)}


@dataclass
class RevealedTrait:
    trait: str
    category: str
    condition: str
    display_name: Optional[str] = None
    description: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'trait': self.trait,
            'category': self.category,
            'condition': self.condition,
            'display_name': self.display_name,
            'description': self.description,
        }


@dataclass
class DiscoveryEvent:
    """Audit record for one discovery pass that revealed something."""
    animal_id: Optional[int]
    development_day: int
    conditions_met: List[str]
    traits_revealed: List[RevealedTrait]

    @property
    def summary(self) -> str:
        return (f"Revealed {len(self.traits_revealed)} traits via "
                f"{len(self.conditions_met)} conditions")

    def to_dict(self) -> Dict[str, Any]:
        return {
            'animal_id': self.animal_id,
            'development_day': self.development_day,
            'conditions_met': list(self.conditions_met),
            'traits_revealed': [t.to_dict() for t in self.traits_revealed],
            'summary': self.summary,
        }


@dataclass
class DiscoveryResult:
    animal_id: Optional[int]
    conditions_met: List[str]
    traits_revealed: List[RevealedTrait]
    traits: TraitSet
    hidden_before: int
    hidden_after: int
    event: Optional[DiscoveryEvent] = None

    @property
    def changed(self) -> bool:
        return bool(self.traits_revealed)


@dataclass
class ConditionProgress:
    key: str
    name: str
    description: str
    met: bool
    revealable_traits: List[str]
    progress: int


@dataclass
class DiscoveryProgress:
    animal_id: Optional[int]
    bond_score: float
    stress_level: float
    development_day: int
    hidden_count: int
    conditions: Dict[str, ConditionProgress] = field(default_factory=dict)


@dataclass
class BatchDiscoveryOutcome:
    animal_id: Optional[int]
    result: Optional[DiscoveryResult] = None
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.error is None


def _check_eligible(animal: AnimalRecord, config: DiscoveryConfig) -> None:
    if animal.age_days > config.max_age_days:
        raise IneligibleAnimalError(
            f"Animal {animal.animal_id} is too old for trait discovery "
            f"({animal.age_days} days > {config.max_age_days})"
        )


def _reveal(traits: TraitSet, candidates, condition_key: str) -> List[RevealedTrait]:
    revealed = []
    for trait in candidates:
        if trait not in traits.hidden:
            continue
        category = get_trait_category(trait)
        if category is None:
            logger.warning("hidden_trait_uncataloged", trait=trait, condition=condition_key)
            continue
        traits.place(trait, category)
        definition = get_trait_definition(trait)
        revealed.append(RevealedTrait(
            trait=trait,
            category=category.value,
            condition=condition_key,
            display_name=definition.display_name if definition else None,
            description=definition.description if definition else None,
        ))
        logger.info("trait_revealed", trait=trait, category=category.value, condition=condition_key)
    return revealed


def reveal_traits(
    animal: AnimalRecord,
    activities: Sequence[str] = (),
    config: DiscoveryConfig = DEFAULT_CONFIG.discovery,
) -> DiscoveryResult:
    """
    Evaluate every discovery condition and move qualifying hidden traits to
    their fixed category.

    The input record is not modified. When nothing is hidden or no condition
    is met the result carries the unchanged trait set and no event.

    Args:
        animal: Young animal record
        activities: Names of enrichment activities completed so far
        config: Discovery tunables

    Returns:
        DiscoveryResult with the new trait set and, if anything changed, an audit event

    Raises:
        IneligibleAnimalError: If the animal is older than the discovery window
    """
    _check_eligible(animal, config)

    inputs = DiscoveryInputs.from_animal(animal, activities)
    traits = animal.traits.copy()
    hidden_before = len(traits.hidden)
    conditions_met = []
    revealed: List[RevealedTrait] = []

    for key, condition in DISCOVERY_CONDITIONS.items():
        if not condition.predicate(inputs, config):
            continue
        conditions_met.append(key)
        if REVEAL_ALL in condition.revealable_traits:
            candidates = sorted(traits.hidden)
        else:
            candidates = condition.revealable_traits
        revealed.extend(_reveal(traits, candidates, key))

    event = None
    if revealed:
        event = DiscoveryEvent(
            animal_id=animal.animal_id,
            development_day=animal.development_day,
            conditions_met=list(conditions_met),
            traits_revealed=list(revealed),
        )
        logger.info("trait_discovery", animal_id=animal.animal_id, summary=event.summary)
    else:
        logger.debug("trait_discovery_noop", animal_id=animal.animal_id,
                     conditions_met=conditions_met, hidden=hidden_before)

    return DiscoveryResult(
        animal_id=animal.animal_id,
        conditions_met=conditions_met,
        traits_revealed=revealed,
        traits=traits,
        hidden_before=hidden_before,
        hidden_after=len(traits.hidden),
        event=event,
    )


def get_discovery_progress(
    animal: AnimalRecord,
    activities: Sequence[str] = (),
    config: DiscoveryConfig = DEFAULT_CONFIG.discovery,
) -> DiscoveryProgress:
    """
    Report, per condition, whether it is met and a 0-100 completion estimate.

    Args:
        animal: Animal record
        activities: Names of enrichment activities completed so far
        config: Discovery tunables

    Returns:
        DiscoveryProgress
    """
    inputs = DiscoveryInputs.from_animal(animal, activities)
    progress = DiscoveryProgress(
        animal_id=animal.animal_id,
        bond_score=animal.bond_score,
        stress_level=animal.stress_level,
        development_day=animal.development_day,
        hidden_count=len(animal.traits.hidden),
    )
    for key, condition in DISCOVERY_CONDITIONS.items():
        progress.conditions[key] = ConditionProgress(
            key=key,
            name=condition.name,
            description=condition.description,
            met=condition.predicate(inputs, config),
            revealable_traits=list(condition.revealable_traits),
            progress=_pct(condition.progress(inputs, config)),
        )
    return progress


def batch_reveal_traits(
    animals: Sequence[AnimalRecord],
    activities_by_animal: Optional[Mapping[Any, Sequence[str]]] = None,
    config: DiscoveryConfig = DEFAULT_CONFIG.discovery,
) -> List[BatchDiscoveryOutcome]:
    """
    Run discovery for many animals, collecting failures instead of aborting.

    Args:
        animals: Animal records
        activities_by_animal: animal_id -> activity names
        config: Discovery tunables

    Returns:
        One outcome per animal, in input order
    """
    activities_by_animal = activities_by_animal or {}
    outcomes = []
    for animal in animals:
        try:
            result = reveal_traits(animal, activities_by_animal.get(animal.animal_id, ()), config)
            outcomes.append(BatchDiscoveryOutcome(animal_id=animal.animal_id, result=result))
        except IneligibleAnimalError as e:
            logger.error("batch_discovery_failed", animal_id=animal.animal_id, error=str(e))
            outcomes.append(BatchDiscoveryOutcome(animal_id=animal.animal_id, error=str(e)))
    return outcomes
