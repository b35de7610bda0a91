"""Trait effect table and order-independent merging of effect bundles."""

import math
from collections import defaultdict
from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Any, Union
from dataclasses import dataclass, field

import structlog

logger = structlog.get_logger(__name__)


class EffectKind(Enum):
    """Closed set of effect field kinds; each kind has its own merge rule."""
    NUMERIC = "numeric"  # summed
    BOOLEAN = "boolean"  # OR-ed
    NESTED = "nested"  # per-key sum


EFFECT_KINDS: Dict[str, EffectKind] = {
    **{name: EffectKind.NUMERIC for name in (
        'training_stress_reduction', 'training_consistency_bonus', 'competition_stress_resistance',
        'competition_score_modifier', 'stress_recovery_rate', 'injury_recovery_bonus',
        'training_focus_bonus', 'competition_focus_bonus', 'base_stress_reduction',
        'training_confidence_bonus', 'new_experience_adaptation', 'competition_confidence_boost',
        'competition_nerve_bonus', 'training_xp_modifier', 'stat_gain_chance_modifier',
        'training_time_reduction', 'learning_bonus', 'physical_training_bonus',
        'stamina_training_bonus', 'physical_bonus', 'endurance_bonus', 'training_success_rate',
        'consistency_bonus', 'training_stress_increase', 'training_inconsistency',
        'competition_stress_risk', 'competition_nerve_penalty', 'stress_accumulation',
        'training_motivation_penalty', 'training_time_increase', 'endurance_penalty',
        'motivation_decay', 'training_injury_risk', 'training_intensity_limit', 'injury_risk',
        'performance_inconsistency', 'injury_recovery_penalty', 'stress_recovery_penalty',
        'training_difficulty_increase', 'control_penalty', 'disqualification_risk',
        'training_resistance', 'new_skill_penalty', 'adaptability_penalty',
        'breeding_value_bonus', 'trait_inheritance_bonus', 'performance_decline',
    )},
    **{name: EffectKind.BOOLEAN for name in (
        'suppress_temperament_drift', 'temperament_stability', 'exploration_bonus',
        'problem_solving_bonus', 'memory_bonus', 'learning_acceleration', 'adaptability_bonus',
        'temperament_instability', 'activity_avoidance', 'trainer_safety_risk',
        'social_difficulty', 'unpredictable_behavior', 'command_resistance',
        'routine_preference', 'elite_training_access', 'prestige_bonus', 'stat_gain_blocked',
        'extended_rest_required',
    )},
    'discipline_modifiers': EffectKind.NESTED,
    'base_stat_boost': EffectKind.NESTED,
}


@dataclass(frozen=True)
class TraitEffectBundle:
    """
    Fixed-shape gameplay modifiers for one trait, or several traits combined.

    Numeric modifiers are percentage deltas (0.15 = 15%) unless the effect is a
    flat amount such as ``base_stress_reduction``.
    """
    modifiers: Mapping[str, float] = field(default_factory=dict)
    flags: FrozenSet[str] = frozenset()
    discipline_modifiers: Mapping[str, float] = field(default_factory=dict)
    base_stat_boost: Mapping[str, float] = field(default_factory=dict)

    def __post_init__(self):
        for name in self.modifiers:
            if EFFECT_KINDS.get(name) != EffectKind.NUMERIC:
                raise ValueError(f"Unknown numeric effect: {name}")
        for name in self.flags:
            if EFFECT_KINDS.get(name) != EffectKind.BOOLEAN:
                raise ValueError(f"Unknown boolean effect: {name}")

    @classmethod
    def from_effects(cls, **effects: Any) -> 'TraitEffectBundle':
        """
        Build a bundle from flat keyword effects, routing each by its kind.

        Raises:
            ValueError: If an effect name is not registered
        """
        modifiers = {}
        flags = set()
        nested: Dict[str, Dict[str, float]] = {'discipline_modifiers': {}, 'base_stat_boost': {}}
        for name, value in effects.items():
            kind = EFFECT_KINDS.get(name)
            if kind == EffectKind.NUMERIC:
                modifiers[name] = value
            elif kind == EffectKind.BOOLEAN:
                if value:
                    flags.add(name)
            elif kind == EffectKind.NESTED:
                nested[name] = dict(value)
            else:
                raise ValueError(f"Unknown trait effect: {name}")
        return cls(modifiers=modifiers, flags=frozenset(flags), **nested)

    def is_empty(self) -> bool:
        return not (self.modifiers or self.flags or self.discipline_modifiers or self.base_stat_boost)

    def has(self, effect: str) -> bool:
        """True if this bundle sets effect."""
        kind = EFFECT_KINDS.get(effect)
        if kind == EffectKind.NUMERIC:
            return effect in self.modifiers
        if kind == EffectKind.BOOLEAN:
            return effect in self.flags
        if kind == EffectKind.NESTED:
            return bool(getattr(self, effect))
        return False

    def get(self, effect: str) -> Union[float, bool, Dict[str, float], None]:
        """Value of effect: a number, a flag, a per-key map, or None when unset."""
        kind = EFFECT_KINDS.get(effect)
        if kind == EffectKind.NUMERIC:
            return self.modifiers.get(effect)
        if kind == EffectKind.BOOLEAN:
            return effect in self.flags
        if kind == EffectKind.NESTED:
            return dict(getattr(self, effect))
        return None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = dict(sorted(self.modifiers.items()))
        data.update({name: True for name in sorted(self.flags)})
        if self.discipline_modifiers:
            data['discipline_modifiers'] = dict(sorted(self.discipline_modifiers.items()))
        if self.base_stat_boost:
            data['base_stat_boost'] = dict(sorted(self.base_stat_boost.items()))
        return data


EMPTY_BUNDLE = TraitEffectBundle()

_ALL_DISCIPLINES = ('Racing', 'Dressage', 'Show Jumping', 'Cross Country', 'Endurance',
                    'Reining', 'Driving', 'Trail', 'Eventing')

TRAIT_EFFECTS: Dict[str, TraitEffectBundle] = {
    # Positive
    'resilient': TraitEffectBundle.from_effects(
        suppress_temperament_drift=True,
        training_stress_reduction=0.15,
        training_consistency_bonus=0.10,
        competition_stress_resistance=0.15,
        competition_score_modifier=0.03,
        stress_recovery_rate=1.25,
        injury_recovery_bonus=0.20,
        discipline_modifiers={'Cross Country': 0.05, 'Endurance': 0.06, 'Racing': 0.04},
    ),
    'calm': TraitEffectBundle.from_effects(
        suppress_temperament_drift=True,
        training_stress_reduction=0.20,
        training_focus_bonus=0.15,
        competition_stress_resistance=0.25,
        competition_focus_bonus=0.10,
        competition_score_modifier=0.025,
        base_stress_reduction=5,
        temperament_stability=True,
        discipline_modifiers={'Dressage': 0.05, 'Driving': 0.04, 'Trail': 0.03},
    ),
    'bold': TraitEffectBundle.from_effects(
        training_confidence_bonus=0.15,
        new_experience_adaptation=0.25,
        competition_confidence_boost=5,
        competition_score_modifier=0.035,
        competition_nerve_bonus=0.20,
        exploration_bonus=True,
        discipline_modifiers={'Show Jumping': 0.06, 'Cross Country': 0.05, 'Racing': 0.04},
    ),
    'intelligent': TraitEffectBundle.from_effects(
        training_xp_modifier=0.25,
        stat_gain_chance_modifier=0.15,
        training_time_reduction=0.10,
        competition_score_modifier=0.03,
        learning_bonus=0.25,
        problem_solving_bonus=True,
        memory_bonus=True,
        discipline_modifiers={'Dressage': 0.06, 'Reining': 0.05, 'Eventing': 0.04},
    ),
    'athletic': TraitEffectBundle.from_effects(
        physical_training_bonus=0.20,
        stamina_training_bonus=0.25,
        competition_score_modifier=0.05,
        physical_bonus=0.15,
        endurance_bonus=0.20,
        base_stat_boost={'stamina': 2, 'agility': 2, 'balance': 1},
        discipline_modifiers={'Racing': 0.07, 'Show Jumping': 0.06, 'Cross Country': 0.06},
    ),
    'trainability_boost': TraitEffectBundle.from_effects(
        training_xp_modifier=0.30,
        stat_gain_chance_modifier=0.20,
        training_success_rate=0.25,
        competition_score_modifier=0.04,
        consistency_bonus=0.30,
        learning_acceleration=True,
        adaptability_bonus=True,
        discipline_modifiers={'Dressage': 0.07, 'Reining': 0.06, 'Driving': 0.05},
    ),
    # Negative
    'nervous': TraitEffectBundle.from_effects(
        training_stress_increase=0.25,
        training_inconsistency=0.15,
        competition_stress_risk=10,
        competition_score_modifier=-0.04,
        competition_nerve_penalty=0.25,
        stress_accumulation=1.20,
        temperament_instability=True,
        discipline_modifiers={'Racing': -0.06, 'Show Jumping': -0.05, 'Eventing': -0.04},
    ),
    'lazy': TraitEffectBundle.from_effects(
        training_xp_modifier=-0.20,
        training_motivation_penalty=0.25,
        training_time_increase=0.15,
        competition_score_modifier=-0.035,
        endurance_penalty=0.20,
        activity_avoidance=True,
        motivation_decay=0.10,
        discipline_modifiers={'Endurance': -0.08, 'Cross Country': -0.06, 'Racing': -0.05},
    ),
    'fragile': TraitEffectBundle.from_effects(
        training_injury_risk=0.30,
        training_intensity_limit=0.20,
        competition_score_modifier=-0.035,
        injury_risk=0.30,
        performance_inconsistency=0.25,
        injury_recovery_penalty=0.30,
        stress_recovery_penalty=0.15,
        discipline_modifiers={'Cross Country': -0.08, 'Show Jumping': -0.06, 'Racing': -0.05},
    ),
    'aggressive': TraitEffectBundle.from_effects(
        training_difficulty_increase=0.25,
        trainer_safety_risk=True,
        competition_score_modifier=-0.045,
        control_penalty=0.35,
        disqualification_risk=0.15,
        social_difficulty=True,
        unpredictable_behavior=True,
        discipline_modifiers={'Dressage': -0.08, 'Driving': -0.07, 'Trail': -0.06},
    ),
    'stubborn': TraitEffectBundle.from_effects(
        training_xp_modifier=-0.15,
        training_resistance=0.30,
        new_skill_penalty=0.25,
        competition_score_modifier=-0.03,
        adaptability_penalty=0.20,
        command_resistance=True,
        routine_preference=True,
        discipline_modifiers={'Dressage': -0.06, 'Reining': -0.05, 'Eventing': -0.04},
    ),
    # Rare
    'legendary_bloodline': TraitEffectBundle.from_effects(
        training_xp_modifier=0.50,
        stat_gain_chance_modifier=0.30,
        elite_training_access=True,
        competition_score_modifier=0.08,
        prestige_bonus=True,
        base_stat_boost={'stamina': 3, 'agility': 3, 'balance': 2, 'focus': 2},
        breeding_value_bonus=0.50,
        trait_inheritance_bonus=0.25,
        discipline_modifiers=dict(zip(
            _ALL_DISCIPLINES, (0.10, 0.08, 0.08, 0.08, 0.08, 0.06, 0.06, 0.06, 0.08)
        )),
    ),
    'burnout': TraitEffectBundle.from_effects(
        stat_gain_blocked=True,
        training_xp_modifier=-0.50,
        training_motivation_penalty=0.50,
        competition_score_modifier=-0.10,
        performance_decline=0.30,
        extended_rest_required=True,
        stress_recovery_penalty=0.40,
        activity_avoidance=True,
        motivation_decay=0.25,
        discipline_modifiers=dict(zip(
            _ALL_DISCIPLINES, (-0.12, -0.10, -0.10, -0.12, -0.15, -0.08, -0.08, -0.06, -0.10)
        )),
    ),
}


def get_trait_effects(trait_name: Any) -> Optional[TraitEffectBundle]:
    """
    Look up the effect bundle for a trait.

    Args:
        trait_name: Trait identifier

    Returns:
        TraitEffectBundle, or None (with a warning) for invalid or unknown traits
    """
    if not isinstance(trait_name, str) or not trait_name:
        logger.warning("trait_name_invalid", trait=trait_name)
        return None
    bundle = TRAIT_EFFECTS.get(trait_name)
    if bundle is None:
        logger.warning("trait_effects_undefined", trait=trait_name)
    return bundle


def get_all_trait_effects() -> Dict[str, TraitEffectBundle]:
    return dict(TRAIT_EFFECTS)


def has_trait_effect(trait_name: str, effect: str) -> bool:
    """True if trait_name is known and its bundle sets effect."""
    bundle = get_trait_effects(trait_name)
    return bundle is not None and bundle.has(effect)


def _sum_nested(maps: Iterable[Mapping[str, float]]) -> Dict[str, float]:
    collected: Dict[str, List[float]] = defaultdict(list)
    for mapping in maps:
        for key, value in mapping.items():
            collected[key].append(value)
    return {key: math.fsum(values) for key, values in sorted(collected.items())}


def combine_bundles(bundles: Iterable[TraitEffectBundle]) -> TraitEffectBundle:
    """
    Reduce bundles into one.

    Numeric effects sum, flags OR, nested maps sum per key. Sums use
    ``math.fsum`` so the result is exact up to a single final rounding and
    therefore independent of bundle order and grouping.

    Args:
        bundles: Bundles to merge

    Returns:
        Combined TraitEffectBundle (empty when bundles is empty)
    """
    bundles = list(bundles)
    numeric: Dict[str, List[float]] = defaultdict(list)
    flags = set()
    for bundle in bundles:
        for name, value in bundle.modifiers.items():
            numeric[name].append(value)
        flags.update(bundle.flags)

    return TraitEffectBundle(
        modifiers={name: math.fsum(values) for name, values in sorted(numeric.items())},
        flags=frozenset(flags),
        discipline_modifiers=_sum_nested(b.discipline_modifiers for b in bundles),
        base_stat_boost=_sum_nested(b.base_stat_boost for b in bundles),
    )


def get_combined_trait_effects(trait_names: Any) -> TraitEffectBundle:
    """
    Combine the effect bundles of several traits.

    Unknown traits contribute nothing. The result does not depend on the order
    of trait_names.

    Args:
        trait_names: Trait identifiers (list, tuple or set)

    Returns:
        Combined TraitEffectBundle; empty for an animal with no traits
    """
    if not isinstance(trait_names, (list, tuple, set, frozenset)):
        logger.warning("trait_names_invalid", trait_names=trait_names)
        return EMPTY_BUNDLE

    bundles = [b for b in (get_trait_effects(name) for name in trait_names) if b is not None]
    return combine_bundles(bundles)
