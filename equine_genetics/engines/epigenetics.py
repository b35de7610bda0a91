"""At-birth epigenetic trait assignment from lineage, inbreeding and prenatal care."""

import math
from collections import Counter
from typing import Dict, List, Optional, Any, Sequence
from dataclasses import dataclass, field

import structlog

from ..config import EpigeneticConfig, DEFAULT_CONFIG
from ..exceptions import MissingParentDataError
from ..models.traits import TraitSet, TraitCategory
from .trait_catalog import discipline_affinity_trait

logger = structlog.get_logger(__name__)


@dataclass
class AncestorRecord:
    """
    One ancestor as seen from the foal.

    generation is 1 for the parents themselves, 2 for grandparents, and so on.
    """
    animal_id: int
    generation: int
    discipline: Optional[str] = None
    discipline_scores: Dict[str, float] = field(default_factory=dict)

    def best_discipline(self) -> Optional[str]:
        if self.discipline:
            return self.discipline
        if self.discipline_scores:
            return max(sorted(self.discipline_scores), key=lambda d: self.discipline_scores[d])
        return None


@dataclass
class LineageAnalysis:
    """Discipline concentration across the foal's ancestry."""
    specialized: bool = False
    discipline: Optional[str] = None
    strength: float = 0.0
    ancestor_count: int = 0
    discipline_counts: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'specialized': self.specialized,
            'discipline': self.discipline,
            'strength': self.strength,
            'ancestor_count': self.ancestor_count,
            'discipline_counts': dict(self.discipline_counts),
        }


@dataclass
class InbreedingAnalysis:
    """Ancestors appearing on both the sire and dam side."""
    detected: bool = False
    common_ancestors: List[int] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {'detected': self.detected, 'common_ancestors': list(self.common_ancestors)}


@dataclass
class BreedingAnalysis:
    lineage: LineageAnalysis
    inbreeding: InbreedingAnalysis
    mare_stress: float
    feed_quality: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            'lineage': self.lineage.to_dict(),
            'inbreeding': self.inbreeding.to_dict(),
            'mare_stress': self.mare_stress,
            'feed_quality': self.feed_quality,
        }


@dataclass
class EpigeneticResult:
    """Trait set assigned at birth plus the analysis that produced it."""
    traits: TraitSet
    analysis: BreedingAnalysis


def _side_ids(parent_id: int, lineage: Sequence[AncestorRecord], max_generation: int) -> set:
    ids = {parent_id}
    ids.update(a.animal_id for a in lineage if a.generation <= max_generation)
    return ids


def detect_inbreeding(
    sire_id: int,
    dam_id: int,
    sire_lineage: Sequence[AncestorRecord],
    dam_lineage: Sequence[AncestorRecord],
    generations: int,
) -> InbreedingAnalysis:
    """
    Find ancestors shared by the sire and dam sides within a bounded depth.

    Each side includes the parent itself, so a sire that is also the dam's
    ancestor counts as a common ancestor.

    Args:
        sire_id: Sire identifier
        dam_id: Dam identifier
        sire_lineage: Sire-side ancestors (sire at generation 1)
        dam_lineage: Dam-side ancestors (dam at generation 1)
        generations: Deepest generation scanned

    Returns:
        InbreedingAnalysis with sorted common ancestor ids
    """
    common = _side_ids(sire_id, sire_lineage, generations) & _side_ids(dam_id, dam_lineage, generations)
    return InbreedingAnalysis(detected=bool(common), common_ancestors=sorted(common))


def analyze_lineage(
    ancestors: Sequence[AncestorRecord],
    config: EpigeneticConfig = DEFAULT_CONFIG.epigenetics,
) -> LineageAnalysis:
    """
    Measure how strongly the ancestry concentrates in a single discipline.

    Args:
        ancestors: Ancestors from both sides; duplicates by id are counted once
        config: Epigenetic tunables

    Returns:
        LineageAnalysis; specialized when the top discipline has enough
        ancestors and a large enough share
    """
    seen = set()
    disciplines = []
    for ancestor in ancestors:
        if ancestor.animal_id in seen or ancestor.generation > config.inbreeding_generations:
            continue
        seen.add(ancestor.animal_id)
        discipline = ancestor.best_discipline()
        if discipline:
            disciplines.append(discipline)

    if not disciplines:
        return LineageAnalysis()

    counts = Counter(disciplines)
    top_discipline, top_count = sorted(counts.items(), key=lambda item: (-item[1], item[0]))[0]
    strength = top_count / len(disciplines)
    specialized = (
        top_count >= config.specialization_min_ancestors
        and strength >= config.specialization_min_strength
    )
    return LineageAnalysis(
        specialized=specialized,
        discipline=top_discipline if specialized else None,
        strength=strength,
        ancestor_count=top_count,
        discipline_counts=dict(counts),
    )


def _level(value: Optional[float], default: float, name: str) -> float:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        raise ValueError(f"{name} must be a number, got {value!r}")
    return float(value)


def _roll(trait: str, chances: Dict[str, float], rng) -> bool:
    return rng.random() < chances.get(trait, 0.0)


def apply_epigenetic_traits_at_birth(
    sire_id: Optional[int],
    dam_id: Optional[int],
    sire_lineage: Sequence[AncestorRecord],
    dam_lineage: Sequence[AncestorRecord],
    rng,
    mare_stress: Optional[float] = None,
    feed_quality: Optional[float] = None,
    existing_traits: Optional[TraitSet] = None,
    config: EpigeneticConfig = DEFAULT_CONFIG.epigenetics,
) -> EpigeneticResult:
    """
    Assign a newborn foal's initial positive/negative/hidden traits.

    Conditions are evaluated in a fixed order and each satisfied condition
    rolls once against its trait chance. The new traits are merged into
    existing_traits rather than replacing them.

    Args:
        sire_id: Sire identifier
        dam_id: Dam identifier
        sire_lineage: Sire-side ancestors, sire at generation 1
        dam_lineage: Dam-side ancestors, dam at generation 1
        rng: Random source
        mare_stress: Dam's stress level during pregnancy (0-100)
        feed_quality: Dam's feed quality during pregnancy (0-100)
        existing_traits: Traits already on the foal record
        config: Epigenetic tunables

    Returns:
        EpigeneticResult with the merged trait set and breeding analysis

    Raises:
        MissingParentDataError: If either parent identifier is missing
        ValueError: If mare_stress or feed_quality is not a number
    """
    if sire_id is None or dam_id is None:
        raise MissingParentDataError("Both sire and dam are required for at-birth traits")

    stress = _level(mare_stress, config.default_mare_stress, 'mare_stress')
    feed = _level(feed_quality, config.default_feed_quality, 'feed_quality')
    chances = config.trait_chances

    inbreeding = detect_inbreeding(sire_id, dam_id, sire_lineage, dam_lineage,
                                   config.inbreeding_generations)
    lineage = analyze_lineage(list(sire_lineage) + list(dam_lineage), config)

    conditions = [
        ('hardy', TraitCategory.POSITIVE,
         stress <= config.low_stress_max and feed >= config.premium_feed_min),
        ('well_bred', TraitCategory.POSITIVE,
         stress <= config.well_bred_stress_max and feed >= config.well_bred_feed_min
         and not inbreeding.detected),
        ('premium_care', TraitCategory.POSITIVE,
         stress <= config.premium_care_stress_max and feed >= config.premium_care_feed_min),
        ('inbred', TraitCategory.NEGATIVE, inbreeding.detected),
        ('low_immunity', TraitCategory.NEGATIVE, inbreeding.detected),
        ('weak_constitution', TraitCategory.NEGATIVE,
         stress >= config.weak_constitution_stress_min and feed <= config.weak_constitution_feed_max),
        ('stressed_lineage', TraitCategory.NEGATIVE, stress >= config.high_stress_min),
        ('poor_nutrition', TraitCategory.NEGATIVE, feed <= config.poor_nutrition_feed_max),
        ('specialized_lineage', TraitCategory.POSITIVE, lineage.specialized),
        ('discipline_affinity', TraitCategory.POSITIVE, lineage.specialized),
        ('legacy_talent', TraitCategory.POSITIVE,
         lineage.specialized and lineage.ancestor_count >= config.legacy_talent_min_ancestors),
    ]

    new_traits = TraitSet()
    for chance_key, category, satisfied in conditions:
        if not satisfied or not _roll(chance_key, chances, rng):
            continue
        trait = chance_key
        if chance_key == 'discipline_affinity':
            trait = discipline_affinity_trait(lineage.discipline)
        new_traits.place(trait, category)
        logger.info("epigenetic_trait_applied", trait=trait, category=category.value)

    if len(new_traits.positive) > 2 and _roll('hidden_potential', chances, rng):
        candidates = sorted(new_traits.positive)
        hidden = candidates[int(rng.integers(0, len(candidates)))]
        new_traits.place(hidden, TraitCategory.HIDDEN)
        logger.info("epigenetic_trait_hidden", trait=hidden)

    traits = (existing_traits or TraitSet()).merge(new_traits)
    analysis = BreedingAnalysis(
        lineage=lineage,
        inbreeding=inbreeding,
        mare_stress=stress,
        feed_quality=feed,
    )
    logger.info(
        "epigenetic_traits_assigned",
        sire_id=sire_id,
        dam_id=dam_id,
        positive=sorted(new_traits.positive),
        negative=sorted(new_traits.negative),
        hidden=sorted(new_traits.hidden),
        inbreeding=inbreeding.detected,
        specialized_discipline=lineage.discipline,
    )
    return EpigeneticResult(traits=traits, analysis=analysis)
