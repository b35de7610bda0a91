"""Animal record model for equine_genetics."""

from typing import Dict, Optional, Any
from dataclasses import dataclass, field

from .genotype import Genotype, Phenotype
from .ratings import AttributeRatings
from .traits import TraitSet, InfluenceCounters

DAYS_PER_YEAR = 365


@dataclass
class AnimalRecord:
    """
    Plain record for a single horse as exchanged with the record store.

    Genotype, phenotype, ratings and temperament are fixed at creation.
    Traits and influence counters evolve over the animal's early life.
    """
    name: str
    breed: str
    age_days: int = 0
    sex: Optional[str] = None
    sire_id: Optional[int] = None
    dam_id: Optional[int] = None
    genotype: Genotype = field(default_factory=dict)
    phenotype: Optional[Phenotype] = None
    ratings: AttributeRatings = field(default_factory=AttributeRatings)
    temperament: Optional[str] = None
    traits: TraitSet = field(default_factory=TraitSet)
    influence_counters: InfluenceCounters = field(default_factory=dict)
    bond_score: float = 50.0
    stress_level: float = 0.0
    development_day: int = 0
    discipline: Optional[str] = None
    discipline_scores: Dict[str, float] = field(default_factory=dict)
    animal_id: Optional[int] = None

    def __post_init__(self):
        """Validate record data."""
        if self.age_days < 0:
            raise ValueError(f"age_days must be non-negative, got {self.age_days}")
        if self.sex is not None and self.sex not in ['stallion', 'mare', 'gelding', 'colt', 'filly']:
            raise ValueError(f"Invalid sex: {self.sex}")
        if self.sire_id is not None and self.sire_id == self.dam_id:
            raise ValueError("Sire and dam must be different animals")

    @property
    def age_years(self) -> float:
        return self.age_days / DAYS_PER_YEAR

    @property
    def has_parents(self) -> bool:
        return self.sire_id is not None and self.dam_id is not None

    def best_discipline(self) -> Optional[str]:
        """
        Discipline this animal is known for.

        Returns:
            Explicit discipline if set, otherwise the highest-scoring entry of
            discipline_scores, otherwise None
        """
        if self.discipline:
            return self.discipline
        if self.discipline_scores:
            return max(sorted(self.discipline_scores), key=lambda d: self.discipline_scores[d])
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'animal_id': self.animal_id,
            'name': self.name,
            'breed': self.breed,
            'age_days': self.age_days,
            'sex': self.sex,
            'sire_id': self.sire_id,
            'dam_id': self.dam_id,
            'genotype': dict(self.genotype),
            'phenotype': self.phenotype.to_dict() if self.phenotype else None,
            'ratings': self.ratings.to_dict(),
            'temperament': self.temperament,
            'traits': self.traits.to_dict(),
            'influence_counters': dict(self.influence_counters),
            'bond_score': self.bond_score,
            'stress_level': self.stress_level,
            'development_day': self.development_day,
            'discipline': self.discipline,
            'discipline_scores': dict(self.discipline_scores),
        }
