"""Trait set model for equine_genetics."""

from enum import Enum
from typing import Dict, Iterable, List, Optional, Set, Any
from dataclasses import dataclass, field

# Trait identifier -> signed influence accumulator
InfluenceCounters = Dict[str, int]


class TraitCategory(Enum):
    """Buckets a trait identifier can occupy on an animal."""
    POSITIVE = "positive"
    NEGATIVE = "negative"
    HIDDEN = "hidden"


@dataclass
class TraitSet:
    """
    Three disjoint sets of trait identifiers plus the epigenetic subset.

    A trait appears in at most one of positive/negative/hidden. The
    epigenetic subset only ever references traits in positive or negative.
    """
    positive: Set[str] = field(default_factory=set)
    negative: Set[str] = field(default_factory=set)
    hidden: Set[str] = field(default_factory=set)
    epigenetic: Set[str] = field(default_factory=set)

    def __post_init__(self):
        """Validate disjointness."""
        self.positive = set(self.positive)
        self.negative = set(self.negative)
        self.hidden = set(self.hidden)
        self.epigenetic = set(self.epigenetic)

        overlap = (
            (self.positive & self.negative)
            | (self.positive & self.hidden)
            | (self.negative & self.hidden)
        )
        if overlap:
            raise ValueError(f"Traits appear in more than one category: {sorted(overlap)}")
        stray = self.epigenetic - (self.positive | self.negative)
        if stray:
            raise ValueError(f"Epigenetic traits must be positive or negative: {sorted(stray)}")

    def _bucket(self, category: TraitCategory) -> Set[str]:
        return getattr(self, category.value)

    def category_of(self, trait: str) -> Optional[TraitCategory]:
        """Return the category currently holding trait, or None."""
        for category in TraitCategory:
            if trait in self._bucket(category):
                return category
        return None

    def __contains__(self, trait: str) -> bool:
        return self.category_of(trait) is not None

    def contains(self, trait: str, category: TraitCategory) -> bool:
        """True if trait is currently held in the given category."""
        return trait in self._bucket(category)

    def is_empty(self) -> bool:
        return not (self.positive or self.negative or self.hidden)

    def place(self, trait: str, category: TraitCategory) -> bool:
        """
        Put trait into category, removing it from any other category.

        Args:
            trait: Trait identifier
            category: Destination category

        Returns:
            True if the trait set changed
        """
        current = self.category_of(trait)
        if current == category:
            return False
        if current is not None:
            self._bucket(current).discard(trait)
        if category == TraitCategory.HIDDEN:
            self.epigenetic.discard(trait)
        self._bucket(category).add(trait)
        return True

    def remove(self, trait: str) -> None:
        """Drop trait from every category."""
        for category in TraitCategory:
            self._bucket(category).discard(trait)
        self.epigenetic.discard(trait)

    def merge(self, other: 'TraitSet') -> 'TraitSet':
        """
        Union another trait set into a copy of this one.

        Traits already present here keep their current category; only
        traits absent from this set are added from other.

        Args:
            other: Trait set to merge in

        Returns:
            New merged TraitSet
        """
        merged = self.copy()
        for category in TraitCategory:
            for trait in sorted(other._bucket(category)):
                if trait not in merged:
                    merged._bucket(category).add(trait)
                    if trait in other.epigenetic:
                        merged.epigenetic.add(trait)
        return merged

    def copy(self) -> 'TraitSet':
        return TraitSet(
            positive=set(self.positive),
            negative=set(self.negative),
            hidden=set(self.hidden),
            epigenetic=set(self.epigenetic),
        )

    def visible(self) -> List[str]:
        """Revealed traits (positive and negative), sorted."""
        return sorted(self.positive | self.negative)

    def to_dict(self) -> Dict[str, List[str]]:
        return {
            'positive': sorted(self.positive),
            'negative': sorted(self.negative),
            'hidden': sorted(self.hidden),
            'epigenetic': sorted(self.epigenetic),
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'TraitSet':
        data = data or {}
        return cls(
            positive=set(data.get('positive') or []),
            negative=set(data.get('negative') or []),
            hidden=set(data.get('hidden') or []),
            epigenetic=set(data.get('epigenetic') or []),
        )

    @classmethod
    def of(
        cls,
        positive: Iterable[str] = (),
        negative: Iterable[str] = (),
        hidden: Iterable[str] = (),
    ) -> 'TraitSet':
        """Convenience constructor from iterables."""
        return cls(positive=set(positive), negative=set(negative), hidden=set(hidden))
