"""Genotype and Phenotype models for equine_genetics."""

from typing import Dict, List, Union, Any, Optional
from dataclasses import dataclass, field

# Locus name -> allele pair string ("E/e") or boolean modifier (sooty, flaxen, ...)
Genotype = Dict[str, Union[str, bool]]

BOOLEAN_MODIFIERS = ('sooty', 'flaxen', 'pangare', 'rabicano')


def split_alleles(genotype: Genotype, locus: str) -> List[str]:
    """
    Split the allele pair stored at a locus.

    Args:
        genotype: Genotype mapping
        locus: Locus name, e.g. "E_Extension"

    Returns:
        List of allele strings, empty when the locus is absent or not a pair
    """
    pair = genotype.get(locus)
    if not isinstance(pair, str) or '/' not in pair:
        return []
    return pair.split('/')


def has_allele(genotype: Genotype, locus: str, allele: str) -> bool:
    """True if at least one copy of allele is present at locus."""
    return allele in split_alleles(genotype, locus)


def is_homozygous(genotype: Genotype, locus: str, allele: str) -> bool:
    """True if both alleles at locus equal allele."""
    alleles = split_alleles(genotype, locus)
    return len(alleles) == 2 and alleles[0] == allele and alleles[1] == allele


def is_heterozygous(genotype: Genotype, locus: str, allele1: str, allele2: str) -> bool:
    """True if locus carries exactly allele1 and allele2 in either order."""
    alleles = split_alleles(genotype, locus)
    return len(alleles) == 2 and sorted(alleles) == sorted([allele1, allele2])


@dataclass(frozen=True)
class Marking:
    """A single structured marking, e.g. Marking('pattern', 'Tobiano')."""
    kind: str
    detail: str

    def to_dict(self) -> Dict[str, str]:
        return {'kind': self.kind, 'detail': self.detail}


@dataclass
class Phenotype:
    """Derived display data; always recomputable from genotype and breed profile."""
    display_color: str
    shade: str
    markings: List[Marking] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'display_color': self.display_color,
            'shade': self.shade,
            'markings': [m.to_dict() for m in self.markings],
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional['Phenotype']:
        if not data:
            return None
        return cls(
            display_color=data['display_color'],
            shade=data['shade'],
            markings=[Marking(m['kind'], m['detail']) for m in data.get('markings', [])],
        )
