"""Attribute rating model for equine_genetics."""

from typing import Dict, Optional, Any
from dataclasses import dataclass, field

CONFORMATION_ATTRIBUTES = ('head', 'neck', 'shoulders', 'back', 'hindquarters', 'legs', 'hooves')
GAIT_ATTRIBUTES = ('walk', 'trot', 'canter', 'gallop')
GAITING = 'gaiting'


@dataclass
class AttributeRatings:
    """Conformation and gait scores, each in [1, 100]; gaiting is None for non-gaited breeds."""
    conformation: Dict[str, int] = field(default_factory=dict)
    gaits: Dict[str, Optional[int]] = field(default_factory=dict)

    @property
    def gaiting(self) -> Optional[int]:
        return self.gaits.get(GAITING)

    def to_dict(self) -> Dict[str, Any]:
        return {'conformation': dict(self.conformation), 'gaits': dict(self.gaits)}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'AttributeRatings':
        data = data or {}
        return cls(
            conformation=dict(data.get('conformation') or {}),
            gaits=dict(data.get('gaits') or {}),
        )
