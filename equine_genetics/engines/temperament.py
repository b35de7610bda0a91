"""Weighted temperament selection."""

from typing import Dict, Optional, Any

import structlog

from ..config import TemperamentConfig, DEFAULT_CONFIG
from ..rng import weighted_choice

logger = structlog.get_logger(__name__)


def _weight(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    return float(value)


def select_weighted_random(
    weights: Optional[Dict[str, float]],
    rng,
    config: TemperamentConfig = DEFAULT_CONFIG.temperament,
) -> str:
    """
    Pick a label with probability proportional to its weight.

    Uses one uniform draw and a single cumulative-sum scan. Non-positive and
    non-numeric weights never win the scan.

    Args:
        weights: Label -> weight
        rng: Random source exposing ``random`` and ``integers``
        config: Temperament tunables (supplies the default label)

    Returns:
        Selected label, or the default temperament when weights are empty or invalid
    """
    if not isinstance(weights, dict) or not weights:
        logger.warning("temperament_weights_missing", default=config.default_temperament)
        return config.default_temperament

    selected = weighted_choice(weights, rng)
    if selected is None:
        labels = list(weights)
        logger.warning("temperament_weights_zero", labels=labels)
        return labels[int(rng.integers(0, len(labels)))]
    return selected


def determine_store_horse_temperament(
    breed_weights: Optional[Dict[str, float]],
    rng,
    config: TemperamentConfig = DEFAULT_CONFIG.temperament,
) -> str:
    """Pick a store horse's temperament straight from the breed's weights."""
    return select_weighted_random(breed_weights, rng, config)


def adjust_weights_for_parents(
    breed_weights: Dict[str, float],
    sire_temperament: Optional[str],
    dam_temperament: Optional[str],
    config: TemperamentConfig = DEFAULT_CONFIG.temperament,
) -> Dict[str, float]:
    """
    Add the parental bonus to each parent's temperament in a copy of the breed weights.

    Args:
        breed_weights: Breed label -> weight
        sire_temperament: Sire's temperament label, if known
        dam_temperament: Dam's temperament label, if known
        config: Temperament tunables

    Returns:
        New weight map, every weight floor-clamped at zero
    """
    adjusted = {label: _weight(weight) for label, weight in breed_weights.items()}
    for role, temperament in (('sire', sire_temperament), ('dam', dam_temperament)):
        if temperament is None:
            continue
        if temperament in adjusted:
            adjusted[temperament] += config.parental_bonus
        else:
            logger.warning("parent_temperament_unrecognized", parent=role,
                           temperament=temperament, options=sorted(adjusted))
    return {label: max(0.0, weight) for label, weight in adjusted.items()}


def determine_foal_temperament(
    sire_temperament: Optional[str],
    dam_temperament: Optional[str],
    breed_weights: Optional[Dict[str, float]],
    rng,
    config: TemperamentConfig = DEFAULT_CONFIG.temperament,
) -> str:
    """
    Pick a foal's temperament, biased toward (but never guaranteeing) its parents'.

    Args:
        sire_temperament: Sire's temperament label
        dam_temperament: Dam's temperament label
        breed_weights: Foal breed's temperament weights
        rng: Random source
        config: Temperament tunables

    Returns:
        Selected temperament label
    """
    if not isinstance(breed_weights, dict) or not breed_weights:
        logger.warning("temperament_weights_missing", default=config.default_temperament)
        return config.default_temperament

    adjusted = adjust_weights_for_parents(breed_weights, sire_temperament, dam_temperament, config)
    return select_weighted_random(adjusted, rng, config)
