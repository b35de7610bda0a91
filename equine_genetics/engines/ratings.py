"""Conformation and gait rating generation for store-bought and bred horses."""

import math
from typing import Dict, Optional, Any

import structlog

from ..config import RatingsConfig, DEFAULT_CONFIG
from ..models.breed import BreedProfile
from ..models.ratings import AttributeRatings, CONFORMATION_ATTRIBUTES, GAIT_ATTRIBUTES, GAITING

logger = structlog.get_logger(__name__)


def _is_number(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _clamp(score: float, config: RatingsConfig) -> int:
    return int(max(config.min_score, min(config.max_score, score)))


def generate_attribute_score(
    profile: Optional[Dict[str, Any]],
    rng,
    config: RatingsConfig = DEFAULT_CONFIG.ratings,
    attribute: Optional[str] = None,
) -> int:
    """
    Score one attribute from a ``{mean, std_dev}`` profile.

    Score is ``mean + U(-1, 1) * std_dev`` rounded half up and clamped to the
    score bounds.

    Args:
        profile: Mapping with numeric ``mean`` and ``std_dev``
        rng: Random source exposing ``uniform``
        config: Rating tunables
        attribute: Attribute name, used only for log context

    Returns:
        Integer score; the default score when the profile is missing or invalid
    """
    if (
        not isinstance(profile, dict)
        or not _is_number(profile.get('mean'))
        or not _is_number(profile.get('std_dev'))
    ):
        logger.warning(
            "attribute_profile_invalid",
            attribute=attribute,
            profile=profile,
            default_score=config.default_score,
        )
        return config.default_score

    variation = rng.uniform(-1.0, 1.0) * profile['std_dev']
    return _clamp(_round_half_up(profile['mean'] + variation), config)


def _score_group(
    group_profile: Optional[Dict[str, Any]],
    attributes,
    group_name: str,
    rng,
    config: RatingsConfig,
) -> Dict[str, int]:
    if not isinstance(group_profile, dict):
        logger.warning("rating_group_missing", group=group_name, default_score=config.default_score)
        return {name: config.default_score for name in attributes}
    return {
        name: generate_attribute_score(group_profile.get(name), rng, config, attribute=name)
        for name in attributes
    }


def generate_store_horse_ratings(
    breed_profile: Optional[BreedProfile],
    rng,
    config: RatingsConfig = DEFAULT_CONFIG.ratings,
) -> AttributeRatings:
    """
    Generate conformation and gait ratings for a store-bought horse.

    Args:
        breed_profile: Breed statistical profile (None when the breed record is missing)
        rng: Random source
        config: Rating tunables

    Returns:
        AttributeRatings; every score defaults when the breed profile is absent
    """
    if breed_profile is None:
        logger.error("breed_profile_missing", operation="store_horse_ratings",
                     default_score=config.default_score)
        gaits: Dict[str, Optional[int]] = {name: config.default_score for name in GAIT_ATTRIBUTES}
        gaits[GAITING] = None
        return AttributeRatings(
            conformation={name: config.default_score for name in CONFORMATION_ATTRIBUTES},
            gaits=gaits,
        )

    conformation = _score_group(
        breed_profile.conformation, CONFORMATION_ATTRIBUTES, 'conformation', rng, config
    )
    gaits = _score_group(breed_profile.gaits, GAIT_ATTRIBUTES, 'gaits', rng, config)

    gaiting_profile = (breed_profile.gaits or {}).get(GAITING)
    if breed_profile.is_gaited_breed and gaiting_profile is not None:
        gaits[GAITING] = generate_attribute_score(gaiting_profile, rng, config, attribute=GAITING)
    else:
        gaits[GAITING] = None

    return AttributeRatings(conformation=conformation, gaits=gaits)


def _foal_std_dev(group_profile: Optional[Dict[str, Any]], attribute: str,
                  config: RatingsConfig) -> float:
    entry = group_profile.get(attribute) if isinstance(group_profile, dict) else None
    if isinstance(entry, dict) and _is_number(entry.get('std_dev')):
        return entry['std_dev']
    return config.foal_default_std_dev


def _parent_score(scores: Optional[Dict[str, Any]], attribute: str, config: RatingsConfig) -> float:
    value = (scores or {}).get(attribute)
    return value if _is_number(value) else config.default_score


def _foal_score(sire_score: float, dam_score: float, std_dev: float, rng,
                config: RatingsConfig) -> int:
    parent_average = (sire_score + dam_score) / 2
    variation = rng.uniform(-1.0, 1.0) * std_dev
    tweak = int(rng.integers(-config.foal_random_tweak, config.foal_random_tweak + 1))
    return _clamp(_round_half_up(parent_average + variation + tweak), config)


def calculate_foal_ratings(
    sire_ratings: Optional[AttributeRatings],
    dam_ratings: Optional[AttributeRatings],
    foal_breed_profile: Optional[BreedProfile],
    rng,
    config: RatingsConfig = DEFAULT_CONFIG.ratings,
) -> AttributeRatings:
    """
    Derive a foal's ratings from its parents' ratings and its own breed profile.

    Each attribute is the parents' average (a missing parent score counts as the
    default score), plus breed variance from the foal's breed, plus a small
    symmetric integer tweak, clamped to the score bounds.

    Args:
        sire_ratings: Sire's ratings (None if unknown)
        dam_ratings: Dam's ratings (None if unknown)
        foal_breed_profile: The foal's own breed profile
        rng: Random source
        config: Rating tunables

    Returns:
        AttributeRatings for the foal
    """
    if sire_ratings is None or dam_ratings is None:
        logger.warning("parent_ratings_missing",
                       sire_missing=sire_ratings is None, dam_missing=dam_ratings is None)
    if foal_breed_profile is None:
        logger.warning("foal_breed_profile_missing", default_std_dev=config.foal_default_std_dev)

    sire = sire_ratings or AttributeRatings()
    dam = dam_ratings or AttributeRatings()
    breed_conformation = foal_breed_profile.conformation if foal_breed_profile else None
    breed_gaits = foal_breed_profile.gaits if foal_breed_profile else None

    conformation = {}
    for name in CONFORMATION_ATTRIBUTES:
        conformation[name] = _foal_score(
            _parent_score(sire.conformation, name, config),
            _parent_score(dam.conformation, name, config),
            _foal_std_dev(breed_conformation, name, config),
            rng,
            config,
        )

    gaits: Dict[str, Optional[int]] = {}
    for name in GAIT_ATTRIBUTES:
        gaits[name] = _foal_score(
            _parent_score(sire.gaits, name, config),
            _parent_score(dam.gaits, name, config),
            _foal_std_dev(breed_gaits, name, config),
            rng,
            config,
        )

    if foal_breed_profile is not None and foal_breed_profile.is_gaited_breed:
        gaits[GAITING] = _foal_score(
            _parent_score(sire.gaits, GAITING, config),
            _parent_score(dam.gaits, GAITING, config),
            _foal_std_dev(breed_gaits, GAITING, config),
            rng,
            config,
        )
    else:
        gaits[GAITING] = None

    return AttributeRatings(conformation=conformation, gaits=gaits)
