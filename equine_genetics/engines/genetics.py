"""Genotype generation for store horses and Mendelian inheritance for foals."""

from typing import Dict, List, Optional

import structlog

from ..config import GeneticsConfig, DEFAULT_CONFIG
from ..exceptions import MissingParentDataError
from ..models.breed import BreedProfile, GeneticProfile
from ..models.genotype import Genotype, BOOLEAN_MODIFIERS, split_alleles
from ..rng import weighted_choice

logger = structlog.get_logger(__name__)

# Alleles treated as recessive when ordering a pair dominant-first
RECESSIVE_ALLELES = frozenset(['n', 'w', 'patn1', 'nd2', 'lp', 'g', 'rn', 'to', 'o', 'sb1', 'mu', 'e', 'a'])

# White-spotting alleles whose dominant form must stay first (W20/w, not w/W20)
ORDER_PRESERVING_PREFIXES = ('W', 'SW', 'EDXW')

# Homozygous recessive pairs preferred when a locus cannot be resolved
FALLBACK_PAIRS = ('n/n', 'w/w', 'e/e', 'a/a', 'g/g', 'rn/rn', 'lp/lp', 'to/to', 'nd2/nd2', 'patn1/patn1')


def order_allele_pair(allele1: str, allele2: str) -> str:
    """
    Join two alleles into a pair string, dominant allele first.

    Args:
        allele1: First allele
        allele2: Second allele

    Returns:
        Pair string such as "E/e" or "W20/w"
    """
    for prefix in ORDER_PRESERVING_PREFIXES:
        if allele1.startswith(prefix) and allele2 in RECESSIVE_ALLELES and allele1 != allele2:
            return f"{allele1}/{allele2}"
        if allele2.startswith(prefix) and allele1 in RECESSIVE_ALLELES and allele1 != allele2:
            return f"{allele2}/{allele1}"

    recessive1 = allele1.lower() in RECESSIVE_ALLELES
    recessive2 = allele2.lower() in RECESSIVE_ALLELES
    if recessive2 and not recessive1:
        return f"{allele1}/{allele2}"
    if recessive1 and not recessive2:
        return f"{allele2}/{allele1}"
    return '/'.join(sorted([allele1, allele2]))


def _is_permitted(genetics: GeneticProfile, locus: str, pair: str) -> bool:
    allowed = genetics.allowed_alleles.get(locus)
    if allowed and pair not in allowed:
        return False
    return pair not in genetics.disallowed_combinations.get(locus, [])


def _fallback_pair(genetics: GeneticProfile, locus: str, candidates: List[str]) -> Optional[str]:
    """Most recessive permitted pair among candidates, else the first permitted candidate."""
    permitted = [
        pair for pair in candidates
        if pair not in genetics.disallowed_combinations.get(locus, [])
    ]
    for pair in permitted:
        if pair in FALLBACK_PAIRS:
            return pair
    return permitted[0] if permitted else None


def _draw_boolean_modifiers(genetics: GeneticProfile, rng) -> Dict[str, bool]:
    modifiers = {}
    for name, prevalence in genetics.boolean_modifiers_prevalence.items():
        if isinstance(prevalence, bool) or not isinstance(prevalence, (int, float)) \
                or not (0.0 <= prevalence <= 1.0):
            logger.warning("modifier_prevalence_invalid", modifier=name, prevalence=prevalence)
            modifiers[name] = False
            continue
        modifiers[name] = bool(rng.random() < prevalence)
    return modifiers


def generate_store_genotype(
    breed_profile: Optional[BreedProfile],
    rng,
    config: GeneticsConfig = DEFAULT_CONFIG.genetics,
) -> Genotype:
    """
    Generate a complete genotype for a store-bought horse.

    Each locus in the breed's allele weights gets a weighted pair; a
    disallowed pick is re-drawn, then replaced by a recessive fallback.
    Boolean modifiers are drawn against their breed prevalence.

    Args:
        breed_profile: Breed profile (None when the breed record is missing)
        rng: Random source
        config: Genetics tunables

    Returns:
        Genotype mapping; empty when the breed profile is absent
    """
    if breed_profile is None:
        logger.warning("store_genotype_defaulted", reason="breed_profile_missing")
        return {}

    genetics = breed_profile.genetics
    genotype: Genotype = {}
    for locus, weights in genetics.allele_weights.items():
        if not isinstance(weights, dict):
            logger.warning("allele_weights_invalid", locus=locus, breed=breed_profile.name)
            continue

        pair = None
        for _ in range(config.max_allele_attempts):
            pick = weighted_choice(weights, rng)
            if pick is None:
                break
            if pick not in genetics.disallowed_combinations.get(locus, []):
                pair = pick
                break

        if pair is None:
            candidates = genetics.allowed_alleles.get(locus) or list(weights)
            pair = _fallback_pair(genetics, locus, candidates)
            if pair is None:
                logger.warning("locus_omitted", locus=locus, breed=breed_profile.name)
                continue
            logger.warning("locus_fallback", locus=locus, pair=pair, breed=breed_profile.name)
        genotype[locus] = pair

    genotype.update(_draw_boolean_modifiers(genetics, rng))
    return genotype


def _pass_allele(pair: str, rng) -> str:
    alleles = pair.split('/')
    return alleles[int(rng.integers(0, len(alleles)))]


def _inherit_locus(
    locus: str,
    sire_genotype: Genotype,
    dam_genotype: Genotype,
    genetics: GeneticProfile,
    breed_name: str,
    rng,
    config: GeneticsConfig,
) -> Optional[str]:
    """Resolve one locus for a foal; None when nothing valid can be assigned."""
    if not split_alleles(sire_genotype, locus) or not split_alleles(dam_genotype, locus):
        weights = genetics.allele_weights.get(locus)
        if isinstance(weights, dict):
            pick = weighted_choice(weights, rng)
            if pick is not None:
                logger.debug("locus_from_breed_default", locus=locus, pair=pick)
                return pick
        logger.warning("locus_missing_from_parents", locus=locus, breed=breed_name)
        return None

    for _ in range(config.max_allele_attempts):
        pair = order_allele_pair(
            _pass_allele(sire_genotype[locus], rng),
            _pass_allele(dam_genotype[locus], rng),
        )
        if _is_permitted(genetics, locus, pair):
            return pair

    allowed = genetics.allowed_alleles.get(locus) or []
    fallback = _fallback_pair(genetics, locus, allowed)
    if fallback is None:
        logger.error("locus_unresolvable", locus=locus, breed=breed_name,
                     attempts=config.max_allele_attempts)
        return None
    logger.warning("locus_fallback", locus=locus, pair=fallback, breed=breed_name,
                   attempts=config.max_allele_attempts)
    return fallback


def _inherit_modifier(sire_value, dam_value, prevalence, rng) -> bool:
    sire_known = isinstance(sire_value, bool)
    dam_known = isinstance(dam_value, bool)
    prevalence = prevalence if isinstance(prevalence, (int, float)) and not isinstance(prevalence, bool) else 0.0

    if sire_known and dam_known:
        if sire_value == dam_value:
            return sire_value
        return bool(rng.random() < 0.5)
    if sire_known or dam_known:
        parent_value = sire_value if sire_known else dam_value
        if rng.random() < 0.5:
            return parent_value
        return bool(rng.random() < prevalence)
    return bool(rng.random() < prevalence)


def calculate_foal_genotype(
    sire_genotype: Optional[Genotype],
    dam_genotype: Optional[Genotype],
    foal_breed_profile: Optional[BreedProfile],
    rng,
    config: GeneticsConfig = DEFAULT_CONFIG.genetics,
) -> Genotype:
    """
    Combine two parent genotypes into a foal genotype under the foal's breed rules.

    For each locus one allele is drawn from each parent. Pairs outside the
    breed's allowed alleles, or listed as disallowed (e.g. lethal O/O), are
    re-drawn; after repeated failures a recessive fallback pair is used.
    Loci missing from a parent come from the breed's allele weights.

    Args:
        sire_genotype: Sire genotype
        dam_genotype: Dam genotype
        foal_breed_profile: The foal's breed profile
        rng: Random source
        config: Genetics tunables

    Returns:
        Foal genotype

    Raises:
        MissingParentDataError: If either parent genotype is missing or empty
    """
    missing = [role for role, genotype in (('sire', sire_genotype), ('dam', dam_genotype))
               if not genotype]
    if missing:
        raise MissingParentDataError(
            f"Cannot calculate foal genotype: missing genotype for {', '.join(missing)}"
        )

    if foal_breed_profile is None:
        logger.warning("foal_breed_profile_missing", operation="foal_genotype")
        genetics = GeneticProfile()
        breed_name = None
    else:
        genetics = foal_breed_profile.genetics
        breed_name = foal_breed_profile.name

    loci = genetics.loci or [
        locus for locus, value in sire_genotype.items()
        if locus not in BOOLEAN_MODIFIERS and isinstance(value, str)
    ]

    foal: Genotype = {}
    for locus in loci:
        pair = _inherit_locus(locus, sire_genotype, dam_genotype, genetics, breed_name, rng, config)
        if pair is not None:
            foal[locus] = pair

    modifiers = [
        name for name in BOOLEAN_MODIFIERS
        if name in genetics.boolean_modifiers_prevalence
        or name in sire_genotype or name in dam_genotype
    ]
    for name in modifiers:
        foal[name] = _inherit_modifier(
            sire_genotype.get(name),
            dam_genotype.get(name),
            genetics.boolean_modifiers_prevalence.get(name),
            rng,
        )
    return foal
