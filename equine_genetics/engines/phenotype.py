"""Deterministic phenotype resolution: genotype + breed profile -> coat colour, shade, markings."""

from typing import Dict, List, Optional
from dataclasses import dataclass, field

import structlog

from ..models.breed import BreedProfile
from ..models.genotype import (
    Genotype, Marking, Phenotype, split_alleles, has_allele, is_homozygous, is_heterozygous,
)

logger = structlog.get_logger(__name__)

DEFAULT_SHADE = 'standard'
UNPREFIXED_SHADES = ('standard', 'medium')

# Colours that already carry single-cream dilution, checked in order
PEARL_CREAM_BASES = (
    'Palomino', 'Buckskin', 'Smoky Black',
    'Gold Cream Champagne', 'Amber Cream Champagne', 'Classic Cream Champagne',
)

# Suffix words a roan keeps from the colour it replaces
ROAN_KEPT_WORDS = ('dun', 'champagne', 'pearl')

# Gray progression: (max age in years, stage name); None means any age beyond
GRAY_STAGES = (
    (3, '{tone} Gray'),
    (6, '{tone} Dark Dapple Gray'),
    (9, '{tone} Light Dapple Gray'),
    (12, 'White Gray'),
    (None, 'Fleabitten Gray'),
)


@dataclass
class _ColorState:
    """Working state while layering dilutions and modifiers over the base coat."""
    base: str
    display: str
    shade_key: str
    parts: List[str] = field(default_factory=list)
    markings: List[Marking] = field(default_factory=list)
    primitive_markings: Optional[str] = None
    all_white: bool = False
    gray: bool = False

    def add_part(self, part: str) -> None:
        if part not in self.parts:
            self.parts.append(part)

    def add_marking(self, kind: str, detail: str) -> None:
        marking = Marking(kind, detail)
        if marking not in self.markings:
            self.markings.append(marking)


def _base_color(genotype: Genotype) -> str:
    if is_homozygous(genotype, 'E_Extension', 'e'):
        return 'Chestnut'
    if has_allele(genotype, 'A_Agouti', 'A'):
        return 'Bay'
    return 'Black'


def _set(state: _ColorState, name: str, shade_key: Optional[str] = None) -> None:
    state.display = name
    state.shade_key = shade_key or name


def _apply_cream(state: _ColorState, genotype: Genotype) -> None:
    if is_heterozygous(genotype, 'Cr_Cream', 'Cr', 'n'):
        single = {'Chestnut': 'Palomino', 'Mushroom Chestnut': 'Palomino',
                  'Bay': 'Buckskin', 'Black': 'Smoky Black'}
        if state.display in single:
            _set(state, single[state.display])
    elif is_homozygous(genotype, 'Cr_Cream', 'Cr'):
        double = {'Chestnut': 'Cremello', 'Bay': 'Perlino', 'Black': 'Smoky Cream'}
        _set(state, double[state.base])


def _apply_dun(state: _ColorState, genotype: Genotype) -> None:
    if has_allele(genotype, 'D_Dun', 'D'):
        current = state.display
        if current in ('Black', 'Smoky Black'):
            _set(state, 'Grulla')
        elif current == 'Bay':
            _set(state, 'Bay Dun')
        elif current == 'Palomino':
            _set(state, 'Palomino Dun')
        elif current in ('Chestnut', 'Mushroom Chestnut'):
            _set(state, 'Red Dun')
        else:
            _set(state, f"{current} Dun")
    elif is_homozygous(genotype, 'D_Dun', 'nd1'):
        state.primitive_markings = 'Non-Dun 1 - Primitive Markings'
    elif is_heterozygous(genotype, 'D_Dun', 'nd1', 'nd2'):
        state.primitive_markings = 'Non-Dun 2 - Faint Primitive Markings'


def _apply_champagne(state: _ColorState, genotype: Genotype) -> None:
    if not has_allele(genotype, 'CH_Champagne', 'Ch'):
        return

    families = {
        'Chestnut': ('Gold', 'Cremello', 'Palomino'),
        'Bay': ('Amber', 'Perlino', 'Buckskin'),
        'Black': ('Classic', 'Smoky Cream', 'Smoky Black'),
    }
    family, double_cream, single_cream = families[state.base]
    current = state.display
    if double_cream in current:
        _set(state, f"Ivory Champagne ({double_cream})", f"{family} Cream Champagne")
    elif single_cream in current:
        _set(state, f"{family} Cream Champagne")
    else:
        _set(state, f"{family} Champagne")

    if has_allele(genotype, 'D_Dun', 'D'):
        _set(state,
             state.display.replace(' Champagne', ' Dun Champagne', 1),
             state.shade_key.replace(' Champagne', ' Dun Champagne', 1))


def _apply_silver(state: _ColorState, genotype: Genotype) -> None:
    # Silver only acts on black pigment, so chestnuts carry it unseen
    if not has_allele(genotype, 'Z_Silver', 'Z') or state.base == 'Chestnut':
        return
    if 'silver' in state.display.lower():
        return
    key = (state.shade_key.replace('Classic', 'Black')
           .replace('Amber', 'Bay').replace('Gold', 'Chestnut'))
    _set(state, f"Silver {state.display}", f"Silver {key}")


def _apply_pearl(state: _ColorState, genotype: Genotype) -> None:
    homozygous = is_homozygous(genotype, 'PRL_Pearl', 'prl')
    heterozygous = is_heterozygous(genotype, 'PRL_Pearl', 'prl', 'n')
    single_cream = is_heterozygous(genotype, 'Cr_Cream', 'Cr', 'n')
    double_cream = is_homozygous(genotype, 'Cr_Cream', 'Cr')

    if homozygous and not single_cream and not double_cream:
        if state.base == 'Chestnut':
            _set(state, 'Apricot')
        else:
            _set(state, f"{state.display} Pearl", f"{state.shade_key} Pearl")
    elif single_cream and (homozygous or heterozygous):
        for name in PEARL_CREAM_BASES:
            if name in state.display:
                _set(state, f"{name} Pearl")
                break
        else:
            descriptor = 'Homozygous Pearl Cream' if homozygous else 'Pearl Cream'
            _set(state, f"{state.display} {descriptor}", f"{state.shade_key} {descriptor}")
    elif homozygous and double_cream:
        _set(state, f"{state.display} (Pearl)", f"{state.shade_key} (Pearl)")


def _apply_modifiers(state: _ColorState, genotype: Genotype) -> None:
    state.parts = [state.display]
    if genotype.get('sooty') is True:
        state.parts.insert(0, 'Sooty')
        state.shade_key = f"Sooty {state.shade_key}"
    if state.base == 'Chestnut' and genotype.get('flaxen') is True:
        if state.display in ('Chestnut', 'Mushroom Chestnut'):
            flaxen = f"Flaxen {state.display}"
            state.parts[state.parts.index(state.display)] = flaxen
            state.display = flaxen
            state.shade_key = flaxen
        else:
            state.add_part('Flaxen')
    if genotype.get('pangare') is True:
        state.add_part('Pangare')


def _strongest_shade(weights) -> Optional[str]:
    if not isinstance(weights, dict):
        return None
    valid = [
        (shade, weight) for shade, weight in weights.items()
        if isinstance(weight, (int, float)) and not isinstance(weight, bool) and weight > 0
    ]
    if not valid:
        return None
    return max(valid, key=lambda item: item[1])[0]


def resolve_shade(shade_bias: Dict[str, Dict[str, float]], shade_key: str, base: str) -> str:
    """
    Pick the highest-weight shade for a phenotype key.

    Lookup order: the phenotype key, the base colour, the key's first word,
    a ``Default`` entry, then ``standard``.

    Args:
        shade_bias: Breed's phenotype key -> {shade: weight}
        shade_key: Phenotype key built during resolution
        base: Base coat colour

    Returns:
        Shade name
    """
    for key in (shade_key, base, shade_key.split(' ')[0], 'Default'):
        shade = _strongest_shade(shade_bias.get(key))
        if shade:
            return shade
    return DEFAULT_SHADE


def _apply_shade_prefix(state: _ColorState, shade: str) -> None:
    shade_lower = shade.lower()
    display_lower = state.display.lower()
    if shade_lower in UNPREFIXED_SHADES or shade_lower in display_lower:
        return
    shaded = f"{shade[0].upper()}{shade[1:]} {state.display}"
    state.parts[state.parts.index(state.display)] = shaded
    state.display = shaded


def _apply_roan(state: _ColorState, genotype: Genotype) -> None:
    if not has_allele(genotype, 'Rn_Roan', 'Rn'):
        return
    roan = {'Chestnut': 'Red Roan', 'Bay': 'Bay Roan', 'Black': 'Blue Roan'}[state.base]
    main_index = next(
        (i for i, part in enumerate(state.parts) if part not in ('Sooty', 'Pangare')), 0
    )
    original = state.parts[main_index]

    kept = []
    for word in original.split(' '):
        if any(k in word.lower() for k in ROAN_KEPT_WORDS) and word not in kept:
            kept.append(word)
    replacement = ' '.join([roan] + kept)
    if original.lower().startswith('flaxen ') and roan == 'Red Roan':
        replacement = f"Flaxen {replacement}"

    state.parts[main_index] = replacement
    state.shade_key = roan
    state.add_marking('roan', roan)


def _white_alleles(genotype: Genotype, locus: str, prefix: str) -> List[str]:
    return [a for a in split_alleles(genotype, locus) if a.startswith(prefix) and a != prefix.lower()]


def _apply_white_patterns(state: _ColorState, genotype: Genotype) -> None:
    dominant = _white_alleles(genotype, 'W_DominantWhite', 'W')
    if 'W13' in dominant:
        state.parts = ['White']
        state.shade_key = 'Dominant White'
        state.all_white = True
        state.add_marking('white', 'White')
        return
    if dominant:
        name = 'Minimal White' if 'W20' in dominant else 'Dominant White'
        state.add_part(name)
        state.add_marking('white', name)

    patterns = []
    if has_allele(genotype, 'O_FrameOvero', 'O') and not is_homozygous(genotype, 'O_FrameOvero', 'O'):
        patterns.append('Frame Overo')
    if has_allele(genotype, 'TO_Tobiano', 'TO'):
        patterns.append('Tobiano')
    if has_allele(genotype, 'SB1_Sabino1', 'SB1'):
        patterns.append('Sabino')
    for allele in _white_alleles(genotype, 'SW_SplashWhite', 'SW'):
        patterns.append(f"Splash White {allele[len('SW'):]}")
    for allele in _white_alleles(genotype, 'EDXW', 'EDXW'):
        patterns.append(f"Eden White {allele[len('EDXW'):]}")

    for pattern in patterns:
        state.add_part(pattern)
        state.add_marking('pattern', pattern)


def _multiplier(bias: Dict[str, float], key: str) -> float:
    value = bias.get(key, 1.0)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 1.0
    return max(0.0, float(value))


def _leopard_pattern(genotype: Genotype, breed_profile: Optional[BreedProfile],
                     age_years: float) -> Optional[str]:
    if not has_allele(genotype, 'LP_LeopardComplex', 'LP'):
        return None
    has_patn1 = has_allele(genotype, 'PATN1_Pattern1', 'PATN1')

    if is_homozygous(genotype, 'LP_LeopardComplex', 'LP'):
        return 'Fewspot Leopard Appaloosa' if has_patn1 else 'Snowcap Appaloosa'
    if has_patn1:
        return 'Leopard Appaloosa'

    if age_years < 5:
        extent = 'Light'
    elif age_years < 9:
        extent = 'Moderate'
    else:
        extent = 'Heavy'

    bias = breed_profile.genetics.advanced_markings_bias if breed_profile else {}
    snowflake = _multiplier(bias, 'snowflake_probability_multiplier')
    frost = _multiplier(bias, 'frost_probability_multiplier')
    spotting = 'Frost' if frost > snowflake else 'Snowflake'
    return f"{extent} {spotting} Blanket Appaloosa"


def _apply_leopard(state: _ColorState, genotype: Genotype,
                   breed_profile: Optional[BreedProfile], age_years: float) -> None:
    pattern = _leopard_pattern(genotype, breed_profile, age_years)
    if pattern is None:
        return
    state.add_part(pattern)
    state.shade_key = pattern
    state.add_marking('leopard', pattern)
    state.add_marking('skin', 'Mottling')
    state.add_marking('hooves', 'Striping')


def gray_stage(base: str, age_years: float) -> str:
    """Name the gray stage a horse of the given base colour shows at age_years."""
    tone = 'Rose' if base == 'Chestnut' else 'Steel'
    for max_age, template in GRAY_STAGES:
        if max_age is None or age_years <= max_age:
            return template.format(tone=tone)
    return 'Fleabitten Gray'


def _apply_gray(state: _ColorState, genotype: Genotype, age_years: float) -> None:
    if state.all_white or not has_allele(genotype, 'G_Gray', 'G'):
        return
    stage = gray_stage(state.base, age_years)
    state.parts = [stage]
    state.shade_key = stage
    state.gray = True
    state.add_marking('gray', stage)


def determine_phenotype(
    genotype: Genotype,
    breed_profile: Optional[BreedProfile] = None,
    age_years: float = 0.0,
) -> Phenotype:
    """
    Resolve the visible coat of a horse from its genotype.

    Pure and deterministic: the same genotype, breed profile and age always
    give the same phenotype.

    Args:
        genotype: Full genotype (allele pairs and boolean modifiers)
        breed_profile: Breed profile supplying shade bias and marking bias
        age_years: Current age, which stages gray and leopard expression

    Returns:
        Phenotype with display colour, shade and structured markings
    """
    base = _base_color(genotype)
    state = _ColorState(base=base, display=base, shade_key=base)

    if base == 'Chestnut' and has_allele(genotype, 'MFSD12_Mushroom', 'Mu'):
        _set(state, 'Mushroom Chestnut', 'Mushroom')
    _apply_cream(state, genotype)
    _apply_dun(state, genotype)
    _apply_champagne(state, genotype)
    _apply_silver(state, genotype)
    _apply_pearl(state, genotype)
    _apply_modifiers(state, genotype)

    shade_bias = breed_profile.genetics.shade_bias if breed_profile else {}
    shade = resolve_shade(shade_bias, state.shade_key, base)
    _apply_shade_prefix(state, shade)

    _apply_roan(state, genotype)
    _apply_white_patterns(state, genotype)
    if not state.all_white:
        _apply_leopard(state, genotype, breed_profile, age_years)
    _apply_gray(state, genotype, age_years)

    if genotype.get('rabicano') is True and not state.all_white and not state.gray:
        state.add_part('Rabicano')
        state.add_marking('pattern', 'Rabicano')

    dun_shown = any('Dun' in part or 'Grulla' in part for part in state.parts)
    if state.primitive_markings and not dun_shown and not state.all_white and not state.gray:
        state.add_part(f"({state.primitive_markings})")
        state.add_marking('primitive', state.primitive_markings)

    display_color = ' '.join(part for part in state.parts if part.strip()) or base
    logger.debug("phenotype_resolved", display_color=display_color, shade=shade,
                 shade_key=state.shade_key)
    return Phenotype(display_color=display_color, shade=shade, markings=state.markings)
