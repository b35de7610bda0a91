"""Tests for phenotype resolution."""

from equine_genetics.engines.phenotype import determine_phenotype, resolve_shade, gray_stage
from equine_genetics.models.breed import BreedProfile
from equine_genetics.models.genotype import Marking

BAY = {'E_Extension': 'E/e', 'A_Agouti': 'A/a'}
BLACK = {'E_Extension': 'E/E', 'A_Agouti': 'a/a'}
CHESTNUT = {'E_Extension': 'e/e', 'A_Agouti': 'A/a'}


def _color(genotype, profile=None, age_years=0.0):
    return determine_phenotype(genotype, profile, age_years).display_color


def test_base_colors():
    assert _color(BAY) == 'Bay'
    assert _color(BLACK) == 'Black'
    assert _color(CHESTNUT) == 'Chestnut'


def test_cream_dilution():
    assert _color({**CHESTNUT, 'Cr_Cream': 'Cr/n'}) == 'Palomino'
    assert _color({**BAY, 'Cr_Cream': 'Cr/n'}) == 'Buckskin'
    assert _color({**BLACK, 'Cr_Cream': 'Cr/n'}) == 'Smoky Black'
    assert _color({**BAY, 'Cr_Cream': 'Cr/Cr'}) == 'Perlino'
    assert _color({**CHESTNUT, 'Cr_Cream': 'Cr/Cr'}) == 'Cremello'


def test_dun_and_primitive_markings():
    assert _color({**BAY, 'D_Dun': 'D/nd2'}) == 'Bay Dun'
    assert _color({**BLACK, 'D_Dun': 'D/D'}) == 'Grulla'

    phenotype = determine_phenotype({**CHESTNUT, 'D_Dun': 'nd1/nd1'})
    assert phenotype.display_color == 'Chestnut (Non-Dun 1 - Primitive Markings)'
    assert Marking('primitive', 'Non-Dun 1 - Primitive Markings') in phenotype.markings


def test_champagne():
    assert _color({**CHESTNUT, 'CH_Champagne': 'Ch/n'}) == 'Gold Champagne'
    assert _color({**BAY, 'CH_Champagne': 'Ch/n', 'Cr_Cream': 'Cr/n'}) == 'Amber Cream Champagne'


def test_silver_only_on_black_pigment():
    assert _color({**BLACK, 'Z_Silver': 'Z/n'}) == 'Silver Black'
    assert _color({**CHESTNUT, 'Z_Silver': 'Z/n'}) == 'Chestnut'


def test_modifiers():
    assert _color({**BAY, 'sooty': True}) == 'Sooty Bay'
    assert _color({**CHESTNUT, 'flaxen': True}) == 'Flaxen Chestnut'
    assert _color({**BAY, 'flaxen': True}) == 'Bay'


def test_roan():
    phenotype = determine_phenotype({**BAY, 'Rn_Roan': 'Rn/rn'})
    assert phenotype.display_color == 'Bay Roan'
    assert Marking('roan', 'Bay Roan') in phenotype.markings


def test_white_patterns():
    assert _color({**BAY, 'TO_Tobiano': 'TO/to'}) == 'Bay Tobiano'
    assert _color({**BAY, 'W_DominantWhite': 'W20/w'}) == 'Bay Minimal White'

    phenotype = determine_phenotype({**BAY, 'W_DominantWhite': 'W13/w', 'G_Gray': 'G/g'})
    assert phenotype.display_color == 'White'
    assert phenotype.markings == [Marking('white', 'White')]


def test_homozygous_frame_overo_not_shown():
    assert _color({**BAY, 'O_FrameOvero': 'O/n'}) == 'Bay Frame Overo'
    assert _color({**BAY, 'O_FrameOvero': 'O/O'}) == 'Bay'


def test_leopard_complex():
    phenotype = determine_phenotype({**BAY, 'LP_LeopardComplex': 'LP/lp'})
    assert phenotype.display_color == 'Bay Light Snowflake Blanket Appaloosa'
    assert Marking('skin', 'Mottling') in phenotype.markings

    assert _color({**BAY, 'LP_LeopardComplex': 'LP/lp', 'PATN1_Pattern1': 'PATN1/n'}) == \
        'Bay Leopard Appaloosa'
    assert _color({**BAY, 'LP_LeopardComplex': 'LP/LP'}) == 'Bay Snowcap Appaloosa'


def test_leopard_frost_bias():
    profile = BreedProfile.from_config('Appaloosa', {'genetics': {
        'advanced_markings_bias': {'frost_probability_multiplier': 2.0},
    }})
    assert _color({**BAY, 'LP_LeopardComplex': 'LP/lp'}, profile, age_years=10) == \
        'Bay Heavy Frost Blanket Appaloosa'


def test_gray_stages_by_age():
    gray = {**BAY, 'G_Gray': 'G/g'}
    assert _color(gray, age_years=2) == 'Steel Gray'
    assert _color(gray, age_years=5) == 'Steel Dark Dapple Gray'
    assert _color(gray, age_years=8) == 'Steel Light Dapple Gray'
    assert _color({**CHESTNUT, 'G_Gray': 'G/G'}, age_years=20) == 'Fleabitten Gray'
    assert gray_stage('Chestnut', 1) == 'Rose Gray'


def test_rabicano_hidden_under_gray():
    assert _color({**BAY, 'rabicano': True}) == 'Bay Rabicano'
    assert _color({**BAY, 'rabicano': True, 'G_Gray': 'G/g'}, age_years=1) == 'Steel Gray'


def test_shade_from_breed_bias(breed_profile):
    phenotype = determine_phenotype(BAY, breed_profile)
    assert phenotype.shade == 'dark'
    assert phenotype.display_color == 'Dark Bay'


def test_resolve_shade_fallbacks():
    assert resolve_shade({}, 'Bay Dun', 'Bay') == 'standard'
    assert resolve_shade({'Bay': {'light': 1}}, 'Bay Dun', 'Bay') == 'light'
    assert resolve_shade({'Default': {'medium': 1}}, 'Grulla', 'Black') == 'medium'
    assert resolve_shade({'Grulla': {'dark': 0, 'light': 0}}, 'Grulla', 'Black') == 'standard'


def test_phenotype_is_deterministic(breed_profile):
    genotype = {**BAY, 'Cr_Cream': 'Cr/n', 'D_Dun': 'D/nd2', 'TO_Tobiano': 'TO/to', 'sooty': True}
    first = determine_phenotype(genotype, breed_profile, 4)
    second = determine_phenotype(dict(genotype), breed_profile, 4)
    assert first == second
    assert first.to_dict() == second.to_dict()
