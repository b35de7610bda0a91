"""Tests for the trait set model and the trait catalog."""

import pytest

from equine_genetics.engines.trait_catalog import (
    TRAIT_CATALOG, RARE_TRAITS, get_trait_category, get_trait_definition,
    discipline_affinity_trait, conflicts_with,
)
from equine_genetics.models.traits import TraitSet, TraitCategory


def test_trait_set_rejects_overlap():
    """A trait may only live in one category."""
    with pytest.raises(ValueError):
        TraitSet.of(positive=['calm'], hidden=['calm'])
    with pytest.raises(ValueError):
        TraitSet(positive={'calm'}, epigenetic={'bold'})


def test_place_moves_between_categories():
    traits = TraitSet.of(hidden=['calm'])
    assert traits.place('calm', TraitCategory.POSITIVE) is True
    assert traits.hidden == set()
    assert traits.positive == {'calm'}
    assert traits.place('calm', TraitCategory.POSITIVE) is False


def test_contains_checks_one_category():
    traits = TraitSet.of(positive=['calm'], hidden=['bold'])
    assert traits.contains('calm', TraitCategory.POSITIVE)
    assert not traits.contains('calm', TraitCategory.NEGATIVE)
    assert traits.contains('bold', TraitCategory.HIDDEN)
    assert not traits.contains('bold', TraitCategory.POSITIVE)


def test_place_into_hidden_drops_epigenetic_flag():
    traits = TraitSet(positive={'calm'}, epigenetic={'calm'})
    traits.place('calm', TraitCategory.HIDDEN)
    assert traits.epigenetic == set()


def test_merge_keeps_existing_placement():
    """Merging unions traits; a trait already present keeps its category."""
    existing = TraitSet.of(negative=['hardy'], positive=['calm'])
    incoming = TraitSet(positive={'hardy', 'well_bred'}, hidden={'bold'}, epigenetic={'well_bred'})
    merged = existing.merge(incoming)
    assert merged.negative == {'hardy'}
    assert merged.positive == {'calm', 'well_bred'}
    assert merged.hidden == {'bold'}
    assert merged.epigenetic == {'well_bred'}
    assert existing.positive == {'calm'}


def test_trait_set_dict_round_trip():
    traits = TraitSet(positive={'calm', 'bold'}, negative={'lazy'}, hidden={'athletic'}, epigenetic={'lazy'})
    data = traits.to_dict()
    assert data['positive'] == ['bold', 'calm']
    assert TraitSet.from_dict(data) == traits
    assert TraitSet.from_dict(None).is_empty()


def test_catalog_categories():
    assert get_trait_category('calm') == TraitCategory.POSITIVE
    assert get_trait_category('nervous') == TraitCategory.NEGATIVE
    assert get_trait_category('inbred') == TraitCategory.NEGATIVE
    assert get_trait_category('unknown_trait') is None


def test_rare_traits_route_to_positive():
    for trait in RARE_TRAITS:
        assert get_trait_category(trait) == TraitCategory.POSITIVE


def test_no_catalog_entry_is_hidden():
    assert all(d.category != TraitCategory.HIDDEN for d in TRAIT_CATALOG.values())


def test_discipline_affinity_traits():
    trait = discipline_affinity_trait('Show Jumping')
    assert trait == 'discipline_affinity_show_jumping'
    assert get_trait_category(trait) == TraitCategory.POSITIVE
    assert get_trait_definition(trait) is None


def test_definition_display_name():
    assert get_trait_definition('trainability_boost').display_name == 'Trainability Boost'


def test_conflicts():
    assert conflicts_with('calm', ['nervous', 'bold', 'aggressive']) == ['aggressive', 'nervous']
    assert conflicts_with('hardy', ['nervous']) == []
