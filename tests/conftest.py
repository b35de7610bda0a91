"""Shared fixtures for equine_genetics tests."""

import pytest

from equine_genetics.database import AnimalStore, create_database
from equine_genetics.models.breed import BreedProfile
from equine_genetics.rng import create_rng


class StubRng:
    """
    Deterministic stand-in for numpy's Generator.

    random: value (or sequence of values, the last one repeating) returned by random()
    uniform: position returned by uniform(), clamped to [low, high]
    integer: value returned by integers(), clamped to [low, high - 1]; low when None
    """

    def __init__(self, random=0.5, uniform=0.0, integer=None):
        self._randoms = list(random) if isinstance(random, (list, tuple)) else [random]
        self._uniform = uniform
        self._integer = integer
        self.random_calls = 0

    def random(self):
        self.random_calls += 1
        if len(self._randoms) > 1:
            return self._randoms.pop(0)
        return self._randoms[0]

    def uniform(self, low, high):
        return max(low, min(high, self._uniform))

    def integers(self, low, high):
        if self._integer is None:
            return low
        return max(low, min(high - 1, self._integer))


@pytest.fixture
def stub_rng():
    """Factory for StubRng instances."""
    return StubRng


@pytest.fixture
def rng():
    return create_rng(42)


THOROUGHBRED = {
    'rating_profiles': {
        'conformation': {
            'head': {'mean': 70, 'std_dev': 8},
            'neck': {'mean': 72, 'std_dev': 7},
            'shoulders': {'mean': 75, 'std_dev': 6},
            'back': {'mean': 68, 'std_dev': 8},
            'hindquarters': {'mean': 78, 'std_dev': 6},
            'legs': {'mean': 74, 'std_dev': 7},
            'hooves': {'mean': 65, 'std_dev': 9},
        },
        'gaits': {
            'walk': {'mean': 70, 'std_dev': 6},
            'trot': {'mean': 72, 'std_dev': 6},
            'canter': {'mean': 78, 'std_dev': 5},
            'gallop': {'mean': 88, 'std_dev': 4},
        },
        'is_gaited_breed': False,
    },
    'temperament_weights': {'Spirited': 40, 'Nervous': 20, 'Calm': 15, 'Bold': 25},
    'genetics': {
        'allele_weights': {
            'E_Extension': {'E/E': 0.3, 'E/e': 0.5, 'e/e': 0.2},
            'A_Agouti': {'A/A': 0.3, 'A/a': 0.5, 'a/a': 0.2},
            'G_Gray': {'G/g': 0.1, 'g/g': 0.9},
            'O_FrameOvero': {'O/n': 0.05, 'n/n': 0.95, 'O/O': 0.0},
        },
        'allowed_alleles': {
            'E_Extension': ['E/E', 'E/e', 'e/e'],
            'A_Agouti': ['A/A', 'A/a', 'a/a'],
            'G_Gray': ['G/G', 'G/g', 'g/g'],
            'O_FrameOvero': ['O/n', 'n/n'],
        },
        'disallowed_combinations': {'O_FrameOvero': ['O/O']},
        'boolean_modifiers_prevalence': {'sooty': 0.3, 'flaxen': 0.1},
        'shade_bias': {'Bay': {'standard': 0.3, 'dark': 0.5, 'light': 0.2}},
    },
}

TENNESSEE_WALKER = {
    'rating_profiles': {
        'conformation': {name: {'mean': 60, 'std_dev': 5} for name in (
            'head', 'neck', 'shoulders', 'back', 'hindquarters', 'legs', 'hooves')},
        'gaits': {
            'walk': {'mean': 80, 'std_dev': 5},
            'trot': {'mean': 50, 'std_dev': 5},
            'canter': {'mean': 60, 'std_dev': 5},
            'gallop': {'mean': 55, 'std_dev': 5},
            'gaiting': {'mean': 90, 'std_dev': 3},
        },
        'is_gaited_breed': True,
    },
    'temperament_weights': {'Calm': 50, 'Docile': 50},
}


@pytest.fixture
def breed_profile():
    return BreedProfile.from_config('Thoroughbred', THOROUGHBRED)


@pytest.fixture
def gaited_profile():
    return BreedProfile.from_config('Tennessee Walker', TENNESSEE_WALKER)


@pytest.fixture
def store(breed_profile, gaited_profile):
    """In-memory store seeded with the sample breeds."""
    conn = create_database(':memory:')
    store = AnimalStore(conn)
    store.save_breed(breed_profile)
    store.save_breed(gaited_profile)
    yield store
    conn.close()
