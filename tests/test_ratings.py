"""Tests for conformation and gait rating generation."""

from structlog.testing import capture_logs

from equine_genetics.config import RatingsConfig
from equine_genetics.engines.ratings import (
    generate_attribute_score, generate_store_horse_ratings, calculate_foal_ratings,
)
from equine_genetics.models.ratings import (
    AttributeRatings, CONFORMATION_ATTRIBUTES, GAIT_ATTRIBUTES, GAITING,
)


def test_attribute_score_within_bounds(rng):
    """Scores stay in [1, 100] over repeated sampling."""
    for profile in ({'mean': 50, 'std_dev': 10}, {'mean': 5, 'std_dev': 30}, {'mean': 97, 'std_dev': 20}):
        for _ in range(500):
            score = generate_attribute_score(profile, rng)
            assert isinstance(score, int)
            assert 1 <= score <= 100


def test_attribute_score_extremes(stub_rng):
    """Forcing the draw to its extremes yields exactly 1 and exactly 100."""
    profile = {'mean': 50, 'std_dev': 100}
    assert generate_attribute_score(profile, stub_rng(uniform=-1.0)) == 1
    assert generate_attribute_score(profile, stub_rng(uniform=1.0)) == 100


def test_attribute_score_rounds_mean_plus_variation(stub_rng):
    """Halves round up: 62.5 scores 63 and 49.5 scores 50."""
    assert generate_attribute_score({'mean': 60, 'std_dev': 10}, stub_rng(uniform=0.25)) == 63
    assert generate_attribute_score({'mean': 60, 'std_dev': 10}, stub_rng(uniform=0.0)) == 60
    assert generate_attribute_score({'mean': 50, 'std_dev': 1}, stub_rng(uniform=-0.5)) == 50
    assert generate_attribute_score({'mean': 60, 'std_dev': 10}, stub_rng(uniform=0.2)) == 62


def test_attribute_score_invalid_profile_defaults(stub_rng):
    """Missing or non-numeric profiles return the default score with a warning."""
    for profile in (None, {}, {'mean': 'high', 'std_dev': 5}, {'mean': 50}, {'mean': True, 'std_dev': 1}):
        with capture_logs() as logs:
            assert generate_attribute_score(profile, stub_rng(), attribute='head') == 50
        assert logs[0]['event'] == 'attribute_profile_invalid'
        assert logs[0]['log_level'] == 'warning'


def test_attribute_score_uses_configured_default(stub_rng):
    config = RatingsConfig(default_score=42)
    assert generate_attribute_score(None, stub_rng(), config) == 42


def test_store_horse_ratings_non_gaited(breed_profile, rng):
    ratings = generate_store_horse_ratings(breed_profile, rng)
    assert set(ratings.conformation) == set(CONFORMATION_ATTRIBUTES)
    for name in GAIT_ATTRIBUTES:
        assert 1 <= ratings.gaits[name] <= 100
    assert ratings.gaiting is None


def test_store_horse_ratings_gaited(gaited_profile, stub_rng):
    ratings = generate_store_horse_ratings(gaited_profile, stub_rng(uniform=0.0))
    assert ratings.gaiting == 90
    assert ratings.gaits['walk'] == 80


def test_store_horse_ratings_gaited_without_profile(gaited_profile, stub_rng):
    """A gaited breed with no gaiting profile gets gaiting None."""
    gaited_profile.gaits = {k: v for k, v in gaited_profile.gaits.items() if k != GAITING}
    ratings = generate_store_horse_ratings(gaited_profile, stub_rng())
    assert ratings.gaiting is None


def test_store_horse_ratings_missing_breed(stub_rng):
    """No breed profile: every score is 50, gaiting None, logged as an error."""
    with capture_logs() as logs:
        ratings = generate_store_horse_ratings(None, stub_rng())
    assert all(score == 50 for score in ratings.conformation.values())
    assert all(ratings.gaits[name] == 50 for name in GAIT_ATTRIBUTES)
    assert ratings.gaiting is None
    assert logs[0]['event'] == 'breed_profile_missing'
    assert logs[0]['log_level'] == 'error'


def test_store_horse_ratings_missing_group(breed_profile, stub_rng):
    breed_profile.gaits = None
    with capture_logs() as logs:
        ratings = generate_store_horse_ratings(breed_profile, stub_rng())
    assert all(ratings.gaits[name] == 50 for name in GAIT_ATTRIBUTES)
    assert any(log['event'] == 'rating_group_missing' for log in logs)


def _ratings(score, gaiting=None):
    gaits = {name: score for name in GAIT_ATTRIBUTES}
    if gaiting is not None:
        gaits[GAITING] = gaiting
    return AttributeRatings(conformation={name: score for name in CONFORMATION_ATTRIBUTES}, gaits=gaits)


def test_foal_ratings_parent_average(breed_profile, stub_rng):
    """With no variation and no tweak the foal score is the parents' average."""
    foal = calculate_foal_ratings(_ratings(80), _ratings(60), breed_profile, stub_rng(uniform=0.0, integer=0))
    assert all(score == 70 for score in foal.conformation.values())
    assert foal.gaits['gallop'] == 70
    assert foal.gaiting is None


def test_foal_ratings_half_average_rounds_up(breed_profile, stub_rng):
    """Parents of 50 and 51 average 50.5, which rounds up to 51."""
    foal = calculate_foal_ratings(_ratings(50), _ratings(51), breed_profile, stub_rng(uniform=0.0, integer=0))
    assert all(score == 51 for score in foal.conformation.values())


def test_foal_ratings_variance_from_foal_breed(breed_profile, stub_rng):
    """Variance uses the foal's own breed std_dev; the tweak is added on top."""
    foal = calculate_foal_ratings(_ratings(50), _ratings(50), breed_profile, stub_rng(uniform=1.0, integer=5))
    # head std_dev 8, tweak +5
    assert foal.conformation['head'] == 63
    # gallop std_dev 4
    assert foal.gaits['gallop'] == 59


def test_foal_ratings_default_std_dev(stub_rng):
    """Without a breed profile the default std_dev of 3 applies."""
    with capture_logs() as logs:
        foal = calculate_foal_ratings(_ratings(50), _ratings(50), None, stub_rng(uniform=1.0, integer=0))
    assert foal.conformation['back'] == 53
    assert foal.gaiting is None
    assert any(log['event'] == 'foal_breed_profile_missing' for log in logs)


def test_foal_ratings_missing_parent_scores(breed_profile, stub_rng):
    """A parent with no ratings counts as the default score."""
    with capture_logs() as logs:
        foal = calculate_foal_ratings(_ratings(90), None, breed_profile, stub_rng(uniform=0.0, integer=0))
    assert foal.conformation['legs'] == 70
    assert any(log['event'] == 'parent_ratings_missing' for log in logs)


def test_foal_gaiting_follows_foal_breed(gaited_profile, breed_profile, stub_rng):
    """Gaiting is scored by the foal's breed flag, not the parents'."""
    gaited_parents = (_ratings(70, gaiting=90), _ratings(70, gaiting=80))
    foal = calculate_foal_ratings(*gaited_parents, breed_profile, stub_rng(uniform=0.0, integer=0))
    assert foal.gaiting is None

    foal = calculate_foal_ratings(_ratings(70), _ratings(70), gaited_profile, stub_rng(uniform=0.0, integer=0))
    assert foal.gaiting == 50


def test_foal_ratings_clamped(breed_profile, stub_rng):
    foal = calculate_foal_ratings(_ratings(100), _ratings(100), breed_profile, stub_rng(uniform=1.0, integer=5))
    assert all(score == 100 for score in foal.conformation.values())
    foal = calculate_foal_ratings(_ratings(1), _ratings(1), breed_profile, stub_rng(uniform=-1.0, integer=-5))
    assert all(score == 1 for score in foal.conformation.values())
