"""Random source construction and weighted sampling."""

from typing import Dict, Optional
import numpy as np


def create_rng(seed: Optional[int] = None) -> np.random.Generator:
    """
    Create a fresh random number generator.

    Args:
        seed: Optional seed for deterministic runs. None draws entropy from the OS.

    Returns:
        NumPy Generator backed by PCG64
    """
    return np.random.Generator(np.random.PCG64(seed))


def spawn_rng(seeds: np.random.SeedSequence) -> np.random.Generator:
    """
    Create an independent generator from the next child of a seed sequence.

    Children are statistically independent of each other, and the n-th child
    of a given seed is always the same, so seeded runs stay reproducible.
    """
    return np.random.Generator(np.random.PCG64(seeds.spawn(1)[0]))


def weighted_choice(weights: Dict[str, float], rng) -> Optional[str]:
    """
    Pick a key with probability proportional to its weight.

    One uniform draw, one cumulative-sum scan. Non-positive and non-numeric
    weights are skipped.

    Args:
        weights: Key -> weight
        rng: Random source exposing ``random``

    Returns:
        Selected key, or None if no key has a positive weight
    """
    positive = [
        (key, float(weight)) for key, weight in weights.items()
        if isinstance(weight, (int, float)) and not isinstance(weight, bool) and weight > 0
    ]
    if not positive:
        return None

    total = sum(weight for _, weight in positive)
    draw = rng.random() * total
    cumulative = 0.0
    for key, weight in positive:
        cumulative += weight
        if draw < cumulative:
            return key
    # Floating point drift can leave draw == total
    return positive[-1][0]
