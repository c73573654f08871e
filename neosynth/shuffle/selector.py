"""
Weighted random selection ("roulette wheel") over candidate indices.

Selection never raises: malformed input is logged and answered with a
uniform pick so playback can always continue. The returned Selection
records which path produced the pick.
"""

import logging
import math
import random
from dataclasses import dataclass
from typing import Sequence

from neosynth.enums import SelectionPath

logger = logging.getLogger(__name__)

NO_TRACK = -1


@dataclass(frozen=True)
class Selection:
    """A chosen candidate and the branch that chose it."""

    index: int
    path: SelectionPath

    @property
    def is_fallback(self) -> bool:
        return self.path == SelectionPath.UNIFORM_FALLBACK


def uniform_choice(candidates: Sequence[int], rng=None) -> Selection:
    """Pick a candidate with equal probability."""
    if not candidates:
        return Selection(NO_TRACK, SelectionPath.EMPTY)
    rng = rng or random
    return Selection(rng.choice(list(candidates)), SelectionPath.UNIFORM_FALLBACK)


def _weights_are_valid(weights: Sequence[float]) -> bool:
    for weight in weights:
        if isinstance(weight, bool) or not isinstance(weight, (int, float)):
            return False
        if not math.isfinite(weight) or weight < 0:
            return False
    return True


def weighted_choice(
    candidates: Sequence[int],
    weights: Sequence[float],
    rng=None,
) -> Selection:
    """
    Pick one candidate with probability proportional to its weight.

    Args:
        candidates: Candidate playlist indices.
        weights: One non-negative weight per candidate.
        rng: Source of randomness with random() and choice(). Defaults to
            the random module.

    Returns:
        Selection with the chosen index. Falls back to a uniform pick when
        lengths differ, a weight is negative or not finite, or all weights
        are zero.
    """
    rng = rng or random

    if not candidates:
        return Selection(NO_TRACK, SelectionPath.EMPTY)

    if len(candidates) != len(weights):
        logger.error(
            "Candidates and weights must have the same length (%d != %d)",
            len(candidates),
            len(weights),
        )
        return uniform_choice(candidates, rng)

    if not _weights_are_valid(weights):
        logger.error("Malformed weights, using uniform selection: %s", weights)
        return uniform_choice(candidates, rng)

    total_weight = sum(weights)
    if total_weight == 0:
        logger.debug("All weights are zero, using uniform selection")
        return uniform_choice(candidates, rng)

    target = rng.random() * total_weight
    running = 0.0
    for candidate, weight in zip(candidates, weights):
        running += weight
        if running >= target:
            return Selection(candidate, SelectionPath.WEIGHTED)

    # Float drift left the running sum just short of the target.
    return Selection(candidates[-1], SelectionPath.WEIGHTED)


def select(candidates: Sequence[int], weights: Sequence[float], rng=None) -> int:
    """Same as weighted_choice() but returns only the chosen index."""
    return weighted_choice(candidates, weights, rng).index
