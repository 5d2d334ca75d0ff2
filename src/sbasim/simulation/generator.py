"""Closed-form box-score generator for a single player."""

from __future__ import annotations

import math
import random
from dataclasses import asdict, dataclass
from typing import Dict, Protocol

from sbasim.config import LEAGUE_RULES, STAT_CATEGORIES, get_stat_rule, get_weights


class RandomSource(Protocol):
    """Anything with ``random.Random.uniform`` semantics."""

    def uniform(self, a: float, b: float) -> float:
        ...


class PlayerAttributes(Protocol):
    skill: int
    position: str
    height_cm: float
    weight_lbs: float


@dataclass(frozen=True)
class GeneratedLine:
    points: int
    assists: int
    rebounds: int
    steals: int
    blocks: int

    def as_dict(self) -> Dict[str, int]:
        return asdict(self)


_DEFAULT_RNG = random.Random()


def _round_half_up(value: float) -> int:
    # Halves go up (2.5 -> 3), unlike round()'s banker's rounding.
    return int(math.floor(value + 0.5))


def generate_line(player: PlayerAttributes, rng: RandomSource | None = None) -> GeneratedLine:
    """Produce one game's stat line from a player's skill, position and build.

    Each category is ``(skill / 100 * base + noise) * position_weight`` where
    ``noise`` is uniform over ``[-variance / 2, variance / 2]``. Rebounds are
    further scaled by the mean of the height and weight factors, blocks by the
    height factor alone. Values are rounded to the nearest integer and floored
    at zero. Draws happen in ``STAT_CATEGORIES`` order, one per category, so a
    seeded source yields the same line for the same attributes.
    """

    rng = rng or _DEFAULT_RNG
    skill_factor = player.skill / 100
    weights = get_weights(player.position)
    height_factor = player.height_cm / LEAGUE_RULES.reference_height_cm
    weight_factor = player.weight_lbs / LEAGUE_RULES.reference_weight_lbs
    physical = {
        "rebounds": (height_factor + weight_factor) / 2,
        "blocks": height_factor,
    }

    values: dict[str, int] = {}
    for category in STAT_CATEGORIES:
        rule = get_stat_rule(category)
        noise = rng.uniform(-rule.variance / 2, rule.variance / 2)
        raw = (skill_factor * rule.base + noise) * weights.for_category(category)
        raw *= physical.get(category, 1.0)
        values[category] = max(0, _round_half_up(raw))
    return GeneratedLine(**values)
