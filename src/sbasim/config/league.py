"""League rules: position weights, stat constants and roster limits."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Mapping, Tuple


STAT_CATEGORIES: Tuple[str, ...] = ("points", "assists", "rebounds", "steals", "blocks")


@dataclass(frozen=True)
class PositionWeights:
    position: str
    points: float
    assists: float
    rebounds: float
    steals: float
    blocks: float

    def for_category(self, category: str) -> float:
        return getattr(self, category)


@dataclass(frozen=True)
class StatRule:
    """Base production at full skill and the width of the random swing."""

    category: str
    base: float
    variance: float


@dataclass(frozen=True)
class LeagueRules:
    roster_max_players: int
    skill_min: int
    skill_max: int
    reference_height_cm: float
    reference_weight_lbs: float
    stat_rules: Mapping[str, StatRule]


_POSITION_WEIGHTS: Dict[str, PositionWeights] = {
    "PG": PositionWeights("PG", points=1.0, assists=1.5, rebounds=0.5, steals=1.0, blocks=0.5),
    "SG": PositionWeights("SG", points=1.2, assists=1.0, rebounds=0.6, steals=1.0, blocks=0.6),
    "SF": PositionWeights("SF", points=1.0, assists=0.8, rebounds=1.0, steals=0.8, blocks=0.8),
    "PF": PositionWeights("PF", points=0.8, assists=0.6, rebounds=1.2, steals=0.6, blocks=1.0),
    "C": PositionWeights("C", points=0.7, assists=0.5, rebounds=1.5, steals=0.5, blocks=1.5),
}

_NEUTRAL_WEIGHTS = PositionWeights("", points=1.0, assists=1.0, rebounds=1.0, steals=1.0, blocks=1.0)

LEAGUE_RULES = LeagueRules(
    roster_max_players=5,
    skill_min=0,
    skill_max=99,
    reference_height_cm=210.0,
    reference_weight_lbs=280.0,
    stat_rules={
        "points": StatRule("points", base=30.0, variance=10.0),
        "assists": StatRule("assists", base=10.0, variance=5.0),
        "rebounds": StatRule("rebounds", base=10.0, variance=5.0),
        "steals": StatRule("steals", base=5.0, variance=2.0),
        "blocks": StatRule("blocks", base=5.0, variance=2.0),
    },
)


def iter_positions() -> Iterable[str]:
    """Return the position codes in their conventional 1-5 order."""

    return tuple(_POSITION_WEIGHTS)


def get_weights(position: str | None) -> PositionWeights:
    """Fetch the weight tuple for a position; unknown codes weigh 1.0 everywhere."""

    if not position:
        return _NEUTRAL_WEIGHTS
    return _POSITION_WEIGHTS.get(position.upper(), _NEUTRAL_WEIGHTS)


def get_stat_rule(category: str) -> StatRule:
    """Fetch the base/variance pair for a stat category, raising KeyError if missing."""

    try:
        return LEAGUE_RULES.stat_rules[category]
    except KeyError:
        raise KeyError(f"No stat rule configured for category={category!r}") from None
