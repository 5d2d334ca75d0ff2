"""Configuration helpers for league rules and runtime settings."""

from .league import (
    LEAGUE_RULES,
    STAT_CATEGORIES,
    LeagueRules,
    PositionWeights,
    StatRule,
    get_stat_rule,
    get_weights,
    iter_positions,
)

__all__ = [
    "LEAGUE_RULES",
    "STAT_CATEGORIES",
    "LeagueRules",
    "PositionWeights",
    "StatRule",
    "get_stat_rule",
    "get_weights",
    "iter_positions",
]
