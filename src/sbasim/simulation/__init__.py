"""Game simulation: stat generation, matchup orchestration and aggregation."""

from .aggregation import GameOutcome, apply_outcome
from .generator import GeneratedLine, RandomSource, generate_line
from .service import SimulationResult, simulate_matchup

__all__ = [
    "GameOutcome",
    "GeneratedLine",
    "RandomSource",
    "SimulationResult",
    "apply_outcome",
    "generate_line",
    "simulate_matchup",
]
