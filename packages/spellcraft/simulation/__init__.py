"""
Matchup simulation - Monte Carlo batches of full combats.
"""

from .batch import (
    MatchupConfig,
    MatchupResult,
    MatchupAccumulator,
    BatchProgress,
    SideStats,
    TurnStats,
    CompositionBudgetError,
    check_composition_budget,
    check_composition_tier,
    composition_points,
    iter_matchup,
    run_matchup,
)

__all__ = [
    "MatchupConfig",
    "MatchupResult",
    "MatchupAccumulator",
    "BatchProgress",
    "SideStats",
    "TurnStats",
    "CompositionBudgetError",
    "check_composition_budget",
    "check_composition_tier",
    "composition_points",
    "iter_matchup",
    "run_matchup",
]
