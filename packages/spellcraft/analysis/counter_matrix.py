"""
Counter matrix validation.

A counter matrix declares design intent between compositions: "A is strong
against B", "C and D are even". Each declared pair is simulated and its
win rate checked against the band the relation implies:

    Strong -> [0.5 + tolerance, 1]
    Weak   -> [0, 0.5 - tolerance]
    Even   -> [0.5 - tolerance, 0.5 + tolerance]

Usage:
    matrix = {"bruisers": {"glass": CounterRelation.STRONG}}
    results = validate_counter_matrix(matrix, COMPOSITIONS, MatchupConfig(iterations=500))
    failed = [r for r in results if not r.passed]
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from ..content.archetypes import build_team
from ..simulation.batch import MatchupConfig, run_matchup
from ..state.combat import Team

logger = logging.getLogger(__name__)

__all__ = [
    "CounterRelation",
    "CounterpickValidationResult",
    "expected_range",
    "validate_counter_matrix",
    "DEFAULT_WIN_RATE_TOLERANCE",
]

DEFAULT_WIN_RATE_TOLERANCE = 0.10


class CounterRelation(Enum):
    STRONG = "Strong"
    WEAK = "Weak"
    EVEN = "Even"


@dataclass(frozen=True)
class CounterpickValidationResult:
    attacker_id: str
    defender_id: str
    relation: CounterRelation
    iterations: int
    expected_range: Tuple[float, float]
    actual_win_rate: float
    passed: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "attacker_id": self.attacker_id,
            "defender_id": self.defender_id,
            "relation": self.relation.value,
            "iterations": self.iterations,
            "expected_range": list(self.expected_range),
            "actual_win_rate": self.actual_win_rate,
            "passed": self.passed,
        }


def expected_range(relation: CounterRelation, tolerance: float = DEFAULT_WIN_RATE_TOLERANCE) -> Tuple[float, float]:
    if relation is CounterRelation.STRONG:
        low, high = 0.5 + tolerance, 1.0
    elif relation is CounterRelation.WEAK:
        low, high = 0.0, 0.5 - tolerance
    else:
        low, high = 0.5 - tolerance, 0.5 + tolerance
    return max(0.0, min(1.0, low)), max(0.0, min(1.0, high))


def validate_counter_matrix(
    matrix: Mapping[str, Mapping[str, CounterRelation]],
    compositions: Mapping[str, Sequence[str]],
    config: Optional[MatchupConfig] = None,
    tolerance: float = DEFAULT_WIN_RATE_TOLERANCE,
) -> List[CounterpickValidationResult]:
    """
    Simulate every declared pair and compare its win rate to the band.

    The attacker fights as side A; its win rate counts draws and timeouts
    as non-wins. Pairs naming an unknown composition are skipped with a
    warning.
    """
    config = config or MatchupConfig(iterations=2000)
    results = []
    for attacker_id, defenders in matrix.items():
        if attacker_id not in compositions:
            logger.warning("Unknown composition %s in counter matrix", attacker_id)
            continue
        for defender_id, relation in defenders.items():
            if defender_id not in compositions:
                logger.warning("Unknown composition %s in counter matrix", defender_id)
                continue

            side_a = build_team(compositions[attacker_id], Team.HERO)
            side_b = build_team(compositions[defender_id], Team.ENEMY)
            matchup = run_matchup(side_a, side_b, config)

            low, high = expected_range(relation, tolerance)
            win_rate = matchup.win_rate(Team.HERO.value)
            results.append(CounterpickValidationResult(
                attacker_id=attacker_id,
                defender_id=defender_id,
                relation=relation,
                iterations=matchup.iterations_run,
                expected_range=(low, high),
                actual_win_rate=win_rate,
                passed=low <= win_rate <= high,
            ))
            logger.info(
                "%s vs %s (%s): %.1f%% in [%.0f%%, %.0f%%]",
                attacker_id, defender_id, relation.value, win_rate * 100, low * 100, high * 100,
            )
    return results
