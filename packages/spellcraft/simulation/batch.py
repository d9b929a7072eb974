"""
Batch / Monte Carlo matchup simulation.

Runs the combat engine N times for a pair of compositions and aggregates
the outcomes.

Provides:
1. MatchupConfig - iteration count, round cap, seed, sampling, workers
2. MatchupAccumulator - mergeable partial aggregate (sums, running min/max)
3. MatchupResult - final statistics
4. run_matchup / iter_matchup - serial and parallel drivers

Run i is seeded with seed + i and nothing else, so aggregates do not
depend on how the iteration range is split across workers or in which
order chunks finish. Memory is bounded by the round cap (turn-count
histogram) and log_sample_size, not by the iteration count.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from multiprocessing import cpu_count
from typing import Any, Callable, Dict, Generator, List, Mapping, Optional, Sequence

import numpy as np

from ..calc.spell_cost import SpellTier, calculate_spell_points, calculate_tier
from ..combat_engine import CombatResult, CombatRules, DEFAULT_MAX_ROUNDS, run_combat
from ..state.combat import Combatant, Team, Winner
from ..state.rng import Random

logger = logging.getLogger(__name__)

__all__ = [
    "MatchupConfig",
    "BatchProgress",
    "TurnStats",
    "SideStats",
    "MatchupResult",
    "MatchupAccumulator",
    "CompositionBudgetError",
    "composition_points",
    "check_composition_budget",
    "check_composition_tier",
    "run_range",
    "iter_matchup",
    "run_matchup",
]

SIDES = (Team.HERO.value, Team.ENEMY.value)


# =============================================================================
# Configuration
# =============================================================================

@dataclass
class MatchupConfig:
    """Configuration for a batch of simulated fights."""

    iterations: int = 1000
    max_rounds: int = DEFAULT_MAX_ROUNDS
    seed: int = 0

    # Max summed spell points per side (None = unconstrained)
    budget: Optional[float] = None
    # Highest spell tier any equipped spell may reach (None = unconstrained)
    max_tier: Optional[SpellTier] = None

    # Full logs are kept only for runs 0..log_sample_size-1
    log_sample_size: int = 3

    # Progress tracking
    report_interval: int = 1000  # Report progress every N runs

    # Parallelism
    n_workers: int = 1  # 0 = auto-detect (cpu_count - 1)
    chunk_size: int = 500  # Runs per worker task

    rules: CombatRules = field(default_factory=CombatRules)

    def __post_init__(self):
        if self.iterations < 0:
            raise ValueError("iterations must be >= 0")
        if self.max_rounds < 1:
            raise ValueError("max_rounds must be >= 1")
        if self.n_workers <= 0:
            # Leave one core for main process
            self.n_workers = max(1, cpu_count() - 1)
        self.report_interval = max(1, self.report_interval)
        self.chunk_size = max(1, self.chunk_size)
        self.log_sample_size = max(0, self.log_sample_size)


@dataclass(frozen=True)
class BatchProgress:
    completed: int
    total: int

    @property
    def fraction(self) -> float:
        return self.completed / self.total if self.total else 1.0


class CompositionBudgetError(ValueError):
    """A side exceeds the matchup's spell-point budget or tier cap."""

    def __init__(self, violations: List[str]):
        self.violations = list(violations)
        super().__init__("; ".join(violations))


# =============================================================================
# Budget constraint
# =============================================================================

def composition_points(composition: Sequence[Combatant], stat_weights: Optional[Mapping[str, float]] = None) -> int:
    """Sum of spell points over every equipped spell of every combatant."""
    return sum(
        calculate_spell_points(spell, stat_weights)
        for combatant in composition
        for spell in combatant.equipped_spells
    )


def check_composition_budget(
    composition: Sequence[Combatant],
    budget: float,
    label: str = "composition",
    stat_weights: Optional[Mapping[str, float]] = None,
) -> List[str]:
    """Return budget violations for one side (empty when within budget)."""
    points = composition_points(composition, stat_weights)
    if points > budget:
        return [f"{label} uses {points} spell points, budget is {budget:g}"]
    return []


def check_composition_tier(
    composition: Sequence[Combatant],
    max_tier: SpellTier,
    label: str = "composition",
    stat_weights: Optional[Mapping[str, float]] = None,
) -> List[str]:
    """Return one violation per equipped spell above max_tier."""
    order = list(SpellTier)
    violations = []
    for combatant in composition:
        for spell in combatant.equipped_spells:
            tier = calculate_tier(calculate_spell_points(spell, stat_weights))
            if order.index(tier) > order.index(max_tier):
                violations.append(
                    f"{label}: {combatant.name} equips {spell.name} ({tier.value}), cap is {max_tier.value}"
                )
    return violations


# =============================================================================
# Results
# =============================================================================

@dataclass(frozen=True)
class TurnStats:
    mean: float
    median: float
    min: int
    max: int
    histogram: List[int]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mean": self.mean,
            "median": self.median,
            "min": self.min,
            "max": self.max,
        }


@dataclass(frozen=True)
class SideStats:
    wins: int
    win_rate: float
    avg_damage_dealt: float
    avg_damage_per_turn: float
    avg_overkill: float
    damage_efficiency: float  # dealt / (dealt + overkill)
    avg_hp_remaining_on_win: float  # percent of the side's max hp

    def to_dict(self) -> Dict[str, Any]:
        return dict(self.__dict__)


@dataclass
class MatchupResult:
    """
    Aggregate outcome of a matchup batch.

    iterations_run < iterations_requested (with completed=False) means the
    batch was aborted; the statistics then cover only the runs made.
    Timeouts are runs that hit the round cap and are never counted as wins.
    """

    iterations_requested: int
    iterations_run: int
    completed: bool
    draws: int
    timeouts: int
    sides: Dict[str, SideStats]
    turns: TurnStats
    sample_logs: Dict[int, List[Dict[str, Any]]] = field(default_factory=dict)
    elapsed_ms: float = 0.0

    def win_rate(self, side: str) -> float:
        return self.sides[side].win_rate

    @property
    def draw_rate(self) -> float:
        return self.draws / self.iterations_run if self.iterations_run else 0.0

    @property
    def timeout_rate(self) -> float:
        return self.timeouts / self.iterations_run if self.iterations_run else 0.0

    def decisive_win_rate(self, side: str) -> float:
        """Share of decided fights (no draw, no timeout) won by side."""
        decided = sum(s.wins for s in self.sides.values())
        return self.sides[side].wins / decided if decided else 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "iterations_requested": self.iterations_requested,
            "iterations_run": self.iterations_run,
            "completed": self.completed,
            "draws": self.draws,
            "timeouts": self.timeouts,
            "sides": {name: s.to_dict() for name, s in self.sides.items()},
            "turns": self.turns.to_dict(),
            "sample_logs": {str(k): v for k, v in self.sample_logs.items()},
            "elapsed_ms": self.elapsed_ms,
        }


# =============================================================================
# Accumulator
# =============================================================================

class MatchupAccumulator:
    """
    Partial aggregate over any subset of run indices.

    Accumulators from disjoint index ranges merge by addition and
    running min/max, so merge order does not matter.
    """

    def __init__(self, max_rounds: int, log_sample_size: int = 0):
        self.max_rounds = max_rounds
        self.log_sample_size = log_sample_size
        self.runs = 0
        self.wins = {side: 0 for side in SIDES}
        self.draws = 0
        self.timeouts = 0
        self.turn_histogram = np.zeros(max_rounds + 1, dtype=np.int64)
        self.damage_dealt = {side: 0.0 for side in SIDES}
        self.damage_per_turn = {side: 0.0 for side in SIDES}
        self.overkill = {side: 0.0 for side in SIDES}
        self.hp_remaining_on_win = {side: 0.0 for side in SIDES}
        self.logs: Dict[int, List[Dict[str, Any]]] = {}

    def add(self, run_index: int, result: CombatResult) -> None:
        state = result.final_state
        rounds = max(1, min(result.rounds, self.max_rounds))
        self.runs += 1
        self.turn_histogram[rounds] += 1

        if result.timed_out:
            self.timeouts += 1
        elif result.winner is Winner.DRAW:
            self.draws += 1
        else:
            side = result.winner.value
            self.wins[side] += 1
            survivors = [c for c in state.combatants if c.team.value == side]
            max_hp = sum(c.max_health for c in survivors)
            if max_hp > 0:
                self.hp_remaining_on_win[side] += (
                    sum(c.current_health for c in survivors) / max_hp * 100
                )

        for side in SIDES:
            dealt = state.damage_dealt.get(side, 0.0)
            self.damage_dealt[side] += dealt
            self.damage_per_turn[side] += dealt / rounds
            self.overkill[side] += state.overkill.get(side, 0.0)

        if run_index < self.log_sample_size:
            self.logs[run_index] = [entry.to_dict() for entry in state.log]

    def merge(self, other: MatchupAccumulator) -> MatchupAccumulator:
        self.runs += other.runs
        self.draws += other.draws
        self.timeouts += other.timeouts
        self.turn_histogram += other.turn_histogram
        for side in SIDES:
            self.wins[side] += other.wins[side]
            self.damage_dealt[side] += other.damage_dealt[side]
            self.damage_per_turn[side] += other.damage_per_turn[side]
            self.overkill[side] += other.overkill[side]
            self.hp_remaining_on_win[side] += other.hp_remaining_on_win[side]
        self.logs.update(other.logs)
        return self

    # -------------------------------------------------------------------------
    # Finalization
    # -------------------------------------------------------------------------

    def _turn_stats(self) -> TurnStats:
        hist = self.turn_histogram
        n = int(hist.sum())
        if n == 0:
            return TurnStats(0.0, 0.0, 0, 0, hist.tolist())

        rounds = np.arange(hist.size)
        nonzero = np.nonzero(hist)[0]
        cumulative = np.cumsum(hist)

        def value_at(position: int) -> int:
            # Smallest round whose cumulative count covers the 0-based position
            return int(np.searchsorted(cumulative, position + 1, side="left"))

        median = (value_at((n - 1) // 2) + value_at(n // 2)) / 2
        return TurnStats(
            mean=float((rounds * hist).sum() / n),
            median=float(median),
            min=int(nonzero[0]),
            max=int(nonzero[-1]),
            histogram=hist.tolist(),
        )

    def _side_stats(self, side: str) -> SideStats:
        runs = self.runs or 1
        wins = self.wins[side]
        dealt = self.damage_dealt[side]
        overkill = self.overkill[side]
        total = dealt + overkill
        return SideStats(
            wins=wins,
            win_rate=wins / self.runs if self.runs else 0.0,
            avg_damage_dealt=dealt / runs,
            avg_damage_per_turn=self.damage_per_turn[side] / runs,
            avg_overkill=overkill / runs,
            damage_efficiency=dealt / total if total else 0.0,
            avg_hp_remaining_on_win=self.hp_remaining_on_win[side] / wins if wins else 0.0,
        )

    def to_result(self, iterations_requested: int, elapsed_ms: float = 0.0) -> MatchupResult:
        return MatchupResult(
            iterations_requested=iterations_requested,
            iterations_run=self.runs,
            completed=self.runs >= iterations_requested,
            draws=self.draws,
            timeouts=self.timeouts,
            sides={side: self._side_stats(side) for side in SIDES},
            turns=self._turn_stats(),
            sample_logs=dict(sorted(self.logs.items())),
            elapsed_ms=elapsed_ms,
        )


# =============================================================================
# Drivers
# =============================================================================

def _check_sides(side_a: Sequence[Combatant], side_b: Sequence[Combatant]) -> None:
    if any(c.team is not Team.HERO for c in side_a):
        raise ValueError("side_a combatants must be on the hero team")
    if any(c.team is not Team.ENEMY for c in side_b):
        raise ValueError("side_b combatants must be on the enemy team")


def _check_budget(side_a: Sequence[Combatant], side_b: Sequence[Combatant], config: MatchupConfig) -> None:
    violations = []
    if config.budget is not None:
        violations += check_composition_budget(side_a, config.budget, "side A")
        violations += check_composition_budget(side_b, config.budget, "side B")
    if config.max_tier is not None:
        violations += check_composition_tier(side_a, config.max_tier, "side A")
        violations += check_composition_tier(side_b, config.max_tier, "side B")
    if violations:
        raise CompositionBudgetError(violations)


def run_single(
    side_a: Sequence[Combatant],
    side_b: Sequence[Combatant],
    config: MatchupConfig,
    run_index: int,
) -> CombatResult:
    """Run one fight with the RNG stream for run_index."""
    rng = Random(config.seed + run_index)
    return run_combat(list(side_a), list(side_b), rng, config.max_rounds, config.rules)


def run_range(
    side_a: Sequence[Combatant],
    side_b: Sequence[Combatant],
    config: MatchupConfig,
    start: int,
    stop: int,
) -> MatchupAccumulator:
    """Aggregate runs [start, stop). Safe to call from a worker process."""
    acc = MatchupAccumulator(config.max_rounds, config.log_sample_size)
    for i in range(start, stop):
        acc.add(i, run_single(side_a, side_b, config, i))
    return acc


def iter_matchup(
    side_a: Sequence[Combatant],
    side_b: Sequence[Combatant],
    config: MatchupConfig,
) -> Generator[BatchProgress, None, MatchupResult]:
    """
    Serial driver that yields progress every report_interval runs.

    Lets a host sharing one thread interleave other work; closing the
    generator early abandons the batch. The final MatchupResult is the
    generator's return value.
    """
    _check_sides(side_a, side_b)
    _check_budget(side_a, side_b, config)

    start_time = time.perf_counter()
    acc = MatchupAccumulator(config.max_rounds, config.log_sample_size)
    for i in range(config.iterations):
        acc.add(i, run_single(side_a, side_b, config, i))
        if (i + 1) % config.report_interval == 0 and i + 1 < config.iterations:
            yield BatchProgress(i + 1, config.iterations)

    elapsed_ms = (time.perf_counter() - start_time) * 1000
    return acc.to_result(config.iterations, elapsed_ms)


def _run_serial(
    side_a: Sequence[Combatant],
    side_b: Sequence[Combatant],
    config: MatchupConfig,
    progress_callback: Optional[Callable[[int, int], None]],
    should_abort: Optional[Callable[[], bool]],
) -> MatchupResult:
    start_time = time.perf_counter()
    acc = MatchupAccumulator(config.max_rounds, config.log_sample_size)
    for i in range(config.iterations):
        acc.add(i, run_single(side_a, side_b, config, i))
        if (i + 1) % config.report_interval == 0 or i + 1 == config.iterations:
            if progress_callback:
                progress_callback(i + 1, config.iterations)
            logger.info("Matchup progress: %d/%d", i + 1, config.iterations)
            if should_abort and i + 1 < config.iterations and should_abort():
                logger.warning("Matchup aborted after %d/%d runs", i + 1, config.iterations)
                break

    elapsed_ms = (time.perf_counter() - start_time) * 1000
    return acc.to_result(config.iterations, elapsed_ms)


def run_matchup(
    side_a: Sequence[Combatant],
    side_b: Sequence[Combatant],
    config: Optional[MatchupConfig] = None,
    progress_callback: Optional[Callable[[int, int], None]] = None,
    should_abort: Optional[Callable[[], bool]] = None,
) -> MatchupResult:
    """
    Run a full matchup batch.

    Args:
        side_a: Hero-team combatants
        side_b: Enemy-team combatants
        config: Batch configuration (defaults to MatchupConfig())
        progress_callback: Called with (completed, total) at each report
            interval (serial) or chunk completion (parallel)
        should_abort: Polled between chunks; True stops the batch and the
            result reports completed=False

    Raises:
        CompositionBudgetError: a side exceeds config.budget or config.max_tier
    """
    config = config or MatchupConfig()
    _check_sides(side_a, side_b)
    _check_budget(side_a, side_b, config)

    if config.n_workers > 1 and config.iterations > config.chunk_size:
        from .worker import ParallelMatchupRunner

        with ParallelMatchupRunner(side_a, side_b, config) as runner:
            return runner.run(progress_callback, should_abort)

    return _run_serial(side_a, side_b, config, progress_callback, should_abort)
