"""
Parallel matchup execution across worker processes.

The iteration range is cut into chunks of config.chunk_size runs. Each
worker process receives the two compositions once (pool initializer) and
then only (start, stop) ranges; it returns a MatchupAccumulator that the
parent merges as chunks complete.

Usage:
    with ParallelMatchupRunner(side_a, side_b, config) as runner:
        result = runner.run()
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import FIRST_COMPLETED, Future, ProcessPoolExecutor, wait
from typing import Callable, List, Optional, Sequence, Set, Tuple

from ..state.combat import Combatant
from .batch import MatchupAccumulator, MatchupConfig, MatchupResult, run_range

logger = logging.getLogger(__name__)

__all__ = ["ParallelMatchupRunner", "chunk_ranges"]


# =============================================================================
# Worker Functions (run in separate processes)
# =============================================================================

_worker_sides: Optional[Tuple[List[Combatant], List[Combatant]]] = None
_worker_config: Optional[MatchupConfig] = None


def _worker_init(side_a: List[Combatant], side_b: List[Combatant], config: MatchupConfig):
    """Initialize worker process state."""
    global _worker_sides, _worker_config
    _worker_sides = (side_a, side_b)
    _worker_config = config


def _run_chunk(start: int, stop: int) -> MatchupAccumulator:
    side_a, side_b = _worker_sides
    return run_range(side_a, side_b, _worker_config, start, stop)


def chunk_ranges(iterations: int, chunk_size: int) -> List[Tuple[int, int]]:
    """Split [0, iterations) into consecutive [start, stop) chunks."""
    return [
        (start, min(start + chunk_size, iterations))
        for start in range(0, iterations, chunk_size)
    ]


# =============================================================================
# Runner
# =============================================================================

class ParallelMatchupRunner:
    """ProcessPoolExecutor-backed matchup driver."""

    def __init__(self, side_a: Sequence[Combatant], side_b: Sequence[Combatant], config: MatchupConfig):
        self.side_a = list(side_a)
        self.side_b = list(side_b)
        self.config = config
        self._executor: Optional[ProcessPoolExecutor] = None

    def _initialize(self):
        if self._executor is None:
            self._executor = ProcessPoolExecutor(
                max_workers=self.config.n_workers,
                initializer=_worker_init,
                initargs=(self.side_a, self.side_b, self.config),
            )

    def shutdown(self):
        if self._executor is not None:
            self._executor.shutdown(wait=True, cancel_futures=True)
            self._executor = None

    def __enter__(self):
        self._initialize()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.shutdown()
        return False

    def run(
        self,
        progress_callback: Optional[Callable[[int, int], None]] = None,
        should_abort: Optional[Callable[[], bool]] = None,
    ) -> MatchupResult:
        """
        Run every chunk and merge the partial aggregates.

        At most n_workers * 2 chunks are in flight, so an abort stops
        submitting new work and waits only for chunks already running.
        """
        self._initialize()
        config = self.config
        start_time = time.perf_counter()

        pending_ranges = chunk_ranges(config.iterations, config.chunk_size)
        pending_ranges.reverse()
        in_flight: Set[Future] = set()
        total = MatchupAccumulator(config.max_rounds, config.log_sample_size)
        aborted = False

        def submit_more():
            while pending_ranges and len(in_flight) < config.n_workers * 2:
                start, stop = pending_ranges.pop()
                in_flight.add(self._executor.submit(_run_chunk, start, stop))

        submit_more()
        while in_flight:
            done, _ = wait(in_flight, return_when=FIRST_COMPLETED)
            for future in done:
                in_flight.discard(future)
                total.merge(future.result())
            if progress_callback:
                progress_callback(total.runs, config.iterations)
            logger.info("Matchup progress: %d/%d", total.runs, config.iterations)

            if not aborted and should_abort and pending_ranges and should_abort():
                logger.warning("Matchup aborted after %d/%d runs", total.runs, config.iterations)
                aborted = True
                pending_ranges.clear()
            submit_more()

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        return total.to_result(config.iterations, elapsed_ms)
