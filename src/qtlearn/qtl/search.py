"""
Best-first search for one partial solution.

Starting from the distinct positive example trees, the search repeatedly pops
the best candidate from the frontier and generalizes it with every positive
example it does not cover yet. Generalizations that score at least as well as
the running best, or that can no longer beat it, go back on the frontier;
the rest are too general and are dropped. Every popped candidate joins the
partial solutions, whose best element is the result of the search.
"""

from __future__ import annotations

import heapq
import itertools
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from .heuristics import CoverageHeuristic
from .lgg import LGGGenerator
from .query_tree import QueryTree
from .scoring import EvaluatedQueryTree

logger = logging.getLogger(__name__)


class SearchState(str, Enum):
    """Lifecycle of one partial solution search."""

    INIT = "init"
    SEARCHING = "searching"
    DONE = "done"


class StopReason(str, Enum):
    """Why a search or a learning run ended."""

    FRONTIER_EXHAUSTED = "frontier_exhausted"
    NO_POSITIVES = "no_positives"
    TREE_TIME_EXPIRED = "tree_time_expired"
    TIME_EXPIRED = "time_expired"
    STOPPED = "stopped"


@dataclass
class SearchMetrics:
    """Counters for one partial solution search."""
    steps: int = 0
    evaluations: int = 0
    subsumption_tests: int = 0
    lgg_computations: int = 0
    lgg_time: float = 0.0
    too_general: int = 0
    duplicates: int = 0
    started_at: float = field(default_factory=time.monotonic)
    elapsed: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return {
            "steps": self.steps,
            "evaluations": self.evaluations,
            "subsumption_tests": self.subsumption_tests,
            "lgg_computations": self.lgg_computations,
            "lgg_time": self.lgg_time,
            "too_general": self.too_general,
            "duplicates": self.duplicates,
            "elapsed": self.elapsed,
        }


class PartialSolutionSearch:
    """Finds the best scoring tree for the currently uncovered examples.

    Args:
        lgg_generator: LGG operator
        heuristic: Tree evaluation
        max_tree_computation_time: Budget in seconds, <= 0 disables it
        should_stop: Polled between units of work; True ends the search
            (external stop request or expired global budget)
    """

    def __init__(
        self,
        lgg_generator: LGGGenerator,
        heuristic: CoverageHeuristic,
        max_tree_computation_time: float = 60.0,
        should_stop: Optional[Callable[[], bool]] = None,
    ):
        self.lgg_generator = lgg_generator
        self.heuristic = heuristic
        self.max_tree_computation_time = max_tree_computation_time
        self.should_stop = should_stop or (lambda: False)

        self.state = SearchState.INIT
        self.stop_reason: Optional[StopReason] = None
        self.metrics = SearchMetrics()

        self._positives: Sequence[QueryTree] = ()
        self._negatives: Sequence[QueryTree] = ()
        self._entity_of: Mapping[QueryTree, str] = {}
        self._frontier: List[Tuple[Tuple[float, int], int, EvaluatedQueryTree]] = []
        self._counter = itertools.count()
        self._partial_solutions: List[EvaluatedQueryTree] = []
        self._best: Optional[EvaluatedQueryTree] = None
        self._started_at = 0.0
        self._lgg_baseline: Tuple[int, float] = (0, 0.0)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def run(
        self,
        positives: Sequence[QueryTree],
        negatives: Sequence[QueryTree],
        entity_of: Mapping[QueryTree, str],
    ) -> Optional[EvaluatedQueryTree]:
        """Search for the best partial solution.

        Args:
            positives: Working positive example trees
            negatives: Working negative example trees
            entity_of: Example tree to entity map

        Returns:
            Best tree found, or None when nothing could be evaluated
        """
        self._init(positives, negatives, entity_of)

        best_score = 0.0
        while True:
            reason = self._termination_reason()
            if reason is not None:
                self.stop_reason = reason
                break
            best_score = self._step(best_score)

        self.state = SearchState.DONE
        self.metrics.elapsed = time.monotonic() - self._started_at
        self._log_summary()
        return self._best

    @property
    def partial_solutions(self) -> List[EvaluatedQueryTree]:
        """Popped candidates, best first."""
        return sorted(self._partial_solutions, key=EvaluatedQueryTree.sort_key)

    @property
    def best_solution(self) -> Optional[EvaluatedQueryTree]:
        return self._best

    def frontier_size(self) -> int:
        return len(self._frontier)

    # ------------------------------------------------------------------
    # States
    # ------------------------------------------------------------------

    def _init(
        self,
        positives: Sequence[QueryTree],
        negatives: Sequence[QueryTree],
        entity_of: Mapping[QueryTree, str],
    ) -> None:
        self.state = SearchState.INIT
        self.stop_reason = None
        self.metrics = SearchMetrics()
        self._started_at = time.monotonic()
        self._positives = list(positives)
        self._negatives = list(negatives)
        self._entity_of = entity_of
        self._frontier = []
        self._partial_solutions = []
        self._best = None

        lgg_computations = self.lgg_generator.computations
        lgg_time = self.lgg_generator.total_time
        self._lgg_baseline = (lgg_computations, lgg_time)

        distinct: List[QueryTree] = []
        for tree in self._positives:
            if not any(tree.is_same_tree_as(other) for other in distinct):
                distinct.append(tree)

        for tree in distinct:
            self._push(self._evaluate(tree, use_specifity=False))

        logger.debug(
            f"Initialized frontier with {len(distinct)} distinct trees "
            f"from {len(self._positives)} positive examples"
        )
        self.state = SearchState.SEARCHING

    def _step(self, best_score: float) -> float:
        """Expand the best frontier element; returns the updated running best."""
        self.metrics.steps += 1
        logger.debug(f"Frontier size: {len(self._frontier)}")
        current = self._pop()

        for example in current.false_negatives:
            if self._time_or_stop_reason() is not None:
                break

            lgg = self.lgg_generator.get_lgg(current.tree, example)
            solution = self._evaluate(lgg, use_specifity=True)
            score = solution.score

            if score >= best_score:
                self._push_if_new(solution)
                if score > best_score:
                    logger.info(f"Got better solution: {solution.tree_score}")
                best_score = score
            elif self.heuristic.maximum_achievable_score(solution) < best_score:
                self._push_if_new(solution)
            else:
                self.metrics.too_general += 1

        self._add_partial_solution(current)
        return best_score

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _evaluate(self, tree: QueryTree, use_specifity: bool) -> EvaluatedQueryTree:
        self.metrics.evaluations += 1
        self.metrics.subsumption_tests += len(self._positives) + len(self._negatives)
        return self.heuristic.evaluate(
            tree, self._positives, self._negatives, self._entity_of, use_specifity
        )

    def _push(self, evaluated: EvaluatedQueryTree) -> None:
        heapq.heappush(self._frontier, (evaluated.sort_key(), next(self._counter), evaluated))

    def _pop(self) -> EvaluatedQueryTree:
        return heapq.heappop(self._frontier)[2]

    def _push_if_new(self, solution: EvaluatedQueryTree) -> None:
        """Push unless an equivalent tree is on the frontier or already expanded."""
        for _, _, queued in self._frontier:
            if solution.tree.is_same_tree_as(queued.tree):
                self.metrics.duplicates += 1
                return
        for expanded in self._partial_solutions:
            if solution.tree.is_same_tree_as(expanded.tree):
                self.metrics.duplicates += 1
                return
        self._push(solution)

    def _add_partial_solution(self, evaluated: EvaluatedQueryTree) -> None:
        self._partial_solutions.append(evaluated)
        if self._best is None or evaluated.sort_key() < self._best.sort_key():
            self._best = evaluated

    def _time_or_stop_reason(self) -> Optional[StopReason]:
        if self.should_stop():
            return StopReason.STOPPED
        if self._is_tree_time_expired():
            return StopReason.TREE_TIME_EXPIRED
        return None

    def _termination_reason(self) -> Optional[StopReason]:
        reason = self._time_or_stop_reason()
        if reason is not None:
            return reason
        if not self._positives:
            return StopReason.NO_POSITIVES
        if not self._frontier:
            return StopReason.FRONTIER_EXHAUSTED
        return None

    def _is_tree_time_expired(self) -> bool:
        if self.max_tree_computation_time <= 0:
            return False
        return time.monotonic() - self._started_at >= self.max_tree_computation_time

    def _log_summary(self) -> None:
        computations, total_time = self._lgg_baseline
        self.metrics.lgg_computations = self.lgg_generator.computations - computations
        self.metrics.lgg_time = self.lgg_generator.total_time - total_time

        logger.info(f"...finished in {self.metrics.elapsed * 1000:.0f}ms ({self.stop_reason.value})")
        if self._best is not None:
            logger.info(
                f"Best partial solution:\n{self._best.tree.to_description()}\n({self._best.score:.4f})"
            )
        logger.info(f"#LGG computations: {self.metrics.lgg_computations}")
        logger.debug(f"LGG time: {self.metrics.lgg_time * 1000:.1f}ms")
        logger.debug(f"#Subsumption tests: {self.metrics.subsumption_tests}")
