"""
Disjunctive query tree learner.

Sequential covering around ``PartialSolutionSearch``:
1. Search the best tree for the positives that are still uncovered
2. Accept it if it reaches the minimum tree score
3. Retire every working example the accepted tree subsumes
4. Rebuild the combined disjunctive solution
5. Repeat until stopped, out of time, or no positive is left

A tree does not have to cover every positive to be accepted, which is what
makes the learner tolerate mislabeled examples.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Set

from ..configuration.settings import LearnerConfig
from ..errors import LearningProblemUnsupportedError
from .cache import QueryTreeCache
from .combiner import SolutionCombiner
from .graph import GraphModel
from .heuristics import CoverageHeuristic
from .lgg import LGGGenerator
from .problems import LearningProblem, PosNegLearningProblem, ProblemKind
from .query_tree import QueryTree
from .scoring import EvaluatedDescription, EvaluatedQueryTree
from .search import PartialSolutionSearch, StopReason

logger = logging.getLogger(__name__)

SUPPORTED_PROBLEM_KINDS = (ProblemKind.POS_NEG,)


class LoopState(str, Enum):
    """Outer covering loop states."""

    RUNNING = "running"
    SOLUTION_FOUND = "solution_found"
    NO_ACCEPTABLE_SOLUTION = "no_acceptable_solution"
    STOPPED = "stopped"


@dataclass
class LearningRun:
    """Report of one call to ``start``."""
    started_at: datetime = field(default_factory=datetime.now)
    rounds: int = 0
    accepted: int = 0
    unproductive: int = 0
    elapsed: float = 0.0
    state: LoopState = LoopState.RUNNING
    stop_reason: Optional[StopReason] = None
    round_metrics: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "started_at": self.started_at.isoformat(),
            "rounds": self.rounds,
            "accepted": self.accepted,
            "unproductive": self.unproductive,
            "elapsed": self.elapsed,
            "state": self.state.value,
            "stop_reason": self.stop_reason.value if self.stop_reason else None,
            "round_metrics": list(self.round_metrics),
        }


class QTL2Disjunctive:
    """Query tree learner with noise, producing a disjunction of trees.

    Args:
        learning_problem: Positive/negative learning problem
        tree_cache: Source of example trees
        config: Learner configuration (defaults if omitted)
        lgg_generator: LGG operator (a fresh ``LGGGenerator`` if omitted)
        heuristic: Tree evaluation (built from ``config`` if omitted)

    Raises:
        LearningProblemUnsupportedError: For anything but a pos/neg problem
        ConfigurationError: If an entity is both positive and negative
    """

    def __init__(
        self,
        learning_problem: LearningProblem,
        tree_cache: QueryTreeCache,
        config: Optional[LearnerConfig] = None,
        lgg_generator: Optional[LGGGenerator] = None,
        heuristic: Optional[CoverageHeuristic] = None,
    ):
        if not isinstance(learning_problem, PosNegLearningProblem):
            raise LearningProblemUnsupportedError(
                learning_problem.kind.value,
                supported=tuple(kind.value for kind in SUPPORTED_PROBLEM_KINDS),
            )
        learning_problem.validate()

        self.learning_problem = learning_problem
        self.tree_cache = tree_cache
        self.config = config or LearnerConfig()
        self.lgg_generator = lgg_generator or LGGGenerator()
        self.heuristic = heuristic or CoverageHeuristic.from_config(self.config)
        self.combiner = SolutionCombiner(coverage_beta=self.config.coverage_beta)

        self._stop = threading.Event()
        self._running = False
        self._initialized = False
        self._start_time = 0.0

        self._tree_to_entity: Dict[QueryTree, str] = {}
        self._current_pos_trees: List[QueryTree] = []
        self._current_neg_trees: List[QueryTree] = []
        self._current_pos_examples: Set[str] = set()
        self._current_neg_examples: Set[str] = set()

        self._partial_solutions: List[EvaluatedQueryTree] = []
        self._best_partial_solution: Optional[EvaluatedQueryTree] = None
        self._current_best_solution: Optional[EvaluatedDescription] = None
        self.state = LoopState.STOPPED
        self.run_report = LearningRun()

    @classmethod
    def for_graph(
        cls,
        learning_problem: LearningProblem,
        model: GraphModel,
        config: Optional[LearnerConfig] = None,
    ) -> "QTL2Disjunctive":
        """Learner with its own tree cache over ``model``."""
        config = config or LearnerConfig()
        return cls(learning_problem, QueryTreeCache.for_model(model, config.trees), config)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def init(self) -> None:
        """Build the example trees once; working sets start complete.

        Inside ``start`` the tree construction counts against the time budget
        and honours ``stop``; an interrupted init is redone by the next start.
        """
        logger.info("Initializing...")
        problem = self.learning_problem
        self._initialized = False

        self._tree_to_entity = {}
        self._current_pos_trees = []
        self._current_neg_trees = []
        self._current_pos_examples = set(problem.positive_examples)
        self._current_neg_examples = set(problem.negative_examples)

        logger.info("Generating trees...")
        examples = [(entity, self._current_pos_trees) for entity in sorted(problem.positive_examples)]
        examples += [(entity, self._current_neg_trees) for entity in sorted(problem.negative_examples)]
        for entity, trees in examples:
            if self._running and self._should_stop():
                logger.info(f"...interrupted after {len(self._tree_to_entity)} of {len(examples)} trees.")
                return
            tree = self.tree_cache.get_query_tree(entity)
            self._tree_to_entity[tree] = entity
            trees.append(tree)
        logger.info("...done.")

        self._initialized = True

    def start(self) -> Optional[EvaluatedDescription]:
        """Run the covering loop until a termination criterion holds.

        Blocks the calling thread; ``stop`` may be called from another one.
        The time budget starts here and includes building the example trees.

        Returns:
            The combined solution, or None if no tree was accepted
        """
        self._reset()
        try:
            if not self._initialized:
                self.init()

            logger.info(
                "Setup:"
                f"\n#Pos. examples: {len(self._current_pos_examples)}"
                f"\n#Neg. examples: {len(self._current_neg_examples)}"
                f"\nCoverage beta: {self.config.coverage_beta}"
                f"\nNoise percentage: {self.config.noise_percentage}"
            )
            logger.info("Running...")
            self._run_loop()
        finally:
            self.state = LoopState.STOPPED
            self._running = False
            self.run_report.state = self.state
            self.run_report.elapsed = time.monotonic() - self._start_time

        logger.info(f"Finished in {self.run_report.elapsed * 1000:.0f}ms.")
        if self._current_best_solution is not None:
            logger.info(f"Combined solution:\n{self._current_best_solution.description}")
            logger.info(str(self._current_best_solution.tree_score))
        return self._current_best_solution

    def stop(self) -> None:
        """Ask a running ``start`` to finish after its current unit of work."""
        self._stop.set()

    def is_running(self) -> bool:
        return self._running

    # ------------------------------------------------------------------
    # Results
    # ------------------------------------------------------------------

    def get_current_best_solution(self) -> Optional[EvaluatedDescription]:
        """Combined disjunctive solution accepted so far."""
        return self._current_best_solution

    def get_current_best_description(self):
        if self._current_best_solution is None:
            return None
        return self._current_best_solution.description

    def get_best_solution(self) -> Optional[EvaluatedQueryTree]:
        """Best tree of the most recent partial solution search."""
        return self._best_partial_solution

    def get_partial_solutions(self) -> List[EvaluatedQueryTree]:
        """Accepted trees in acceptance order."""
        return list(self._partial_solutions)

    @property
    def current_positive_examples(self) -> Set[str]:
        return set(self._current_pos_examples)

    @property
    def current_negative_examples(self) -> Set[str]:
        return set(self._current_neg_examples)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _reset(self) -> None:
        self._partial_solutions = []
        self._best_partial_solution = None
        self._current_best_solution = None
        self._stop.clear()
        self._running = True
        self.state = LoopState.RUNNING
        self._start_time = time.monotonic()
        self.run_report = LearningRun()
        self.lgg_generator.reset_statistics()

    def _run_loop(self) -> None:
        iteration = 1
        while True:
            reason = self._termination_reason()
            if reason is not None:
                self.run_report.stop_reason = reason
                return

            self.state = LoopState.RUNNING
            logger.info(f"{iteration}. iteration...")
            logger.info(f"#Remaining pos. examples: {len(self._current_pos_trees)}")
            logger.info(f"#Remaining neg. examples: {len(self._current_neg_trees)}")
            iteration += 1
            self.run_report.rounds += 1

            search = self._compute_next_partial_solution()
            best = search.best_solution

            if best is not None and best.score >= self.config.minimum_tree_score:
                self._accept(best)
                self.state = LoopState.SOLUTION_FOUND
                self.run_report.accepted += 1
                logger.info(f"combined accuracy: {self._current_best_solution.accuracy:.2f}")
                continue

            self.state = LoopState.NO_ACCEPTABLE_SOLUTION
            self.run_report.unproductive += 1
            if best is None:
                logger.info("no tree found, the search ended before evaluating any candidate")
            else:
                logger.info(
                    "no tree found, which satisfies the minimum criteria - the best was: "
                    f"{best.tree.to_description()} with score {best.score:.4f}"
                )
            # The search is deterministic, another round over unchanged
            # working sets cannot find anything new
            self.run_report.stop_reason = self._termination_reason() or search.stop_reason
            return

    def _compute_next_partial_solution(self) -> PartialSolutionSearch:
        logger.info("Computing best partial solution...")
        search = PartialSolutionSearch(
            self.lgg_generator,
            self.heuristic,
            max_tree_computation_time=self.config.max_tree_computation_time_in_seconds,
            should_stop=self._should_stop,
        )
        self._best_partial_solution = search.run(
            self._current_pos_trees, self._current_neg_trees, self._tree_to_entity
        )
        self.run_report.round_metrics.append(search.metrics.to_dict())
        return search

    def _accept(self, solution: EvaluatedQueryTree) -> None:
        """Append the solution and permanently retire the examples it covers."""
        self._partial_solutions.append(solution)

        remaining_pos: List[QueryTree] = []
        for tree in self._current_pos_trees:
            if tree.is_subsumed_by(solution.tree):
                self._current_pos_examples.discard(self._tree_to_entity[tree])
            else:
                remaining_pos.append(tree)
        self._current_pos_trees = remaining_pos

        remaining_neg: List[QueryTree] = []
        for tree in self._current_neg_trees:
            if tree.is_subsumed_by(solution.tree):
                self._current_neg_examples.discard(self._tree_to_entity[tree])
            else:
                remaining_neg.append(tree)
        self._current_neg_trees = remaining_neg

        self._current_best_solution = self.combiner.combine(
            self._partial_solutions,
            self.learning_problem.positive_examples,
            self.learning_problem.negative_examples,
        )

    def _should_stop(self) -> bool:
        return self._stop.is_set() or self._is_time_expired()

    def _termination_reason(self) -> Optional[StopReason]:
        if self._stop.is_set():
            return StopReason.STOPPED
        if self._is_time_expired():
            return StopReason.TIME_EXPIRED
        if not self._current_pos_trees:
            return StopReason.NO_POSITIVES
        return None

    def _is_time_expired(self) -> bool:
        limit = self.config.max_execution_time_in_seconds
        if limit <= 0:
            return False
        return time.monotonic() - self._start_time >= limit
