"""
Coverage heuristic for query trees.

Scores a candidate tree against the current positive and negative example
trees. The computation is a single pure function: it partitions the examples
by subsumption, derives the coverage F-measure and the specifity bonus, and
hands everything to a named ``ScoreStrategy`` which produces the final score.

Strategies:
- ``WeightedAccuracyStrategy`` (default): predictive accuracy where every
  positive counts ``pos_examples_weight`` times.
- ``CoverageSpecifityStrategy``: the weighted sum of coverage and specifity.
"""

from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Mapping, Sequence, Tuple

from ..configuration.settings import HeuristicType, LearnerConfig
from .query_tree import QueryTree
from .scoring import EvaluatedQueryTree, QueryTreeScore

logger = logging.getLogger(__name__)


def f_score(recall: float, precision: float, beta: float) -> float:
    """Weighted F-measure; 0 when both recall and precision are 0."""
    if precision + recall == 0:
        return 0.0
    beta_sq = beta * beta
    return (1 + beta_sq) * precision * recall / (beta_sq * precision + recall)


@dataclass(frozen=True)
class Coverage:
    """Example counts of a candidate tree."""
    true_positives: int
    false_negatives: int
    false_positives: int
    true_negatives: int

    @property
    def positives(self) -> int:
        return self.true_positives + self.false_negatives

    @property
    def recall(self) -> float:
        if self.positives == 0:
            return 0.0
        return self.true_positives / self.positives

    @property
    def precision(self) -> float:
        covered = self.true_positives + self.false_positives
        if covered == 0:
            return 0.0
        return self.true_positives / covered


class ScoreStrategy(ABC):
    """Turns coverage and the raw weighted score into the final score."""

    name: str = "base"

    @abstractmethod
    def score(self, coverage: Coverage, raw_score: float) -> float:
        """Final score of a tree."""

    @abstractmethod
    def maximum_achievable_score(self, coverage: Coverage, specifity_score: float) -> float:
        """Upper bound on the score any generalization of the tree can reach.

        Generalizing can only cover more examples and lose specific nodes, so
        the bound assumes every positive gets covered without covering any
        further negative.
        """


class WeightedAccuracyStrategy(ScoreStrategy):
    """Predictive accuracy with positives weighted ``pos_examples_weight`` times."""

    name = HeuristicType.WEIGHTED_ACCURACY.value

    def __init__(self, pos_examples_weight: float = 2.0):
        self.pos_examples_weight = pos_examples_weight

    def score(self, coverage: Coverage, raw_score: float) -> float:
        w = self.pos_examples_weight
        denominator = w * coverage.positives + coverage.true_negatives + coverage.false_positives
        if denominator == 0:
            return 0.0
        return (w * coverage.true_positives + coverage.true_negatives) / denominator

    def maximum_achievable_score(self, coverage: Coverage, specifity_score: float) -> float:
        w = self.pos_examples_weight
        denominator = w * coverage.positives + coverage.true_negatives + coverage.false_positives
        if denominator == 0:
            return 0.0
        return (w * coverage.positives + coverage.true_negatives) / denominator


class CoverageSpecifityStrategy(ScoreStrategy):
    """The raw score: weighted coverage F-measure plus weighted specifity."""

    name = HeuristicType.COVERAGE_SPECIFITY.value

    def __init__(self, coverage_weight: float = 0.8, specifity_weight: float = 0.1, coverage_beta: float = 0.5):
        self.coverage_weight = coverage_weight
        self.specifity_weight = specifity_weight
        self.coverage_beta = coverage_beta

    def score(self, coverage: Coverage, raw_score: float) -> float:
        return raw_score

    def maximum_achievable_score(self, coverage: Coverage, specifity_score: float) -> float:
        covered = coverage.positives + coverage.false_positives
        precision = coverage.positives / covered if covered else 0.0
        best_coverage = f_score(1.0 if coverage.positives else 0.0, precision, self.coverage_beta)
        return self.coverage_weight * best_coverage + self.specifity_weight * specifity_score


def create_strategy(config: LearnerConfig) -> ScoreStrategy:
    """Strategy named by the configuration."""
    if config.heuristic is HeuristicType.COVERAGE_SPECIFITY:
        return CoverageSpecifityStrategy(
            coverage_weight=config.coverage_weight,
            specifity_weight=config.specifity_weight,
            coverage_beta=config.coverage_beta,
        )
    return WeightedAccuracyStrategy(pos_examples_weight=config.pos_examples_weight)


class CoverageHeuristic:
    """Evaluates query trees against working example sets.

    Args:
        coverage_weight: Weight of the coverage F-measure in the raw score
        specifity_weight: Weight of the specifity bonus in the raw score
        coverage_beta: Beta of the coverage F-measure
        strategy: Final score strategy
    """

    def __init__(
        self,
        coverage_weight: float = 0.8,
        specifity_weight: float = 0.1,
        coverage_beta: float = 0.5,
        strategy: ScoreStrategy | None = None,
    ):
        self.coverage_weight = coverage_weight
        self.specifity_weight = specifity_weight
        self.coverage_beta = coverage_beta
        self.strategy = strategy or WeightedAccuracyStrategy()

    @classmethod
    def from_config(cls, config: LearnerConfig) -> "CoverageHeuristic":
        return cls(
            coverage_weight=config.coverage_weight,
            specifity_weight=config.specifity_weight,
            coverage_beta=config.coverage_beta,
            strategy=create_strategy(config),
        )

    def evaluate(
        self,
        tree: QueryTree,
        positives: Sequence[QueryTree],
        negatives: Sequence[QueryTree],
        entity_of: Mapping[QueryTree, str],
        use_specifity: bool = True,
    ) -> EvaluatedQueryTree:
        """Score ``tree`` against the working example trees.

        Args:
            tree: Candidate tree
            positives: Working positive example trees (must not be empty)
            negatives: Working negative example trees
            entity_of: Example tree to entity map
            use_specifity: Whether the specifity bonus is computed

        Returns:
            The evaluated tree with its coverage partition and final score
        """
        covered_pos, uncovered_pos = _partition(tree, positives)
        covered_neg, uncovered_neg = _partition(tree, negatives)

        coverage = Coverage(
            true_positives=len(covered_pos),
            false_negatives=len(uncovered_pos),
            false_positives=len(covered_neg),
            true_negatives=len(uncovered_neg),
        )
        coverage_score = f_score(coverage.recall, coverage.precision, self.coverage_beta)

        nr_of_specific_nodes = tree.nr_of_specific_nodes()
        specifity_score = 0.0
        if use_specifity and nr_of_specific_nodes > 0:
            specifity_score = math.log(nr_of_specific_nodes)

        raw_score = self.coverage_weight * coverage_score + self.specifity_weight * specifity_score

        tree_score = QueryTreeScore(
            score=self.strategy.score(coverage, raw_score),
            coverage_score=coverage_score,
            specifity_score=specifity_score,
            nr_of_specific_nodes=nr_of_specific_nodes,
            covered_positives=frozenset(entity_of[t] for t in covered_pos),
            not_covered_positives=frozenset(entity_of[t] for t in uncovered_pos),
            covered_negatives=frozenset(entity_of[t] for t in covered_neg),
            not_covered_negatives=frozenset(entity_of[t] for t in uncovered_neg),
        )
        return EvaluatedQueryTree(
            tree=tree,
            false_negatives=tuple(uncovered_pos),
            false_positives=tuple(covered_neg),
            tree_score=tree_score,
        )

    def maximum_achievable_score(self, evaluated: EvaluatedQueryTree) -> float:
        score = evaluated.tree_score
        coverage = Coverage(
            true_positives=len(score.covered_positives),
            false_negatives=len(evaluated.false_negatives),
            false_positives=len(evaluated.false_positives),
            true_negatives=len(score.not_covered_negatives),
        )
        return self.strategy.maximum_achievable_score(coverage, score.specifity_score)


def _partition(
    tree: QueryTree,
    examples: Sequence[QueryTree],
) -> Tuple[List[QueryTree], List[QueryTree]]:
    covered: List[QueryTree] = []
    uncovered: List[QueryTree] = []
    for example in examples:
        if example.is_subsumed_by(tree):
            covered.append(example)
        else:
            uncovered.append(example)
    return covered, uncovered
