"""
Combines accepted partial solutions into one disjunctive description.
"""

from __future__ import annotations

import logging
from typing import AbstractSet, Sequence, Set

from .descriptions import Union
from .heuristics import f_score
from .scoring import EvaluatedDescription, EvaluatedQueryTree, QueryTreeScore

logger = logging.getLogger(__name__)


class SolutionCombiner:
    """Builds the union of accepted trees and scores it on all examples.

    The score is an F-measure over the union of the example sets each partial
    solution covered when it was accepted. It is reported only and never fed
    back into the search.
    """

    def __init__(self, coverage_beta: float = 0.5):
        self.coverage_beta = coverage_beta

    def combine(
        self,
        partial_solutions: Sequence[EvaluatedQueryTree],
        positive_examples: AbstractSet[str],
        negative_examples: AbstractSet[str],
    ) -> EvaluatedDescription:
        description = Union.of(solution.tree.to_description() for solution in partial_solutions)

        pos_covered: Set[str] = set()
        neg_covered: Set[str] = set()
        for solution in partial_solutions:
            pos_covered |= solution.tree_score.covered_positives
            neg_covered |= solution.tree_score.covered_negatives

        recall = len(pos_covered) / len(positive_examples) if positive_examples else 0.0
        covered = len(pos_covered) + len(neg_covered)
        precision = len(pos_covered) / covered if covered else 0.0
        coverage_score = f_score(recall, precision, self.coverage_beta)

        score = QueryTreeScore(
            score=coverage_score,
            coverage_score=coverage_score,
            specifity_score=-1,
            nr_of_specific_nodes=-1,
            covered_positives=frozenset(pos_covered),
            not_covered_positives=frozenset(positive_examples) - pos_covered,
            covered_negatives=frozenset(neg_covered),
            not_covered_negatives=frozenset(negative_examples) - neg_covered,
        )
        return EvaluatedDescription(
            description,
            score,
            metadata={"partial_solutions": len(partial_solutions)},
        )
