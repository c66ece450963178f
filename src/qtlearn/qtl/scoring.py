"""
Score records for evaluated query trees and descriptions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Tuple

from .descriptions import Description
from .query_tree import QueryTree


@dataclass(frozen=True)
class QueryTreeScore:
    """Score of a query tree against the current examples.

    ``score`` is the final score produced by the configured strategy;
    ``coverage_score`` and ``specifity_score`` are its ingredients.
    """
    score: float
    coverage_score: float
    specifity_score: float
    nr_of_specific_nodes: int
    covered_positives: FrozenSet[str] = frozenset()
    not_covered_positives: FrozenSet[str] = frozenset()
    covered_negatives: FrozenSet[str] = frozenset()
    not_covered_negatives: FrozenSet[str] = frozenset()

    @property
    def accuracy(self) -> float:
        return self.score

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "coverage_score": self.coverage_score,
            "specifity_score": self.specifity_score,
            "nr_of_specific_nodes": self.nr_of_specific_nodes,
            "covered_positives": sorted(self.covered_positives),
            "not_covered_positives": sorted(self.not_covered_positives),
            "covered_negatives": sorted(self.covered_negatives),
            "not_covered_negatives": sorted(self.not_covered_negatives),
        }

    def __str__(self) -> str:
        return (
            f"score={self.score:.4f} coverage={self.coverage_score:.4f} "
            f"specifity={self.specifity_score:.4f} "
            f"(+{len(self.covered_positives)}/-{len(self.covered_negatives)})"
        )


@dataclass(frozen=True)
class EvaluatedQueryTree:
    """A query tree together with its coverage and score.

    Attributes:
        tree: The evaluated tree
        false_negatives: Positive example trees the tree does not subsume
        false_positives: Negative example trees the tree subsumes
        tree_score: Full score record
    """
    tree: QueryTree
    false_negatives: Tuple[QueryTree, ...]
    false_positives: Tuple[QueryTree, ...]
    tree_score: QueryTreeScore

    @property
    def score(self) -> float:
        return self.tree_score.score

    def sort_key(self) -> Tuple[float, int]:
        """Ascending key; smaller means better (score descending)."""
        return (-self.tree_score.score, -self.tree_score.nr_of_specific_nodes)

    def as_evaluated_description(self) -> "EvaluatedDescription":
        return EvaluatedDescription(self.tree.to_description(), self.tree_score)


@dataclass(frozen=True)
class EvaluatedDescription:
    """A concept description and its score."""
    description: Description
    tree_score: QueryTreeScore
    metadata: Dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def score(self) -> float:
        return self.tree_score.score

    @property
    def accuracy(self) -> float:
        return self.tree_score.accuracy

    def to_dict(self) -> Dict[str, Any]:
        return {
            "description": self.description.render(),
            "score": self.tree_score.to_dict(),
            **({"metadata": self.metadata} if self.metadata else {}),
        }
