"""
Learning problems.

The kinds of learning problem form a closed set. The disjunctive learner only
supports positive/negative problems; every other kind is rejected when the
learner is constructed, before any tree is built.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Iterable

from ..errors import ConfigurationError


class ProblemKind(str, Enum):
    POS_NEG = "pos_neg"
    POS_ONLY = "pos_only"
    CLASS = "class"


@dataclass(frozen=True)
class LearningProblem:
    """Base of all learning problems."""

    @property
    def kind(self) -> ProblemKind:
        raise NotImplementedError


@dataclass(frozen=True)
class PosNegLearningProblem(LearningProblem):
    """Separate positive from negative example entities."""
    positive_examples: FrozenSet[str]
    negative_examples: FrozenSet[str]

    @classmethod
    def of(cls, positives: Iterable[str], negatives: Iterable[str]) -> "PosNegLearningProblem":
        problem = cls(frozenset(positives), frozenset(negatives))
        problem.validate()
        return problem

    @property
    def kind(self) -> ProblemKind:
        return ProblemKind.POS_NEG

    def validate(self) -> None:
        """Raise ConfigurationError if an entity is labelled both ways."""
        overlap = self.positive_examples & self.negative_examples
        if overlap:
            raise ConfigurationError(
                "Entities cannot be both positive and negative examples",
                details={"entities": sorted(overlap)},
            )


@dataclass(frozen=True)
class PosOnlyLearningProblem(LearningProblem):
    """Describe the positive examples without counter examples."""
    positive_examples: FrozenSet[str]

    @property
    def kind(self) -> ProblemKind:
        return ProblemKind.POS_ONLY


@dataclass(frozen=True)
class ClassLearningProblem(LearningProblem):
    """Learn a definition of an existing class."""
    class_to_describe: str

    @property
    def kind(self) -> ProblemKind:
        return ProblemKind.CLASS
