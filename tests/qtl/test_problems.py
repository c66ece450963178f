"""Tests for learning problem definitions."""

import dataclasses

import pytest

from qtlearn.errors import ConfigurationError
from qtlearn.qtl.problems import (
    ClassLearningProblem,
    PosNegLearningProblem,
    PosOnlyLearningProblem,
    ProblemKind,
)


def test_pos_neg_of():
    problem = PosNegLearningProblem.of(["a", "b", "a"], ["c"])
    assert problem.positive_examples == frozenset({"a", "b"})
    assert problem.negative_examples == frozenset({"c"})
    assert problem.kind is ProblemKind.POS_NEG


def test_pos_neg_overlap():
    with pytest.raises(ConfigurationError) as exc_info:
        PosNegLearningProblem.of(["a", "b"], ["b", "c"])
    assert exc_info.value.details["entities"] == ["b"]


def test_empty_negatives_allowed():
    assert PosNegLearningProblem.of(["a"], []).negative_examples == frozenset()


def test_problems_are_immutable():
    problem = PosNegLearningProblem.of(["a"], ["b"])
    with pytest.raises(dataclasses.FrozenInstanceError):
        problem.positive_examples = frozenset({"x"})


def test_other_kinds():
    assert PosOnlyLearningProblem(frozenset({"a"})).kind is ProblemKind.POS_ONLY
    assert ClassLearningProblem("Person").kind is ProblemKind.CLASS
