"""Shared test fixtures: small knowledge graphs and learner helpers."""

from __future__ import annotations

import pytest

from qtlearn.configuration.settings import LearnerConfig
from qtlearn.qtl.cache import QueryTreeCache
from qtlearn.qtl.graph import GraphModel


@pytest.fixture
def people_graph() -> GraphModel:
    """Workers, a student and some dogs.

    alice and bob share "Person working for a Company with an age", the dogs
    share "Dog".
    """
    return GraphModel.from_triples([
        ("alice", "rdf:type", "Person"),
        ("alice", "worksFor", "acme"),
        ("alice", "age", "30", "xsd:int"),
        ("bob", "rdf:type", "Person"),
        ("bob", "worksFor", "globex"),
        ("bob", "age", "41", "xsd:int"),
        ("carol", "rdf:type", "Person"),
        ("carol", "studiesAt", "mit"),
        ("acme", "rdf:type", "Company"),
        ("globex", "rdf:type", "Company"),
        ("mit", "rdf:type", "University"),
        ("rex", "rdf:type", "Dog"),
        ("rex", "ownedBy", "alice"),
        ("fido", "rdf:type", "Dog"),
        ("spot", "rdf:type", "Dog"),
        ("rex2", "rdf:type", "Dog"),
        ("rex2", "ownedBy", "bob"),
    ])


@pytest.fixture
def people_cache(people_graph: GraphModel) -> QueryTreeCache:
    return QueryTreeCache.for_model(people_graph)


@pytest.fixture
def fast_config() -> LearnerConfig:
    """Default weights, generous time budgets."""
    return LearnerConfig(
        max_execution_time_in_seconds=30,
        max_tree_computation_time_in_seconds=30,
    )
