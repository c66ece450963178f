"""Tests for the best-first partial solution search."""

import pytest

from qtlearn.qtl.heuristics import CoverageHeuristic
from qtlearn.qtl.lgg import LGGGenerator
from qtlearn.qtl.search import PartialSolutionSearch, SearchState, StopReason


def _examples(cache, positives, negatives):
    pos = [cache.get_query_tree(e) for e in positives]
    neg = [cache.get_query_tree(e) for e in negatives]
    entity_of = {cache.get_query_tree(e): e for e in list(positives) + list(negatives)}
    return pos, neg, entity_of


@pytest.fixture
def search():
    return PartialSolutionSearch(LGGGenerator(), CoverageHeuristic(), max_tree_computation_time=30)


class TestPartialSolutionSearch:
    """Search behaviour on small graphs."""

    def test_finds_shared_pattern(self, search, people_cache):
        pos, neg, entity_of = _examples(people_cache, ["alice", "bob"], ["rex"])

        best = search.run(pos, neg, entity_of)

        assert best is not None
        assert best.score == pytest.approx(1.0)
        assert best.tree_score.covered_positives == {"alice", "bob"}
        assert best.tree_score.covered_negatives == frozenset()
        assert best.tree.is_wildcard()
        assert search.state is SearchState.DONE
        assert search.stop_reason is StopReason.FRONTIER_EXHAUSTED
        assert search.frontier_size() == 0

    def test_prefers_accurate_subset_over_overgeneral_tree(self, search, people_cache):
        pos, neg, entity_of = _examples(people_cache, ["alice", "bob", "rex2"], ["rex", "fido", "spot"])

        best = search.run(pos, neg, entity_of)

        assert best.score == pytest.approx(7 / 9)
        assert best.tree_score.covered_positives == {"alice", "bob"}
        assert best.tree_score.covered_negatives == frozenset()

    def test_single_positive(self, search, people_cache):
        pos, neg, entity_of = _examples(people_cache, ["carol"], ["rex"])

        best = search.run(pos, neg, entity_of)

        assert best.tree is pos[0]
        assert best.score == pytest.approx(1.0)
        assert search.metrics.lgg_computations == 0

    def test_partial_solutions_sorted_best_first(self, search, people_cache):
        pos, neg, entity_of = _examples(people_cache, ["alice", "bob", "rex2"], ["rex", "fido", "spot"])
        search.run(pos, neg, entity_of)

        solutions = search.partial_solutions
        assert solutions[0] is search.best_solution
        keys = [solution.sort_key() for solution in solutions]
        assert keys == sorted(keys)

    def test_no_duplicate_expansions(self, search, people_cache):
        pos, neg, entity_of = _examples(people_cache, ["alice", "bob", "rex2"], ["rex", "fido", "spot"])
        search.run(pos, neg, entity_of)

        solutions = search.partial_solutions
        for i, first in enumerate(solutions):
            for second in solutions[i + 1:]:
                assert not first.tree.is_same_tree_as(second.tree)

    def test_same_shape_under_different_roots(self, search):
        from qtlearn.qtl.cache import QueryTreeCache
        from qtlearn.qtl.graph import GraphModel

        model = GraphModel.from_triples([("fido", "rdf:type", "Dog"), ("spot", "rdf:type", "Dog")])
        cache = QueryTreeCache.for_model(model)
        # Rooted at different labels, so both trees enter the frontier
        pos, neg, entity_of = _examples(cache, ["fido", "spot"], [])

        best = search.run(pos, neg, entity_of)

        assert best.tree_score.covered_positives == {"fido", "spot"}
        assert best.score == pytest.approx(1.0)

    def test_no_positives(self, search):
        assert search.run([], [], {}) is None
        assert search.stop_reason is StopReason.NO_POSITIVES

    def test_should_stop_ends_search(self, people_cache):
        search = PartialSolutionSearch(LGGGenerator(), CoverageHeuristic(), should_stop=lambda: True)
        pos, neg, entity_of = _examples(people_cache, ["alice", "bob"], ["rex"])

        assert search.run(pos, neg, entity_of) is None
        assert search.stop_reason is StopReason.STOPPED

    def test_metrics(self, search, people_cache):
        generator = search.lgg_generator
        generator.get_lgg(people_cache.get_query_tree("fido"), people_cache.get_query_tree("spot"))
        pos, neg, entity_of = _examples(people_cache, ["alice", "bob"], ["rex"])

        search.run(pos, neg, entity_of)

        metrics = search.metrics.to_dict()
        assert metrics["steps"] == 3
        assert metrics["lgg_computations"] == 2
        assert metrics["duplicates"] == 1
        assert metrics["evaluations"] == 4
