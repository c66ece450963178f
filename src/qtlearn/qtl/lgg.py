"""
Least General Generalization of query trees.

The LGG of two trees is the most specific tree that subsumes both. Root
labels survive when equal and become the wildcard otherwise. Children reached
through a shared edge are paired one-to-one and generalised recursively;
children without a partner are dropped.
"""

from __future__ import annotations

import logging
import time
from typing import Dict, List, Tuple

import networkx as nx

from .query_tree import WILDCARD, NodeKind, QueryTree

logger = logging.getLogger(__name__)


class LGGGenerator:
    """Computes least general generalizations.

    Keeps simple counters of how often and how long it ran so the learner can
    report them per round.
    """

    def __init__(self) -> None:
        self.computations = 0
        self.total_time = 0.0

    def reset_statistics(self) -> None:
        self.computations = 0
        self.total_time = 0.0

    def get_lgg(self, tree1: QueryTree, tree2: QueryTree) -> QueryTree:
        """Return the LGG of ``tree1`` and ``tree2``."""
        started = time.perf_counter()
        lgg = self._lgg(tree1, tree2)
        self.total_time += time.perf_counter() - started
        self.computations += 1
        return lgg

    def _lgg(self, tree1: QueryTree, tree2: QueryTree) -> QueryTree:
        if tree1 is tree2:
            return tree1

        if tree1.label == tree2.label and tree1.kind == tree2.kind:
            label, kind = tree1.label, tree1.kind
        else:
            label, kind = WILDCARD, NodeKind.RESOURCE

        children: List[Tuple[str, QueryTree]] = []
        shared_edges = sorted(set(tree1.edges()) & set(tree2.edges()))
        for edge in shared_edges:
            for child in self._pair_children(
                tree1.children_by_edge(edge), tree2.children_by_edge(edge)
            ):
                children.append((edge, child))

        return QueryTree(label, children, kind)


    def _pair_children(
        self,
        left: Tuple[QueryTree, ...],
        right: Tuple[QueryTree, ...],
    ) -> List[QueryTree]:
        """Pair children one-to-one so that the paired LGGs keep the most.

        Every pair of children is an edge of a complete bipartite graph,
        weighted by the specific nodes and then the size of its LGG. The
        maximum weight matching among those pairing as many children as
        possible gives the most specific result. Both sides are put in
        canonical order first, so the matching does not depend on which tree
        came first.
        """
        left = sorted(left, key=QueryTree.canonical_key)
        right = sorted(right, key=QueryTree.canonical_key)
        if [c.canonical_key() for c in right] < [c.canonical_key() for c in left]:
            left, right = right, left

        # Sizes of any matching stay below the scale, specificity dominates
        scale = 1 + sum(c.size() for c in left) + sum(c.size() for c in right)

        graph = nx.Graph()
        lggs: Dict[Tuple[int, int], QueryTree] = {}
        for i, c1 in enumerate(left):
            for j, c2 in enumerate(right):
                lgg = self._lgg(c1, c2)
                lggs[i, j] = lgg
                graph.add_edge(
                    ("left", i),
                    ("right", j),
                    weight=lgg.nr_of_specific_nodes() * scale + lgg.size(),
                )

        paired: List[QueryTree] = []
        for u, v in nx.max_weight_matching(graph, maxcardinality=True):
            if u[0] == "right":
                u, v = v, u
            paired.append(lggs[u[1], v[1]])

        paired.sort(key=QueryTree.canonical_key)
        return paired
