"""
Query Trees.

A query tree is the bounded-depth neighbourhood of a graph entity, written as
a rooted tree: every node carries a label (an entity, class or literal, or the
wildcard ``?``) and every child hangs off a labelled edge (a predicate).

Trees are immutable once built. Python equality stays identity-based so that
two entities with isomorphic neighbourhoods still own distinct trees; the
structural notion of "same tree" is mutual subsumption.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional, Tuple

import networkx as nx
from networkx.algorithms import bipartite

if TYPE_CHECKING:
    from .descriptions import Description

logger = logging.getLogger(__name__)

WILDCARD = "?"


class NodeKind(str, Enum):
    """What a node label denotes."""

    RESOURCE = "resource"  # Entity or class
    LITERAL_VALUE = "literal_value"  # Lexical form of a literal
    DATATYPE = "datatype"  # Datatype of a literal


class QueryTree:
    """Immutable labelled tree over graph-derived nodes.

    Args:
        label: Node label, or ``WILDCARD``
        children: ``(edge, child)`` pairs
        kind: What the label denotes
    """

    __slots__ = ("_label", "_children", "_kind", "_by_edge", "_key", "_size", "_specific")

    def __init__(
        self,
        label: str,
        children: Iterable[Tuple[str, "QueryTree"]] = (),
        kind: NodeKind = NodeKind.RESOURCE,
    ):
        self._label = label
        self._children: Tuple[Tuple[str, QueryTree], ...] = tuple(children)
        self._kind = kind

        by_edge: Dict[str, List[QueryTree]] = {}
        for edge, child in self._children:
            by_edge.setdefault(edge, []).append(child)
        self._by_edge = {edge: tuple(nodes) for edge, nodes in by_edge.items()}

        self._key: Optional[str] = None
        self._size: Optional[int] = None
        self._specific: Optional[int] = None

    @classmethod
    def wildcard(cls) -> "QueryTree":
        """The single-node tree that matches everything."""
        return cls(WILDCARD)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def label(self) -> str:
        return self._label

    @property
    def kind(self) -> NodeKind:
        return self._kind

    @property
    def children(self) -> Tuple[Tuple[str, "QueryTree"], ...]:
        return self._children

    def is_wildcard(self) -> bool:
        return self._label == WILDCARD

    def is_leaf(self) -> bool:
        return not self._children

    def is_literal(self) -> bool:
        return self._kind is not NodeKind.RESOURCE

    def edges(self) -> List[str]:
        """Distinct edge labels, sorted."""
        return sorted(self._by_edge)

    def children_by_edge(self, edge: str) -> Tuple["QueryTree", ...]:
        return self._by_edge.get(edge, ())

    def children_closure(self) -> List["QueryTree"]:
        """This node and all of its descendants, in pre-order."""
        closure: List[QueryTree] = []
        stack = [self]
        while stack:
            node = stack.pop()
            closure.append(node)
            stack.extend(child for _, child in reversed(node._children))
        return closure

    def size(self) -> int:
        """Number of nodes in the tree."""
        if self._size is None:
            self._size = 1 + sum(child.size() for _, child in self._children)
        return self._size

    def nr_of_specific_nodes(self) -> int:
        """Number of non-wildcard nodes in the tree, root included."""
        if self._specific is None:
            own = 0 if self.is_wildcard() else 1
            self._specific = own + sum(child.nr_of_specific_nodes() for _, child in self._children)
        return self._specific

    def depth(self) -> int:
        if not self._children:
            return 0
        return 1 + max(child.depth() for _, child in self._children)

    def canonical_key(self) -> str:
        """Order-independent string form; equal keys mean isomorphic trees."""
        if self._key is None:
            parts = sorted(f"{edge}={child.canonical_key()}" for edge, child in self._children)
            self._key = f"{self._kind.value[0]}:{self._label}({','.join(parts)})"
        return self._key

    # ------------------------------------------------------------------
    # Structural operators
    # ------------------------------------------------------------------

    def is_subsumed_by(self, other: "QueryTree") -> bool:
        """True iff ``other`` maps into this tree.

        The root of ``other`` maps to the root of this tree. A wildcard in
        ``other`` matches any node, any other node must agree on label and
        kind. The children of a mapped node reached through an edge must map
        to pairwise distinct children of the image reached through the same
        edge.
        """
        if not other.is_wildcard():
            if other._label != self._label or other._kind is not self._kind:
                return False

        for edge, patterns in other._by_edge.items():
            candidates = self._by_edge.get(edge, ())
            if len(candidates) < len(patterns):
                return False
            if not _injective_match(patterns, candidates):
                return False
        return True

    def is_same_tree_as(self, other: "QueryTree") -> bool:
        """Mutual subsumption, i.e. isomorphism."""
        if self is other:
            return True
        if self.size() != other.size():
            return False
        if self.canonical_key() == other.canonical_key():
            return True
        return self.is_subsumed_by(other) and other.is_subsumed_by(self)

    # ------------------------------------------------------------------
    # Export and rendering
    # ------------------------------------------------------------------

    def to_description(self) -> "Description":
        """Export the tree as a concept description."""
        from .descriptions import describe_tree

        return describe_tree(self)

    def to_string(self, indent: str = "  ") -> str:
        """Indented multi-line rendering used in logs."""
        lines = [self._label]
        self._render(lines, indent, 1)
        return "\n".join(lines)

    def _render(self, lines: List[str], indent: str, level: int) -> None:
        for edge, child in self._children:
            lines.append(f"{indent * level}{edge} -> {child._label}")
            child._render(lines, indent, level + 1)

    def __repr__(self) -> str:
        return f"QueryTree({self.canonical_key()})"


def _injective_match(
    patterns: Tuple[QueryTree, ...],
    candidates: Tuple[QueryTree, ...],
) -> bool:
    """Whether every pattern subsumes its own distinct candidate.

    Maximum bipartite matching (Hopcroft-Karp) between patterns and the
    candidates they subsume.
    """
    graph = nx.Graph()
    pattern_nodes = [("pattern", i) for i in range(len(patterns))]
    graph.add_nodes_from(pattern_nodes)
    graph.add_nodes_from(("candidate", j) for j in range(len(candidates)))

    for i, pattern in enumerate(patterns):
        options = [j for j, candidate in enumerate(candidates) if candidate.is_subsumed_by(pattern)]
        if not options:
            return False
        graph.add_edges_from((("pattern", i), ("candidate", j)) for j in options)

    matching = bipartite.maximum_matching(graph, top_nodes=pattern_nodes)
    return all(node in matching for node in pattern_nodes)
