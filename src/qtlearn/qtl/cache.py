"""
Query tree construction and caching.

``QueryTreeFactory`` reads the bounded-depth neighbourhood of an entity from a
``GraphModel`` and turns it into a ``QueryTree``. ``QueryTreeCache`` memoizes
one canonical tree per entity so that every learner sharing the cache sees the
same tree object for the same entity.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Set, Tuple

from ..configuration.settings import LiteralConversion, TreeConfig
from .graph import XSD_STRING, GraphModel, Triple
from .query_tree import NodeKind, QueryTree

logger = logging.getLogger(__name__)


class QueryTreeFactory:
    """Builds query trees from a graph model.

    Args:
        model: Graph to read from
        max_depth: Maximum number of edges between root and any node
        literal_conversion: How literal objects become nodes
        ignored_predicates: Predicates that are never followed
    """

    def __init__(
        self,
        model: GraphModel,
        max_depth: int = 2,
        literal_conversion: LiteralConversion = LiteralConversion.DATATYPE,
        ignored_predicates: Iterable[str] = (),
    ):
        self.model = model
        self.max_depth = max_depth
        self.literal_conversion = literal_conversion
        self.ignored_predicates: Set[str] = set(ignored_predicates)

    @classmethod
    def from_config(cls, model: GraphModel, config: TreeConfig) -> "QueryTreeFactory":
        return cls(
            model,
            max_depth=config.max_depth,
            literal_conversion=config.literal_conversion,
            ignored_predicates=config.ignored_predicates,
        )

    def build(self, entity: str) -> QueryTree:
        """Tree rooted at ``entity``; a root-only tree when it has no statements."""
        return self._build(entity, self.max_depth)

    def _build(self, resource: str, remaining_depth: int) -> QueryTree:
        if remaining_depth <= 0:
            return QueryTree(resource)

        children: List[Tuple[str, QueryTree]] = []
        seen: Set[Tuple[str, str, bool]] = set()
        for triple in sorted(self.model.outgoing(resource), key=_triple_order):
            if triple.predicate in self.ignored_predicates:
                continue
            key = (triple.predicate, triple.object, triple.literal)
            if key in seen:
                continue
            seen.add(key)

            if triple.literal:
                node = self._literal_node(triple)
                if node is None:
                    continue
            else:
                node = self._build(triple.object, remaining_depth - 1)
            children.append((triple.predicate, node))

        return QueryTree(resource, children)

    def _literal_node(self, triple: Triple) -> Optional[QueryTree]:
        if self.literal_conversion is LiteralConversion.IGNORE:
            return None
        if self.literal_conversion is LiteralConversion.VALUE:
            return QueryTree(triple.object, kind=NodeKind.LITERAL_VALUE)
        return QueryTree(triple.datatype or XSD_STRING, kind=NodeKind.DATATYPE)


def _triple_order(triple: Triple) -> Tuple[str, bool, str]:
    return (triple.predicate, triple.literal, triple.object)


class QueryTreeCache:
    """Memoizes one query tree per entity.

    A cache miss builds the tree through the factory; entities unknown to the
    graph get a root-only tree rather than an error.
    """

    def __init__(self, factory: QueryTreeFactory):
        self.factory = factory
        self._trees: Dict[str, QueryTree] = {}
        self.hits = 0
        self.misses = 0

    @classmethod
    def for_model(
        cls,
        model: GraphModel,
        config: Optional[TreeConfig] = None,
    ) -> "QueryTreeCache":
        return cls(QueryTreeFactory.from_config(model, config or TreeConfig()))

    def get_query_tree(self, entity: str) -> QueryTree:
        tree = self._trees.get(entity)
        if tree is not None:
            self.hits += 1
            return tree

        self.misses += 1
        if not self.factory.model.has_subject(entity):
            logger.debug(f"Entity {entity} not in graph, using root-only tree")
        tree = self.factory.build(entity)
        self._trees[entity] = tree
        return tree

    def __contains__(self, entity: str) -> bool:
        return entity in self._trees

    def __len__(self) -> int:
        return len(self._trees)

    def clear(self) -> None:
        self._trees.clear()
        self.hits = 0
        self.misses = 0
