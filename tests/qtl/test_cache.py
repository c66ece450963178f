"""Tests for query tree construction and the per-entity cache."""

from qtlearn.configuration.settings import LiteralConversion, TreeConfig
from qtlearn.qtl.cache import QueryTreeCache, QueryTreeFactory
from qtlearn.qtl.graph import GraphModel
from qtlearn.qtl.query_tree import NodeKind


class TestQueryTreeFactory:
    """Building trees from the graph."""

    def test_default_tree(self, people_graph):
        tree = QueryTreeFactory(people_graph).build("alice")

        assert tree.label == "alice"
        assert tree.edges() == ["age", "rdf:type", "worksFor"]
        assert tree.children_by_edge("rdf:type")[0].label == "Person"

        age = tree.children_by_edge("age")[0]
        assert age.kind is NodeKind.DATATYPE
        assert age.label == "xsd:int"

        employer = tree.children_by_edge("worksFor")[0]
        assert employer.label == "acme"
        assert employer.children_by_edge("rdf:type")[0].label == "Company"
        assert tree.depth() == 2

    def test_depth_is_bounded(self, people_graph):
        tree = QueryTreeFactory(people_graph, max_depth=2).build("rex")
        owner = tree.children_by_edge("ownedBy")[0]
        assert owner.label == "alice"
        # acme is two edges away and therefore a leaf
        assert owner.children_by_edge("worksFor")[0].is_leaf()
        assert tree.depth() == 2

    def test_depth_zero(self, people_graph):
        tree = QueryTreeFactory(people_graph, max_depth=0).build("alice")
        assert tree.is_leaf()

    def test_literal_values(self, people_graph):
        tree = QueryTreeFactory(people_graph, literal_conversion=LiteralConversion.VALUE).build("alice")
        age = tree.children_by_edge("age")[0]
        assert age.kind is NodeKind.LITERAL_VALUE
        assert age.label == "30"

    def test_ignored_literals(self, people_graph):
        tree = QueryTreeFactory(people_graph, literal_conversion=LiteralConversion.IGNORE).build("alice")
        assert "age" not in tree.edges()

    def test_untyped_literal(self):
        model = GraphModel()
        model.add("a", "name", "Alice", literal=True)
        tree = QueryTreeFactory(model).build("a")
        assert tree.children_by_edge("name")[0].label == "xsd:string"

    def test_ignored_predicates(self, people_graph):
        tree = QueryTreeFactory(people_graph, ignored_predicates=["rdf:type"]).build("alice")
        assert tree.edges() == ["age", "worksFor"]
        assert tree.children_by_edge("worksFor")[0].is_leaf()

    def test_duplicate_statements_collapse(self):
        model = GraphModel.from_triples([("a", "p", "b"), ("a", "p", "b"), ("a", "p", "c")])
        tree = QueryTreeFactory(model).build("a")
        assert len(tree.children_by_edge("p")) == 2

    def test_from_config(self, people_graph):
        config = TreeConfig(max_depth=1, literal_conversion=LiteralConversion.IGNORE)
        factory = QueryTreeFactory.from_config(people_graph, config)
        assert factory.max_depth == 1
        assert factory.build("alice").depth() == 1


class TestQueryTreeCache:
    """Memoization."""

    def test_same_object_per_entity(self, people_cache):
        first = people_cache.get_query_tree("alice")
        second = people_cache.get_query_tree("alice")
        assert first is second
        assert people_cache.hits == 1
        assert people_cache.misses == 1
        assert "alice" in people_cache
        assert len(people_cache) == 1

    def test_isomorphic_entities_get_distinct_trees(self):
        model = GraphModel.from_triples([("fido", "rdf:type", "Dog"), ("spot", "rdf:type", "Dog")])
        cache = QueryTreeCache.for_model(model)
        fido = cache.get_query_tree("fido")
        spot = cache.get_query_tree("spot")
        assert fido is not spot
        assert not fido.is_same_tree_as(spot)

    def test_unknown_entity_gets_root_only_tree(self, people_cache):
        tree = people_cache.get_query_tree("nobody")
        assert tree.label == "nobody"
        assert tree.is_leaf()

    def test_clear(self, people_cache):
        people_cache.get_query_tree("alice")
        people_cache.clear()
        assert len(people_cache) == 0
        assert people_cache.hits == 0
        assert people_cache.misses == 0
