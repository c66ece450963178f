"""
Concept descriptions exported from query trees.

A description is a small immutable expression object with a
Manchester-style string form. It is an output artifact only: nothing in the
learner reasons over descriptions.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Tuple

from .query_tree import NodeKind, QueryTree

TYPE_PREDICATES = frozenset({
    "rdf:type",
    "a",
    "http://www.w3.org/1999/02/22-rdf-syntax-ns#type",
})


class Description:
    """Base class for exported descriptions."""

    def render(self) -> str:
        raise NotImplementedError

    def __str__(self) -> str:
        return self.render()


@dataclass(frozen=True)
class Thing(Description):
    def render(self) -> str:
        return "Thing"


@dataclass(frozen=True)
class NamedClass(Description):
    name: str

    def render(self) -> str:
        return self.name


@dataclass(frozen=True)
class Nominal(Description):
    """``{individual}``"""
    individual: str

    def render(self) -> str:
        return "{" + self.individual + "}"


@dataclass(frozen=True)
class HasValue(Description):
    """``property value x``; literal values are quoted."""
    property: str
    value: str
    literal: bool = False

    def render(self) -> str:
        value = f'"{self.value}"' if self.literal else self.value
        return f"{self.property} value {value}"


@dataclass(frozen=True)
class SomeValuesFrom(Description):
    """``property some filler``"""
    property: str
    filler: Description

    def render(self) -> str:
        return f"{self.property} some {_wrap(self.filler)}"


@dataclass(frozen=True)
class Intersection(Description):
    operands: Tuple[Description, ...]

    @classmethod
    def of(cls, operands: Iterable[Description]) -> Description:
        """Collapse empty and singleton intersections."""
        operands = tuple(operands)
        if not operands:
            return Thing()
        if len(operands) == 1:
            return operands[0]
        return cls(operands)

    def render(self) -> str:
        return " and ".join(_wrap(op) for op in self.operands)


@dataclass(frozen=True)
class Union(Description):
    operands: Tuple[Description, ...]

    @classmethod
    def of(cls, operands: Iterable[Description]) -> Description:
        """Collapse singleton unions."""
        operands = tuple(operands)
        if not operands:
            return Thing()
        if len(operands) == 1:
            return operands[0]
        return cls(operands)

    def render(self) -> str:
        return " or ".join(_wrap(op) for op in self.operands)


def _wrap(description: Description) -> str:
    if isinstance(description, (Intersection, Union, SomeValuesFrom)):
        return f"({description.render()})"
    return description.render()


def describe_tree(tree: QueryTree) -> Description:
    """Translate a query tree into a description.

    A labelled root becomes a nominal; wildcards impose nothing. Type edges
    with a named object become class names, leaves become value restrictions
    and everything else an existential restriction over the child.
    """
    operands: List[Description] = []
    if not tree.is_wildcard():
        operands.append(Nominal(tree.label))
    operands.extend(_describe_children(tree))
    return Intersection.of(operands)


def _describe_children(tree: QueryTree) -> List[Description]:
    operands: List[Description] = []
    for edge, child in tree.children:
        if edge in TYPE_PREDICATES and not child.is_wildcard() and child.is_leaf():
            operands.append(NamedClass(child.label))
        elif child.kind is NodeKind.DATATYPE:
            operands.append(SomeValuesFrom(edge, NamedClass(child.label)))
        elif child.kind is NodeKind.LITERAL_VALUE:
            operands.append(HasValue(edge, child.label, literal=True))
        elif child.is_leaf() and not child.is_wildcard():
            operands.append(HasValue(edge, child.label))
        else:
            filler = Intersection.of(
                ([] if child.is_wildcard() else [Nominal(child.label)]) + _describe_children(child)
            )
            operands.append(SomeValuesFrom(edge, filler))
    return operands
