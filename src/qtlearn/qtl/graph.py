"""
Read-only graph model.

A minimal in-memory triple store holding the knowledge graph the learner
reads query trees from. Objects are either resources or literals; literals
carry a lexical value and an optional datatype.
"""

from __future__ import annotations

import json
import logging
from collections import defaultdict
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from ..errors import GraphLoadError

logger = logging.getLogger(__name__)

XSD_STRING = "xsd:string"


@dataclass(frozen=True)
class Triple:
    """A (subject, predicate, object) statement."""
    subject: str
    predicate: str
    object: str
    literal: bool = False
    datatype: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "subject": self.subject,
            "predicate": self.predicate,
            "object": self.object,
        }
        if self.literal:
            data["literal"] = True
            data["datatype"] = self.datatype or XSD_STRING
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Triple":
        literal = bool(data.get("literal", False))
        datatype = data.get("datatype")
        return cls(
            subject=str(data["subject"]),
            predicate=str(data["predicate"]),
            object=str(data["object"]),
            literal=literal or datatype is not None,
            datatype=datatype,
        )


class GraphModel:
    """In-memory triple store indexed by subject.

    The learner never writes to it; several learners may share one model.
    """

    def __init__(self, triples: Iterable[Triple] = ()):
        self._outgoing: Dict[str, List[Triple]] = defaultdict(list)
        self._count = 0
        for triple in triples:
            self.add_triple(triple)

    @classmethod
    def from_triples(cls, triples: Iterable[tuple]) -> "GraphModel":
        """Build a model from ``(s, p, o)`` or ``(s, p, o, datatype)`` tuples.

        A fourth element marks the object as a literal of that datatype.
        """
        model = cls()
        for row in triples:
            if len(row) == 3:
                model.add(*row)
            else:
                subject, predicate, obj, datatype = row
                model.add(subject, predicate, obj, literal=True, datatype=datatype)
        return model

    @classmethod
    def load_json(cls, path: Path) -> "GraphModel":
        """Load a JSON list of triple objects.

        Raises:
            GraphLoadError: If the file is missing or malformed
        """
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except OSError as exc:
            raise GraphLoadError(
                f"Cannot read graph file {path}: {exc}", details={"path": str(path)}
            ) from exc
        except json.JSONDecodeError as exc:
            raise GraphLoadError(
                f"Graph file {path} is not valid JSON: {exc}", details={"path": str(path)}
            ) from exc

        if isinstance(data, dict):
            data = data.get("triples")
        if not isinstance(data, list):
            raise GraphLoadError(
                f"Graph file {path} must contain a list of triples",
                details={"path": str(path)},
            )

        model = cls()
        for index, item in enumerate(data):
            try:
                model.add_triple(Triple.from_dict(item))
            except (KeyError, TypeError) as exc:
                raise GraphLoadError(
                    f"Malformed triple at index {index} in {path}",
                    details={"path": str(path), "index": index},
                ) from exc

        logger.info(f"Loaded {len(model)} triples for {len(model.subjects())} subjects from {path}")
        return model

    def save_json(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump([triple.to_dict() for triple in self.triples()], f, indent=2)

    def add(
        self,
        subject: str,
        predicate: str,
        obj: str,
        literal: bool = False,
        datatype: Optional[str] = None,
    ) -> None:
        self.add_triple(Triple(subject, predicate, obj, literal, datatype))

    def add_triple(self, triple: Triple) -> None:
        self._outgoing[triple.subject].append(triple)
        self._count += 1

    def outgoing(self, subject: str) -> List[Triple]:
        """Statements whose subject is ``subject``; empty for unknown subjects."""
        return list(self._outgoing.get(subject, ()))

    def has_subject(self, subject: str) -> bool:
        return subject in self._outgoing

    def subjects(self) -> List[str]:
        return sorted(self._outgoing)

    def triples(self) -> List[Triple]:
        return [triple for subject in self.subjects() for triple in self._outgoing[subject]]

    def __len__(self) -> int:
        return self._count
