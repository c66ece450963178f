"""
Query Tree Learning with noise.

Learns a disjunction of query trees separating positive from negative
example entities of a knowledge graph:
- Query trees with subsumption and LGG
- Cached tree construction from a graph model
- Coverage/specifity heuristic with swappable score strategies
- Best-first partial solution search
- Sequential covering into a combined disjunctive solution
"""

from .query_tree import (
    WILDCARD,
    NodeKind,
    QueryTree,
)
from .lgg import LGGGenerator
from .graph import (
    GraphModel,
    Triple,
)
from .cache import (
    QueryTreeCache,
    QueryTreeFactory,
)
from .scoring import (
    EvaluatedDescription,
    EvaluatedQueryTree,
    QueryTreeScore,
)
from .heuristics import (
    CoverageHeuristic,
    CoverageSpecifityStrategy,
    ScoreStrategy,
    WeightedAccuracyStrategy,
    f_score,
)
from .problems import (
    ClassLearningProblem,
    LearningProblem,
    PosNegLearningProblem,
    PosOnlyLearningProblem,
)
from .search import (
    PartialSolutionSearch,
    SearchMetrics,
    SearchState,
    StopReason,
)
from .combiner import SolutionCombiner
from .learner import (
    LearningRun,
    LoopState,
    QTL2Disjunctive,
)

__all__ = [
    "WILDCARD",
    "NodeKind",
    "QueryTree",
    "LGGGenerator",
    "GraphModel",
    "Triple",
    "QueryTreeCache",
    "QueryTreeFactory",
    "EvaluatedDescription",
    "EvaluatedQueryTree",
    "QueryTreeScore",
    "CoverageHeuristic",
    "CoverageSpecifityStrategy",
    "ScoreStrategy",
    "WeightedAccuracyStrategy",
    "f_score",
    "ClassLearningProblem",
    "LearningProblem",
    "PosNegLearningProblem",
    "PosOnlyLearningProblem",
    "PartialSolutionSearch",
    "SearchMetrics",
    "SearchState",
    "StopReason",
    "SolutionCombiner",
    "LearningRun",
    "LoopState",
    "QTL2Disjunctive",
]
