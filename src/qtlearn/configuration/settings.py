"""Learner configuration management with validation.

Wraps the tunable parameters of the disjunctive query tree learner in Pydantic
models so the learner, the CLI and tests rely on validated settings. The
configuration is persisted as YAML; a missing file means defaults.
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from ..errors import InvalidConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".qtlearn" / "config" / "learner.yaml"


class LiteralConversion(str, Enum):
    """How literal-valued edges become query tree nodes."""

    DATATYPE = "datatype"  # Node labelled with the literal's datatype
    VALUE = "value"  # Node labelled with the lexical value
    IGNORE = "ignore"  # Literal edges are dropped


class HeuristicType(str, Enum):
    """Named strategies for the final score of a query tree."""

    WEIGHTED_ACCURACY = "weighted_accuracy"
    COVERAGE_SPECIFITY = "coverage_specifity"


class TreeConfig(BaseModel):
    """Query tree construction settings.

    Attributes:
        max_depth: Maximum number of edges from the root
        literal_conversion: Literal node policy
        ignored_predicates: Predicates never followed
    """

    max_depth: int = Field(
        default=2,
        ge=0,
        le=10,
        description="Maximum number of edges from the root"
    )
    literal_conversion: LiteralConversion = Field(
        default=LiteralConversion.DATATYPE,
        description="Literal node policy"
    )
    ignored_predicates: List[str] = Field(
        default_factory=list,
        description="Predicates never followed when building trees"
    )

    @field_validator("ignored_predicates")
    @classmethod
    def validate_ignored_predicates(cls, v: List[str]) -> List[str]:
        """Strip blanks and duplicates, keeping order."""
        seen = []
        for predicate in v:
            predicate = predicate.strip()
            if predicate and predicate not in seen:
                seen.append(predicate)
        return seen


class LearnerConfig(BaseModel):
    """Main learner configuration.

    Attributes:
        noise_percentage: Approximate percentage of mislabeled examples (advisory)
        max_execution_time_in_seconds: Budget for the whole run, <= 0 disables it
        max_tree_computation_time_in_seconds: Budget for one partial solution, <= 0 disables it
        coverage_weight: Weight of the coverage score in the raw score
        specifity_weight: Weight of the specifity score in the raw score
        coverage_beta: Beta of the F-measure used for coverage
        minimum_tree_score: Minimum score for a tree to join the solution
        pos_examples_weight: How much covering positives outweighs avoiding negatives
        heuristic: Strategy producing the final tree score
        trees: Query tree construction settings
    """

    version: int = Field(
        default=1,
        description="Configuration schema version"
    )
    noise_percentage: float = Field(
        default=0.0,
        ge=0.0,
        le=100.0,
        description="Approximate percentage of noise within the examples"
    )
    max_execution_time_in_seconds: int = Field(
        default=10,
        description="Maximum execution time of the algorithm in seconds"
    )
    max_tree_computation_time_in_seconds: float = Field(
        default=60.0,
        description="Maximum time to compute one part of the solution"
    )
    coverage_weight: float = Field(
        default=0.8,
        ge=0.0,
        description="Weight of the coverage score; weights need not sum to 1"
    )
    specifity_weight: float = Field(default=0.1, ge=0.0)
    coverage_beta: float = Field(
        default=0.5,
        gt=0.0,
        description="Beta of the coverage F-measure"
    )
    minimum_tree_score: float = Field(
        default=0.2,
        description="Minimum score a query tree must have to be part of the solution"
    )
    pos_examples_weight: float = Field(
        default=2.0,
        gt=0.0,
        description="How important covering positives is compared to not covering negatives"
    )
    heuristic: HeuristicType = Field(default=HeuristicType.WEIGHTED_ACCURACY)
    trees: TreeConfig = Field(default_factory=TreeConfig)

    class Config:
        """Pydantic configuration."""
        validate_assignment = True  # Validate on field assignment
        extra = "forbid"  # Reject unknown fields


def _format_validation_error(exc: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}"
        for err in exc.errors()
    )


class ConfigurationManager:
    """Loads, saves and validates the learner configuration file.

    Attributes:
        config_path: Path to the YAML configuration file
    """

    def __init__(self, config_path: Optional[Path] = None):
        """Initialize configuration manager.

        Args:
            config_path: Path to config file (default: ~/.qtlearn/config/learner.yaml)
        """
        self._config_path = config_path or DEFAULT_CONFIG_PATH
        self._config: Optional[LearnerConfig] = None

    @property
    def config_path(self) -> Path:
        return self._config_path

    def load(self) -> LearnerConfig:
        """Load and validate configuration.

        Returns:
            Validated learner configuration

        Raises:
            InvalidConfigError: If configuration is invalid
        """
        if self._config_path.exists():
            with open(self._config_path, encoding="utf-8") as f:
                try:
                    data = yaml.safe_load(f) or {}
                except yaml.YAMLError as exc:
                    raise InvalidConfigError(
                        f"Configuration file is not valid YAML: {exc}",
                        details={"config_path": str(self._config_path)},
                    ) from exc

            if not isinstance(data, dict):
                raise InvalidConfigError(
                    "Configuration file must contain a mapping",
                    details={"config_path": str(self._config_path)},
                )

            try:
                self._config = LearnerConfig(**data)
            except ValidationError as exc:
                raise InvalidConfigError(
                    f"Invalid configuration: {_format_validation_error(exc)}",
                    details={"config_path": str(self._config_path)},
                ) from exc
            logger.info(f"Loaded learner configuration from {self._config_path}")
        else:
            logger.debug(f"No configuration at {self._config_path}, using defaults")
            self._config = LearnerConfig()

        return self._config

    def save(self, config: LearnerConfig) -> None:
        """Save configuration to file.

        Args:
            config: Configuration to save
        """
        self._config_path.parent.mkdir(parents=True, exist_ok=True)

        data = config.model_dump(mode="json")

        with open(self._config_path, "w", encoding="utf-8") as f:
            yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)

        logger.info(f"Saved learner configuration to {self._config_path}")

    def validate(self, config_path: Optional[Path] = None) -> List[str]:
        """Validate a configuration file without keeping it.

        Args:
            config_path: File to check (defaults to the managed path)

        Returns:
            List of error messages (empty if valid)
        """
        path = config_path or self._config_path
        if not path.exists():
            return [f"Configuration file not found: {path}"]

        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            return [f"YAML parse error: {exc}"]

        if not isinstance(data, dict):
            return ["Configuration file must contain a mapping"]

        try:
            LearnerConfig(**data)
        except ValidationError as exc:
            return [
                f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}"
                for err in exc.errors()
            ]
        return []
