"""Configuration package for qtlearn."""

from .settings import (
    DEFAULT_CONFIG_PATH,
    ConfigurationManager,
    HeuristicType,
    LearnerConfig,
    LiteralConversion,
    TreeConfig,
)

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "ConfigurationManager",
    "HeuristicType",
    "LearnerConfig",
    "LiteralConversion",
    "TreeConfig",
]
