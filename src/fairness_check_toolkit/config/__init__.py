"""Configuration management module for the fairness check toolkit."""

from .config_parser import CheckConfig, ConfigParser, VisualizationConfig
from .logging_config import (
    setup_logging,
    get_check_logger,
    CheckLogger,
    PerformanceLogger,
    VerboseConsole,
)

__all__ = [
    "CheckConfig",
    "ConfigParser",
    "VisualizationConfig",
    "setup_logging",
    "get_check_logger",
    "CheckLogger",
    "PerformanceLogger",
    "VerboseConsole",
]
