"""Fairness Check Toolkit.

Computes group-fairness metrics for binary classifiers sharing a protected
attribute and merges evaluation runs into one comparable fairness object.
"""

from .exceptions import ConfigError, DomainError, FairnessCheckError, IncompatibilityError
from .measurement import FairnessObject, ModelEvaluation, fairness_check

__version__ = "1.0.0"
__author__ = "FairML Consulting"

__all__ = [
    "fairness_check",
    "FairnessObject",
    "ModelEvaluation",
    "FairnessCheckError",
    "ConfigError",
    "DomainError",
    "IncompatibilityError",
]
