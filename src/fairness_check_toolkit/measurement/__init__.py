"""Measurement module: fairness metrics, fairness checks and their reports."""

from .fairness_check import fairness_check
from .fairness_metrics import FairnessMetrics, METRIC_NAMES, PARITY_LOSS_NAMES
from .fairness_object import FairnessObject
from .fairness_reporter import FairnessReporter
from .model_evaluation import ModelEvaluation

__all__ = [
    "fairness_check",
    "FairnessMetrics",
    "FairnessObject",
    "FairnessReporter",
    "ModelEvaluation",
    "METRIC_NAMES",
    "PARITY_LOSS_NAMES",
]
