"""Per-subgroup confusion matrices at subgroup-specific cutoffs.

Everything here is a pure function: inputs are never modified and a subgroup
without observations yields zero counts rather than an error.
"""

from dataclasses import dataclass
from typing import Dict

import numpy as np
import pandas as pd
from sklearn.metrics import confusion_matrix


@dataclass(frozen=True)
class ConfusionCounts:
    """Confusion matrix counts of one model within one subgroup."""

    tp: int
    tn: int
    fp: int
    fn: int

    @property
    def total(self) -> int:
        return self.tp + self.tn + self.fp + self.fn


def confusion_counts(
    y_true: np.ndarray, y_prob: np.ndarray, cutoff: float
) -> ConfusionCounts:
    """Counts outcomes with a positive prediction whenever ``y_prob >= cutoff``."""
    y_true = np.asarray(y_true, dtype=int)
    if len(y_true) == 0:
        return ConfusionCounts(tp=0, tn=0, fp=0, fn=0)

    y_pred = (np.asarray(y_prob, dtype=float) >= cutoff).astype(int)
    tn, fp, fn, tp = confusion_matrix(y_true, y_pred, labels=[0, 1]).ravel()

    return ConfusionCounts(tp=int(tp), tn=int(tn), fp=int(fp), fn=int(fn))


def group_matrices(
    protected: pd.Categorical,
    y_prob: np.ndarray,
    y_true: np.ndarray,
    cutoff: pd.Series,
) -> Dict[str, ConfusionCounts]:
    """Returns one ConfusionCounts per level of ``protected``, in level order.

    Args:
        protected: Subgroup of each observation.
        y_prob: Predicted probabilities, parallel to ``protected``.
        y_true: Ground truth, parallel to ``protected``.
        cutoff: Threshold per level, indexed by level.
    """
    y_prob = np.asarray(y_prob, dtype=float)
    y_true = np.asarray(y_true, dtype=int)
    values = np.asarray(protected, dtype=object)

    matrices = {}
    for level in protected.categories:
        mask = values == level
        matrices[level] = confusion_counts(
            y_true[mask], y_prob[mask], float(cutoff[level])
        )

    return matrices
