"""Confusion-matrix rates per subgroup and their parity loss.

This module centralizes the definitions of the thirteen rate metrics and of
parity loss so they are calculated the same way everywhere in the toolkit.
A rate whose denominator is zero is NaN: it is never replaced by 0 and never
raises, and a NaN rate makes the parity loss it contributes to NaN as well.
"""

from typing import Dict

import numpy as np
import pandas as pd

from .confusion import ConfusionCounts

# Order is part of the output contract: parity loss columns follow it.
METRIC_NAMES = (
    "TPR",
    "TNR",
    "PPV",
    "NPV",
    "FNR",
    "FPR",
    "FDR",
    "FOR",
    "TS",
    "STP",
    "ACC",
    "F1",
    "MCC",
)

PARITY_LOSS_NAMES = tuple(f"{metric}_parity_loss" for metric in METRIC_NAMES)


def _ratio(numerator: float, denominator: float) -> float:
    if denominator == 0 or np.isnan(denominator):
        return np.nan
    return float(numerator) / float(denominator)


class FairnessMetrics:
    """Namespace for the rate and parity-loss calculations."""

    @staticmethod
    def rate_metrics(counts: ConfusionCounts) -> Dict[str, float]:
        """Derives the thirteen rates from one subgroup's confusion counts."""
        tp, tn, fp, fn = counts.tp, counts.tn, counts.fp, counts.fn

        tpr = _ratio(tp, tp + fn)
        ppv = _ratio(tp, tp + fp)
        mcc_denominator = np.sqrt(
            float(tp + fp) * float(tp + fn) * float(tn + fp) * float(tn + fn)
        )

        return {
            "TPR": tpr,
            "TNR": _ratio(tn, tn + fp),
            "PPV": ppv,
            "NPV": _ratio(tn, tn + fn),
            "FNR": _ratio(fn, tp + fn),
            "FPR": _ratio(fp, tn + fp),
            "FDR": _ratio(fp, tp + fp),
            "FOR": _ratio(fn, tn + fn),
            "TS": _ratio(tp, tp + fp + fn),
            "STP": _ratio(tp + fp, counts.total),
            "ACC": _ratio(tp + tn, counts.total),
            "F1": _ratio(2 * ppv * tpr, ppv + tpr),
            "MCC": _ratio(float(tp) * tn - float(fp) * fn, mcc_denominator),
        }

    @staticmethod
    def group_metric_matrix(matrices: Dict[str, ConfusionCounts]) -> pd.DataFrame:
        """Returns a level x metric DataFrame, rows in the order of ``matrices``."""
        rows = [FairnessMetrics.rate_metrics(counts) for counts in matrices.values()]
        gmm = pd.DataFrame(rows, index=pd.Index(list(matrices), name="subgroup"))
        return gmm.reindex(columns=list(METRIC_NAMES)).astype(float)

    @staticmethod
    def privileged_deviation(gmm: pd.DataFrame, privileged: str) -> pd.DataFrame:
        """Signed deviation of every subgroup's rates from the privileged ones."""
        return gmm - gmm.loc[privileged]

    @staticmethod
    def parity_loss(gmm: pd.DataFrame, privileged: str) -> pd.Series:
        """Sum over subgroups of |rate(subgroup) - rate(privileged)| per metric.

        The privileged subgroup contributes zero. Any missing rate makes the
        corresponding parity loss missing.
        """
        deviation = FairnessMetrics.privileged_deviation(gmm, privileged).abs()
        loss = deviation.sum(axis=0, skipna=False)
        loss.index = [f"{metric}_parity_loss" for metric in loss.index]
        return loss.reindex(list(PARITY_LOSS_NAMES))

