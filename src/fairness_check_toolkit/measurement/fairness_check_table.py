"""Long-form fairness check table used for comparison and plotting.

For each model, five metrics are reported as the signed deviation of each
unprivileged subgroup's rate from the privileged subgroup's rate. The
privileged subgroup is left out since its deviation is zero by construction.
"""

import pandas as pd

from .fairness_metrics import FairnessMetrics

FAIRNESS_CHECK_COLUMNS = ["score", "subgroup", "metric", "model"]

# Row order of every model's block.
FAIRNESS_CHECK_METRICS = {
    "TPR": "Equal opportunity loss   TP/(TP + FN)",
    "PPV": "Predictive parity loss   TP/(TP + FP)",
    "FPR": "Predictive equality loss   FP/(FP + TN)",
    "ACC": "Accuracy equality loss   (TP + TN)/(TP + FP + TN + FN)",
    "STP": "Statistical parity loss   (TP + FP)/(TP + FP + TN + FN)",
}


def build_fairness_check_table(
    gmm: pd.DataFrame, privileged: str, label: str
) -> pd.DataFrame:
    """Builds one model's fairness check rows.

    Args:
        gmm: Rates per subgroup (level x metric), levels in attribute order.
        privileged: Privileged level.
        label: Model label written to every row.

    Returns:
        DataFrame with columns score, subgroup, metric and model, holding
        5 x (n_levels - 1) rows.
    """
    deviation = FairnessMetrics.privileged_deviation(gmm, privileged)
    deviation = deviation.drop(index=privileged)

    blocks = [
        pd.DataFrame(
            {
                "score": deviation[metric].to_numpy(dtype=float),
                "subgroup": deviation.index.to_numpy(dtype=object),
                "metric": description,
                "model": label,
            },
            columns=FAIRNESS_CHECK_COLUMNS,
        )
        for metric, description in FAIRNESS_CHECK_METRICS.items()
    ]

    return pd.concat(blocks, ignore_index=True)
