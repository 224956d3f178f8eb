"""Evaluation inputs: one model's predicted probabilities and ground truth."""

from dataclasses import dataclass
from typing import Any, Optional

import numpy as np
import pandas as pd

from ..exceptions import ConfigError


@dataclass(frozen=True, eq=False)
class ModelEvaluation:
    """Predicted probabilities and ground truth of one classifier.

    Attributes:
        label: Display label, unique among the models being compared.
        y_true: Ground truth, 0 or 1 per observation.
        y_prob: Predicted probability of the positive class per observation.
    """

    label: str
    y_true: np.ndarray
    y_prob: np.ndarray

    def __post_init__(self):
        y_true = np.asarray(self.y_true)
        y_prob = np.array(self.y_prob, dtype=float)

        if y_true.ndim != 1 or y_prob.ndim != 1:
            raise ConfigError(
                f"Model '{self.label}': y_true and y_prob must be one-dimensional"
            )
        if len(y_true) != len(y_prob):
            raise ConfigError(
                f"Model '{self.label}': y_true has {len(y_true)} observations "
                f"but y_prob has {len(y_prob)}"
            )
        if y_true.dtype == bool:
            y_true = y_true.astype(int)
        if not np.isin(y_true, [0, 1]).all():
            raise ConfigError(f"Model '{self.label}': y_true must only contain 0 and 1")
        if not np.isfinite(y_prob).all() or (y_prob < 0).any() or (y_prob > 1).any():
            raise ConfigError(
                f"Model '{self.label}': y_prob must contain probabilities in [0, 1]"
            )

        object.__setattr__(self, "label", str(self.label))
        object.__setattr__(self, "y_true", y_true.astype(int))
        object.__setattr__(self, "y_prob", y_prob)

    def __len__(self) -> int:
        return len(self.y_true)

    @classmethod
    def from_estimator(
        cls,
        estimator: Any,
        X: pd.DataFrame,
        y: Any,
        label: Optional[str] = None,
    ) -> "ModelEvaluation":
        """Builds an evaluation from a fitted scikit-learn style classifier.

        The estimator must expose ``predict_proba``; the second column is taken
        as the probability of the positive class. The label defaults to the
        estimator's class name.
        """
        if not hasattr(estimator, "predict_proba"):
            raise ConfigError(
                f"{type(estimator).__name__} does not provide predict_proba"
            )
        probabilities = np.asarray(estimator.predict_proba(X))
        if probabilities.ndim != 2 or probabilities.shape[1] != 2:
            raise ConfigError("Only binary classifiers can be evaluated")

        return cls(
            label=label or type(estimator).__name__,
            y_true=np.asarray(y),
            y_prob=probabilities[:, 1],
        )
