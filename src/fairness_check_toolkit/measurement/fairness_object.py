"""The fairness object: the complete result of one fairness check."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import pandas as pd
from rich.console import Console

from ..exceptions import ConfigError
from .fairness_reporter import FairnessReporter
from .model_evaluation import ModelEvaluation


@dataclass(frozen=True, eq=False)
class FairnessObject:
    """Fairness metrics of one or more models sharing a protected attribute.

    Instances are produced by ``fairness_check`` and never modified
    afterwards; merging builds a new object from copies of the inputs.

    Attributes:
        metric_data: Parity loss per model, one row per label, thirteen
            ``<METRIC>_parity_loss`` columns.
        groups_data: Rates per subgroup for each label (level x metric).
        fairness_check_data: Signed deviations from the privileged subgroup
            with columns score, subgroup, metric and model.
        evaluations: Evaluation inputs, newly checked models first.
        privileged: Privileged level.
        protected: Protected attribute with string levels.
        label: Model labels in presentation order.
        cutoff: Threshold per level for each label.
        epsilon: Acceptable band (-epsilon, epsilon) for deviations.
        created_na: Whether any parity loss is missing.
    """

    metric_data: pd.DataFrame
    groups_data: Dict[str, pd.DataFrame]
    fairness_check_data: pd.DataFrame
    evaluations: Tuple[ModelEvaluation, ...]
    privileged: str
    protected: pd.Categorical
    label: Tuple[str, ...]
    cutoff: Dict[str, pd.Series]
    epsilon: float
    created_na: bool

    @property
    def group_levels(self) -> List[str]:
        return list(self.protected.categories)

    @property
    def n_models(self) -> int:
        return len(self.label)

    def save(self, path: Union[str, Path]) -> Path:
        """Pickles the object so that a later fairness check can merge it."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        pd.to_pickle(self, path)
        return path

    @classmethod
    def load(cls, path: Union[str, Path]) -> "FairnessObject":
        """Loads an object written by ``save``.

        Raises:
            FileNotFoundError: If the file does not exist.
            ConfigError: If the file holds something else.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Fairness object not found: {path}")

        fobject = pd.read_pickle(path)
        if not isinstance(fobject, cls):
            raise ConfigError(f"{path} does not contain a fairness object")
        return fobject

    def print_report(self, console: Optional[Console] = None) -> Dict[str, Any]:
        """Prints the fairness check report and returns the audit it is based on."""
        reporter = FairnessReporter(epsilon=self.epsilon, console=console)
        report = reporter.audit(self)
        reporter.print_report(report)
        return report
