"""
Runs a configured fairness check end to end.

The executor reads the evaluation data, builds one evaluation per configured
model, merges fairness objects saved by earlier runs, and reports, saves and
plots the result as requested by the configuration.
"""

from pathlib import Path
from typing import Any, Dict, List

import pandas as pd
from rich.console import Console

from .config import ConfigParser, get_check_logger, setup_logging
from .measurement import FairnessObject, ModelEvaluation, fairness_check
from .visualization import plot_fairness_check, save_figure


class CheckExecutor:
    """Executes a fairness check described by a configuration dictionary."""

    def __init__(
        self, config: Dict[str, Any], verbose: bool = False, enable_logging: bool = True
    ):
        self.config = ConfigParser.parse(config)
        self.verbose = verbose

        output = self.config.output
        if enable_logging:
            log_level = "DEBUG" if verbose else output.log_level
            setup_logging(
                level=log_level,
                log_file=output.log_file,
                structured=output.structured_logs,
                console_output=verbose,
            )

        self.logger = get_check_logger("executor")
        self.console = Console(force_terminal=output.colorize, width=120)

    def execute(self) -> FairnessObject:
        """Runs the check and returns the resulting fairness object."""
        self.logger.log_stage_start(
            "check_execution", {"models": [m.label for m in self.config.models]}
        )
        self.logger.start_timer("check_execution")

        data = self._load_data()
        evaluations = self._build_evaluations(data)
        previous = self._load_fairness_objects()

        fairness = self.config.fairness
        output = self.config.output
        fobject = fairness_check(
            evaluations,
            protected=data[self.config.data.protected_column],
            privileged=fairness.privileged,
            fairness_objects=previous,
            cutoff=fairness.cutoff,
            epsilon=fairness.epsilon,
            verbose=output.verbose,
            colorize=output.colorize,
        )

        fobject.print_report(console=self.console)

        if output.result_path:
            path = fobject.save(output.result_path)
            self.logger.log_stage_complete("result_saving", {"path": str(path)})

        if output.plot_path:
            path = save_figure(plot_fairness_check(fobject), output.plot_path)
            self.logger.log_stage_complete("plotting", {"path": str(path)})

        self.logger.log_stage_complete(
            "check_execution",
            {
                "n_models": fobject.n_models,
                "duration_ms": self.logger.end_timer("check_execution"),
            },
        )
        return fobject

    def _load_data(self) -> pd.DataFrame:
        data_config = self.config.data
        data_path = Path(data_config.input_path)
        if not data_path.exists():
            raise FileNotFoundError(f"Data file not found: {data_path}")

        self.logger.log_stage_start("data_loading", {"data_path": str(data_path)})
        data = pd.read_csv(data_path)

        required = [data_config.target_column, data_config.protected_column] + [
            model.probability_column for model in self.config.models
        ]
        missing = [column for column in required if column not in data.columns]
        if missing:
            raise ValueError(f"Missing columns in {data_path}: {missing}")

        self.logger.log_stage_complete(
            "data_loading", {"rows": data.shape[0], "columns": data.shape[1]}
        )
        return data

    def _build_evaluations(self, data: pd.DataFrame) -> List[ModelEvaluation]:
        y_true = data[self.config.data.target_column].to_numpy()
        return [
            ModelEvaluation(
                label=model.label,
                y_true=y_true,
                y_prob=data[model.probability_column].to_numpy(),
            )
            for model in self.config.models
        ]

    def _load_fairness_objects(self) -> List[FairnessObject]:
        previous = []
        for path in self.config.output.merge_with:
            previous.append(FairnessObject.load(path))
            self.logger.log_stage_complete("fairness_object_loading", {"path": path})
        return previous
