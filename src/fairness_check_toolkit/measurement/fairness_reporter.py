"""Fairness check reporting.

A metric passes for a model when every unprivileged subgroup's deviation from
the privileged subgroup lies strictly within (-epsilon, epsilon). A missing
deviation makes the metric undecidable (NA) rather than failed.
"""

from typing import Any, Dict, Optional
import logging

import numpy as np
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich import box

from .fairness_check_table import FAIRNESS_CHECK_METRICS

PASSED = "passed"
FAILED = "failed"
NOT_AVAILABLE = "NA"


class FairnessReporter:
    """Audit and print fairness objects."""

    def __init__(self, epsilon: float = 0.1, console: Optional[Console] = None):
        self.epsilon = epsilon
        self.logger = logging.getLogger("fairness_check.reporter")
        self.console = console or Console(force_terminal=True, width=100)

    def audit(self, fobject) -> Dict[str, Any]:
        """Evaluates every model's fairness check metrics against epsilon.

        Returns:
            A report with, per model, the status of each of the five fairness
            check metrics and the number passed, plus the parity loss entries
            reaching epsilon.
        """
        data = fobject.fairness_check_data
        models = {}

        for model in fobject.label:
            model_rows = data[data["model"] == model]
            checks = {}
            for description in FAIRNESS_CHECK_METRICS.values():
                scores = model_rows.loc[model_rows["metric"] == description, "score"]
                checks[description] = self._status(scores.to_numpy(dtype=float))

            models[model] = {
                "checks": checks,
                "passed_count": sum(status == PASSED for status in checks.values()),
                "metric_count": len(checks),
            }

        parity_loss = fobject.metric_data
        violations = [
            (model, metric)
            for model, row in parity_loss.iterrows()
            for metric, value in row.items()
            if not np.isnan(value) and value >= self.epsilon
        ]

        return {
            "models": models,
            "parity_loss": parity_loss,
            "parity_loss_violations": violations,
            "privileged": fobject.privileged,
            "epsilon": self.epsilon,
            "created_na": fobject.created_na,
        }

    def _status(self, scores: np.ndarray) -> str:
        if np.isnan(scores).any():
            return NOT_AVAILABLE
        if (np.abs(scores) < self.epsilon).all():
            return PASSED
        return FAILED

    def print_report(self, report: Dict[str, Any]) -> None:
        """Prints and logs the report using Rich tables."""
        self.console.print(
            "\n[bold blue]FAIRNESS CHECK REPORT[/bold blue]", style="bold blue"
        )
        self.console.print(
            f"Privileged subgroup: {escape(report['privileged'])}   "
            f"Acceptable band: (-{report['epsilon']}, {report['epsilon']})"
        )

        for model, model_report in report["models"].items():
            table = Table(
                title=f"Fairness check: {escape(model)}",
                box=box.SIMPLE,
                show_header=True,
                header_style="bold blue",
            )
            table.add_column("Metric", style="cyan", no_wrap=False, min_width=20)
            table.add_column("Status", justify="center", min_width=10)

            for description, status in model_report["checks"].items():
                style = {PASSED: "green", FAILED: "red"}.get(status, "yellow")
                table.add_row(escape(description), f"[{style}]{status}[/{style}]")

            self.console.print(table)

            passed = model_report["passed_count"]
            total = model_report["metric_count"]
            style = "green" if passed == total else "red"
            self.console.print(
                f"[{style}]{escape(model)} passes {passed}/{total} metrics[/{style}]"
            )
            self.logger.info(
                f"{model} passes {passed}/{total} metrics",
                extra={
                    "component": "reporter",
                    "model": model,
                    "checks": model_report["checks"],
                },
            )

        parity_loss = report["parity_loss"]
        loss_table = Table(
            title="Parity Loss",
            box=box.SIMPLE,
            show_header=True,
            header_style="bold blue",
        )
        loss_table.add_column("Metric", style="cyan", no_wrap=True)
        for model in parity_loss.index:
            loss_table.add_column(escape(str(model)), justify="right")

        violations = set(report["parity_loss_violations"])
        for metric in parity_loss.columns:
            cells = []
            for model in parity_loss.index:
                value = parity_loss.loc[model, metric]
                if np.isnan(value):
                    cells.append("[yellow]NA[/yellow]")
                elif (model, metric) in violations:
                    cells.append(f"[red]{value:.4f}[/red]")
                else:
                    cells.append(f"{value:.4f}")
            loss_table.add_row(metric, *cells)

        self.console.print(loss_table)

        # Logged once by fairness_check; the report only repeats it on screen.
        if report["created_na"]:
            self.console.print("[yellow]Some metrics produced missing values[/yellow]")

        self.console.print("")
