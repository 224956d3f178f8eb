"""Configures structured JSON logging and the verbose creation trace.

Log records from every component share the ``fairness_check`` namespace so
they can be filtered and ingested together. The human-facing trace printed
while a fairness object is created goes through ``VerboseConsole`` instead,
which is configured per call rather than globally.
"""

import logging
import json
import sys
from typing import Dict, Any, Optional
from pathlib import Path
import time

from rich.console import Console
from rich.markup import escape


class StructuredFormatter(logging.Formatter):
    """A logging formatter that outputs each record as a single JSON object.

    Core metadata is always present. Context fields passed through ``extra``
    (component, stage, metric and error information) are added when set.
    """

    _extra_fields = (
        "component",
        "stage",
        "model",
        "metric_name",
        "metric_value",
        "error_type",
    )

    def format(self, record: logging.LogRecord) -> str:
        """Formats a log record into a JSON string."""
        log_data = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        for field in self._extra_fields:
            if hasattr(record, field):
                log_data[field] = getattr(record, field)
        if hasattr(record, "duration"):
            log_data["duration_ms"] = record.duration

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class PerformanceLogger:
    """A dedicated logger for timings and metric values."""

    def __init__(self, logger_name: str = "fairness_check.performance"):
        self.logger = logging.getLogger(logger_name)
        self._start_times = {}

    def start_timer(self, operation_name: str) -> None:
        """Records the start time of a named operation."""
        self._start_times[operation_name] = time.time()
        self.logger.debug(
            f"Started {operation_name}",
            extra={"component": "performance", "stage": "start"},
        )

    def end_timer(self, operation_name: str) -> float:
        """Logs and returns the duration in milliseconds of a named operation."""
        if operation_name not in self._start_times:
            self.logger.warning(f"Timer for {operation_name} was not started")
            return 0.0

        duration = (time.time() - self._start_times.pop(operation_name)) * 1000

        self.logger.debug(
            f"Completed {operation_name}",
            extra={
                "component": "performance",
                "stage": "complete",
                "duration": duration,
            },
        )
        return duration

    def log_metric(
        self,
        metric_name: str,
        metric_value: float,
        model: str,
        stage: str = "metric_calculation",
    ) -> None:
        """Log a metric value for one model."""
        self.logger.debug(
            f"{model} {metric_name}: {metric_value:.4f}",
            extra={
                "component": "metrics",
                "stage": stage,
                "model": model,
                "metric_name": metric_name,
                "metric_value": metric_value,
            },
        )


def setup_logging(
    level: str = "INFO",
    log_file: str = None,
    structured: bool = True,
    console_output: bool = True,
) -> logging.Logger:
    """Initializes the root logger for the application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Path to log file (optional)
        structured: Use structured JSON logging
        console_output: Enable console output

    Returns:
        The configured ``fairness_check`` logger
    """
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    numeric_level = getattr(logging, level.upper(), logging.INFO)
    root_logger.setLevel(numeric_level)

    if structured:
        formatter = StructuredFormatter(datefmt="%Y-%m-%d %H:%M:%S")
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )

    handlers = []

    if console_output:
        handlers.append(logging.StreamHandler(sys.stderr))

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    for handler in handlers:
        handler.setFormatter(formatter)
        handler.setLevel(numeric_level)
        root_logger.addHandler(handler)

    check_logger = logging.getLogger("fairness_check")
    check_logger.setLevel(numeric_level)

    logging.getLogger("matplotlib").setLevel(logging.WARNING)
    logging.getLogger("sklearn").setLevel(logging.WARNING)

    return check_logger


class CheckLogger:
    """A context-aware logger for one fairness-check component.

    Injects the component name into every record and offers helpers for the
    recurring patterns: stage boundaries, warnings, errors and metric values.
    """

    def __init__(self, component_name: str):
        self.logger = logging.getLogger(f"fairness_check.{component_name}")
        self.component = component_name
        self.perf_logger = PerformanceLogger()

    def log_stage_start(self, stage: str, details: Dict[str, Any] = None) -> None:
        """Log the start of a stage."""
        extra = {"component": self.component, "stage": stage, "status": "start"}
        if details:
            extra.update(details)

        self.logger.info(f"Starting {stage}", extra=extra)

    def log_stage_complete(self, stage: str, details: Dict[str, Any] = None) -> None:
        """Log the completion of a stage."""
        extra = {"component": self.component, "stage": stage, "status": "complete"}
        if details:
            extra.update(details)

        self.logger.info(f"Completed {stage}", extra=extra)

    def log_warning(self, message: str, details: Dict[str, Any] = None) -> None:
        """Log a warning with structured data."""
        extra = {"component": self.component}
        if details:
            extra.update(details)

        self.logger.warning(message, extra=extra)

    def log_error(
        self, message: str, error: Exception = None, details: Dict[str, Any] = None
    ) -> None:
        """Log an error with structured data."""
        extra = {"component": self.component}
        if error:
            extra["error_type"] = type(error).__name__
        if details:
            extra.update(details)

        self.logger.error(message, extra=extra)

    def log_config_validation(self, errors: list) -> None:
        """Log configuration validation results."""
        if errors:
            self.logger.error(
                f"Configuration validation failed with {len(errors)} errors",
                extra={
                    "component": self.component,
                    "stage": "validation",
                    "error_count": len(errors),
                    "errors": errors,
                },
            )
        else:
            self.logger.info(
                "Configuration validation passed",
                extra={"component": self.component, "stage": "validation"},
            )

    def log_parity_loss(self, model: str, parity_loss: Dict[str, float]) -> None:
        """Log every parity-loss value computed for a model."""
        for metric_name, metric_value in parity_loss.items():
            self.perf_logger.log_metric(metric_name, metric_value, model)

    def start_timer(self, operation: str) -> None:
        """Start performance timing."""
        self.perf_logger.start_timer(operation)

    def end_timer(self, operation: str) -> float:
        """End performance timing."""
        return self.perf_logger.end_timer(operation)


def get_check_logger(component_name: str) -> CheckLogger:
    """Returns a CheckLogger named ``fairness_check.<component_name>``."""
    return CheckLogger(component_name)


class VerboseConsole:
    """Prints the step-by-step trace of fairness object creation.

    ``verbose`` switches the trace on or off and ``colorize`` toggles terminal
    colors. Neither has any effect on computed values.
    """

    def __init__(
        self,
        verbose: bool = True,
        colorize: bool = True,
        console: Optional[Console] = None,
    ):
        self.verbose = verbose
        self.colorize = colorize
        self.console = console or Console(
            force_terminal=colorize,
            no_color=not colorize,
            highlight=False,
            soft_wrap=True,
        )

    def write(self, text: str, style: Optional[str] = None) -> None:
        """Writes ``text`` without a trailing newline, optionally styled."""
        if not self.verbose:
            return
        text = escape(text)
        if style and self.colorize:
            text = f"[{style}]{text}[/{style}]"
        self.console.print(text, end="")

    def ok(self, text: str) -> None:
        self.write(text, "green")

    def advise(self, text: str) -> None:
        self.write(text, "yellow")

    def alert(self, text: str) -> None:
        self.write(text, "red")
