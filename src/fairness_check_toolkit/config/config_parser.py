"""Configuration parsing and validation for command line fairness checks.

This module contains Pydantic models describing a fairness check run and a
parser that loads them from YAML. Validation covers the shape of the file
(required sections, types, ranges) and the fairness arguments that would
otherwise only fail once the data has been read, such as out-of-range cutoffs
or duplicate model labels.
"""

import yaml
from pathlib import Path
from typing import Dict, Any, Union, List, Optional
from pydantic import BaseModel, Field, field_validator, model_validator, ValidationError
import tomllib


MAX_CONFIG_BYTES = 10 * 1024 * 1024


class DataConfig(BaseModel):
    """Location and layout of the evaluation data.

    The input file is a CSV with one row per observation holding the ground
    truth, the protected attribute and one probability column per model.

    Attributes:
      input_path (str): Path to the CSV file.
      target_column (str): Column with the 0/1 ground truth.
      protected_column (str): Column with the protected attribute.
    """

    input_path: str = Field(..., description="Path to input data file")
    target_column: str = Field(..., description="Name of target column")
    protected_column: str = Field(..., description="Name of protected column")


class ModelConfig(BaseModel):
    """One evaluated model.

    Attributes:
      label (str): Display label, unique across the run and merged objects.
      probability_column (str): Column with the model's predicted
        probabilities of the positive class.
    """

    label: str = Field(..., min_length=1, description="Model label")
    probability_column: str = Field(..., description="Predicted probability column")


class FairnessConfig(BaseModel):
    """Fairness check arguments.

    Attributes:
      privileged (str): Privileged level of the protected attribute.
      cutoff (float | List[float] | Dict[str, float] | None): Probability
        threshold, either one value for every subgroup, one value per level
        in level order, or a mapping from level to threshold.
      epsilon (float): Acceptable band (-epsilon, epsilon) for metric
        deviations.
    """

    privileged: str = Field(..., description="Privileged subgroup")
    cutoff: Optional[Union[float, List[float], Dict[str, float]]] = Field(
        None, description="Cutoff per subgroup"
    )
    epsilon: float = Field(0.1, gt=0, le=1.0, description="Fairness boundary")

    @field_validator("privileged", mode="before")
    def coerce_privileged(cls, v):
        """Accept numeric or boolean privileged levels written bare in YAML."""
        if isinstance(v, (int, float, bool)):
            return str(v)
        return v

    @field_validator("cutoff")
    def validate_cutoff(cls, v):
        """Check that every cutoff lies within [0, 1].

        Raises:
          ValueError: If any cutoff is outside [0, 1] or the list is empty.
        """
        if v is None:
            return v
        if isinstance(v, dict):
            values = list(v.values())
        elif isinstance(v, list):
            values = v
        else:
            values = [v]
        if not values:
            raise ValueError("cutoff must not be empty")
        if any(value < 0 or value > 1 for value in values):
            raise ValueError("cutoff must have values between 0 and 1")
        return v


class OutputConfig(BaseModel):
    """Reporting, logging and persistence options.

    Attributes:
      verbose (bool): Print the fairness object creation trace.
      colorize (bool): Use terminal colors in the trace.
      log_level (str): Logging level name.
      structured_logs (bool): Emit JSON log lines instead of plain text.
      log_file (Optional[str]): Optional log file path.
      result_path (Optional[str]): Where to pickle the resulting fairness
        object so that a later run can merge it.
      merge_with (List[str]): Pickled fairness objects to merge in.
      plot_path (Optional[str]): HTML file for the fairness check plot.
    """

    verbose: bool = Field(True, description="Print creation trace")
    colorize: bool = Field(True, description="Colorize creation trace")
    log_level: str = Field("WARNING", description="Logging level")
    structured_logs: bool = Field(False, description="JSON log lines")
    log_file: Optional[str] = Field(None, description="Log file path")
    result_path: Optional[str] = Field(None, description="Output pickle path")
    merge_with: List[str] = Field(
        default_factory=list, max_length=50, description="Fairness objects to merge"
    )
    plot_path: Optional[str] = Field(None, description="Plot HTML path")

    @field_validator("log_level")
    def validate_log_level(cls, v):
        """Restrict the level to the standard logging names."""
        levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in levels:
            raise ValueError(f"Unknown log level: {v}")
        return v.upper()


class CheckConfig(BaseModel):
    """Top-level fairness check configuration.

    Attributes:
      data (DataConfig): Input data settings.
      models (List[ModelConfig]): Evaluated models, at least one.
      fairness (FairnessConfig): Fairness check arguments.
      output (OutputConfig): Reporting and persistence options.
    """

    data: DataConfig
    models: List[ModelConfig] = Field(..., min_length=1, max_length=100)
    fairness: FairnessConfig
    output: OutputConfig = Field(default_factory=OutputConfig)

    @model_validator(mode="after")
    def validate_unique_labels(self):
        """Model labels must be unique within one run."""
        labels = [model.label for model in self.models]
        duplicates = sorted({label for label in labels if labels.count(label) > 1})
        if duplicates:
            raise ValueError(f"duplicate label: {', '.join(duplicates)}")
        return self


class VisualizationColorsConfig(BaseModel):
    """Color palette settings.

    Attributes:
      primary (str): Primary color as a hex string.
      secondary (str): Secondary color as a hex string.
      accent (str): Accent color as a hex string.
      success (str): Color of the acceptable band.
      danger (str): Color of values outside the band.
    """

    primary: str = Field(
        "#3A5CED", pattern=r"^#[0-9A-Fa-f]{6}$", description="Primary color"
    )
    secondary: str = Field(
        "#7E7AE6", pattern=r"^#[0-9A-Fa-f]{6}$", description="Secondary color"
    )
    accent: str = Field(
        "#7BC0FF", pattern=r"^#[0-9A-Fa-f]{6}$", description="Accent color"
    )
    success: str = Field(
        "#82E5E8", pattern=r"^#[0-9A-Fa-f]{6}$", description="Success color"
    )
    danger: str = Field(
        "#D30B3B", pattern=r"^#[0-9A-Fa-f]{6}$", description="Danger/error color"
    )


class VisualizationFontsConfig(BaseModel):
    """Font configuration for plot text."""

    family: str = Field("Gordita, Figtree, sans-serif", description="Font family")
    title_size: int = Field(24, ge=12, le=48, description="Title font size")
    axis_size: int = Field(16, ge=8, le=24, description="Axis font size")


class VisualizationLayoutConfig(BaseModel):
    """Layout configuration for plots.

    Attributes:
      height (int): Default plot height in pixels.
      margins (Dict[str, int]): Plot margins in Plotly format
      (l, r, t, b, pad).
    """

    height: int = Field(600, ge=200, le=1200, description="Default plot height")
    margins: Dict[str, int] = Field(
        default_factory=lambda: {"l": 60, "r": 150, "t": 100, "b": 80, "pad": 10},
        description="Plot margins (Plotly format: l, r, t, b, pad)",
    )


class VisualizationConfig(BaseModel):
    """High-level visualization configuration.

    Aggregates color, font, and layout defaults. ``from_pyproject`` lets a
    repository keep its plot styling in pyproject.toml.
    """

    colors: VisualizationColorsConfig = Field(default_factory=VisualizationColorsConfig)
    fonts: VisualizationFontsConfig = Field(default_factory=VisualizationFontsConfig)
    layout: VisualizationLayoutConfig = Field(default_factory=VisualizationLayoutConfig)

    @classmethod
    def from_pyproject(
        cls, pyproject_path: Optional[Path] = None
    ) -> "VisualizationConfig":
        """Load visualization settings from a pyproject.toml.

        Searches upward from the current working directory for the closest
        pyproject.toml when no path is given, and reads the table
        [tool.fairness_check_toolkit.visualization].

        Args:
          pyproject_path (Optional[Path]): Explicit path to pyproject.toml.

        Returns:
          VisualizationConfig: Settings from the file, or defaults if none
          are found or the file cannot be parsed.
        """
        if pyproject_path is None:
            current_dir = Path.cwd()
            for parent in [current_dir] + list(current_dir.parents):
                candidate = parent / "pyproject.toml"
                if candidate.exists():
                    pyproject_path = candidate
                    break

        if pyproject_path and Path(pyproject_path).exists():
            try:
                with open(pyproject_path, "rb") as f:
                    config_data = tomllib.load(f)
            except (IOError, tomllib.TOMLDecodeError):
                return cls()

            viz_config = (
                config_data.get("tool", {})
                .get("fairness_check_toolkit", {})
                .get("visualization", {})
            )
            if viz_config:
                return cls(**_unflatten_dict(viz_config))

        return cls()


def _unflatten_dict(flat_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Expands dotted TOML keys such as ``colors.primary`` into nested dicts."""
    result = {}
    for key, value in flat_dict.items():
        parts = key.split(".")
        current = result
        for part in parts[:-1]:
            current = current.setdefault(part, {})
        current[parts[-1]] = value
    return result


class ConfigParser:
    """Load and validate fairness check configuration files."""

    @staticmethod
    def load(config_path: Union[str, Path]) -> Dict[str, Any]:
        """Load a YAML configuration file.

        Args:
          config_path (Union[str, Path]): Path to the YAML configuration file.

        Raises:
          FileNotFoundError: If the path does not exist.
          ValueError: If the file is too large, is not valid YAML, or does
            not hold a mapping.

        Returns:
          Dict[str, Any]: The parsed configuration dictionary.
        """
        config_path = Path(config_path)

        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        file_size = config_path.stat().st_size
        if file_size > MAX_CONFIG_BYTES:
            raise ValueError(
                f"Configuration file too large: {file_size} bytes (max 10MB)"
            )

        try:
            with open(config_path, "r", encoding="utf-8") as file:
                config = yaml.safe_load(file)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file: {e}")
        except UnicodeDecodeError as e:
            raise ValueError(f"Configuration file encoding error: {e}")

        if config is None:
            raise ValueError("Empty or invalid YAML configuration file")

        if not isinstance(config, dict):
            raise ValueError("Configuration must be a YAML dictionary")

        return config

    @staticmethod
    def parse(config: Dict[str, Any]) -> CheckConfig:
        """Build the validated configuration model.

        Raises:
          pydantic.ValidationError: If the configuration is invalid.
        """
        return CheckConfig(**config)

    @staticmethod
    def validate(config: Dict[str, Any]) -> list[str]:
        """Validate a configuration dict against the schema.

        Args:
          config (Dict[str, Any]): Parsed configuration dictionary.

        Returns:
          list[str]: An empty list if valid, otherwise human-readable error
          messages.
        """
        try:
            CheckConfig(**config)
            return []
        except ValidationError as e:
            return [
                f"{'.'.join(str(part) for part in error['loc']) or 'config'}: "
                f"{error['msg']}"
                for error in e.errors()
            ]
