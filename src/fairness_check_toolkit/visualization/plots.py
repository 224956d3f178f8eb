"""Plotting utilities for fairness objects.

Provides Plotly figures with consistent styling, configurable through
``VisualizationConfig``.
"""

from typing import List, Optional
from pathlib import Path

import numpy as np
import plotly.graph_objects as go
from plotly.subplots import make_subplots

from ..config.config_parser import VisualizationConfig
from ..measurement.fairness_check_table import FAIRNESS_CHECK_METRICS
from ..measurement.fairness_metrics import PARITY_LOSS_NAMES
from ..measurement.fairness_object import FairnessObject

MODEL_PALETTE_KEYS = ["primary", "secondary", "accent", "success", "danger"]


def _apply_base_layout(
    fig: go.Figure,
    viz_config: VisualizationConfig,
    title: str,
    width: int = None,
    height: int = None,
) -> go.Figure:
    """Applies the shared background, font, title and grid styling.

    Args:
        fig: Plotly figure to style
        viz_config: Visualization configuration
        title: Chart title
        width: Override default width
        height: Override default height

    Returns:
        Styled Plotly figure
    """
    fig.update_layout(
        paper_bgcolor="#FFFFFF",
        plot_bgcolor="#FFFFFF",
        font={
            "family": viz_config.fonts.family,
            "color": "#1A1E21",
            "size": viz_config.fonts.axis_size,
        },
        title={
            "text": title,
            "x": 0.5,
            "xanchor": "center",
            "font": {"size": viz_config.fonts.title_size},
        },
        height=height or viz_config.layout.height,
        width=width,
        margin=viz_config.layout.margins,
    )

    fig.update_xaxes(showgrid=True, gridwidth=1, gridcolor="rgba(128,128,128,0.2)")
    fig.update_yaxes(showgrid=True, gridwidth=1, gridcolor="rgba(128,128,128,0.2)")
    return fig


def _model_color(viz_config: VisualizationConfig, index: int) -> str:
    key = MODEL_PALETTE_KEYS[index % len(MODEL_PALETTE_KEYS)]
    return getattr(viz_config.colors, key)


def save_figure(fig: go.Figure, path: str) -> Path:
    """Writes a figure as a standalone HTML file, creating parent directories."""
    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig.write_html(output_path, include_plotlyjs="cdn")
    return output_path


def plot_fairness_check(
    fobject: FairnessObject,
    viz_config: Optional[VisualizationConfig] = None,
    title: str = "Fairness Check",
) -> go.Figure:
    """Plots each model's deviation from the privileged subgroup per metric.

    One subplot per fairness check metric, one horizontal bar per model and
    unprivileged subgroup. The shaded band marks (-epsilon, epsilon); bars
    reaching outside it indicate a failed metric. Missing scores are skipped.

    Args:
        fobject: Fairness object to plot
        viz_config: Visualization configuration, defaults when omitted
        title: Title for the plot

    Returns:
        Plotly figure with five stacked subplots
    """
    viz_config = viz_config or VisualizationConfig()
    descriptions = list(FAIRNESS_CHECK_METRICS.values())
    data = fobject.fairness_check_data
    epsilon = fobject.epsilon

    fig = make_subplots(
        rows=len(descriptions),
        cols=1,
        shared_xaxes=True,
        subplot_titles=descriptions,
        vertical_spacing=0.06,
    )

    for row, description in enumerate(descriptions, start=1):
        metric_rows = data[data["metric"] == description]
        for index, model in enumerate(fobject.label):
            model_rows = metric_rows[metric_rows["model"] == model]
            fig.add_trace(
                go.Bar(
                    name=model,
                    legendgroup=model,
                    showlegend=row == 1,
                    orientation="h",
                    x=model_rows["score"],
                    y=model_rows["subgroup"],
                    marker_color=_model_color(viz_config, index),
                    hovertemplate="<b>%{y}</b><br>"
                    + f"{model}: "
                    + "%{x:.3f}<br>"
                    + "<extra></extra>",
                ),
                row=row,
                col=1,
            )
        fig.add_vrect(
            x0=-epsilon,
            x1=epsilon,
            fillcolor=viz_config.colors.success,
            opacity=0.25,
            line_width=0,
            row=row,
            col=1,
        )

    height = max(viz_config.layout.height, 180 * len(descriptions))
    fig = _apply_base_layout(fig, viz_config, title, height=height)

    limit = np.nanmax(np.abs(data["score"].to_numpy(dtype=float)), initial=epsilon)
    fig.update_xaxes(range=[-1.1 * limit, 1.1 * limit], zeroline=True)
    fig.update_layout(
        barmode="group",
        xaxis_title=f"Deviation from privileged subgroup ({fobject.privileged})",
        legend=dict(orientation="h", yanchor="bottom", y=1.02, xanchor="center", x=0.5),
    )

    return fig


def plot_parity_loss(
    fobject: FairnessObject,
    viz_config: Optional[VisualizationConfig] = None,
    metrics: Optional[List[str]] = None,
    title: str = "Parity Loss by Model",
) -> go.Figure:
    """Compares parity loss across models as grouped bars.

    Args:
        fobject: Fairness object to plot
        viz_config: Visualization configuration, defaults when omitted
        metrics: Parity loss columns to show, all thirteen by default; the
            ``_parity_loss`` suffix may be omitted
        title: Title for the plot

    Returns:
        Plotly figure with one bar trace per model
    """
    viz_config = viz_config or VisualizationConfig()

    if metrics is None:
        columns = list(PARITY_LOSS_NAMES)
    else:
        columns = [
            metric if metric.endswith("_parity_loss") else f"{metric}_parity_loss"
            for metric in metrics
        ]
        unknown = [column for column in columns if column not in PARITY_LOSS_NAMES]
        if unknown:
            raise ValueError(f"Unknown parity loss metrics: {unknown}")

    metric_labels = [column.replace("_parity_loss", "") for column in columns]

    fig = go.Figure()

    for index, model in enumerate(fobject.label):
        values = fobject.metric_data.loc[model, columns].to_numpy(dtype=float)
        fig.add_trace(
            go.Bar(
                name=model,
                x=metric_labels,
                y=values,
                marker_color=_model_color(viz_config, index),
                text=["NA" if np.isnan(val) else f"{val:.3f}" for val in values],
                textposition="outside",
                textfont=dict(size=12, color="#1A1E21"),
                hovertemplate="<b>%{x}</b><br>"
                + f"{model}: "
                + "%{y:.3f}<br>"
                + "<extra></extra>",
            )
        )

    fig.add_hline(
        y=fobject.epsilon,
        line_dash="dash",
        line_color=viz_config.colors.danger,
        annotation_text=f"epsilon ({fobject.epsilon})",
        annotation_position="top left",
    )

    fig = _apply_base_layout(fig, viz_config, title)

    fig.update_layout(
        yaxis_title="Parity Loss (Lower = More Fair)",
        barmode="group",
        legend=dict(orientation="h", yanchor="bottom", y=1.02, xanchor="center", x=0.5),
    )

    return fig
