"""Visualization utilities for the fairness check toolkit."""

from .plots import plot_fairness_check, plot_parity_loss, save_figure

__all__ = ["plot_fairness_check", "plot_parity_loss", "save_figure"]
