"""Visualization utilities for the regression walkthrough."""

from .plots import (
    plot_dataset,
    plot_input_histogram,
    plot_fitted_curves,
    plot_predicted_vs_actual,
    plot_training_history,
    plot_network,
    save_figure,
)

__all__ = [
    'plot_dataset',
    'plot_input_histogram',
    'plot_fitted_curves',
    'plot_predicted_vs_actual',
    'plot_training_history',
    'plot_network',
    'save_figure',
]
