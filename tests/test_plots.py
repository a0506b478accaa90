"""
Smoke tests for the plotting helpers.

Run with: python -m pytest tests/test_plots.py -v
"""

import warnings

import pytest
import numpy as np
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import matplotlib.pyplot as plt

from synthreg.analysis.evaluation import compare_predictions
from synthreg.core.network import RegressionNetwork
from synthreg.datasets.synthetic import make_dataset
from synthreg.visualization.plots import (
    plot_dataset,
    plot_input_histogram,
    plot_fitted_curves,
    plot_predicted_vs_actual,
    plot_training_history,
    plot_network,
    save_figure,
)


@pytest.fixture(autouse=True)
def close_figures():
    yield
    plt.close('all')


@pytest.fixture
def dataset():
    return make_dataset(40, random_state=0)


@pytest.fixture
def trained_network(dataset):
    network = RegressionNetwork(hidden_layers=3, seed=0)
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", RuntimeWarning)
        network.fit(dataset.x, dataset.y, stepmax=300)
    return network


class TestPlots:
    """Each helper returns a Figure."""

    def test_plot_dataset_with_and_without_curve(self, dataset):
        fig = plot_dataset(dataset)
        assert len(fig.axes[0].lines) == 1
        fig = plot_dataset(dataset, link=None)
        assert len(fig.axes[0].lines) == 0

    def test_plot_input_histogram(self, dataset):
        fig = plot_input_histogram(dataset)
        assert 'n=40' in fig.axes[0].get_title()

    def test_plot_fitted_curves(self, dataset, trained_network):
        fig = plot_fitted_curves({'a': trained_network.predict, 'b': lambda x: x}, dataset)
        # True curve plus one line per model
        assert len(fig.axes[0].lines) == 3

    @pytest.mark.parametrize("n_tables", [1, 3, 4])
    def test_plot_predicted_vs_actual(self, n_tables):
        tables = [compare_predictions([1, 2, 3], [1, 2.5, 2.5], model_name=f'm{i}')
                  for i in range(n_tables)]
        fig = plot_predicted_vs_actual(tables)
        visible = [ax for ax in fig.axes if ax.axison]
        assert len(visible) == n_tables

    def test_plot_training_history(self, trained_network):
        fig = plot_training_history(trained_network.history, title='h3')
        assert len(fig.axes) == 2

    def test_plot_network(self, trained_network):
        fig = plot_network(trained_network)
        assert trained_network.name in fig.axes[0].get_title()

    def test_save_figure(self, dataset, tmp_path):
        path = save_figure(plot_dataset(dataset), tmp_path / 'nested' / 'dataset.png')
        assert path.exists()
        assert path.stat().st_size > 0
