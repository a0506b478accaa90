"""
Matplotlib-based visualization for the regression walkthrough.

These functions create static plots for exploration and for comparing
fitted models; every function returns its Figure.
"""

import numpy as np
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple, Union

# Matplotlib imports with non-GUI backend
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt

from ..datasets.synthetic import Dataset, true_response


MODEL_COLORS = ['#e74c3c', '#2ecc71', '#9b59b6', '#f39c12', '#1abc9c', '#34495e']


def _curve_grid(x: np.ndarray, resolution: int = 300) -> np.ndarray:
    lo, hi = (float(np.min(x)), float(np.max(x))) if len(x) else (-3.0, 3.0)
    return np.linspace(lo, hi, resolution)


def plot_dataset(
    dataset: Dataset,
    link: Optional[Union[str, Callable]] = 'cosine_plus_identity',
    title: str = 'Synthetic data',
    figsize: Tuple[int, int] = (7, 5),
    ax: Optional[plt.Axes] = None
) -> plt.Figure:
    """
    Scatter the samples, with the noise-free link curve when ``link`` is given.

    Args:
        dataset: Samples to plot
        link: Link function or name (None to omit the curve)
        title: Plot title
        figsize: Figure size
        ax: Existing axes to plot on

    Returns:
        matplotlib Figure
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=figsize)
    else:
        fig = ax.figure

    ax.scatter(dataset.x, dataset.y, s=18, alpha=0.7, color='#3498db',
               edgecolors='white', linewidths=0.5, label='samples')

    if link is not None and len(dataset):
        grid = _curve_grid(dataset.x)
        ax.plot(grid, true_response(grid, link), 'k--', linewidth=1.5, label='true mean')

    ax.set_xlabel('x')
    ax.set_ylabel('y')
    ax.set_title(title)
    ax.legend(fontsize=8)
    ax.grid(True, alpha=0.3)

    return fig


def plot_input_histogram(
    dataset: Dataset,
    bins: int = 30,
    figsize: Tuple[int, int] = (6, 4)
) -> plt.Figure:
    """Histogram of the sampled inputs."""
    fig, ax = plt.subplots(figsize=figsize)
    ax.hist(dataset.x, bins=bins, color='steelblue', edgecolor='white', alpha=0.8)
    ax.axvline(x=float(np.mean(dataset.x)) if len(dataset) else 0.0,
               color='red', linewidth=1, linestyle='--')
    ax.set_xlabel('x')
    ax.set_ylabel('Count')
    ax.set_title(f'Input distribution (n={len(dataset)})')
    return fig


def plot_fitted_curves(
    models: Dict[str, Callable[[np.ndarray], np.ndarray]],
    dataset: Dataset,
    link: Optional[Union[str, Callable]] = 'cosine_plus_identity',
    title: str = 'Fitted curves',
    figsize: Tuple[int, int] = (8, 5)
) -> plt.Figure:
    """
    Overlay each model's prediction curve on the data.

    Args:
        models: Mapping of model name to a predict function over inputs
        dataset: Samples to scatter underneath
        link: True link (None to omit)
        title: Plot title
        figsize: Figure size

    Returns:
        matplotlib Figure
    """
    fig = plot_dataset(dataset, link=link, title=title, figsize=figsize)
    ax = fig.axes[0]

    grid = _curve_grid(dataset.x)
    for i, (name, predict) in enumerate(models.items()):
        ax.plot(grid, np.asarray(predict(grid)).reshape(-1),
                color=MODEL_COLORS[i % len(MODEL_COLORS)], linewidth=2, label=name)

    ax.legend(fontsize=8)
    return fig


def plot_predicted_vs_actual(
    tables: List,
    figsize: Optional[Tuple[int, int]] = None
) -> plt.Figure:
    """
    One predicted-vs-actual panel per PredictionTable, with the y = x line.

    Args:
        tables: PredictionTables to compare
        figsize: Figure size

    Returns:
        matplotlib Figure
    """
    n_tables = len(tables)
    ncols = max(1, min(3, n_tables))
    nrows = max(1, (n_tables + ncols - 1) // ncols)

    if figsize is None:
        figsize = (4 * ncols, 4 * nrows)

    fig, axes = plt.subplots(nrows, ncols, figsize=figsize, squeeze=False)
    axes = axes.flatten()

    for i, table in enumerate(tables):
        ax = axes[i]
        actual, predicted = table.actual, table.predicted
        ax.scatter(actual, predicted, s=20, alpha=0.7,
                   color=MODEL_COLORS[i % len(MODEL_COLORS)], edgecolors='white', linewidths=0.5)
        if len(actual):
            lo = float(min(actual.min(), predicted.min()))
            hi = float(max(actual.max(), predicted.max()))
            ax.plot([lo, hi], [lo, hi], 'k--', linewidth=1)
        summary = table.summary()
        ax.set_title(f'{table.model_name}\nRMSE: {summary.rmse:.3f}')
        ax.set_xlabel('actual')
        ax.set_ylabel('predicted')
        ax.grid(True, alpha=0.3)

    # Hide empty subplots
    for j in range(n_tables, len(axes)):
        axes[j].axis('off')

    plt.tight_layout()
    return fig


def plot_training_history(
    history: Dict[str, List[float]],
    figsize: Tuple[int, int] = (10, 4),
    title: Optional[str] = None
) -> plt.Figure:
    """
    Plot training history (error and largest gradient per recorded step).

    Args:
        history: Network history with 'step', 'error' and 'reached_threshold'
        figsize: Figure size
        title: Plot title

    Returns:
        matplotlib Figure
    """
    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=figsize)

    steps = history['step']

    ax1.plot(steps, history['error'], 'b-', linewidth=2)
    ax1.set_xlabel('Step')
    ax1.set_ylabel('Error')
    ax1.set_title('Training Error')
    ax1.grid(True, alpha=0.3)
    ax1.set_yscale('log')

    ax2.plot(steps, history['reached_threshold'], 'g-', linewidth=2)
    ax2.set_xlabel('Step')
    ax2.set_ylabel('max |dE/dw|')
    ax2.set_title('Largest Gradient')
    ax2.grid(True, alpha=0.3)
    ax2.set_yscale('log')

    if title:
        fig.suptitle(title)

    plt.tight_layout()
    return fig


def plot_network(
    network,
    figsize: Tuple[int, int] = (8, 5),
    show_weights: bool = True
) -> plt.Figure:
    """
    Draw the network as layers of nodes joined by weighted edges.

    Edge width scales with |weight|; red edges are negative. Intercepts are
    drawn as a separate node feeding each layer.

    Args:
        network: RegressionNetwork
        figsize: Figure size
        show_weights: Annotate edges with their values

    Returns:
        matplotlib Figure
    """
    fig, ax = plt.subplots(figsize=figsize)

    layer_sizes = [network.config.input_dim] + network.config.hidden_layers + [network.config.output_dim]
    n_layers = len(layer_sizes)
    max_size = max(layer_sizes)

    def node_positions(layer: int, size: int) -> List[Tuple[float, float]]:
        x = layer / (n_layers - 1)
        offset = (max_size - size) / 2
        return [(x, 1 - (offset + k + 0.5) / max_size) for k in range(size)]

    positions = [node_positions(l, s) for l, s in enumerate(layer_sizes)]
    max_weight = max(float(np.max(np.abs(W))) for W in network.weights) or 1.0

    for l, (W, b) in enumerate(zip(network.weights, network.biases)):
        for i, (x0, y0) in enumerate(positions[l]):
            for j, (x1, y1) in enumerate(positions[l + 1]):
                w = W[i, j]
                ax.plot([x0, x1], [y0, y1], color='#e74c3c' if w < 0 else '#2c3e50',
                        linewidth=0.5 + 3 * abs(w) / max_weight, alpha=0.7, zorder=1)
                if show_weights:
                    ax.text(x0 + 0.3 * (x1 - x0), y0 + 0.3 * (y1 - y0), f'{w:.2f}',
                            fontsize=6, color='gray')

        # Intercept node between layers, above the next layer
        bx = (l + 0.5) / (n_layers - 1)
        by = 1.02
        ax.scatter([bx], [by], s=200, color='#f1c40f', edgecolors='black', zorder=3)
        ax.text(bx, by, '1', ha='center', va='center', fontsize=7, zorder=4)
        for j, (x1, y1) in enumerate(positions[l + 1]):
            ax.plot([bx, x1], [by, y1], color='#f39c12', linewidth=0.8, alpha=0.6, zorder=1)
            if show_weights:
                ax.text(bx + 0.5 * (x1 - bx), by + 0.5 * (y1 - by), f'{b[j]:.2f}',
                        fontsize=6, color='#d35400')

    for l, layer in enumerate(positions):
        xs, ys = zip(*layer)
        color = '#3498db' if l == 0 else ('#2ecc71' if l == n_layers - 1 else '#ecf0f1')
        ax.scatter(xs, ys, s=400, color=color, edgecolors='black', zorder=2)

    summary = network.fit_summary
    subtitle = ''
    if summary is not None:
        subtitle = f'\nerror: {summary.error:.4f}  steps: {summary.steps}'
    ax.set_title(f'{network.name}{subtitle}')
    ax.axis('off')
    ax.set_xlim(-0.1, 1.1)
    ax.set_ylim(-0.05, 1.1)

    return fig


def save_figure(fig: plt.Figure, path: Union[str, Path], dpi: int = 100) -> Path:
    """Save a figure as PNG and close it."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(path, format='png', dpi=dpi, bbox_inches='tight')
    plt.close(fig)
    return path
