"""
The regression walkthrough: generate, explore, split, fit, compare.

Defaults reproduce the reference run:
- 251 inputs from Normal(0, 2)
- responses from Normal(cos(x) + x, 0.15)
- first 80% of rows for training, the rest for evaluation
- three single-hidden-layer networks (3, 5 and 7 units, logistic / tanh,
  sum of squared errors)
"""

import time
from dataclasses import dataclass, field, asdict, replace
from pathlib import Path
from typing import Any, Dict, List, Optional

from .analysis.evaluation import PredictionTable, compare_models, compare_predictions, print_comparison
from .analysis.exploration import DatasetDescription, describe_dataset, head, print_description
from .analysis.statistics import ResidualSummary, noise_residuals, summarize_residuals
from .core.harness import ModelConfiguration, ModelHarness, NetworkHarness
from .core.persistence import ModelResult, RunStore, RunSummary
from .core.training import TrainingConfig
from .datasets.split import Split, train_test_split
from .datasets.synthetic import Dataset, LINKS, make_dataset


@dataclass
class WalkthroughConfig:
    """Configuration for one walkthrough run."""

    # Data generation
    n_samples: int = 251
    mean: float = 0.0
    spread: float = 2.0
    noise_spread: float = 0.15
    link: str = 'cosine_plus_identity'

    # Train/evaluation split
    split_fraction: float = 0.8

    # One seed per model; the first also seeds data generation
    seeds: List[int] = field(default_factory=lambda: [1, 2, 3])

    models: List[ModelConfiguration] = field(default_factory=lambda: [
        ModelConfiguration(hidden_units=3, error_function='sse', activation='logistic'),
        ModelConfiguration(hidden_units=5, error_function='sse', activation='tanh'),
        ModelConfiguration(hidden_units=7, error_function='sse', activation='logistic'),
    ])

    # How every model is trained
    training_config: Dict[str, Any] = field(default_factory=lambda: {
        'algorithm': 'rprop+',
        'threshold': 0.01,
        'stepmax': 100000,
        'rep': 1,
        'record_every': 100,
    })

    def __post_init__(self):
        if self.link not in LINKS:
            available = ', '.join(LINKS.keys())
            raise ValueError(f"Unknown link function '{self.link}'. Available: {available}")
        if not self.seeds:
            raise ValueError("At least one seed is required")
        if not self.models:
            raise ValueError("At least one model configuration is required")
        self.seeds = list(self.seeds)
        models = [
            m if isinstance(m, ModelConfiguration) else ModelConfiguration.from_dict(m)
            for m in self.models
        ]
        # Copies, so a model list shared between configs keeps its own seeds;
        # models without an explicit seed take theirs from the seed list
        self.models = [
            replace(m, seed=self.seeds[i % len(self.seeds)] if m.seed is None else m.seed)
            for i, m in enumerate(models)
        ]
        labels = [m.label for m in self.models]
        duplicates = sorted(set(l for l in labels if labels.count(l) > 1))
        if duplicates:
            raise ValueError(f"Model labels must be unique, duplicated: {', '.join(duplicates)}")

    @property
    def data_seed(self) -> int:
        return self.seeds[0]

    def get_training_config(self) -> TrainingConfig:
        return TrainingConfig(**self.training_config)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'WalkthroughConfig':
        """Build a config from a (partial) dict; missing keys keep their defaults."""
        known = set(cls.__dataclass_fields__)
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown config keys: {', '.join(sorted(unknown))}")
        data = dict(data)
        if 'training_config' in data:
            training = cls().training_config
            training.update(data['training_config'])
            data['training_config'] = training
        return cls(**data)

    def get_summary(self) -> Dict[str, Any]:
        """Get a summary of the configuration."""
        return {
            'n_samples': self.n_samples,
            'distribution': f"Normal({self.mean}, {self.spread})",
            'link': LINKS[self.link]['formula'],
            'noise_spread': self.noise_spread,
            'split_fraction': self.split_fraction,
            'models': [m.label for m in self.models],
            'seeds': list(self.seeds),
        }


@dataclass
class WalkthroughResult:
    """Everything a walkthrough run produced."""
    config: WalkthroughConfig
    dataset: Dataset
    description: DatasetDescription
    noise_check: ResidualSummary
    split: Split
    models: Dict[str, Any] = field(default_factory=dict)
    fit_summaries: Dict[str, Optional[Dict[str, Any]]] = field(default_factory=dict)
    tables: Dict[str, PredictionTable] = field(default_factory=dict)
    comparison: List[Dict[str, Any]] = field(default_factory=list)
    figures: Dict[str, Path] = field(default_factory=dict)
    run_id: Optional[str] = None

    @property
    def best_model(self) -> Optional[str]:
        return self.comparison[0]['model'] if self.comparison else None


def _banner(text: str):
    print("=" * 60)
    print(text)
    print("=" * 60)


def run_walkthrough(
    config: Optional[WalkthroughConfig] = None,
    harness: Optional[ModelHarness] = None,
    output_dir: Optional[str] = None,
    plots: bool = True,
    verbose: bool = True
) -> WalkthroughResult:
    """
    Run the walkthrough end to end.

    Args:
        config: Walkthrough configuration (defaults reproduce the reference run)
        harness: Model back-end; a NetworkHarness built from
            ``config.training_config`` when omitted
        output_dir: If given, figures and a stored run are written here
        plots: Render figures (only used with ``output_dir``)
        verbose: Print progress and tables

    Returns:
        WalkthroughResult
    """
    config = config or WalkthroughConfig()
    if harness is None:
        harness = NetworkHarness(training_config=config.get_training_config())

    store = None
    run_id = None
    if output_dir is not None:
        store = RunStore(output_dir)
        run_id = store.create_run(config.to_dict()).run_id

    try:
        result = _run(config, harness, verbose)
        result.run_id = run_id
        if store is not None:
            _store_result(store, result)
            if plots:
                result.figures = _render_figures(result, store.get_run_dir(run_id) / 'figures')
    except Exception as e:
        if store is not None:
            store.update_status(run_id, 'failed', error=str(e))
        raise

    if verbose and run_id is not None:
        print(f"\nSaved run {run_id} to {store.get_run_dir(run_id)}")

    return result


def _run(config: WalkthroughConfig, harness: ModelHarness, verbose: bool) -> WalkthroughResult:
    if verbose:
        _banner("SYNTHETIC REGRESSION WALKTHROUGH")
        for key, value in config.get_summary().items():
            print(f"  {key:15s} {value}")

    # 1. Generate
    dataset = make_dataset(
        n_samples=config.n_samples,
        mean=config.mean,
        spread=config.spread,
        noise_spread=config.noise_spread,
        link=config.link,
        random_state=config.data_seed,
    )

    # 2. Explore
    description = describe_dataset(dataset)
    noise_check = summarize_residuals(
        noise_residuals(dataset, config.link),
        expected_spread=config.noise_spread,
    )
    if verbose:
        print("\nFirst rows:")
        for row in head(dataset):
            print(f"  x={row['x']:8.4f}  y={row['y']:8.4f}")
        print()
        print_description(description)
        print(f"noise: mean={noise_check.mean:.4f}, std={noise_check.std:.4f} "
              f"(expected {config.noise_spread})")

    # 3. Split
    split = train_test_split(dataset, config.split_fraction)
    if verbose:
        n_train, n_eval = split.sizes
        print(f"\nSplit: {n_train} training / {n_eval} evaluation samples")

    result = WalkthroughResult(
        config=config,
        dataset=dataset,
        description=description,
        noise_check=noise_check,
        split=split,
    )

    # 4. Fit and predict
    for model_config in config.models:
        name = model_config.label
        if verbose:
            print(f"\nFitting {name} (seed={model_config.seed})...")
        start = time.time()
        model = harness.fit(split.training.x, split.training.y, model_config)
        predicted = harness.predict(model, split.evaluation.x)

        result.models[name] = model
        result.fit_summaries[name] = harness.fit_summary(model)
        result.tables[name] = compare_predictions(
            split.evaluation.y, predicted, inputs=split.evaluation.x, model_name=name
        )

        if verbose:
            summary = result.fit_summaries[name]
            if summary is not None:
                print(f"  steps={summary['steps']}, error={summary['error']:.4f}, "
                      f"converged={summary['converged']}")
            print(f"  done in {time.time() - start:.1f}s")
            print(result.tables[name].format(max_rows=5))

    # 5. Compare
    result.comparison = compare_models(result.tables)
    if verbose:
        print()
        _banner("EVALUATION (held-out samples)")
        print_comparison(result.comparison)
        print(f"\nBest model: {result.best_model}")

    return result


def _store_result(store: RunStore, result: WalkthroughResult):
    models = []
    for model_config in result.config.models:
        name = model_config.label
        model = result.models[name]
        table = result.tables[name]
        store.save_predictions(result.run_id, table)
        models.append(ModelResult(
            model_name=name,
            model_config=model_config.to_dict(),
            fit_summary=result.fit_summaries[name],
            evaluation=table.summary().to_dict(),
            network=model.to_dict(include_weights=True) if hasattr(model, 'to_dict') else None,
        ))

    store.save_summary(RunSummary(
        run_id=result.run_id,
        dataset={'n': len(result.dataset), 'description': result.description.to_dict()},
        split_sizes=list(result.split.sizes),
        models=models,
        comparison=result.comparison,
        noise_check=result.noise_check.to_dict(),
    ))


def _render_figures(result: WalkthroughResult, figure_dir: Path) -> Dict[str, Path]:
    from .visualization.plots import (
        plot_dataset,
        plot_fitted_curves,
        plot_input_histogram,
        plot_network,
        plot_predicted_vs_actual,
        plot_training_history,
        save_figure,
    )

    link = result.config.link
    figures = {
        'dataset': save_figure(plot_dataset(result.dataset, link=link), figure_dir / 'dataset.png'),
        'inputs': save_figure(plot_input_histogram(result.dataset), figure_dir / 'inputs.png'),
        'predicted_vs_actual': save_figure(
            plot_predicted_vs_actual(list(result.tables.values())),
            figure_dir / 'predicted_vs_actual.png',
        ),
    }

    predictors = {name: model.predict for name, model in result.models.items() if hasattr(model, 'predict')}
    if predictors:
        figures['fitted_curves'] = save_figure(
            plot_fitted_curves(predictors, result.dataset, link=link),
            figure_dir / 'fitted_curves.png',
        )

    for name, model in result.models.items():
        if hasattr(model, 'weights'):
            figures[f'network_{name}'] = save_figure(plot_network(model), figure_dir / f'network_{name}.png')
        if getattr(model, 'history', None) and model.history.get('step'):
            figures[f'history_{name}'] = save_figure(
                plot_training_history(model.history, title=name), figure_dir / f'history_{name}.png'
            )

    return figures
