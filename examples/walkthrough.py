#!/usr/bin/env python3
"""
Walkthrough - the regression story told one step at a time.

Run this script to generate noisy cos(x) + x data, look at it, fit three
small networks on the first 80% and compare them on the remaining 20%.
Figures are written to ./results/walkthrough.
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from synthreg.datasets import make_dataset, train_test_split
from synthreg.analysis import (
    describe_dataset,
    print_description,
    compare_predictions,
    compare_models,
    print_comparison,
)
from synthreg.core import ModelConfiguration, NetworkHarness, TrainingConfig
from synthreg.visualization import (
    plot_dataset,
    plot_fitted_curves,
    plot_predicted_vs_actual,
    save_figure,
)

OUTPUT_DIR = os.path.join('results', 'walkthrough')

print("Synthetic Regression - Walkthrough")
print("=" * 40)

# Sample 251 inputs from Normal(0, 2) and responses around cos(x) + x
dataset = make_dataset(n_samples=251, mean=0, spread=2, noise_spread=0.15, random_state=1)
print(f"\nGenerated {len(dataset)} samples")

# Explore
print()
print_description(describe_dataset(dataset))
save_figure(plot_dataset(dataset), os.path.join(OUTPUT_DIR, 'dataset.png'))

# Keep the first 80% for training
split = train_test_split(dataset, 0.8)
print(f"\nTraining: {len(split.training)}  Evaluation: {len(split.evaluation)}")

# Three small networks
configs = [
    ModelConfiguration(hidden_units=3, error_function='sse', activation='logistic', seed=1),
    ModelConfiguration(hidden_units=5, error_function='sse', activation='tanh', seed=2),
    ModelConfiguration(hidden_units=7, error_function='sse', activation='logistic', seed=3),
]
harness = NetworkHarness(TrainingConfig(threshold=0.01, stepmax=100000))

tables = {}
models = {}
for config in configs:
    print(f"\nFitting {config.label}...")
    model = harness.fit(split.training.x, split.training.y, config)
    predicted = harness.predict(model, split.evaluation.x)
    models[config.label] = model
    tables[config.label] = compare_predictions(
        split.evaluation.y, predicted, inputs=split.evaluation.x, model_name=config.label
    )
    print(tables[config.label].format(max_rows=5))

# Compare on held-out data
print()
print_comparison(compare_models(tables))

save_figure(
    plot_fitted_curves({name: m.predict for name, m in models.items()}, dataset),
    os.path.join(OUTPUT_DIR, 'fitted_curves.png'),
)
save_figure(
    plot_predicted_vs_actual(list(tables.values())),
    os.path.join(OUTPUT_DIR, 'predicted_vs_actual.png'),
)
print(f"\nFigures saved to {OUTPUT_DIR}")
