"""Analysis of generated data and fitted models.

Provides tools for:
- Dataset exploration (descriptive statistics)
- Prediction evaluation and model comparison
- Residual statistics (confidence intervals, shape)
"""

from .exploration import (
    ColumnSummary,
    DatasetDescription,
    describe_dataset,
    head,
    print_description,
)
from .evaluation import (
    PredictionRecord,
    PredictionTable,
    ErrorSummary,
    compute_error_summary,
    compare_predictions,
    compare_models,
    print_comparison,
)
from .statistics import (
    ConfidenceInterval,
    ResidualSummary,
    compute_confidence_interval,
    summarize_residuals,
    noise_residuals,
)

__all__ = [
    # Exploration
    'ColumnSummary',
    'DatasetDescription',
    'describe_dataset',
    'head',
    'print_description',
    # Evaluation
    'PredictionRecord',
    'PredictionTable',
    'ErrorSummary',
    'compute_error_summary',
    'compare_predictions',
    'compare_models',
    'print_comparison',
    # Statistics
    'ConfidenceInterval',
    'ResidualSummary',
    'compute_confidence_interval',
    'summarize_residuals',
    'noise_residuals',
]
