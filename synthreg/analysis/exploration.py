"""
Descriptive exploration of a generated dataset.

Summarises each column the way a quick look at a fresh table would:
count, mean, standard deviation, extremes and quartiles, plus the
correlation between input and response.
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, List
import numpy as np

from ..datasets.synthetic import Dataset


@dataclass
class ColumnSummary:
    """Five-number summary plus mean and standard deviation."""
    count: int
    mean: float
    std: float
    min: float
    q1: float
    median: float
    q3: float
    max: float


@dataclass
class DatasetDescription:
    """Per-column summaries and the x-y correlation."""
    n: int
    x: ColumnSummary
    y: ColumnSummary
    correlation: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def summarize_column(values: np.ndarray) -> ColumnSummary:
    arr = np.asarray(values, dtype=float).reshape(-1)
    if arr.shape[0] == 0:
        nan = float('nan')
        return ColumnSummary(count=0, mean=nan, std=nan, min=nan, q1=nan, median=nan, q3=nan, max=nan)

    q1, median, q3 = np.percentile(arr, [25, 50, 75])
    return ColumnSummary(
        count=int(arr.shape[0]),
        mean=float(np.mean(arr)),
        std=float(np.std(arr, ddof=1)) if arr.shape[0] > 1 else 0.0,
        min=float(np.min(arr)),
        q1=float(q1),
        median=float(median),
        q3=float(q3),
        max=float(np.max(arr)),
    )


def describe_dataset(dataset: Dataset) -> DatasetDescription:
    """Describe both columns of ``dataset``."""
    if len(dataset) > 1 and np.std(dataset.x) > 0 and np.std(dataset.y) > 0:
        correlation = float(np.corrcoef(dataset.x, dataset.y)[0, 1])
    else:
        correlation = float('nan')

    return DatasetDescription(
        n=len(dataset),
        x=summarize_column(dataset.x),
        y=summarize_column(dataset.y),
        correlation=correlation,
    )


def head(dataset: Dataset, n: int = 6) -> List[Dict[str, float]]:
    """First ``n`` rows as dicts."""
    if n < 0:
        raise ValueError(f"n must be non-negative, got {n}")
    return dataset[:n].to_rows()


def print_description(description: DatasetDescription) -> None:
    """Print a formatted summary table."""
    print(f"{'':8s} {'x':>10s} {'y':>10s}")
    for field_name in ('count', 'mean', 'std', 'min', 'q1', 'median', 'q3', 'max'):
        xv = getattr(description.x, field_name)
        yv = getattr(description.y, field_name)
        if field_name == 'count':
            print(f"{field_name:8s} {xv:10d} {yv:10d}")
        else:
            print(f"{field_name:8s} {xv:10.4f} {yv:10.4f}")
    print(f"\ncorr(x, y) = {description.correlation:.4f}")
