"""
Evaluation of predictions against held-out actual values.

Pairs each actual response with its prediction, and summarises the
errors so that several fitted models can be compared side by side.
"""

import csv
import math
from dataclasses import dataclass, asdict
from typing import Any, Dict, Iterator, List, Optional, Sequence, Union
import numpy as np


@dataclass(frozen=True)
class PredictionRecord:
    """One evaluation row: input, actual response and prediction."""
    index: int
    x: Optional[float]
    actual: float
    predicted: float

    @property
    def residual(self) -> float:
        return self.actual - self.predicted

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['residual'] = self.residual
        return data


@dataclass
class ErrorSummary:
    """Aggregate error statistics for one set of predictions."""
    n: int
    sse: float
    mse: float
    rmse: float
    mae: float
    max_abs_error: float
    r_squared: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _as_vector(name: str, values: Any) -> np.ndarray:
    arr = np.asarray(values, dtype=float).reshape(-1)
    if not np.all(np.isfinite(arr)):
        raise ValueError(f"{name} contain NaN or infinite values")
    return arr


def compute_error_summary(actual: Any, predicted: Any) -> ErrorSummary:
    """
    Compute SSE, MSE, RMSE, MAE, max absolute error and R^2.

    R^2 is NaN when the actual values have zero variance; every statistic is
    NaN for empty input.
    """
    actual = _as_vector('actual values', actual)
    predicted = _as_vector('predicted values', predicted)
    if actual.shape != predicted.shape:
        raise ValueError(
            f"actual has {actual.shape[0]} values but predicted has {predicted.shape[0]}"
        )

    n = actual.shape[0]
    if n == 0:
        nan = float('nan')
        return ErrorSummary(n=0, sse=nan, mse=nan, rmse=nan, mae=nan, max_abs_error=nan,
                            r_squared=nan)

    residuals = actual - predicted
    sse = float(np.sum(residuals ** 2))
    mse = sse / n
    total = float(np.sum((actual - actual.mean()) ** 2))
    r_squared = 1.0 - sse / total if total > 0 else float('nan')

    return ErrorSummary(
        n=n,
        sse=sse,
        mse=mse,
        rmse=math.sqrt(mse),
        mae=float(np.mean(np.abs(residuals))),
        max_abs_error=float(np.max(np.abs(residuals))),
        r_squared=r_squared,
    )


class PredictionTable:
    """Aligned (x, actual, predicted) rows for one model."""

    COLUMNS = ['index', 'x', 'actual', 'predicted', 'residual']

    def __init__(self, records: Sequence[PredictionRecord], model_name: Optional[str] = None):
        self.records: List[PredictionRecord] = list(records)
        self.model_name = model_name

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[PredictionRecord]:
        return iter(self.records)

    def __getitem__(self, index: int) -> PredictionRecord:
        return self.records[index]

    @property
    def actual(self) -> np.ndarray:
        return np.array([r.actual for r in self.records], dtype=float)

    @property
    def predicted(self) -> np.ndarray:
        return np.array([r.predicted for r in self.records], dtype=float)

    @property
    def residuals(self) -> np.ndarray:
        return self.actual - self.predicted

    @property
    def x(self) -> Optional[np.ndarray]:
        if any(r.x is None for r in self.records):
            return None
        return np.array([r.x for r in self.records], dtype=float)

    def summary(self) -> ErrorSummary:
        return compute_error_summary(self.actual, self.predicted)

    def to_rows(self) -> List[Dict[str, Any]]:
        return [r.to_dict() for r in self.records]

    def to_csv(self, filepath: str) -> None:
        """Write the table to CSV."""
        with open(filepath, 'w', newline='') as f:
            writer = csv.DictWriter(f, fieldnames=self.COLUMNS)
            writer.writeheader()
            for row in self.to_rows():
                writer.writerow(row)

    @classmethod
    def from_csv(cls, filepath: str, model_name: Optional[str] = None) -> 'PredictionTable':
        """Load a table written by ``to_csv``."""
        records = []
        with open(filepath, 'r', newline='') as f:
            for row in csv.DictReader(f):
                records.append(PredictionRecord(
                    index=int(row['index']),
                    x=float(row['x']) if row['x'] not in ('', 'None') else None,
                    actual=float(row['actual']),
                    predicted=float(row['predicted']),
                ))
        return cls(records, model_name=model_name)

    def format(self, max_rows: Optional[int] = 10) -> str:
        """Render the first ``max_rows`` rows as a fixed-width text table."""
        lines = [f"{'#':>4s} {'x':>10s} {'actual':>10s} {'predicted':>10s} {'residual':>10s}"]
        shown = self.records if max_rows is None else self.records[:max_rows]
        for r in shown:
            x = f"{r.x:10.4f}" if r.x is not None else f"{'-':>10s}"
            lines.append(f"{r.index:4d} {x} {r.actual:10.4f} {r.predicted:10.4f} {r.residual:10.4f}")
        if max_rows is not None and len(self.records) > max_rows:
            lines.append(f"... {len(self.records) - max_rows} more rows")
        return '\n'.join(lines)

    def __repr__(self):
        name = f", model={self.model_name}" if self.model_name else ''
        return f"PredictionTable(n={len(self)}{name})"


def compare_predictions(
    actual: Any,
    predicted: Any,
    inputs: Optional[Any] = None,
    model_name: Optional[str] = None
) -> PredictionTable:
    """
    Pair actual and predicted values index by index.

    Args:
        actual: Held-out responses
        predicted: Model predictions, same length as ``actual``
        inputs: Optional inputs, same length, carried along for plotting
        model_name: Label for the table

    Raises:
        ValueError: when the sequences differ in length or are non-finite
    """
    actual = _as_vector('actual values', actual)
    predicted = _as_vector('predicted values', predicted)
    if actual.shape != predicted.shape:
        raise ValueError(
            f"actual has {actual.shape[0]} values but predicted has {predicted.shape[0]}"
        )

    if inputs is not None:
        xs = _as_vector('inputs', inputs)
        if xs.shape != actual.shape:
            raise ValueError(f"inputs have {xs.shape[0]} values but actual has {actual.shape[0]}")
        xs = [float(v) for v in xs]
    else:
        xs = [None] * actual.shape[0]

    records = [
        PredictionRecord(index=i, x=xs[i], actual=float(a), predicted=float(p))
        for i, (a, p) in enumerate(zip(actual, predicted))
    ]
    return PredictionTable(records, model_name=model_name)


def compare_models(
    tables: Union[Dict[str, PredictionTable], List[PredictionTable]]
) -> List[Dict[str, Any]]:
    """
    Rank models by evaluation RMSE (best first).

    Returns one dict per model with its name, rank and error statistics.
    """
    if isinstance(tables, dict):
        items = list(tables.items())
    else:
        items = [(t.model_name or f"model_{i}", t) for i, t in enumerate(tables)]

    results = []
    for name, table in items:
        results.append({'model': name, **table.summary().to_dict()})

    results.sort(key=lambda r: (math.isnan(r['rmse']), r['rmse']))
    for rank, row in enumerate(results, 1):
        row['rank'] = rank
    return results


def print_comparison(results: List[Dict[str, Any]]) -> None:
    """Print a formatted model comparison."""
    print(f"{'rank':>4s}  {'model':24s} {'n':>4s} {'rmse':>9s} {'mae':>9s} {'max_err':>9s} {'r2':>7s}")
    for row in results:
        print(f"{row['rank']:4d}  {row['model']:24s} {row['n']:4d} {row['rmse']:9.4f} "
              f"{row['mae']:9.4f} {row['max_abs_error']:9.4f} {row['r_squared']:7.4f}")
