"""
Tests for exploration, evaluation and residual statistics.

Run with: python -m pytest tests/test_analysis.py -v
"""

import math

import pytest
import numpy as np
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from synthreg.analysis.evaluation import (
    PredictionRecord,
    PredictionTable,
    compare_predictions,
    compare_models,
    compute_error_summary,
    print_comparison,
)
from synthreg.analysis.exploration import describe_dataset, head, summarize_column, print_description
from synthreg.analysis.statistics import (
    compute_confidence_interval,
    skewness,
    excess_kurtosis,
    summarize_residuals,
    noise_residuals,
)
from synthreg.datasets.synthetic import Dataset, make_dataset


class TestComparePredictions:
    """Tests for pairing actual and predicted values."""

    def test_rows_are_aligned(self):
        table = compare_predictions([1, 2, 3], [1.1, 1.9, 3.2], model_name='m')
        assert len(table) == 3
        assert [(r.actual, r.predicted) for r in table] == [(1.0, 1.1), (2.0, 1.9), (3.0, 3.2)]
        assert table[2].residual == pytest.approx(-0.2)
        assert table.x is None

    def test_inputs_carried_along(self):
        table = compare_predictions([1, 2], [1, 2], inputs=[0.5, 0.7])
        assert list(table.x) == [0.5, 0.7]

    def test_length_mismatch(self):
        with pytest.raises(ValueError):
            compare_predictions([1, 2, 3], [1, 2])

    def test_inputs_length_mismatch(self):
        with pytest.raises(ValueError):
            compare_predictions([1, 2], [1, 2], inputs=[1])

    def test_non_finite_prediction(self):
        with pytest.raises(ValueError):
            compare_predictions([1, 2], [1, np.nan])

    def test_empty(self):
        table = compare_predictions([], [])
        assert len(table) == 0
        assert math.isnan(table.summary().rmse)


class TestErrorSummary:
    """Tests for error statistics."""

    def test_reference_values(self):
        summary = compute_error_summary([1, 2, 3], [1.1, 1.9, 3.2])
        assert summary.n == 3
        assert summary.sse == pytest.approx(0.06)
        assert summary.mse == pytest.approx(0.02)
        assert summary.rmse == pytest.approx(math.sqrt(0.02))
        assert summary.mae == pytest.approx(0.4 / 3)
        assert summary.max_abs_error == pytest.approx(0.2)
        assert summary.r_squared == pytest.approx(0.97)

    def test_perfect_fit(self):
        summary = compute_error_summary([1, 2, 3], [1, 2, 3])
        assert summary.sse == 0.0
        assert summary.r_squared == 1.0

    def test_constant_actual_has_undefined_r_squared(self):
        summary = compute_error_summary([2, 2, 2], [1, 2, 3])
        assert math.isnan(summary.r_squared)


class TestPredictionTable:
    """Tests for table output."""

    def test_csv_round_trip(self, tmp_path):
        table = compare_predictions([1.5, 2.5], [1.25, 2.75], inputs=[0.1, 0.2], model_name='m')
        path = tmp_path / 'table.csv'
        table.to_csv(str(path))

        header = path.read_text().splitlines()[0]
        assert header == 'index,x,actual,predicted,residual'

        loaded = PredictionTable.from_csv(str(path), model_name='m')
        assert loaded.records == table.records

    def test_csv_without_inputs(self, tmp_path):
        table = compare_predictions([1.0], [2.0])
        path = tmp_path / 'table.csv'
        table.to_csv(str(path))
        assert PredictionTable.from_csv(str(path))[0].x is None

    def test_format_truncates(self):
        table = compare_predictions(np.arange(20.0), np.arange(20.0))
        text = table.format(max_rows=5)
        assert len(text.splitlines()) == 7
        assert '15 more rows' in text

    def test_record_to_dict(self):
        record = PredictionRecord(index=0, x=1.0, actual=3.0, predicted=2.5)
        assert record.to_dict() == {'index': 0, 'x': 1.0, 'actual': 3.0, 'predicted': 2.5,
                                    'residual': 0.5}


class TestCompareModels:
    """Tests for ranking several models."""

    def test_ranked_by_rmse(self):
        tables = {
            'worse': compare_predictions([1, 2, 3], [2, 3, 4]),
            'better': compare_predictions([1, 2, 3], [1.1, 1.9, 3.2]),
        }
        results = compare_models(tables)
        assert [r['model'] for r in results] == ['better', 'worse']
        assert [r['rank'] for r in results] == [1, 2]
        assert results[1]['rmse'] == pytest.approx(1.0)

    def test_list_uses_model_names(self):
        tables = [compare_predictions([1], [1], model_name='a'), compare_predictions([1], [2])]
        assert [r['model'] for r in compare_models(tables)] == ['a', 'model_1']

    def test_print_comparison(self, capsys):
        print_comparison(compare_models({'m': compare_predictions([1, 2], [1, 2.5])}))
        out = capsys.readouterr().out
        assert 'rmse' in out
        assert 'm' in out.splitlines()[1]


class TestExploration:
    """Tests for descriptive summaries."""

    def test_describe_linear_data(self):
        dataset = Dataset(x=[1.0, 2.0, 3.0, 4.0], y=[2.0, 4.0, 6.0, 8.0])
        description = describe_dataset(dataset)

        assert description.n == 4
        assert description.correlation == pytest.approx(1.0)
        assert description.x.mean == pytest.approx(2.5)
        assert description.x.std == pytest.approx(1.290994, rel=1e-5)
        assert description.x.q1 == pytest.approx(1.75)
        assert description.x.median == pytest.approx(2.5)
        assert description.x.q3 == pytest.approx(3.25)
        assert description.y.max == 8.0

    def test_constant_column_has_undefined_correlation(self):
        description = describe_dataset(Dataset(x=[1.0, 2.0], y=[3.0, 3.0]))
        assert math.isnan(description.correlation)

    def test_empty_column(self):
        assert summarize_column(np.array([])).count == 0

    def test_head(self):
        dataset = make_dataset(20, random_state=0)
        rows = head(dataset)
        assert len(rows) == 6
        assert rows[0] == {'x': dataset.x[0], 'y': dataset.y[0]}
        assert len(head(dataset, 50)) == 20

    def test_head_negative(self):
        with pytest.raises(ValueError):
            head(make_dataset(5, random_state=0), -1)

    def test_print_description(self, capsys):
        print_description(describe_dataset(make_dataset(10, random_state=0)))
        out = capsys.readouterr().out
        assert 'median' in out
        assert 'corr(x, y)' in out


class TestStatistics:
    """Tests for confidence intervals and residual summaries."""

    def test_small_sample_interval(self):
        ci = compute_confidence_interval([1, 2, 3, 4, 5])
        assert ci.mean == 3.0
        assert ci.ci_upper - ci.mean == pytest.approx(2.776 * math.sqrt(2.5) / math.sqrt(5))
        assert ci.contains(3.0)

    def test_large_sample_uses_normal(self):
        values = np.arange(100.0)
        ci = compute_confidence_interval(values)
        se = np.std(values, ddof=1) / 10
        assert ci.ci_upper - ci.mean == pytest.approx(1.96 * se)

    def test_large_sample_other_confidence(self):
        values = np.arange(100.0)
        ci = compute_confidence_interval(values, confidence=0.99)
        se = np.std(values, ddof=1) / 10
        assert ci.ci_upper - ci.mean == pytest.approx(2.576 * se)
        assert ci.confidence == 0.99

    def test_small_sample_only_95(self):
        """Fewer than 30 values cannot be labelled with another confidence."""
        with pytest.raises(ValueError, match="95%"):
            compute_confidence_interval([1, 2, 3, 4, 5], confidence=0.99)

    def test_unsupported_confidence(self):
        with pytest.raises(ValueError, match="Unsupported confidence"):
            compute_confidence_interval(np.arange(100.0), confidence=0.8)

    def test_degenerate_intervals(self):
        assert math.isnan(compute_confidence_interval([]).mean)
        single = compute_confidence_interval([4.0])
        assert single.ci_lower == single.ci_upper == 4.0

    def test_shape_statistics_of_symmetric_sample(self):
        values = [-2.0, -1.0, 0.0, 1.0, 2.0]
        assert skewness(values) == pytest.approx(0.0)
        assert excess_kurtosis(values) == pytest.approx(1.7 - 3.0)

    def test_shape_statistics_undefined(self):
        assert math.isnan(skewness([1.0, 2.0]))
        assert math.isnan(excess_kurtosis([1.0, 1.0, 1.0, 1.0]))

    def test_looks_normal(self):
        z = np.random.default_rng(0).standard_normal(2000)
        values = np.concatenate([z, -z])
        summary = summarize_residuals(values, expected_spread=0.5)
        assert summary.looks_normal()
        assert summary.spread_ratio == pytest.approx(summary.std / 0.5)

    def test_skewed_does_not_look_normal(self):
        summary = summarize_residuals([0.0] * 20 + [10.0])
        assert not summary.looks_normal()

    def test_noise_residuals_recover_noise(self):
        dataset = make_dataset(5000, noise_spread=0.15, random_state=0)
        summary = summarize_residuals(noise_residuals(dataset), expected_spread=0.15)
        assert summary.spread_ratio == pytest.approx(1.0, abs=0.05)
        assert abs(summary.mean) < 0.02
        assert summary.to_dict()['spread_ratio'] == summary.spread_ratio
