"""
Tests for the fit/predict model harness.

Run with: python -m pytest tests/test_harness.py -v
"""

import pytest
import numpy as np
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from synthreg.core.harness import (
    ModelConfiguration,
    ModelHarness,
    NetworkHarness,
    validate_training_data,
    validate_inputs,
)
from synthreg.core.network import RegressionNetwork
from synthreg.core.training import TrainingConfig


class ConstantHarness(ModelHarness):
    """Predicts the training mean everywhere."""

    def fit(self, inputs, targets, config):
        X, y = validate_training_data(inputs, targets)
        return float(np.mean(y))

    def predict(self, model, inputs):
        X = validate_inputs(inputs)
        return np.full(X.shape[0], model)


class TestModelConfiguration:
    """Tests for model configuration labels and serialization."""

    def test_label(self):
        assert ModelConfiguration(5, 'sse', 'tanh').label == 'h5-tanh-sse'

    def test_label_for_layer_list(self):
        assert ModelConfiguration([4, 2], 'sse', 'logistic').label == 'h4_2-logistic-sse'

    def test_explicit_name_wins(self):
        assert ModelConfiguration(3, name='small').label == 'small'

    def test_dict_round_trip(self):
        config = ModelConfiguration(7, 'sse', 'logistic', seed=3)
        assert ModelConfiguration.from_dict(config.to_dict()) == config


class TestValidation:
    """Tests for input checks shared by all harnesses."""

    def test_one_dimensional_inputs_become_a_column(self):
        X, y = validate_training_data([1.0, 2.0, 3.0], [2.0, 4.0, 6.0])
        assert X.shape == (3, 1)
        assert y.shape == (3,)

    def test_misaligned_rows(self):
        with pytest.raises(ValueError, match="rows"):
            validate_training_data(np.zeros(4), np.zeros(3))

    def test_empty(self):
        with pytest.raises(ValueError, match="empty"):
            validate_training_data(np.zeros(0), np.zeros(0))

    @pytest.mark.parametrize("bad", [np.nan, np.inf, -np.inf])
    def test_non_finite_inputs(self, bad):
        with pytest.raises(ValueError):
            validate_training_data([0.0, bad], [1.0, 2.0])

    def test_non_finite_targets(self):
        with pytest.raises(ValueError, match="Targets"):
            validate_training_data([0.0, 1.0], [1.0, np.nan])

    def test_three_dimensional_inputs(self):
        with pytest.raises(ValueError):
            validate_inputs(np.zeros((2, 2, 2)))


@pytest.mark.filterwarnings("ignore::RuntimeWarning")
class TestNetworkHarness:
    """Tests for the network-backed harness."""

    def _data(self, n=60):
        rng = np.random.default_rng(0)
        x = rng.normal(0, 2, n)
        return x, np.cos(x) + x + rng.normal(0, 0.15, n)

    def test_fit_returns_trained_network(self):
        x, y = self._data()
        harness = NetworkHarness(TrainingConfig(stepmax=200))
        model = harness.fit(x, y, ModelConfiguration(5, 'sse', 'tanh', seed=2))

        assert isinstance(model, RegressionNetwork)
        assert model.trained
        assert model.name == 'h5-tanh-sse'
        assert model.config.hidden_layers == [5]
        assert model.config.activation == 'tanh'
        assert model.seed == 2

    def test_predict_is_flat_and_aligned(self):
        x, y = self._data()
        harness = NetworkHarness(TrainingConfig(stepmax=100))
        model = harness.fit(x, y, ModelConfiguration(3, seed=1))
        predicted = harness.predict(model, x[:11])
        assert predicted.shape == (11,)
        assert predicted.dtype == float

    def test_fit_summary(self):
        x, y = self._data()
        harness = NetworkHarness(TrainingConfig(stepmax=50))
        model = harness.fit(x, y, ModelConfiguration(3, seed=1))
        summary = harness.fit_summary(model)
        assert summary['steps'] <= 50
        assert summary['n_samples'] == len(x)
        assert summary['n_params'] == 10

    def test_same_seed_same_predictions(self):
        x, y = self._data()
        harness = NetworkHarness(TrainingConfig(stepmax=100))
        config = ModelConfiguration(7, 'sse', 'logistic', seed=3)
        a = harness.predict(harness.fit(x, y, config), x)
        b = harness.predict(harness.fit(x, y, config), x)
        assert np.array_equal(a, b)

    def test_fit_rejects_bad_data(self):
        harness = NetworkHarness()
        with pytest.raises(ValueError):
            harness.fit([0.0, np.nan], [1.0, 2.0], ModelConfiguration())

    def test_predict_rejects_bad_inputs(self):
        x, y = self._data()
        harness = NetworkHarness(TrainingConfig(stepmax=10))
        model = harness.fit(x, y, ModelConfiguration(3, seed=1))
        with pytest.raises(ValueError):
            harness.predict(model, [np.inf])

    def test_unknown_activation_surfaces_as_value_error(self):
        x, y = self._data()
        with pytest.raises(ValueError, match="Unknown activation"):
            NetworkHarness().fit(x, y, ModelConfiguration(3, activation='softplus'))


class TestSubstitutability:
    """Any ModelHarness can stand in for the network back-end."""

    def test_abstract_harness_cannot_be_instantiated(self):
        with pytest.raises(TypeError):
            ModelHarness()

    def test_constant_harness(self):
        harness = ConstantHarness()
        model = harness.fit([0.0, 1.0, 2.0], [1.0, 2.0, 3.0], ModelConfiguration())
        assert np.allclose(harness.predict(model, [5.0, 6.0]), [2.0, 2.0])
        assert harness.fit_summary(model) is None
