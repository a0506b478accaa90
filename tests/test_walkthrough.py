"""
Tests for the end-to-end walkthrough and its command line.

Run with: python -m pytest tests/test_walkthrough.py -v
"""

import json

import pytest
import numpy as np
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from synthreg import WalkthroughConfig, run_walkthrough
from synthreg.__main__ import main
from synthreg.core.harness import ModelConfiguration, ModelHarness
from synthreg.core.persistence import RunStore


class MeanHarness(ModelHarness):
    """Predicts the training mean; fast stand-in for the network back-end."""

    def __init__(self):
        self.fitted = []

    def fit(self, inputs, targets, config):
        self.fitted.append(config)
        return float(np.mean(targets))

    def predict(self, model, inputs):
        return np.full(len(inputs), model)


class FailingHarness(MeanHarness):
    def fit(self, inputs, targets, config):
        raise RuntimeError("back-end unavailable")


class TestWalkthroughConfig:
    """Tests for configuration defaults and overrides."""

    def test_reference_defaults(self):
        config = WalkthroughConfig()
        assert config.n_samples == 251
        assert (config.mean, config.spread, config.noise_spread) == (0.0, 2.0, 0.15)
        assert config.split_fraction == 0.8
        assert [m.label for m in config.models] == [
            'h3-logistic-sse', 'h5-tanh-sse', 'h7-logistic-sse'
        ]
        assert [m.seed for m in config.models] == [1, 2, 3]
        assert config.data_seed == 1

    def test_from_dict_merges_training_config(self):
        config = WalkthroughConfig.from_dict({'training_config': {'stepmax': 50}})
        training = config.get_training_config()
        assert training.stepmax == 50
        assert training.threshold == 0.01
        assert training.algorithm == 'rprop+'

    def test_from_dict_model_dicts(self):
        config = WalkthroughConfig.from_dict({
            'models': [{'hidden_units': 4, 'activation': 'tanh'}],
            'seeds': [9],
        })
        assert config.models[0] == ModelConfiguration(4, 'sse', 'tanh', seed=9)

    def test_unknown_key(self):
        with pytest.raises(ValueError, match="Unknown config keys"):
            WalkthroughConfig.from_dict({'epochs': 10})

    def test_unknown_link(self):
        with pytest.raises(ValueError):
            WalkthroughConfig(link='exponential')

    def test_duplicate_labels(self):
        with pytest.raises(ValueError, match="unique"):
            WalkthroughConfig(models=[ModelConfiguration(3), ModelConfiguration(3)])

    def test_requires_seeds_and_models(self):
        with pytest.raises(ValueError):
            WalkthroughConfig(seeds=[])
        with pytest.raises(ValueError):
            WalkthroughConfig(models=[])

    def test_explicit_model_seed_kept(self):
        config = WalkthroughConfig(models=[ModelConfiguration(3, seed=42)])
        assert config.models[0].seed == 42

    def test_shared_model_list_takes_each_configs_seeds(self):
        """Two configs built from one model list each use their own seeds."""
        models = [ModelConfiguration(hidden_units=3)]
        a = WalkthroughConfig(seeds=[1], models=models)
        b = WalkthroughConfig(seeds=[9], models=models)

        assert a.models[0].seed == 1
        assert b.models[0].seed == 9
        assert models[0].seed is None

    def test_to_dict_is_json_serializable(self):
        data = WalkthroughConfig().to_dict()
        assert json.loads(json.dumps(data))['models'][1]['activation'] == 'tanh'


class TestRunWalkthrough:
    """Tests for the pipeline with a stand-in harness."""

    def test_reference_shapes(self):
        harness = MeanHarness()
        result = run_walkthrough(harness=harness, verbose=False)

        assert len(result.dataset) == 251
        assert result.split.sizes == (200, 51)
        assert len(harness.fitted) == 3
        assert set(result.tables) == {'h3-logistic-sse', 'h5-tanh-sse', 'h7-logistic-sse'}
        for table in result.tables.values():
            assert len(table) == 51
            assert np.array_equal(table.actual, result.split.evaluation.y)
            assert np.array_equal(table.x, result.split.evaluation.x)
        assert [row['rank'] for row in result.comparison] == [1, 2, 3]
        assert result.best_model == result.comparison[0]['model']
        assert result.fit_summaries['h3-logistic-sse'] is None
        assert result.run_id is None

    def test_data_is_deterministic(self):
        a = run_walkthrough(harness=MeanHarness(), verbose=False)
        b = run_walkthrough(harness=MeanHarness(), verbose=False)
        assert a.dataset == b.dataset

    def test_verbose_output(self, capsys):
        run_walkthrough(harness=MeanHarness(), verbose=True)
        out = capsys.readouterr().out
        assert 'Split: 200 training / 51 evaluation samples' in out
        assert 'Best model:' in out

    def test_noise_check(self):
        result = run_walkthrough(harness=MeanHarness(), verbose=False)
        assert result.noise_check.n == 251
        assert result.noise_check.spread_ratio == pytest.approx(1.0, abs=0.2)

    def test_stores_run_and_figures(self, tmp_path):
        result = run_walkthrough(harness=MeanHarness(), output_dir=str(tmp_path), verbose=False)

        store = RunStore(str(tmp_path))
        assert store.load_metadata(result.run_id).status == 'completed'
        summary = store.load_summary(result.run_id)
        assert summary.split_sizes == [200, 51]
        assert [m.model_name for m in summary.models] == [m.label for m in result.config.models]
        assert len(store.load_predictions(result.run_id, 'h5-tanh-sse')) == 51

        assert result.figures['dataset'].exists()
        assert result.figures['predicted_vs_actual'].exists()
        # Stand-in models have no predict method or weights
        assert 'fitted_curves' not in result.figures

    def test_no_plots(self, tmp_path):
        result = run_walkthrough(harness=MeanHarness(), output_dir=str(tmp_path),
                                 plots=False, verbose=False)
        assert result.figures == {}

    def test_failure_marks_run_failed(self, tmp_path):
        with pytest.raises(RuntimeError, match="back-end unavailable"):
            run_walkthrough(harness=FailingHarness(), output_dir=str(tmp_path), verbose=False)

        runs = RunStore(str(tmp_path)).list_runs()
        assert runs[0]['status'] == 'failed'


@pytest.mark.filterwarnings("ignore::RuntimeWarning")
class TestNetworkWalkthrough:
    """Short real fits through the default harness."""

    def _config(self, **kwargs):
        return WalkthroughConfig(training_config={'stepmax': 200, 'record_every': 50}, **kwargs)

    def test_default_harness(self, tmp_path):
        result = run_walkthrough(self._config(), output_dir=str(tmp_path), verbose=False)

        assert len(result.comparison) == 3
        for name, summary in result.fit_summaries.items():
            assert summary['steps'] <= 200
            assert summary['n_samples'] == 200
        assert 'fitted_curves' in result.figures
        assert 'network_h5-tanh-sse' in result.figures
        assert 'history_h7-logistic-sse' in result.figures

        stored = RunStore(str(tmp_path)).load_summary(result.run_id)
        assert stored.models[0].network['weights']

    def test_same_config_same_predictions(self):
        a = run_walkthrough(self._config(), verbose=False)
        b = run_walkthrough(self._config(), verbose=False)
        for name in a.tables:
            assert np.array_equal(a.tables[name].predicted, b.tables[name].predicted)


class TestCommandLine:
    """Tests for python -m synthreg."""

    @pytest.mark.filterwarnings("ignore::RuntimeWarning")
    def test_quiet_run(self, tmp_path, capsys):
        config_file = tmp_path / 'run.json'
        config_file.write_text(json.dumps({
            'n_samples': 60,
            'models': [{'hidden_units': 2}],
            'training_config': {'stepmax': 20},
        }))

        code = main(['--quiet', '--no-plots', '--config', str(config_file),
                     '--output-dir', str(tmp_path / 'out')])

        assert code == 0
        out = capsys.readouterr().out.strip().splitlines()
        assert len(out) == 1
        assert out[0].startswith('1. h2-logistic-sse')
        assert RunStore(str(tmp_path / 'out')).list_runs()[0]['status'] == 'completed'
