"""
Training utilities for regression networks.

Fitting runs full-batch until every partial derivative of the error is
smaller than a threshold, or a step limit is hit. Supported algorithms:

- rprop+: resilient backpropagation with weight backtracking
- rprop-: resilient backpropagation without backtracking
- backprop: gradient descent with a fixed learning rate (and optional momentum)
"""

import math
import time
import warnings
import numpy as np
from typing import Dict, List, Optional, Tuple, Any
from dataclasses import dataclass, asdict
from .network import RegressionNetwork, as_input_matrix
from .error_functions import is_binary_response


ALGORITHMS = ('rprop+', 'rprop-', 'backprop')


@dataclass
class TrainingConfig:
    """Configuration for training."""
    algorithm: str = 'rprop+'
    threshold: float = 0.01  # Stop when max |dE/dw| falls below this
    stepmax: int = 100000
    rep: int = 1  # Repetitions with fresh initial weights
    learning_rate: Optional[float] = None  # Required for backprop; initial step for rprop
    learning_rate_factor: Tuple[float, float] = (0.5, 1.2)  # (minus, plus) for rprop
    learning_rate_limit: Tuple[float, float] = (1e-10, 50.0)  # (min, max) step for rprop
    momentum: float = 0.0  # backprop only
    record_every: int = 100
    likelihood: bool = False  # Add AIC/BIC to the fit summary

    def __post_init__(self):
        if self.algorithm not in ALGORITHMS:
            raise ValueError(
                f"Unknown algorithm '{self.algorithm}'. Available: {', '.join(ALGORITHMS)}"
            )
        if not self.threshold > 0:
            raise ValueError(f"threshold must be positive, got {self.threshold}")
        if self.stepmax < 1:
            raise ValueError(f"stepmax must be at least 1, got {self.stepmax}")
        if self.rep < 1:
            raise ValueError(f"rep must be at least 1, got {self.rep}")
        if self.algorithm == 'backprop' and (self.learning_rate is None or self.learning_rate <= 0):
            raise ValueError("backprop requires a positive learning_rate")
        if self.learning_rate is not None and self.learning_rate <= 0:
            raise ValueError(f"learning_rate must be positive, got {self.learning_rate}")
        if not 0.0 <= self.momentum < 1.0:
            raise ValueError(f"momentum must be in [0, 1), got {self.momentum}")
        minus, plus = self.learning_rate_factor
        if not (0 < minus < 1 < plus):
            raise ValueError(
                f"learning_rate_factor must satisfy 0 < minus < 1 < plus, got {self.learning_rate_factor}"
            )
        lo, hi = self.learning_rate_limit
        if not (0 < lo < hi):
            raise ValueError(f"learning_rate_limit must satisfy 0 < min < max, got {self.learning_rate_limit}")
        if self.record_every < 1:
            raise ValueError(f"record_every must be at least 1, got {self.record_every}")

    @property
    def initial_step(self) -> float:
        return self.learning_rate if self.learning_rate is not None else 0.1


@dataclass
class FitSummary:
    """Outcome of one training repetition."""
    repetition: int
    error: float
    reached_threshold: float  # Largest |partial derivative| at the end
    steps: int
    converged: bool
    n_samples: int
    n_params: int
    training_time_seconds: float
    aic: Optional[float] = None
    bic: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _max_abs(grads: List[np.ndarray]) -> float:
    return float(max(np.max(np.abs(g)) for g in grads))


class Trainer:
    """
    Trainer for regression networks.

    Supports:
    - Resilient backpropagation (with and without weight backtracking)
    - Plain gradient descent with momentum
    - Gradient-threshold stopping with a step limit
    - Repetitions, keeping the lowest-error fit
    """

    def __init__(self, network: RegressionNetwork, config: Optional[TrainingConfig] = None):
        self.network = network
        self.config = config or TrainingConfig()
        self.history: Dict[str, List] = {}
        self.repetitions: List[FitSummary] = []

    def train(
        self,
        X: np.ndarray,
        y: np.ndarray,
        verbose: bool = False
    ) -> FitSummary:
        """
        Train the network, repeating ``rep`` times from fresh weights.

        The network is left holding the parameters of the repetition with
        the lowest error, and that repetition's summary is returned.
        """
        X = as_input_matrix(X)
        y = np.asarray(y, dtype=float).reshape(-1, self.network.config.output_dim)
        if X.shape[0] != y.shape[0]:
            raise ValueError(f"Inputs have {X.shape[0]} rows but targets have {y.shape[0]}")
        if X.shape[0] == 0:
            raise ValueError("Cannot train on an empty dataset")
        self._check_error_function(y)

        self.repetitions = []
        best: Optional[Tuple[FitSummary, Any, Dict]] = None

        for rep in range(self.config.rep):
            if rep > 0 or self.network.trained:
                seed = None if self.network.seed is None else self.network.seed + rep
                self.network.reset(seed=seed)

            summary, history = self._train_once(X, y, rep, verbose)
            self.repetitions.append(summary)

            if best is None or summary.error < best[0].error:
                best = (summary, self.network.get_parameters(), history)

        summary, (weights, biases), history = best
        self.network.set_parameters(weights, biases)
        self.network.history = history
        self.network.fit_summary = summary
        self.network.trained = True
        self.history = history

        if verbose and self.config.rep > 1:
            print(f"Best repetition: {summary.repetition + 1} (error={summary.error:.6f})")

        return summary

    def _check_error_function(self, y: np.ndarray):
        if self.network.config.error_function != 'ce':
            return
        if not is_binary_response(y):
            raise ValueError("Error function 'ce' requires a binary (0/1) response")
        if self.network.config.linear_output:
            raise ValueError("Error function 'ce' requires linear_output=False")

    def _train_once(
        self,
        X: np.ndarray,
        y: np.ndarray,
        rep: int,
        verbose: bool
    ) -> Tuple[FitSummary, Dict[str, List]]:
        network = self.network
        cfg = self.config
        start = time.time()

        history: Dict[str, List] = {'step': [], 'error': [], 'reached_threshold': []}

        params = network.weights + network.biases
        self._init_state(params)

        weight_grads, bias_grads = network.backward(X, y)
        grads = weight_grads + bias_grads
        reached = _max_abs(grads)
        steps = 0
        self._record(history, steps, network.error(X, y), reached)

        while reached >= cfg.threshold and steps < cfg.stepmax:
            if cfg.algorithm == 'backprop':
                self._update_backprop(params, grads)
            else:
                self._update_rprop(params, grads, backtracking=(cfg.algorithm == 'rprop+'))
            steps += 1

            weight_grads, bias_grads = network.backward(X, y)
            grads = weight_grads + bias_grads
            reached = _max_abs(grads)

            if not np.isfinite(reached):
                raise FloatingPointError(
                    f"Training diverged at step {steps} (non-finite gradient); "
                    f"try a smaller learning rate"
                )

            if steps % cfg.record_every == 0:
                error = network.error(X, y)
                self._record(history, steps, error, reached)
                if verbose and steps % (cfg.record_every * 10) == 0:
                    print(f"Step {steps}: error={error:.6f}, max_grad={reached:.6f}")

        error = network.error(X, y)
        if history['step'][-1] != steps:
            self._record(history, steps, error, reached)

        converged = reached < cfg.threshold
        if not converged:
            warnings.warn(
                f"{network.name}: repetition {rep + 1} did not converge within "
                f"stepmax={cfg.stepmax} steps (max gradient {reached:.4g})",
                RuntimeWarning,
            )

        n_samples = X.shape[0]
        n_params = network.config.total_params
        aic = bic = None
        if cfg.likelihood:
            aic = 2 * error + 2 * n_params
            bic = 2 * error + math.log(n_samples) * n_params

        summary = FitSummary(
            repetition=rep,
            error=float(error),
            reached_threshold=reached,
            steps=steps,
            converged=converged,
            n_samples=n_samples,
            n_params=n_params,
            training_time_seconds=time.time() - start,
            aic=aic,
            bic=bic,
        )

        if verbose:
            status = 'converged' if converged else 'stopped'
            print(f"Repetition {rep + 1}: {status} after {steps} steps, "
                  f"error={error:.6f}, max_grad={reached:.6f}")

        return summary, history

    @staticmethod
    def _record(history: Dict[str, List], step: int, error: float, reached: float):
        history['step'].append(step)
        history['error'].append(float(error))
        history['reached_threshold'].append(float(reached))

    def _init_state(self, params: List[np.ndarray]):
        """Per-parameter optimiser state."""
        self._prev_grads = [np.zeros_like(p) for p in params]
        self._prev_updates = [np.zeros_like(p) for p in params]
        self._step_sizes = [np.full_like(p, self.config.initial_step) for p in params]

    def _update_rprop(self, params: List[np.ndarray], grads: List[np.ndarray], backtracking: bool):
        """Resilient backpropagation update, in place."""
        minus, plus = self.config.learning_rate_factor
        lo, hi = self.config.learning_rate_limit

        for i, (p, g) in enumerate(zip(params, grads)):
            sign_change = self._prev_grads[i] * g
            increase = sign_change > 0
            decrease = sign_change < 0

            step = self._step_sizes[i]
            step[increase] = np.minimum(step[increase] * plus, hi)
            step[decrease] = np.maximum(step[decrease] * minus, lo)

            update = -np.sign(g) * step
            g = g.copy()
            if backtracking:
                # Undo the previous step where the gradient flipped sign
                update[decrease] = -self._prev_updates[i][decrease]
                g[decrease] = 0.0

            p += update
            self._prev_updates[i] = update
            self._prev_grads[i] = g

    def _update_backprop(self, params: List[np.ndarray], grads: List[np.ndarray]):
        """Gradient descent (with momentum) update, in place."""
        lr = self.config.learning_rate
        mu = self.config.momentum

        for i, (p, g) in enumerate(zip(params, grads)):
            update = -lr * g + mu * self._prev_updates[i]
            p += update
            self._prev_updates[i] = update


def train_network(
    network: RegressionNetwork,
    X: np.ndarray,
    y: np.ndarray,
    **kwargs
) -> FitSummary:
    """Convenience function to train a network."""
    config = TrainingConfig(**kwargs)
    trainer = Trainer(network, config)
    return trainer.train(X, y)
