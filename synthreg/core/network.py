"""
Regression networks - small fully-connected networks fitted to (x, y) pairs.

A network is characterized by:
- Hidden units (one layer by default, several if a list is given)
- Activation function of the hidden units
- Error function minimised during fitting
- Whether the output unit is linear (regression) or squashed

Gradients are sums over samples, matching an error that is itself a sum
(e.g. half the sum of squared errors).
"""

import numpy as np
from typing import List, Dict, Optional, Tuple, Any, Union
from dataclasses import dataclass
from .activations import get_activation
from .error_functions import get_error_function


def _as_hidden_layers(hidden: Union[int, List[int]]) -> List[int]:
    """Normalise hidden units (int or list) into a list of widths."""
    if isinstance(hidden, (int, np.integer)) and not isinstance(hidden, bool):
        layers = [int(hidden)]
    else:
        layers = [int(h) for h in hidden]
    if any(h < 1 for h in layers):
        raise ValueError(f"Hidden layer widths must be positive, got {layers}")
    return layers


def as_input_matrix(X: Any) -> np.ndarray:
    """Coerce inputs to a float matrix of shape (n_samples, n_features)."""
    X = np.asarray(X, dtype=float)
    if X.ndim == 0:
        X = X.reshape(1, 1)
    elif X.ndim == 1:
        X = X.reshape(-1, 1)
    elif X.ndim != 2:
        raise ValueError(f"Inputs must be 1-D or 2-D, got shape {X.shape}")
    return X


@dataclass
class NetworkConfig:
    """Configuration for a regression network."""
    hidden_layers: List[int]  # Width of each hidden layer
    activation: str = 'logistic'
    error_function: str = 'sse'
    input_dim: int = 1
    output_dim: int = 1
    linear_output: bool = True  # Identity on the output unit

    @property
    def depth(self) -> int:
        """Number of hidden layers."""
        return len(self.hidden_layers)

    @property
    def total_params(self) -> int:
        """Total number of trainable parameters (weights and intercepts)."""
        params = 0
        prev_dim = self.input_dim
        for width in self.hidden_layers:
            params += prev_dim * width + width
            prev_dim = width
        params += prev_dim * self.output_dim + self.output_dim
        return params

    def to_dict(self) -> Dict:
        return {
            'hidden_layers': list(self.hidden_layers),
            'activation': self.activation,
            'error_function': self.error_function,
            'input_dim': self.input_dim,
            'output_dim': self.output_dim,
            'linear_output': self.linear_output,
        }


class RegressionNetwork:
    """
    A small feed-forward network for regression.

    Each network has:
    - A specific architecture (hidden widths, activation, output unit)
    - Learnable parameters (weights and intercepts)
    - Methods for forward/backward passes
    - The history and summary of its last fit
    """

    def __init__(
        self,
        hidden_layers: Union[int, List[int]] = 3,
        activation: str = 'logistic',
        error_function: str = 'sse',
        input_dim: int = 1,
        output_dim: int = 1,
        linear_output: bool = True,
        name: Optional[str] = None,
        seed: Optional[int] = None
    ):
        self.activation_fn = get_activation(activation)
        self.error_fn = get_error_function(error_function)
        if input_dim < 1 or output_dim < 1:
            raise ValueError(
                f"input_dim and output_dim must be positive, got {input_dim} and {output_dim}"
            )

        self.config = NetworkConfig(
            hidden_layers=_as_hidden_layers(hidden_layers),
            activation=self.activation_fn.name,
            error_function=self.error_fn.name,
            input_dim=input_dim,
            output_dim=output_dim,
            linear_output=linear_output,
        )
        self.output_fn = get_activation('linear') if linear_output else self.activation_fn
        self.seed = seed
        self.name = name if name is not None else self.get_network_name()

        self._init_weights()

        self.history: Dict[str, List[float]] = {'step': [], 'error': [], 'reached_threshold': []}
        self.fit_summary = None
        self.trained = False

    def _init_weights(self, seed: Optional[int] = None):
        """Initialize weights with Xavier scaling; intercepts start at zero."""
        rng = np.random.default_rng(self.seed if seed is None else seed)

        self.weights: List[np.ndarray] = []
        self.biases: List[np.ndarray] = []

        layer_dims = [self.config.input_dim] + self.config.hidden_layers + [self.config.output_dim]

        for i in range(len(layer_dims) - 1):
            fan_in, fan_out = layer_dims[i], layer_dims[i + 1]
            std = np.sqrt(2.0 / (fan_in + fan_out))
            self.weights.append(rng.standard_normal((fan_in, fan_out)) * std)
            self.biases.append(np.zeros(fan_out))

    def _check_inputs(self, X: Any) -> np.ndarray:
        X = as_input_matrix(X)
        if X.shape[1] != self.config.input_dim:
            raise ValueError(
                f"Expected {self.config.input_dim} input column(s), got {X.shape[1]}"
            )
        return X

    def forward(self, X: np.ndarray, return_intermediates: bool = False) -> Any:
        """
        Forward pass through the network.

        Args:
            X: Input array of shape (n_samples, input_dim) or (n_samples,)
            return_intermediates: If True, also return pre-activations and activations

        Returns:
            Output of shape (n_samples, output_dim), optionally with intermediates
        """
        X = self._check_inputs(X)
        intermediates = {'pre_activations': [], 'activations': [X]}

        current = X
        n_layers = len(self.weights)
        for i, (W, b) in enumerate(zip(self.weights, self.biases)):
            z = current @ W + b
            intermediates['pre_activations'].append(z)
            if i < n_layers - 1:
                current = self.activation_fn(z)
            else:
                current = self.output_fn(z)
            intermediates['activations'].append(current)

        if return_intermediates:
            return current, intermediates
        return current

    def predict(self, X: np.ndarray) -> np.ndarray:
        """Predicted responses as a flat float array (single output)."""
        output = self.forward(X)
        if self.config.output_dim == 1:
            return output.flatten()
        return output

    def error(self, X: np.ndarray, y: np.ndarray) -> float:
        """Value of the configured error function on (X, y)."""
        y = np.asarray(y, dtype=float).reshape(-1, self.config.output_dim)
        return self.error_fn(y, self.forward(X))

    def backward(self, X: np.ndarray, y: np.ndarray) -> Tuple[List[np.ndarray], List[np.ndarray]]:
        """
        Backward pass - gradients of the error with respect to every parameter.

        Returns:
            Tuple of (weight_gradients, bias_gradients)
        """
        y = np.asarray(y, dtype=float).reshape(-1, self.config.output_dim)
        output, intermediates = self.forward(X, return_intermediates=True)

        weight_grads = [np.zeros_like(W) for W in self.weights]
        bias_grads = [np.zeros_like(b) for b in self.biases]

        delta = self.error_fn.grad(y, output) * self.output_fn.grad(
            intermediates['pre_activations'][-1]
        )

        for i in range(len(self.weights) - 1, -1, -1):
            prev_activation = intermediates['activations'][i]
            weight_grads[i] = prev_activation.T @ delta
            bias_grads[i] = np.sum(delta, axis=0)

            if i > 0:
                delta = (delta @ self.weights[i].T) * self.activation_fn.grad(
                    intermediates['pre_activations'][i - 1]
                )

        return weight_grads, bias_grads

    def fit(
        self,
        X: np.ndarray,
        y: np.ndarray,
        config=None,
        verbose: bool = False,
        **kwargs
    ):
        """
        Fit the network to data.

        Args:
            X: Training inputs
            y: Training targets
            config: TrainingConfig (built from kwargs when omitted)
            verbose: Print training progress
            **kwargs: TrainingConfig fields, e.g. algorithm, threshold, stepmax, rep

        Returns:
            FitSummary of the best repetition
        """
        from .training import Trainer, TrainingConfig

        if config is None:
            config = TrainingConfig(**kwargs)
        trainer = Trainer(self, config)
        return trainer.train(X, y, verbose=verbose)

    def get_network_name(self) -> str:
        """
        Generate a descriptive name for this network.

        - Single layer of 5 logistic units: "log-1x5"
        - Layers [5, 3] with tanh: "tan-5_3"
        """
        activation = self.config.activation[:3].lower()
        widths = self.config.hidden_layers
        if len(widths) == 1 or all(w == widths[0] for w in widths):
            return f"{activation}-{len(widths)}x{widths[0]}"
        return f"{activation}-{'_'.join(str(w) for w in widths)}"

    def reset(self, seed: Optional[int] = None):
        """Reset the network to freshly initialised weights."""
        self._init_weights(seed)
        self.history = {'step': [], 'error': [], 'reached_threshold': []}
        self.fit_summary = None
        self.trained = False

    def get_parameters(self) -> Tuple[List[np.ndarray], List[np.ndarray]]:
        """Copies of the current weights and intercepts."""
        return [W.copy() for W in self.weights], [b.copy() for b in self.biases]

    def set_parameters(self, weights: List[np.ndarray], biases: List[np.ndarray]):
        self.weights = [np.array(W, dtype=float) for W in weights]
        self.biases = [np.array(b, dtype=float) for b in biases]

    def to_dict(self, include_weights: bool = False) -> Dict:
        """
        Serialize network to dictionary.

        Args:
            include_weights: If True, include weight matrices for persistence.
        """
        data = {
            'name': self.name,
            'seed': self.seed,
            'config': self.config.to_dict(),
            'properties': {
                'depth': self.config.depth,
                'total_params': self.config.total_params,
            },
            'trained': self.trained,
            'history': self.history,
            'fit_summary': self.fit_summary.to_dict() if self.fit_summary is not None else None,
        }

        if include_weights:
            data['weights'] = [w.tolist() for w in self.weights]
            data['biases'] = [b.tolist() for b in self.biases]

        return data

    def load_weights(self, weights: List[List], biases: List[List]):
        """
        Load pre-trained weights into the network.

        Args:
            weights: List of weight matrices as nested lists.
            biases: List of intercept vectors as lists.
        """
        if len(weights) != len(self.weights) or len(biases) != len(self.biases):
            raise ValueError(f"Expected {len(self.weights)} weight matrices, got {len(weights)}")

        for i, (W, b) in enumerate(zip(weights, biases)):
            W = np.array(W, dtype=float)
            b = np.array(b, dtype=float)
            if W.shape != self.weights[i].shape or b.shape != self.biases[i].shape:
                raise ValueError(
                    f"Layer {i}: expected shapes {self.weights[i].shape} and "
                    f"{self.biases[i].shape}, got {W.shape} and {b.shape}"
                )
            self.weights[i] = W
            self.biases[i] = b
        self.trained = True

    @classmethod
    def from_dict(cls, data: Dict, load_weights: bool = True) -> 'RegressionNetwork':
        """
        Create network from dictionary.

        Args:
            data: Serialized network dictionary.
            load_weights: If True and weights are present, load them.
        """
        config = data['config']
        network = cls(
            hidden_layers=config['hidden_layers'],
            activation=config['activation'],
            error_function=config.get('error_function', 'sse'),
            input_dim=config.get('input_dim', 1),
            output_dim=config.get('output_dim', 1),
            linear_output=config.get('linear_output', True),
            name=data.get('name'),
            seed=data.get('seed'),
        )

        if load_weights and data.get('weights'):
            network.load_weights(data['weights'], data['biases'])
            network.history = data.get('history', network.history)
            network.trained = data.get('trained', True)

        return network

    def __repr__(self):
        arch = f"{self.config.input_dim}→" + "→".join(map(str, self.config.hidden_layers)) + f"→{self.config.output_dim}"
        return (f"RegressionNetwork({self.name}, arch={arch}, activation={self.config.activation}, "
                f"error={self.config.error_function}, params={self.config.total_params})")
