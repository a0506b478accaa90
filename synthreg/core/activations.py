"""
Activation functions for the hidden units of a regression network.

The walkthrough compares two smooth, bounded nonlinearities:
- Logistic: squashes to (0, 1)
- Tanh: zero-centered, squashes to (-1, 1)

A linear activation is also registered; it is what the output unit uses
when ``linear_output`` is set.
"""

import numpy as np
from typing import Callable, Dict, Union


def linear(x: np.ndarray) -> np.ndarray:
    """Identity activation - no nonlinearity."""
    return x


def linear_derivative(x: np.ndarray) -> np.ndarray:
    return np.ones_like(x)


def logistic(x: np.ndarray) -> np.ndarray:
    """Logistic sigmoid - smooth, bounded (0, 1)."""
    # Clip to avoid overflow
    x = np.clip(x, -500, 500)
    return 1 / (1 + np.exp(-x))


def logistic_derivative(x: np.ndarray) -> np.ndarray:
    s = logistic(x)
    return s * (1 - s)


def tanh(x: np.ndarray) -> np.ndarray:
    """Hyperbolic tangent - smooth, bounded (-1, 1)."""
    return np.tanh(x)


def tanh_derivative(x: np.ndarray) -> np.ndarray:
    return 1 - np.tanh(x) ** 2


class Activation:
    """Wrapper for activation function with its derivative and metadata."""

    def __init__(
        self,
        name: str,
        func: Callable,
        derivative: Callable,
        properties: Dict
    ):
        self.name = name
        self.func = func
        self.derivative = derivative
        self.properties = properties

    def __call__(self, x: np.ndarray) -> np.ndarray:
        return self.func(x)

    def grad(self, x: np.ndarray) -> np.ndarray:
        return self.derivative(x)

    def __repr__(self):
        return f"Activation({self.name})"


ACTIVATIONS: Dict[str, Activation] = {
    'linear': Activation(
        name='linear',
        func=linear,
        derivative=linear_derivative,
        properties={
            'bounded': False,
            'range': (-np.inf, np.inf),
            'description': 'Identity function - no nonlinearity'
        }
    ),
    'logistic': Activation(
        name='logistic',
        func=logistic,
        derivative=logistic_derivative,
        properties={
            'bounded': True,
            'range': (0, 1),
            'description': 'Logistic sigmoid - smooth, bounded between 0 and 1'
        }
    ),
    'tanh': Activation(
        name='tanh',
        func=tanh,
        derivative=tanh_derivative,
        properties={
            'bounded': True,
            'range': (-1, 1),
            'description': 'Hyperbolic tangent - smooth, zero-centered'
        }
    ),
}

# Common alternative spelling
ACTIVATIONS['sigmoid'] = ACTIVATIONS['logistic']


def get_activation(name: Union[str, Activation]) -> Activation:
    """Get an activation function by name (an Activation passes through)."""
    if isinstance(name, Activation):
        return name
    if name not in ACTIVATIONS:
        available = ', '.join(ACTIVATIONS.keys())
        raise ValueError(f"Unknown activation '{name}'. Available: {available}")
    return ACTIVATIONS[name]


def list_activations() -> Dict[str, Dict]:
    """List all available activations with their properties."""
    return {name: dict(act.properties) for name, act in ACTIVATIONS.items()}
