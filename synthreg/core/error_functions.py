"""
Error functions minimised while fitting a regression network.

- sse: half the sum of squared errors, the usual choice for regression
- ce: cross-entropy, only meaningful for binary responses with a
  bounded (non-linear) output unit
"""

import numpy as np
from typing import Callable, Dict

# Keeps log() finite for cross-entropy
_EPS = 1e-15


def sse(y_true: np.ndarray, y_pred: np.ndarray) -> float:
    """Half the sum of squared errors."""
    return float(0.5 * np.sum((y_true - y_pred) ** 2))


def sse_derivative(y_true: np.ndarray, y_pred: np.ndarray) -> np.ndarray:
    return y_pred - y_true


def cross_entropy(y_true: np.ndarray, y_pred: np.ndarray) -> float:
    """Binary cross-entropy, summed over samples."""
    y_pred = np.clip(y_pred, _EPS, 1 - _EPS)
    return float(-np.sum(y_true * np.log(y_pred) + (1 - y_true) * np.log(1 - y_pred)))


def cross_entropy_derivative(y_true: np.ndarray, y_pred: np.ndarray) -> np.ndarray:
    y_pred = np.clip(y_pred, _EPS, 1 - _EPS)
    return (y_pred - y_true) / (y_pred * (1 - y_pred))


class ErrorFunction:
    """An error function with its derivative with respect to the output."""

    def __init__(self, name: str, func: Callable, derivative: Callable, description: str):
        self.name = name
        self.func = func
        self.derivative = derivative
        self.description = description

    def __call__(self, y_true: np.ndarray, y_pred: np.ndarray) -> float:
        return self.func(y_true, y_pred)

    def grad(self, y_true: np.ndarray, y_pred: np.ndarray) -> np.ndarray:
        return self.derivative(y_true, y_pred)

    def __repr__(self):
        return f"ErrorFunction({self.name})"


ERROR_FUNCTIONS: Dict[str, ErrorFunction] = {
    'sse': ErrorFunction(
        name='sse',
        func=sse,
        derivative=sse_derivative,
        description='Sum of squared errors (halved)',
    ),
    'ce': ErrorFunction(
        name='ce',
        func=cross_entropy,
        derivative=cross_entropy_derivative,
        description='Cross-entropy for binary responses',
    ),
}


def get_error_function(name: str) -> ErrorFunction:
    """Get an error function by name."""
    if isinstance(name, ErrorFunction):
        return name
    if name not in ERROR_FUNCTIONS:
        available = ', '.join(ERROR_FUNCTIONS.keys())
        raise ValueError(f"Unknown error function '{name}'. Available: {available}")
    return ERROR_FUNCTIONS[name]


def is_binary_response(y: np.ndarray) -> bool:
    """True when every target is exactly 0 or 1."""
    y = np.asarray(y)
    return bool(np.all((y == 0) | (y == 1)))
