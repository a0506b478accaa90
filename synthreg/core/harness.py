"""
Model harness - the narrow fit/predict seam between the walkthrough and a
numeric back-end.

Data generation, splitting and evaluation only ever talk to a
``ModelHarness``; swapping the back-end means providing another subclass.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional, Tuple, Union
import numpy as np

from .network import RegressionNetwork, as_input_matrix
from .training import TrainingConfig


@dataclass
class ModelConfiguration:
    """Hyperparameters describing one model to fit."""
    hidden_units: Union[int, List[int]] = 3
    error_function: str = 'sse'
    activation: str = 'logistic'
    seed: Optional[int] = None  # Weight initialisation
    name: Optional[str] = None

    @property
    def label(self) -> str:
        """Display name, e.g. 'h5-tanh-sse'."""
        if self.name:
            return self.name
        hidden = self.hidden_units
        if not isinstance(hidden, int):
            hidden = '_'.join(str(h) for h in hidden)
        return f"h{hidden}-{self.activation}-{self.error_function}"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ModelConfiguration':
        return cls(**data)


def validate_training_data(inputs: Any, targets: Any) -> Tuple[np.ndarray, np.ndarray]:
    """
    Check that inputs and targets are well-formed numeric data.

    Returns:
        X of shape (n_samples, n_features) and y of shape (n_samples,)

    Raises:
        ValueError: on missing, non-finite, empty or misaligned data
    """
    X = validate_inputs(inputs)
    y = np.asarray(targets, dtype=float).reshape(-1)

    if X.shape[0] != y.shape[0]:
        raise ValueError(f"Inputs have {X.shape[0]} rows but targets have {y.shape[0]}")
    if X.shape[0] == 0:
        raise ValueError("Cannot fit a model to an empty dataset")
    if not np.all(np.isfinite(y)):
        raise ValueError("Targets contain NaN or infinite values")

    return X, y


def validate_inputs(inputs: Any) -> np.ndarray:
    """Coerce inputs to a finite float matrix."""
    X = as_input_matrix(inputs)
    if not np.all(np.isfinite(X)):
        raise ValueError("Inputs contain NaN or infinite values")
    return X


class ModelHarness(ABC):
    """Fit/predict capability consumed by the walkthrough."""

    @abstractmethod
    def fit(self, inputs: Any, targets: Any, config: ModelConfiguration) -> Any:
        """Train a model on (inputs, targets) and return it."""

    @abstractmethod
    def predict(self, model: Any, inputs: Any) -> np.ndarray:
        """Return predictions for ``inputs`` as a flat float array."""

    def fit_summary(self, model: Any) -> Optional[Dict[str, Any]]:
        """Training diagnostics for a fitted model, if the back-end has any."""
        return None


class NetworkHarness(ModelHarness):
    """
    Harness backed by ``RegressionNetwork``.

    Args:
        training_config: How every model is trained (algorithm, threshold, ...)
        linear_output: Identity output unit (regression) vs squashed output
        verbose: Print training progress
    """

    def __init__(
        self,
        training_config: Optional[TrainingConfig] = None,
        linear_output: bool = True,
        verbose: bool = False
    ):
        self.training_config = training_config or TrainingConfig()
        self.linear_output = linear_output
        self.verbose = verbose

    def fit(self, inputs: Any, targets: Any, config: ModelConfiguration) -> RegressionNetwork:
        X, y = validate_training_data(inputs, targets)

        network = RegressionNetwork(
            hidden_layers=config.hidden_units,
            activation=config.activation,
            error_function=config.error_function,
            input_dim=X.shape[1],
            linear_output=self.linear_output,
            name=config.label,
            seed=config.seed,
        )
        network.fit(X, y, config=self.training_config, verbose=self.verbose)
        return network

    def predict(self, model: RegressionNetwork, inputs: Any) -> np.ndarray:
        X = validate_inputs(inputs)
        return np.asarray(model.predict(X), dtype=float).reshape(-1)

    def fit_summary(self, model: RegressionNetwork) -> Optional[Dict[str, Any]]:
        if model.fit_summary is None:
            return None
        return model.fit_summary.to_dict()
