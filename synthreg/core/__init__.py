"""Core regression-network framework."""

from .network import RegressionNetwork, NetworkConfig
from .activations import ACTIVATIONS, get_activation
from .error_functions import ERROR_FUNCTIONS, get_error_function
from .training import Trainer, TrainingConfig, FitSummary
from .harness import ModelConfiguration, ModelHarness, NetworkHarness

__all__ = [
    'RegressionNetwork',
    'NetworkConfig',
    'ACTIVATIONS',
    'get_activation',
    'ERROR_FUNCTIONS',
    'get_error_function',
    'Trainer',
    'TrainingConfig',
    'FitSummary',
    'ModelConfiguration',
    'ModelHarness',
    'NetworkHarness',
]
