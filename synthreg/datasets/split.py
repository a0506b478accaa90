"""Order-preserving train/evaluation split."""

import math
from dataclasses import dataclass
from typing import Tuple

from .synthetic import Dataset


@dataclass(frozen=True)
class Split:
    """Training prefix and evaluation remainder of a dataset."""
    training: Dataset
    evaluation: Dataset
    fraction: float

    @property
    def sizes(self) -> Tuple[int, int]:
        return len(self.training), len(self.evaluation)

    def __len__(self) -> int:
        return len(self.training) + len(self.evaluation)


def train_test_split(dataset: Dataset, fraction: float = 0.8) -> Split:
    """
    Split ``dataset`` into its first floor(fraction * N) samples and the rest.

    Args:
        dataset: Dataset to partition
        fraction: Share of samples used for training, strictly inside (0, 1)

    Returns:
        Split whose training and evaluation parts concatenate back to ``dataset``
    """
    fraction = float(fraction)
    if not (0.0 < fraction < 1.0):
        raise ValueError(f"fraction must be strictly between 0 and 1, got {fraction}")

    n_train = math.floor(fraction * len(dataset))
    return Split(
        training=dataset[:n_train],
        evaluation=dataset[n_train:],
        fraction=fraction,
    )
