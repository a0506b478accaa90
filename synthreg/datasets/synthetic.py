"""
Synthetic regression data drawn from a known distribution.

Inputs are sampled from a normal distribution; each response is sampled
from a normal distribution centred on a link function of its input:

    x ~ Normal(mean, spread)
    y | x ~ Normal(link(x), noise_spread)

Because the generating process is known, fitted models can be judged
against the true link curve as well as against held-out samples.
"""

import math
import numpy as np
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, List, Union, Any


RandomState = Union[None, int, np.random.Generator]


def as_generator(random_state: RandomState = None) -> np.random.Generator:
    """Turn a seed (or None, or an existing Generator) into a Generator."""
    if isinstance(random_state, np.random.Generator):
        return random_state
    return np.random.default_rng(random_state)


def cosine_plus_identity(x: np.ndarray) -> np.ndarray:
    """cos(x) + x - a gentle wave around the diagonal."""
    return np.cos(x) + x


def sine(x: np.ndarray) -> np.ndarray:
    return np.sin(x)


def identity(x: np.ndarray) -> np.ndarray:
    return np.asarray(x, dtype=float)


def quadratic(x: np.ndarray) -> np.ndarray:
    return np.asarray(x, dtype=float) ** 2


LINKS: Dict[str, Dict[str, Any]] = {
    'cosine_plus_identity': {
        'function': cosine_plus_identity,
        'formula': 'cos(x) + x',
        'description': 'Oscillation superimposed on a linear trend',
    },
    'sine': {
        'function': sine,
        'formula': 'sin(x)',
        'description': 'Pure periodic response',
    },
    'identity': {
        'function': identity,
        'formula': 'x',
        'description': 'Linear baseline',
    },
    'quadratic': {
        'function': quadratic,
        'formula': 'x^2',
        'description': 'Symmetric, non-monotonic response',
    },
}


def get_link(link: Union[str, Callable]) -> Callable[[np.ndarray], np.ndarray]:
    """Get a link function by name (a callable passes through)."""
    if callable(link):
        return link
    if link not in LINKS:
        available = ', '.join(LINKS.keys())
        raise ValueError(f"Unknown link function '{link}'. Available: {available}")
    return LINKS[link]['function']


def list_links() -> Dict[str, Dict]:
    """List all registered link functions with their metadata."""
    return {
        name: {k: v for k, v in info.items() if k != 'function'}
        for name, info in LINKS.items()
    }


@dataclass(frozen=True)
class Sample:
    """One (x, y) observation."""
    x: float
    y: float


@dataclass(frozen=True, eq=False)
class Dataset:
    """
    An ordered, immutable sequence of samples.

    Both columns are stored as read-only float arrays of equal length.
    """
    x: np.ndarray
    y: np.ndarray

    def __post_init__(self):
        x = np.array(self.x, dtype=float).reshape(-1)
        y = np.array(self.y, dtype=float).reshape(-1)
        if x.shape != y.shape:
            raise ValueError(f"x has {x.shape[0]} values but y has {y.shape[0]}")
        x.setflags(write=False)
        y.setflags(write=False)
        object.__setattr__(self, 'x', x)
        object.__setattr__(self, 'y', y)

    def __len__(self) -> int:
        return self.x.shape[0]

    def __iter__(self) -> Iterator[Sample]:
        for xi, yi in zip(self.x, self.y):
            yield Sample(float(xi), float(yi))

    def __getitem__(self, index):
        if isinstance(index, slice):
            return Dataset(self.x[index], self.y[index])
        return Sample(float(self.x[index]), float(self.y[index]))

    def __eq__(self, other) -> bool:
        if not isinstance(other, Dataset):
            return NotImplemented
        return np.array_equal(self.x, other.x) and np.array_equal(self.y, other.y)

    __hash__ = None

    def samples(self) -> List[Sample]:
        return list(self)

    def to_rows(self) -> List[Dict[str, float]]:
        return [{'x': s.x, 'y': s.y} for s in self]

    @classmethod
    def from_samples(cls, samples: List[Sample]) -> 'Dataset':
        return cls(
            x=np.array([s.x for s in samples], dtype=float),
            y=np.array([s.y for s in samples], dtype=float),
        )

    def __repr__(self):
        return f"Dataset(n={len(self)})"


def _check_finite(name: str, value: float) -> float:
    value = float(value)
    if not math.isfinite(value):
        raise ValueError(f"{name} must be finite, got {value}")
    return value


def _check_spread(name: str, value: float) -> float:
    value = _check_finite(name, value)
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


def sample_inputs(
    count: int,
    mean: float = 0.0,
    spread: float = 1.0,
    random_state: RandomState = None
) -> np.ndarray:
    """
    Draw ``count`` independent values from Normal(mean, spread).

    Args:
        count: Number of draws (0 gives an empty array)
        mean: Distribution mean
        spread: Standard deviation, must be positive
        random_state: Seed or Generator

    Returns:
        Float array of shape (count,)
    """
    if isinstance(count, bool) or not isinstance(count, (int, np.integer)):
        raise ValueError(f"count must be an integer, got {count!r}")
    if count < 0:
        raise ValueError(f"count must be non-negative, got {count}")
    mean = _check_finite('mean', mean)
    spread = _check_spread('spread', spread)

    rng = as_generator(random_state)
    return rng.normal(loc=mean, scale=spread, size=int(count))


def generate_responses(
    inputs: np.ndarray,
    link: Union[str, Callable] = 'cosine_plus_identity',
    noise_spread: float = 0.15,
    random_state: RandomState = None
) -> np.ndarray:
    """
    Draw one noisy response per input from Normal(link(x), noise_spread).

    Args:
        inputs: Input values
        link: Link function or registered link name
        noise_spread: Standard deviation of the noise, must be positive
        random_state: Seed or Generator

    Returns:
        Float array with the same length as ``inputs``
    """
    x = np.asarray(inputs, dtype=float).reshape(-1)
    if not np.all(np.isfinite(x)):
        raise ValueError("inputs contain NaN or infinite values")
    noise_spread = _check_spread('noise_spread', noise_spread)
    link_fn = get_link(link)

    centre = np.asarray(link_fn(x), dtype=float).reshape(-1)
    if centre.shape != x.shape:
        raise ValueError(
            f"link function returned {centre.shape[0]} values for {x.shape[0]} inputs"
        )

    rng = as_generator(random_state)
    return rng.normal(loc=centre, scale=noise_spread, size=x.shape[0])


def make_dataset(
    n_samples: int = 251,
    mean: float = 0.0,
    spread: float = 2.0,
    noise_spread: float = 0.15,
    link: Union[str, Callable] = 'cosine_plus_identity',
    random_state: RandomState = None
) -> Dataset:
    """
    Sample inputs then responses from a single random stream.

    A fixed integer ``random_state`` always yields an identical Dataset.
    """
    rng = as_generator(random_state)
    x = sample_inputs(n_samples, mean=mean, spread=spread, random_state=rng)
    y = generate_responses(x, link=link, noise_spread=noise_spread, random_state=rng)
    return Dataset(x=x, y=y)


def true_response(
    x: np.ndarray,
    link: Union[str, Callable] = 'cosine_plus_identity'
) -> np.ndarray:
    """Noise-free response: the link function evaluated at ``x``."""
    return np.asarray(get_link(link)(np.asarray(x, dtype=float)), dtype=float)
