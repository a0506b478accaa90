"""
Statistical summaries for residuals and other samples.

Provides functions for:
- Confidence interval of a sample mean
- Shape statistics (skewness, excess kurtosis)
- Residual summaries checked against an expected noise spread
"""

import math
from dataclasses import dataclass, asdict
from typing import Any, Callable, Dict, List, Optional, Union
import numpy as np

from ..datasets.synthetic import Dataset, true_response


@dataclass
class ConfidenceInterval:
    """Result of a confidence interval calculation."""
    mean: float
    ci_lower: float
    ci_upper: float
    std: float
    n: int
    confidence: float

    def contains(self, value: float) -> bool:
        return self.ci_lower <= value <= self.ci_upper


_Z_VALUES = {0.90: 1.645, 0.95: 1.96, 0.99: 2.576}

# Two-tailed 95% t critical values by sample size
_T_TABLE_95 = {
    2: 12.706, 3: 4.303, 4: 3.182, 5: 2.776, 6: 2.571,
    7: 2.447, 8: 2.365, 9: 2.306, 10: 2.262, 11: 2.228,
    12: 2.201, 13: 2.179, 14: 2.160, 15: 2.145, 16: 2.131,
    17: 2.120, 18: 2.110, 19: 2.101, 20: 2.093, 21: 2.086,
    22: 2.080, 23: 2.074, 24: 2.069, 25: 2.064, 26: 2.060,
    27: 2.056, 28: 2.052, 29: 2.048, 30: 2.045
}


def compute_confidence_interval(
    values: Union[List[float], np.ndarray],
    confidence: float = 0.95
) -> ConfidenceInterval:
    """
    Compute a confidence interval for the mean using the t-distribution.

    For n >= 30 the normal approximation is used. Below that only 95%
    t critical values are tabulated.

    Args:
        values: Sample values
        confidence: Confidence level (0.90, 0.95 or 0.99; 0.95 when n < 30)

    Returns:
        ConfidenceInterval with mean, bounds, std, and sample size

    Raises:
        ValueError: for an untabulated confidence level
    """
    if confidence not in _Z_VALUES:
        available = ', '.join(str(c) for c in _Z_VALUES)
        raise ValueError(f"Unsupported confidence {confidence}. Available: {available}")
    arr = np.asarray(values, dtype=float).reshape(-1)
    n = arr.shape[0]
    if 2 <= n < 30 and confidence != 0.95:
        raise ValueError(
            f"Only 95% intervals are available for fewer than 30 values, got {confidence} with n={n}"
        )
    if n == 0:
        nan = float('nan')
        return ConfidenceInterval(mean=nan, ci_lower=nan, ci_upper=nan, std=nan, n=0,
                                  confidence=confidence)

    if n == 1:
        val = float(arr[0])
        return ConfidenceInterval(mean=val, ci_lower=val, ci_upper=val, std=0.0, n=1,
                                  confidence=confidence)

    mean = float(np.mean(arr))
    std = float(np.std(arr, ddof=1))
    se = std / math.sqrt(n)

    if n >= 30:
        t_crit = _Z_VALUES[confidence]
    else:
        t_crit = _T_TABLE_95[n]

    margin = t_crit * se
    return ConfidenceInterval(
        mean=mean,
        ci_lower=mean - margin,
        ci_upper=mean + margin,
        std=std,
        n=n,
        confidence=confidence
    )


def skewness(values: Union[List[float], np.ndarray]) -> float:
    """Sample skewness (biased, moment-based). NaN for constant or tiny samples."""
    arr = np.asarray(values, dtype=float).reshape(-1)
    if arr.shape[0] < 3:
        return float('nan')
    centred = arr - arr.mean()
    m2 = np.mean(centred ** 2)
    if m2 == 0:
        return float('nan')
    return float(np.mean(centred ** 3) / m2 ** 1.5)


def excess_kurtosis(values: Union[List[float], np.ndarray]) -> float:
    """Sample excess kurtosis (0 for a normal distribution)."""
    arr = np.asarray(values, dtype=float).reshape(-1)
    if arr.shape[0] < 4:
        return float('nan')
    centred = arr - arr.mean()
    m2 = np.mean(centred ** 2)
    if m2 == 0:
        return float('nan')
    return float(np.mean(centred ** 4) / m2 ** 2 - 3.0)


@dataclass
class ResidualSummary:
    """Shape of a residual sample, optionally against an expected spread."""
    n: int
    mean: float
    std: float
    skewness: float
    excess_kurtosis: float
    mean_ci: ConfidenceInterval
    expected_spread: Optional[float] = None

    @property
    def spread_ratio(self) -> Optional[float]:
        """Observed / expected standard deviation."""
        if self.expected_spread is None or self.expected_spread == 0:
            return None
        return self.std / self.expected_spread

    def looks_normal(self, tolerance: float = 1.0) -> bool:
        """
        Rough normality check: centred mean and near-zero skew / excess kurtosis.

        ``tolerance`` bounds both shape statistics; the confidence interval of
        the mean must contain zero.
        """
        if self.n < 4:
            return False
        return (
            self.mean_ci.contains(0.0)
            and abs(self.skewness) <= tolerance
            and abs(self.excess_kurtosis) <= tolerance
        )

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['spread_ratio'] = self.spread_ratio
        return data


def summarize_residuals(
    residuals: Union[List[float], np.ndarray],
    expected_spread: Optional[float] = None,
    confidence: float = 0.95
) -> ResidualSummary:
    """Summarise residuals (actual - predicted, or y - link(x))."""
    arr = np.asarray(residuals, dtype=float).reshape(-1)
    ci = compute_confidence_interval(arr, confidence=confidence)
    return ResidualSummary(
        n=arr.shape[0],
        mean=ci.mean,
        std=float(np.std(arr, ddof=1)) if arr.shape[0] > 1 else float('nan'),
        skewness=skewness(arr),
        excess_kurtosis=excess_kurtosis(arr),
        mean_ci=ci,
        expected_spread=expected_spread,
    )


def noise_residuals(dataset: Dataset, link: Union[str, Callable] = 'cosine_plus_identity') -> np.ndarray:
    """Deviation of each response from the noise-free link value."""
    return np.asarray(dataset.y) - true_response(dataset.x, link)
