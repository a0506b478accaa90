"""Synthetic regression walkthrough: sample, explore, split, fit, compare."""

from .walkthrough import WalkthroughConfig, WalkthroughResult, run_walkthrough

__version__ = '0.1.0'

__all__ = [
    'WalkthroughConfig',
    'WalkthroughResult',
    'run_walkthrough',
]
