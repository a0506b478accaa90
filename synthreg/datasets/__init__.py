"""Synthetic regression data and train/evaluation splitting."""

from .synthetic import (
    Sample,
    Dataset,
    sample_inputs,
    generate_responses,
    make_dataset,
    true_response,
    LINKS,
    get_link,
    list_links,
)
from .split import Split, train_test_split

__all__ = [
    'Sample',
    'Dataset',
    'sample_inputs',
    'generate_responses',
    'make_dataset',
    'true_response',
    'LINKS',
    'get_link',
    'list_links',
    'Split',
    'train_test_split',
]
