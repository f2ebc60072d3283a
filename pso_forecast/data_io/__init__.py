"""
Data I/O module for the PSO forecasting engine.
"""
from .observations import (
    Observation,
    make_category_key,
    split_category_key,
    observations_from_frame,
    load_observations,
    group_by_category
)

__all__ = [
    'Observation', 'make_category_key', 'split_category_key',
    'observations_from_frame', 'load_observations', 'group_by_category'
]
