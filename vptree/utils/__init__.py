"""
Utility modules for the VP-tree package.
"""

from .heap import BoundedMaxHeap
from .data_loader import DataLoader
from .metrics import (
    recall_at_k,
    distance_recall_at_k,
    compute_speedup,
    compute_distance_ratio,
    aggregate_metrics
)
from .profiling import Profiler

__all__ = [
    'BoundedMaxHeap',
    'DataLoader',
    'Profiler',
    'recall_at_k',
    'distance_recall_at_k',
    'compute_speedup',
    'compute_distance_ratio',
    'aggregate_metrics'
]
