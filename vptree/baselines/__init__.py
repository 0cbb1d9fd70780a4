"""
Baseline k-NN methods for comparison.
"""

from .exact_brute_force import BaseKNNSearcher, BruteForceSearcher
from .balltree import SklearnBallTreeKNN

__all__ = [
    'BaseKNNSearcher',
    'BruteForceSearcher',
    'SklearnBallTreeKNN',
]
