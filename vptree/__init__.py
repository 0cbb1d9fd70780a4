"""
vptree: Vantage-Point Trees for exact k-nearest-neighbour search in
arbitrary metric spaces.

Only a distance function is needed, so items can be strings under edit
distance, perceptual hashes under Hamming distance, or plain vectors.
"""

from .vp_tree import VPTree, VPTreeNode, build
from .parameters import (
    SearchParameters,
    default_search_parameters,
    search_parameters_num_results
)
from .distances import Metric, METRICS, get_metric

__version__ = '0.1.0'

__all__ = [
    'VPTree',
    'VPTreeNode',
    'build',
    'SearchParameters',
    'default_search_parameters',
    'search_parameters_num_results',
    'Metric',
    'METRICS',
    'get_metric'
]
