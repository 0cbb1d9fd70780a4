"""
Search parameters for VP-tree queries.
"""

import sys
from dataclasses import dataclass

UNBOUNDED = sys.float_info.max


@dataclass(frozen=True)
class SearchParameters:
    """
    Value object configuring a single k-NN search.

    Parameters
    ----------
    num_results : int, default=1
        Maximum number of neighbours to return (k). Values below 1 yield
        an empty result rather than an error.
    max_distance : float, default=sys.float_info.max
        Initial search radius. Only items strictly closer than this are
        returned. The default means unbounded.
    """

    num_results: int = 1
    max_distance: float = UNBOUNDED


def default_search_parameters() -> SearchParameters:
    """k=1 with an unbounded radius."""
    return SearchParameters(1, UNBOUNDED)


def search_parameters_num_results(num_results: int) -> SearchParameters:
    """Given k with an unbounded radius."""
    return SearchParameters(num_results, UNBOUNDED)
