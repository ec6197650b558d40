"""
Statistical methods.

This module provides the circadian resultant vector and the within-day
shuffle test built on it.

Submodules
----------
circular : Circadian resultant vectors, angle helpers
shuffle : Within-day shuffles, shuffle significance test

Imports
-------
>>> from circadiankit.stats import circadian_vect, get_shuffled_vectors
>>> from circadiankit.stats import within_day_shuffle, compute_shuffle_pvalue
>>> from circadiankit.stats.shuffle import ShuffleTestResult
"""

from circadiankit.stats.circular import (
    circadian_vect,
    direction_to_hour,
    resultant_vector,
    time_of_day_angles,
)
from circadiankit.stats.shuffle import (
    ShuffleConfig,
    ShuffleTestResult,
    circadian_shuffle_test,
    compute_shuffle_pvalue,
    compute_shuffle_zscore,
    detrend_within_day,
    get_shuffled_vectors,
    shuffle_within_day,
    within_day_shuffle,
)

__all__ = [  # noqa: RUF022
    # Resultant vectors
    "circadian_vect",
    "resultant_vector",
    # Angle utilities
    "time_of_day_angles",
    "direction_to_hour",
    # Within-day shuffles
    "within_day_shuffle",
    "shuffle_within_day",
    "detrend_within_day",
    # Significance testing
    "ShuffleConfig",
    "ShuffleTestResult",
    "circadian_shuffle_test",
    "compute_shuffle_pvalue",
    "compute_shuffle_zscore",
    "get_shuffled_vectors",
]
