"""
circadiankit: circadian rhythm statistics for timestamped data.

Maps timestamped, weighted observations onto the 24-hour circle, summarises
them as a resultant vector (length = concentration, direction = peak time),
and tests that vector against a within-day shuffle null distribution.

Key Features
------------
- Datetimes or durations as timestamps, tz-aware datetimes included
- Weighted or unweighted circadian resultant vectors
- Within-day shuffles: complete permutation or circular shift
- Optional per-day detrending by mean or median
- Seeded, reproducible shuffle tests, optionally across worker processes

Main Functions
--------------
circadian_vect
    Resultant vector (length, direction) of timestamped observations.
within_day_shuffle
    One within-day shuffle of the observations.
get_shuffled_vectors
    Shuffle distribution of resultant vectors and empirical p-value.
circadian_shuffle_test
    Same test returning a ``ShuffleTestResult`` with z-score and plotting.

Examples
--------
Test a daily activity peak::

    >>> import pandas as pd
    >>> from circadiankit import get_shuffled_vectors
    >>> times = pd.date_range("2024-01-01", periods=24 * 7, freq="h")
    >>> lengths, dirs, p_val = get_shuffled_vectors(
    ...     times, activity, n_shuffles=1000, shuffle_mode="circshift", rng=0
    ... )  # doctest: +SKIP

Logging
-------
The package logs to the ``circadiankit`` logger and installs only a
``NullHandler``. Enable debug output with::

    >>> import logging
    >>> logging.getLogger("circadiankit").setLevel(logging.DEBUG)
"""

import logging

from circadiankit.stats.circular import circadian_vect, direction_to_hour
from circadiankit.stats.shuffle import (
    ShuffleConfig,
    ShuffleTestResult,
    circadian_shuffle_test,
    get_shuffled_vectors,
    within_day_shuffle,
)
from circadiankit.validation import (
    CircadianInputError,
    DegenerateInputWarning,
    InvalidArgumentError,
    InvalidModeError,
    InvalidStatError,
    ShapeMismatchError,
    ShuffleCancelledError,
)

# Add NullHandler to prevent "No handler found" warnings if user doesn't configure logging
logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "CircadianInputError",
    "DegenerateInputWarning",
    "InvalidArgumentError",
    "InvalidModeError",
    "InvalidStatError",
    "ShapeMismatchError",
    "ShuffleCancelledError",
    "ShuffleConfig",
    "ShuffleTestResult",
    "circadian_shuffle_test",
    "circadian_vect",
    "direction_to_hour",
    "get_shuffled_vectors",
    "within_day_shuffle",
]
