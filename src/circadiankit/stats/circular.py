"""
Circadian resultant vectors.

Each timestamp is mapped to an angle on the 24-hour circle,
``theta = 2*pi * hours_of_day / 24``, and the weighted observations are
summed as vectors. The resultant vector summarises circadian concentration:

- **length**: how strongly the weight is concentrated at one time of day
  (0 for a flat profile, 1 when all weight falls at one instant).
- **direction**: the angle of the peak, in ``(-pi, pi]``. Use
  ``direction_to_hour()`` to read it as clock time.

Normalisation
-------------
The length is divided by the sum of absolute weights::

    length = |sum(w * exp(i * theta))| / sum(|w|)

With unit weights this is the usual mean resultant length (division by N).
The same divisor is applied to the observed data and to every shuffled copy,
so lengths from a shuffle test are directly comparable.

Examples
--------
>>> import numpy as np
>>> import pandas as pd
>>> from circadiankit.stats.circular import circadian_vect, direction_to_hour
>>> times = pd.date_range("2024-01-01", periods=72, freq="h")
>>> activity = np.where(times.hour == 12, 10.0, 0.0)
>>> length, direction = circadian_vect(times, activity)
>>> round(length, 6), round(float(direction_to_hour(direction)), 6)
(1.0, 12.0)
"""

from __future__ import annotations

from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

from circadiankit.timebase import HOURS_PER_DAY, as_time_index, hours_of_day
from circadiankit.validation import validate_observations

__all__ = [
    "circadian_vect",
    "direction_to_hour",
    "resultant_vector",
    "time_of_day_angles",
]


def time_of_day_angles(time_points: Any) -> NDArray[np.float64]:
    """Map timestamps to angles on the 24-hour circle.

    Parameters
    ----------
    time_points : array-like
        Datetimes or durations.

    Returns
    -------
    NDArray[np.float64], shape (n_time_points,)
        Angles in radians within ``[0, 2*pi)``; midnight maps to 0.
    """
    return 2 * np.pi * hours_of_day(time_points) / HOURS_PER_DAY


def direction_to_hour(direction: ArrayLike) -> NDArray[np.float64] | float:
    """Convert resultant vector directions to clock hours in ``[0, 24)``.

    NaN directions stay NaN.

    Examples
    --------
    >>> import numpy as np
    >>> direction_to_hour(np.pi)
    12.0
    >>> direction_to_hour(np.array([np.pi / 2, 0.0]))
    array([6., 0.])
    """
    hours = np.mod(np.asarray(direction, dtype=np.float64), 2 * np.pi)
    hours = hours / (2 * np.pi) * HOURS_PER_DAY
    if hours.ndim == 0:
        return float(hours)
    return hours


def resultant_vector(
    angles: NDArray[np.float64],
    weights: NDArray[np.float64] | None = None,
) -> tuple[float, float]:
    """Weighted resultant vector of precomputed angles.

    This is the arithmetic core of ``circadian_vect()``; it skips timestamp
    conversion so repeated calls on the same angles stay cheap.

    Parameters
    ----------
    angles : NDArray[np.float64], shape (n,)
        Angles in radians.
    weights : NDArray[np.float64], shape (n,), optional
        Weight of each angle. If None, every angle has weight 1.

    Returns
    -------
    length : float
        ``|sum(w * exp(i*angles))| / sum(|w|)``. NaN for empty input or
        when all weights are zero.
    direction : float
        ``atan2(S, C)`` in ``(-pi, pi]``. NaN whenever ``length`` is NaN.
    """
    if len(angles) == 0:
        return np.nan, np.nan

    if weights is None:
        cos_sum = np.sum(np.cos(angles))
        sin_sum = np.sum(np.sin(angles))
        total = float(len(angles))
    else:
        cos_sum = np.sum(weights * np.cos(angles))
        sin_sum = np.sum(weights * np.sin(angles))
        total = np.sum(np.abs(weights))

    if total == 0:
        return np.nan, np.nan

    length = float(np.hypot(cos_sum, sin_sum) / total)
    direction = float(np.arctan2(sin_sum, cos_sum))
    if direction == -np.pi:
        direction = np.pi
    if np.isnan(length):
        direction = np.nan
    return length, direction


def circadian_vect(
    time_points: Any,
    observations: ArrayLike | None = None,
) -> tuple[float, float]:
    """Compute the circadian resultant vector of timestamped observations.

    Parameters
    ----------
    time_points : array-like, shape (n,)
        Datetimes or durations at which events or measurements occurred.
    observations : array-like, shape (n,), optional
        Value / weight of each time point. If omitted, every time point
        counts once (unweighted vector).

    Returns
    -------
    length : float
        Resultant vector length, normalised by the sum of absolute weights.
    direction : float
        Resultant vector direction in radians, in ``(-pi, pi]``.

    Raises
    ------
    ShapeMismatchError
        If ``observations`` does not have one value per time point.

    Notes
    -----
    Zero-length input (or weights that are all zero) is a degenerate case:
    ``(nan, nan)`` is returned instead of raising. NaN observations also
    yield NaN. Both propagate to the caller unchanged.

    Shifting all timestamps by whole days leaves the result unchanged, and
    times either side of midnight (23:59 and 00:01) are treated as close.

    Examples
    --------
    >>> import pandas as pd
    >>> times = pd.to_timedelta([23.5, 0.5], unit="h")
    >>> length, direction = circadian_vect(times)
    >>> round(length, 4)
    0.9914

    See Also
    --------
    resultant_vector : Same computation on precomputed angles.
    """
    index = as_time_index(time_points)
    angles = time_of_day_angles(index)
    if observations is None:
        return resultant_vector(angles)
    weights = validate_observations(observations, len(index))
    return resultant_vector(angles, weights)
