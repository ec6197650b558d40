"""Timestamp handling on the 24-hour circadian cycle.

Timestamps come in two flavours:

- **Absolute datetimes** (``datetime64``, ``pandas.DatetimeIndex``/``Series``,
  lists of ``datetime.datetime``; tz-aware allowed). Time of day is the local
  wall-clock time and day-buckets are calendar dates.
- **Durations since an epoch** (``timedelta64``, ``pandas.TimedeltaIndex``,
  lists of ``datetime.timedelta``). Time of day is the duration modulo 24 h
  and day-buckets are whole days since the epoch.

Plain numbers are rejected because their unit is ambiguous.

Examples
--------
>>> import pandas as pd
>>> from circadiankit.timebase import day_buckets, hours_of_day
>>> times = pd.date_range("2024-01-01 22:00", periods=4, freq="2h")
>>> hours_of_day(times)
array([22.,  0.,  2.,  4.])
>>> day_buckets(times).n_buckets
2
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np
import pandas as pd
from numpy.typing import NDArray

HOURS_PER_DAY = 24.0

TimeIndex = pd.DatetimeIndex | pd.TimedeltaIndex


@dataclass(frozen=True)
class DayBuckets:
    """Partition of observations into days.

    Attributes
    ----------
    codes : NDArray[np.intp], shape (n_observations,)
        Bucket code of each observation, numbered in order of first
        appearance.
    indices : tuple of NDArray[np.intp]
        For each bucket, the observation indices it holds, in ascending
        order.
    """

    codes: NDArray[np.intp]
    indices: tuple[NDArray[np.intp], ...]

    @property
    def n_buckets(self) -> int:
        """Number of distinct days."""
        return len(self.indices)

    @property
    def sizes(self) -> NDArray[np.intp]:
        """Number of observations in each bucket."""
        return np.array([len(idx) for idx in self.indices], dtype=np.intp)


def as_time_index(time_points: Any) -> TimeIndex:
    """Normalise timestamps to a ``DatetimeIndex`` or ``TimedeltaIndex``.

    Parameters
    ----------
    time_points : array-like
        Datetimes or durations, one per observation.

    Returns
    -------
    pandas.DatetimeIndex or pandas.TimedeltaIndex
        Timestamps as a pandas index. Tz-aware datetimes keep their zone.

    Raises
    ------
    TypeError
        If the values are neither datetimes nor durations.
    ValueError
        If any timestamp is missing (NaT).
    """
    if isinstance(time_points, (pd.DatetimeIndex, pd.TimedeltaIndex)):
        index = time_points
    else:
        try:
            index = pd.Index(time_points)
        except (TypeError, ValueError) as e:
            raise TypeError(
                f"[E2005] time_points must be a 1-D sequence of datetimes or "
                f"durations. Conversion failed: {e}"
            ) from e

        if len(index) == 0:
            return pd.DatetimeIndex([])

    if not isinstance(index, (pd.DatetimeIndex, pd.TimedeltaIndex)):
        raise TypeError(
            f"[E2005] time_points must be datetimes or durations, got values "
            f"of dtype {index.dtype}.\n"
            f"Fix: Convert first, e.g. pd.to_datetime(times) for date strings "
            f"or pd.to_timedelta(hours, unit='h') for numeric hours."
        )

    if index.hasnans:
        n_nat = int(index.isna().sum())
        raise ValueError(
            f"[E2006] time_points contains {n_nat} missing timestamps (NaT).\n"
            f"Fix: Drop the missing timestamps and their observations first."
        )

    return index


def _day_start(index: TimeIndex) -> TimeIndex:
    # Wall-clock time of day, so DST transitions do not shift observations.
    if isinstance(index, pd.DatetimeIndex):
        if index.tz is not None:
            index = index.tz_localize(None)
        return index.normalize()
    return index.floor("D")


def hours_of_day(time_points: Any) -> NDArray[np.float64]:
    """Time of day of each timestamp, in hours within ``[0, 24)``.

    Parameters
    ----------
    time_points : array-like
        Datetimes or durations.

    Returns
    -------
    NDArray[np.float64], shape (n_time_points,)
        Hours since the start of each timestamp's day.

    Examples
    --------
    >>> import pandas as pd
    >>> hours_of_day(pd.to_timedelta([-1, 25, 48.5], unit="h"))
    array([23. ,  1. ,  0.5])
    """
    index = as_time_index(time_points)
    if isinstance(index, pd.DatetimeIndex) and index.tz is not None:
        index = index.tz_localize(None)
    elapsed = index - _day_start(index)
    return np.asarray(elapsed / pd.Timedelta(hours=1), dtype=np.float64)


def day_buckets(time_points: Any) -> DayBuckets:
    """Group observation indices by calendar day (or day since epoch).

    Parameters
    ----------
    time_points : array-like
        Datetimes or durations.

    Returns
    -------
    DayBuckets
        Bucket codes and per-bucket index arrays.
    """
    index = as_time_index(time_points)
    codes, uniques = pd.factorize(_day_start(index), sort=False)
    codes = codes.astype(np.intp, copy=False)

    n_buckets = len(uniques)
    order = np.argsort(codes, kind="stable")
    boundaries = np.cumsum(np.bincount(codes, minlength=n_buckets))[:-1]
    indices = tuple(np.split(order, boundaries)) if n_buckets else ()

    return DayBuckets(codes=codes, indices=indices)
