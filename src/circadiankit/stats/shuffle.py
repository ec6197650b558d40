"""Shuffle-based significance testing of circadian rhythms.

A circadian resultant vector is only meaningful if it is longer than what
the same data would produce without any time-of-day structure. This module
builds that null distribution by shuffling observation values *within each
day* and recomputing the resultant vector, then reports an empirical p-value
for the observed vector length.

Design Principles
-----------------
1. **Days stay intact**: values move only within their own day-bucket, so
   day-to-day differences (e.g. total activity) are preserved in the null.
2. **Reproducibility**: all functions accept an ``rng`` parameter. A seeded
   run gives the same distribution regardless of ``n_workers``.
3. **Fail fast**: shapes and options are validated before the first shuffle.
4. **Degenerate data propagates**: NaN vectors are returned, never hidden.

Shuffle Modes
-------------
| Mode | Within each day | Preserves |
|------|-----------------|-----------|
| **complete** | uniform random permutation | daily value multiset |
| **circshift** | rotation by a random offset | daily multiset and local autocorrelation |

``circshift`` is the more conservative null: slow fluctuations within a day
survive the shuffle, so only structure locked to clock time is tested.

Imports
-------
>>> from circadiankit.stats.shuffle import get_shuffled_vectors
>>> from circadiankit.stats import circadian_shuffle_test, within_day_shuffle

Examples
--------
>>> import numpy as np
>>> import pandas as pd
>>> from circadiankit.stats.shuffle import get_shuffled_vectors

>>> times = pd.date_range("2024-01-01", periods=72, freq="h")
>>> activity = np.where(times.hour == 12, 10.0, 0.0)
>>> lengths, directions, p_val = get_shuffled_vectors(
...     times, activity, n_shuffles=200, rng=42
... )
>>> lengths.shape, p_val < 0.05
((200,), True)

See Also
--------
circadiankit.stats.circular : Resultant vector computation
"""

from __future__ import annotations

import logging
import warnings
from collections.abc import Callable, Generator
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol

import numpy as np
from numpy.typing import ArrayLike, NDArray
from tqdm.auto import tqdm

from circadiankit.stats.circular import (
    direction_to_hour,
    resultant_vector,
    time_of_day_angles,
)
from circadiankit.timebase import DayBuckets, as_time_index, day_buckets
from circadiankit.validation import (
    DegenerateInputWarning,
    DetrendStat,
    InvalidArgumentError,
    ShuffleCancelledError,
    ShuffleMode,
    TieRule,
    validate_observations,
    validate_positive_int,
    validate_shuffle_mode,
    validate_stat,
    validate_ties,
)

if TYPE_CHECKING:
    from matplotlib.axes import Axes

logger = logging.getLogger(__name__)

# Shuffles per independent random stream; also the progress reporting step.
_BATCH_SIZE = 100
PROGRESS_INTERVAL = 100


class CancelEvent(Protocol):
    """Anything with an ``is_set()`` method, e.g. ``threading.Event``."""

    def is_set(self) -> bool: ...


def _ensure_rng(
    rng: np.random.Generator | int | None,
) -> np.random.Generator:
    """Convert rng parameter to a Generator instance.

    Parameters
    ----------
    rng : np.random.Generator | int | None
        Random number generator, seed, or None.

    Returns
    -------
    np.random.Generator
        A random number generator instance.
    """
    if rng is None:
        return np.random.default_rng()
    if isinstance(rng, np.random.Generator):
        return rng
    return np.random.default_rng(rng)


@dataclass(frozen=True)
class ShuffleConfig:
    """Validated options for a circadian shuffle test.

    Parameters
    ----------
    n_shuffles : int, default=1000
        Number of shuffled data sets. More shuffles give a finer p-value
        but take proportionally longer.
    shuffle_mode : {"complete", "circshift"}, default="complete"
        How values are randomised within each day.
    detrend : bool, default=False
        If True, divide each day's values by the day's ``stat`` before
        shuffling, removing day-to-day scale differences.
    stat : {"mean", "median"}, default="mean"
        Summary statistic used for detrending. Only checked when
        ``detrend`` is True.
    n_workers : int, default=1
        Number of worker processes. 1 runs serially in the calling thread.

    Raises
    ------
    InvalidArgumentError
        If ``n_shuffles`` or ``n_workers`` is not a positive integer.
    InvalidModeError
        If ``shuffle_mode`` is unknown.
    InvalidStatError
        If ``detrend`` is True and ``stat`` is unknown.
    """

    n_shuffles: int = 1000
    shuffle_mode: ShuffleMode = "complete"
    detrend: bool = False
    stat: DetrendStat = "mean"
    n_workers: int = 1

    def __post_init__(self) -> None:
        validate_positive_int(self.n_shuffles, "n_shuffles")
        validate_shuffle_mode(self.shuffle_mode)
        if self.detrend:
            validate_stat(self.stat)
        validate_positive_int(self.n_workers, "n_workers")


# =============================================================================
# I. Within-Day Shuffling
# =============================================================================


def _detrend_buckets(
    values: NDArray[np.float64],
    buckets: DayBuckets,
    stat: DetrendStat,
) -> NDArray[np.float64]:
    """Divide each day-bucket by its mean or median; returns a new array."""
    reducer = np.mean if stat == "mean" else np.median
    detrended = values.copy()
    skipped = []

    for code, idx in enumerate(buckets.indices):
        summary = reducer(values[idx])
        if summary == 0 or np.isnan(summary):
            skipped.append(code)
            continue
        detrended[idx] = values[idx] / summary

    if skipped:
        warnings.warn(
            f"Skipped detrending for {len(skipped)} of {buckets.n_buckets} days "
            f"whose {stat} is zero or NaN (day indices {skipped}). "
            f"Their values are shuffled unnormalised.",
            DegenerateInputWarning,
            stacklevel=3,
        )
    return detrended


def _shuffle_buckets(
    values: NDArray[np.float64],
    buckets: DayBuckets,
    shuffle_mode: ShuffleMode,
    generator: np.random.Generator,
) -> NDArray[np.float64]:
    """Shuffle values within each day-bucket; returns a new array."""
    shuffled = np.empty_like(values)
    for idx in buckets.indices:
        bucket_values = values[idx]
        if shuffle_mode == "complete":
            shuffled[idx] = generator.permutation(bucket_values)
        else:
            shift = generator.integers(len(idx))
            shuffled[idx] = np.roll(bucket_values, shift)
    return shuffled


def detrend_within_day(
    time_points: Any,
    observations: ArrayLike,
    stat: DetrendStat = "mean",
) -> NDArray[np.float64]:
    """Normalise observations by their day's mean or median.

    Parameters
    ----------
    time_points : array-like, shape (n,)
        Datetimes or durations.
    observations : array-like, shape (n,)
        Value of each observation.
    stat : {"mean", "median"}, default="mean"
        Per-day statistic to divide by.

    Returns
    -------
    NDArray[np.float64], shape (n,)
        Detrended copy of ``observations``. Days whose statistic is 0 or
        NaN are left unchanged and reported with a ``DegenerateInputWarning``.

    Examples
    --------
    >>> import pandas as pd
    >>> times = pd.to_datetime(["2024-01-01 08:00", "2024-01-01 20:00",
    ...                         "2024-01-02 08:00", "2024-01-02 20:00"])
    >>> detrend_within_day(times, [1.0, 3.0, 10.0, 30.0])
    array([0.5, 1.5, 0.5, 1.5])
    """
    stat = validate_stat(stat)
    index = as_time_index(time_points)
    values = validate_observations(observations, len(index))
    return _detrend_buckets(values, day_buckets(index), stat)


def within_day_shuffle(
    time_points: Any,
    observations: ArrayLike,
    shuffle_mode: ShuffleMode = "complete",
    detrend: bool = False,
    stat: DetrendStat = "mean",
    *,
    rng: np.random.Generator | int | None = None,
) -> NDArray[np.float64]:
    """Shuffle observation values within each day.

    Produces one randomised copy of ``observations`` aligned to the same,
    unchanged ``time_points``. Values never move between days.

    Parameters
    ----------
    time_points : array-like, shape (n,)
        Datetimes or durations; their calendar day defines the buckets.
    observations : array-like, shape (n,)
        Value / weight of each time point. Not modified.
    shuffle_mode : {"complete", "circshift"}, default="complete"
        - "complete": uniform random permutation of each day's values.
        - "circshift": rotate each day's values by a random offset in
          ``[0, n_day)``, keeping their within-day order (and thus local
          correlations) intact.
    detrend : bool, default=False
        If True, divide each day's values by the day's ``stat`` first.
    stat : {"mean", "median"}, default="mean"
        Statistic used for detrending.
    rng : np.random.Generator | int | None, default=None
        Random number generator for reproducibility.

        - If Generator: Use directly
        - If int: Seed for ``np.random.default_rng()``
        - If None: Use default RNG (not reproducible)

    Returns
    -------
    NDArray[np.float64], shape (n,)
        Shuffled (and possibly detrended) observations.

    Raises
    ------
    InvalidModeError
        If ``shuffle_mode`` is unknown.
    InvalidStatError
        If ``detrend`` is True and ``stat`` is unknown.
    ShapeMismatchError
        If ``observations`` does not match ``time_points`` in length.

    Examples
    --------
    >>> import numpy as np
    >>> import pandas as pd
    >>> times = pd.date_range("2024-01-01", periods=8, freq="6h")
    >>> values = np.arange(8.0)
    >>> shuffled = within_day_shuffle(times, values, "circshift", rng=0)
    >>> sorted(shuffled[:4].tolist()), sorted(shuffled[4:].tolist())
    ([0.0, 1.0, 2.0, 3.0], [4.0, 5.0, 6.0, 7.0])
    """
    shuffle_mode = validate_shuffle_mode(shuffle_mode)
    if detrend:
        stat = validate_stat(stat)

    index = as_time_index(time_points)
    values = validate_observations(observations, len(index))
    buckets = day_buckets(index)
    if detrend:
        values = _detrend_buckets(values, buckets, stat)

    return _shuffle_buckets(values, buckets, shuffle_mode, _ensure_rng(rng))


def shuffle_within_day(
    time_points: Any,
    observations: ArrayLike,
    *,
    n_shuffles: int = 1000,
    shuffle_mode: ShuffleMode = "complete",
    detrend: bool = False,
    stat: DetrendStat = "mean",
    rng: np.random.Generator | int | None = None,
) -> Generator[NDArray[np.float64], None, None]:
    """Yield ``n_shuffles`` within-day shuffles of the observations.

    Day-buckets and detrending are computed once, so this is the efficient
    way to drive a custom statistic over many shuffles.

    Parameters
    ----------
    time_points : array-like, shape (n,)
        Datetimes or durations.
    observations : array-like, shape (n,)
        Value / weight of each time point.
    n_shuffles : int, default=1000
        Number of shuffled versions to generate.
    shuffle_mode : {"complete", "circshift"}, default="complete"
        See ``within_day_shuffle()``.
    detrend : bool, default=False
        See ``within_day_shuffle()``.
    stat : {"mean", "median"}, default="mean"
        See ``within_day_shuffle()``.
    rng : np.random.Generator | int | None, default=None
        Random number generator for reproducibility.

    Yields
    ------
    shuffled : NDArray[np.float64], shape (n,)
        One shuffled copy of the (possibly detrended) observations.

    Notes
    -----
    Options are validated when the generator is created, not on first
    iteration.

    Examples
    --------
    >>> import numpy as np
    >>> import pandas as pd
    >>> times = pd.date_range("2024-01-01", periods=48, freq="h")
    >>> values = np.arange(48.0)
    >>> for shuffled in shuffle_within_day(times, values, n_shuffles=3, rng=42):
    ...     print(shuffled[:24].sum() == values[:24].sum())
    True
    True
    True
    """
    config = ShuffleConfig(
        n_shuffles=n_shuffles, shuffle_mode=shuffle_mode, detrend=detrend, stat=stat
    )
    index = as_time_index(time_points)
    values = validate_observations(observations, len(index))
    buckets = day_buckets(index)
    if config.detrend:
        values = _detrend_buckets(values, buckets, config.stat)

    return _iter_bucket_shuffles(
        values, buckets, config.shuffle_mode, config.n_shuffles, _ensure_rng(rng)
    )


def _iter_bucket_shuffles(
    values: NDArray[np.float64],
    buckets: DayBuckets,
    shuffle_mode: ShuffleMode,
    n_shuffles: int,
    generator: np.random.Generator,
) -> Generator[NDArray[np.float64], None, None]:
    for _ in range(n_shuffles):
        yield _shuffle_buckets(values, buckets, shuffle_mode, generator)


# =============================================================================
# II. Significance Testing Functions
# =============================================================================


def compute_shuffle_pvalue(
    observed: float,
    null_scores: ArrayLike,
    *,
    correction: bool = False,
    ties: TieRule = "count",
) -> float:
    """Fraction of shuffled scores at least as large as the observed score.

    Parameters
    ----------
    observed : float
        Score of the original (non-shuffled) data.
    null_scores : array-like, shape (n_shuffles,)
        Scores of the shuffled data sets.
    correction : bool, default=False
        If True, use the Phipson-Smyth estimate ``(k + 1) / (n + 1)``,
        which is never exactly zero. If False, return ``k / n``.
    ties : {"count", "ignore"}, default="count"
        How null scores equal to ``observed`` are treated. "count" counts
        them as extreme (``k`` counts ``>= observed``); "ignore" counts only
        strictly greater null scores.

    Returns
    -------
    float
        Empirical p-value in ``[0, 1]``.

    Raises
    ------
    InvalidArgumentError
        If ``null_scores`` is empty or ``ties`` is unknown.

    Notes
    -----
    With the default ``ties="count"``, ``k`` counts null scores
    ``>= observed``. Data without within-day variation (e.g. a constant
    signal) shuffles to copies identical to the original; counting ties keeps
    it from coming out significant. ``ties="ignore"`` gives the strict
    ``> observed`` count.

    NaN never compares greater than or equal to anything: NaN null scores
    add nothing to ``k``, and a NaN observed score gives ``k = 0``. The
    result depends only on the count, not on the order of ``null_scores``.

    References
    ----------
    .. [1] Phipson, B., & Smyth, G. K. (2010). Permutation P-values should
           never be zero: calculating exact P-values when permutations are
           randomly drawn. Statistical Applications in Genetics and Molecular
           Biology, 9(1).

    Examples
    --------
    >>> import numpy as np
    >>> compute_shuffle_pvalue(2.5, np.array([1.0, 2.0, 3.0, 4.0]))
    0.5
    >>> compute_shuffle_pvalue(10.0, np.array([1.0, 2.0, 3.0, 4.0]), correction=True)
    0.2
    >>> compute_shuffle_pvalue(2.5, np.array([np.nan, 3.0, 1.0, np.nan]))
    0.25
    """
    ties = validate_ties(ties)
    null_scores = np.asarray(null_scores, dtype=np.float64)
    n = len(null_scores)
    if n == 0:
        raise InvalidArgumentError(
            "[E2002] null_scores is empty; need at least one shuffled score."
        )

    if ties == "count":
        k = int(np.sum(null_scores >= observed))
    else:
        k = int(np.sum(null_scores > observed))
    if correction:
        return float((k + 1) / (n + 1))
    return float(k / n)


def compute_shuffle_zscore(
    observed: float,
    null_scores: ArrayLike,
) -> float:
    """Compute z-score of observed value relative to null distribution.

    NaN null scores are ignored. Returns NaN if the observed score is NaN,
    fewer than two finite null scores remain, or they have zero variance.

    Examples
    --------
    >>> import numpy as np
    >>> null = np.array([1.0, 2.0, 3.0, 4.0, 5.0])
    >>> bool(np.isclose(compute_shuffle_zscore(5.0, null), 2.0 / np.std(null)))
    True
    >>> compute_shuffle_zscore(5.0, np.array([3.0, 3.0, 3.0]))
    nan
    """
    null_scores = np.asarray(null_scores, dtype=np.float64)
    finite = null_scores[~np.isnan(null_scores)]
    if np.isnan(observed) or len(finite) < 2:
        return float("nan")

    std_null = float(np.std(finite))
    if std_null == 0.0:
        return float("nan")

    return float((observed - np.mean(finite)) / std_null)


@dataclass(frozen=True)
class ShuffleTestResult:
    """Result of a circadian shuffle test.

    Parameters
    ----------
    observed_length : float
        Resultant vector length of the original data.
    observed_direction : float
        Resultant vector direction of the original data, in ``(-pi, pi]``.
    null_lengths : NDArray[np.float64], shape (n_shuffles,)
        Vector length of each shuffled data set, in shuffle order.
    null_directions : NDArray[np.float64], shape (n_shuffles,)
        Vector direction of each shuffled data set, in shuffle order.
    p_value : float
        Fraction of ``null_lengths`` greater than or equal to
        ``observed_length``.
    z_score : float
        ``(observed - mean(null)) / std(null)``; NaN if undefined.
    shuffle_mode : str
        "complete" or "circshift".
    detrend : bool
        Whether days were normalised before shuffling.
    stat : str | None
        Detrending statistic ("mean" or "median"); None when ``detrend`` is
        False.
    n_shuffles : int
        Number of shuffles performed.

    Attributes
    ----------
    is_significant : bool
        True if the observed length is finite and p_value < 0.05
        (convenience property).
    peak_hour : float
        Observed direction expressed as a clock hour in ``[0, 24)``.
    """

    observed_length: float
    observed_direction: float
    null_lengths: NDArray[np.float64]
    null_directions: NDArray[np.float64]
    p_value: float
    z_score: float
    shuffle_mode: str
    detrend: bool
    stat: str | None
    n_shuffles: int

    @property
    def is_significant(self) -> bool:
        """Return True if the observed length is finite and p_value < 0.05.

        A NaN observed length (empty input, NaN observations) gives p = 0
        but is never significant.
        """
        return bool(np.isfinite(self.observed_length) and self.p_value < 0.05)

    @property
    def peak_hour(self) -> float:
        """Clock hour of the observed resultant vector direction."""
        return float(direction_to_hour(self.observed_direction))

    def plot(self, ax: Axes | None = None, **kwargs) -> Axes:
        """Plot the null length distribution with the observed length.

        Parameters
        ----------
        ax : matplotlib.axes.Axes | None, default=None
            Axes to plot on. If None, creates a new figure.
        **kwargs
            Additional keyword arguments passed to matplotlib's hist().

        Returns
        -------
        matplotlib.axes.Axes
            The axes containing the plot.
        """
        import matplotlib.pyplot as plt

        if ax is None:
            _, ax = plt.subplots()

        hist_kwargs = {
            "bins": 30,
            "alpha": 0.7,
            "color": "steelblue",
            "edgecolor": "white",
        }
        hist_kwargs.update(kwargs)

        finite = self.null_lengths[~np.isnan(self.null_lengths)]
        ax.hist(finite, **hist_kwargs)  # type: ignore[arg-type]

        ax.axvline(
            self.observed_length,
            color="red",
            linestyle="--",
            linewidth=2,
            label=f"Observed: {self.observed_length:.3f}",
        )

        sig_marker = "*" if self.is_significant else ""
        ax.set_title(
            f"Circadian shuffle test ({self.shuffle_mode})\n"
            f"p = {self.p_value:.4f}{sig_marker}, z = {self.z_score:.2f}"
        )
        ax.set_xlabel("Resultant vector length")
        ax.set_ylabel("Count")
        ax.legend()

        return ax


# =============================================================================
# III. Shuffle-Test Orchestration
# =============================================================================


def _shuffled_vector_batch(
    angles: NDArray[np.float64],
    values: NDArray[np.float64],
    buckets: DayBuckets,
    shuffle_mode: ShuffleMode,
    generator: np.random.Generator,
    n_shuffles: int,
) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    """Run one batch of shuffles in a worker process.

    Defined at module level so ``ProcessPoolExecutor`` can pickle it.
    """
    lengths = np.empty(n_shuffles, dtype=np.float64)
    directions = np.empty(n_shuffles, dtype=np.float64)
    for i in range(n_shuffles):
        shuffled = _shuffle_buckets(values, buckets, shuffle_mode, generator)
        lengths[i], directions[i] = resultant_vector(angles, shuffled)
    return lengths, directions


def _report_progress(
    progress_callback: Callable[[int], None],
    done_before: int,
    done_after: int,
) -> None:
    first = (done_before // PROGRESS_INTERVAL + 1) * PROGRESS_INTERVAL
    for completed in range(first, done_after + 1, PROGRESS_INTERVAL):
        progress_callback(completed)


def _check_cancelled(cancel_event: CancelEvent | None, completed: int) -> None:
    if cancel_event is not None and cancel_event.is_set():
        logger.debug("Shuffle run cancelled after %d shuffles", completed)
        raise ShuffleCancelledError(
            f"Shuffle run cancelled after {completed} completed shuffles."
        )


def _no_progress(completed: int) -> None:
    pass


def circadian_shuffle_test(
    time_points: Any,
    observations: ArrayLike,
    n_shuffles: int = 1000,
    shuffle_mode: ShuffleMode = "complete",
    detrend: bool = False,
    stat: DetrendStat = "mean",
    *,
    rng: np.random.Generator | int | None = None,
    progress_callback: Callable[[int], None] | None = None,
    cancel_event: CancelEvent | None = None,
    n_workers: int = 1,
    show_progress: bool = False,
    ties: TieRule = "count",
) -> ShuffleTestResult:
    """Test whether a circadian resultant vector exceeds its shuffle null.

    Shuffles the observations within each day ``n_shuffles`` times, computes
    the resultant vector of every shuffled copy, and compares the observed
    vector length against that distribution.

    Parameters
    ----------
    time_points : array-like, shape (n,)
        Datetimes or durations at which events or measurements occurred.
    observations : array-like, shape (n,)
        Value / weight of each time point.
    n_shuffles : int, default=1000
        Number of shuffled data sets. Larger values approximate the p-value
        better but take longer.
    shuffle_mode : {"complete", "circshift"}, default="complete"
        "complete" permutes all values within each day; "circshift" rotates
        them by a random offset so local correlations survive.
    detrend : bool, default=False
        If True, shuffled data sets are built from values divided by their
        day's ``stat``. The observed vector always uses the raw values.
    stat : {"mean", "median"}, default="mean"
        Statistic for detrending.
    rng : np.random.Generator | int | None, default=None
        Random number generator or seed. A fixed seed gives identical
        results for any ``n_workers``.
    progress_callback : callable, optional
        Called as ``progress_callback(completed)`` after every 100th
        completed shuffle. Default does nothing.
    cancel_event : object with ``is_set()``, optional
        E.g. a ``threading.Event``. Checked before every shuffle (serial)
        or every batch of 100 (parallel).
    n_workers : int, default=1
        Number of worker processes. 1 runs in the calling thread.
    show_progress : bool, default=False
        Show a tqdm progress bar.
    ties : {"count", "ignore"}, default="count"
        Whether shuffled lengths equal to the observed length count as
        extreme. See ``compute_shuffle_pvalue()``.

    Returns
    -------
    ShuffleTestResult
        Observed vector, null distribution (in shuffle order), p-value and
        z-score.

    Raises
    ------
    ShapeMismatchError
        If ``time_points`` and ``observations`` differ in length. Checked
        before any shuffling.
    InvalidArgumentError
        If ``n_shuffles`` or ``n_workers`` is not a positive integer, or
        ``ties`` is unknown.
    InvalidModeError
        If ``shuffle_mode`` is unknown.
    InvalidStatError
        If ``detrend`` is True and ``stat`` is unknown.
    ShuffleCancelledError
        If ``cancel_event`` is set during the run.

    Notes
    -----
    The p-value is ``count(null_lengths >= observed_length) / n_shuffles``
    (``>`` with ``ties="ignore"``); NaN null lengths never count. Empty
    input produces NaN vectors throughout and a p-value of 0; a
    ``DegenerateInputWarning`` is issued and the result is not significant.

    Shuffles are drawn in batches of 100, each from its own child generator
    spawned from ``rng``. Batches are independent, which is what lets them
    run in separate processes without changing the result.

    Examples
    --------
    >>> import numpy as np
    >>> import pandas as pd
    >>> times = pd.date_range("2024-01-01", periods=72, freq="h")
    >>> activity = np.where(times.hour == 12, 10.0, 0.0)
    >>> result = circadian_shuffle_test(times, activity, n_shuffles=100, rng=0)
    >>> result.is_significant, round(result.peak_hour, 3)
    (True, 12.0)
    """
    config = ShuffleConfig(
        n_shuffles=n_shuffles,
        shuffle_mode=shuffle_mode,
        detrend=detrend,
        stat=stat,
        n_workers=n_workers,
    )
    ties = validate_ties(ties)
    index = as_time_index(time_points)
    values = validate_observations(observations, len(index))
    if len(values) == 0:
        warnings.warn(
            "time_points and observations are empty; every resultant vector "
            "will be NaN.",
            DegenerateInputWarning,
            stacklevel=2,
        )

    angles = time_of_day_angles(index)
    buckets = day_buckets(index)
    shuffle_values = values
    if config.detrend:
        shuffle_values = _detrend_buckets(values, buckets, config.stat)

    generator = _ensure_rng(rng)
    batch_sizes = [
        min(_BATCH_SIZE, config.n_shuffles - start)
        for start in range(0, config.n_shuffles, _BATCH_SIZE)
    ]
    batch_generators = generator.spawn(len(batch_sizes))

    logger.debug(
        "Running %d shuffles (mode=%s, detrend=%s, stat=%s, n_workers=%d) "
        "over %d observations in %d days",
        config.n_shuffles,
        config.shuffle_mode,
        config.detrend,
        config.stat,
        config.n_workers,
        len(values),
        buckets.n_buckets,
    )

    callback = progress_callback if progress_callback is not None else _no_progress
    with tqdm(
        total=config.n_shuffles, desc="Shuffling", disable=not show_progress
    ) as progress_bar:
        if config.n_workers == 1:
            lengths, directions = _run_serial(
                angles,
                shuffle_values,
                buckets,
                config,
                batch_sizes,
                batch_generators,
                callback,
                cancel_event,
                progress_bar,
            )
        else:
            lengths, directions = _run_parallel(
                angles,
                shuffle_values,
                buckets,
                config,
                batch_sizes,
                batch_generators,
                callback,
                cancel_event,
                progress_bar,
            )

    observed_length, observed_direction = resultant_vector(angles, values)
    p_value = compute_shuffle_pvalue(observed_length, lengths, ties=ties)
    z_score = compute_shuffle_zscore(observed_length, lengths)

    logger.debug(
        "Shuffle test finished: observed length=%.4f, p=%.4f",
        observed_length,
        p_value,
    )

    return ShuffleTestResult(
        observed_length=observed_length,
        observed_direction=observed_direction,
        null_lengths=lengths,
        null_directions=directions,
        p_value=p_value,
        z_score=z_score,
        shuffle_mode=config.shuffle_mode,
        detrend=config.detrend,
        stat=config.stat if config.detrend else None,
        n_shuffles=config.n_shuffles,
    )


def _run_serial(
    angles: NDArray[np.float64],
    values: NDArray[np.float64],
    buckets: DayBuckets,
    config: ShuffleConfig,
    batch_sizes: list[int],
    batch_generators: list[np.random.Generator],
    progress_callback: Callable[[int], None],
    cancel_event: CancelEvent | None,
    progress_bar: tqdm,
) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    lengths = np.full(config.n_shuffles, np.nan)
    directions = np.full(config.n_shuffles, np.nan)

    shuffle_idx = 0
    for generator, size in zip(batch_generators, batch_sizes):
        for _ in range(size):
            _check_cancelled(cancel_event, shuffle_idx)
            shuffled = _shuffle_buckets(
                values, buckets, config.shuffle_mode, generator
            )
            lengths[shuffle_idx], directions[shuffle_idx] = resultant_vector(
                angles, shuffled
            )
            shuffle_idx += 1
            progress_bar.update(1)
            if shuffle_idx % PROGRESS_INTERVAL == 0:
                progress_callback(shuffle_idx)

    return lengths, directions


def _run_parallel(
    angles: NDArray[np.float64],
    values: NDArray[np.float64],
    buckets: DayBuckets,
    config: ShuffleConfig,
    batch_sizes: list[int],
    batch_generators: list[np.random.Generator],
    progress_callback: Callable[[int], None],
    cancel_event: CancelEvent | None,
    progress_bar: tqdm,
) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    lengths = np.full(config.n_shuffles, np.nan)
    directions = np.full(config.n_shuffles, np.nan)

    with ProcessPoolExecutor(max_workers=config.n_workers) as executor:
        futures = [
            executor.submit(
                _shuffled_vector_batch,
                angles,
                values,
                buckets,
                config.shuffle_mode,
                generator,
                size,
            )
            for generator, size in zip(batch_generators, batch_sizes)
        ]

        start = 0
        for future, size in zip(futures, batch_sizes):
            if cancel_event is not None and cancel_event.is_set():
                executor.shutdown(wait=False, cancel_futures=True)
                _check_cancelled(cancel_event, start)

            # Each batch owns the slots [start, start + size).
            batch_lengths, batch_directions = future.result()
            lengths[start : start + size] = batch_lengths
            directions[start : start + size] = batch_directions

            progress_bar.update(size)
            _report_progress(progress_callback, start, start + size)
            start += size

    return lengths, directions


def get_shuffled_vectors(
    time_points: Any,
    observations: ArrayLike,
    n_shuffles: int = 1000,
    shuffle_mode: ShuffleMode = "complete",
    detrend: bool = False,
    stat: DetrendStat = "mean",
    *,
    rng: np.random.Generator | int | None = None,
    progress_callback: Callable[[int], None] | None = None,
    cancel_event: CancelEvent | None = None,
    n_workers: int = 1,
    show_progress: bool = False,
    ties: TieRule = "count",
) -> tuple[NDArray[np.float64], NDArray[np.float64], float]:
    """Resultant vectors of within-day shuffled data and their p-value.

    Shuffles the data ``n_shuffles`` times, computes the circadian resultant
    vector for every shuffled data set, and compares the length of the
    observed vector against that distribution.

    Parameters
    ----------
    time_points : array-like, shape (n,)
        Datetimes or durations at which events or measurements occurred.
    observations : array-like, shape (n,)
        Value / weight of each time point.
    n_shuffles : int, default=1000
        How many shuffled data sets to build.
    shuffle_mode : {"complete", "circshift"}, default="complete"
        Shuffle all values within each day, or rotate them by a random
        offset to preserve local correlations.
    detrend : bool, default=False
        Remove day-to-day variability by dividing each day by its
        mean or median (see ``stat``) before shuffling.
    stat : {"mean", "median"}, default="mean"
        Summary statistic for detrending.
    rng, progress_callback, cancel_event, n_workers, show_progress, ties
        See ``circadian_shuffle_test()``.

    Returns
    -------
    shuffled_vector_lengths : NDArray[np.float64], shape (n_shuffles,)
        Resultant vector length of each shuffled data set.
    shuffled_vector_dirs : NDArray[np.float64], shape (n_shuffles,)
        Resultant vector direction (radians) of each shuffled data set.
    p_val : float
        Fraction of shuffled lengths greater than or equal to the observed
        length (strictly greater with ``ties="ignore"``).

    Raises
    ------
    ShapeMismatchError, InvalidArgumentError, InvalidModeError,
    InvalidStatError, ShuffleCancelledError
        See ``circadian_shuffle_test()``.

    See Also
    --------
    circadian_shuffle_test : Same test returning a ``ShuffleTestResult``.
    """
    result = circadian_shuffle_test(
        time_points,
        observations,
        n_shuffles,
        shuffle_mode,
        detrend,
        stat,
        rng=rng,
        progress_callback=progress_callback,
        cancel_event=cancel_event,
        n_workers=n_workers,
        show_progress=show_progress,
        ties=ties,
    )
    return result.null_lengths, result.null_directions, result.p_value
