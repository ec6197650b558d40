"""Input validation and error types for circadiankit.

This module defines the exception taxonomy raised by the vector calculator,
the within-day shuffler and the shuffle-test orchestrator, together with
the validators that raise them. All validation happens eagerly, before any
shuffling starts, so a bad call fails fast with an actionable message.

Error Codes
-----------
| Code  | Error                  | Meaning                                   |
|-------|------------------------|-------------------------------------------|
| E2001 | ShapeMismatchError     | time_points / observations length differs |
| E2002 | InvalidArgumentError   | n_shuffles or n_workers not positive, or  |
|       |                        | unknown p-value ties rule                 |
| E2003 | InvalidModeError       | unknown shuffle_mode                      |
| E2004 | InvalidStatError       | unknown detrend statistic                 |
| E2005 | TypeError              | timestamps are not datetimes or durations |
| E2006 | ValueError             | timestamps contain NaT                    |
"""

from __future__ import annotations

from typing import Any, Literal, get_args

import numpy as np
from numpy.typing import NDArray

ShuffleMode = Literal["complete", "circshift"]
DetrendStat = Literal["mean", "median"]
TieRule = Literal["count", "ignore"]

SHUFFLE_MODES: tuple[str, ...] = get_args(ShuffleMode)
DETREND_STATS: tuple[str, ...] = get_args(DetrendStat)
TIE_RULES: tuple[str, ...] = get_args(TieRule)


class CircadianInputError(ValueError):
    """Base class for invalid inputs to circadiankit functions.

    Inherits from `ValueError` so callers catching `ValueError` keep working.
    """


class ShapeMismatchError(CircadianInputError):
    """Raised when time points and observations do not pair up 1:1."""


class InvalidArgumentError(CircadianInputError):
    """Raised when a numeric argument (e.g. ``n_shuffles``) is out of range."""


class InvalidModeError(CircadianInputError):
    """Raised when ``shuffle_mode`` is not one of ``SHUFFLE_MODES``."""


class InvalidStatError(CircadianInputError):
    """Raised when ``stat`` is not one of ``DETREND_STATS``."""


class ShuffleCancelledError(RuntimeError):
    """Raised when a shuffle run is cancelled through its ``cancel_event``.

    No partial shuffle distribution is returned.
    """


class DegenerateInputWarning(UserWarning):
    """Warning for inputs that produce NaN vectors or skip detrending.

    Degenerate inputs are not errors: the NaN results propagate to the
    caller unchanged instead of being coerced to zero.
    """


def validate_observations(
    observations: Any,
    n_time_points: int,
) -> NDArray[np.float64]:
    """Convert observations to a 1-D float array matching the time points.

    Parameters
    ----------
    observations : array-like, shape (n_time_points,)
        Value / weight of each observation.
    n_time_points : int
        Number of time points the observations must pair with.

    Returns
    -------
    NDArray[np.float64], shape (n_time_points,)
        Observations as a float array. The input is never modified.

    Raises
    ------
    ShapeMismatchError
        If observations are not 1-D or their length differs from
        ``n_time_points``.
    """
    values = np.asarray(observations, dtype=np.float64)
    if values.ndim != 1:
        raise ShapeMismatchError(
            f"[E2001] observations must be 1-D, got shape {values.shape}.\n"
            f"Fix: Pass one value per time point, e.g. observations.ravel()."
        )
    if len(values) != n_time_points:
        raise ShapeMismatchError(
            f"[E2001] time_points and observations must have the same length. "
            f"Got time_points: {n_time_points}, observations: {len(values)}.\n"
            f"Fix: Ensure each observation has exactly one timestamp."
        )
    return values


def validate_positive_int(value: Any, name: str) -> int:
    """Validate that ``value`` is a positive integer.

    Booleans are rejected even though they subclass ``int``.

    Raises
    ------
    InvalidArgumentError
        If ``value`` is not an integer or is <= 0.
    """
    if isinstance(value, (bool, np.bool_)) or not isinstance(
        value, (int, np.integer)
    ):
        raise InvalidArgumentError(
            f"[E2002] {name} must be a positive integer, "
            f"got {value!r} ({type(value).__name__}).\n"
            f"Fix: Pass a whole number, e.g. {name}=1000."
        )
    if value <= 0:
        raise InvalidArgumentError(
            f"[E2002] {name} must be a positive integer, got {value}.\n"
            f"Fix: Use {name} >= 1."
        )
    return int(value)


def validate_shuffle_mode(shuffle_mode: Any) -> ShuffleMode:
    """Validate ``shuffle_mode`` against ``SHUFFLE_MODES``.

    Raises
    ------
    InvalidModeError
        If ``shuffle_mode`` is not 'complete' or 'circshift'.
    """
    if shuffle_mode not in SHUFFLE_MODES:
        raise InvalidModeError(
            f"[E2003] shuffle_mode must be one of {SHUFFLE_MODES}, "
            f"got {shuffle_mode!r}.\n"
            f"Fix: Use 'complete' to permute all values within each day, or "
            f"'circshift' to rotate them and keep local correlations."
        )
    return shuffle_mode


def validate_stat(stat: Any) -> DetrendStat:
    """Validate the detrending statistic against ``DETREND_STATS``.

    Raises
    ------
    InvalidStatError
        If ``stat`` is not 'mean' or 'median'.
    """
    if stat not in DETREND_STATS:
        raise InvalidStatError(
            f"[E2004] stat must be one of {DETREND_STATS}, got {stat!r}."
        )
    return stat


def validate_ties(ties: Any) -> TieRule:
    """Validate the p-value tie rule against ``TIE_RULES``.

    Raises
    ------
    InvalidArgumentError
        If ``ties`` is not 'count' or 'ignore'.
    """
    if ties not in TIE_RULES:
        raise InvalidArgumentError(
            f"[E2002] ties must be one of {TIE_RULES}, got {ties!r}.\n"
            f"Fix: Use 'count' to count null scores equal to the observed "
            f"score as extreme, or 'ignore' to count only strictly greater ones."
        )
    return ties
