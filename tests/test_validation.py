"""Tests for input validation and the error code system."""

from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

from circadiankit.stats.shuffle import ShuffleConfig
from circadiankit.validation import (
    CircadianInputError,
    InvalidArgumentError,
    InvalidModeError,
    InvalidStatError,
    ShapeMismatchError,
    validate_observations,
    validate_positive_int,
    validate_shuffle_mode,
    validate_stat,
    validate_ties,
)


class TestErrorHierarchy:
    """Input errors are ValueErrors so generic handlers keep working."""

    @pytest.mark.parametrize(
        "error_cls",
        [ShapeMismatchError, InvalidArgumentError, InvalidModeError, InvalidStatError],
    )
    def test_subclasses_value_error(self, error_cls):
        assert issubclass(error_cls, CircadianInputError)
        assert issubclass(error_cls, ValueError)


class TestValidateObservations:
    def test_returns_float_copy(self):
        values = [1, 2, 3]
        result = validate_observations(values, 3)
        assert result.dtype == np.float64
        np.testing.assert_array_equal(result, [1.0, 2.0, 3.0])

    def test_e2001_length_mismatch(self):
        with pytest.raises(ShapeMismatchError, match=r"\[E2001\]") as exc_info:
            validate_observations(np.ones(5), 4)
        assert "time_points: 4" in str(exc_info.value)
        assert "observations: 5" in str(exc_info.value)

    def test_e2001_not_1d(self):
        with pytest.raises(ShapeMismatchError, match=r"\[E2001\].*1-D"):
            validate_observations(np.ones((2, 2)), 4)

    def test_empty_is_valid(self):
        assert len(validate_observations([], 0)) == 0


class TestValidatePositiveInt:
    @pytest.mark.parametrize("value", [1, 10, np.int64(1000)])
    def test_accepts_positive(self, value):
        assert validate_positive_int(value, "n_shuffles") == int(value)

    @pytest.mark.parametrize("value", [0, -1, -1000])
    def test_e2002_non_positive(self, value):
        with pytest.raises(InvalidArgumentError, match=r"\[E2002\] n_shuffles"):
            validate_positive_int(value, "n_shuffles")

    @pytest.mark.parametrize("value", [1.5, "10", None, True])
    def test_e2002_non_integer(self, value):
        with pytest.raises(InvalidArgumentError, match=r"\[E2002\]") as exc_info:
            validate_positive_int(value, "n_shuffles")
        assert "Fix:" in str(exc_info.value)


class TestValidateEnums:
    @pytest.mark.parametrize("mode", ["complete", "circshift"])
    def test_valid_modes(self, mode):
        assert validate_shuffle_mode(mode) == mode

    @pytest.mark.parametrize("mode", ["Complete", "circular", "", None])
    def test_e2003_invalid_mode(self, mode):
        with pytest.raises(InvalidModeError, match=r"\[E2003\]"):
            validate_shuffle_mode(mode)

    @pytest.mark.parametrize("stat", ["mean", "median"])
    def test_valid_stats(self, stat):
        assert validate_stat(stat) == stat

    @pytest.mark.parametrize("stat", ["average", "max", None])
    def test_e2004_invalid_stat(self, stat):
        with pytest.raises(InvalidStatError, match=r"\[E2004\]"):
            validate_stat(stat)

    @pytest.mark.parametrize("ties", ["count", "ignore"])
    def test_valid_ties(self, ties):
        assert validate_ties(ties) == ties

    @pytest.mark.parametrize("ties", ["strict", "greater", None])
    def test_e2002_invalid_ties(self, ties):
        with pytest.raises(InvalidArgumentError, match=r"\[E2002\] ties") as exc_info:
            validate_ties(ties)
        assert "Fix:" in str(exc_info.value)


class TestShuffleConfig:
    def test_defaults(self):
        config = ShuffleConfig()
        assert config.n_shuffles == 1000
        assert config.shuffle_mode == "complete"
        assert config.detrend is False
        assert config.stat == "mean"
        assert config.n_workers == 1

    def test_invalid_stat_ignored_without_detrend(self):
        config = ShuffleConfig(stat="mode", detrend=False)
        assert config.stat == "mode"

    def test_invalid_stat_rejected_with_detrend(self):
        with pytest.raises(InvalidStatError):
            ShuffleConfig(stat="mode", detrend=True)

    def test_invalid_workers(self):
        with pytest.raises(InvalidArgumentError, match="n_workers"):
            ShuffleConfig(n_workers=0)

    def test_frozen(self):
        config = ShuffleConfig()
        with pytest.raises(AttributeError):
            config.n_shuffles = 5  # type: ignore[misc]


class TestTimestampErrors:
    """E2005 / E2006 are raised while normalising timestamps."""

    def test_e2005_numeric_timestamps(self):
        from circadiankit.timebase import as_time_index

        with pytest.raises(TypeError, match=r"\[E2005\]"):
            as_time_index(np.arange(10.0))

    def test_e2006_nat(self):
        from circadiankit.timebase import as_time_index

        times = pd.DatetimeIndex(["2024-01-01 10:00", pd.NaT])
        with pytest.raises(ValueError, match=r"\[E2006\].*1 missing"):
            as_time_index(times)
