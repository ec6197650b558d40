"""Shared test fixtures for the circadiankit test suite.

Fixture Naming Convention
=========================

**Timestamp fixtures** follow the pattern:
    {spacing}_{n_days}day_{kind}

Where:
    - spacing: hourly, quarter_hourly, ... (sampling interval)
    - n_days: number of calendar days covered
    - kind: times (DatetimeIndex) or durations (TimedeltaIndex)

**Observation fixtures** describe their circadian profile:
    - flat_observations: identical value at every time point
    - noon_peak_observations: all weight at 12:00 each day
"""

import os

import numpy as np
import pandas as pd
import pytest
from hypothesis import Phase, Verbosity, settings

# =============================================================================
# Hypothesis Configuration for Performance
# =============================================================================
# Register Hypothesis profiles for different testing scenarios:
# - "ci": Fast profile for CI pipelines (fewer examples, no deadline)
# - "dev": Standard development profile (moderate examples)
# - "thorough": Full property testing (many examples, for pre-release)

settings.register_profile(
    "ci",
    max_examples=10,
    deadline=None,  # Disable deadline in CI (variable performance)
    suppress_health_check=[],
    phases=[Phase.explicit, Phase.reuse, Phase.generate],
    verbosity=Verbosity.quiet,
)

settings.register_profile(
    "dev",
    max_examples=25,
    deadline=5000,  # 5 second deadline
    verbosity=Verbosity.normal,
)

settings.register_profile(
    "thorough",
    max_examples=100,
    deadline=None,
    verbosity=Verbosity.verbose,
)

# Load profile based on environment variable (default to "dev")
# Set HYPOTHESIS_PROFILE=ci in CI environments for faster tests
_profile = os.environ.get("HYPOTHESIS_PROFILE", "dev")
settings.load_profile(_profile)

# =============================================================================
# Test Configuration Constants
# =============================================================================
# Use these instead of magic numbers in tests

# Random seeds for reproducibility
DEFAULT_SEED = 42
ALT_SEED_1 = 43
ALT_SEED_2 = 44

# Shuffle counts
SMALL_N_SHUFFLES = 50  # Quick tests
MEDIUM_N_SHUFFLES = 200  # End-to-end significance tests
LARGE_N_SHUFFLES = 1000  # Slow tests

# Tolerance levels for assertions
TIGHT_TOLERANCE = 1e-10
MEDIUM_TOLERANCE = 0.05
LOOSE_TOLERANCE = 0.1

START_DATE = "2024-03-04"


# =============================================================================
# --- Fixtures ---
# =============================================================================
@pytest.fixture
def hourly_3day_times() -> pd.DatetimeIndex:
    """72 hourly timestamps covering three calendar days."""
    return pd.date_range(START_DATE, periods=72, freq="h")


@pytest.fixture
def hourly_3day_durations() -> pd.TimedeltaIndex:
    """72 hourly durations since an epoch, covering three whole days."""
    return pd.to_timedelta(np.arange(72), unit="h")


@pytest.fixture
def quarter_hourly_2day_times() -> pd.DatetimeIndex:
    """192 timestamps every 15 minutes covering two calendar days."""
    return pd.date_range(START_DATE, periods=192, freq="15min")


@pytest.fixture
def flat_observations(hourly_3day_times) -> np.ndarray:
    """Uniform (non-circadian) observations: 1.0 at every hour."""
    return np.ones(len(hourly_3day_times))


@pytest.fixture
def noon_peak_observations(hourly_3day_times) -> np.ndarray:
    """Strongly circadian observations: 10.0 at 12:00 each day, 0 elsewhere."""
    return np.where(hourly_3day_times.hour == 12, 10.0, 0.0)


@pytest.fixture
def trending_observations(hourly_3day_times) -> np.ndarray:
    """Observations whose daily level grows tenfold per day.

    Within each day the profile is a smooth cosine peaking at 15:00.
    """
    rng = np.random.default_rng(DEFAULT_SEED)
    hours = hourly_3day_times.hour.to_numpy()
    day = (hourly_3day_times.normalize() - hourly_3day_times[0]).days.to_numpy()
    profile = 2.0 + np.cos(2 * np.pi * (hours - 15) / 24)
    return profile * 10.0**day + rng.uniform(0.0, 0.01, len(hours))
