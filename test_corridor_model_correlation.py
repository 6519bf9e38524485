"""
Tests for the Pearson correlation utility.
"""

import numpy as np
import pandas as pd
import pytest

from corridor_model_classifier import MetricClassifier
from corridor_model_correlation import CorrelationAnalyzer
from corridor_model_errors import (
    DegenerateInputError,
    InsufficientDataError,
    InvalidInputError,
)
from corridor_model_regions import RegionSet
from corridor_model_utils_config import AnalysisConfig


def test_perfect_linear_relation():
    analyzer = CorrelationAnalyzer(AnalysisConfig())
    x = np.arange(50, dtype=float)

    result = analyzer.pearson(x, 2 * x + 1)

    assert result.r == pytest.approx(1.0)
    assert result.p_value < 1e-10
    assert result.n == 50
    assert result.reliable
    assert result.is_significant()


def test_negative_relation():
    analyzer = CorrelationAnalyzer(AnalysisConfig())
    x = np.linspace(0, 10, 60)

    result = analyzer.pearson(x, -3 * x + 4, x_label='zero_vehicle', y_label='cars')

    assert result.r == pytest.approx(-1.0)
    assert result.x_label == 'zero_vehicle'
    assert result.y_label == 'cars'


def test_below_default_minimum_raises():
    analyzer = CorrelationAnalyzer(AnalysisConfig())
    x = np.arange(49, dtype=float)

    with pytest.raises(InsufficientDataError) as excinfo:
        analyzer.pearson(x, x ** 2)

    assert excinfo.value.n == 49
    assert excinfo.value.minimum == 50


def test_lower_minimum_reports_unreliable():
    analyzer = CorrelationAnalyzer(AnalysisConfig(correlation_min_sample=3))

    result = analyzer.pearson([1.0, 2.0, 3.5], [2.0, 4.1, 6.9])

    assert result.n == 3
    assert not result.reliable


def test_two_pairs_never_enough():
    analyzer = CorrelationAnalyzer(AnalysisConfig(correlation_min_sample=1))

    with pytest.raises(InsufficientDataError):
        analyzer.pearson([1.0, 2.0], [3.0, 4.0])


def test_missing_pairs_dropped_before_counting():
    analyzer = CorrelationAnalyzer(AnalysisConfig())
    x = np.arange(52, dtype=float)
    y = 2 * x + 1
    x[3] = np.nan
    y[10] = np.nan

    result = analyzer.pearson(x, y)

    assert result.n == 50
    assert result.r == pytest.approx(1.0)


def test_length_mismatch_rejected():
    analyzer = CorrelationAnalyzer(AnalysisConfig())
    with pytest.raises(InvalidInputError):
        analyzer.pearson(np.arange(60), np.arange(59))


def test_constant_sequence_is_degenerate():
    analyzer = CorrelationAnalyzer(AnalysisConfig())
    with pytest.raises(DegenerateInputError):
        analyzer.pearson(np.arange(60), np.full(60, 7.0))


def test_correlate_regions_joins_on_geoid():
    config = AnalysisConfig()
    rng = np.random.default_rng(2)
    n = 70
    totals = rng.integers(200, 2000, n)
    shares = rng.uniform(0.0, 0.5, n)
    region_set = RegionSet.from_records([
        {'geoid': f"0600100{i:04d}", 'total': int(t), 'sub': int(round(t * s)),
         'longitude': -122.0 + i * 0.001, 'latitude': 37.5}
        for i, (t, s) in enumerate(zip(totals, shares))
    ])
    classified = MetricClassifier(config).classify(region_set)

    ratios = classified.frame.set_index('GEOID')['ratio']
    transit = pd.DataFrame({
        'GEOID': ratios.index[:60],
        'transit_pct': ratios.values[:60] * 0.8 + 2.0,
    })

    result = CorrelationAnalyzer(config).correlate_regions(classified, transit, 'transit_pct')

    assert result.n == 60
    assert result.r == pytest.approx(1.0)
    assert result.x_label == 'ratio'
    assert result.y_label == 'transit_pct'
