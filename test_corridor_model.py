"""
End-to-end tests for the carless corridor pipeline, its loader and config.
"""

from pathlib import Path

import numpy as np
import pandas as pd
import pytest

from corridor_model import CarlessCorridorModel
from corridor_model_errors import DegenerateInputError, InsufficientDataError, InvalidInputError
from corridor_model_outcomes import ClusteringResult, InsufficientData, OrientationResult
from corridor_model_regions import RegionSet
from corridor_model_summary import (
    DETECTED,
    INSUFFICIENT,
    NOT_DETECTED,
    NOT_SUPPORTED,
    PARTIALLY_SUPPORTED,
    SUPPORTED,
    format_report,
    hypothesis_verdict,
)
from corridor_model_utils_config import AnalysisConfig
from corridor_model_utils_data_loader import TractDataLoader


def corridor_tracts(n_corridor=15, n_background=45, seed=0):
    """High zero-vehicle tracts on a diagonal line among scattered ordinary tracts."""
    rng = np.random.default_rng(seed)
    records = []
    for i in range(n_corridor):
        wobble = 0.0005 if i % 2 else -0.0005
        records.append({
            'geoid': f"06075{i:06d}", 'total': 1000, 'sub': 250 + 10 * i,
            'longitude': -122.45 + 0.01 * i, 'latitude': 37.70 + 0.01 * i + wobble,
        })
    for j in range(n_background):
        records.append({
            'geoid': f"06081{j:06d}", 'total': 800, 'sub': int(rng.integers(0, 120)),
            'longitude': float(rng.uniform(-122.6, -122.0)),
            'latitude': float(rng.uniform(37.4, 37.9)),
        })
    return RegionSet.from_records(records, vintage=2022)


def test_corridor_detected():
    model = CarlessCorridorModel()

    results = model.run(corridor_tracts())

    assert len(results.regions) == 60
    assert isinstance(results.orientation, OrientationResult)
    assert results.orientation.n_points == 15
    assert results.orientation.is_linear
    assert isinstance(results.clustering, ClusteringResult)
    assert results.summary['high_regions'] == 15
    assert results.summary['linear_pattern'] == DETECTED
    assert results.summary['verdict'] == SUPPORTED
    assert results.correlation is None


def test_too_few_high_tracts_is_insufficient():
    model = CarlessCorridorModel()

    results = model.run(corridor_tracts(n_corridor=3))

    assert isinstance(results.orientation, InsufficientData)
    assert isinstance(results.clustering, InsufficientData)
    assert results.summary['linear_pattern'] == INSUFFICIENT
    assert results.summary['clustering_pattern'] == INSUFFICIENT
    assert results.summary['linearity_score'] is None
    assert results.summary['verdict'] == INSUFFICIENT


def test_degenerate_high_tracts_raise():
    records = [
        {'geoid': f"06075{i:06d}", 'total': 500, 'sub': 200,
         'longitude': -122.41, 'latitude': 37.77}
        for i in range(12)
    ]
    model = CarlessCorridorModel()

    with pytest.raises(DegenerateInputError):
        model.run(RegionSet.from_records(records))


def test_transit_correlation_included():
    model = CarlessCorridorModel()
    region_set = corridor_tracts()
    raw = region_set.frame
    transit = pd.DataFrame({
        'GEOID': raw['GEOID'],
        'transit_pct': raw['sub'] / raw['total'] * 100 * 1.5 + 3,
    })

    results = model.run(region_set, transit=transit)

    assert results.correlation.r == pytest.approx(1.0)
    assert results.summary['correlation']['significant']
    assert results.summary['correlation']['n'] == 60
    assert results.correlation_error is None


def test_small_transit_table_keeps_spatial_results():
    model = CarlessCorridorModel()
    region_set = corridor_tracts()
    raw = region_set.frame.head(20)
    transit = pd.DataFrame({'GEOID': raw['GEOID'], 'transit_pct': np.linspace(5, 40, 20)})

    results = model.run(region_set, transit=transit)

    assert results.orientation.is_linear
    assert results.summary['verdict'] == SUPPORTED
    assert results.correlation is None
    assert isinstance(results.correlation_error, InsufficientDataError)
    assert results.correlation_error.n == 20
    assert results.correlation_error.minimum == 50
    assert not results.summary['correlation']['tested']
    lines = format_report(results.summary)
    assert any(line.startswith("  Not tested:") for line in lines)
    assert lines[-1] == "HYPOTHESIS SUPPORTED: Linear corridor patterns detected"


def test_constant_transit_share_keeps_spatial_results():
    model = CarlessCorridorModel()
    region_set = corridor_tracts()
    transit = pd.DataFrame({'GEOID': region_set.geoids, 'transit_pct': 12.0})

    results = model.run(region_set, transit=transit)

    assert results.orientation.is_linear
    assert isinstance(results.correlation_error, DegenerateInputError)
    assert results.summary['correlation']['tested'] is False


def test_identify_top_tracts():
    model = CarlessCorridorModel()
    model.run(corridor_tracts())

    top = model.identify_top_tracts(top_n=3)

    assert top['GEOID'].tolist() == ['06075000014', '06075000013', '06075000012']
    assert top['ratio'].is_monotonic_decreasing


def test_identify_top_tracts_requires_run():
    with pytest.raises(InvalidInputError):
        CarlessCorridorModel().identify_top_tracts()


def test_run_requires_data():
    with pytest.raises(InvalidInputError):
        CarlessCorridorModel().run()


def test_invalid_config_rejected():
    with pytest.raises(InvalidInputError):
        CarlessCorridorModel(AnalysisConfig(linearity_threshold=150.0))


def test_hypothesis_verdicts():
    assert hypothesis_verdict(DETECTED, NOT_DETECTED) == SUPPORTED
    assert hypothesis_verdict(DETECTED, INSUFFICIENT) == SUPPORTED
    assert hypothesis_verdict(NOT_DETECTED, DETECTED) == PARTIALLY_SUPPORTED
    assert hypothesis_verdict(INSUFFICIENT, DETECTED) == PARTIALLY_SUPPORTED
    assert hypothesis_verdict(NOT_DETECTED, NOT_DETECTED) == NOT_SUPPORTED
    assert hypothesis_verdict(INSUFFICIENT, NOT_DETECTED) == NOT_SUPPORTED
    assert hypothesis_verdict(INSUFFICIENT, INSUFFICIENT) == INSUFFICIENT


def test_format_report_lines():
    results = CarlessCorridorModel().run(corridor_tracts())

    lines = format_report(results.summary)

    assert lines[0] == "=== SUMMARY RESULTS ==="
    assert "Total tracts analyzed: 60" in lines
    assert "  Linear corridor pattern: DETECTED" in lines
    assert lines[-1] == "HYPOTHESIS SUPPORTED: Linear corridor patterns detected"


def test_loader_reads_acs_wide_columns(tmp_path):
    csv_path = tmp_path / "bay_area_tracts.csv"
    pd.DataFrame({
        'GEOID': ['06001400100', '06001400200'],
        'B25044_001E': [1200, 80],
        'B25044_003E': [40, 2],
        'B25044_010E': [200, 10],
        'longitude': [-122.23, -122.25],
        'latitude': [37.87, 37.85],
    }).to_csv(csv_path, index=False)

    loader = TractDataLoader(AnalysisConfig(data_dir=str(tmp_path)))
    region_set = loader.load_region('Bay_Area')

    assert region_set.geoids == ['06001400100', '06001400200']
    assert region_set.vintage == 2022
    first = region_set.regions[0]
    assert first.total == 1200
    assert first.sub == 240


def test_loader_missing_columns(tmp_path):
    csv_path = tmp_path / "tracts.csv"
    pd.DataFrame({'GEOID': ['06001400100'], 'total_households': [100]}).to_csv(csv_path, index=False)

    loader = TractDataLoader(AnalysisConfig())
    with pytest.raises(InvalidInputError):
        loader.load_from_file(str(csv_path))


def test_loader_synthetic_fallback(tmp_path):
    loader = TractDataLoader(AnalysisConfig(data_dir=str(tmp_path), random_seed=1))

    region_set = loader.load_region('Nowhere')

    assert len(region_set) == 200
    assert not region_set.is_classified


def test_synthetic_region_runs_end_to_end(tmp_path):
    model = CarlessCorridorModel(AnalysisConfig(data_dir=str(tmp_path), random_seed=4))
    model.load_tract_data(region='Bay_Area')

    results = model.run()

    assert isinstance(results.orientation, OrientationResult)
    assert results.summary['total_regions'] == len(results.regions)


def test_transit_share_from_acs_counts():
    loader = TractDataLoader(AnalysisConfig())
    raw = pd.DataFrame({
        'GEOID': ['06001400100', '06001400200'],
        'B08301_001E': [400, 0],
        'B08301_010E': [100, 0],
    })

    transit = loader.compute_transit_share(raw)

    assert transit['transit_pct'].iloc[0] == pytest.approx(25.0)
    assert np.isnan(transit['transit_pct'].iloc[1])


def test_save_data(tmp_path):
    loader = TractDataLoader(AnalysisConfig(output_dir=str(tmp_path / "out")))

    path = loader.save_data(pd.DataFrame({'GEOID': ['1'], 'ratio': [12.5]}), "classified.csv")

    assert path.exists()
    assert pd.read_csv(path)['ratio'].tolist() == [12.5]


def test_config_yaml_round_trip(tmp_path):
    config = AnalysisConfig(
        min_sample_size=50,
        category_breakpoints=[(40, "Most"), (15, "Some")],
        default_category="Few",
        clustering_threshold=1.5,
    )
    yaml_path = tmp_path / "config.yaml"

    config.to_yaml(str(yaml_path))
    loaded = AnalysisConfig.from_yaml(str(yaml_path))

    assert loaded == config
    assert loaded.category_breakpoints == [(40.0, "Most"), (15.0, "Some")]


def test_config_validation():
    assert AnalysisConfig().validate()
    assert not AnalysisConfig(category_breakpoints=[(10, "A"), (20, "B")]).validate()
    assert not AnalysisConfig(significance_level=1.5).validate()
    assert not AnalysisConfig(correlation_min_sample=2).validate()


def test_shipped_config_matches_defaults():
    shipped = Path(__file__).parent / "corridor_config.yaml"

    config = AnalysisConfig.from_yaml(str(shipped))

    assert config == AnalysisConfig()
    assert config.validate()
