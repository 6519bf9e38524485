#!/usr/bin/env python3
'''
Carless Corridors Analysis

Classifies census tracts by zero-vehicle household share and tests whether
the high tracts form linear corridors or spatial clusters.

Usage:
    python run_corridor_analysis.py --input data/bay_area_tracts.csv \
        --transit data/bay_area_transit.csv --output-dir outputs

Without --input, data/<region>_tracts.csv is used, falling back to
synthetic data when it does not exist.
'''

import argparse
from pathlib import Path
import logging

from corridor_model import CarlessCorridorModel
from corridor_model_outcomes import OrientationResult
from corridor_model_summary import format_report
from corridor_model_utils_config import AnalysisConfig

# Configure logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


def main():
    parser = argparse.ArgumentParser(description='Carless corridors analysis')
    parser.add_argument('--input', help='Tract CSV with counts and centroids')
    parser.add_argument('--transit', help='Tract CSV with transit commuting data')
    parser.add_argument('--config', help='YAML configuration file')
    parser.add_argument('--region', default='Bay_Area', help='Region name')
    parser.add_argument('--output-dir', default=None, help='Output directory')

    args = parser.parse_args()

    config = AnalysisConfig.from_yaml(args.config) if args.config else AnalysisConfig()
    if args.output_dir:
        config.output_dir = args.output_dir

    logger.info(f"Starting carless corridors analysis for {args.region}")

    model = CarlessCorridorModel(config)
    model.load_tract_data(path=args.input, region=args.region)

    transit = None
    if args.transit:
        transit = model.data_loader.load_transit_file(args.transit)

    results = model.run(transit=transit)

    Path(config.output_dir).mkdir(parents=True, exist_ok=True)
    model.data_loader.save_data(
        results.regions.frame, f"{args.region.lower()}_classified_tracts.csv"
    )
    if isinstance(results.orientation, OrientationResult):
        model.data_loader.save_data(
            results.orientation.projections, f"{args.region.lower()}_corridor_axes.csv"
        )

    print("\n" + "=" * 60)
    print("CARLESS CORRIDORS ANALYSIS")
    print("=" * 60)
    for line in format_report(results.summary):
        print(line)

    print("\nTop 5 Carless Tracts:")
    for _, tract in model.identify_top_tracts(top_n=5).iterrows():
        print(f"  Tract {tract['GEOID']}: {tract['ratio']:.1f}% zero-vehicle ({tract['category']})")

    print("\n" + "=" * 60)
    print("Analysis complete!")
    print("=" * 60)


if __name__ == '__main__':
    main()
