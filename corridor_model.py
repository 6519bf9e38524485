"""
CARLESS CORRIDORS MODEL
=======================

Tests whether census tracts with a high share of zero-vehicle households
form linear corridors or spatial clusters.

Pipeline:
1. Load tract vehicle availability data
2. Classify tracts by zero-vehicle percentage
3. Orientation test on the high tracts (linear corridor?)
4. Nearest-neighbour test on the high tracts (clustered?)
5. Optional correlation with public transit commuting share
6. Summary and hypothesis verdict

Usage:
    model = CarlessCorridorModel()
    model.load_tract_data(region='Bay_Area')
    results = model.run()
    print(results.summary['verdict'])
"""

from dataclasses import dataclass
import pandas as pd
from typing import Dict, Optional, Union
import logging

from corridor_model_classifier import MetricClassifier
from corridor_model_clustering import ClusteringAnalyzer
from corridor_model_correlation import CorrelationAnalyzer, CorrelationResult
from corridor_model_errors import (
    CorridorModelError,
    DegenerateInputError,
    InsufficientDataError,
    InvalidInputError,
)
from corridor_model_orientation import OrientationAnalyzer
from corridor_model_outcomes import ClusteringResult, InsufficientData, OrientationResult
from corridor_model_regions import RegionSet
from corridor_model_summary import summarize
from corridor_model_utils_config import AnalysisConfig
from corridor_model_utils_data_loader import TractDataLoader

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CorridorAnalysisResults:
    """Everything one run of the model produces."""
    regions: RegionSet
    category_distribution: pd.DataFrame
    orientation: Union[OrientationResult, InsufficientData]
    clustering: Union[ClusteringResult, InsufficientData]
    correlation: Optional[CorrelationResult]
    summary: Dict
    correlation_error: Optional[CorridorModelError] = None


class CarlessCorridorModel:
    """
    Carless corridor analysis pipeline.

    Each step returns its result explicitly; the model keeps only the
    loaded tract data and the result of the last run.
    """

    def __init__(self, config: Optional[AnalysisConfig] = None):
        self.config = config or AnalysisConfig()

        if not self.config.validate():
            raise InvalidInputError("Invalid analysis configuration")

        logger.info("=" * 80)
        logger.info("INITIALIZING CARLESS CORRIDORS MODEL")
        logger.info("=" * 80)

        self.data_loader = TractDataLoader(self.config)
        self.classifier = MetricClassifier(self.config)
        self.orientation_analyzer = OrientationAnalyzer(self.config)
        self.clustering_analyzer = ClusteringAnalyzer(self.config)
        self.correlation_analyzer = CorrelationAnalyzer(self.config)

        self.tract_data: Optional[RegionSet] = None
        self.results: Optional[CorridorAnalysisResults] = None

    def load_tract_data(
        self,
        path: Optional[str] = None,
        region: str = 'Bay_Area'
    ) -> RegionSet:
        """
        Load tract data from a CSV file, or by region name.

        Args:
            path: CSV file with tract counts and centroids
            region: Region name used when no path is given

        Returns:
            Unclassified RegionSet
        """
        if path is not None:
            self.tract_data = self.data_loader.load_from_file(path)
        else:
            self.tract_data = self.data_loader.load_region(region)
        return self.tract_data

    def run(
        self,
        region_set: Optional[RegionSet] = None,
        transit: Optional[pd.DataFrame] = None
    ) -> CorridorAnalysisResults:
        """
        Run the full corridor analysis.

        Args:
            region_set: Raw tract data (defaults to the loaded tract data)
            transit: Optional table with GEOID and transit_pct columns

        Returns:
            CorridorAnalysisResults. A transit correlation that cannot be
            computed (too few joined tracts, or a constant metric) leaves
            correlation as None and is kept as correlation_error.

        Raises:
            DegenerateInputError: If the high tracts have degenerate geometry
            InvalidInputError: If the tract counts are inconsistent
        """
        region_set = region_set if region_set is not None else self.tract_data
        if region_set is None:
            raise InvalidInputError("No tract data loaded")

        try:
            logger.info("\n=== STEP 1: CLASSIFICATION ===")
            classified = self.classifier.classify(region_set)
            distribution = self.classifier.category_distribution(classified)

            logger.info("\n=== STEP 2: CORRIDOR IDENTIFICATION ===")
            high = classified.passing_high()
            logger.info(f"High carless tracts for spatial analysis: {len(high)}")
            orientation = self.orientation_analyzer.analyze(high)

            logger.info("\n=== STEP 3: CLUSTERING ===")
            clustering = self.clustering_analyzer.analyze(high)

            correlation = None
            correlation_error = None
            if transit is not None:
                logger.info("\n=== STEP 4: TRANSIT CORRELATION ===")
                try:
                    correlation = self.correlation_analyzer.correlate_regions(
                        classified, transit, 'transit_pct'
                    )
                except (InsufficientDataError, DegenerateInputError) as e:
                    logger.warning(f"Transit correlation not tested: {e}")
                    correlation_error = e

            summary = summarize(
                classified,
                distribution,
                orientation,
                clustering,
                correlation,
                significance_level=self.config.significance_level,
                correlation_error=correlation_error
            )

        except Exception as e:
            logger.error(f"ERROR during corridor analysis: {e}")
            raise

        self.results = CorridorAnalysisResults(
            regions=classified,
            category_distribution=distribution,
            orientation=orientation,
            clustering=clustering,
            correlation=correlation,
            summary=summary,
            correlation_error=correlation_error,
        )
        return self.results

    def identify_top_tracts(self, top_n: int = 10) -> pd.DataFrame:
        """
        Tracts with the highest zero-vehicle percentage from the last run.

        Args:
            top_n: Number of tracts to return

        Returns:
            DataFrame sorted by ratio, highest first
        """
        if self.results is None:
            raise InvalidInputError("Run the analysis before ranking tracts")

        data = self.results.regions.frame
        return data.nlargest(top_n, 'ratio')[['GEOID', 'total', 'sub', 'ratio', 'category']]
