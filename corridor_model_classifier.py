"""
Metric classifier for zero-vehicle household prevalence.

Computes the zero-vehicle percentage for each census tract, drops tracts
below the minimum sample floor, and buckets the rest into ordered
prevalence categories with two independent threshold flags.
"""

import numpy as np
import pandas as pd
from typing import Dict, List
import logging

from corridor_model_errors import InvalidInputError
from corridor_model_regions import RegionSet

logger = logging.getLogger(__name__)


class MetricClassifier:
    """
    Ratio metric classifier.

    Breakpoints are evaluated top-down and the first bucket whose lower
    bound the ratio reaches wins, so every valid ratio lands in exactly one
    category.
    """

    def __init__(self, config):
        """
        Initialize metric classifier.

        Args:
            config: AnalysisConfig object
        """
        self.config = config

        bounds = [bound for bound, _ in config.category_breakpoints]
        if any(a <= b for a, b in zip(bounds, bounds[1:])):
            raise InvalidInputError(
                f"Category breakpoints must be strictly descending: {bounds}"
            )

        self.breakpoints = list(config.category_breakpoints)
        self.default_category = config.default_category

        logger.info("Initialized Metric Classifier")

    @property
    def category_order(self) -> List[str]:
        """Category labels from lowest to highest."""
        return [self.default_category] + [label for _, label in reversed(self.breakpoints)]

    def classify(self, region_set: RegionSet) -> RegionSet:
        """
        Compute ratio, category and threshold flags for every usable region.

        Args:
            region_set: Raw RegionSet with total and sub counts

        Returns:
            New RegionSet holding only regions with total >= min_sample_size,
            with ratio, category, passes_high and passes_very_high columns

        Raises:
            InvalidInputError: If a count is missing, negative, or the
                sub-count exceeds the total
        """
        data = region_set.frame
        self._validate_counts(data)

        total = data['total'].astype(float)
        keep = (total >= self.config.min_sample_size) & (total > 0)
        dropped = int((~keep).sum())
        if dropped:
            logger.warning(
                f"Dropped {dropped} regions below minimum sample size "
                f"({self.config.min_sample_size})"
            )

        data = data[keep].reset_index(drop=True)
        data['ratio'] = data['sub'].astype(float) / data['total'].astype(float) * 100
        data['category'] = pd.Categorical(
            self.assign_categories(data['ratio']),
            categories=self.category_order,
            ordered=True
        )
        data['passes_high'] = data['ratio'] >= self.config.high_threshold
        data['passes_very_high'] = data['ratio'] >= self.config.very_high_threshold

        logger.info(f"Classified {len(data)} regions")
        if len(data) > 0:
            logger.info(f"  Mean ratio: {data['ratio'].mean():.1f}%")
            logger.info(f"  Passing high threshold: {int(data['passes_high'].sum())}")
            logger.info(f"  Passing very high threshold: {int(data['passes_very_high'].sum())}")

        return RegionSet(data, vintage=region_set.vintage)

    def assign_categories(self, ratios: pd.Series) -> np.ndarray:
        """Map ratios onto category labels, first matching breakpoint wins."""
        ratios = np.asarray(ratios, dtype=float)
        if len(self.breakpoints) == 0:
            return np.full(ratios.shape, self.default_category, dtype=object)

        conditions = [ratios >= bound for bound, _ in self.breakpoints]
        labels = [label for _, label in self.breakpoints]
        return np.select(conditions, labels, default=self.default_category).astype(object)

    def category_for(self, ratio: float) -> str:
        """Category label for a single ratio."""
        for bound, label in self.breakpoints:
            if ratio >= bound:
                return label
        return self.default_category

    def category_distribution(self, region_set: RegionSet) -> pd.DataFrame:
        """
        Count and share of regions per category.

        Args:
            region_set: Classified RegionSet

        Returns:
            DataFrame with category, n and percentage columns, most common first
        """
        if not region_set.is_classified:
            raise InvalidInputError("RegionSet has not been classified")

        counts = region_set.frame['category'].value_counts(sort=False)
        counts = counts[counts > 0].sort_values(ascending=False, kind='stable')
        total = counts.sum()

        distribution = pd.DataFrame({
            'category': counts.index.astype(str),
            'n': counts.values.astype(int),
        })
        distribution['percentage'] = (
            (distribution['n'] / total * 100).round(1) if total > 0 else 0.0
        )
        return distribution

    def threshold_counts(self, region_set: RegionSet) -> Dict[str, int]:
        """Number of regions passing each threshold."""
        data = region_set.frame
        return {
            'high': int(data['passes_high'].sum()),
            'very_high': int(data['passes_very_high'].sum()),
        }

    def _validate_counts(self, data: pd.DataFrame):
        """Check counts are present, numeric, non-negative and consistent."""
        for col in ['total', 'sub']:
            values = pd.to_numeric(data[col], errors='coerce')
            bad = data.loc[values.isna(), 'GEOID'].tolist()
            if bad:
                raise InvalidInputError(f"Missing or non-numeric '{col}' for regions: {bad[:5]}")
            data[col] = values

        negative = data.loc[(data['total'] < 0) | (data['sub'] < 0), 'GEOID'].tolist()
        if negative:
            raise InvalidInputError(f"Negative counts for regions: {negative[:5]}")

        excess = data.loc[data['sub'] > data['total'], 'GEOID'].tolist()
        if excess:
            raise InvalidInputError(f"Sub-count exceeds total for regions: {excess[:5]}")
