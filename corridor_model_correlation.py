"""
Pearson correlation utility.

Used to test the zero-vehicle percentage against a second tract metric,
such as the share of commuters using public transit.
"""

from dataclasses import dataclass
import numpy as np
import pandas as pd
from typing import Sequence
import logging

from scipy.stats import pearsonr

from corridor_model_errors import (
    DegenerateInputError,
    InsufficientDataError,
    InvalidInputError,
)
from corridor_model_regions import RegionSet

logger = logging.getLogger(__name__)

# Correlation is undefined below three pairs whatever the configuration says
ABSOLUTE_MIN_PAIRS = 3


@dataclass(frozen=True)
class CorrelationResult:
    """Pearson coefficient with its two-sided p-value."""
    r: float
    p_value: float
    n: int
    reliable: bool
    x_label: str = 'x'
    y_label: str = 'y'

    def is_significant(self, alpha: float = 0.05) -> bool:
        return self.p_value < alpha


class CorrelationAnalyzer:
    """
    Pearson correlation component.

    Pairs with a missing value on either side are dropped before the sample
    size check.
    """

    def __init__(self, config):
        """
        Initialize correlation analyzer.

        Args:
            config: AnalysisConfig object
        """
        self.config = config
        self.min_pairs = max(ABSOLUTE_MIN_PAIRS, config.correlation_min_sample)
        self.reliable_n = config.correlation_reliable_n

        logger.info("Initialized Correlation Analyzer")

    def pearson(
        self,
        x: Sequence[float],
        y: Sequence[float],
        x_label: str = 'x',
        y_label: str = 'y'
    ) -> CorrelationResult:
        """
        Compute the Pearson correlation between two equal-length sequences.

        Args:
            x: First numeric sequence
            y: Second numeric sequence
            x_label: Name of the first variable, for reporting
            y_label: Name of the second variable, for reporting

        Returns:
            CorrelationResult with r, two-sided p-value and sample size

        Raises:
            InvalidInputError: If the sequences differ in length
            InsufficientDataError: If fewer than the minimum pairs remain
            DegenerateInputError: If either sequence is constant
        """
        x_arr = np.asarray(x, dtype=float)
        y_arr = np.asarray(y, dtype=float)

        if x_arr.shape != y_arr.shape or x_arr.ndim != 1:
            raise InvalidInputError(
                f"Sequences must be one-dimensional and equal length "
                f"(got {x_arr.shape} and {y_arr.shape})"
            )

        complete = ~(np.isnan(x_arr) | np.isnan(y_arr))
        x_arr = x_arr[complete]
        y_arr = y_arr[complete]
        n = len(x_arr)

        if n < self.min_pairs:
            raise InsufficientDataError(
                f"Correlation of {x_label} vs {y_label} needs at least "
                f"{self.min_pairs} pairs, got {n}",
                n=n,
                minimum=self.min_pairs
            )

        if np.ptp(x_arr) == 0 or np.ptp(y_arr) == 0:
            raise DegenerateInputError(
                f"Correlation of {x_label} vs {y_label} undefined - one variable has no variance"
            )

        r, p_value = pearsonr(x_arr, y_arr)

        result = CorrelationResult(
            r=float(r),
            p_value=float(p_value),
            n=n,
            reliable=n >= self.reliable_n,
            x_label=x_label,
            y_label=y_label
        )

        logger.info(f"Correlation: {x_label} vs. {y_label}")
        logger.info(f"  Correlation coefficient: {result.r:.3f}")
        logger.info(f"  P-value: {result.p_value:.3g} (n = {n})")

        return result

    def correlate_regions(
        self,
        region_set: RegionSet,
        other: pd.DataFrame,
        column: str
    ) -> CorrelationResult:
        """
        Correlate each region's ratio with a metric from a second tract table.

        Args:
            region_set: Classified RegionSet
            other: DataFrame with GEOID and the metric column
            column: Name of the metric column in other

        Returns:
            CorrelationResult for ratio vs column over the joined tracts
        """
        if not region_set.is_classified:
            raise InvalidInputError("RegionSet has not been classified")
        if 'GEOID' not in other.columns or column not in other.columns:
            raise InvalidInputError(f"Second table needs GEOID and '{column}' columns")

        other = other[['GEOID', column]].copy()
        other['GEOID'] = other['GEOID'].astype(str)

        joined = region_set.frame[['GEOID', 'ratio']].merge(other, on='GEOID', how='inner')
        joined = joined.dropna(subset=['ratio', column])
        logger.info(f"Joined {len(joined)} regions with '{column}'")

        return self.pearson(
            joined['ratio'].to_numpy(),
            pd.to_numeric(joined[column], errors='coerce').to_numpy(),
            x_label='ratio',
            y_label=column
        )
