"""
Orientation analysis for detecting linear corridors.

Decides whether a set of tract centroids lies approximately along a single
line by measuring how much of their spatial variance falls on the first
principal axis.
"""

import numpy as np
import pandas as pd
from typing import Optional, Sequence, Union
import logging

from corridor_model_errors import DegenerateInputError, InvalidInputError
from corridor_model_outcomes import InsufficientData, OrientationResult
from corridor_model_regions import RegionSet, as_points

logger = logging.getLogger(__name__)


class OrientationAnalyzer:
    """
    Principal-axis orientation test.

    Both coordinate axes are standardized before the eigendecomposition.
    """

    def __init__(self, config):
        """
        Initialize orientation analyzer.

        Args:
            config: AnalysisConfig object
        """
        self.config = config
        self.min_points = config.orientation_min_points
        self.linearity_threshold = config.linearity_threshold

        logger.info("Initialized Orientation Analyzer")

    def analyze(
        self,
        points,
        geoids: Optional[Sequence[str]] = None
    ) -> Union[OrientationResult, InsufficientData]:
        """
        Run the orientation test on a set of points.

        Args:
            points: (n, 2) array-like of (longitude, latitude), or a RegionSet
            geoids: Identifiers for the projections table (taken from the
                RegionSet when one is passed)

        Returns:
            OrientationResult, or InsufficientData when there are fewer than
            orientation_min_points points

        Raises:
            DegenerateInputError: If either axis has zero variance
        """
        if isinstance(points, RegionSet) and geoids is None:
            geoids = points.geoids

        coords = as_points(points)
        n = len(coords)

        if n < self.min_points:
            logger.warning(
                f"Insufficient points for orientation analysis ({n} < {self.min_points})"
            )
            return InsufficientData('orientation', n, self.min_points)

        if geoids is None:
            geoids = [str(i) for i in range(n)]
        elif len(geoids) != n:
            raise InvalidInputError(f"Got {len(geoids)} identifiers for {n} points")

        standardized = self.standardize(coords)

        cov = np.cov(standardized.T, bias=True)
        eigenvalues, eigenvectors = np.linalg.eigh(cov)

        # eigh returns ascending eigenvalues
        order = np.argsort(eigenvalues)[::-1]
        eigenvalues = np.clip(eigenvalues[order], 0.0, None)
        eigenvectors = eigenvectors[:, order]

        explained = eigenvalues / eigenvalues.sum()
        projected = standardized @ eigenvectors

        linearity_score = float(explained[0] * 100)
        is_linear = linearity_score >= self.linearity_threshold

        logger.info(f"Orientation analysis on {n} points")
        logger.info(f"  Axis 1 explains {explained[0] * 100:.1f}% of spatial variance")
        logger.info(f"  Axis 2 explains {explained[1] * 100:.1f}% of spatial variance")
        logger.info(f"  Linear corridor detected: {'YES' if is_linear else 'NO'}")

        projections = pd.DataFrame({
            'GEOID': list(geoids),
            'axis1': projected[:, 0],
            'axis2': projected[:, 1],
        })

        return OrientationResult(
            n_points=n,
            explained_variance=(float(explained[0]), float(explained[1])),
            linearity_score=linearity_score,
            linearity_threshold=self.linearity_threshold,
            is_linear=is_linear,
            principal_axes=eigenvectors,
            projections=projections,
        )

    @staticmethod
    def standardize(coords: np.ndarray) -> np.ndarray:
        """
        Scale each axis to zero mean and unit population standard deviation.

        Raises:
            DegenerateInputError: If an axis has zero variance
        """
        spread = np.ptp(coords, axis=0)
        if np.any(spread == 0):
            axes = [name for name, s in zip(['longitude', 'latitude'], spread) if s == 0]
            raise DegenerateInputError(f"Zero variance along {', '.join(axes)}")

        return (coords - coords.mean(axis=0)) / coords.std(axis=0)
