"""
Nearest-neighbour clustering test for high zero-vehicle tracts.

Compares the observed mean nearest-neighbour distance with the distance
expected under complete spatial randomness over the same bounding box.

Distances are planar in degree space (longitude, latitude), not geodesic.
"""

import numpy as np
from typing import Union
import logging

from scipy.spatial.distance import cdist

from corridor_model_errors import DegenerateInputError
from corridor_model_outcomes import ClusteringResult, InsufficientData
from corridor_model_regions import as_points

logger = logging.getLogger(__name__)


class ClusteringAnalyzer:
    """
    Expected-to-observed nearest-neighbour ratio.

    Ratios above 1 mean points sit closer to their neighbours than a random
    scatter over the same area would.
    """

    def __init__(self, config):
        """
        Initialize clustering analyzer.

        Args:
            config: AnalysisConfig object
        """
        self.config = config
        self.min_points = config.clustering_min_points
        self.clustering_threshold = config.clustering_threshold

        logger.info("Initialized Clustering Analyzer")

    def analyze(self, points) -> Union[ClusteringResult, InsufficientData]:
        """
        Run the clustering test on a set of points.

        Args:
            points: (n, 2) array-like of (longitude, latitude), or a RegionSet

        Returns:
            ClusteringResult, or InsufficientData when there are fewer than
            clustering_min_points points

        Raises:
            DegenerateInputError: If the bounding box has zero area
        """
        coords = as_points(points)
        n = len(coords)

        if n < self.min_points:
            logger.warning(
                f"Insufficient points for clustering analysis ({n} < {self.min_points})"
            )
            return InsufficientData('clustering', n, self.min_points)

        width, height = np.ptp(coords, axis=0)
        bbox_area = float(width * height)
        if bbox_area == 0:
            raise DegenerateInputError("Bounding box of points has zero area")

        nn_distances = self.nearest_neighbor_distances(coords)
        mean_nn_distance = float(np.mean(nn_distances))

        # Clark-Evans expectation: 0.5 / sqrt(n / A)
        expected_nn_distance = float(0.5 * np.sqrt(bbox_area / n))

        clustering_ratio = expected_nn_distance / mean_nn_distance
        is_clustered = clustering_ratio > self.clustering_threshold

        logger.info(f"Clustering analysis on {n} points")
        logger.info(f"  Average nearest neighbor distance: {mean_nn_distance:.4f} degrees")
        logger.info(f"  Expected under randomness: {expected_nn_distance:.4f} degrees")
        logger.info(f"  Clustering ratio (>1 = clustered): {clustering_ratio:.2f}")
        logger.info(f"  Spatial clustering detected: {'YES' if is_clustered else 'NO'}")

        return ClusteringResult(
            n_points=n,
            mean_nn_distance=mean_nn_distance,
            expected_nn_distance=expected_nn_distance,
            bbox_area=bbox_area,
            clustering_ratio=float(clustering_ratio),
            clustering_threshold=self.clustering_threshold,
            is_clustered=bool(is_clustered),
            nn_distances=nn_distances,
        )

    @staticmethod
    def nearest_neighbor_distances(coords: np.ndarray) -> np.ndarray:
        """
        Minimum positive distance from each point to any other point.

        Coincident points (distance 0) are skipped, as is the point itself.
        """
        distances = cdist(coords, coords)
        distances[distances <= 0] = np.inf
        nn = distances.min(axis=1)

        if np.isinf(nn).any():
            raise DegenerateInputError("All points share the same location")
        return nn
