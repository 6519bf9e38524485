"""
Structured results returned by the spatial pattern analyzers.
"""

from dataclasses import dataclass, field
from typing import Tuple

import numpy as np
import pandas as pd


@dataclass(frozen=True)
class InsufficientData:
    """
    Explicit outcome for an analysis run on too few points.

    This is neither an error nor a negative finding: the analysis was not
    attempted.
    """
    analysis: str
    n_points: int
    min_points: int


@dataclass(frozen=True)
class OrientationResult:
    """
    Principal-axis orientation of a point set.

    Attributes:
        n_points: Number of points analyzed
        explained_variance: Fractions of variance on axis 1 and axis 2
        linearity_score: Axis-1 fraction as a percentage (0-100)
        linearity_threshold: Score needed for is_linear
        is_linear: Whether the points fall along a single line
        principal_axes: 2x2 array, columns are axis 1 and axis 2 directions
            in standardized coordinates (sign is arbitrary)
        projections: GEOID, axis1, axis2 per input point
    """
    n_points: int
    explained_variance: Tuple[float, float]
    linearity_score: float
    linearity_threshold: float
    is_linear: bool
    principal_axes: np.ndarray = field(repr=False, compare=False)
    projections: pd.DataFrame = field(repr=False, compare=False)


@dataclass(frozen=True)
class ClusteringResult:
    """
    Observed vs expected nearest-neighbour spacing of a point set.

    Attributes:
        n_points: Number of points analyzed
        mean_nn_distance: Mean nearest-neighbour distance (degrees)
        expected_nn_distance: CSR expectation over the same bounding box
        bbox_area: Bounding box area (square degrees)
        clustering_ratio: expected / observed
        clustering_threshold: Ratio above which is_clustered is set
        is_clustered: Whether the points are tighter than random
        nn_distances: Per-point nearest-neighbour distances
    """
    n_points: int
    mean_nn_distance: float
    expected_nn_distance: float
    bbox_area: float
    clustering_ratio: float
    clustering_threshold: float
    is_clustered: bool
    nn_distances: np.ndarray = field(repr=False, compare=False)
