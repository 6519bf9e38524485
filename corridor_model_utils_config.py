"""
Configuration management for the carless corridor model.

Centralizes analysis thresholds and provides validation. The cut points
are working defaults, not fixed policy.
"""

from dataclasses import dataclass, field, asdict
from typing import List, Optional, Tuple
import yaml
import logging

logger = logging.getLogger(__name__)


def _default_breakpoints() -> List[Tuple[float, str]]:
    return [
        (30.0, "Very High (30%+)"),
        (20.0, "High (20-30%)"),
        (10.0, "Moderate (10-20%)"),
        (5.0, "Low (5-10%)"),
    ]


@dataclass
class AnalysisConfig:
    """
    Configuration for the carless corridor analysis.

    Attributes:
        version: Model version
        vintage: ACS reporting year shared by all regions
        min_sample_size: Minimum households for a tract to enter the model
        category_breakpoints: (lower_bound, label) pairs, highest bound first
        default_category: Label for ratios below every breakpoint
        high_threshold: Zero-vehicle percentage for passes_high
        very_high_threshold: Zero-vehicle percentage for passes_very_high
        orientation_min_points: Fewest points the orientation test accepts
        linearity_threshold: Axis-1 explained variance (%) needed for is_linear
        clustering_min_points: Fewest points the clustering test accepts
        clustering_threshold: Clustering ratio above which is_clustered is set
        correlation_min_sample: Fewest pairs the correlation utility accepts
        correlation_reliable_n: Pairs needed for a correlation to be reported as reliable
        significance_level: p-value cutoff used by the summary narrative
        random_seed: Random seed for synthetic fallback data
    """
    version: str = "1.0.0"
    vintage: int = 2022

    # Classification
    min_sample_size: float = 100
    category_breakpoints: List[Tuple[float, str]] = field(default_factory=_default_breakpoints)
    default_category: str = "Very Low (<5%)"
    high_threshold: float = 20.0
    very_high_threshold: float = 30.0

    # Spatial pattern tests
    orientation_min_points: int = 10
    linearity_threshold: float = 60.0
    clustering_min_points: int = 5
    clustering_threshold: float = 1.2

    # Correlation
    correlation_min_sample: int = 50
    correlation_reliable_n: int = 50
    significance_level: float = 0.05

    # Data paths
    data_dir: str = "data"
    output_dir: str = "outputs"

    random_seed: Optional[int] = None

    def __post_init__(self):
        # YAML hands back lists of lists
        self.category_breakpoints = [
            (float(bound), str(label)) for bound, label in self.category_breakpoints
        ]

    @classmethod
    def from_yaml(cls, yaml_path: str) -> 'AnalysisConfig':
        """Load configuration from YAML file."""
        with open(yaml_path, 'r') as f:
            config_dict = yaml.safe_load(f) or {}
        return cls(**config_dict)

    def to_yaml(self, yaml_path: str):
        """Save configuration to YAML file."""
        config_dict = asdict(self)
        config_dict['category_breakpoints'] = [
            [bound, label] for bound, label in self.category_breakpoints
        ]

        with open(yaml_path, 'w') as f:
            yaml.dump(config_dict, f, default_flow_style=False, sort_keys=False)

    def validate(self) -> bool:
        """Validate configuration parameters."""
        checks = []

        checks.append(self.min_sample_size >= 0)

        # Breakpoints must be strictly descending so buckets never overlap
        bounds = [bound for bound, _ in self.category_breakpoints]
        checks.append(all(a > b for a, b in zip(bounds, bounds[1:])))
        labels = [label for _, label in self.category_breakpoints] + [self.default_category]
        checks.append(len(set(labels)) == len(labels))

        checks.append(0 <= self.high_threshold <= 100)
        checks.append(0 <= self.very_high_threshold <= 100)
        checks.append(0 <= self.linearity_threshold <= 100)
        checks.append(self.clustering_threshold > 0)

        checks.append(self.orientation_min_points >= 2)
        checks.append(self.clustering_min_points >= 2)
        checks.append(self.correlation_min_sample >= 3)
        checks.append(0 < self.significance_level < 1)

        is_valid = all(checks)
        if not is_valid:
            logger.error("Invalid configuration parameters")

        return is_valid
