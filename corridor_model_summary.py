"""
Summary statistics and hypothesis verdict for the corridor analysis.

Turns the structured results of each step into a plain dictionary and a
list of narrative lines for the reporting script.
"""

import pandas as pd
from typing import Dict, List, Optional, Union
import logging

from corridor_model_correlation import CorrelationResult
from corridor_model_outcomes import ClusteringResult, InsufficientData, OrientationResult
from corridor_model_regions import RegionSet

logger = logging.getLogger(__name__)

DETECTED = "DETECTED"
NOT_DETECTED = "NOT DETECTED"
INSUFFICIENT = "INSUFFICIENT DATA"

SUPPORTED = "SUPPORTED"
PARTIALLY_SUPPORTED = "PARTIALLY SUPPORTED"
NOT_SUPPORTED = "NOT SUPPORTED"


def pattern_status(result: Union[OrientationResult, ClusteringResult, InsufficientData, None]) -> str:
    """Map an analyzer outcome onto DETECTED / NOT DETECTED / INSUFFICIENT DATA."""
    if result is None or isinstance(result, InsufficientData):
        return INSUFFICIENT
    if isinstance(result, OrientationResult):
        return DETECTED if result.is_linear else NOT_DETECTED
    return DETECTED if result.is_clustered else NOT_DETECTED


def hypothesis_verdict(linear_status: str, clustered_status: str) -> str:
    """
    Evaluate the corridor hypothesis.

    A linear pattern supports it; clustering without linearity partially
    supports it.
    """
    if linear_status == DETECTED:
        return SUPPORTED
    if clustered_status == DETECTED:
        return PARTIALLY_SUPPORTED
    if linear_status == INSUFFICIENT and clustered_status == INSUFFICIENT:
        return INSUFFICIENT
    return NOT_SUPPORTED


def summarize(
    region_set: RegionSet,
    category_distribution: pd.DataFrame,
    orientation: Union[OrientationResult, InsufficientData, None],
    clustering: Union[ClusteringResult, InsufficientData, None],
    correlation: Optional[CorrelationResult] = None,
    significance_level: float = 0.05,
    correlation_error: Optional[Exception] = None
) -> Dict:
    """
    Collect the headline numbers of a corridor analysis.

    Args:
        region_set: Classified RegionSet
        category_distribution: Output of MetricClassifier.category_distribution
        orientation: Orientation outcome over the high tracts
        clustering: Clustering outcome over the high tracts
        correlation: Optional ratio vs second-metric correlation
        significance_level: p-value cutoff for reporting the correlation
        correlation_error: Why a requested correlation could not be computed

    Returns:
        Dictionary with counts, pattern statuses, correlation and verdict
    """
    data = region_set.frame

    linear_status = pattern_status(orientation)
    clustered_status = pattern_status(clustering)

    summary = {
        'vintage': region_set.vintage,
        'total_regions': len(data),
        'high_regions': int(data['passes_high'].sum()),
        'very_high_regions': int(data['passes_very_high'].sum()),
        'mean_ratio': float(data['ratio'].mean()) if len(data) else float('nan'),
        'category_distribution': category_distribution.to_dict('records'),
        'linear_pattern': linear_status,
        'linearity_score': (
            orientation.linearity_score if isinstance(orientation, OrientationResult) else None
        ),
        'clustering_pattern': clustered_status,
        'clustering_ratio': (
            clustering.clustering_ratio if isinstance(clustering, ClusteringResult) else None
        ),
        'correlation': None,
        'verdict': hypothesis_verdict(linear_status, clustered_status),
    }

    if correlation is not None:
        summary['correlation'] = {
            'tested': True,
            'r': correlation.r,
            'p_value': correlation.p_value,
            'n': correlation.n,
            'reliable': correlation.reliable,
            'significant': correlation.is_significant(significance_level),
        }
    elif correlation_error is not None:
        summary['correlation'] = {'tested': False, 'reason': str(correlation_error)}

    logger.info(f"Hypothesis verdict: {summary['verdict']}")
    return summary


def format_report(summary: Dict) -> List[str]:
    """Render a summary dictionary as narrative report lines."""
    lines = [
        "=== SUMMARY RESULTS ===",
        f"Total tracts analyzed: {summary['total_regions']}",
        f"High carless tracts: {summary['high_regions']}",
        f"Very high carless tracts: {summary['very_high_regions']}",
        f"Mean zero-vehicle percentage: {summary['mean_ratio']:.1f}%",
        "",
        "Zero-vehicle distribution:",
    ]
    for row in summary['category_distribution']:
        lines.append(f"  {row['category']:<20} {row['n']:>6} ({row['percentage']:.1f}%)")

    lines += ["", "Spatial Pattern Analysis:"]
    lines.append(f"  Linear corridor pattern: {summary['linear_pattern']}")
    if summary['linearity_score'] is not None:
        lines.append(f"  Linearity score: {summary['linearity_score']:.1f}%")
    lines.append(f"  Spatial clustering: {summary['clustering_pattern']}")
    if summary['clustering_ratio'] is not None:
        lines.append(f"  Clustering ratio: {summary['clustering_ratio']:.2f}")

    correlation = summary.get('correlation')
    if correlation is not None:
        lines += ["", "Transit Correlation:"]
        if not correlation['tested']:
            lines.append(f"  Not tested: {correlation['reason']}")
        else:
            lines.append(f"  Correlation: {correlation['r']:.3f} (p = {correlation['p_value']:.3g})")
            if not correlation['significant']:
                lines.append("  Not significant")
            if not correlation['reliable']:
                lines.append(f"  Small sample (n = {correlation['n']}), treat with caution")

    verdict = summary['verdict']
    lines += ["", "HYPOTHESIS EVALUATION:"]
    if verdict == SUPPORTED:
        lines.append("HYPOTHESIS SUPPORTED: Linear corridor patterns detected")
    elif verdict == PARTIALLY_SUPPORTED:
        lines.append("HYPOTHESIS PARTIALLY SUPPORTED: Clustering detected but not linear")
    elif verdict == INSUFFICIENT:
        lines.append("HYPOTHESIS NOT TESTED: Too few high carless tracts for spatial analysis")
    else:
        lines.append("HYPOTHESIS NOT SUPPORTED: No clear corridor patterns")

    return lines
