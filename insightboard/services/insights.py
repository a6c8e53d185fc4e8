"""
Rule-based natural language insights and recommendations.

Insights are produced from the aggregation output by a fixed, ordered set of
rules; each carries an impact rating and a confidence score.
"""
import logging
import numpy as np
from typing import List, Dict, Optional, Sequence
from insightboard.core.config import get_settings
from insightboard.core.schemas import ChartPoint, ChartSpec, ColumnStats, Insight, Metrics

logger = logging.getLogger(__name__)


def find_top_performer(stats: Dict[str, ColumnStats]) -> Optional[Insight]:
    """Numeric column with the highest mean; ties go to the first column."""
    if not stats:
        return None

    top_field = max(stats, key=lambda col: stats[col].mean)
    top_mean = stats[top_field].mean
    return Insight(
        insight_type="trend",
        icon="📈",
        title="Top Performer",
        description=f"{top_field} shows the highest average value ({top_mean:.2f})",
        impact="positive",
        confidence=92,
    )


def assess_data_quality(metrics: Metrics, threshold: Optional[int] = None) -> Insight:
    threshold = get_settings().quality_threshold if threshold is None else threshold
    return Insight(
        insight_type="quality",
        icon="🎯",
        title="Data Quality Assessment",
        description=f"{metrics.data_quality}% data completeness with {metrics.total_records} records analyzed",
        impact="positive" if metrics.data_quality > threshold else "neutral",
        confidence=95,
    )


def detect_outliers(values: Sequence[float], factor: Optional[float] = None) -> List[float]:
    """
    Values exceeding `factor` times the mean of all values.

    Returns:
        The outlying values, in input order
    """
    if len(values) == 0:
        return []
    factor = get_settings().outlier_factor if factor is None else factor
    # Divide before summing so values near the float limit don't overflow
    mean = float(np.sum(np.asarray(values, dtype='float64') / len(values)))
    threshold = mean * factor
    return [v for v in values if v > threshold]


def find_outliers(stats: Dict[str, ColumnStats], charts: Sequence[ChartSpec]) -> Optional[Insight]:
    if not stats or not charts or not charts[0].data:
        return None

    values = [point.value for point in charts[0].data if isinstance(point, ChartPoint)]
    outliers = detect_outliers(values)
    if not outliers:
        return None

    return Insight(
        insight_type="alert",
        icon="⚠️",
        title="Performance Outliers",
        description=f"{len(outliers)} entries show significantly higher values than average",
        impact="neutral",
        confidence=88,
    )


def describe_processing(metrics: Metrics) -> Insight:
    return Insight(
        insight_type="performance",
        icon="⚡",
        title="Processing Efficiency",
        description=f"Data processed in {metrics.processing_time} with {metrics.columns} columns analyzed",
        impact="positive",
        confidence=100,
    )


def generate_insights(
    metrics: Metrics,
    stats: Dict[str, ColumnStats],
    charts: Sequence[ChartSpec],
) -> List[Insight]:
    """
    Apply the insight rules in order: top performer, data quality,
    outliers in the first chart, processing efficiency.
    """
    insights: List[Insight] = []

    top = find_top_performer(stats)
    if top:
        insights.append(top)

    insights.append(assess_data_quality(metrics))

    outliers = find_outliers(stats, charts)
    if outliers:
        insights.append(outliers)

    insights.append(describe_processing(metrics))

    logger.debug(f"Generated {len(insights)} insights")
    return insights


def generate_recommendations(metrics: Metrics, stats: Dict[str, ColumnStats]) -> List[str]:
    recommendations = []

    if stats:
        recommendations.append("🎯 Focus on top-performing metrics for strategic decisions")
        recommendations.append("📊 Consider creating trend analysis for time-series patterns")

    if metrics.data_quality < get_settings().quality_threshold:
        recommendations.append("🔧 Improve data collection processes to enhance quality")

    recommendations.append("📈 Export charts for presentation materials")
    recommendations.append("💡 Set up automated reporting for regular insights")

    return recommendations
