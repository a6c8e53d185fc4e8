"""
Chart dataset builder and Vega-Lite renderer.

This module derives the chart-ready datasets shown on the dashboard and can
render each of them as a Vega-Lite JSON specification with our default theme.
"""
import logging
import math
from typing import Dict, Any, Optional, List, Sequence
from insightboard.core.schemas import (
    BarPoint,
    ChartPoint,
    ChartSpec,
    ColumnStats,
    Dataset,
    is_empty,
)

logger = logging.getLogger(__name__)

# Colorblind-safe categorical palette
CATEGORICAL_PALETTE = [
    '#1f77b4',  # Blue
    '#ff7f0e',  # Orange
    '#2ca02c',  # Green
    '#d62728',  # Red
    '#9467bd',  # Purple
    '#8c564b',  # Brown
    '#e377c2',  # Pink
    '#7f7f7f',  # Gray
    '#bcbd22',  # Yellow-green
    '#17becf'   # Cyan
]


def round_half_up(value: float, digits: int = 2) -> float:
    factor = 10 ** digits
    scaled = value * factor
    if not math.isfinite(scaled):
        # Too large to carry decimals anyway
        return value
    return math.floor(scaled + 0.5) / factor


def format_label(value: Any) -> str:
    """Render a cell as a chart label; whole floats lose their trailing '.0'."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip() if isinstance(value, str) else str(value)


def build_ranking_chart(dataset: Dataset, identifier: Optional[str], totals: Sequence[float]) -> ChartSpec:
    """One slice per record sized by its total; non-positive totals are omitted."""
    data = []
    for index, (record, total) in enumerate(zip(dataset.records, totals)):
        label = record.get(identifier, "") if identifier else ""
        name = format_label(label) if not is_empty(label) else f"Record {index + 1}"
        if total > 0 and math.isfinite(total):
            data.append(ChartPoint(name=name, value=total))
        elif total > 0:
            logger.warning(f"Skipping {name}: total exceeds the float range")

    return ChartSpec(
        chart_type="pie",
        title=f"📊 Total Per {identifier or 'Record'}",
        data=data,
    )


def column_averages(stats: Dict[str, ColumnStats]) -> Dict[str, float]:
    return {col: round_half_up(s.mean) for col, s in stats.items()}


def build_average_chart(stats: Dict[str, ColumnStats]) -> ChartSpec:
    data = [
        ChartPoint(name=col, value=avg)
        for col, avg in column_averages(stats).items()
        if avg > 0
    ]
    return ChartSpec(chart_type="pie", title="📈 Average Per Column", data=data)


def count_categories(dataset: Dataset, category: str) -> Dict[str, int]:
    """Frequency of each non-empty category value, in first-seen order."""
    counts: Dict[str, int] = {}
    for value in dataset.column_values(category):
        if is_empty(value):
            continue
        label = format_label(value)
        counts[label] = counts.get(label, 0) + 1
    return counts


def build_category_chart(dataset: Dataset, category: str) -> ChartSpec:
    data = [
        ChartPoint(name=label, value=count)
        for label, count in count_categories(dataset, category).items()
    ]
    return ChartSpec(chart_type="pie", title=f"🎯 {category} Distribution", data=data)


def build_fallback_bar_chart(stats: Dict[str, ColumnStats]) -> ChartSpec:
    data = [
        BarPoint(subject=col, average=avg)
        for col, avg in column_averages(stats).items()
        if avg > 0
    ]
    return ChartSpec(chart_type="bar", title="📋 Column Performance", data=data)


def build_charts(
    dataset: Dataset,
    identifier: Optional[str],
    stats: Dict[str, ColumnStats],
    totals: Sequence[float],
    category: Optional[str] = None,
) -> List[ChartSpec]:
    """
    Build the dashboard charts in fixed order: ranking, averages, then the
    category distribution when a category column exists, else a bar chart
    of the averages.
    """
    charts = [
        build_ranking_chart(dataset, identifier, totals),
        build_average_chart(stats),
    ]
    if category:
        charts.append(build_category_chart(dataset, category))
    else:
        charts.append(build_fallback_bar_chart(stats))

    logger.debug(f"Built {len(charts)} charts: {[c.title for c in charts]}")
    return charts


def generate_vega_spec(chart: ChartSpec) -> Dict[str, Any]:
    """
    Render a ChartSpec as a Vega-Lite specification with inline data.

    Pie charts become arc marks keyed on name/value; bar charts become bar
    marks keyed on subject/average.
    """
    title = chart.title
    # Truncate very long titles to prevent overflow
    display_title = title if len(title) <= 60 else title[:57] + "..."

    spec: Dict[str, Any] = {
        "$schema": "https://vega.github.io/schema/vega-lite/v6.json",
        "title": {
            "text": display_title,
            "fontSize": 18,
            "anchor": "start",
            "font": "Inter, sans-serif",
            "fontWeight": 600,
            "color": "#111827",
            "limit": 500
        },
        "width": "container",
        "height": 400,
        "config": {
            "font": "Inter, sans-serif",
            "axis": {
                "labelFontSize": 11,
                "titleFontSize": 13,
                "titleColor": "#6b7280",
                "labelColor": "#6b7280",
                "gridColor": "#f3f4f6",
                "labelLimit": 120,
                "domain": False
            },
            "view": {"stroke": "transparent"}
        },
        "data": {"values": [point.model_dump() for point in chart.data]}
    }

    if chart.chart_type == "pie":
        spec["mark"] = {"type": "arc", "innerRadius": 50, "outerRadius": 140}
        spec["encoding"] = {
            "theta": {"field": "value", "type": "quantitative", "stack": True},
            "color": {
                "field": "name",
                "type": "nominal",
                "legend": {"title": None, "orient": "right"},
                "scale": {"range": CATEGORICAL_PALETTE}
            },
            "order": {"field": "value", "sort": "descending"},
            "tooltip": [
                {"field": "name", "type": "nominal"},
                {"field": "value", "type": "quantitative", "format": ","}
            ]
        }
    else:
        spec["mark"] = {
            "type": "bar",
            "cornerRadiusEnd": 6,
            "color": "#2563eb",
            "width": {"band": 0.6}
        }
        spec["encoding"] = {
            "x": {"field": "subject", "type": "nominal", "axis": {"labelAngle": 0}, "sort": "-y"},
            "y": {"field": "average", "type": "quantitative", "title": "Average"},
            "tooltip": [
                {"field": "subject", "type": "nominal"},
                {"field": "average", "type": "quantitative", "format": ",.2f"}
            ]
        }

    return spec
