import logging
import time
from typing import Optional, Union
from insightboard.core.performance import track_performance
from insightboard.core.sanitization import sanitize_filename, sanitize_for_logging
from insightboard.core.schemas import AnalysisResult, Dataset, DatasetSummary
from insightboard.services.parser import load_dataset
from insightboard.services.inference import (
    find_category_column,
    find_identifier_column,
    infer_numeric_columns,
)
from insightboard.services.profiler import profile_dataset
from insightboard.services.generator import build_charts, generate_vega_spec
from insightboard.services.insights import generate_insights, generate_recommendations
from insightboard.services.samples import get_sample, load_sample

logger = logging.getLogger(__name__)


def format_duration(seconds: float) -> str:
    return f"{seconds:.2f}s"


@track_performance("analyze_dataset")
def analyze_dataset(
    dataset: Dataset,
    filename: str,
    include_vega: bool = False,
    started_at: Optional[float] = None,
) -> AnalysisResult:
    """
    Run inference, aggregation, chart building and insight rules over a dataset.

    Args:
        dataset: Parsed dataset, must be non-empty
        filename: Display name of the source
        include_vega: Attach a Vega-Lite spec to every chart
        started_at: perf_counter() value when loading began, so the reported
            processing time covers parsing too
    """
    start = time.perf_counter() if started_at is None else started_at

    numeric_columns = infer_numeric_columns(dataset)
    identifier = find_identifier_column(dataset.columns)
    category = find_category_column(dataset.columns)
    logger.debug(f"Identifier column: {identifier}, category column: {category}")

    profile = profile_dataset(
        dataset,
        numeric_columns,
        processing_time=format_duration(time.perf_counter() - start),
    )

    charts = build_charts(dataset, identifier, profile.stats, profile.totals, category)
    if include_vega:
        charts = [chart.model_copy(update={"vega": generate_vega_spec(chart)}) for chart in charts]

    insights = generate_insights(profile.metrics, profile.stats, charts)
    recommendations = generate_recommendations(profile.metrics, profile.stats)

    logger.info(
        f"Analyzed {sanitize_for_logging(filename)}: {len(charts)} charts, {len(insights)} insights"
    )

    return AnalysisResult(
        filename=filename,
        raw_data=[dict(record) for record in dataset.records],
        metrics=profile.metrics,
        charts=charts,
        summary=DatasetSummary(
            columns=list(dataset.columns),
            shape=[dataset.row_count, dataset.col_count],
            description=profile.stats,
        ),
        insights=insights,
        recommendations=recommendations,
    )


def analyze_file(content: Union[bytes, str], filename: str, include_vega: bool = False) -> AnalysisResult:
    """Load file content and analyze it."""
    start = time.perf_counter()
    dataset = load_dataset(content, filename)
    return analyze_dataset(dataset, sanitize_filename(filename), include_vega=include_vega, started_at=start)


def analyze_sample(name: str, include_vega: bool = False) -> AnalysisResult:
    sample = get_sample(name)
    return analyze_dataset(load_sample(name), sample["filename"], include_vega=include_vega)
