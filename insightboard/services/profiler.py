import logging
import math
import pandas as pd
from dataclasses import dataclass
from typing import Dict, List, Sequence
from insightboard.core.errors import NoDataError
from insightboard.core.schemas import ColumnStats, Dataset, Metrics, coerce_number, is_empty

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Profile:
    """Aggregation output consumed by the chart builder and insight synthesizer."""
    metrics: Metrics
    stats: Dict[str, ColumnStats]
    totals: List[float]


def numeric_frame(dataset: Dataset, numeric_columns: Sequence[str]) -> pd.DataFrame:
    """
    Coerce the numeric columns into a float DataFrame.
    Entries that don't parse to a finite number become NaN.
    """
    data = {
        col: pd.Series([coerce_number(v) for v in dataset.column_values(col)], dtype='float64')
        for col in numeric_columns
    }
    return pd.DataFrame(data, index=range(dataset.row_count), columns=list(numeric_columns))


def compute_column_stats(dataset: Dataset, numeric_columns: Sequence[str]) -> Dict[str, ColumnStats]:
    """
    Count, mean, min and max per numeric column over finite values only.
    Columns without a single finite value are left out.
    """
    frame = numeric_frame(dataset, numeric_columns)
    stats: Dict[str, ColumnStats] = {}
    for col in frame.columns:
        clean_series = frame[col].dropna()
        if clean_series.empty:
            logger.debug(f"Dropping column {col}: no finite numeric values")
            continue
        mean = float(clean_series.mean())
        if not math.isfinite(mean):
            # The plain sum overflowed; dividing first keeps it within range
            mean = float((clean_series / len(clean_series)).sum())
        stats[col] = ColumnStats(
            count=int(clean_series.count()),
            mean=mean,
            min=float(clean_series.min()),
            max=float(clean_series.max()),
        )
    return stats


def compute_record_totals(dataset: Dataset, numeric_columns: Sequence[str]) -> List[float]:
    """Sum of numeric columns per record, with non-numeric entries counted as 0."""
    if not numeric_columns:
        return [0.0] * dataset.row_count
    frame = numeric_frame(dataset, numeric_columns)
    return [float(total) for total in frame.fillna(0).sum(axis=1)]


def compute_data_quality(dataset: Dataset) -> int:
    """Percentage of records with at least one populated field."""
    if dataset.row_count == 0:
        raise NoDataError("Cannot assess data quality of an empty dataset.")
    populated = sum(
        1 for record in dataset.records
        if any(not is_empty(value) for value in record.values())
    )
    # Half-up rounding, not banker's rounding
    return int(math.floor(100 * populated / dataset.row_count + 0.5))


def profile_dataset(dataset: Dataset, numeric_columns: Sequence[str], processing_time: str = "0.00s") -> Profile:
    """
    Compute dataset metrics, per-column statistics and per-record totals.
    """
    if dataset.row_count == 0:
        raise NoDataError()

    stats = compute_column_stats(dataset, numeric_columns)
    totals = compute_record_totals(dataset, numeric_columns)

    metrics = Metrics(
        total_records=dataset.row_count,
        columns=dataset.col_count,
        data_quality=compute_data_quality(dataset),
        processing_time=processing_time,
        numeric_columns=len(numeric_columns),
    )

    logger.info(
        f"Profiled dataset: {metrics.total_records} rows, {metrics.columns} columns, "
        f"{len(stats)} numeric"
    )
    return Profile(metrics=metrics, stats=stats, totals=totals)
