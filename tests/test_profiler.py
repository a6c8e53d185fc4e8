import pytest
from insightboard.core.errors import NoDataError
from insightboard.core.schemas import ColumnStats, Dataset
from insightboard.services.inference import infer_numeric_columns
from insightboard.services.parser import load_dataset
from insightboard.services.profiler import (
    compute_column_stats,
    compute_data_quality,
    compute_record_totals,
    profile_dataset,
)


@pytest.fixture
def scores_dataset():
    return load_dataset(
        b"Student,Math,Science,Comment\n"
        b"Alice,90,80,great\n"
        b"Bob,70,absent,\n"
        b"Cara,,60,ok\n",
        "scores.csv",
    )


@pytest.mark.unit
def test_column_stats_simple():
    dataset = load_dataset(b"A,B\n1,2\n3,4\n", "data.csv")
    assert infer_numeric_columns(dataset) == ["A", "B"]
    stats = compute_column_stats(dataset, ["A", "B"])
    assert stats["A"] == ColumnStats(count=2, mean=2.0, min=1.0, max=3.0)
    assert stats["B"] == ColumnStats(count=2, mean=3.0, min=2.0, max=4.0)


@pytest.mark.unit
def test_column_stats_skip_text_entries(scores_dataset):
    stats = compute_column_stats(scores_dataset, ["Math", "Science"])
    assert stats["Math"].count == 2
    assert stats["Math"].mean == 80.0
    assert stats["Science"].count == 2
    assert stats["Science"].min == 60.0
    for column_stats in stats.values():
        assert column_stats.min <= column_stats.mean <= column_stats.max


@pytest.mark.unit
def test_column_stats_drop_columns_without_numbers():
    dataset = Dataset(
        records=[{"A": "x", "B": 1.0}, {"A": "", "B": 2.0}],
        columns=["A", "B"],
    )
    stats = compute_column_stats(dataset, ["A", "B"])
    assert list(stats) == ["B"]


@pytest.mark.unit
def test_record_totals_count_text_as_zero(scores_dataset):
    totals = compute_record_totals(scores_dataset, ["Math", "Science"])
    assert totals == [170.0, 70.0, 60.0]


@pytest.mark.unit
def test_record_totals_without_numeric_columns(scores_dataset):
    assert compute_record_totals(scores_dataset, []) == [0.0, 0.0, 0.0]


@pytest.mark.unit
def test_data_quality_all_populated(scores_dataset):
    assert compute_data_quality(scores_dataset) == 100


@pytest.mark.unit
def test_data_quality_counts_blank_records():
    dataset = load_dataset(b"A,B\n1,2\n,\n,\n", "gaps.csv")
    # One of three records populated: 33.33 rounds to 33
    assert compute_data_quality(dataset) == 33


@pytest.mark.unit
def test_data_quality_rounds_half_up():
    records = [{"A": 1.0}] + [{"A": ""}] * 7
    dataset = Dataset(records=records, columns=["A"])
    # 1/8 = 12.5%
    assert compute_data_quality(dataset) == 13


@pytest.mark.unit
def test_data_quality_empty_raises():
    with pytest.raises(NoDataError):
        compute_data_quality(Dataset(records=[], columns=[]))


@pytest.mark.unit
def test_profile_dataset(scores_dataset):
    profile = profile_dataset(scores_dataset, ["Math", "Science"], processing_time="0.12s")
    assert profile.metrics.total_records == 3
    assert profile.metrics.columns == 4
    assert profile.metrics.numeric_columns == 2
    assert profile.metrics.processing_time == "0.12s"
    assert set(profile.stats) == {"Math", "Science"}
    assert len(profile.totals) == 3


@pytest.mark.unit
def test_profile_metrics_serialize_with_camel_case(scores_dataset):
    profile = profile_dataset(scores_dataset, ["Math"])
    dumped = profile.metrics.model_dump(by_alias=True)
    assert dumped == {
        "totalRecords": 3,
        "columns": 4,
        "dataQuality": 100,
        "processingTime": "0.00s",
        "numericColumns": 1,
    }


@pytest.mark.unit
def test_profile_dataset_empty_raises():
    with pytest.raises(NoDataError):
        profile_dataset(Dataset(records=[], columns=["A"]), ["A"])


@pytest.mark.unit
def test_column_stats_mean_does_not_overflow():
    dataset = load_dataset(b"A,B\n1e308,1\n1e308,2\n", "big.csv")
    stats = compute_column_stats(dataset, ["A", "B"])
    assert stats["A"].mean == 1e308
    assert stats["A"].min <= stats["A"].mean <= stats["A"].max
