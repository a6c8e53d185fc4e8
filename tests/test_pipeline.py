"""
End-to-end tests of the analysis pipeline, without HTTP.
"""
import re
import pytest
from insightboard.core.errors import NoDataError, UnsupportedFormatError
from insightboard.services.pipeline import analyze_file, analyze_sample, format_duration


@pytest.mark.unit
def test_format_duration():
    assert format_duration(0.1234) == "0.12s"
    assert format_duration(2) == "2.00s"


@pytest.mark.integration
def test_analyze_student_grades_sample():
    result = analyze_sample("student_grades")

    assert result.filename == "student_grades.csv"
    assert result.metrics.total_records == 7
    assert result.metrics.columns == 6
    assert result.metrics.numeric_columns == 4
    assert result.metrics.data_quality == 100
    assert re.fullmatch(r"\d+\.\d{2}s", result.metrics.processing_time)

    titles = [c.title for c in result.charts]
    assert titles == ["📊 Total Per Student", "📈 Average Per Column", "🎯 Grade Distribution"]

    ranking = result.charts[0]
    assert ranking.data[0].name == "Alice Johnson"
    assert ranking.data[0].value == 85 + 92 + 78 + 82

    grades = {p.name: p.value for p in result.charts[2].data}
    assert grades == {"A": 4, "B": 3}

    assert result.summary.shape == [7, 6]
    assert result.summary.description["Science"].max == 96.0
    assert result.insights[0].description.startswith("Science shows the highest average value")


@pytest.mark.integration
def test_analyze_sales_sample_without_category():
    result = analyze_sample("sales_analytics")
    assert result.charts[0].title == "📊 Total Per Product"
    assert result.charts[2].chart_type == "bar"
    assert [p.subject for p in result.charts[2].data] == ["Q1_Sales", "Q2_Sales", "Q3_Sales", "Q4_Sales"]


@pytest.mark.integration
def test_analyze_file_csv():
    result = analyze_file(b"A,B\n1,2\n3,4\n", "data.csv")
    assert result.raw_data == [{"A": 1.0, "B": 2.0}, {"A": 3.0, "B": 4.0}]
    assert result.summary.description["A"].mean == 2.0
    assert result.metrics.data_quality == 100
    # Identifier falls back to the first column
    assert [p.name for p in result.charts[0].data] == ["1", "3"]
    assert all(c.vega is None for c in result.charts)


@pytest.mark.integration
def test_analyze_file_all_text():
    result = analyze_file(b"Name,City\nAlice,Paris\nBob,Rome\n", "people.csv")
    assert result.metrics.numeric_columns == 0
    assert result.summary.description == {}
    assert result.charts[0].data == []
    assert [i.title for i in result.insights] == ["Data Quality Assessment", "Processing Efficiency"]


@pytest.mark.integration
def test_analyze_file_with_vega():
    result = analyze_file(b'[{"Student": "A", "Score": 3}, {"Student": "B", "Score": 5}]', "s.json", include_vega=True)
    assert all(c.vega is not None for c in result.charts)
    assert result.charts[0].vega["mark"]["type"] == "arc"
    assert result.charts[2].vega["mark"]["type"] == "bar"


@pytest.mark.integration
def test_analyze_file_serializes_camel_case():
    dumped = analyze_file(b"A\n1\n", "a.csv").model_dump(by_alias=True)
    assert "rawData" in dumped
    assert "totalRecords" in dumped["metrics"]
    assert dumped["charts"][0]["type"] == "pie"


@pytest.mark.integration
def test_analyze_file_errors():
    with pytest.raises(NoDataError):
        analyze_file(b"A,B\n", "a.csv")
    with pytest.raises(UnsupportedFormatError):
        analyze_file(b"A,B\n1,2\n", "a.xlsx")


@pytest.mark.integration
def test_analyze_file_with_values_near_float_limit():
    result = analyze_file(b"A\n1e307\n", "big.csv")
    assert result.charts[1].data[0].value == 1e307

    result = analyze_file(b"A,B\n1e308,1e308\n", "big.csv")
    # Row total overflows, so the ranking chart leaves it out
    assert result.charts[0].data == []
    assert result.summary.description["A"].mean == 1e308
