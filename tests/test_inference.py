"""
Unit tests for column type and role inference.
"""
import pytest
from insightboard.core.schemas import Dataset
from insightboard.services.inference import (
    ColumnRule,
    find_category_column,
    find_column,
    find_identifier_column,
    get_numeric_policy,
    infer_numeric_columns,
    majority_policy,
    permissive_policy,
)


@pytest.fixture
def mixed_dataset():
    """Dataset with a clean numeric column, a mixed one and a text one."""
    records = [
        {"Name": "Alice", "Score": 90.0, "Notes": "ok", "Mixed": "n/a"},
        {"Name": "Bob", "Score": 75.0, "Notes": "", "Mixed": "n/a"},
        {"Name": "Cara", "Score": "", "Notes": "late", "Mixed": " 12 "},
    ]
    return Dataset(records=records, columns=["Name", "Score", "Notes", "Mixed"])


@pytest.mark.unit
def test_infer_numeric_columns_permissive(mixed_dataset):
    """One numeric-looking entry is enough to make a column numeric."""
    assert infer_numeric_columns(mixed_dataset, permissive_policy) == ["Score", "Mixed"]


@pytest.mark.unit
def test_infer_numeric_columns_majority(mixed_dataset):
    assert infer_numeric_columns(mixed_dataset, majority_policy) == ["Score"]


@pytest.mark.unit
def test_infer_numeric_columns_is_stable(mixed_dataset):
    first = infer_numeric_columns(mixed_dataset)
    second = infer_numeric_columns(mixed_dataset)
    assert first == second


@pytest.mark.unit
def test_infer_numeric_columns_ignores_non_finite():
    dataset = Dataset(
        records=[{"a": "inf", "b": "NaN", "c": "1e3"}],
        columns=["a", "b", "c"],
    )
    assert infer_numeric_columns(dataset, permissive_policy) == ["c"]


@pytest.mark.unit
def test_permissive_policy_values():
    assert permissive_policy(["x", "", "3.5"]) is True
    assert permissive_policy(["x", "", "true"]) is False
    assert permissive_policy([]) is False


@pytest.mark.unit
def test_majority_policy_ignores_empty_cells():
    assert majority_policy(["1", "", "", "x", "2"]) is True
    assert majority_policy(["1", "x"]) is False
    assert majority_policy(["", ""]) is False


@pytest.mark.unit
def test_get_numeric_policy():
    assert get_numeric_policy("permissive") is permissive_policy
    assert get_numeric_policy("majority") is majority_policy
    with pytest.raises(ValueError):
        get_numeric_policy("strict")


@pytest.mark.unit
@pytest.mark.parametrize("columns,expected", [
    (["Mathematics", "Student Name", "Grade"], "Student Name"),
    (["Score", "Username"], "Username"),
    (["ID", "Score"], "ID"),
    (["Width", "Score"], "Width"),  # "id" must match the whole name
    (["Product", "Q1_Sales"], "Product"),  # fallback to first column
])
def test_find_identifier_column(columns, expected):
    assert find_identifier_column(columns) == expected


@pytest.mark.unit
def test_find_identifier_column_first_column_wins():
    """The first column matching any rule is chosen, whatever the rule order."""
    assert find_identifier_column(["id", "Student"]) == "id"


@pytest.mark.unit
def test_find_identifier_column_empty():
    assert find_identifier_column([]) is None


@pytest.mark.unit
def test_find_category_column():
    assert find_category_column(["Student", "Final Grade"]) == "Final Grade"
    assert find_category_column(["Student", "Score"]) is None


@pytest.mark.unit
def test_custom_rules_extend_synonyms():
    rules = [ColumnRule("employee"), ColumnRule("code", exact=True)]
    assert find_column(["Dept", "Employee Name"], rules) == "Employee Name"
    assert find_column(["zipcode", "Code"], rules) == "Code"


@pytest.mark.unit
def test_rules_from_settings(monkeypatch):
    monkeypatch.setenv("CATEGORY_KEYWORDS", "grade,tier")
    from insightboard.core.config import reload_settings
    try:
        reload_settings()
        assert find_category_column(["Name", "Tier"]) == "Tier"
    finally:
        monkeypatch.delenv("CATEGORY_KEYWORDS")
        reload_settings()
