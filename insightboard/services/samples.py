"""
Built-in sample datasets for trying the dashboard without a file.
"""
from typing import Any, Dict, List
from insightboard.core.errors import UnknownSampleError
from insightboard.core.schemas import Dataset, SampleInfo
from insightboard.services.parser import build_dataset

SAMPLE_DATASETS: Dict[str, Dict[str, Any]] = {
    "student_grades": {
        "filename": "student_grades.csv",
        "description": "Student academic data",
        "records": [
            {"Student": "Alice Johnson", "Mathematics": 85, "Science": 92, "English": 78, "History": 82, "Grade": "A"},
            {"Student": "Bob Smith", "Mathematics": 76, "Science": 84, "English": 88, "History": 79, "Grade": "B"},
            {"Student": "Charlie Brown", "Mathematics": 92, "Science": 87, "English": 85, "History": 90, "Grade": "A"},
            {"Student": "Diana Prince", "Mathematics": 68, "Science": 75, "English": 82, "History": 77, "Grade": "B"},
            {"Student": "Eve Wilson", "Mathematics": 94, "Science": 96, "English": 91, "History": 89, "Grade": "A"},
            {"Student": "Frank Miller", "Mathematics": 72, "Science": 80, "English": 75, "History": 78, "Grade": "B"},
            {"Student": "Grace Lee", "Mathematics": 88, "Science": 85, "English": 90, "History": 86, "Grade": "A"},
        ],
    },
    "sales_analytics": {
        "filename": "sales_analytics.csv",
        "description": "Business metrics",
        "records": [
            {"Product": "Laptop", "Q1_Sales": 45000, "Q2_Sales": 52000, "Q3_Sales": 48000, "Q4_Sales": 58000, "Category": "Electronics"},
            {"Product": "Smartphone", "Q1_Sales": 32000, "Q2_Sales": 38000, "Q3_Sales": 42000, "Q4_Sales": 45000, "Category": "Electronics"},
            {"Product": "Tablet", "Q1_Sales": 18000, "Q2_Sales": 22000, "Q3_Sales": 25000, "Q4_Sales": 28000, "Category": "Electronics"},
            {"Product": "Headphones", "Q1_Sales": 15000, "Q2_Sales": 18000, "Q3_Sales": 20000, "Q4_Sales": 22000, "Category": "Accessories"},
        ],
    },
    "survey_results": {
        "filename": "survey_results.csv",
        "description": "Survey responses",
        "records": [
            {"Response_Category": "Very Satisfied", "Count": 45, "Percentage": 45},
            {"Response_Category": "Satisfied", "Count": 30, "Percentage": 30},
            {"Response_Category": "Neutral", "Count": 15, "Percentage": 15},
            {"Response_Category": "Dissatisfied", "Count": 7, "Percentage": 7},
            {"Response_Category": "Very Dissatisfied", "Count": 3, "Percentage": 3},
        ],
    },
}


def list_samples() -> List[SampleInfo]:
    return [
        SampleInfo(
            name=name,
            filename=sample["filename"],
            description=sample["description"],
            rows=len(sample["records"]),
        )
        for name, sample in SAMPLE_DATASETS.items()
    ]


def get_sample(name: str) -> Dict[str, Any]:
    try:
        return SAMPLE_DATASETS[name]
    except KeyError:
        raise UnknownSampleError(f"Available samples: {', '.join(SAMPLE_DATASETS)}.")


def load_sample(name: str) -> Dataset:
    """Build a fresh Dataset from a preset; presets never touch the file system."""
    sample = get_sample(name)
    records = [dict(row) for row in sample["records"]]
    return build_dataset(records)
