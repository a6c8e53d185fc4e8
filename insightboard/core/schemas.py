import math
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Any, Dict, Union, Literal

CellValue = Union[int, float, str]
Record = Dict[str, CellValue]

# Largest integer a float holds exactly
MAX_EXACT_INTEGER = 2 ** 53


class CellKind(str, Enum):
    NUMBER = "number"
    TEXT = "text"
    EMPTY = "empty"


def coerce_number(value: Any) -> Optional[float]:
    """
    Return the finite float a cell represents, or None.

    Strings must parse completely after stripping whitespace; booleans and
    non-finite values are never numeric.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return None
        return number if math.isfinite(number) else None
    if isinstance(value, str):
        text = value.strip()
        # float() accepts digit separators, which we don't treat as numbers
        if not text or "_" in text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
        return number if math.isfinite(number) else None
    return None


def number_cell(number: float) -> Union[int, float]:
    """Whole numbers within the exact float range are kept as int, so 85 stays 85."""
    if number.is_integer() and abs(number) <= MAX_EXACT_INTEGER:
        return int(number)
    return number


def classify_cell(value: Any) -> CellKind:
    if value is None or (isinstance(value, str) and not value.strip()):
        return CellKind.EMPTY
    if coerce_number(value) is not None:
        return CellKind.NUMBER
    return CellKind.TEXT


def is_empty(value: Any) -> bool:
    return value is None or value == ""


class Dataset(BaseModel):
    model_config = ConfigDict(frozen=True)

    records: List[Record]
    columns: List[str]

    @property
    def row_count(self) -> int:
        return len(self.records)

    @property
    def col_count(self) -> int:
        return len(self.columns)

    def column_values(self, column: str) -> List[CellValue]:
        return [record.get(column, "") for record in self.records]


class ColumnStats(BaseModel):
    count: int = Field(gt=0)
    mean: float
    min: float
    max: float


class Metrics(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_records: int = Field(alias="totalRecords")
    columns: int
    data_quality: int = Field(alias="dataQuality", ge=0, le=100)
    processing_time: str = Field(alias="processingTime")
    numeric_columns: int = Field(alias="numericColumns")


class ChartPoint(BaseModel):
    name: str
    value: float


class BarPoint(BaseModel):
    subject: str
    average: float


class ChartSpec(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    chart_type: Literal["pie", "bar"] = Field(alias="type")
    title: str
    data: List[Union[ChartPoint, BarPoint]]
    vega: Optional[Dict[str, Any]] = None  # Vega-Lite spec, only when requested


class Insight(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    insight_type: str = Field(alias="type")
    icon: str
    title: str
    description: str
    impact: Literal["positive", "neutral", "negative"]
    confidence: int = Field(ge=0, le=100)


class DatasetSummary(BaseModel):
    columns: List[str]
    shape: List[int]
    description: Dict[str, ColumnStats]


class AnalysisResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    filename: str
    raw_data: List[Record] = Field(alias="rawData")
    metrics: Metrics
    charts: List[ChartSpec]
    summary: DatasetSummary
    insights: List[Insight] = []
    recommendations: List[str] = []


class SampleInfo(BaseModel):
    name: str
    filename: str
    description: str
    rows: int


class SessionSnapshot(BaseModel):
    state: str
    filename: Optional[str] = None
    result: Optional[AnalysisResult] = None
    error: Optional[Dict[str, str]] = None
