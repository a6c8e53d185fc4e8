import json
import logging
import math
from fastapi import UploadFile
from pathlib import Path
from typing import Any, List, Union
from insightboard.core.config import get_settings
from insightboard.core.errors import (
    EmptyFileError,
    FileTooLargeError,
    NoDataError,
    ParseError,
    UnsupportedFormatError,
)
from insightboard.core.sanitization import sanitize_filename, sanitize_for_logging
from insightboard.core.performance import track_performance
from insightboard.core.schemas import (
    MAX_EXACT_INTEGER,
    CellValue,
    Dataset,
    Record,
    coerce_number,
    number_cell,
)

logger = logging.getLogger(__name__)

# Extensions accepted by the upload filter
ALLOWED_EXTENSIONS = {'.csv', '.json', '.xlsx', '.xls'}

# Extensions we can actually parse
PARSEABLE_EXTENSIONS = {'.csv', '.json'}


def validate_file_extension(filename: str) -> str:
    """
    Validate and normalize file extension.
    Returns the lowercased extension if it can be parsed, raises UnsupportedFormatError otherwise.
    """
    if not filename:
        raise UnsupportedFormatError("Filename is required.")

    file_ext = Path(filename).suffix.lower()

    if not file_ext:
        raise UnsupportedFormatError("File must have an extension. Supported formats: CSV, JSON")

    if file_ext not in ALLOWED_EXTENSIONS:
        raise UnsupportedFormatError(
            f"Unsupported file format: {file_ext}. Allowed formats: {', '.join(sorted(PARSEABLE_EXTENSIONS))}"
        )

    if file_ext not in PARSEABLE_EXTENSIONS:
        # Excel passes the picker filter but there is no reader for it
        raise UnsupportedFormatError(f"Excel files ({file_ext}) are not supported yet. Please export as CSV.")

    return file_ext


def decode_content(content: Union[bytes, str]) -> str:
    """Decode raw bytes, trying UTF-8 first and falling back to latin1."""
    if isinstance(content, str):
        return content
    try:
        return content.decode('utf-8-sig')
    except UnicodeDecodeError:
        logger.debug("Content is not valid UTF-8, falling back to latin1")
        return content.decode('latin1')


def _clean_field(value: str) -> str:
    return value.strip().replace('"', '')


def _parse_cell(value: str) -> CellValue:
    number = coerce_number(value)
    return number_cell(number) if number is not None else value


def parse_delimited(text: str) -> List[Record]:
    """
    Parse comma-delimited text into records.

    The first non-blank line is the header. Short lines are padded with empty
    strings, surplus values are ignored.
    """
    lines = [line for line in text.split("\n") if line.strip()]
    if not lines:
        raise EmptyFileError()

    headers = [_clean_field(h) for h in lines[0].split(',')]

    records = []
    for line in lines[1:]:
        values = [_clean_field(v) for v in line.split(',')]
        record: Record = {}
        for index, header in enumerate(headers):
            value = values[index] if index < len(values) else ''
            record[header] = _parse_cell(value)
        records.append(record)

    return records


def _normalize_json_value(value: Any, column: str) -> CellValue:
    if value is None:
        return ''
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, int) and abs(value) <= MAX_EXACT_INTEGER:
        return value
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            # Integers beyond the float range stay as text
            return str(value)
        return number_cell(number) if math.isfinite(number) else str(value)
    if isinstance(value, str):
        return value
    raise ParseError(f"Column '{column}' contains a nested value; records must be flat.")


def parse_structured(text: str) -> List[Record]:
    """Parse a JSON list of flat objects into records aligned on the first record's keys."""
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        raise ParseError(f"Invalid JSON at line {e.lineno}, column {e.colno}.")

    if not isinstance(payload, list):
        raise ParseError("Expected a list of records at the top level.")

    if not payload:
        return []

    if not all(isinstance(item, dict) for item in payload):
        raise ParseError("Every element of the list must be an object.")

    columns = [str(key) for key in payload[0].keys()]
    records = []
    dropped = set()
    for item in payload:
        record: Record = {}
        for column in columns:
            record[column] = _normalize_json_value(item.get(column), column)
        dropped.update(str(key) for key in item.keys() if str(key) not in record)
        records.append(record)

    if dropped:
        logger.warning(f"Dropped keys missing from the first record: {sorted(dropped)}")

    return records


def build_dataset(records: List[Record]) -> Dataset:
    """Wrap parsed records into a Dataset, rejecting empty input."""
    if not records:
        raise NoDataError()
    return Dataset(records=records, columns=list(records[0].keys()))


def load_dataset(content: Union[bytes, str], filename: str) -> Dataset:
    """
    Parse file content into a Dataset based on the filename extension.
    Never returns a partial Dataset: any failure raises an AnalysisError.
    """
    file_ext = validate_file_extension(filename)
    text = decode_content(content)

    if file_ext == '.csv':
        records = parse_delimited(text)
    else:
        if not text.strip():
            raise EmptyFileError()
        records = parse_structured(text)

    dataset = build_dataset(records)
    logger.info(
        f"Successfully parsed file: {sanitize_for_logging(sanitize_filename(filename))}, "
        f"shape: ({dataset.row_count}, {dataset.col_count})"
    )
    return dataset


async def _read_limited(file: UploadFile, limit: int) -> bytes:
    chunks: List[bytes] = []
    size = 0
    chunk_size = 1024 * 1024  # 1MB chunks

    await file.seek(0)
    while True:
        chunk = await file.read(chunk_size)
        if not chunk:
            break
        size += len(chunk)
        if size > limit:
            raise FileTooLargeError(
                f"Maximum size is {limit // (1024 * 1024)}MB."
            )
        chunks.append(chunk)

    return b''.join(chunks)


@track_performance("parse_file")
async def parse_upload(file: UploadFile) -> Dataset:
    """
    Read an uploaded file and parse it into a Dataset.
    Validates the extension before reading the body.
    """
    filename = file.filename or ''
    validate_file_extension(filename)

    contents = await _read_limited(file, get_settings().max_file_size_bytes)
    if len(contents) == 0:
        raise EmptyFileError()

    return load_dataset(contents, filename)
