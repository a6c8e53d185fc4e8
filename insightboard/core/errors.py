"""
Error codes, user-friendly messages and the exceptions raised by the analysis pipeline.
"""
from typing import Dict, Optional

# Error codes
class ErrorCodes:
    FILE_TOO_LARGE = "FILE_TOO_LARGE"
    FILE_EMPTY = "FILE_EMPTY"
    NO_DATA = "NO_DATA"
    INVALID_FILE_TYPE = "INVALID_FILE_TYPE"
    PARSE_ERROR = "PARSE_ERROR"
    UNKNOWN_SAMPLE = "UNKNOWN_SAMPLE"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    TIMEOUT = "TIMEOUT"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"

# User-friendly error messages - friendly, helpful, and empathetic
ERROR_MESSAGES: Dict[str, Dict[str, str]] = {
    ErrorCodes.FILE_TOO_LARGE: {
        "message": "Oops! Your file is a bit too large",
        "detail": "Your file exceeds our size limit. Files are analyzed in memory, so we keep uploads small.",
        "suggestion": "💡 Try splitting your file into smaller parts, or export just the columns you need."
    },
    ErrorCodes.FILE_EMPTY: {
        "message": "Hmm, your file looks empty",
        "detail": "We couldn't find any lines in the file you uploaded.",
        "suggestion": "💡 Make sure your file has a header row and at least one data row, save it again, and retry."
    },
    ErrorCodes.NO_DATA: {
        "message": "No data found in file",
        "detail": "The file was read successfully but it contains no records to analyze.",
        "suggestion": "💡 Add at least one row below the header (CSV) or one object to the list (JSON)."
    },
    ErrorCodes.INVALID_FILE_TYPE: {
        "message": "We need a CSV or JSON file",
        "detail": "We can analyze CSV (.csv) and JSON (.json) files. Your file type isn't something we can read yet.",
        "suggestion": "💡 Spreadsheet tools can export as CSV - look for a 'Download as CSV' option in the File menu."
    },
    ErrorCodes.PARSE_ERROR: {
        "message": "We're having trouble reading your file",
        "detail": "Something's not quite right with the file format.",
        "suggestion": "💡 JSON files must contain a list of flat objects, for example [{\"Name\": \"A\", \"Score\": 1}]."
    },
    ErrorCodes.UNKNOWN_SAMPLE: {
        "message": "That sample doesn't exist",
        "detail": "The requested sample dataset is not one of the built-in presets.",
        "suggestion": "💡 List the available samples first and pick one of those names."
    },
    ErrorCodes.RATE_LIMIT_EXCEEDED: {
        "message": "Whoa there! Slow down a bit",
        "detail": "You're uploading files faster than we can keep up!",
        "suggestion": "💡 Take a quick break and try again in about a minute."
    },
    ErrorCodes.TIMEOUT: {
        "message": "This is taking longer than expected",
        "detail": "Your file is taking a while to process.",
        "suggestion": "💡 Try uploading a smaller sample of your data."
    },
    ErrorCodes.UNKNOWN_ERROR: {
        "message": "Hmm, something unexpected happened",
        "detail": "We encountered an issue we weren't expecting. Don't worry - it's not your fault!",
        "suggestion": "💡 Give it another try in a moment. If the problem keeps happening, try a different file."
    }
}


class AnalysisError(Exception):
    """Base class for errors that abort an analysis run."""

    code: str = ErrorCodes.UNKNOWN_ERROR
    status_code: int = 400

    def __init__(self, detail: Optional[str] = None):
        self.detail = detail
        super().__init__(detail or ERROR_MESSAGES[self.code]["message"])


class EmptyFileError(AnalysisError):
    """The file has no usable lines."""
    code = ErrorCodes.FILE_EMPTY


class NoDataError(AnalysisError):
    """The file parsed but produced zero records."""
    code = ErrorCodes.NO_DATA


class ParseError(AnalysisError):
    """Structured input is malformed or not a list of flat records."""
    code = ErrorCodes.PARSE_ERROR


class UnsupportedFormatError(AnalysisError):
    code = ErrorCodes.INVALID_FILE_TYPE


class FileTooLargeError(AnalysisError):
    code = ErrorCodes.FILE_TOO_LARGE
    status_code = 413


class UnknownSampleError(AnalysisError):
    code = ErrorCodes.UNKNOWN_SAMPLE
    status_code = 404


def get_error_response(error_code: str, additional_detail: Optional[str] = None) -> Dict[str, str]:
    """
    Get user-friendly error response for an error code.

    Args:
        error_code: One of the ErrorCodes constants
        additional_detail: Optional additional detail to append

    Returns:
        Dictionary with code, message, detail, and suggestion
    """
    error_info = ERROR_MESSAGES.get(error_code, ERROR_MESSAGES[ErrorCodes.UNKNOWN_ERROR])

    response = {
        "code": error_code,
        "message": error_info["message"],
        "detail": error_info["detail"],
        "suggestion": error_info["suggestion"]
    }

    if additional_detail:
        response["detail"] = f"{response['detail']} {additional_detail}"

    return response
