"""
Sanitization of user-provided names before they are echoed or logged.
"""
import re

_CONTROL_CHARS = re.compile(r'[\x00-\x1f\x7f-\x9f]')


def sanitize_filename(filename: str, max_length: int = 255) -> str:
    """
    Strip path components and control characters from an uploaded filename.

    Returns:
        A display-safe filename, or "unknown" when nothing is left
    """
    if not filename:
        return "unknown"

    filename = filename.split('/')[-1].split('\\')[-1]
    filename = _CONTROL_CHARS.sub('', filename)
    filename = filename.strip('. ')

    if len(filename) > max_length:
        filename = filename[:max_length]

    return filename or "unknown"


def sanitize_for_logging(value: str, max_length: int = 500) -> str:
    """Make a value safe to interpolate into a log line (prevents log injection)."""
    if not value:
        return ""

    value = re.sub(r'[\r\n]', ' ', value)
    value = _CONTROL_CHARS.sub('', value)

    if len(value) > max_length:
        value = value[:max_length] + "..."

    return value
