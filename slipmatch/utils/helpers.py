"""
Helper Utilities Module.

Small, generic helpers shared by the CLI and the report exporter.
"""

from datetime import datetime
from pathlib import Path
from typing import Union


def ensure_directory(path: Union[str, Path]) -> Path:
    """
    Ensure a directory exists, creating it and its parents if necessary.

    Args:
        path: Directory path.

    Returns:
        Path object pointing to the directory.
    """
    dir_path = Path(path)
    dir_path.mkdir(parents=True, exist_ok=True)
    return dir_path


def generate_timestamp(format_str: str = "%Y%m%d_%H%M%S") -> str:
    """
    Generate a formatted timestamp string.

    Example:
        >>> generate_timestamp("%Y-%m-%d")
        "2026-10-19"
    """
    return datetime.now().strftime(format_str)


def pluralize(count: int, singular: str, plural: str = None) -> str:
    """
    Format a count with the matching noun form.

    Example:
        >>> pluralize(1, "packing slip")
        "1 packing slip"
        >>> pluralize(3, "packing slip")
        "3 packing slips"
    """
    if count == 1:
        return f"{count} {singular}"
    return f"{count} {plural or singular + 's'}"
