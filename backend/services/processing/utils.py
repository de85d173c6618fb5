"""
Shared utilities for processing pipeline.
"""
import re


def format_duration(seconds: float) -> str:
    """
    Convert seconds to M:SS, or H:MM:SS for an hour or longer.

    Fractional seconds are floored.
    """
    total_seconds = max(0, int(seconds))
    hours = total_seconds // 3600
    minutes = (total_seconds % 3600) // 60
    remaining_seconds = total_seconds % 60

    if hours > 0:
        return f"{hours}:{minutes:02d}:{remaining_seconds:02d}"
    return f"{minutes}:{remaining_seconds:02d}"


def format_timestamp(milliseconds: float) -> str:
    """Convert milliseconds to the same format as format_duration."""
    return format_duration(milliseconds / 1000)


def parse_timestamp(timestamp: str) -> int:
    """
    Convert "H:MM:SS", "MM:SS", "M:SS" or bare "S" to total seconds.

    Raises:
        ValueError: if any colon-separated part is not an integer
    """
    parts = timestamp.strip().split(":")
    total = 0
    for part in parts:
        part = part.strip()
        if not (part.isascii() and part.isdigit()):
            raise ValueError(f"Invalid timestamp: {timestamp!r}")
        total = total * 60 + int(part)
    return total


def clean_caption_text(text: str) -> str:
    """
    Normalize caption whitespace.

    Newlines become spaces, runs of whitespace collapse to one space,
    and the result is trimmed.
    """
    text = text.replace("\n", " ")
    text = re.sub(r'\s+', ' ', text)
    return text.strip()


def truncate(text: str, length: int) -> str:
    """First `length` characters followed by an ellipsis."""
    return text[:length] + "..."
