"""
String utility functions.
"""
import re


def clean_label(text: str, max_length: int = 120) -> str:
    """
    Normalize a free-text label such as a session name.
    Collapses runs of whitespace and trims both ends.

    Args:
        text: Raw label text
        max_length: Maximum allowed length

    Returns:
        Cleaned label, possibly empty
    """
    if not text or not isinstance(text, str):
        return ""

    cleaned = re.sub(r'\s+', ' ', text).strip()
    return cleaned[:max_length]


def truncate_string(text: str, max_length: int = 100) -> str:
    """
    Truncate string to maximum length.

    Args:
        text: String to truncate
        max_length: Maximum allowed length

    Returns:
        Truncated string
    """
    if not text or not isinstance(text, str):
        return ""

    if len(text) <= max_length:
        return text

    return text[:max_length-3] + "..."
