"""
Utility helper functions for safe handling of loosely-typed upstream JSON.
"""
from typing import Any, Optional


def safe_str(value: Any, default: str = "") -> str:
    """
    Safely convert value to string, handling None.

    Args:
        value: Any value to convert
        default: Default string if value is None

    Returns:
        String representation or default
    """
    if value is None:
        return default
    return str(value)


def safe_int(value: Any, default: int = 0) -> int:
    """
    Safely convert value to int, handling None and invalid values.

    Args:
        value: Any value to convert
        default: Default int if conversion fails

    Returns:
        Integer or default
    """
    if value is None:
        return default
    try:
        return int(value)
    except (ValueError, TypeError):
        return default


def optional_int(value: Any) -> Optional[int]:
    """Like safe_int, but keeps "absent" distinguishable from zero."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (ValueError, TypeError):
        return None


def count_bits(mask: Optional[int], width: int) -> Optional[int]:
    """Number of set bits in the lowest ``width`` bits of a bitmask."""
    if mask is None:
        return None
    return bin(mask & ((1 << width) - 1)).count("1")


def minutes_to_hours(minutes: Any) -> float:
    """Playtime minutes as hours rounded to one decimal."""
    return round(safe_int(minutes) / 60, 1)
