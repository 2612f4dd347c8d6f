"""Common utility functions."""

from typing import Any, Iterable


def get_value(obj: Any, key: str, default: Any = None) -> Any:
    """Get value from dict or object attribute."""
    if isinstance(obj, dict):
        return obj.get(key, default)
    return getattr(obj, key, default)


def distinct_values(items: Iterable[Any], key: str) -> set[Any]:
    """Return the set of non-None values of ``key`` across items."""
    values = set()
    for item in items:
        value = get_value(item, key)
        if value is not None:
            values.add(value)
    return values
