# common/utils/global_functions.py
from datetime import datetime, timezone
from typing import Any, Optional


def utcnow() -> datetime:
    """Current UTC time; every lifecycle timestamp is taken from here."""
    return datetime.now(timezone.utc)


def read_field(row: Any, name: str) -> Optional[Any]:
    """Read a column from an ORM object, a Row mapping or a plain dict."""
    if isinstance(row, dict):
        return row.get(name)
    mapping = getattr(row, "_mapping", None)
    if mapping is not None and name in mapping:
        return mapping[name]
    return getattr(row, name, None)
