"""Helpers for turning ORM rows into plain dictionaries."""

from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import inspect


def row_to_dict(row: Optional[Any]) -> Optional[Dict[str, Any]]:
    """Column values of an ORM instance, keyed by attribute name."""
    if row is None:
        return None
    mapper = inspect(row).mapper
    return {attr.key: getattr(row, attr.key) for attr in mapper.column_attrs}


def rows_to_dicts(rows: Iterable[Any]) -> List[Dict[str, Any]]:
    return [row_to_dict(row) for row in rows]
