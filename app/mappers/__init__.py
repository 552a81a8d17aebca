"""
app/mappers package marker.
"""

from app.mappers.field_resolver import (
    DEFAULT_COLUMN_ALIASES,
    DEFAULT_EARNING_COLUMNS,
    FieldResolver,
    HeaderReport,
)

__all__ = [
    "DEFAULT_COLUMN_ALIASES",
    "DEFAULT_EARNING_COLUMNS",
    "FieldResolver",
    "HeaderReport",
]
