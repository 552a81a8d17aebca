"""
app/validators package marker.
"""

from app.validators.cell_parser import (
    format_locale_date,
    is_blank,
    is_completely_empty_row,
    parse_date,
    parse_earning,
    parse_optional_string,
)

__all__ = [
    "format_locale_date",
    "is_blank",
    "is_completely_empty_row",
    "parse_date",
    "parse_earning",
    "parse_optional_string",
]
